import math

import pytest

from leggedtraj.gaits import (
    BipedGaitGenerator,
    Combos,
    Gaits,
    MonopedGaitGenerator,
    QuadrupedGaitGenerator,
    make_gait_generator,
)

LEG_COUNTS = [1, 2, 4]

SUPPORTED = {
    1: [Gaits.STAND, Gaits.FLIGHT, Gaits.HOP1, Gaits.HOP2],
    2: [Gaits.STAND, Gaits.FLIGHT, Gaits.WALK1, Gaits.WALK2, Gaits.RUN1,
        Gaits.RUN3, Gaits.HOP1, Gaits.HOP2, Gaits.HOP3, Gaits.HOP5],
    4: [Gaits.STAND, Gaits.FLIGHT, Gaits.WALK1, Gaits.WALK2, Gaits.WALK2E,
        Gaits.RUN1, Gaits.RUN2, Gaits.RUN2E, Gaits.RUN3, Gaits.RUN3E,
        Gaits.HOP1, Gaits.HOP1E, Gaits.HOP2, Gaits.HOP3, Gaits.HOP3E, Gaits.HOP5],
}


def test_make_gait_generator_types():
    monoped = make_gait_generator(1)
    biped = make_gait_generator(2)
    quadruped = make_gait_generator(4)
    assert isinstance(monoped, MonopedGaitGenerator)
    assert isinstance(biped, BipedGaitGenerator)
    assert isinstance(quadruped, QuadrupedGaitGenerator)
    assert monoped.gait(Gaits.STAND) == ([0.5], [(True,)])
    assert biped.gait(Gaits.STAND) == ([0.2], [(True, True)])
    assert quadruped.gait(Gaits.STAND) == ([0.3], [(True,) * 4])


@pytest.mark.parametrize("legs", [0, 3, 5])
def test_make_gait_generator_rejects_unknown_leg_count(legs):
    with pytest.raises(ValueError):
        make_gait_generator(legs)


def test_stand_strides_from_source():
    assert MonopedGaitGenerator().gait(Gaits.STAND) == ([0.5], [(True,)])
    assert BipedGaitGenerator().gait(Gaits.STAND) == ([0.2], [(True, True)])
    assert QuadrupedGaitGenerator().gait(Gaits.STAND) == ([0.3], [(True,) * 4])


@pytest.mark.parametrize("legs", LEG_COUNTS)
def test_default_is_standing(legs):
    gen = make_gait_generator(legs)
    durations = gen.foot_durations()
    assert len(durations) == legs
    assert all(gen.is_in_contact_at_start(ee) for ee in range(legs))
    assert durations == [gen.times] * legs


def test_unimplemented_gait_raises():
    with pytest.raises(ValueError):
        BipedGaitGenerator().gait(Gaits.WALK2E)
    with pytest.raises(ValueError):
        MonopedGaitGenerator().gait(Gaits.RUN1)


@pytest.mark.parametrize("legs", LEG_COUNTS)
@pytest.mark.parametrize("combo", list(Combos))
def test_foot_durations_cover_whole_schedule(legs, combo):
    gen = make_gait_generator(legs)
    gen.set_combo(combo)
    total = math.fsum(gen.times)
    foot_durations = gen.foot_durations()
    assert len(foot_durations) == legs
    for ee, durations in enumerate(foot_durations):
        assert math.fsum(durations) == pytest.approx(total)
        changes = sum(
            1 for a, b in zip(gen.contacts, gen.contacts[1:]) if a[ee] != b[ee]
        )
        assert len(durations) == changes + 1


@pytest.mark.parametrize("legs", LEG_COUNTS)
@pytest.mark.parametrize("combo", list(Combos))
def test_combos_start_and_end_in_stand(legs, combo):
    gen = make_gait_generator(legs)
    gen.set_combo(combo)
    stand_times, stand_contacts = gen.gait(Gaits.STAND)
    assert gen.contacts[0] == stand_contacts[0]
    assert gen.contacts[-1] == stand_contacts[-1]
    assert gen.times[-1] == stand_times[-1]


@pytest.mark.parametrize("legs", LEG_COUNTS)
def test_phase_durations_scale_to_total(legs):
    gen = make_gait_generator(legs)
    gen.set_combo(Combos.C1)
    for ee in range(legs):
        normalized = gen.normalized_phase_durations(ee)
        assert math.fsum(normalized) == pytest.approx(1.0)
        scaled = gen.phase_durations(2.5, ee)
        assert math.fsum(scaled) == pytest.approx(2.5)
        assert scaled == pytest.approx([2.5 * d for d in normalized])


def test_set_gaits_concatenates_strides():
    gen = MonopedGaitGenerator()
    gen.set_gaits([Gaits.STAND, Gaits.HOP1, Gaits.STAND])
    stand_t, stand_c = gen.gait(Gaits.STAND)
    hop_t, hop_c = gen.gait(Gaits.HOP1)
    assert gen.times == stand_t + hop_t + stand_t
    assert gen.contacts == stand_c + hop_c + stand_c


def test_monoped_hop_alternates_contact():
    gen = MonopedGaitGenerator()
    gen.set_combo(Combos.C1)
    durations = gen.foot_durations()[0]
    hop_t, _ = gen.gait(Gaits.HOP1)
    stand_t, _ = gen.gait(Gaits.STAND)
    # first contact merges stand with the first push-off
    assert durations[0] == pytest.approx(stand_t[0] + hop_t[0])
    assert durations[-1] == pytest.approx(stand_t[0])


def test_remove_transition():
    gen = QuadrupedGaitGenerator()
    times, contacts = gen.gait(Gaits.WALK2)
    end_times, end_contacts = gen.gait(Gaits.WALK2E)
    assert len(end_times) == len(times) - 1
    assert end_times[:-1] == times[:-2]
    assert end_times[-1] == pytest.approx(times[-2] + times[-1])
    assert end_contacts == contacts[:-1]


def test_remove_transition_does_not_modify_input():
    gen = BipedGaitGenerator()
    info = gen.gait(Gaits.HOP1)
    times_before = list(info[0])
    gen.remove_transition(info)
    assert info[0] == times_before


def test_biped_gait_aliases():
    gen = BipedGaitGenerator()
    assert gen.gait(Gaits.RUN3) == gen.gait(Gaits.RUN1)
    assert gen.gait(Gaits.WALK2) == gen.gait(Gaits.WALK1)


def test_quadruped_gallop_end_is_gallop_without_transition():
    gen = QuadrupedGaitGenerator()
    assert gen.gait(Gaits.HOP3E) == gen.remove_transition(gen.gait(Gaits.HOP3))


@pytest.mark.parametrize(
    "legs, gait",
    [(legs, gait) for legs, gaits in SUPPORTED.items() for gait in gaits],
)
def test_every_stride_has_a_time_per_phase(legs, gait):
    gen = make_gait_generator(legs)
    times, contacts = gen.gait(gait)
    assert len(times) >= 1
    assert len(times) == len(contacts)
    assert all(t > 0 for t in times)
    assert all(len(c) == legs for c in contacts)


@pytest.mark.parametrize(
    "legs, gait",
    [(legs, gait) for legs, gaits in SUPPORTED.items()
     for gait in Gaits if gait not in gaits],
)
def test_unsupported_strides_raise(legs, gait):
    gen = make_gait_generator(legs)
    with pytest.raises(ValueError):
        gen.gait(gait)