"""Contact schedules (gaits) for robots with one, two or four legs."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Callable, Sequence

ContactState = tuple[bool, ...]
GaitInfo = tuple[list[float], list[ContactState]]


class Gaits(Enum):
    """Strides a gait generator can produce."""

    STAND = auto()
    FLIGHT = auto()
    WALK1 = auto()
    WALK2 = auto()
    WALK2E = auto()
    RUN1 = auto()
    RUN2 = auto()
    RUN2E = auto()
    RUN3 = auto()
    RUN3E = auto()
    HOP1 = auto()
    HOP1E = auto()
    HOP2 = auto()
    HOP3 = auto()
    HOP3E = auto()
    HOP5 = auto()


class Combos(Enum):
    """Predefined sequences of strides."""

    C0 = auto()
    C1 = auto()
    C2 = auto()
    C3 = auto()
    C4 = auto()


class GaitGenerator(ABC):
    """Builds per-foot phase durations from a sequence of strides."""

    def __init__(self) -> None:
        self.times: list[float] = []
        self.contacts: list[ContactState] = []

    @abstractmethod
    def _strides(self) -> dict[Gaits, Callable[[], GaitInfo]]:
        """Strides this robot supports, by gait."""

    @abstractmethod
    def _combos(self) -> dict[Combos, list[Gaits]]:
        """Stride sequences this robot supports, by combo."""

    def gait(self, gait: Gaits) -> GaitInfo:
        """Phase times and contact states of one stride."""
        try:
            stride = self._strides()[gait]
        except KeyError:
            raise ValueError(f"gait {gait!r} not implemented for {type(self).__name__}") from None
        times, contacts = stride()
        return list(times), list(contacts)

    def set_combo(self, combo: Combos) -> None:
        try:
            gaits = self._combos()[combo]
        except KeyError:
            raise ValueError(f"gait combo {combo!r} not defined") from None
        self.set_gaits(gaits)

    def set_gaits(self, gaits: Sequence[Gaits]) -> None:
        """Concatenate the phases of the given strides."""
        times: list[float] = []
        contacts: list[ContactState] = []
        for g in gaits:
            t, c = self.gait(g)
            if len(t) != len(c):
                raise ValueError(f"gait {g!r} has {len(t)} times for {len(c)} phases")
            times.extend(t)
            contacts.extend(c)
        self.times = times
        self.contacts = contacts

    def foot_durations(self) -> list[list[float]]:
        """For every foot, durations of its alternating contact and swing phases."""
        n_ee = len(self.contacts[0])
        accumulated = [0.0] * n_ee
        durations: list[list[float]] = [[] for _ in range(n_ee)]

        for curr, nxt, t in zip(self.contacts, self.contacts[1:], self.times):
            for ee in range(n_ee):
                accumulated[ee] += t
                # the phase of this foot ends where its contact state changes
                if curr[ee] != nxt[ee]:
                    durations[ee].append(accumulated[ee])
                    accumulated[ee] = 0.0

        for ee in range(len(self.contacts[-1])):
            durations[ee].append(accumulated[ee] + self.times[-1])
        return durations

    def phase_durations(self, t_total: float, ee: int) -> list[float]:
        """Phase durations of one foot scaled to a total time."""
        return [d * t_total for d in self.normalized_phase_durations(ee)]

    def normalized_phase_durations(self, ee: int) -> list[float]:
        v = self.foot_durations()[ee]
        total = math.fsum(v)
        return [d / total for d in v]

    def is_in_contact_at_start(self, ee: int) -> bool:
        return self.contacts[0][ee]

    def remove_transition(self, gait_info: GaitInfo) -> GaitInfo:
        """Drop the final transition phase, adding its time to the phase before."""
        times, contacts = list(gait_info[0]), list(gait_info[1])
        last = times.pop()
        times[-1] += last
        contacts.pop()
        return times, contacts


class MonopedGaitGenerator(GaitGenerator):
    """Gaits of a robot with a single leg."""

    def __init__(self) -> None:
        super().__init__()
        self._o: ContactState = (True,)
        self._x: ContactState = (False,)
        self.set_gaits([Gaits.STAND])

    def _combos(self) -> dict[Combos, list[Gaits]]:
        S, H1, H2 = Gaits.STAND, Gaits.HOP1, Gaits.HOP2
        return {
            Combos.C0: [S, H1, H1, H1, H1, S],
            Combos.C1: [S, H1, H1, H1, S],
            Combos.C2: [S, H1, H1, H1, H1, S],
            Combos.C3: [S, H2, H2, H2, S],
            Combos.C4: [S, H2, H2, H2, H2, H2, S],
        }

    def _strides(self) -> dict[Gaits, Callable[[], GaitInfo]]:
        o, x = self._o, self._x
        return {
            Gaits.STAND: lambda: ([0.5], [o]),
            Gaits.FLIGHT: lambda: ([0.5], [x]),
            Gaits.HOP1: lambda: ([0.3, 0.3], [o, x]),
            Gaits.HOP2: lambda: ([0.2, 0.3], [o, x]),
        }


class BipedGaitGenerator(GaitGenerator):
    """Gaits of a robot with a left and a right leg."""

    L, R = 0, 1

    def __init__(self) -> None:
        super().__init__()
        self._I: ContactState = (False, False)
        self._P: ContactState = (True, False)   # left foot in contact
        self._b: ContactState = (False, True)   # right foot in contact
        self._B: ContactState = (True, True)
        self.set_gaits([Gaits.STAND])

    def _combos(self) -> dict[Combos, list[Gaits]]:
        S = Gaits.STAND
        W, R = Gaits.WALK1, Gaits.RUN1
        H1, H2, H5 = Gaits.HOP1, Gaits.HOP2, Gaits.HOP5
        return {
            Combos.C0: [S, W, W, W, W, S],
            Combos.C1: [S, R, R, R, R, S],
            Combos.C2: [S, H1, H1, H1, S],
            Combos.C3: [S, H1, H2, H2, S],
            Combos.C4: [S, H5, H5, H5, S],
        }

    def _strides(self) -> dict[Gaits, Callable[[], GaitInfo]]:
        return {
            Gaits.STAND: lambda: ([0.2], [self._B]),
            Gaits.FLIGHT: lambda: ([0.5], [self._I]),
            Gaits.WALK1: self._walk,
            Gaits.WALK2: self._walk,
            Gaits.RUN1: self._run,
            Gaits.RUN3: self._run,
            Gaits.HOP1: self._hop,
            Gaits.HOP2: self._left_hop,
            Gaits.HOP3: self._right_hop,
            Gaits.HOP5: self._gallop_hop,
        }

    def _walk(self) -> GaitInfo:
        step, stance = 0.3, 0.05
        I, P, b, B = self._I, self._P, self._b, self._B
        return [step, stance, step, stance], [b, B, P, B]

    def _run(self) -> GaitInfo:
        flight, pushoff, landing = 0.4, 0.15, 0.15
        I, P, b = self._I, self._P, self._b
        return (
            [pushoff, flight, landing + pushoff, flight, landing],
            [b, I, P, I, b],
        )

    def _hop(self) -> GaitInfo:
        return [0.15, 0.5, 0.15], [self._B, self._I, self._B]

    def _gallop_hop(self) -> GaitInfo:
        push, flight, land = 0.2, 0.3, 0.2
        return [push, flight, land, land], [self._P, self._I, self._b, self._B]

    def _left_hop(self) -> GaitInfo:
        return [0.15, 0.4, 0.15], [self._b, self._I, self._b]

    def _right_hop(self) -> GaitInfo:
        return [0.2, 0.2, 0.2], [self._P, self._I, self._P]


def _legs(n_ee: int, *in_contact: int) -> ContactState:
    return tuple(ee in in_contact for ee in range(n_ee))


class QuadrupedGaitGenerator(GaitGenerator):
    """Gaits of a robot with four legs."""

    LF, RF, LH, RH = 0, 1, 2, 3

    def __init__(self) -> None:
        super().__init__()
        LF, RF, LH, RH = self.LF, self.RF, self.LH, self.RH
        n = 4
        self._II = _legs(n)
        self._PI = _legs(n, LH)
        self._bI = _legs(n, RH)
        self._IP = _legs(n, LF)
        self._Ib = _legs(n, RF)
        self._Pb = _legs(n, LH, RF)
        self._bP = _legs(n, RH, LF)
        self._BI = _legs(n, LH, RH)
        self._IB = _legs(n, LF, RF)
        self._PP = _legs(n, LH, LF)
        self._bb = _legs(n, RH, RF)
        self._Bb = _legs(n, LH, RH, RF)
        self._BP = _legs(n, LH, RH, LF)
        self._bB = _legs(n, RH, LF, RF)
        self._PB = _legs(n, LH, LF, RF)
        self._BB = _legs(n, LF, RF, LH, RH)
        self.set_gaits([Gaits.STAND])

    def _combos(self) -> dict[Combos, list[Gaits]]:
        S = Gaits.STAND
        G = Gaits
        return {
            Combos.C0: [S, G.WALK2, G.WALK2, G.WALK2, G.WALK2E, S],  # overlap-walk
            Combos.C1: [S, G.RUN2, G.RUN2, G.RUN2, G.RUN2E, S],      # fly trot
            Combos.C2: [S, G.RUN3, G.RUN3, G.RUN3, G.RUN3E, S],      # pace
            Combos.C3: [S, G.HOP1, G.HOP1, G.HOP1, G.HOP1E, S],      # bound
            Combos.C4: [S, G.HOP3, G.HOP3, G.HOP3, G.HOP3E, S],      # gallop
        }

    def _strides(self) -> dict[Gaits, Callable[[], GaitInfo]]:
        return {
            Gaits.STAND: lambda: ([0.3], [self._BB]),
            Gaits.FLIGHT: lambda: ([0.3], [self._Bb]),
            Gaits.WALK1: self._walk,
            Gaits.WALK2: self._walk_overlap,
            Gaits.WALK2E: lambda: self.remove_transition(self._walk_overlap()),
            Gaits.RUN1: self._trot,
            Gaits.RUN2: self._trot_fly,
            Gaits.RUN2E: lambda: ([0.4], [self._bP]),
            Gaits.RUN3: self._pace,
            Gaits.RUN3E: lambda: ([0.3], [self._PP]),
            Gaits.HOP1: self._bound,
            Gaits.HOP1E: lambda: ([0.3], [self._BI]),
            Gaits.HOP2: self._pronk,
            Gaits.HOP3: self._gallop,
            Gaits.HOP3E: lambda: self.remove_transition(self._gallop()),
            Gaits.HOP5: self._limp,
        }

    def _pronk(self) -> GaitInfo:
        return [0.3, 0.4, 0.3], [self._BB, self._II, self._BB]

    def _walk(self) -> GaitInfo:
        step, stand = 0.3, 0.2
        return (
            [step, stand] * 4,
            [self._bB, self._BB, self._Bb, self._BB,
             self._PB, self._BB, self._BP, self._BB],
        )

    def _walk_overlap(self) -> GaitInfo:
        three, lateral, diagonal = 0.25, 0.13, 0.13
        return (
            [three, lateral, three, diagonal, three, lateral, three, diagonal],
            [self._bB, self._bb, self._Bb,
             self._Pb,  # start lifting RH
             self._PB, self._PP, self._BP,
             self._bP],  # start lifting LH
        )

    def _trot(self) -> GaitInfo:
        step, stand = 0.3, 0.2
        return [step, stand, step, stand], [self._bP, self._BB, self._Pb, self._BB]

    def _trot_fly(self) -> GaitInfo:
        stand, flight = 0.4, 0.1
        return [stand, flight, stand, flight], [self._bP, self._II, self._Pb, self._II]

    def _pace(self) -> GaitInfo:
        stand, flight = 0.3, 0.1
        return [stand, flight, stand, flight], [self._PP, self._II, self._bb, self._II]

    def _bound(self) -> GaitInfo:
        stand, flight = 0.3, 0.1
        return [stand, flight, stand, flight], [self._BI, self._II, self._IB, self._II]

    def _gallop(self) -> GaitInfo:
        a, b, c = 0.3, 0.2, 0.2  # both in air, overlap, front-to-hind transition
        return (
            [b, a, b, c, b, a, b, c],
            [self._Bb, self._BI, self._BP,  # front legs swing forward
             self._bP,                      # transition
             self._bB, self._IB, self._PB,  # hind legs swing forward
             self._Pb],
        )

    def _limp(self) -> GaitInfo:
        a, b, c = 0.1, 0.2, 0.1
        return (
            [a, b, c, a, b, c],
            [self._Bb, self._BB, self._IP, self._Bb, self._BB, self._IP],
        )


def make_gait_generator(leg_count: int) -> GaitGenerator:
    """Gait generator for a robot with 1, 2 or 4 legs."""
    if leg_count == 1:
        return MonopedGaitGenerator()
    if leg_count == 2:
        return BipedGaitGenerator()
    if leg_count == 4:
        return QuadrupedGaitGenerator()
    raise ValueError(f"no gait generator for {leg_count} legs")