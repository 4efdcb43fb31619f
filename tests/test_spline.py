import numpy as np
import pytest

from leggedtraj.polynomial import Dx, make_node
from leggedtraj.spline import Spline


def _node(p, v):
    n = make_node(len(p))
    n[Dx.POS] = p
    n[Dx.VEL] = v
    return n


def _linked_spline():
    spline = Spline([0.4, 0.6], 2)
    a = _node([0.0, 0.0], [1.0, 0.0])
    b = _node([1.0, 0.5], [0.0, 1.0])
    c = _node([2.0, -1.0], [0.0, 0.0])
    spline.cubic_polys[0].set_nodes(a, b)
    spline.cubic_polys[1].set_nodes(b, c)
    spline.update_polynomial_coeff()
    return spline, a, b, c


def test_counts_and_durations():
    durations = [0.2, 0.3, 0.5]
    spline = Spline(durations, 3)
    assert spline.polynomial_count() == len(durations)
    assert spline.poly_durations() == durations
    assert spline.total_time() == pytest.approx(sum(durations))


def test_segment_id_at_junction_returns_previous():
    assert Spline.segment_id(0.5, [0.5, 0.5]) == 0
    assert Spline.segment_id(0.50001, [0.5, 0.5]) == 1


def test_segment_id_errors():
    with pytest.raises(ValueError):
        Spline.segment_id(-0.1, [0.5])
    with pytest.raises(ValueError):
        Spline.segment_id(2.0, [0.5, 0.5])


@pytest.mark.parametrize("t_global", [0.0, 0.1, 0.35, 0.7, 0.95])
def test_local_time_adds_up(t_global):
    durations = [0.3, 0.25, 0.45]
    spline = Spline(durations, 1)
    idx, t_local = spline.local_time(t_global, durations)
    assert 0.0 <= t_local <= durations[idx] + 1e-10
    assert t_local + sum(durations[:idx]) == pytest.approx(t_global)


def test_zero_nodes_give_zero_point():
    spline = Spline([0.5, 0.5], 3)
    point = spline.point(0.7)
    np.testing.assert_allclose(point.values, np.zeros((3, 3)))


def test_spline_passes_through_shared_nodes():
    spline, a, b, c = _linked_spline()
    np.testing.assert_allclose(spline.point(0.0).p(), a.p())
    np.testing.assert_allclose(spline.point(0.4).p(), b.p())
    np.testing.assert_allclose(spline.point_in_poly(1, 0.0).p(), b.p())
    np.testing.assert_allclose(spline.point(0.4).v(), spline.point_in_poly(1, 0.0).v())
    np.testing.assert_allclose(spline.point(spline.total_time()).p(), c.p())