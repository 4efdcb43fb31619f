import numpy as np
import pytest

from leggedtraj.polynomial import CubicHermitePolynomial, Dx, Polynomial, State, make_node


def _node(p, v):
    n = make_node(len(p))
    n[Dx.POS] = p
    n[Dx.VEL] = v
    return n


def _poly(T=2.0):
    poly = CubicHermitePolynomial(2)
    poly.set_nodes(_node([1.0, 2.0], [0.5, -1.0]), _node([3.0, -1.0], [2.0, 0.0]))
    poly.set_duration(T)
    poly.update_coeff()
    return poly


def test_make_node_has_position_and_velocity():
    node = make_node(3)
    assert node.values.shape == (2, 3)
    assert node.n_derivatives == 2


def test_state_accessors_are_views():
    s = State(2, 3)
    s.a()[:] = [4.0, 5.0]
    assert s[Dx.ACC].tolist() == [4.0, 5.0]
    assert s.p().tolist() == [0.0, 0.0]


def test_hermite_interpolates_nodes():
    poly = _poly()
    start, end = poly.point(0.0), poly.point(poly.duration)
    np.testing.assert_allclose(start.p(), poly.n0.p())
    np.testing.assert_allclose(start.v(), poly.n0.v())
    np.testing.assert_allclose(end.p(), poly.n1.p())
    np.testing.assert_allclose(end.v(), poly.n1.v())


def test_velocity_and_acceleration_are_time_derivatives():
    poly = _poly()
    t, eps = 0.7, 1e-6
    fd_v = (poly.point(t + eps).p() - poly.point(t - eps).p()) / (2 * eps)
    fd_a = (poly.point(t + eps).v() - poly.point(t - eps).v()) / (2 * eps)
    np.testing.assert_allclose(poly.point(t).v(), fd_v, rtol=1e-6, atol=1e-6)
    np.testing.assert_allclose(poly.point(t).a(), fd_a, rtol=1e-6, atol=1e-6)


@pytest.mark.parametrize("dfdt", list(Dx))
@pytest.mark.parametrize("node_deriv", [Dx.POS, Dx.VEL])
@pytest.mark.parametrize("side", ["start", "end"])
def test_node_derivatives_match_finite_difference(dfdt, node_deriv, side):
    poly = _poly()
    t, eps = 0.8, 1e-6
    base = poly.point(t)[dfdt][0]
    n0, n1 = poly.n0.copy(), poly.n1.copy()
    target = n0 if side == "start" else n1
    target.values[node_deriv, 0] += eps
    poly.set_nodes(n0, n1)
    poly.update_coeff()
    fd = (poly.point(t)[dfdt][0] - base) / eps
    poly = _poly()
    method = poly.derivative_wrt_start_node if side == "start" else poly.derivative_wrt_end_node
    assert method(dfdt, node_deriv, t) == pytest.approx(fd, rel=1e-4, abs=1e-4)


def test_derivative_of_pos_wrt_duration_matches_finite_difference():
    t, T, eps = 0.6, 2.0, 1e-6
    analytic = _poly(T).derivative_of_pos_wrt_duration(t)
    fd = (_poly(T + eps).point(t).p() - _poly(T - eps).point(t).p()) / (2 * eps)
    np.testing.assert_allclose(analytic, fd, rtol=1e-5, atol=1e-6)


def test_generic_polynomial_start_is_first_coefficient():
    poly = Polynomial(2, 1)
    poly.coeff = [np.array([1.0]), np.array([2.0]), np.array([3.0])]
    point = poly.point(0.0)
    assert point.p().tolist() == [1.0]
    assert point.v().tolist() == [2.0]
    assert point.a().tolist() == [6.0]


def test_negative_time_raises():
    with pytest.raises(ValueError):
        _poly().point(-0.1)


def test_undefined_derivatives_raise():
    poly = _poly()
    with pytest.raises(ValueError):
        poly.derivative_wrt_coeff(1.0, 5, 0)
    with pytest.raises(ValueError):
        poly.derivative_wrt_start_node(Dx.POS, Dx.ACC, 0.5)
    with pytest.raises(ValueError):
        poly.derivative_wrt_end_node(7, Dx.POS, 0.5)