import math

import numpy as np
import pytest

from leggedtraj.euler_converter import (
    EulerConverter,
    angular_acceleration_in_world,
    angular_velocity_in_world,
    euler_rates_matrix,
    euler_rates_matrix_dot,
    quaternion_base_to_world,
    rotation_matrix_base_to_world,
)
from leggedtraj.node_spline import NodeSpline
from leggedtraj.nodes_variables import NodesVariablesAll

ANGLES = [
    (0.1, -0.2, 0.3),
    (0.7, 0.4, -1.2),
    (3.0, 0.2, -2.9),
    (-1.0, 1.1, 2.5),
]


def _quat_to_matrix(q):
    w, x, y, z = q
    return np.array([
        [1 - 2 * (y * y + z * z), 2 * (x * y - z * w), 2 * (x * z + y * w)],
        [2 * (x * y + z * w), 1 - 2 * (x * x + z * z), 2 * (y * z - x * w)],
        [2 * (x * z - y * w), 2 * (y * z + x * w), 1 - 2 * (x * x + y * y)],
    ])


def _unskew(w):
    return np.array([w[2, 1], w[0, 2], w[1, 0]])


@pytest.fixture
def setup():
    nodes = NodesVariablesAll(3, 3, "base-ang")
    rng = np.random.default_rng(3)
    nodes.set_variables(rng.uniform(-0.6, 0.6, nodes.n_rows))
    spline = NodeSpline(nodes, [0.4, 0.6])
    return EulerConverter(spline), nodes


def _numeric_jacobian(nodes, func, h=1e-6):
    x0 = nodes.values()
    cols = []
    for e in np.eye(x0.size):
        nodes.set_variables(x0 + h * e)
        fp = np.asarray(func())
        nodes.set_variables(x0 - h * e)
        fm = np.asarray(func())
        cols.append((fp - fm) / (2 * h))
    nodes.set_variables(x0)
    return np.stack(cols, axis=-1)


def test_zero_angles_give_identity():
    assert np.allclose(rotation_matrix_base_to_world((0.0, 0.0, 0.0)), np.eye(3))
    assert np.allclose(quaternion_base_to_world((0.0, 0.0, 0.0)), [1.0, 0.0, 0.0, 0.0])


def test_yaw_rotates_x_axis_onto_y_axis():
    r = rotation_matrix_base_to_world((0.0, 0.0, math.pi / 2))
    assert np.allclose(r @ np.array([1.0, 0.0, 0.0]), [0.0, 1.0, 0.0])


@pytest.mark.parametrize("xyz", ANGLES)
def test_rotation_matrix_is_proper_rotation(xyz):
    r = rotation_matrix_base_to_world(xyz)
    assert np.allclose(r @ r.T, np.eye(3))
    assert np.linalg.det(r) == pytest.approx(1.0)


@pytest.mark.parametrize("xyz", ANGLES)
def test_quaternion_matches_rotation_matrix(xyz):
    q = quaternion_base_to_world(xyz)
    assert np.linalg.norm(q) == pytest.approx(1.0)
    assert np.allclose(_quat_to_matrix(q), rotation_matrix_base_to_world(xyz))


@pytest.mark.parametrize("xyz", ANGLES)
def test_angular_velocity_matches_rotation_rate(xyz):
    p = np.array(xyz)
    v = np.array([0.3, -0.5, 0.8])
    h = 1e-6
    r_dot = (rotation_matrix_base_to_world(p + h * v)
             - rotation_matrix_base_to_world(p - h * v)) / (2 * h)
    omega = _unskew(r_dot @ rotation_matrix_base_to_world(p).T)
    assert np.allclose(angular_velocity_in_world(p, v), omega, atol=1e-6)


@pytest.mark.parametrize("xyz", ANGLES)
def test_rates_matrix_dot_is_time_derivative(xyz):
    p = np.array(xyz)
    v = np.array([-0.4, 0.9, 0.2])
    h = 1e-6
    numeric = (euler_rates_matrix(p + h * v) - euler_rates_matrix(p - h * v)) / (2 * h)
    assert np.allclose(euler_rates_matrix_dot(p, v), numeric, atol=1e-6)


@pytest.mark.parametrize("xyz", ANGLES)
def test_angular_acceleration_is_derivative_of_velocity(xyz):
    p = np.array(xyz)
    v = np.array([0.5, 0.1, -0.3])
    a = np.array([0.2, -0.7, 0.4])
    h = 1e-6

    def omega(t):
        return angular_velocity_in_world(p + v * t + 0.5 * a * t * t, v + a * t)

    numeric = (omega(h) - omega(-h)) / (2 * h)
    assert np.allclose(angular_acceleration_in_world(p, v, a), numeric, atol=1e-6)


def test_converter_agrees_with_functions_on_spline_point(setup):
    converter, _ = setup
    ori = converter.euler.point(0.3)
    assert np.allclose(converter.rotation_matrix_base_to_world(0.3),
                       rotation_matrix_base_to_world(ori.p()))
    assert np.allclose(converter.quaternion_base_to_world(0.3),
                       quaternion_base_to_world(ori.p()))
    assert np.allclose(converter.angular_velocity_in_world(0.3),
                       angular_velocity_in_world(ori.p(), ori.v()))
    assert np.allclose(converter.angular_acceleration_in_world(0.3),
                       angular_acceleration_in_world(ori.p(), ori.v(), ori.a()))


@pytest.mark.parametrize("t", [0.1, 0.3, 0.7])
def test_ang_vel_jacobian_matches_finite_differences(setup, t):
    converter, nodes = setup
    analytic = converter.deriv_of_ang_vel_wrt_euler_nodes(t)
    numeric = _numeric_jacobian(nodes, lambda: converter.angular_velocity_in_world(t))
    assert analytic.shape == (3, nodes.n_rows)
    assert np.allclose(analytic, numeric, atol=1e-5)


@pytest.mark.parametrize("t", [0.1, 0.3, 0.7])
def test_ang_acc_jacobian_matches_finite_differences(setup, t):
    converter, nodes = setup
    analytic = converter.deriv_of_ang_acc_wrt_euler_nodes(t)
    numeric = _numeric_jacobian(nodes, lambda: converter.angular_acceleration_in_world(t))
    assert np.allclose(analytic, numeric, atol=1e-4)


def test_rotation_matrix_jacobian_matches_finite_differences(setup):
    converter, nodes = setup
    analytic = converter.derivative_of_rotation_matrix_wrt_nodes(0.5)
    numeric = _numeric_jacobian(nodes, lambda: converter.rotation_matrix_base_to_world(0.5))
    assert np.allclose(analytic, numeric, atol=1e-5)


@pytest.mark.parametrize("inverse", [False, True])
def test_rot_vec_mult_jacobian_matches_finite_differences(setup, inverse):
    converter, nodes = setup
    v = np.array([0.4, -1.3, 0.9])

    def rotated():
        r = converter.rotation_matrix_base_to_world(0.2)
        return (r.T if inverse else r) @ v

    analytic = converter.deriv_of_rot_vec_mult(0.2, v, inverse)
    assert np.allclose(analytic, _numeric_jacobian(nodes, rotated), atol=1e-5)