import math

import numpy as np
import pytest

from leggedtraj.constraints import ForceConstraint, SplineAccConstraint
from leggedtraj.height_map import FlatGround, Gap
from leggedtraj.node_spline import NodeSpline
from leggedtraj.nodes_variables import NodesVariablesAll
from leggedtraj.nodes_variables_phase_based import (
    NodesVariablesEEForce,
    NodesVariablesEEMotion,
)
from leggedtraj.optimization import (
    BOUND_GREATER_ZERO,
    BOUND_SMALLER_ZERO,
    BOUND_ZERO,
    Bounds,
    Composite,
)


def _spline(name="base-lin"):
    nodes = NodesVariablesAll(3, 3, name)
    spline = NodeSpline(nodes, [0.5, 0.7])
    return nodes, spline


def _ee_nodes():
    force = NodesVariablesEEForce(3, True, "ee-force_0", 3)
    motion = NodesVariablesEEMotion(3, True, "ee-motion_0", 2)
    rng = np.random.default_rng(3)
    fx = rng.normal(size=force.n_rows)
    force.set_variables(fx + 5.0)
    motion.set_by_linear_interpolation([1.2, 0.1, 0.0], [1.3, 0.15, 0.0], 1.0)
    motion.set_variables(motion.values())
    return force, motion


def test_spline_acc_dimensions_and_bounds():
    nodes, spline = _spline()
    c = SplineAccConstraint(spline, "base-lin")
    assert c.name == "splineacc-base-lin"
    assert c.n_rows == 3
    assert c.bounds() == [BOUND_ZERO] * 3


def test_spline_acc_vanishes_for_straight_line():
    nodes, spline = _spline()
    nodes.set_by_linear_interpolation([0.0, 0.0, 0.0], [1.0, 2.0, -1.0], 1.2)
    nodes.update_observers()
    c = SplineAccConstraint(spline, "base-lin")
    np.testing.assert_allclose(c.values(), np.zeros(3), atol=1e-9)


def test_spline_acc_values_are_linear_in_nodes():
    nodes, spline = _spline()
    x = np.random.default_rng(1).normal(size=nodes.n_rows)
    nodes.set_variables(x)
    c = SplineAccConstraint(spline, "base-lin")
    jac = c.jacobian_block("base-lin", nodes.n_rows)
    np.testing.assert_allclose(jac @ x, c.values(), atol=1e-9)
    np.testing.assert_allclose(c.jacobian_block("other", 4), np.zeros((3, 4)))


def test_spline_acc_full_jacobian_after_linking():
    nodes, spline = _spline()
    c = SplineAccConstraint(spline, "base-lin")
    variables = Composite("vars")
    variables.add(nodes)
    c.link_variables(variables)
    assert c.jacobian().shape == (3, nodes.n_rows)


def test_force_bounds_pattern():
    force, motion = _ee_nodes()
    c = ForceConstraint(FlatGround(), 250.0, force, motion)
    n_nodes = len(force.indices_of_non_constant_nodes())
    assert c.n_rows == 5 * n_nodes
    assert c.name == "force-ee-force_0"
    expected = [Bounds(0.0, 250.0), BOUND_SMALLER_ZERO, BOUND_GREATER_ZERO,
                BOUND_SMALLER_ZERO, BOUND_GREATER_ZERO] * n_nodes
    assert c.bounds() == expected


def test_force_on_flat_ground_normal_row_is_vertical_force():
    force, motion = _ee_nodes()
    c = ForceConstraint(FlatGround(), 250.0, force, motion)
    g = c.values()
    for k, node_id in enumerate(c.pure_stance_force_node_ids):
        assert g[5 * k] == pytest.approx(force.nodes[node_id].p()[2])


def test_force_values_linear_in_force_variables():
    force, motion = _ee_nodes()
    c = ForceConstraint(Gap(), 250.0, force, motion)
    jac = c.jacobian_block(force.name, force.n_rows)
    np.testing.assert_allclose(jac @ force.values(), c.values(), atol=1e-9)


def test_force_jacobian_wrt_motion_matches_finite_differences():
    force, motion = _ee_nodes()
    c = ForceConstraint(Gap(), 250.0, force, motion)
    x0 = motion.values()
    h = 1e-6
    cols = []
    for i in range(x0.size):
        dx = np.zeros_like(x0)
        dx[i] = h
        motion.set_variables(x0 + dx)
        plus = c.values()
        motion.set_variables(x0 - dx)
        minus = c.values()
        cols.append((plus - minus) / (2 * h))
    motion.set_variables(x0)
    numeric = np.stack(cols, axis=1)
    analytic = c.jacobian_block(motion.name, motion.n_rows)
    np.testing.assert_allclose(analytic, numeric, atol=1e-5)
    assert np.abs(analytic).sum() > 0.0


def test_force_jacobian_for_other_set_is_zero():
    force, motion = _ee_nodes()
    c = ForceConstraint(FlatGround(), 250.0, force, motion)
    assert not c.jacobian_block("base-lin", 7).any()
    assert math.isinf(c.bounds()[1].lower)