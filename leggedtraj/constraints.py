"""Constraints on spline continuity and on contact forces."""

from __future__ import annotations

import numpy as np

from .height_map import Direction, HeightMap
from .node_spline import NodeSpline
from .nodes_variables import NODE_VALUE_NOT_OPTIMIZED, NodeValueInfo
from .nodes_variables_phase_based import NodesVariablesPhaseBased
from .optimization import (
    BOUND_GREATER_ZERO,
    BOUND_SMALLER_ZERO,
    BOUND_ZERO,
    Bounds,
    ConstraintSet,
)
from .polynomial import Dx

_X, _Y, _Z = 0, 1, 2


class SplineAccConstraint(ConstraintSet):
    """Requires the acceleration to be continuous where polynomials meet."""

    def __init__(self, spline: NodeSpline, node_variable_name: str) -> None:
        self.spline = spline
        self.node_variables_id = node_variable_name
        self.n_dim = spline.point(0.0).p().size
        self.n_junctions = spline.polynomial_count() - 1
        self._durations = list(spline.poly_durations())
        super().__init__(self.n_dim * self.n_junctions, "splineacc-" + node_variable_name)

    def values(self) -> np.ndarray:
        g = np.zeros(self.n_rows)
        for j in range(self.n_junctions):
            acc_prev = self.spline.point_in_poly(j, self._durations[j]).a()
            acc_next = self.spline.point_in_poly(j + 1, 0.0).a()
            g[j * self.n_dim:(j + 1) * self.n_dim] = acc_prev - acc_next
        return g

    def bounds(self) -> list[Bounds]:
        return [BOUND_ZERO] * self.n_rows

    def jacobian_block(self, var_set: str, n_cols: int) -> np.ndarray:
        jac = np.zeros((self.n_rows, n_cols))
        if var_set != self.node_variables_id:
            return jac
        for j in range(self.n_junctions):
            acc_prev = self.spline.jacobian_wrt_nodes_in_poly(j, self._durations[j], Dx.ACC)
            acc_next = self.spline.jacobian_wrt_nodes_in_poly(j + 1, 0.0, Dx.ACC)
            jac[j * self.n_dim:(j + 1) * self.n_dim] = acc_prev - acc_next
        return jac


class ForceConstraint(ConstraintSet):
    """Contact forces push into the terrain, stay below a limit and inside the friction pyramid."""

    N_CONSTRAINTS_PER_NODE = 5  # normal force and four friction pyramid faces

    def __init__(self, terrain: HeightMap, force_limit: float,
                 ee_force: NodesVariablesPhaseBased,
                 ee_motion: NodesVariablesPhaseBased) -> None:
        self.terrain = terrain
        self.fn_max = float(force_limit)
        self.mu = terrain.friction_coeff
        self.ee_force = ee_force
        self.ee_motion = ee_motion
        self.pure_stance_force_node_ids = ee_force.indices_of_non_constant_nodes()
        super().__init__(
            len(self.pure_stance_force_node_ids) * self.N_CONSTRAINTS_PER_NODE,
            "force-" + ee_force.name,
        )

    def _foot_position(self, f_node_id: int) -> np.ndarray:
        # the foot does not move during a stance phase
        phase = self.ee_force.phase(f_node_id)
        return self.ee_motion.value_at_start_of_phase(phase)

    def values(self) -> np.ndarray:
        g = []
        mu = self.mu
        for f_node_id in self.pure_stance_force_node_ids:
            p = self._foot_position(f_node_id)
            n = self.terrain.normalized_basis(Direction.NORMAL, p[_X], p[_Y])
            t1 = self.terrain.normalized_basis(Direction.TANGENT1, p[_X], p[_Y])
            t2 = self.terrain.normalized_basis(Direction.TANGENT2, p[_X], p[_Y])
            f = self.ee_force.nodes[f_node_id].p()
            g.extend([
                f @ n,
                f @ (t1 - mu * n),
                f @ (t1 + mu * n),
                f @ (t2 - mu * n),
                f @ (t2 + mu * n),
            ])
        return np.array(g, dtype=float)

    def bounds(self) -> list[Bounds]:
        per_node = [
            Bounds(0.0, self.fn_max),
            BOUND_SMALLER_ZERO,
            BOUND_GREATER_ZERO,
            BOUND_SMALLER_ZERO,
            BOUND_GREATER_ZERO,
        ]
        return per_node * len(self.pure_stance_force_node_ids)

    def jacobian_block(self, var_set: str, n_cols: int) -> np.ndarray:
        jac = np.zeros((self.n_rows, n_cols))
        mu = self.mu
        rows_per_node = self.N_CONSTRAINTS_PER_NODE

        if var_set == self.ee_force.name:
            for k, f_node_id in enumerate(self.pure_stance_force_node_ids):
                row = k * rows_per_node
                p = self._foot_position(f_node_id)
                n = self.terrain.normalized_basis(Direction.NORMAL, p[_X], p[_Y])
                t1 = self.terrain.normalized_basis(Direction.TANGENT1, p[_X], p[_Y])
                t2 = self.terrain.normalized_basis(Direction.TANGENT2, p[_X], p[_Y])
                for dim in (_X, _Y, _Z):
                    idx = self.ee_force.opt_index(NodeValueInfo(f_node_id, Dx.POS, dim))
                    if idx == NODE_VALUE_NOT_OPTIMIZED:
                        continue
                    jac[row:row + rows_per_node, idx] = [
                        n[dim],
                        t1[dim] - mu * n[dim],
                        t1[dim] + mu * n[dim],
                        t2[dim] - mu * n[dim],
                        t2[dim] + mu * n[dim],
                    ]

        if var_set == self.ee_motion.name:
            for k, f_node_id in enumerate(self.pure_stance_force_node_ids):
                row = k * rows_per_node
                phase = self.ee_force.phase(f_node_id)
                ee_node_id = self.ee_motion.node_id_at_start_of_phase(phase)
                p = self.ee_motion.value_at_start_of_phase(phase)
                f = self.ee_force.nodes[f_node_id].p()
                for dim in (_X, _Y):
                    dn = self.terrain.derivative_of_normalized_basis_wrt(
                        Direction.NORMAL, dim, p[_X], p[_Y])
                    dt1 = self.terrain.derivative_of_normalized_basis_wrt(
                        Direction.TANGENT1, dim, p[_X], p[_Y])
                    dt2 = self.terrain.derivative_of_normalized_basis_wrt(
                        Direction.TANGENT2, dim, p[_X], p[_Y])
                    idx = self.ee_motion.opt_index(NodeValueInfo(ee_node_id, Dx.POS, dim))
                    if idx == NODE_VALUE_NOT_OPTIMIZED:
                        continue
                    jac[row:row + rows_per_node, idx] = [
                        f @ dn,
                        f @ (dt1 - mu * dn),
                        f @ (dt1 + mu * dn),
                        f @ (dt2 - mu * dn),
                        f @ (dt2 + mu * dn),
                    ]
        return jac