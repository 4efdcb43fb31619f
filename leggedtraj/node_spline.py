"""Splines built on node variables, optionally with variable phase durations."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .nodes_variables import NodesObserver, NodesVariables, Side
from .nodes_variables_phase_based import NodesVariablesPhaseBased
from .phase_durations import PhaseDurations, PhaseDurationsObserver
from .polynomial import Dx
from .spline import Spline


class NodeSpline(Spline, NodesObserver):
    """Spline whose polynomials are kept in step with a set of node variables."""

    def __init__(
        self, node_variables: NodesVariables, polynomial_durations: Sequence[float]
    ) -> None:
        Spline.__init__(self, polynomial_durations, node_variables.n_dim)
        NodesObserver.__init__(self, node_variables)
        self.update_nodes()
        self._jac_shape = (node_variables.n_dim, node_variables.n_rows)

    def update_nodes(self) -> None:
        for poly_id, poly in enumerate(self.cubic_polys):
            start, end = self.node_values.boundary_nodes(poly_id)
            poly.set_nodes(start, end)
        self.update_polynomial_coeff()

    def node_variables_count(self) -> int:
        return self.node_values.n_rows

    def jacobian_wrt_nodes(self, t_global: float, dxdt: Dx) -> np.ndarray:
        """Derivative of the dxdt value at t_global with respect to the node variables."""
        poly_id, t_local = self.local_time(t_global, self.poly_durations())
        return self.jacobian_wrt_nodes_in_poly(poly_id, t_local, dxdt)

    def jacobian_wrt_nodes_in_poly(self, poly_id: int, t_local: float, dxdt: Dx) -> np.ndarray:
        jac = np.zeros(self._jac_shape)
        self.fill_jacobian_wrt_nodes(poly_id, t_local, dxdt, jac, False)
        return jac

    def fill_jacobian_wrt_nodes(
        self,
        poly_id: int,
        t_local: float,
        dxdt: Dx,
        jac: np.ndarray,
        fill_with_zeros: bool,
    ) -> None:
        """Add the derivatives of one polynomial to jac, which is changed in place."""
        poly = self.cubic_polys[poly_id]
        for idx in range(jac.shape[1]):
            for nvi in self.node_values.node_values_info(idx):
                # every polynomial is shaped by the nodes at both of its ends
                for side in Side:
                    if self.node_values.node_id(poly_id, side) != nvi.id:
                        continue
                    if side == Side.START:
                        val = poly.derivative_wrt_start_node(dxdt, nvi.deriv, t_local)
                    else:
                        val = poly.derivative_wrt_end_node(dxdt, nvi.deriv, t_local)
                    if fill_with_zeros:
                        val = 0.0
                    jac[nvi.dim, idx] += val


class PhaseSpline(NodeSpline, PhaseDurationsObserver):
    """Node spline whose polynomial durations follow variable phase durations."""

    def __init__(
        self, nodes: NodesVariablesPhaseBased, phase_durations: PhaseDurations
    ) -> None:
        NodeSpline.__init__(
            self,
            nodes,
            nodes.convert_phase_to_poly_durations(phase_durations.phase_durations()),
        )
        PhaseDurationsObserver.__init__(self, phase_durations)
        self.phase_nodes = nodes
        self.update_polynomial_durations()

    def update_polynomial_durations(self) -> None:
        poly_durations = self.phase_nodes.convert_phase_to_poly_durations(
            self.phase_durations.phase_durations()
        )
        for poly, duration in zip(self.cubic_polys, poly_durations):
            poly.set_duration(duration)
        self.update_polynomial_coeff()

    def jacobian_of_pos_wrt_durations(self, t_global: float) -> np.ndarray:
        dx_dt = self.derivative_of_pos_wrt_phase_duration(t_global)
        xd = self.point(t_global).v()
        current_phase = self.segment_id(t_global, self.phase_durations.phase_durations())
        return self.phase_durations.jacobian_of_pos(current_phase, dx_dt, xd)

    def derivative_of_pos_wrt_phase_duration(self, t_global: float) -> np.ndarray:
        poly_id, t_local = self.local_time(t_global, self.poly_durations())
        vel = self.point(t_global).v()
        dxdT = self.cubic_polys[poly_id].derivative_of_pos_wrt_duration(t_local)
        inner_derivative = self.phase_nodes.derivative_of_poly_duration_wrt_phase_duration(poly_id)
        prev_polys_in_phase = self.phase_nodes.number_of_prev_polynomials_in_phase(poly_id)
        # earlier polynomials of the same phase shift this one along the time axis
        return inner_derivative * (dxdT - prev_polys_in_phase * vel)


class SplineHolder:
    """The splines of base motion and of endeffector motions and forces."""

    def __init__(
        self,
        base_lin_nodes: NodesVariables,
        base_ang_nodes: NodesVariables,
        base_poly_durations: Sequence[float],
        ee_motion_nodes: Sequence[NodesVariablesPhaseBased],
        ee_force_nodes: Sequence[NodesVariablesPhaseBased],
        phase_durations: Sequence[PhaseDurations],
        durations_change: bool,
    ) -> None:
        self.base_linear = NodeSpline(base_lin_nodes, base_poly_durations)
        self.base_angular = NodeSpline(base_ang_nodes, base_poly_durations)
        self.phase_durations = list(phase_durations)
        self.ee_motion: list[NodeSpline] = []
        self.ee_force: list[NodeSpline] = []

        for motion, force, durations in zip(ee_motion_nodes, ee_force_nodes, phase_durations):
            if durations_change:
                self.ee_motion.append(PhaseSpline(motion, durations))
                self.ee_force.append(PhaseSpline(force, durations))
            else:
                phase_times = durations.phase_durations()
                self.ee_motion.append(
                    NodeSpline(motion, motion.convert_phase_to_poly_durations(phase_times))
                )
                self.ee_force.append(
                    NodeSpline(force, force.convert_phase_to_poly_durations(phase_times))
                )