"""Nodes whose parameterization follows alternating contact and swing phases."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .nodes_variables import NodeValueInfo, NodesVariables, Side
from .optimization import NO_BOUND
from .polynomial import Dx, make_node

_Z = 2


@dataclass(frozen=True)
class PolyInfo:
    """Where a polynomial sits within the phases."""

    phase: int
    poly_in_phase: int
    n_polys_in_phase: int
    is_constant: bool


def build_poly_infos(
    phase_count: int, first_phase_constant: bool, n_polys_in_changing_phase: int
) -> list[PolyInfo]:
    """One polynomial per constant phase, several per changing phase, alternating."""
    infos: list[PolyInfo] = []
    phase_constant = first_phase_constant
    for phase in range(phase_count):
        if phase_constant:
            infos.append(PolyInfo(phase, 0, 1, True))
        else:
            infos.extend(
                PolyInfo(phase, j, n_polys_in_changing_phase, False)
                for j in range(n_polys_in_changing_phase)
            )
        phase_constant = not phase_constant
    return infos


class NodesVariablesPhaseBased(NodesVariables):
    """Three-dimensional nodes grouped by phases that are constant or changing."""

    def __init__(
        self,
        phase_count: int,
        first_phase_constant: bool,
        name: str,
        n_polys_in_changing_phase: int,
    ) -> None:
        super().__init__(name)
        self.polynomial_info = build_poly_infos(
            phase_count, first_phase_constant, n_polys_in_changing_phase
        )
        self.n_dim = 3
        self.nodes = [make_node(self.n_dim) for _ in range(len(self.polynomial_info) + 1)]
        self.index_to_node_value_info: list[list[NodeValueInfo]] = []

    def node_values_info(self, idx: int) -> list[NodeValueInfo]:
        return list(self.index_to_node_value_info[idx])

    def _set_number_of_variables(self, n_variables: int) -> None:
        self._bounds = [NO_BOUND] * n_variables
        self.n_rows = n_variables

    def convert_phase_to_poly_durations(self, phase_durations: Sequence[float]) -> list[float]:
        return [
            phase_durations[info.phase] / info.n_polys_in_phase
            for info in self.polynomial_info
        ]

    def derivative_of_poly_duration_wrt_phase_duration(self, poly_id: int) -> float:
        return 1.0 / self.polynomial_info[poly_id].n_polys_in_phase

    def number_of_prev_polynomials_in_phase(self, poly_id: int) -> int:
        return self.polynomial_info[poly_id].poly_in_phase

    def is_constant_node(self, node_id: int) -> bool:
        """A node is constant if a polynomial on either side is in a constant phase."""
        return any(self.is_in_constant_phase(p) for p in self.adjacent_poly_ids(node_id))

    def is_in_constant_phase(self, poly_id: int) -> bool:
        return self.polynomial_info[poly_id].is_constant

    def indices_of_non_constant_nodes(self) -> list[int]:
        return [i for i in range(len(self.nodes)) if not self.is_constant_node(i)]

    def phase(self, node_id: int) -> int:
        if self.is_constant_node(node_id):
            raise ValueError(f"node {node_id} borders a constant phase and has no single phase")
        poly_id = self.adjacent_poly_ids(node_id)[0]
        return self.polynomial_info[poly_id].phase

    def poly_id_at_start_of_phase(self, phase: int) -> int:
        for i, info in enumerate(self.polynomial_info):
            if info.phase == phase:
                return i
        raise ValueError(f"phase {phase} does not exist")

    def value_at_start_of_phase(self, phase: int) -> np.ndarray:
        return self.nodes[self.node_id_at_start_of_phase(phase)].p().copy()

    def node_id_at_start_of_phase(self, phase: int) -> int:
        return self.node_id(self.poly_id_at_start_of_phase(phase), Side.START)

    def adjacent_poly_ids(self, node_id: int) -> list[int]:
        last_node_id = len(self.nodes) - 1
        if node_id == 0:
            return [0]
        if node_id == last_node_id:
            return [last_node_id - 1]
        return [node_id - 1, node_id]


class NodesVariablesEEMotion(NodesVariablesPhaseBased):
    """Endeffector motion: the foot stays still in contact and moves in swing."""

    def __init__(
        self,
        phase_count: int,
        is_in_contact_at_start: bool,
        name: str,
        n_polys_in_changing_phase: int,
    ) -> None:
        super().__init__(phase_count, is_in_contact_at_start, name, n_polys_in_changing_phase)
        self.index_to_node_value_info = self._phase_based_parameterization()
        self._set_number_of_variables(len(self.index_to_node_value_info))

    def _phase_based_parameterization(self) -> list[list[NodeValueInfo]]:
        index_map: list[list[NodeValueInfo]] = []
        node_id = 0
        while node_id < len(self.nodes):
            if not self.is_constant_node(node_id):
                for dim in range(self.n_dim):
                    index_map.append([NodeValueInfo(node_id, Dx.POS, dim)])
                    # vertical swing velocity is held at zero, so the swing
                    # peaks where the polynomials meet
                    if dim == _Z:
                        self.nodes[node_id][Dx.VEL][_Z] = 0.0
                    else:
                        index_map.append([NodeValueInfo(node_id, Dx.VEL, dim)])
            else:
                self.nodes[node_id][Dx.VEL] = 0.0
                self.nodes[node_id + 1][Dx.VEL] = 0.0
                for dim in range(self.n_dim):
                    index_map.append([
                        NodeValueInfo(node_id, Dx.POS, dim),
                        NodeValueInfo(node_id + 1, Dx.POS, dim),
                    ])
                node_id += 1  # the next node belongs to the same stance
            node_id += 1
        return index_map


class NodesVariablesEEForce(NodesVariablesPhaseBased):
    """Endeffector force: free in contact, zero during swing."""

    def __init__(
        self,
        phase_count: int,
        is_in_contact_at_start: bool,
        name: str,
        n_polys_in_changing_phase: int,
    ) -> None:
        super().__init__(
            phase_count, not is_in_contact_at_start, name, n_polys_in_changing_phase
        )
        self.index_to_node_value_info = self._phase_based_parameterization()
        self._set_number_of_variables(len(self.index_to_node_value_info))

    def _phase_based_parameterization(self) -> list[list[NodeValueInfo]]:
        index_map: list[list[NodeValueInfo]] = []
        node_id = 0
        while node_id < len(self.nodes):
            if not self.is_constant_node(node_id):
                for dim in range(self.n_dim):
                    index_map.append([NodeValueInfo(node_id, Dx.POS, dim)])
                    index_map.append([NodeValueInfo(node_id, Dx.VEL, dim)])
            else:
                for nid in (node_id, node_id + 1):
                    self.nodes[nid][Dx.POS] = 0.0
                    self.nodes[nid][Dx.VEL] = 0.0
                node_id += 1  # the next node belongs to the same swing
            node_id += 1
        return index_map