"""Spline nodes (position and velocity) exposed as optimization variables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Sequence

import numpy as np

from .optimization import NO_BOUND, SPECIFY_LATER, Bounds, VariableSet
from .polynomial import Dx, Polynomial, State, make_node

NODE_VALUE_NOT_OPTIMIZED = -1


class Side(IntEnum):
    """Which end of a polynomial a node sits at."""

    START = 0
    END = 1


@dataclass(frozen=True)
class NodeValueInfo:
    """Identifies one scalar of a node: node id, derivative and dimension."""

    id: int
    deriv: Dx
    dim: int


class NodesObserver(ABC):
    """Something that must be refreshed whenever node values change."""

    def __init__(self, subject: "NodesVariables") -> None:
        self.node_values = subject
        subject.add_observer(self)

    @abstractmethod
    def update_nodes(self) -> None:
        """Called by the subject after its node values changed."""


class NodesVariables(VariableSet, ABC):
    """Nodes of a spline, of which some values are optimization variables."""

    def __init__(self, name: str) -> None:
        super().__init__(SPECIFY_LATER, name)
        self.nodes: list[State] = []
        self.n_dim = 0
        self._bounds: list[Bounds] = []
        self._observers: list[NodesObserver] = []

    @abstractmethod
    def node_values_info(self, idx: int) -> list[NodeValueInfo]:
        """Node values that the optimization variable at idx stands for."""

    def opt_index(self, nvi: NodeValueInfo) -> int:
        """Index of the variable holding a node value, or NODE_VALUE_NOT_OPTIMIZED."""
        for idx in range(self.n_rows):
            if nvi in self.node_values_info(idx):
                return idx
        return NODE_VALUE_NOT_OPTIMIZED

    def values(self) -> np.ndarray:
        x = np.zeros(self.n_rows)
        for idx in range(self.n_rows):
            for nvi in self.node_values_info(idx):
                x[idx] = self.nodes[nvi.id][nvi.deriv][nvi.dim]
        return x

    def set_variables(self, x: Iterable[float]) -> None:
        x = np.asarray(x, dtype=float)
        for idx, value in enumerate(x):
            for nvi in self.node_values_info(idx):
                self.nodes[nvi.id][nvi.deriv][nvi.dim] = value
        self.update_observers()

    def add_observer(self, observer: NodesObserver) -> None:
        self._observers.append(observer)

    def update_observers(self) -> None:
        for observer in self._observers:
            observer.update_nodes()

    @staticmethod
    def node_id(poly_id: int, side: Side) -> int:
        return poly_id + int(side)

    def boundary_nodes(self, poly_id: int) -> list[State]:
        return [
            self.nodes[self.node_id(poly_id, Side.START)],
            self.nodes[self.node_id(poly_id, Side.END)],
        ]

    def polynomial_count(self) -> int:
        return len(self.nodes) - 1

    def bounds(self) -> list[Bounds]:
        return list(self._bounds)

    def set_by_linear_interpolation(self, initial_val, final_val, t_total: float) -> None:
        """Initialize optimized positions on a straight line, velocities constant."""
        initial_val = np.asarray(initial_val, dtype=float)
        final_val = np.asarray(final_val, dtype=float)
        dp = final_val - initial_val
        average_velocity = dp / t_total
        num_nodes = len(self.nodes)

        for idx in range(self.n_rows):
            for nvi in self.node_values_info(idx):
                if nvi.deriv == Dx.POS:
                    pos = initial_val + nvi.id / (num_nodes - 1) * dp
                    self.nodes[nvi.id][Dx.POS][nvi.dim] = pos[nvi.dim]
                if nvi.deriv == Dx.VEL:
                    self.nodes[nvi.id][Dx.VEL][nvi.dim] = average_velocity[nvi.dim]

    def fit_to_polynomial(self, polynomial: Polynomial, durations: Sequence[float]) -> None:
        """Place the nodes on a polynomial at the given consecutive intervals."""
        t = 0.0
        last = len(self.nodes) - 1
        for n, node in enumerate(self.nodes):
            state = polynomial.point(t)
            node[Dx.POS] = state.p()
            node[Dx.VEL] = state.v()
            if n < last:
                t += durations[n]

    def add_bounds(self, node_id: int, deriv: Dx, dimensions: Iterable[int], val) -> None:
        val = np.asarray(val, dtype=float)
        for dim in dimensions:
            self.add_bound(NodeValueInfo(node_id, Dx(deriv), dim), float(val[dim]))

    def add_bound(self, nvi: NodeValueInfo, val: float) -> None:
        for idx in range(self.n_rows):
            if nvi in self.node_values_info(idx):
                self._bounds[idx] = Bounds(val, val)

    def add_start_bound(self, deriv: Dx, dimensions: Iterable[int], val) -> None:
        self.add_bounds(0, deriv, dimensions, val)

    def add_final_bound(self, deriv: Dx, dimensions: Iterable[int], val) -> None:
        self.add_bounds(len(self.nodes) - 1, deriv, dimensions, val)


class NodesVariablesAll(NodesVariables):
    """Nodes whose positions and velocities are all optimization variables."""

    def __init__(self, n_nodes: int, n_dim: int, variable_id: str) -> None:
        super().__init__(variable_id)
        n_opt_variables = n_nodes * 2 * n_dim
        self.n_dim = n_dim
        self.nodes = [make_node(n_dim) for _ in range(n_nodes)]
        self._bounds = [NO_BOUND] * n_opt_variables
        self.n_rows = n_opt_variables

    def node_values_info(self, idx: int) -> list[NodeValueInfo]:
        per_node = 2 * self.n_dim
        internal_id = idx % per_node
        deriv = Dx.POS if internal_id < self.n_dim else Dx.VEL
        return [NodeValueInfo(idx // per_node, deriv, internal_id % self.n_dim)]