"""Quadratic cost on one component of the nodes of a spline."""

from __future__ import annotations

import numpy as np

from .nodes_variables import NodesVariables
from .optimization import Composite, CostTerm
from .polynomial import Dx

_DERIV_INDEX = {Dx.POS: 0, Dx.VEL: 1, Dx.ACC: 2}


class NodeCost(CostTerm):
    """Weighted sum of squares of one derivative and dimension over all nodes."""

    def __init__(self, nodes_id: str, deriv: Dx, dim: int, weight: float) -> None:
        super().__init__(f"{nodes_id}-dx_{_DERIV_INDEX[deriv]}-dim_{dim}")
        self.node_id = nodes_id
        self.deriv = deriv
        self.dim = dim
        self.weight = float(weight)
        self.nodes: NodesVariables | None = None

    def init_variable_dependent_quantities(self, variables: Composite) -> None:
        self.nodes = variables.get(self.node_id)

    def _linked_nodes(self) -> NodesVariables:
        if self.nodes is None:
            raise RuntimeError(f"cost {self.name!r} is not linked to variables")
        return self.nodes

    def cost(self) -> float:
        nodes = self._linked_nodes()
        return float(sum(
            self.weight * node[self.deriv][self.dim] ** 2 for node in nodes.nodes
        ))

    def jacobian_block(self, var_set: str, n_cols: int) -> np.ndarray:
        jac = np.zeros((1, n_cols))
        if var_set != self.node_id:
            return jac
        nodes = self._linked_nodes()
        for i in range(nodes.n_rows):
            for nvi in nodes.node_values_info(i):
                if nvi.deriv == self.deriv and nvi.dim == self.dim:
                    val = nodes.nodes[nvi.id][self.deriv][self.dim]
                    jac[0, i] += self.weight * 2.0 * val
        return jac