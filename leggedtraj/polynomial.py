"""Polynomials evaluated with their first and second time derivatives."""

from __future__ import annotations

from enum import IntEnum

import numpy as np


class Dx(IntEnum):
    """Order of a time derivative."""

    POS = 0
    VEL = 1
    ACC = 2


class State:
    """Value of a quantity together with some of its time derivatives."""

    def __init__(self, dim: int, n_derivatives: int) -> None:
        self.values = np.zeros((n_derivatives, dim))

    @property
    def dim(self) -> int:
        return self.values.shape[1]

    @property
    def n_derivatives(self) -> int:
        return self.values.shape[0]

    def __getitem__(self, deriv: int) -> np.ndarray:
        return self.values[deriv]

    def __setitem__(self, deriv: int, value) -> None:
        self.values[deriv] = value

    def p(self) -> np.ndarray:
        return self.values[Dx.POS]

    def v(self) -> np.ndarray:
        return self.values[Dx.VEL]

    def a(self) -> np.ndarray:
        return self.values[Dx.ACC]

    def copy(self) -> "State":
        out = State(self.dim, self.n_derivatives)
        out.values = self.values.copy()
        return out


def make_node(dim: int) -> State:
    """A spline node: position and velocity."""
    return State(dim, 2)


class Polynomial:
    """Polynomial with vector-valued coefficients in ascending order."""

    def __init__(self, order: int, dim: int) -> None:
        self.coeff = [np.zeros(dim) for _ in range(order + 1)]

    def point(self, t_local: float) -> State:
        if t_local < 0.0:
            raise ValueError("polynomial evaluated at negative local time")
        out = State(self.coeff[0].size, 3)
        for d in Dx:
            for c, coeff in enumerate(self.coeff):
                out.values[d] += self.derivative_wrt_coeff(t_local, d, c) * coeff
        return out

    def derivative_wrt_coeff(self, t: float, deriv: int, c: int) -> float:
        if deriv == Dx.POS:
            return t ** c
        if deriv == Dx.VEL:
            return c * t ** (c - 1) if c >= 1 else 0.0
        if deriv == Dx.ACC:
            return c * (c - 1) * t ** (c - 2) if c >= 2 else 0.0
        raise ValueError(f"derivative {deriv} not defined")


_START_NODE_DERIVATIVES = {
    (Dx.POS, Dx.POS): lambda t, T: 2 * t**3 / T**3 - 3 * t**2 / T**2 + 1,
    (Dx.POS, Dx.VEL): lambda t, T: t - 2 * t**2 / T + t**3 / T**2,
    (Dx.VEL, Dx.POS): lambda t, T: 6 * t**2 / T**3 - 6 * t / T**2,
    (Dx.VEL, Dx.VEL): lambda t, T: 3 * t**2 / T**2 - 4 * t / T + 1,
    (Dx.ACC, Dx.POS): lambda t, T: 12 * t / T**3 - 6 / T**2,
    (Dx.ACC, Dx.VEL): lambda t, T: 6 * t / T**2 - 4 / T,
}

_END_NODE_DERIVATIVES = {
    (Dx.POS, Dx.POS): lambda t, T: 3 * t**2 / T**2 - 2 * t**3 / T**3,
    (Dx.POS, Dx.VEL): lambda t, T: t**3 / T**2 - t**2 / T,
    (Dx.VEL, Dx.POS): lambda t, T: 6 * t / T**2 - 6 * t**2 / T**3,
    (Dx.VEL, Dx.VEL): lambda t, T: 3 * t**2 / T**2 - 2 * t / T,
    (Dx.ACC, Dx.POS): lambda t, T: 6 / T**2 - 12 * t / T**3,
    (Dx.ACC, Dx.VEL): lambda t, T: 6 * t / T**2 - 2 / T,
}


class CubicHermitePolynomial(Polynomial):
    """Cubic polynomial defined by start and end node and its duration."""

    def __init__(self, dim: int) -> None:
        super().__init__(3, dim)
        self.n0 = make_node(dim)
        self.n1 = make_node(dim)
        self._duration = 0.0

    @property
    def duration(self) -> float:
        return self._duration

    def set_nodes(self, n0: State, n1: State) -> None:
        self.n0 = n0.copy()
        self.n1 = n1.copy()

    def set_duration(self, duration: float) -> None:
        self._duration = float(duration)

    def update_coeff(self) -> None:
        T = self._duration
        p0, v0 = self.n0.p(), self.n0.v()
        p1, v1 = self.n1.p(), self.n1.v()
        self.coeff[0] = p0.copy()
        self.coeff[1] = v0.copy()
        self.coeff[2] = -(3 * (p0 - p1) + T * (2 * v0 + v1)) / T**2
        self.coeff[3] = (2 * (p0 - p1) + T * (v0 + v1)) / T**3

    @staticmethod
    def _lookup(table, dfdt: int, node_derivative: int):
        try:
            return table[(Dx(dfdt), Dx(node_derivative))]
        except (KeyError, ValueError):
            raise ValueError(
                f"derivative {dfdt} with respect to node value {node_derivative} not defined"
            ) from None

    def derivative_wrt_start_node(self, dfdt: int, node_derivative: int, t_local: float) -> float:
        formula = self._lookup(_START_NODE_DERIVATIVES, dfdt, node_derivative)
        return formula(t_local, self._duration)

    def derivative_wrt_end_node(self, dfdt: int, node_derivative: int, t_local: float) -> float:
        formula = self._lookup(_END_NODE_DERIVATIVES, dfdt, node_derivative)
        return formula(t_local, self._duration)

    def derivative_of_pos_wrt_duration(self, t: float) -> np.ndarray:
        x0, x1 = self.n0.p(), self.n1.p()
        v0, v1 = self.n0.v(), self.n1.v()
        T = self._duration
        return (
            t**3 * (v0 + v1) / T**3
            - t**2 * (2 * v0 + v1) / T**2
            - 3 * t**3 * (2 * x0 - 2 * x1 + T * v0 + T * v1) / T**4
            + 2 * t**2 * (3 * x0 - 3 * x1 + 2 * T * v0 + T * v1) / T**3
        )