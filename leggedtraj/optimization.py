"""Building blocks of a nonlinear program: variable sets, constraints and costs."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np

SPECIFY_LATER = -1


@dataclass(frozen=True)
class Bounds:
    """Lower and upper bound of a single scalar quantity."""

    lower: float = -math.inf
    upper: float = math.inf


NO_BOUND = Bounds(-math.inf, math.inf)
BOUND_ZERO = Bounds(0.0, 0.0)
BOUND_GREATER_ZERO = Bounds(0.0, math.inf)
BOUND_SMALLER_ZERO = Bounds(-math.inf, 0.0)


class VariableSet:
    """A named vector of optimization variables, unbounded by default."""

    def __init__(self, n_rows: int, name: str) -> None:
        self.name = name
        self.n_rows = n_rows
        self._x = np.zeros(max(n_rows, 0))

    def values(self) -> np.ndarray:
        return self._x.copy()

    def set_variables(self, x: Iterable[float]) -> None:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.n_rows,):
            raise ValueError(
                f"variable set {self.name!r} expects {self.n_rows} values, got {x.size}"
            )
        self._x = x.copy()

    def bounds(self) -> list[Bounds]:
        return [NO_BOUND] * self.n_rows


class Composite:
    """An ordered collection of variable sets that acts as one long vector."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._components: dict[str, VariableSet] = {}

    def add(self, component: VariableSet) -> None:
        if component.name in self._components:
            raise ValueError(f"component {component.name!r} already added")
        self._components[component.name] = component

    def get(self, name: str) -> VariableSet:
        try:
            return self._components[name]
        except KeyError:
            raise KeyError(f"no component named {name!r}") from None

    def components(self) -> list[VariableSet]:
        return list(self._components.values())

    def n_rows(self) -> int:
        return sum(c.n_rows for c in self._components.values())

    def values(self) -> np.ndarray:
        parts = [c.values() for c in self._components.values()]
        return np.concatenate(parts) if parts else np.zeros(0)

    def set_variables(self, x: Iterable[float]) -> None:
        x = np.asarray(x, dtype=float)
        if x.size != self.n_rows():
            raise ValueError(f"expected {self.n_rows()} values, got {x.size}")
        start = 0
        for component in self._components.values():
            component.set_variables(x[start:start + component.n_rows])
            start += component.n_rows

    def bounds(self) -> list[Bounds]:
        return [b for c in self._components.values() for b in c.bounds()]


class ConstraintSet(ABC):
    """A named group of constraint rows depending on the optimization variables."""

    def __init__(self, n_rows: int, name: str) -> None:
        self.name = name
        self.n_rows = n_rows
        self.variables: Composite | None = None

    def link_variables(self, variables: Composite) -> None:
        self.variables = variables
        self.init_variable_dependent_quantities(variables)

    def init_variable_dependent_quantities(self, variables: Composite) -> None:
        """Record the variables; subclasses extend this to fetch what they need."""
        self.variables = variables

    def _linked_variables(self) -> Composite:
        if self.variables is None:
            raise RuntimeError(f"constraint {self.name!r} is not linked to variables")
        return self.variables

    @abstractmethod
    def values(self) -> np.ndarray:
        """Current constraint values."""

    @abstractmethod
    def bounds(self) -> list[Bounds]:
        """Bounds of every constraint row."""

    def jacobian_block(self, var_set: str, n_cols: int) -> np.ndarray:
        """Derivative of the constraint values with respect to one variable set."""
        return np.zeros((self.n_rows, n_cols))

    def jacobian(self) -> np.ndarray:
        variables = self._linked_variables()
        blocks = [self.jacobian_block(c.name, c.n_rows) for c in variables.components()]
        if not blocks:
            return np.zeros((self.n_rows, 0))
        return np.hstack(blocks)


class CostTerm(ConstraintSet):
    """A scalar cost, seen as a single unbounded constraint row."""

    def __init__(self, name: str) -> None:
        super().__init__(1, name)

    @abstractmethod
    def cost(self) -> float:
        """Current scalar cost."""

    def values(self) -> np.ndarray:
        return np.array([self.cost()])

    def bounds(self) -> list[Bounds]:
        return [NO_BOUND]


class LinearEqualityConstraint(ConstraintSet):
    """Enforces M*x + v = 0 on one variable set."""

    def __init__(self, matrix, vector, variable_name: str) -> None:
        self.matrix = np.atleast_2d(np.asarray(matrix, dtype=float))
        self.vector = np.asarray(vector, dtype=float)
        super().__init__(self.vector.size, "linear-equality-" + variable_name)
        self.variable_name = variable_name

    def values(self) -> np.ndarray:
        x = self._linked_variables().get(self.variable_name).values()
        return self.matrix @ x

    def bounds(self) -> list[Bounds]:
        return [Bounds(-v, -v) for v in self.vector]

    def jacobian_block(self, var_set: str, n_cols: int) -> np.ndarray:
        if var_set == self.variable_name:
            return self.matrix.copy()
        return np.zeros((self.n_rows, n_cols))


class SoftConstraint(CostTerm):
    """Turns a constraint into a quadratic cost around the middle of its bounds."""

    def __init__(self, constraint: ConstraintSet) -> None:
        super().__init__("soft-" + constraint.name)
        self.constraint = constraint
        self._b = np.array([(b.upper + b.lower) / 2.0 for b in constraint.bounds()])
        self._weights = np.ones(constraint.n_rows)

    def link_variables(self, variables: Composite) -> None:
        self.constraint.link_variables(variables)
        super().link_variables(variables)

    def _deviation(self) -> np.ndarray:
        return self.constraint.values() - self._b

    def cost(self) -> float:
        d = self._deviation()
        return float(0.5 * d @ (self._weights * d))

    def values(self) -> np.ndarray:
        return np.array([self.cost()])

    def jacobian(self) -> np.ndarray:
        jac = self.constraint.jacobian()
        grad = jac.T @ (self._weights * self._deviation())
        return grad.reshape(1, -1)


class JumpDuration(VariableSet):
    """Single positive variable holding the duration of the flight phase."""

    def __init__(self, duration: float) -> None:
        super().__init__(1, "jump_duration")
        self.duration = float(duration)

    def values(self) -> np.ndarray:
        return np.array([self.duration])

    def set_variables(self, x: Sequence[float]) -> None:
        self.duration = float(x[0])

    def bounds(self) -> list[Bounds]:
        return [BOUND_GREATER_ZERO]