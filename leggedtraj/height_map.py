"""Terrain described by a height over the ground plane, and example terrains."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import Sequence

import numpy as np

_X, _Y, _Z = 0, 1, 2

# step of the central differences used for the default mixed/yy curvatures
_STEP = 1e-6


class Direction(Enum):
    """Basis vectors of the terrain surface."""

    NORMAL = auto()
    TANGENT1 = auto()
    TANGENT2 = auto()


class HeightMap(ABC):
    """Terrain height h(x, y) with derivatives, normals and tangents."""

    def __init__(self, friction_coeff: float = 0.5) -> None:
        self.friction_coeff = float(friction_coeff)

    @abstractmethod
    def height(self, x: float, y: float) -> float:
        """Height of the terrain at (x, y)."""

    def height_deriv_wrt_x(self, x: float, y: float) -> float:
        return 0.0

    def height_deriv_wrt_y(self, x: float, y: float) -> float:
        return 0.0

    def height_deriv_wrt_xx(self, x: float, y: float) -> float:
        return 0.0

    def height_deriv_wrt_xy(self, x: float, y: float) -> float:
        """Change of dh/dx along y, by central difference."""
        ahead = self.height_deriv_wrt_x(x, y + _STEP)
        behind = self.height_deriv_wrt_x(x, y - _STEP)
        return (ahead - behind) / (2.0 * _STEP)

    def height_deriv_wrt_yx(self, x: float, y: float) -> float:
        """Mixed second derivative; equal to the xy one for smooth terrain."""
        return self.height_deriv_wrt_xy(x, y)

    def height_deriv_wrt_yy(self, x: float, y: float) -> float:
        """Change of dh/dy along y, by central difference."""
        ahead = self.height_deriv_wrt_y(x, y + _STEP)
        behind = self.height_deriv_wrt_y(x, y - _STEP)
        return (ahead - behind) / (2.0 * _STEP)

    def derivative_of_height_wrt(self, dim: int, x: float, y: float) -> float:
        if dim == _X:
            return self.height_deriv_wrt_x(x, y)
        if dim == _Y:
            return self.height_deriv_wrt_y(x, y)
        raise ValueError(f"derivative with respect to dimension {dim} not defined")

    def second_derivative_of_height_wrt(self, dim1: int, dim2: int, x: float, y: float) -> float:
        table = {
            (_X, _X): self.height_deriv_wrt_xx,
            (_X, _Y): self.height_deriv_wrt_xy,
            (_Y, _X): self.height_deriv_wrt_yx,
            (_Y, _Y): self.height_deriv_wrt_yy,
        }
        try:
            return table[(dim1, dim2)](x, y)
        except KeyError:
            raise ValueError(
                f"second derivative with respect to {dim1}, {dim2} not defined"
            ) from None

    def basis(self, direction: Direction, x: float, y: float,
              deriv: Sequence[int] = ()) -> np.ndarray:
        """Basis vector, or its derivative along deriv[0] if deriv is not empty."""
        deriv = tuple(deriv)
        if direction is Direction.NORMAL:
            return self._normal(x, y, deriv)
        if direction is Direction.TANGENT1:
            return self._tangent1(x, y, deriv)
        if direction is Direction.TANGENT2:
            return self._tangent2(x, y, deriv)
        raise ValueError(f"basis {direction!r} does not exist")

    def normalized_basis(self, direction: Direction, x: float, y: float) -> np.ndarray:
        v = self.basis(direction, x, y)
        return v / np.linalg.norm(v)

    def derivative_of_normalized_basis_wrt(self, direction: Direction, dim: int,
                                           x: float, y: float) -> np.ndarray:
        inner = self.basis(direction, x, y, (dim,))
        v = self.basis(direction, x, y)
        outer = self._derivative_of_normalized_vector_wrt_index(v, dim)
        return outer * inner

    def _slope(self, dim: int, x: float, y: float, deriv: tuple) -> float:
        if not deriv:
            return self.derivative_of_height_wrt(dim, x, y)
        return self.second_derivative_of_height_wrt(dim, deriv[0], x, y)

    def _normal(self, x: float, y: float, deriv: tuple) -> np.ndarray:
        return np.array([
            -self._slope(_X, x, y, deriv),
            -self._slope(_Y, x, y, deriv),
            0.0 if deriv else 1.0,
        ])

    def _tangent1(self, x: float, y: float, deriv: tuple) -> np.ndarray:
        return np.array([0.0 if deriv else 1.0, 0.0, self._slope(_X, x, y, deriv)])

    def _tangent2(self, x: float, y: float, deriv: tuple) -> np.ndarray:
        return np.array([0.0, 0.0 if deriv else 1.0, self._slope(_Y, x, y, deriv)])

    @staticmethod
    def _derivative_of_normalized_vector_wrt_index(v: np.ndarray, idx: int) -> np.ndarray:
        norm = np.linalg.norm(v)
        unit = np.zeros(v.size)
        unit[idx] = 1.0
        return (norm * unit - v[idx] * v / norm) / norm**2


class FlatGround(HeightMap):
    """Level ground at a constant height."""

    def __init__(self, height: float = 0.0) -> None:
        super().__init__()
        self._height = float(height)

    def height(self, x: float, y: float) -> float:
        return self._height


class Block(HeightMap):
    """A raised block reached by a very steep ramp."""

    def __init__(self, block_start: float = 0.7, length: float = 3.5,
                 height: float = 0.5, eps: float = 0.03) -> None:
        super().__init__()
        self.block_start = block_start
        self.length = length
        self.block_height = height
        self.eps = eps
        self.slope = height / eps

    def height(self, x: float, y: float) -> float:
        h = 0.0
        if self.block_start <= x <= self.block_start + self.eps:
            h = self.slope * (x - self.block_start)
        if self.block_start + self.eps <= x <= self.block_start + self.length:
            h = self.block_height
        return h

    def height_deriv_wrt_x(self, x: float, y: float) -> float:
        if self.block_start <= x <= self.block_start + self.eps:
            return self.slope
        return 0.0


class Stairs(HeightMap):
    """Two steps up, a flat top, then back down to the ground."""

    def __init__(self, first_step_start: float = 1.0, first_step_width: float = 0.4,
                 height_first_step: float = 0.2, height_second_step: float = 0.4,
                 width_top: float = 1.0) -> None:
        super().__init__()
        self.first_step_start = first_step_start
        self.first_step_width = first_step_width
        self.height_first_step = height_first_step
        self.height_second_step = height_second_step
        self.width_top = width_top

    def height(self, x: float, y: float) -> float:
        h = 0.0
        if x >= self.first_step_start:
            h = self.height_first_step
        if x >= self.first_step_start + self.first_step_width:
            h = self.height_second_step
        if x >= self.first_step_start + self.first_step_width + self.width_top:
            h = 0.0
        return h


class Gap(HeightMap):
    """A gap in the ground, modelled as a parabola a*x^2 + b*x + c."""

    def __init__(self, gap_start: float = 1.0, gap_end: float = 1.5,
                 a: float = 24.0, b: float = -60.0, c: float = 36.0) -> None:
        super().__init__()
        self.gap_start = gap_start
        self.gap_end = gap_end
        self.a, self.b, self.c = a, b, c

    def _in_gap(self, x: float) -> bool:
        return self.gap_start <= x <= self.gap_end

    def height(self, x: float, y: float) -> float:
        return self.a * x * x + self.b * x + self.c if self._in_gap(x) else 0.0

    def height_deriv_wrt_x(self, x: float, y: float) -> float:
        return 2 * self.a * x + self.b if self._in_gap(x) else 0.0

    def height_deriv_wrt_xx(self, x: float, y: float) -> float:
        return 2 * self.a if self._in_gap(x) else 0.0


class Slope(HeightMap):
    """A ramp up, a ramp down and then flat ground again."""

    def __init__(self, slope_start: float = 1.0, x_down_start: float = 2.0,
                 x_flat_start: float = 3.0, slope: float = 0.7,
                 height_center: float = 0.7) -> None:
        super().__init__()
        self.slope_start = slope_start
        self.x_down_start = x_down_start
        self.x_flat_start = x_flat_start
        self.slope = slope
        self.height_center = height_center

    def height(self, x: float, y: float) -> float:
        z = 0.0
        if x >= self.slope_start:
            z = self.slope * (x - self.slope_start)
        if x >= self.x_down_start:
            z = self.height_center - self.slope * (x - self.x_down_start)
        if x >= self.x_flat_start:
            z = 0.0
        return z

    def height_deriv_wrt_x(self, x: float, y: float) -> float:
        dzdx = 0.0
        if x >= self.slope_start:
            dzdx = self.slope
        if x >= self.x_down_start:
            dzdx = -self.slope
        if x >= self.x_flat_start:
            dzdx = 0.0
        return dzdx


class Chimney(HeightMap):
    """A section whose ground is inclined sideways."""

    def __init__(self, x_start: float = 1.0, x_end: float = 2.5,
                 y_start: float = 0.5, slope: float = 3.0) -> None:
        super().__init__()
        self.x_start = x_start
        self.x_end = x_end
        self.y_start = y_start
        self.slope = slope

    def height(self, x: float, y: float) -> float:
        if self.x_start <= x <= self.x_end:
            return self.slope * (y - self.y_start)
        return 0.0

    def height_deriv_wrt_y(self, x: float, y: float) -> float:
        return self.slope if self.x_start <= x <= self.x_end else 0.0


class ChimneyLR(HeightMap):
    """Two sections inclined sideways, first to one side and then to the other."""

    def __init__(self, x_start: float = 0.5, x_end1: float = 1.5, x_end2: float = 2.5,
                 y_start: float = 0.5, slope: float = 2.0) -> None:
        super().__init__()
        self.x_start = x_start
        self.x_end1 = x_end1
        self.x_end2 = x_end2
        self.y_start = y_start
        self.slope = slope

    def height(self, x: float, y: float) -> float:
        z = 0.0
        if self.x_start <= x <= self.x_end1:
            z = self.slope * (y - self.y_start)
        if self.x_end1 <= x <= self.x_end2:
            z = -self.slope * (y + self.y_start)
        return z

    def height_deriv_wrt_y(self, x: float, y: float) -> float:
        dzdy = 0.0
        if self.x_start <= x <= self.x_end1:
            dzdy = self.slope
        if self.x_end1 <= x <= self.x_end2:
            dzdy = -self.slope
        return dzdy