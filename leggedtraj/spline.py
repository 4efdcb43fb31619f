"""Piecewise cubic Hermite splines over consecutive time intervals."""

from __future__ import annotations

import math
from typing import Sequence

from .polynomial import CubicHermitePolynomial, State


class Spline:
    """A sequence of cubic Hermite polynomials joined end to end in time."""

    def __init__(self, poly_durations: Sequence[float], n_dim: int) -> None:
        self.cubic_polys: list[CubicHermitePolynomial] = []
        for duration in poly_durations:
            poly = CubicHermitePolynomial(n_dim)
            poly.set_duration(duration)
            self.cubic_polys.append(poly)
        self.update_polynomial_coeff()

    @staticmethod
    def segment_id(t_global: float, durations: Sequence[float]) -> int:
        """Index of the segment holding t_global; at junctions the earlier one."""
        eps = 1e-10
        if t_global < 0.0:
            raise ValueError("global time must not be negative")
        t = 0.0
        for i, d in enumerate(durations):
            t += d
            if t >= t_global - eps:
                return i
        raise ValueError(f"time {t_global} lies beyond the last segment")

    def local_time(self, t_global: float, durations: Sequence[float]) -> tuple[int, float]:
        idx = self.segment_id(t_global, durations)
        t_local = t_global
        for d in durations[:idx]:
            t_local -= d
        return idx, t_local

    def point(self, t_global: float) -> State:
        idx, t_local = self.local_time(t_global, self.poly_durations())
        return self.point_in_poly(idx, t_local)

    def point_in_poly(self, poly_id: int, t_local: float) -> State:
        return self.cubic_polys[poly_id].point(t_local)

    def update_polynomial_coeff(self) -> None:
        for poly in self.cubic_polys:
            poly.update_coeff()

    def polynomial_count(self) -> int:
        return len(self.cubic_polys)

    def poly_durations(self) -> list[float]:
        return [p.duration for p in self.cubic_polys]

    def total_time(self) -> float:
        return math.fsum(self.poly_durations())