"""Settings that shape the trajectory optimization problem."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum, auto


class ConstraintName(Enum):
    DYNAMIC = auto()
    ENDEFFECTOR_ROM = auto()
    TOTAL_TIME = auto()
    TERRAIN = auto()
    FORCE = auto()
    SWING = auto()
    BASE_ROM = auto()
    BASE_ACC = auto()


class CostName(Enum):
    FORCES_COST = auto()
    EE_MOTION_COST = auto()


def _default_constraints() -> list[ConstraintName]:
    return [
        ConstraintName.TERRAIN,
        ConstraintName.DYNAMIC,
        ConstraintName.BASE_ACC,
        ConstraintName.ENDEFFECTOR_ROM,
        ConstraintName.FORCE,
        ConstraintName.SWING,
    ]


@dataclass
class Parameters:
    """Discretization, constraint and cost choices of the optimization."""

    duration_base_polynomial: float = 0.1
    force_polynomials_per_stance_phase: int = 10
    ee_polynomials_per_swing_phase: int = 2
    force_limit_in_normal_direction: float = 250.0
    dt_constraint_range_of_motion: float = 0.08
    dt_constraint_dynamic: float = 0.1
    dt_constraint_base_motion: float = 0.1 / 4.0
    bound_phase_duration: tuple[float, float] = (0.2, 4.0)
    constraints: list[ConstraintName] = field(default_factory=_default_constraints)
    costs: list[tuple[CostName, float]] = field(default_factory=list)
    bounds_final_lin_pos: list[int] = field(default_factory=lambda: [0, 1])
    bounds_final_lin_vel: list[int] = field(default_factory=lambda: [0, 1, 2])
    bounds_final_ang_pos: list[int] = field(default_factory=lambda: [0, 1, 2])
    bounds_final_ang_vel: list[int] = field(default_factory=lambda: [0, 1, 2])
    ee_phase_durations: list[list[float]] = field(default_factory=list)
    ee_in_contact_at_start: list[bool] = field(default_factory=list)

    def optimize_phase_durations(self) -> None:
        """Optimize the phase durations by constraining only their total."""
        self.constraints.append(ConstraintName.TOTAL_TIME)

    def base_poly_durations(self) -> list[float]:
        dt = self.duration_base_polynomial
        t_left = self.total_time()
        eps = 1e-10  # repeated subtraction is inexact
        durations = []
        while t_left > eps:
            durations.append(dt if t_left > dt else t_left)
            t_left -= dt
        return durations

    def phase_count(self, ee: int) -> int:
        return len(self.ee_phase_durations[ee])

    def ee_count(self) -> int:
        return len(self.ee_in_contact_at_start)

    def total_time(self) -> float:
        totals = [math.fsum(d) for d in self.ee_phase_durations]
        if not totals:
            return 0.0
        reference = totals[0]
        if any(abs(t - reference) >= 1e-6 for t in totals):
            raise ValueError("phase durations of all endeffectors must sum to the same time")
        return reference

    def is_optimize_timings(self) -> bool:
        return ConstraintName.TOTAL_TIME in self.constraints