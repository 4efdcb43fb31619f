"""Durations of alternating contact and swing phases as optimization variables."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Iterable, Sequence

import numpy as np

from .optimization import Bounds, VariableSet
from .spline import Spline


def schedule_variable_name(ee: int) -> str:
    """Name of the variable set holding the contact schedule of one endeffector."""
    return f"ee-schedule_{ee}"


class PhaseDurationsObserver(ABC):
    """Something that must be refreshed whenever the phase durations change."""

    def __init__(self, subject: "PhaseDurations") -> None:
        self.phase_durations = subject
        subject.add_observer(self)

    @abstractmethod
    def update_polynomial_durations(self) -> None:
        """Called by the subject after its durations changed."""


class PhaseDurations(VariableSet):
    """Phase durations of one endeffector; the last one fills up the total time."""

    def __init__(
        self,
        ee: int,
        timings: Sequence[float],
        is_first_phase_in_contact: bool,
        min_duration: float,
        max_duration: float,
    ) -> None:
        # the last duration is not a variable, it follows from the total time
        super().__init__(len(timings) - 1, schedule_variable_name(ee))
        self._durations = [float(d) for d in timings]
        self._t_total = math.fsum(self._durations)
        self._phase_duration_bounds = Bounds(min_duration, max_duration)
        self._initial_contact_state = bool(is_first_phase_in_contact)
        self._observers: list[PhaseDurationsObserver] = []

    def add_observer(self, observer: PhaseDurationsObserver) -> None:
        self._observers.append(observer)

    def update_observers(self) -> None:
        for observer in self._observers:
            observer.update_polynomial_durations()

    def values(self) -> np.ndarray:
        return np.array(self._durations[: self.n_rows], dtype=float)

    def set_variables(self, x: Iterable[float]) -> None:
        x = np.asarray(x, dtype=float)
        if x.shape != (self.n_rows,):
            raise ValueError(
                f"variable set {self.name!r} expects {self.n_rows} values, got {x.size}"
            )
        total = math.fsum(x)
        if not self._t_total > total:
            raise ValueError(
                f"phase durations sum to {total}, which is not below the total time {self._t_total}"
            )
        self._durations[: self.n_rows] = [float(v) for v in x]
        self._durations[-1] = self._t_total - total
        self.update_observers()

    def bounds(self) -> list[Bounds]:
        return [self._phase_duration_bounds] * self.n_rows

    def phase_durations(self) -> list[float]:
        return list(self._durations)

    def is_contact_phase(self, t: float) -> bool:
        phase_id = Spline.segment_id(t, self._durations)
        if phase_id % 2 == 0:
            return self._initial_contact_state
        return not self._initial_contact_state

    def jacobian_of_pos(self, current_phase: int, dx_dt, xd) -> np.ndarray:
        """Derivative of a position in current_phase with respect to the durations."""
        dx_dt = np.asarray(dx_dt, dtype=float)
        xd = np.asarray(xd, dtype=float)
        jac = np.zeros((xd.size, self.n_rows))
        in_last_phase = current_phase == len(self._durations) - 1

        # the current phase stretches or compresses its own polynomials
        if not in_last_phase:
            jac[:, current_phase] = dx_dt

        for phase in range(current_phase):
            # earlier durations shift the spline along the time axis
            jac[:, phase] = -xd
            # with a fixed final time they also compress the last phase
            if in_last_phase:
                jac[:, phase] -= dx_dt

        return jac