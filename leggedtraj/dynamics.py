"""Rigid-body dynamics of the robot base driven by endeffector forces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np

GRAVITY = 9.80665

# rows of the 6D base quantities: angular part first, then linear part
_AX = slice(0, 3)
_LX = slice(3, 6)


def build_inertia_tensor(ixx: float, iyy: float, izz: float,
                         ixy: float, ixz: float, iyz: float) -> np.ndarray:
    """Inertia tensor from its moments and products of inertia."""
    return np.array([
        [ixx, -ixy, -ixz],
        [-ixy, iyy, -iyz],
        [-ixz, -iyz, izz],
    ], dtype=float)


def cross_matrix(v) -> np.ndarray:
    """Matrix X(v) such that v x w = X(v) @ w."""
    x, y, z = (float(c) for c in v)
    return np.array([
        [0.0, -z, y],
        [z, 0.0, -x],
        [-y, x, 0.0],
    ])


class DynamicModel(ABC):
    """State of the base and endeffectors from which dynamic violations follow."""

    def __init__(self, mass: float, ee_count: int) -> None:
        self.mass = float(mass)
        self.gravity = GRAVITY
        self.com_pos = np.zeros(3)
        self.com_acc = np.zeros(3)
        self.w_R_b = np.eye(3)
        self.omega = np.zeros(3)
        self.omega_dot = np.zeros(3)
        self.ee_force = [np.zeros(3) for _ in range(ee_count)]
        self.ee_pos = [np.zeros(3) for _ in range(ee_count)]

    @property
    def ee_count(self) -> int:
        return len(self.ee_pos)

    def set_current(self, com_pos, com_acc, w_R_b, omega, omega_dot,
                    ee_force: Sequence, ee_pos: Sequence) -> None:
        """Set the current state, all quantities expressed in world frame."""
        self.com_pos = np.asarray(com_pos, dtype=float).copy()
        self.com_acc = np.asarray(com_acc, dtype=float).copy()
        self.w_R_b = np.asarray(w_R_b, dtype=float).copy()
        self.omega = np.asarray(omega, dtype=float).copy()
        self.omega_dot = np.asarray(omega_dot, dtype=float).copy()
        self.ee_force = [np.asarray(f, dtype=float).copy() for f in ee_force]
        self.ee_pos = [np.asarray(p, dtype=float).copy() for p in ee_pos]

    @abstractmethod
    def dynamic_violation(self) -> np.ndarray:
        """Six residuals (angular, then linear) that are zero when dynamics hold."""

    @abstractmethod
    def jacobian_wrt_base_lin(self, jac_pos_base_lin, jac_acc_base_lin) -> np.ndarray:
        """Derivative of the violation with respect to the linear base variables."""

    @abstractmethod
    def jacobian_wrt_base_ang(self, base_euler, t: float) -> np.ndarray:
        """Derivative of the violation with respect to the angular base variables."""

    @abstractmethod
    def jacobian_wrt_force(self, jac_force, ee: int) -> np.ndarray:
        """Derivative of the violation with respect to one endeffector's forces."""

    @abstractmethod
    def jacobian_wrt_ee_pos(self, jac_ee_pos, ee: int) -> np.ndarray:
        """Derivative of the violation with respect to one endeffector's position."""


class SingleRigidBodyDynamics(DynamicModel):
    """Newton-Euler equations of a single rigid body with constant inertia."""

    def __init__(self, mass: float, inertia_b, ee_count: int) -> None:
        super().__init__(mass, ee_count)
        self.inertia_b = np.asarray(inertia_b, dtype=float).copy()

    @classmethod
    def from_inertia_components(cls, mass: float, ixx: float, iyy: float, izz: float,
                                ixy: float, ixz: float, iyz: float,
                                ee_count: int) -> "SingleRigidBodyDynamics":
        return cls(mass, build_inertia_tensor(ixx, iyy, izz, ixy, ixz, iyz), ee_count)

    def _inertia_world(self) -> np.ndarray:
        return self.w_R_b @ self.inertia_b @ self.w_R_b.T

    def dynamic_violation(self) -> np.ndarray:
        f_sum = np.zeros(3)
        tau_sum = np.zeros(3)
        for f, p in zip(self.ee_force, self.ee_pos):
            tau_sum += np.cross(f, self.com_pos - p)
            f_sum += f

        i_w = self._inertia_world()
        acc = np.zeros(6)
        acc[_AX] = i_w @ self.omega_dot + np.cross(self.omega, i_w @ self.omega) - tau_sum
        acc[_LX] = (self.mass * self.com_acc - f_sum
                    - np.array([0.0, 0.0, -self.mass * self.gravity]))
        return acc

    def jacobian_wrt_base_lin(self, jac_pos_base_lin, jac_acc_base_lin) -> np.ndarray:
        jac_pos = np.asarray(jac_pos_base_lin, dtype=float)
        jac_acc = np.asarray(jac_acc_base_lin, dtype=float)
        n = jac_pos.shape[1]

        jac_tau_sum = np.zeros((3, n))
        for f in self.ee_force:
            jac_tau_sum += cross_matrix(f) @ jac_pos

        jac = np.zeros((6, n))
        jac[_AX] = -jac_tau_sum
        jac[_LX] = self.mass * jac_acc
        return jac

    def jacobian_wrt_base_ang(self, base_euler, t: float) -> np.ndarray:
        i_b = self.inertia_b
        r = self.w_R_b
        i_w = self._inertia_world()

        # derivative of R*I_b*R^T*wd by the product rule
        v11 = i_b @ r.T @ self.omega_dot
        jac11 = base_euler.deriv_of_rot_vec_mult(t, v11, False)
        jac12 = r @ i_b @ base_euler.deriv_of_rot_vec_mult(t, self.omega_dot, True)
        jac_ang_acc = base_euler.deriv_of_ang_acc_wrt_euler_nodes(t)
        jac13 = i_w @ jac_ang_acc
        jac1 = jac11 + jac12 + jac13

        # derivative of w x (I_w*w)
        v21 = i_b @ r.T @ self.omega
        jac21 = base_euler.deriv_of_rot_vec_mult(t, v21, False)
        jac22 = r @ i_b @ base_euler.deriv_of_rot_vec_mult(t, self.omega, True)
        jac_ang_vel = base_euler.deriv_of_ang_vel_wrt_euler_nodes(t)
        jac23 = i_w @ jac_ang_vel
        jac2 = (cross_matrix(self.omega) @ (jac21 + jac22 + jac23)
                - cross_matrix(i_w @ self.omega) @ jac_ang_vel)

        jac = np.zeros((6, jac_ang_vel.shape[1]))
        jac[_AX] = jac1 + jac2
        return jac

    def jacobian_wrt_force(self, jac_force, ee: int) -> np.ndarray:
        jac_force = np.asarray(jac_force, dtype=float)
        r = self.com_pos - self.ee_pos[ee]
        jac_tau = -cross_matrix(r) @ jac_force

        jac = np.zeros((6, jac_force.shape[1]))
        jac[_AX] = -jac_tau
        jac[_LX] = -jac_force
        return jac

    def jacobian_wrt_ee_pos(self, jac_ee_pos, ee: int) -> np.ndarray:
        jac_ee_pos = np.asarray(jac_ee_pos, dtype=float)
        jac_tau = cross_matrix(self.ee_force[ee]) @ (-jac_ee_pos)

        # the linear dynamics do not depend on where the endeffectors are
        jac = np.zeros((6, jac_ee_pos.shape[1]))
        jac[_AX] = -jac_tau
        return jac