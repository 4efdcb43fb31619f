"""Euler ZYX angles: rotation matrices, angular velocities and their derivatives."""

from __future__ import annotations

import math

import numpy as np

from .node_spline import NodeSpline
from .polynomial import Dx

_X, _Y, _Z = 0, 1, 2


def rotation_matrix_base_to_world(xyz) -> np.ndarray:
    """Rotation matrix of Euler ZYX angles given as (roll, pitch, yaw)."""
    x, y, z = (float(a) for a in xyz)
    cx, sx = math.cos(x), math.sin(x)
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)
    return np.array([
        [cy * cz, cz * sx * sy - cx * sz, sx * sz + cx * cz * sy],
        [cy * sz, cx * cz + sx * sy * sz, cx * sy * sz - cz * sx],
        [-sy, cy * sx, cx * cy],
    ])


def _quaternion_from_matrix(m: np.ndarray) -> np.ndarray:
    trace = m[0, 0] + m[1, 1] + m[2, 2]
    if trace > 0.0:
        t = math.sqrt(trace + 1.0)
        w = 0.5 * t
        t = 0.5 / t
        return np.array([
            w,
            (m[2, 1] - m[1, 2]) * t,
            (m[0, 2] - m[2, 0]) * t,
            (m[1, 0] - m[0, 1]) * t,
        ])
    i = int(np.argmax(np.diag(m)))
    j = (i + 1) % 3
    k = (j + 1) % 3
    t = math.sqrt(m[i, i] - m[j, j] - m[k, k] + 1.0)
    vec = np.zeros(3)
    vec[i] = 0.5 * t
    t = 0.5 / t
    w = (m[k, j] - m[j, k]) * t
    vec[j] = (m[j, i] + m[i, j]) * t
    vec[k] = (m[k, i] + m[i, k]) * t
    return np.array([w, *vec])


def quaternion_base_to_world(xyz) -> np.ndarray:
    """Unit quaternion (w, x, y, z) of Euler ZYX angles."""
    return _quaternion_from_matrix(rotation_matrix_base_to_world(xyz))


def euler_rates_matrix(xyz) -> np.ndarray:
    """Matrix that maps Euler ZYX rates to the angular velocity in world frame."""
    y, z = float(xyz[_Y]), float(xyz[_Z])
    m = np.zeros((3, 3))
    m[0, _Y] = -math.sin(z)
    m[0, _X] = math.cos(y) * math.cos(z)
    m[1, _Y] = math.cos(z)
    m[1, _X] = math.cos(y) * math.sin(z)
    m[2, _Z] = 1.0
    m[2, _X] = -math.sin(y)
    return m


def euler_rates_matrix_dot(xyz, xyz_d) -> np.ndarray:
    """Time derivative of the Euler rates matrix."""
    y, z = float(xyz[_Y]), float(xyz[_Z])
    yd, zd = float(xyz_d[_Y]), float(xyz_d[_Z])
    cy, sy = math.cos(y), math.sin(y)
    cz, sz = math.cos(z), math.sin(z)
    m = np.zeros((3, 3))
    m[0, _Y] = -cz * zd
    m[0, _X] = -cz * sy * yd - cy * sz * zd
    m[1, _Y] = -sz * zd
    m[1, _X] = cy * cz * zd - sy * sz * yd
    m[2, _X] = -cy * yd
    return m


def angular_velocity_in_world(pos, vel) -> np.ndarray:
    return euler_rates_matrix(pos) @ np.asarray(vel, dtype=float)


def angular_acceleration_in_world(pos, vel, acc) -> np.ndarray:
    vel = np.asarray(vel, dtype=float)
    acc = np.asarray(acc, dtype=float)
    return euler_rates_matrix_dot(pos, vel) @ vel + euler_rates_matrix(pos) @ acc


class EulerConverter:
    """Orientation quantities of a spline of Euler angles and their node derivatives."""

    def __init__(self, euler: NodeSpline) -> None:
        self.euler = euler
        self._n = euler.node_variables_count()

    def _zeros(self) -> np.ndarray:
        return np.zeros((3, self._n))

    def quaternion_base_to_world(self, t: float) -> np.ndarray:
        return quaternion_base_to_world(self.euler.point(t).p())

    def rotation_matrix_base_to_world(self, t: float) -> np.ndarray:
        return rotation_matrix_base_to_world(self.euler.point(t).p())

    def angular_velocity_in_world(self, t: float) -> np.ndarray:
        ori = self.euler.point(t)
        return angular_velocity_in_world(ori.p(), ori.v())

    def angular_acceleration_in_world(self, t: float) -> np.ndarray:
        ori = self.euler.point(t)
        return angular_acceleration_in_world(ori.p(), ori.v(), ori.a())

    def deriv_of_ang_vel_wrt_euler_nodes(self, t: float) -> np.ndarray:
        ori = self.euler.point(t)
        vel = ori.v()
        d_vel = self.euler.jacobian_wrt_nodes(t, Dx.VEL)
        m = euler_rates_matrix(ori.p())
        return np.stack([
            vel @ self._deriv_m_wrt_nodes(t, dim) + m[dim] @ d_vel
            for dim in (_X, _Y, _Z)
        ])

    def deriv_of_ang_acc_wrt_euler_nodes(self, t: float) -> np.ndarray:
        ori = self.euler.point(t)
        vel, acc = ori.v(), ori.a()
        d_vel = self.euler.jacobian_wrt_nodes(t, Dx.VEL)
        d_acc = self.euler.jacobian_wrt_nodes(t, Dx.ACC)
        m = euler_rates_matrix(ori.p())
        m_dot = euler_rates_matrix_dot(ori.p(), vel)
        return np.stack([
            vel @ self._deriv_mdot_wrt_nodes(t, dim)
            + m_dot[dim] @ d_vel
            + acc @ self._deriv_m_wrt_nodes(t, dim)
            + m[dim] @ d_acc
            for dim in (_X, _Y, _Z)
        ])

    def deriv_of_rot_vec_mult(self, t: float, v, inverse: bool) -> np.ndarray:
        """Derivative of R*v (or R^T*v if inverse) with respect to the nodes."""
        rd = self.derivative_of_rotation_matrix_wrt_nodes(t)
        if inverse:
            # the inverse of a rotation matrix is its transpose
            rd = rd.transpose(1, 0, 2)
        return np.einsum("rcn,c->rn", rd, np.asarray(v, dtype=float))

    def derivative_of_rotation_matrix_wrt_nodes(self, t: float) -> np.ndarray:
        """Array (row, col, node variable) of derivatives of each matrix entry."""
        x, y, z = self.euler.point(t).p()
        jac_pos = self.euler.jacobian_wrt_nodes(t, Dx.POS)
        jx, jy, jz = jac_pos[_X], jac_pos[_Y], jac_pos[_Z]
        cx, sx = math.cos(x), math.sin(x)
        cy, sy = math.cos(y), math.sin(y)
        cz, sz = math.cos(z), math.sin(z)

        jac = np.zeros((3, 3, self._n))
        jac[_X, _X] = -cz * sy * jy - cy * sz * jz
        jac[_X, _Y] = (sx * sz * jx - cx * cz * jz - sx * sy * sz * jz
                       + cx * cz * sy * jx + cy * cz * sx * jy)
        jac[_X, _Z] = (cx * sz * jx + cz * sx * jz - cz * sx * sy * jx
                       - cx * sy * sz * jz + cx * cy * cz * jy)

        jac[_Y, _X] = cy * cz * jz - sy * sz * jy
        jac[_Y, _Y] = (cx * sy * sz * jx - cx * sz * jz - cz * sx * jx
                       + cy * sx * sz * jy + cz * sx * sy * jz)
        jac[_Y, _Z] = (sx * sz * jz - cx * cz * jx - sx * sy * sz * jx
                       + cx * cy * sz * jy + cx * cz * sy * jz)

        jac[_Z, _X] = -cy * jy
        jac[_Z, _Y] = cx * cy * jx - sx * sy * jy
        jac[_Z, _Z] = -cy * sx * jx - cx * sy * jy
        return jac

    def _deriv_m_wrt_nodes(self, t: float, row: int) -> np.ndarray:
        """Derivative of one row of M; result row c holds d M[row, c] / d nodes."""
        p = self.euler.point(t).p()
        y, z = p[_Y], p[_Z]
        jac_pos = self.euler.jacobian_wrt_nodes(t, Dx.POS)
        jy, jz = jac_pos[_Y], jac_pos[_Z]
        cy, sy = math.cos(y), math.sin(y)
        cz, sz = math.cos(z), math.sin(z)

        jac = self._zeros()
        if row == _X:
            jac[_Y] = -cz * jz
            jac[_X] = -cz * sy * jy - cy * sz * jz
        elif row == _Y:
            jac[_Y] = -sz * jz
            jac[_X] = cy * cz * jz - sy * sz * jy
        elif row == _Z:
            jac[_X] = -cy * jy
        else:
            raise ValueError(f"dimension {row} does not exist")
        return jac

    def _deriv_mdot_wrt_nodes(self, t: float, row: int) -> np.ndarray:
        """Derivative of one row of M-dot with respect to the nodes."""
        ori = self.euler.point(t)
        y, z = ori.p()[_Y], ori.p()[_Z]
        yd, zd = ori.v()[_Y], ori.v()[_Z]
        jac_pos = self.euler.jacobian_wrt_nodes(t, Dx.POS)
        jac_vel = self.euler.jacobian_wrt_nodes(t, Dx.VEL)
        jy, jz = jac_pos[_Y], jac_pos[_Z]
        jyd, jzd = jac_vel[_Y], jac_vel[_Z]
        cy, sy = math.cos(y), math.sin(y)
        cz, sz = math.cos(z), math.sin(z)

        jac = self._zeros()
        if row == _X:
            jac[_Y] = sz * zd * jz - cz * jzd
            jac[_X] = (sy * sz * yd * jz - cy * sz * jzd - cy * cz * yd * jy
                       - cy * cz * zd * jz - cz * sy * jyd + sy * sz * jy * zd)
        elif row == _Y:
            jac[_Y] = -sz * jzd - cz * zd * jz
            jac[_X] = (cy * cz * jzd - sy * sz * jyd - cy * sz * yd * jy
                       - cz * sy * yd * jz - cz * sy * jy * zd - cy * sz * zd * jz)
        elif row == _Z:
            jac[_X] = sy * yd * jy - cy * jyd
        else:
            raise ValueError(f"dimension {row} does not exist")
        return jac