# Created by Matthew Valancy
# Copyright 2026 Valpatel Software LLC
# Licensed under AGPL-3.0 — see LICENSE for details.
"""Vector and quaternion helpers for antenna and sensor geometry.

Quaternions are numpy arrays ``(w, x, y, z)``.  Body-frame vectors
(antenna offsets, pointing vectors) are turned into world-frame vectors
with ``rotate(orientation, v)``.
"""

from __future__ import annotations

import math

import numpy as np

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0])

# Antenna frame reference axis: the pointing vector maps onto +Z
REFERENCE_AXIS = np.array([0.0, 0.0, 1.0])

_EPS = 1e-12


def as_vector(values) -> np.ndarray:
    vec = np.asarray(values, dtype=float)
    if vec.shape != (3,):
        raise ValueError(f"expected a 3-vector, got shape {vec.shape}")
    return vec


def normalize(v: np.ndarray) -> np.ndarray:
    norm = float(np.linalg.norm(v))
    if norm < _EPS:
        return np.zeros_like(v, dtype=float)
    return np.asarray(v, dtype=float) / norm


def quat_from_axis_angle(axis, angle: float) -> np.ndarray:
    axis = normalize(as_vector(axis))
    half = angle / 2.0
    return np.concatenate(([math.cos(half)], axis * math.sin(half)))


def quat_multiply(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    aw, ax, ay, az = a
    bw, bx, by, bz = b
    return np.array([
        aw * bw - ax * bx - ay * by - az * bz,
        aw * bx + ax * bw + ay * bz - az * by,
        aw * by - ax * bz + ay * bw + az * bx,
        aw * bz + ax * by - ay * bx + az * bw,
    ])


def quat_conjugate(q: np.ndarray) -> np.ndarray:
    return np.array([q[0], -q[1], -q[2], -q[3]])


def rotate(q: np.ndarray, v) -> np.ndarray:
    """Rotate vector *v* by unit quaternion *q*."""
    q = np.asarray(q, dtype=float)
    v = as_vector(v)
    u = q[1:]
    w = q[0]
    # v' = v + 2w(u x v) + 2u x (u x v)
    uv = np.cross(u, v)
    return v + 2.0 * w * uv + 2.0 * np.cross(u, uv)


def rotation_between(v1, v2) -> np.ndarray:
    """Quaternion rotating direction *v1* onto direction *v2*."""
    a = normalize(as_vector(v1))
    b = normalize(as_vector(v2))
    dot = float(np.clip(np.dot(a, b), -1.0, 1.0))
    axis = np.cross(a, b)
    if np.linalg.norm(axis) < 1e-9:
        if dot > 0:
            return IDENTITY.copy()
        # Opposite directions: half turn about any axis perpendicular to a
        helper = np.array([1.0, 0.0, 0.0]) if abs(a[0]) < 0.9 else np.array([0.0, 1.0, 0.0])
        return quat_from_axis_angle(np.cross(a, helper), math.pi)
    return quat_from_axis_angle(axis, math.acos(dot))


def body_to_world(position, orientation, offset) -> np.ndarray:
    """World position of a point mounted at *offset* in the body frame."""
    return as_vector(position) + rotate(orientation, offset)


def antenna_angles(direction, pointing, normal=None) -> tuple[float, float]:
    """Azimuth and elevation of *direction* in an antenna frame.

    *pointing* is the frame's +Z (boresight) and *normal*, projected off
    the pointing axis, its +X.  Without a usable normal the frame is the
    shortest rotation taking *pointing* onto +Z.  Azimuth is
    ``atan2(y, x)`` and elevation the angle off boresight,
    ``atan2(hypot(x, y), z)``, so boresight is ``(0, 0)`` and every
    broadside direction has elevation ``pi/2``.
    """
    d = as_vector(direction)
    z = normalize(as_vector(pointing))
    x = None
    if normal is not None:
        n = as_vector(normal)
        x = normalize(n - np.dot(n, z) * z)
    if x is None or not x.any():
        local = normalize(rotate(rotation_between(z, REFERENCE_AXIS), d))
    else:
        y = np.cross(z, x)
        local = normalize(np.array([np.dot(d, x), np.dot(d, y), np.dot(d, z)]))
    azimuth = math.atan2(local[1], local[0])
    elevation = math.atan2(math.hypot(local[0], local[1]), local[2])
    return azimuth, elevation
