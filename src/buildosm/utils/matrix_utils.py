from __future__ import annotations

#Import standard libraries
import logging
import math
from typing import Optional, Sequence

import numpy as np


# Set up logging
log = logging.getLogger(__name__)

FULL_TURN = 2.0 * math.pi


# ---------------- Angle helpers ----------------

def angle_between_vectors(a: Sequence[float], b: Sequence[float]) -> Optional[float]:
    """Unsigned angle (radians) between two 2D/3D vectors.

    Uses ``acos(dot / (|a| |b|))``. A 2D vector is compared against a 3D one by
    padding it with z=0. The cosine is clamped to [-1, 1] so nearly parallel
    unit vectors do not produce NaN through rounding.

    Returns ``None`` when either vector has zero length.
    """
    ax = np.asarray(a, dtype=float).ravel()[:3]
    bx = np.asarray(b, dtype=float).ravel()[:3]
    va = np.zeros(3, dtype=float)
    vb = np.zeros(3, dtype=float)
    va[: ax.shape[0]] = ax
    vb[: bx.shape[0]] = bx
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm <= 1e-12:
        return None
    cosine = float(np.dot(va, vb)) / norm
    return math.acos(max(-1.0, min(1.0, cosine)))


def wrap_angle(angle: float) -> float:
    """Bring an accumulated angle back into [-2π, 2π].

    This is a wraparound, not a reduction into [0, 2π): values already inside
    the closed range are returned untouched, including negative ones.
    """
    while angle > FULL_TURN:
        angle -= FULL_TURN
    while angle < -FULL_TURN:
        angle += FULL_TURN
    return angle


# ---------------- Matrix helpers ----------------

def rotation_about_z(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array(
        [
            [c, -s, 0.0],
            [s, c, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=float,
    )


def rotation_about_y(angle: float) -> np.ndarray:
    c, s = math.cos(angle), math.sin(angle)
    return np.array(
        [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ],
        dtype=float,
    )


def rotate_points(points, matrix: Optional[np.ndarray]) -> np.ndarray:
    """Apply a 3×3 rotation to an (n, 3) point array; ``None`` leaves points as-is."""
    arr = np.asarray(points, dtype=float).reshape(-1, 3)
    if matrix is None:
        return arr.copy()
    mat = np.asarray(matrix, dtype=float).reshape(3, 3)
    return arr @ mat.T


__all__ = [
    "FULL_TURN",
    "angle_between_vectors",
    "rotate_points",
    "rotation_about_y",
    "rotation_about_z",
    "wrap_angle",
]
