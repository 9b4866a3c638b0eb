"""Minimal 2D vector helpers on top of numpy."""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np


def vec2(p: Sequence[float]) -> np.ndarray:
    return np.asarray(p, dtype=float).reshape(2)


def rotate(v: np.ndarray, angle: float) -> np.ndarray:
    """Rotate ``v`` counter-clockwise by ``angle`` radians."""
    c, s = np.cos(angle), np.sin(angle)
    return np.array([v[0] * c - v[1] * s, v[0] * s + v[1] * c])


def unit(v: np.ndarray, epsilon: float) -> np.ndarray | None:
    """Return ``v`` normalised, or ``None`` if its length is below ``epsilon``."""
    length = float(np.hypot(v[0], v[1]))
    if length < epsilon:
        return None
    return v / length


def perpendicular(v: np.ndarray) -> np.ndarray:
    return np.array([-v[1], v[0]])


def point(v: np.ndarray) -> Tuple[float, float]:
    return float(v[0]), float(v[1])


__all__ = ["perpendicular", "point", "rotate", "unit", "vec2"]
