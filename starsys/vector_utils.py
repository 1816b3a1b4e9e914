#!/usr/bin/env python3
"""
Vector helper functions for 2D operations.

These are small, fast functions for vector math used throughout the engines.
Vectors are plain (x, y) tuples.
"""
import math
from typing import Tuple

from .constants import TWO_PI

Vec2 = Tuple[float, float]


def clamp(x: float, a: float, b: float) -> float:
    """Clamp x to the inclusive range [a, b]."""
    return max(a, min(b, x))


def vec_add(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] + b[0], a[1] + b[1])


def vec_sub(a: Vec2, b: Vec2) -> Vec2:
    return (a[0] - b[0], a[1] - b[1])


def vec_scale(a: Vec2, s: float) -> Vec2:
    return (a[0] * s, a[1] * s)


def vec_len(a: Vec2) -> float:
    return math.hypot(a[0], a[1])


def vec_norm(a: Vec2, min_len: float = 0.0) -> Tuple[Vec2, float]:
    """
    Return (unit vector, length). The length is floored at min_len, so a
    zero vector with min_len > 0 yields a zero unit vector and min_len.
    """
    l = vec_len(a)
    if l == 0:
        return (0.0, 0.0), min_len
    l = max(l, min_len)
    return (a[0] / l, a[1] / l), l


def vec_perp(a: Vec2) -> Vec2:
    """Rotate by +90 degrees."""
    return (-a[1], a[0])


def vec_rotate(a: Vec2, angle: float) -> Vec2:
    c, s = math.cos(angle), math.sin(angle)
    return (a[0] * c - a[1] * s, a[0] * s + a[1] * c)


def vec_lerp_weighted(a: Vec2, wa: float, b: Vec2, wb: float) -> Vec2:
    """Weighted average of two vectors; weights need not sum to one."""
    total = wa + wb
    if total <= 0:
        return a
    return ((a[0] * wa + b[0] * wb) / total, (a[1] * wa + b[1] * wb) / total)


def wrap_angle(theta: float) -> float:
    """Normalise an angle into [0, 2*pi)."""
    return theta % TWO_PI
