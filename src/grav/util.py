# MIT License (see LICENSE)
"""
Utility functions for 3D vector math.

Vectors are numpy float64 arrays of shape (3,). The helpers here guard the
degenerate cases (zero magnitude) so the simulation systems never divide by
zero while normalising or clamping.
"""
from __future__ import annotations

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Lets callers pass tuples/lists for positions and velocities.
    """
    return np.array(x, dtype=np.float64)


def zeros() -> np.ndarray:
    """A fresh zero vector."""
    return np.zeros(3, dtype=np.float64)


def norm2(v: np.ndarray) -> float:
    """Squared magnitude of a 3D vector."""
    return float(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])


def norm(v: np.ndarray) -> float:
    """Magnitude (length) of a 3D vector."""
    return float(np.sqrt(norm2(v)))


def direction(v: np.ndarray) -> np.ndarray:
    """
    Return the unit vector pointing along v.

    The zero vector has no direction; a zero vector is returned for it.
    """
    n = norm(v)
    if n == 0.0:
        return zeros()
    return v / n


def clamp_magnitude(v: np.ndarray, lo: float, hi: float) -> np.ndarray:
    """
    Scale v so that its magnitude lies within [lo, hi].

    A vector below ``lo`` is stretched to ``lo``, a vector above ``hi`` is
    shrunk to ``hi``. Zero vectors are returned unchanged since they cannot
    be scaled.

    Returns:
        A new array; v itself is not modified.
    """
    mag = norm(v)
    if mag == 0.0:
        return v.copy()
    if mag < lo:
        return v * (lo / mag)
    if mag > hi:
        return v * (hi / mag)
    return v.copy()


def random_vector(rng: np.random.Generator, lo: float, hi: float) -> np.ndarray:
    """
    Random vector with a magnitude in [lo, hi).

    Components are drawn from U(-1, 1), normalised, then scaled. The
    direction is therefore not perfectly isotropic (cube corners are
    favoured), which is fine for seeding.
    """
    v = direction(rng.uniform(-1.0, 1.0, size=3))
    if hi <= lo:
        return v * lo
    return v * rng.uniform(lo, hi)


def to_list(v: np.ndarray) -> list[float]:
    """Convert a vector to a plain list of floats (for serialization)."""
    return [float(x) for x in v]
