# world_pyramid/noise.py

"""
================================================================================
NOISE GENERATION UTILITIES
================================================================================
This module provides a seeded 2D simplex-style gradient noise. It is designed
to be a pure, stateless utility.

Data Contract:
---------------
- Inputs:
    - x, z: Coordinates (scalars, or NumPy arrays of matching shape).
    - sub_seed: The integer seed of the layer requesting noise.
- Outputs:
    - Noise values clamped to the range [-1, 1].
- Side Effects: None.
- Invariants: The same (x, z, sub_seed) always returns the same value. The
  lattice hash uses integer arithmetic only, so results do not depend on call
  order, prior calls or any global random state.
================================================================================
"""

import math

import numpy as np
from numba import njit

# Skew/unskew factors for the 2D triangular lattice.
F2 = 0.5 * (math.sqrt(3.0) - 1.0)
G2 = (3.0 - math.sqrt(3.0)) / 6.0

# Scales the summed corner contributions to roughly [-1, 1].
NORMALIZATION = 70.0

# Four diagonals followed by the four axis directions.
_GRADIENT_VECTORS = np.array([
    [1, 1], [-1, 1], [1, -1], [-1, -1],
    [1, 0], [-1, 0], [0, 1], [0, -1],
])

@njit(nogil=True)
def _wrap_int32(value):
    "Wraps an integer to signed 32-bit."
    value = value & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value

@njit(nogil=True)
def _hash(i, j, seed):
    """Mixes the lattice coordinates into the seed. Result is in [0, 255]."""
    h = _wrap_int32(seed)
    h = _wrap_int32((h << 5) + h + i)
    h = _wrap_int32((h << 5) + h + j)
    return abs(h) % 256

@njit(nogil=True)
def _gradient(h, x, z):
    """Calculates the dot product between a gradient vector and coordinates."""
    g = _GRADIENT_VECTORS[h & 7]
    return g[0] * x + g[1] * z

@njit(nogil=True)
def _corner(h, x, z):
    t = 0.5 - x * x - z * z
    if t < 0.0:
        return 0.0
    t *= t
    return t * t * _gradient(h, x, z)

@njit(nogil=True)
def simplex_noise_2d(x, z, sub_seed):
    """
    Samples 2D simplex noise at a single point.
    JIT-compiled with Numba; safe to call from worker threads (releases the GIL).
    """
    # Skew into lattice space to find the containing cell.
    s = (x + z) * F2
    i = math.floor(x + s)
    j = math.floor(z + s)

    # Unskew the cell origin back and take the offsets from it.
    t = (i + j) * G2
    x0 = x - (i - t)
    z0 = z - (j - t)

    # Lower or upper triangle of the skewed cell.
    if x0 > z0:
        i1, j1 = 1, 0
    else:
        i1, j1 = 0, 1

    x1 = x0 - i1 + G2
    z1 = z0 - j1 + G2
    x2 = x0 - 1.0 + 2.0 * G2
    z2 = z0 - 1.0 + 2.0 * G2

    n0 = _corner(_hash(i, j, sub_seed), x0, z0)
    n1 = _corner(_hash(i + i1, j + j1, sub_seed), x1, z1)
    n2 = _corner(_hash(i + 1, j + 1, sub_seed), x2, z2)

    value = NORMALIZATION * (n0 + n1 + n2)
    # Rare overshoot is numerical slack, not an error.
    return min(1.0, max(-1.0, value))

@njit(nogil=True)
def simplex_noise_grid(x, z, sub_seed):
    """
    Evaluates simplex_noise_2d over 2D coordinate arrays.
    Uses explicit loops, which Numba compiles to efficient machine code.
    """
    rows, cols = x.shape
    out = np.empty((rows, cols))
    for r in range(rows):
        for c in range(cols):
            out[r, c] = simplex_noise_2d(x[r, c], z[r, c], sub_seed)
    return out


class NoiseField:
    """
    The noise source consumed by layer generators.

    Holds no state: every call is fully described by its arguments. Layers
    receive an instance so tests can substitute a deterministic stub.
    """

    def sample(self, x: float, z: float, sub_seed: int) -> float:
        return float(simplex_noise_2d(float(x), float(z), int(sub_seed)))

    def sample_grid(self, x: np.ndarray, z: np.ndarray, sub_seed: int) -> np.ndarray:
        x = np.ascontiguousarray(x, dtype=np.float64)
        z = np.ascontiguousarray(z, dtype=np.float64)
        if x.shape != z.shape:
            raise ValueError(f"Coordinate arrays differ in shape: {x.shape} vs {z.shape}")
        return simplex_noise_grid(x, z, int(sub_seed))
