# world_pyramid/smoothing.py

"""
================================================================================
NEIGHBORHOOD SMOOTHING
================================================================================
Pure filters that clean up a freshly classified grid: a majority vote for
binary water/land masks and a water-aware mean for multi-category layers.

Data Contract:
---------------
- Inputs:
    - grid: A 2D uint8 array of category IDs (0 = water).
    - radius: Half-width of the square neighborhood, in cells.
- Outputs:
    - A new uint8 array of the same shape. The input is never modified, and
      every output cell is computed from the input buffer only.
- Side Effects: None.
- Invariants: Neighborhoods are clipped to the grid. There is no wraparound
  and no synthetic padding: edge cells only count in-bounds neighbors.
================================================================================
"""
import numpy as np
from scipy.ndimage import convolve

from . import config as DEFAULTS


def _effective_radius(shape: tuple, radius: int) -> int:
    """A window larger than the grid sees the same cells as one that just covers it."""
    if radius < 0:
        raise ValueError(f"Smoothing radius must be non-negative, got {radius}.")
    return min(radius, max(shape) - 1)


def _window_sum(values: np.ndarray, radius: int) -> np.ndarray:
    """Sums each cell's (2r+1)^2 neighborhood, treating out-of-bounds cells as absent."""
    kernel = np.ones((2 * radius + 1, 2 * radius + 1), dtype=np.int64)
    return convolve(values.astype(np.int64), kernel, mode='constant', cval=0)


def smooth_majority(grid: np.ndarray, radius: int) -> np.ndarray:
    """
    Majority vote for water/land masks. A cell becomes land when strictly more
    than half of its in-bounds neighborhood is land, otherwise water.
    """
    radius = _effective_radius(grid.shape, radius)
    if radius == 0:
        return grid.astype(np.uint8, copy=True)

    land = (grid != DEFAULTS.CATEGORY_WATER)
    land_count = _window_sum(land, radius)
    cell_count = _window_sum(np.ones(grid.shape, dtype=bool), radius)

    # Integer form of land_count / cell_count > 0.5.
    return np.where(2 * land_count > cell_count, DEFAULTS.CATEGORY_LAND, DEFAULTS.CATEGORY_WATER).astype(np.uint8)


def smooth_water_aware(grid: np.ndarray, radius: int, max_category: int) -> np.ndarray:
    """
    Averages category IDs over non-water neighbors.

    Water cells stay water and never contribute to a neighbor's mean. The mean
    is rounded half-up to the nearest category in [1, max_category]. A land
    cell with no land neighbor falls back to water.
    """
    radius = _effective_radius(grid.shape, radius)
    if radius == 0:
        return grid.astype(np.uint8, copy=True)

    land = (grid != DEFAULTS.CATEGORY_WATER)
    category_sum = _window_sum(np.where(land, grid, 0), radius)
    land_count = _window_sum(land, radius)

    # round(sum / count) with halves rounded up, in exact integer arithmetic.
    safe_count = np.maximum(land_count, 1)
    rounded = (2 * category_sum + safe_count) // (2 * safe_count)
    rounded = np.clip(rounded, 1, max_category)

    smoothed = np.where(land & (land_count > 0), rounded, DEFAULTS.CATEGORY_WATER)
    return smoothed.astype(np.uint8)


def smooth(grid: np.ndarray, radius: int, mode: str, max_category: int = DEFAULTS.CATEGORY_LAND) -> np.ndarray:
    """Dispatches to the filter named by `mode`."""
    if mode == DEFAULTS.SMOOTHING_MAJORITY:
        return smooth_majority(grid, radius)
    if mode == DEFAULTS.SMOOTHING_AVERAGE:
        return smooth_water_aware(grid, radius, max_category)
    raise ValueError(f"Unknown smoothing mode '{mode}'.")
