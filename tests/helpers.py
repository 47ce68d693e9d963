from __future__ import annotations

import numpy as np

from world_pyramid import config as DEFAULTS
from world_pyramid.config import LayerConfig


class ConstantNoise:
    """Noise stub returning the same value everywhere."""

    def __init__(self, value: float) -> None:
        self.value = value
        self.sub_seeds: list[int] = []

    def sample(self, x: float, z: float, sub_seed: int) -> float:
        return self.value

    def sample_grid(self, x: np.ndarray, z: np.ndarray, sub_seed: int) -> np.ndarray:
        self.sub_seeds.append(sub_seed)
        return np.full(x.shape, self.value)


def small_continent(resolution: int = 4, *, extent: int = 64, radius: int = 1,
                    threshold: float = DEFAULTS.CONTINENT_LAND_THRESHOLD) -> LayerConfig:
    """A test-scale Layer 1 covering `extent` blocks."""
    return LayerConfig(
        name="continent",
        resolution=resolution,
        blocks_per_pixel=extent // resolution,
        categories=DEFAULTS.CONTINENT_CATEGORIES,
        band_thresholds=(threshold,),
        band_categories=(DEFAULTS.CATEGORY_WATER, DEFAULTS.CATEGORY_LAND),
        smoothing_mode=DEFAULTS.SMOOTHING_MAJORITY,
        smoothing_radius=radius,
        noise_frequency=DEFAULTS.CONTINENT_NOISE_FREQUENCY,
        threshold_in_upper_band=False,
    )


def small_temperature(parent_resolution: int = 4, *, scale_factor: int = 4, extent: int = 64,
                      radius: int = 1, parent: int = 0) -> LayerConfig:
    """A test-scale Layer 2 sitting `scale_factor` times above its parent."""
    resolution = parent_resolution * scale_factor
    return LayerConfig(
        name="temperature",
        resolution=resolution,
        blocks_per_pixel=extent // resolution,
        categories=DEFAULTS.TEMPERATURE_CATEGORIES,
        band_thresholds=DEFAULTS.TEMPERATURE_BAND_THRESHOLDS,
        band_categories=(
            DEFAULTS.CATEGORY_FREEZING,
            DEFAULTS.CATEGORY_COLD,
            DEFAULTS.CATEGORY_TEMPERATE,
            DEFAULTS.CATEGORY_WARM,
        ),
        smoothing_mode=DEFAULTS.SMOOTHING_AVERAGE,
        smoothing_radius=radius,
        noise_frequency=DEFAULTS.TEMPERATURE_NOISE_FREQUENCY,
        latitude_weight=DEFAULTS.TEMPERATURE_LATITUDE_WEIGHT,
        seed_offset=DEFAULTS.TEMPERATURE_SEED_OFFSET,
        parent=parent,
        scale_factor=scale_factor,
    )
