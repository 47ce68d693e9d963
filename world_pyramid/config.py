# world_pyramid/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the map
pyramid, and the `LayerConfig` structure that describes a single layer.

DO NOT MODIFY THIS FILE FOR A SPECIFIC WORLD.
Instead, pass a configuration dictionary to `load_settings` or build your own
`LayerConfig` tuple and hand it to the WorldMapPyramid.
================================================================================
"""
from dataclasses import dataclass, asdict

# --- Seeding ---
DEFAULT_SEED = 1337
# The hash inside the noise kernel works on signed 32-bit integers.
MIN_SEED = -(2 ** 31)
MAX_SEED = 2 ** 31 - 1
# Offsets added to the master seed so each layer gets its own noise field.
CONTINENT_SEED_OFFSET = 0
TEMPERATURE_SEED_OFFSET = 1000

# --- Categories ---
# Category 0 is reserved in every layer. It is the water sentinel and is
# forced onto every child cell whose parent cell is water.
CATEGORY_WATER = 0
CATEGORY_LAND = 1

CATEGORY_WARM = 1
CATEGORY_TEMPERATE = 2
CATEGORY_COLD = 3
CATEGORY_FREEZING = 4

CONTINENT_CATEGORIES = ("water", "land")
TEMPERATURE_CATEGORIES = ("water", "warm", "temperate", "cold", "freezing")

# --- World Extent ---
# Total world size along one axis, in blocks. Every layer covers the whole
# extent, so blocks_per_pixel = WORLD_EXTENT_BLOCKS // resolution.
WORLD_EXTENT_BLOCKS = 524288

# --- Layer 1: Continental Land/Water Mask ---
CONTINENT_RESOLUTION = 256
CONTINENT_NOISE_FREQUENCY = 2.0
# Noise strictly above this value becomes land. 0.4 gives roughly 60% land.
CONTINENT_LAND_THRESHOLD = 0.4
CONTINENT_SMOOTHING_RADIUS = 3

# --- Layer 2: Temperature Zones ---
TEMPERATURE_SCALE_FACTOR = 4
TEMPERATURE_RESOLUTION = CONTINENT_RESOLUTION * TEMPERATURE_SCALE_FACTOR
TEMPERATURE_NOISE_FREQUENCY = 3.0
# Share of the raw signal taken from latitude; the rest comes from noise.
TEMPERATURE_LATITUDE_WEIGHT = 0.7
TEMPERATURE_BAND_THRESHOLDS = (0.25, 0.5, 0.75)
TEMPERATURE_SMOOTHING_RADIUS = 2

# --- Smoothing Modes ---
SMOOTHING_MAJORITY = "majority"
SMOOTHING_AVERAGE = "average"
SMOOTHING_MODES = (SMOOTHING_MAJORITY, SMOOTHING_AVERAGE)

# --- Generation ---
DEFAULT_WORKERS = 1


def _is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


@dataclass(frozen=True)
class LayerConfig:
    """
    Static description of one pyramid layer. Validated once on creation.

    Bands partition the raw signal's [0, 1] range. By default they are
    half-open intervals [lo, hi); with `threshold_in_upper_band` off they are
    (lo, hi] instead, so a value exactly on a threshold stays in the lower band.
    `band_thresholds` holds the inner edges in increasing order and
    `band_categories` labels each band from lowest to highest, so it always has
    exactly one more entry than `band_thresholds`.
    """
    name: str
    resolution: int
    blocks_per_pixel: int
    categories: tuple
    band_thresholds: tuple
    band_categories: tuple
    smoothing_mode: str
    smoothing_radius: int
    noise_frequency: float
    latitude_weight: float = 0.0
    seed_offset: int = 0
    parent: int | None = None
    scale_factor: int = 1
    threshold_in_upper_band: bool = True

    def __post_init__(self):
        # Normalize sequences so configs loaded from JSON compare equal.
        object.__setattr__(self, "categories", tuple(self.categories))
        object.__setattr__(self, "band_thresholds", tuple(float(t) for t in self.band_thresholds))
        object.__setattr__(self, "band_categories", tuple(int(c) for c in self.band_categories))

        if not self.name:
            raise ValueError("Layer name must not be empty.")
        if not isinstance(self.resolution, int) or not _is_power_of_two(self.resolution):
            raise ValueError(f"Layer '{self.name}': resolution must be a power of two, got {self.resolution!r}.")
        if not isinstance(self.blocks_per_pixel, int) or self.blocks_per_pixel <= 0:
            raise ValueError(f"Layer '{self.name}': blocks_per_pixel must be a positive integer.")
        if len(self.categories) < 2:
            raise ValueError(f"Layer '{self.name}': needs the water category plus at least one more.")
        if len(self.categories) > 256:
            raise ValueError(f"Layer '{self.name}': categories must fit in one byte.")

        thresholds = self.band_thresholds
        if any(not 0.0 < t < 1.0 for t in thresholds):
            raise ValueError(f"Layer '{self.name}': band thresholds must lie inside (0, 1).")
        if any(lo >= hi for lo, hi in zip(thresholds, thresholds[1:])):
            raise ValueError(f"Layer '{self.name}': band thresholds must be strictly increasing.")
        if len(self.band_categories) != len(thresholds) + 1:
            raise ValueError(
                f"Layer '{self.name}': {len(thresholds)} thresholds define "
                f"{len(thresholds) + 1} bands, got {len(self.band_categories)} band categories."
            )
        if any(not 0 <= c < len(self.categories) for c in self.band_categories):
            raise ValueError(f"Layer '{self.name}': band category outside the category list.")
        if not isinstance(self.threshold_in_upper_band, bool):
            raise ValueError(f"Layer '{self.name}': threshold_in_upper_band must be a boolean.")

        if self.smoothing_mode not in SMOOTHING_MODES:
            raise ValueError(f"Layer '{self.name}': unknown smoothing mode '{self.smoothing_mode}'.")
        if self.smoothing_mode == SMOOTHING_MAJORITY and len(self.categories) != 2:
            raise ValueError(f"Layer '{self.name}': majority smoothing only applies to water/land layers.")
        if not isinstance(self.smoothing_radius, int) or self.smoothing_radius < 0:
            raise ValueError(f"Layer '{self.name}': smoothing radius must be a non-negative integer.")

        if self.noise_frequency <= 0:
            raise ValueError(f"Layer '{self.name}': noise frequency must be positive.")
        if not 0.0 <= self.latitude_weight <= 1.0:
            raise ValueError(f"Layer '{self.name}': latitude weight must lie in [0, 1].")
        if not isinstance(self.scale_factor, int) or self.scale_factor < 1:
            raise ValueError(f"Layer '{self.name}': scale factor must be a positive integer.")
        if self.parent is None and self.scale_factor != 1:
            raise ValueError(f"Layer '{self.name}': a root layer cannot have a scale factor.")
        if self.parent is not None and (not isinstance(self.parent, int) or self.parent < 0):
            raise ValueError(f"Layer '{self.name}': parent must be a layer index.")

    @property
    def noise_weight(self) -> float:
        return 1.0 - self.latitude_weight

    @property
    def extent_blocks(self) -> int:
        """World units covered by the layer along one axis."""
        return self.resolution * self.blocks_per_pixel

    @property
    def max_category(self) -> int:
        return len(self.categories) - 1

    def to_dict(self) -> dict:
        data = asdict(self)
        data["categories"] = list(self.categories)
        data["band_thresholds"] = list(self.band_thresholds)
        data["band_categories"] = list(self.band_categories)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "LayerConfig":
        return cls(**data)


def continental_layer(resolution: int = CONTINENT_RESOLUTION, land_threshold: float = CONTINENT_LAND_THRESHOLD) -> LayerConfig:
    """Layer 1: binary land/water mask, the root of the pyramid."""
    return LayerConfig(
        name="continent",
        resolution=resolution,
        blocks_per_pixel=WORLD_EXTENT_BLOCKS // resolution,
        categories=CONTINENT_CATEGORIES,
        band_thresholds=(land_threshold,),
        band_categories=(CATEGORY_WATER, CATEGORY_LAND),
        smoothing_mode=SMOOTHING_MAJORITY,
        smoothing_radius=CONTINENT_SMOOTHING_RADIUS,
        noise_frequency=CONTINENT_NOISE_FREQUENCY,
        seed_offset=CONTINENT_SEED_OFFSET,
        threshold_in_upper_band=False,
    )


def temperature_layer(parent: int = 0, parent_resolution: int = CONTINENT_RESOLUTION,
                      scale_factor: int = TEMPERATURE_SCALE_FACTOR) -> LayerConfig:
    """Layer 2: temperature zones from a latitude/noise blend, gated by land."""
    resolution = parent_resolution * scale_factor
    return LayerConfig(
        name="temperature",
        resolution=resolution,
        blocks_per_pixel=WORLD_EXTENT_BLOCKS // resolution,
        categories=TEMPERATURE_CATEGORIES,
        band_thresholds=TEMPERATURE_BAND_THRESHOLDS,
        # Low raw values are cold: bands run freezing -> warm.
        band_categories=(CATEGORY_FREEZING, CATEGORY_COLD, CATEGORY_TEMPERATE, CATEGORY_WARM),
        smoothing_mode=SMOOTHING_AVERAGE,
        smoothing_radius=TEMPERATURE_SMOOTHING_RADIUS,
        noise_frequency=TEMPERATURE_NOISE_FREQUENCY,
        latitude_weight=TEMPERATURE_LATITUDE_WEIGHT,
        seed_offset=TEMPERATURE_SEED_OFFSET,
        parent=parent,
        scale_factor=scale_factor,
    )


def default_layers() -> tuple[LayerConfig, ...]:
    return (continental_layer(), temperature_layer())


def load_settings(config: dict) -> dict:
    """
    Consolidates a user configuration dictionary with the internal defaults.

    Expected keys: 'seed', 'workers' and 'layers' (a list of LayerConfig
    dictionaries). Missing keys fall back to the defaults in this module.
    """
    layers = config.get('layers')
    return {
        'seed': config.get('seed', DEFAULT_SEED),
        'workers': config.get('workers', DEFAULT_WORKERS),
        'layers': tuple(LayerConfig.from_dict(layer) for layer in layers) if layers else default_layers(),
    }
