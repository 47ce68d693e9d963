# world_pyramid/layers.py

"""
================================================================================
LAYER GENERATION PIPELINE
================================================================================
This module contains the LayerGenerator class, which turns noise (and an
optional latitude signal) into the classified grid of one pyramid layer.

Data Contract:
---------------
- Inputs (on initialization):
    - config (LayerConfig): Resolution, bands, smoothing and noise settings.
    - seed (int): The pyramid's master seed. The layer samples noise with the
      sub-seed `seed + config.seed_offset`.
    - parent_config (LayerConfig, optional): The coarser layer this one is
      gated by. Required exactly when `config.parent` is set.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from generate):
    - A read-only (resolution, resolution) uint8 array of category IDs.
- Side Effects: Logs messages using the provided logger.
- Invariants:
    - Given the same seed and configuration, the output is deterministic,
      regardless of the number of worker threads.
    - Wherever the parent cell (x // k, y // k) is water, the output is water.
================================================================================
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor

import numpy as np

from . import config as DEFAULTS
from .config import LayerConfig
from .noise import NoiseField
from .smoothing import smooth

# Rows per task when noise sampling is spread across worker threads.
MIN_ROWS_PER_BLOCK = 16


def check_parent_alignment(config: LayerConfig, parent_config: LayerConfig):
    """Raises ValueError unless `config` sits exactly `scale_factor` times above its parent."""
    # A misaligned child would leak land into water cells, so refuse it here.
    if config.resolution != parent_config.resolution * config.scale_factor:
        raise ValueError(
            f"Layer '{config.name}': resolution {config.resolution} is not "
            f"{config.scale_factor}x the parent resolution {parent_config.resolution}."
        )
    if config.extent_blocks != parent_config.extent_blocks:
        raise ValueError(
            f"Layer '{config.name}' covers {config.extent_blocks} blocks but its parent "
            f"'{parent_config.name}' covers {parent_config.extent_blocks}."
        )


class LayerGenerator:
    """
    Generates the classified grid for a single layer.
    One instance per layer; instances hold configuration only, never grids.
    """
    def __init__(self, config: LayerConfig, seed: int, parent_config: LayerConfig = None,
                 noise_field: NoiseField = None, logger: logging.Logger = None, workers: int = 1):
        self.config = config
        self.seed = seed
        self.sub_seed = seed + config.seed_offset
        self.parent_config = parent_config
        self.noise_field = noise_field if noise_field is not None else NoiseField()
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.workers = max(1, int(workers))

        if config.parent is None and parent_config is not None:
            raise ValueError(f"Layer '{config.name}' is a root layer but was given a parent.")
        if config.parent is not None:
            if parent_config is None:
                raise ValueError(f"Layer '{config.name}' needs its parent layer's configuration.")
            check_parent_alignment(config, parent_config)

        self._thresholds = np.array(config.band_thresholds, dtype=np.float64)
        self._band_lut = np.array(config.band_categories, dtype=np.uint8)

        self.logger.debug(
            f"LayerGenerator '{config.name}' ready: {config.resolution}x{config.resolution}, "
            f"sub-seed {self.sub_seed}, {self.workers} worker(s)."
        )

    def get_coordinate_grid(self) -> tuple[np.ndarray, np.ndarray]:
        """Normalized cell coordinates in [0, 1) for both axes, indexed [y, x]."""
        resolution = self.config.resolution
        coords = np.arange(resolution, dtype=np.float64) / resolution
        return np.meshgrid(coords, coords)

    def _sample_noise(self, nx: np.ndarray, ny: np.ndarray) -> np.ndarray:
        """Noise over the layer in [-1, 1], split into row blocks when workers > 1."""
        frequency = self.config.noise_frequency
        if self.workers == 1:
            return self.noise_field.sample_grid(nx * frequency, ny * frequency, self.sub_seed)

        rows = nx.shape[0]
        block = max(MIN_ROWS_PER_BLOCK, -(-rows // self.workers))
        starts = range(0, rows, block)

        def sample_block(start):
            stop = start + block
            return self.noise_field.sample_grid(nx[start:stop] * frequency, ny[start:stop] * frequency, self.sub_seed)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            blocks = list(pool.map(sample_block, starts))
        return np.vstack(blocks)

    def raw_signal(self) -> np.ndarray:
        """
        The unclassified signal in [0, 1]: a weighted blend of latitude (peaking
        at the vertical midline) and noise remapped to [0, 1].
        """
        nx, ny = self.get_coordinate_grid()

        noise_value = self._sample_noise(nx, ny) * 0.5 + 0.5

        latitude_weight = self.config.latitude_weight
        if latitude_weight == 0.0:
            raw = noise_value
        else:
            latitude = 1.0 - np.abs(2.0 * (ny - 0.5))
            raw = latitude * latitude_weight + noise_value * self.config.noise_weight

        return np.clip(raw, 0.0, 1.0)

    def classify(self, raw: np.ndarray) -> np.ndarray:
        """
        Maps raw values onto the layer's bands. Every value lands in exactly one
        band; a value on a threshold goes up unless the layer says otherwise.
        """
        side = 'right' if self.config.threshold_in_upper_band else 'left'
        band_index = np.searchsorted(self._thresholds, raw, side=side)
        return self._band_lut[band_index]

    def parent_water_mask(self, parent_grid: np.ndarray) -> np.ndarray:
        """True where the parent cell under (x // k, y // k) is water."""
        k = self.config.scale_factor
        expected = (self.parent_config.resolution, self.parent_config.resolution)
        if parent_grid.shape != expected:
            raise ValueError(
                f"Layer '{self.config.name}': parent grid has shape {parent_grid.shape}, expected {expected}."
            )
        cells = np.arange(self.config.resolution) // k
        parent_cells = parent_grid[cells[:, np.newaxis], cells[np.newaxis, :]]
        return parent_cells == DEFAULTS.CATEGORY_WATER

    def generate(self, parent_grid: np.ndarray = None) -> np.ndarray:
        """Runs the full pipeline and returns the frozen grid."""
        config = self.config
        start_time = time.perf_counter()

        if config.parent is not None and parent_grid is None:
            raise ValueError(f"Layer '{config.name}' is gated by layer {config.parent}; pass its grid.")

        # 1. Raw signal and band classification.
        classified = self.classify(self.raw_signal())

        # 2. Water propagates down from the parent layer.
        water_mask = None
        if parent_grid is not None and config.parent is not None:
            water_mask = self.parent_water_mask(parent_grid)
            classified[water_mask] = DEFAULTS.CATEGORY_WATER

        # 3. Smooth out single-cell noise.
        grid = smooth(classified, config.smoothing_radius, config.smoothing_mode, config.max_category)

        # 4. Smoothing must never resurrect land over parent water.
        if water_mask is not None:
            grid[water_mask] = DEFAULTS.CATEGORY_WATER

        grid.flags.writeable = False

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Generated layer '{config.name}' ({config.resolution}x{config.resolution}) in {elapsed:.2f} seconds.")
        return grid
