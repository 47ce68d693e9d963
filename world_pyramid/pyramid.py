# world_pyramid/pyramid.py

"""
================================================================================
WORLD MAP PYRAMID
================================================================================
This module contains the WorldMapPyramid class, which generates every layer of
the map for one seed and is the only object the rest of the game queries.

Data Contract:
---------------
- Inputs (on initialization):
    - seed (int): Master seed, within the signed 32-bit range.
    - layer_configs (sequence of LayerConfig): Ordered coarse to fine. A
      layer's `parent` is the index of an earlier layer.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - Category IDs for world coordinates (`sample_at`, `sample_many`).
    - Category percentages for diagnostics (`statistics`).
- Side Effects: Logs messages using the provided logger.
- Invariants: Grids are generated once, in order, and are read-only
  afterwards. Given the same seed and configuration, every grid is
  byte-identical across runs.
================================================================================
"""

import logging
import math
import numbers
import time

import numpy as np

from . import config as DEFAULTS
from .config import LayerConfig
from .layers import LayerGenerator, check_parent_alignment
from .noise import NoiseField


def validate_seed(seed) -> int:
    """Rejects anything that is not an integer inside the hashable seed range."""
    if isinstance(seed, bool) or not isinstance(seed, numbers.Integral):
        raise TypeError(f"Seed must be an integer, got {type(seed).__name__}.")
    seed = int(seed)
    if not DEFAULTS.MIN_SEED <= seed <= DEFAULTS.MAX_SEED:
        raise ValueError(f"Seed {seed} is outside [{DEFAULTS.MIN_SEED}, {DEFAULTS.MAX_SEED}].")
    return seed


def validate_layer_chain(layer_configs) -> tuple[LayerConfig, ...]:
    """Checks that the layers form a pyramid: non-empty, unique names, parents first."""
    layer_configs = tuple(layer_configs)
    if not layer_configs:
        raise ValueError("A pyramid needs at least one layer.")
    if layer_configs[0].parent is not None:
        raise ValueError(f"The first layer '{layer_configs[0].name}' must be a root layer.")

    names = [layer.name for layer in layer_configs]
    if len(set(names)) != len(names):
        raise ValueError(f"Layer names must be unique, got {names}.")

    for index, layer in enumerate(layer_configs):
        if layer.parent is None:
            continue
        if layer.parent >= index:
            raise ValueError(
                f"Layer '{layer.name}' (index {index}) must come after its parent (index {layer.parent})."
            )
        check_parent_alignment(layer, layer_configs[layer.parent])
    return layer_configs


def _world_to_pixel(world, config: LayerConfig) -> int:
    """Floor-divides a world coordinate into a cell index, clamped to the grid."""
    if math.isnan(world):
        return 0
    world = max(0, min(config.extent_blocks - 1, world))
    return int(world // config.blocks_per_pixel)


def _world_to_pixels(world, config: LayerConfig) -> np.ndarray:
    """Vectorized `_world_to_pixel`. NaN maps to 0, infinities to the edges."""
    last_block = config.extent_blocks - 1
    world = np.nan_to_num(np.asarray(world, dtype=np.float64), nan=0.0, posinf=last_block, neginf=0.0)
    world = np.clip(world, 0, last_block)
    return np.floor_divide(world, config.blocks_per_pixel).astype(np.intp)


class WorldMapPyramid:
    """
    Owns the ordered, generated layer grids for one seed.
    Construction generates everything; there is no partial state.
    """
    def __init__(self, seed: int = DEFAULTS.DEFAULT_SEED, layer_configs=None, *,
                 noise_field: NoiseField = None, logger: logging.Logger = None, workers: int = DEFAULTS.DEFAULT_WORKERS):
        """
        Initializes and generates the pyramid.

        Args:
            seed (int): The master seed.
            layer_configs (sequence of LayerConfig, optional): The layers to
                build. Defaults to the continental and temperature layers.
            noise_field (NoiseField, optional): Noise source shared by all layers.
            logger (logging.Logger, optional): The logger instance for all output.
            workers (int): Threads used per layer for noise sampling.
        """
        self._setup(seed, layer_configs, logger)
        self.logger.info(f"WorldMapPyramid initializing with seed: {self.seed}")

        noise_field = noise_field if noise_field is not None else NoiseField()
        start_time = time.perf_counter()

        grids = []
        for config in self.layer_configs:
            parent_config = self.layer_configs[config.parent] if config.parent is not None else None
            generator = LayerGenerator(
                config, self.seed,
                parent_config=parent_config,
                noise_field=noise_field,
                logger=self.logger,
                workers=workers,
            )
            parent_grid = grids[config.parent] if config.parent is not None else None
            grids.append(generator.generate(parent_grid))
        self._grids = tuple(grids)

        self.logger.info(
            f"Pyramid generated: {len(self._grids)} layer(s) in {time.perf_counter() - start_time:.2f} seconds."
        )

    def _setup(self, seed, layer_configs, logger):
        self.logger = logger if logger is not None else logging.getLogger(__name__)
        self.seed = validate_seed(seed)
        self.layer_configs = validate_layer_chain(
            layer_configs if layer_configs is not None else DEFAULTS.default_layers()
        )

    @classmethod
    def from_grids(cls, seed: int, layer_configs, grids, logger: logging.Logger = None) -> "WorldMapPyramid":
        """
        Rebuilds a generated pyramid from previously persisted grids.
        Each grid must match its layer's dimensions and category range exactly.
        """
        pyramid = cls.__new__(cls)
        pyramid._setup(seed, layer_configs, logger)

        grids = list(grids)
        if len(grids) != len(pyramid.layer_configs):
            raise ValueError(f"Expected {len(pyramid.layer_configs)} grids, got {len(grids)}.")

        frozen = []
        for config, grid in zip(pyramid.layer_configs, grids):
            grid = np.asarray(grid)
            expected = (config.resolution, config.resolution)
            if grid.shape != expected:
                raise ValueError(f"Layer '{config.name}': grid shape {grid.shape} does not match {expected}.")
            if grid.dtype != np.uint8:
                raise ValueError(f"Layer '{config.name}': grid dtype must be uint8, got {grid.dtype}.")
            if grid.size and int(grid.max()) > config.max_category:
                raise ValueError(f"Layer '{config.name}': grid holds categories outside 0..{config.max_category}.")
            grid = grid.copy()
            grid.flags.writeable = False
            frozen.append(grid)
        pyramid._grids = tuple(frozen)

        pyramid.logger.info(f"WorldMapPyramid restored from {len(frozen)} stored layer(s), seed: {pyramid.seed}")
        return pyramid

    # --- Layer Access ---
    def __len__(self) -> int:
        return len(self._grids)

    @property
    def grids(self) -> tuple[np.ndarray, ...]:
        return self._grids

    def layer(self, layer_index: int) -> np.ndarray:
        """The read-only grid of a layer."""
        return self._grids[layer_index]

    def layer_index(self, name: str) -> int:
        for index, config in enumerate(self.layer_configs):
            if config.name == name:
                return index
        raise KeyError(f"No layer named '{name}'.")

    # --- Sampling ---
    def sample_at(self, layer_index: int, world_x: float, world_z: float) -> int:
        """
        Returns the category under a world position.

        World coordinates map to cells by floor division by the layer's
        blocks_per_pixel. Positions outside the covered extent are clamped to
        the nearest edge cell (NaN reads as 0), so this never fails on
        coordinates.
        """
        config = self.layer_configs[layer_index]
        pixel_x = _world_to_pixel(world_x, config)
        pixel_y = _world_to_pixel(world_z, config)
        return int(self._grids[layer_index][pixel_y, pixel_x])

    def sample_many(self, layer_index: int, world_x, world_z) -> np.ndarray:
        """Vectorized `sample_at` for batches of world coordinates."""
        config = self.layer_configs[layer_index]
        pixel_x = _world_to_pixels(world_x, config)
        pixel_y = _world_to_pixels(world_z, config)
        return self._grids[layer_index][pixel_y, pixel_x]

    # --- Diagnostics ---
    def category_counts(self, layer_index: int) -> dict[int, int]:
        config = self.layer_configs[layer_index]
        counts = np.bincount(self._grids[layer_index].ravel(), minlength=len(config.categories))
        return {category: int(count) for category, count in enumerate(counts)}

    def statistics(self, layer_index: int) -> dict[int, float]:
        """Category -> percentage of all cells in the layer. Sums to 100."""
        counts = self.category_counts(layer_index)
        total = self._grids[layer_index].size
        return {category: (count / total) * 100.0 for category, count in counts.items()}

    def format_statistics(self, layer_index: int) -> dict[str, str]:
        """Category name -> percentage with one decimal, for debug displays."""
        names = self.layer_configs[layer_index].categories
        return {names[category]: f"{percent:.1f}%" for category, percent in self.statistics(layer_index).items()}

    def log_statistics(self):
        for index, config in enumerate(self.layer_configs):
            summary = ", ".join(f"{name}: {percent}" for name, percent in self.format_statistics(index).items())
            self.logger.info(f"Layer {index} '{config.name}': {summary}")
