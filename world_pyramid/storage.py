# world_pyramid/storage.py

"""
Saving and loading generated pyramids.

A pyramid package is a directory holding `generation_config.json` (seed and
layer configurations) and one raw `.npy` array per layer under `layers/`.
Arrays are stored exactly, so a reloaded pyramid samples identically to the
one that was saved.
"""

import json
import logging
import os

import numpy as np

from .config import LayerConfig
from .pyramid import WorldMapPyramid

CONFIG_FILENAME = "generation_config.json"
LAYERS_DIRNAME = "layers"


def layer_filename(index: int, config: LayerConfig) -> str:
    return f"{index}_{config.name}.npy"


def save_pyramid(pyramid: WorldMapPyramid, output_dir: str, logger: logging.Logger = None) -> str:
    """
    Writes every layer grid and the generation config to `output_dir`.

    Returns:
        str: The path to the created package directory.
    """
    logger = logger if logger is not None else logging.getLogger(__name__)

    layers_dir = os.path.join(output_dir, LAYERS_DIRNAME)
    os.makedirs(layers_dir, exist_ok=True)
    logger.info(f"Saving pyramid to '{output_dir}'...")

    for index, config in enumerate(pyramid.layer_configs):
        filepath = os.path.join(layers_dir, layer_filename(index, config))
        grid = pyramid.layer(index)
        np.save(filepath, grid)
        logger.info(f"  - Saved {layer_filename(index, config)} (shape: {grid.shape})")

    generation_config = {
        "seed": pyramid.seed,
        "layers": [config.to_dict() for config in pyramid.layer_configs],
    }
    config_path = os.path.join(output_dir, CONFIG_FILENAME)
    with open(config_path, 'w') as f:
        json.dump(generation_config, f, indent=4)
    logger.info(f"Saved {CONFIG_FILENAME} to '{output_dir}'")

    return output_dir


def load_pyramid(package_path: str, logger: logging.Logger = None) -> WorldMapPyramid:
    """Restores a pyramid written by `save_pyramid` without regenerating it."""
    logger = logger if logger is not None else logging.getLogger(__name__)

    config_path = os.path.join(package_path, CONFIG_FILENAME)
    if not os.path.isfile(config_path):
        raise FileNotFoundError(f"Could not find '{CONFIG_FILENAME}' in '{package_path}'")

    logger.info(f"Loading pyramid package from '{package_path}'")
    with open(config_path, 'r') as f:
        generation_config = json.load(f)

    layer_configs = tuple(LayerConfig.from_dict(layer) for layer in generation_config["layers"])

    grids = []
    layers_dir = os.path.join(package_path, LAYERS_DIRNAME)
    for index, config in enumerate(layer_configs):
        filepath = os.path.join(layers_dir, layer_filename(index, config))
        if not os.path.isfile(filepath):
            raise FileNotFoundError(f"Missing layer file '{filepath}'")
        grids.append(np.load(filepath, allow_pickle=False))
        logger.debug(f"  - Loaded {layer_filename(index, config)} (shape: {grids[-1].shape})")

    return WorldMapPyramid.from_grids(generation_config["seed"], layer_configs, grids, logger=logger)
