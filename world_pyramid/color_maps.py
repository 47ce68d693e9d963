# world_pyramid/color_maps.py

"""
================================================================================
SHARED COLOR MAPPING UTILITIES
================================================================================
This module contains the color mapping constants and functions for converting
classified layer grids into RGB arrays for preview images.

It is a pure, stateless utility. Nothing here feeds back into generation.
================================================================================
"""
import numpy as np
from PIL import Image

from .config import LayerConfig

# --- Default Color Mappings (by category name) ---
COLOR_MAP_CATEGORIES = {
    "water": (26, 102, 255),
    "land": (34, 139, 34),
    "warm": (255, 0, 0),
    "temperate": (255, 255, 0),
    "cold": (0, 0, 255),
    "freezing": (255, 255, 255),
}

# Seed for the palette of categories without a named color.
FALLBACK_PALETTE_SEED = 0


def create_category_lut(layer_config: LayerConfig) -> np.ndarray:
    """Creates a LUT where the index is the category ID and the value is the RGB color."""
    categories = layer_config.categories

    # Unknown names get a deterministic but random color.
    rng = np.random.default_rng(FALLBACK_PALETTE_SEED)
    fallback = rng.integers(0, 256, size=(len(categories), 3), dtype=np.uint8)

    lut = np.empty((len(categories), 3), dtype=np.uint8)
    for category, name in enumerate(categories):
        lut[category] = COLOR_MAP_CATEGORIES.get(name, fallback[category])
    return lut


def get_category_color_array(grid: np.ndarray, lut: np.ndarray) -> np.ndarray:
    """
    Converts a category grid into an (height, width, 3) RGB array using a
    pre-computed lookup table. This is a very fast operation.
    """
    return lut[grid]


def save_layer_preview(grid: np.ndarray, layer_config: LayerConfig, file_path: str) -> str:
    """Writes a palettized PNG preview of one layer."""
    colors = get_category_color_array(grid, create_category_lut(layer_config))
    img = Image.fromarray(colors, 'RGB')
    # Palettized mode (PNG-8) keeps previews small.
    img = img.quantize(colors=256)
    img.save(file_path, 'PNG')
    return file_path
