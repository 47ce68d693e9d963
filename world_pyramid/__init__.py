# world_pyramid/__init__.py

# This file makes the 'world_pyramid' directory a Python package.
# We can also use it to define the public API of the package.

from .config import LayerConfig, continental_layer, temperature_layer, default_layers, load_settings
from .noise import NoiseField
from .layers import LayerGenerator
from .pyramid import WorldMapPyramid
from .storage import save_pyramid, load_pyramid

__all__ = [
    "LayerConfig",
    "continental_layer",
    "temperature_layer",
    "default_layers",
    "load_settings",
    "NoiseField",
    "LayerGenerator",
    "WorldMapPyramid",
    "save_pyramid",
    "load_pyramid",
]
