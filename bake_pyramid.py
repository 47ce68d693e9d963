# bake_pyramid.py

"""
================================================================================
OFFLINE PYRAMID BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a world's map pyramid once
and saving it to disk ("baking"), together with a PNG preview of every layer.
The game then loads the baked package instead of regenerating it.

Usage:
    python bake_pyramid.py --config path/to/your/config.json
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
from tqdm import tqdm

# Add project root to Python path to allow importing from world_pyramid
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from world_pyramid import config as DEFAULTS
from world_pyramid.pyramid import WorldMapPyramid
from world_pyramid.storage import save_pyramid
from world_pyramid import color_maps

PREVIEWS_DIRNAME = "previews"


def save_previews(pyramid: WorldMapPyramid, output_dir: str, logger: logging.Logger) -> list:
    """Writes one palettized PNG per layer and returns their paths."""
    preview_dir = os.path.join(output_dir, PREVIEWS_DIRNAME)
    os.makedirs(preview_dir, exist_ok=True)

    paths = []
    for index, layer_config in enumerate(tqdm(pyramid.layer_configs, desc="Saving Previews")):
        file_path = os.path.join(preview_dir, f"{index}_{layer_config.name}.png")
        color_maps.save_layer_preview(pyramid.layer(index), layer_config, file_path)
        paths.append(file_path)
    logger.info(f"Saved {len(paths)} layer preview(s) to '{preview_dir}'")
    return paths


# --- Main Baking Function ---
def bake_pyramid(config_path: str, output_dir: str = None, previews: bool = True,
                 logger: logging.Logger = None) -> str | None:
    """
    Loads a configuration, generates the pyramid, and saves it as a package.

    Returns:
        str | None: The package directory, or None if the config was unusable.
    """
    logger = logger if logger is not None else logging.getLogger("Baker")

    # 1. --- Load Configuration ---
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None

    try:
        settings = DEFAULTS.load_settings(config.get('pyramid_parameters', {}))
    except (TypeError, ValueError) as e:
        logger.critical(f"Invalid layer configuration: {e}")
        return None

    seed = settings['seed']
    if output_dir is None:
        output_dir = os.path.join("baked_worlds", f"seed_{seed}")

    # 2. --- Generate ---
    start_time = time.perf_counter()
    try:
        pyramid = WorldMapPyramid(seed, settings['layers'], logger=logger, workers=settings['workers'])
    except (TypeError, ValueError) as e:
        logger.critical(f"Pyramid generation refused its configuration: {e}")
        return None

    pyramid.log_statistics()

    # 3. --- Save ---
    save_pyramid(pyramid, output_dir, logger)
    if previews:
        save_previews(pyramid, output_dir, logger)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    return output_dir


# --- Command-Line Interface ---
def main(argv=None):
    parser = argparse.ArgumentParser(description="Offline baker for the layered world-map pyramid.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the world to be baked."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory. Defaults to baked_worlds/seed_<seed>."
    )
    parser.add_argument(
        "--no-previews",
        action="store_true",
        help="Skip writing PNG previews of each layer."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )

    result = bake_pyramid(args.config, args.output, previews=not args.no_previews)
    return 0 if result else 1


if __name__ == "__main__":
    sys.exit(main())
