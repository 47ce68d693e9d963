# fidelity_probe.py

"""
Verifies that a baked pyramid package is faithful to its seed: the stored
grids are regenerated from `generation_config.json` and compared byte for
byte, and a handful of world positions are probed through `sample_at`.

Usage:
    python fidelity_probe.py baked_worlds/seed_1337
"""
import argparse
import logging
import sys

import numpy as np

from world_pyramid.pyramid import WorldMapPyramid
from world_pyramid.storage import load_pyramid


def probe_points(extent_blocks: int) -> list:
    """Corners, centre, and two points well outside the world."""
    last = extent_blocks - 1
    return [
        (0, 0), (last, 0), (0, last), (last, last),
        (extent_blocks // 2, extent_blocks // 2),
        (-10 * extent_blocks, 3), (10 * extent_blocks, 10 * extent_blocks),
    ]


def run_probe_on_layer(logger, baked: WorldMapPyramid, live: WorldMapPyramid, layer_index: int) -> bool:
    """Compares one layer of the baked and regenerated pyramids."""
    config = baked.layer_configs[layer_index]
    logger.info(f"--- Probing layer {layer_index} '{config.name}' ---")

    if not np.array_equal(baked.layer(layer_index), live.layer(layer_index)):
        mismatches = int(np.count_nonzero(baked.layer(layer_index) != live.layer(layer_index)))
        logger.error(f"  - Grid mismatch: {mismatches} cell(s) differ from regeneration.")
        return False

    layer_passed = True
    for world_x, world_z in probe_points(config.extent_blocks):
        baked_value = baked.sample_at(layer_index, world_x, world_z)
        live_value = live.sample_at(layer_index, world_x, world_z)
        result = "PASS" if baked_value == live_value else "FAIL"
        if result == "FAIL":
            layer_passed = False
        logger.info(f"  - Probing world ({world_x}, {world_z}): Baked={baked_value}, Live={live_value} -> {result}")
    return layer_passed


def run_full_probe(package_path: str, logger: logging.Logger = None) -> bool:
    logger = logger if logger is not None else logging.getLogger("FidelityProbe")

    try:
        baked = load_pyramid(package_path, logger)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Could not load baked package: {e}")
        return False

    logger.info("Regenerating pyramid from the stored seed and layer configuration...")
    live = WorldMapPyramid(baked.seed, baked.layer_configs, logger=logger)

    all_probes_passed = True
    for layer_index in range(len(baked)):
        if not run_probe_on_layer(logger, baked, live, layer_index):
            all_probes_passed = False

    if all_probes_passed:
        logger.info("SUCCESS: Every layer is faithful to its seed.")
    else:
        logger.error("FAILURE: Mismatch detected in one or more layers.")
    return all_probes_passed


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description="Check a baked pyramid package against regeneration.")
    parser.add_argument("package", type=str, help="Path to a package written by bake_pyramid.py.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
    sys.exit(0 if run_full_probe(args.package) else 1)
