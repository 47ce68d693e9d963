"""Tests for the offline baker, the fidelity probe and preview colors."""

from __future__ import annotations

import json
import os

import numpy as np
import pytest
from PIL import Image

import bake_pyramid
import fidelity_probe
from world_pyramid import color_maps
from world_pyramid.config import LayerConfig
from world_pyramid.storage import CONFIG_FILENAME, LAYERS_DIRNAME

from tests.helpers import small_continent


def _write_config(tmp_path, parameters) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"pyramid_parameters": parameters}))
    return str(path)


@pytest.fixture
def small_config(tmp_path, small_layers) -> str:
    return _write_config(tmp_path, {
        "seed": 7,
        "workers": 2,
        "layers": [layer.to_dict() for layer in small_layers],
    })


class TestBakePyramid:
    def test_bakes_package_with_previews(self, tmp_path, small_config) -> None:
        output = str(tmp_path / "out")

        result = bake_pyramid.bake_pyramid(small_config, output)

        assert result == output
        assert os.path.isfile(os.path.join(output, CONFIG_FILENAME))
        assert sorted(os.listdir(os.path.join(output, LAYERS_DIRNAME))) == ["0_continent.npy", "1_temperature.npy"]
        preview = os.path.join(output, bake_pyramid.PREVIEWS_DIRNAME, "1_temperature.png")
        with Image.open(preview) as img:
            assert img.size == (128, 128)

    def test_skips_previews(self, tmp_path, small_config) -> None:
        output = str(tmp_path / "out")
        bake_pyramid.bake_pyramid(small_config, output, previews=False)
        assert not os.path.exists(os.path.join(output, bake_pyramid.PREVIEWS_DIRNAME))

    def test_missing_config_file(self, tmp_path) -> None:
        assert bake_pyramid.bake_pyramid(str(tmp_path / "nope.json")) is None

    def test_malformed_json(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        assert bake_pyramid.bake_pyramid(str(path)) is None

    def test_invalid_layer(self, tmp_path) -> None:
        layer = {**small_continent().to_dict(), "resolution": 5}
        path = _write_config(tmp_path, {"seed": 1, "layers": [layer]})
        assert bake_pyramid.bake_pyramid(path, str(tmp_path / "out")) is None

    def test_invalid_seed(self, tmp_path, small_layers) -> None:
        path = _write_config(tmp_path, {"seed": "abc", "layers": [layer.to_dict() for layer in small_layers]})
        assert bake_pyramid.bake_pyramid(path, str(tmp_path / "out")) is None

    def test_main_exit_codes(self, tmp_path, small_config) -> None:
        assert bake_pyramid.main(["--config", small_config, "--output", str(tmp_path / "out"), "--no-previews"]) == 0
        assert bake_pyramid.main(["--config", str(tmp_path / "missing.json")]) == 1


class TestFidelityProbe:
    def test_baked_package_is_faithful(self, tmp_path, small_config) -> None:
        output = bake_pyramid.bake_pyramid(small_config, str(tmp_path / "out"), previews=False)
        assert fidelity_probe.run_full_probe(output) is True

    def test_detects_tampering(self, tmp_path, small_config) -> None:
        output = bake_pyramid.bake_pyramid(small_config, str(tmp_path / "out"), previews=False)
        path = os.path.join(output, LAYERS_DIRNAME, "1_temperature.npy")
        grid = np.load(path)
        grid[grid > 0] = 1
        grid[0, 0] = 0 if grid[0, 0] else 1
        np.save(path, grid)

        assert fidelity_probe.run_full_probe(output) is False

    def test_misaligned_package_fails_cleanly(self, tmp_path, small_config) -> None:
        output = bake_pyramid.bake_pyramid(small_config, str(tmp_path / "out"), previews=False)
        config_path = os.path.join(output, CONFIG_FILENAME)
        with open(config_path) as f:
            stored = json.load(f)
        stored["layers"][1]["scale_factor"] = 2
        with open(config_path, 'w') as f:
            json.dump(stored, f)

        assert fidelity_probe.run_full_probe(output) is False

    def test_missing_package(self, tmp_path) -> None:
        assert fidelity_probe.run_full_probe(str(tmp_path)) is False

    def test_probe_points_include_outside_world(self) -> None:
        points = fidelity_probe.probe_points(1024)
        assert (1023, 1023) in points
        assert any(x < 0 for x, _ in points)


class TestColorMaps:
    def test_named_categories(self, small_layers) -> None:
        lut = color_maps.create_category_lut(small_layers[1])
        assert lut.shape == (5, 3)
        assert tuple(lut[0]) == color_maps.COLOR_MAP_CATEGORIES["water"]
        assert tuple(lut[4]) == color_maps.COLOR_MAP_CATEGORIES["freezing"]

    def test_unknown_names_get_stable_colors(self) -> None:
        layer = LayerConfig.from_dict({
            **small_continent().to_dict(),
            "categories": ["water", "marsh"],
        })
        first = color_maps.create_category_lut(layer)
        second = color_maps.create_category_lut(layer)
        assert np.array_equal(first, second)
        assert tuple(first[0]) == color_maps.COLOR_MAP_CATEGORIES["water"]

    def test_color_array_shape(self) -> None:
        grid = np.array([[0, 1], [1, 0]], dtype=np.uint8)
        lut = np.array([[0, 0, 0], [255, 255, 255]], dtype=np.uint8)
        colors = color_maps.get_category_color_array(grid, lut)
        assert colors.shape == (2, 2, 3)
        assert colors[0, 1].tolist() == [255, 255, 255]
