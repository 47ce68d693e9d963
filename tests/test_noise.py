"""Tests for the simplex noise kernel and the NoiseField wrapper."""

from __future__ import annotations

import numpy as np
import pytest

from world_pyramid import noise
from world_pyramid.noise import NoiseField, simplex_noise_2d


def _coords(size: int = 64, span: float = 25.0) -> tuple[np.ndarray, np.ndarray]:
    axis = np.linspace(-span, span, size)
    return np.meshgrid(axis, axis * 0.731 + 3.3)


class TestSimplexNoise:
    def test_output_within_unit_range(self) -> None:
        x, z = _coords()
        for sub_seed in (0, 42, -7, 2**31 - 1):
            values = NoiseField().sample_grid(x, z, sub_seed)
            assert values.min() >= -1.0
            assert values.max() <= 1.0

    def test_not_constant(self) -> None:
        x, z = _coords()
        values = NoiseField().sample_grid(x, z, 42)
        assert values.std() > 0.05

    def test_same_inputs_same_output(self) -> None:
        field = NoiseField()
        assert field.sample(1.25, -3.5, 42) == field.sample(1.25, -3.5, 42)

    def test_independent_of_call_order(self) -> None:
        field = NoiseField()
        a_first = field.sample(0.3, 0.9, 5)
        b_first = field.sample(7.1, 2.2, 99)

        fresh = NoiseField()
        b_second = fresh.sample(7.1, 2.2, 99)
        a_second = fresh.sample(0.3, 0.9, 5)

        assert a_first == a_second
        assert b_first == b_second

    def test_sub_seeds_decorrelate(self) -> None:
        x, z = _coords()
        field = NoiseField()
        assert not np.array_equal(field.sample_grid(x, z, 42), field.sample_grid(x, z, 1042))

    def test_lattice_origin_is_zero(self) -> None:
        """At a lattice point the own corner has zero offset and the others fall off."""
        for sub_seed in (0, 1, 12345):
            assert simplex_noise_2d(0.0, 0.0, sub_seed) == 0.0

    def test_grid_matches_scalar(self) -> None:
        x, z = _coords(size=8)
        field = NoiseField()
        grid = field.sample_grid(x, z, 17)
        for r, c in [(0, 0), (3, 5), (7, 7), (2, 6)]:
            assert grid[r, c] == field.sample(x[r, c], z[r, c], 17)

    def test_grid_rejects_mismatched_shapes(self) -> None:
        with pytest.raises(ValueError):
            NoiseField().sample_grid(np.zeros((2, 3)), np.zeros((3, 2)), 1)


class TestLatticeHash:
    def test_wraps_to_signed_32_bit(self) -> None:
        assert noise._wrap_int32(2**31) == -(2**31)
        assert noise._wrap_int32(2**32 + 5) == 5
        assert noise._wrap_int32(-1) == -1

    @pytest.mark.parametrize(
        ("i", "j", "seed"),
        [(0, 0, 0), (-5, 9, 42), (2**31 - 1, -(2**31), 2**31 - 1), (123456, -654321, -99)],
    )
    def test_hash_in_byte_range(self, i: int, j: int, seed: int) -> None:
        h = noise._hash(i, j, seed)
        assert 0 <= h <= 255
        assert h == noise._hash(i, j, seed)
