from __future__ import annotations

import pytest

from world_pyramid.config import LayerConfig

from tests.helpers import small_continent, small_temperature

# 32 * 64 == 128 * 16: both layers cover the same world.
SMALL_EXTENT = 2048


@pytest.fixture
def small_layers() -> tuple[LayerConfig, ...]:
    """A 32x32 continent under a 128x128 temperature layer."""
    return (
        small_continent(32, extent=SMALL_EXTENT, radius=2),
        small_temperature(32, extent=SMALL_EXTENT, radius=1),
    )
