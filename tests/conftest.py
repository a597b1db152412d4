"""Shared fixtures for the tile collapse tests."""

import random

import pytest

from catalog import TileCatalog, TileDescriptor
from rules import AdjacencyRuleset
import tiles


def solid_catalog(ids, dim=2):
    """A catalog where every tile's bitmap is filled with its own id."""
    return TileCatalog(
        TileDescriptor(tile_id, "tile{}".format(tile_id), "X", [[tile_id] * dim for _ in range(dim)])
        for tile_id in ids
    )


@pytest.fixture
def scenario_rules() -> AdjacencyRuleset:
    """A four tile table where every id rejects at least one other."""
    return AdjacencyRuleset({1: [1, 2, 3], 2: [1, 2], 3: [1, 3, 4], 4: [3, 4]})


@pytest.fixture
def chain_rules() -> AdjacencyRuleset:
    """1 - 2 - 3: tile 2 fits between anything, so no grid can contradict."""
    return AdjacencyRuleset({1: [1, 2], 2: [1, 2, 3], 3: [2, 3]})


@pytest.fixture
def open_rules() -> AdjacencyRuleset:
    """Every terrain may sit next to every other."""
    return AdjacencyRuleset({i: range(1, 7) for i in range(1, 7)})


@pytest.fixture
def four_tiles() -> TileCatalog:
    return solid_catalog([1, 2, 3, 4])


@pytest.fixture
def three_tiles() -> TileCatalog:
    return solid_catalog([1, 2, 3])


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def tileset_dir(tmp_path):
    """The synthetic six terrain tileset written to a temporary directory."""
    folder = tmp_path / "tileset"
    tiles.generate(str(folder), seed=7)
    return folder
