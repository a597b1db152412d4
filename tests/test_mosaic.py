"""Tests for stitching collapsed grids into images."""

import os
import random

import pytest
from PIL import Image, ImageChops

from catalog import TileCatalog, TileDescriptor, loadTileset
from grid import Grid
import mosaic
from mosaic import RenderError, UNRESOLVED_COLOUR, compose, stitchImages
from solver import Solver


@pytest.fixture
def terrain(tileset_dir):
    return loadTileset(str(tileset_dir), 4)


@pytest.fixture
def collapsed(terrain, open_rules):
    grid = Grid(3, terrain, open_rules, random.Random(11))
    Solver(grid, progress=False).run()
    return grid


def same_image(a, b):
    return ImageChops.difference(a.convert("RGB"), b.convert("RGB")).getbbox() is None


class TestStitchImages:
    """Tests for stitchImages."""

    def test_saves_tiles_in_place(self, collapsed, terrain, tmp_path):
        """Test each cell's tile is pasted unchanged at its position."""
        outname = str(tmp_path / "final_image.png")
        assert stitchImages(collapsed, terrain, outname) == outname

        with Image.open(outname) as out:
            assert out.size == (96, 96)
            for cell in collapsed:
                box = (cell.x * 32, cell.y * 32, cell.x * 32 + 32, cell.y * 32 + 32)
                with Image.open(terrain.pathOf(cell.value)) as tile:
                    assert same_image(out.crop(box), tile)

    def test_not_fully_collapsed(self, terrain, open_rules, tmp_path):
        grid = Grid(3, terrain, open_rules, random.Random(1))
        grid.collapse()
        with pytest.raises(RenderError):
            stitchImages(grid, terrain, str(tmp_path / "out.png"))
        assert not os.path.exists(str(tmp_path / "out.png"))

    def test_missing_tile_image(self, collapsed, terrain, tmp_path):
        """Test a tile file removed after loading is a RenderError."""
        os.remove(terrain.pathOf(collapsed.cell(2, 2).value))
        with pytest.raises(RenderError):
            stitchImages(collapsed, terrain, str(tmp_path / "out.png"))

    def test_missing_tile_closes_opened_tiles(self, collapsed, terrain, tmp_path, monkeypatch):
        """Test tiles opened before a failing tile are still closed."""
        opened = []
        closed = []
        realTileImage = mosaic.tileImage
        realClose = Image.Image.close

        def tileImage(catalog, tileId, cache):
            im = realTileImage(catalog, tileId, cache)
            if not any(im is o for o in opened):
                opened.append(im)
            return im

        def close(self):
            closed.append(self)
            realClose(self)

        monkeypatch.setattr(mosaic, "tileImage", tileImage)
        monkeypatch.setattr(Image.Image, "close", close)

        # the first resolved cell's tile is opened for the tile size
        first = collapsed.cell(0, 0).value
        missing = next(c.value for c in collapsed if c.value != first)
        os.remove(terrain.pathOf(missing))

        with pytest.raises(RenderError):
            stitchImages(collapsed, terrain, str(tmp_path / "out.png"))
        assert opened
        assert all(any(im is c for c in closed) for im in opened)

    def test_tile_without_file(self, open_rules, tmp_path):
        catalog = TileCatalog([TileDescriptor(1, "plains", "X", [[1]])])
        grid = Grid(1, catalog, open_rules, random.Random(1))
        Solver(grid, progress=False).run()
        with pytest.raises(RenderError):
            stitchImages(grid, catalog, str(tmp_path / "out.png"))

    def test_save_failure(self, collapsed, terrain, tmp_path):
        with pytest.raises(RenderError):
            stitchImages(collapsed, terrain, str(tmp_path / "out.unknownformat"))
        with pytest.raises(RenderError):
            stitchImages(collapsed, terrain, str(tmp_path / "missing" / "out.png"))


class TestCompose:
    """Tests for composing partial grids."""

    def test_unresolved_cells_are_blank(self, terrain, open_rules):
        grid = Grid(3, terrain, open_rules, random.Random(2))
        grid.collapse()
        image = compose(grid, terrain)
        assert image.size == (96, 96)
        assert image.getpixel((0, 0)) == UNRESOLVED_COLOUR
        with Image.open(terrain.pathOf(grid.cell(1, 1).value)) as tile:
            assert same_image(image.crop((32, 32, 64, 64)), tile)

    def test_nothing_resolved(self, terrain, open_rules):
        """Test the tile size comes from the catalog before any collapse."""
        grid = Grid(2, terrain, open_rules, random.Random(2))
        image = compose(grid, terrain)
        assert image.size == (64, 64)
        assert image.getbbox() is None
