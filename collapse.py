#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# Generate a terrain map by collapsing a grid of tiles and stitch the tile
# images into one output image.
#
# There are no command line options. The run loads the tileset, collapses
# a GRID_SIZE x GRID_SIZE grid against the terrain ruleset once, and writes
# OUTPUT_IMAGE if the grid collapsed fully. A contradiction ends the run
# without an image; run again for another attempt.
#
# The environment variables below change a run:
#
#   WFC_SEED     - integer seed for a reproducible run
#   WFC_VIEWER   - set to anything to watch the collapse in a window
#   WFC_TILESET  - the tileset directory to use instead of TILESET_DIR


import os
import random
import sys

from catalog import loadTileset
from grid import ContradictionError, Grid, GridConstructionError
from mosaic import RenderError, stitchImages
from rules import UnknownTileId, terrainRuleset
from solver import Solver


# The number of cells on each side of the grid.
GRID_SIZE = 32

# Directory holding the tile images.
TILESET_DIR = "tileset"

# The stitched map.
OUTPUT_IMAGE = "final_image.png"

# Subdivisions on each axis of a tile's bitmap.
TILE_DIM = 4

ENV_WFC_SEED = "WFC_SEED"
ENV_WFC_VIEWER = "WFC_VIEWER"
ENV_WFC_TILESET = "WFC_TILESET"


def makeRng():
    seed = os.getenv(ENV_WFC_SEED)
    if seed is None or seed == "":
        return random.Random()
    print("Using seed {}".format(seed))
    return random.Random(int(seed))


# One synthesis pass. Returns the process exit status.

def main():
    print("Initializing Program...")
    tileset = os.getenv(ENV_WFC_TILESET) or TILESET_DIR

    try:
        rng = makeRng()
    except ValueError:
        print("{} must be an integer, not {!r}".format(ENV_WFC_SEED, os.getenv(ENV_WFC_SEED)))
        return 1

    if not os.path.isdir(tileset):
        print("Tileset directory not found: {}".format(tileset))
        return 1

    catalog = loadTileset(tileset, TILE_DIM)
    rules = terrainRuleset()
    if not rules.isSymmetric():
        print("Note: the adjacency rules are directed, not symmetric")

    try:
        grid = Grid(GRID_SIZE, catalog, rules, rng)
    except GridConstructionError as e:
        print("Failed to create grid: {}".format(e))
        return 1

    try:
        if os.getenv(ENV_WFC_VIEWER):
            from viewer import watch
            watch(Solver(grid, progress=False), catalog)
        else:
            Solver(grid).run()
    except ContradictionError as e:
        print("Grid collapsing ended with a contradiction: {}".format(e))
        return 1
    except UnknownTileId as e:
        print("Grid collapsing failed: {}".format(e))
        return 1

    try:
        stitchImages(grid, catalog, OUTPUT_IMAGE)
    except RenderError as e:
        print("Failed to stitch images: {}".format(e))
        return 1

    print("Image stitching completed successfully.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
