#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# Stitch the tile images of a collapsed grid into one output image.
#
# The size of a single tile is taken from the first tile image used, and
# the output image is (tile width * grid size, tile height * grid size).
# Each resolved cell has its tile image pasted at its (column, row)
# position, replacing whatever is there - tiles are not blended.
#
# Unresolved cells are left black, which lets the live viewer show a grid
# part way through a collapse. Only a fully collapsed grid is saved.


from PIL import Image

from rules import UnknownTileId


# Set to True to include debugging messages
MOSAIC_DEBUG = False

# Background colour for unresolved cells.
UNRESOLVED_COLOUR = (0, 0, 0)


class RenderError(Exception):
    pass


# Open the image for tileId, remembering it in cache.

def tileImage(catalog, tileId, cache):
    if tileId in cache:
        return cache[tileId]

    try:
        tile = catalog.tile(tileId)
    except UnknownTileId as e:
        raise RenderError("No image file for tile {}".format(tileId)) from e
    if tile.path is None:
        raise RenderError("No image file for tile {} ({})".format(tileId, tile.name))
    if MOSAIC_DEBUG:
        print("Trying to open: {}".format(tile.path))
    try:
        im = Image.open(tile.path).convert("RGB")
    except OSError as e:
        raise RenderError("Failed to open tile image {}: {}".format(tile.path, e)) from e

    cache[tileId] = im
    return im


# The (width, height) of a single tile. Uses the first resolved cell, or the
# first tile in the catalog if nothing has been resolved yet.

def tileSize(grid, catalog, cache):
    for cell in grid:
        if cell.value is not None:
            return tileImage(catalog, cell.value, cache).size
    for tile in catalog:
        return tileImage(catalog, tile.id, cache).size
    raise RenderError("No tiles to take the tile size from")


# Paste every resolved cell's tile into a new image.

def compose(grid, catalog, cache=None):
    if cache is None:
        cache = dict()

    (width, height) = tileSize(grid, catalog, cache)
    imageWidth = width * grid.size
    imageHeight = height * grid.size
    if MOSAIC_DEBUG:
        print("Creating image size : {} {}".format(imageWidth, imageHeight))

    bigimage = Image.new("RGB", (imageWidth, imageHeight), UNRESOLVED_COLOUR)
    for cell in grid:
        if cell.value is None:
            continue
        tile = tileImage(catalog, cell.value, cache)
        if tile.size != (width, height):
            tile = tile.resize((width, height))
        left = cell.x * width
        top = cell.y * height
        bigimage.paste(tile, (left, top, left + width, top + height))

    return bigimage


# Compose the fully collapsed grid and save it as outname.

def stitchImages(grid, catalog, outname):
    if not grid.isFullyCollapsed():
        raise RenderError("Grid is not fully collapsed ({} of {} cells resolved)".format(grid.resolvedCount(), len(grid)))

    cache = dict()
    try:
        bigimage = compose(grid, catalog, cache)
        print("Saving final image {} ({}x{})".format(outname, bigimage.size[0], bigimage.size[1]))
        try:
            bigimage.save(outname)
        except (OSError, ValueError) as e:
            raise RenderError("Failed to save {}: {}".format(outname, e)) from e
        finally:
            bigimage.close()
    finally:
        for im in cache.values():
            im.close()

    return outname
