#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# Create the tile catalog - the tiles available to the collapse along with
# the orientations (transforms) each tile may appear in.
#
# Tiles are square images in a single directory. The file name (without
# the extension) is split on "_" into tokens:
#
#   <id>_<name>[_<symmetry>]   or   <name>_<id>[_<symmetry>]
#
# The id is a positive integer and whichever of the first two tokens is
# numeric is taken as the id. The symmetry tag is one of L, T, I, X, F,
# BackSlash and ForwardSlash (the single characters "\" and "/" are also
# accepted when the file system allows them). Without a tag the tile is X.
#
# Each tile image is reduced to a colour summary: the average RGB values of
# each square of a dim*dim subdivision of the image. The average colour of
# the whole tile is that tile's key colour. Every square of the summary is
# then labelled with the id of the tile whose key colour is closest, giving
# a dim*dim bitmap of tile ids. That bitmap is the tile's identity
# appearance; the symmetry class decides which rotations and reflections of
# it are generated.
#
# A file that can't be understood is skipped with a message. It does not
# stop the rest of the catalog from loading.


import math
import os
import sys
from PIL import Image

from rules import UnknownTileId


# Set to True to include debugging messages
CATALOG_DEBUG = False

# The number of subdivisions on the x and y axes used for the tile bitmap.
DEFAULT_DIM = 4

# Symmetry used when the file name doesn't give one.
DEFAULT_SYMMETRY = "X"

# File name tag -> symmetry class.
SYMMETRY_TAGS = {
    "L": "L",
    "T": "T",
    "I": "I",
    "X": "X",
    "F": "F",
    "BackSlash": "BackSlash",
    "\\": "BackSlash",
    "ForwardSlash": "ForwardSlash",
    "/": "ForwardSlash",
}

SYMMETRIES = ("L", "T", "I", "BackSlash", "ForwardSlash", "F", "X")

IMAGE_FORMATS = ('png', 'jpg', 'gif')


class CatalogError(Exception):
    pass


class TileDescriptor:

    def __init__(self, id, name, symmetry, bitmap, weight=0.0, path=None):
        self.id = id
        self.name = name
        self.symmetry = symmetry
        self.bitmap = bitmap
        # reserved, the collapse draws candidates uniformly
        self.weight = weight
        self.path = path

    def __repr__(self):
        return "TileDescriptor({}, {!r}, {})".format(self.id, self.name, self.symmetry)


# Rotate a square bitmap 90 degrees clockwise: transpose then reverse.
# Row i of the original becomes column n-i-1 of the result.

def rotateCW(bitmap):
    n = len(bitmap)
    rotated = [[0] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            rotated[j][n-i-1] = bitmap[i][j]
    return rotated


# Mirror the columns within each row.

def reflect(bitmap):
    n = len(bitmap)
    reflected = [[0] * n for _ in range(n)]
    for i in range(n):
        for j in range(n):
            reflected[i][n-j-1] = bitmap[i][j]
    return reflected


# The transform set for a tile, always starting with the identity:
#
#   L                 identity, rot90, rot180, rot270
#   T                 identity, rot90, rot180
#   I                 identity, rot90
#   BackSlash, X      identity, reflection
#   ForwardSlash      identity
#   F                 identity, reflection, rot90, rot180, rot270

def generateTransforms(tile):
    identity = [list(row) for row in tile.bitmap]
    cw1 = rotateCW(identity)
    cw2 = rotateCW(cw1)
    cw3 = rotateCW(cw2)
    symmetry = tile.symmetry

    if symmetry == "L":
        return [identity, cw1, cw2, cw3]
    elif symmetry == "T":
        return [identity, cw1, cw2]
    elif symmetry == "I":
        return [identity, cw1]
    elif symmetry == "BackSlash" or symmetry == "X":
        return [identity, reflect(identity)]
    elif symmetry == "ForwardSlash":
        return [identity]
    elif symmetry == "F":
        return [identity, reflect(identity), cw1, cw2, cw3]

    raise CatalogError("Invalid symmetry {!r} for tile {}".format(symmetry, tile.id))


# Every value found anywhere in the transform set.

def transformValues(transforms):
    values = set()
    for bitmap in transforms:
        for row in bitmap:
            values.update(row)
    return frozenset(values)


# Ids are plain ASCII digits. str.isdigit also accepts characters such as
# superscripts that int() rejects.

def isIdToken(token):
    return token.isascii() and token.isdigit()


# Split a tile file name into (id, name, symmetry).

def parseTileFilename(filename):
    stem = os.path.splitext(os.path.basename(filename))[0]
    parts = stem.split('_')

    if len(parts) not in (2, 3):
        raise CatalogError("Unexpected filename format: {}".format(filename))

    if isIdToken(parts[0]):
        (idToken, name) = (parts[0], parts[1])
    elif isIdToken(parts[1]):
        (idToken, name) = (parts[1], parts[0])
    else:
        raise CatalogError("Failed to parse id from filename: {}".format(filename))

    tileId = int(idToken)
    if tileId <= 0:
        raise CatalogError("Tile id must be positive in filename: {}".format(filename))
    if name == "":
        raise CatalogError("Missing tile name in filename: {}".format(filename))

    symmetry = DEFAULT_SYMMETRY
    if len(parts) == 3:
        if parts[2] not in SYMMETRY_TAGS:
            raise CatalogError("Invalid symmetry in filename: {}".format(filename))
        symmetry = SYMMETRY_TAGS[parts[2]]

    return (tileId, name, symmetry)


# Return the colour summary of the image subdividing into dim*dim squares.
# The result is a list of rows (top to bottom), each a list of (r, g, b)
# averages (left to right). Note the getpixel function references the
# image using x,y coordinates where x is the width and y is the height.

def colours(im, dim):
    width, height = im.size
    if width < dim or height < dim:
        raise CatalogError("Image {}x{} too small for dim {}".format(width, height, dim))

    summary = []
    for y in range(dim):
        jOffset = int(y * height / dim)
        row = []
        for x in range(dim):
            iOffset = int(x * width / dim)
            (red, green, blue, count) = (0, 0, 0, 0)
            for i in range(int(width/dim)):
                for j in range(int(height/dim)):
                    r, g, b = im.getpixel((i + iOffset, j + jOffset))
                    red += r
                    green += g
                    blue += b
                    count += 1
            row.append((round(red / count), round(green / count), round(blue / count)))
        summary.append(row)
    return summary


def averageColour(im):
    return colours(im, 1)[0][0]


# The Euclidean distance between two RGB colours.

def distance(c1, c2):
    reddist = c1[0] - c2[0]
    greendist = c1[1] - c2[1]
    bluedist = c1[2] - c2[2]
    return math.sqrt(reddist*reddist + greendist*greendist + bluedist*bluedist)


# The id whose key colour is closest to colour. Ties go to the smaller id.

def nearestId(colour, palette):
    bestId = None
    bestDistance = None
    for tileId in sorted(palette.keys()):
        d = distance(colour, palette[tileId])
        if bestDistance is None or d < bestDistance:
            (bestId, bestDistance) = (tileId, d)
    return bestId


def labelBitmap(summary, palette):
    return [[nearestId(c, palette) for c in row] for row in summary]


class TileCatalog:

    def __init__(self, tiles=()):
        self.tiles = dict()
        self.transforms = dict()
        self.values = dict()
        for tile in tiles:
            self.add(tile)

    def __len__(self):
        return len(self.tiles)

    def __contains__(self, tileId):
        return tileId in self.tiles

    def __iter__(self):
        for tileId in sorted(self.tiles.keys()):
            yield self.tiles[tileId]

    # Check the tile and cache its transform set. Raises CatalogError and
    # leaves the catalog unchanged if the tile isn't usable.
    def add(self, tile):
        if not isinstance(tile.id, int) or tile.id <= 0:
            raise CatalogError("Tile id must be a positive integer: {!r}".format(tile.id))
        if tile.id in self.tiles:
            raise CatalogError("Duplicate tile id {} ({} and {})".format(tile.id, self.tiles[tile.id].name, tile.name))
        if tile.symmetry not in SYMMETRIES:
            raise CatalogError("Invalid symmetry {!r} for tile {}".format(tile.symmetry, tile.id))
        if tile.weight < 0:
            raise CatalogError("Negative weight for tile {}".format(tile.id))
        n = len(tile.bitmap)
        if n == 0 or any(len(row) != n for row in tile.bitmap):
            raise CatalogError("Bitmap for tile {} is not square".format(tile.id))

        transforms = generateTransforms(tile)
        self.tiles[tile.id] = tile
        self.transforms[tile.id] = transforms
        self.values[tile.id] = transformValues(transforms)

    def ids(self):
        return set(self.tiles.keys())

    def tile(self, tileId):
        try:
            return self.tiles[tileId]
        except KeyError:
            raise UnknownTileId(tileId) from None

    def nameOf(self, tileId):
        return self.tile(tileId).name

    def pathOf(self, tileId):
        return self.tile(tileId).path

    def transformsOf(self, tileId):
        self.tile(tileId)
        return self.transforms[tileId]

    # The transform-compatible value space of the tile.
    def valuesOf(self, tileId):
        self.tile(tileId)
        return self.values[tileId]


# Read one tile file: its (id, name, symmetry) and its colour summary.

def readTile(fname, dim):
    (tileId, name, symmetry) = parseTileFilename(fname)
    try:
        im = Image.open(fname).convert("RGB")
    except OSError as e:
        raise CatalogError("Error reading file: {} ({})".format(fname, e)) from e

    try:
        width, height = im.size
        if width != height:
            raise CatalogError("Tile image is not square: {} ({}x{})".format(fname, width, height))
        summary = colours(im, dim)
        key = averageColour(im)
    finally:
        im.close()

    return (tileId, name, symmetry, summary, key)


# Build the catalog from every image file in the directory.

def loadTileset(directory, dim=DEFAULT_DIM):
    read = []
    seen = set()
    for file in sorted(os.listdir(directory)):
        fname = os.path.join(directory, file)
        ext = os.path.splitext(file.lower())[1][1:]
        if not os.path.isfile(fname) or ext not in IMAGE_FORMATS:
            continue
        if CATALOG_DEBUG:
            print("Processing file: {}".format(file))
        try:
            entry = readTile(fname, dim)
            if entry[0] in seen:
                raise CatalogError("Duplicate tile id {} in filename: {}".format(entry[0], file))
        except CatalogError as e:
            print("Skipping tile: {}".format(e))
            continue
        seen.add(entry[0])
        read.append((fname, entry))

    palette = dict()
    for (fname, (tileId, name, symmetry, summary, key)) in read:
        palette[tileId] = key

    catalog = TileCatalog()
    for (fname, (tileId, name, symmetry, summary, key)) in read:
        tile = TileDescriptor(tileId, name, symmetry, labelBitmap(summary, palette), path=fname)
        try:
            catalog.add(tile)
        except CatalogError as e:
            print("Skipping tile: {}".format(e))
            continue
        if CATALOG_DEBUG:
            print("Successfully loaded tile with id: {}, name: {}".format(tileId, name))

    print("Loaded {} tiles in total.".format(len(catalog)))
    return catalog


# Print the catalog: each tile, its transform count and the values its
# transforms contain.

def main(directory, dim):
    catalog = loadTileset(directory, dim)
    for tile in catalog:
        print("{:>4} {:<12} {:<12} transforms {} values {}".format(
            tile.id, tile.name, tile.symmetry, len(catalog.transformsOf(tile.id)), sorted(catalog.valuesOf(tile.id))))
        if CATALOG_DEBUG:
            for row in tile.bitmap:
                print("     {}".format(" ".join(str(v) for v in row)))
    print("Dim:            {}".format(dim))


# Command line options are:
#
#   directory  - the tileset directory containing the tile images
#   dim        - the subdivisions on the x and y axes for the tile bitmaps

if __name__ == '__main__':
    if len(sys.argv) != 3:
        print("Usage: {} directory dim".format(sys.argv[0]))
    else:
        main(sys.argv[1], int(sys.argv[2]))
