#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# This script generates a synthetic terrain tileset to demonstrate the
# tile collapse. One tile is written per terrain in rules.TERRAIN_NAMES,
# filled with the terrain colour and speckled with lighter and darker
# shades of it, and named <id>_<name>_<symmetry>.png.


import os
import random
import sys
from PIL import Image, ImageDraw

from rules import TERRAIN_NAMES


# Parameters
output_folder = "tileset"
tile_size = (32, 32)  # Width x Height
speckles = 40         # Number of specks drawn on each tile

TERRAIN_COLOURS = {
    "plains": (124, 186, 76),
    "forest": (34, 100, 44),
    "mountains": (128, 118, 110),
    "desert": (222, 196, 120),
    "shore": (238, 226, 170),
    "ocean": (40, 90, 180),
}

TERRAIN_SYMMETRY = {
    "plains": "X",
    "forest": "X",
    "mountains": "T",
    "desert": "X",
    "shore": "L",
    "ocean": "X",
}


def shade(colour, amount):
    return tuple(max(0, min(255, c + amount)) for c in colour)


def draw_tile(colour, size, rng):
    img = Image.new("RGB", size, color=colour)
    draw = ImageDraw.Draw(img)
    w, h = size
    for _ in range(speckles):
        x = rng.randrange(w)
        y = rng.randrange(h)
        draw.point((x, y), fill=shade(colour, rng.randint(-16, 16)))
    return img


def generate(folder=output_folder, size=tile_size, seed=None, names=TERRAIN_NAMES):
    rng = random.Random(seed)
    os.makedirs(folder, exist_ok=True)
    written = []
    for tile_id in sorted(names.keys()):
        name = names[tile_id]
        img = draw_tile(TERRAIN_COLOURS.get(name, (128, 128, 128)), size, rng)
        fname = os.path.join(folder, "{}_{}_{}.png".format(tile_id, name, TERRAIN_SYMMETRY.get(name, "X")))
        img.save(fname)
        img.close()
        written.append(fname)
    return written


# Command line options are:
#
#   folder - optional output directory, "tileset" by default

if __name__ == '__main__':
    folder = sys.argv[1] if len(sys.argv) > 1 else output_folder
    files = generate(folder)
    print(f"Generated {len(files)} synthetic tiles in '{folder}' folder.")
