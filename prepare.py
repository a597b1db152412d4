#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# Prepare a tileset directory from a collection of tile images.
#
# The source images must already be named as tiles (see catalog.py), e.g.
# "3_mountains_T.jpg". Each one is cropped to the square in its middle,
# resized to THUMB_SIZE x THUMB_SIZE and written to the target directory as
# <id>_<name>_<symmetry>.png, the naming the catalog reads first.
#
# Two tiles that look the same make the rendered map ambiguous, so the
# images are checked for duplicates. Exact copies are found with an md5sum
# of the file and skipped. Near duplicates are found with the imagehash
# library, comparing both the difference hash (dhash, the layout of the
# tile) and the colour hash (flat terrain tiles all share the same dhash).
# An image whose hashes both differ from an earlier tile by less than
# hash_threshold is not added to the tileset but copied to
# <target_dir>_similar for review.


import hashlib
import os
import shutil
import sys
from PIL import Image
import imagehash

from catalog import CatalogError, IMAGE_FORMATS, parseTileFilename


# Set to True to include debugging messages
PREPARE_DEBUG = False

# The side of the square tile images written.
THUMB_SIZE = 32

# Symmetry tag written for each symmetry class.
SYMMETRY_NAMES = {
    "L": "L",
    "T": "T",
    "I": "I",
    "X": "X",
    "F": "F",
    "BackSlash": "BackSlash",
    "ForwardSlash": "ForwardSlash",
}


# Calculate the md5sum for the given file.
# Note that two images files may have the exact same image, but due to different
# metadata the files will have differing md5sum values, hence also hashing the images.

def md5sum(fname):
    hash_md5 = hashlib.md5()
    with open(fname, "rb") as f:
        for chunk in iter(lambda: f.read(4096), b""):
            hash_md5.update(chunk)
    return hash_md5.hexdigest()


# Open is a "lazy" operation. Convert to RGB now so a corrupted file fails
# here rather than later. Returns None if the file can't be read.

def readImageFile(fname):
    try:
        im = Image.open(fname)
        im = im.convert("RGB")
    except OSError:
        print("Error reading file: {}".format(fname))
        return None
    return im


# Create a square thumbnail of size THUMB_SIZE x THUMB_SIZE from the square
# portion in the middle of the provided image.
# Note the image coordinates go from (left,top) to (right,bottom): (0,0) -> (width,height)

def createThumb(im, size=THUMB_SIZE):
    width, height = im.size

    if width < height:
        side = width
        offset = int((height - width) / 2)
        (left, top) = (0, offset)
        (right, bottom) = (side, offset+side)
    elif width > height:
        side = height
        offset = int((width - height) / 2)
        (left, top) = (offset, 0)
        (right, bottom) = (offset+side, side)
    else:
        (left, top) = (0, 0)
        (right, bottom) = (width, height)

    tile = im.crop((left, top, right, bottom))
    thumb = tile.resize((size, size))
    tile.close()

    return thumb


# The (layout, colour) hashes of a tile image.

def tileHash(im):
    return (imagehash.dhash(im), imagehash.colorhash(im))


# Tiles are only as different as the closer of their two hashes.

def hashDifference(h1, h2):
    return max(h1[0] - h2[0], h1[1] - h2[1])


def tileFilename(tileId, name, symmetry):
    return "{}_{}_{}.png".format(tileId, name, SYMMETRY_NAMES[symmetry])


# The source tile images under the dirs directories, in a stable order.

def sourceImages(dirs):
    found = []
    for pics in dirs:
        for root, subdirs, files in os.walk(pics):
            subdirs.sort()
            for file in sorted(files):
                ext = os.path.splitext(file.lower())[1][1:]
                if ext in IMAGE_FORMATS:
                    found.append(os.path.join(root, file))
    return found


# Write the tileset to target from the images in dirs. Returns the counters
# printed at the end.

def main(target, hash_threshold, dirs, size=THUMB_SIZE):
    counts = {"total": 0, "written": 0, "md5": 0, "similar": 0, "skipped": 0, "errors": 0}
    md5s = dict()
    hashes = dict()
    ids = dict()

    target = target.rstrip(os.sep)
    targetSimilar = target + "_similar"
    os.makedirs(target, exist_ok=True)

    for fullFile in sourceImages(dirs):
        counts["total"] += 1

        try:
            (tileId, name, symmetry) = parseTileFilename(fullFile)
        except CatalogError as e:
            print("Skipping {}: {}".format(fullFile, e))
            counts["skipped"] += 1
            continue
        if tileId in ids:
            print("Skipping {}: tile id {} already used by {}".format(fullFile, tileId, ids[tileId]))
            counts["skipped"] += 1
            continue

        md5 = md5sum(fullFile)
        if md5 in md5s:
            print("Duplicate md5: {} with {}".format(fullFile, md5s[md5]))
            counts["md5"] += 1
            continue
        md5s[md5] = fullFile

        im = readImageFile(fullFile)
        if im is None:
            counts["errors"] += 1
            continue

        thumb = createThumb(im, size)
        im.close()
        hash = tileHash(thumb)

        similarFile = None
        for key, value in hashes.items():
            # The threshold for hash value similarity is subjective,
            # hence using a command line argument for this.
            if hashDifference(hash, value) < hash_threshold:
                similarFile = key
                break

        if similarFile is not None:
            print("Hash similar: {} looks like {} (difference {} below threshold {})".format(
                fullFile, similarFile, hashDifference(hash, hashes[similarFile]), hash_threshold))
            os.makedirs(targetSimilar, exist_ok=True)
            shutil.copyfile(fullFile, os.path.join(targetSimilar, os.path.basename(fullFile)))
            counts["similar"] += 1
        else:
            hashes[fullFile] = hash
            ids[tileId] = fullFile
            targetFilename = os.path.join(target, tileFilename(tileId, name, symmetry))
            if PREPARE_DEBUG:
                print("Tile {} from {}".format(targetFilename, fullFile))
            thumb.save(targetFilename)
            counts["written"] += 1
        thumb.close()
        sys.stdout.flush()

    print(" total images found: {}".format(counts["total"]))
    print("      tiles written: {}".format(counts["written"]))
    print(" duplicates md5sums: {}".format(counts["md5"]))
    print("  duplicates hashes: {}".format(counts["similar"]))
    print("      names skipped: {}".format(counts["skipped"]))
    print("         num errors: {}".format(counts["errors"]))
    print("     hash threshold: {}".format(hash_threshold))

    return counts


# Command line options are:
#
#   target_dir     - directory to place the tileset images
#   hash_threshold - the hash function threshold indicating duplicate tiles
#                    if 0, similar tiles won't be found
#   tiles_dir+     - the directories containing the source tile images

if __name__ == '__main__':
    if len(sys.argv) < 4:
        print("usage: {} target_dir hash_threshold tiles_dir+".format(sys.argv[0]))
    else:
        main(sys.argv[1], int(sys.argv[2]), sys.argv[3:])
