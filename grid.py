#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# The grid being collapsed into a tile map.
#
# Every cell of the size*size grid starts unresolved with the full set of
# candidate tile ids. A collapse picks one cell and commits it to a single
# id drawn at random from its candidates. A propagate then filters the
# candidates of the unresolved neighbours (up, down, left and right) of
# each newly resolved cell, keeping the ids v that accept some value of the
# resolved tile's transforms:
#
#   keep v if any value t of any transform of the resolved tile is in rules[v]
#
# This is a coarse test against all the values a tile's orientations can
# show, not an edge by edge comparison.
#
# The very first collapse always resolves the centre cell, since before any
# cell is resolved every cell has the same entropy. After that the cell
# with the smallest entropy (number of candidates) is chosen, scanning the
# rows from the top and each row from the left, first match winning.
#
# Candidate sets only ever shrink. If an unresolved cell is left with no
# candidates the grid is in contradiction and the collapse is over; there
# is no backtracking.
#
# Cells are kept in one flat list in row-major order, cell (x, y) being at
# index y*size + x.


import random


# Set to True to include debugging messages
GRID_DEBUG = False

# A cell resolved to this id has infinite entropy and is never chosen by a
# collapse. Catalog ids are positive so it is never drawn from a candidate
# set; it only appears when a cell is resolved to it directly.
RESERVED_TILE_ID = 0

INFINITE_ENTROPY = float("inf")

# (dx, dy) for up, down, left and right
DIRECTIONS = ((0, -1), (0, 1), (-1, 0), (1, 0))


class GridConstructionError(Exception):
    pass


class ContradictionError(Exception):

    def __init__(self, x, y):
        Exception.__init__(self, "Contradiction found at ({}, {})".format(x, y))
        self.x = x
        self.y = y


class Cell:

    __slots__ = ("x", "y", "value", "candidates")

    def __init__(self, x, y, candidates):
        self.x = x
        self.y = y
        self.value = None
        self.candidates = set(candidates)

    def __repr__(self):
        if self.value is None:
            return "Cell({}, {}, candidates={})".format(self.x, self.y, sorted(self.candidates))
        return "Cell({}, {}, value={})".format(self.x, self.y, self.value)

    @property
    def resolved(self):
        return self.value is not None


# The number of candidates of an unresolved cell. A resolved cell has
# entropy 0, unless it holds RESERVED_TILE_ID.

def cellEntropy(cell):
    if cell.value is not None:
        if cell.value == RESERVED_TILE_ID:
            return INFINITE_ENTROPY
        return 0
    return len(cell.candidates)


class Grid:

    def __init__(self, size, catalog, rules, rng=None):
        if size < 1:
            raise GridConstructionError("Grid size must be at least 1, not {}".format(size))
        if len(catalog) == 0:
            raise GridConstructionError("No tiles provided")

        ids = set()
        for tileId in sorted(catalog.ids()):
            if rules.knows(tileId):
                ids.add(tileId)
            else:
                print("Tile {} has no adjacency rule, leaving it out".format(tileId))
        if not ids:
            raise GridConstructionError("None of the {} tiles have adjacency rules".format(len(catalog)))

        self.size = size
        self.catalog = catalog
        self.rules = rules
        self.rng = rng if rng is not None else random.Random()
        self.ids = frozenset(ids)
        self.cells = [Cell(i % size, i // size, ids) for i in range(size * size)]
        self.initialCollapseDone = False
        self.contradiction = None
        # indexes of cells resolved since the last propagate
        self.pending = []

    def __len__(self):
        return len(self.cells)

    def __iter__(self):
        return iter(self.cells)

    def index(self, x, y):
        if not (0 <= x < self.size and 0 <= y < self.size):
            raise IndexError("Cell ({}, {}) is outside the {}x{} grid".format(x, y, self.size, self.size))
        return y * self.size + x

    def cell(self, x, y):
        return self.cells[self.index(x, y)]

    # The in-bounds cells up, down, left and right of (x, y).
    def neighbours(self, x, y):
        for (dx, dy) in DIRECTIONS:
            nx = x + dx
            ny = y + dy
            if 0 <= nx < self.size and 0 <= ny < self.size:
                yield self.cells[ny * self.size + nx]

    def entropy(self, x, y):
        return cellEntropy(self.cell(x, y))

    # Commit the cell to value. The candidate set becomes just that value
    # and never changes again.
    def resolve(self, x, y, value):
        cell = self.cell(x, y)
        if cell.value is not None:
            raise ValueError("Cell ({}, {}) is already resolved to {}".format(x, y, cell.value))
        cell.value = value
        cell.candidates = {value}
        self.pending.append(self.index(x, y))
        if GRID_DEBUG:
            print("Resolved ({}, {}) to {}".format(x, y, value))

    def draw(self, cell):
        return self.rng.choice(sorted(cell.candidates))

    # The unresolved cell with the smallest positive entropy, or None.
    def lowestEntropyCell(self):
        best = None
        bestEntropy = INFINITE_ENTROPY
        for cell in self.cells:
            if cell.value is not None:
                continue
            entropy = cellEntropy(cell)
            if entropy != 0 and entropy < bestEntropy:
                (best, bestEntropy) = (cell, entropy)
        return best

    # Resolve one cell. Returns False when there was nothing to resolve.
    def collapse(self):
        if not self.initialCollapseDone:
            mid = self.size // 2
            centre = self.cell(mid, mid)
            if centre.value is None and centre.candidates:
                print("Performing initial collapse at {}, {}".format(mid, mid))
                self.resolve(mid, mid, self.draw(centre))
                self.initialCollapseDone = True
                return True
            self.initialCollapseDone = True

        cell = self.lowestEntropyCell()
        if cell is None:
            return False
        self.resolve(cell.x, cell.y, self.draw(cell))
        return True

    # The candidate ids that accept the resolved tile next to them.
    def compatible(self, candidates, resolvedValue):
        values = self.catalog.valuesOf(resolvedValue)
        return set(v for v in candidates if not values.isdisjoint(self.rules.allowed(v)))

    # Filter the neighbours of every cell resolved since the last call.
    # Raises ContradictionError for the first neighbour left with no
    # candidates; the remaining cells are not visited.
    def propagate(self):
        pending = sorted(set(self.pending))
        self.pending = []
        for i in pending:
            cell = self.cells[i]
            # the reserved id is not a tile and constrains nothing
            if cell.value == RESERVED_TILE_ID:
                continue
            for neighbour in self.neighbours(cell.x, cell.y):
                if neighbour.value is not None:
                    continue
                before = len(neighbour.candidates)
                neighbour.candidates = self.compatible(neighbour.candidates, cell.value)
                if GRID_DEBUG and len(neighbour.candidates) != before:
                    print("({}, {}) next to {}: {} -> {} candidates".format(
                        neighbour.x, neighbour.y, cell.value, before, len(neighbour.candidates)))
                if not neighbour.candidates:
                    self.contradiction = (neighbour.x, neighbour.y)
                    print("Contradiction found at ({}, {})".format(neighbour.x, neighbour.y))
                    raise ContradictionError(neighbour.x, neighbour.y)

    def isFullyCollapsed(self):
        return all(cell.value is not None for cell in self.cells)

    # The first unresolved cell with no candidates, or None.
    def emptiedCell(self):
        for cell in self.cells:
            if cell.value is None and not cell.candidates:
                return cell
        return None

    def hasContradiction(self):
        return self.contradiction is not None or self.emptiedCell() is not None

    def resolvedCount(self):
        return sum(1 for cell in self.cells if cell.value is not None)

    # The resolved ids as rows of text, "." for unresolved cells.
    def describe(self):
        width = max(len(str(tileId)) for tileId in self.ids)
        lines = []
        for y in range(self.size):
            row = self.cells[y * self.size:(y + 1) * self.size]
            lines.append(" ".join(("." if c.value is None else str(c.value)).rjust(width) for c in row))
        return "\n".join(lines)

    def __str__(self):
        return self.describe()
