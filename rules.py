#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# The adjacency rules used when collapsing a grid of tiles.
#
# A ruleset maps a tile id to the set of tile ids it may sit next to
# (above, below, left or right). The lookup is directed: "a may be placed
# next to b" is read from the entry for a only, and nothing forces the
# entry for b to mention a. The rule tables shipped here are not
# symmetric. Use symmetricClosure() to get a ruleset where every pairing
# is mirrored.


# The six terrain table. Tile ids are the numeric prefix of the tile images.
TERRAIN_RULES = {
    1: [1, 2, 3],
    2: [1, 2, 3],
    3: [1, 2, 3, 4],
    4: [1, 3, 4, 5],
    5: [4, 5, 6],
    6: [5, 6],
}

TERRAIN_NAMES = {
    1: "plains",
    2: "forest",
    3: "mountains",
    4: "desert",
    5: "shore",
    6: "ocean",
}

# The earlier five terrain table, without mountains.
COASTAL_RULES = {
    1: [1, 2, 3],
    2: [1, 2],
    3: [1, 3, 4],
    4: [3, 4, 5],
    5: [4, 5],
}

COASTAL_NAMES = {
    1: "plains",
    2: "forest",
    3: "desert",
    4: "shore",
    5: "ocean",
}


# Raised when asking for a tile id that the ruleset (or catalog) has never
# heard of. It is a KeyError so callers can treat it as a failed lookup.

class UnknownTileId(KeyError):
    def __init__(self, tileId):
        KeyError.__init__(self, tileId)
        self.tileId = tileId

    def __str__(self):
        return "Unknown tile id: {}".format(self.tileId)


class AdjacencyRuleset:

    def __init__(self, rules):
        self.rules = dict()
        for tileId, neighbours in rules.items():
            self.rules[int(tileId)] = frozenset(int(n) for n in neighbours)

    def __len__(self):
        return len(self.rules)

    def __contains__(self, tileId):
        return tileId in self.rules

    def __repr__(self):
        return "AdjacencyRuleset({})".format({k: sorted(v) for k, v in sorted(self.rules.items())})

    def ids(self):
        return set(self.rules.keys())

    def knows(self, tileId):
        return tileId in self.rules

    # The ids allowed next to tileId.
    def allowed(self, tileId):
        try:
            return self.rules[tileId]
        except KeyError:
            raise UnknownTileId(tileId) from None

    def permits(self, tileId, neighbourId):
        return neighbourId in self.allowed(tileId)

    # True when every pairing a -> b also appears as b -> a.
    def isSymmetric(self):
        for tileId, neighbours in self.rules.items():
            for n in neighbours:
                if tileId not in self.rules.get(n, ()):
                    return False
        return True

    # A new ruleset where every a -> b also gives b -> a. Ids that only
    # appear as neighbours get an entry of their own.
    def symmetricClosure(self):
        closed = dict()
        for tileId, neighbours in self.rules.items():
            closed.setdefault(tileId, set()).update(neighbours)
            for n in neighbours:
                closed.setdefault(n, set()).add(tileId)
        return AdjacencyRuleset(closed)


def terrainRuleset():
    return AdjacencyRuleset(TERRAIN_RULES)


def coastalRuleset():
    return AdjacencyRuleset(COASTAL_RULES)
