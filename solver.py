#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# Drive a grid to a terminal state: repeat a collapse followed by a
# propagate until every cell is resolved or a contradiction is found.
#
# A contradiction ends the run, ContradictionError being raised with the
# coordinate of the emptied cell. There is no retry; build a new grid to
# try again.


from tqdm import tqdm

from grid import ContradictionError


class Solver:

    # observers are called with the grid after every step
    def __init__(self, grid, observers=(), progress=True):
        self.grid = grid
        self.observers = list(observers)
        self.progress = progress
        self.collapses = 0

    def addObserver(self, observer):
        self.observers.append(observer)

    def isFinished(self):
        return self.grid.contradiction is not None or self.grid.isFullyCollapsed()

    # One collapse and one propagate. Returns True if a cell was resolved.
    def step(self):
        grid = self.grid
        if grid.contradiction is not None:
            raise ContradictionError(*grid.contradiction)

        collapsed = grid.collapse()
        if collapsed:
            self.collapses += 1
        grid.propagate()

        if not collapsed and not grid.isFullyCollapsed():
            # nothing left to choose from, so some cell must be empty
            cell = grid.emptiedCell()
            if cell is not None:
                grid.contradiction = (cell.x, cell.y)
                raise ContradictionError(cell.x, cell.y)

        for observer in self.observers:
            observer(grid)
        return collapsed

    # Run until fully collapsed. Returns the number of collapses made.
    def run(self):
        grid = self.grid
        total = len(grid)
        with tqdm(total=total, initial=grid.resolvedCount(), disable=not self.progress, unit="cell") as pb:
            try:
                while not grid.isFullyCollapsed():
                    if self.step():
                        pb.update(1)
            except ContradictionError:
                pb.set_description("Grid collapsing ended with a contradiction")
                raise
            pb.set_description("Grid collapsing completed")
        return self.collapses
