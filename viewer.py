#-*- coding: utf-8 -*-

# Licensed under the MIT License.
# See https://opensource.org/licenses/MIT or License.txt for license text.

# Watch a collapse happen in a window.
#
# Each tick of the window's timer performs one solver step and redraws the
# partial map. On a contradiction, or any error drawing the map, the
# window is closed straight away and the error is raised again from
# watch(). Once the grid is fully collapsed stepping stops and the map
# stays on screen until the window is closed.


import tkinter as tk
from PIL import ImageTk

from mosaic import compose


# Milliseconds between steps.
STEP_DELAY = 1

# The largest window side in pixels. Bigger maps are shrunk to fit.
MAX_WINDOW_SIZE = 800

WINDOW_TITLE = "Tile collapse"


class Viewer:

    def __init__(self, solver, catalog, delay=STEP_DELAY):
        self.solver = solver
        self.catalog = catalog
        self.delay = delay
        self.error = None
        self.cache = dict()
        self.photo = None

        self.root = tk.Tk()
        self.root.title(WINDOW_TITLE)
        self.label = tk.Label(self.root)
        self.label.pack()

    def redraw(self):
        image = compose(self.solver.grid, self.catalog, self.cache)
        (width, height) = image.size
        largest = max(width, height)
        if largest > MAX_WINDOW_SIZE:
            image = image.resize((int(width * MAX_WINDOW_SIZE / largest), int(height * MAX_WINDOW_SIZE / largest)))
        # keep a reference, tk doesn't
        self.photo = ImageTk.PhotoImage(image)
        self.label.configure(image=self.photo)

    def tick(self):
        # Tk only reports errors raised in a timer callback, so keep them
        # for show() to raise once the window is gone.
        try:
            self.solver.step()
            self.redraw()
        except Exception as e:
            self.error = e
            self.root.destroy()
            return

        if self.solver.grid.isFullyCollapsed():
            self.root.title("{} - completed".format(WINDOW_TITLE))
        else:
            self.root.after(self.delay, self.tick)

    def show(self):
        self.redraw()
        self.root.after(self.delay, self.tick)
        self.root.mainloop()
        if self.error is not None:
            raise self.error


def watch(solver, catalog, delay=STEP_DELAY):
    Viewer(solver, catalog, delay).show()
