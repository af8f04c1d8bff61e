"""
Maze generation - randomized recursive backtracking on a wall/path grid
"""

import logging
import random

from utils.constants import (
    WALL, PATH, CARVE_DIRS, MAZE_MIN_SIZE, SPAWN_BLOCK_RADIUS,
    FLOOR_Y, WALL_HEIGHT,
)
from utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


class MazeLayout:
    """
    Square grid of cells, each WALL (1) or PATH (0)
    Indexed as cells[x][z]; cell (x, z) covers [x, x+1) x [z, z+1) in world space
    """
    def __init__(self, size):
        self.size = size
        self.cells = [[WALL for _ in range(size)] for _ in range(size)]

    @property
    def center(self):
        """Carve start / spawn cell"""
        return self.size // 2, self.size // 2

    def in_bounds(self, x, z):
        """Check if coordinates are within grid bounds"""
        return 0 <= x < self.size and 0 <= z < self.size

    def is_interior(self, x, z):
        """True for cells inside the enclosing wall ring"""
        return 0 < x < self.size - 1 and 0 < z < self.size - 1

    def is_wall(self, x, z):
        """Out-of-bounds cells count as wall"""
        if not self.in_bounds(x, z):
            return True
        return self.cells[x][z] == WALL

    def is_path(self, x, z):
        return not self.is_wall(x, z)

    def set_path(self, x, z):
        self.cells[x][z] = PATH

    def path_cells(self):
        """All PATH cells in row-major (x, then z) order"""
        return [(x, z) for x in range(self.size) for z in range(self.size)
                if self.cells[x][z] == PATH]

    def wall_cells(self):
        """All WALL cells in row-major (x, then z) order"""
        return [(x, z) for x in range(self.size) for z in range(self.size)
                if self.cells[x][z] == WALL]

    def random_path_cell(self, rng=random, attempts=50):
        """
        Random PATH cell found by rejection sampling

        Returns:
            (x, z) or None if every attempt landed on a wall
        """
        for _ in range(attempts):
            x = rng.randrange(self.size)
            z = rng.randrange(self.size)
            if self.cells[x][z] == PATH:
                return x, z
        return None

    def wall_instances(self):
        """
        Derive wall geometry descriptors from the layout

        Returns:
            List of WallInstance, one per WALL cell
        """
        return [WallInstance(x, z) for x, z in self.wall_cells()]

    def __repr__(self):
        return f"MazeLayout(size={self.size}, paths={len(self.path_cells())})"


class WallInstance:
    """
    Grid-aligned wall box: center position plus fixed extents
    """
    half_x = 0.5
    half_z = 0.5
    half_y = WALL_HEIGHT / 2

    def __init__(self, x, z):
        self.x = x
        self.z = z

    @property
    def position(self):
        """Box center in world coordinates"""
        return (self.x + 0.5, FLOOR_Y + self.half_y, self.z + 0.5)

    @property
    def bounds(self):
        """(min_x, min_y, min_z, max_x, max_y, max_z)"""
        cx, cy, cz = self.position
        return (cx - self.half_x, cy - self.half_y, cz - self.half_z,
                cx + self.half_x, cy + self.half_y, cz + self.half_z)

    def __repr__(self):
        return f"WallInstance(x={self.x}, z={self.z})"


def iter_carve(layout, start=None, rng=random):
    """
    Recursive backtracking carve, exposed as a step generator

    The recursion is kept on an explicit stack so large mazes do not hit the
    interpreter recursion limit. Each cell keeps its own shuffled direction
    list, so the visiting order is the same as the recursive formulation.

    Args:
        layout: MazeLayout to carve in place (expected all WALL)
        start: (x, z) carve start cell, defaults to the grid center
        rng: random.Random-like source

    Yields:
        dict with "current" cell, "carved" ((from), (to)) or None, and "done"
    """
    sx, sz = start if start is not None else layout.center
    layout.set_path(sx, sz)

    def shuffled_dirs():
        dirs = list(CARVE_DIRS)
        rng.shuffle(dirs)
        return dirs

    stack = [(sx, sz, shuffled_dirs())]
    yield {"current": (sx, sz), "carved": None, "done": False}

    while stack:
        cx, cz, dirs = stack[-1]
        if not dirs:
            stack.pop()
            continue

        dx, dz = dirs.pop()
        nx, nz = cx + dx, cz + dz
        if layout.is_interior(nx, nz) and layout.cells[nx][nz] == WALL:
            layout.set_path(cx + dx // 2, cz + dz // 2)
            layout.set_path(nx, nz)
            stack.append((nx, nz, shuffled_dirs()))
            yield {"current": (nx, nz), "carved": ((cx, cz), (nx, nz)), "done": False}

    yield {"current": (sx, sz), "carved": None, "done": True}


def clear_spawn_block(layout):
    """Force the 3x3 block centered on the grid to PATH"""
    cx, cz = layout.center
    r = SPAWN_BLOCK_RADIUS
    for x in range(cx - r, cx + r + 1):
        for z in range(cz - r, cz + r + 1):
            layout.set_path(x, z)


def spawn_block_cells(layout):
    """Cells of the forced-clear spawn block"""
    cx, cz = layout.center
    r = SPAWN_BLOCK_RADIUS
    return [(x, z) for x in range(cx - r, cx + r + 1) for z in range(cz - r, cz + r + 1)]


def generate_maze(size, seed=None):
    """
    Generate a maze layout

    Args:
        size: Grid side length (>= 5)
        seed: Optional seed for a private random.Random

    Returns:
        MazeLayout with every PATH cell reachable from the center
    """
    if not isinstance(size, int) or size < MAZE_MIN_SIZE:
        raise ConfigurationError(f"maze size must be an integer >= {MAZE_MIN_SIZE}, got {size!r}")

    rng = random.Random(seed)
    layout = MazeLayout(size)

    steps = 0
    for state in iter_carve(layout, rng=rng):
        if state["carved"] is not None:
            steps += 1

    clear_spawn_block(layout)
    logger.info("Generated %dx%d maze (%d carve steps, seed=%r)", size, size, steps, seed)
    return layout
