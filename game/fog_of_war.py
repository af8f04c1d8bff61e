"""
Fog of War - per-cell discovery record revealed by walking and scanning
"""

import math
from enum import IntEnum

import numpy as np

from utils.constants import DISCOVERY_RADIUS


class CellVisibility(IntEnum):
    """Discovery level of a cell; values only ever increase"""
    UNSEEN = 0
    SEEN = 1
    SPAWN = 2


class DiscoveredMap:
    """
    Grid parallel to the maze layout recording what the player has revealed
    """
    def __init__(self, size):
        """
        Args:
            size: Maze dimension (the grid is size x size)
        """
        self.size = size
        self.cells = np.zeros((size, size), dtype=np.int8)  # indexed [x, z]

    def in_bounds(self, x, z):
        return 0 <= x < self.size and 0 <= z < self.size

    def get(self, x, z):
        if not self.in_bounds(x, z):
            return CellVisibility.UNSEEN
        return CellVisibility(int(self.cells[x, z]))

    def _raise_to(self, x, z, level):
        if self.in_bounds(x, z) and self.cells[x, z] < level:
            self.cells[x, z] = level
            return True
        return False

    def reveal(self, x, z):
        """Mark a cell Seen; returns True if it was newly revealed"""
        return self._raise_to(x, z, CellVisibility.SEEN)

    def mark_spawn(self, cells):
        """Tag the spawn block cells"""
        for x, z in cells:
            self._raise_to(x, z, CellVisibility.SPAWN)

    def reveal_radius(self, position, radius=DISCOVERY_RADIUS):
        """
        Reveal every cell whose center lies within radius of a world position

        Returns:
            Number of newly revealed cells
        """
        cx, cz = position.x, position.z
        r = int(math.ceil(radius))
        base_x, base_z = int(math.floor(cx)), int(math.floor(cz))
        revealed = 0
        for x in range(base_x - r, base_x + r + 1):
            for z in range(base_z - r, base_z + r + 1):
                if math.hypot(x + 0.5 - cx, z + 0.5 - cz) <= radius:
                    if self.reveal(x, z):
                        revealed += 1
        return revealed

    def reveal_points(self, points):
        """
        Reveal the cells under an (N, 3) array of world points (scan hits)

        Returns:
            Number of newly revealed cells
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if pts.shape[0] == 0:
            return 0
        xs = np.floor(pts[:, 0]).astype(np.int64)
        zs = np.floor(pts[:, 2]).astype(np.int64)
        mask = (xs >= 0) & (xs < self.size) & (zs >= 0) & (zs < self.size)
        xs, zs = xs[mask], zs[mask]
        fresh = self.cells[xs, zs] < CellVisibility.SEEN
        revealed = len(set(zip(xs[fresh].tolist(), zs[fresh].tolist())))
        self.cells[xs[fresh], zs[fresh]] = CellVisibility.SEEN
        return revealed

    def is_discovered(self, x, z):
        return self.get(x, z) != CellVisibility.UNSEEN

    def discovered_count(self):
        return int(np.count_nonzero(self.cells))

    def coverage(self):
        """Fraction of the grid discovered (0.0 to 1.0)"""
        return self.discovered_count() / float(self.size * self.size)

    def reset(self):
        """Forget everything; used on level restart"""
        self.cells.fill(CellVisibility.UNSEEN)

    def __repr__(self):
        return f"DiscoveredMap(size={self.size}, discovered={self.discovered_count()})"
