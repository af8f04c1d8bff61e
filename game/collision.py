"""
Collision detection - axis-aligned boxes against static wall boxes
"""

import math

import numpy as np

from utils.constants import FLOOR_Y, CEILING_Y, SLAB_THICKNESS


class ObstacleSet:
    """
    Static obstacle boxes stored as (M, 3) min/max corner arrays
    Shared read-only by collision, line-of-sight and the scanner
    """
    def __init__(self, mins, maxs, kinds=None):
        self.mins = np.ascontiguousarray(np.asarray(mins, dtype=np.float64).reshape(-1, 3))
        self.maxs = np.ascontiguousarray(np.asarray(maxs, dtype=np.float64).reshape(-1, 3))
        if self.mins.shape != self.maxs.shape:
            raise ValueError("mins and maxs must have the same shape")
        self.kinds = list(kinds) if kinds is not None else ['wall'] * len(self.mins)

    @classmethod
    def from_boxes(cls, boxes, kind='wall'):
        """
        Args:
            boxes: iterable of (min_x, min_y, min_z, max_x, max_y, max_z)
        """
        boxes = list(boxes)
        if not boxes:
            return cls.empty()
        arr = np.asarray(boxes, dtype=np.float64)
        return cls(arr[:, :3], arr[:, 3:], [kind] * len(boxes))

    @classmethod
    def from_walls(cls, wall_instances):
        """Obstacle records for a list of WallInstance"""
        return cls.from_boxes(w.bounds for w in wall_instances)

    @classmethod
    def from_layout(cls, layout):
        """Wall boxes of a maze layout"""
        return cls.from_walls(layout.wall_instances())

    @classmethod
    def empty(cls):
        return cls(np.zeros((0, 3)), np.zeros((0, 3)), [])

    def combined(self, other):
        """New set holding the boxes of both sets"""
        return ObstacleSet(np.vstack([self.mins, other.mins]),
                           np.vstack([self.maxs, other.maxs]),
                           self.kinds + other.kinds)

    def kind_of(self, index):
        return self.kinds[index]

    def __len__(self):
        return self.mins.shape[0]

    def __repr__(self):
        return f"ObstacleSet(boxes={len(self)})"


def floor_and_ceiling(size):
    """
    Floor and ceiling slabs covering a size x size maze

    Returns:
        ObstacleSet with one 'floor' and one 'ceiling' box
    """
    floor = (0.0, FLOOR_Y - SLAB_THICKNESS, 0.0, float(size), FLOOR_Y, float(size))
    ceiling = (0.0, CEILING_Y, 0.0, float(size), CEILING_Y + SLAB_THICKNESS, float(size))
    return ObstacleSet(
        [floor[:3], ceiling[:3]],
        [floor[3:], ceiling[3:]],
        ['floor', 'ceiling'],
    )


def scan_geometry(layout):
    """Everything the scanner can paint: walls, floor and ceiling"""
    return ObstacleSet.from_layout(layout).combined(floor_and_ceiling(layout.size))


def actor_box(x, z, half_width, height, base_y=FLOOR_Y):
    """
    Axis-aligned box for an actor standing at (x, z)

    Returns:
        (min_xyz, max_xyz) tuple of tuples
    """
    return ((x - half_width, base_y, z - half_width),
            (x + half_width, base_y + height, z + half_width))


def would_collide(box, obstacles):
    """
    Check an actor box against every obstacle

    Touching faces do not count as a collision, so an actor resting flush
    against a wall can still slide along it.

    Args:
        box: (min_xyz, max_xyz)
        obstacles: ObstacleSet

    Returns:
        True if the box overlaps any obstacle
    """
    if len(obstacles) == 0:
        return False
    bmin = np.asarray(box[0], dtype=np.float64)
    bmax = np.asarray(box[1], dtype=np.float64)
    overlap = np.all((bmin < obstacles.maxs) & (bmax > obstacles.mins), axis=1)
    return bool(overlap.any())


class CollisionHandler:
    """
    Per-axis movement resolution for box-shaped actors
    """
    def __init__(self, obstacles, half_width, height, step=0.05):
        """
        Args:
            obstacles: ObstacleSet of walls
            half_width: Half of the actor's X/Z extent
            height: Actor box height
            step: Largest per-substep displacement
        """
        self.obstacles = obstacles
        self.half_width = half_width
        self.height = height
        self.step = step

    def collides_at(self, x, z):
        return would_collide(actor_box(x, z, self.half_width, self.height), self.obstacles)

    def move(self, x, z, dx, dz):
        """
        Move an actor, trying the X and Z deltas independently

        Large deltas are split into substeps so fast actors do not tunnel
        through one-cell walls.

        Returns:
            (new_x, new_z, blocked_x, blocked_z)
        """
        max_delta = max(abs(dx), abs(dz))
        steps = max(1, int(math.ceil(max_delta / self.step))) if self.step > 0 else 1
        step_x = dx / steps
        step_z = dz / steps

        blocked_x = blocked_z = False
        for _ in range(steps):
            if step_x != 0.0:
                if not self.collides_at(x + step_x, z):
                    x += step_x
                else:
                    blocked_x = True
            if step_z != 0.0:
                if not self.collides_at(x, z + step_z):
                    z += step_z
                else:
                    blocked_z = True

        return x, z, blocked_x, blocked_z

    def __repr__(self):
        return f"CollisionHandler(obstacles={len(self.obstacles)}, half_width={self.half_width})"
