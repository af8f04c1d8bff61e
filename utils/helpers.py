"""
Helper utility functions for Glow Maze
"""

import math
from pygame.math import Vector3


def clamp(value, min_value, max_value):
    """Clamp a value between min and max"""
    return max(min_value, min(value, max_value))


def damp(current, target, rate, dt):
    """
    Frame-rate independent smoothing toward a target vector.

    Moves `current` toward `target` by a factor of rate * dt, clamped to 1,
    so a long frame snaps to the target instead of overshooting it.
    """
    t = clamp(rate * dt, 0.0, 1.0)
    return Vector3(current).lerp(target, t)


def safe_normalize(v):
    """Normalized copy of v, or a zero vector when v has no length"""
    if v.length_squared() == 0:
        return Vector3()
    return v.normalize()


def flat(v):
    """Copy of v projected onto the ground plane (y = 0)"""
    return Vector3(v.x, 0.0, v.z)


def flat_distance(a, b):
    """Distance between two points ignoring height"""
    return math.hypot(a.x - b.x, a.z - b.z)


def cell_of(position):
    """Grid cell (x, z) containing a world position"""
    return int(math.floor(position.x)), int(math.floor(position.z))


def cell_center(x, z, y=0.0):
    """World position at the center of grid cell (x, z)"""
    return Vector3(x + 0.5, y, z + 0.5)


def weighted_choice(rng, weights):
    """
    Pick a key from a {key: weight} mapping.

    Args:
        rng: random.Random instance
        weights: Mapping of choice -> non-negative weight

    Returns:
        The chosen key, or None when all weights are zero
    """
    total = sum(weights.values())
    if total <= 0:
        return None
    roll = rng.uniform(0, total)
    acc = 0.0
    last = None
    for key, weight in weights.items():
        if weight <= 0:
            continue
        acc += weight
        last = key
        if roll <= acc:
            return key
    return last


def format_time(seconds):
    """Format seconds to MM:SS string"""
    minutes = int(seconds // 60)
    secs = int(seconds % 60)
    return f"{minutes:02d}:{secs:02d}"
