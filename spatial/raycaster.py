"""
Ray casting against axis-aligned box sets
Slab intersection tests compiled with Numba JIT; used by the scanner (walls,
floor, ceiling) and by enemy line-of-sight checks (walls only)
"""

import math
from collections import namedtuple

import numpy as np
from numba import njit

# Columns of a cast result row
HIT_DIST = 0
HIT_PX, HIT_PY, HIT_PZ = 1, 2, 3
HIT_NX, HIT_NY, HIT_NZ = 4, 5, 6
HIT_INDEX = 7
HIT_COLUMNS = 8

RayHit = namedtuple('RayHit', ['point', 'normal', 'distance', 'index'])


@njit(cache=True)
def _ray_box_entry(ox, oy, oz, dx, dy, dz, mins, maxs, k):
    """
    Slab test for a single box

    Returns:
        (t_entry, t_exit, entry_axis); t_entry > t_exit means a miss
    """
    t_enter = -math.inf
    t_exit = math.inf
    axis = -1

    o = (ox, oy, oz)
    d = (dx, dy, dz)
    for a in range(3):
        lo = mins[k, a]
        hi = maxs[k, a]
        if abs(d[a]) < 1e-12:
            # Parallel to this slab: miss unless the origin lies inside it
            if o[a] < lo or o[a] > hi:
                return 1.0, 0.0, -1
            continue
        t1 = (lo - o[a]) / d[a]
        t2 = (hi - o[a]) / d[a]
        if t1 > t2:
            t1, t2 = t2, t1
        if t1 > t_enter:
            t_enter = t1
            axis = a
        if t2 < t_exit:
            t_exit = t2
        if t_enter > t_exit:
            return 1.0, 0.0, -1

    return t_enter, t_exit, axis


@njit(cache=True)
def _numba_cast_rays(origins, directions, mins, maxs, t_min, t_max):
    """
    Cast a batch of rays against a set of boxes, keeping the nearest entry hit

    Args:
        origins: (N, 3) float64 ray origins
        directions: (N, 3) float64 unit directions
        mins, maxs: (M, 3) float64 box corners
        t_min, t_max: accepted hit distance range

    Returns:
        (N, 8) float64 array: [dist, px, py, pz, nx, ny, nz, box_index];
        dist is inf and box_index -1 for rays that hit nothing
    """
    n = origins.shape[0]
    m = mins.shape[0]
    results = np.empty((n, 8), dtype=np.float64)

    for i in range(n):
        ox = origins[i, 0]
        oy = origins[i, 1]
        oz = origins[i, 2]
        dx = directions[i, 0]
        dy = directions[i, 1]
        dz = directions[i, 2]

        best_t = math.inf
        best_k = -1
        best_axis = -1

        for k in range(m):
            t_enter, t_exit, axis = _ray_box_entry(ox, oy, oz, dx, dy, dz, mins, maxs, k)
            if axis < 0 or t_enter > t_exit:
                continue
            if t_enter < t_min or t_enter > t_max:
                continue
            if t_enter < best_t:
                best_t = t_enter
                best_k = k
                best_axis = axis

        results[i, 0] = best_t
        results[i, 7] = float(best_k)
        if best_k < 0:
            for c in range(1, 7):
                results[i, c] = 0.0
            continue

        results[i, 1] = ox + dx * best_t
        results[i, 2] = oy + dy * best_t
        results[i, 3] = oz + dz * best_t

        # Entry face normal points back against the ray on the entry axis
        results[i, 4] = 0.0
        results[i, 5] = 0.0
        results[i, 6] = 0.0
        if best_axis == 0:
            results[i, 4] = -1.0 if dx > 0 else 1.0
        elif best_axis == 1:
            results[i, 5] = -1.0 if dy > 0 else 1.0
        else:
            results[i, 6] = -1.0 if dz > 0 else 1.0

    return results


@njit(cache=True)
def _numba_segment_blocked(ax, ay, az, bx, by, bz, mins, maxs):
    """True if any box is entered strictly between points a and b"""
    dx = bx - ax
    dy = by - ay
    dz = bz - az
    length = math.sqrt(dx * dx + dy * dy + dz * dz)
    if length < 1e-9:
        return False
    dx /= length
    dy /= length
    dz /= length

    for k in range(mins.shape[0]):
        t_enter, t_exit, axis = _ray_box_entry(ax, ay, az, dx, dy, dz, mins, maxs, k)
        if t_enter > t_exit:
            continue
        # A negative entry means the segment starts inside the box
        if t_exit > 0.0 and t_enter < length:
            return True
    return False


def _as_points(values):
    arr = np.asarray(values, dtype=np.float64)
    return np.ascontiguousarray(arr.reshape(-1, 3))


class SpatialQuery:
    """
    Spatial query provider: nearest-hit ray casts against a box set

    Obstacle sets are any object exposing `mins` and `maxs` (M, 3) float64
    arrays; see game.collision.ObstacleSet.
    """

    def raycast(self, origin, direction, min_distance, max_distance, obstacles):
        """
        Cast a single ray

        Returns:
            RayHit or None
        """
        hits = self.cast_many([origin], [direction], min_distance, max_distance, obstacles)
        return hits[0]

    def cast_many(self, origins, directions, min_distance, max_distance, obstacles):
        """
        Cast a bundle of rays

        Args:
            origins: sequence of 3-vectors (one per ray)
            directions: sequence of unit 3-vectors
            min_distance, max_distance: accepted hit distance range
            obstacles: box set with mins/maxs arrays

        Returns:
            List of RayHit or None, one per ray
        """
        results = self.cast_array(origins, directions, min_distance, max_distance, obstacles)
        hits = []
        for row in results:
            if row[HIT_INDEX] < 0:
                hits.append(None)
                continue
            hits.append(RayHit(
                point=(row[HIT_PX], row[HIT_PY], row[HIT_PZ]),
                normal=(row[HIT_NX], row[HIT_NY], row[HIT_NZ]),
                distance=row[HIT_DIST],
                index=int(row[HIT_INDEX]),
            ))
        return hits

    def cast_array(self, origins, directions, min_distance, max_distance, obstacles):
        """Raw (N, 8) result array of a ray bundle"""
        origins = _as_points(origins)
        directions = _as_points(directions)
        if len(obstacles) == 0 or origins.shape[0] == 0:
            empty = np.zeros((origins.shape[0], HIT_COLUMNS), dtype=np.float64)
            empty[:, HIT_DIST] = np.inf
            empty[:, HIT_INDEX] = -1.0
            return empty
        return _numba_cast_rays(origins, directions, obstacles.mins, obstacles.maxs,
                                float(min_distance), float(max_distance))

    def line_of_sight(self, a, b, obstacles):
        """
        True if no obstacle lies on the segment between a and b

        Args:
            a, b: 3-vectors (anything indexable as [0], [1], [2])
        """
        if len(obstacles) == 0:
            return True
        return not _numba_segment_blocked(
            float(a[0]), float(a[1]), float(a[2]),
            float(b[0]), float(b[1]), float(b[2]),
            obstacles.mins, obstacles.maxs)
