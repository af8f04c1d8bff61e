"""
Core maze functions - grid queries, reachability and pathfinding
"""

import heapq
import math
from collections import deque

from utils.constants import NEIGHBOR_DIRS_4, NEIGHBOR_DIRS_8


def to_grid(point):
    """
    Grid coordinates of a point

    Args:
        point: (x, z) tuple of ints, or any object with .x and .z

    Returns:
        (x, z) tuple of ints (floor of continuous coordinates)
    """
    if isinstance(point, tuple):
        return int(math.floor(point[0])), int(math.floor(point[1]))
    return int(math.floor(point.x)), int(math.floor(point.z))


def neighbors_open(layout, x, z):
    """Get list of 4-directional PATH neighbours"""
    res = []
    for dx, dz in NEIGHBOR_DIRS_4:
        if layout.is_path(x + dx, z + dz):
            res.append((x + dx, z + dz))
    return res


def neighbors_open_8(layout, x, z):
    """
    Get list of 8-directional PATH neighbours

    Diagonal steps are not corner-checked: a diagonal between two wall
    cells is still accepted. find_path pairs these unit-cost diagonals with
    a Manhattan heuristic, which overestimates, so its paths can be a step
    or two longer than the true 8-directional shortest path.
    """
    res = []
    for dx, dz in NEIGHBOR_DIRS_8:
        if layout.is_path(x + dx, z + dz):
            res.append((x + dx, z + dz))
    return res


def reachable_cells(layout, start):
    """
    Flood fill over PATH cells using 4-directional moves

    Returns:
        Set of reachable (x, z) cells (empty when start is a wall)
    """
    if not layout.is_path(*start):
        return set()

    q = deque([start])
    seen = {start}
    while q:
        x, z = q.popleft()
        for n in neighbors_open(layout, x, z):
            if n not in seen:
                seen.add(n)
                q.append(n)
    return seen


# ========== PATHFINDING ==========

def reconstruct_path(prev, goal):
    """Reconstruct path from prev dictionary"""
    path = []
    cur = goal
    while cur is not None:
        path.append(cur)
        cur = prev[cur]
    path.reverse()
    return path


def manhattan(a, b):
    """Manhattan distance heuristic"""
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


def find_path(start, goal, layout):
    """
    A* shortest path over PATH cells, 8-directional, unit step cost

    Args:
        start, goal: (x, z) tuples or points with .x/.z (floored to cells)
        layout: MazeLayout

    Returns:
        List of (x, z) cells from start to goal inclusive. When no path
        exists the single-element fallback [goal] is returned; callers treat
        any path shorter than two cells as "no meaningful path".
    """
    start = to_grid(start)
    goal = to_grid(goal)

    if start == goal:
        return [goal]
    if not layout.is_path(*start) or not layout.is_path(*goal):
        return [goal]

    open_heap = []
    heapq.heappush(open_heap, (manhattan(start, goal), 0, start))

    prev = {start: None}
    g_score = {start: 0}
    closed = set()

    while open_heap:
        f, g, cur = heapq.heappop(open_heap)
        if cur in closed:
            continue
        closed.add(cur)

        if cur == goal:
            return reconstruct_path(prev, goal)

        cx, cz = cur
        for nxt in neighbors_open_8(layout, cx, cz):
            if nxt in closed:
                continue

            tentative_g = g + 1
            if tentative_g < g_score.get(nxt, 10**9):
                g_score[nxt] = tentative_g
                prev[nxt] = cur
                heapq.heappush(open_heap, (tentative_g + manhattan(nxt, goal), tentative_g, nxt))

    return [goal]
