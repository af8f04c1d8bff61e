import math

import numpy as np
import pytest
from pygame.math import Vector3

from game.collision import ObstacleSet
from spatial import SpatialQuery, CameraPose


@pytest.fixture
def plane():
    # Thick wall whose near face is the plane z = -5
    return ObstacleSet.from_boxes([(-50.0, -50.0, -6.0, 50.0, 50.0, -5.0)])


def test_raycast_hits_near_face_with_normal(plane):
    hit = SpatialQuery().raycast((0.0, 1.0, 0.0), (0.0, 0.0, -1.0), 0.5, 30.0, plane)
    assert hit is not None
    assert hit.distance == pytest.approx(5.0)
    assert hit.point[2] == pytest.approx(-5.0)
    assert hit.normal == (0.0, 0.0, 1.0)
    assert hit.index == 0


def test_raycast_misses_behind_and_beyond_range(plane):
    query = SpatialQuery()
    assert query.raycast((0.0, 1.0, 0.0), (0.0, 0.0, 1.0), 0.5, 30.0, plane) is None
    assert query.raycast((0.0, 1.0, 0.0), (0.0, 0.0, -1.0), 0.5, 4.0, plane) is None


def test_min_distance_skips_close_hits():
    box = ObstacleSet.from_boxes([(-1.0, -1.0, -0.8, 1.0, 1.0, -0.6)])
    assert SpatialQuery().raycast((0, 0, 0), (0, 0, -1), 0.7, 30.0, box) is None


def test_cast_many_returns_nearest_per_ray():
    boxes = ObstacleSet.from_boxes([
        (-1.0, -1.0, -3.0, 1.0, 1.0, -2.0),
        (-1.0, -1.0, -8.0, 1.0, 1.0, -7.0),
        (4.0, -1.0, -1.0, 5.0, 1.0, 1.0),
    ])
    hits = SpatialQuery().cast_many(
        [(0, 0, 0)] * 3, [(0, 0, -1), (1, 0, 0), (0, 1, 0)], 0.1, 30.0, boxes)
    assert hits[0].index == 0
    assert hits[0].distance == pytest.approx(2.0)
    assert hits[1].index == 2
    assert hits[1].normal == (-1.0, 0.0, 0.0)
    assert hits[2] is None


def test_floor_hit_has_upward_normal():
    floor = ObstacleSet.from_boxes([(-10.0, -0.1, -10.0, 10.0, 0.0, 10.0)], kind='floor')
    d = Vector3(0, -1, -1).normalize()
    hit = SpatialQuery().raycast((0, 1.2, 0), d, 0.5, 30.0, floor)
    assert hit.normal == (0.0, 1.0, 0.0)
    assert hit.point[1] == pytest.approx(0.0)


def test_line_of_sight():
    wall = ObstacleSet.from_boxes([(2.0, 0.0, -1.0, 3.0, 2.0, 1.0)])
    query = SpatialQuery()
    assert not query.line_of_sight((0, 1, 0), (5, 1, 0), wall)
    assert query.line_of_sight((0, 1, 0), (1.5, 1, 0), wall)
    assert query.line_of_sight((0, 1, 0), (5, 1, 3), wall)
    assert query.line_of_sight((0, 1, 0), (5, 1, 0), ObstacleSet.empty())


def test_camera_forward_and_right():
    pose = CameraPose(Vector3(0, 1, 0))
    assert pose.forward() == Vector3(0, 0, -1)
    assert pose.right() == Vector3(1, 0, 0)

    turned = CameraPose(Vector3(0, 1, 0), yaw=math.pi / 2)
    fwd = turned.forward()
    assert (fwd.x, fwd.y, fwd.z) == (pytest.approx(-1.0), pytest.approx(0.0), pytest.approx(0.0, abs=1e-9))


def test_frustum_containment():
    pose = CameraPose(Vector3(0, 1, 0))
    inside = pose.points_in_frustum(np.array([
        (0.0, 1.0, -5.0),     # straight ahead
        (0.0, 1.0, 5.0),      # behind
        (100.0, 1.0, -1.0),   # far off to the side
        (0.0, 1.0, -0.05),    # closer than the near plane
    ]))
    assert inside.tolist() == [True, False, False, False]
    assert pose.contains_point((1.0, 0.5, -3.0))
