import pytest

from game.collision import (
    ObstacleSet, CollisionHandler, actor_box, would_collide, floor_and_ceiling, scan_geometry,
)
from maze.generator import generate_maze


def _wall_strip():
    # One wall filling x in [2, 3] along a long stretch of z
    return ObstacleSet.from_boxes([(2.0, 0.0, -10.0, 3.0, 2.0, 10.0)])


def test_overlap_and_clearance():
    walls = _wall_strip()
    assert would_collide(actor_box(2.2, 0.0, 0.3, 1.6), walls)
    assert not would_collide(actor_box(1.0, 0.0, 0.3, 1.6), walls)


def test_touching_faces_do_not_collide():
    walls = _wall_strip()
    assert not would_collide(((1.0, 0.0, 0.0), (2.0, 1.6, 0.5)), walls)


def test_empty_obstacle_set_never_collides():
    assert not would_collide(actor_box(0.0, 0.0, 0.3, 1.6), ObstacleSet.empty())


def test_diagonal_move_slides_along_wall():
    handler = CollisionHandler(_wall_strip(), half_width=0.3, height=1.6)
    x, z, blocked_x, blocked_z = handler.move(1.7, 0.0, 0.2, 0.2)
    assert x == pytest.approx(1.7)
    assert z == pytest.approx(0.2)
    assert blocked_x
    assert not blocked_z


def test_free_move_applies_both_axes():
    handler = CollisionHandler(_wall_strip(), half_width=0.3, height=1.6)
    x, z, blocked_x, blocked_z = handler.move(0.0, 0.0, -0.5, 0.25)
    assert (x, z) == (pytest.approx(-0.5), pytest.approx(0.25))
    assert not blocked_x and not blocked_z


def test_fast_move_does_not_tunnel_through_wall():
    handler = CollisionHandler(_wall_strip(), half_width=0.3, height=1.6)
    x, _, blocked_x, _ = handler.move(1.0, 0.0, 5.0, 0.0)
    assert blocked_x
    assert x + 0.3 <= 2.0 + 1e-9


def test_layout_obstacles_and_slabs():
    layout = generate_maze(9, seed=1)
    walls = ObstacleSet.from_layout(layout)
    assert len(walls) == len(layout.wall_cells())

    slabs = floor_and_ceiling(9)
    assert slabs.kinds == ['floor', 'ceiling']
    assert slabs.maxs[0][1] == 0.0
    assert slabs.mins[1][1] == 3.0

    geometry = scan_geometry(layout)
    assert len(geometry) == len(walls) + 2
    assert geometry.kind_of(len(geometry) - 1) == 'ceiling'
