import random

import pytest
from pygame.math import Vector3

from game.collision import ObstacleSet
from game.scanner import MarkerPool
from game.world import NullRenderer, WorldContext
from maze.generator import MazeLayout


@pytest.fixture
def renderer():
    return NullRenderer()


@pytest.fixture
def make_ctx(renderer):
    """Factory for a WorldContext with sensible test defaults"""
    def _make(player=(10.0, 0.0, 10.0), walls=None, layout=None, markers=None, enemies=None,
              now=0.0, seed=1):
        if markers is None:
            markers = MarkerPool(capacity=64, renderer=renderer)
        if walls is None:
            walls = ObstacleSet.from_layout(layout) if layout is not None else ObstacleSet.empty()
        return WorldContext(
            layout=layout,
            walls=walls,
            enemies=enemies,
            markers=markers,
            player_position=Vector3(*player),
            now=now,
            rng=random.Random(seed),
            renderer=renderer,
        )
    return _make


@pytest.fixture
def build_layout():
    """Factory for an all-wall layout with the given (x, z) cells opened"""
    def _build(size, open_cells):
        layout = MazeLayout(size)
        for x, z in open_cells:
            layout.set_path(x, z)
        return layout
    return _build
