import math
import random

import numpy as np
import pytest
from pygame.math import Vector3

from entities.enemy import EnemyVariant
from entities.enemy_manager import EnemyManager
from game.collision import ObstacleSet, scan_geometry
from game.fog_of_war import DiscoveredMap
from game.game_state import PlayerState
from game.scanner import (
    Scanner, MarkerPool, SCANNER_CONFIGS, classify_surfaces, get_scanner_config,
)
from game.world import WorldContext
from maze.generator import generate_maze
from spatial.camera import CameraPose
from utils.errors import ConfigurationError


@pytest.fixture
def wall_plane():
    return ObstacleSet.from_boxes([(-50.0, -50.0, -6.0, 50.0, 50.0, -5.0)])


@pytest.fixture
def scanner(renderer):
    return Scanner(renderer, config='standard', color=(0, 255, 255), seed=7)


def _ctx(renderer, geometry, now=0.0, enemies=None, discovered=None):
    return WorldContext(walls=ObstacleSet.empty(), scan_geometry=geometry, enemies=enemies,
                        discovered=discovered, now=now, renderer=renderer)


def _pose(x=0.0, z=0.0, yaw=0.0, fov=75.0):
    return CameraPose(Vector3(x, 1.2, z), yaw=yaw, fov=fov)


def test_scan_paints_wall_plane_and_charges_once(scanner, renderer, wall_plane):
    energy = PlayerState()
    ctx = _ctx(renderer, wall_plane)

    result = scanner.scan(_pose(), energy, ctx)

    assert result is not None
    assert result.rays == 75
    assert 0 < scanner.marker_count <= 75
    assert result.markers_placed == scanner.marker_count
    z = scanner.markers.active_positions[:, 2]
    assert np.all(np.abs(z + 5.0) < 0.05)
    assert energy.energy == pytest.approx(100 - SCANNER_CONFIGS['standard'].scan_cost)
    assert scanner.last_scan_time == 0.0


def test_scan_without_energy_changes_nothing(scanner, renderer, wall_plane):
    energy = PlayerState()
    energy.stats['energy'] = 5.0
    ctx = _ctx(renderer, wall_plane, now=3.0)

    assert scanner.scan(_pose(), energy, ctx) is None
    assert energy.energy == 5.0
    assert scanner.last_scan_time is None
    assert scanner.marker_count == 0
    assert renderer.visuals == {}


def test_scan_respects_cooldown(scanner, renderer, wall_plane):
    energy = PlayerState()
    ctx = _ctx(renderer, wall_plane)
    assert scanner.scan(_pose(), energy, ctx) is not None
    count = scanner.marker_count

    ctx.now = 0.2
    assert scanner.scan(_pose(), energy, ctx) is None
    assert scanner.marker_count == count
    assert energy.energy == pytest.approx(90)

    ctx.now = 0.6
    assert scanner.scan(_pose(), energy, ctx) is not None
    assert energy.energy == pytest.approx(80)


def test_rays_stay_inside_forward_cone(scanner):
    dirs = scanner.generate_directions(_pose())
    assert dirs.shape == (75, 3)
    assert np.allclose(np.linalg.norm(dirs, axis=1), 1.0)
    assert np.all(dirs[:, 2] < 0)

    turned = scanner.generate_directions(_pose(yaw=math.pi / 2))
    assert np.all(turned[:, 0] < 0)


def test_scan_damages_enemy_where_rays_land(renderer, wall_plane):
    scanner = Scanner(renderer, config='standard', seed=1)
    scanner.generate_directions = lambda pose: np.tile([0.0, 0.0, -1.0], (75, 1))
    manager = EnemyManager(renderer=renderer, rng=random.Random(1))
    enemy = manager.spawn_enemy(EnemyVariant.STALKER, Vector3(0.1, 0, -4.9))
    ctx = _ctx(renderer, wall_plane, enemies=manager)

    result = scanner.scan(_pose(), PlayerState(), ctx)

    assert result.enemy_hits == {enemy.id: 75}
    assert manager.get(enemy.id) is None
    assert manager.kills == 1


def test_scan_reveals_discovered_cells(scanner, renderer):
    layout = generate_maze(21, seed=3)
    discovered = DiscoveredMap(21)
    ctx = _ctx(renderer, scan_geometry(layout), discovered=discovered)
    result = scanner.scan(_pose(10.5, 10.5), PlayerState(), ctx)
    assert result.revealed > 0
    assert discovered.discovered_count() == result.revealed


def test_markers_are_culled_outside_view(scanner, renderer, wall_plane):
    ctx = _ctx(renderer, wall_plane)
    scanner.scan(_pose(), PlayerState(), ctx)
    n = scanner.marker_count

    assert scanner.update(0.016, _pose(fov=120.0)) == n
    assert scanner.update(0.016, _pose(yaw=math.pi, fov=120.0)) == 0
    handles = [h for h in scanner.markers.handles if h is not None]
    assert not any(renderer.visuals[h]['visible'] for h in handles)

    # Turning back shows them again; nothing was destroyed
    assert scanner.update(0.016, _pose(fov=120.0)) == n
    assert len(handles) == n


def test_reset_returns_markers_and_cooldown(scanner, renderer, wall_plane):
    energy = PlayerState()
    ctx = _ctx(renderer, wall_plane)
    scanner.scan(_pose(), energy, ctx)
    scanner.reset()
    assert scanner.marker_count == 0
    assert scanner.last_scan_time is None
    assert scanner.scan(_pose(), energy, ctx) is not None


def test_switch_costs_energy_and_cycles(scanner):
    energy = PlayerState()
    assert scanner.switch_config(energy)
    assert scanner.config.name == 'wide'
    assert energy.energy == pytest.approx(95)
    assert scanner.switch_config(energy)
    assert scanner.config.name == 'focused'
    assert scanner.switch_config(energy)
    assert scanner.config.name == 'standard'


def test_switch_without_energy_is_refused(scanner):
    energy = PlayerState()
    energy.stats['energy'] = 2.0
    assert not scanner.switch_config(energy)
    assert scanner.config.name == 'standard'
    assert energy.energy == 2.0


def test_unknown_scanner_type():
    with pytest.raises(ConfigurationError):
        get_scanner_config('laser')


def test_pool_exhaustion_drops_silently(renderer):
    pool = MarkerPool(capacity=3, renderer=renderer)
    for i in range(3):
        assert pool.place((i, 0.0, -5.0), (0.0, 0.0, 1.0), (255, 0, 0)) == i
    before = pool.positions.copy()
    colors = pool.colors.copy()

    assert pool.place((9.0, 9.0, 9.0), (0.0, 1.0, 0.0), (0, 255, 0)) is None
    assert pool.place_many(np.zeros((5, 3)), np.tile([0.0, 1.0, 0.0], (5, 1)), (0, 0, 255)) == 0
    assert len(pool) == 3
    assert pool.dropped == 6
    assert np.array_equal(pool.positions, before)
    assert np.array_equal(pool.colors, colors)
    assert len(renderer.visuals) == 3


def test_marker_offset_color_and_surface(renderer):
    pool = MarkerPool(capacity=4, renderer=renderer)
    slot = pool.place((1.0, 0.0, 1.0), (0.0, 1.0, 0.0), (255, 255, 0))
    assert pool.positions[slot].tolist() == pytest.approx([1.0, 0.01, 1.0])
    assert tuple(pool.colors[slot]) == (255, 255, 0)
    assert pool.surface_of(slot) == 'floor'
    assert pool.any_within((1.0, 1.0, 1.0), 2.0)
    assert not pool.any_within((5.0, 1.0, 5.0), 2.0)


def test_surface_classification():
    codes = classify_surfaces([(0, 1, 0), (0, -1, 0), (1, 0, 0), (0, 0, -1)])
    assert codes.tolist() == [1, 2, 0, 0]
