import logging
import random

import pytest
from pygame.math import Vector3

from entities.enemy import EnemyState, EnemyVariant
from entities.enemy_manager import EnemyManager
from game.collision import ObstacleSet
from game.game_state import PlayerState
from maze.difficulty import LevelConfig
from maze.generator import MazeLayout, generate_maze
from utils.helpers import flat_distance

DT = 1 / 60


@pytest.fixture
def manager(renderer):
    return EnemyManager(LevelConfig(), renderer=renderer, rng=random.Random(5))


def test_killing_blow_removes_enemy_exactly_once(manager, renderer):
    pack = manager.spawn_pack(Vector3(5, 0, 5), size=3)
    victim = pack[0]
    assert len(renderer.visuals) == 3

    assert manager.damage_enemy(victim, victim.health)
    assert manager.get(victim.id) is None
    assert len(manager) == 2
    assert manager.kills == 1
    assert len(renderer.visuals) == 2
    assert renderer.visuals_for(victim.id) == []
    for other in manager:
        assert victim.id not in other.pack_ids

    # Damaging a removed enemy again is a no-op
    assert not manager.damage_enemy(victim, 50)
    assert manager.kills == 1
    assert not manager.remove_enemy(victim)


def test_damage_is_accumulated(manager):
    enemy = manager.spawn_enemy(EnemyVariant.STALKER, Vector3(5, 0, 5))
    manager.damage_enemy(enemy, 10)
    manager.damage_enemy(enemy, 100)
    assert manager.damage_dealt == pytest.approx(enemy.max_health)
    assert enemy.health == 0


def test_health_multiplier_scales_max_health(renderer):
    manager = EnemyManager(LevelConfig(enemy_health_multiplier=2.0), renderer=renderer)
    enemy = manager.spawn_enemy('stalker', Vector3(1, 0, 1))
    assert enemy.max_health == pytest.approx(60.0)


def test_knockback_moves_surviving_enemy(manager, make_ctx):
    ctx = make_ctx()
    enemy = manager.spawn_enemy(EnemyVariant.AMBUSHER, Vector3(5, 0, 5))
    before = Vector3(enemy.position)
    manager.damage_enemy(enemy, 1, ctx)
    assert flat_distance(before, enemy.position) == pytest.approx(0.5)


def test_knockback_never_enters_walls(manager, make_ctx):
    # Enemy boxed into a single open cell
    layout = MazeLayout(3)
    layout.set_path(1, 1)
    ctx = make_ctx(layout=layout)
    enemy = manager.spawn_enemy(EnemyVariant.STALKER, Vector3(1.5, 0, 1.5))
    for _ in range(10):
        manager.damage_enemy(enemy, 0.5, ctx)
    assert enemy.position == Vector3(1.5, 0, 1.5)


def test_spawn_position_respects_constraints(manager):
    layout = generate_maze(21, seed=3)
    reference = Vector3(10.5, 0, 10.5)
    for _ in range(25):
        pos = manager.find_spawn_position(layout, reference)
        x, z = int(pos.x), int(pos.z)
        assert layout.is_path(x, z)
        assert not (abs(x - 10) <= 2 and abs(z - 10) <= 2)
        d = flat_distance(pos, reference)
        assert 4.0 <= d <= 16.0


def test_spawn_position_relaxes_impossible_band(renderer):
    config = LevelConfig(min_spawn_distance=100.0, spawn_distance=60.0)
    manager = EnemyManager(config, renderer=renderer, rng=random.Random(1))
    layout = generate_maze(15, seed=2)
    pos = manager.find_spawn_position(layout, Vector3(7.5, 0, 7.5))
    assert pos is not None
    assert layout.is_path(int(pos.x), int(pos.z))


def test_spawn_position_on_solid_layout_is_none(manager, caplog):
    with caplog.at_level(logging.WARNING):
        assert manager.find_spawn_position(MazeLayout(7), Vector3(3.5, 0, 3.5)) is None
    assert "no path cells" in caplog.text


def test_pack_spawn_links_members(renderer, make_ctx):
    config = LevelConfig(type_weights={'pack': 1.0}, pack_size=3)
    manager = EnemyManager(config, renderer=renderer, rng=random.Random(2))
    ctx = make_ctx(layout=generate_maze(21, seed=4), player=(10.5, 0, 10.5))
    spawned = manager.spawn_random(ctx)
    assert len(spawned) == 3
    assert all(e.variant == EnemyVariant.PACK_HUNTER for e in spawned)
    for enemy in spawned:
        assert sorted(enemy.pack_ids) == sorted(e.id for e in spawned if e is not enemy)


def test_soft_cap_blocks_spawns(renderer, make_ctx):
    manager = EnemyManager(LevelConfig(max_enemies=1, type_weights={'stalker': 1.0}),
                           renderer=renderer, rng=random.Random(3))
    ctx = make_ctx(layout=generate_maze(21, seed=4), player=(10.5, 0, 10.5))
    assert len(manager.spawn_random(ctx)) == 1
    assert manager.spawn_random(ctx) == []


def test_initial_population(renderer, make_ctx):
    config = LevelConfig(initial_enemies=4, max_enemies=8, type_weights={'stalker': 1.0})
    manager = EnemyManager(config, renderer=renderer, rng=random.Random(3))
    ctx = make_ctx(layout=generate_maze(21, seed=4), player=(10.5, 0, 10.5))
    manager.spawn_initial(ctx)
    assert len(manager) == 4
    assert manager.counts_by_variant()['stalker'] == 4


def test_contact_damage_respects_attack_cooldown(manager, make_ctx):
    ctx = make_ctx(player=(10, 0, 10))
    player = PlayerState()
    enemy = manager.spawn_enemy(EnemyVariant.STALKER, Vector3(10, 0, 11))

    dealt = manager.update(0.1, ctx, player)
    assert enemy.state == EnemyState.ATTACK
    assert dealt == pytest.approx(enemy.params.damage)
    assert player.health == pytest.approx(100 - enemy.params.damage)

    assert manager.update(0.1, ctx, player) == 0
    assert manager.stats.damage_taken == pytest.approx(enemy.params.damage)


def test_kill_below_population_floor_queues_respawn(renderer, make_ctx):
    manager = EnemyManager(LevelConfig(type_weights={'stalker': 1.0}), renderer=renderer,
                           rng=random.Random(8))
    ctx = make_ctx(layout=generate_maze(21, seed=6), player=(10.5, 0, 10.5))
    enemy = manager.spawn_enemy(EnemyVariant.STALKER, Vector3(1.5, 0, 1.5))
    manager.damage_enemy(enemy, 1000)
    assert len(manager) == 0
    assert manager.pending_spawns == 1
    manager.update(DT, ctx)
    assert len(manager) == 1


def test_clear_releases_visuals_without_kills(manager, renderer):
    manager.spawn_pack(Vector3(5, 0, 5), size=3)
    manager.spawn_enemy(EnemyVariant.AMBUSHER, Vector3(2, 0, 2))
    manager.clear()
    assert len(manager) == 0
    assert manager.kills == 0
    assert renderer.visuals == {}


def test_visual_follows_enemy(manager, renderer, make_ctx):
    ctx = make_ctx(player=(10, 0, 10), walls=ObstacleSet.empty())
    enemy = manager.spawn_enemy(EnemyVariant.STALKER, Vector3(10, 0, 14))
    manager.update(0.2, ctx)
    record = renderer.visuals[enemy.visual]
    assert record['position'].x == pytest.approx(enemy.position.x)
    assert record['position'].z == pytest.approx(enemy.position.z)
    assert record['shape'].kind == 'box'
