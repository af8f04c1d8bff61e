import pytest

from game.game_state import GameState, GameStateManager, GameStats, PlayerState
from maze.difficulty import LevelConfig, get_level_config, maze_size_for_level
from utils.errors import ConfigurationError


def test_use_energy_is_all_or_nothing():
    pool = PlayerState()
    assert pool.use_energy(30)
    assert pool.energy == pytest.approx(70)
    assert not pool.use_energy(80)
    assert pool.energy == pytest.approx(70)


def test_regeneration_is_capped():
    pool = PlayerState()
    pool.use_energy(10)
    pool.update(10.0)
    assert pool.energy == pool.stats['max_energy']
    pool.regenerate(50)
    assert pool.energy == 100


def test_health_regenerates_over_time():
    pool = PlayerState()
    pool.take_damage(20)
    pool.update(2.0)
    assert pool.health == pytest.approx(82)


def test_death_and_no_healing_after():
    pool = PlayerState()
    assert not pool.take_damage(60)
    assert pool.take_damage(60)
    assert pool.health == 0
    assert pool.is_dead
    pool.update(5.0)
    assert pool.health == 0
    assert not pool.take_damage(10)
    assert pool.damage_taken == pytest.approx(120)


def test_stats_sink():
    stats = GameStats()
    stats.record_kill()
    stats.record_kill()
    stats.record_damage_dealt(12.5)
    stats.record_frame(0.02)
    snap = stats.snapshot()
    assert snap['kills'] == 2
    assert snap['score'] == 200
    assert snap['damage_dealt'] == 12.5
    assert snap['fps'] == pytest.approx(50)
    stats.reset()
    assert stats.kills == 0


def test_state_transitions():
    manager = GameStateManager()
    assert manager.can_pause()
    manager.transition_to(GameState.PAUSED)
    assert manager.can_resume()
    assert manager.previous_state == GameState.PLAYING
    manager.transition_to(GameState.GAME_OVER, reason='died')
    assert manager.state_data == {'reason': 'died'}
    assert not manager.can_pause()


def test_level_config_scales_maze():
    assert maze_size_for_level(1) == 20
    assert get_level_config(3).maze_size == 24
    assert get_level_config(2, 'hard').max_enemies == 12


@pytest.mark.parametrize("kwargs", [
    dict(maze_size=4),
    dict(theme='space'),
    dict(spawn_interval=0),
    dict(type_weights={'stalker': 0.0}),
    dict(type_weights={'dragon': 1.0}),
])
def test_invalid_level_config(kwargs):
    with pytest.raises(ConfigurationError):
        LevelConfig(**kwargs).validate()


def test_unknown_difficulty():
    with pytest.raises(ConfigurationError):
        get_level_config(1, 'nightmare')
