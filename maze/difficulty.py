"""
Level configurations for Glow Maze
Maze size scales with the level number; difficulty tunes the enemy population
"""

from utils.constants import (
    MAZE_BASE_SIZE, MAZE_SIZE_PER_LEVEL, MAZE_MIN_SIZE,
    SPAWN_DISTANCE, SPAWN_MIN_DISTANCE, FORBIDDEN_ZONE_RADIUS, PACK_SIZE,
)
from utils.colors import THEMES, DEFAULT_THEME
from utils.errors import ConfigurationError


DEFAULT_TYPE_WEIGHTS = {
    'stalker': 0.5,
    'pack': 0.3,
    'ambusher': 0.2,
}


class LevelConfig:
    """Configuration for a single level/session"""
    def __init__(self, **kwargs):
        self.level = kwargs.get('level', 1)
        self.difficulty = kwargs.get('difficulty', 'normal')

        # Maze
        self.maze_size = kwargs.get('maze_size', MAZE_BASE_SIZE)
        self.theme = kwargs.get('theme', DEFAULT_THEME)
        self.seed = kwargs.get('seed', None)

        # Enemy density
        self.initial_enemies = kwargs.get('initial_enemies', 4)
        self.max_enemies = kwargs.get('max_enemies', 8)
        self.spawn_interval = kwargs.get('spawn_interval', 20.0)  # seconds
        self.spawn_distance = kwargs.get('spawn_distance', SPAWN_DISTANCE)
        self.min_spawn_distance = kwargs.get('min_spawn_distance', SPAWN_MIN_DISTANCE)
        self.forbidden_zone_radius = kwargs.get('forbidden_zone_radius', FORBIDDEN_ZONE_RADIUS)
        self.pack_size = kwargs.get('pack_size', PACK_SIZE)
        self.type_weights = dict(kwargs.get('type_weights', DEFAULT_TYPE_WEIGHTS))
        self.enemy_health_multiplier = kwargs.get('enemy_health_multiplier', 1.0)

    def validate(self):
        """
        Reject configurations the core cannot run with

        Raises:
            ConfigurationError: on the first invalid field
        """
        if not isinstance(self.maze_size, int) or self.maze_size < MAZE_MIN_SIZE:
            raise ConfigurationError(
                f"maze_size must be an integer >= {MAZE_MIN_SIZE}, got {self.maze_size!r}")
        if self.theme not in THEMES:
            raise ConfigurationError(f"unknown theme {self.theme!r}")
        if self.level < 1:
            raise ConfigurationError(f"level must be >= 1, got {self.level!r}")
        if self.initial_enemies < 0 or self.max_enemies < 0:
            raise ConfigurationError("enemy counts must not be negative")
        if self.spawn_interval <= 0:
            raise ConfigurationError("spawn_interval must be positive")
        if self.pack_size < 1:
            raise ConfigurationError("pack_size must be at least 1")
        if self.min_spawn_distance < 0 or self.spawn_distance <= 0:
            raise ConfigurationError("spawn distances must be positive")
        if any(w < 0 for w in self.type_weights.values()) or sum(self.type_weights.values()) <= 0:
            raise ConfigurationError("type_weights must be non-negative with a positive total")
        unknown = set(self.type_weights) - set(DEFAULT_TYPE_WEIGHTS)
        if unknown:
            raise ConfigurationError(f"unknown enemy types in type_weights: {sorted(unknown)}")
        return self

    def __repr__(self):
        return (f"LevelConfig(level={self.level}, difficulty={self.difficulty}, "
                f"size={self.maze_size}, theme={self.theme})")


# ========== DIFFICULTY PRESETS ==========

DIFFICULTY_PRESETS = {
    'easy': dict(
        initial_enemies=2,
        max_enemies=5,
        spawn_interval=30.0,
        enemy_health_multiplier=0.75,
    ),
    'normal': dict(
        initial_enemies=4,
        max_enemies=8,
        spawn_interval=20.0,
        enemy_health_multiplier=1.0,
    ),
    'hard': dict(
        initial_enemies=6,
        max_enemies=12,
        spawn_interval=12.0,
        enemy_health_multiplier=1.5,
        type_weights={'stalker': 0.4, 'pack': 0.4, 'ambusher': 0.2},
    ),
}


def maze_size_for_level(level):
    """Maze side length grows by two cells per level"""
    return MAZE_BASE_SIZE + MAZE_SIZE_PER_LEVEL * (level - 1)


def get_level_config(level=1, difficulty='normal', theme=DEFAULT_THEME, **overrides):
    """
    Build and validate the configuration for a level

    Args:
        level: Level number (1-based)
        difficulty: Preset name ('easy', 'normal', 'hard')
        theme: Theme name
        **overrides: Any LevelConfig field

    Returns:
        Validated LevelConfig
    """
    if difficulty not in DIFFICULTY_PRESETS:
        raise ConfigurationError(f"unknown difficulty {difficulty!r}")
    if not isinstance(level, int) or level < 1:
        raise ConfigurationError(f"level must be an integer >= 1, got {level!r}")

    params = dict(DIFFICULTY_PRESETS[difficulty])
    params.update(level=level, difficulty=difficulty, theme=theme,
                  maze_size=maze_size_for_level(level))
    params.update(overrides)
    return LevelConfig(**params).validate()
