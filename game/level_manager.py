"""
Level Manager - builds a level and runs the per-frame update in order:
input -> player -> scanner -> enemies -> discovery
"""

import logging
import random

from entities.enemy_manager import EnemyManager
from entities.player import PlayerActor
from game.collision import ObstacleSet, scan_geometry
from game.fog_of_war import DiscoveredMap
from game.game_state import GameState, GameStateManager, GameStats, PlayerState
from game.scanner import Scanner
from game.world import NullRenderer, ShapeDescriptor, SimulationClock, WorldContext
from maze.difficulty import LevelConfig, get_level_config
from maze.generator import generate_maze, spawn_block_cells
from spatial.raycaster import SpatialQuery
from utils.colors import PLAYER_SKINS, DEFAULT_SKIN, THEMES
from utils.constants import DEFAULT_SCANNER, MAX_MARKERS, WALL_HEIGHT
from utils.errors import ConfigurationError
from utils.helpers import cell_center

logger = logging.getLogger(__name__)


class GameSession:
    """
    One play session: owns the level, the player, the scanner and the
    enemy population, and advances them once per frame
    """
    def __init__(self, config=None, renderer=None, skin=DEFAULT_SKIN,
                 scanner_type=DEFAULT_SCANNER, seed=None, max_markers=MAX_MARKERS):
        """
        Args:
            config: LevelConfig (defaults to level 1, normal)
            renderer: WorldRenderer
            skin: Player skin name, also the marker color
            scanner_type: Initial scanner variant
            seed: Seed for everything random in the session
            max_markers: Marker pool capacity

        Raises:
            ConfigurationError: invalid config, skin or scanner type
        """
        self.config = (config if config is not None else LevelConfig()).validate()
        if skin not in PLAYER_SKINS:
            raise ConfigurationError(f"unknown skin {skin!r}")
        self.skin = skin
        self.renderer = renderer if renderer is not None else NullRenderer()
        self.rng = random.Random(seed)
        self.seed = seed

        self.clock = SimulationClock()
        self.state_manager = GameStateManager()
        self.stats = GameStats()
        self.resources = PlayerState()
        self.spatial = SpatialQuery()

        self.scanner = Scanner(self.renderer, scanner_type, PLAYER_SKINS[skin],
                               max_markers=max_markers, seed=seed, spatial=self.spatial)
        self.enemies = EnemyManager(self.config, self.renderer, self.rng, self.stats)

        self.layout = None
        self.walls = None
        self.discovered = None
        self.player = None
        self.ctx = None
        self.wall_visuals = []

        self.start()

    @property
    def theme(self):
        return THEMES[self.config.theme]

    @property
    def state(self):
        return self.state_manager.current_state

    def start(self):
        """Generate the maze and populate the level"""
        maze_seed = self.config.seed if self.config.seed is not None else self.rng.randrange(2 ** 31)
        self.layout = generate_maze(self.config.maze_size, seed=maze_seed)
        self.walls = ObstacleSet.from_layout(self.layout)
        self._create_wall_visuals()

        self.discovered = DiscoveredMap(self.layout.size)
        self.discovered.mark_spawn(spawn_block_cells(self.layout))

        spawn = cell_center(*self.layout.center)
        if self.player is None:
            self.player = PlayerActor(spawn, self.walls, self.resources)
        else:
            self.player.set_obstacles(self.walls)
            self.player.respawn(spawn)

        self.ctx = WorldContext(
            layout=self.layout,
            walls=self.walls,
            scan_geometry=scan_geometry(self.layout),
            enemies=self.enemies,
            markers=self.scanner.markers,
            discovered=self.discovered,
            player_position=self.player.position,
            now=self.clock.now,
            spatial=self.spatial,
            rng=self.rng,
            renderer=self.renderer,
        )
        self.discovered.reveal_radius(self.player.position)
        self.enemies.spawn_initial(self.ctx)
        self.state_manager.reset()
        logger.info("Level %d started: %dx%d %s maze, %d enemies",
                    self.config.level, self.layout.size, self.layout.size,
                    self.config.theme, len(self.enemies))

    def _create_wall_visuals(self):
        shape = ShapeDescriptor('box', (1.0, WALL_HEIGHT, 1.0), self.theme['wall'])
        for wall in self.layout.wall_instances():
            handle = self.renderer.add_visual(('wall', wall.x, wall.z), shape)
            self.renderer.set_transform(handle, wall.position)
            self.wall_visuals.append(handle)

    def _teardown(self):
        self.enemies.clear()
        self.scanner.reset()
        for handle in self.wall_visuals:
            self.renderer.remove_visual(handle)
        self.wall_visuals = []

    def restart(self):
        """New maze, fresh player, no markers, no enemies, zeroed stats"""
        self._teardown()
        self.stats.reset()
        self.resources.reset()
        self.clock.reset()
        logger.info("Restarting level %d", self.config.level)
        self.start()

    def close(self):
        """Release every visual the session created; the session is unusable afterwards"""
        self._teardown()
        self.scanner.markers.release_visuals()
        logger.info("Session closed after %.1fs", self.stats.time_survived)

    def advance_level(self):
        """Restart on the next level with a larger maze"""
        self.config = get_level_config(self.config.level + 1, self.config.difficulty,
                                       self.config.theme)
        self.enemies.config = self.config
        self.restart()

    # ========== STATE ==========

    def pause(self):
        if self.state_manager.can_pause():
            self.state_manager.transition_to(GameState.PAUSED)

    def resume(self):
        if self.state_manager.can_resume():
            self.state_manager.transition_to(GameState.PLAYING)

    def toggle_pause(self):
        if self.state_manager.can_pause():
            self.pause()
        else:
            self.resume()

    @property
    def is_game_over(self):
        return self.state_manager.is_state(GameState.GAME_OVER)

    # ========== FRAME ==========

    def update(self, dt, input_state):
        """
        Advance the simulation by one frame

        Args:
            dt: Delta time in seconds
            input_state: InputState snapshot
        """
        if not self.state_manager.is_state(GameState.PLAYING):
            return

        self.ctx.now = self.clock.advance(dt)

        self.player.update(dt, input_state)
        self.ctx.player_position = self.player.position
        pose = self.player.camera_pose()

        if input_state.switch_scanner:
            self.scanner.switch_config(self.resources)
        if input_state.scan_triggered:
            if self.scanner.scan(pose, self.resources, self.ctx) is not None:
                self.stats.record_scan()
        self.scanner.update(dt, pose)

        self.enemies.update(dt, self.ctx, self.resources)

        self.discovered.reveal_radius(self.player.position)

        self.stats.marker_count = self.scanner.marker_count
        self.stats.record_frame(dt)

        if self.resources.is_dead:
            self.state_manager.transition_to(GameState.GAME_OVER, stats=self.stats.snapshot())
            logger.info("Game over after %.1fs, %d kills", self.stats.time_survived, self.stats.kills)

    def __repr__(self):
        return (f"GameSession(level={self.config.level}, state={self.state.name}, "
                f"enemies={len(self.enemies)}, markers={self.scanner.marker_count})")
