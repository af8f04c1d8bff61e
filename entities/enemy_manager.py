"""
Enemy population: spawning, per-tick update, contact damage and removal
"""

import itertools
import logging
import math
import random

from pygame.math import Vector3

from entities.behaviors import create_enemy
from entities.enemy import EnemyVariant
from game.collision import CollisionHandler
from game.game_state import GameStats
from game.world import NullRenderer
from maze.difficulty import LevelConfig
from utils.constants import (
    ATTACK_RANGE, SPAWN_ATTEMPTS, POPULATION_FLOOR, KNOCKBACK_DISTANCE,
)
from utils.helpers import cell_center, flat_distance, weighted_choice

logger = logging.getLogger(__name__)

# Spread of pack members around their shared spawn cell center
PACK_SPREAD = 0.2


class EnemyManager:
    """
    Sole owner of the live enemy population

    Enemies are stored by id; pack-mates refer to each other by id so a
    removal can never leave a dangling reference behind.
    """
    def __init__(self, config=None, renderer=None, rng=None, stats=None):
        """
        Args:
            config: LevelConfig (enemy density, weights, spawn distances)
            renderer: WorldRenderer for enemy visuals
            rng: random.Random
            stats: GameStats sink for kills and damage
        """
        self.config = config if config is not None else LevelConfig()
        self.renderer = renderer if renderer is not None else NullRenderer()
        self.rng = rng if rng is not None else random.Random()
        self.stats = stats if stats is not None else GameStats()

        self._enemies = {}
        self._ids = itertools.count(1)
        self.spawn_timer = 0.0
        self.pending_spawns = 0

    # ========== ACCESSORS ==========

    @property
    def enemies(self):
        return list(self._enemies.values())

    def get(self, enemy_id):
        """Live enemy by id, or None once it has been removed"""
        return self._enemies.get(enemy_id)

    def __iter__(self):
        return iter(list(self._enemies.values()))

    def __len__(self):
        return len(self._enemies)

    @property
    def kills(self):
        return self.stats.kills

    @property
    def damage_dealt(self):
        return self.stats.damage_dealt

    def counts_by_variant(self):
        counts = {variant.value: 0 for variant in EnemyVariant}
        for enemy in self._enemies.values():
            counts[enemy.variant.value] += 1
        return counts

    # ========== SPAWNING ==========

    def _in_forbidden_zone(self, layout, x, z):
        cx, cz = layout.center
        r = self.config.forbidden_zone_radius
        return abs(x - cx) <= r and abs(z - cz) <= r

    def _in_distance_band(self, x, z, reference):
        dist = flat_distance(cell_center(x, z), reference)
        return self.config.min_spawn_distance <= dist <= 2 * self.config.spawn_distance

    def find_spawn_position(self, layout, reference):
        """
        Find a spawn cell center

        Tries random cells first, then scans the grid, then relaxes the
        constraints: distance band first, forbidden zone second.

        Args:
            layout: MazeLayout
            reference: Vector3 the distance band is measured from

        Returns:
            Vector3, or None if the layout has no PATH cell at all
        """
        for _ in range(SPAWN_ATTEMPTS):
            x = self.rng.randrange(layout.size)
            z = self.rng.randrange(layout.size)
            if (layout.is_path(x, z) and not self._in_forbidden_zone(layout, x, z)
                    and self._in_distance_band(x, z, reference)):
                return cell_center(x, z)

        path_cells = layout.path_cells()
        allowed = [c for c in path_cells if not self._in_forbidden_zone(layout, *c)]
        candidates = [c for c in allowed if self._in_distance_band(c[0], c[1], reference)]
        if candidates:
            return cell_center(*self.rng.choice(candidates))

        logger.debug("No spawn cell in distance band, ignoring it")
        if allowed:
            return cell_center(*self.rng.choice(allowed))

        if path_cells:
            logger.debug("No spawn cell outside forbidden zone, using first path cell")
            return cell_center(*path_cells[0])

        logger.warning("Spawn skipped: layout has no path cells")
        return None

    def spawn_enemy(self, variant, position):
        """Create one enemy at a position and give it a visual"""
        enemy = create_enemy(next(self._ids), variant, position,
                             self.config.enemy_health_multiplier)
        enemy.visual = self.renderer.add_visual(enemy.id, enemy.behavior.create_visual(enemy))
        self._enemies[enemy.id] = enemy
        self._sync_visual(enemy)
        logger.debug("Spawned %r", enemy)
        return enemy

    def spawn_pack(self, position, size=None):
        """Spawn pack hunters around one cell and link them as pack-mates"""
        size = size if size is not None else self.config.pack_size
        pack = []
        for i in range(size):
            angle = 2 * math.pi * i / size
            offset = Vector3(math.cos(angle), 0.0, math.sin(angle)) * (PACK_SPREAD if size > 1 else 0.0)
            pack.append(self.spawn_enemy(EnemyVariant.PACK_HUNTER, position + offset))
        for enemy in pack:
            enemy.pack_ids = [mate.id for mate in pack if mate is not enemy]
        return pack

    def spawn_random(self, ctx):
        """
        Spawn a weighted-random enemy type near the player

        Returns:
            List of spawned enemies (empty at the soft cap or with no spawn cell)
        """
        if len(self._enemies) >= self.config.max_enemies or ctx.layout is None:
            return []
        kind = weighted_choice(self.rng, self.config.type_weights)
        if kind is None:
            return []
        position = self.find_spawn_position(ctx.layout, ctx.player_position)
        if position is None:
            return []
        if EnemyVariant(kind) == EnemyVariant.PACK_HUNTER:
            return self.spawn_pack(position)
        return [self.spawn_enemy(kind, position)]

    def spawn_initial(self, ctx):
        """Fill the starting population"""
        spawned = []
        target = min(self.config.initial_enemies, self.config.max_enemies)
        attempts = 0
        while len(self._enemies) < target and attempts < target * 2:
            spawned.extend(self.spawn_random(ctx))
            attempts += 1
        logger.info("Initial population: %d enemies", len(self._enemies))
        return spawned

    # ========== UPDATE ==========

    def update(self, dt, ctx, player_state=None):
        """
        Tick the population

        Args:
            dt: Delta time in seconds
            ctx: WorldContext
            player_state: PlayerState receiving contact damage

        Returns:
            Total contact damage dealt to the player this tick
        """
        self.spawn_timer += dt
        if self.spawn_timer >= self.config.spawn_interval:
            self.spawn_timer = 0.0
            self.spawn_random(ctx)

        while self.pending_spawns > 0:
            self.pending_spawns -= 1
            self.spawn_random(ctx)

        contact_damage = 0.0
        for enemy in list(self._enemies.values()):
            enemy.update(dt, ctx)
            self._sync_visual(enemy)
            if (player_state is not None and enemy.attack_ready
                    and enemy.distance_to(ctx.player_position) < ATTACK_RANGE):
                player_state.take_damage(enemy.params.damage)
                self.stats.record_damage_taken(enemy.params.damage)
                contact_damage += enemy.params.damage
                enemy.consume_attack()

        for enemy in [e for e in self._enemies.values() if e.is_dead]:
            self.remove_enemy(enemy)
        return contact_damage

    def _sync_visual(self, enemy):
        if enemy.visual is None:
            return
        pos = (enemy.position.x, enemy.position.y + enemy.params.height / 2, enemy.position.z)
        self.renderer.set_transform(enemy.visual, pos, orientation=enemy.facing)

    # ========== DAMAGE / REMOVAL ==========

    def damage_enemy(self, enemy, amount, ctx=None):
        """
        Damage an enemy, removing it if it dies

        A surviving enemy is knocked back a little when a context is given.

        Returns:
            True if the enemy died
        """
        if enemy.id not in self._enemies or amount <= 0:
            return False
        self.stats.record_damage_dealt(min(amount, enemy.health))
        if enemy.take_damage(amount):
            self.remove_enemy(enemy)
            return True
        if ctx is not None:
            self.apply_knockback(enemy, ctx)
        return False

    def apply_knockback(self, enemy, ctx):
        """Random horizontal nudge, skipped if it would end inside a wall"""
        angle = ctx.rng.uniform(0, 2 * math.pi)
        x = enemy.position.x + math.cos(angle) * KNOCKBACK_DISTANCE
        z = enemy.position.z + math.sin(angle) * KNOCKBACK_DISTANCE
        handler = CollisionHandler(ctx.walls, enemy.params.half_width, enemy.params.height)
        if handler.collides_at(x, z):
            return False
        enemy.position.x = x
        enemy.position.z = z
        self._sync_visual(enemy)
        return True

    def remove_enemy(self, enemy, killed=True):
        """
        Drop an enemy from the population, release its visual and unlink it
        from every pack

        Returns:
            False if the enemy was already gone
        """
        if self._enemies.pop(enemy.id, None) is None:
            return False
        if enemy.visual is not None:
            self.renderer.remove_visual(enemy.visual)
            enemy.visual = None
        for other in self._enemies.values():
            if enemy.id in other.pack_ids:
                other.pack_ids.remove(enemy.id)
        enemy.pack_ids = []

        if killed:
            self.stats.record_kill()
            if len(self._enemies) < POPULATION_FLOOR:
                self.pending_spawns += 1
            logger.debug("Enemy %d killed (%d total)", enemy.id, self.stats.kills)
        return True

    def clear(self):
        """Remove every enemy without counting kills"""
        for enemy in list(self._enemies.values()):
            self.remove_enemy(enemy, killed=False)
        self.spawn_timer = 0.0
        self.pending_spawns = 0

    def __repr__(self):
        return f"EnemyManager(enemies={len(self._enemies)}, kills={self.kills})"
