"""
Enemy record, perception and state machine
Variant-specific behavior is looked up in entities.behaviors
"""

import math
from enum import Enum

from pygame.math import Vector3

from game.collision import CollisionHandler
from maze.maze_core import find_path
from utils.constants import (
    ATTACK_RANGE, ATTACK_COOLDOWN, ILLUMINATION_RADIUS,
    LOS_RECHECK_INTERVAL, LOS_PLAYER_MOVE_THRESHOLD, LOS_ASSUME_VISIBLE_DISTANCE,
    IDLE_TO_PATROL_TIME, PATROL_ARRIVE_DISTANCE, PATROL_POINT_ATTEMPTS,
    ENEMY_ACCELERATION, PATH_RECOMPUTE_COOLDOWN, PATH_PLAYER_MOVE_THRESHOLD,
    PATH_MIN_DISTANCE, HIDE_LOOKAHEAD, WAYPOINT_ARRIVE_DISTANCE,
)
from utils.helpers import damp, safe_normalize, flat, flat_distance, cell_of, cell_center

# Height at which line of sight is tested (below the wall tops)
SIGHT_HEIGHT = 1.0


class EnemyState(Enum):
    IDLE = 'idle'
    PATROL = 'patrol'
    CHASE = 'chase'
    ATTACK = 'attack'
    HIDE = 'hide'
    FLOCK = 'flock'


class EnemyVariant(Enum):
    STALKER = 'stalker'
    PACK_HUNTER = 'pack'
    AMBUSHER = 'ambusher'


class EnemyParams:
    """Per-variant tunables"""
    def __init__(self, **kwargs):
        self.health = kwargs.get('health', 30.0)
        self.detection_range = kwargs.get('detection_range', 8.0)
        self.move_speed = kwargs.get('move_speed', 2.0)      # units per second
        self.damage = kwargs.get('damage', 10.0)
        self.light_sensitive = kwargs.get('light_sensitive', True)
        self.use_pathfinding = kwargs.get('use_pathfinding', False)
        self.width = kwargs.get('width', 0.5)
        self.height = kwargs.get('height', 3.0)

    @property
    def half_width(self):
        return self.width / 2

    def scaled(self, health_multiplier):
        """Copy with health scaled by a difficulty multiplier"""
        params = EnemyParams(**vars(self))
        params.health = self.health * health_multiplier
        return params

    def __repr__(self):
        return (f"EnemyParams(health={self.health}, range={self.detection_range}, "
                f"speed={self.move_speed}, light_sensitive={self.light_sensitive})")


class Enemy:
    """
    One live enemy

    All variants share this record; the three specialised behaviors
    (hide, attack, flock) plus the visual shape and transition policy come
    from the `behavior` capability entry.
    """
    def __init__(self, enemy_id, variant, position, behavior, params=None):
        """
        Args:
            enemy_id: Unique id within the population
            variant: EnemyVariant
            position: Vector3 on the ground plane
            behavior: VariantBehavior capability entry
            params: EnemyParams (defaults to the behavior's)
        """
        self.id = enemy_id
        self.variant = variant
        self.behavior = behavior
        self.params = params if params is not None else behavior.params
        self.position = Vector3(position.x, 0.0, position.z)
        self.velocity = Vector3()
        self.facing = 0.0

        self.health = float(self.params.health)
        self.max_health = float(self.params.health)

        self.state = behavior.initial_state
        self.state_timer = 0.0

        # Patrol target and cached path (list of Vector3 waypoints)
        self.target_position = None
        self.path = []
        self.path_index = 0
        self.last_path_time = None
        self.last_path_player_pos = None

        # Throttled line of sight
        self.last_los_time = None
        self.last_los_player_pos = None
        self.can_see = False

        self.illuminated = False
        self.attack_timer = 0.0
        self.ambush_cooldown = 0.0

        # Pack-mates as ids into the manager's population
        self.pack_ids = []

        self.visual = None

    @property
    def is_dead(self):
        return self.health <= 0

    @property
    def attack_ready(self):
        return self.state == EnemyState.ATTACK and self.attack_timer <= 0.0

    def distance_to(self, point):
        return flat_distance(self.position, point)

    # ========== PERCEPTION ==========

    def can_see_player(self, ctx):
        """
        Line of sight to the player against walls, cached between casts

        A fresh cast happens only when the cache is older than the recheck
        interval or the player moved far enough; very close players are
        assumed visible without casting.
        """
        player = ctx.player_position
        dist = self.distance_to(player)
        if dist < LOS_ASSUME_VISIBLE_DISTANCE:
            self.can_see = True
            return True

        moved = (self.last_los_player_pos is None
                 or flat_distance(player, self.last_los_player_pos) > LOS_PLAYER_MOVE_THRESHOLD)
        fresh = (self.last_los_time is not None
                 and ctx.now - self.last_los_time < LOS_RECHECK_INTERVAL)
        if fresh and not moved:
            return self.can_see

        self.last_los_time = ctx.now
        self.last_los_player_pos = Vector3(player)
        if dist >= self.params.detection_range:
            self.can_see = False
        else:
            eye = (self.position.x, SIGHT_HEIGHT, self.position.z)
            target = (player.x, SIGHT_HEIGHT, player.z)
            self.can_see = ctx.spatial.line_of_sight(eye, target, ctx.walls)
        return self.can_see

    def check_illumination(self, ctx):
        """
        True if any active scan marker is within the illumination radius of
        the enemy's ground position
        """
        if ctx.markers is None:
            return False
        feet = (self.position.x, self.position.y, self.position.z)
        return ctx.markers.any_within(feet, ILLUMINATION_RADIUS)

    # ========== STATE MACHINE ==========

    def enter_state(self, state):
        if state == self.state:
            return
        self.state = state
        self.state_timer = 0.0
        self.target_position = None
        self.path = []
        self.path_index = 0

    def next_state(self, ctx, distance, visible, illuminated):
        """
        Base transition policy, first match wins:
        illuminated (light-sensitive) -> HIDE, in melee range -> ATTACK,
        visible within detection range -> CHASE, idle too long -> PATROL
        """
        if self.params.light_sensitive and illuminated:
            return EnemyState.HIDE
        if distance < ATTACK_RANGE:
            return EnemyState.ATTACK
        if visible and distance < self.params.detection_range:
            return EnemyState.CHASE
        if self.state == EnemyState.IDLE and self.state_timer > IDLE_TO_PATROL_TIME:
            return EnemyState.PATROL
        return self.state

    def update(self, dt, ctx):
        """
        One tick: perceive, transition, then run the current state's behavior

        Args:
            dt: Delta time in seconds
            ctx: WorldContext
        """
        self.state_timer += dt
        self.attack_timer = max(0.0, self.attack_timer - dt)

        distance = self.distance_to(ctx.player_position)
        self.illuminated = self.check_illumination(ctx)
        visible = self.can_see_player(ctx)

        self.enter_state(self.behavior.next_state(self, ctx, distance, visible, self.illuminated))

        handler = self.behavior.handlers[self.state]
        handler(self, dt, ctx)

    def update_idle(self, dt, ctx):
        self.velocity = Vector3()

    def update_patrol(self, dt, ctx):
        if (self.target_position is None
                or self.distance_to(self.target_position) < PATROL_ARRIVE_DISTANCE):
            self.target_position = self.pick_patrol_point(ctx)
        self.move_towards(self.target_position, dt, ctx)

    def update_chase(self, dt, ctx):
        player = ctx.player_position
        if not self.params.use_pathfinding or ctx.layout is None:
            self.move_towards(player, dt, ctx)
            return

        if self.distance_to(player) < PATH_MIN_DISTANCE:
            self.path = []
            self.move_towards(player, dt, ctx)
            return

        if self.needs_new_path(ctx):
            self.recompute_path(ctx)

        if not self.path:
            # No meaningful path: head straight for the player
            self.move_towards(player, dt, ctx)
            return
        self.follow_path(dt, ctx)

    def update_attack(self, dt, ctx):
        """Face the player and keep closing in"""
        to_player = flat(ctx.player_position - self.position)
        if to_player.length_squared() > 0:
            self.facing = math.atan2(to_player.x, to_player.z)
        self.move_towards(ctx.player_position, dt, ctx)

    def update_hide(self, dt, ctx):
        """Retreat directly away from the player"""
        away = safe_normalize(flat(self.position - ctx.player_position))
        self.move_towards(self.position + away * HIDE_LOOKAHEAD, dt, ctx)

    def consume_attack(self):
        """Start the attack cooldown after a hit has landed"""
        self.attack_timer = ATTACK_COOLDOWN

    # ========== MOVEMENT ==========

    def pick_patrol_point(self, ctx):
        if ctx.layout is None:
            return Vector3(self.position)
        cell = ctx.layout.random_path_cell(ctx.rng, attempts=PATROL_POINT_ATTEMPTS)
        if cell is None:
            return Vector3(self.position)
        return cell_center(*cell)

    def move_towards(self, target, dt, ctx, speed_multiplier=1.0):
        """
        Steer toward a target with smoothed velocity and per-axis collision

        The desired speed is capped so the enemy stops on the target instead
        of overshooting it.
        """
        offset = flat(target - self.position)
        dist = offset.length()
        speed = self.params.move_speed * speed_multiplier
        if dt > 0:
            speed = min(speed, dist / dt)
        desired = safe_normalize(offset) * speed
        self.velocity = damp(self.velocity, desired, ENEMY_ACCELERATION, dt)
        self.move_by(self.velocity * dt, ctx)
        if self.velocity.length_squared() > 1e-6:
            self.facing = math.atan2(self.velocity.x, self.velocity.z)

    def move_by(self, delta, ctx):
        """Displace by delta, sliding along walls; blocked axes lose velocity"""
        handler = CollisionHandler(ctx.walls, self.params.half_width, self.params.height)
        x, z, blocked_x, blocked_z = handler.move(self.position.x, self.position.z, delta.x, delta.z)
        self.position.x = x
        self.position.z = z
        if blocked_x:
            self.velocity.x = 0.0
        if blocked_z:
            self.velocity.z = 0.0

    def needs_new_path(self, ctx):
        if not self.path or self.path_index >= len(self.path):
            return True
        if self.last_path_time is None or ctx.now - self.last_path_time >= PATH_RECOMPUTE_COOLDOWN:
            return True
        return flat_distance(ctx.player_position, self.last_path_player_pos) > PATH_PLAYER_MOVE_THRESHOLD

    def recompute_path(self, ctx):
        """
        A* toward the player's cell; a single-cell result means no path and
        leaves the cached path empty
        """
        self.last_path_time = ctx.now
        self.last_path_player_pos = Vector3(ctx.player_position)
        cells = find_path(cell_of(self.position), cell_of(ctx.player_position), ctx.layout)
        if len(cells) < 2:
            self.path = []
            self.path_index = 0
            return
        self.path = [cell_center(x, z) for x, z in cells]
        self.path_index = 1  # first cell is the one we stand in

    def follow_path(self, dt, ctx):
        waypoint = self.path[self.path_index]
        if self.distance_to(waypoint) < WAYPOINT_ARRIVE_DISTANCE:
            self.path_index += 1
            if self.path_index >= len(self.path):
                self.path = []
                return
            waypoint = self.path[self.path_index]
        self.move_towards(waypoint, dt, ctx)

    # ========== DAMAGE ==========

    def take_damage(self, amount):
        """
        Subtract health (never below zero)
        Returns True if the enemy died
        """
        self.health = max(0.0, self.health - amount)
        return self.health <= 0

    def __repr__(self):
        return (f"Enemy(id={self.id}, {self.variant.value}, state={self.state.value}, "
                f"pos=({self.position.x:.1f}, {self.position.z:.1f}), hp={self.health:.0f})")
