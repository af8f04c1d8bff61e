"""
Scanner - fires a cone of rays, paints persistent markers on what they hit,
and damages enemies standing where the rays land
"""

import logging
import math
from collections import namedtuple
from enum import Enum, auto

import numpy as np

from game.world import NullRenderer, ShapeDescriptor
from spatial.raycaster import SpatialQuery, HIT_INDEX, HIT_PX, HIT_PZ, HIT_NX, HIT_NZ
from utils.colors import PLAYER_SKINS, DEFAULT_SKIN
from utils.constants import (
    SCAN_MIN_DISTANCE, SCAN_MAX_DISTANCE, SCAN_ENEMY_HIT_RADIUS,
    SCANNER_SWITCH_COST, MAX_MARKERS, MARKER_SURFACE_OFFSET, MARKER_SIZE,
    DEFAULT_SCANNER, SCANNER_CYCLE,
)
from utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ScannerConfig:
    """Fixed parameters of one scanner variant"""
    def __init__(self, **kwargs):
        self.name = kwargs['name']
        self.scan_points = kwargs.get('scan_points', 75)
        self.width = kwargs.get('width', 6.0)           # lateral spread
        self.height = kwargs.get('height', 2.5)         # vertical spread
        self.cone_angle = kwargs.get('cone_angle', math.pi / 3)
        self.scan_cost = kwargs.get('scan_cost', 10.0)
        self.cooldown = kwargs.get('cooldown', 0.5)     # seconds
        self.damage_per_hit = kwargs.get('damage_per_hit', 2.0)

    def __repr__(self):
        return (f"ScannerConfig({self.name}, points={self.scan_points}, "
                f"cost={self.scan_cost}, cooldown={self.cooldown})")


SCANNER_CONFIGS = {
    'focused': ScannerConfig(
        name='focused',
        scan_points=40,
        width=2.5,
        height=1.0,
        cone_angle=math.pi / 8,
        scan_cost=8.0,
        cooldown=0.3,
        damage_per_hit=3.0,
    ),
    'standard': ScannerConfig(
        name='standard',
        scan_points=75,
        width=6.0,
        height=2.5,
        cone_angle=math.pi / 3,
        scan_cost=10.0,
        cooldown=0.5,
        damage_per_hit=2.0,
    ),
    'wide': ScannerConfig(
        name='wide',
        scan_points=120,
        width=10.0,
        height=3.5,
        cone_angle=math.pi / 2,
        scan_cost=15.0,
        cooldown=0.8,
        damage_per_hit=1.0,
    ),
}


def get_scanner_config(name):
    if name not in SCANNER_CONFIGS:
        raise ConfigurationError(f"unknown scanner type {name!r}")
    return SCANNER_CONFIGS[name]


# Surface codes stored per marker
SURFACE_WALL = 0
SURFACE_FLOOR = 1
SURFACE_CEILING = 2
SURFACE_NAMES = {SURFACE_WALL: 'wall', SURFACE_FLOOR: 'floor', SURFACE_CEILING: 'ceiling'}


def classify_surfaces(normals):
    """
    Surface code per hit normal: upward faces are floor, downward faces are
    ceiling, everything else is wall

    Args:
        normals: (N, 3) array
    """
    ny = np.asarray(normals, dtype=np.float64).reshape(-1, 3)[:, 1]
    codes = np.full(ny.shape[0], SURFACE_WALL, dtype=np.int8)
    codes[ny > 0.9] = SURFACE_FLOOR
    codes[ny < -0.9] = SURFACE_CEILING
    return codes


class MarkerPool:
    """
    Fixed-capacity marker storage

    Slots [0, count) are active; the rest are free. Slots are handed out in
    order and never recycled while the session lasts, so a full pool simply
    drops further requests. Visuals are created the first time a slot is
    used and kept (hidden) across clear() for reuse.
    """
    def __init__(self, capacity=MAX_MARKERS, renderer=None):
        if capacity < 0:
            raise ConfigurationError("marker capacity must not be negative")
        self.capacity = capacity
        self.renderer = renderer if renderer is not None else NullRenderer()

        self.positions = np.zeros((capacity, 3), dtype=np.float64)
        self.normals = np.zeros((capacity, 3), dtype=np.float64)
        self.colors = np.zeros((capacity, 3), dtype=np.uint8)
        self.surfaces = np.zeros(capacity, dtype=np.int8)
        self.visible = np.zeros(capacity, dtype=bool)
        self.handles = [None] * capacity

        self.count = 0
        self.dropped = 0

    def __len__(self):
        return self.count

    @property
    def is_full(self):
        return self.count >= self.capacity

    @property
    def free_slots(self):
        return self.capacity - self.count

    @property
    def active_positions(self):
        return self.positions[:self.count]

    def place(self, position, normal, color):
        """
        Activate one marker

        Returns:
            Slot index, or None when the pool is exhausted
        """
        placed = self.place_many([position], [normal], color)
        return self.count - 1 if placed else None

    def place_many(self, points, normals, color):
        """
        Activate markers for a batch of surface hits

        Each marker sits a small offset off the surface along its normal.

        Args:
            points: (N, 3) hit points
            normals: (N, 3) unit surface normals
            color: RGB tuple

        Returns:
            Number of markers placed (the remainder is dropped)
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
        requested = points.shape[0]
        n = min(requested, self.free_slots)
        if n < requested:
            self.dropped += requested - n
        if n <= 0:
            return 0

        start, end = self.count, self.count + n
        self.positions[start:end] = points[:n] + normals[:n] * MARKER_SURFACE_OFFSET
        self.normals[start:end] = normals[:n]
        self.colors[start:end] = color
        self.surfaces[start:end] = classify_surfaces(normals[:n])
        self.visible[start:end] = True
        self.count = end

        shape = ShapeDescriptor('dot', MARKER_SIZE, tuple(color))
        for slot in range(start, end):
            handle = self.handles[slot]
            if handle is None:
                handle = self.renderer.add_visual(('marker', slot), shape)
                self.handles[slot] = handle
            else:
                self.renderer.set_visible(handle, True)
            self.renderer.set_transform(handle, tuple(self.positions[slot]),
                                        orientation=tuple(self.normals[slot]))
        return n

    def surface_of(self, slot):
        return SURFACE_NAMES[int(self.surfaces[slot])]

    def count_within(self, point, radius):
        """Number of active markers within radius of a point"""
        if self.count == 0:
            return 0
        p = np.array((point[0], point[1], point[2]), dtype=np.float64)
        d2 = np.sum((self.active_positions - p) ** 2, axis=1)
        return int(np.count_nonzero(d2 < radius * radius))

    def any_within(self, point, radius):
        return self.count_within(point, radius) > 0

    def cull(self, camera_pose):
        """
        Hide active markers outside the view frustum, show the ones inside

        Returns:
            Number of visible markers
        """
        if self.count == 0:
            return 0
        inside = camera_pose.points_in_frustum(self.active_positions)
        changed = np.nonzero(inside != self.visible[:self.count])[0]
        for slot in changed:
            self.renderer.set_visible(self.handles[slot], bool(inside[slot]))
        self.visible[:self.count] = inside
        return int(np.count_nonzero(inside))

    def clear(self):
        """Return every active marker to the free pool"""
        for slot in range(self.count):
            if self.visible[slot]:
                self.renderer.set_visible(self.handles[slot], False)
        self.visible[:] = False
        self.count = 0
        self.dropped = 0

    def release_visuals(self):
        """Remove every visual this pool ever created"""
        self.clear()
        for slot, handle in enumerate(self.handles):
            if handle is not None:
                self.renderer.remove_visual(handle)
                self.handles[slot] = None

    def __repr__(self):
        return f"MarkerPool(active={self.count}/{self.capacity}, dropped={self.dropped})"


class ScannerState(Enum):
    IDLE = auto()
    SCANNING = auto()


ScanResult = namedtuple('ScanResult', ['rays', 'hits', 'markers_placed', 'enemy_hits', 'revealed'])


class Scanner:
    """
    Player scanner: cooldown and energy gated ray bundle plus its marker pool
    """
    def __init__(self, renderer=None, config=DEFAULT_SCANNER, color=None,
                 max_markers=MAX_MARKERS, seed=None, spatial=None):
        """
        Args:
            renderer: WorldRenderer for marker visuals
            config: Scanner variant name
            color: Marker RGB color (the player's skin)
            max_markers: Marker pool capacity
            seed: Seed for the ray spread
            spatial: SpatialQuery provider
        """
        self.config = get_scanner_config(config)
        self.color = tuple(color) if color is not None else PLAYER_SKINS[DEFAULT_SKIN]
        self.markers = MarkerPool(max_markers, renderer)
        self.spatial = spatial if spatial is not None else SpatialQuery()
        self.rng = np.random.default_rng(seed)

        self.state = ScannerState.IDLE
        self.last_scan_time = None
        self.scans_fired = 0
        self.total_hits = 0

    @property
    def marker_count(self):
        return self.markers.count

    def cooldown_remaining(self, now):
        if self.last_scan_time is None:
            return 0.0
        return max(0.0, self.config.cooldown - (now - self.last_scan_time))

    def can_scan(self, now, energy_pool):
        return (self.cooldown_remaining(now) <= 0.0
                and energy_pool.energy >= self.config.scan_cost)

    def generate_directions(self, camera_pose):
        """
        Random unit directions inside the forward cone, in world space

        Returns:
            (N, 3) array, N = config.scan_points
        """
        cfg = self.config
        n = cfg.scan_points
        r = self.rng.random((n, 4))
        angle = (r[:, 0] - 0.5) * cfg.cone_angle
        local = np.empty((n, 3), dtype=np.float64)
        local[:, 0] = np.sin(angle) * cfg.width * r[:, 1]
        local[:, 1] = (r[:, 2] - 0.5) * cfg.height
        local[:, 2] = -np.cos(angle) * (2.0 + r[:, 3] * 8.0)
        local /= np.linalg.norm(local, axis=1)[:, None]
        return camera_pose.to_world_many(local)

    def scan(self, camera_pose, energy_pool, ctx):
        """
        Fire one scan

        Nothing changes when the cooldown has not elapsed or the energy pool
        cannot pay the scan cost.

        Args:
            camera_pose: CameraPose the rays leave from
            energy_pool: object with energy / use_energy(amount)
            ctx: WorldContext (now, scan_geometry, enemies, discovered)

        Returns:
            ScanResult, or None if the scan did not fire
        """
        cfg = self.config
        if self.cooldown_remaining(ctx.now) > 0.0:
            return None
        if not energy_pool.use_energy(cfg.scan_cost):
            return None

        self.state = ScannerState.SCANNING
        self.last_scan_time = ctx.now
        self.scans_fired += 1

        directions = self.generate_directions(camera_pose)
        origin = np.array((camera_pose.position.x, camera_pose.position.y,
                           camera_pose.position.z), dtype=np.float64)
        origins = np.broadcast_to(origin, directions.shape)
        results = self.spatial.cast_array(origins, directions, SCAN_MIN_DISTANCE,
                                          SCAN_MAX_DISTANCE, ctx.scan_geometry)
        hit_rows = results[results[:, HIT_INDEX] >= 0]
        points = hit_rows[:, HIT_PX:HIT_PZ + 1]
        normals = hit_rows[:, HIT_NX:HIT_NZ + 1]
        self.total_hits += len(hit_rows)

        enemy_hits = self._enemy_hits(points, ctx.enemies)
        placed = self.markers.place_many(points, normals, self.color)

        revealed = 0
        if ctx.discovered is not None:
            revealed = ctx.discovered.reveal_points(points)

        if ctx.enemies is not None:
            for enemy_id, count in enemy_hits.items():
                enemy = ctx.enemies.get(enemy_id)
                if enemy is not None:
                    ctx.enemies.damage_enemy(enemy, count * cfg.damage_per_hit, ctx)

        self.state = ScannerState.IDLE
        logger.debug("Scan %s: %d rays, %d hits, %d markers, %d enemies hit",
                     cfg.name, cfg.scan_points, len(hit_rows), placed, len(enemy_hits))
        return ScanResult(rays=cfg.scan_points, hits=len(hit_rows), markers_placed=placed,
                          enemy_hits=enemy_hits, revealed=revealed)

    def _enemy_hits(self, points, enemies):
        """
        Count, per enemy, the hit points landing on its body: horizontally
        within the hit radius and vertically inside its height
        """
        hits = {}
        if enemies is None or points.shape[0] == 0:
            return hits
        r2 = SCAN_ENEMY_HIT_RADIUS * SCAN_ENEMY_HIT_RADIUS
        for enemy in enemies:
            pos = enemy.position
            dx = points[:, 0] - pos.x
            dz = points[:, 2] - pos.z
            on_body = ((dx * dx + dz * dz < r2)
                       & (points[:, 1] >= pos.y - SCAN_ENEMY_HIT_RADIUS)
                       & (points[:, 1] <= pos.y + enemy.params.height))
            count = int(np.count_nonzero(on_body))
            if count:
                hits[enemy.id] = count
        return hits

    def update(self, dt, camera_pose):
        """Per-frame marker visibility culling"""
        return self.markers.cull(camera_pose)

    def switch_config(self, energy_pool):
        """
        Cycle to the next scanner variant, paying the switch cost

        Returns:
            True if the variant changed
        """
        if not energy_pool.use_energy(SCANNER_SWITCH_COST):
            return False
        order = list(SCANNER_CYCLE)
        idx = order.index(self.config.name) if self.config.name in order else -1
        self.config = SCANNER_CONFIGS[order[(idx + 1) % len(order)]]
        logger.debug("Scanner switched to %s", self.config.name)
        return True

    def reset(self):
        """Clear all markers, cooldown and scanning state"""
        self.markers.clear()
        self.state = ScannerState.IDLE
        self.last_scan_time = None
        self.scans_fired = 0
        self.total_hits = 0

    def __repr__(self):
        return (f"Scanner(config={self.config.name}, markers={self.markers.count}, "
                f"state={self.state.name})")
