"""
Boundary contracts between the game core and its collaborators:
simulation clock, input snapshot, world renderer, and the per-tick context
"""

import itertools
import random
from collections import namedtuple

from pygame.math import Vector3


ShapeDescriptor = namedtuple('ShapeDescriptor', ['kind', 'size', 'color'])


class SimulationClock:
    """
    Explicit simulation time, advanced once per frame by the session
    Throttled perception and cooldowns read this instead of wall-clock time
    """
    def __init__(self, start=0.0):
        self.now = start

    def advance(self, dt):
        self.now += dt
        return self.now

    def reset(self):
        self.now = 0.0

    def __repr__(self):
        return f"SimulationClock(now={self.now:.3f})"


class InputState:
    """
    Read-only snapshot of player input for one tick
    """
    def __init__(self, forward=False, back=False, left=False, right=False,
                 sprint=False, scan_triggered=False, switch_scanner=False,
                 yaw=0.0, pitch=0.0):
        self.forward = forward
        self.back = back
        self.left = left
        self.right = right
        self.sprint = sprint
        self.scan_triggered = scan_triggered
        self.switch_scanner = switch_scanner
        self.yaw = yaw
        self.pitch = pitch

    def __repr__(self):
        keys = ''.join(k for k, on in (('W', self.forward), ('S', self.back),
                                       ('A', self.left), ('D', self.right)) if on)
        return f"InputState(move={keys or '-'}, sprint={self.sprint}, scan={self.scan_triggered})"


class WorldRenderer:
    """
    Interface the core uses to materialize entities visually
    Implementations: NullRenderer (headless), game.display_manager.PygameRenderer
    """

    def add_visual(self, entity_id, shape):
        """Create a visual for an entity and return its handle"""
        raise NotImplementedError

    def remove_visual(self, handle):
        raise NotImplementedError

    def set_transform(self, handle, position, orientation=0.0, scale=1.0):
        raise NotImplementedError

    def set_visible(self, handle, visible):
        raise NotImplementedError


class NullRenderer(WorldRenderer):
    """
    Headless renderer that only keeps track of visual records
    """
    def __init__(self):
        self._ids = itertools.count(1)
        self.visuals = {}
        self.removed = 0

    def add_visual(self, entity_id, shape):
        handle = next(self._ids)
        self.visuals[handle] = {
            'entity_id': entity_id,
            'shape': shape,
            'position': None,
            'orientation': 0.0,
            'scale': 1.0,
            'visible': True,
        }
        return handle

    def remove_visual(self, handle):
        if self.visuals.pop(handle, None) is not None:
            self.removed += 1

    def set_transform(self, handle, position, orientation=0.0, scale=1.0):
        record = self.visuals.get(handle)
        if record is None:
            return
        record['position'] = Vector3(position)
        record['orientation'] = orientation
        record['scale'] = scale

    def set_visible(self, handle, visible):
        record = self.visuals.get(handle)
        if record is not None:
            record['visible'] = bool(visible)

    def visuals_for(self, entity_id):
        return [h for h, r in self.visuals.items() if r['entity_id'] == entity_id]

    def __repr__(self):
        return f"NullRenderer(visuals={len(self.visuals)}, removed={self.removed})"


class WorldContext:
    """
    Everything an entity may consult during one tick, passed explicitly

    Attributes:
        layout: MazeLayout (read-only)
        walls: ObstacleSet of wall boxes (collision and line of sight)
        scan_geometry: ObstacleSet of walls + floor + ceiling (scanner)
        enemies: EnemyManager or None (population accessor)
        markers: MarkerPool or None (illumination source)
        discovered: DiscoveredMap or None
        player_position: Vector3 on the ground plane
        now: simulation time in seconds
        spatial: SpatialQuery
        rng: random.Random
        renderer: WorldRenderer
    """
    def __init__(self, layout=None, walls=None, scan_geometry=None, enemies=None,
                 markers=None, discovered=None, player_position=None, now=0.0,
                 spatial=None, rng=None, renderer=None):
        from game.collision import ObstacleSet
        from spatial.raycaster import SpatialQuery

        self.layout = layout
        self.walls = walls if walls is not None else ObstacleSet.empty()
        self.scan_geometry = scan_geometry if scan_geometry is not None else self.walls
        self.enemies = enemies
        self.markers = markers
        self.discovered = discovered
        self.player_position = Vector3(player_position) if player_position is not None else Vector3()
        self.now = now
        self.spatial = spatial if spatial is not None else SpatialQuery()
        self.rng = rng if rng is not None else random.Random()
        self.renderer = renderer if renderer is not None else NullRenderer()

    def __repr__(self):
        return (f"WorldContext(now={self.now:.2f}, walls={len(self.walls)}, "
                f"player=({self.player_position.x:.2f}, {self.player_position.z:.2f}))")
