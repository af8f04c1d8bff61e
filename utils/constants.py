"""
Global constants for Glow Maze
"""

GAME_TITLE = "Glow Maze"
GAME_VERSION = "1.0.0"

# Screen settings (demo shell)
FPS = 60
CELL_PIXELS = 24
PANEL_H = 60

# Maze cell values
WALL = 1
PATH = 0

# Maze dimensions
MAZE_BASE_SIZE = 20
MAZE_SIZE_PER_LEVEL = 2
MAZE_MIN_SIZE = 5
SPAWN_BLOCK_RADIUS = 1  # 3x3 block around the center

# Carve directions (step of 2 leaves one wall cell between corridors)
CARVE_DIRS = [
    (0, 2),    # north
    (2, 0),    # east
    (0, -2),   # south
    (-2, 0),   # west
]

# 8-directional neighbours for pathfinding
NEIGHBOR_DIRS_8 = [
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
]

# 4-directional neighbours for reachability
NEIGHBOR_DIRS_4 = [(0, -1), (1, 0), (0, 1), (-1, 0)]

# World geometry (cell (x, z) occupies [x, x+1) x [z, z+1))
FLOOR_Y = 0.0
WALL_HEIGHT = 2.0
CEILING_Y = 3.0
SLAB_THICKNESS = 0.1

# Player settings
PLAYER_RADIUS = 0.3
PLAYER_HEIGHT = 1.6
PLAYER_EYE_HEIGHT = 1.2
PLAYER_WALK_SPEED = 4.0
PLAYER_SPRINT_SPEED = 7.0
PLAYER_ACCELERATION = 12.0
PLAYER_DECELERATION = 10.0
PLAYER_COLLISION_STEP = 0.05
PLAYER_MAX_HEALTH = 100.0
PLAYER_MAX_ENERGY = 100.0
PLAYER_ENERGY_REGEN_RATE = 5.0   # per second
PLAYER_HEALTH_REGEN_RATE = 1.0   # per second

# Enemy perception
ATTACK_RANGE = 1.5
ILLUMINATION_RADIUS = 2.0
LOS_RECHECK_INTERVAL = 0.3       # seconds
LOS_PLAYER_MOVE_THRESHOLD = 1.0
LOS_ASSUME_VISIBLE_DISTANCE = 2.0
IDLE_TO_PATROL_TIME = 3.0
PATROL_ARRIVE_DISTANCE = 0.1
PATROL_POINT_ATTEMPTS = 50

# Enemy movement
ENEMY_ACCELERATION = 8.0
PATH_RECOMPUTE_COOLDOWN = 1.0
PATH_PLAYER_MOVE_THRESHOLD = 1.0
PATH_MIN_DISTANCE = 2.0
ATTACK_COOLDOWN = 0.7
HIDE_LOOKAHEAD = 5.0
WAYPOINT_ARRIVE_DISTANCE = 0.2

# Flocking
SEPARATION_RADIUS = 2.0
CHASE_SEPARATION_WEIGHT = 0.5

# Ambush
AMBUSH_RANGE = 3.0
AMBUSH_COOLDOWN = 5.0
AMBUSH_RETREAT_DISTANCE = 1.0
AMBUSH_SPEED_MULTIPLIER = 2.0

# Enemy population
SPAWN_ATTEMPTS = 200
SPAWN_DISTANCE = 8.0
SPAWN_MIN_DISTANCE = 4.0
FORBIDDEN_ZONE_RADIUS = 2
PACK_SIZE = 3
POPULATION_FLOOR = 3
KNOCKBACK_DISTANCE = 0.5
SCORE_PER_KILL = 100

# Scanner
SCAN_MIN_DISTANCE = 0.5
SCAN_MAX_DISTANCE = 30.0
SCAN_ENEMY_HIT_RADIUS = 0.4
SCANNER_SWITCH_COST = 5.0
MAX_MARKERS = 100000
MARKER_SURFACE_OFFSET = 0.01
MARKER_SIZE = 0.008
DEFAULT_SCANNER = "standard"
SCANNER_CYCLE = ("standard", "wide", "focused")

# Fog of war
DISCOVERY_RADIUS = 2.5

# Camera
CAMERA_FOV = 75.0     # vertical, degrees
CAMERA_ASPECT = 16.0 / 9.0
CAMERA_NEAR = 0.1
CAMERA_FAR = 1000.0
