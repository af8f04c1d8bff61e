"""
Color palette, themes and player skins for Glow Maze
"""

# Background colors
COLOR_BG = (0, 0, 0)
COLOR_PANEL_BG = (12, 14, 18)

# UI colors
COLOR_TEXT = (210, 210, 210)
COLOR_TEXT_DIM = (150, 150, 150)
COLOR_HEALTH = (220, 70, 70)
COLOR_ENERGY = (70, 200, 255)

# Enemy colors
COLOR_ENEMY_STALKER = (255, 0, 0)
COLOR_ENEMY_PACK_HUNTER = (0, 255, 0)
COLOR_ENEMY_AMBUSHER = (0, 0, 255)

# Discovered map colors
COLOR_DISCOVERED_PATH = (102, 102, 102)
COLOR_DISCOVERED_SPAWN = (0, 255, 0)

# Player skins: the chosen color tints the player and every scan marker
PLAYER_SKINS = {
    'cyan': (0, 255, 255),
    'magenta': (255, 0, 255),
    'yellow': (255, 255, 0),
    'green': (0, 255, 0),
}

DEFAULT_SKIN = 'cyan'

# Level themes
THEMES = {
    'lab': {
        'name': 'Abandoned Lab',
        'wall': (0x88, 0x88, 0xaa),
        'floor': (0x22, 0x22, 0x33),
        'ceiling': (0x44, 0x44, 0x66),
        'accent': (0x00, 0xe0, 0xff),
    },
    'crypt': {
        'name': 'Crypt',
        'wall': (0x33, 0x33, 0x22),
        'floor': (0x18, 0x18, 0x10),
        'ceiling': (0x22, 0x22, 0x11),
        'accent': (0xff, 0xcc, 0x00),
    },
    'forest': {
        'name': 'Forest',
        'wall': (0x22, 0x55, 0x22),
        'floor': (0x11, 0x33, 0x11),
        'ceiling': (0x33, 0x66, 0x33),
        'accent': (0x44, 0xff, 0x44),
    },
}

DEFAULT_THEME = 'lab'
