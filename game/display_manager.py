"""
Display Manager - top-down pygame view of the world

PygameRenderer implements the WorldRenderer interface by keeping visual
records and drawing them as a map: walls as cells, enemies as boxes seen
from above, markers as dots
"""

import math

import pygame

from game.fog_of_war import CellVisibility
from game.world import WorldRenderer
from utils.colors import (
    COLOR_BG, COLOR_PANEL_BG, COLOR_TEXT, COLOR_TEXT_DIM, COLOR_HEALTH, COLOR_ENERGY,
    COLOR_DISCOVERED_SPAWN,
)
from utils.constants import CELL_PIXELS, PANEL_H
from utils.helpers import format_time


class PygameRenderer(WorldRenderer):
    """
    Visual records drawn onto a pygame surface from above
    """
    def __init__(self, cell_pixels=CELL_PIXELS):
        self.cell_pixels = cell_pixels
        self.visuals = {}
        self._next_handle = 1
        self.font = None
        self.small_font = None

    # ========== WorldRenderer ==========

    def add_visual(self, entity_id, shape):
        handle = self._next_handle
        self._next_handle += 1
        self.visuals[handle] = {
            'entity_id': entity_id,
            'shape': shape,
            'position': None,
            'orientation': 0.0,
            'visible': True,
        }
        return handle

    def remove_visual(self, handle):
        self.visuals.pop(handle, None)

    def set_transform(self, handle, position, orientation=0.0, scale=1.0):
        record = self.visuals.get(handle)
        if record is not None:
            record['position'] = (position[0], position[1], position[2])
            record['orientation'] = orientation

    def set_visible(self, handle, visible):
        record = self.visuals.get(handle)
        if record is not None:
            record['visible'] = bool(visible)

    # ========== DRAWING ==========

    def to_screen(self, x, z):
        return int(x * self.cell_pixels), int(z * self.cell_pixels) + PANEL_H

    def _fonts(self):
        if self.font is None:
            self.font = pygame.font.SysFont("consolas", 18, bold=True)
            self.small_font = pygame.font.SysFont("consolas", 14)
        return self.font, self.small_font

    def draw(self, screen, session):
        """Draw the whole frame for a GameSession"""
        screen.fill(COLOR_BG)
        self._draw_discovered(screen, session)
        self._draw_visuals(screen)
        self._draw_player(screen, session)
        self._draw_panel(screen, session)

    def _draw_discovered(self, screen, session):
        theme = session.theme
        size = self.cell_pixels
        for x in range(session.layout.size):
            for z in range(session.layout.size):
                level = session.discovered.get(x, z)
                if level == CellVisibility.UNSEEN or session.layout.is_wall(x, z):
                    continue
                color = COLOR_DISCOVERED_SPAWN if level == CellVisibility.SPAWN else theme['floor']
                sx, sy = self.to_screen(x, z)
                pygame.draw.rect(screen, color, (sx, sy, size, size))

    def _draw_visuals(self, screen):
        size = self.cell_pixels
        for record in self.visuals.values():
            if not record['visible'] or record['position'] is None:
                continue
            shape = record['shape']
            px, _, pz = record['position']
            sx, sy = self.to_screen(px, pz)
            if shape.kind == 'dot':
                screen.set_at((sx, sy), shape.color)
            elif isinstance(record['entity_id'], tuple):
                # Wall cell
                rect = pygame.Rect(0, 0, size, size)
                rect.center = (sx, sy)
                pygame.draw.rect(screen, shape.color, rect)
            else:
                w = max(3, int(shape.size[0] * size))
                rect = pygame.Rect(0, 0, w, w)
                rect.center = (sx, sy)
                pygame.draw.rect(screen, shape.color, rect)

    def _draw_player(self, screen, session):
        player = session.player
        sx, sy = self.to_screen(player.position.x, player.position.z)
        color = session.scanner.color
        pygame.draw.circle(screen, color, (sx, sy), max(3, self.cell_pixels // 4))
        fx = sx - int(math.sin(player.yaw) * self.cell_pixels)
        fy = sy - int(math.cos(player.yaw) * self.cell_pixels)
        pygame.draw.line(screen, color, (sx, sy), (fx, fy), 2)

    def _draw_bar(self, screen, x, y, value, maximum, color):
        w, h = 140, 12
        pygame.draw.rect(screen, COLOR_TEXT_DIM, (x, y, w, h), 1)
        fill = int((w - 2) * max(0.0, min(1.0, value / maximum)))
        pygame.draw.rect(screen, color, (x + 1, y + 1, fill, h - 2))

    def _draw_panel(self, screen, session):
        font, small_font = self._fonts()
        width = screen.get_width()
        pygame.draw.rect(screen, COLOR_PANEL_BG, (0, 0, width, PANEL_H))

        res = session.resources.stats
        self._draw_bar(screen, 10, 10, res['health'], res['max_health'], COLOR_HEALTH)
        self._draw_bar(screen, 10, 30, res['energy'], res['max_energy'], COLOR_ENERGY)

        stats = session.stats
        line = (f"L{session.config.level}  {format_time(stats.time_survived)}  "
                f"Kills {stats.kills}  Score {stats.score}")
        screen.blit(font.render(line, True, COLOR_TEXT), (165, 8))
        info = (f"Scanner {session.scanner.config.name}  Markers {stats.marker_count}  "
                f"Enemies {len(session.enemies)}  {stats.fps:.0f} fps")
        screen.blit(small_font.render(info, True, COLOR_TEXT_DIM), (165, 32))

        if session.state.name != 'PLAYING':
            text = "PAUSED" if session.state.name == 'PAUSED' else "GAME OVER - press R"
            surf = font.render(text, True, COLOR_TEXT)
            screen.blit(surf, surf.get_rect(center=(width // 2, screen.get_height() // 2)))

    def __repr__(self):
        return f"PygameRenderer(visuals={len(self.visuals)})"
