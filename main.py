"""
Glow Maze - top-down demo shell
WASD move, Shift sprint, Space scan, Q/Tab switch scanner, mouse or
arrow keys turn, P pause, R restart, N next level, Esc quit
"""

import logging
import math
import sys

import pygame

from game.display_manager import PygameRenderer
from game.level_manager import GameSession
from game.world import InputState
from maze.difficulty import get_level_config
from utils.constants import FPS, CELL_PIXELS, PANEL_H, GAME_TITLE, GAME_VERSION

logger = logging.getLogger(__name__)

TURN_SPEED = 2.5          # radians per second with the arrow keys
MOUSE_SENSITIVITY = 0.004


class GlowMazeGame:
    """
    Main game class
    """
    def __init__(self, level=1, difficulty='normal'):
        pygame.init()

        self.renderer = PygameRenderer()
        self.session = GameSession(get_level_config(level, difficulty), renderer=self.renderer)
        self._create_screen()

        self.clock = pygame.time.Clock()
        self.running = True

        # Edge-triggered actions collected from events
        self.scan_pressed = False
        self.switch_pressed = False
        self.yaw = 0.0
        self.pitch = 0.0

    def _create_screen(self):
        side = self.session.layout.size * CELL_PIXELS
        self.screen = pygame.display.set_mode((side, side + PANEL_H))
        pygame.display.set_caption(f"{GAME_TITLE} v{GAME_VERSION}")

    def handle_events(self):
        """Handle input events"""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
                return

            if event.type == pygame.MOUSEMOTION and pygame.mouse.get_pressed()[0]:
                self.yaw -= event.rel[0] * MOUSE_SENSITIVITY

            if event.type == pygame.KEYDOWN:
                self._handle_keydown(event.key)

    def _handle_keydown(self, key):
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key == pygame.K_SPACE:
            self.scan_pressed = True
        elif key in (pygame.K_q, pygame.K_TAB):
            self.switch_pressed = True
        elif key == pygame.K_p:
            self.session.toggle_pause()
        elif key == pygame.K_r:
            self.yaw = 0.0
            self.session.restart()
        elif key == pygame.K_n:
            self.yaw = 0.0
            self.session.advance_level()
            self._create_screen()

    def read_input(self, dt):
        """Snapshot the keyboard into an InputState"""
        keys = pygame.key.get_pressed()
        if keys[pygame.K_LEFT]:
            self.yaw += TURN_SPEED * dt
        elif keys[pygame.K_RIGHT]:
            self.yaw -= TURN_SPEED * dt
        self.yaw = math.remainder(self.yaw, 2 * math.pi)

        state = InputState(
            forward=keys[pygame.K_w] or keys[pygame.K_UP],
            back=keys[pygame.K_s] or keys[pygame.K_DOWN],
            left=keys[pygame.K_a],
            right=keys[pygame.K_d],
            sprint=keys[pygame.K_LSHIFT] or keys[pygame.K_RSHIFT],
            scan_triggered=self.scan_pressed,
            switch_scanner=self.switch_pressed,
            yaw=self.yaw,
            pitch=self.pitch,
        )
        self.scan_pressed = False
        self.switch_pressed = False
        return state

    def update(self, dt):
        self.session.update(dt, self.read_input(dt))

    def render(self):
        self.renderer.draw(self.screen, self.session)
        pygame.display.flip()

    def run(self):
        """Main game loop"""
        logger.info("Starting %s v%s", GAME_TITLE, GAME_VERSION)
        while self.running:
            dt_ms = self.clock.tick(FPS)
            dt = dt_ms / 1000.0

            self.handle_events()
            self.update(dt)
            self.render()

        self.session.close()
        pygame.quit()
        sys.exit()


def main():
    """Entry point"""
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    game = GlowMazeGame()
    game.run()


if __name__ == "__main__":
    main()
