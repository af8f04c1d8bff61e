"""
Session state machine, player resource pool, and the stats sink
"""

import logging
from enum import Enum, auto

from utils.constants import (
    PLAYER_MAX_HEALTH, PLAYER_MAX_ENERGY,
    PLAYER_ENERGY_REGEN_RATE, PLAYER_HEALTH_REGEN_RATE,
    SCORE_PER_KILL
)
from utils.helpers import clamp

logger = logging.getLogger(__name__)


class GameState(Enum):
    """Session states"""
    PLAYING = auto()
    PAUSED = auto()
    GAME_OVER = auto()


class GameStateManager:
    """
    Manages session state transitions
    """
    def __init__(self):
        self.current_state = GameState.PLAYING
        self.previous_state = None
        self.state_data = {}  # For passing data between states

    def transition_to(self, new_state, **kwargs):
        """
        Transition to a new state

        Args:
            new_state: GameState enum value
            **kwargs: Additional data to attach to the new state
        """
        if new_state == self.current_state:
            return
        logger.debug("State %s -> %s", self.current_state.name, new_state.name)
        self.previous_state = self.current_state
        self.current_state = new_state
        self.state_data = kwargs

    def is_state(self, state):
        return self.current_state == state

    def can_pause(self):
        return self.current_state == GameState.PLAYING

    def can_resume(self):
        return self.current_state == GameState.PAUSED

    def reset(self):
        self.current_state = GameState.PLAYING
        self.previous_state = None
        self.state_data = {}

    def __repr__(self):
        return f"GameStateManager(state={self.current_state.name})"


class PlayerState:
    """
    Energy and health resource pool

    Scanner and enemy manager only talk to this object; it never goes below 0
    or above the configured maximums.
    """
    def __init__(self, max_health=PLAYER_MAX_HEALTH, max_energy=PLAYER_MAX_ENERGY,
                 energy_regen=PLAYER_ENERGY_REGEN_RATE, health_regen=PLAYER_HEALTH_REGEN_RATE):
        self.stats = {
            'health': float(max_health),
            'max_health': float(max_health),
            'energy': float(max_energy),
            'max_energy': float(max_energy),
        }
        self.energy_regen = energy_regen
        self.health_regen = health_regen
        self.damage_taken = 0.0

    @property
    def health(self):
        return self.stats['health']

    @property
    def energy(self):
        return self.stats['energy']

    @property
    def is_dead(self):
        return self.stats['health'] <= 0

    def use_energy(self, amount):
        """
        Deduct energy only if the whole amount is available

        Returns:
            True if the energy was spent
        """
        if amount < 0 or self.stats['energy'] < amount:
            return False
        self.stats['energy'] -= amount
        return True

    def regenerate(self, amount):
        """Restore energy, capped at max"""
        self.stats['energy'] = clamp(self.stats['energy'] + amount, 0.0, self.stats['max_energy'])

    def heal(self, amount):
        if self.is_dead:
            return
        self.stats['health'] = clamp(self.stats['health'] + amount, 0.0, self.stats['max_health'])

    def take_damage(self, amount):
        """
        Take damage
        Returns True if the player died from this hit
        """
        if amount <= 0 or self.is_dead:
            return False
        self.stats['health'] = max(0.0, self.stats['health'] - amount)
        self.damage_taken += amount
        return self.stats['health'] <= 0

    def update(self, dt):
        """Passive regeneration of both resources"""
        self.regenerate(self.energy_regen * dt)
        self.heal(self.health_regen * dt)

    def reset(self):
        self.stats['health'] = self.stats['max_health']
        self.stats['energy'] = self.stats['max_energy']
        self.damage_taken = 0.0

    def __repr__(self):
        return f"PlayerState(health={self.health:.0f}, energy={self.energy:.0f})"


class GameStats:
    """
    Counters read by an external UI layer; the core only increments them
    """
    def __init__(self):
        self.reset()

    def reset(self):
        self.kills = 0
        self.score = 0
        self.damage_dealt = 0.0
        self.damage_taken = 0.0
        self.scans_fired = 0
        self.marker_count = 0
        self.frame_time = 0.0
        self.time_survived = 0.0

    def record_kill(self):
        self.kills += 1
        self.score += SCORE_PER_KILL

    def record_damage_dealt(self, amount):
        self.damage_dealt += amount

    def record_damage_taken(self, amount):
        self.damage_taken += amount

    def record_scan(self):
        self.scans_fired += 1

    def record_frame(self, dt):
        self.frame_time = dt
        self.time_survived += dt

    @property
    def fps(self):
        return 1.0 / self.frame_time if self.frame_time > 0 else 0.0

    def snapshot(self):
        """Plain dict copy of the counters"""
        return {
            'kills': self.kills,
            'score': self.score,
            'damage_dealt': self.damage_dealt,
            'damage_taken': self.damage_taken,
            'scans_fired': self.scans_fired,
            'marker_count': self.marker_count,
            'frame_time': self.frame_time,
            'fps': self.fps,
            'time_survived': self.time_survived,
        }

    def __repr__(self):
        return f"GameStats(kills={self.kills}, score={self.score}, markers={self.marker_count})"
