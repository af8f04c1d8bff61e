"""
Player avatar: smoothed first-person movement with wall sliding
"""

import math

from pygame.math import Vector3

from game.collision import CollisionHandler
from game.game_state import PlayerState
from spatial.camera import CameraPose
from utils.constants import (
    PLAYER_RADIUS, PLAYER_HEIGHT, PLAYER_EYE_HEIGHT,
    PLAYER_WALK_SPEED, PLAYER_SPRINT_SPEED,
    PLAYER_ACCELERATION, PLAYER_DECELERATION, PLAYER_COLLISION_STEP,
)
from utils.helpers import damp, safe_normalize


class PlayerActor:
    """
    Player position, velocity, facing and resources
    """
    def __init__(self, position, obstacles=None, resources=None):
        """
        Args:
            position: Vector3 on the ground plane
            obstacles: ObstacleSet of walls
            resources: PlayerState (energy / health pool)
        """
        self.position = Vector3(position.x, 0.0, position.z)
        self.spawn_position = Vector3(self.position)
        self.velocity = Vector3()
        self.yaw = 0.0
        self.pitch = 0.0
        self.resources = resources if resources is not None else PlayerState()
        self.collider = None
        if obstacles is not None:
            self.set_obstacles(obstacles)
        self.distance_walked = 0.0

    def set_obstacles(self, obstacles):
        self.collider = CollisionHandler(obstacles, PLAYER_RADIUS, PLAYER_HEIGHT,
                                         step=PLAYER_COLLISION_STEP)

    @property
    def eye_position(self):
        return Vector3(self.position.x, self.position.y + PLAYER_EYE_HEIGHT, self.position.z)

    def camera_pose(self):
        return CameraPose(self.eye_position, self.yaw, self.pitch)

    def wish_direction(self, input_state):
        """
        Unit ground-plane direction from the movement keys, relative to yaw
        """
        forward = Vector3(-math.sin(self.yaw), 0.0, -math.cos(self.yaw))
        right = Vector3(math.cos(self.yaw), 0.0, -math.sin(self.yaw))
        wish = Vector3()
        if input_state.forward:
            wish += forward
        if input_state.back:
            wish -= forward
        if input_state.right:
            wish += right
        if input_state.left:
            wish -= right
        return safe_normalize(wish)

    def update(self, dt, input_state):
        """
        Apply one tick of input

        Velocity eases toward the target speed (accelerating) or toward zero
        (decelerating); the displacement is then resolved per axis.
        """
        self.yaw = input_state.yaw
        self.pitch = input_state.pitch

        wish = self.wish_direction(input_state)
        if wish.length_squared() > 0:
            speed = PLAYER_SPRINT_SPEED if input_state.sprint else PLAYER_WALK_SPEED
            self.velocity = damp(self.velocity, wish * speed, PLAYER_ACCELERATION, dt)
        else:
            self.velocity = damp(self.velocity, Vector3(), PLAYER_DECELERATION, dt)

        self.move(self.velocity * dt)
        self.resources.update(dt)

    def move(self, delta):
        start = Vector3(self.position)
        if self.collider is None:
            self.position.x += delta.x
            self.position.z += delta.z
        else:
            x, z, blocked_x, blocked_z = self.collider.move(
                self.position.x, self.position.z, delta.x, delta.z)
            self.position.x = x
            self.position.z = z
            if blocked_x:
                self.velocity.x = 0.0
            if blocked_z:
                self.velocity.z = 0.0
        self.distance_walked += start.distance_to(self.position)

    def respawn(self, position=None):
        """Back to the spawn point with full resources"""
        if position is not None:
            self.spawn_position = Vector3(position.x, 0.0, position.z)
        self.position = Vector3(self.spawn_position)
        self.velocity = Vector3()
        self.yaw = 0.0
        self.pitch = 0.0
        self.distance_walked = 0.0
        self.resources.reset()

    def __repr__(self):
        return (f"PlayerActor(pos=({self.position.x:.2f}, {self.position.z:.2f}), "
                f"{self.resources!r})")
