"""
Camera pose and view frustum
Yaw 0 / pitch 0 looks down -Z; positive yaw turns left, positive pitch looks up
"""

import math

import numpy as np
from pygame.math import Vector3

from utils.constants import CAMERA_FOV, CAMERA_ASPECT, CAMERA_NEAR, CAMERA_FAR


def rotation_matrix(yaw, pitch):
    """
    Camera-to-world rotation: pitch about X, then yaw about Y

    Args:
        yaw, pitch: angles in radians

    Returns:
        (3, 3) numpy array
    """
    cy, sy = math.cos(yaw), math.sin(yaw)
    cp, sp = math.cos(pitch), math.sin(pitch)
    ry = np.array([[cy, 0.0, sy],
                   [0.0, 1.0, 0.0],
                   [-sy, 0.0, cy]])
    rx = np.array([[1.0, 0.0, 0.0],
                   [0.0, cp, -sp],
                   [0.0, sp, cp]])
    return ry @ rx


class CameraPose:
    """
    Externally supplied camera position and orientation plus projection
    """
    def __init__(self, position, yaw=0.0, pitch=0.0, fov=CAMERA_FOV,
                 aspect=CAMERA_ASPECT, near=CAMERA_NEAR, far=CAMERA_FAR):
        """
        Args:
            position: Vector3 eye position
            yaw, pitch: Orientation in radians
            fov: Vertical field of view in degrees
            aspect: Width / height
            near, far: Clip distances
        """
        self.position = Vector3(position)
        self.yaw = yaw
        self.pitch = pitch
        self.fov = fov
        self.aspect = aspect
        self.near = near
        self.far = far

    @property
    def matrix(self):
        return rotation_matrix(self.yaw, self.pitch)

    def to_world(self, local):
        """Rotate a camera-space direction into world space"""
        v = self.matrix @ np.array((local[0], local[1], local[2]), dtype=np.float64)
        return Vector3(float(v[0]), float(v[1]), float(v[2]))

    def to_world_many(self, local):
        """Rotate an (N, 3) array of camera-space directions into world space"""
        return np.asarray(local, dtype=np.float64) @ self.matrix.T

    def forward(self):
        return self.to_world((0.0, 0.0, -1.0))

    def right(self):
        return self.to_world((1.0, 0.0, 0.0))

    def points_in_frustum(self, points):
        """
        Vectorized view-frustum containment test

        Args:
            points: (N, 3) array of world positions

        Returns:
            (N,) bool array
        """
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        origin = np.array((self.position.x, self.position.y, self.position.z))
        local = (pts - origin) @ self.matrix
        depth = -local[:, 2]
        tan_v = math.tan(math.radians(self.fov) / 2)
        tan_h = tan_v * self.aspect
        return ((depth >= self.near) & (depth <= self.far)
                & (np.abs(local[:, 0]) <= depth * tan_h)
                & (np.abs(local[:, 1]) <= depth * tan_v))

    def contains_point(self, point):
        return bool(self.points_in_frustum([(point[0], point[1], point[2])])[0])

    def __repr__(self):
        return (f"CameraPose(pos=({self.position.x:.2f}, {self.position.y:.2f}, "
                f"{self.position.z:.2f}), yaw={math.degrees(self.yaw):.1f}°, "
                f"pitch={math.degrees(self.pitch):.1f}°)")
