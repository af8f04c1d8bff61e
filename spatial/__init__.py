"""
Spatial queries - ray casting against box sets and camera frustum tests
"""

from .raycaster import SpatialQuery, RayHit
from .camera import CameraPose, rotation_matrix

__all__ = ['SpatialQuery', 'RayHit', 'CameraPose', 'rotation_matrix']
