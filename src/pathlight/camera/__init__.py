"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera looking through an explicit screen rectangle

Pixel coordinates are (col, row) with row 0 at the top of the picture.
"""

from .pinhole import (
    Camera,
    Screen,
    WorldSetting,
    compute_screen_basis,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "Camera",
    "Screen",
    "WorldSetting",
    "compute_screen_basis",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
