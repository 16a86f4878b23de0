"""Pinhole camera with an explicit screen rectangle.

The camera is described by a position, a view direction and an up vector;
the screen by its world-space width, height and distance in front of the
camera (which together fix the field of view). The screen basis is:

    screen_x = normalize(cross(dir, up)) * screen.width
    screen_y = normalize(cross(screen_x, dir)) * screen.height
    screen_center = position + dir * screen.dist

Pixel rows are counted from the top of the picture. A sample of pixel
(col, row) adds independent jitter in [0, 1) to both coordinates, maps them
to [-0.5, 0.5] across the screen and shoots a ray from the camera position
through that screen point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.camera.pinhole import Camera, Screen, WorldSetting, setup_camera
    >>> world = WorldSetting(
    ...     camera=Camera(position=(0, 0, 10), direction=(0, 0, -1), up=(0, 1, 0)),
    ...     screen=Screen(width=10.0, height=10.0, dist=10.0),
    ... )
    >>> setup_camera(world)
"""

from dataclasses import dataclass, field

import numpy as np
import taichi as ti
import taichi.math as tm

from pathlight.core.ray import Ray, make_ray, vec3
from pathlight.core.sampler import random_float

# Cross products shorter than this mean the direction is parallel to up
_PARALLEL_EPSILON = 1e-8

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Camera placement.

    Attributes:
        position: Camera position in world space.
        direction: View direction (normalised on setup).
        up: Up direction (normalised on setup).
    """

    position: tuple[float, float, float]
    direction: tuple[float, float, float]
    up: tuple[float, float, float] = (0.0, 1.0, 0.0)


@dataclass
class Screen:
    """The virtual screen the camera looks through.

    Attributes:
        width: World-space width of the screen.
        height: World-space height of the screen.
        dist: Distance from the camera to the screen center.
    """

    width: float
    height: float
    dist: float


@dataclass
class WorldSetting:
    """Camera plus screen."""

    camera: Camera
    screen: Screen = field(default_factory=lambda: Screen(30.0, 30.0, 40.0))


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_screen_x = ti.Vector.field(3, dtype=ti.f32, shape=())
_screen_y = ti.Vector.field(3, dtype=ti.f32, shape=())
_screen_center = ti.Vector.field(3, dtype=ti.f32, shape=())


def compute_screen_basis(world: WorldSetting) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Compute (screen_x, screen_y, screen_center) for a world setting.

    Raises:
        ValueError: If the screen size is not positive, or the view
            direction is zero or parallel to the up vector.
    """
    screen = world.screen
    if screen.width <= 0.0 or screen.height <= 0.0 or screen.dist <= 0.0:
        raise ValueError(
            f"Screen width, height and dist must be positive, got "
            f"{screen.width}, {screen.height}, {screen.dist}"
        )

    position = np.array(world.camera.position, dtype=np.float64)
    direction = np.array(world.camera.direction, dtype=np.float64)
    up = np.array(world.camera.up, dtype=np.float64)

    dir_len = np.linalg.norm(direction)
    up_len = np.linalg.norm(up)
    if dir_len == 0.0 or up_len == 0.0:
        raise ValueError("Camera direction and up vector must be non-zero")
    direction = direction / dir_len
    up = up / up_len

    side = np.cross(direction, up)
    side_len = np.linalg.norm(side)
    if side_len < _PARALLEL_EPSILON:
        raise ValueError("Camera direction must not be parallel to the up vector")

    screen_x = side / side_len * screen.width
    screen_y = np.cross(screen_x, direction)
    screen_y = screen_y / np.linalg.norm(screen_y) * screen.height
    screen_center = position + direction * screen.dist
    return screen_x, screen_y, screen_center


def setup_camera(world: WorldSetting) -> None:
    """Upload the camera and screen basis.

    Args:
        world: The camera and screen description.

    Raises:
        ValueError: See compute_screen_basis.
    """
    screen_x, screen_y, screen_center = compute_screen_basis(world)
    _camera_origin[None] = [float(c) for c in world.camera.position]
    _screen_x[None] = screen_x.tolist()
    _screen_y[None] = screen_y.tolist()
    _screen_center[None] = screen_center.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_origin[None]


@ti.func
def get_ray(sx: ti.f32, sy: ti.f32) -> Ray:
    """Ray through normalised screen coordinates in [-0.5, 0.5].

    Args:
        sx: Horizontal coordinate, -0.5 at the left edge.
        sy: Vertical coordinate, -0.5 at the bottom edge.
    """
    origin = get_camera_origin()
    target = _screen_center[None] + _screen_x[None] * sx + _screen_y[None] * sy
    return make_ray(origin, target - origin)


@ti.func
def get_ray_jittered(col: ti.i32, row: ti.i32, width: ti.i32, height: ti.i32, lane: ti.i32) -> Ray:
    """Generate a jittered primary ray for a pixel.

    Args:
        col: Pixel column (0 = left).
        row: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.
        lane: Random generator handle.

    Returns:
        A Ray from the camera position through a random point of the pixel.
    """
    r1 = random_float(lane)
    r2 = random_float(lane)
    y_up = ti.cast(height - 1 - row, ti.f32)
    sx = (ti.cast(col, ti.f32) + r1) / ti.cast(width, ti.f32) - 0.5
    sy = (y_up + r2) / ti.cast(height, ti.f32) - 0.5
    return get_ray(sx, sy)


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, screen_x, screen_y and screen_center.
    """

    def as_tuple(v) -> tuple[float, float, float]:
        return (float(v[0]), float(v[1]), float(v[2]))

    return {
        "origin": as_tuple(_camera_origin[None]),
        "screen_x": as_tuple(_screen_x[None]),
        "screen_y": as_tuple(_screen_y[None]),
        "screen_center": as_tuple(_screen_center[None]),
    }
