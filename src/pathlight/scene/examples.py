"""Example scenes with matching camera settings.

cornell_box:
    A closed 100 x 82 x 250 box. Red left wall, blue right wall, grey
    floor, ceiling and back wall, and a near wall behind the camera with a
    faint Phong finish. A green diffuse sphere, a mirror sphere and a glass
    sphere stand on the floor; a 15 x 15 emissive rhombus hangs just below
    the ceiling.

mis_example:
    The classic multiple-importance-sampling test: four glossy plates of
    increasing blur lit by four spherical lights of increasing size and
    decreasing intensity, all inside a large diffuse sphere. The scene is
    built at 1/10 of its customary scale to keep single-precision
    intersection well conditioned.

Example:
    >>> scene = cornell_box()
    >>> len(scene), scene.lights
    (10, [9])
    >>> world = cornell_box_world(640, 480)
    >>> round(world.screen.width, 3)
    40.0
"""

from pathlight.camera.pinhole import Camera, Screen, WorldSetting
from pathlight.core.color import Color
from pathlight.materials.glossy import Glossy
from pathlight.materials.phong import Phong
from pathlight.materials.refraction import Refraction
from pathlight.materials.specular import Specular

from .figure import RhombusFigure, SphereFigure
from .manager import Scene
from .objects import SceneObject

# =============================================================================
# Cornell Box Constants
# =============================================================================

BOX_WIDTH = 100.0
BOX_HEIGHT = 82.0
BOX_DEPTH = 250.0

RED_WALL_COLOR = Color(0.75, 0.25, 0.25)
BLUE_WALL_COLOR = Color(0.25, 0.25, 0.75)
GREY_WALL_COLOR = Color(0.75, 0.75, 0.75)
GREEN_SPHERE_COLOR = Color(0.25, 0.75, 0.25)
GLASS_COLOR = Color(0.99, 0.99, 0.99)

LIGHT_SIZE = 15.0
LIGHT_EMISSION = Color(50.0, 50.0, 50.0)


def cornell_box() -> Scene:
    """Create the Cornell box scene."""
    w, h, d = BOX_WIDTH, BOX_HEIGHT, BOX_DEPTH
    half_light = LIGHT_SIZE / 2.0

    return Scene(
        [
            # Left wall
            SceneObject(RhombusFigure((0, 0, 0), (0, 0, d), (0, h, 0)), color=RED_WALL_COLOR),
            # Right wall
            SceneObject(RhombusFigure((w, 0, 0), (0, 0, d), (0, h, 0)), color=BLUE_WALL_COLOR),
            # Far wall
            SceneObject(
                RhombusFigure((0, 0, 0), (w, 0, 0), (0, h, 0)),
                color=GREY_WALL_COLOR,
                reflectance=Phong(diffuse=0.001, specular=0.001, exponent=100),
            ),
            # Wall behind the camera
            SceneObject(RhombusFigure((0, 0, d), (w, 0, 0), (0, h, 0)), color=GREY_WALL_COLOR),
            # Ceiling
            SceneObject(RhombusFigure((0, h, 0), (w, 0, 0), (0, 0, d)), color=GREY_WALL_COLOR),
            # Floor
            SceneObject(RhombusFigure((0, 0, 0), (w, 0, 0), (0, 0, d)), color=GREY_WALL_COLOR),
            SceneObject(SphereFigure((65.0, 20.0, 20.0), 20.0), color=GREEN_SPHERE_COLOR),
            SceneObject(
                SphereFigure((27.0, 16.5, 47.0), 16.5), color=GLASS_COLOR, reflectance=Specular()
            ),
            SceneObject(
                SphereFigure((77.0, 16.5, 78.0), 16.5),
                color=GLASS_COLOR,
                reflectance=Refraction(),
            ),
            # Light
            SceneObject(
                RhombusFigure(
                    (50.0 - half_light, h - 1.0, 81.6 - half_light),
                    (LIGHT_SIZE, 0, 0),
                    (0, 0, LIGHT_SIZE),
                ),
                emission=LIGHT_EMISSION,
            ),
        ]
    )


def cornell_box_world(width: int, height: int) -> WorldSetting:
    """Camera looking into the Cornell box from near the back wall."""
    return WorldSetting(
        camera=Camera(position=(50.0, 52.0, 220.0), direction=(0.0, -0.04, -1.0), up=(0, 1, 0)),
        screen=Screen(width=30.0 * width / height, height=30.0, dist=40.0),
    )


# =============================================================================
# MIS Test Scene
# =============================================================================

MIS_SCALE = 0.1

PLATE_COLOR = Color(0.75, 0.75, 0.75)


def mis_example(scale: float = MIS_SCALE) -> Scene:
    """Create the glossy-plates scene used to compare sampling strategies.

    Args:
        scale: Uniform scale applied to every position and size.
    """

    def s(*values: float) -> tuple[float, ...]:
        return tuple(v * scale for v in values)

    plates = [
        # (origin, edge_b, blur radius); every plate spans 200 along x
        ((-50.0, 70.0, -60.0), (0.0, -25.0, 10.0), 0.05),
        ((-50.0, 40.0, -40.0), (0.0, -20.0, 15.0), 0.1),
        ((-50.0, 15.0, -10.0), (0.0, -15.0, 20.0), 0.25),
        ((-50.0, -5.0, 20.0), (0.0, -10.0, 25.0), 0.5),
    ]
    lights = [
        ((-50.0, 110.0, -10.0), 0.5, Color(900.0, 0.5, 0.5)),
        ((10.0, 110.0, -10.0), 2.0, Color(100.0, 100.0, 0.5)),
        ((70.0, 110.0, -10.0), 10.0, Color(1.0, 2.0, 1.0)),
        ((150.0, 110.0, -10.0), 25.0, Color(0.5, 1.5, 2.0)),
    ]

    objects = [SceneObject(SphereFigure(s(0.0, 0.0, 0.0), 500.0 * scale), color=PLATE_COLOR)]
    for origin, edge_b, radius in plates:
        objects.append(
            SceneObject(
                RhombusFigure(s(*origin), s(200.0, 0.0, 0.0), s(*edge_b)),
                color=PLATE_COLOR,
                reflectance=Glossy(radius),
            )
        )
    for center, radius, emission in lights:
        objects.append(SceneObject(SphereFigure(s(*center), radius * scale), emission=emission))
    return Scene(objects)


def mis_example_world(width: int, height: int, scale: float = MIS_SCALE) -> WorldSetting:
    """Camera facing the plates from inside the enclosing sphere."""
    return WorldSetting(
        camera=Camera(
            position=(50.0 * scale, 52.0 * scale, 220.0 * scale),
            direction=(0.0, -0.04, -1.0),
            up=(0, 1, 0),
        ),
        screen=Screen(width=30.0 * scale * width / height, height=30.0 * scale, dist=40.0 * scale),
    )
