"""Scene description, upload and ray-scene queries.

Components:
    figure: Host-side sphere, rhombus and composite figures
    objects: Scene objects (figure, colour, emission, reflectance)
    manager: The Scene container, its light index and upload
    intersection: Taichi scene tables, nearest-hit query and light sampling
    examples: Cornell box and MIS test scenes

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for geometric data
    - Composite figures flattened into leaf primitives with selection CDFs
    - A precomputed index of light objects
"""

from .examples import cornell_box, cornell_box_world, mis_example, mis_example_world
from .figure import (
    CompositeFigure,
    Figure,
    RhombusFigure,
    SphereFigure,
    figure_from_dict,
    parallelepiped,
)
from .intersection import (
    MAX_LEAVES,
    MAX_OBJECTS,
    MAX_RHOMBI,
    MAX_SPHERES,
    T_MAX,
    LightSample,
    SceneHitRecord,
    add_object,
    add_rhombus,
    add_sphere,
    clear_scene,
    get_light_count,
    get_object_count,
    get_rhombus_count,
    get_sphere_count,
    intersect_scene,
    light_area_pdf,
    sample_object,
    sample_on_lights,
)
from .manager import Scene
from .objects import SceneObject

__all__ = [
    # Figures
    "Figure",
    "SphereFigure",
    "RhombusFigure",
    "CompositeFigure",
    "parallelepiped",
    "figure_from_dict",
    # Objects and scene
    "SceneObject",
    "Scene",
    # Intersection module
    "SceneHitRecord",
    "LightSample",
    "add_object",
    "add_sphere",
    "add_rhombus",
    "clear_scene",
    "get_object_count",
    "get_light_count",
    "get_sphere_count",
    "get_rhombus_count",
    "intersect_scene",
    "sample_object",
    "sample_on_lights",
    "light_area_pdf",
    "T_MAX",
    "MAX_OBJECTS",
    "MAX_SPHERES",
    "MAX_RHOMBI",
    "MAX_LEAVES",
    # Example scenes
    "cornell_box",
    "cornell_box_world",
    "mis_example",
    "mis_example_world",
]
