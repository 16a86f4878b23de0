"""Scene container and upload to the Taichi scene tables.

A :class:`Scene` is an ordered list of :class:`SceneObject` values plus the
derived index of objects that emit light. The light index is recomputed on
every change to the object list. ``upload()`` flattens every figure into leaf
primitives and writes the Taichi tables used by the integrator; it is called
by the renderer right before a render, so the tables never change while a
render runs.

Example:
    >>> from pathlight.core.color import Color
    >>> from pathlight.scene.figure import SphereFigure
    >>> from pathlight.scene.manager import Scene
    >>> from pathlight.scene.objects import SceneObject
    >>> scene = Scene([
    ...     SceneObject(SphereFigure((0, 0, 0), 1.0), color=Color(0.8, 0.8, 0.8)),
    ...     SceneObject(SphereFigure((0, 5, 0), 0.5), emission=Color(10, 10, 10)),
    ... ])
    >>> scene.lights
    [1]
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from .figure import RhombusFigure, SphereFigure
from .intersection import (
    MAX_OBJECTS,
    MAX_RHOMBI,
    MAX_SPHERES,
    add_object,
    add_rhombus,
    add_sphere,
    clear_scene,
    get_light_count,
    get_object_count,
    get_rhombus_count,
    get_sphere_count,
)
from .objects import SceneObject

logger = logging.getLogger(__name__)


class Scene:
    """An ordered collection of scene objects.

    Attributes:
        objects: The objects, in insertion order.
        lights: Indices of the objects with non-black emission.
    """

    def __init__(self, objects: Iterable[SceneObject] = ()) -> None:
        """Initialize a scene from an iterable of objects."""
        self._objects: list[SceneObject] = []
        self.lights: list[int] = []
        self.extend(objects)

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self):
        return iter(self._objects)

    def __getitem__(self, index: int) -> SceneObject:
        return self._objects[index]

    @property
    def objects(self) -> tuple[SceneObject, ...]:
        return tuple(self._objects)

    def _update_lights(self) -> None:
        self.lights = [i for i, obj in enumerate(self._objects) if obj.is_light]

    # =========================================================================
    # Object Management
    # =========================================================================

    def add(self, obj: SceneObject) -> int:
        """Append an object and return its index.

        Raises:
            TypeError: If obj is not a SceneObject.
        """
        if not isinstance(obj, SceneObject):
            raise TypeError(f"Expected a SceneObject, got {type(obj).__name__}")
        self._objects.append(obj)
        self._update_lights()
        return len(self._objects) - 1

    def extend(self, objects: Iterable[SceneObject]) -> None:
        for obj in objects:
            self.add(obj)

    def clear(self) -> None:
        """Remove every object."""
        self._objects.clear()
        self._update_lights()

    def primitive_counts(self) -> tuple[int, int]:
        """Count (spheres, rhombi) after flattening composites."""
        spheres = 0
        rhombi = 0
        for obj in self._objects:
            for leaf, _ in obj.figure.leaves():
                if isinstance(leaf, SphereFigure):
                    spheres += 1
                else:
                    rhombi += 1
        return spheres, rhombi

    # =========================================================================
    # Upload
    # =========================================================================

    def upload(self) -> None:
        """Write the scene into the Taichi scene tables.

        Raises:
            RuntimeError: If the scene exceeds the table capacities.
        """
        spheres, rhombi = self.primitive_counts()
        if len(self._objects) > MAX_OBJECTS:
            raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
        if spheres > MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
        if rhombi > MAX_RHOMBI:
            raise RuntimeError(f"Maximum number of rhombi ({MAX_RHOMBI}) exceeded")

        clear_scene()
        for obj in self._objects:
            kind, params = obj.reflectance.encode()
            object_id = add_object(obj.emission.to_tuple(), obj.color.to_tuple(), kind, params)
            for leaf, select_prob in obj.figure.leaves():
                if isinstance(leaf, SphereFigure):
                    add_sphere(leaf.center, leaf.radius, object_id, select_prob)
                elif isinstance(leaf, RhombusFigure):
                    add_rhombus(leaf.origin, leaf.edge_a, leaf.edge_b, object_id, select_prob)

        logger.debug(
            f"Uploaded scene: {get_object_count()} objects, {get_sphere_count()} spheres, "
            f"{get_rhombus_count()} rhombi, {get_light_count()} lights"
        )

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Convert the scene to a plain dictionary.

        Returns:
            A dictionary with an "objects" list, suitable for JSON.
        """
        return {"objects": [obj.to_dict() for obj in self._objects]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Scene:
        """Build a scene from a dictionary produced by to_dict.

        Raises:
            ValueError: If an object holds an unknown figure or reflectance.
        """
        return cls(SceneObject.from_dict(item) for item in data.get("objects", []))
