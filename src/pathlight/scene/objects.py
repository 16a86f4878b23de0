"""Scene objects: a figure with colour, emission and a reflectance model."""

from __future__ import annotations

from dataclasses import dataclass, field

from pathlight.core.color import Color
from pathlight.materials.diffuse import Diffuse
from pathlight.materials.reflectance import Reflectance, reflectance_from_dict

from .figure import Figure, figure_from_dict


@dataclass(frozen=True)
class SceneObject:
    """One renderable object.

    Attributes:
        figure: The geometry.
        color: Diffuse colour blended into the path throughput on a bounce.
        emission: Emitted radiance; non-black makes the object a light.
        reflectance: The scattering model. Defaults to Diffuse.

    Raises:
        ValueError: If a colour or emission channel is negative.
    """

    figure: Figure
    color: Color = field(default_factory=Color.black)
    emission: Color = field(default_factory=Color.black)
    reflectance: Reflectance = field(default_factory=Diffuse)

    def __post_init__(self):
        for name in ("color", "emission"):
            value = getattr(self, name)
            if not isinstance(value, Color):
                value = Color.from_tuple(value)
                object.__setattr__(self, name, value)
            if min(value) < 0.0:
                raise ValueError(f"Object {name} must be non-negative, got {value}")

    @property
    def is_light(self) -> bool:
        return not self.emission.is_black()

    def to_dict(self) -> dict:
        return {
            "figure": self.figure.to_dict(),
            "color": list(self.color),
            "emission": list(self.emission),
            "reflectance": self.reflectance.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> SceneObject:
        return cls(
            figure=figure_from_dict(data["figure"]),
            color=Color.from_tuple(data.get("color", (0.0, 0.0, 0.0))),
            emission=Color.from_tuple(data.get("emission", (0.0, 0.0, 0.0))),
            reflectance=reflectance_from_dict(data.get("reflectance", {"type": "diffuse"})),
        )
