"""Glossy (blurred specular) reflectance.

The mirror direction is perturbed by ``radius`` times a cosine-weighted
sample around the orienting normal. Directions that end up below the surface
are absorbed. The lobe is not normalised physically: its weight and recorded
density are both 1 / |cos| of the angle between the sampled direction and the
ideal mirror direction.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import reflect, sample_cosine_hemisphere

from .scatter import ReflectanceType, ScatterRecord, absorbed_record

# Type alias for 3D vectors
vec3 = tm.vec3

# Lower bound on the mirror cosine, keeps the weight finite for wide lobes
_MIN_MIRROR_COS = 1e-4


@dataclass(frozen=True)
class Glossy:
    """Blurred mirror.

    Attributes:
        radius: Blur radius; 0 degenerates to a perfect mirror.
    """

    radius: float

    def __post_init__(self):
        if self.radius < 0.0:
            raise ValueError(f"Glossy radius must be non-negative, got {self.radius}")

    def encode(self) -> tuple[int, tuple[float, float, float]]:
        return int(ReflectanceType.GLOSSY), (float(self.radius), 0.0, 0.0)

    def to_dict(self) -> dict:
        return {"type": "glossy", "radius": self.radius}


@ti.func
def scatter_glossy(
    radius: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    lane: ti.i32,
) -> ScatterRecord:
    """Sample a direction from the blurred mirror lobe.

    Args:
        radius: Blur radius of the lobe.
        incident_direction: The incoming ray direction (unit length).
        normal: The orienting normal at the hit point.
        lane: Random generator handle.

    Returns:
        A ScatterRecord, or an absorbed record if the perturbed direction
        points into the surface.
    """
    mirror = tm.normalize(reflect(incident_direction, normal))
    offset, _ = sample_cosine_hemisphere(normal, lane)
    direction = tm.normalize(mirror + radius * offset)

    result = absorbed_record()
    if tm.dot(direction, normal) > 0.0:
        mirror_cos = tm.max(ti.abs(tm.dot(direction, mirror)), _MIN_MIRROR_COS)
        weight = 1.0 / mirror_cos
        result = ScatterRecord(
            direction=direction,
            contribution=1.0,
            weight=weight,
            pdf_value=weight,
            absorbed=0,
        )
    return result
