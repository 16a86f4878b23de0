"""Perfect specular (mirror) reflectance.

The reflection formula is:
    R = I - 2(I . N)N

where I is the incident direction and N is the orienting normal. The
direction distribution is a delta, so the recorded density is the nominal
DELTA_PDF / cos convention used for MIS bookkeeping and the surface is never
a next-event-estimation target.
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import reflect

from .scatter import ReflectanceType, ScatterRecord, delta_pdf

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Specular:
    """Perfect mirror reflection."""

    def encode(self) -> tuple[int, tuple[float, float, float]]:
        return int(ReflectanceType.SPECULAR), (0.0, 0.0, 0.0)

    def to_dict(self) -> dict:
        return {"type": "specular"}


@ti.func
def scatter_specular(incident_direction: vec3, normal: vec3) -> ScatterRecord:
    """Reflect the incident direction about the orienting normal."""
    direction = tm.normalize(reflect(incident_direction, normal))
    return ScatterRecord(
        direction=direction,
        contribution=1.0,
        weight=1.0,
        pdf_value=delta_pdf(direction, normal),
        absorbed=0,
    )
