"""Scatter record shared by all reflectance models.

A reflectance model answers "where does the path go next" with a
:class:`ScatterRecord`. The integrator multiplies ``contribution`` into the
scalar path throughput and ``weight`` (together with the object colour) into
the colour throughput, and remembers ``pdf_value`` so that an emitter struck
by the continuation ray can be MIS-weighted against light sampling.
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Nominal density of a delta (perfectly specular) direction. Large enough that
# light sampling never wins the MIS weight against it.
DELTA_PDF = 1e6


class ReflectanceType(IntEnum):
    """Reflectance model tags, used for dispatch inside kernels."""

    DIFFUSE = 0
    SPECULAR = 1
    REFRACTION = 2
    GLOSSY = 3
    PHONG = 4


@ti.dataclass
class ScatterRecord:
    """Outcome of sampling a reflectance model.

    Attributes:
        direction: The continuation direction (unit length).
        contribution: Probability-to-be-divided-out of a stochastic branch
            (refraction reflect/transmit split); 1.0 when there is no split.
        weight: Approximation of BSDF * cos / pdf for the strategy used.
        pdf_value: Solid-angle density of ``direction`` under this model.
        absorbed: 1 when the path terminates at this surface.
    """

    direction: vec3
    contribution: ti.f32
    weight: ti.f32
    pdf_value: ti.f32
    absorbed: ti.i32


@ti.func
def absorbed_record() -> ScatterRecord:
    """A record that terminates the path with zero contribution and weight."""
    return ScatterRecord(
        direction=vec3(0.0, 0.0, 0.0),
        contribution=0.0,
        weight=0.0,
        pdf_value=0.0,
        absorbed=1,
    )


@ti.func
def delta_pdf(direction: vec3, normal: vec3) -> ti.f32:
    """Nominal density of a specular direction: DELTA_PDF / |cos theta|."""
    cos_theta = tm.max(ti.abs(tm.dot(direction, normal)), 1e-6)
    return DELTA_PDF / cos_theta
