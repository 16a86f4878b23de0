"""Diffuse (Lambertian) reflectance.

The Lambertian BRDF is:
    f_r(wi, wo) = color / pi

and directions are drawn with cosine-weighted hemisphere sampling, whose
density is:
    pdf(wi) = cos(theta) / pi

The BRDF times the cosine divided by the pdf is exactly the object colour, so
the sampling weight is 1 and the colour is applied by the integrator.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # rec = scatter_diffuse(normal, lane)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import sample_cosine_hemisphere

from .scatter import ReflectanceType, ScatterRecord

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Diffuse:
    """Ideal diffuse reflection. Participates in next-event estimation."""

    def encode(self) -> tuple[int, tuple[float, float, float]]:
        return int(ReflectanceType.DIFFUSE), (0.0, 0.0, 0.0)

    def to_dict(self) -> dict:
        return {"type": "diffuse"}


@ti.func
def eval_diffuse() -> ti.f32:
    """Evaluate the Lambertian BRDF without the colour term (1 / pi)."""
    return 1.0 / tm.pi


@ti.func
def pdf_diffuse(normal: vec3, direction: vec3) -> ti.f32:
    """Density of cosine-weighted sampling; zero below the surface."""
    cos_theta = tm.dot(normal, direction)
    pdf = 0.0
    if cos_theta > 0.0:
        pdf = cos_theta / tm.pi
    return pdf


@ti.func
def scatter_diffuse(normal: vec3, lane: ti.i32) -> ScatterRecord:
    """Sample a continuation direction for a diffuse surface.

    Args:
        normal: The orienting normal at the hit point.
        lane: Random generator handle.

    Returns:
        A ScatterRecord with weight and contribution 1 and pdf cos / pi.
    """
    direction, pdf = sample_cosine_hemisphere(normal, lane)
    return ScatterRecord(
        direction=direction,
        contribution=1.0,
        weight=1.0,
        pdf_value=pdf,
        absorbed=0,
    )
