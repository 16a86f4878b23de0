"""Dielectric refraction between vacuum and a fixed-index medium.

Key physics:
    - Snell's law with indices 1.0 (vacuum) and 1.5 (medium)
    - Total internal reflection when cos^2(theta_t) < 0
    - Schlick's approximation for the Fresnel reflectance Re
    - Transmitted radiance scaled by the squared index ratio

When both branches are possible one of them is picked by Russian roulette with
reflect probability q = 0.25 + 0.5 Re. The chosen branch reports its Fresnel
term as ``contribution`` and divides out its selection probability through
``weight``, so that contribution * weight is Re / q or Tr / (1 - q).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.materials.refraction import scatter_refraction
    >>> # Use within a Taichi kernel:
    >>> # rec = scatter_refraction(incident_dir, normal, is_into, lane)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import reflect, schlick_fresnel
from pathlight.core.sampler import random_float

from .scatter import ReflectanceType, ScatterRecord, delta_pdf

# Type alias for 3D vectors
vec3 = tm.vec3

IOR_VACUUM = 1.0
IOR_MEDIUM = 1.5

# Normal-incidence reflectance ((nt - nc) / (nt + nc))^2
FRESNEL_R0 = ((IOR_MEDIUM - IOR_VACUUM) / (IOR_MEDIUM + IOR_VACUUM)) ** 2


@dataclass(frozen=True)
class Refraction:
    """Glass-like interface with fixed indices of refraction."""

    def encode(self) -> tuple[int, tuple[float, float, float]]:
        return int(ReflectanceType.REFRACTION), (0.0, 0.0, 0.0)

    def to_dict(self) -> dict:
        return {"type": "refraction"}


@ti.func
def reflect_probability(fresnel: ti.f32) -> ti.f32:
    """Probability of following the reflect branch: 0.25 + 0.5 Re."""
    return 0.25 + 0.5 * fresnel


@ti.func
def scatter_refraction(
    incident_direction: vec3,
    normal: vec3,
    is_into: ti.i32,
    lane: ti.i32,
) -> ScatterRecord:
    """Sample reflection or transmission at a dielectric interface.

    Args:
        incident_direction: The incoming ray direction (unit length).
        normal: The orienting normal (opposes the incoming direction).
        is_into: 1 if the ray enters the medium, 0 if it leaves it.
        lane: Random generator handle.

    Returns:
        A ScatterRecord. Under total internal reflection the mirror direction
        is returned with contribution and weight 1.
    """
    reflected = tm.normalize(reflect(incident_direction, normal))

    nnt = IOR_MEDIUM / IOR_VACUUM
    if is_into == 1:
        nnt = IOR_VACUUM / IOR_MEDIUM

    ddn = tm.dot(incident_direction, normal)
    cos2t = 1.0 - nnt * nnt * (1.0 - ddn * ddn)

    direction = reflected
    contribution = 1.0
    weight = 1.0

    if cos2t >= 0.0:
        transmitted = tm.normalize(
            incident_direction * nnt - normal * (ddn * nnt + ti.sqrt(cos2t))
        )

        # Cosine on the vacuum side of the interface
        cos_outside = -ddn
        if is_into == 0:
            cos_outside = ti.abs(tm.dot(transmitted, normal))

        fresnel = schlick_fresnel(cos_outside, FRESNEL_R0)
        transmittance = (1.0 - fresnel) * nnt * nnt
        q = reflect_probability(fresnel)

        if random_float(lane) < q:
            contribution = fresnel
            weight = 1.0 / q
        else:
            direction = transmitted
            contribution = transmittance
            weight = 1.0 / (1.0 - q)

    return ScatterRecord(
        direction=direction,
        contribution=contribution,
        weight=weight,
        pdf_value=delta_pdf(direction, normal),
        absorbed=0,
    )
