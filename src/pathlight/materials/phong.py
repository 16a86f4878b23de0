"""Phong-lobe reflectance (modified Phong with energy-conserving weights).

The BRDF mixes a diffuse term and a power-cosine lobe around the mirror
direction:
    f_r(wi, wo) = kd / pi + ks (n + 2) / (2 pi) cos^n(alpha)

where alpha is the angle between wi and the ideal mirror direction. Sampling
makes a three-way choice on one uniform draw u:
    - u < kd:        cosine-weighted diffuse bounce (weight 1)
    - u < kd + ks:   lobe sample, cos(alpha) = u'^(1 / (n + 1)),
                     weight (n + 2) / (n + 1) cos(theta)
    - otherwise:     absorption

Branch selection probabilities equal the mixture weights, so the expected
throughput of the three-way choice is the full BRDF times the cosine over the
mixture density. The recorded density is that mixture density, which is also
what light sampling compares against.

Example:
    >>> phong = Phong(diffuse=0.5, specular=0.3, exponent=20)
    >>> phong.absorption
    0.2
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import (
    build_onb_from_normal,
    local_to_world,
    reflect,
    sample_cosine_hemisphere,
)
from pathlight.core.sampler import random_float

from .scatter import ReflectanceType, ScatterRecord, absorbed_record

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass(frozen=True)
class Phong:
    """Diffuse plus power-cosine specular lobe.

    Attributes:
        diffuse: Probability of a diffuse bounce (kd).
        specular: Probability of a lobe bounce (ks).
        exponent: Lobe sharpness n.

    Raises:
        ValueError: If a weight or the exponent is negative, or kd + ks > 1.
    """

    diffuse: float
    specular: float
    exponent: float

    def __post_init__(self):
        if self.diffuse < 0.0 or self.specular < 0.0:
            raise ValueError(
                f"Phong weights must be non-negative, got kd={self.diffuse} ks={self.specular}"
            )
        if self.diffuse + self.specular > 1.0:
            raise ValueError(
                f"Phong weights must sum to at most 1, got {self.diffuse + self.specular}"
            )
        if self.exponent < 0.0:
            raise ValueError(f"Phong exponent must be non-negative, got {self.exponent}")

    @property
    def absorption(self) -> float:
        """Probability that a path terminates at this surface."""
        return round(1.0 - self.diffuse - self.specular, 12)

    def encode(self) -> tuple[int, tuple[float, float, float]]:
        return int(ReflectanceType.PHONG), (
            float(self.diffuse),
            float(self.specular),
            float(self.exponent),
        )

    def to_dict(self) -> dict:
        return {
            "type": "phong",
            "diffuse": self.diffuse,
            "specular": self.specular,
            "exponent": self.exponent,
        }


@ti.func
def _lobe_cos(direction: vec3, mirror: vec3) -> ti.f32:
    return tm.max(tm.dot(direction, mirror), 0.0)


@ti.func
def eval_phong(
    kd: ti.f32,
    ks: ti.f32,
    exponent: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    direction: vec3,
) -> ti.f32:
    """Evaluate the Phong BRDF (without the colour term) for a direction."""
    mirror = tm.normalize(reflect(incident_direction, normal))
    cos_alpha = _lobe_cos(direction, mirror)
    return kd / tm.pi + ks * (exponent + 2.0) / (2.0 * tm.pi) * ti.pow(cos_alpha, exponent)


@ti.func
def pdf_phong(
    kd: ti.f32,
    ks: ti.f32,
    exponent: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    direction: vec3,
) -> ti.f32:
    """Mixture density of the diffuse and lobe sampling strategies."""
    mirror = tm.normalize(reflect(incident_direction, normal))
    cos_theta = tm.max(tm.dot(direction, normal), 0.0)
    cos_alpha = _lobe_cos(direction, mirror)
    return kd * cos_theta / tm.pi + ks * (exponent + 1.0) / (2.0 * tm.pi) * ti.pow(
        cos_alpha, exponent
    )


@ti.func
def scatter_phong(
    kd: ti.f32,
    ks: ti.f32,
    exponent: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    lane: ti.i32,
) -> ScatterRecord:
    """Sample the diffuse branch, the lobe branch or absorption.

    Args:
        kd: Diffuse branch probability.
        ks: Lobe branch probability.
        exponent: Lobe sharpness.
        incident_direction: The incoming ray direction (unit length).
        normal: The orienting normal at the hit point.
        lane: Random generator handle.

    Returns:
        A ScatterRecord; absorbed for the absorption branch and for lobe
        samples that fall below the surface.
    """
    result = absorbed_record()
    u = random_float(lane)

    if u < kd:
        direction, _ = sample_cosine_hemisphere(normal, lane)
        result = ScatterRecord(
            direction=direction,
            contribution=1.0,
            weight=1.0,
            pdf_value=pdf_phong(kd, ks, exponent, incident_direction, normal, direction),
            absorbed=0,
        )
    elif u < kd + ks:
        mirror = tm.normalize(reflect(incident_direction, normal))
        phi = 2.0 * tm.pi * random_float(lane)
        cos_alpha = ti.pow(random_float(lane), 1.0 / (exponent + 1.0))
        sin_alpha = ti.sqrt(tm.max(1.0 - cos_alpha * cos_alpha, 0.0))
        local_dir = vec3(ti.cos(phi) * sin_alpha, ti.sin(phi) * sin_alpha, cos_alpha)
        u_axis, v_axis, w_axis = build_onb_from_normal(mirror)
        direction = tm.normalize(local_to_world(local_dir, u_axis, v_axis, w_axis))

        cos_theta = tm.dot(direction, normal)
        if cos_theta > 0.0:
            result = ScatterRecord(
                direction=direction,
                contribution=1.0,
                weight=(exponent + 2.0) / (exponent + 1.0) * cos_theta,
                pdf_value=pdf_phong(kd, ks, exponent, incident_direction, normal, direction),
                absorbed=0,
            )

    return result
