"""Core rendering module.

This module contains the fundamental building blocks of the path tracer:

Components:
    ray: Ray data structure, vector utilities and direction sampling
    sampler: Per-lane pseudo-random number generation
    color: Host colour value type and kernel colour metrics
    integrator: Path integration with NEE, MIS and Russian roulette
    renderer: Render settings and the render/write_image entry points

All compute-intensive operations use Taichi kernels.
"""

from .color import LUMINANCE_WEIGHTS, Color, brightness, luminance
from .ray import (
    UNIT_X,
    UNIT_Y,
    UNIT_Z,
    Ray,
    build_onb_from_normal,
    cross,
    dot,
    length,
    length_squared,
    local_to_world,
    make_ray,
    normalize,
    orient_normal,
    random_cosine_direction,
    random_in_unit_ball,
    ray_at,
    reflect,
    sample_cosine_hemisphere,
    schlick_fresnel,
    vec3,
)
from .sampler import MAX_LANES, random_float, random_u32, seed_lane, seed_lanes

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from pathlight.core.integrator or pathlight.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "UNIT_X",
    "UNIT_Y",
    "UNIT_Z",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "orient_normal",
    "schlick_fresnel",
    "random_in_unit_ball",
    "random_cosine_direction",
    "build_onb_from_normal",
    "local_to_world",
    "sample_cosine_hemisphere",
    "MAX_LANES",
    "seed_lane",
    "seed_lanes",
    "random_u32",
    "random_float",
    "Color",
    "LUMINANCE_WEIGHTS",
    "luminance",
    "brightness",
]
