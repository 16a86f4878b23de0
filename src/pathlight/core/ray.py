"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass and the small vector kernel the rest of
the renderer is built on. Vectors are Taichi ``vec3`` values; unit vectors are
plain ``vec3`` values produced by :func:`normalize` (or one of the canonical
axis constants, which are unit length by construction).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.sampler import random_float

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Canonical axes. Already unit length, never normalised again.
UNIT_X = vec3(1.0, 0.0, 0.0)
UNIT_Y = vec3(0.0, 1.0, 0.0)
UNIT_Z = vec3(0.0, 0.0, 1.0)

# Threshold on |w.x| used to pick the helper axis of an orthonormal basis
BASIS_EPSILON = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length).
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point ``origin + direction * t`` along the ray."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from an origin and a direction, normalising the direction."""
    return Ray(origin=origin, direction=normalize(direction))


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length."""
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a unit normal: d - 2 (d . n) n."""
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def orient_normal(normal: vec3, direction: vec3) -> vec3:
    """Flip a normal so that it opposes the given ray direction.

    Args:
        normal: The geometric (outward) unit normal.
        direction: The incoming ray direction.

    Returns:
        ``normal`` if ``dot(normal, direction) < 0``, otherwise ``-normal``.
    """
    result = normal
    if tm.dot(normal, direction) >= 0.0:
        result = -normal
    return result


@ti.func
def schlick_fresnel(cosine: ti.f32, r0: ti.f32) -> ti.f32:
    """Fresnel reflectance by Schlick's approximation R0 + (1 - R0)(1 - c)^5."""
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_ball(lane: ti.i32) -> vec3:
    """Generate a random point inside the unit ball by rejection sampling.

    Candidates are drawn uniformly from [-1, 1]^3 and rejected while they fall
    outside the ball (or too close to the origin to be normalised).

    Args:
        lane: Random generator handle.

    Returns:
        A random point with 0 < length < 1.
    """
    p = vec3(0.0, 0.0, 1.0)
    found = False
    # Rejection sampling loop
    for _ in range(100):  # Max iterations to avoid infinite loops
        if not found:
            candidate = vec3(
                random_float(lane) * 2.0 - 1.0,
                random_float(lane) * 2.0 - 1.0,
                random_float(lane) * 2.0 - 1.0,
            )
            len_sq = length_squared(candidate)
            if len_sq <= 1.0 and len_sq > 1e-12:
                p = candidate
                found = True
    return p


@ti.func
def random_cosine_direction(lane: ti.i32) -> vec3:
    """Generate a cosine-weighted direction in the local z-up frame.

    Malley's method: a uniform point on the unit disk lifted onto the
    hemisphere. The resulting density is cos(theta) / pi.

    Args:
        lane: Random generator handle.

    Returns:
        A unit direction with non-negative z component.
    """
    phi = 2.0 * tm.pi * random_float(lane)
    r2 = random_float(lane)
    sqrt_r2 = ti.sqrt(r2)
    x = ti.cos(phi) * sqrt_r2
    y = ti.sin(phi) * sqrt_r2
    z = ti.sqrt(1.0 - r2)
    return vec3(x, y, z)


@ti.func
def build_onb_from_normal(w: vec3):
    """Build an orthonormal basis {u, v, w} around a unit vector.

    The helper axis is whichever world axis is least parallel to ``w``: the Y
    axis when ``|w.x|`` exceeds a small epsilon, otherwise the X axis.

    Args:
        w: The unit vector that becomes the basis z-axis.

    Returns:
        A tuple (u, v, w) forming an orthonormal basis.
    """
    u = vec3(0.0, 0.0, 0.0)
    if ti.abs(w.x) > BASIS_EPSILON:
        u = normalize(cross(UNIT_Y, w))
    else:
        u = normalize(cross(UNIT_X, w))
    v = cross(w, u)
    return u, v, w


@ti.func
def local_to_world(local_dir: vec3, u: vec3, v: vec3, w: vec3) -> vec3:
    """Transform a direction from the local frame into world coordinates."""
    return local_dir.x * u + local_dir.y * v + local_dir.z * w


@ti.func
def sample_cosine_hemisphere(normal: vec3, lane: ti.i32):
    """Cosine-weighted hemisphere sampling around a unit normal.

    Args:
        normal: The axis of the hemisphere.
        lane: Random generator handle.

    Returns:
        A tuple of (direction, pdf) where pdf = cos(theta) / pi.
    """
    local_dir = random_cosine_direction(lane)
    u, v, w = build_onb_from_normal(normal)
    world_dir = normalize(local_to_world(local_dir, u, v, w))
    pdf = tm.max(tm.dot(world_dir, normal), 0.0) / tm.pi
    return world_dir, pdf
