"""Sphere primitive with ray-sphere intersection and uniform surface sampling.

The intersection solves the ray/sphere quadratic analytically in its
half-b form, using ``oc = center - origin`` so that ``b = dot(oc, dir)`` and
the roots are ``b -+ sqrt(b^2 - dot(oc, oc) + r^2)``. A root only counts when
it exceeds a small epsilon, which keeps rays spawned on a surface from
immediately re-hitting it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import orient_normal, random_in_unit_ball

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Self-intersection epsilon: roots at or below this distance are rejected
EPS = 1e-4


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: Distance along the ray to the intersection. Only valid if hit == 1.
        point: The world-space intersection point. Only valid if hit == 1.
        normal: The orienting normal: unit length and always opposing the
            ray direction (dot(normal, ray.direction) < 0).
        is_into: 1 when the geometric (outward) normal already opposed the
            ray, i.e. the ray struck the outside of the surface; 0 when the
            normal had to be flipped.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    is_into: ti.i32


@ti.func
def miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        is_into=0,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    A negative discriminant or both roots at or below EPS is a miss. Otherwise
    the smaller root is used when it clears EPS, the larger one when it does
    not (the ray starts inside the sphere).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.
        t_max: Hits at or beyond this distance are ignored (nearest-hit
            pruning during a scene scan).

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if intersection occurred.
    """
    oc = sphere.center - ray_origin
    b = tm.dot(oc, ray_direction)
    det = b * b - tm.dot(oc, oc) + sphere.radius * sphere.radius

    result = miss_record()

    if det >= 0.0:
        sqrt_det = ti.sqrt(det)
        t_near = b - sqrt_det
        t_far = b + sqrt_det

        t = t_far
        if t_near > EPS:
            t = t_near

        if t > EPS and t < t_max:
            point = ray_origin + t * ray_direction
            raw_normal = tm.normalize(point - sphere.center)
            normal = orient_normal(raw_normal, ray_direction)
            is_into = 0
            if tm.dot(raw_normal, normal) > 0.0:
                is_into = 1
            result = HitRecord(hit=1, t=t, point=point, normal=normal, is_into=is_into)

    return result


@ti.func
def sample_sphere(sphere: Sphere, lane: ti.i32):
    """Sample a point uniformly over the sphere surface.

    A direction is drawn by rejection sampling the unit ball and normalising
    it; the surface point is ``center + direction * radius``.

    Args:
        sphere: The sphere to sample.
        lane: Random generator handle.

    Returns:
        A tuple of (point, normal) with the outward unit normal at the point.
    """
    direction = tm.normalize(random_in_unit_ball(lane))
    point = sphere.center + direction * sphere.radius
    return point, direction


@ti.func
def sphere_pdf_area(sphere: Sphere) -> ti.f32:
    """Area density of sample_sphere: 1 / (4 pi r^2)."""
    return 1.0 / (4.0 * tm.pi * sphere.radius * sphere.radius)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a kernel."""
    return Sphere(center=center, radius=radius)
