"""Rhombus (parallelogram) primitive with ray intersection and sampling.

A rhombus is defined by:
- origin: One corner of the parallelogram
- edge_a: Edge vector from origin to an adjacent corner
- edge_b: Edge vector from origin to the other adjacent corner

It spans the parallelogram origin, origin+a, origin+a+b, origin+b. The
geometric normal is normalize(cross(edge_a, edge_b)).

Ray-rhombus intersection:
1. Solve the ray/plane equation for t (a ray parallel to the plane misses)
2. Accept the plane hit iff it lies on the interior side of all four edges:
   the cross products of each boundary edge with the vector from that edge's
   start corner to the point must all agree in sign along the normal

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.geometry.rhombus import Rhombus, hit_rhombus
    >>> # Floor at y=0, spanning x=[0,1] and z=[0,1]
    >>> floor = Rhombus(
    ...     origin=ti.math.vec3(0, 0, 0),
    ...     edge_a=ti.math.vec3(1, 0, 0),
    ...     edge_b=ti.math.vec3(0, 0, 1),
    ... )
    >>> # Use hit_rhombus within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.ray import orient_normal
from pathlight.core.sampler import random_float

from .sphere import EPS, HitRecord, miss_record

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Rhombus:
    """A parallelogram defined by a corner point and two edge vectors.

    Attributes:
        origin: The corner point (vec3).
        edge_a: Edge vector from origin to an adjacent corner (vec3).
        edge_b: Edge vector from origin to the other adjacent corner (vec3).
    """

    origin: vec3
    edge_a: vec3
    edge_b: vec3


@ti.func
def rhombus_has(rhombus: Rhombus, point: vec3) -> ti.i32:
    """Test whether a point of the rhombus plane lies inside the rhombus.

    Walks the boundary origin -> +a -> +a+b -> +b and checks the side of each
    edge the point lies on. Points on the boundary count as inside.

    Args:
        rhombus: The rhombus.
        point: A point assumed to lie in the rhombus plane.

    Returns:
        1 if the point is inside (or on the boundary), 0 otherwise.
    """
    n = tm.cross(rhombus.edge_a, rhombus.edge_b)
    p0 = rhombus.origin
    p1 = p0 + rhombus.edge_a
    p2 = p1 + rhombus.edge_b
    p3 = p0 + rhombus.edge_b

    s0 = tm.dot(tm.cross(p1 - p0, point - p0), n)
    s1 = tm.dot(tm.cross(p2 - p1, point - p1), n)
    s2 = tm.dot(tm.cross(p3 - p2, point - p2), n)
    s3 = tm.dot(tm.cross(p0 - p3, point - p3), n)

    inside = 0
    if s0 >= 0.0 and s1 >= 0.0 and s2 >= 0.0 and s3 >= 0.0:
        inside = 1
    elif s0 <= 0.0 and s1 <= 0.0 and s2 <= 0.0 and s3 <= 0.0:
        inside = 1
    return inside


@ti.func
def hit_rhombus(
    ray_origin: vec3,
    ray_direction: vec3,
    rhombus: Rhombus,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-rhombus intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        rhombus: The rhombus to test intersection against.
        t_max: Hits at or beyond this distance are ignored.

    Returns:
        A HitRecord containing intersection information. Check the hit field
        to determine if intersection occurred.
    """
    n = tm.cross(rhombus.edge_a, rhombus.edge_b)
    denom = tm.dot(ray_direction, n)

    result = miss_record()

    # A ray parallel to the plane has no finite solution
    if denom != 0.0:
        t = tm.dot(rhombus.origin - ray_origin, n) / denom

        if t > EPS and t < t_max:
            point = ray_origin + t * ray_direction
            if rhombus_has(rhombus, point) == 1:
                raw_normal = tm.normalize(n)
                normal = orient_normal(raw_normal, ray_direction)
                is_into = 0
                if tm.dot(raw_normal, normal) > 0.0:
                    is_into = 1
                result = HitRecord(hit=1, t=t, point=point, normal=normal, is_into=is_into)

    return result


@ti.func
def sample_rhombus(rhombus: Rhombus, lane: ti.i32):
    """Sample a point uniformly over the rhombus.

    Args:
        rhombus: The rhombus to sample.
        lane: Random generator handle.

    Returns:
        A tuple of (point, normal) where point = origin + a*u + b*v for
        independent uniforms u, v and normal is the unit geometric normal.
    """
    u = random_float(lane)
    v = random_float(lane)
    point = rhombus.origin + rhombus.edge_a * u + rhombus.edge_b * v
    return point, rhombus_normal(rhombus)


@ti.func
def rhombus_normal(rhombus: Rhombus) -> vec3:
    """Unit geometric normal normalize(cross(a, b))."""
    return tm.normalize(tm.cross(rhombus.edge_a, rhombus.edge_b))


@ti.func
def rhombus_area(rhombus: Rhombus) -> ti.f32:
    """Area |cross(a, b)| of the parallelogram."""
    return tm.length(tm.cross(rhombus.edge_a, rhombus.edge_b))


@ti.func
def rhombus_pdf_area(rhombus: Rhombus) -> ti.f32:
    """Area density of sample_rhombus: 1 / |cross(a, b)|."""
    return 1.0 / rhombus_area(rhombus)
