"""Geometric primitives.

Components:
    sphere: Ray-sphere intersection and uniform area sampling
    rhombus: Ray-parallelogram intersection and uniform area sampling

Every intersection routine returns a HitRecord carrying the orienting normal
(always opposing the ray) and an ``is_into`` flag for refraction.
"""

from .rhombus import (
    Rhombus,
    hit_rhombus,
    rhombus_area,
    rhombus_has,
    rhombus_normal,
    rhombus_pdf_area,
    sample_rhombus,
)
from .sphere import (
    EPS,
    HitRecord,
    Sphere,
    hit_sphere,
    make_sphere,
    miss_record,
    sample_sphere,
    sphere_pdf_area,
)

__all__ = [
    "EPS",
    "HitRecord",
    "miss_record",
    "Sphere",
    "hit_sphere",
    "make_sphere",
    "sample_sphere",
    "sphere_pdf_area",
    "Rhombus",
    "hit_rhombus",
    "rhombus_has",
    "sample_rhombus",
    "rhombus_normal",
    "rhombus_area",
    "rhombus_pdf_area",
]
