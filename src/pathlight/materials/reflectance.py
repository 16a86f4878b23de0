"""Reflectance model dispatch.

The set of reflectance models is closed: Diffuse, Specular, Refraction,
Glossy and Phong. On the host each model is a frozen dataclass that encodes
itself as a (type tag, params) pair; inside kernels the tag and a ``vec3`` of
parameters select the model through a static if-chain.

Parameter packing per model:
    DIFFUSE, SPECULAR, REFRACTION: unused
    GLOSSY: (radius, 0, 0)
    PHONG: (kd, ks, exponent)

Example:
    >>> reflectance_from_dict({"type": "phong", "diffuse": 0.5,
    ...                        "specular": 0.2, "exponent": 10})
    Phong(diffuse=0.5, specular=0.2, exponent=10)
"""

from typing import Union

import taichi as ti
import taichi.math as tm

from .diffuse import Diffuse, eval_diffuse, pdf_diffuse, scatter_diffuse
from .glossy import Glossy, scatter_glossy
from .phong import Phong, eval_phong, pdf_phong, scatter_phong
from .refraction import Refraction, scatter_refraction
from .scatter import ReflectanceType, ScatterRecord, absorbed_record
from .specular import Specular, scatter_specular

# Type alias for 3D vectors
vec3 = tm.vec3

Reflectance = Union[Diffuse, Specular, Refraction, Glossy, Phong]


# =============================================================================
# Host Helpers
# =============================================================================


def reflectance_from_dict(data: dict) -> Reflectance:
    """Rebuild a reflectance model from its ``to_dict`` form.

    Raises:
        ValueError: If the type tag is missing or unknown.
    """
    kind = data.get("type")
    if kind == "diffuse":
        return Diffuse()
    if kind == "specular":
        return Specular()
    if kind == "refraction":
        return Refraction()
    if kind == "glossy":
        return Glossy(radius=float(data["radius"]))
    if kind == "phong":
        return Phong(
            diffuse=data["diffuse"],
            specular=data["specular"],
            exponent=data["exponent"],
        )
    raise ValueError(f"Unknown reflectance type: {kind!r}")


# =============================================================================
# Kernel Dispatch
# =============================================================================


@ti.func
def reflected(
    kind: ti.i32,
    params: vec3,
    incident_direction: vec3,
    normal: vec3,
    is_into: ti.i32,
    lane: ti.i32,
) -> ScatterRecord:
    """Sample a continuation direction from the model selected by ``kind``.

    Args:
        kind: A ReflectanceType tag.
        params: Packed model parameters.
        incident_direction: The incoming ray direction (unit length).
        normal: The orienting normal at the hit point.
        is_into: 1 if the ray struck the outside of the surface.
        lane: Random generator handle.

    Returns:
        The ScatterRecord of the selected model. An unknown tag absorbs.
    """
    result = absorbed_record()

    if kind == int(ReflectanceType.DIFFUSE):
        result = scatter_diffuse(normal, lane)
    elif kind == int(ReflectanceType.SPECULAR):
        result = scatter_specular(incident_direction, normal)
    elif kind == int(ReflectanceType.REFRACTION):
        result = scatter_refraction(incident_direction, normal, is_into, lane)
    elif kind == int(ReflectanceType.GLOSSY):
        result = scatter_glossy(params.x, incident_direction, normal, lane)
    elif kind == int(ReflectanceType.PHONG):
        result = scatter_phong(params.x, params.y, params.z, incident_direction, normal, lane)

    return result


@ti.func
def reflectance_eval(
    kind: ti.i32,
    params: vec3,
    incident_direction: vec3,
    normal: vec3,
    direction: vec3,
) -> ti.f32:
    """BRDF value (without object colour) toward ``direction``.

    Only next-event-estimation targets have a non-zero value; the delta and
    glossy models are never evaluated against light samples.
    """
    value = 0.0
    if kind == int(ReflectanceType.DIFFUSE):
        value = eval_diffuse()
    elif kind == int(ReflectanceType.PHONG):
        value = eval_phong(params.x, params.y, params.z, incident_direction, normal, direction)
    return value


@ti.func
def reflectance_pdf(
    kind: ti.i32,
    params: vec3,
    incident_direction: vec3,
    normal: vec3,
    direction: vec3,
) -> ti.f32:
    """Solid-angle density with which the model would sample ``direction``."""
    value = 0.0
    if kind == int(ReflectanceType.DIFFUSE):
        value = pdf_diffuse(normal, direction)
    elif kind == int(ReflectanceType.PHONG):
        value = pdf_phong(params.x, params.y, params.z, incident_direction, normal, direction)
    return value


@ti.func
def is_nee_target(kind: ti.i32) -> ti.i32:
    """1 for Diffuse and Phong surfaces, 0 otherwise."""
    result = 0
    if kind == int(ReflectanceType.DIFFUSE) or kind == int(ReflectanceType.PHONG):
        result = 1
    return result
