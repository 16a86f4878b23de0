"""Reflectance models for light scattering.

Components:
    diffuse: Ideal diffuse (Lambertian) reflection
    specular: Perfect mirror reflection
    refraction: Dielectric interface with Fresnel reflect/transmit split
    glossy: Blurred mirror
    phong: Diffuse plus power-cosine lobe with absorption
    reflectance: Closed-set dispatch used by the integrator

Each model provides a host-side frozen dataclass (validated on
construction, encoded for upload) and a Taichi scatter function returning a
ScatterRecord. Diffuse and Phong additionally provide eval/pdf functions for
next-event estimation.
"""

from .diffuse import Diffuse, eval_diffuse, pdf_diffuse, scatter_diffuse
from .glossy import Glossy, scatter_glossy
from .phong import Phong, eval_phong, pdf_phong, scatter_phong
from .reflectance import (
    Reflectance,
    is_nee_target,
    reflectance_eval,
    reflectance_from_dict,
    reflectance_pdf,
    reflected,
)
from .refraction import FRESNEL_R0, IOR_MEDIUM, IOR_VACUUM, Refraction, scatter_refraction
from .scatter import DELTA_PDF, ReflectanceType, ScatterRecord, absorbed_record
from .specular import Specular, scatter_specular

__all__ = [
    # Host models
    "Reflectance",
    "ReflectanceType",
    "Diffuse",
    "Specular",
    "Refraction",
    "Glossy",
    "Phong",
    "reflectance_from_dict",
    # Kernel functions
    "ScatterRecord",
    "absorbed_record",
    "DELTA_PDF",
    "reflected",
    "reflectance_eval",
    "reflectance_pdf",
    "is_nee_target",
    "scatter_diffuse",
    "eval_diffuse",
    "pdf_diffuse",
    "scatter_specular",
    "scatter_refraction",
    "IOR_VACUUM",
    "IOR_MEDIUM",
    "FRESNEL_R0",
    "scatter_glossy",
    "scatter_phong",
    "eval_phong",
    "pdf_phong",
]
