"""Taichi-based physically-inspired path tracer.

This package estimates the radiance reaching each pixel of a pinhole camera by
stochastically tracing light paths through a scene of spheres and
parallelograms, with support for:
- Next event estimation with multiple importance sampling
- Diffuse, specular, refractive, glossy and Phong reflectance
- Russian roulette path termination
- Extended Reinhard tone mapping and gamma correction

Subpackages:
    core: Vector/colour kernel, random sampler, integrator and renderer
    geometry: Sphere and rhombus primitives (intersection and sampling)
    materials: Reflectance models
    scene: Scene description, GPU upload and ray-scene queries
    camera: Pinhole camera and primary ray generation
    preview: Picture post-processing, export and preview
"""

__version__ = "0.1.0"
