"""Path tracing integrator for Monte Carlo light transport.

This module implements the rendering kernel: unbiased path tracing with
next-event estimation (NEE), multiple importance sampling (MIS) and Russian
roulette termination.

Each path keeps two throughputs: a scalar weight that collects the branch
``contribution`` of every scattering event and a colour that collects the
object colour times the sampling ``weight`` divided by the roulette survival
probability. Radiance found along the path is multiplied by both.

Key features:
    - Reflectance dispatch (Diffuse, Specular, Refraction, Glossy, Phong)
    - Light sampling at Diffuse and Phong vertices with a shadow ray that
      must reach the sampled point on the sampled light
    - Power-heuristic MIS between light sampling and BSDF sampling
    - Russian roulette with a fixed survival probability past a minimum depth
    - Constant background colour for escaped rays
    - Self-intersection avoidance with ray offset

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.core.integrator import (
    ...     configure_integrator, render_image, setup_render_target
    ... )
    >>> from pathlight.scene.examples import cornell_box, cornell_box_world
    >>> from pathlight.camera.pinhole import setup_camera
    >>>
    >>> cornell_box().upload()
    >>> setup_camera(cornell_box_world(64, 48))
    >>> setup_render_target(64, 48)
    >>> configure_integrator()
    >>> render_image(spp=4, seed=1)
"""

import logging

import taichi as ti
import taichi.math as tm

from pathlight.camera.pinhole import get_ray_jittered
from pathlight.core.sampler import MAX_LANES, normalize_seed, random_float, seed_lane
from pathlight.materials.reflectance import (
    is_nee_target,
    reflectance_eval,
    reflectance_pdf,
    reflected,
)
from pathlight.scene.intersection import (
    T_MAX,
    intersect_scene,
    light_area_pdf,
    object_colors,
    object_emissions,
    object_kinds,
    object_params,
    sample_on_lights,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Hard ceiling on path length
DEFAULT_MAX_DEPTH = 64

# Bounces that always survive Russian roulette
DEFAULT_MIN_DEPTH = 5

# Russian roulette survival probability past the minimum depth
DEFAULT_RR_PROBABILITY = 0.5

# Power heuristic exponent (1 is the balance heuristic)
DEFAULT_MIS_POWER = 1.0

# Colour of rays that escape the scene
DEFAULT_BACKGROUND = (0.0, 0.5, 0.75)

# Ray offset epsilon to avoid self-intersection
RAY_EPSILON = 1e-4

# Relative tolerance when checking that a shadow ray reached the sampled point
SHADOW_TOLERANCE = 1e-3

# =============================================================================
# Integrator Configuration
# =============================================================================

_max_depth = ti.field(dtype=ti.i32, shape=())
_min_depth = ti.field(dtype=ti.i32, shape=())
_rr_probability = ti.field(dtype=ti.f32, shape=())
_use_nee = ti.field(dtype=ti.i32, shape=())
_use_mis = ti.field(dtype=ti.i32, shape=())
_mis_power = ti.field(dtype=ti.f32, shape=())
_background = ti.Vector.field(3, dtype=ti.f32, shape=())
_integrator_configured = ti.field(dtype=ti.i32, shape=())


def configure_integrator(
    max_depth: int = DEFAULT_MAX_DEPTH,
    min_depth: int = DEFAULT_MIN_DEPTH,
    rr_probability: float = DEFAULT_RR_PROBABILITY,
    use_nee: bool = True,
    use_mis: bool = True,
    mis_power: float = DEFAULT_MIS_POWER,
    background: tuple[float, float, float] = DEFAULT_BACKGROUND,
) -> None:
    """Set the path integration parameters.

    Args:
        max_depth: Hard ceiling on the number of path vertices.
        min_depth: Vertices below this depth always survive roulette.
        rr_probability: Survival probability from min_depth on.
        use_nee: Enable light sampling at Diffuse and Phong vertices.
        use_mis: Weight light and BSDF sampling with the power heuristic.
            Without it, emitters hit right after a light-sampled vertex are
            not counted.
        mis_power: Power heuristic exponent.
        background: Radiance of rays that leave the scene.

    Raises:
        ValueError: If a parameter is out of range.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}")
    if min_depth < 0:
        raise ValueError(f"min_depth must be non-negative, got {min_depth}")
    if not 0.0 < rr_probability <= 1.0:
        raise ValueError(f"rr_probability must be in (0, 1], got {rr_probability}")
    if mis_power < 0.0:
        raise ValueError(f"mis_power must be non-negative, got {mis_power}")

    _max_depth[None] = max_depth
    _min_depth[None] = min_depth
    _rr_probability[None] = rr_probability
    _use_nee[None] = int(use_nee)
    _use_mis[None] = int(use_mis)
    _mis_power[None] = mis_power
    _background[None] = [float(c) for c in background]
    _integrator_configured[None] = 1

    logger.debug(
        f"Integrator: max_depth={max_depth} min_depth={min_depth} rr={rr_probability} "
        f"nee={use_nee} mis={use_mis} power={mis_power}"
    )


# =============================================================================
# Render Target (Picture Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Mean radiance per pixel, indexed [row, col] with row 0 at the top
_picture = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the picture buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if width * height > MAX_LANES:
        raise ValueError(f"Image has more pixels than generator lanes ({MAX_LANES})")

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the picture buffer to zero."""
    _picture.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def _offset_ray_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset ray origin to avoid self-intersection.

    Pushes the point slightly along the normal toward the side the new ray
    travels to (above the surface for reflection, below for transmission).
    """
    offset_dir = normal
    if tm.dot(direction, normal) < 0.0:
        offset_dir = -normal
    return point + RAY_EPSILON * offset_dir


@ti.func
def power_heuristic(pdf_a: ti.f32, pdf_b: ti.f32, power: ti.f32) -> ti.f32:
    """MIS weight of strategy a: pdf_a^n / (pdf_a^n + pdf_b^n).

    Evaluated as 1 / (1 + (pdf_b / pdf_a)^n), which stays finite for the very
    large nominal densities of specular directions.
    """
    result = 0.0
    if pdf_a > 0.0:
        if pdf_b <= 0.0:
            result = 1.0
        else:
            result = 1.0 / (1.0 + ti.pow(pdf_b / pdf_a, power))
    return result


@ti.func
def _is_black(c: vec3) -> ti.i32:
    result = 0
    if c.x <= 0.0 and c.y <= 0.0 and c.z <= 0.0:
        result = 1
    return result


@ti.func
def estimate_direct(
    point: vec3,
    normal: vec3,
    incident_direction: vec3,
    kind: ti.i32,
    params: vec3,
    lane: ti.i32,
) -> vec3:
    """Light-sampling estimate of direct illumination at a surface point.

    The result still has to be multiplied by the object colour and the path
    throughput.

    Args:
        point: The shading point.
        normal: The orienting normal at the point.
        incident_direction: Direction of the ray that reached the point.
        kind: ReflectanceType of the surface.
        params: Packed reflectance parameters.
        lane: Random generator handle.

    Returns:
        Emission * BRDF * cos / pdf, MIS-weighted when MIS is enabled, or
        zero if the sample is occluded or faces away.
    """
    result = vec3(0.0, 0.0, 0.0)
    ls = sample_on_lights(lane)

    if ls.found == 1:
        to_light = ls.point - point
        dist2 = tm.dot(to_light, to_light)
        if dist2 > 0.0:
            dist = ti.sqrt(dist2)
            wi = to_light / dist
            cos_surface = tm.dot(normal, wi)
            cos_light = ti.abs(tm.dot(ls.normal, wi))

            if cos_surface > 0.0 and cos_light > 0.0:
                shadow_origin = _offset_ray_origin(point, normal, wi)
                expected = tm.length(ls.point - shadow_origin)
                shadow = intersect_scene(shadow_origin, wi, T_MAX)

                visible = 0
                if shadow.hit == 1 and shadow.object_id == ls.object_id:
                    if ti.abs(shadow.t - expected) < SHADOW_TOLERANCE * (expected + 1.0):
                        visible = 1

                if visible == 1:
                    pdf_light = ls.pdf * dist2 / cos_light
                    f = reflectance_eval(kind, params, incident_direction, normal, wi)
                    mis_weight = 1.0
                    if _use_mis[None] == 1:
                        pdf_bsdf = reflectance_pdf(kind, params, incident_direction, normal, wi)
                        mis_weight = power_heuristic(pdf_light, pdf_bsdf, _mis_power[None])
                    emission = object_emissions[ls.object_id]
                    result = emission * (f * cos_surface / pdf_light * mis_weight)

    return result


@ti.func
def trace_path(ray_origin: vec3, ray_direction: vec3, lane: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        lane: Random generator handle.

    Returns:
        The estimated radiance (RGB) for this path sample.
    """
    origin = ray_origin
    direction = ray_direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput_weight = 1.0
    throughput_color = vec3(1.0, 1.0, 1.0)

    # Density of the last BSDF-sampled direction, and whether the vertex it
    # left from also sampled the lights
    prev_pdf = 0.0
    prev_nee = 0

    use_nee = _use_nee[None]
    use_mis = _use_mis[None]
    min_depth = _min_depth[None]
    rr_probability = _rr_probability[None]

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for depth in range(_max_depth[None]):
        if active == 1:
            rec = intersect_scene(origin, direction, T_MAX)

            if rec.hit == 0:
                radiance += throughput_color * _background[None] * throughput_weight
                active = 0
            else:
                obj = rec.object_id
                kind = object_kinds[obj]
                params = object_params[obj]
                color = object_colors[obj]
                emission = object_emissions[obj]

                # Emission, weighted against the light sampling done at the
                # previous vertex
                if _is_black(emission) == 0:
                    emit_weight = 1.0
                    if prev_nee == 1:
                        if use_mis == 1:
                            cos_light = tm.max(ti.abs(tm.dot(rec.normal, direction)), 1e-8)
                            pdf_light = light_area_pdf(rec.area_pdf) * rec.t * rec.t / cos_light
                            emit_weight = power_heuristic(prev_pdf, pdf_light, _mis_power[None])
                        else:
                            emit_weight = 0.0
                    radiance += throughput_color * emission * (throughput_weight * emit_weight)

                nee_vertex = 0
                if use_nee == 1 and is_nee_target(kind) == 1:
                    nee_vertex = 1
                    direct = estimate_direct(
                        rec.point, rec.normal, direction, kind, params, lane
                    )
                    radiance += throughput_color * color * direct * throughput_weight

                # Russian roulette
                q = 1.0
                if depth >= min_depth:
                    q = rr_probability
                if random_float(lane) >= q:
                    active = 0

                if active == 1:
                    scatter = reflected(kind, params, direction, rec.normal, rec.is_into, lane)
                    if scatter.absorbed == 1:
                        active = 0
                    else:
                        throughput_weight *= scatter.contribution
                        throughput_color = throughput_color * color * (scatter.weight / q)
                        if _is_black(throughput_color) == 1 or throughput_weight <= 0.0:
                            active = 0
                        prev_pdf = scatter.pdf_value
                        prev_nee = nee_vertex
                        origin = _offset_ray_origin(rec.point, rec.normal, scatter.direction)
                        direction = scatter.direction

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32, spp: ti.i32, seed: ti.i32):
    """Render every pixel with ``spp`` samples into the picture buffer.

    Each pixel owns the generator lane ``row * width + col``; nothing else is
    shared between pixels.
    """
    for row, col in ti.ndrange(height, width):
        lane = row * width + col
        seed_lane(lane, seed)

        total = vec3(0.0, 0.0, 0.0)
        for _ in range(spp):
            ray = get_ray_jittered(col, row, width, height, lane)
            color = trace_path(ray.origin, ray.direction, lane)

            # Clamp negative values (numerical errors)
            color = tm.max(color, vec3(0.0, 0.0, 0.0))

            # Check for NaN/Inf and replace with zero
            for c in ti.static(range(3)):
                if tm.isnan(color[c]) or tm.isinf(color[c]):
                    color[c] = 0.0

            total += color

        _picture[row, col] = total / ti.cast(spp, ti.f32)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(spp: int = 1, seed: int = 0) -> None:
    """Render the uploaded scene through the configured camera.

    Configures the integrator with defaults if configure_integrator() was
    never called.

    Args:
        spp: Samples per pixel.
        seed: Render seed; equal seeds give equal pictures.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If spp is less than 1.
    """
    _check_render_target_initialized()
    if spp < 1:
        raise ValueError(f"spp must be at least 1, got {spp}")
    if _integrator_configured[None] == 0:
        configure_integrator()

    width, height = get_image_dimensions()
    _render_kernel(width, height, spp, normalize_seed(seed))


def get_picture_numpy():
    """Get the rendered radiance as a NumPy array.

    Returns:
        Float32 array of shape (height, width, 3), row 0 at the top,
        unclamped.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    import numpy as np

    _check_render_target_initialized()
    width, height = get_image_dimensions()
    full_image = _picture.to_numpy()
    return np.ascontiguousarray(full_image[:height, :width, :], dtype=np.float32)
