"""Scene-level intersection and light sampling.

This module stores the uploaded scene in Taichi fields and provides the two
queries the integrator needs:

- intersect_scene: nearest hit over all primitives by linear scan
- sample_on_lights: a uniformly chosen light object, sampled over its area

Objects own one or more leaf primitives (spheres or rhombi). A composite
figure is flattened into consecutive leaves of its object, each with the
probability that uniform child selection reaches it. Light sampling picks a
leaf with those probabilities and reports the combined area density, and a hit
record carries the same density for the point that was struck, so the two
strategies agree on the light pdf used for MIS.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathlight.scene.intersection import add_object, add_sphere, clear_scene
    >>> clear_scene()
    >>> obj = add_object((4.0, 4.0, 4.0), (0.0, 0.0, 0.0), kind=0, params=(0, 0, 0))
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, object_id=obj)
    0
    >>> # Use intersect_scene / sample_on_lights within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathlight.core.sampler import random_float
from pathlight.geometry.rhombus import Rhombus, hit_rhombus, rhombus_pdf_area, sample_rhombus
from pathlight.geometry.sphere import hit_sphere, make_sphere, sample_sphere, sphere_pdf_area

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Far clipping distance for primary and continuation rays
T_MAX = 1e10

# Leaf primitive tags
LEAF_SPHERE = 0
LEAF_RHOMBUS = 1


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: Distance along the ray to the nearest hit.
        point: The world-space hit point.
        normal: The orienting normal (opposes the ray direction).
        is_into: 1 if the ray struck the outside of the surface.
        object_id: Index of the object owning the hit primitive, -1 on a miss.
        area_pdf: Area density with which sampling the owning object would
            produce the hit point.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    is_into: ti.i32
    object_id: ti.i32
    area_pdf: ti.f32


@ti.dataclass
class LightSample:
    """A point drawn on a light surface.

    Attributes:
        found: 0 when the scene has no lights.
        point: The sampled point.
        normal: The outward geometric normal at the point.
        pdf: Area density of the point, including the light selection.
        object_id: The light object that was sampled.
    """

    found: ti.i32
    point: vec3
    normal: vec3
    pdf: ti.f32
    object_id: ti.i32


# Maximum number of objects and primitives supported in the scene
MAX_OBJECTS = 1024
MAX_SPHERES = 1024
MAX_RHOMBI = 2048
MAX_LEAVES = MAX_SPHERES + MAX_RHOMBI

# Object storage: Structure of Arrays layout
object_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_kinds = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_params = ti.Vector.field(3, dtype=ti.f32, shape=MAX_OBJECTS)
object_leaf_start = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
object_leaf_count = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_objects = ti.field(dtype=ti.i32, shape=())

# Leaf storage: which primitive each leaf is, and the running selection CDF
# within its object
leaf_kinds = ti.field(dtype=ti.i32, shape=MAX_LEAVES)
leaf_prims = ti.field(dtype=ti.i32, shape=MAX_LEAVES)
leaf_cdf = ti.field(dtype=ti.f32, shape=MAX_LEAVES)
num_leaves = ti.field(dtype=ti.i32, shape=())

# Sphere storage
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_object_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
sphere_select_probs = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Rhombus storage
rhombus_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RHOMBI)
rhombus_edge_a = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RHOMBI)
rhombus_edge_b = ti.Vector.field(3, dtype=ti.f32, shape=MAX_RHOMBI)
rhombus_object_ids = ti.field(dtype=ti.i32, shape=MAX_RHOMBI)
rhombus_select_probs = ti.field(dtype=ti.f32, shape=MAX_RHOMBI)
num_rhombi = ti.field(dtype=ti.i32, shape=())

# Light index: objects with non-black emission
light_object_ids = ti.field(dtype=ti.i32, shape=MAX_OBJECTS)
num_lights = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Host-side Scene Building
# =============================================================================


def clear_scene() -> None:
    """Clear all objects, primitives and lights.

    Resets the counts to zero. The field data is overwritten when new
    objects are added.
    """
    num_objects[None] = 0
    num_leaves[None] = 0
    num_spheres[None] = 0
    num_rhombi[None] = 0
    num_lights[None] = 0


def add_object(
    emission: tuple[float, float, float],
    color: tuple[float, float, float],
    kind: int,
    params: tuple[float, float, float],
) -> int:
    """Add an object record. Its primitives must be added right after it.

    Args:
        emission: Emitted radiance (RGB). Non-black registers a light.
        color: Diffuse colour (RGB).
        kind: ReflectanceType tag.
        params: Packed reflectance parameters.

    Returns:
        The object index.

    Raises:
        RuntimeError: If the maximum number of objects is exceeded.
    """
    idx = num_objects[None]
    if idx >= MAX_OBJECTS:
        raise RuntimeError(f"Maximum number of objects ({MAX_OBJECTS}) exceeded")
    object_emissions[idx] = emission
    object_colors[idx] = color
    object_kinds[idx] = kind
    object_params[idx] = params
    object_leaf_start[idx] = num_leaves[None]
    object_leaf_count[idx] = 0
    num_objects[None] = idx + 1

    if any(c != 0.0 for c in emission):
        light_idx = num_lights[None]
        light_object_ids[light_idx] = idx
        num_lights[None] = light_idx + 1
    return idx


def _append_leaf(object_id: int, leaf_kind: int, prim_index: int, select_prob: float) -> None:
    if object_id != num_objects[None] - 1:
        raise ValueError(
            f"Primitives must be added to the most recently added object, got {object_id}"
        )
    leaf = num_leaves[None]
    if leaf >= MAX_LEAVES:
        raise RuntimeError(f"Maximum number of leaf primitives ({MAX_LEAVES}) exceeded")
    count = object_leaf_count[object_id]
    previous = leaf_cdf[leaf - 1] if count > 0 else 0.0
    leaf_kinds[leaf] = leaf_kind
    leaf_prims[leaf] = prim_index
    leaf_cdf[leaf] = previous + select_prob
    object_leaf_count[object_id] = count + 1
    num_leaves[None] = leaf + 1


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    object_id: int,
    select_prob: float = 1.0,
) -> int:
    """Add a sphere primitive to an object.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        object_id: The owning object (must be the most recently added).
        select_prob: Probability that sampling the object picks this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    _append_leaf(object_id, LEAF_SPHERE, idx, select_prob)
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_object_ids[idx] = object_id
    sphere_select_probs[idx] = select_prob
    num_spheres[None] = idx + 1
    return idx


def add_rhombus(
    origin: tuple[float, float, float],
    edge_a: tuple[float, float, float],
    edge_b: tuple[float, float, float],
    object_id: int,
    select_prob: float = 1.0,
) -> int:
    """Add a rhombus primitive to an object.

    Args:
        origin: The corner point.
        edge_a: Edge vector from origin to an adjacent corner.
        edge_b: Edge vector from origin to the other adjacent corner.
        object_id: The owning object (must be the most recently added).
        select_prob: Probability that sampling the object picks this rhombus.

    Returns:
        The index of the added rhombus.

    Raises:
        RuntimeError: If the maximum number of rhombi is exceeded.
    """
    idx = num_rhombi[None]
    if idx >= MAX_RHOMBI:
        raise RuntimeError(f"Maximum number of rhombi ({MAX_RHOMBI}) exceeded")
    _append_leaf(object_id, LEAF_RHOMBUS, idx, select_prob)
    rhombus_origins[idx] = origin
    rhombus_edge_a[idx] = edge_a
    rhombus_edge_b[idx] = edge_b
    rhombus_object_ids[idx] = object_id
    rhombus_select_probs[idx] = select_prob
    num_rhombi[None] = idx + 1
    return idx


def get_object_count() -> int:
    """Get the number of objects in the scene."""
    return int(num_objects[None])


def get_light_count() -> int:
    """Get the number of light objects in the scene."""
    return int(num_lights[None])


def get_sphere_count() -> int:
    """Get the number of sphere primitives in the scene."""
    return int(num_spheres[None])


def get_rhombus_count() -> int:
    """Get the number of rhombus primitives in the scene."""
    return int(num_rhombi[None])


# =============================================================================
# Kernel Queries
# =============================================================================


@ti.func
def _make_miss_record() -> SceneHitRecord:
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        is_into=0,
        object_id=-1,
        area_pdf=0.0,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3, t_max: ti.f32) -> SceneHitRecord:
    """Find the nearest hit over all primitives.

    Insertion order does not matter: every primitive is tested and the
    smallest distance wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_max: Hits at or beyond this distance are ignored.

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = make_sphere(sphere_centers[i], sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                is_into=rec.is_into,
                object_id=sphere_object_ids[i],
                area_pdf=sphere_select_probs[i] * sphere_pdf_area(sphere),
            )

    for i in range(num_rhombi[None]):
        rhombus = Rhombus(
            origin=rhombus_origins[i], edge_a=rhombus_edge_a[i], edge_b=rhombus_edge_b[i]
        )
        rec = hit_rhombus(ray_origin, ray_direction, rhombus, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = SceneHitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                is_into=rec.is_into,
                object_id=rhombus_object_ids[i],
                area_pdf=rhombus_select_probs[i] * rhombus_pdf_area(rhombus),
            )

    return result


@ti.func
def sample_object(object_id: ti.i32, lane: ti.i32):
    """Sample a point uniformly over one object's leaf primitives.

    A leaf is chosen through the object's selection CDF, then sampled
    uniformly over its area.

    Args:
        object_id: The object to sample.
        lane: Random generator handle.

    Returns:
        A tuple of (point, normal, area_pdf).
    """
    start = object_leaf_start[object_id]
    count = object_leaf_count[object_id]
    u = random_float(lane)

    chosen = start + count - 1
    found = 0
    for k in range(count):
        if found == 0 and u < leaf_cdf[start + k]:
            chosen = start + k
            found = 1

    point = vec3(0.0, 0.0, 0.0)
    normal = vec3(0.0, 0.0, 1.0)
    pdf = 0.0
    prim = leaf_prims[chosen]
    if leaf_kinds[chosen] == LEAF_SPHERE:
        sphere = make_sphere(sphere_centers[prim], sphere_radii[prim])
        point, normal = sample_sphere(sphere, lane)
        pdf = sphere_select_probs[prim] * sphere_pdf_area(sphere)
    else:
        rhombus = Rhombus(
            origin=rhombus_origins[prim], edge_a=rhombus_edge_a[prim], edge_b=rhombus_edge_b[prim]
        )
        point, normal = sample_rhombus(rhombus, lane)
        pdf = rhombus_select_probs[prim] * rhombus_pdf_area(rhombus)

    return point, normal, pdf


@ti.func
def sample_on_lights(lane: ti.i32) -> LightSample:
    """Pick a light uniformly and sample a point on it.

    Args:
        lane: Random generator handle.

    Returns:
        A LightSample whose pdf includes the 1 / num_lights selection
        probability; ``found`` is 0 when the scene has no lights.
    """
    result = LightSample(
        found=0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 1.0),
        pdf=0.0,
        object_id=-1,
    )
    n = num_lights[None]
    if n > 0:
        pick = ti.min(ti.cast(random_float(lane) * n, ti.i32), n - 1)
        object_id = light_object_ids[pick]
        point, normal, area_pdf = sample_object(object_id, lane)
        result = LightSample(
            found=1,
            point=point,
            normal=normal,
            pdf=area_pdf / ti.cast(n, ti.f32),
            object_id=object_id,
        )
    return result


@ti.func
def light_area_pdf(area_pdf: ti.f32) -> ti.f32:
    """Area density of light sampling at a hit point with the given object pdf."""
    n = num_lights[None]
    result = 0.0
    if n > 0:
        result = area_pdf / ti.cast(n, ti.f32)
    return result
