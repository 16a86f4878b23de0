"""Unit tests for sphere intersection and sampling.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Hits behind the ray origin and beyond t_max
- Uniform surface sampling and its area density
"""

import math

import pytest
import taichi as ti


def _hit(origin, direction, center=(0.0, 0.0, 0.0), radius=1.0, t_max=1e10):
    """Run hit_sphere once and return the record as Python values."""
    from pathlight.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    is_into = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(
        o: ti.types.vector(3, ti.f32),
        d: ti.types.vector(3, ti.f32),
        c: ti.types.vector(3, ti.f32),
        r: ti.f32,
        tmax: ti.f32,
    ):
        sphere = Sphere(center=c, radius=r)
        rec = hit_sphere(o, d.normalized(), sphere, tmax)
        hit[None] = rec.hit
        t_val[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal
        is_into[None] = rec.is_into

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_max)
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": point[None],
        "normal": normal[None],
        "is_into": is_into[None],
    }


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from pathlight.geometry.sphere import make_sphere, vec3

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-6
        assert abs(c[1] - 2.0) < 1e-6
        assert abs(c[2] - 3.0) < 1e-6
        assert abs(radius_result[None] - 0.5) < 1e-6


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5
        assert abs(rec["normal"][2] - 1.0) < 1e-5
        assert rec["is_into"] == 1

    @pytest.mark.parametrize(
        "origin,center,radius",
        [
            ((0.0, 0.0, 5.0), (0.0, 0.0, 0.0), 1.0),
            ((3.0, -2.0, 7.0), (1.0, 1.0, 1.0), 2.5),
            ((-20.0, 4.0, 0.5), (0.0, 0.0, 0.0), 0.25),
        ],
    )
    def test_distance_toward_center(self, origin, center, radius):
        """Rays aimed at the center hit at |origin - center| - radius."""
        direction = tuple(c - o for o, c in zip(origin, center))
        rec = _hit(origin, direction, center, radius)
        expected = math.dist(origin, center) - radius
        assert rec["hit"] == 1
        assert abs(rec["t"] - expected) < 1e-4 * max(1.0, expected)

        # Normal points away from the center, toward the ray origin
        outward = [p - c for p, c in zip(rec["point"], center)]
        assert sum(n * o for n, o in zip(rec["normal"], outward)) > 0.0

    def test_miss(self):
        rec = _hit((0.0, 5.0, 5.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0

    def test_sphere_behind_ray(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 0

    def test_inside_hits_far_side(self):
        """A ray from inside hits the far side with a flipped normal."""
        rec = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), radius=2.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert rec["is_into"] == 0
        # Oriented normal opposes the ray direction
        assert rec["normal"][0] < -0.99

    def test_t_max_prunes_hit(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), t_max=3.0)
        assert rec["hit"] == 0


class TestSphereSampling:
    """Tests for uniform surface sampling."""

    def test_samples_lie_on_surface(self):
        from pathlight.core.sampler import seed_lanes
        from pathlight.geometry.sphere import Sphere, sample_sphere, vec3

        n = 512
        distances = ti.field(dtype=ti.f32, shape=n)
        normal_dots = ti.field(dtype=ti.f32, shape=n)
        seed_lanes(n, seed=4)

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(1.0, -2.0, 3.0), radius=2.5)
            for i in range(n):
                p, nrm = sample_sphere(sphere, i)
                distances[i] = (p - sphere.center).norm()
                normal_dots[i] = nrm.dot((p - sphere.center).normalized())

        test_kernel()
        d = distances.to_numpy()
        assert abs(d - 2.5).max() < 1e-4
        assert abs(normal_dots.to_numpy() - 1.0).max() < 1e-4

    def test_samples_cover_sphere(self):
        """Mean of uniform samples is close to the center."""
        from pathlight.core.sampler import seed_lanes
        from pathlight.geometry.sphere import Sphere, sample_sphere, vec3

        n = 4096
        points = ti.field(dtype=ti.math.vec3, shape=n)
        seed_lanes(n, seed=6)

        @ti.kernel
        def test_kernel():
            sphere = Sphere(center=vec3(0.0, 0.0, 0.0), radius=1.0)
            for i in range(n):
                p, _ = sample_sphere(sphere, i)
                points[i] = p

        test_kernel()
        mean = points.to_numpy().mean(axis=0)
        assert abs(mean).max() < 0.06

    def test_pdf_area(self):
        from pathlight.geometry.sphere import Sphere, sphere_pdf_area, vec3

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = sphere_pdf_area(Sphere(center=vec3(0.0, 0.0, 0.0), radius=2.0))

        test_kernel()
        assert abs(result[None] - 1.0 / (16.0 * math.pi)) < 1e-7
