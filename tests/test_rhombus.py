"""Unit tests for rhombus (parallelogram) intersection and sampling.

Tests cover:
- Point containment including skewed parallelograms
- Ray hits inside, misses outside, and parallel rays
- Normal orientation against the ray from either side
- Uniform surface sampling staying inside the rhombus
"""

import pytest
import taichi as ti

Vec = ti.types.vector(3, ti.f32)


def _contains(origin, edge_a, edge_b, point):
    from pathlight.geometry.rhombus import Rhombus, rhombus_has, vec3

    result = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: Vec, a: Vec, b: Vec, p: Vec):
        result[None] = rhombus_has(Rhombus(origin=o, edge_a=a, edge_b=b), p)

    test_kernel(vec3(*origin), vec3(*edge_a), vec3(*edge_b), vec3(*point))
    return result[None]


def _hit(origin, edge_a, edge_b, ray_origin, ray_direction, t_max=1e10):
    from pathlight.geometry.rhombus import Rhombus, hit_rhombus, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    is_into = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: Vec, a: Vec, b: Vec, ro: Vec, rd: Vec, tmax: ti.f32):
        rec = hit_rhombus(ro, rd.normalized(), Rhombus(origin=o, edge_a=a, edge_b=b), tmax)
        hit[None] = rec.hit
        t_val[None] = rec.t
        normal[None] = rec.normal
        is_into[None] = rec.is_into

    test_kernel(
        vec3(*origin),
        vec3(*edge_a),
        vec3(*edge_b),
        vec3(*ray_origin),
        vec3(*ray_direction),
        t_max,
    )
    return {"hit": hit[None], "t": t_val[None], "normal": normal[None], "is_into": is_into[None]}


# Unit square in the XY plane, geometric normal +Z
SQUARE = ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0))

# Skewed parallelogram in the XY plane
SKEWED = ((0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (1.0, 1.0, 0.0))


class TestRhombusContainment:
    """Tests for rhombus_has."""

    @pytest.mark.parametrize(
        "point,expected",
        [
            ((0.5, 0.5, 0.0), 1),
            ((0.0, 0.0, 0.0), 1),
            ((1.0, 1.0, 0.0), 1),
            ((1.5, 0.5, 0.0), 0),
            ((-0.1, 0.5, 0.0), 0),
        ],
    )
    def test_square(self, point, expected):
        assert _contains(*SQUARE, point) == expected

    @pytest.mark.parametrize(
        "point,expected",
        [
            ((2.5, 0.9, 0.0), 1),
            ((0.2, 0.9, 0.0), 0),
            ((2.9, 0.5, 0.0), 0),
        ],
    )
    def test_skewed(self, point, expected):
        assert _contains(*SKEWED, point) == expected


class TestRhombusIntersection:
    """Tests for hit_rhombus."""

    def test_hit_from_front(self):
        rec = _hit(*SQUARE, (0.5, 0.5, 3.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 3.0) < 1e-5
        assert abs(rec["normal"][2] - 1.0) < 1e-5
        assert rec["is_into"] == 1

    def test_hit_from_back_flips_normal(self):
        rec = _hit(*SQUARE, (0.5, 0.5, -2.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert abs(rec["normal"][2] + 1.0) < 1e-5
        assert rec["is_into"] == 0

    def test_miss_outside_edges(self):
        rec = _hit(*SQUARE, (1.5, 0.5, 3.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0

    def test_parallel_ray_misses(self):
        rec = _hit(*SQUARE, (0.5, 0.5, 0.0), (1.0, 0.0, 0.0))
        assert rec["hit"] == 0

    def test_plane_behind_ray(self):
        rec = _hit(*SQUARE, (0.5, 0.5, 3.0), (0.0, 0.0, 1.0))
        assert rec["hit"] == 0

    def test_t_max_prunes_hit(self):
        rec = _hit(*SQUARE, (0.5, 0.5, 3.0), (0.0, 0.0, -1.0), t_max=2.0)
        assert rec["hit"] == 0


class TestRhombusSampling:
    """Tests for uniform rhombus sampling."""

    @pytest.mark.parametrize(
        "rhombus",
        [
            SQUARE,
            SKEWED,
            ((1.0, 2.0, 3.0), (0.0, 4.0, 1.0), (-2.0, 0.0, 0.5)),
        ],
    )
    def test_samples_inside(self, rhombus):
        from pathlight.core.sampler import seed_lanes
        from pathlight.geometry.rhombus import Rhombus, rhombus_has, sample_rhombus, vec3

        n = 512
        inside = ti.field(dtype=ti.i32, shape=n)
        seed_lanes(n, seed=12)

        @ti.kernel
        def test_kernel(o: Vec, a: Vec, b: Vec):
            r = Rhombus(origin=o, edge_a=a, edge_b=b)
            for i in range(n):
                p, _ = sample_rhombus(r, i)
                # Nudge toward the centroid so boundary samples survive f32 rounding
                centroid = r.origin + 0.5 * (r.edge_a + r.edge_b)
                inside[i] = rhombus_has(r, p + (centroid - p) * 1e-4)

        test_kernel(vec3(*rhombus[0]), vec3(*rhombus[1]), vec3(*rhombus[2]))
        assert inside.to_numpy().all()

    def test_area_and_pdf(self):
        from pathlight.geometry.rhombus import (
            Rhombus,
            rhombus_area,
            rhombus_normal,
            rhombus_pdf_area,
            vec3,
        )

        results = ti.field(dtype=ti.f32, shape=2)
        normal = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            r = Rhombus(
                origin=vec3(0.0, 0.0, 0.0),
                edge_a=vec3(2.0, 0.0, 0.0),
                edge_b=vec3(1.0, 3.0, 0.0),
            )
            results[0] = rhombus_area(r)
            results[1] = rhombus_pdf_area(r)
            normal[None] = rhombus_normal(r)

        test_kernel()
        assert abs(results[0] - 6.0) < 1e-5
        assert abs(results[1] - 1.0 / 6.0) < 1e-6
        assert abs(normal[None][2] - 1.0) < 1e-6