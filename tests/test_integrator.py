"""End-to-end tests for the path integrator.

Tests cover:
- Background and emitter pixels of a simple two-sphere scene
- Energy bound inside a closed box lit by a small light
- Russian roulette leaving the expected radiance unchanged
- Agreement of BSDF-only, NEE and NEE+MIS estimators on diffuse and Phong
  surfaces
- Energy conservation of a glass sphere, and a glossy sphere render
- Determinism for a fixed seed
- The power heuristic and integrator configuration checks
"""

import numpy as np
import pytest
import taichi as ti

from pathlight.camera.pinhole import Camera, Screen, WorldSetting
from pathlight.core.color import Color
from pathlight.materials import Diffuse, Glossy, Phong, Refraction, Specular
from pathlight.scene.figure import RhombusFigure, SphereFigure, parallelepiped
from pathlight.scene.manager import Scene
from pathlight.scene.objects import SceneObject

BACKGROUND = (0.0, 0.5, 0.75)


def _render(world, scene, **settings):
    from pathlight.core.renderer import Renderer, RenderSettings

    return Renderer(RenderSettings(**settings)).render(world, scene)


def _front_world(screen=10.0):
    return WorldSetting(
        camera=Camera(position=(0.0, 0.0, 10.0), direction=(0.0, 0.0, -1.0), up=(0.0, 1.0, 0.0)),
        screen=Screen(width=screen, height=screen, dist=10.0),
    )


class TestTwoSphereScene:
    """A diffuse sphere and an emissive sphere seen from the front."""

    @pytest.fixture
    def picture(self):
        scene = Scene(
            [
                SceneObject(SphereFigure((-2.0, 0.0, 0.0), 1.0), color=Color(0.75, 0.75, 0.75)),
                SceneObject(SphereFigure((2.0, 0.0, 0.0), 1.0), emission=Color(4.0, 4.0, 4.0)),
            ]
        )
        return _render(_front_world(), scene, width=20, height=20, spp=1, seed=3)

    def test_background_pixels_exact(self, picture):
        """Rays that strike nothing return the constant background."""
        for x, y in [(0, 0), (19, 0), (0, 19), (19, 19), (10, 2)]:
            assert picture[x, y].to_tuple() == BACKGROUND

    def test_emitter_pixel_is_lit(self, picture):
        # Screen point (2.25, 0.25) projects onto the emissive sphere
        lit = picture[14, 9]
        assert lit.luminance() >= 4.0 - 1e-4

    def test_diffuse_pixel_is_finite(self, picture):
        c = picture[5, 9]
        assert all(np.isfinite(list(c)))
        assert min(c) >= 0.0


class TestClosedBox:
    """A closed diffuse box lit by a small rectangle the camera cannot see."""

    def test_pixels_below_emission(self):
        emission = 10.0
        scene = Scene(
            [
                SceneObject(
                    parallelepiped((0, 0, 0), (10, 0, 0), (0, 10, 0), (0, 0, 10)),
                    color=Color(0.5, 0.5, 0.5),
                ),
                SceneObject(
                    RhombusFigure((4.5, 8.0, 4.5), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0)),
                    emission=Color(emission, emission, emission),
                ),
            ]
        )
        world = WorldSetting(
            camera=Camera(position=(5.0, 5.0, 9.0), direction=(0.0, 0.0, -1.0)),
            screen=Screen(width=2.0, height=2.0, dist=4.0),
        )
        picture = _render(world, scene, width=16, height=16, spp=16, seed=5)

        assert picture.pixels.max() < emission
        # The walls are lit, and nothing escapes to the background
        assert picture.pixels.mean() > 0.0
        assert np.isfinite(picture.pixels).all()


class TestRussianRoulette:
    """Roulette changes the variance, not the expected value."""

    def test_expected_radiance_unchanged(self):
        scene = Scene(
            [
                SceneObject(
                    SphereFigure((0.0, 0.0, 0.0), 3.0),
                    color=Color(0.8, 0.8, 0.8),
                    reflectance=Specular(),
                )
            ]
        )
        world = _front_world()
        common = dict(width=32, height=32, spp=32, min_depth=0, use_nee=False)

        reference = _render(world, scene, rr_probability=1.0, seed=1, **common)
        roulette = _render(world, scene, rr_probability=0.5, seed=2, **common)

        ref_mean = reference.pixels.mean()
        assert abs(roulette.pixels.mean() - ref_mean) < 0.02 * ref_mean

    def test_certain_survival_is_deterministic(self):
        """Without roulette a mirror in front of the background is noise free."""
        scene = Scene(
            [
                SceneObject(
                    SphereFigure((0.0, 0.0, 0.0), 3.0),
                    color=Color(0.8, 0.8, 0.8),
                    reflectance=Specular(),
                )
            ]
        )
        picture = _render(
            _front_world(), scene, width=16, height=16, spp=4, rr_probability=1.0, min_depth=0
        )
        # Centre pixel looks straight at the mirror
        center = picture[8, 8].to_tuple()
        assert center == pytest.approx(tuple(0.8 * c for c in BACKGROUND), abs=1e-5)


class TestEstimatorAgreement:
    """BSDF sampling, NEE and NEE+MIS converge to the same picture."""

    @pytest.fixture(
        params=[Diffuse(), Phong(0.5, 0.4, 20.0), Phong(0.1, 0.8, 5.0)],
        ids=["diffuse", "phong-broad", "phong-sharp"],
    )
    def setup(self, request):
        scene = Scene(
            [
                SceneObject(
                    RhombusFigure((-10.0, 0.0, -10.0), (20.0, 0.0, 0.0), (0.0, 0.0, 20.0)),
                    color=Color(0.5, 0.5, 0.5),
                    reflectance=request.param,
                ),
                SceneObject(SphereFigure((0.0, 3.0, 0.0), 1.0), emission=Color(5.0, 5.0, 5.0)),
            ]
        )
        world = WorldSetting(
            camera=Camera(position=(0.0, 4.0, 10.0), direction=(0.0, -0.4, -1.0)),
            screen=Screen(width=8.0, height=8.0, dist=8.0),
        )
        common = dict(width=32, height=32, spp=64, background=(0.0, 0.0, 0.0))
        return world, scene, common

    def test_bsdf_only_matches_mis(self, setup):
        world, scene, common = setup
        mis = _render(world, scene, seed=1, **common)
        bsdf = _render(world, scene, seed=2, use_nee=False, **common)
        assert abs(bsdf.pixels.mean() - mis.pixels.mean()) < 0.05 * mis.pixels.mean()

    def test_nee_without_mis_matches_mis(self, setup):
        world, scene, common = setup
        mis = _render(world, scene, seed=1, **common)
        nee = _render(world, scene, seed=3, use_mis=False, **common)
        assert abs(nee.pixels.mean() - mis.pixels.mean()) < 0.05 * mis.pixels.mean()

    def test_mis_power_two_matches_balance(self, setup):
        world, scene, common = setup
        balance = _render(world, scene, seed=1, **common)
        power = _render(world, scene, seed=4, mis_power=2.0, **common)
        assert abs(power.pixels.mean() - balance.pixels.mean()) < 0.05 * balance.pixels.mean()


class TestGlassAndGloss:
    """Refraction and glossy spheres in a uniformly lit empty world."""

    BACKGROUND = (0.5, 0.5, 0.5)

    def _sphere_scene(self, reflectance):
        return Scene(
            [
                SceneObject(
                    SphereFigure((0.0, 0.0, 0.0), 3.0),
                    color=Color(1.0, 1.0, 1.0),
                    reflectance=reflectance,
                )
            ]
        )

    def test_clear_glass_conserves_energy(self):
        """Fresnel reflection plus transmission neither adds nor removes light.

        Every path through a white glass sphere ends in the uniform
        background, so the pixels covering the sphere match it on average.
        """
        picture = _render(
            _front_world(),
            self._sphere_scene(Refraction()),
            width=32,
            height=32,
            spp=16,
            seed=6,
            background=self.BACKGROUND,
        )
        # Central 12x12 block lies inside the silhouette of the sphere
        covered = picture.pixels[10:22, 10:22]
        assert np.isfinite(covered).all()
        assert abs(float(covered.mean()) - 0.5) < 0.03 * 0.5

    def test_glossy_sphere_renders_finite(self):
        picture = _render(
            _front_world(),
            self._sphere_scene(Glossy(0.2)),
            width=16,
            height=16,
            spp=4,
            seed=8,
            background=self.BACKGROUND,
        )
        assert np.isfinite(picture.pixels).all()
        assert picture.pixels.min() >= 0.0
        # Reflected background reaches the camera from the sphere centre
        assert picture[8, 8].luminance() > 0.0


class TestDeterminism:
    def _scene(self):
        from pathlight.scene.examples import cornell_box, cornell_box_world

        return cornell_box_world(24, 16), cornell_box()

    def test_same_seed_same_picture(self):
        world, scene = self._scene()
        a = _render(world, scene, width=24, height=16, spp=2, seed=9)
        b = _render(world, scene, width=24, height=16, spp=2, seed=9)
        assert np.array_equal(a.pixels, b.pixels)

    def test_different_seed_different_picture(self):
        world, scene = self._scene()
        a = _render(world, scene, width=24, height=16, spp=2, seed=9)
        b = _render(world, scene, width=24, height=16, spp=2, seed=10)
        assert not np.array_equal(a.pixels, b.pixels)


class TestIntegratorApi:
    @pytest.mark.parametrize(
        "pdf_a,pdf_b,power,expected",
        [
            (1.0, 1.0, 1.0, 0.5),
            (3.0, 1.0, 1.0, 0.75),
            (3.0, 1.0, 2.0, 0.9),
            (1.0, 0.0, 1.0, 1.0),
            (0.0, 1.0, 1.0, 0.0),
            (1.0, 1e6, 1.0, 1.0 / (1.0 + 1e6)),
        ],
    )
    def test_power_heuristic(self, pdf_a, pdf_b, power, expected):
        from pathlight.core.integrator import power_heuristic

        result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel(a: ti.f32, b: ti.f32, n: ti.f32):
            result[None] = power_heuristic(a, b, n)

        test_kernel(pdf_a, pdf_b, power)
        assert result[None] == pytest.approx(expected, rel=1e-5, abs=1e-9)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_depth": 0},
            {"min_depth": -1},
            {"rr_probability": 0.0},
            {"rr_probability": 1.5},
            {"mis_power": -1.0},
        ],
    )
    def test_configure_rejects_invalid(self, kwargs):
        from pathlight.core.integrator import configure_integrator

        with pytest.raises(ValueError):
            configure_integrator(**kwargs)

    @pytest.mark.parametrize("size", [(0, 10), (10, -1), (4096, 10)])
    def test_render_target_rejects_invalid(self, size):
        from pathlight.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_render_image_rejects_zero_spp(self):
        from pathlight.core.integrator import render_image, setup_render_target

        setup_render_target(4, 4)
        with pytest.raises(ValueError):
            render_image(spp=0)

    def test_picture_shape(self):
        from pathlight.core.integrator import get_picture_numpy, setup_render_target

        setup_render_target(7, 5)
        assert get_picture_numpy().shape == (5, 7, 3)
