"""Tests for the Color value type and kernel colour metrics."""

import pytest
import taichi as ti

from pathlight.core.color import Color


class TestColorArithmetic:
    """Tests for host-side colour operations."""

    def test_constructors(self):
        assert Color.black().is_black()
        assert Color.white() == Color(1.0, 1.0, 1.0)
        assert Color.from_tuple([0.1, 0.2, 0.3]) == Color(0.1, 0.2, 0.3)

    def test_from_tuple_wrong_length(self):
        with pytest.raises(ValueError):
            Color.from_tuple((1.0, 2.0))

    def test_add_scale_blend(self):
        a = Color(1.0, 2.0, 3.0)
        b = Color(0.5, 0.5, 2.0)
        assert a + b == Color(1.5, 2.5, 5.0)
        assert a * 2.0 == Color(2.0, 4.0, 6.0)
        assert 2.0 * a == Color(2.0, 4.0, 6.0)
        assert a.blend(b) == Color(0.5, 1.0, 6.0)

    def test_map_and_iter(self):
        c = Color(1.0, 4.0, 9.0).map(lambda x: x**0.5)
        assert tuple(c) == (1.0, 2.0, 3.0)

    def test_luminance_and_brightness(self):
        c = Color(1.0, 1.0, 1.0)
        assert abs(c.luminance() - 1.0) < 1e-12
        assert abs(Color(0.0, 3.0, 0.0).brightness() - 1.0) < 1e-12

    def test_adjust_luminance_preserves_ratio(self):
        c = Color(0.2, 0.4, 0.8).adjust_luminance(2.0)
        assert abs(c.luminance() - 2.0) < 1e-9
        assert abs(c.g / c.r - 2.0) < 1e-9

    def test_adjust_luminance_of_black_is_black(self):
        assert Color.black().adjust_luminance(5.0).is_black()


class TestGammaCorrection:
    """Tests for gamma correction."""

    @pytest.mark.parametrize("gamma", [0.5, 1.0, 2.2, 3.0])
    def test_round_trip(self, gamma):
        """gamma_correction(g) then raising to g returns the original."""
        original = Color(0.1, 0.5, 2.5)
        restored = original.gamma_correction(gamma).map(lambda c: c**gamma)
        for a, b in zip(original, restored):
            assert abs(a - b) < 1e-9

    @pytest.mark.parametrize("gamma", [0.0, -1.0])
    def test_rejects_non_positive_gamma(self, gamma):
        with pytest.raises(ValueError):
            Color(0.5, 0.5, 0.5).gamma_correction(gamma)


class TestByteConversion:
    def test_clamp_and_truncate(self):
        assert Color(0.5, 1.0, 2.0).as_rgb() == (127, 255, 255)
        assert Color(-1.0, 0.0, 0.999).as_rgb() == (0, 0, 254)


class TestKernelMetrics:
    """Tests for luminance/brightness inside kernels."""

    def test_kernel_luminance_matches_host(self):
        from pathlight.core.color import brightness, luminance

        results = ti.field(dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            c = ti.math.vec3(0.5, 1.0, 2.0)
            results[0] = luminance(c)
            results[1] = brightness(c)

        test_kernel()
        host = Color(0.5, 1.0, 2.0)
        assert abs(results[0] - host.luminance()) < 1e-5
        assert abs(results[1] - host.brightness()) < 1e-5

    @pytest.mark.parametrize(
        "module",
        [
            "pathlight.core",
            "pathlight.core.integrator",
            "pathlight.core.renderer",
            "pathlight.camera",
            "pathlight.geometry",
            "pathlight.materials",
            "pathlight.scene",
            "pathlight.preview",
        ],
    )
    def test_modules_with_kernel_helpers_import(self, module):
        """Kernel helper signatures must be concrete types, not strings."""
        import importlib

        assert importlib.import_module(module) is not None

    def test_kernel_helper_annotations_are_types(self):
        import inspect

        from pathlight.core import color

        source = inspect.getsource(color)
        assert "from __future__ import annotations" not in source
