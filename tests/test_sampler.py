"""Tests for the per-lane random number generator."""

import pytest
import taichi as ti


class TestSampler:
    """Tests for lane seeding and uniform draws."""

    def _draw(self, n, seed, draws=4):
        from pathlight.core.sampler import random_float, seed_lanes

        out = ti.field(dtype=ti.f32, shape=(n, draws))
        seed_lanes(n, seed=seed)

        @ti.kernel
        def draw_kernel():
            for i in range(n):
                for j in range(draws):
                    out[i, j] = random_float(i)

        draw_kernel()
        return out.to_numpy()

    def test_values_in_unit_interval(self):
        values = self._draw(1024, seed=1)
        assert values.min() >= 0.0
        assert values.max() < 1.0

    def test_mean_is_one_half(self):
        values = self._draw(4096, seed=2)
        assert abs(values.mean() - 0.5) < 0.02

    def test_same_seed_same_stream(self):
        a = self._draw(64, seed=7)
        b = self._draw(64, seed=7)
        assert (a == b).all()

    def test_different_seed_different_stream(self):
        a = self._draw(64, seed=7)
        b = self._draw(64, seed=8)
        assert (a != b).any()

    def test_lanes_are_independent(self):
        values = self._draw(64, seed=9)
        assert (values[0] != values[1]).any()

    def test_normalize_seed(self):
        from pathlight.core.sampler import normalize_seed

        assert normalize_seed(5) == 5
        assert 0 <= normalize_seed(-1) <= 0x7FFFFFFF
        assert 0 <= normalize_seed(2**40 + 3) <= 0x7FFFFFFF

    @pytest.mark.parametrize("count", [0, -3])
    def test_seed_lanes_rejects_bad_count(self, count):
        from pathlight.core.sampler import seed_lanes

        with pytest.raises(ValueError):
            seed_lanes(count)
