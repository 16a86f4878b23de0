"""Pytest configuration for pathlight tests.

Taichi is initialized once, before test collection: importing any
``pathlight`` module that declares Taichi fields requires an initialized
runtime, and a second ti.init() would invalidate those fields.
"""

import pytest
import taichi as ti


def pytest_configure(config):
    """Initialize Taichi on the CPU backend with a fixed seed."""
    ti.init(arch=ti.cpu, random_seed=42)


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene tables and reset the integrator around each test.

    This ensures tests are isolated from each other.
    """
    from pathlight.core.integrator import clear_render_target, configure_integrator
    from pathlight.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_render_target()
        configure_integrator()

    _clear_all()
    yield
    _clear_all()
