"""Pytest configuration for renderer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    ti.init() discards every field declared before it, so it must run
    before any rtweekend module that declares fields is imported.
    """
    from rtweekend.core.runtime import init_runtime

    init_runtime(num_threads=4, arch="cpu")
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and restore the default sky around each test."""
    # Import here so Taichi is initialized first
    from rtweekend.core.integrator import reset_background
    from rtweekend.materials.dielectric import clear_dielectric_materials
    from rtweekend.materials.lambertian import clear_lambertian_materials
    from rtweekend.materials.metal import clear_metal_materials
    from rtweekend.scene.intersection import clear_scene
    from rtweekend.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        reset_background()

    _clear_all()

    yield

    _clear_all()


@pytest.fixture
def uniform_sky():
    """Replace the sky gradient with a uniform white background."""
    from rtweekend.core.integrator import SkyGradient, set_background

    sky = SkyGradient.uniform((1.0, 1.0, 1.0))
    set_background(sky)
    return sky
