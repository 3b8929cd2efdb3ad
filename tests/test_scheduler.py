"""Tests for the row-partitioned render driver.

Tests cover:
- RenderParams validation and aspect-ratio construction
- Progressive band rendering and early stop
- Determinism: equal seeds give identical images regardless of band size
  and worker thread count
- The scene passed to render() is the one drawn
- Image orientation and energy bounds
"""

import logging
import os
import subprocess
import sys
import textwrap
from pathlib import Path

import numpy as np
import pytest


def _setup_small_scene():
    from rtweekend.camera.thin_lens import default_camera, setup_camera
    from rtweekend.scene.presets import two_spheres_scene

    two_spheres_scene()
    setup_camera(default_camera())


SRC_DIR = Path(__file__).resolve().parents[1] / "src"

# Renders the four-spheres scene in a fresh process with a given pool size
_THREADED_RENDER_SCRIPT = textwrap.dedent(
    """
    import sys

    import numpy as np

    from rtweekend.core.runtime import init_runtime

    init_runtime(num_threads=int(sys.argv[1]), arch="cpu")

    from rtweekend.camera.thin_lens import default_camera
    from rtweekend.core.scheduler import RenderParams, render
    from rtweekend.scene.presets import four_spheres_scene

    params = RenderParams(32, 18, samples_per_pixel=4, max_bounce_depth=10, seed=9)
    np.save(sys.argv[2], render(four_spheres_scene(), default_camera(), params))
    """
)


def _render_in_subprocess(num_threads: int, output: Path) -> np.ndarray:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    subprocess.run(
        [sys.executable, "-c", _THREADED_RENDER_SCRIPT, str(num_threads), str(output)],
        check=True,
        env=env,
        timeout=600,
    )
    return np.load(output)


class TestRenderParams:
    """Tests for render parameter validation."""

    def test_defaults(self):
        from rtweekend.core.scheduler import RenderParams

        params = RenderParams(image_width=40, image_height=30)
        assert params.samples_per_pixel == 100
        assert params.max_bounce_depth == 50
        assert params.seed == 0

    def test_from_aspect_ratio(self):
        from rtweekend.core.scheduler import RenderParams

        params = RenderParams.from_aspect_ratio(400, 16.0 / 9.0)
        assert params.image_width == 400
        assert params.image_height == 225

    def test_from_aspect_ratio_keeps_one_row(self):
        from rtweekend.core.scheduler import RenderParams

        params = RenderParams.from_aspect_ratio(2, 10.0)
        assert params.image_height == 1

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"image_width": 0, "image_height": 10},
            {"image_width": 10, "image_height": 0},
            {"image_width": 10, "image_height": 10, "samples_per_pixel": 0},
            {"image_width": 10, "image_height": 10, "max_bounce_depth": -1},
            {"image_width": 10, "image_height": 10, "seed": -1},
            {"image_width": 100000, "image_height": 10},
        ],
    )
    def test_rejects_invalid(self, kwargs):
        from rtweekend.core.scheduler import RenderParams

        with pytest.raises(ValueError):
            RenderParams(**kwargs)

    def test_rejects_invalid_aspect_ratio(self):
        from rtweekend.core.scheduler import RenderParams

        with pytest.raises(ValueError, match="aspect_ratio"):
            RenderParams.from_aspect_ratio(100, 0.0)


class TestRenderer:
    """Tests for band-by-band rendering."""

    def test_progressive_yields_per_band(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        _setup_small_scene()
        renderer = Renderer(RenderParams(16, 40, samples_per_pixel=1, max_bounce_depth=5))

        progress = list(renderer.render_progressive(rows_per_batch=16))

        assert progress == [(16, 40), (32, 40), (40, 40)]
        assert renderer.is_complete

    def test_early_stop_leaves_remaining_rows_black(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        _setup_small_scene()
        renderer = Renderer(RenderParams(16, 40, samples_per_pixel=1, max_bounce_depth=5))

        for rows_done, _ in renderer.render_progressive(rows_per_batch=8):
            if rows_done >= 16:
                break

        assert renderer.rows_done == 16
        assert not renderer.is_complete

        image = renderer.get_image()
        assert np.all(image[16:] == 0.0)
        assert np.any(image[:16] > 0.0)

    def test_resume_after_early_stop(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        _setup_small_scene()
        params = RenderParams(16, 24, samples_per_pixel=2, max_bounce_depth=5, seed=4)

        renderer = Renderer(params)
        for rows_done, _ in renderer.render_progressive(rows_per_batch=8):
            if rows_done >= 8:
                break
        renderer.render(rows_per_batch=8)
        resumed = renderer.get_image()

        renderer.reset()
        renderer.render()
        assert np.array_equal(resumed, renderer.get_image())

    def test_rejects_bad_batch_size(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        _setup_small_scene()
        renderer = Renderer(RenderParams(8, 8, samples_per_pixel=1))
        with pytest.raises(ValueError, match="rows_per_batch"):
            next(renderer.render_progressive(rows_per_batch=0))

    def test_callback_reports_progress(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        _setup_small_scene()
        renderer = Renderer(RenderParams(8, 10, samples_per_pixel=1, max_bounce_depth=3))
        calls = []
        renderer.render(callback=lambda done, total: calls.append((done, total)), rows_per_batch=4)

        assert calls == [(4, 10), (8, 10), (10, 10)]

    def test_repr(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        renderer = Renderer(RenderParams(8, 6, samples_per_pixel=3))
        assert repr(renderer) == "Renderer(width=8, height=6, spp=3, rows_done=0)"


class TestDeterminism:
    """Tests for reproducible output."""

    def test_same_seed_identical(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import four_spheres_scene

        params = RenderParams(24, 16, samples_per_pixel=4, max_bounce_depth=10, seed=11)
        first = render(four_spheres_scene(), default_camera(), params)
        second = render(four_spheres_scene(), default_camera(), params)

        assert np.array_equal(first, second)

    def test_different_seeds_differ(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import four_spheres_scene

        scene = four_spheres_scene()
        a = render(scene, default_camera(), RenderParams(24, 16, samples_per_pixel=4, seed=1))
        b = render(scene, default_camera(), RenderParams(24, 16, samples_per_pixel=4, seed=2))

        assert not np.array_equal(a, b)

    def test_band_size_does_not_change_pixels(self):
        from rtweekend.core.scheduler import Renderer, RenderParams

        _setup_small_scene()
        params = RenderParams(20, 12, samples_per_pixel=4, max_bounce_depth=10, seed=5)

        renderer = Renderer(params)
        renderer.render(rows_per_batch=1)
        one_row_bands = renderer.get_image()

        renderer.reset()
        renderer.render(rows_per_batch=12)
        single_band = renderer.get_image()

        assert np.array_equal(one_row_bands, single_band)


class TestImage:
    """Tests for the rendered image contents."""

    def test_shape_and_dtype(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import two_spheres_scene

        image = render(
            two_spheres_scene(),
            default_camera(),
            RenderParams(20, 10, samples_per_pixel=1, max_bounce_depth=5),
        )
        assert image.shape == (10, 20, 3)
        assert image.dtype == np.float32

    def test_zero_depth_is_black(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import two_spheres_scene

        image = render(
            two_spheres_scene(),
            default_camera(),
            RenderParams(16, 9, samples_per_pixel=2, max_bounce_depth=0),
        )
        assert np.all(image == 0.0)

    def test_empty_scene_renders(self, caplog):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.manager import SceneManager

        with caplog.at_level(logging.WARNING, logger="rtweekend.core.scheduler"):
            image = render(SceneManager(), default_camera(), RenderParams(8, 4, samples_per_pixel=1))

        assert "empty scene" in caplog.text
        assert np.all(image > 0.0)
        assert np.all(image <= 1.0 + 1e-6)

    def test_diffuse_never_adds_energy(self, uniform_sky):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, (0.5, 0.5, 0.5))
        image = render(scene, default_camera(), RenderParams(32, 18, samples_per_pixel=4, seed=3))

        assert np.all(image <= 1.0 + 1e-6)
        assert image.mean() < 1.0

    def test_left_blue_right_red(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import blue_red_scene

        image = render(
            blue_red_scene(),
            default_camera(),
            RenderParams(32, 18, samples_per_pixel=4, max_bounce_depth=10),
        )
        left = image[9, 8]
        right = image[9, 24]

        assert left[2] > left[0]
        assert right[0] > right[2]

    def test_sky_on_top_ground_on_bottom(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import two_spheres_scene

        image = render(
            two_spheres_scene(),
            default_camera(),
            RenderParams(32, 18, samples_per_pixel=4, max_bounce_depth=10),
        )
        top = image[0].mean(axis=0)
        bottom = image[-1].mean(axis=0)

        assert top[2] > top[0]
        assert bottom[0] > bottom[2]


class TestThreadCount:
    """Tests for independence from the worker pool size."""

    def test_one_and_eight_threads_identical(self, tmp_path):
        single = _render_in_subprocess(1, tmp_path / "threads_1.npy")
        pooled = _render_in_subprocess(8, tmp_path / "threads_8.npy")

        assert single.shape == (18, 32, 3)
        assert np.array_equal(single, pooled)


class TestSceneArgument:
    """Tests that render() draws the scene it is given."""

    def test_later_scene_does_not_leak_into_render(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.presets import blue_red_scene, two_spheres_scene

        params = RenderParams(16, 9, samples_per_pixel=2, max_bounce_depth=5, seed=1)
        first = two_spheres_scene()
        expected = render(first, default_camera(), params)

        blue_red_scene()
        got = render(first, default_camera(), params)

        assert first.get_sphere_count() == 2
        assert np.array_equal(got, expected)

    def test_render_activates_scene(self):
        from rtweekend.camera.thin_lens import default_camera
        from rtweekend.core.scheduler import RenderParams, render
        from rtweekend.scene.intersection import get_sphere_count
        from rtweekend.scene.presets import four_spheres_scene, hollow_glass_scene

        first = four_spheres_scene()
        second = hollow_glass_scene()
        assert not first.is_active()

        render(first, default_camera(), RenderParams(8, 4, samples_per_pixel=1, max_bounce_depth=2))

        assert first.is_active()
        assert not second.is_active()
        assert get_sphere_count() == 4
