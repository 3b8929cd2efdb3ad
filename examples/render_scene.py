#!/usr/bin/env python3
"""Render one of the preset scenes.

Usage:
    python examples/render_scene.py [options]

Options:
    --scene NAME        Preset scene (default: random_spheres)
    --camera NAME       Camera preset; defaults to the one framing the scene
    --width WIDTH       Image width in pixels (default: 400)
    --aspect RATIO      Aspect ratio width/height (default: 1.7778)
    --samples SAMPLES   Samples per pixel (default: 100)
    --depth DEPTH       Bounce budget per sample (default: 50)
    --seed SEED         Base seed for sampling and the random scene (default: 0)
    --threads N         Worker threads (default: all cores)
    --output OUTPUT     Output file, .png or .ppm (default: image.png)
    --quiet             Suppress progress output

Example:
    python examples/render_scene.py --scene hollow_glass --width 320 --samples 50
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from rtweekend.core.runtime import init_runtime

SCENES = (
    "two_spheres",
    "four_spheres",
    "dielectric_spheres",
    "hollow_glass",
    "blue_red",
    "random_spheres",
)

CAMERAS = ("default", "cover", "dof")

# Camera framing each scene when --camera is not given
DEFAULT_CAMERA_FOR_SCENE = {
    "dielectric_spheres": "dof",
    "random_spheres": "cover",
}


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--scene", choices=SCENES, default="random_spheres", help="Preset scene")
    parser.add_argument("--camera", choices=CAMERAS, default=None, help="Camera preset")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels (default: 400)")
    parser.add_argument(
        "--aspect",
        type=float,
        default=16.0 / 9.0,
        help="Aspect ratio width/height (default: 16/9)",
    )
    parser.add_argument("--samples", type=int, default=100, help="Samples per pixel (default: 100)")
    parser.add_argument("--depth", type=int, default=50, help="Bounce budget (default: 50)")
    parser.add_argument("--seed", type=int, default=0, help="Base seed (default: 0)")
    parser.add_argument("--threads", type=int, default=None, help="Worker threads (default: all cores)")
    parser.add_argument("--output", type=str, default="image.png", help="Output file (default: image.png)")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_scene(
    scene_name: str,
    camera_name: str | None = None,
    width: int = 400,
    aspect_ratio: float = 16.0 / 9.0,
    samples: int = 100,
    depth: int = 50,
    seed: int = 0,
    output_path: str = "image.png",
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from rtweekend.camera.thin_lens import cover_camera, default_camera, dof_camera, setup_camera
    from rtweekend.core.scheduler import Renderer, RenderParams
    from rtweekend.preview.export import save_image
    from rtweekend.scene.presets import PRESETS, random_spheres_scene

    cameras = {"default": default_camera, "cover": cover_camera, "dof": dof_camera}
    camera_name = camera_name or DEFAULT_CAMERA_FOR_SCENE.get(scene_name, "default")

    if scene_name == "random_spheres":
        scene = random_spheres_scene(seed=seed)
    else:
        scene = PRESETS[scene_name]()

    params = RenderParams.from_aspect_ratio(
        width,
        aspect_ratio,
        samples_per_pixel=samples,
        max_bounce_depth=depth,
        seed=seed,
    )

    if not quiet:
        print(
            f"Rendering {scene_name} ({scene.get_sphere_count()} spheres) with the "
            f"{camera_name} camera at {params.image_width}x{params.image_height}, "
            f"{samples} spp..."
        )

    setup_camera(cameras[camera_name](aspect_ratio))
    renderer = Renderer(params)

    start_time = time.time()

    def progress_callback(rows_done: int, total_rows: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(
                f"\r  Progress: {rows_done}/{total_rows} rows "
                f"({100.0 * rows_done / total_rows:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    renderer.render(callback=progress_callback)

    if not quiet:
        print()

    output_file = save_image(renderer.get_image(), output_path)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(level=logging.WARNING if args.quiet else logging.INFO)

    try:
        init_runtime(num_threads=args.threads)
        render_scene(
            scene_name=args.scene,
            camera_name=args.camera,
            width=args.width,
            aspect_ratio=args.aspect,
            samples=args.samples,
            depth=args.depth,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
