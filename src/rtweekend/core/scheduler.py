"""Row-partitioned render driver.

A render is split into bands of rows. Each band is one kernel launch whose
rows are spread over the Taichi worker pool; every row carries its own
random state derived from (seed, row). Bands run one after another, which
gives natural points for progress reporting and cooperative cancellation
without changing any pixel.

Example:
    >>> from rtweekend.core.runtime import init_runtime
    >>> init_runtime(num_threads=4)
    >>> from rtweekend.camera.thin_lens import cover_camera
    >>> from rtweekend.core.scheduler import RenderParams, render
    >>> from rtweekend.scene.presets import random_spheres_scene
    >>>
    >>> scene = random_spheres_scene(seed=3)
    >>> params = RenderParams.from_aspect_ratio(400, 16 / 9, samples_per_pixel=10)
    >>> image = render(scene, cover_camera(), params)
    >>> image.shape
    (225, 400, 3)
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from rtweekend.camera.thin_lens import CameraConfig, setup_camera
from rtweekend.core.integrator import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    get_image_numpy,
    render_rows,
    setup_render_target,
)
from rtweekend.scene.manager import SceneManager

logger = logging.getLogger(__name__)

# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]

DEFAULT_ROWS_PER_BATCH = 16


@dataclass(frozen=True)
class RenderParams:
    """Render parameters.

    Attributes:
        image_width: Output width in pixels.
        image_height: Output height in pixels.
        samples_per_pixel: Jittered samples averaged per pixel.
        max_bounce_depth: Bounce budget per sample. 0 renders black.
        seed: Base seed. Equal seeds give identical images.

    Raises:
        ValueError: If any parameter is out of range.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int = 100
    max_bounce_depth: int = 50
    seed: int = 0

    def __post_init__(self) -> None:
        if not 1 <= self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(f"image_width must be in [1, {MAX_IMAGE_WIDTH}], got {self.image_width}")
        if not 1 <= self.image_height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"image_height must be in [1, {MAX_IMAGE_HEIGHT}], got {self.image_height}"
            )
        if self.samples_per_pixel < 1:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_bounce_depth < 0:
            raise ValueError(f"max_bounce_depth must be non-negative, got {self.max_bounce_depth}")
        if self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")

    @classmethod
    def from_aspect_ratio(
        cls,
        image_width: int,
        aspect_ratio: float,
        samples_per_pixel: int = 100,
        max_bounce_depth: int = 50,
        seed: int = 0,
    ) -> "RenderParams":
        """Build params whose height follows the width and aspect ratio."""
        if aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        return cls(
            image_width=image_width,
            image_height=max(1, int(image_width / aspect_ratio)),
            samples_per_pixel=samples_per_pixel,
            max_bounce_depth=max_bounce_depth,
            seed=seed,
        )


class Renderer:
    """Drives a render band by band into the shared output buffer.

    The scene and camera must be set up before rendering; the renderer only
    owns the render target. Creating a Renderer (or calling reset()) seeds
    every row, so rendering again after reset() reproduces the same image.

    Attributes:
        params: The render parameters.
    """

    def __init__(self, params: RenderParams) -> None:
        self.params = params
        self._rows_done = 0
        self.reset()

    @property
    def width(self) -> int:
        return self.params.image_width

    @property
    def height(self) -> int:
        return self.params.image_height

    @property
    def rows_done(self) -> int:
        """Number of rows rendered since the last reset."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        return self._rows_done >= self.height

    def reset(self) -> None:
        """Clear the output and reseed every row."""
        setup_render_target(self.width, self.height, self.params.seed)
        self._rows_done = 0

    def render_progressive(
        self,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the remaining rows, yielding progress after each band.

        Stopping iteration early leaves the rows rendered so far in the
        output; resuming the generator (or a new one) continues where it
        stopped.

        Args:
            rows_per_batch: Rows per kernel launch.

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            ValueError: If rows_per_batch is not positive.
            RuntimeError: If the camera has not been set up.
        """
        if rows_per_batch < 1:
            raise ValueError(f"rows_per_batch must be positive, got {rows_per_batch}")

        while not self.is_complete:
            row_start = self._rows_done
            row_end = min(row_start + rows_per_batch, self.height)
            render_rows(
                row_start,
                row_end,
                self.params.samples_per_pixel,
                self.params.max_bounce_depth,
            )
            self._rows_done = row_end
            logger.debug("Rendered rows %d-%d of %d", row_start, row_end - 1, self.height)
            yield (self._rows_done, self.height)

    def render(
        self,
        callback: ProgressCallback | None = None,
        rows_per_batch: int = DEFAULT_ROWS_PER_BATCH,
    ) -> None:
        """Render all remaining rows.

        Args:
            callback: Optional function called after each band with
                (rows_done, total_rows).
            rows_per_batch: Rows per kernel launch.
        """
        start = time.perf_counter()
        logger.info(
            "Rendering %dx%d, %d spp, depth %d, seed %d",
            self.width,
            self.height,
            self.params.samples_per_pixel,
            self.params.max_bounce_depth,
            self.params.seed,
        )

        for rows_done, total_rows in self.render_progressive(rows_per_batch):
            if callback is not None:
                callback(rows_done, total_rows)

        logger.info("Render finished in %.2fs", time.perf_counter() - start)

    def get_image(self) -> npt.NDArray[np.float32]:
        """Get the output as a (height, width, 3) float32 array.

        Row 0 is the top of the image. Values are gamma-2 corrected; rows not
        rendered yet are black.
        """
        return get_image_numpy()

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"spp={self.params.samples_per_pixel}, rows_done={self._rows_done})"
        )


def render(
    scene: SceneManager,
    camera: CameraConfig,
    params: RenderParams,
    callback: ProgressCallback | None = None,
) -> npt.NDArray[np.float32]:
    """Render scene through camera and return the image.

    Args:
        scene: The scene to render. It is activated first, so scenes built
            after it do not change what is drawn.
        camera: The camera configuration.
        params: Image size, sampling and seed.
        callback: Optional progress callback, see Renderer.render().

    Returns:
        A (height, width, 3) float32 array of gamma-corrected colors, row 0
        at the top.
    """
    scene.activate()
    if scene.is_empty():
        logger.warning("Rendering an empty scene; the image will only show the background")

    setup_camera(camera)
    renderer = Renderer(params)
    renderer.render(callback=callback)
    return renderer.get_image()
