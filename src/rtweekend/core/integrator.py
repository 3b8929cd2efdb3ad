"""Path tracing integrator for Monte Carlo light transport.

This module implements the rendering kernel: rays leave the camera, bounce
off surfaces according to their material, and pick up the sky color when
they escape the scene.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Iterative bounce loop carrying a running attenuation product
    - Sky gradient background, configurable through set_background()
    - Explicit random state threaded through every sampling call

The render kernel's outermost loop runs over image rows. Each row owns a
random state seeded from (seed, row) and writes only its own output row, so
rows can run on any thread in any order and still produce the same image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.core.integrator import render_rows, setup_render_target
    >>> from rtweekend.camera.thin_lens import default_camera, setup_camera
    >>>
    >>> setup_camera(default_camera())
    >>> setup_render_target(400, 225, seed=7)
    >>> render_rows(0, 225, samples_per_pixel=100, max_depth=50)
"""

from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from rtweekend.camera.thin_lens import get_ray, is_camera_initialized
from rtweekend.core.rng import random_f32, row_seeds, seed_for_partition
from rtweekend.materials.dielectric import (
    get_dielectric_ior,
    scatter_dielectric,
)
from rtweekend.materials.lambertian import (
    get_lambertian_albedo,
    scatter_lambertian,
)
from rtweekend.materials.metal import (
    get_metal_albedo,
    get_metal_fuzz,
    scatter_metal,
)
from rtweekend.scene.intersection import intersect_scene
from rtweekend.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Hits closer than T_MIN are ignored to suppress self-intersection
T_MIN = 0.001
T_MAX = tm.inf

# =============================================================================
# Background
# =============================================================================


@dataclass(frozen=True)
class SkyGradient:
    """Background seen by rays that escape the scene.

    The color is a linear blend from horizon (straight down) to zenith
    (straight up) on the y component of the unit ray direction. Equal
    horizon and zenith colors give a uniform background.

    Raises:
        ValueError: If any color component is negative.
    """

    horizon: tuple[float, float, float] = (1.0, 1.0, 1.0)
    zenith: tuple[float, float, float] = (0.5, 0.7, 1.0)

    def __post_init__(self) -> None:
        for name in ("horizon", "zenith"):
            color = getattr(self, name)
            if len(color) != 3 or any(c < 0.0 for c in color):
                raise ValueError(f"{name} must be three non-negative components, got {color}")

    @classmethod
    def uniform(cls, color: tuple[float, float, float]) -> "SkyGradient":
        return cls(horizon=color, zenith=color)


DEFAULT_SKY = SkyGradient()

_sky_horizon = ti.Vector.field(3, dtype=ti.f32, shape=())
_sky_zenith = ti.Vector.field(3, dtype=ti.f32, shape=())
_background = DEFAULT_SKY


def set_background(sky: SkyGradient) -> None:
    """Use sky as the background for subsequent renders."""
    global _background
    _background = sky
    _sky_horizon[None] = list(sky.horizon)
    _sky_zenith[None] = list(sky.zenith)


def reset_background() -> None:
    """Restore the default white-to-blue sky."""
    set_background(DEFAULT_SKY)


def get_background() -> SkyGradient:
    return _background


reset_background()


@ti.func
def sky_color(direction: vec3) -> vec3:
    unit_direction = tm.normalize(direction)
    t = 0.5 * (unit_direction.y + 1.0)
    return (1.0 - t) * _sky_horizon[None] + t * _sky_zenith[None]


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Gamma-corrected output, indexed [row, column] with row 0 at the top
_image = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# One random state per row
_row_states = ti.field(dtype=ti.u32, shape=MAX_IMAGE_HEIGHT)

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int, seed: int = 0) -> None:
    """Set the active image size, clear the image and seed every row.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        seed: Base seed combined with each row index.

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height

    states = np.zeros(MAX_IMAGE_HEIGHT, dtype=np.uint32)
    states[:height] = row_seeds(seed, height)
    _row_states.from_numpy(states)

    _image.fill(0.0)
    _render_target_initialized[None] = 1


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def get_image_numpy() -> np.ndarray:
    """Get the active region of the output as a (height, width, 3) float32 array.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _image.to_numpy()[:height, :width, :].astype(np.float32)


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scattering function of the hit material.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if hit from outside, 0 otherwise.
        state: The caller's random generator state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, new_state).
        did_scatter is 0 when the ray was absorbed or the material id is
        unknown.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    new_state = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_lambertian_albedo(type_index)
        scattered_direction, attenuation, new_state = scatter_lambertian(albedo, normal, state)
        did_scatter = 1

    elif mat_type == int(MaterialType.METAL):
        albedo = get_metal_albedo(type_index)
        fuzz = get_metal_fuzz(type_index)
        scattered_direction, attenuation, did_scatter, new_state = scatter_metal(
            albedo, fuzz, incident_direction, normal, state
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        ior = get_dielectric_ior(type_index)
        scattered_direction, attenuation, new_state = scatter_dielectric(
            ior, incident_direction, normal, front_face, state
        )
        did_scatter = 1

    return scattered_direction, attenuation, did_scatter, new_state


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_path(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32):
    """Trace a single path through the scene.

    Each bounce multiplies the throughput by the material's attenuation.
    A path that escapes returns throughput * sky; a path that is absorbed or
    runs out of bounces returns black.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be unit length).
        max_depth: Bounce budget. 0 always yields black.
        state: The caller's random generator state.

    Returns:
        A tuple of (radiance, new_state).
    """
    ray_origin = origin
    ray_direction = direction
    rng = state

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(ray_origin, ray_direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                radiance = throughput * sky_color(ray_direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter, rng = _scatter_material(
                    hit_record.material_id,
                    ray_direction,
                    hit_record.normal,
                    hit_record.front_face,
                    rng,
                )

                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    ray_origin = hit_record.point
                    ray_direction = scattered_direction

    return radiance, rng


@ti.func
def _sanitize(color: vec3) -> vec3:
    result = tm.max(color, vec3(0.0, 0.0, 0.0))
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return result


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    # Outermost loop is parallel; columns and samples run in order per row
    for row in range(row_start, row_end):
        state = _row_states[row]
        # Image row 0 is the top, where t = 1
        j = height - 1 - row

        for col in range(width):
            pixel = vec3(0.0, 0.0, 0.0)

            for _ in range(samples_per_pixel):
                ju, state = random_f32(state)
                jv, state = random_f32(state)
                s = (ti.cast(col, ti.f32) + ju) / ti.cast(width, ti.f32)
                t = (ti.cast(j, ti.f32) + jv) / ti.cast(height, ti.f32)

                ray, state = get_ray(s, t, state)
                color, state = trace_path(ray.origin, ray.direction, max_depth, state)
                pixel += _sanitize(color)

            # Gamma 2
            _image[row, col] = tm.sqrt(pixel / ti.cast(samples_per_pixel, ti.f32))


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, max_depth: ti.i32, state: ti.u32) -> vec3:
    color, _ = trace_path(origin, direction, max_depth, state)
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(row_start: int, row_end: int, samples_per_pixel: int, max_depth: int) -> None:
    """Render the rows [row_start, row_end) of the current render target.

    Args:
        row_start: First row to render (0 is the top of the image).
        row_end: One past the last row to render.
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Bounce budget per sample.

    Raises:
        RuntimeError: If the render target or camera has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()
    if not is_camera_initialized():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")

    width, height = get_image_dimensions()
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Row range [{row_start}, {row_end}) is outside [0, {height})")

    if row_start < row_end:
        _render_rows(row_start, row_end, width, height, samples_per_pixel, max_depth)


def trace_single_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace one path against the current scene and return its radiance.

    Python-callable entry point for tests and debugging. No camera or render
    target is needed and no gamma correction is applied.
    """
    color = _trace_single(
        vec3(*origin),
        vec3(*direction),
        max_depth,
        seed_for_partition(seed, 0),
    )
    return (float(color[0]), float(color[1]), float(color[2]))
