"""Thin-lens camera model for perspective ray generation with depth of field.

The camera supports:
- Look-at positioning (eye, look_at, up)
- Vertical field of view in degrees
- Arbitrary aspect ratios
- Depth of field through a finite aperture focused at focus_distance

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from look_at toward eye (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at focus_distance in front of the lens. Ray origins are
jittered over a disk of radius aperture / 2 spanned by u and v, so only
points on the focus plane stay sharp. An aperture of 0 gives a pinhole.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.camera.thin_lens import CameraConfig, setup_camera
    >>> camera = CameraConfig(
    ...     eye=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     up=(0.0, 1.0, 0.0),
    ...     vertical_fov_degrees=20.0,
    ...     aspect_ratio=16.0 / 9.0,
    ...     aperture=0.1,
    ...     focus_distance=10.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import make_ray
from rtweekend.core.rng import random_in_unit_disk

# =============================================================================
# Camera Configuration
# =============================================================================


@dataclass(frozen=True)
class CameraConfig:
    """High-level configuration for the thin-lens camera.

    Attributes:
        eye: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space.
        up: Up direction used to orient the camera (typically (0, 1, 0)).
        vertical_fov_degrees: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_distance: Distance from the eye to the plane in focus.

    Raises:
        ValueError: If any parameter is out of range or the view is
            degenerate (eye on look_at, up parallel to the view direction).
    """

    eye: tuple[float, float, float]
    look_at: tuple[float, float, float]
    up: tuple[float, float, float]
    vertical_fov_degrees: float
    aspect_ratio: float
    aperture: float = 0.0
    focus_distance: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vertical_fov_degrees < 180.0:
            raise ValueError(
                f"vertical_fov_degrees = {self.vertical_fov_degrees} is outside (0, 180)"
            )
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_distance <= 0.0:
            raise ValueError(f"focus_distance must be positive, got {self.focus_distance}")

        view = np.subtract(self.eye, self.look_at)
        if np.linalg.norm(view) < 1e-8:
            raise ValueError("eye and look_at must be distinct points")
        if np.linalg.norm(np.cross(self.up, view)) < 1e-8:
            raise ValueError("up must not be parallel to the view direction")

    @property
    def lens_radius(self) -> float:
        return self.aperture / 2.0


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Image plane extents at focus_distance
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())

_lens_radius = ti.field(dtype=ti.f32, shape=())

_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: CameraConfig) -> None:
    """Initialize camera state from configuration.

    Computes the orthonormal basis (u, v, w) and the image plane placed at
    focus_distance in front of the eye. Must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.
    """
    theta = math.radians(camera.vertical_fov_degrees)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    eye = np.array(camera.eye, dtype=np.float64)
    look_at = np.array(camera.look_at, dtype=np.float64)
    up = np.array(camera.up, dtype=np.float64)

    w = eye - look_at
    w = w / np.linalg.norm(w)

    u = np.cross(up, w)
    u = u / np.linalg.norm(u)

    v = np.cross(w, u)

    horizontal = camera.focus_distance * viewport_width * u
    vertical = camera.focus_distance * viewport_height * v
    lower_left = eye - horizontal / 2.0 - vertical / 2.0 - camera.focus_distance * w

    _camera_origin[None] = eye.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()
    _lens_radius[None] = camera.lens_radius
    _camera_initialized[None] = 1


def is_camera_initialized() -> bool:
    return bool(_camera_initialized[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, state: ti.u32):
    """Generate a ray through normalized image-plane coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    The origin is jittered over the lens disk; the direction aims at the
    same point of the focus plane regardless of the jitter.

    Args:
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].
        state: The caller's random generator state.

    Returns:
        A tuple of (ray, new_state). The ray direction is unit length.
    """
    rd, new_state = random_in_unit_disk(state)
    rd = _lens_radius[None] * rd
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    direction = tm.normalize(target - origin)

    return make_ray(origin, direction), new_state


# =============================================================================
# Camera Presets
# =============================================================================


def default_camera(aspect_ratio: float = 16.0 / 9.0) -> CameraConfig:
    """Camera at the origin looking down -z with a 90 degree vertical FOV."""
    return CameraConfig(
        eye=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        up=(0.0, 1.0, 0.0),
        vertical_fov_degrees=90.0,
        aspect_ratio=aspect_ratio,
    )


def cover_camera(aspect_ratio: float = 16.0 / 9.0) -> CameraConfig:
    """Narrow, slightly defocused view of the random-spheres scene."""
    return CameraConfig(
        eye=(13.0, 2.0, 3.0),
        look_at=(0.0, 0.0, 0.0),
        up=(0.0, 1.0, 0.0),
        vertical_fov_degrees=20.0,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_distance=10.0,
    )


def dof_camera(aspect_ratio: float = 16.0 / 9.0) -> CameraConfig:
    """Wide-aperture view focused on the sphere at (0, 0, -1)."""
    eye = (3.0, 3.0, 2.0)
    look_at = (0.0, 0.0, -1.0)
    return CameraConfig(
        eye=eye,
        look_at=look_at,
        up=(0.0, 1.0, 0.0),
        vertical_fov_degrees=20.0,
        aspect_ratio=aspect_ratio,
        aperture=2.0,
        focus_distance=float(np.linalg.norm(np.subtract(eye, look_at))),
    )


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        and lens_radius.
    """

    def _as_tuple(field: ti.Field) -> tuple[float, float, float]:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _as_tuple(_camera_origin),
        "u": _as_tuple(_camera_u),
        "v": _as_tuple(_camera_v),
        "w": _as_tuple(_camera_w),
        "horizontal": _as_tuple(_viewport_horizontal),
        "vertical": _as_tuple(_viewport_vertical),
        "lower_left": _as_tuple(_lower_left_corner),
        "lens_radius": (float(_lens_radius[None]),),
    }
