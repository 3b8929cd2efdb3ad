"""Camera module for primary ray generation.

Components:
    thin_lens: Look-at perspective camera with depth of field

Ray generation uses normalized image-plane coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    CameraConfig,
    cover_camera,
    default_camera,
    dof_camera,
    get_camera_info,
    get_ray,
    is_camera_initialized,
    setup_camera,
)

__all__ = [
    "CameraConfig",
    "setup_camera",
    "is_camera_initialized",
    "get_ray",
    "get_camera_info",
    "default_camera",
    "cover_camera",
    "dof_camera",
]
