"""Scene module for scene management and hit records.

Components:
    intersection: Sphere storage and nearest-hit search
    manager: Unified scene manager coordinating spheres and materials
    presets: Ready-made scenes

Scene data lives in module-level Taichi fields (Structure-of-Arrays layout)
and is read-only while a render runs.
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    remove_sphere,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
)
from .presets import (
    PRESETS,
    blue_red_scene,
    dielectric_spheres_scene,
    four_spheres_scene,
    hollow_glass_scene,
    random_spheres_scene,
    two_spheres_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "remove_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Presets
    "PRESETS",
    "two_spheres_scene",
    "four_spheres_scene",
    "dielectric_spheres_scene",
    "hollow_glass_scene",
    "blue_red_scene",
    "random_spheres_scene",
]
