"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they inline into
the rendering kernels. Scenes are scanned linearly; there is no spatial
acceleration structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere, sphere_outward_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "sphere_outward_normal",
]
