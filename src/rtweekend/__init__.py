"""Taichi-based offline path tracer.

Renders scenes of spheres with diffuse, metal and glass materials through a
thin-lens camera into an in-memory float image. Rendering is deterministic
for a given seed, whatever the number of worker threads.

Subpackages:
    core: Vector utilities, random streams, runtime setup, integrator and scheduler
    geometry: Sphere primitive and ray-sphere intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene management and preset scenes
    camera: Thin-lens camera with depth of field
    preview: 8-bit quantization and image export

Call rtweekend.core.init_runtime() before importing modules that declare
Taichi fields (materials, scene, camera, integrator, scheduler).
"""

__version__ = "0.1.0"
