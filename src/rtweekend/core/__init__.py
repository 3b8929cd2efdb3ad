"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    rng: Explicit-state random number generation and per-row seeding
    runtime: Taichi runtime initialisation (worker pool size, backend)
    integrator: Path tracing loop, material dispatch and render kernel
    scheduler: Render parameters and the row-partitioned render driver

Note: integrator and scheduler are NOT imported here because they declare
Taichi fields. Import them directly once Taichi has been initialised.
"""

from .ray import (
    Ray,
    length_squared,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .rng import (
    next_state,
    random_between,
    random_f32,
    random_in_unit_disk,
    random_unit_vector,
    row_seeds,
    seed_for_partition,
)
from .runtime import init_runtime

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length_squared",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "next_state",
    "random_f32",
    "random_between",
    "random_unit_vector",
    "random_in_unit_disk",
    "seed_for_partition",
    "row_seeds",
    "init_runtime",
]
