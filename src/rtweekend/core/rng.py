"""Explicit-state random number generation for Monte Carlo sampling.

Every random draw in the renderer goes through this module. Instead of a
global generator, each function receives a 32-bit xorshift state and returns
the advanced state next to the sampled value::

    u, state = random_f32(state)
    direction, state = random_unit_vector(state)

The render kernel gives every image row its own state, seeded on the host by
row_seeds(), so a row's samples do not depend on which thread renders it or
in which order rows are scheduled.

A zero state is a fixed point of xorshift; seeds are therefore never zero.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from rtweekend.core.ray import vec3

# Scale mapping the top 24 bits of a state onto [0, 1)
_INV_2_24 = 1.0 / 16777216.0

# Substitute for a zero seed
_FALLBACK_SEED = 0x9E3779B9


@ti.func
def next_state(state: ti.u32) -> ti.u32:
    """Advance a xorshift32 generator by one step."""
    x = state
    x ^= x << 13
    x ^= ti.bit_shr(x, 17)
    x ^= x << 5
    return x


@ti.func
def random_f32(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state (non-zero).

    Returns:
        A tuple of (value, new_state).
    """
    new_state = next_state(state)
    value = ti.cast(ti.bit_shr(new_state, 8), ti.f32) * _INV_2_24
    return value, new_state


@ti.func
def random_between(lo: ti.f32, hi: ti.f32, state: ti.u32):
    """Draw a uniform float in [lo, hi).

    Returns:
        A tuple of (value, new_state).
    """
    u, new_state = random_f32(state)
    return lo + (hi - lo) * u, new_state


@ti.func
def random_unit_vector(state: ti.u32):
    """Draw a direction uniformly distributed on the unit sphere.

    Uses the inverse-CDF construction (uniform z, uniform azimuth), which
    always yields a unit vector and consumes exactly two draws.

    Returns:
        A tuple of (unit_vector, new_state).
    """
    u1, s1 = random_f32(state)
    u2, s2 = random_f32(s1)
    z = 1.0 - 2.0 * u1
    r = tm.sqrt(tm.max(0.0, 1.0 - z * z))
    phi = 2.0 * tm.pi * u2
    return vec3(r * tm.cos(phi), r * tm.sin(phi), z), s2


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Draw a point uniformly distributed in the unit disk of the xy-plane.

    Used for lens sampling (depth of field).

    Returns:
        A tuple of (point, new_state) where point is (x, y, 0) with
        x^2 + y^2 < 1.
    """
    u1, s1 = random_f32(state)
    u2, s2 = random_f32(s1)
    r = tm.sqrt(u1)
    phi = 2.0 * tm.pi * u2
    return vec3(r * tm.cos(phi), r * tm.sin(phi), 0.0), s2


# =============================================================================
# Host-side seeding
# =============================================================================


def seed_for_partition(seed: int, partition: int) -> int:
    """Derive the generator state for one partition of the image.

    Args:
        seed: The base seed of the render (non-negative).
        partition: The partition index (image row).

    Returns:
        A non-zero 32-bit state.
    """
    state = int(np.random.SeedSequence([seed, partition]).generate_state(1, dtype=np.uint32)[0])
    return state if state != 0 else _FALLBACK_SEED


def row_seeds(seed: int, height: int) -> npt.NDArray[np.uint32]:
    """Derive one generator state per image row.

    Args:
        seed: The base seed of the render (non-negative).
        height: Number of rows.

    Returns:
        Array of shape (height,) with dtype uint32, all entries non-zero.
    """
    return np.array([seed_for_partition(seed, row) for row in range(height)], dtype=np.uint32)
