"""Ray data structure and vector utilities.

This module provides the Ray dataclass and the vector helpers shared by the
geometry, material and camera modules. Everything here is a Taichi function so
it can be inlined into rendering kernels.

Vectors are ``taichi.math.vec3`` values and double as points, directions and
RGB colors. All helpers return new values; none of them mutate their inputs.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from rtweekend.core.ray import Ray, ray_at, vec3
    >>> @ti.kernel
    ... def point_on_ray() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 5.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length, although the camera and all materials emit unit
            directions.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared length of a vector, avoiding the square root."""
    return tm.dot(v, v)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Computes ``incident - 2 (incident . normal) normal``. The result has the
    same length as ``incident`` when ``normal`` is unit length.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, refraction_ratio: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    The outgoing direction is split into a component perpendicular to the
    normal, ``ratio * (d + cos_theta * n)``, and a parallel component
    ``-sqrt(|1 - |perp|^2|) * n``. The absolute value keeps the square root
    defined when called past the critical angle; callers decide total
    internal reflection beforehand.

    Args:
        incident: The incoming unit direction (pointing toward the surface).
        normal: The unit surface normal, facing against ``incident``.
        refraction_ratio: Incident index over transmitted index (eta / eta').

    Returns:
        The normalized refracted direction. With a ratio of 1 the incident
        direction is returned unchanged.
    """
    cos_theta = tm.min(-tm.dot(incident, normal), 1.0)
    r_out_perp = refraction_ratio * (incident + cos_theta * normal)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * normal
    return tm.normalize(r_out_perp + r_out_parallel)


@ti.func
def schlick_reflectance(cosine: ti.f32, refraction_ratio: ti.f32) -> ti.f32:
    """Angle-dependent reflectance using Schlick's approximation.

    ``r0 + (1 - r0) * (1 - cosine)^5`` with
    ``r0 = ((1 - ratio) / (1 + ratio))^2``.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        refraction_ratio: Ratio of refractive indices at the interface.

    Returns:
        The approximate reflectance in [0, 1].
    """
    r0 = (1.0 - refraction_ratio) / (1.0 + refraction_ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to catch degenerate scatter directions.

    Returns:
        1 if all components are below 1e-8 in magnitude, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s
