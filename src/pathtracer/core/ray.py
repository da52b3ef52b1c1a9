"""Ray data structure and vector utilities.

This module provides the fundamental Ray dataclass, the double-precision
vector type shared by the whole renderer, and the vector utility functions
used by geometry, materials and the camera. Random sampling helpers take an
explicit generator state (see :mod:`pathtracer.core.rng`) and return the
advanced state last.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.rng import random_double, random_double_range

# Double-precision 3-vector, used for points, directions and colors alike
vec3 = ti.types.vector(3, ti.f64)
color = vec3

# Components below this magnitude count as zero (see near_zero)
NEAR_ZERO_EPSILON = 1e-8

# Accepted squared-length range for rejection-sampled unit vectors
MIN_SAMPLE_LENGTH_SQUARED = 1e-160


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Not normalized: its length
            scales the ray parameter, and geometry code accounts for it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Any value is accepted; bounding is the
            caller's responsibility.

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
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product of two vectors."""
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    The input must have non-zero length; a zero vector produces NaNs.
    """
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check whether every component of a vector is close to zero.

    Used to detect degenerate scatter directions before they turn into NaNs.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect a vector about a normal.

    Computes v - 2 * dot(v, n) * n. The normal should be unit length.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal.

    Returns:
        The reflected direction.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit vector through a surface using Snell's law.

    The result is assembled from its components perpendicular and parallel
    to the normal. Both uv and n must be unit vectors; the caller handles
    total internal reflection.

    Args:
        uv: The unit incident direction.
        n: The unit surface normal, on the same side as the incident ray.
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(tm.dot(-uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3(state: ti.u32):
    """Draw a vector with components uniform in [0, 1).

    Returns:
        A tuple of (vector, new_state).
    """
    x, s = random_double(state)
    y, s = random_double(s)
    z, s = random_double(s)
    return vec3(x, y, z), s


@ti.func
def random_vec3_range(lo: ti.f64, hi: ti.f64, state: ti.u32):
    """Draw a vector with components uniform in [lo, hi).

    Returns:
        A tuple of (vector, new_state).
    """
    x, s = random_double_range(lo, hi, state)
    y, s = random_double_range(lo, hi, s)
    z, s = random_double_range(lo, hi, s)
    return vec3(x, y, z), s


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Rejection-samples the cube [-1, 1]^3, keeping points whose squared length
    lies in (1e-160, 1]. Normalizing a point inside the unit ball avoids the
    corner bias of normalizing a raw cube sample, and the lower bound keeps
    the normalization away from underflow.

    Returns:
        A tuple of (unit_vector, new_state).
    """
    result = vec3(0.0, 0.0, 1.0)
    s = state
    while True:
        p, s = random_vec3_range(-1.0, 1.0, s)
        lensq = length_squared(p)
        if MIN_SAMPLE_LENGTH_SQUARED < lensq and lensq <= 1.0:
            result = p / ti.sqrt(lensq)
            break
    return result, s


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Generate a random point inside the unit disk in the z=0 plane.

    Used for lens aperture sampling.

    Returns:
        A tuple of (point, new_state) with point = (x, y, 0), x^2 + y^2 < 1.
    """
    result = vec3(0.0, 0.0, 0.0)
    s = state
    while True:
        x, s = random_double_range(-1.0, 1.0, s)
        y, s = random_double_range(-1.0, 1.0, s)
        if x * x + y * y < 1.0:
            result = vec3(x, y, 0.0)
            break
    return result, s
