"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters every incoming ray. The scattered direction is
the surface normal offset by a random unit vector, which concentrates
directions around the normal (cosine-like lobe). The attenuation is the
albedo, independent of direction.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction, state = scatter_lambertian(
    >>> #     albedo, rec, state
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti

from pathtracer.core.ray import near_zero, random_unit_vector, vec3
from pathtracer.geometry.sphere import HitRecord


@dataclass(frozen=True)
class Lambertian:
    """Host-side description of a diffuse material.

    Attributes:
        albedo: Diffuse reflectance as an (R, G, B) tuple. Not validated.
    """

    albedo: tuple[float, float, float]

    def __post_init__(self):
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))


@ti.func
def lambertian_direction(normal: vec3, offset: vec3) -> vec3:
    """Build a diffuse scatter direction from a normal and a random offset.

    If the offset almost exactly cancels the normal, the sum is a degenerate
    near-zero vector and the normal itself is used instead.

    Args:
        normal: The unit surface normal at the hit point.
        offset: A random unit vector.

    Returns:
        normal + offset, or normal when that sum is near zero.
    """
    direction = normal + offset
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def scatter_lambertian(albedo: vec3, rec: HitRecord, state: ti.u32):
    """Scatter a ray off a Lambertian surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        rec: The hit record of the intersection.
        state: The random generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        Lambertian surfaces always scatter, so did_scatter is 1.
    """
    offset, s = random_unit_vector(state)
    direction = lambertian_direction(rec.normal, offset)
    return 1, albedo, direction, s


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 2048

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(material_idx: ti.i32, rec: HitRecord, state: ti.u32):
    """Scatter off a Lambertian material looked up by registry index.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
    """
    albedo = get_lambertian_albedo(material_idx)
    return scatter_lambertian(albedo, rec, state)
