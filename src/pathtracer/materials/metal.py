"""Metal (specular reflective) material implementation.

Perfect metals (fuzz=0) reflect like a mirror. With fuzz > 0 the normalized
mirror direction is perturbed by a random unit vector scaled by fuzz, which
spreads reflections over a cone. Perturbed directions that end up below the
surface are absorbed.

The reflection formula is:
    R = I - 2(I . N)N

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction, state = scatter_metal(
    >>> #     albedo, fuzz, ray_in, rec, state
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, random_unit_vector, reflect, unit_vector, vec3
from pathtracer.geometry.sphere import HitRecord


@dataclass(frozen=True)
class Metal:
    """Host-side description of a reflective material.

    Attributes:
        albedo: Reflective color as an (R, G, B) tuple. Not validated.
        fuzz: Reflection blur, clamped to [0, 1] on construction.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        object.__setattr__(self, "fuzz", min(max(float(self.fuzz), 0.0), 1.0))


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f64, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter a ray off a metal surface.

    A random unit vector is drawn even when fuzz is 0, so the random stream
    advances the same way for every metal.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The reflection blur in [0, 1].
        ray_in: The incoming ray.
        rec: The hit record of the intersection.
        state: The random generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        did_scatter is 0 when the scattered direction does not point away
        from the surface (dot with the normal <= 0).
    """
    reflected = unit_vector(reflect(ray_in.direction, rec.normal))
    offset, s = random_unit_vector(state)
    direction = reflected + fuzz * offset

    did_scatter = 1
    if tm.dot(direction, rec.normal) <= 0.0:
        did_scatter = 0

    return did_scatter, albedo, direction, s


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 2048

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzzes = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple.
        fuzz: The reflection blur. Values outside [0, 1] are clamped.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzzes[idx] = min(max(fuzz, 0.0), 1.0)
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f64:
    """Get the fuzz for a metal material by index."""
    return metal_fuzzes[material_idx]


@ti.func
def scatter_metal_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter off a metal material looked up by registry index.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, rec, state)
