"""Dielectric (glass/water) material implementation.

Dielectrics never absorb light. At each hit the ray either reflects or
refracts:

    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when ratio * sin(theta) > 1
    - Otherwise reflection with probability given by Schlick's approximation

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # did_scatter, attenuation, direction, state = scatter_dielectric(
    >>> #     refraction_index, ray_in, rec, state
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, reflect, refract, unit_vector, vec3
from pathtracer.core.rng import random_double
from pathtracer.geometry.sphere import HitRecord


@dataclass(frozen=True)
class Dielectric:
    """Host-side description of a transparent material.

    Attributes:
        refraction_index: Refractive index relative to the surrounding medium
            (glass 1.5, water 1.33). Not validated.
    """

    refraction_index: float

    def __post_init__(self):
        object.__setattr__(self, "refraction_index", float(self.refraction_index))


@ti.func
def reflectance(cosine: ti.f64, refraction_index: ti.f64) -> ti.f64:
    """Schlick's approximation of the Fresnel reflectance.

    Args:
        cosine: Cosine of the incident angle.
        refraction_index: Ratio of refractive indices at the interface.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - n) / (1 + n))^2.
    """
    r0 = ((1.0 - refraction_index) / (1.0 + refraction_index)) ** 2
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def scatter_dielectric(refraction_index: ti.f64, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter a ray through a dielectric surface.

    Args:
        refraction_index: Index of refraction of the material.
        ray_in: The incoming ray.
        rec: The hit record of the intersection. front_face selects whether
            the ray enters (ratio 1/n) or leaves (ratio n) the material.
        state: The random generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        Dielectrics always scatter with white attenuation.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    ri = refraction_index
    if rec.front_face:
        ri = 1.0 / refraction_index

    unit_direction = unit_vector(ray_in.direction)
    cos_theta = tm.min(tm.dot(-unit_direction, rec.normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    s = state
    must_reflect = ri * sin_theta > 1.0
    if not must_reflect:
        # The Fresnel draw is only consumed when refraction is possible
        u, s = random_double(s)
        must_reflect = reflectance(cos_theta, ri) > u

    direction = vec3(0.0, 0.0, 0.0)
    if must_reflect:
        direction = reflect(unit_direction, rec.normal)
    else:
        direction = refract(unit_direction, rec.normal, ri)

    return 1, attenuation, direction, s


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 2048

# Storage for dielectric material properties
dielectric_refraction_indices = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(refraction_index: float = 1.5) -> int:
    """Add a dielectric material to the material registry.

    Args:
        refraction_index: Index of refraction. Default is 1.5 (typical glass).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_refraction_indices[idx] = refraction_index
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_refraction_index(material_idx: ti.i32) -> ti.f64:
    """Get the index of refraction for a dielectric material by index."""
    return dielectric_refraction_indices[material_idx]


@ti.func
def scatter_dielectric_by_id(material_idx: ti.i32, ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Scatter off a dielectric material looked up by registry index.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
    """
    refraction_index = get_dielectric_refraction_index(material_idx)
    return scatter_dielectric(refraction_index, ray_in, rec, state)
