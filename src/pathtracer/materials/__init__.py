"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick reflectance)

Each material module provides:
    - A frozen host-side dataclass describing the material in a scene
    - A scatter function returning (did_scatter, attenuation, direction, state)
    - Field storage (an arena per material type) filled by the scene upload

All scatter functions are Taichi functions and take an explicit random
generator state (see pathtracer.core.rng).
"""

from .dielectric import (
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_material_count,
    get_dielectric_refraction_index,
    reflectance,
    scatter_dielectric,
    scatter_dielectric_by_id,
)
from .lambertian import (
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    lambertian_direction,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    Metal,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "Lambertian",
    "lambertian_direction",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "Metal",
    "scatter_metal",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "Dielectric",
    "reflectance",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_refraction_index",
]
