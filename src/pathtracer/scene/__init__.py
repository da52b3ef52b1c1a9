"""Scene module for scene description and ray-scene queries.

Components:
    hittable_list: Host-side scene description (spheres + materials) and
        its upload into Taichi storage
    intersection: Sphere storage fields and the closest-hit query
    presets: Ready-made demo scenes and their cameras

Scene data is organized for Taichi access:
    - Structure-of-Arrays layout for sphere data
    - Per-type material arenas with a unified material ID table
"""

from .hittable_list import (
    MAX_MATERIALS,
    HittableList,
    MaterialType,
    SphereInfo,
    clear_scene_storage,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Scene description
    "HittableList",
    "SphereInfo",
    "MaterialType",
    "MAX_MATERIALS",
    "clear_scene_storage",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
]
