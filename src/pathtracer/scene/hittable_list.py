"""Host-side scene description and upload into Taichi storage.

A scene is described in plain Python: a HittableList holding SphereInfo
entries, each referencing a material description (Lambertian, Metal or
Dielectric). Before rendering, HittableList.upload() writes everything into
Taichi fields:

- Each distinct material gets one slot in its type-specific arena, shared by
  every sphere that references it.
- A unified material_id space maps to (material_type, type_local_index),
  which the integrator uses for dispatch.
- Spheres go into the structure-of-arrays storage in scene.intersection.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.hittable_list import HittableList
    >>> from pathtracer.materials import Lambertian
    >>> world = HittableList()
    >>> world.add_sphere((0, 0, -1), 0.5, Lambertian((0.8, 0.3, 0.3)))
    >>> world.upload()
"""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import IntEnum
from typing import Union

import taichi as ti

from pathtracer.materials.dielectric import (
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
)
from pathtracer.materials.lambertian import (
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
)
from pathtracer.materials.metal import Metal, add_metal_material, clear_metal_materials
from pathtracer.scene.intersection import MAX_SPHERES, add_sphere, clear_scene

Material = Union[Lambertian, Metal, Dielectric]


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Every arena filling up at once is the most the unified table can hold
MAX_MATERIALS = 6144  # 2048 per type * 3 types

# Taichi fields for material type lookup
# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


def clear_scene_storage() -> None:
    """Clear every Taichi-side scene table (spheres and material arenas)."""
    clear_scene()
    clear_lambertian_materials()
    clear_metal_materials()
    clear_dielectric_materials()
    _clear_material_tracking()


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Args:
        material_id: The unified material ID.

    Returns:
        The index into the type-specific material array.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _register_material(material: Material) -> int:
    """Add a material to its type arena and the unified ID table.

    Returns:
        The unified material ID.

    Raises:
        RuntimeError: If the material type arena is full.
        TypeError: If the material is not a known material description.
    """
    if isinstance(material, Lambertian):
        material_type = MaterialType.LAMBERTIAN
        type_index = add_lambertian_material(material.albedo)
    elif isinstance(material, Metal):
        material_type = MaterialType.METAL
        type_index = add_metal_material(material.albedo, material.fuzz)
    elif isinstance(material, Dielectric):
        material_type = MaterialType.DIELECTRIC
        type_index = add_dielectric_material(material.refraction_index)
    else:
        raise TypeError(f"Unsupported material: {material!r}")

    material_id = num_materials[None]
    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


@dataclass(frozen=True)
class SphereInfo:
    """A sphere in a scene description.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere, clamped to >= 0 on construction.
        material: The material of the sphere.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material

    def __post_init__(self):
        object.__setattr__(self, "center", tuple(float(c) for c in self.center))
        object.__setattr__(self, "radius", max(float(self.radius), 0.0))


class HittableList:
    """Ordered collection of spheres making up a scene.

    Adding another HittableList appends its members in order, so nested
    lists are flattened and intersection still scans a single flat list.

    Example:
        >>> world = HittableList()
        >>> glass = Dielectric(1.5)
        >>> world.add_sphere((0, 1, 0), 1.0, glass)
        >>> world.add(SphereInfo((4, 1, 0), 1.0, Metal((0.7, 0.6, 0.5), 0.0)))
        >>> len(world)
        2
    """

    def __init__(self, objects=None) -> None:
        self._objects: list[SphereInfo] = []
        if objects is not None:
            for obj in objects:
                self.add(obj)

    def add(self, obj: Union[SphereInfo, "HittableList"]) -> None:
        """Append a sphere, or every member of another list.

        Raises:
            TypeError: If obj is neither a SphereInfo nor a HittableList.
        """
        if isinstance(obj, SphereInfo):
            self._objects.append(obj)
        elif isinstance(obj, HittableList):
            self._objects.extend(obj._objects)
        else:
            raise TypeError(f"Cannot add {type(obj).__name__} to a HittableList")

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> SphereInfo:
        """Create a sphere and append it.

        Returns:
            The SphereInfo that was added.
        """
        sphere = SphereInfo(center, radius, material)
        self._objects.append(sphere)
        return sphere

    def clear(self) -> None:
        """Remove every sphere."""
        self._objects.clear()

    def __len__(self) -> int:
        return len(self._objects)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self._objects)

    def __repr__(self) -> str:
        return f"HittableList(spheres={len(self._objects)}, materials={self.material_count()})"

    def material_count(self) -> int:
        """Number of distinct materials referenced by the spheres."""
        return len({sphere.material for sphere in self._objects})

    def upload(self) -> dict[Material, int]:
        """Write the scene into Taichi storage, replacing any previous scene.

        Returns:
            Mapping from each distinct material to its unified material ID.

        Raises:
            RuntimeError: If the scene exceeds sphere or material capacity.
            TypeError: If a sphere references an unknown material type.
        """
        if len(self._objects) > MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        clear_scene_storage()
        material_ids: dict[Material, int] = {}
        for sphere in self._objects:
            material_id = material_ids.get(sphere.material)
            if material_id is None:
                material_id = _register_material(sphere.material)
                material_ids[sphere.material] = material_id
            add_sphere(sphere.center, sphere.radius, material_id)
        return material_ids
