"""Scene-level sphere storage and closest-hit queries.

Spheres are stored in Taichi fields (structure of arrays) and tested one by
one; there is no acceleration structure. Each sphere carries a material ID
that the integrator uses for shading.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.interval import Interval, make_interval
from pathtracer.core.ray import Ray
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, no_hit

# Maximum number of spheres supported in the scene
MAX_SPHERES = 2048

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The field data is overwritten when new
    spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Negative values are clamped to 0.
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = max(radius, 0.0)
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray: Ray, ray_t: Interval) -> HitRecord:
    """Find the closest sphere hit by a ray within an open interval.

    Each sphere is tested against [ray_t.min, closest_so_far], so a hit
    further than an earlier hit is never accepted and the nearest hit wins
    regardless of insertion order.

    Args:
        ray: The ray to trace.
        ray_t: Accepted parameter range (exclusive at both ends).

    Returns:
        The HitRecord of the closest hit, or a record with hit == 0.
    """
    closest_so_far = ray_t.max
    result = no_hit()

    n_spheres = num_spheres[None]
    for i in range(n_spheres):
        sphere = Sphere(
            center=sphere_centers[i],
            radius=sphere_radii[i],
            material_id=sphere_material_ids[i],
        )
        rec = hit_sphere(ray, sphere, make_interval(ray_t.min, closest_so_far))
        if rec.hit == 1:
            closest_so_far = rec.t
            result = rec

    return result
