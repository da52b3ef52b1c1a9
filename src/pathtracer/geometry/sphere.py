"""Sphere primitive and the hit record shared by all intersection code.

The intersection uses the reduced (half-b) quadratic. With oc pointing from
the ray origin to the sphere center, the ray O + tD meets the sphere where

    a*t^2 - 2*h*t + c = 0,   a = |D|^2,  h = D . oc,  c = |oc|^2 - r^2

so the roots are (h -/+ sqrt(h^2 - a*c)) / a. The nearer root is tried first
and each root must lie strictly inside the caller's interval.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.interval import Interval, interval_surrounds
from pathtracer.core.ray import Ray, ray_at, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material handle.

    Attributes:
        center: The center point of the sphere.
        radius: The radius of the sphere (never negative, see make_sphere).
        material_id: Index into the scene's material table.
    """

    center: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    A record with hit == 0 means "no hit"; its other fields are meaningless.

    Attributes:
        hit: 1 if the ray intersected a surface, 0 otherwise.
        t: The ray parameter of the intersection.
        point: The intersection point, ray_at(ray, t).
        normal: Unit surface normal, always pointing against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface, 0 if from
            inside.
        material_id: Material handle of the surface that was hit.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def no_hit() -> HitRecord:
    """Return an empty hit record (hit == 0)."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray: Ray, outward_normal: vec3):
    """Orient a surface normal against the incoming ray.

    Args:
        ray: The incoming ray.
        outward_normal: The geometric outward normal (unit length).

    Returns:
        A tuple of (front_face, normal). front_face is 1 when the ray hits the
        outside of the surface, and normal is the outward normal flipped if
        necessary so that dot(ray.direction, normal) <= 0.
    """
    front_face = 0
    normal = -outward_normal
    if tm.dot(ray.direction, outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, ray_t: Interval) -> HitRecord:
    """Test for ray-sphere intersection within an open parameter interval.

    Args:
        ray: The ray to test. The direction need not be normalized.
        sphere: The sphere to test against.
        ray_t: Accepted parameter range; a root counts only if it lies
            strictly between ray_t.min and ray_t.max.

    Returns:
        A HitRecord for the nearest accepted root, or a record with hit == 0.
        A tangent ray (zero discriminant) yields its single root.
    """
    oc = sphere.center - ray.origin
    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    # Taichi requires outer-scope declaration
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0
    hit_material = -1

    if discriminant >= 0.0:
        sqrtd = ti.sqrt(discriminant)

        # Nearest root first
        root = (h - sqrtd) / a
        valid = interval_surrounds(ray_t, root)
        if not valid:
            root = (h + sqrtd) / a
            valid = interval_surrounds(ray_t, root)

        if valid:
            did_hit = 1
            hit_t = root
            hit_point = ray_at(ray, root)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray, outward_normal)
            is_front_face = front_face
            hit_normal = normal
            hit_material = sphere.material_id

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=hit_material,
    )


@ti.func
def make_sphere(center: vec3, radius: ti.f64, material_id: ti.i32) -> Sphere:
    """Create a sphere, clamping a negative radius to zero.

    Args:
        center: The center point of the sphere.
        radius: The requested radius.
        material_id: Material handle for the sphere.

    Returns:
        A new Sphere instance with radius >= 0.
    """
    return Sphere(center=center, radius=tm.max(radius, 0.0), material_id=material_id)
