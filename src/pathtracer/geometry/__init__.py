"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive, hit record and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so they can be called
from the render kernels. Every routine returns a HitRecord whose hit field
signals whether the ray intersected the shape.
"""

from .sphere import HitRecord, Sphere, hit_sphere, make_sphere, no_hit, set_face_normal

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "no_hit",
    "set_face_normal",
]
