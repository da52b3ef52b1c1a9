"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector math and random direction sampling
    interval: Closed real intervals for ray bounds and color clamping
    rng: Counter-based random streams, one per pixel
    integrator: Path tracing light transport (trace_ray and the render kernel)
    renderer: Render driver feeding pixels to an image sink
    progress: Scanline progress reporting

All compute-intensive operations use Taichi kernels.
"""

from .interval import (
    EMPTY,
    INFINITY,
    UNIVERSE,
    Interval,
    empty_interval,
    interval_clamp,
    interval_contains,
    interval_size,
    interval_surrounds,
    make_interval,
    universe_interval,
)
from .ray import (
    Ray,
    color,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    random_in_unit_disk,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    ray_at,
    reflect,
    refract,
    unit_vector,
    vec3,
)
from .rng import next_u32, pcg_hash, random_double, random_double_range, seed_stream

# Note: integrator and renderer are NOT imported here. They depend on the scene
# storage fields, which must be created after ti.init(). Import them directly:
#   from pathtracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "color",
    "length",
    "length_squared",
    "dot",
    "cross",
    "unit_vector",
    "near_zero",
    "reflect",
    "refract",
    "random_vec3",
    "random_vec3_range",
    "random_unit_vector",
    "random_in_unit_disk",
    "Interval",
    "make_interval",
    "empty_interval",
    "universe_interval",
    "interval_size",
    "interval_contains",
    "interval_surrounds",
    "interval_clamp",
    "INFINITY",
    "EMPTY",
    "UNIVERSE",
    "pcg_hash",
    "seed_stream",
    "next_u32",
    "random_double",
    "random_double_range",
]
