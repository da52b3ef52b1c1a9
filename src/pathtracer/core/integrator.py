"""Path tracing integrator for Monte Carlo light transport.

This module turns camera rays into colors. Each path is traced iteratively,
carrying the current ray, the remaining depth and the accumulated
attenuation (throughput):

    - depth exhausted: the path contributes black
    - ray escapes the scene: throughput * background gradient
    - material absorbs the ray: black
    - material scatters: throughput *= attenuation, continue from the hit point

The render kernel processes a band of image rows at a time. Every pixel owns
an independent random stream derived from the render seed and its linear
index, so the result does not depend on scheduling or band size.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from pathtracer.camera.camera import Camera, setup_camera
    >>> from pathtracer.core.integrator import render_pixel_rows
    >>> state = Camera(image_width=64).initialize()
    >>> setup_camera(state)
    >>> image = np.zeros((state.image_height, state.image_width, 3))
    >>> render_pixel_rows(image, 0, state.image_height, state, seed=0)
"""

import numpy as np
import taichi as ti

from pathtracer.camera.camera import CameraState, get_ray
from pathtracer.core.interval import INFINITY, make_interval
from pathtracer.core.ray import Ray, make_ray, unit_vector, vec3
from pathtracer.core.rng import seed_stream
from pathtracer.geometry.sphere import HitRecord
from pathtracer.materials.dielectric import scatter_dielectric_by_id
from pathtracer.materials.lambertian import scatter_lambertian_by_id
from pathtracer.materials.metal import scatter_metal_by_id
from pathtracer.scene.hittable_list import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)
from pathtracer.scene.intersection import intersect_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Lower bound of accepted hit distances, avoids self-intersection ("shadow acne")
T_MIN = 0.001

# Background gradient endpoints: horizon (white) and zenith (sky blue)
BACKGROUND_WHITE = (1.0, 1.0, 1.0)
BACKGROUND_SKY = (0.5, 0.7, 1.0)

# Seeds are reduced to the 32-bit state width
_SEED_MASK = 0xFFFFFFFF


# =============================================================================
# Background
# =============================================================================


@ti.func
def background(ray: Ray) -> vec3:
    """Color of a ray that escapes the scene.

    Blends linearly from white (direction pointing down) to sky blue
    (direction pointing up) on the normalized direction's y component.
    """
    unit_direction = unit_vector(ray.direction)
    a = 0.5 * (unit_direction.y + 1.0)
    white = vec3(BACKGROUND_WHITE[0], BACKGROUND_WHITE[1], BACKGROUND_WHITE[2])
    sky = vec3(BACKGROUND_SKY[0], BACKGROUND_SKY[1], BACKGROUND_SKY[2])
    return (1.0 - a) * white + a * sky


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(ray_in: Ray, rec: HitRecord, state: ti.u32):
    """Dispatch to the scatter function of the hit material.

    Args:
        ray_in: The incoming ray.
        rec: The hit record; rec.material_id selects the material.
        state: The random generator state.

    Returns:
        A tuple of (did_scatter, attenuation, scattered_direction, state).
        An unknown material ID absorbs the ray.
    """
    mat_type = get_material_type(rec.material_id)
    type_index = get_material_type_index(rec.material_id)

    # Default values
    did_scatter = 0
    attenuation = vec3(0.0, 0.0, 0.0)
    direction = vec3(0.0, 0.0, 0.0)
    s = state

    if mat_type == int(MaterialType.LAMBERTIAN):
        did_scatter, attenuation, direction, s = scatter_lambertian_by_id(type_index, rec, s)

    elif mat_type == int(MaterialType.METAL):
        did_scatter, attenuation, direction, s = scatter_metal_by_id(type_index, ray_in, rec, s)

    elif mat_type == int(MaterialType.DIELECTRIC):
        did_scatter, attenuation, direction, s = scatter_dielectric_by_id(
            type_index, ray_in, rec, s
        )

    return did_scatter, attenuation, direction, s


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(ray: Ray, depth: ti.i32, state: ti.u32):
    """Trace a path through the scene and return its color.

    Args:
        ray: The primary ray.
        depth: Maximum number of scattering events. 0 returns black.
        state: The random generator state.

    Returns:
        A tuple of (color, new_state).
    """
    origin = ray.origin
    direction = ray.direction
    throughput = vec3(1.0, 1.0, 1.0)
    result = vec3(0.0, 0.0, 0.0)
    s = state

    # Active flag for path continuation; a path that runs out of depth stays black
    active = 1

    for _ in range(depth):
        if active == 1:
            current = make_ray(origin, direction)
            rec = intersect_scene(current, make_interval(T_MIN, INFINITY))

            if rec.hit == 0:
                result = throughput * background(current)
                active = 0
            else:
                did_scatter, attenuation, scattered, s = scatter_material(current, rec, s)
                if did_scatter == 0:
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered

    return result, s


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    image: ti.types.ndarray(dtype=ti.f64, ndim=3),
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
    pixel_samples_scale: ti.f64,
    seed: ti.u32,
):
    """Render rows [row_start, row_end) into the image buffer.

    Each pixel averages samples_per_pixel jittered paths. Pixels are
    independent and run in parallel.
    """
    for row, col in ti.ndrange((row_start, row_end), width):
        state = seed_stream(seed, ti.cast(row * width + col, ti.u32))
        pixel_color = vec3(0.0, 0.0, 0.0)
        for _ in range(samples_per_pixel):
            ray, state = get_ray(row, col, state)
            sample_color, state = trace_ray(ray, max_depth, state)
            pixel_color += sample_color
        pixel_color *= pixel_samples_scale
        for c in ti.static(range(3)):
            image[row, col, c] = pixel_color[c]


@ti.kernel
def _trace_single_ray(
    ox: ti.f64,
    oy: ti.f64,
    oz: ti.f64,
    dx: ti.f64,
    dy: ti.f64,
    dz: ti.f64,
    depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    """Trace one ray and return its color.

    Used for testing and debugging individual paths.
    """
    ray = make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz))
    color, _ = trace_ray(ray, depth, seed_stream(seed, ti.u32(0)))
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def render_pixel_rows(
    image: np.ndarray,
    row_start: int,
    row_end: int,
    state: CameraState,
    seed: int = 0,
) -> None:
    """Render a band of rows into a linear image buffer.

    The camera fields must already hold state (see setup_camera) and the
    scene must be uploaded.

    Args:
        image: A (height, width, 3) float64 array, written in place.
        row_start: First row to render (0 is the top of the image).
        row_end: One past the last row to render.
        state: The derived camera state.
        seed: Render seed; only the low 32 bits are used.
    """
    _render_rows(
        image,
        row_start,
        row_end,
        state.image_width,
        state.samples_per_pixel,
        state.max_depth,
        state.pixel_samples_scale,
        seed & _SEED_MASK,
    )


def trace_ray_color(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray through the uploaded scene.

    This is a Python-callable function for testing. For rendering, use
    render_pixel_rows() which processes all pixels in parallel.

    Args:
        origin: The ray origin.
        direction: The ray direction (need not be normalized).
        depth: Maximum number of scattering events.
        seed: Seed of the random stream used by the path.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    color = _trace_single_ray(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        depth,
        seed & _SEED_MASK,
    )
    return (float(color[0]), float(color[1]), float(color[2]))
