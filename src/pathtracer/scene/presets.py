"""Ready-made scenes with matching camera configurations.

create_final_scene() builds the classic "many spheres" scene: a huge ground
sphere, three large feature spheres (glass, diffuse, metal) and a grid of
small randomly colored spheres, viewed through a shallow depth of field.
create_three_spheres_scene() is a small scene for quick previews and tests.

Example:
    >>> import numpy as np
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from pathtracer.scene.presets import create_final_scene
    >>>
    >>> world, camera = create_final_scene(np.random.default_rng(42))
    >>> image = camera.render(world)
"""

import numpy as np

from pathtracer.camera.camera import Camera
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal
from pathtracer.scene.hittable_list import HittableList

# =============================================================================
# Final Scene Parameters
# =============================================================================

LARGE_SPHERE_RADIUS = 1.0
SMALL_SPHERE_RADIUS = 0.2

# Small spheres closer than this to a large sphere's center are skipped
MIN_CLEARANCE = LARGE_SPHERE_RADIUS + SMALL_SPHERE_RADIUS

# Grid of small spheres covers x, z in [-GRID_EXTENT, GRID_EXTENT)
GRID_EXTENT = 11

# Material choice thresholds for the small spheres
DIFFUSE_PROBABILITY = 0.3
METAL_PROBABILITY = 0.6  # cumulative; the remainder is glass

GLASS_INDEX = 1.5

LARGE_SPHERE_CENTERS = (
    (0.0, 1.0, 0.0),
    (-4.0, 1.0, 0.0),
    (4.0, 1.0, 0.0),
)


def create_final_scene(
    rng: np.random.Generator | None = None,
) -> tuple[HittableList, Camera]:
    """Create the many-spheres scene and its camera.

    Args:
        rng: Random generator for the small spheres. Defaults to a fresh
            unseeded generator.

    Returns:
        A tuple of (world, camera).
    """
    if rng is None:
        rng = np.random.default_rng()

    world = HittableList()

    world.add_sphere((0.0, -1000.0, 0.0), 1000.0, Lambertian((0.2, 0.2, 0.2)))
    world.add_sphere(LARGE_SPHERE_CENTERS[0], LARGE_SPHERE_RADIUS, Dielectric(GLASS_INDEX))
    world.add_sphere(LARGE_SPHERE_CENTERS[1], LARGE_SPHERE_RADIUS, Lambertian((0.4, 0.2, 0.1)))
    world.add_sphere(LARGE_SPHERE_CENTERS[2], LARGE_SPHERE_RADIUS, Metal((0.7, 0.6, 0.5), 0.0))

    large_centers = np.array(LARGE_SPHERE_CENTERS)

    for x in range(-GRID_EXTENT, GRID_EXTENT):
        for z in range(-GRID_EXTENT, GRID_EXTENT):
            choice = rng.random()
            center = np.array(
                [x + 0.9 * rng.random(), SMALL_SPHERE_RADIUS, z + 0.9 * rng.random()]
            )

            distances = np.linalg.norm(large_centers - center, axis=1)
            if np.any(distances <= MIN_CLEARANCE):
                continue

            if choice < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                material = Lambertian(tuple(albedo))
            elif choice < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, 3)
                fuzz = rng.uniform(0.0, 0.5)
                material = Metal(tuple(albedo), fuzz)
            else:
                material = Dielectric(GLASS_INDEX)

            world.add_sphere(tuple(center), SMALL_SPHERE_RADIUS, material)

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=720,
        samples_per_pixel=10,
        max_depth=25,
        vertical_fov=20.0,
        camera_position=(13.0, 2.0, 3.0),
        focus_point=(0.0, 0.0, 0.0),
        up_direction=(0.0, 1.0, 0.0),
        lens_aperture=0.2,
        focus_distance=10.0,
    )

    return world, camera


def create_three_spheres_scene() -> tuple[HittableList, Camera]:
    """Create a small scene with one sphere of each material.

    Ground (diffuse yellow-green), a diffuse blue center sphere, a glass
    sphere on the left and a fuzzy gold metal sphere on the right, viewed
    from slightly above.

    Returns:
        A tuple of (world, camera).
    """
    world = HittableList()

    world.add_sphere((0.0, -100.5, -1.0), 100.0, Lambertian((0.8, 0.8, 0.0)))
    world.add_sphere((0.0, 0.0, -1.2), 0.5, Lambertian((0.1, 0.2, 0.5)))
    world.add_sphere((-1.0, 0.0, -1.0), 0.5, Dielectric(GLASS_INDEX))
    world.add_sphere((1.0, 0.0, -1.0), 0.5, Metal((0.8, 0.6, 0.2), 0.3))

    camera = Camera(
        aspect_ratio=16.0 / 9.0,
        image_width=400,
        samples_per_pixel=10,
        max_depth=10,
        vertical_fov=40.0,
        camera_position=(0.0, 0.5, 1.5),
        focus_point=(0.0, 0.0, -1.0),
        up_direction=(0.0, 1.0, 0.0),
        lens_aperture=0.0,
        focus_distance=2.9,
    )

    return world, camera
