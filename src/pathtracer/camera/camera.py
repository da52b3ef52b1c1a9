"""Thin-lens camera: render configuration, derived viewing state and ray generation.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from focus_point toward camera_position (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport lies on the focal plane, focus_distance in front of the camera.
Pixel (row, col) is centered at pixel00 + col * delta_u + row * delta_v, with
row 0 at the top of the image. When lens_aperture > 0, ray origins are
sampled from a disk around the camera position, which blurs everything
that is not on the focal plane.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.camera import Camera
    >>> camera = Camera(aspect_ratio=16.0 / 9.0, image_width=400, vertical_fov=20.0)
    >>> camera.camera_position = (13.0, 2.0, 3.0)
    >>> camera.focus_point = (0.0, 0.0, 0.0)
    >>> image = camera.render(world)  # world is a HittableList
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import make_ray, random_in_unit_disk, vec3
from pathtracer.core.rng import random_double

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Render configuration.

    Every attribute has a usable default. Nothing is validated: the derived
    state is computed as-is in initialize().

    Attributes:
        aspect_ratio: Image width divided by height.
        image_width: Image width in pixels.
        samples_per_pixel: Number of jittered samples averaged per pixel. Must be
            at least 1; initialize() divides by it.
        max_depth: Maximum number of scattering events per path.
        vertical_fov: Vertical field of view in degrees.
        camera_position: Camera position in world space.
        focus_point: Point the camera looks at.
        up_direction: Up direction used to orient the camera.
        lens_aperture: Defocus cone angle in degrees. 0 disables depth of field.
        focus_distance: Distance from the camera to the plane in perfect focus.
    """

    aspect_ratio: float = 1.0
    image_width: int = 100
    samples_per_pixel: int = 10
    max_depth: int = 10
    vertical_fov: float = 90.0
    camera_position: tuple[float, float, float] = (0.0, 0.0, 0.0)
    focus_point: tuple[float, float, float] = (0.0, 0.0, -1.0)
    up_direction: tuple[float, float, float] = (0.0, 1.0, 0.0)
    lens_aperture: float = 0.0
    focus_distance: float = 10.0

    def initialize(self) -> "CameraState":
        """Derive the viewing state used during a render.

        Returns:
            The CameraState for the current configuration.
        """
        image_height = max(1, int(self.image_width / self.aspect_ratio))
        pixel_samples_scale = 1.0 / self.samples_per_pixel

        theta = math.radians(self.vertical_fov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h * self.focus_distance
        viewport_width = viewport_height * self.aspect_ratio

        position = np.array(self.camera_position, dtype=np.float64)
        focus_point = np.array(self.focus_point, dtype=np.float64)
        up = np.array(self.up_direction, dtype=np.float64)

        # w points from focus_point toward the camera (backward)
        w = position - focus_point
        w = w / np.linalg.norm(w)
        u = np.cross(up, w)
        u = u / np.linalg.norm(u)
        v = np.cross(w, u)

        # Horizontal span runs left to right, vertical span top to bottom
        horizontal_span = viewport_width * u
        vertical_span = -viewport_height * v

        pixel_delta_u = horizontal_span / self.image_width
        pixel_delta_v = vertical_span / image_height

        upper_left = (
            position - self.focus_distance * w - horizontal_span / 2.0 - vertical_span / 2.0
        )
        pixel00 = upper_left + 0.5 * (pixel_delta_u + pixel_delta_v)

        defocus_radius = self.focus_distance * math.tan(math.radians(self.lens_aperture / 2.0))

        return CameraState(
            image_width=self.image_width,
            image_height=image_height,
            samples_per_pixel=self.samples_per_pixel,
            max_depth=self.max_depth,
            pixel_samples_scale=pixel_samples_scale,
            center=position,
            u=u,
            v=v,
            w=w,
            pixel00=pixel00,
            pixel_delta_u=pixel_delta_u,
            pixel_delta_v=pixel_delta_v,
            lens_aperture=self.lens_aperture,
            defocus_disk_u=defocus_radius * u,
            defocus_disk_v=defocus_radius * v,
        )

    def render(self, world, sink=None, *, seed: int = 0, rows_per_batch: int = 1, callback=None):
        """Render a scene with this camera.

        Args:
            world: The HittableList to render.
            sink: Optional image sink receiving every pixel in row-major order.
            seed: Render seed. Equal seeds give identical images.
            rows_per_batch: Number of rows traced per kernel launch.
            callback: Optional callable(rows_done, total_rows) called after
                each batch of rows.

        Returns:
            The linear color image as a (height, width, 3) float64 array.
        """
        # Deferred import: the renderer module imports this one
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(self, world, seed=seed)
        return renderer.render(sink, rows_per_batch=rows_per_batch, callback=callback)


@dataclass(frozen=True, eq=False)
class CameraState:
    """Viewing state derived from a Camera, read-only during a render.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels (at least 1).
        samples_per_pixel: Samples per pixel.
        max_depth: Maximum path depth.
        pixel_samples_scale: 1 / samples_per_pixel.
        center: Camera position.
        u: Camera right vector.
        v: Camera up vector.
        w: Camera backward vector.
        pixel00: Center of the top-left pixel.
        pixel_delta_u: Offset from one pixel to the next column.
        pixel_delta_v: Offset from one pixel to the next row (downward).
        lens_aperture: Defocus cone angle in degrees.
        defocus_disk_u: Defocus disk horizontal radius vector.
        defocus_disk_v: Defocus disk vertical radius vector.
    """

    image_width: int
    image_height: int
    samples_per_pixel: int
    max_depth: int
    pixel_samples_scale: float
    center: np.ndarray
    u: np.ndarray
    v: np.ndarray
    w: np.ndarray
    pixel00: np.ndarray
    pixel_delta_u: np.ndarray
    pixel_delta_v: np.ndarray
    lens_aperture: float
    defocus_disk_u: np.ndarray
    defocus_disk_v: np.ndarray


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_center = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Pixel grid on the focal plane
_pixel00_loc = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_pixel_delta_v = ti.Vector.field(3, dtype=ti.f64, shape=())

# Defocus disk
_lens_aperture = ti.field(dtype=ti.f64, shape=())
_defocus_disk_u = ti.Vector.field(3, dtype=ti.f64, shape=())
_defocus_disk_v = ti.Vector.field(3, dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per render)
# =============================================================================


def setup_camera(state: CameraState) -> None:
    """Copy derived camera state into the Taichi fields read by get_ray.

    Args:
        state: The state returned by Camera.initialize().

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    _camera_center[None] = state.center.tolist()
    _camera_u[None] = state.u.tolist()
    _camera_v[None] = state.v.tolist()
    _camera_w[None] = state.w.tolist()
    _pixel00_loc[None] = state.pixel00.tolist()
    _pixel_delta_u[None] = state.pixel_delta_u.tolist()
    _pixel_delta_v[None] = state.pixel_delta_v.tolist()
    _lens_aperture[None] = state.lens_aperture
    _defocus_disk_u[None] = state.defocus_disk_u.tolist()
    _defocus_disk_v[None] = state.defocus_disk_v.tolist()


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(row: ti.i32, col: ti.i32, state: ti.u32):
    """Generate a jittered camera ray for pixel (row, col).

    The sample point is the pixel center offset by a uniform jitter in
    [-0.5, 0.5) along each pixel axis. The origin is the camera position,
    or a point on the defocus disk when the lens aperture is positive. The
    direction points from the origin to the sample and is not normalized.

    Args:
        row: Pixel row, 0 at the top of the image.
        col: Pixel column, 0 at the left of the image.
        state: The random generator state.

    Returns:
        A tuple of (ray, new_state).
    """
    jitter_x, s = random_double(state)
    jitter_y, s = random_double(s)
    offset_x = jitter_x - 0.5
    offset_y = jitter_y - 0.5

    pixel_sample = (
        _pixel00_loc[None]
        + (ti.cast(col, ti.f64) + offset_x) * _pixel_delta_u[None]
        + (ti.cast(row, ti.f64) + offset_y) * _pixel_delta_v[None]
    )

    origin = _camera_center[None]
    if _lens_aperture[None] > 0.0:
        p, s = random_in_unit_disk(s)
        origin = _camera_center[None] + p.x * _defocus_disk_u[None] + p.y * _defocus_disk_v[None]

    return make_ray(origin, pixel_sample - origin), s


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns a dictionary with camera vectors that can be inspected
    from Python. Useful for verifying camera setup.

    Returns:
        Dictionary with center, u, v, w, pixel00, pixel_delta_u,
        pixel_delta_v, defocus_disk_u and defocus_disk_v.
    """
    fields = {
        "center": _camera_center,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "pixel00": _pixel00_loc,
        "pixel_delta_u": _pixel_delta_u,
        "pixel_delta_v": _pixel_delta_v,
        "defocus_disk_u": _defocus_disk_u,
        "defocus_disk_v": _defocus_disk_v,
    }
    info = {}
    for name, field in fields.items():
        vec = field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
