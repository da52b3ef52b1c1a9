"""Camera module for render configuration and primary ray generation.

Components:
    camera: Thin-lens camera with depth of field

Camera responsibilities:
    - Hold the render configuration (resolution, sampling, depth, view)
    - Derive the orthonormal basis, pixel grid and defocus disk
    - Generate jittered primary rays with per-pixel random streams

Ray generation addresses pixels by (row, col) with row 0 at the top of the
image, matching the order pixels are written to the image sink.
"""

from .camera import (
    Camera,
    CameraState,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "CameraState",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
