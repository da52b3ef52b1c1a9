"""Render driver that runs the integrator band by band and feeds an image sink.

The Renderer wraps the core integrator to provide:
- Rendering in bands of rows, one kernel launch per band
- Progress callbacks or a generator interface for UI updates and
  cooperative cancellation between bands
- Delivery of finished pixels to an image sink in row-major order

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64, fast_math=False)
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.output.ppm import PPMSink
    >>> from pathtracer.scene.presets import create_three_spheres_scene
    >>>
    >>> world, camera = create_three_spheres_scene()
    >>> renderer = Renderer(camera, world, seed=7)
    >>> with PPMSink.open("output/image.ppm") as sink:
    ...     renderer.render(sink, rows_per_batch=8)
"""

from collections.abc import Callable, Generator

import numpy as np
import numpy.typing as npt

from pathtracer.camera.camera import Camera, setup_camera
from pathtracer.core.integrator import render_pixel_rows
from pathtracer.scene.hittable_list import HittableList

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders one scene through one camera into a linear color buffer.

    Construction derives the camera state and uploads the scene into Taichi
    storage. Each render uploads both again, so several renderers can take
    turns. Rendering the same scene with the same camera and seed always
    produces the same image, whatever the band size.

    Attributes:
        camera: The camera configuration.
        world: The scene being rendered.
        seed: The render seed.
    """

    def __init__(self, camera: Camera, world: HittableList, *, seed: int = 0) -> None:
        """Initialize the renderer.

        Args:
            camera: The camera configuration.
            world: The scene to render.
            seed: Render seed for the per-pixel random streams.

        Raises:
            RuntimeError: If the scene exceeds the sphere or material capacity.
        """
        self.camera = camera
        self.world = world
        self.seed = seed
        self._state = camera.initialize()
        self._image = np.zeros((self._state.image_height, self._state.image_width, 3))
        self._rows_done = 0
        world.upload()

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._state.image_width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._state.image_height

    @property
    def rows_done(self) -> int:
        """Get the number of rows rendered so far."""
        return self._rows_done

    def reset(self) -> None:
        """Clear the image buffer so the next render starts from the top."""
        self._image.fill(0.0)
        self._rows_done = 0

    def render(
        self,
        sink=None,
        rows_per_batch: int = 1,
        callback: ProgressCallback | None = None,
    ) -> npt.NDArray[np.float64]:
        """Render the whole image.

        Args:
            sink: Optional image sink receiving every pixel.
            rows_per_batch: Number of rows rendered per kernel launch.
            callback: Optional callback called after each band.
                Receives (rows_done, total_rows).

        Returns:
            The linear color image as a (height, width, 3) float64 array.

        Example:
            >>> def progress(done, total):
            ...     print(f"Progress: {done}/{total} rows")
            >>> renderer.render(rows_per_batch=16, callback=progress)
        """
        for rows_done, total_rows in self.render_progressive(sink, rows_per_batch):
            if callback is not None:
                callback(rows_done, total_rows)
        return self.get_image_numpy()

    def render_progressive(
        self,
        sink=None,
        rows_per_batch: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render the image band by band, yielding progress after each band.

        Closing the generator early stops the render between bands; the sink
        then has received the finished rows but no end() call.

        Args:
            sink: Optional image sink. begin() is called before the first band,
                write_color() for each pixel of a finished band in row-major
                order, and end() after the last band.
            rows_per_batch: Number of rows rendered per kernel launch.

        Yields:
            Tuple of (rows_done, total_rows).

        Example:
            >>> for done, total in renderer.render_progressive(rows_per_batch=4):
            ...     if cancelled():
            ...         break
        """
        # Scene and camera storage is shared by every Renderer
        self.reset()
        self.world.upload()
        setup_camera(self._state)

        height = self._state.image_height
        batch = max(1, rows_per_batch)

        if sink is not None:
            sink.begin(self._state.image_width, height)

        row = 0
        while row < height:
            row_end = min(row + batch, height)
            render_pixel_rows(self._image, row, row_end, self._state, self.seed)
            if sink is not None:
                for pixel in self._image[row:row_end].reshape(-1, 3):
                    sink.write_color(pixel)
            row = row_end
            self._rows_done = row
            yield (row, height)

        if sink is not None:
            sink.end()

    def get_image_numpy(self) -> npt.NDArray[np.float64]:
        """Get a copy of the linear color buffer.

        Returns:
            NumPy array of shape (height, width, 3) with dtype float64.
        """
        return self._image.copy()

    def save_image(self, filepath: str) -> None:
        """Save the rendered image; the format follows the file suffix.

        Args:
            filepath: Path to save the image (".ppm" or ".png").
        """
        from pathtracer.output.export import save_image

        save_image(self._image, filepath)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"rows_done={self._rows_done}, seed={self.seed})"
        )
