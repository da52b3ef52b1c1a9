"""Tests for the band-by-band renderer.

This module tests the Renderer class including:
- Initialization and derived image size
- Determinism across seeds and band sizes
- Sink protocol: begin, one write per pixel in row-major order, end
- Progress callbacks and the cancellable generator interface

Note: Imports are done inside test methods to avoid Taichi initialization issues.
The conftest.py fixture initializes Taichi before tests run.
"""

import numpy as np
import pytest


def _small_scene(width: int = 24, samples: int = 2, max_depth: int = 5):
    """Three-spheres scene with a camera small enough for fast tests."""
    from pathtracer.scene.presets import create_three_spheres_scene

    world, camera = create_three_spheres_scene()
    camera.image_width = width
    camera.samples_per_pixel = samples
    camera.max_depth = max_depth
    return world, camera


class RecordingSink:
    """Sink that records every call it receives."""

    def __init__(self):
        self.calls = []
        self.pixels = []

    def begin(self, width, height):
        self.calls.append(("begin", width, height))

    def write_color(self, rgb):
        self.pixels.append(tuple(float(c) for c in rgb))

    def end(self):
        self.calls.append(("end",))


class TestRendererInit:
    """Test Renderer initialization."""

    def test_size_follows_camera(self):
        """Test width and height come from the camera state."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene(width=32)
        renderer = Renderer(camera, world, seed=3)

        assert renderer.width == 32
        assert renderer.height == 18
        assert renderer.rows_done == 0
        assert repr(renderer) == "Renderer(width=32, height=18, rows_done=0, seed=3)"

    def test_construction_uploads_scene(self):
        """Test the scene is in Taichi storage after construction."""
        from pathtracer.core.renderer import Renderer
        from pathtracer.scene.intersection import get_sphere_count

        world, camera = _small_scene()
        Renderer(camera, world)
        assert get_sphere_count() == len(world)

    def test_oversized_scene_rejected(self):
        """Test construction fails when the scene exceeds capacity."""
        from pathtracer.core.renderer import Renderer
        from pathtracer.materials import Lambertian
        from pathtracer.scene.hittable_list import HittableList
        from pathtracer.scene.intersection import MAX_SPHERES

        world, camera = _small_scene()
        extra = HittableList()
        for i in range(MAX_SPHERES):
            extra.add_sphere((float(i), 10.0, 0.0), 0.1, Lambertian((0.5, 0.5, 0.5)))
        world.add(extra)

        with pytest.raises(RuntimeError, match="Maximum number"):
            Renderer(camera, world)


class TestRendererDeterminism:
    """Test reproducibility of renders."""

    def test_band_size_does_not_change_image(self):
        """Test images are identical whatever the number of rows per batch."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        images = [
            Renderer(camera, world, seed=11).render(rows_per_batch=batch) for batch in (1, 5, 1000)
        ]
        np.testing.assert_array_equal(images[0], images[1])
        np.testing.assert_array_equal(images[0], images[2])

    def test_same_seed_same_image(self):
        """Test two renders with one seed are bit-identical."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        renderer = Renderer(camera, world, seed=5)
        first = renderer.render()
        second = renderer.render()
        np.testing.assert_array_equal(first, second)

    def test_different_seeds_differ(self):
        """Test changing the seed changes the noise."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        first = Renderer(camera, world, seed=1).render()
        second = Renderer(camera, world, seed=2).render()
        assert not np.array_equal(first, second)

    def test_camera_render_matches_renderer(self):
        """Test Camera.render is a shortcut for Renderer.render."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        via_camera = camera.render(world, seed=9, rows_per_batch=4)
        via_renderer = Renderer(camera, world, seed=9).render()
        np.testing.assert_array_equal(via_camera, via_renderer)

    def test_renders_own_scene_after_another_renderer(self):
        """Test a second Renderer does not change what the first one draws."""
        from pathtracer.camera.camera import Camera
        from pathtracer.core.renderer import Renderer
        from pathtracer.materials import Lambertian
        from pathtracer.scene.hittable_list import HittableList

        camera = Camera(image_width=8, samples_per_pixel=1, max_depth=3)
        enclosed = HittableList()
        enclosed.add_sphere((0.0, 0.0, 0.0), 50.0, Lambertian((0.0, 0.0, 0.0)))

        sky = Renderer(camera, HittableList(), seed=1)
        alone = sky.render()
        dark = Renderer(camera, enclosed, seed=1).render()
        again = sky.render()

        assert alone.max() > 0.0
        assert dark.max() == 0.0
        np.testing.assert_array_equal(alone, again)


class TestRendererOutput:
    """Test the rendered image and sink delivery."""

    def test_image_is_finite_and_non_negative(self):
        """Test the linear image has the right shape and sane values."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene(samples=4)
        image = Renderer(camera, world).render(rows_per_batch=8)

        assert image.shape == (13, 24, 3)
        assert image.dtype == np.float64
        assert not np.any(np.isnan(image))
        assert not np.any(np.isinf(image))
        assert np.all(image >= 0.0)
        assert np.any(image > 0.0)

    def test_sink_receives_pixels_in_row_major_order(self):
        """Test the sink sees begin, every pixel once, then end."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        sink = RecordingSink()
        image = Renderer(camera, world).render(sink, rows_per_batch=3)

        height, width = image.shape[:2]
        assert sink.calls == [("begin", width, height), ("end",)]
        assert len(sink.pixels) == width * height
        np.testing.assert_array_equal(np.array(sink.pixels), image.reshape(-1, 3))

    def test_buffer_sink_matches_returned_image(self):
        """Test BufferSink reassembles the image."""
        from pathtracer.core.renderer import Renderer
        from pathtracer.output.sink import BufferSink, ImageSink

        world, camera = _small_scene()
        sink = BufferSink()
        assert isinstance(sink, ImageSink)
        image = Renderer(camera, world).render(sink, rows_per_batch=2)

        assert sink.finished
        assert sink.pixels_written == image.shape[0] * image.shape[1]
        np.testing.assert_array_equal(sink.image, image)

    def test_returned_image_is_a_copy(self):
        """Test modifying the returned image does not affect the renderer."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        renderer = Renderer(camera, world)
        image = renderer.render()
        image[:] = -1.0
        assert np.all(renderer.get_image_numpy() >= 0.0)


class TestRendererProgress:
    """Test progress reporting and cancellation."""

    def test_callback_receives_progress(self):
        """Test the callback is called once per band with running totals."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        progress = []
        Renderer(camera, world).render(
            rows_per_batch=5, callback=lambda done, total: progress.append((done, total))
        )
        assert progress == [(5, 13), (10, 13), (13, 13)]

    def test_render_progressive_interruptible(self):
        """Test closing the generator stops between bands without end()."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        renderer = Renderer(camera, world)
        sink = RecordingSink()

        generator = renderer.render_progressive(sink, rows_per_batch=4)
        assert next(generator) == (4, 13)
        assert next(generator) == (8, 13)
        generator.close()

        assert renderer.rows_done == 8
        assert sink.calls == [("begin", 24, 13)]
        assert len(sink.pixels) == 8 * 24
        image = renderer.get_image_numpy()
        assert not np.any(image[8:])

    def test_reset_clears_progress(self):
        """Test reset empties the buffer and the row counter."""
        from pathtracer.core.renderer import Renderer

        world, camera = _small_scene()
        renderer = Renderer(camera, world)
        renderer.render()
        renderer.reset()
        assert renderer.rows_done == 0
        assert not np.any(renderer.get_image_numpy())
