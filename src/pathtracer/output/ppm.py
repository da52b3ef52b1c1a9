"""Plain-text PPM (P3) image output.

Linear colors are gamma corrected with gamma 2 (square root), clamped to
[0, 0.999] and quantized as floor(256 * value), which maps [0, 1) evenly
onto the 256 byte values.

The file layout is a three-line header followed by one pixel per line:

    P3
    <width> <height>
    255
    r g b
    ...

Example:
    >>> from pathtracer.output.ppm import PPMSink
    >>> with PPMSink.open("output/image.ppm") as sink:
    ...     renderer.render(sink)
"""

import math
from pathlib import Path
from typing import TextIO

import numpy as np
import numpy.typing as npt

# Clamp range applied after gamma correction
INTENSITY = (0.000, 0.999)

PPM_MAGIC = "P3"
PPM_MAX_VALUE = 255


def linear_to_gamma(linear_component: float) -> float:
    """Apply gamma 2 correction; non-positive values map to 0."""
    if linear_component > 0:
        return math.sqrt(linear_component)
    return 0.0


def _quantize(component: float) -> int:
    lo, hi = INTENSITY
    return int(256 * min(max(linear_to_gamma(component), lo), hi))


def color_to_bytes(rgb) -> tuple[int, int, int]:
    """Convert a linear color to gamma corrected bytes in [0, 255].

    Args:
        rgb: Linear (r, g, b) values.

    Returns:
        The (r, g, b) byte values.
    """
    return (_quantize(rgb[0]), _quantize(rgb[1]), _quantize(rgb[2]))


def encode_image(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Vectorised color_to_bytes over a whole image.

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        Byte image array of shape (H, W, 3) with dtype uint8.
    """
    linear = np.asarray(image, dtype=np.float64)
    gamma = np.sqrt(np.where(linear > 0, linear, 0.0))
    clamped = np.clip(gamma, INTENSITY[0], INTENSITY[1])
    return np.floor(256 * clamped).astype(np.uint8)


class PPMSink:
    """Image sink writing a P3 PPM to a text stream.

    Use PPMSink.open() to write to a file; the file is opened immediately so
    an unwritable destination fails before any rendering work is done.

    Attributes:
        stream: The text stream receiving the image.
    """

    def __init__(self, stream: TextIO) -> None:
        self.stream = stream
        self._owns_stream = False

    @classmethod
    def open(cls, path: str | Path) -> "PPMSink":
        """Open a file for writing, creating missing parent directories.

        Raises:
            OSError: If the directory cannot be created or the file cannot be
                opened for writing.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        sink = cls(open(path, "w", encoding="ascii", newline="\n"))
        sink._owns_stream = True
        return sink

    def begin(self, width: int, height: int) -> None:
        self.stream.write(f"{PPM_MAGIC}\n{width} {height}\n{PPM_MAX_VALUE}\n")

    def write_color(self, rgb) -> None:
        r, g, b = color_to_bytes(rgb)
        self.stream.write(f"{r} {g} {b}\n")

    def end(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        """Close the underlying file if this sink opened it."""
        if self._owns_stream:
            self.stream.close()

    def __enter__(self) -> "PPMSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def write_ppm(path: str | Path, image: npt.NDArray[np.floating]) -> None:
    """Write a linear (H, W, 3) image to a P3 PPM file.

    Produces the same bytes as streaming the image through a PPMSink.
    """
    height, width = image.shape[:2]
    pixels = encode_image(image).reshape(-1, 3)
    with PPMSink.open(path) as sink:
        sink.begin(width, height)
        sink.stream.writelines(f"{r} {g} {b}\n" for r, g, b in pixels)
        sink.end()
