"""Image sink interface and an in-memory sink.

A sink receives a rendered image one linear RGB triple at a time, rows top
to bottom and columns left to right:

    sink.begin(width, height)
    sink.write_color(rgb)   # width * height times
    sink.end()
"""

from typing import Protocol, runtime_checkable

import numpy as np
import numpy.typing as npt


@runtime_checkable
class ImageSink(Protocol):
    """Receiver of a stream of linear pixel colors."""

    def begin(self, width: int, height: int) -> None:
        """Start an image of the given size."""
        ...

    def write_color(self, rgb) -> None:
        """Receive the next pixel as a linear (r, g, b) triple."""
        ...

    def end(self) -> None:
        """Finish the image."""
        ...


class BufferSink:
    """Collects pixels into a (height, width, 3) float64 array.

    Attributes:
        image: The collected image, or None before begin() is called.
    """

    def __init__(self) -> None:
        self.image: npt.NDArray[np.float64] | None = None
        self._flat: npt.NDArray[np.float64] | None = None
        self._count = 0
        self.finished = False

    def begin(self, width: int, height: int) -> None:
        self.image = np.zeros((height, width, 3))
        self._flat = self.image.reshape(-1, 3)
        self._count = 0
        self.finished = False

    def write_color(self, rgb) -> None:
        if self._flat is None:
            raise RuntimeError("write_color() called before begin()")
        self._flat[self._count] = rgb
        self._count += 1

    def end(self) -> None:
        self.finished = True

    @property
    def pixels_written(self) -> int:
        """Number of pixels received since begin()."""
        return self._count
