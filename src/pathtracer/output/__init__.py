"""Output module: image sinks and file export.

Components:
    sink: ImageSink protocol and an in-memory BufferSink
    ppm: Gamma correction, quantization and the plain-text PPM sink
    export: PNG export via Pillow and suffix-based save_image

The renderer hands finished pixels to a sink one at a time in row-major
order; file writers apply gamma 2 correction and 8-bit quantization.
"""

from pathtracer.output.export import save_image, save_png
from pathtracer.output.ppm import (
    INTENSITY,
    PPMSink,
    color_to_bytes,
    encode_image,
    linear_to_gamma,
    write_ppm,
)
from pathtracer.output.sink import BufferSink, ImageSink

__all__ = [
    # Sinks
    "ImageSink",
    "BufferSink",
    "PPMSink",
    # Color encoding
    "INTENSITY",
    "linear_to_gamma",
    "color_to_bytes",
    "encode_image",
    # Export functions
    "write_ppm",
    "save_png",
    "save_image",
]
