"""Image export utilities for rendered images.

Supported formats:
    - PPM (plain-text P3, see pathtracer.output.ppm)
    - PNG (8-bit via Pillow)

Both formats share the same gamma correction and quantization, so a PNG
holds exactly the bytes the PPM would.

Example:
    >>> from pathtracer.output.export import save_image
    >>> image = camera.render(world)
    >>> save_image(image, "output/image.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from pathtracer.output.ppm import encode_image, write_ppm


def save_png(image: npt.NDArray[np.floating], file: str | Path | BinaryIO) -> None:
    """Save a linear image as a PNG file.

    Args:
        image: Linear image array of shape (H, W, 3).
        file: Output path or binary file object.
    """
    if isinstance(file, (str, Path)):
        Path(file).parent.mkdir(parents=True, exist_ok=True)
    pil_image = PILImage.fromarray(encode_image(image))
    pil_image.save(file, format="PNG")


def save_image(image: npt.NDArray[np.floating], filepath: str | Path) -> None:
    """Save a linear image, choosing the format from the file suffix.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output path ending in ".ppm" or ".png".

    Raises:
        ValueError: If the suffix is not a supported format.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".ppm":
        write_ppm(filepath, image)
    elif suffix == ".png":
        save_png(image, filepath)
    else:
        raise ValueError(f"Unsupported image format: {suffix or filepath!r}")
