#!/usr/bin/env python3
"""Render one of the preset scenes to an image file.

This script builds a preset scene and its camera, renders it band by band
with scanline progress on stderr, and writes the result as a plain-text PPM
(or a PNG when the output path ends in ".png").

Usage:
    python examples/render_final_scene.py [options]

Options:
    --scene NAME          Scene to render: final or three-spheres (default: final)
    --width WIDTH         Override the image width in pixels
    --samples SAMPLES     Override the number of samples per pixel
    --max-depth DEPTH     Override the maximum path depth
    --output OUTPUT       Output file path (default: output/image.ppm)
    --seed SEED           Seed for scene generation and sampling (default: 0)
    --rows-per-batch N    Rows rendered per kernel launch (default: 8)
    --gpu                 Use the GPU backend if available
    --quiet               Suppress progress output

Example:
    python examples/render_final_scene.py --width 320 --samples 20 --output out.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from pathtracer import runtime

SCENES = ("final", "three-spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset path tracing scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENES,
        default="final",
        help="Scene to render (default: final)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: scene preset)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=None,
        help="Number of samples per pixel (default: scene preset)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum path depth (default: scene preset)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="output/image.ppm",
        help="Output file path, .ppm or .png (default: output/image.ppm)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for scene generation and sampling (default: 0)",
    )
    parser.add_argument(
        "--rows-per-batch",
        type=int,
        default=8,
        help="Rows rendered per kernel launch (default: 8)",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Use the GPU backend if available",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_scene(
    scene: str = "final",
    output_path: str = "output/image.ppm",
    *,
    width: int | None = None,
    samples: int | None = None,
    max_depth: int | None = None,
    seed: int = 0,
    rows_per_batch: int = 8,
    quiet: bool = False,
) -> float:
    """Render a preset scene and save it.

    The output file is opened before rendering starts, so an unwritable
    destination fails without doing any work.

    Args:
        scene: Preset name, "final" or "three-spheres".
        output_path: Output file path (.ppm or .png).
        width: Optional image width override.
        samples: Optional samples-per-pixel override.
        max_depth: Optional maximum depth override.
        seed: Seed for scene generation and sampling.
        rows_per_batch: Rows rendered per kernel launch.
        quiet: If True, suppress progress output.

    Returns:
        The render time in milliseconds.

    Raises:
        OSError: If the output file cannot be written.
    """
    # Lazy imports to allow Taichi initialization first
    import numpy as np

    from pathtracer.core.progress import ScanlineProgress
    from pathtracer.core.renderer import Renderer
    from pathtracer.output.export import save_png
    from pathtracer.output.ppm import PPMSink
    from pathtracer.output.sink import BufferSink
    from pathtracer.scene.presets import create_final_scene, create_three_spheres_scene

    if scene == "final":
        world, camera = create_final_scene(np.random.default_rng(seed))
    else:
        world, camera = create_three_spheres_scene()

    if width is not None:
        camera.image_width = width
    if samples is not None:
        camera.samples_per_pixel = samples
    if max_depth is not None:
        camera.max_depth = max_depth

    output_file = Path(output_path)
    is_png = output_file.suffix.lower() == ".png"

    # Open the destination before rendering
    if is_png:
        output_file.parent.mkdir(parents=True, exist_ok=True)
        stream = open(output_file, "wb")
        sink = BufferSink()
    else:
        sink = PPMSink.open(output_file)
        stream = None

    try:
        renderer = Renderer(camera, world, seed=seed)
        if not quiet:
            print(
                f"Rendering {len(world)} spheres at {renderer.width}x{renderer.height}, "
                f"{camera.samples_per_pixel} samples per pixel...",
                file=sys.stderr,
            )

        progress = ScanlineProgress(stream=sys.stderr) if not quiet else None
        start_time = time.perf_counter()
        renderer.render(sink, rows_per_batch=rows_per_batch, callback=progress)
        render_ms = (time.perf_counter() - start_time) * 1000.0
        if progress is not None:
            progress.finish()

        if is_png:
            save_png(sink.image, stream)
    finally:
        if stream is not None:
            stream.close()
        if not is_png:
            sink.close()

    return render_ms


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    backend = runtime.init("gpu" if args.gpu else "cpu")
    if not args.quiet:
        print(f"Using {backend.upper()} backend", file=sys.stderr)

    try:
        render_ms = render_scene(
            scene=args.scene,
            output_path=args.output,
            width=args.width,
            samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            rows_per_batch=args.rows_per_batch,
            quiet=args.quiet,
        )
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"\nImage saved as {args.output}")
    print(f"Render time: {render_ms:.2f} ms")
    return 0


if __name__ == "__main__":
    sys.exit(main())
