"""Taichi runtime initialisation.

The renderer works in double precision and relies on IEEE infinities for
open-ended hit intervals, so Taichi must be initialised with ``default_fp``
set to ``ti.f64`` and fast-math disabled. Call :func:`init` once, before
importing any module that declares Taichi fields (camera, scene, materials,
integrator).

Example:
    >>> from pathtracer import runtime
    >>> runtime.init()
    >>> from pathtracer.scene.hittable_list import HittableList
"""

from __future__ import annotations

import sys

import taichi as ti


def init(arch: str = "cpu", *, debug: bool = False, quiet: bool = True) -> str:
    """Initialise Taichi for rendering.

    Args:
        arch: Either "cpu" or "gpu". GPU initialisation falls back to the CPU
            backend if no usable device is available.
        debug: Enable Taichi's debug mode (bounds checks, slower kernels).
        quiet: Suppress Taichi's start-up banner and info logs.

    Returns:
        The name of the backend that was initialised ("cpu" or "gpu").
    """
    options = {
        "default_fp": ti.f64,
        "fast_math": False,
        "debug": debug,
    }
    if quiet:
        options["log_level"] = ti.WARN

    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu, **options)
            return "gpu"
        except Exception as e:
            print(f"GPU backend unavailable ({e}), using CPU", file=sys.stderr)

    ti.init(arch=ti.cpu, **options)
    return "cpu"
