"""Taichi-accelerated Monte Carlo path tracer.

This package renders scenes of spheres with diffuse, metallic and dielectric
materials, supporting:
- Recursive light transport evaluated as a bounded loop
- Box-filter anti-aliasing with jittered samples
- Depth of field from a thin-lens defocus disk
- Reproducible per-pixel random streams

Subpackages:
    core: Vector math, random streams, intervals, the integrator and render driver
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: Hittable list, material arena and demo scenes
    camera: Camera configuration and ray generation
    output: Image sinks (PPM, PNG)

Taichi must be initialised (see ``pathtracer.runtime.init``) before importing
modules that declare Taichi fields.
"""

__version__ = "0.1.0"
