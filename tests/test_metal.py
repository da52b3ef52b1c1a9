"""Unit tests for the metal material module.

Tests cover:
- Perfect mirror reflection (fuzz = 0)
- Fuzzy reflection bounded by the fuzz radius
- Absorption of directions pointing below the surface
- Material registry operations and fuzz clamping
"""

import math

import pytest
import taichi as ti


def _make_up_record():
    """Build a ti.func returning a hit at the origin with an up-facing normal."""
    from pathtracer.core.ray import vec3
    from pathtracer.geometry.sphere import HitRecord

    @ti.func
    def up_record():
        return HitRecord(
            hit=1,
            t=1.0,
            point=vec3(0.0, 0.0, 0.0),
            normal=vec3(0.0, 1.0, 0.0),
            front_face=1,
            material_id=0,
        )

    return up_record


class TestMetalReflection:
    """Tests for metal scattering."""

    def test_perfect_mirror_is_unit_reflection(self):
        """Test fuzz 0 gives exactly the normalized mirror direction."""
        from pathtracer.core.ray import make_ray, reflect, unit_vector, vec3
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.metal import scatter_metal

        scattered = ti.field(dtype=ti.i32, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())
        expected = ti.Vector.field(3, dtype=ti.f64, shape=())
        up_record = _make_up_record()

        @ti.kernel
        def test_kernel():
            rec = up_record()
            ray_in = make_ray(vec3(-1.0, 1.0, 0.0), vec3(2.0, -2.0, 0.0))
            did_scatter, _, d, _ = scatter_metal(
                vec3(0.9, 0.9, 0.9), 0.0, ray_in, rec, seed_stream(ti.u32(3), ti.u32(0))
            )
            scattered[None] = did_scatter
            direction[None] = d
            expected[None] = unit_vector(reflect(ray_in.direction, rec.normal))

        test_kernel()
        d = direction[None]
        e = expected[None]
        assert scattered[None] == 1
        assert (d[0], d[1], d[2]) == (e[0], e[1], e[2])
        assert abs(d[0] - 1.0 / math.sqrt(2.0)) < 1e-12
        assert abs(d[1] - 1.0 / math.sqrt(2.0)) < 1e-12

    def test_fuzzy_reflection_bounded_by_fuzz(self):
        """Test scattered directions stay within fuzz of the mirror direction."""
        from pathtracer.core.ray import make_ray, vec3
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.metal import scatter_metal

        n = 300
        fuzz = 0.3
        distances = ti.field(dtype=ti.f64, shape=n)
        up_record = _make_up_record()

        @ti.kernel
        def test_kernel():
            rec = up_record()
            ray_in = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0))
            mirror = vec3(0.0, 1.0, 0.0)
            for _k in range(1):
                state = seed_stream(ti.u32(4), ti.u32(0))
                for i in range(n):
                    _, _, d, state = scatter_metal(vec3(1.0, 1.0, 1.0), fuzz, ray_in, rec, state)
                    distances[i] = (d - mirror).norm()

        test_kernel()
        for i in range(n):
            assert abs(distances[i] - fuzz) < 1e-12

    def test_grazing_fuzzy_reflection_may_absorb(self):
        """Test directions below the surface are reported as absorbed."""
        from pathtracer.core.ray import make_ray, vec3
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.metal import scatter_metal

        n = 400
        scattered = ti.field(dtype=ti.i32, shape=n)
        dots = ti.field(dtype=ti.f64, shape=n)
        up_record = _make_up_record()

        @ti.kernel
        def test_kernel():
            rec = up_record()
            ray_in = make_ray(vec3(-1.0, 0.01, 0.0), vec3(1.0, -0.01, 0.0))
            for _k in range(1):
                state = seed_stream(ti.u32(5), ti.u32(0))
                for i in range(n):
                    did_scatter, _, d, state = scatter_metal(
                        vec3(1.0, 1.0, 1.0), 1.0, ray_in, rec, state
                    )
                    scattered[i] = did_scatter
                    dots[i] = d.dot(rec.normal)

        test_kernel()
        absorbed = 0
        for i in range(n):
            if scattered[i] == 1:
                assert dots[i] > 0.0
            else:
                assert dots[i] <= 0.0
                absorbed += 1
        assert 0 < absorbed < n

    def test_attenuation_equals_albedo(self):
        """Test attenuation is the albedo."""
        from pathtracer.core.ray import make_ray, vec3
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.metal import scatter_metal

        result = ti.Vector.field(3, dtype=ti.f64, shape=())
        up_record = _make_up_record()

        @ti.kernel
        def test_kernel():
            rec = up_record()
            ray_in = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0))
            _, attenuation, _, _ = scatter_metal(
                vec3(0.7, 0.6, 0.5), 0.1, ray_in, rec, seed_stream(ti.u32(0), ti.u32(0))
            )
            result[None] = attenuation

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == (0.7, 0.6, 0.5)


class TestMetalRegistry:
    """Tests for metal material registry operations."""

    def test_add_and_get_material(self):
        """Test adding a material and retrieving albedo and fuzz."""
        from pathtracer.materials.metal import (
            add_metal_material,
            get_metal_albedo,
            get_metal_fuzz,
            get_metal_material_count,
        )

        idx = add_metal_material((0.8, 0.6, 0.2), 0.3)
        assert get_metal_material_count() == 1

        albedo = ti.Vector.field(3, dtype=ti.f64, shape=())
        fuzz = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            albedo[None] = get_metal_albedo(mat_idx)
            fuzz[None] = get_metal_fuzz(mat_idx)

        test_kernel(idx)
        a = albedo[None]
        assert (a[0], a[1], a[2]) == (0.8, 0.6, 0.2)
        assert fuzz[None] == 0.3

    @pytest.mark.parametrize("requested, stored", [(-0.5, 0.0), (0.0, 0.0), (1.0, 1.0), (2.5, 1.0)])
    def test_fuzz_clamped_in_registry(self, requested, stored):
        """Test registry fuzz values are clamped to [0, 1]."""
        from pathtracer.materials.metal import add_metal_material, metal_fuzzes

        idx = add_metal_material((0.5, 0.5, 0.5), requested)
        assert metal_fuzzes[idx] == stored

    def test_scatter_by_id_uses_stored_fuzz(self):
        """Test scatter_metal_by_id reads albedo and fuzz from the registry."""
        from pathtracer.core.ray import make_ray, vec3
        from pathtracer.core.rng import seed_stream
        from pathtracer.materials.metal import add_metal_material, scatter_metal_by_id

        add_metal_material((0.2, 0.2, 0.2), 0.9)
        idx = add_metal_material((0.9, 0.8, 0.7), 0.0)

        attenuation_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        up_record = _make_up_record()

        @ti.kernel
        def test_kernel(mat_idx: ti.i32):
            rec = up_record()
            ray_in = make_ray(vec3(0.0, 1.0, 0.0), vec3(0.0, -1.0, 0.0))
            _, attenuation, d, _ = scatter_metal_by_id(
                mat_idx, ray_in, rec, seed_stream(ti.u32(0), ti.u32(0))
            )
            attenuation_result[None] = attenuation
            direction_result[None] = d

        test_kernel(idx)
        a = attenuation_result[None]
        d = direction_result[None]
        assert (a[0], a[1], a[2]) == (0.9, 0.8, 0.7)
        assert (d[0], d[1], d[2]) == (0.0, 1.0, 0.0)


class TestMetalDescription:
    """Tests for the host-side Metal description."""

    def test_default_fuzz_is_zero(self):
        """Test a metal without fuzz is a perfect mirror."""
        from pathtracer.materials.metal import Metal

        assert Metal((0.7, 0.6, 0.5)).fuzz == 0.0

    @pytest.mark.parametrize("requested, stored", [(-1.0, 0.0), (0.25, 0.25), (3.0, 1.0)])
    def test_fuzz_clamped(self, requested, stored):
        """Test fuzz is clamped to [0, 1] on construction."""
        from pathtracer.materials.metal import Metal

        assert Metal((0.5, 0.5, 0.5), requested).fuzz == stored
