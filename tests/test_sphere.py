"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Ray tangent to sphere
- Open interval bounds on the accepted root
"""

import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=1e30):
    """Run hit_sphere in a kernel and return the record as a dict."""
    from pathtracer.core.interval import make_interval
    from pathtracer.core.ray import make_ray, vec3
    from pathtracer.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    material = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    point = ti.Vector.field(3, dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel():
        ray = make_ray(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
        )
        sphere = Sphere(center=vec3(center[0], center[1], center[2]), radius=radius, material_id=7)
        rec = hit_sphere(ray, sphere, make_interval(t_min, t_max))
        hit[None] = rec.hit
        front_face[None] = rec.front_face
        material[None] = rec.material_id
        t_val[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal

    test_kernel()
    p = point[None]
    n = normal[None]
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": (p[0], p[1], p[2]),
        "normal": (n[0], n[1], n[2]),
        "front_face": front_face[None],
        "material_id": material[None],
    }


class TestSphereBasics:
    """Tests for Sphere construction."""

    def test_make_sphere_keeps_values(self):
        """Test make_sphere stores center, radius and material."""
        from pathtracer.core.ray import vec3
        from pathtracer.geometry.sphere import make_sphere

        center_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        radius_result = ti.field(dtype=ti.f64, shape=())
        material_result = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5, 4)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius
            material_result[None] = sphere.material_id

        test_kernel()
        c = center_result[None]
        assert (c[0], c[1], c[2]) == (1.0, 2.0, 3.0)
        assert radius_result[None] == 0.5
        assert material_result[None] == 4

    def test_make_sphere_clamps_negative_radius(self):
        """Test a negative radius becomes zero."""
        from pathtracer.core.ray import vec3
        from pathtracer.geometry.sphere import make_sphere

        radius_result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            radius_result[None] = make_sphere(vec3(0.0, 0.0, 0.0), -2.0, 0).radius

        test_kernel()
        assert radius_result[None] == 0.0


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """Test the nearer root is returned with an outward normal."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == 1.0
        assert rec["point"] == (0.0, 0.0, -1.0)
        assert rec["normal"] == (0.0, 0.0, 1.0)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 7

    def test_unnormalized_direction(self):
        """Test t is measured in units of the direction length."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -2.0), (0.0, 0.0, -2.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == 0.5
        assert rec["point"] == (0.0, 0.0, -1.0)

    def test_miss(self):
        """Test a ray passing beside the sphere."""
        rec = _hit((0.0, 2.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0)
        assert rec["hit"] == 0

    def test_sphere_behind_ray(self):
        """Test a sphere behind the origin is not hit."""
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, -2.0), 1.0)
        assert rec["hit"] == 0

    def test_origin_on_surface_rejects_zero_root(self):
        """Test a ray starting on the surface takes the far root.

        From the origin toward a unit sphere at (0, 0, -1) the near root is
        t = 0, outside the open interval, so the exit point at t = 2 is hit
        from inside and the normal is flipped toward the ray.
        """
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == 2.0
        assert rec["point"] == (0.0, 0.0, -2.0)
        assert rec["normal"] == (0.0, 0.0, 1.0)
        assert rec["front_face"] == 0

    def test_inside_hit_flips_normal(self):
        """Test a ray starting at the center hits the back face."""
        rec = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)
        assert rec["hit"] == 1
        assert rec["t"] == 2.0
        assert rec["front_face"] == 0
        assert rec["normal"] == (-1.0, 0.0, 0.0)

    def test_tangent_ray_hits_once(self):
        """Test a grazing ray hits at the single touching point."""
        rec = _hit((0.0, 1.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == 3.0
        assert rec["point"] == (0.0, 1.0, -3.0)

    def test_root_on_interval_bound_rejected(self):
        """Test roots equal to t_min or t_max are not accepted."""
        near = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0, t_min=1.0)
        # Near root rejected, far root t=3 accepted from inside
        assert near["hit"] == 1
        assert near["t"] == 3.0
        assert near["front_face"] == 0

        both = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -2.0), 1.0, t_max=1.0)
        assert both["hit"] == 0

    def test_normal_always_opposes_ray(self):
        """Test dot(direction, normal) <= 0 for front and back hits."""
        outside = _hit((0.3, 0.2, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        inside = _hit((0.3, 0.2, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        for rec in (outside, inside):
            assert rec["hit"] == 1
            assert -rec["normal"][2] <= 0.0
            length_sq = sum(c * c for c in rec["normal"])
            assert abs(length_sq - 1.0) < 1e-12
