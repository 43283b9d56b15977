import math

import numpy as np
import pytest

from vector import (COPLANAR_TOLERANCE, cross, divide, dot, is_in_triangle, magnitude,
                    normalize, plane_normal, project, reflect, vec3)


class TestVectorAlgebra:

    def test_dot_and_cross(self):
        x = vec3(1, 0, 0)
        y = vec3(0, 1, 0)
        assert dot(x, y) == 0.0
        assert dot(vec3(1, 2, 3), vec3(4, 5, 6)) == 32.0
        assert np.allclose(cross(x, y), vec3(0, 0, 1))
        assert np.allclose(cross(y, x), vec3(0, 0, -1))

    def test_array_operators(self):
        a = vec3(1, 2, 3)
        b = vec3(-1, 0, 4)
        assert np.allclose(a + b, vec3(0, 2, 7))
        assert np.allclose(a - b, vec3(2, 2, -1))
        assert np.allclose(2.0 * a, vec3(2, 4, 6))
        assert np.allclose(-a, vec3(-1, -2, -3))

    def test_magnitude(self):
        assert magnitude(vec3(3, 4, 0)) == pytest.approx(5.0)

    def test_divide(self):
        assert np.allclose(divide(vec3(2, 4, 6), 2.0), vec3(1, 2, 3))
        with pytest.raises(ZeroDivisionError):
            divide(vec3(1, 1, 1), 0.0)

    @pytest.mark.parametrize("v", [
        (1, 0, 0), (3, 4, 0), (-1, -1, 1), (0.001, 0, 0), (120, -80, 33),
    ])
    def test_normalize_is_unit(self, v):
        assert magnitude(normalize(vec3(*v))) == pytest.approx(1.0)

    def test_normalize_zero_vector(self):
        with pytest.raises(ValueError):
            normalize(vec3(0, 0, 0))

    def test_project(self):
        assert np.allclose(project(vec3(3, 4, 0), vec3(2, 0, 0)), vec3(3, 0, 0))
        with pytest.raises(ValueError):
            project(vec3(1, 2, 3), vec3(0, 0, 0))

    def test_plane_normal(self):
        n = plane_normal(vec3(0, 0, 0), vec3(1, 0, 0), vec3(0, 1, 0))
        assert np.allclose(n, vec3(0, 0, 1))

    def test_reflect_aligned_vector_unchanged(self):
        normal = vec3(0, 0, 1)
        v = vec3(0, 0, 2)
        assert np.allclose(reflect(v, normal), v)
        assert np.allclose(reflect(reflect(v, normal), normal), v)

    def test_reflect_flips_in_plane_component(self):
        normal = vec3(0, 0, 1)
        assert np.allclose(reflect(vec3(1, 0, 0), normal), vec3(-1, 0, 0))
        assert np.allclose(reflect(vec3(1, 0, 1), normal), vec3(-1, 0, 1))

    def test_reflect_twice_restores(self):
        normal = normalize(vec3(1, 2, 3))
        v = vec3(-4, 0.5, 2)
        assert np.allclose(reflect(reflect(v, normal), normal), v)

    def test_reflect_preserves_magnitude(self):
        v = vec3(0, 0, -1)
        r = reflect(v, normalize(vec3(1, -3, 2)))
        assert magnitude(r) == pytest.approx(1.0)


class TestInTriangle:
    a = vec3(-40, -30, 5)
    b = vec3(50, -20, 10)
    c = vec3(0, 60, -10)

    def centroid(self):
        return (self.a + self.b + self.c) / 3.0

    def unit_normal(self):
        return plane_normal(self.a, self.b, self.c)

    def test_centroid_inside(self):
        assert is_in_triangle(self.centroid(), self.a, self.b, self.c)

    def test_vertices_inside(self):
        for p in (self.a, self.b, self.c):
            assert is_in_triangle(p.copy(), self.a, self.b, self.c)

    def test_permutations_agree(self):
        points = [
            self.centroid(),
            self.centroid() + 0.5 * self.unit_normal(),
            self.centroid() + 3.0 * self.unit_normal(),
            vec3(100, 100, 0),
            (self.a + self.b) / 2.0,
            self.a + 1.1 * (self.b - self.a),
        ]
        for p in points:
            expected = is_in_triangle(p, self.a, self.b, self.c)
            assert is_in_triangle(p, self.a, self.c, self.b) == expected
            assert is_in_triangle(p, self.b, self.a, self.c) == expected
            assert is_in_triangle(p, self.c, self.b, self.a) == expected

    def test_within_tolerance_of_plane(self):
        p = self.centroid() + 0.5 * COPLANAR_TOLERANCE * self.unit_normal()
        assert is_in_triangle(p, self.a, self.b, self.c)

    def test_off_plane_rejected(self):
        p = self.centroid() + 1.5 * COPLANAR_TOLERANCE * self.unit_normal()
        assert not is_in_triangle(p, self.a, self.b, self.c)
        p = self.centroid() - 1.5 * COPLANAR_TOLERANCE * self.unit_normal()
        assert not is_in_triangle(p, self.a, self.b, self.c)

    def test_outside_footprint_rejected(self):
        # In the plane but past edge ab
        p = self.a + 1.1 * (self.b - self.a)
        assert not is_in_triangle(p, self.a, self.b, self.c)
        # Reflection of c through the midpoint of ab
        p = self.a + self.b - self.c
        assert not is_in_triangle(p, self.a, self.b, self.c)

    def test_edge_midpoint_inside(self):
        p = (self.b + self.c) / 2.0
        assert is_in_triangle(p, self.a, self.b, self.c)

    def test_collinear_points_never_match(self):
        a = vec3(0, 0, 0)
        b = vec3(10, 10, 10)
        c = vec3(20, 20, 20)
        assert not is_in_triangle(vec3(10, 10, 10), a, b, c)
        assert not is_in_triangle(vec3(5, 5, 5), a, b, c)

    def test_duplicate_points_never_match(self):
        a = vec3(1, 2, 3)
        assert not is_in_triangle(a.copy(), a, a.copy(), vec3(5, 5, 5))
        assert not is_in_triangle(a.copy(), a, a.copy(), a.copy())

    def test_tolerance_is_perpendicular_distance(self):
        # Horizontal triangle: distance to the plane is just the z offset
        a = vec3(0, 0, 0)
        b = vec3(10, 0, 0)
        c = vec3(0, 10, 0)
        assert is_in_triangle(vec3(2, 2, 0.99), a, b, c)
        assert is_in_triangle(vec3(2, 2, -1.0), a, b, c)
        assert not is_in_triangle(vec3(2, 2, 1.01), a, b, c)
        assert math.isclose(magnitude(plane_normal(a, b, c)), 1.0)
