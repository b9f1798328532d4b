import math

import numpy as np
import pytest

from conframe import cga
from conframe.cga import e1, e2, einf, eo

## unit tests for the conformal algebra helpers


def _at(p, x, y, z, tol=1e-6):
    return np.allclose(cga.euclid(cga.down(p)), [x, y, z], atol=tol)


class TestPoints:
    """points, planes and spheres"""

    def test_point_is_null(self):
        p = cga.point(1, 2, 3)
        assert math.isclose(cga.scalar(p * p), 0.0, abs_tol=1e-9)
        assert math.isclose(cga.weight(p), 1.0)
        assert _at(p, 1, 2, 3)

    def test_point_from_sequence_and_vector(self):
        assert cga.is_close(cga.point((1, 2, 3)), cga.point(1, 2, 3))
        assert cga.is_close(cga.point(cga.vec(1, 2, 3)), cga.point(1, 2, 3))

    def test_vec_rejects_wrong_length(self):
        with pytest.raises(ValueError):
            cga.vec((1, 2))

    def test_null_rescales(self):
        p = cga.point(0.5, -1, 2)
        assert cga.is_close(cga.null(p * -3.0), p)

    def test_dist(self):
        assert math.isclose(cga.dist(cga.point(0, 0, 0), cga.point(3, 4, 0)), 5.0)

    def test_plane_contains_points(self):
        pl = cga.plane((0, 0, 1), 2.0)
        assert math.isclose(cga.scalar(cga.point(5, -1, 2) | pl), 0.0, abs_tol=1e-9)
        assert math.isclose(cga.weight(pl), 0.0)
        assert not math.isclose(cga.scalar(cga.point(0, 0, 0) | pl), 0.0)

    def test_radius(self):
        s = cga.point(1, 1, 1) - 0.5 * 4.0 * einf
        assert math.isclose(cga.radius(s), 2.0)
        assert cga.radius(cga.plane((1, 0, 0))) == 0.0

    def test_dual_roundtrip(self):
        s = cga.point(1, 0, 0) - 0.5 * einf
        assert cga.is_close(cga.undual(cga.dual(s)), s)


class TestTangents:

    def test_tangent_at_origin(self):
        assert cga.is_close(cga.tangent(cga.point(0, 0, 0), (1, 0, 0)), e1 ^ eo)

    def test_tangent_location_and_direction(self):
        t = cga.tangent(cga.point(1, 2, 3), (0, 2, 0))
        assert _at(cga.location(t), 1, 2, 3)
        assert np.allclose(cga.euclid(cga.direction(t)), [0, 2, 0])

    def test_tangent_plane(self):
        t = cga.tangent(cga.point(0, 0, 4), (0, 0, 1))
        assert cga.is_close(einf | t, cga.plane((0, 0, 1), 4.0))


class TestVersors:
    """exponentials, logarithms and rigid motions"""

    def test_translator(self):
        T = cga.translator(cga.vec(1, 2, 3))
        assert _at(cga.null(cga.spin(T, cga.point(0, 0, 0))), 1, 2, 3)

    def test_boost_rotation(self):
        R = cga.boost(-0.25 * math.pi * (e1 ^ e2))
        p = cga.null(cga.spin(R, cga.point(1, 0, 0)))
        assert _at(p, 0, 1, 0)

    def test_boost_dilation(self):
        D = cga.boost(0.5 * math.log(2.0) * (eo ^ einf))
        p = cga.null(cga.spin(D, cga.point(1, 0, 0)))
        d = cga.dist(p, cga.point(0, 0, 0))
        assert math.isclose(d, 2.0) or math.isclose(d, 0.5)

    def test_log_inverts_boost(self):
        for B in (0.3 * (e1 ^ e2), 0.4 * (eo ^ einf), 0.7 * (e2 ^ einf)):
            assert cga.is_close(cga.log(cga.boost(B)), B)

    def test_log_of_translator(self):
        T = cga.translator(cga.vec(1, 0, 0))
        assert cga.is_close(cga.log(T), -0.5 * (e1 * einf))

    def test_tunit(self):
        T = cga.translator(cga.vec(0, 1, 0)) * 3.0
        assert math.isclose(cga.scalar(cga.tunit(T) * ~cga.tunit(T)), 1.0)

    def test_ratio_of_parallel_planes(self):
        r = cga.ratio(cga.plane((1, 0, 0), 2.0), cga.plane((1, 0, 0), 0.0))
        assert cga.is_close(r, cga.translator(cga.vec(4, 0, 0)))

    @pytest.mark.parametrize('x', [
        cga.point(1, 2, 3),
        cga.tangent(cga.point(1, 0, 0), (0, 1, 0)),
        cga.point(0, 1, 0) - 0.5 * einf,
    ])
    def test_zero_generator_is_identity(self, x):
        V = cga.boost(0.0 * (e1 ^ e2))
        assert cga.is_close(cga.spin(V, x), x)


class TestRounds:

    def test_circle_surround_and_carrier(self):
        cir = cga.point(1, 0, 0) ^ cga.point(0, 1, 0) ^ cga.point(-1, 0, 0)
        sur = cga.surround(cir)
        assert math.isclose(cga.radius(sur), 1.0)
        assert _at(cga.location(cir), 0, 0, 0)
        pl = cga.undual(cga.carrier(cir))(1)
        n = cga.euclid(pl)
        assert np.allclose(np.abs(n / math.sqrt(n.dot(n))), [0, 0, 1])

    def test_point_pair(self):
        pair = cga.point(1, 0, 0) ^ cga.point(0, 3, 0)
        a, b = cga.point_pair(pair)
        found = sorted([tuple(np.round(cga.euclid(cga.down(p)), 6)) for p in (a, b)])
        assert found == [(0.0, 3.0, 0.0), (1.0, 0.0, 0.0)]

    def test_degenerate_point_pair(self):
        with pytest.raises(ValueError):
            cga.point_pair(0.0 * (e1 ^ e2))

    def test_tangent_at_round(self):
        s = cga.dual(cga.point(0, 0, 0) - 0.5 * einf)
        p = cga.point(0, 0, 1)
        b = cga.tangent_at(s, p)
        t = cga.dual(b)(2)
        d = cga.euclid(cga.direction(t))
        assert np.allclose(np.abs(d / math.sqrt(d.dot(d))), [0, 0, 1])
