## conformal geometric algebra helpers for conFrame

## Copyright (c) 2026 conframe contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
# 
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
# 
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""Thin glue over the ``clifford`` 3D conformal model.

All geometric objects are :class:`clifford.MultiVector` instances of the
``clifford.g3c`` layout.  The conventions used throughout conFrame are:

* a point is the null vector ``eo + x + 0.5 x^2 einf``;
* a dual sphere is ``P(c) - 0.5 r^2 einf`` and a dual plane ``n + d einf``
  (the plane ``x.n = d``), so a point ``X`` lies on a surface ``s`` when
  ``X | s`` vanishes;
* a tangent element at ``x`` with direction ``v`` is ``pi ^ P(x)`` where
  ``pi = v + (v.x) einf`` is the dual plane through ``x`` normal to ``v``.
  At the origin this reduces to ``v ^ eo``.

The ``weight`` of a vector is its ``eo`` coefficient; it is zero for
flat elements (planes) and one for normalized points and spheres.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np
from clifford.g3c import layout, e1, e2, e3, einf, eo, up, down

__all__ = [
    'layout', 'e1', 'e2', 'e3', 'einf', 'eo',
    'I5', 'I3', 'epsilon',
    'vec', 'euclid', 'point', 'null', 'weight', 'scalar',
    'dual', 'undual', 'plane', 'tangent', 'direction', 'location',
    'translator', 'boost', 'log', 'spin', 'tunit', 'ratio',
    'carrier', 'surround', 'radius', 'point_pair', 'tangent_at',
    'is_close', 'dist',
]

## default near-zero tolerance for degeneracy tests
epsilon = 0.000001

I5 = layout.pseudoScalar
I3 = e1 ^ e2 ^ e3
_I5_INV = I5.inv()


def vec(x, y=None, z=None):
    """Euclidean vector from three scalars or a length-3 sequence."""
    if y is None and z is None:
        if len(x) != 3:
            raise ValueError('vector must have three components')
        x, y, z = x
    return float(x) * e1 + float(y) * e2 + float(z) * e3


def euclid(mv) -> np.ndarray:
    """Return the e1, e2, e3 coefficients of the vector part of ``mv``."""
    v = mv(1)
    return np.array([scalar(v | e1), scalar(v | e2), scalar(v | e3)])


def scalar(mv) -> float:
    return float(mv.value[0])


def weight(v) -> float:
    """``eo`` coefficient of a vector (zero for flats)."""
    return -scalar(v(1) | einf)


def point(x, y=None, z=None):
    """Conformal point at Euclidean coordinates."""
    if hasattr(x, 'value'):
        return up(x(1))
    return up(vec(x, y, z))


def null(v):
    """Re-embed a (possibly scaled, non-null) vector as a unit point."""
    return up(down(v(1)))


def dist(pa, pb) -> float:
    """Euclidean distance between two normalized points."""
    return math.sqrt(max(0.0, -2.0 * scalar(pa | pb)))


def dual(mv):
    return mv * _I5_INV


def undual(mv):
    return mv * I5


def plane(normal, d=0.0):
    """Dual plane ``x . normal = d``."""
    n = normal if hasattr(normal, 'value') else vec(normal)
    return n + float(d) * einf


def tangent(pos, v):
    """Tangent element at point ``pos`` pointing along ``v``.

    ``v`` is a Euclidean vector; ``pos`` a conformal point.  The
    result is not normalized beyond the magnitude of ``v``.
    """
    x = down(pos)
    v = v(1) if hasattr(v, 'value') else vec(v)
    return (v + scalar(v | x) * einf) ^ up(x)


def direction(mv):
    """Euclidean direction vector carried by a tangent element."""
    d = euclid(einf | mv(2))
    return vec(d)


def location(mv):
    """Center of a round or tangent, returned as a unit point."""
    c = (mv * einf * mv)(1)
    return null(c)


def translator(v):
    """Versor translating by Euclidean vector ``v``."""
    return 1.0 - 0.5 * (v(1) * einf)


def boost(B, tol=epsilon):
    """Exponential of a 2-blade.

    The branch is chosen by the sign of the blade square: elliptic
    (rotation-like), hyperbolic (dilation/boost-like) or parabolic
    (translation/transversion).
    """
    B = B(2)
    sq = scalar(B * B)
    if sq < -tol:
        n = math.sqrt(-sq)
        return math.cos(n) + B * (math.sin(n) / n)
    if sq > tol:
        n = math.sqrt(sq)
        return math.cosh(n) + B * (math.sinh(n) / n)
    return 1.0 + B


def log(R, tol=epsilon):
    """Bivector generator of a unit rotor-like element ``R``.

    Inverse of :func:`boost` on ``scalar + 2-blade`` elements.  A
    hyperbolic element with negative scalar part is taken as ``-R``.
    """
    c = scalar(R)
    B = R(2)
    sq = scalar(B * B)
    if sq < -tol:
        n = math.sqrt(-sq)
        return B * (math.atan2(n, c) / n)
    if sq > tol:
        n = math.sqrt(sq)
        if c < 0:
            B = -B
        return B * (math.asinh(n) / n)
    if abs(c) <= tol:
        return B
    return B * (1.0 / c)


def spin(V, x):
    """Apply versor ``V`` to ``x`` by conjugation."""
    return V * x * ~V


def tunit(R):
    """Scale ``R`` to unit reverse norm."""
    n = abs(scalar(R * ~R))
    if n <= 0.0:
        return R
    return R * (1.0 / math.sqrt(n))


def ratio(end, beg):
    """Versor ratio ``end * beg^-1`` of two surfaces."""
    return end * beg.inv()


def carrier(mv):
    """Direct flat carrying a round (circle -> plane, pair -> line)."""
    return mv ^ einf


def surround(mv):
    """Dual sphere with the same center and radius as a direct round."""
    return (mv * carrier(mv).inv())(1)


def radius(sphere) -> float:
    """Radius of a dual sphere (zero for flats and imaginary spheres)."""
    w = weight(sphere)
    if w == 0.0:
        return 0.0
    s = sphere * (1.0 / w)
    return math.sqrt(max(0.0, scalar(s * s)))


def point_pair(pair) -> Tuple:
    """Split a real direct point pair into its two points."""
    pair = pair(2)
    beta = math.sqrt(abs(scalar(pair * pair)))
    if beta == 0.0:
        raise ValueError('point pair is degenerate')
    pair = pair * (1.0 / beta)
    projector = 0.5 * (1.0 + pair)
    ni_pair = pair | einf
    first = (projector * ni_pair)(1)
    second = (-(~projector) * ni_pair)(1)
    return null(first), null(second)


def tangent_at(rnd, pt):
    """Direct tangent of a round at one of its points."""
    return pt | rnd


def is_close(a, b, tol=epsilon) -> bool:
    """Coefficient-wise comparison of two multivectors."""
    return bool(np.allclose(a.value, b.value, rtol=0.0, atol=tol))
