## bent tangent frames, contacts and six-sphere coordinates for conFrame

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

"""Single-point curved frames built by bending and closing loops.

A :class:`TangentFrame` stores, for each axis, a tangent element
(``tan``), its dual tangent bivector (``bitan``) and the direct sphere
through which it was carried to its current point (``sphere``).  New
frames are made by stepping along a curved axis (``xbend``) or by
closing a loop through the intersection of a constant-coordinate
surface with a circle through known corners (``xclose``, ``close``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

import numpy as np

from conframe import cga
from conframe.cga import I3, e1, e2, e3, einf, eo
from conframe.config import DEFAULT_CONFIG, FrameConfig
from conframe.tframe import normalize

__all__ = ['Frame', 'TangentFrame', 'Contact', 'SixSphere',
           'accumulate_curvature', 'constrain_point_to_circle']

logger = logging.getLogger(__name__)


def _unit_np(v: np.ndarray) -> np.ndarray:
    n = math.sqrt(v.dot(v))
    if n == 0.0:
        raise ValueError('zero length direction')
    return v / n


def _is_flat_point(pair, tol) -> bool:
    return bool(np.abs((pair ^ einf).value).max() <= tol)


def _pair_points(pair, tol):
    ## two points of a real pair, or the single finite point of a flat one
    if _is_flat_point(pair, tol):
        v = eo | pair
        pt = cga.point(cga.euclid(v) / cga.weight(v))
        return pt, pt
    return cga.point_pair(pair)


@dataclass(frozen=True, eq=False)
class Frame:
    """Rigid frame: a Euclidean position and a rotor."""

    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotor: object = field(default_factory=lambda: 1.0 + 0.0 * e1)
    scale: float = 1.0

    @classmethod
    def from_axis_angle(cls, position, axis, angle: float, scale: float = 1.0) -> 'Frame':
        """Frame at ``position`` rotated by ``angle`` radians about ``axis``."""
        n = _unit_np(np.asarray(axis, dtype=float))
        plane = cga.vec(n) * I3
        rotor = math.cos(angle / 2.0) - plane * math.sin(angle / 2.0)
        return cls(tuple(float(c) for c in position), rotor, scale)

    def pos(self):
        return cga.point(self.position)

    def rot(self):
        return self.rotor

    def _axis(self, e):
        return cga.spin(self.rotor, e)(1)

    def xdir(self):
        return self._axis(e1)

    def ydir(self):
        return self._axis(e2)

    def zdir(self):
        return self._axis(e3)

    def tx(self):
        return cga.tangent(self.pos(), self.xdir())

    def ty(self):
        return cga.tangent(self.pos(), self.ydir())

    def tz(self):
        return cga.tangent(self.pos(), self.zdir())

    def moved(self, position) -> 'Frame':
        return replace(self, position=tuple(float(c) for c in position))

    def cxy(self):
        """Circle of radius ``scale`` about the frame in its xy plane."""
        c = np.array(self.position, dtype=float)
        x = cga.euclid(self.xdir()) * self.scale
        y = cga.euclid(self.ydir()) * self.scale
        return cga.point(c + x) ^ cga.point(c + y) ^ cga.point(c - x)


@dataclass(frozen=True, eq=False)
class TangentFrame:
    """Frame stored as tangents, tangent bivectors and carrier spheres."""

    frame: Frame
    tan: Tuple
    bitan: Tuple
    sphere: Tuple
    config: FrameConfig = DEFAULT_CONFIG

    @classmethod
    def from_frame(cls, frame: Optional[Frame] = None,
                   config: FrameConfig = DEFAULT_CONFIG) -> 'TangentFrame':
        """Store a rigid frame's axes as tangents at its position."""
        frame = frame if frame is not None else Frame()
        tan = (frame.tx(), frame.ty(), frame.tz())
        bitan = tuple(cga.undual(t) for t in tan)
        sphere = tuple(cga.carrier(b) for b in bitan)
        return cls(frame, tan, bitan, sphere, config)

    @classmethod
    def at(cls, p, rel: 'TangentFrame') -> 'TangentFrame':
        """Frame at point ``p`` carried from ``rel`` through spheres.

        Each sphere passes through ``p`` and contains the matching
        tangent bivector of ``rel``; the new tangents are the sphere
        normals at ``p``, oriented to agree with ``rel``.
        """
        p = cga.null(p)
        tan, bitan, sphere = [], [], []
        for j in range(3):
            s = rel.bitan[j] ^ p
            b = cga.tangent_at(s, p)(3)
            t = cga.dual(b)(2)
            old = cga.euclid(cga.direction(rel.tan[j]))
            if cga.euclid(cga.direction(t)).dot(old) < 0:
                t, b = -t, -b
            sphere.append(s)
            bitan.append(b)
            tan.append(t)
        frame = rel.frame.moved(tuple(cga.euclid(cga.down(p))))
        return cls(frame, tuple(tan), tuple(bitan), tuple(sphere), rel.config)

    def flip(self, idx: int) -> 'TangentFrame':
        """Copy with the ``idx`` tangent reversed."""
        tan = list(self.tan)
        bitan = list(self.bitan)
        tan[idx] = -tan[idx]
        bitan[idx] = -bitan[idx]
        return replace(self, tan=tuple(tan), bitan=tuple(bitan))

    def unit(self) -> 'TangentFrame':
        """Copy with unit tangents and unit-weight spheres."""
        pos = self.point()
        tol = self.config.tolerance
        tan = tuple(cga.tangent(pos, cga.vec(_unit_np(cga.euclid(cga.direction(t)))))
                    for t in self.tan)
        bitan = tuple(cga.undual(t) for t in tan)
        sphere = tuple(cga.dual(normalize(cga.undual(s), tol)) for s in self.sphere)
        return replace(self, tan=tan, bitan=bitan, sphere=sphere)

    def calc_curve(self, idx: int):
        """Edge circle as the intersection of two carrier spheres.

        Every index resolves to the intersection of spheres 0 and 1.
        """
        if idx not in (0, 1, 2):
            raise ValueError('curve index must be 0, 1 or 2')
        return cga.dual(cga.undual(self.sphere[0]) ^ cga.undual(self.sphere[1]))

    ## directions

    def _dir(self, idx):
        return cga.vec(_unit_np(cga.euclid(cga.direction(self.tan[idx]))))

    def xdir(self):
        return self._dir(0)

    def ydir(self):
        return self._dir(1)

    def zdir(self):
        return self._dir(2)

    ## curving boosts relative to the tangents

    def _curve(self, *amounts):
        tol = self.config.tolerance
        gen = sum((self.tan[j] * float(a) for j, a in amounts), 0.0 * e1)
        return cga.boost(gen * -0.5, tol)

    def xcurve(self, amt: float):
        return self._curve((0, amt))

    def ycurve(self, amt: float):
        return self._curve((1, amt))

    def zcurve(self, amt: float):
        return self._curve((2, amt))

    def xycurve(self, amt_x: float, amt_y: float):
        return self._curve((0, amt_x), (1, amt_y))

    def xzcurve(self, amt_x: float, amt_z: float):
        return self._curve((0, amt_x), (2, amt_z))

    def yzcurve(self, amt_y: float, amt_z: float):
        return self._curve((1, amt_y), (2, amt_z))

    ## constant-coordinate surfaces

    def _surface(self, idx, bend):
        flat = cga.undual(cga.carrier(self.bitan[idx]))(1)
        if hasattr(bend, 'value'):
            return cga.spin(bend, flat)(1)
        n = cga.euclid(flat)
        flat = flat * (1.0 / math.sqrt(n.dot(n)))
        return cga.spin(self._curve((idx, bend)), flat)(1)

    def xsurface(self, bend):
        """Constant x surface from a boost or a curvature scalar."""
        return self._surface(0, bend)

    def ysurface(self, bend):
        """Constant y surface from a boost or a curvature scalar."""
        return self._surface(1, bend)

    def zsurface(self, bend):
        """Constant z surface from a boost or a curvature scalar."""
        return self._surface(2, bend)

    ## points and bends

    def point(self):
        return self.frame.pos()

    def _step(self, d, amt):
        return cga.spin(cga.translator(d * float(amt)), self.point())

    def xpoint(self, amt: float):
        return self._step(self.xdir(), amt)

    def ypoint(self, amt: float):
        return self._step(self.ydir(), amt)

    def zpoint(self, amt: float):
        return self._step(self.zdir(), amt)

    def xbend(self, amt_y: float, amt_z: float, dist: float = 1.0) -> 'TangentFrame':
        """Step ``dist`` along x while curving toward y and z."""
        pt = cga.spin(self.yzcurve(amt_y, amt_z), self.xpoint(dist))
        return TangentFrame.at(pt, self)

    def ybend(self, amt_x: float, amt_z: float, dist: float = 1.0) -> 'TangentFrame':
        """Step ``dist`` along y while curving toward x and z."""
        pt = cga.spin(self.xzcurve(amt_x, amt_z), self.ypoint(dist))
        return TangentFrame.at(pt, self)

    def zbend(self, amt_x: float, amt_y: float, dist: float = 1.0) -> 'TangentFrame':
        """Step ``dist`` along z while curving toward x and y."""
        pt = cga.spin(self.xycurve(amt_x, amt_y), self.zpoint(dist))
        return TangentFrame.at(pt, self)

    ## closing loops

    def _other(self, pair) -> 'TangentFrame':
        ## the intersection point that is not this frame's own position
        pt = self.point()
        tol = self.config.tolerance
        tpa, tpb = _pair_points(pair, tol)
        if abs(cga.scalar(pt | tpa)) <= tol:
            if abs(cga.scalar(pt | tpb)) <= tol:
                logger.debug('both intersection points coincide with the frame')
            return TangentFrame.at(tpb, self)
        return TangentFrame.at(tpa, self)

    def circle_close(self, s, pa, pb) -> 'TangentFrame':
        """Meet surface ``s`` with the circle through here, ``pa`` and ``pb``."""
        cir = self.point() ^ cga.null(pa) ^ cga.null(pb)
        return self._other((s | cir)(2))

    def xclose(self, amt: float, pa, pb) -> 'TangentFrame':
        return self.circle_close(self.xsurface(amt), pa, pb)

    def yclose(self, amt: float, pa, pb) -> 'TangentFrame':
        return self.circle_close(self.ysurface(amt), pa, pb)

    def zclose(self, amt: float, pa, pb) -> 'TangentFrame':
        return self.circle_close(self.zsurface(amt), pa, pb)

    def close(self, ta: 'TangentFrame', tb: 'TangentFrame',
              tc: 'TangentFrame', td: 'TangentFrame') -> 'TangentFrame':
        """Fourth corner from two circles through here and four frames."""
        pt = self.point()
        cir = pt ^ ta.point() ^ tb.point()
        cir2 = pt ^ tc.point() ^ td.point()
        return self._other((cga.surround(cir) | cir2)(2))


def _normal(p, s):
    ## tangent at p normal to the dual sphere or plane s
    return cga.dual(p | cga.dual(s))(2)


def _nearest(pts, p):
    return min(pts, key=lambda q: cga.dist(q, p))


def _plunge(p, tnv, target, tol):
    ## follow the circle through p along tnv that meets target orthogonally
    if abs(cga.scalar(p | target)) <= tol:
        return p
    p_star = cga.null(cga.spin(target, p))
    cir = tnv ^ p_star
    return _nearest(_pair_points((target | cir)(2), tol), p)


@dataclass(frozen=True, eq=False)
class Contact:
    """A point on a target surface with the surface normal there.

    The normal tangent ``tnv`` points along the normal of the dual
    sphere or plane, which may point inwards.
    """

    sphere: object
    point: object
    tnv: object

    @classmethod
    def on_plane(cls, p, plane) -> 'Contact':
        p = cga.null(p)
        return cls(plane, p, _normal(p, plane))

    @classmethod
    def on_sphere(cls, p, sphere) -> 'Contact':
        p = cga.null(p)
        return cls(sphere, p, _normal(p, sphere))

    @classmethod
    def projected(cls, p, source, target, tol: float = cga.epsilon) -> 'Contact':
        """Plunge from ``p`` on ``source`` orthogonally into ``target``."""
        p = cga.null(p)
        pt = _plunge(p, _normal(p, source), target, tol)
        return cls(target, pt, _normal(pt, target))

    @classmethod
    def from_contact(cls, source: 'Contact', target, tol: float = cga.epsilon) -> 'Contact':
        """Plunge along an existing contact normal into ``target``."""
        pt = _plunge(source.point, source.tnv, target, tol)
        return cls(target, pt, _normal(pt, target))

    def bitan(self):
        """Tangent bivector at the contact point."""
        return cga.undual(self.tnv)

    def vec(self):
        """Unit Euclidean normal."""
        return cga.vec(_unit_np(cga.euclid(cga.direction(self.tnv))))

    def biv(self):
        """Unit Euclidean bivector dual to :meth:`vec`."""
        return self.vec() * I3


def accumulate_curvature(c: float, length: float) -> float:
    """Curvature at the far end of a coordinate line of given length.

    Zero curvature stays zero; otherwise ``-1/(1/c - length)`` for
    positive ``c`` and ``1/(1/-c + length)`` for negative ``c``.  When the
    radius equals the length the lines meet at the center and the limiting
    curvature ``-inf`` is returned.
    """
    if c == 0:
        return 0.0
    if c > 0:
        den = (1.0 / c) - length
        if den == 0:
            logger.debug('curvature radius %g equals the line length', 1.0 / c)
            return -math.inf
        return -(1.0 / den)
    return 1.0 / ((1.0 / -c) + length)


@dataclass
class Curve:
    """Two curvatures of one coordinate curve."""

    a: float = 0.0
    b: float = 0.0


def _curve_property(idx: int, attr: str):
    def getter(self):
        return getattr(self.curve[idx], attr)

    def setter(self, value):
        setattr(self.curve[idx], attr, float(value))

    return property(getter, setter)


class SixSphere:
    """Coordinate system with a curvature in each of six directions.

    Derived frames (:meth:`x` ... :meth:`xyz`) are recomputed from the
    current curvatures and lengths on every call.
    """

    def __init__(self, frame: Optional[Frame] = None,
                 config: FrameConfig = DEFAULT_CONFIG):
        self.frame = TangentFrame.from_frame(frame, config)
        self.curve = [Curve(), Curve(), Curve()]
        self.length_x = 1.0
        self.length_y = 1.0
        self.length_z = 1.0

    def set(self, yx, zx, xy, zy, xz, yz, lx=1.0, ly=1.0, lz=1.0) -> None:
        """Set curvatures (constant x in y and z, constant y in x and z,
        constant z in x and y) and the three axis lengths."""
        for length in (lx, ly, lz):
            if not length > 0:
                raise ValueError('lengths must be positive')
        self.curve = [Curve(float(yx), float(zx)),
                      Curve(float(xy), float(zy)),
                      Curve(float(xz), float(yz))]
        self.length_x = float(lx)
        self.length_y = float(ly)
        self.length_z = float(lz)

    cyx = _curve_property(0, 'a')
    czx = _curve_property(0, 'b')
    cxy = _curve_property(1, 'a')
    czy = _curve_property(1, 'b')
    cxz = _curve_property(2, 'a')
    cyz = _curve_property(2, 'b')

    def x(self) -> TangentFrame:
        return self.frame.xbend(self.curve[0].a, self.curve[0].b, self.length_x).unit()

    def y(self) -> TangentFrame:
        return self.frame.ybend(self.curve[1].a, self.curve[1].b, self.length_y).unit()

    def z(self) -> TangentFrame:
        return self.frame.zbend(self.curve[2].a, self.curve[2].b, self.length_z).unit()

    def xy(self, c: float = 0.0) -> TangentFrame:
        x1y = accumulate_curvature(self.cxy, self.length_x)
        return self.x().xclose(x1y + c, self.frame.point(), self.y().point()).unit()

    def zx(self, c: float = 0.0) -> TangentFrame:
        z1x = accumulate_curvature(self.czx, self.length_z)
        return self.z().zclose(z1x + c, self.frame.point(), self.x().point()).unit()

    def zy(self, c: float = 0.0) -> TangentFrame:
        z1y = accumulate_curvature(self.czy, self.length_z)
        return self.z().zclose(z1y + c, self.frame.point(), self.y().point()).unit()

    def xyz(self, cx: float = 0.0, cy: float = 0.0) -> TangentFrame:
        return self.xy().close(self.x(), self.zx(cx), self.y(), self.zy(cy)).unit()


def constrain_point_to_circle(p, cir, tol: float = cga.epsilon):
    """Point on circle ``cir`` closest to ``p``.

    ``p`` is projected into the circle's plane, then the line through
    that projection and the center is met with the circle's surround.
    A point on the circle's axis is equidistant from every point of the
    circle; the line is then taken along the in-plane axis direction
    least aligned with the normal.
    """
    p = cga.null(p)
    center = cga.location(cir)
    c = cga.euclid(center)
    n = _unit_np(cga.euclid(cga.undual(cga.carrier(cir))))
    x = cga.euclid(cga.down(p))
    coplanar = x - (x - c).dot(n) * n
    if math.sqrt((coplanar - c).dot(coplanar - c)) <= tol:
        logger.debug('point lies on the circle axis')
        axis = np.eye(3)[int(np.argmin(np.abs(n)))]
        coplanar = c + _unit_np(axis - axis.dot(n) * n)
    line = cga.point(coplanar) ^ center ^ einf
    pts = cga.point_pair((cga.surround(cir) | line)(2))
    return _nearest(pts, p)
