## tangent frames and constant-coordinate surfaces for conFrame

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

"""Local tangent frames carrying six constant-coordinate surfaces.

A :class:`TFrame` holds three tangent elements ``tu``, ``tv``, ``tw``
and six dual spheres (planes in the flat limit).  Surface ``sXY`` is the
surface of constant ``X`` seen while sweeping along ``Y``; for example
``svu`` is the surface of constant v along which the u curve runs, and
its curvature is the ``kvu`` coefficient of a volume.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Optional

from conframe import cga
from conframe.cga import e1, e2, e3, einf, eo
from conframe.config import DEFAULT_CONFIG, FrameConfig

__all__ = ['TFrame', 'normalize', 'calc_gen', 'calc_gen2', 'normalize_pair']

logger = logging.getLogger(__name__)


def normalize(s, tol=cga.epsilon):
    """Scale a dual sphere to unit weight, keeping the sign of the weight.

    A flat surface (weight within ``tol`` of zero) is truncated instead:
    its ``eo`` coefficient is dropped and the rest is returned unscaled.
    """
    s = s(1)
    w = cga.weight(s)
    if abs(w) <= tol:
        if w != 0.0:
            logger.debug('truncating near-flat surface with weight %g', w)
        return s - w * eo
    return s * (1.0 / abs(w))


def calc_gen(p1, p2, beg, end, config: FrameConfig = DEFAULT_CONFIG):
    """Generator whose exponential carries surface ``beg`` to ``end``.

    ``p1`` and ``p2`` are tangents sitting on ``beg`` and ``end``.  The
    ratio of two surfaces is only defined up to sign, so the branch is
    picked by an ordered decision table:

    1. if ``p1`` and ``p2`` disagree about the side of their surface
       (sign of the weight of ``beg | p1`` versus ``end | p2``) the ratio
       is negated;
    2. if the scalar part of the ratio is then negative and the
       location of ``p1`` lies on the positive side of ``end`` the ratio
       is negated again.

    The generator is half the logarithm of the resulting unit ratio.
    """
    tol = config.tolerance
    r = cga.tunit(cga.ratio(end, beg))
    flip_a = cga.weight(beg | p1) > 0
    flip_b = cga.weight(end | p2) > 0
    if flip_a != flip_b:
        r = -r
    if cga.scalar(r) < 0 and cga.scalar(cga.location(p1) | end) > tol:
        logger.debug('negating surface ratio with scalar part %g', cga.scalar(r))
        r = -r
    return cga.log(r, tol) * 0.5


def calc_gen2(p, beg, end, config: FrameConfig = DEFAULT_CONFIG):
    """Generator from ``beg`` to ``end`` using a test point ``p``."""
    r = cga.tunit(cga.ratio(end, beg))
    if cga.scalar(r) < 0 and cga.scalar(p | end) > 0:
        r = -r
    return cga.log(r, config.tolerance) * 0.5


def normalize_pair(pair):
    """Unit tangent at the location of ``pair`` along its direction."""
    d = cga.euclid(cga.direction(pair))
    n = math.sqrt(d.dot(d))
    if n == 0.0:
        raise ValueError('pair has no direction')
    return cga.tangent(cga.location(pair), cga.vec(d / n))


def _unit(t):
    ## rebuild a carried tangent as a unit tangent at its own location
    return normalize_pair(t(2))


@dataclass(frozen=True, eq=False)
class TFrame:
    """Three tangents and their six constant-coordinate surfaces."""

    tu: object = field(default_factory=lambda: e1 ^ eo)
    tv: object = field(default_factory=lambda: e2 ^ eo)
    tw: object = field(default_factory=lambda: e3 ^ eo)
    svu: Optional[object] = None
    swu: Optional[object] = None
    suv: Optional[object] = None
    swv: Optional[object] = None
    suw: Optional[object] = None
    svw: Optional[object] = None
    config: FrameConfig = DEFAULT_CONFIG

    def with_surfaces(self, **surfaces) -> 'TFrame':
        """Copy of this frame with some surfaces replaced."""
        unknown = set(surfaces) - {'svu', 'swu', 'suv', 'swv', 'suw', 'svw'}
        if unknown:
            raise ValueError(f"unknown surfaces: {sorted(unknown)}")
        return replace(self, **surfaces)

    def surface(self, name: str):
        s = getattr(self, name)
        if s is None:
            raise ValueError(f"surface {name} has not been derived")
        return s

    ## flat planes through the frame, normal to each tangent

    def flat_surfaces(self) -> 'TFrame':
        pu = einf | self.tu
        pv = einf | self.tv
        pw = einf | self.tw
        return replace(self, svu=pv, svw=pv, suv=pu, suw=pu, swu=pw, swv=pw)

    def _bend(self, t, k):
        pl = einf | t
        return normalize(pl + (pl | t) * float(k), self.config.tolerance)

    def usurf(self, k: float):
        """Constant-u surface through the frame with curvature ``k``."""
        return self._bend(self.tu, k)

    def vsurf(self, k: float):
        """Constant-v surface through the frame with curvature ``k``."""
        return self._bend(self.tv, k)

    def wsurf(self, k: float):
        """Constant-w surface through the frame with curvature ``k``."""
        return self._bend(self.tw, k)

    def surfaces(self, kvu, kwu, kuv, kwv, kuw, kvw) -> 'TFrame':
        """Copy of this frame with all six surfaces bent by curvature."""
        return replace(self,
                       svu=self.vsurf(kvu), swu=self.wsurf(kwu),
                       suv=self.usurf(kuv), swv=self.wsurf(kwv),
                       suw=self.usurf(kuw), svw=self.vsurf(kvw))

    ## unit directions and position

    def _dir(self, t):
        d = cga.euclid(cga.direction(t))
        return cga.vec(d / math.sqrt(d.dot(d)))

    def du(self):
        return self._dir(self.tu)

    def dv(self):
        return self._dir(self.tv)

    def dw(self):
        return self._dir(self.tw)

    def pos(self):
        return cga.location(self.tu)

    ## curving motions along each axis

    def uc(self, kvu: float, kwu: float, dist: float):
        """Versor bending toward v and w while moving ``dist`` along u."""
        bst = cga.boost((self.tv * float(kvu) + self.tw * float(kwu)) * -0.5)
        return bst * cga.translator(self.du() * float(dist))

    def vc(self, kuv: float, kwv: float, dist: float):
        """Versor bending toward u and w while moving ``dist`` along v."""
        bst = cga.boost((self.tu * float(kuv) + self.tw * float(kwv)) * -0.5)
        return bst * cga.translator(self.dv() * float(dist))

    def wc(self, kuw: float, kvw: float, dist: float):
        """Versor bending toward u and v while moving ``dist`` along w."""
        bst = cga.boost((self.tu * float(kuw) + self.tv * float(kvw)) * -0.5)
        return bst * cga.translator(self.dw() * float(dist))

    def xf(self, versor, uflip=False, vflip=False, wflip=False) -> 'TFrame':
        """Carry the tangents by ``versor``; surfaces are not carried."""
        tu = _unit(cga.spin(versor, self.tu))
        tv = _unit(cga.spin(versor, self.tv))
        tw = _unit(cga.spin(versor, self.tw))
        return TFrame(tu=-tu if uflip else tu,
                      tv=-tv if vflip else tv,
                      tw=-tw if wflip else tw,
                      config=self.config)

    def uflip(self) -> 'TFrame':
        return replace(self, tu=-self.tu)

    def vflip(self) -> 'TFrame':
        return replace(self, tv=-self.tv)

    def wflip(self) -> 'TFrame':
        return replace(self, tw=-self.tw)

    ## generators toward another frame, one per surface pair

    def duv(self, tf: 'TFrame'):
        """Sweeps the v curve over along u."""
        return calc_gen(self.tu, tf.tu, self.surface('suv'), tf.surface('suv'), self.config)

    def duw(self, tf: 'TFrame'):
        """Sweeps the w curve over along u."""
        return calc_gen(self.tu, tf.tu, self.surface('suw'), tf.surface('suw'), self.config)

    def dvu(self, tf: 'TFrame'):
        """Sweeps the u curve up along v."""
        return calc_gen(self.tv, tf.tv, self.surface('svu'), tf.surface('svu'), self.config)

    def dvw(self, tf: 'TFrame'):
        """Sweeps the w curve up along v."""
        return calc_gen(self.tv, tf.tv, self.surface('svw'), tf.surface('svw'), self.config)

    def dwu(self, tf: 'TFrame'):
        """Sweeps the u curve in along w."""
        return calc_gen(self.tw, tf.tw, self.surface('swu'), tf.surface('swu'), self.config)

    def dwv(self, tf: 'TFrame'):
        """Sweeps the v curve in along w."""
        return calc_gen(self.tw, tf.tw, self.surface('swv'), tf.surface('swv'), self.config)
