## curved coordinate volumes for conFrame

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

"""Curved six-sided coordinate volumes.

A :class:`TVolume` places eight :class:`~conframe.tframe.TFrame` corner
frames on a box bent by nine curvature coefficients, derives the 24
constant-coordinate surfaces at the corners and the twelve generators
that carry each surface along its edge.  The generators are then used
to interpolate a versor at any (u, v, w) in the unit cube, and to invert
a point lying on one of the faces back to its normalized coordinates.

Corners are indexed by a three bit code (bit 0 = u, bit 1 = v,
bit 2 = w).  Generator ``dXYZn`` sweeps the ``Y`` curve along ``X``
on the face where ``Z`` is ``n``.
"""

from __future__ import annotations

import logging
from enum import Enum, IntEnum
from typing import List, NamedTuple, Optional, Sequence, Tuple

import numpy as np

from conframe import cga
from conframe.cga import einf, eo
from conframe.config import DEFAULT_CONFIG, FrameConfig
from conframe.tframe import TFrame, calc_gen, normalize, normalize_pair

__all__ = ['Corner', 'Face', 'Curvature', 'Generator', 'Coord', 'Mapping',
           'SurfaceBuilder', 'TVolume']

logger = logging.getLogger(__name__)


class Corner(IntEnum):
    ORIGIN = 0
    U = 1
    V = 2
    UV = 3
    W = 4
    UW = 5
    VW = 6
    UVW = 7


class Face(Enum):
    LEFT = 0    # u = 0
    RIGHT = 1   # u = 1
    BOTTOM = 2  # v = 0
    TOP = 3     # v = 1
    BACK = 4    # w = 0
    FRONT = 5   # w = 1


class Curvature(IntEnum):
    KVU = 0
    KWU = 1
    KUV = 2
    KWV = 3
    KUW = 4
    KVW = 5
    KV1U = 6
    KU1W = 7
    KW1V = 8


class Generator(IntEnum):
    DUVW0 = 0
    DUWV0 = 1
    DVWU0 = 2
    DVUW0 = 3
    DWUV0 = 4
    DWVU0 = 5
    DUVW1 = 6
    DUWV1 = 7
    DVWU1 = 8
    DVUW1 = 9
    DWUV1 = 10
    DWVU1 = 11


class Coord(NamedTuple):
    u: float
    v: float
    w: float


class Mapping:
    """Fixed-size 3D grid of versors indexed by (i, j, k).

    Cells are stored row major over (res_u, res_v, res_w); the grid
    cannot be resized after construction.
    """

    def __init__(self, res_u: int, res_v: int, res_w: int):
        for res in (res_u, res_v, res_w):
            if int(res) != res or res < 1:
                raise ValueError('resolutions must be positive integers')
        self._cells = np.empty((int(res_u), int(res_v), int(res_w)), dtype=object)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self._cells.shape

    def __len__(self) -> int:
        return self._cells.size

    def _check(self, i, j, k):
        for idx, res in zip((i, j, k), self._cells.shape):
            if not 0 <= idx < res:
                raise ValueError(f"index ({i}, {j}, {k}) outside grid {self.shape}")

    def at(self, i: int, j: int, k: int):
        self._check(i, j, k)
        return self._cells[i, j, k]

    def set(self, i: int, j: int, k: int, versor) -> None:
        self._check(i, j, k)
        self._cells[i, j, k] = versor

    def index(self, i: int, j: int, k: int) -> int:
        """Linear offset of a cell in row-major order."""
        self._check(i, j, k)
        _, res_v, res_w = self._cells.shape
        return i * res_v * res_w + j * res_w + k

    def items(self):
        for idx in np.ndindex(*self._cells.shape):
            yield idx, self._cells[idx]


def _param(idx: int, res: int) -> float:
    ## a single sample sits at parameter 0
    if res == 1:
        return 0.0
    return idx / (res - 1)


def _meet_planes(a, b, c):
    ## point common to three direct planes, as a unit point
    flat_point = cga.dual(cga.dual(a) ^ cga.dual(b) ^ cga.dual(c))
    v = eo | flat_point
    return cga.point(cga.euclid(v) / cga.weight(v))


SURFACE_STAGES = ('versors', 'origin', 'adjacent', 'secondary', 'orthogonal',
                  'near_generators', 'double', 'opposite', 'far_surfaces',
                  'far_generators')

FACE_STAGES = ('seed', 'face_surfaces', 'bent_surfaces', 'adjacent_u',
               'orthogonal', 'near_generators', 'double', 'opposite',
               'far_surfaces', 'far_generators')


class SurfaceBuilder:
    """Staged derivation of corner frames, surfaces and generators.

    Each stage replaces corner frames with new immutable
    :class:`TFrame` snapshots and must run exactly once, in order.
    :meth:`build` runs every remaining stage.  Two stage sequences exist:
    the full derivation from nine curvatures (``SURFACE_STAGES``) and
    the derivation seeded from a face shared with a neighbouring volume
    (``FACE_STAGES``, started by :meth:`seed`).
    """

    def __init__(self, curvatures: Sequence[float], spacings: Sequence[float],
                 config: FrameConfig = DEFAULT_CONFIG, stages=SURFACE_STAGES):
        if len(curvatures) != len(Curvature):
            raise ValueError('nine curvatures are required')
        if len(spacings) != 3:
            raise ValueError('three spacings are required')
        self.k = tuple(float(c) for c in curvatures)
        self.spacing = tuple(float(s) for s in spacings)
        self.config = config
        self.stages = tuple(stages)
        self.seeded = self.stages == FACE_STAGES
        self.done = 0
        self.frames: List[Optional[TFrame]] = [None] * len(Corner)
        self.frames[Corner.ORIGIN] = TFrame(config=config)
        self.generators = [None] * len(Generator)
        self._versors = None
        self.np = None

    @classmethod
    def for_face(cls, curvatures, spacings, config=DEFAULT_CONFIG) -> 'SurfaceBuilder':
        return cls(curvatures, spacings, config, stages=FACE_STAGES)

    @property
    def stage(self) -> Optional[str]:
        """Name of the next stage to run, ``None`` once complete."""
        if self.done >= len(self.stages):
            return None
        return self.stages[self.done]

    def _enter(self, name: str) -> None:
        if self.stage != name:
            raise RuntimeError(f"stage {name!r} cannot run now (next is {self.stage!r})")
        logger.debug('surface stage %s', name)
        self.done += 1

    def snapshot(self) -> Tuple[Optional[TFrame], ...]:
        return tuple(self.frames)

    def build(self):
        """Run the remaining stages; return (frames, generators)."""
        while self.stage is not None:
            if self.stage == 'seed':
                raise RuntimeError('face derivation must be seeded first')
            getattr(self, self.stage)()
        return tuple(self.frames), tuple(self.generators)

    ## helpers

    def _k(self, c: Curvature) -> float:
        return self.k[c]

    def _f(self, c: Corner) -> TFrame:
        return self.frames[c]

    def _update(self, c: Corner, **surfaces) -> None:
        self.frames[c] = self.frames[c].with_surfaces(**surfaces)

    def _ortho(self, surface, t):
        ## surface through the tangent's point, orthogonal to another
        return normalize(surface | (t * self.config.sign), self.config.tolerance)

    ## full derivation from nine curvatures

    def versors(self) -> None:
        self._enter('versors')
        tf = self._f(Corner.ORIGIN)
        k = self._k
        us, vs, ws = self.spacing
        self._versors = (tf.uc(k(Curvature.KVU), k(Curvature.KWU), us),
                        tf.vc(k(Curvature.KUV), k(Curvature.KWV), vs),
                        tf.wc(k(Curvature.KUW), k(Curvature.KVW), ws))

    def origin(self) -> None:
        self._enter('origin')
        k = self._k
        self.frames[Corner.ORIGIN] = self._f(Corner.ORIGIN).surfaces(
            k(Curvature.KVU), k(Curvature.KWU), k(Curvature.KUV),
            k(Curvature.KWV), k(Curvature.KUW), k(Curvature.KVW))

    def adjacent(self) -> None:
        self._enter('adjacent')
        tf = self._f(Corner.ORIGIN)
        flip = self.config.flip
        uc, vc, wc = self._versors
        self.frames[Corner.U] = tf.xf(uc, flip, False, False)
        self.frames[Corner.V] = tf.xf(vc, False, flip, False)
        self.frames[Corner.W] = tf.xf(wc, False, False, flip)

    def secondary(self) -> None:
        self._enter('secondary')
        self._update(Corner.V, svu=self._f(Corner.V).vsurf(self._k(Curvature.KV1U)))
        self._update(Corner.U, suw=self._f(Corner.U).usurf(self._k(Curvature.KU1W)))
        self._update(Corner.W, swv=self._f(Corner.W).wsurf(self._k(Curvature.KW1V)))

    def orthogonal(self) -> None:
        self._enter('orthogonal')
        f = self._f
        U, V, W = Corner.U, Corner.V, Corner.W
        self._update(U, suv=self._ortho(f(V).svu, f(U).tu))
        self._update(U, swv=self._ortho(f(V).svu, f(U).tw))
        self._update(W, swu=self._ortho(f(U).suw, f(W).tw))
        self._update(W, svu=self._ortho(f(U).suw, f(W).tv))
        if not self.seeded:
            self._update(V, svw=self._ortho(f(W).swv, f(V).tv))
            self._update(V, suw=self._ortho(f(W).swv, f(V).tu))
        self._update(U, svw=self._ortho(f(W).swu, f(U).tv))
        self._update(V, swu=self._ortho(f(U).suv, f(V).tw))
        if not self.seeded:
            self._update(W, suv=self._ortho(f(V).svw, f(W).tu))

    def near_generators(self) -> None:
        self._enter('near_generators')
        tf, uf, vf, wf = (self._f(c) for c in (Corner.ORIGIN, Corner.U, Corner.V, Corner.W))
        g = self.generators
        g[Generator.DUVW0] = tf.duv(uf)
        g[Generator.DUWV0] = tf.duw(uf)
        g[Generator.DVWU0] = tf.dvw(vf)
        g[Generator.DVUW0] = tf.dvu(vf)
        g[Generator.DWUV0] = tf.dwu(wf)
        g[Generator.DWVU0] = tf.dwv(wf)

    def double(self) -> None:
        self._enter('double')
        g = self.generators
        tol = self.config.tolerance
        uf, vf, wf = (self._f(c) for c in (Corner.U, Corner.V, Corner.W))
        if not self.seeded:
            flip = self.config.flip
            self.frames[Corner.UV] = vf.xf(cga.boost(g[Generator.DUVW0], tol), flip, False, False)
            self.frames[Corner.VW] = wf.xf(cga.boost(g[Generator.DVWU0], tol), False, flip, False)
            self.frames[Corner.UW] = uf.xf(cga.boost(g[Generator.DWUV0], tol), False, False, flip)
        else:
            self.frames[Corner.UV] = vf.xf(cga.boost(g[Generator.DUVW0], tol))
            self.frames[Corner.UW] = uf.xf(cga.boost(g[Generator.DWUV0], tol))

    def opposite(self) -> None:
        self._enter('opposite')
        pos = {c: self._f(c).pos() for c in Corner if c is not Corner.ORIGIN and c is not Corner.UVW}
        top = pos[Corner.V] ^ pos[Corner.UV] ^ pos[Corner.VW] ^ einf
        front = pos[Corner.W] ^ pos[Corner.VW] ^ pos[Corner.UW] ^ einf
        right = pos[Corner.U] ^ pos[Corner.UW] ^ pos[Corner.UV] ^ einf
        self.np = _meet_planes(top, front, right)

    def far_surfaces(self) -> None:
        self._enter('far_surfaces')
        p = self.np
        f = self._f
        UV, VW, UW = Corner.UV, Corner.VW, Corner.UW
        self._update(UV, suw=self._ortho(p, f(UV).tu), svw=self._ortho(p, f(UV).tv))
        self._update(VW, svu=self._ortho(p, f(VW).tv), swu=self._ortho(p, f(VW).tw))
        self._update(UW, swv=self._ortho(p, f(UW).tw), suv=self._ortho(p, f(UW).tu))
        sign = self.config.sign
        if not self.seeded:
            tu = f(UV).suw ^ (p * sign)
            tv = f(UV).svw ^ (p * sign)
            tw = f(VW).swu ^ (p * sign)
        else:
            tu = normalize_pair(f(UV).suw ^ p)
            tv = normalize_pair(f(UV).svw ^ p)
            tw = normalize_pair(f(VW).swu ^ p)
        self.frames[Corner.UVW] = TFrame(tu=tu, tv=tv, tw=tw, config=self.config)

    def far_generators(self) -> None:
        self._enter('far_generators')
        f = self._f
        g = self.generators
        g[Generator.DUVW1] = f(Corner.W).duv(f(Corner.UW))
        g[Generator.DUWV1] = f(Corner.V).duw(f(Corner.UV))
        g[Generator.DVWU1] = f(Corner.U).dvw(f(Corner.UV))
        g[Generator.DVUW1] = f(Corner.W).dvu(f(Corner.VW))
        g[Generator.DWUV1] = f(Corner.V).dwu(f(Corner.VW))
        g[Generator.DWVU1] = f(Corner.U).dwv(f(Corner.UW))

    ## derivation seeded from a shared face

    def seed(self, tf: TFrame, vf: TFrame, wf: TFrame, vwf: TFrame) -> None:
        """Start from the four corner frames of the shared u = 0 face."""
        self._enter('seed')
        for corner, frame in ((Corner.ORIGIN, tf), (Corner.V, vf),
                              (Corner.W, wf), (Corner.VW, vwf)):
            self.frames[corner] = TFrame(tu=normalize_pair(frame.tu),
                                         tv=normalize_pair(frame.tv),
                                         tw=normalize_pair(frame.tw),
                                         config=self.config)

    def face_surfaces(self) -> None:
        self._enter('face_surfaces')
        f = self._f
        O, V, W, VW = Corner.ORIGIN, Corner.V, Corner.W, Corner.VW
        vp, wp, vwp = f(V).pos(), f(W).pos(), f(VW).pos()
        self._update(O, suv=self._ortho(vp, f(O).tu), swv=self._ortho(vp, f(O).tw),
                     suw=self._ortho(wp, f(O).tu), svw=self._ortho(wp, f(O).tv))
        self._update(V, suw=self._ortho(vwp, f(V).tu), svw=self._ortho(vwp, f(V).tv))
        self._update(W, suv=self._ortho(vwp, f(W).tu), swv=self._ortho(vwp, f(W).tw))

    def bent_surfaces(self) -> None:
        self._enter('bent_surfaces')
        tf = self._f(Corner.ORIGIN)
        self._update(Corner.ORIGIN, svu=tf.vsurf(self._k(Curvature.KVU)),
                     swu=tf.wsurf(self._k(Curvature.KWU)))
        self._update(Corner.V, svu=self._f(Corner.V).vsurf(self._k(Curvature.KV1U)))

    def adjacent_u(self) -> None:
        self._enter('adjacent_u')
        tf = self._f(Corner.ORIGIN)
        uc = tf.uc(self._k(Curvature.KVU), self._k(Curvature.KWU), self.spacing[0])
        uf = tf.xf(uc)
        self.frames[Corner.U] = uf.with_surfaces(suw=uf.usurf(self._k(Curvature.KU1W)))


def _frame_property(corner: Corner):
    return property(lambda self: self._frames[corner],
                    doc=f"Corner frame {corner.name}.")


def _curvature_property(c: Curvature):
    return property(lambda self: self._k[c], doc=f"Curvature {c.name.lower()}.")


def _generator_property(g: Generator):
    return property(lambda self: self._generators[g], doc=f"Generator {g.name.lower()}.")


class TVolume:
    """Eight corner frames of a curved box and its twelve edge generators.

    The curvatures are, in order, ``kvu kwu kuv kwv kuw kvw`` (the six
    surfaces at the origin corner) followed by ``kv1u ku1w kw1v`` (one
    extra surface at each single-axis corner).  The volume is fully
    derived on construction and immutable thereafter.
    """

    def __init__(self, kvu=0.0, kwu=0.0, kuv=0.0, kwv=0.0, kuw=0.0, kvw=0.0,
                 kv1u=0.0, ku1w=0.0, kw1v=0.0,
                 u_spacing=3.0, v_spacing=3.0, w_spacing=3.0,
                 config: FrameConfig = DEFAULT_CONFIG):
        self._setup((kvu, kwu, kuv, kwv, kuw, kvw, kv1u, ku1w, kw1v),
                    (u_spacing, v_spacing, w_spacing), config)
        self.calc_surfaces()

    def _setup(self, curvatures, spacings, config):
        if len(curvatures) != len(Curvature):
            raise ValueError('nine curvatures are required')
        if len(spacings) != 3:
            raise ValueError('three spacings are required')
        if any(not s > 0 for s in spacings):
            raise ValueError('spacings must be positive')
        self._k = tuple(float(c) for c in curvatures)
        self._spacing = tuple(float(s) for s in spacings)
        self.config = config
        self._frames: Tuple[TFrame, ...] = ()
        self._generators: Tuple = ()

    @classmethod
    def from_curvatures(cls, curvatures: Sequence[float],
                        spacings: Sequence[float] = (3.0, 3.0, 3.0),
                        config: FrameConfig = DEFAULT_CONFIG) -> 'TVolume':
        if len(curvatures) != len(Curvature):
            raise ValueError('nine curvatures are required')
        if len(spacings) != 3:
            raise ValueError('three spacings are required')
        return cls(*curvatures, *spacings, config=config)

    @classmethod
    def from_face(cls, volume: 'TVolume', face: Face,
                  curvatures: Optional[Sequence[float]] = None,
                  spacings: Optional[Sequence[float]] = None,
                  config: Optional[FrameConfig] = None) -> 'TVolume':
        """Neighbouring volume sharing ``face`` of an existing volume.

        Only the RIGHT face is shared: its four corners become the new
        volume's LEFT face.  Any other face yields a volume built from
        the given curvatures alone.
        """
        vol = cls.__new__(cls)
        vol._setup(tuple(curvatures) if curvatures is not None else (0.0,) * len(Curvature),
                   tuple(spacings) if spacings is not None else volume.spacings,
                   config if config is not None else volume.config)
        if face is Face.RIGHT:
            vol.calc_surfaces_from_face(Face.LEFT, volume.uf, volume.uvf,
                                        volume.uwf, volume.uvwf)
        else:
            logger.info('face %s is not shared; building an independent volume', face.name)
            vol.calc_surfaces()
        return vol

    ## derivation

    def _require_fresh(self):
        if self._frames:
            raise RuntimeError('surfaces have already been derived for this volume')

    def calc_surfaces(self) -> None:
        """Derive all corner frames, surfaces and generators."""
        self._require_fresh()
        builder = SurfaceBuilder(self._k, self._spacing, self.config)
        self._frames, self._generators = builder.build()
        self._np = builder.np

    def calc_surfaces_from_face(self, face: Face, tf: TFrame, vf: TFrame,
                                wf: TFrame, vwf: TFrame) -> None:
        """Derive the volume from the four corner frames of ``face``."""
        if face is not Face.LEFT:
            raise ValueError('only the LEFT face can seed a volume')
        self._require_fresh()
        builder = SurfaceBuilder.for_face(self._k, self._spacing, self.config)
        builder.seed(tf, vf, wf, vwf)
        self._frames, self._generators = builder.build()
        self._np = builder.np

    ## accessors

    @property
    def curvatures(self) -> Tuple[float, ...]:
        return self._k

    @property
    def spacings(self) -> Tuple[float, float, float]:
        return self._spacing

    @property
    def u_spacing(self) -> float:
        return self._spacing[0]

    @property
    def v_spacing(self) -> float:
        return self._spacing[1]

    @property
    def w_spacing(self) -> float:
        return self._spacing[2]

    @property
    def frames(self) -> Tuple[TFrame, ...]:
        return self._frames

    @property
    def generators(self) -> Tuple:
        return self._generators

    def frame(self, corner: Corner) -> TFrame:
        return self._frames[Corner(corner)]

    def curvature(self, c: Curvature) -> float:
        return self._k[Curvature(c)]

    def generator(self, g: Generator):
        return self._generators[Generator(g)]

    def corner(self, corner: Corner):
        """Position of a corner as a unit point."""
        if Corner(corner) is Corner.UVW:
            return self._np
        return self.frame(corner).pos()

    tf = _frame_property(Corner.ORIGIN)
    uf = _frame_property(Corner.U)
    vf = _frame_property(Corner.V)
    wf = _frame_property(Corner.W)
    uvf = _frame_property(Corner.UV)
    uwf = _frame_property(Corner.UW)
    vwf = _frame_property(Corner.VW)
    uvwf = _frame_property(Corner.UVW)

    kvu = _curvature_property(Curvature.KVU)
    kwu = _curvature_property(Curvature.KWU)
    kuv = _curvature_property(Curvature.KUV)
    kwv = _curvature_property(Curvature.KWV)
    kuw = _curvature_property(Curvature.KUW)
    kvw = _curvature_property(Curvature.KVW)
    kv1u = _curvature_property(Curvature.KV1U)
    ku1w = _curvature_property(Curvature.KU1W)
    kw1v = _curvature_property(Curvature.KW1V)

    duvw0 = _generator_property(Generator.DUVW0)
    duwv0 = _generator_property(Generator.DUWV0)
    dvwu0 = _generator_property(Generator.DVWU0)
    dvuw0 = _generator_property(Generator.DVUW0)
    dwuv0 = _generator_property(Generator.DWUV0)
    dwvu0 = _generator_property(Generator.DWVU0)
    duvw1 = _generator_property(Generator.DUVW1)
    duwv1 = _generator_property(Generator.DUWV1)
    dvwu1 = _generator_property(Generator.DVWU1)
    dvuw1 = _generator_property(Generator.DVUW1)
    dwuv1 = _generator_property(Generator.DWUV1)
    dwvu1 = _generator_property(Generator.DWVU1)

    ## forward mapping

    def _slice(self, tk: float):
        ## boost along w and the u and v generators valid on that w slice
        tol = self.config.tolerance
        tk = float(tk)
        wvu0 = cga.boost(self.dwvu0 * tk, tol)
        wvu1 = cga.boost(self.dwvu1 * tk, tol)
        wuv0 = cga.boost(self.dwuv0 * tk, tol)
        wuv1 = cga.boost(self.dwuv1 * tk, tol)

        tf, uf, vf = self.tf, self.uf, self.vf
        su0v = normalize(cga.spin(wvu0, tf.suv), tol)
        su1v = normalize(cga.spin(wvu1, uf.suv), tol)
        sv0u = normalize(cga.spin(wuv0, tf.svu), tol)
        sv1u = normalize(cga.spin(wuv1, vf.svu), tol)

        u0 = cga.spin(wvu0, tf.tu)(2)
        u1 = cga.spin(wvu1, uf.tu)(2)
        duv = calc_gen(u0, u1, su0v, su1v, self.config)
        v0 = cga.spin(wuv0, tf.tv)(2)
        v1 = cga.spin(wuv1, vf.tv)(2)
        dvu = calc_gen(v0, v1, sv0u, sv1u, self.config)
        return wvu0, duv, dvu

    def _compose(self, slc, ti: float, tj: float):
        wvu0, duv, dvu = slc
        tol = self.config.tolerance
        return cga.boost(dvu * float(tj), tol) * cga.boost(duv * float(ti), tol) * wvu0

    def calc_mapping_at(self, ti: float, tj: float, tk: float):
        """Versor carrying the origin corner to parameters (ti, tj, tk)."""
        return self._compose(self._slice(tk), ti, tj)

    def point_at(self, ti: float, tj: float, tk: float):
        """Position at parameters (ti, tj, tk) as a unit point."""
        return cga.null(cga.spin(self.calc_mapping_at(ti, tj, tk), self.tf.pos()))

    def calc_mapping(self, res_u: int, res_v: int, res_w: int) -> Mapping:
        """Sample :meth:`calc_mapping_at` over a (res_u, res_v, res_w) grid.

        Cell (i, j, k) holds the versor at parameters
        ``(i/(res_u-1), j/(res_v-1), k/(res_w-1))``; a resolution of one
        samples parameter 0 only.
        """
        result = Mapping(res_u, res_v, res_w)
        for i in range(res_w):
            slc = self._slice(_param(i, res_w))
            for j in range(res_u):
                ti = _param(j, res_u)
                for k in range(res_v):
                    result.set(j, k, i, self._compose(slc, ti, _param(k, res_v)))
        logger.debug('built %dx%dx%d mapping', res_u, res_v, res_w)
        return result

    ## inverse mapping

    def _coefficient(self, b, g) -> float:
        ## multiple of g closest to b, clamped near zero
        gv = g.value
        den = float(gv.dot(gv))
        if den <= self.config.tolerance ** 2:
            return 0.0
        t = float(b.value.dot(gv)) / den
        if abs(t) <= self.config.tolerance:
            return 0.0
        return t

    def _surface_param(self, p, gen, base) -> float:
        ## parameter of the surface of the gen pencil through p
        s = (p | gen)(1)
        r = cga.tunit(cga.ratio(s, base))
        if cga.scalar(r) < 0:
            r = -r
        pair = cga.log(r, self.config.tolerance) * 0.5
        return self._coefficient(pair, gen)

    def _front_param(self, p, gen, t0, t1, s0, s1) -> float:
        tol = self.config.tolerance
        s = normalize(-(p | gen), tol)
        st = s ^ p
        pair = eo | calc_gen(t0, st, s0, s, self.config)
        full = eo | calc_gen(t0, t1, s0, s1, self.config)
        return self._coefficient(pair, full)

    def inverse_mapping(self, p, face: Face) -> Coord:
        """Normalized coordinates of a point lying on ``face``.

        The coordinate fixed by the face is returned exactly (0 or 1); the
        other two are recovered from the edge generators of that face.
        """
        p = cga.null(p)
        if face is Face.LEFT:
            return Coord(0.0,
                         self._surface_param(p, self.dvwu0, self.tf.svw),
                         self._surface_param(p, self.dwvu0, self.tf.swv))
        if face is Face.RIGHT:
            return Coord(1.0,
                         self._surface_param(p, self.dvwu1, self.uf.svw),
                         self._surface_param(p, self.dwvu1, self.uf.swv))
        if face is Face.BACK:
            return Coord(self._surface_param(p, self.duvw0, self.tf.suv),
                         self._surface_param(p, self.dvuw0, self.tf.svu),
                         0.0)
        if face is Face.FRONT:
            wf, vwf, uwf = self.wf, self.vwf, self.uwf
            fv = self._front_param(p, self.dvuw1, wf.tv, vwf.tv, wf.svu, vwf.svu)
            fu = self._front_param(p, self.duvw1, wf.tu, uwf.tu, wf.suv, uwf.suv)
            return Coord(fu, fv, 1.0)
        if face is Face.BOTTOM:
            return Coord(self._surface_param(p, self.duwv0, self.tf.suw),
                         0.0,
                         self._surface_param(p, self.dwuv0, self.tf.swu))
        if face is Face.TOP:
            return Coord(self._surface_param(p, self.duwv1, self.vf.suw),
                         1.0,
                         self._surface_param(p, self.dwuv1, self.vf.swu))
        raise ValueError(f"unknown face {face!r}")
