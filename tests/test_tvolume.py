import logging
import math

import numpy as np
import pytest

from conframe import cga
from conframe.config import FrameConfig
from conframe.tframe import TFrame
from conframe.tvolume import (Coord, Corner, Curvature, Face, Generator,
                              Mapping, SurfaceBuilder, TVolume)

## unit tests for curved coordinate volumes

US, VS, WS = 2.0, 3.0, 4.0


def _xyz(p):
    return cga.euclid(cga.down(p))


@pytest.fixture(scope='module')
def box():
    return TVolume(u_spacing=US, v_spacing=VS, w_spacing=WS)


@pytest.fixture(scope='module')
def bent():
    return TVolume(kvu=0.1, kwv=0.05, u_spacing=US, v_spacing=VS, w_spacing=WS)


@pytest.fixture(scope='module')
def mixed():
    ## every curvature nonzero, with alternating signs
    return TVolume.from_curvatures((0.1, -0.05, 0.08, -0.06, 0.04, -0.07, -0.05, 0.06, -0.04),
                                   (2.0, 2.5, 3.0))


class TestMapping:

    def test_shape_and_len(self):
        m = Mapping(3, 4, 5)
        assert m.shape == (3, 4, 5)
        assert len(m) == 60

    def test_index_is_row_major(self):
        m = Mapping(3, 4, 5)
        assert m.index(0, 0, 0) == 0
        assert m.index(1, 2, 3) == 33
        assert m.index(2, 3, 4) == 59

    def test_set_and_at(self):
        m = Mapping(2, 2, 2)
        m.set(1, 0, 1, 'versor')
        assert m.at(1, 0, 1) == 'versor'
        assert m.at(0, 0, 0) is None

    def test_bounds(self):
        m = Mapping(2, 2, 2)
        with pytest.raises(ValueError):
            m.at(2, 0, 0)
        with pytest.raises(ValueError):
            m.set(0, -1, 0, None)

    def test_bad_resolution(self):
        with pytest.raises(ValueError):
            Mapping(0, 1, 1)


class TestConstruction:

    def test_defaults(self):
        vol = TVolume()
        assert vol.spacings == (3.0, 3.0, 3.0)
        assert vol.curvatures == (0.0,) * 9
        assert len(vol.frames) == 8
        assert len(vol.generators) == 12

    def test_from_curvatures(self):
        ks = (0.1, 0.0, 0.2, 0.0, 0.0, 0.0, 0.05, 0.0, 0.0)
        vol = TVolume.from_curvatures(ks, (1.0, 2.0, 3.0))
        assert vol.curvatures == ks
        assert vol.kuv == 0.2
        assert vol.kv1u == 0.05
        assert vol.curvature(Curvature.KVU) == 0.1
        assert vol.v_spacing == 2.0

    def test_from_curvatures_needs_nine(self):
        with pytest.raises(ValueError):
            TVolume.from_curvatures((0.0,) * 8)

    def test_spacing_must_be_positive(self):
        with pytest.raises(ValueError):
            TVolume(u_spacing=0.0)

    def test_surfaces_derived_once(self, box):
        with pytest.raises(RuntimeError):
            box.calc_surfaces()

    def test_only_left_face_seeds(self, box):
        with pytest.raises(ValueError):
            box.calc_surfaces_from_face(Face.RIGHT, box.tf, box.vf, box.wf, box.vwf)


class TestStages:

    def test_stage_order_enforced(self):
        builder = SurfaceBuilder((0.0,) * 9, (1.0, 1.0, 1.0))
        assert builder.stage == 'versors'
        with pytest.raises(RuntimeError):
            builder.origin()
        builder.versors()
        assert builder.stage == 'origin'
        with pytest.raises(RuntimeError):
            builder.versors()

    def test_build_completes(self):
        builder = SurfaceBuilder((0.0,) * 9, (1.0, 1.0, 1.0))
        builder.versors()
        frames, generators = builder.build()
        assert builder.stage is None
        assert all(isinstance(f, TFrame) for f in frames)
        assert all(g is not None for g in generators)

    def test_snapshots_are_not_mutated(self):
        builder = SurfaceBuilder((0.1,) * 9, (1.0, 1.0, 1.0))
        builder.versors()
        builder.origin()
        before = builder.snapshot()
        builder.adjacent()
        builder.secondary()
        assert before[Corner.U] is None
        assert builder.snapshot()[Corner.U].suw is not None

    def test_face_path_needs_seed(self):
        builder = SurfaceBuilder.for_face((0.0,) * 9, (1.0, 1.0, 1.0))
        assert builder.stage == 'seed'
        with pytest.raises(RuntimeError):
            builder.build()

    def test_bad_inputs(self):
        with pytest.raises(ValueError):
            SurfaceBuilder((0.0,) * 6, (1.0, 1.0, 1.0))
        with pytest.raises(ValueError):
            SurfaceBuilder((0.0,) * 9, (1.0, 1.0))


class TestFlatVolume:
    """with no curvature the volume is an axis aligned box"""

    def test_corners(self, box):
        for corner in Corner:
            expect = [US * (corner & 1), VS * ((corner >> 1) & 1), WS * ((corner >> 2) & 1)]
            assert np.allclose(_xyz(box.corner(corner)), expect, atol=1e-6), corner.name

    def test_far_corner_frame(self, box):
        assert np.allclose(_xyz(box.uvwf.pos()), [US, VS, WS], atol=1e-6)

    def test_generators_are_translations(self, box):
        axes = {'U': (US, 0, 0), 'V': (0, VS, 0), 'W': (0, 0, WS)}
        for g in Generator:
            expect = cga.translator(cga.vec(axes[g.name[1]]))
            assert cga.is_close(cga.boost(box.generator(g)), expect), g.name

    def test_named_accessors(self, box):
        assert box.duvw0 is box.generator(Generator.DUVW0)
        assert box.dwvu1 is box.generators[Generator.DWVU1]
        assert box.uvf is box.frame(Corner.UV)

    def test_point_at(self, box):
        for t in ((0, 0, 0), (1, 1, 1), (0.5, 0.25, 0.75), (1, 0, 0.5)):
            expect = [t[0] * US, t[1] * VS, t[2] * WS]
            assert np.allclose(_xyz(box.point_at(*t)), expect, atol=1e-6), t

    def test_calc_mapping(self, box):
        m = box.calc_mapping(2, 3, 2)
        assert m.shape == (2, 3, 2)
        assert cga.is_close(m.at(1, 0, 1), cga.translator(cga.vec(US, 0, WS)))
        assert cga.is_close(m.at(0, 1, 0), cga.translator(cga.vec(0, 0.5 * VS, 0)))

    def test_single_cell_mapping_is_identity(self, box):
        m = box.calc_mapping(1, 1, 1)
        v = m.at(0, 0, 0)
        assert math.isclose(cga.scalar(v), 1.0)
        assert np.allclose(v.value[1:], 0.0)


class TestInverse:

    def test_left(self, box):
        assert np.allclose(box.inverse_mapping(cga.point(0, 1.5, 2.0), Face.LEFT),
                           (0.0, 0.5, 0.5), atol=1e-6)

    def test_left_origin(self, box):
        assert box.inverse_mapping(box.corner(Corner.ORIGIN), Face.LEFT) == Coord(0.0, 0.0, 0.0)

    def test_right(self, box):
        c = box.inverse_mapping(cga.point(US, 0.75 * VS, 0.25 * WS), Face.RIGHT)
        assert c.u == 1.0
        assert math.isclose(c.v, 0.75, abs_tol=1e-6)
        assert math.isclose(c.w, 0.25, abs_tol=1e-6)

    def test_right_corner(self, box):
        c = box.inverse_mapping(box.corner(Corner.U), Face.RIGHT)
        assert c.u == 1.0
        assert math.isclose(c.v, 0.0, abs_tol=1e-6)
        assert math.isclose(c.w, 0.0, abs_tol=1e-6)

    def test_back(self, box):
        c = box.inverse_mapping(cga.point(0.5 * US, 0.5 * VS, 0.0), Face.BACK)
        assert np.allclose(c, (0.5, 0.5, 0.0), atol=1e-6)
        assert c.w == 0.0

    def test_front_roundtrip(self, box):
        p = box.point_at(0.25, 0.5, 1.0)
        c = box.inverse_mapping(p, Face.FRONT)
        assert np.allclose(c, (0.25, 0.5, 1.0), atol=1e-6)

    def test_bottom(self, box):
        c = box.inverse_mapping(cga.point(0.5 * US, 0.0, 0.5 * WS), Face.BOTTOM)
        assert np.allclose(c, (0.5, 0.0, 0.5), atol=1e-6)
        assert c.v == 0.0

    def test_top_roundtrip(self, box):
        p = box.point_at(0.25, 1.0, 0.75)
        c = box.inverse_mapping(p, Face.TOP)
        assert c.v == 1.0
        assert np.allclose(c, (0.25, 1.0, 0.75), atol=1e-6)

    def test_unknown_face(self, box):
        with pytest.raises(ValueError):
            box.inverse_mapping(cga.point(1, 1, 1), 'TOP')


class TestBentVolume:

    def test_origin_surfaces(self, bent):
        assert math.isclose(cga.radius(bent.tf.svu), 10.0)
        assert math.isclose(cga.radius(bent.tf.swv), 20.0)
        assert cga.radius(bent.tf.suv) == 0.0

    def test_u_corner_on_bent_surface(self, bent):
        assert abs(cga.scalar(bent.corner(Corner.U) | bent.tf.svu)) < 1e-6
        assert not np.allclose(_xyz(bent.corner(Corner.U)), [US, 0, 0], atol=1e-3)

    def test_mapping_matches_point_at(self, bent):
        m = bent.calc_mapping(3, 2, 2)
        origin = bent.tf.pos()
        for (i, j, k), versor in m.items():
            expect = bent.point_at(i / 2.0, float(j), float(k))
            got = cga.null(cga.spin(versor, origin))
            assert cga.is_close(got, expect, 1e-6)

    def test_origin_maps_to_itself(self, bent):
        assert np.allclose(_xyz(bent.point_at(0, 0, 0)), [0, 0, 0], atol=1e-9)


class TestFromFace:

    @pytest.fixture(scope='class')
    def right(self, box):
        return TVolume.from_face(box, Face.RIGHT)

    def test_shares_face(self, box, right):
        for new, old in ((Corner.ORIGIN, Corner.U), (Corner.V, Corner.UV),
                         (Corner.W, Corner.UW), (Corner.VW, Corner.UVW)):
            assert np.allclose(_xyz(right.corner(new)), _xyz(box.corner(old)), atol=1e-6)

    def test_extends_along_u(self, right):
        assert right.spacings == (US, VS, WS)
        assert np.allclose(_xyz(right.corner(Corner.UVW)), [2 * US, VS, WS], atol=1e-6)
        assert np.allclose(_xyz(right.point_at(0.5, 0.5, 0.5)),
                           [1.5 * US, 0.5 * VS, 0.5 * WS], atol=1e-6)

    def test_inverse_on_shared_face(self, right):
        c = right.inverse_mapping(cga.point(US, 0.5 * VS, 0.5 * WS), Face.LEFT)
        assert np.allclose(c, (0.0, 0.5, 0.5), atol=1e-6)

    def test_other_faces_build_independently(self, box, caplog):
        with caplog.at_level(logging.INFO, logger='conframe.tvolume'):
            vol = TVolume.from_face(box, Face.TOP, spacings=(1.0, 1.0, 1.0))
        assert 'not shared' in caplog.text
        assert np.allclose(_xyz(vol.corner(Corner.UVW)), [1, 1, 1], atol=1e-6)

    def test_config_carried(self):
        cfg = FrameConfig(tolerance=1e-8)
        vol = TVolume(config=cfg)
        assert TVolume.from_face(vol, Face.RIGHT).config is cfg


def _same_surface(a, b, tol=1e-6):
    ## equal up to scale and sign
    va, vb = a(1).value, b(1).value
    va = va / np.linalg.norm(va)
    vb = vb / np.linalg.norm(vb)
    return np.allclose(va, vb, atol=tol) or np.allclose(va, -vb, atol=tol)


class TestCarriedSurfaces:
    """generators carry a corner surface onto its neighbour"""

    CASES = [
        (Generator.DUVW0, Corner.ORIGIN, Corner.U, 'suv'),
        (Generator.DVWU1, Corner.U, Corner.UV, 'svw'),
        (Generator.DUVW1, Corner.W, Corner.UW, 'suv'),
    ]

    @pytest.mark.parametrize('gen, beg, end, name', CASES)
    def test_bent(self, bent, gen, beg, end, name):
        start = bent.frame(beg).surface(name)
        moved = cga.spin(cga.boost(bent.generator(gen)), start)
        assert _same_surface(moved, bent.frame(end).surface(name))

    @pytest.mark.parametrize('gen, beg, end, name', CASES)
    def test_mixed_signs(self, mixed, gen, beg, end, name):
        start = mixed.frame(beg).surface(name)
        moved = cga.spin(cga.boost(mixed.generator(gen)), start)
        assert _same_surface(moved, mixed.frame(end).surface(name))

    def test_mixed_corners_are_distinct(self, mixed):
        pts = [_xyz(mixed.corner(c)) for c in Corner]
        for i in range(len(pts)):
            for j in range(i + 1, len(pts)):
                assert np.linalg.norm(pts[i] - pts[j]) > 1.0
