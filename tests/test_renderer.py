"""Test scene composition and OpenCV rasterization.

Scene (src.grid_renderer.scene):
    - Operation order: clear, (vertical i, horizontal i) × 21, marker, live
    - Baseline geometry and widths
    - Warp polylines extended to the canvas edges, emphasised width
    - Inverse mode reflects warps
    - Live stroke only while drawing with more than one point
    - compose_frame() leaves the store untouched

Raster (src.grid_renderer.raster):
    - Canvas shape/dtype, background, marker color
    - Baselines and warps land on the expected pixels
    - save_frame() writes a readable PNG
    - Vertices far outside the int32 fixed-point range are clipped

Run:
    pytest tests/test_renderer.py -v
"""

import warnings

import numpy as np
import pytest
from PIL import Image

from src.amsler_grid.model import Axis, GridConfig, GridLine, Point
from src.amsler_grid.sampler import sample_warp
from src.amsler_grid.store import DistortionStore
from src.grid_renderer import raster
from src.grid_renderer.scene import (
    Clear,
    DrawPolyline,
    FillCircle,
    compose_frame,
    warp_polyline_points,
)
from src.utils.validators import RenderStyleV1


@pytest.fixture
def config():
    return GridConfig(width=400.0, height=400.0, divisions=20)


@pytest.fixture
def style():
    return RenderStyleV1()


@pytest.fixture
def empty_store():
    return DistortionStore()


@pytest.fixture
def warped_store(config):
    """Vertical line 5 (x=100) bulging to x=110 at y=100."""
    store = DistortionStore()
    pts = tuple(Point(float(x), float(y)) for x, y in ((100, 0), (110, 100), (100, 400)))
    store.append(sample_warp(pts, config))
    return store


# ---------------------------------------------------------------------------
# Scene
# ---------------------------------------------------------------------------


class TestScene:
    def test_operation_order(self, config, empty_store):
        frame = compose_frame(config, empty_store)
        ops = frame.ops

        assert len(ops) == 1 + 2 * 21 + 1
        assert isinstance(ops[0], Clear)
        assert ops[1].points == ((0.0, 0.0), (0.0, 400.0))
        assert ops[2].points == ((0.0, 0.0), (400.0, 0.0))
        assert ops[3].points == ((20.0, 0.0), (20.0, 400.0))
        assert ops[-2].points == ((0.0, 400.0), (400.0, 400.0))
        assert isinstance(ops[-1], FillCircle)

    def test_baselines_standard_width(self, config, empty_store, style):
        frame = compose_frame(config, empty_store, style=style)
        baselines = frame.polylines("baseline")
        assert len(baselines) == 42
        assert all(op.width == style.baseline_width == 1 for op in baselines)
        assert all(op.color == (0, 0, 0) for op in baselines)

    def test_marker(self, config, empty_store):
        marker = compose_frame(config, empty_store).ops[-1]
        assert marker.center == (200.0, 200.0)
        assert marker.radius == pytest.approx(10.0)
        assert marker.color == (255, 0, 0)

    def test_marker_uses_short_side(self, empty_store):
        cfg = GridConfig(width=800.0, height=400.0)
        marker = compose_frame(cfg, empty_store).ops[-1]
        assert marker.center == (400.0, 200.0)
        assert marker.radius == pytest.approx(10.0)

    def test_warp_replaces_baseline(self, config, warped_store, style):
        frame = compose_frame(config, warped_store, style=style)
        warps = frame.polylines("warp")

        assert len(warps) == 1
        assert len(frame.polylines("baseline")) == 41
        assert frame.ops[1 + 2 * 5] is warps[0]

        warp = warps[0]
        assert warp.width == style.warp_width == 2
        assert len(warp.points) == 21 + 2
        assert warp.points[0] == (100.0, 0.0)
        assert warp.points[-1] == (100.0, 400.0)
        assert warp.points[6] == pytest.approx((110.0, 100.0))

    def test_horizontal_warp_extends_to_side_edges(self, config):
        pts = tuple(Point(float(x), float(y)) for x, y in ((60, 90), (340, 110)))
        line = sample_warp(pts, config)
        assert line.axis is Axis.HORIZONTAL
        edge_pts = warp_polyline_points(line, config)
        assert edge_pts[0] == (0.0, 90.0)
        assert edge_pts[-1] == (400.0, 110.0)

    def test_inverse_reflects_warp(self, config, warped_store):
        warp = compose_frame(config, warped_store, inverse=True).polylines("warp")[0]
        assert warp.points[6] == pytest.approx((90.0, 100.0))
        assert warp.points[0] == (100.0, 0.0)

    def test_live_stroke_overlay(self, config, empty_store, style):
        live = (Point(10.0, 10.0), Point(30.0, 40.0))
        frame = compose_frame(config, empty_store, live, drawing=True, style=style)
        last = frame.ops[-1]
        assert isinstance(last, DrawPolyline)
        assert last.role == "live"
        assert last.points == ((10.0, 10.0), (30.0, 40.0))
        assert last.color == style.live_color
        assert last.width == 2

    def test_live_stroke_needs_two_points_and_drawing(self, config, empty_store):
        one = (Point(10.0, 10.0),)
        two = (Point(10.0, 10.0), Point(30.0, 40.0))
        assert compose_frame(config, empty_store, one, drawing=True).polylines("live") == ()
        assert compose_frame(config, empty_store, two, drawing=False).polylines("live") == ()

    def test_compose_is_pure(self, config, warped_store):
        before = warped_store.entries()
        a = compose_frame(config, warped_store, inverse=True)
        b = compose_frame(config, warped_store, inverse=True)
        assert a == b
        assert warped_store.entries() == before

    def test_polyline_requires_two_points(self):
        with pytest.raises(ValueError):
            DrawPolyline(points=((0.0, 0.0),), color=(0, 0, 0), width=1, role="baseline")


# ---------------------------------------------------------------------------
# Raster
# ---------------------------------------------------------------------------


class TestRaster:
    def test_canvas_shape(self, config, empty_store):
        canvas = raster.draw_frame(compose_frame(config, empty_store))
        assert canvas.shape == (400, 400, 3)
        assert canvas.dtype == np.uint8

    def test_background_and_marker(self, config, empty_store):
        canvas = raster.draw_frame(compose_frame(config, empty_store), antialias=False)
        # between grid lines
        assert canvas[50, 110].tolist() == [255, 255, 255]
        # center marker
        assert canvas[200, 200].tolist() == [255, 0, 0]

    def test_baseline_pixels(self, config, empty_store):
        canvas = raster.draw_frame(compose_frame(config, empty_store), antialias=False)
        assert canvas[50, 100].max() < 128
        assert canvas[60, 50].max() < 128

    def test_baseline_pixels_antialiased(self, config, empty_store):
        canvas = raster.draw_frame(compose_frame(config, empty_store), antialias=True)
        assert canvas[50, 99:102].min() < 128

    def test_warp_pixels(self, config, warped_store):
        canvas = raster.draw_frame(compose_frame(config, warped_store), antialias=False)
        # warp passes x ≈ 109.7 at y = 110; the old baseline x = 100 is gone
        assert canvas[110, 108:112].min() < 128
        assert canvas[110, 100].tolist() == [255, 255, 255]

    def test_inverse_warp_pixels(self, config, warped_store):
        frame = compose_frame(config, warped_store, inverse=True)
        canvas = raster.draw_frame(frame, antialias=False)
        assert canvas[110, 88:93].min() < 128
        assert canvas[110, 100].tolist() == [255, 255, 255]

    def test_draws_into_given_canvas(self, config, empty_store):
        target = np.zeros((400, 400, 3), dtype=np.uint8)
        out = raster.draw_frame(compose_frame(config, empty_store), canvas=target)
        assert out is target
        assert target[50, 110].tolist() == [255, 255, 255]

    def test_save_frame(self, config, warped_store, tmp_path):
        path = tmp_path / "frames" / "grid.png"
        canvas = raster.save_frame(compose_frame(config, warped_store), path)
        assert path.exists()
        with Image.open(path) as img:
            assert img.size == (400, 400)
            assert np.array_equal(np.asarray(img.convert("RGB")), canvas)


def test_unsupported_op_rejected(config):
    from src.grid_renderer.scene import DrawOp, Frame

    class Mystery(DrawOp):
        pass

    frame = Frame(width=10.0, height=10.0, inverse=False, ops=(Mystery(),))
    with pytest.raises(TypeError):
        raster.draw_frame(frame)


def test_grid_line_type_is_hashable_key():
    line = GridLine(axis=Axis.VERTICAL, index=1, control_points=(Point(0.0, 0.0),))
    assert line.key == (Axis.VERTICAL, 1)


def test_far_off_canvas_vertices_are_clipped():
    from src.grid_renderer.scene import Clear, DrawPolyline, Frame

    far = 1.0e12
    frame = Frame(width=20.0, height=20.0, inverse=False, ops=(
        Clear(color=(255, 255, 255)),
        DrawPolyline(points=((10.0, -far), (10.0, far)), color=(0, 0, 0),
                     width=1, role="warp"),
    ))

    fixed = raster._fixed([(10.0, -far), (10.0, far)])
    assert fixed.dtype == np.int32
    assert fixed[0, 0, 1] == -(2 ** 31 - 1)
    assert fixed[1, 0, 1] == 2 ** 31 - 1

    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        canvas = raster.draw_frame(frame, antialias=False)
    assert canvas[:, 10].max() < 128
