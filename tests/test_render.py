"""Tests for trace rendering and drawing surfaces."""

import numpy as np
import pytest

from gesture_studio.render import (
    PALETTE, CommandSurface, DrawCommand, ImageSurface, TraceRenderer,
    palette_color, smooth_path,
)
from gesture_studio.types import Coordinate, Model, Segment, Trace


def _model(n: int, angle: float = 0.1, distance: float = 10.0) -> Model:
    return Model(trace=Trace(points=tuple(Segment(angle, distance) for _ in range(n))))


class TestPalette:
    def test_index_wraps(self):
        assert palette_color(0) == PALETTE[0]
        assert palette_color(len(PALETTE)) == PALETTE[0]
        assert palette_color(len(PALETTE) + 2) == PALETTE[2]

    def test_empty_palette_rejected(self):
        with pytest.raises(ValueError):
            TraceRenderer(palette=())


class TestSmoothPath:
    def test_midpoint_segments(self):
        pts = [Coordinate(0, 0), Coordinate(10, 0), Coordinate(10, 10)]
        curves = smooth_path(pts)
        assert curves == [
            (Coordinate(0, 0), Coordinate(5, 0)),
            (Coordinate(10, 0), Coordinate(10, 5)),
        ]

    def test_short_paths_have_no_curves(self):
        assert smooth_path([]) == []
        assert smooth_path([Coordinate(1, 1)]) == []


class TestTraceRenderer:
    def test_zero_models(self):
        surface = CommandSurface()
        TraceRenderer(origin=(50, 50)).render(surface, [])
        assert [c.type for c in surface.commands] == ["clear", "origin"]

    def test_without_origin_marker(self):
        surface = CommandSurface()
        TraceRenderer(draw_origin=False).render(surface, [])
        assert [c.type for c in surface.commands] == ["clear"]

    def test_two_models_get_first_two_colors(self):
        surface = CommandSurface()
        TraceRenderer().render(surface, [_model(4), _model(3, angle=-0.2)])
        paths = surface.of_type("path")
        assert [p.color for p in paths] == [PALETTE[0], PALETTE[1]]
        markers = surface.of_type("marker")
        assert [m.color for m in markers] == [PALETTE[0]] * 4 + [PALETTE[1]] * 3

    def test_single_point_draws_marker_only(self):
        surface = CommandSurface()
        TraceRenderer(origin=(100, 100)).render(surface, [_model(1, angle=0.0)])
        assert surface.of_type("path") == []
        (marker,) = surface.of_type("marker")
        assert (marker.x, marker.y) == pytest.approx((90.0, 100.0))

    def test_empty_model_draws_nothing_but_keeps_palette_position(self):
        surface = CommandSurface()
        TraceRenderer().render(surface, [_model(0), _model(2)])
        (path,) = surface.of_type("path")
        assert path.color == PALETTE[1]

    def test_path_ends_at_last_point(self):
        surface = CommandSurface()
        TraceRenderer(origin=(0, 0)).render(surface, [_model(3, angle=0.0)])
        (path,) = surface.of_type("path")
        assert (path.x, path.y) == pytest.approx((-10.0, 0.0))
        assert (path.end.x, path.end.y) == pytest.approx((-30.0, 0.0))
        assert len(path.curves) == 2

    def test_render_is_idempotent(self):
        renderer = TraceRenderer()
        models = [_model(5), _model(7, angle=0.3)]
        first, second = CommandSurface(), CommandSurface()
        renderer.render(first, models)
        renderer.render(second, models)
        renderer.render(second, models)
        assert first.to_dicts() == second.to_dicts()


class TestDrawCommand:
    def test_path_to_dict(self):
        cmd = DrawCommand(
            type="path", x=1, y=2,
            curves=[(Coordinate(1, 2), Coordinate(3, 4))], end=Coordinate(5, 6),
            color="#fff", width=2,
        )
        d = cmd.to_dict()
        assert d["type"] == "path"
        assert d["curves"] == [[1, 2, 3, 4]]
        assert d["end"] == [5, 6]

    def test_clear_to_dict(self):
        assert DrawCommand(type="clear").to_dict() == {"type": "clear"}

    def test_marker_to_dict(self):
        d = DrawCommand(type="marker", x=1.234, y=5.678, radius=3, color="#abc").to_dict()
        assert d == {"type": "marker", "x": 1.23, "y": 5.68, "radius": 3, "color": "#abc"}


class TestImageSurface:
    def test_draws_onto_background(self):
        surface = ImageSurface(width=200, height=200, background="#000000")
        TraceRenderer(origin=(150, 100)).render(surface, [_model(8)])
        assert surface.image.shape == (200, 200, 3)
        assert np.count_nonzero(surface.image) > 0

    def test_clear_restores_background(self):
        surface = ImageSurface(width=50, height=50, background="#000000")
        TraceRenderer(origin=(40, 25)).render(surface, [_model(3)])
        surface.clear()
        assert np.count_nonzero(surface.image) == 0

    def test_save_png(self, tmp_path):
        surface = ImageSurface(width=64, height=64)
        TraceRenderer(origin=(50, 32)).render(surface, [_model(4)])
        path = tmp_path / "out" / "frame.png"
        surface.save(path)
        assert path.exists()
        assert path.stat().st_size > 0

    def test_short_hex_colors(self):
        surface = ImageSurface(width=40, height=40, background="#000")
        TraceRenderer(origin=(30, 20), palette=("#fff",), draw_origin=False).render(surface, [_model(2)])
        assert surface.image.max() == 255
