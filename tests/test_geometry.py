"""Tests for polar trace → plane coordinate integration."""

import math

import numpy as np
import pytest

from gesture_studio.geometry import to_array, to_coordinates
from gesture_studio.types import Coordinate, Segment, Trace


def _trace(*pairs) -> Trace:
    return Trace(points=tuple(Segment(a, d) for a, d in pairs))


def _walk(trace: Trace, origin):
    """Step-by-step reference walk."""
    heading = 0.0
    x, y = origin
    out = []
    for seg in trace:
        heading += seg.angle
        x -= math.cos(heading) * seg.distance
        y += math.sin(heading) * seg.distance
        out.append((x, y))
    return out


class TestToCoordinates:
    def test_empty_trace(self):
        assert to_coordinates(Trace.empty(), (5, 5)) == []
        assert to_array(Trace.empty()).shape == (0, 2)

    def test_single_segment_offset(self):
        angle, distance = 0.7, 12.0
        (point,) = to_coordinates(_trace((angle, distance)), (100.0, 50.0))
        assert point.x - 100.0 == pytest.approx(-math.cos(angle) * distance)
        assert point.y - 50.0 == pytest.approx(math.sin(angle) * distance)

    def test_zero_angle_runs_left(self):
        (point,) = to_coordinates(_trace((0.0, 10.0)), (100.0, 100.0))
        assert point == Coordinate(90.0, 100.0)

    def test_length_matches_trace(self):
        trace = _trace(*[(0.1 * i, 5.0) for i in range(17)])
        assert len(to_coordinates(trace)) == 17

    def test_deterministic(self):
        rng = np.random.default_rng(7)
        trace = _trace(*zip(rng.uniform(-1, 1, 40), rng.uniform(0, 20, 40)))
        assert to_coordinates(trace, (3, 4)) == to_coordinates(trace, (3, 4))

    def test_matches_step_by_step_walk(self):
        rng = np.random.default_rng(42)
        trace = _trace(*zip(rng.uniform(-math.pi, math.pi, 60), rng.uniform(0, 15, 60)))
        expected = np.array(_walk(trace, (250.0, 125.0)))
        np.testing.assert_allclose(to_array(trace, (250.0, 125.0)), expected, atol=1e-9)

    def test_heading_accumulates(self):
        # Four quarter turns of equal length close the square
        trace = _trace(*[(math.pi / 2, 10.0)] * 4)
        last = to_coordinates(trace, (0.0, 0.0))[-1]
        assert last.x == pytest.approx(0.0, abs=1e-9)
        assert last.y == pytest.approx(0.0, abs=1e-9)

    def test_first_angle_sets_heading(self):
        (point,) = to_coordinates(_trace((math.pi / 2, 10.0)))
        assert point.x == pytest.approx(0.0, abs=1e-9)
        assert point.y == pytest.approx(10.0)
