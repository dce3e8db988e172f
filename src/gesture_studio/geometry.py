"""Relative polar trace → absolute plane coordinates.

A trace is a list of (turn, step) pairs. Walking it from a fixed origin:

    heading := heading + angle
    x := x - cos(heading) * distance
    y := y + sin(heading) * distance

The x axis is mirrored (x subtracts the cosine) so that the drawing matches
the frame the service records in: a trace with angle 0 runs to the left.

Both running sums are evaluated as numpy prefix sums, which gives the same
points as the step-by-step walk.
"""

from __future__ import annotations

import numpy as np

from gesture_studio.types import Coordinate, Trace


def to_array(trace: Trace, origin: tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    """Integrate a trace into absolute positions, shape (N, 2).

    An empty trace gives an empty (0, 2) array.
    """
    n = len(trace)
    if n == 0:
        return np.zeros((0, 2), dtype=np.float64)

    segs = np.array([(s.angle, s.distance) for s in trace], dtype=np.float64)
    heading = np.cumsum(segs[:, 0])
    dist = segs[:, 1]

    pts = np.empty((n, 2), dtype=np.float64)
    pts[:, 0] = origin[0] - np.cumsum(np.cos(heading) * dist)
    pts[:, 1] = origin[1] + np.cumsum(np.sin(heading) * dist)
    return pts


def to_coordinates(trace: Trace, origin: tuple[float, float] = (0.0, 0.0)) -> list[Coordinate]:
    """Same as `to_array`, as a list of Coordinate (one per segment)."""
    return [Coordinate(float(x), float(y)) for x, y in to_array(trace, origin)]
