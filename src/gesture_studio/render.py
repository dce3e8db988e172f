"""Trace rendering onto a 2D drawing surface.

Each model gets a color from a fixed palette by position
(`index % len(PALETTE)`), its trace is integrated from a fixed origin and
drawn as a smoothed path with a small marker on every sample point.

The smoothing is midpoint interpolation: for consecutive points p[i], p[i+1]
a quadratic curve uses p[i] as control point and ends at their midpoint; the
last point is joined with a straight line.

Two surfaces ship with the package:
- CommandSurface records DrawCommand objects that a front end can replay.
- ImageSurface rasterises into a numpy image with OpenCV.

Usage:
    renderer = TraceRenderer(origin=(400, 300))
    surface = CommandSurface()
    renderer.render(surface, frame.models)
    payload = surface.to_dicts()
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Sequence

import numpy as np

import cv2

from gesture_studio.geometry import to_coordinates
from gesture_studio.types import Coordinate, Model

PALETTE = (
    "#3b82f6",  # blue
    "#ef4444",  # red
    "#22c55e",  # green
    "#eab308",  # yellow
    "#a855f7",  # purple
    "#f97316",  # orange
)

ORIGIN_COLOR = "#9ca3af"

QuadSegment = tuple[Coordinate, Coordinate]  # (control, end)


def palette_color(index: int, palette: Sequence[str] = PALETTE) -> str:
    return palette[index % len(palette)]


def _midpoint(a: Coordinate, b: Coordinate) -> Coordinate:
    return Coordinate((a.x + b.x) / 2, (a.y + b.y) / 2)


def smooth_path(coords: Sequence[Coordinate]) -> list[QuadSegment]:
    """Quadratic segments for a midpoint-smoothed path through `coords`.

    Fewer than two points have no path.
    """
    if len(coords) < 2:
        return []
    return [(coords[i], _midpoint(coords[i], coords[i + 1])) for i in range(len(coords) - 1)]


class Surface(Protocol):
    def clear(self) -> None: ...

    def draw_origin(self, point: Coordinate) -> None: ...

    def draw_path(
        self,
        start: Coordinate,
        curves: list[QuadSegment],
        end: Coordinate,
        color: str,
        width: float,
    ) -> None: ...

    def draw_marker(self, point: Coordinate, radius: float, color: str) -> None: ...


@dataclass
class DrawCommand:
    """A single drawing command for a front end canvas."""
    type: str  # "clear", "origin", "path", "marker"
    x: float = 0.0
    y: float = 0.0
    color: str = "#ffffff"
    width: float = 2.0
    radius: float = 3.0
    curves: list[QuadSegment] = field(default_factory=list)
    end: Optional[Coordinate] = None

    def to_dict(self) -> dict:
        if self.type == "path":
            return {
                "type": "path",
                "x": round(self.x, 2),
                "y": round(self.y, 2),
                "curves": [
                    [round(c.x, 2), round(c.y, 2), round(e.x, 2), round(e.y, 2)]
                    for c, e in self.curves
                ],
                "end": [round(self.end.x, 2), round(self.end.y, 2)] if self.end else None,
                "color": self.color,
                "width": self.width,
            }
        elif self.type in ("marker", "origin"):
            return {
                "type": self.type,
                "x": round(self.x, 2),
                "y": round(self.y, 2),
                "radius": self.radius,
                "color": self.color,
            }
        return {"type": self.type}


class CommandSurface:
    """Surface that records what was drawn since the last clear."""

    def __init__(self, origin_radius: float = 4.0):
        self.origin_radius = origin_radius
        self.commands: list[DrawCommand] = []

    def clear(self) -> None:
        self.commands = [DrawCommand(type="clear")]

    def draw_origin(self, point: Coordinate) -> None:
        self.commands.append(DrawCommand(
            type="origin", x=point.x, y=point.y,
            radius=self.origin_radius, color=ORIGIN_COLOR,
        ))

    def draw_path(self, start, curves, end, color, width) -> None:
        self.commands.append(DrawCommand(
            type="path", x=start.x, y=start.y,
            curves=list(curves), end=end, color=color, width=width,
        ))

    def draw_marker(self, point: Coordinate, radius: float, color: str) -> None:
        self.commands.append(DrawCommand(
            type="marker", x=point.x, y=point.y, radius=radius, color=color,
        ))

    def of_type(self, type: str) -> list[DrawCommand]:
        return [c for c in self.commands if c.type == type]

    def to_dicts(self) -> list[dict]:
        return [c.to_dict() for c in self.commands]


def _hex_to_bgr(color: str) -> tuple[int, int, int]:
    color = color.lstrip("#")
    if len(color) == 3:
        color = "".join(c * 2 for c in color)
    r, g, b = (int(color[i:i + 2], 16) for i in (0, 2, 4))
    return (b, g, r)


def _flatten_quad(p0: Coordinate, ctrl: Coordinate, p1: Coordinate, steps: int) -> np.ndarray:
    t = np.linspace(0.0, 1.0, steps)[:, None]
    a = np.array([p0.x, p0.y])
    c = np.array([ctrl.x, ctrl.y])
    b = np.array([p1.x, p1.y])
    return (1 - t) ** 2 * a + 2 * (1 - t) * t * c + t ** 2 * b


class ImageSurface:
    """Raster surface backed by a numpy BGR image (OpenCV drawing)."""

    def __init__(self, width: int = 800, height: int = 600, background: str = "#111827",
                 curve_steps: int = 8):
        self.width = width
        self.height = height
        self.background = background
        self.curve_steps = curve_steps
        self.image = np.zeros((height, width, 3), dtype=np.uint8)
        self.clear()

    def clear(self) -> None:
        self.image[:] = _hex_to_bgr(self.background)

    def draw_origin(self, point: Coordinate) -> None:
        cv2.drawMarker(
            self.image, (int(round(point.x)), int(round(point.y))),
            _hex_to_bgr(ORIGIN_COLOR), markerType=cv2.MARKER_CROSS, markerSize=10, thickness=1,
        )

    def draw_path(self, start, curves, end, color, width) -> None:
        pieces = []
        pen = start
        for ctrl, seg_end in curves:
            pieces.append(_flatten_quad(pen, ctrl, seg_end, self.curve_steps))
            pen = seg_end
        pieces.append(np.array([[pen.x, pen.y], [end.x, end.y]]))
        polyline = np.round(np.concatenate(pieces)).astype(np.int32).reshape(-1, 1, 2)
        cv2.polylines(
            self.image, [polyline], isClosed=False, color=_hex_to_bgr(color),
            thickness=max(1, int(round(width))), lineType=cv2.LINE_AA,
        )

    def draw_marker(self, point: Coordinate, radius: float, color: str) -> None:
        cv2.circle(
            self.image, (int(round(point.x)), int(round(point.y))),
            max(1, int(round(radius))), _hex_to_bgr(color), thickness=-1, lineType=cv2.LINE_AA,
        )

    def save(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        if not cv2.imwrite(str(path), self.image):
            raise OSError(f"Could not write image: {path}")


class TraceRenderer:
    """Draws models onto a surface. Stateless: same input, same picture."""

    def __init__(
        self,
        origin: tuple[float, float] = (400.0, 300.0),
        palette: Sequence[str] = PALETTE,
        marker_radius: float = 3.0,
        line_width: float = 2.0,
        draw_origin: bool = True,
    ):
        if not palette:
            raise ValueError("palette must not be empty")
        self.origin = origin
        self.palette = tuple(palette)
        self.marker_radius = marker_radius
        self.line_width = line_width
        self.draw_origin = draw_origin

    def render(self, surface: Surface, models: Sequence[Model]):
        surface.clear()
        if self.draw_origin:
            surface.draw_origin(Coordinate(*self.origin))

        for index, model in enumerate(models):
            coords = to_coordinates(model.trace, self.origin)
            if not coords:
                continue
            color = palette_color(index, self.palette)

            if len(coords) >= 2:
                surface.draw_path(
                    coords[0], smooth_path(coords), coords[-1], color, self.line_width,
                )
            for point in coords:
                surface.draw_marker(point, self.marker_radius, color)
