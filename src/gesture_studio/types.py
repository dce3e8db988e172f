"""Data model shared by the client, renderer and session controller.

Wire format (JSON) mirrors the service:

    {"trace": {"points": [{"angle": 0.1, "distance": 10.0}, ...]}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from gesture_studio.errors import TransportFailure


@dataclass(frozen=True)
class Segment:
    """One relative polar step: turn by `angle` radians, then travel `distance`."""
    angle: float
    distance: float

    @classmethod
    def from_dict(cls, d: dict) -> Segment:
        return cls(angle=float(d["angle"]), distance=float(d["distance"]))

    def to_dict(self) -> dict:
        return {"angle": self.angle, "distance": self.distance}


@dataclass(frozen=True)
class Trace:
    """Time-ordered sequence of segments."""
    points: tuple[Segment, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self.points)

    def slice(self, start: int, end: int) -> Trace:
        return Trace(points=self.points[start:end])

    @classmethod
    def empty(cls) -> Trace:
        return cls()

    @classmethod
    def from_dict(cls, d: dict) -> Trace:
        return cls(points=tuple(Segment.from_dict(p) for p in d.get("points", [])))

    def to_dict(self) -> dict:
        return {"points": [p.to_dict() for p in self.points]}


@dataclass(frozen=True)
class Coordinate:
    x: float
    y: float


@dataclass(frozen=True)
class Model:
    """A tracked gesture source for one polling cycle."""
    trace: Trace

    @classmethod
    def from_dict(cls, d: dict) -> Model:
        return cls(trace=Trace.from_dict(d.get("trace", {})))

    def to_dict(self) -> dict:
        return {"trace": self.trace.to_dict()}


@dataclass(frozen=True)
class DetectedGesture:
    name: str


@dataclass
class VisualizationFrame:
    """One poll result: live models plus any gestures detected since the last poll."""
    models: list[Model] = field(default_factory=list)
    detected: list[DetectedGesture] = field(default_factory=list)

    @classmethod
    def from_dict(cls, d: dict) -> VisualizationFrame:
        return cls(
            models=[Model.from_dict(m) for m in d.get("models", [])],
            detected=[DetectedGesture(name=str(g["name"])) for g in d.get("detected") or []],
        )


class SessionState(str, Enum):
    NORMAL = "normal"
    RECORDING = "recording"
    SAVING = "saving"

    @classmethod
    def parse(cls, value: str) -> SessionState:
        try:
            return cls(str(value).lower())
        except ValueError:
            raise TransportFailure(f"Service reported unknown state: {value!r}") from None


@dataclass(frozen=True)
class TrimRange:
    """Indices into the save candidate's points, `start <= end`."""
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Template:
    id: int
    name: str
    points: int = 0

    @classmethod
    def from_dict(cls, d: dict) -> Template:
        return cls(id=int(d["id"]), name=str(d["name"]), points=int(d.get("points", 0)))
