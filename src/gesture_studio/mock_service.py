"""In-memory stand-in for the recognition service, for development.

Implements the same REST routes as the real service so the studio can be
driven without a sensor attached. While recording, a synthetic trace grows
by a few points per poll. No recognition is performed.

Usage:
    gesture-studio serve-mock --port 8000
    # or
    uvicorn gesture_studio.mock_service:app --port 8000
"""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from gesture_studio.types import Segment, SessionState, Trace

logger = logging.getLogger("gesture_studio.mock_service")

MAX_POINTS = 2048
POINTS_PER_POLL = 2
STEP_DISTANCE = 10.0

BUILTIN_TEMPLATES: dict[str, list[Segment]] = {
    "circle": [Segment(2 * math.pi / 24, STEP_DISTANCE)] * 24,
    "swipe-left": [Segment(0.0, STEP_DISTANCE)] * 12,
    "swipe-right": [Segment(math.pi, STEP_DISTANCE)] + [Segment(0.0, STEP_DISTANCE)] * 11,
    "zigzag": [Segment(0.0, STEP_DISTANCE)] + [
        Segment(math.pi / 2 if i % 2 else -math.pi / 2, STEP_DISTANCE) for i in range(11)
    ],
}


class TemplateCreate(BaseModel):
    name: str
    start: int
    end: int


class MockService:
    def __init__(self, seed: Optional[int] = None):
        self.state = SessionState.NORMAL
        self.trace: list[Segment] = []
        self.templates: dict[int, tuple[str, list[Segment]]] = {}
        self._rng = random.Random(seed)
        self._heading_drift = 0.0

    def set_state(self, target: SessionState) -> SessionState:
        if target is SessionState.RECORDING and self.state is not SessionState.RECORDING:
            self.trace = []
        self.state = target
        return self.state

    def advance(self):
        """Grow the synthetic trace while recording."""
        if self.state is not SessionState.RECORDING:
            return
        for _ in range(POINTS_PER_POLL):
            self._heading_drift += self._rng.uniform(-0.05, 0.05)
            self.trace.append(Segment(0.15 + self._heading_drift, STEP_DISTANCE))
        del self.trace[:-MAX_POINTS]

    def models(self) -> list[dict]:
        if not self.trace:
            return []
        return [{"trace": Trace(points=tuple(self.trace)).to_dict()}]

    def new_id(self) -> int:
        while True:
            template_id = self._rng.getrandbits(32)
            if template_id not in self.templates:
                return template_id


service = MockService()
app = FastAPI(title="Gesture Studio mock service")


@app.get("/api/v1/state")
async def get_state():
    return {"state": service.state.value}


@app.post("/api/v1/state/{target}")
async def set_state(target: str):
    try:
        state = SessionState(target)
    except ValueError:
        raise HTTPException(status_code=422, detail=f"Unknown state: {target}")
    logger.info("State -> %s", state.value)
    return {"state": service.set_state(state).value}


@app.get("/api/v1/visualize")
async def visualize():
    service.advance()
    return {"models": service.models(), "detected": []}


@app.get("/api/v1/templates")
async def list_templates():
    return {
        "templates": [
            {"id": template_id, "name": name, "points": len(points)}
            for template_id, (name, points) in service.templates.items()
        ]
    }


@app.post("/api/v1/templates")
async def create_template(body: TemplateCreate):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=422, detail="Template name must not be empty")
    if not 0 <= body.start <= body.end <= len(service.trace):
        raise HTTPException(status_code=422, detail="Trim range out of bounds")

    template_id = service.new_id()
    service.templates[template_id] = (name, service.trace[body.start:body.end])
    logger.info("Created template %s (%d)", name, template_id)
    return {"id": template_id, "name": name}


@app.post("/api/v1/templates/builtin")
async def add_builtin_templates():
    for name, points in BUILTIN_TEMPLATES.items():
        service.templates[service.new_id()] = (name, list(points))
    return {"added": len(BUILTIN_TEMPLATES)}


@app.delete("/api/v1/templates/{template_id}")
async def delete_template(template_id: int):
    if service.templates.pop(template_id, None) is None:
        raise HTTPException(status_code=404, detail="Template not found")
    return {"deleted": template_id}
