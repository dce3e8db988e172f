"""Session controller: the recording/saving state machine.

States and transitions (every one confirmed by the service first):

    NORMAL ──start──▶ RECORDING ──stop, models captured──▶ SAVING
      ▲                   │                                 │
      └──stop, nothing────┘               save / discard ───┘

The controller owns everything that changes during a session: the cached
state, the last polled models, the save candidate with its trim selector
and the polling loop. Local state is only ever updated from a response the
service sent back. A request that fails leaves it where it was.

User actions return True on success. On failure the error is logged and
passed to `on_error`, and the action returns False.

Usage:
    controller = SessionController(client, CommandSurface(), on_notify=print)
    await controller.load()
    await controller.start_recording()
    ...
    await controller.stop_recording()
    controller.update_trim(3, 40)
    await controller.save("circle")
    await controller.close()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from gesture_studio.client import ServiceClient
from gesture_studio.config import StudioConfig
from gesture_studio.errors import StudioError, TransitionRefused, ValidationFailure
from gesture_studio.polling import PollingLoop
from gesture_studio.render import Surface, TraceRenderer
from gesture_studio.templates import TemplateSync
from gesture_studio.trim import TrimSelector
from gesture_studio.types import Model, SessionState, Template, Trace, VisualizationFrame

logger = logging.getLogger("gesture_studio.session")


@dataclass(frozen=True)
class Affordances:
    """What the UI should offer in the current state."""
    record_label: str
    record_style: str
    record_enabled: bool
    trim_visible: bool
    trim_domain: tuple[int, int]
    save_enabled: bool
    visualizing: bool


class SessionController:
    def __init__(
        self,
        client: ServiceClient,
        surface: Surface,
        config: Optional[StudioConfig] = None,
        renderer: Optional[TraceRenderer] = None,
        on_notify: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[StudioError], None]] = None,
        on_templates: Optional[Callable[[list[Template]], None]] = None,
    ):
        self.config = config or StudioConfig()
        self.surface = surface
        self.renderer = renderer or TraceRenderer(
            origin=self.config.origin,
            palette=self.config.palette,
            marker_radius=self.config.marker_radius,
            line_width=self.config.line_width,
        )
        self._client = client
        self._on_notify = on_notify
        self._on_error = on_error

        self.templates = TemplateSync(client, on_change=on_templates)
        self.polling = PollingLoop(
            client.get_visualization,
            on_frame=self._on_frame,
            on_error=self._on_poll_error,
            interval=self.config.poll_interval,
        )

        self._state = SessionState.NORMAL
        self._visualize = False
        self._last_models: list[Model] = []
        self._trim: Optional[TrimSelector] = None

    # --- Read-only views ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def trim(self) -> Optional[TrimSelector]:
        return self._trim

    @property
    def last_models(self) -> list[Model]:
        return list(self._last_models)

    @property
    def visualize(self) -> bool:
        return self._visualize

    @property
    def affordances(self) -> Affordances:
        recording = self._state is SessionState.RECORDING
        saving = self._state is SessionState.SAVING and self._trim is not None
        return Affordances(
            record_label="Recording..." if recording else "Start recording",
            record_style="danger" if recording else "outline-success",
            record_enabled=self._state is not SessionState.SAVING,
            trim_visible=saving,
            trim_domain=self._trim.domain if self._trim else (0, 0),
            save_enabled=saving and self._trim.range.length >= self._trim.min_length,
            visualizing=self.polling.enabled,
        )

    # --- Lifecycle ---

    async def load(self) -> bool:
        """Fetch the service state and template list."""
        try:
            confirmed = await self._client.get_state()
        except StudioError as e:
            self._surface_error(e)
            return False
        logger.info("Service is in state %s", confirmed.value)
        self._apply_state(confirmed)
        return await self.refresh_templates()

    async def close(self):
        await self.polling.aclose()

    # --- Recording ---

    async def toggle_recording(self) -> bool:
        if self._state is SessionState.RECORDING:
            return await self.stop_recording()
        return await self.start_recording()

    async def start_recording(self) -> bool:
        try:
            self._require(SessionState.NORMAL, "start recording")
            confirmed = await self._client.request_state(SessionState.RECORDING)
        except StudioError as e:
            self._surface_error(e)
            return False
        if confirmed is SessionState.RECORDING:
            self._last_models = []
        return self._confirm(SessionState.RECORDING, confirmed)

    async def stop_recording(self) -> bool:
        """Stop recording; go to SAVING if the last poll captured anything.

        The save candidate is the first model of the last poll before the
        request goes out.
        """
        candidate = self._last_models[0].trace if self._last_models else None
        target = SessionState.SAVING if candidate is not None else SessionState.NORMAL
        try:
            self._require(SessionState.RECORDING, "stop recording")
            confirmed = await self._client.request_state(target)
        except StudioError as e:
            self._surface_error(e)
            return False
        return self._confirm(target, confirmed, candidate=candidate)

    # --- Saving ---

    def update_trim(self, start: int, end: int) -> bool:
        """Move the trim handles and redraw the selected part of the candidate."""
        try:
            self._require(SessionState.SAVING, "trim")
        except ValidationFailure as e:
            self._surface_error(e)
            return False
        selection = self._trim.update(start, end)
        self._render([Model(selection)])
        return True

    async def save(self, name: str) -> bool:
        """Store the trimmed candidate as a template and return to NORMAL."""
        try:
            self._require(SessionState.SAVING, "save")
            name = self._trim.validate(name)
            selected = self._trim.range
            await self.templates.create(name, selected.start, selected.end)
        except StudioError as e:
            self._surface_error(e)
            return False

        try:
            confirmed = await self._client.request_state(SessionState.NORMAL)
        except StudioError as e:
            self._surface_error(e)
            return False
        return self._confirm(SessionState.NORMAL, confirmed)

    async def discard(self) -> bool:
        try:
            self._require(SessionState.SAVING, "discard")
            confirmed = await self._client.request_state(SessionState.NORMAL)
        except StudioError as e:
            self._surface_error(e)
            return False
        return self._confirm(SessionState.NORMAL, confirmed)

    # --- Visualization ---

    def set_visualize(self, enabled: bool) -> bool:
        """Turn live visualization on or off.

        Turning it off during a recording leaves the loop running. Saving
        never polls; the setting applies again once back in NORMAL.
        """
        self._visualize = enabled
        if self._state is SessionState.SAVING:
            return True
        if enabled:
            self.polling.enable()
        elif self._state is SessionState.NORMAL:
            self.polling.disable()
        return True

    def clear_visualization(self):
        self._last_models = []
        self._render([])

    # --- Templates ---

    async def refresh_templates(self) -> bool:
        try:
            await self.templates.refresh()
        except StudioError as e:
            self._surface_error(e)
            return False
        return True

    async def delete_template(self, template_id: int) -> bool:
        try:
            await self.templates.delete(template_id)
        except StudioError as e:
            self._surface_error(e)
            return False
        return True

    async def add_builtin_templates(self) -> bool:
        try:
            await self.templates.add_builtin()
        except StudioError as e:
            self._surface_error(e)
            return False
        return True

    # --- Internals ---

    def _require(self, state: SessionState, action: str):
        if self._state is not state:
            raise ValidationFailure(f"Cannot {action} while {self._state.value}")
        if state is SessionState.SAVING and self._trim is None:
            raise ValidationFailure(f"Cannot {action}: no trace captured")

    def _confirm(
        self, target: SessionState, confirmed: SessionState, candidate: Optional[Trace] = None,
    ) -> bool:
        self._apply_state(confirmed, candidate)
        if confirmed is not target:
            self._surface_error(TransitionRefused(target.value, confirmed.value))
            return False
        return True

    def _apply_state(self, confirmed: SessionState, candidate: Optional[Trace] = None):
        previous = self._state
        self._state = confirmed
        if previous is not confirmed:
            logger.info("Session state %s -> %s", previous.value, confirmed.value)

        if confirmed is SessionState.RECORDING:
            self._trim = None
            self.polling.enable()

        elif confirmed is SessionState.SAVING:
            self.polling.disable()
            if self._trim is None:
                if candidate is None:
                    candidate = Trace.empty()
                self._trim = TrimSelector(candidate, min_length=self.config.min_trim_length)
                logger.info("Captured %d points for saving", len(candidate))
            self._render([Model(self._trim.selection)])

        else:
            self._trim = None
            if previous is SessionState.SAVING:
                self._render([])
            if self._visualize:
                self.polling.enable()
            else:
                self.polling.disable()

    def _on_frame(self, frame: VisualizationFrame):
        self._last_models = list(frame.models)
        self._render(frame.models)
        for gesture in frame.detected:
            logger.info("Detected gesture: %s", gesture.name)
            if self._on_notify:
                self._on_notify(f"Detected gesture: {gesture.name}")

    def _on_poll_error(self, error: StudioError):
        self._visualize = False
        self._surface_error(error)

    def _render(self, models: Sequence[Model]):
        self.renderer.render(self.surface, models)

    def _surface_error(self, error: StudioError):
        if isinstance(error, ValidationFailure):
            logger.warning("%s", error)
        else:
            logger.error("%s", error)
        if self._on_error:
            self._on_error(error)
