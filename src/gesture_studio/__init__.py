"""Gesture Studio - capture, trim and manage gesture templates."""

__version__ = "0.2.0"

from gesture_studio.types import (
    Coordinate, DetectedGesture, Model, Segment, SessionState, Template, Trace,
    TrimRange, VisualizationFrame,
)
from gesture_studio.errors import StudioError, TransitionRefused, TransportFailure, ValidationFailure
from gesture_studio.geometry import to_array, to_coordinates
from gesture_studio.render import CommandSurface, DrawCommand, ImageSurface, TraceRenderer, palette_color
from gesture_studio.polling import PollingLoop
from gesture_studio.trim import TrimSelector, validate_trim
from gesture_studio.client import ServiceClient
from gesture_studio.templates import TemplateSync
from gesture_studio.config import StudioConfig, load_config
from gesture_studio.session import Affordances, SessionController
