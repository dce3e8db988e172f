"""Studio configuration.

Loaded from a YAML file (unknown keys are ignored), then overridden by
environment variables:

    GESTURE_STUDIO_URL            service base URL
    GESTURE_STUDIO_POLL_INTERVAL  poll period in seconds
    GESTURE_STUDIO_LOG_LEVEL      logging level name
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml

from gesture_studio.render import PALETTE

logger = logging.getLogger("gesture_studio.config")

DEFAULT_CONFIG_PATH = Path("~/.config/gesture-studio/config.yml").expanduser()


@dataclass
class StudioConfig:
    service_url: str = "http://localhost:8000"
    request_timeout: float = 5.0
    poll_interval: float = 0.03
    canvas_width: int = 800
    canvas_height: int = 600
    origin: tuple[float, float] = (400.0, 300.0)
    palette: list[str] = field(default_factory=lambda: list(PALETTE))
    marker_radius: float = 3.0
    line_width: float = 2.0
    min_trim_length: int = 5
    log_level: str = "info"


_ENV_OVERRIDES = {
    "GESTURE_STUDIO_URL": ("service_url", str),
    "GESTURE_STUDIO_POLL_INTERVAL": ("poll_interval", float),
    "GESTURE_STUDIO_LOG_LEVEL": ("log_level", str),
}


def load_config(path: Optional[str | Path] = None) -> StudioConfig:
    path = Path(path) if path else DEFAULT_CONFIG_PATH
    known = {f.name for f in fields(StudioConfig)}
    values: dict = {}

    if path.exists():
        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        values = {k: v for k, v in data.items() if k in known}
        ignored = set(data) - known
        if ignored:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(ignored)))

    for env, (key, cast) in _ENV_OVERRIDES.items():
        if env in os.environ:
            values[key] = cast(os.environ[env])

    if "origin" in values:
        values["origin"] = tuple(float(v) for v in values["origin"])
    return StudioConfig(**values)
