"""Trim selection over the save candidate trace.

The selector is built from the trace captured when saving began and never
looks at later polls. Its domain is [0, len(trace)]; the selection starts
out as the whole trace.
"""

from __future__ import annotations

from typing import Optional

from gesture_studio.errors import ValidationFailure
from gesture_studio.types import Trace, TrimRange

MIN_TRIM_LENGTH = 5


def validate_trim(
    name: str,
    start: int,
    end: int,
    length: Optional[int] = None,
    min_length: int = MIN_TRIM_LENGTH,
) -> str:
    """Check a save request before it is sent. Returns the stripped name.

    Raises:
        ValidationFailure: empty name, inverted or out-of-bounds range, or
            fewer than `min_length` points selected.
    """
    name = (name or "").strip()
    if not name:
        raise ValidationFailure("Template name must not be empty")
    if start > end:
        raise ValidationFailure(f"Invalid trim range: start {start} is after end {end}")
    if start < 0 or (length is not None and end > length):
        raise ValidationFailure(f"Trim range [{start}, {end}] is outside [0, {length}]")
    if end - start < min_length:
        raise ValidationFailure(
            f"Trim range too short: {end - start} points, need at least {min_length}"
        )
    return name


class TrimSelector:
    """Two-handle range over a fixed trace."""

    def __init__(self, trace: Trace, min_length: int = MIN_TRIM_LENGTH):
        self._trace = trace
        self.min_length = min_length
        self._range = TrimRange(0, len(trace))

    @property
    def trace(self) -> Trace:
        return self._trace

    @property
    def domain(self) -> tuple[int, int]:
        return (0, len(self._trace))

    @property
    def range(self) -> TrimRange:
        return self._range

    @property
    def selection(self) -> Trace:
        return self._trace.slice(self._range.start, self._range.end)

    def update(self, start: int, end: int) -> Trace:
        """Replace the range with the control's handles and return the selected trace.

        Handles are clamped to the domain. An inverted pair is kept as-is so
        that `validate` can reject it.
        """
        lo, hi = self.domain
        self._range = TrimRange(min(max(int(start), lo), hi), min(max(int(end), lo), hi))
        return self.selection

    def validate(self, name: str) -> str:
        return validate_trim(
            name, self._range.start, self._range.end,
            length=len(self._trace), min_length=self.min_length,
        )
