"""Error taxonomy for the studio client.

Two kinds of failure reach the user:

- TransportFailure: the service was unreachable or answered with a
  non-success status or a body we could not interpret.
- ValidationFailure: a client-side precondition failed before any
  request was sent (empty template name, too-short trim range, ...).

Neither is fatal; both are recoverable by retrying the user action.
"""

from __future__ import annotations

from typing import Optional


class StudioError(Exception):
    """Base class for all gesture studio errors."""


class TransportFailure(StudioError):
    """Network or service failure at the HTTP boundary."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ValidationFailure(StudioError):
    """Client-side precondition violation. No request was sent."""


class TransitionRefused(TransportFailure):
    """The service answered a state change with a different state than requested."""

    def __init__(self, requested: str, confirmed: str):
        super().__init__(f"Service refused to switch to {requested}, still {confirmed}")
        self.requested = requested
        self.confirmed = confirmed
