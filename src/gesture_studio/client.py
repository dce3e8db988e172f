"""Async HTTP client for the recognition/recording service.

All calls go through one httpx.AsyncClient. Anything that goes wrong on the
wire (connection error, timeout, non-2xx status, a body we cannot parse) is
raised as TransportFailure.

Usage:
    async with ServiceClient("http://localhost:8000") as client:
        state = await client.get_state()
        state = await client.request_state(SessionState.RECORDING)
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from gesture_studio.errors import TransportFailure
from gesture_studio.types import SessionState, Template, VisualizationFrame

logger = logging.getLogger("gesture_studio.client")

API_PREFIX = "/api/v1"


class ServiceClient:
    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> ServiceClient:
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    async def aclose(self):
        await self._http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        url = API_PREFIX + path
        try:
            resp = await self._http.request(method, url, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportFailure(
                f"{method} {url} failed with status {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise TransportFailure(f"{method} {url} failed: {e}") from e

        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as e:
            raise TransportFailure(f"{method} {url} returned invalid JSON") from e

    @staticmethod
    def _parse(what: str, fn, data):
        try:
            return fn(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportFailure(f"Malformed {what} response: {e}") from e

    # --- Session state ---

    async def get_state(self) -> SessionState:
        data = await self._request("GET", "/state")
        return self._parse("state", lambda d: SessionState.parse(d["state"]), data)

    async def request_state(self, target: SessionState) -> SessionState:
        """Ask the service to move to `target`. Returns the state it confirmed."""
        data = await self._request("POST", f"/state/{target.value}")
        return self._parse("state", lambda d: SessionState.parse(d["state"]), data)

    # --- Live data ---

    async def get_visualization(self) -> VisualizationFrame:
        data = await self._request("GET", "/visualize")
        return self._parse("visualize", VisualizationFrame.from_dict, data)

    # --- Templates ---

    async def list_templates(self) -> list[Template]:
        data = await self._request("GET", "/templates")
        return self._parse(
            "templates", lambda d: [Template.from_dict(t) for t in d["templates"]], data,
        )

    async def create_template(self, name: str, start: int, end: int):
        await self._request("POST", "/templates", json={"name": name, "start": start, "end": end})
        logger.info("Created template '%s' from points [%d, %d)", name, start, end)

    async def delete_template(self, template_id: int):
        await self._request("DELETE", f"/templates/{template_id}")
        logger.info("Deleted template %d", template_id)

    async def add_builtin_templates(self):
        await self._request("POST", "/templates/builtin")
