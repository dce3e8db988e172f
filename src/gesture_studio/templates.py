"""Template list kept in sync with the service.

The local list is only ever replaced by a successful list fetch. Mutations
that fail leave it untouched; the next successful refresh is authoritative.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from gesture_studio.client import ServiceClient
from gesture_studio.types import Template

logger = logging.getLogger("gesture_studio.templates")


class TemplateSync:
    def __init__(
        self,
        client: ServiceClient,
        on_change: Optional[Callable[[list[Template]], None]] = None,
    ):
        self._client = client
        self._on_change = on_change
        self._templates: list[Template] = []

    @property
    def templates(self) -> list[Template]:
        return list(self._templates)

    async def refresh(self) -> list[Template]:
        templates = await self._client.list_templates()
        self._templates = templates
        logger.debug("Template list refreshed (%d templates)", len(templates))
        if self._on_change:
            self._on_change(self.templates)
        return self.templates

    async def create(self, name: str, start: int, end: int) -> list[Template]:
        await self._client.create_template(name, start, end)
        return await self.refresh()

    async def delete(self, template_id: int) -> list[Template]:
        await self._client.delete_template(template_id)
        return await self.refresh()

    async def add_builtin(self) -> list[Template]:
        await self._client.add_builtin_templates()
        return await self.refresh()
