"""Cancellable periodic fetch of live visualization data.

The loop is a single asyncio timer task. Every tick it spawns one fetch;
when the fetch resolves the frame is handed to `on_frame`. Each enable
starts a new epoch and every fetch carries the epoch it was issued in, so a
fetch that resolves after a disable (or after a re-enable) is dropped
instead of drawing a stale frame.

A failed fetch disables the loop. It is not retried; the caller has to
enable it again.

Usage:
    loop = PollingLoop(client.get_visualization, on_frame=show, on_error=report)
    loop.enable()
    ...
    loop.disable()
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Awaitable, Callable, Optional

from gesture_studio.errors import StudioError
from gesture_studio.types import VisualizationFrame

logger = logging.getLogger("gesture_studio.polling")

DEFAULT_INTERVAL = 0.03


class PollingLoop:
    def __init__(
        self,
        fetch: Callable[[], Awaitable[VisualizationFrame]],
        on_frame: Callable[[VisualizationFrame], None],
        on_error: Optional[Callable[[StudioError], None]] = None,
        interval: float = DEFAULT_INTERVAL,
    ):
        self._fetch = fetch
        self._on_frame = on_frame
        self._on_error = on_error
        self.interval = interval

        self._epoch = 0
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None

    @property
    def enabled(self) -> bool:
        return self._timer is not None

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def active_timers(self) -> int:
        """Number of live timer tasks. Never more than one."""
        return int(self._timer is not None and not self._timer.done())

    def enable(self):
        """Start polling. Restarts the timer if already running."""
        self._cancel_timer()
        self._epoch += 1
        self._timer = asyncio.get_running_loop().create_task(self._run(self._epoch))
        logger.debug("Polling enabled (epoch %d)", self._epoch)

    def disable(self):
        """Stop polling. A fetch already in flight resolves but is not delivered."""
        if self._timer is None:
            return
        self._cancel_timer()
        logger.debug("Polling disabled (epoch %d)", self._epoch)

    async def aclose(self):
        timer = self._timer
        self.disable()
        pending = [t for t in (timer, self._inflight) if t is not None]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        self._inflight = None

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _run(self, epoch: int):
        while True:
            if self._inflight is None or self._inflight.done():
                self._inflight = asyncio.create_task(self._tick(epoch))
                self._inflight.add_done_callback(functools.partial(self._tick_done, epoch))
            await asyncio.sleep(self.interval)

    def _tick_done(self, epoch: int, task: asyncio.Task):
        if task.cancelled() or task.exception() is None:
            return
        logger.error("Poll handler failed, disabling polling", exc_info=task.exception())
        if epoch == self._epoch:
            self.disable()

    async def _tick(self, epoch: int):
        try:
            frame = await self._fetch()
        except StudioError as e:
            if epoch != self._epoch or not self.enabled:
                logger.debug("Dropping failure from stale poll (epoch %d): %s", epoch, e)
                return
            logger.warning("Poll failed, disabling visualization: %s", e)
            self.disable()
            if self._on_error:
                self._on_error(e)
            return

        if epoch != self._epoch or not self.enabled:
            logger.debug("Dropping stale poll result (epoch %d, current %d)", epoch, self._epoch)
            return
        self._on_frame(frame)
