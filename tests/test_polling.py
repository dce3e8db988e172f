"""Tests for the cancellable polling loop."""

import asyncio

import httpx

from gesture_studio.client import ServiceClient
from gesture_studio.errors import TransportFailure
from gesture_studio.polling import PollingLoop
from gesture_studio.types import VisualizationFrame


class Recorder:
    def __init__(self):
        self.frames = []
        self.errors = []

    def on_frame(self, frame):
        self.frames.append(frame)

    def on_error(self, error):
        self.errors.append(error)


async def _frame():
    return VisualizationFrame()


class TestEnableDisable:
    def test_polls_while_enabled(self):
        rec = Recorder()

        async def scenario():
            loop = PollingLoop(_frame, rec.on_frame, rec.on_error, interval=0.005)
            loop.enable()
            await asyncio.sleep(0.05)
            loop.disable()
            count = len(rec.frames)
            await asyncio.sleep(0.03)
            return count

        count = asyncio.run(scenario())
        assert count >= 2
        assert len(rec.frames) == count

    def test_enable_twice_keeps_one_timer(self):
        rec = Recorder()

        async def scenario():
            loop = PollingLoop(_frame, rec.on_frame, interval=0.01)
            loop.enable()
            first = loop._timer
            loop.enable()
            second = loop._timer
            assert loop.active_timers == 1
            await asyncio.sleep(0.02)
            assert first.cancelled()
            assert not second.done()
            assert loop.epoch == 2
            loop.disable()
            await asyncio.sleep(0.005)
            assert second.cancelled()
            assert loop.active_timers == 0
            await loop.aclose()

        asyncio.run(scenario())

    def test_disable_when_disabled_is_noop(self):
        async def scenario():
            loop = PollingLoop(_frame, lambda f: None)
            loop.disable()
            assert not loop.enabled
            assert loop.epoch == 0

        asyncio.run(scenario())


class TestStaleResults:
    def test_result_after_disable_is_dropped(self):
        rec = Recorder()

        async def scenario():
            release = asyncio.Event()
            started = asyncio.Event()

            async def slow_fetch():
                started.set()
                await release.wait()
                return VisualizationFrame()

            loop = PollingLoop(slow_fetch, rec.on_frame, interval=0.005)
            loop.enable()
            await started.wait()
            loop.disable()
            release.set()
            await asyncio.sleep(0.02)
            await loop.aclose()

        asyncio.run(scenario())
        assert rec.frames == []

    def test_result_from_previous_epoch_is_dropped(self):
        rec = Recorder()

        async def scenario():
            release = asyncio.Event()
            calls = []

            async def fetch():
                calls.append(1)
                if len(calls) == 1:
                    await release.wait()
                return VisualizationFrame()

            loop = PollingLoop(fetch, rec.on_frame, interval=0.005)
            loop.enable()
            await asyncio.sleep(0.01)
            loop.enable()
            release.set()
            await asyncio.sleep(0.03)
            await loop.aclose()
            return len(calls)

        calls = asyncio.run(scenario())
        # The first (stale) fetch never renders, later ones do
        assert len(rec.frames) == calls - 1

    def test_one_fetch_in_flight(self):
        async def scenario():
            release = asyncio.Event()
            calls = []

            async def fetch():
                calls.append(1)
                await release.wait()
                return VisualizationFrame()

            loop = PollingLoop(fetch, lambda f: None, interval=0.002)
            loop.enable()
            await asyncio.sleep(0.03)
            in_flight = len(calls)
            release.set()
            await loop.aclose()
            return in_flight

        assert asyncio.run(scenario()) == 1


class TestFailure:
    def test_failure_disables_and_reports(self):
        rec = Recorder()

        async def scenario():
            calls = []

            async def failing():
                calls.append(1)
                raise TransportFailure("service down")

            loop = PollingLoop(failing, rec.on_frame, rec.on_error, interval=0.005)
            loop.enable()
            await asyncio.sleep(0.04)
            assert not loop.enabled
            await loop.aclose()
            return len(calls)

        calls = asyncio.run(scenario())
        assert calls == 1
        assert len(rec.errors) == 1
        assert isinstance(rec.errors[0], TransportFailure)
        assert rec.frames == []

    def test_malformed_body_disables(self):
        rec = Recorder()

        async def scenario():
            transport = httpx.MockTransport(lambda r: httpx.Response(200, json=[]))
            async with ServiceClient("http://testserver", transport=transport) as client:
                loop = PollingLoop(client.get_visualization, rec.on_frame, rec.on_error, interval=0.005)
                loop.enable()
                await asyncio.sleep(0.05)
                enabled = loop.enabled
                await loop.aclose()
                return enabled

        assert not asyncio.run(scenario())
        assert len(rec.errors) == 1
        assert isinstance(rec.errors[0], TransportFailure)

    def test_handler_error_disables(self):
        calls = []

        def broken(frame):
            raise RuntimeError("surface gone")

        async def fetch():
            calls.append(1)
            return VisualizationFrame()

        async def scenario():
            loop = PollingLoop(fetch, broken, interval=0.005)
            loop.enable()
            await asyncio.sleep(0.04)
            enabled = loop.enabled
            await loop.aclose()
            return enabled

        assert not asyncio.run(scenario())
        assert len(calls) == 1
