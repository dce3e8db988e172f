#!/usr/bin/env python3
"""Run a full record → trim → save cycle against the in-process mock service.

No network or sensor needed; the mock is mounted through httpx's ASGI transport.

Usage:
    python examples/demo_offline.py --seconds 1.5 --output demo.png
"""

import argparse
import asyncio
import logging

import httpx

from gesture_studio import ImageSurface, ServiceClient, SessionController, StudioConfig
from gesture_studio.mock_service import app


async def run(seconds: float, output: str):
    config = StudioConfig(origin=(600.0, 300.0))
    transport = httpx.ASGITransport(app=app)
    async with ServiceClient("http://mock", transport=transport) as client:
        controller = SessionController(
            client,
            ImageSurface(config.canvas_width, config.canvas_height),
            config=config,
            on_notify=print,
            on_error=lambda e: print(f"Error: {e}"),
        )
        await controller.load()
        await controller.start_recording()
        await asyncio.sleep(seconds)
        await controller.stop_recording()

        if controller.trim is None:
            print("Nothing captured")
            await controller.close()
            return

        _, end = controller.trim.domain
        controller.update_trim(end // 4, end - end // 4)
        controller.surface.save(output)
        print(f"Trimmed to {controller.trim.range}, wrote {output}")

        await controller.save("demo")
        print("Templates:", [t.name for t in controller.templates.templates])
        await controller.close()


def main():
    parser = argparse.ArgumentParser(description="Offline record/trim/save demo")
    parser.add_argument("--seconds", type=float, default=1.0, help="Recording duration")
    parser.add_argument("--output", default="demo.png", help="PNG for the trimmed trace")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    asyncio.run(run(args.seconds, args.output))


if __name__ == "__main__":
    main()
