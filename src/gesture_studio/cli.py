"""Gesture Studio CLI.

Usage:
    gesture-studio state        - Show the service state
    gesture-studio record       - Record a trace, then save or discard it
    gesture-studio watch        - Visualize live traces, write the last frame to PNG
    gesture-studio templates    - List templates
    gesture-studio delete ID    - Delete a template
    gesture-studio builtin      - Add the built-in templates
    gesture-studio serve-mock   - Run the in-memory mock service
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import typer

from gesture_studio.client import ServiceClient
from gesture_studio.config import StudioConfig, load_config
from gesture_studio.errors import StudioError
from gesture_studio.render import ImageSurface
from gesture_studio.session import SessionController

app = typer.Typer(
    name="gesture-studio",
    help="✋ Record, trim and manage gesture templates.",
    add_completion=False,
)

_config_path: Optional[str] = None


def _config() -> StudioConfig:
    config = load_config(_config_path)
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    return config


def _report(error: StudioError):
    typer.echo(f"❌ {error}", err=True)


def _controller(client: ServiceClient, config: StudioConfig) -> SessionController:
    return SessionController(
        client,
        ImageSurface(config.canvas_width, config.canvas_height),
        config=config,
        on_notify=lambda message: typer.echo(f"🔔 {message}"),
        on_error=_report,
    )


@app.callback()
def main(config: Optional[str] = typer.Option(None, "--config", help="Path to YAML config")):
    global _config_path
    _config_path = config


@app.command()
def state():
    """Show the current session state of the service."""
    config = _config()

    async def run():
        async with ServiceClient(config.service_url, config.request_timeout) as client:
            return await client.get_state()

    try:
        current = asyncio.run(run())
    except StudioError as e:
        _report(e)
        raise typer.Exit(1)
    typer.echo(f"State: {current.value}")


@app.command()
def record(
    seconds: float = typer.Option(3.0, help="How long to record"),
    name: Optional[str] = typer.Option(None, help="Template name (omit to discard)"),
    start: Optional[int] = typer.Option(None, help="First point to keep"),
    end: Optional[int] = typer.Option(None, help="Point after the last one to keep"),
    output: Optional[str] = typer.Option(None, "-o", help="Write the trimmed trace to PNG"),
):
    """Record a trace, then trim and save it as a template (or discard it)."""
    config = _config()

    async def run() -> bool:
        async with ServiceClient(config.service_url, config.request_timeout) as client:
            controller = _controller(client, config)
            try:
                if not await controller.load() or not await controller.start_recording():
                    return False
                typer.echo(f"⏺  Recording for {seconds:.1f}s...")
                await asyncio.sleep(seconds)
                if not await controller.stop_recording():
                    return False

                trim = controller.trim
                if trim is None:
                    typer.echo("Nothing captured.")
                    return True

                lo, hi = trim.domain
                controller.update_trim(lo if start is None else start, hi if end is None else end)
                typer.echo(f"✂️  Captured {hi} points, keeping [{trim.range.start}, {trim.range.end})")
                if output:
                    controller.surface.save(output)

                if name:
                    ok = await controller.save(name)
                    if ok:
                        typer.echo(f"✅ Saved template '{name}'")
                    return ok
                return await controller.discard()
            finally:
                await controller.close()

    if not asyncio.run(run()):
        raise typer.Exit(1)


@app.command()
def watch(
    seconds: float = typer.Option(5.0, help="How long to visualize"),
    output: str = typer.Option("frame.png", "-o", help="PNG file for the last frame"),
):
    """Visualize live traces and write the last rendered frame to a PNG."""
    config = _config()

    async def run() -> bool:
        async with ServiceClient(config.service_url, config.request_timeout) as client:
            controller = _controller(client, config)
            try:
                if not await controller.load():
                    return False
                controller.set_visualize(True)
                await asyncio.sleep(seconds)
                ok = controller.polling.enabled
                controller.set_visualize(False)
            finally:
                await controller.close()
            controller.surface.save(output)
            typer.echo(f"🖼  Wrote {output}")
            return ok

    if not asyncio.run(run()):
        raise typer.Exit(1)


async def _templates_call(config: StudioConfig, action: Optional[str] = None, template_id: int = 0):
    async with ServiceClient(config.service_url, config.request_timeout) as client:
        controller = _controller(client, config)
        try:
            if action == "delete":
                ok = await controller.delete_template(template_id)
            elif action == "builtin":
                ok = await controller.add_builtin_templates()
            else:
                ok = await controller.refresh_templates()
        finally:
            await controller.close()
        return ok, controller.templates.templates


def _print_templates(templates):
    if not templates:
        typer.echo("No templates.")
        return
    typer.echo(f"{'ID':>12}  {'POINTS':>6}  NAME")
    for t in templates:
        typer.echo(f"{t.id:>12}  {t.points:>6}  {t.name}")


@app.command()
def templates():
    """List the templates stored by the service."""
    ok, items = asyncio.run(_templates_call(_config()))
    if not ok:
        raise typer.Exit(1)
    _print_templates(items)


@app.command()
def delete(template_id: int = typer.Argument(..., help="Template id")):
    """Delete a template by id."""
    ok, items = asyncio.run(_templates_call(_config(), "delete", template_id))
    if not ok:
        raise typer.Exit(1)
    _print_templates(items)


@app.command()
def builtin():
    """Add the service's built-in templates."""
    ok, items = asyncio.run(_templates_call(_config(), "builtin"))
    if not ok:
        raise typer.Exit(1)
    _print_templates(items)


@app.command("serve-mock")
def serve_mock(
    host: str = typer.Option("127.0.0.1", help="Bind address"),
    port: int = typer.Option(8000, help="Port"),
    log_level: str = typer.Option("info", help="Log level"),
):
    """Run the in-memory mock service."""
    import uvicorn
    from gesture_studio.mock_service import app as fastapi_app

    typer.echo(f"🚀 Mock service on http://{host}:{port}")
    uvicorn.run(fastapi_app, host=host, port=port, log_level=log_level)


if __name__ == "__main__":
    app()
