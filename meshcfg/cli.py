"""Typer CLI entrypoint."""

from __future__ import annotations

import json
import logging

import typer

from meshcfg.core.errors import MeshcfgError
from meshcfg.core.report import config_to_dict, summary_lines
from meshcfg.core.service import MeshService
from meshcfg.core.settings import load_settings

app = typer.Typer(help="Read a Meshtastic radio's configuration over serial")


def _build_service(**overrides: object) -> MeshService:
    settings = load_settings().override(**overrides)
    return MeshService(settings=settings)


@app.command("read")
def read_config(
    port: str | None = typer.Option(None, "--port", help="Serial port device"),
    baud: int | None = typer.Option(None, "--baud", help="Baud rate"),
    timeout: float | None = typer.Option(None, "--timeout", help="Seconds to wait for the full configuration"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    admin_url: str | None = typer.Option(None, "--admin-url", help="Admin server URL"),
    api_key: str | None = typer.Option(None, "--api-key", help="API key for upload"),
    mesh_id: str | None = typer.Option(None, "--mesh-id", help="Mesh ID to upload config to"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log protocol and device debug output"),
) -> None:
    """Request the device configuration and print what was assembled."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING)
    try:
        service = _build_service(
            port=port,
            baud=baud,
            timeout_s=timeout,
            admin_url=admin_url,
            api_key=api_key,
            mesh_id=mesh_id,
        )
        if not json_output:
            typer.echo(f"Connecting to {service.settings.port} at {service.settings.baud} baud...")

        result = service.read_config()
        if json_output:
            typer.echo(json.dumps(config_to_dict(result.config), indent=2))
        else:
            if not result.completed:
                typer.echo("Timeout waiting for device configuration", err=True)
            typer.echo("Device Configuration:")
            for line in summary_lines(result.config):
                typer.echo(f"  {line}")

        if service.upload(result) and not json_output:
            typer.echo(f"Configuration uploaded to {service.settings.admin_url}")
    except MeshcfgError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("ports")
def list_ports() -> None:
    """List serial ports that may have a radio attached."""
    try:
        service = _build_service()
        ports = service.list_ports()
        if not ports:
            typer.echo("No serial ports found")
            return

        for device, description in ports:
            typer.echo(f"{device} {description}")
    except MeshcfgError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
