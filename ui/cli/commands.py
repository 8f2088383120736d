"""Typer command handlers."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import typer
from pydantic import ValidationError

from core.orchestrator import Orchestrator, run_forever
from core.policy_runtime import configure_logging
from core.settings import AppSettings
from core.simulation import load_script, run_steps


def _settings(config: Path | None) -> AppSettings:
    try:
        return Orchestrator(config_path=config).settings
    except (ValueError, ValidationError) as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def run(backend: str | None, config: Path | None, log_level: str | None) -> None:
    """Watch focus on the real desktop until interrupted."""
    settings = _settings(config)
    if backend:
        settings = settings.model_copy(
            update={"host": settings.host.model_copy(update={"backend": backend})}
        )
    configure_logging(log_level or settings.logging.level)
    try:
        bundle = Orchestrator(settings=settings).build()
    except (RuntimeError, ValueError) as exc:
        typer.echo(f"Cannot start: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo(f"Watching focus with {type(bundle.host).__name__}. Press Ctrl-C to stop.")
    try:
        asyncio.run(run_forever(bundle))
    except KeyboardInterrupt:
        typer.echo("bye")


def simulate(script: Path, config: Path | None, settle_ms: int, log_level: str) -> None:
    """Replay a simulation script and print the MRU list after each step."""
    settings = _settings(config)
    settings = settings.model_copy(
        update={
            "focus": settings.focus.model_copy(update={"settle_delay_ms": settle_ms}),
            "host": settings.host.model_copy(update={"backend": "simulated"}),
        }
    )
    configure_logging(log_level)
    try:
        steps = load_script(script)
    except ValueError as exc:
        typer.echo(f"Invalid script: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    bundle = Orchestrator(settings=settings).build()
    try:
        results = asyncio.run(run_steps(bundle, steps))
    except KeyError as exc:
        typer.echo(f"Simulation failed: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for result in results:
        step = result.step
        target = f"{step.app} [{step.title}]" if step.title else step.app
        typer.echo(f"{step.action} {target}")
        typer.echo(f"  mru: {', '.join(result.mru) or '(empty)'}")
        for app_name in result.frontmost:
            typer.echo(f"  frontmost -> {app_name}")
        for message in result.alerts:
            typer.echo(f"  alert: {message}")


def config_show(config: Path | None) -> None:
    """Show effective runtime config."""
    settings = _settings(config)
    typer.echo(json.dumps(settings.model_dump(), indent=2))
