"""CLI entrypoint for never-lose-focus."""

from __future__ import annotations

from pathlib import Path

import typer

from ui.cli import commands

app = typer.Typer(help="Keep keyboard focus on the most recently used app with a visible window")
config_app = typer.Typer(help="Configuration commands")


@app.command("run")
def run_cmd(
    backend: str = typer.Option(None, "--backend", help="auto, linux, windows or simulated"),
    config: Path = typer.Option(None, "--config", help="YAML file merged over the defaults"),
    log_level: str = typer.Option(None, "--log-level", help="Override logging.level"),
) -> None:
    """Watch the desktop and refocus when an app loses its last window."""
    commands.run(backend=backend, config=config, log_level=log_level)


@app.command("simulate")
def simulate_cmd(
    script: Path = typer.Argument(..., exists=True, dir_okay=False, help="YAML simulation script"),
    config: Path = typer.Option(None, "--config", help="YAML file merged over the defaults"),
    settle_ms: int = typer.Option(0, "--settle-ms", min=0, help="Settle delay used while replaying"),
    log_level: str = typer.Option("WARNING", "--log-level"),
) -> None:
    """Replay scripted window activity against a simulated desktop."""
    commands.simulate(script=script, config=config, settle_ms=settle_ms, log_level=log_level)


@config_app.command("show")
def config_show_cmd(
    config: Path = typer.Option(None, "--config", help="YAML file merged over the defaults"),
) -> None:
    """Show effective configuration."""
    commands.config_show(config=config)


app.add_typer(config_app, name="config")


def main() -> None:
    """Console script entrypoint."""
    app()


if __name__ == "__main__":
    main()
