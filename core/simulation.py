"""Replays scripted desktop activity against the simulated host."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from core.orchestrator import RuntimeBundle
from core.policy_runtime import load_yaml
from os_controller.simulated_controller import SimulatedController

ACTIONS = ("open", "focus", "close", "minimize", "hide", "quit")


@dataclass
class SimulationStep:
    """One scripted desktop action."""

    action: str
    app: str
    title: str | None = None


@dataclass
class StepResult:
    """Observable state after a step has fully settled."""

    step: SimulationStep
    mru: list[str]
    frontmost: list[str] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)


def parse_steps(raw_steps: list[Any]) -> list[SimulationStep]:
    """Parse ``[{open: Editor}, {close: {app: Editor, title: x}}]`` style steps."""
    steps: list[SimulationStep] = []
    for index, raw in enumerate(raw_steps, start=1):
        if not isinstance(raw, dict) or len(raw) != 1:
            raise ValueError(f"Step {index} must be a mapping with exactly one action.")
        action, target = next(iter(raw.items()))
        if action not in ACTIONS:
            raise ValueError(f"Step {index}: unknown action {action!r}.")
        if isinstance(target, str):
            steps.append(SimulationStep(action=action, app=target))
        elif isinstance(target, dict) and "app" in target:
            title = target.get("title")
            steps.append(
                SimulationStep(action=action, app=str(target["app"]), title=str(title) if title else None)
            )
        else:
            raise ValueError(f"Step {index}: target must be an app name or {{app, title}}.")
    return steps


def load_script(path: Path) -> list[SimulationStep]:
    data = load_yaml(path)
    raw_steps = data.get("steps")
    if not isinstance(raw_steps, list):
        raise ValueError(f"Simulation script needs a 'steps' list: {path}")
    return parse_steps(raw_steps)


async def run_steps(bundle: RuntimeBundle, steps: list[SimulationStep]) -> list[StepResult]:
    """Apply each step and wait for all resulting arbitration to finish."""
    host = bundle.host
    if not isinstance(host, SimulatedController):
        raise TypeError("Simulations need the simulated backend.")

    results: list[StepResult] = []
    for step in steps:
        seen_requests = len(host.frontmost_requests)
        seen_alerts = len(host.alerts)
        method = getattr(host, step.action)
        if step.action in ("hide", "quit"):
            method(step.app)
        else:
            method(step.app, step.title)
        await bundle.event_bus.drain()
        results.append(
            StepResult(
                step=step,
                mru=bundle.registry.snapshot(),
                frontmost=host.frontmost_requests[seen_requests:],
                alerts=host.alerts[seen_alerts:],
            )
        )
    return results
