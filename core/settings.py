"""Validated runtime settings."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from core.focus_arbiter import NO_FOCUS_MESSAGES


class FocusSettings(BaseModel):
    """Arbitration tuning."""

    settle_delay_ms: int = Field(default=200, ge=0)
    excluded_apps: list[str] = Field(default_factory=list)
    include_default_exclusions: bool = True
    trace: bool = False
    no_focus_messages: list[str] = Field(
        default_factory=lambda: list(NO_FOCUS_MESSAGES), min_length=1
    )


class HostSettings(BaseModel):
    """Which desktop backend to drive and how often to poll it."""

    backend: Literal["auto", "linux", "windows", "simulated"] = "auto"
    poll_interval_ms: int = Field(default=250, gt=0)


class LoggingSettings(BaseModel):
    level: str = "INFO"


class PathSettings(BaseModel):
    decision_log_path: str | None = None


class AppSettings(BaseModel):
    """Effective configuration for one process."""

    focus: FocusSettings = Field(default_factory=FocusSettings)
    host: HostSettings = Field(default_factory=HostSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    paths: PathSettings = Field(default_factory=PathSettings)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> AppSettings:
        return cls.model_validate(data)
