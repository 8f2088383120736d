"""Structured JSONL journal of focus arbitration decisions."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any


class AuditLogger:
    """Writes one JSON line per arbitration outcome."""

    def __init__(self, log_path: Path) -> None:
        self.log_path = log_path
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.logger = logging.getLogger("nlf.audit")

    def log(
        self,
        kind: str,
        app: str,
        selected: str | None = None,
        evicted: list[str] | None = None,
        message: str = "",
        extra: dict[str, Any] | None = None,
    ) -> None:
        """Append one JSONL decision event."""
        event = {
            "timestamp": datetime.now(UTC).isoformat(),
            "kind": kind,
            "app": app,
            "selected": selected,
            "evicted": list(evicted or []),
            "message": message,
        }
        if extra:
            event.update(extra)
        line = json.dumps(event, ensure_ascii=True)
        with self.log_path.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
        self.logger.debug(line)
