"""Environment-driven configuration for the sequencer."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from sequencer.plan import parse_timeout

DEFAULT_PLAN_FILE = "sequencer.yaml"


@dataclass(slots=True)
class Settings:
    """Runtime settings loaded from environment variables."""

    workspace: Path
    plan_path: Path | None
    timeout: float | None
    make: str
    log_level: str

    @classmethod
    def load(cls) -> "Settings":
        """Load settings from environment variables with sensible defaults."""

        workspace = Path(os.getenv("SEQUENCER_WORKSPACE", ".")).resolve()
        plan_path: Path | None = None
        if configured := os.getenv("SEQUENCER_CONFIG"):
            plan_path = Path(configured)
        elif (workspace / DEFAULT_PLAN_FILE).exists():
            plan_path = workspace / DEFAULT_PLAN_FILE
        raw_timeout = os.getenv("SEQUENCER_TIMEOUT")
        timeout = parse_timeout(raw_timeout, "SEQUENCER_TIMEOUT") if raw_timeout else None
        return cls(
            workspace=workspace,
            plan_path=plan_path,
            timeout=timeout,
            make=os.getenv("SEQUENCER_MAKE", "make"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
