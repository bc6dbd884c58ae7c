"""Miscellaneous helpers for the sequencer runtime."""
from __future__ import annotations

from datetime import datetime, timezone
from importlib import metadata

__all__ = ["new_run_id", "sequencer_version"]


def sequencer_version() -> str:
    """Return the installed package version or a sensible default."""

    try:
        return metadata.version("registry-sequencer")
    except metadata.PackageNotFoundError:  # pragma: no cover - fallback path
        return "0.0.0"


def new_run_id(moment: datetime | None = None) -> str:
    """Return a timestamp-based identifier for a sequence run."""

    moment = moment or datetime.now(timezone.utc)
    return moment.strftime("%Y%m%d%H%M%S")
