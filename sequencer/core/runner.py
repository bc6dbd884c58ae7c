"""Stage runner implementation for the sequencer."""
from __future__ import annotations

import logging
import time
from typing import List, Optional, Sequence

from sequencer.errors import SequencerError

from .registry import StageRegistry
from .stage import StageContext, StepOutcome

logger = logging.getLogger(__name__)


class StageRunner:
    """Execute registered stages one at a time."""

    def __init__(self, registry: StageRegistry) -> None:
        self._registry = registry

    def resolve(self, requested: Sequence[str]) -> List[str]:
        """Validate *requested* against the registry, dropping repeats in order."""

        missing = self._registry.missing(requested)
        if missing:
            raise ValueError(f"Unknown stages requested: {', '.join(missing)}")
        return list(dict.fromkeys(requested))

    def run_stage(self, name: str, context: StageContext) -> Optional[StepOutcome]:
        """Run a single stage and record what it returns on *context*."""

        definition = self._registry.get(name)
        stage_logger = logging.getLogger(definition.module)
        stage_logger.info(
            "Starting stage '%s' (run_id=%s, timestamp=%s)",
            definition.name,
            context.run_id,
            context.timestamp.isoformat(),
        )
        start_time = time.monotonic()
        try:
            outcome = definition.callable(context)
        except SequencerError as exc:
            stage_logger.error("Stage '%s' failed: %s", definition.name, exc)
            raise
        except Exception:
            stage_logger.exception("Stage '%s' failed", definition.name)
            raise
        if outcome is not None:
            context.outcomes[definition.name] = outcome
        stage_logger.info(
            "Completed stage '%s' in %.2fs",
            definition.name,
            time.monotonic() - start_time,
        )
        return outcome
