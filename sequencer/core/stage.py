"""Stage primitives for the sequencer runtime."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional, Protocol

from sequencer.extraction import ProgramIdentifier
from sequencer.plan import DeploymentPlan
from sequencer.process import CommandResult
from sequencer.settings import Settings


@dataclass(slots=True)
class StepOutcome:
    """Value a stage hands to the stages after it."""

    step: str
    result: Optional[CommandResult] = None
    program_id: Optional[ProgramIdentifier] = None


class StageCallable(Protocol):
    """Callable protocol for a sequence stage."""

    def __call__(self, context: "StageContext") -> Optional[StepOutcome]:
        """Execute the stage logic."""


@dataclass(slots=True)
class StageContext:
    """Context object passed to every stage run."""

    settings: Settings
    plan: DeploymentPlan
    run_id: str
    timestamp: datetime
    workspace: Path
    outcomes: Dict[str, StepOutcome] = field(default_factory=dict)

    @property
    def timeout(self) -> float | None:
        if self.settings.timeout is not None:
            return self.settings.timeout
        return self.plan.timeout


@dataclass(slots=True, frozen=True)
class StageDefinition:
    """Metadata about a registered stage."""

    name: str
    callable: StageCallable
    description: str
    module: str
