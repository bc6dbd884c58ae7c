"""Deployment sequencer: rewards deploy, registry deploy, then tests."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from sequencer import bootstrap, create_default_context
from sequencer.core import StageRunner, registry
from sequencer.core.stage import StageContext
from sequencer.errors import SequencerError
from sequencer.extraction import ProgramIdentifier
from sequencer.plan import REGISTRY_STEP, REWARDS_STEP, TESTS_STEP

logger = logging.getLogger(__name__)


class SequenceState(str, Enum):
    """Position of a run in the deploy-and-test sequence."""

    PENDING_REWARDS_DEPLOY = "pending-rewards-deploy"
    PENDING_REGISTRY_DEPLOY = "pending-registry-deploy"
    PENDING_TESTS = "pending-tests"
    DONE = "done"
    FAILED = "failed"


SEQUENCE: Tuple[Tuple[SequenceState, str], ...] = (
    (SequenceState.PENDING_REWARDS_DEPLOY, REWARDS_STEP),
    (SequenceState.PENDING_REGISTRY_DEPLOY, REGISTRY_STEP),
    (SequenceState.PENDING_TESTS, TESTS_STEP),
)


@dataclass(slots=True)
class SequenceReport:
    """Summary of a finished sequence run."""

    state: SequenceState
    exit_code: int
    program_id: Optional[ProgramIdentifier] = None
    failed_step: Optional[str] = None
    error: Optional[SequencerError] = None

    @property
    def succeeded(self) -> bool:
        return self.state is SequenceState.DONE


class DeploymentSequencer:
    """Run the three steps in order and stop at the first failure."""

    def __init__(self, runner: StageRunner) -> None:
        self._runner = runner
        self.state = SequenceState.PENDING_REWARDS_DEPLOY
        self.history: List[SequenceState] = []

    def _enter(self, state: SequenceState) -> None:
        self.state = state
        self.history.append(state)

    def run(self, context: StageContext) -> SequenceReport:
        """Execute the sequence against *context* and report how it ended."""

        if self.history:
            raise RuntimeError("A DeploymentSequencer instance runs only once")
        stages = self._runner.resolve([stage for _, stage in SEQUENCE])
        for (state, _), stage in zip(SEQUENCE, stages):
            self._enter(state)
            try:
                self._runner.run_stage(stage, context)
            except SequencerError as exc:
                self._enter(SequenceState.FAILED)
                logger.error(
                    "Sequence %s halted at step '%s' (exit code %d)",
                    context.run_id,
                    exc.step,
                    exc.exit_code,
                )
                return SequenceReport(
                    state=self.state,
                    exit_code=exc.exit_code,
                    program_id=_program_id(context),
                    failed_step=exc.step,
                    error=exc,
                )
        self._enter(SequenceState.DONE)
        program_id = _program_id(context)
        logger.info("Sequence %s finished; tests ran with program id %s", context.run_id, program_id)
        return SequenceReport(state=self.state, exit_code=0, program_id=program_id)


def _program_id(context: StageContext) -> Optional[ProgramIdentifier]:
    outcome = context.outcomes.get(REWARDS_STEP)
    return outcome.program_id if outcome else None


def run_sequence(context: StageContext) -> SequenceReport:
    """Run the registered sequence stages against *context*."""

    bootstrap()
    return DeploymentSequencer(StageRunner(registry)).run(context)


def run(context: StageContext | None = None) -> int:
    """Run the full sequence and return the process exit code."""

    return run_sequence(context or create_default_context()).exit_code


__all__ = ["DeploymentSequencer", "SEQUENCE", "SequenceReport", "SequenceState", "run", "run_sequence"]
