"""Registry test stage."""
from __future__ import annotations

import logging

from sequencer.core import StepOutcome, register_stage
from sequencer.core.stage import StageContext
from sequencer.errors import SequencerError, TestFailure
from sequencer.extraction import ProgramIdentifier
from sequencer.plan import REWARDS_STEP, TESTS_STEP, forward_program_id
from sequencer.process import run_command

logger = logging.getLogger(__name__)


def _program_id(context: StageContext) -> ProgramIdentifier:
    outcome = context.outcomes.get(REWARDS_STEP)
    if outcome is None or outcome.program_id is None:
        raise SequencerError(TESTS_STEP, "no rewards program id available")
    if not outcome.program_id.strip():
        raise SequencerError(TESTS_STEP, "rewards program id is empty")
    return outcome.program_id


@register_stage(TESTS_STEP, "Run the registry tests with the rewards program id.")
def run_tests(context: StageContext) -> StepOutcome:
    """Run the test target with the rewards program id as a named parameter."""

    plan = context.plan
    program_id = _program_id(context)
    logger.info("Running tests with %s=%s", plan.parameter, program_id)
    result = run_command(
        forward_program_id(plan, program_id),
        cwd=plan.tests.directory(context.workspace),
        env={plan.parameter: program_id},
        timeout=context.timeout,
    )
    if not result.ok:
        raise TestFailure(plan.tests.name, result)
    return StepOutcome(step=plan.tests.name, result=result, program_id=program_id)
