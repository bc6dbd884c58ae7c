"""Deployment stages for the rewards and registry programs."""
from __future__ import annotations

import logging

from sequencer.core import StepOutcome, register_stage
from sequencer.core.stage import StageContext
from sequencer.errors import DependencyDeployFailure
from sequencer.extraction import extract_program_id
from sequencer.plan import REGISTRY_STEP, REWARDS_STEP
from sequencer.process import run_command

logger = logging.getLogger(__name__)


@register_stage(REWARDS_STEP, "Deploy the rewards program and capture its program id.")
def deploy_rewards(context: StageContext) -> StepOutcome:
    """Deploy rewards and extract the program id from its output."""

    step = context.plan.rewards
    result = run_command(
        step.argv,
        cwd=step.directory(context.workspace),
        capture=True,
        timeout=context.timeout,
    )
    if not result.ok:
        if result.stdout:
            logger.error("Output of '%s':\n%s", step.name, result.stdout.rstrip())
        raise DependencyDeployFailure(step.name, result)
    logger.debug("Rewards deploy output: %s", result.stdout)
    program_id = extract_program_id(result.stdout or "", step=step.name)
    logger.info("Rewards program deployed with id %s", program_id)
    return StepOutcome(step=step.name, result=result, program_id=program_id)


@register_stage(REGISTRY_STEP, "Deploy the registry program.")
def deploy_registry(context: StageContext) -> StepOutcome:
    step = context.plan.registry
    result = run_command(
        step.argv,
        cwd=step.directory(context.workspace),
        timeout=context.timeout,
    )
    if not result.ok:
        raise DependencyDeployFailure(step.name, result)
    return StepOutcome(step=step.name, result=result)
