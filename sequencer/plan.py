"""Deployment plan: the three commands the sequencer drives."""
from __future__ import annotations

import shlex
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, List, Mapping, Tuple

import yaml

from sequencer.errors import PlanError

REWARDS_STEP = "deploy-rewards"
REGISTRY_STEP = "deploy-super"
TESTS_STEP = "test-program"
STEP_NAMES = (REWARDS_STEP, REGISTRY_STEP, TESTS_STEP)

DEFAULT_PARAMETER = "TEST_REWARDS_PROGRAM_ID"


@dataclass(slots=True, frozen=True)
class StepCommand:
    """A single external command and the directory it runs in."""

    name: str
    argv: Tuple[str, ...]
    cwd: Path | None = None
    description: str = ""

    def directory(self, workspace: Path) -> Path:
        if self.cwd is None:
            return workspace
        if self.cwd.is_absolute():
            return self.cwd
        return workspace / self.cwd


@dataclass(slots=True, frozen=True)
class DeploymentPlan:
    """Commands for the rewards deploy, registry deploy and test run."""

    rewards: StepCommand
    registry: StepCommand
    tests: StepCommand
    parameter: str = DEFAULT_PARAMETER
    timeout: float | None = None

    def steps(self) -> Dict[str, StepCommand]:
        return {
            REWARDS_STEP: self.rewards,
            REGISTRY_STEP: self.registry,
            TESTS_STEP: self.tests,
        }


def default_plan(make: str = "make") -> DeploymentPlan:
    """Return the plan used by the registry's ``make test`` target."""

    return DeploymentPlan(
        rewards=StepCommand(
            name=REWARDS_STEP,
            argv=(make, "-s", "-C", "../rewards", "deploy"),
            description="Deploy the rewards program and capture its program id.",
        ),
        registry=StepCommand(
            name=REGISTRY_STEP,
            argv=(make, "-s", "deploy-super"),
            description="Deploy the registry program.",
        ),
        tests=StepCommand(
            name=TESTS_STEP,
            argv=(make, "test-program-super"),
            description="Run the registry tests against the deployed programs.",
        ),
    )


def parse_timeout(raw: object, label: str) -> float:
    """Return *raw* as a positive number of seconds."""

    try:
        timeout = float(raw)
    except (TypeError, ValueError) as exc:
        raise PlanError(f"Invalid {label} {raw!r}") from exc
    if not timeout > 0:
        raise PlanError(f"{label} must be a positive number of seconds, got {raw!r}")
    return timeout


def _parse_command(name: str, raw: object) -> Tuple[str, ...]:
    if isinstance(raw, str):
        parts: List[str] = shlex.split(raw)
    elif isinstance(raw, (list, tuple)):
        parts = [str(item) for item in raw]
    else:
        raise PlanError(f"'command' for step '{name}' must be a string or a list")
    if not parts:
        raise PlanError(f"'command' for step '{name}' is empty")
    return tuple(parts)


def _apply_step(step: StepCommand, payload: Mapping[str, object]) -> StepCommand:
    if not isinstance(payload, Mapping):
        raise PlanError(f"Step '{step.name}' must be a mapping")
    changes: Dict[str, object] = {}
    if "command" in payload:
        changes["argv"] = _parse_command(step.name, payload["command"])
    if payload.get("cwd"):
        changes["cwd"] = Path(str(payload["cwd"]))
    if payload.get("description"):
        changes["description"] = str(payload["description"])
    return replace(step, **changes)


def load_plan(path: Path | None = None, make: str = "make") -> DeploymentPlan:
    """Load plan overrides from the YAML file at *path*.

    Without a path the built-in plan is returned unchanged.
    """

    plan = default_plan(make)
    if path is None:
        return plan
    if not path.exists():
        raise PlanError(f"Deployment plan not found at {path}")
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise PlanError(f"Failed to parse deployment plan: {exc}") from exc
    if not isinstance(payload, Mapping):
        raise PlanError("Deployment plan must be a mapping")

    raw_steps = payload.get("steps") or {}
    if not isinstance(raw_steps, Mapping):
        raise PlanError("'steps' must be a mapping of step name to settings")
    unknown = sorted(str(name) for name in raw_steps if name not in STEP_NAMES)
    if unknown:
        raise PlanError(f"Unknown steps in deployment plan: {', '.join(unknown)}")

    steps = plan.steps()
    for name, step_payload in raw_steps.items():
        steps[name] = _apply_step(steps[name], step_payload or {})

    parameter = str(payload.get("parameter") or plan.parameter)
    timeout = plan.timeout
    if payload.get("timeout") is not None:
        timeout = parse_timeout(payload["timeout"], "timeout")
    return DeploymentPlan(
        rewards=steps[REWARDS_STEP],
        registry=steps[REGISTRY_STEP],
        tests=steps[TESTS_STEP],
        parameter=parameter,
        timeout=timeout,
    )


def forward_program_id(plan: DeploymentPlan, program_id: str) -> Tuple[str, ...]:
    """Return the test command with the program id passed as a named parameter."""

    return plan.tests.argv + (f"{plan.parameter}={program_id}",)


__all__ = [
    "DEFAULT_PARAMETER",
    "DeploymentPlan",
    "REGISTRY_STEP",
    "REWARDS_STEP",
    "STEP_NAMES",
    "StepCommand",
    "TESTS_STEP",
    "default_plan",
    "forward_program_id",
    "load_plan",
    "parse_timeout",
]
