"""Exception types raised while sequencing deployments."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from sequencer.process import CommandResult


class PlanError(RuntimeError):
    """Raised when the deployment plan cannot be loaded."""


class SequencerError(RuntimeError):
    """Base error for a step that stopped the sequence."""

    def __init__(self, step: str, message: str, exit_code: int = 1) -> None:
        super().__init__(f"Step '{step}' failed: {message}")
        self.step = step
        self.exit_code = exit_code


class StepFailure(SequencerError):
    """An external command exited with a non-zero status."""

    def __init__(self, step: str, result: "CommandResult") -> None:
        if result.timed_out:
            reason = "timed out"
        else:
            reason = f"exited with status {result.returncode}"
        super().__init__(
            step,
            f"{' '.join(result.argv)} {reason}",
            exit_code=result.returncode if result.returncode > 0 else 1,
        )
        self.result = result


class DependencyDeployFailure(StepFailure):
    """The rewards or registry deployment did not succeed."""


class TestFailure(StepFailure):
    """The registry test suite reported failures."""

    __test__ = False


class ExtractionError(SequencerError):
    """The deploy output did not contain exactly one program id."""


ExtractionFailure = ExtractionError

__all__ = [
    "DependencyDeployFailure",
    "ExtractionError",
    "ExtractionFailure",
    "PlanError",
    "SequencerError",
    "StepFailure",
    "TestFailure",
]
