from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

import pytest

from sequencer import bootstrap
from sequencer.core.stage import StageContext
from sequencer.plan import default_plan
from sequencer.process import CommandResult
from sequencer.settings import Settings

bootstrap()


@dataclass
class FakeCommands:
    """Stand-in for ``run_command`` replaying scripted exit codes and output."""

    responses: List[Tuple[int, Optional[str]]]
    calls: List[Dict[str, object]] = field(default_factory=list)

    def __call__(
        self,
        argv: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
        capture: bool = False,
        timeout: float | None = None,
    ) -> CommandResult:
        self.calls.append(
            {"argv": tuple(argv), "cwd": cwd, "env": env, "capture": capture, "timeout": timeout}
        )
        returncode, stdout = self.responses[len(self.calls) - 1]
        return CommandResult(
            argv=tuple(argv),
            returncode=returncode,
            stdout=stdout if capture else None,
            elapsed=0.0,
        )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        workspace=tmp_path,
        plan_path=None,
        timeout=None,
        make="make",
        log_level="INFO",
    )


@pytest.fixture
def stage_context(settings: Settings, tmp_path: Path) -> StageContext:
    """Create a temporary stage context for tests."""

    return StageContext(
        settings=settings,
        plan=default_plan(),
        run_id="test-run",
        timestamp=datetime(2024, 1, 1, 12, 0, 0),
        workspace=tmp_path,
    )


@pytest.fixture
def fake_commands(monkeypatch) -> Callable[..., FakeCommands]:
    """Install a scripted ``run_command`` in every stage module."""

    def install(*responses: Tuple[int, Optional[str]]) -> FakeCommands:
        fake = FakeCommands(list(responses))
        monkeypatch.setattr("sequencer.deploy.run_command", fake)
        monkeypatch.setattr("sequencer.verify.run_command", fake)
        return fake

    return install
