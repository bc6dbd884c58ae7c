from __future__ import annotations

from pathlib import Path

import pytest

from sequencer.errors import PlanError
from sequencer.plan import StepCommand, default_plan, forward_program_id, load_plan


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "sequencer.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_default_plan_mirrors_registry_make_targets() -> None:
    plan = default_plan(make="gmake")

    assert plan.rewards.argv == ("gmake", "-s", "-C", "../rewards", "deploy")
    assert plan.registry.argv == ("gmake", "-s", "deploy-super")
    assert plan.tests.argv == ("gmake", "test-program-super")
    assert plan.parameter == "TEST_REWARDS_PROGRAM_ID"
    assert plan.timeout is None
    assert list(plan.steps()) == ["deploy-rewards", "deploy-super", "test-program"]


def test_load_plan_without_path_returns_defaults() -> None:
    assert load_plan(None) == default_plan()


def test_load_plan_applies_overrides(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        """
parameter: REWARDS_PID
timeout: 90
steps:
  deploy-rewards:
    command: ./deploy.sh --program "rewards program"
    cwd: ../rewards
  test-program:
    command: [cargo, test, --, --nocapture]
""",
    )

    plan = load_plan(path)

    assert plan.parameter == "REWARDS_PID"
    assert plan.timeout == 90.0
    assert plan.rewards.argv == ("./deploy.sh", "--program", "rewards program")
    assert plan.rewards.cwd == Path("../rewards")
    assert plan.registry == default_plan().registry
    assert plan.tests.argv == ("cargo", "test", "--", "--nocapture")


@pytest.mark.parametrize(
    "text",
    [
        "steps:\n  deploy-everything:\n    command: make\n",
        "steps:\n  deploy-super:\n    command: []\n",
        "steps:\n  deploy-super:\n    command: 7\n",
        "steps: [deploy-super]\n",
        "timeout: soon\n",
        "timeout: 0\n",
        "timeout: -5\n",
        "- just\n- a list\n",
        "steps: {deploy-super: [unclosed\n",
    ],
)
def test_invalid_plans_raise_plan_error(tmp_path: Path, text: str) -> None:
    with pytest.raises(PlanError):
        load_plan(_write(tmp_path, text))


def test_missing_plan_file_raises(tmp_path: Path) -> None:
    with pytest.raises(PlanError, match="not found"):
        load_plan(tmp_path / "absent.yaml")


def test_forward_program_id_appends_named_parameter() -> None:
    plan = default_plan()

    assert forward_program_id(plan, "ABC123XYZ") == (
        "make",
        "test-program-super",
        "TEST_REWARDS_PROGRAM_ID=ABC123XYZ",
    )
    assert plan.tests.argv == ("make", "test-program-super")


def test_step_directory_resolution(tmp_path: Path) -> None:
    assert StepCommand(name="a", argv=("x",)).directory(tmp_path) == tmp_path
    assert StepCommand(name="b", argv=("x",), cwd=Path("sub")).directory(tmp_path) == tmp_path / "sub"
    assert StepCommand(name="c", argv=("x",), cwd=tmp_path / "abs").directory(Path("/elsewhere")) == tmp_path / "abs"
