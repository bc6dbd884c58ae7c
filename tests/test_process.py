from __future__ import annotations

import sys
import time
from pathlib import Path

from sequencer.process import (
    NOT_EXECUTABLE_EXIT_CODE,
    NOT_FOUND_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    run_command,
)


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_captures_stdout(tmp_path: Path) -> None:
    result = run_command(
        _python("print('deployed {programId: ABC123XYZ} ok')"),
        cwd=tmp_path,
        capture=True,
    )

    assert result.ok
    assert result.stdout.strip() == "deployed {programId: ABC123XYZ} ok"
    assert result.argv[0] == sys.executable


def test_uncaptured_output_is_not_collected(tmp_path: Path) -> None:
    result = run_command(_python("print('hello')"), cwd=tmp_path)

    assert result.ok
    assert result.stdout is None


def test_non_zero_status_is_reported(tmp_path: Path) -> None:
    result = run_command(_python("import sys; sys.exit(3)"), cwd=tmp_path)

    assert not result.ok
    assert result.returncode == 3
    assert not result.timed_out


def test_extra_environment_reaches_child(tmp_path: Path) -> None:
    result = run_command(
        _python("import os; print(os.environ['TEST_REWARDS_PROGRAM_ID'])"),
        cwd=tmp_path,
        env={"TEST_REWARDS_PROGRAM_ID": "Rw1d"},
        capture=True,
    )

    assert result.stdout.strip() == "Rw1d"


def test_runs_in_requested_directory(tmp_path: Path) -> None:
    result = run_command(_python("import os; print(os.getcwd())"), cwd=tmp_path, capture=True)

    assert Path(result.stdout.strip()).resolve() == tmp_path.resolve()


def test_timeout_kills_child(tmp_path: Path) -> None:
    result = run_command(
        _python("import time; time.sleep(10)"),
        cwd=tmp_path,
        timeout=0.5,
    )

    assert result.timed_out
    assert result.returncode == TIMEOUT_EXIT_CODE
    assert not result.ok


def test_missing_executable(tmp_path: Path) -> None:
    result = run_command(["definitely-not-a-real-deploy-tool"], cwd=tmp_path)

    assert result.returncode == NOT_FOUND_EXIT_CODE
    assert not result.ok


def test_undecodable_output_is_replaced(tmp_path: Path) -> None:
    result = run_command(
        _python("import sys; sys.stdout.buffer.write(b'\\xff {programId: ABC} ok')"),
        cwd=tmp_path,
        capture=True,
    )

    assert result.ok
    assert result.stdout == "\ufffd {programId: ABC} ok"


def test_command_without_execute_permission(tmp_path: Path) -> None:
    script = tmp_path / "deploy.sh"
    script.write_text("#!/bin/sh\necho deployed\n", encoding="utf-8")
    script.chmod(0o644)

    result = run_command([str(script)], cwd=tmp_path)

    assert result.returncode == NOT_EXECUTABLE_EXIT_CODE
    assert not result.ok


def test_working_directory_that_is_a_file(tmp_path: Path) -> None:
    not_a_dir = tmp_path / "Makefile"
    not_a_dir.write_text("all:\n", encoding="utf-8")

    result = run_command(_python("pass"), cwd=not_a_dir)

    assert result.returncode == NOT_FOUND_EXIT_CODE


def test_timeout_kills_grandchildren(tmp_path: Path) -> None:
    marker = tmp_path / "marker"
    grandchild = (
        "import pathlib, time; time.sleep(1.5); "
        f"pathlib.Path({str(marker)!r}).write_text('late')"
    )
    parent = (
        "import subprocess, sys, time; "
        f"subprocess.Popen([sys.executable, '-c', {grandchild!r}]); "
        "time.sleep(10)"
    )

    result = run_command(_python(parent), cwd=tmp_path, timeout=0.5)
    time.sleep(2.5)

    assert result.timed_out
    assert not marker.exists()
