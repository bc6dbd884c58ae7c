"""Command line interface for the deploy-and-test sequence."""
from __future__ import annotations

import argparse
import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from sequencer import StageContext, StageRunner, bootstrap, create_default_context, registry
from sequencer.core import StepOutcome
from sequencer.errors import PlanError, SequencerError
from sequencer.extraction import ProgramIdentifier, extract_program_id
from sequencer.plan import REGISTRY_STEP, REWARDS_STEP, TESTS_STEP, forward_program_id
from sequencer.sequence import run_sequence

logger = logging.getLogger(__name__)


def load_environment() -> None:
    candidates = []
    if env_file := os.getenv("ENV_FILE"):
        candidates.append(Path(env_file))
    candidates.append(Path(".env"))

    for path in candidates:
        if not path.exists():
            continue
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if "=" not in line:
                    continue
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip().strip('"')
                os.environ.setdefault(key, value)


def configure_logging() -> None:
    """Configure logging using YAML/INI files or basic configuration."""

    config_candidates = []
    if config_env := os.getenv("LOGGING_CONFIG"):
        config_candidates.append(Path(config_env))
    config_candidates.extend(
        Path(name) for name in ("logging.yaml", "logging.yml", "logging.ini")
    )

    for config_path in config_candidates:
        if not config_path.exists():
            continue
        suffix = config_path.suffix.lower()
        try:
            if suffix in {".ini", ".cfg"}:
                logging.config.fileConfig(config_path, disable_existing_loggers=False)
            else:
                with config_path.open("r", encoding="utf-8") as handle:
                    logging.config.dictConfig(yaml.safe_load(handle))
            return
        except (OSError, ValueError, TypeError, KeyError, yaml.YAMLError) as exc:
            print(
                f"Failed to load logging config {config_path}: {exc}. Falling back to basic logging.",
                file=sys.stderr,
            )
            break

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _context() -> StageContext:
    return create_default_context()


def _single_stage(stage: str, context: StageContext) -> int:
    runner = StageRunner(registry)
    try:
        runner.run_stage(stage, context)
    except SequencerError as exc:
        return exc.exit_code
    return 0


def command_run(_: argparse.Namespace) -> int:
    context = _context()
    logger.info(
        "Running %s in %s",
        ", ".join(context.plan.steps()),
        context.workspace,
    )
    report = run_sequence(context)
    if report.error is not None:
        print(f"Error: {report.error}", file=sys.stderr)
    return report.exit_code


def command_stages(_: argparse.Namespace) -> int:
    print("Registered stages:")
    for line in registry.describe():
        print(f"- {line}")
    return 0


def command_plan(_: argparse.Namespace) -> int:
    context = _context()
    plan = context.plan
    for name, step in plan.steps().items():
        argv = step.argv
        if name == TESTS_STEP:
            argv = forward_program_id(plan, "<program-id>")
        print(f"{name}: {' '.join(argv)}  (cwd={step.directory(context.workspace)})")
    if context.timeout is not None:
        print(f"timeout: {context.timeout}s")
    return 0


def command_extract(args: argparse.Namespace) -> int:
    if args.file:
        try:
            text = Path(args.file).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            print(f"Error: cannot read {args.file}: {exc}", file=sys.stderr)
            return 2
    else:
        text = sys.stdin.read()
    try:
        program_id = extract_program_id(text)
    except SequencerError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    print(program_id)
    return 0


def command_deploy_rewards(_: argparse.Namespace) -> int:
    context = _context()
    status = _single_stage(REWARDS_STEP, context)
    if status == 0:
        print(context.outcomes[REWARDS_STEP].program_id)
    return status


def command_deploy_super(_: argparse.Namespace) -> int:
    return _single_stage(REGISTRY_STEP, _context())


def command_test_program(args: argparse.Namespace) -> int:
    context = _context()
    context.outcomes[REWARDS_STEP] = StepOutcome(
        step=REWARDS_STEP,
        program_id=ProgramIdentifier(args.program_id),
    )
    return _single_stage(TESTS_STEP, context)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Deploy the rewards and registry programs, then run the registry tests."
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    parser_run = subparsers.add_parser("run", help="Run the full deploy-and-test sequence")
    parser_run.set_defaults(func=command_run)

    parser_stages = subparsers.add_parser("stages", help="List registered stages")
    parser_stages.set_defaults(func=command_stages)

    parser_plan = subparsers.add_parser("plan", help="Show the commands each step runs")
    parser_plan.set_defaults(func=command_plan)

    parser_extract = subparsers.add_parser(
        "extract", help="Extract a program id from deploy output (file or stdin)"
    )
    parser_extract.add_argument("file", nargs="?", help="File holding the deploy output")
    parser_extract.set_defaults(func=command_extract)

    commands: tuple[tuple[str, Callable[[argparse.Namespace], int]], ...] = (
        (REWARDS_STEP, command_deploy_rewards),
        (REGISTRY_STEP, command_deploy_super),
    )
    for name, func in commands:
        sub = subparsers.add_parser(name, help=f"Run only the {name} step")
        sub.set_defaults(func=func)

    parser_tests = subparsers.add_parser(TESTS_STEP, help=f"Run only the {TESTS_STEP} step")
    parser_tests.add_argument(
        "--program-id",
        required=True,
        help="Rewards program id to forward to the tests.",
    )
    parser_tests.set_defaults(func=command_test_program)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_environment()
    configure_logging()
    bootstrap()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except PlanError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover - entry point for CLI usage
    raise SystemExit(main())
