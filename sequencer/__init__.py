"""Deploy the rewards and registry programs, then run the registry tests."""
from __future__ import annotations

from datetime import datetime, timezone

from sequencer.core import StageContext, StageRunner, registry
from sequencer.core.utils import new_run_id, sequencer_version
from sequencer.plan import DeploymentPlan, load_plan
from sequencer.settings import Settings

__all__ = [
    "__version__",
    "DeploymentPlan",
    "StageContext",
    "StageRunner",
    "Settings",
    "registry",
    "bootstrap",
    "create_default_context",
]


def __getattr__(name: str):  # pragma: no cover - passthrough to package metadata
    if name == "__version__":
        return sequencer_version()
    raise AttributeError(name)


def bootstrap() -> None:
    """Import stage modules to ensure registration has occurred."""

    from sequencer import deploy, verify  # noqa: F401


def create_default_context(
    settings: Settings | None = None,
    plan: DeploymentPlan | None = None,
) -> StageContext:
    """Construct a default :class:`StageContext` for command-line runs."""

    settings = settings or Settings.load()
    plan = plan or load_plan(settings.plan_path, make=settings.make)
    timestamp = datetime.now(timezone.utc)
    return StageContext(
        settings=settings,
        plan=plan,
        run_id=new_run_id(timestamp),
        timestamp=timestamp,
        workspace=settings.workspace,
    )
