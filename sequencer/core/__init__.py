"""Core orchestration utilities for the sequencer runtime."""
from __future__ import annotations

from .registry import StageRegistry, register_stage, registry
from .runner import StageRunner
from .stage import StageContext, StageDefinition, StepOutcome

__all__ = [
    "StageRegistry",
    "StageRunner",
    "StageContext",
    "StageDefinition",
    "StepOutcome",
    "register_stage",
    "registry",
]
