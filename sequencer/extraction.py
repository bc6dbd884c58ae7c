"""Program id extraction from deployment output."""
from __future__ import annotations

import re
from typing import NewType

from sequencer.errors import ExtractionError

ProgramIdentifier = NewType("ProgramIdentifier", str)

PROGRAM_ID_PATTERN = re.compile(r"\{programId: ([^{}]*)\}")


def extract_program_id(output: str, step: str = "deploy-rewards") -> ProgramIdentifier:
    """Return the value of the single ``{programId: ...}`` token in *output*.

    The value is returned verbatim. Output without a token, with several
    tokens, or with a blank value raises :class:`ExtractionError`.
    """

    matches = PROGRAM_ID_PATTERN.findall(output or "")
    if not matches:
        raise ExtractionError(step, "no '{programId: ...}' token in deployment output")
    if len(matches) > 1:
        raise ExtractionError(
            step,
            f"expected one '{{programId: ...}}' token, found {len(matches)}",
        )
    value = matches[0]
    if not value.strip():
        raise ExtractionError(step, "deployment output reported an empty programId")
    return ProgramIdentifier(value)


__all__ = ["PROGRAM_ID_PATTERN", "ProgramIdentifier", "extract_program_id"]
