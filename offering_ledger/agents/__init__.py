"""Narrative agent package."""

from offering_ledger.agents.narrative import (
    EMPTY_RESPONSE_MESSAGE,
    ERROR_MESSAGE,
    MISSING_KEY_MESSAGE,
    NarrativeAgent,
    build_prompt,
)

__all__ = [
    "EMPTY_RESPONSE_MESSAGE",
    "ERROR_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "NarrativeAgent",
    "build_prompt",
]
