"""Fix loop states and terminal outcomes."""

from enum import StrEnum
from typing import Final, Protocol

DEFAULT_MAX_PASSES: Final[int] = 10


class FixState(StrEnum):
    PARSING = "parsing"
    EVALUATING = "evaluating"
    COMPOSING = "composing"
    APPLYING = "applying"
    RETRYING = "retrying"
    CONVERGED = "converged"
    CAPPED = "capped"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (FixState.CONVERGED, FixState.CAPPED, FixState.FAILED, FixState.CANCELLED)


class FixOutcome(StrEnum):
    """How a fix run ended."""

    CONVERGED = "converged"
    CAPPED = "capped"
    FAILED = "failed"
    CANCELLED = "cancelled"


class CancellationToken(Protocol):
    """Anything with `is_set()`, typically `threading.Event`."""

    def is_set(self) -> bool: ...
