"""Edit composer: pick one non-overlapping patch out of many proposed fixes."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from conformlint.diagnostics import Diagnostic, Edit
from conformlint.errors import FixConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PatchResult:
    """Edits accepted for one pass plus the fixes that could not be taken.

    `edits` are pairwise disjoint and sorted by start offset. `rejected`
    fixes overlapped an accepted edit and are retried on the next pass;
    `malformed` diagnostics had an unusable fix and are reported without one.
    """

    edits: tuple[Edit, ...]
    accepted: tuple[Diagnostic, ...]
    rejected: tuple[Diagnostic, ...]
    malformed: tuple[Diagnostic, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.edits


def validate_fix(diagnostic: Diagnostic, *, source_length: int | None = None) -> tuple[Edit, ...]:
    """Return the diagnostic's edits or raise FixConflictError if they are malformed."""
    edits = diagnostic.fix or ()
    previous: Edit | None = None
    for edit in edits:
        if source_length is not None and edit.span.end > source_length:
            raise FixConflictError(
                f"Fix for `{diagnostic.rule_id}` edits {edit.span!r} beyond the end of the source ({source_length}).",
                diagnostic=diagnostic,
            )
        if previous is not None and edit.span.start < previous.span.end:
            raise FixConflictError(
                f"Fix for `{diagnostic.rule_id}` has unsorted or overlapping edits "
                f"{previous.span!r} and {edit.span!r}.",
                diagnostic=diagnostic,
            )
        previous = edit
    return edits


def compose(diagnostics: Iterable[Diagnostic], *, source_length: int | None = None) -> PatchResult:
    """Accept fixes in diagnostic order while they stay clear of claimed text."""
    high_water = 0
    edits: list[Edit] = []
    accepted: list[Diagnostic] = []
    rejected: list[Diagnostic] = []
    malformed: list[Diagnostic] = []

    for diagnostic in sorted(diagnostics, key=lambda d: d.sort_key):
        if not diagnostic.is_fixable:
            continue
        try:
            fix_edits = validate_fix(diagnostic, source_length=source_length)
        except FixConflictError as exc:
            logger.warning("dropping fix: %s", exc)
            malformed.append(replace(diagnostic, fix=None))
            continue

        if any(edit.span.start < high_water for edit in fix_edits):
            rejected.append(diagnostic)
            continue

        edits.extend(fix_edits)
        accepted.append(diagnostic)
        high_water = max(high_water, max(edit.span.end for edit in fix_edits))

    logger.debug(
        "composed patch: %d edits accepted from %d fixes, %d rejected, %d malformed",
        len(edits),
        len(accepted),
        len(rejected),
        len(malformed),
    )
    return PatchResult(
        edits=tuple(edits),
        accepted=tuple(accepted),
        rejected=tuple(rejected),
        malformed=tuple(malformed),
    )


def apply_patch(source: str, edits: Sequence[Edit]) -> str:
    """Rewrite `source` left to right; `edits` must be disjoint and sorted."""
    pieces: list[str] = []
    cursor = 0
    for edit in edits:
        if edit.span.start < cursor:
            raise ValueError(f"Edit {edit.span!r} overlaps a previous edit ending at {cursor}")
        if edit.span.end > len(source):
            raise ValueError(f"Edit {edit.span!r} exceeds source length {len(source)}")
        pieces.append(source[cursor : edit.span.start])
        pieces.append(edit.replacement)
        cursor = edit.span.end
    pieces.append(source[cursor:])
    return "".join(pieces)
