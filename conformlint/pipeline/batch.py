"""Process many documents concurrently, one engine per document."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from conformlint.config import LintConfig, validate_config
from conformlint.diagnostics import collect_diagnostics, count_by_severity, has_errors
from conformlint.fix import DEFAULT_MAX_PASSES, CancellationToken
from conformlint.pipeline.entrypoints import run_check, run_fix
from conformlint.pipeline.results import CheckRunResult, DocumentResult, FixRunResult, SourceDocument
from conformlint.rules import RuleRegistry
from conformlint.tree import DocumentParser

logger = logging.getLogger(__name__)


def run_batch(
    documents: Iterable[SourceDocument],
    config: LintConfig,
    *,
    parser: DocumentParser,
    registry: RuleRegistry,
    fix: bool = False,
    max_workers: int | None = None,
    max_passes: int = DEFAULT_MAX_PASSES,
    cancel: CancellationToken | None = None,
) -> list[DocumentResult]:
    """Check or fix every document; results keep input order.

    The configuration is validated before any document is touched. Documents
    share no mutable state, so one document's parse failure never affects
    another.
    """
    validate_config(config, registry)
    pending = list(documents)
    if not pending:
        return []
    workers = max_workers if max_workers is not None else min(len(pending), os.cpu_count() or 1)
    if workers < 1:
        raise ValueError("max_workers must be at least 1")

    def process(document: SourceDocument) -> DocumentResult:
        if fix:
            return DocumentResult(
                document=document,
                fix=run_fix(
                    document.text,
                    document.path,
                    config,
                    parser=parser,
                    registry=registry,
                    max_passes=max_passes,
                    cancel=cancel,
                ),
            )
        if cancel is not None and cancel.is_set():
            return DocumentResult(
                document=document,
                check=CheckRunResult(path=document.path, source_text=document.text, diagnostics=(), cancelled=True),
            )
        return DocumentResult(
            document=document,
            check=run_check(document.text, document.path, config, parser=parser, registry=registry),
        )

    logger.debug("processing %d documents with %d workers (fix=%s)", len(pending), workers, fix)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(process, document) for document in pending]
        results = [future.result() for future in futures]

    counts = count_by_severity(collect_diagnostics(*(result.diagnostics for result in results)))
    logger.debug(
        "batch finished: %d documents, %d errors, %d warnings, %d info",
        len(results),
        counts["error"],
        counts["warning"],
        counts["info"],
    )
    return results


def exit_code(results: Iterable[DocumentResult | CheckRunResult | FixRunResult]) -> int:
    """1 when any error-severity diagnostic was reported, else 0."""
    return 1 if any(has_errors(result.diagnostics) for result in results) else 0
