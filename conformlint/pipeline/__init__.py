"""Result carriers and lazy pipeline entrypoint exports."""

from __future__ import annotations

from collections.abc import Iterable
from concurrent.futures import Executor
from pathlib import PurePath
from typing import TYPE_CHECKING

from conformlint.fix import DEFAULT_MAX_PASSES, CancellationToken, FixOutcome
from conformlint.pipeline.results import (
    CheckRunResult,
    DocumentResult,
    FixRunResult,
    SourceDocument,
)

if TYPE_CHECKING:
    from conformlint.config import LintConfig
    from conformlint.rules import RuleRegistry
    from conformlint.tree import DocumentParser


def run_check(
    text: str,
    path: str | PurePath,
    config: LintConfig,
    *,
    parser: DocumentParser,
    registry: RuleRegistry,
    executor: Executor | None = None,
) -> CheckRunResult:
    from conformlint.pipeline.entrypoints import run_check as _run_check

    return _run_check(text, path, config, parser=parser, registry=registry, executor=executor)


def run_fix(
    text: str,
    path: str | PurePath,
    config: LintConfig,
    *,
    parser: DocumentParser,
    registry: RuleRegistry,
    max_passes: int = DEFAULT_MAX_PASSES,
    cancel: CancellationToken | None = None,
    executor: Executor | None = None,
) -> FixRunResult:
    from conformlint.pipeline.entrypoints import run_fix as _run_fix

    return _run_fix(
        text,
        path,
        config,
        parser=parser,
        registry=registry,
        max_passes=max_passes,
        cancel=cancel,
        executor=executor,
    )


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
    from conformlint.pipeline.batch import run_batch as _run_batch

    return _run_batch(
        documents,
        config,
        parser=parser,
        registry=registry,
        fix=fix,
        max_workers=max_workers,
        max_passes=max_passes,
        cancel=cancel,
    )


def exit_code(results: Iterable[DocumentResult | CheckRunResult | FixRunResult]) -> int:
    from conformlint.pipeline.batch import exit_code as _exit_code

    return _exit_code(results)


__all__ = [
    "CheckRunResult",
    "DocumentResult",
    "FixOutcome",
    "FixRunResult",
    "SourceDocument",
    "exit_code",
    "run_batch",
    "run_check",
    "run_fix",
]
