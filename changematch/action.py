"""Single-pass run: event -> changed files -> matches -> outputs."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TextIO

from changematch.compare import ComparisonProvider, GithubComparisonProvider, resolve_changes
from changematch.events import PUSH, RunContext, read_event
from changematch.matching import PatternCompiler, compile_pattern, match_paths
from changematch.output import OutputSink, report_failure, report_result

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunResult:
    """Outcome of one run."""

    changed_files: list[str]
    matched_files: list[str]
    changed: bool
    failures: list[str] = field(default_factory=list)


def run(
    context: RunContext,
    *,
    sink: OutputSink,
    comparison: ComparisonProvider | None = None,
    pattern_compiler: PatternCompiler = compile_pattern,
    on_head_not_ahead: str = "continue",
    failure_stream: TextIO | None = None,
) -> RunResult:
    """Decide whether any file changed by the triggering event matches the pattern.

    Terminal failures propagate as ``ChangeMatchError`` before any output is
    set. A head commit that is not ahead of its base is reported through
    ``report_failure`` and, under the ``continue`` policy, matching still runs
    on the files the comparison returned.

    Without an explicit ``comparison`` backend the GitHub API is used with
    the context token.
    """
    is_match = pattern_compiler(context.pattern)
    if comparison is None:
        comparison = GithubComparisonProvider(token=context.token)

    change = read_event(context.event_name, context.payload)
    if context.event_name == PUSH:
        logger.info("Push payload: %s", json.dumps(dict(context.payload), sort_keys=True, default=str))

    changed_files, failures = resolve_changes(
        change,
        comparison=comparison,
        owner=context.owner,
        repo=context.repo,
        event_name=context.event_name,
        on_head_not_ahead=on_head_not_ahead,
    )
    for message in failures:
        report_failure(message, stream=failure_stream)

    matched_files = match_paths(changed_files, is_match)
    changed = report_result(changed_files, matched_files, sink=sink)
    return RunResult(changed_files=changed_files, matched_files=matched_files, changed=changed, failures=failures)
