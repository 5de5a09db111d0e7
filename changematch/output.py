"""Result reporting and runner output sinks."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Protocol, Sequence, TextIO

logger = logging.getLogger(__name__)


class OutputSink(Protocol):
    """Destination for named step outputs."""

    def set_output(self, name: str, value: str) -> None:
        """Publish one named output value."""


class GithubOutputSink:
    """Write outputs the way GitHub Actions runners read them."""

    def __init__(self, *, output_path: str | Path | None = None, stream: TextIO | None = None) -> None:
        self.output_path = Path(output_path) if output_path else None
        self._stream = stream

    def set_output(self, name: str, value: str) -> None:
        """Append ``name=value`` to the output file, or fall back to the legacy command."""
        if self.output_path is not None:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with self.output_path.open("a", encoding="utf-8") as handle:
                handle.write(f"{name}={value}\n")
            return
        print(f"::set-output name={name}::{value}", file=self._stream or sys.stdout)


class MemoryOutputSink:
    """Collect outputs in memory."""

    def __init__(self) -> None:
        self.outputs: dict[str, str] = {}

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value


def report_result(changed_files: Sequence[str], matched_files: Sequence[str], *, sink: OutputSink) -> bool:
    """Log changed and matched paths, then publish the ``changed`` output."""
    for path in changed_files:
        logger.info("Changed File: %s", path)
    for path in matched_files:
        logger.info("Matched: %s", path)

    changed = len(matched_files) > 0
    sink.set_output("changed", "true" if changed else "false")
    return changed


def report_failure(message: str, *, stream: TextIO | None = None) -> None:
    """Emit an error workflow command so the runner marks the step failed."""
    escaped = message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")
    print(f"::error::{escaped}", file=stream or sys.stdout)
