"""Error helpers and structured error types for user-facing failures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

_ISSUE_HINT = "please open an issue on the changematch repository if you believe this is incorrect"


class ExitCode(IntEnum):
    """Process exit codes used by the changematch CLI."""

    OK = 0
    INTERNAL = 1
    CONFIG = 2
    EVENT = 3
    COMPARISON = 4


@dataclass(slots=True)
class ChangeMatchError(Exception):
    """Structured base error carrying user-facing triad and an exit code."""

    what: str
    why: str
    remediation: str
    exit_code: int = int(ExitCode.INTERNAL)

    def __str__(self) -> str:
        """Render the standardized user-facing message."""
        return format_user_error(what=self.what, why=self.why, how_to_fix=self.remediation)


class ConfigError(ChangeMatchError):
    """Failure caused by invalid or missing configuration."""

    def __init__(self, *, what: str, why: str, remediation: str) -> None:
        super().__init__(what=what, why=why, remediation=remediation, exit_code=int(ExitCode.CONFIG))


class UnsupportedEventError(ChangeMatchError):
    """The triggering event cannot be turned into a set of changed files."""

    def __init__(self, *, event_name: str, what: str | None = None, why: str | None = None, remediation: str | None = None) -> None:
        super().__init__(
            what=what or f"{event_name} events are not supported.",
            why=why or "changematch only supports pull_request and push events",
            remediation=remediation or f"trigger the workflow on pull_request or push; {_ISSUE_HINT}",
            exit_code=int(ExitCode.EVENT),
        )
        self.event_name = event_name


class MissingRevisionsError(UnsupportedEventError):
    """A pull request payload lacks its base or head commit."""

    def __init__(self, *, event_name: str, missing: str) -> None:
        super().__init__(
            event_name=event_name,
            what=f"the base and head commits are missing from the payload for this {event_name} event.",
            why=f"payload field {missing} is absent or empty",
            remediation=_ISSUE_HINT,
        )


class ComparisonError(ChangeMatchError):
    """Failure raised by the commit comparison backend."""

    def __init__(self, *, what: str, why: str, remediation: str) -> None:
        super().__init__(what=what, why=why, remediation=remediation, exit_code=int(ExitCode.COMPARISON))


class HeadNotAheadError(ComparisonError):
    """The comparison reports that head is not strictly ahead of base."""

    def __init__(self, *, event_name: str, status: str) -> None:
        super().__init__(
            what=f"the head commit for this {event_name} event is not ahead of the base commit.",
            why=f"compare API returned status '{status}'",
            remediation=f"rebase the branch onto its base; {_ISSUE_HINT}",
        )
        self.status = status


def format_user_error(*, what: str, why: str, how_to_fix: str) -> str:
    """Build a structured error message for users.

    Args:
        what: A concise description of what failed.
        why: Why the failure happened.
        how_to_fix: Immediate actionable remediation steps.

    Returns:
        A three-part error message string.
    """
    return f"what: {what}; why: {why}; how-to-fix: {how_to_fix}"
