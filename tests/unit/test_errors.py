"""Unit tests for structured error classes and message parsing."""

import pytest

from changematch.errors import (
    ComparisonError,
    ConfigError,
    ExitCode,
    HeadNotAheadError,
    MissingRevisionsError,
    UnsupportedEventError,
    format_user_error,
)


@pytest.mark.unit
def test_structured_errors_expose_message_triad() -> None:
    """Structured error classes retain what/why/remediation and formatted rendering."""
    error = ConfigError(
        what="missing pattern",
        why="no input was provided",
        remediation="set pattern",
    )

    assert error.what == "missing pattern"
    assert error.why == "no input was provided"
    assert error.remediation == "set pattern"
    assert str(error) == "what: missing pattern; why: no input was provided; how-to-fix: set pattern"


@pytest.mark.unit
def test_exit_codes_per_error_category() -> None:
    """Each failure class maps to a deterministic non-zero exit code."""
    assert ConfigError(what="c", why="w", remediation="r").exit_code == int(ExitCode.CONFIG)
    assert UnsupportedEventError(event_name="release").exit_code == int(ExitCode.EVENT)
    assert MissingRevisionsError(event_name="pull_request", missing="x").exit_code == int(ExitCode.EVENT)
    assert ComparisonError(what="c", why="w", remediation="r").exit_code == int(ExitCode.COMPARISON)
    assert HeadNotAheadError(event_name="pull_request", status="behind").exit_code == int(ExitCode.COMPARISON)


@pytest.mark.unit
def test_unsupported_event_names_the_event_kind() -> None:
    error = UnsupportedEventError(event_name="release")

    assert error.event_name == "release"
    assert "release events are not supported" in str(error)


@pytest.mark.unit
def test_missing_revisions_is_an_unsupported_event() -> None:
    error = MissingRevisionsError(event_name="pull_request", missing="pull_request.head.sha")

    assert isinstance(error, UnsupportedEventError)
    assert "pull_request.head.sha" in error.why


@pytest.mark.unit
def test_head_not_ahead_keeps_status() -> None:
    error = HeadNotAheadError(event_name="pull_request", status="diverged")

    assert error.status == "diverged"
    assert "not ahead of the base commit" in error.what


@pytest.mark.unit
def test_format_user_error_renders_triad() -> None:
    assert format_user_error(what="a", why="b", how_to_fix="c") == "what: a; why: b; how-to-fix: c"
