"""Commit comparison backends and change resolution."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

from github import Auth, Github, GithubException

from changematch.errors import ComparisonError, ConfigError, HeadNotAheadError
from changematch.events import RevisionPair

AHEAD = "ahead"
HEAD_NOT_AHEAD_POLICIES = ("continue", "stop")
PROVIDERS = ("fixture", "github")

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Comparison:
    """Outcome of comparing two commits."""

    status: str
    files: list[str] | None = None


class ComparisonProvider(Protocol):
    """Contract implemented by all commit comparison backends."""

    def compare(self, *, owner: str, repo: str, base: str, head: str) -> Comparison:
        """Compare ``base...head`` within ``owner/repo``."""


class GithubComparisonProvider:
    """Compare commits through the GitHub REST API.

    The client is created on the first comparison, so push events never need
    a token.
    """

    def __init__(self, *, token: str | None, base_url: str | None = None, client: Github | None = None) -> None:
        self._token = token
        self._base_url = base_url
        self._client = client

    def compare(self, *, owner: str, repo: str, base: str, head: str) -> Comparison:
        """Call the compare endpoint and keep only filenames."""
        full_name = f"{owner}/{repo}"
        client = self._github()
        try:
            comparison = client.get_repo(full_name).compare(base, head)
            files = comparison.files
            filenames = None if files is None else [item.filename for item in files]
            return Comparison(status=str(comparison.status), files=filenames)
        except GithubException as exc:
            raise ComparisonError(
                what=f"comparing {base}...{head} in {full_name} failed.",
                why=f"GitHub API responded with status {exc.status}",
                remediation="check that the token can read the repository contents",
            ) from exc

    def _github(self) -> Github:
        if self._client is None:
            if not self._token:
                raise ConfigError(
                    what="missing required input: token.",
                    why="pull_request events need the GitHub compare API, which requires a token",
                    remediation="pass token: ${{ github.token }} to the action or set INPUT_TOKEN",
                )
            kwargs: dict[str, Any] = {"auth": Auth.Token(self._token)}
            if self._base_url:
                kwargs["base_url"] = self._base_url
            self._client = Github(**kwargs)
        return self._client


class FixtureComparisonProvider:
    """Offline comparison backend backed by a local JSON payload."""

    def __init__(self, *, payload_file: str | Path) -> None:
        self.payload_file = Path(payload_file)
        self.requests: list[tuple[str, str, str, str]] = []

    def compare(self, *, owner: str, repo: str, base: str, head: str) -> Comparison:
        """Return the fixture comparison and remember the request."""
        self.requests.append((owner, repo, base, head))
        data = self._load_payload()

        raw_files = data.get("files")
        files: list[str] | None = None
        if raw_files is not None:
            if not isinstance(raw_files, list):
                raise ComparisonError(
                    what="comparison payload 'files' must be a list.",
                    why="the compare API returns changed files as a list",
                    remediation="use a list of filenames or of {\"filename\": ...} objects",
                )
            files = [_fixture_filename(item) for item in raw_files]
        return Comparison(status=str(data.get("status", AHEAD)), files=files)

    def _load_payload(self) -> dict[str, Any]:
        """Load payload JSON and enforce basic file and shape invariants."""
        if not self.payload_file.exists():
            raise ConfigError(
                what=f"comparison payload file not found: {self.payload_file}",
                why="the fixture provider reads the comparison from a JSON file",
                remediation="create a JSON file like {\"status\": \"ahead\", \"files\": [...]} and pass its path",
            )

        try:
            data = json.loads(self.payload_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ConfigError(
                what=f"comparison payload is not valid JSON: {self.payload_file}",
                why=str(exc),
                remediation="fix the JSON syntax of the comparison payload",
            ) from exc
        if not isinstance(data, dict):
            raise ConfigError(
                what="comparison payload must be a JSON object.",
                why="the fixture provider expects named fields status and files",
                remediation="use JSON object syntax, for example {\"status\": \"ahead\", \"files\": []}",
            )
        return data


def _fixture_filename(item: Any) -> str:
    """Accept a bare filename or a compare API file object."""
    if not isinstance(item, dict):
        return str(item)
    if "filename" not in item:
        raise ComparisonError(
            what=f"comparison payload file entry {item!r} has no 'filename'.",
            why="every changed-file object must name the file it describes",
            remediation="add a filename key to each object in files, or list plain filenames",
        )
    return str(item["filename"])


def build_comparison_provider(*, provider: str, token: str | None, comparison_payload: str | None = None, api_url: str | None = None) -> ComparisonProvider:
    """Construct a comparison backend from resolved configuration."""
    name = provider.strip().lower()
    if name == "github":
        return GithubComparisonProvider(token=token, base_url=api_url)
    if name == "fixture":
        if not comparison_payload:
            raise ConfigError(
                what="missing required config key: comparison_payload.",
                why="the fixture provider requires a JSON comparison file",
                remediation="set comparison_payload to an existing JSON file path or use provider: github",
            )
        return FixtureComparisonProvider(payload_file=comparison_payload)
    raise ConfigError(
        what=f"unsupported provider: {provider}.",
        why="changematch only supports configured comparison backends",
        remediation=f"set provider to one of: {', '.join(PROVIDERS)}",
    )


def resolve_changes(
    change: RevisionPair | list[str],
    *,
    comparison: ComparisonProvider,
    owner: str,
    repo: str,
    event_name: str = "pull_request",
    on_head_not_ahead: str = "continue",
) -> tuple[list[str], list[str]]:
    """Turn a change descriptor into the ordered list of changed paths.

    Returns the changed paths and the messages of failures that did not stop
    the run. Explicit path lists are passed through without any request.
    """
    if on_head_not_ahead not in HEAD_NOT_AHEAD_POLICIES:
        raise ConfigError(
            what=f"on_head_not_ahead must be one of: {', '.join(HEAD_NOT_AHEAD_POLICIES)}.",
            why=f"unsupported policy '{on_head_not_ahead}' was provided",
            remediation="choose continue or stop",
        )
    if not isinstance(change, RevisionPair):
        return list(change), []

    if not owner or not repo:
        raise ConfigError(
            what="missing repository for the commit comparison.",
            why="pull_request events compare commits within one repository",
            remediation="set GITHUB_REPOSITORY or pass --repository owner/repo",
        )

    logger.info("Base commit: %s", change.base)
    logger.info("Head commit: %s", change.head)
    result = comparison.compare(owner=owner, repo=repo, base=change.base, head=change.head)

    failures: list[str] = []
    if result.status != AHEAD:
        error = HeadNotAheadError(event_name=event_name, status=result.status)
        if on_head_not_ahead == "stop":
            raise error
        failures.append(str(error))

    return list(result.files or []), failures
