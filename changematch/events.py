"""Extract change descriptors from runner event payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from changematch.errors import MissingRevisionsError, UnsupportedEventError

PULL_REQUEST = "pull_request"
PUSH = "push"
SUPPORTED_EVENTS = (PULL_REQUEST, PUSH)

_COMMIT_PATH_FIELDS = ("added", "removed", "modified")


@dataclass(frozen=True, slots=True)
class RevisionPair:
    """Base and head commits bounding a pull request."""

    base: str
    head: str


@dataclass(frozen=True, slots=True)
class RunContext:
    """Everything a single run needs to know about its trigger."""

    event_name: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    owner: str = ""
    repo: str = ""
    token: str | None = field(default=None, repr=False)
    pattern: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "payload", MappingProxyType(dict(self.payload)))


def read_event(event_name: str, payload: Mapping[str, Any]) -> RevisionPair | list[str]:
    """Return a revision pair for pull requests or the flattened paths for pushes."""
    if event_name == PULL_REQUEST:
        return _read_pull_request(payload)
    if event_name == PUSH:
        return flatten_commits(payload.get("commits"))
    raise UnsupportedEventError(event_name=event_name)


def flatten_commits(commits: Any) -> list[str]:
    """Concatenate added, removed and modified paths of every commit in order.

    Absent or null lists count as empty, a bare string counts as a one-path
    list and entries that are not commit objects are skipped. Duplicates are
    kept, so a file touched by two commits appears twice.
    """
    paths: list[str] = []
    for commit in commits or []:
        if not isinstance(commit, Mapping):
            continue
        for field_name in _COMMIT_PATH_FIELDS:
            entries = commit.get(field_name) or []
            if isinstance(entries, str):
                entries = [entries]
            paths.extend(str(path) for path in entries)
    return paths


def _read_pull_request(payload: Mapping[str, Any]) -> RevisionPair:
    pull_request = payload.get("pull_request") or {}
    base = (pull_request.get("base") or {}).get("sha")
    head = (pull_request.get("head") or {}).get("sha")
    if not base:
        raise MissingRevisionsError(event_name=PULL_REQUEST, missing="pull_request.base.sha")
    if not head:
        raise MissingRevisionsError(event_name=PULL_REQUEST, missing="pull_request.head.sha")
    return RevisionPair(base=str(base), head=str(head))
