"""Glob pattern compilation and path filtering."""

from __future__ import annotations

from typing import Callable, Iterable

from wcmatch import glob

from changematch.errors import ConfigError

PathPredicate = Callable[[str], bool]
PatternCompiler = Callable[[str], PathPredicate]

# Changed-file paths always use forward slashes.
GLOB_FLAGS = glob.GLOBSTAR | glob.DOTGLOB | glob.FORCEUNIX


def compile_pattern(pattern: str) -> PathPredicate:
    """Compile one glob pattern into a reusable path predicate.

    ``*`` stays inside a path segment, ``**`` crosses segments, ``?`` and
    bracket classes behave as in shell globs. The pattern must match the whole
    path, so ``*.md`` matches ``README.md`` but not ``docs/guide.md`` and
    ``src`` does not match ``src/index.ts``. A leading ``!`` inverts the whole
    pattern.
    """
    raw = pattern.strip() if isinstance(pattern, str) else ""
    negate = raw.startswith("!")
    if negate:
        raw = raw[1:]
    if not raw:
        raise ConfigError(
            what="pattern must be a non-empty glob.",
            why=f"received {pattern!r}",
            remediation="set pattern to a glob such as '**/*.md'",
        )

    try:
        matcher = glob.compile(raw, flags=GLOB_FLAGS)
    except ValueError as exc:
        raise ConfigError(
            what=f"pattern {pattern!r} is not a valid glob.",
            why=str(exc),
            remediation="check the pattern for unbalanced brackets or misplaced '**'",
        ) from exc

    def is_match(path: str) -> bool:
        return matcher.match(path) != negate

    return is_match


def match_paths(paths: Iterable[str], predicate: PathPredicate) -> list[str]:
    """Return every path the predicate accepts, in order, duplicates included."""
    return [path for path in paths if predicate(path)]
