"""changematch command line entrypoint."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Mapping

from changematch.action import run
from changematch.compare import build_comparison_provider
from changematch.config import (
    default_config,
    environment_overrides,
    load_config_file,
    load_event_source,
    merge_config,
    validate_execution_requirements,
    warn_on_possible_secrets,
)
from changematch.errors import ChangeMatchError, ExitCode, format_user_error
from changematch.events import RunContext
from changematch.output import GithubOutputSink, report_failure

_VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the match command."""
    parser = argparse.ArgumentParser(
        prog="changematch",
        description="Report whether any file changed by a pull request or push matches a glob pattern.",
    )
    parser.add_argument("--pattern", help="Glob pattern to test changed files against")
    parser.add_argument("--token", help="Token for the GitHub compare API")
    parser.add_argument("--config", help="Path to optional YAML config file")
    parser.add_argument("--provider", help="Comparison backend: github or fixture")
    parser.add_argument("--comparison-payload", help="JSON comparison file for the fixture provider")
    parser.add_argument("--on-head-not-ahead", help="continue or stop when head is not ahead of base")
    parser.add_argument("--api-url", help="GitHub API base URL")
    parser.add_argument("--event-name", help="Triggering event name (defaults to GITHUB_EVENT_NAME)")
    parser.add_argument("--event-path", help="Path to the event payload JSON (defaults to GITHUB_EVENT_PATH)")
    parser.add_argument("--repository", help="owner/repo (defaults to GITHUB_REPOSITORY)")
    parser.add_argument("--output", help="File receiving step outputs (defaults to GITHUB_OUTPUT)")
    parser.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--debug", action="store_true", help="Enable DEBUG logging")
    parser.add_argument("--version", action="store_true", help="Print changematch version and exit")
    return parser


def _configure_logging(*, debug: bool, quiet: bool) -> None:
    """Configure global logging level based on CLI flags."""
    level = logging.INFO
    if quiet:
        level = logging.WARNING
    if debug:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", force=True)


def _fail(exc: ChangeMatchError) -> int:
    """Surface a terminal failure on both the runner and stderr."""
    report_failure(str(exc))
    print(str(exc), file=sys.stderr)
    return int(exc.exit_code)


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    """Run CLI command and return process status code."""
    raw_argv = argv if argv is not None else sys.argv[1:]
    env = environ if environ is not None else os.environ
    if "--version" in raw_argv:
        print(f"changematch {_VERSION}")
        return int(ExitCode.OK)

    parser = build_parser()
    args = parser.parse_args(raw_argv)
    _configure_logging(debug=args.debug, quiet=args.quiet)
    logger = logging.getLogger(__name__)

    try:
        file_config = load_config_file(args.config)
        warn_on_possible_secrets(file_config)
        config = merge_config(
            defaults=default_config(),
            file_config=file_config,
            environment=environment_overrides(env),
            cli_args={
                "pattern": args.pattern,
                "token": args.token,
                "provider": args.provider,
                "comparison_payload": args.comparison_payload,
                "on_head_not_ahead": args.on_head_not_ahead,
                "api_url": args.api_url,
            },
        )
        pattern = validate_execution_requirements(config)
        source = load_event_source(
            event_name=args.event_name or env.get("GITHUB_EVENT_NAME"),
            event_path=args.event_path or env.get("GITHUB_EVENT_PATH"),
            repository=args.repository or env.get("GITHUB_REPOSITORY"),
        )
        logger.debug("Event %s for %s/%s", source.event_name, source.owner, source.repo)

        context = RunContext(
            event_name=source.event_name,
            payload=source.payload,
            owner=source.owner,
            repo=source.repo,
            token=config.token,
            pattern=pattern,
        )
        comparison = build_comparison_provider(
            provider=config.provider,
            token=config.token,
            comparison_payload=config.comparison_payload,
            api_url=config.api_url,
        )
        sink = GithubOutputSink(output_path=args.output or env.get("GITHUB_OUTPUT"))
        result = run(context, comparison=comparison, sink=sink, on_head_not_ahead=config.on_head_not_ahead)

        if result.failures:
            return int(ExitCode.COMPARISON)
        return int(ExitCode.OK)
    except ChangeMatchError as exc:
        return _fail(exc)
    except Exception as exc:  # pragma: no cover
        message = format_user_error(
            what="unexpected runtime failure.",
            why=str(exc),
            how_to_fix="re-run with --debug and open an issue with the log",
        )
        report_failure(message)
        print(message, file=sys.stderr)
        logger.debug("Unexpected failure", exc_info=True)
        return int(ExitCode.INTERNAL)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
