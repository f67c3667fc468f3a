"""Command-line entry point: ``rulesync-fetch SOURCE [options]``."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Sequence

import httpx

from rulesync_fetch.domain.entities import FetchOptions, FetchSummary
from rulesync_fetch.domain.exceptions import RepositoryClientError, RulesyncFetchError
from rulesync_fetch.infrastructure.client_factory import ClientFactory
from rulesync_fetch.infrastructure.config import Settings, get_settings
from rulesync_fetch.infrastructure.tool_converters import default_registry
from rulesync_fetch.services.fetch_files import (
    FetchFilesUseCase,
    resolve_conflict,
    resolve_features,
)
from rulesync_fetch.services.summary_reporter import format_summary

logger = logging.getLogger("rulesync_fetch")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulesync-fetch",
        description="Fetch rulesync files from a remote repository.",
    )
    parser.add_argument(
        "source",
        help="owner/repo[@ref][:path], github:owner/repo or a GitHub URL",
    )
    parser.add_argument("-t", "--target", default="rulesync", help="Output format (default: rulesync)")
    parser.add_argument(
        "-f",
        "--features",
        help="Comma-separated features to fetch (rules,commands,subagents,skills,ignore,mcp,hooks or *)",
    )
    parser.add_argument(
        "--whole-tree",
        action="store_true",
        help="Fetch every file below the source path instead of feature directories",
    )
    parser.add_argument("-r", "--ref", help="Branch, tag or commit SHA (overrides the source)")
    parser.add_argument("-p", "--path", help="Subdirectory in the repository (overrides the source)")
    parser.add_argument("-o", "--output", help="Output directory relative to the base directory")
    parser.add_argument(
        "-c",
        "--conflict",
        choices=("skip", "overwrite"),
        help="What to do with existing files (default: overwrite)",
    )
    parser.add_argument("--token", help="GitHub token (default: GITHUB_TOKEN or GH_TOKEN)")
    parser.add_argument("--base-dir", default=".", help="Project root (default: current directory)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-V", "--verbose", action="store_true", help="Show debug output")
    verbosity.add_argument("-s", "--silent", action="store_true", help="Only show errors")
    return parser


def _configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if args.verbose:
        level = "DEBUG"
    elif args.silent:
        level = "ERROR"
    else:
        level = settings.log_level.upper()
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _options_from_args(args: argparse.Namespace) -> FetchOptions:
    names = [n.strip() for n in args.features.split(",") if n.strip()] if args.features else None
    return FetchOptions(
        ref=args.ref,
        path=args.path,
        features=None if args.whole_tree else resolve_features(names),
        target=args.target,
        output=args.output,
        conflict=resolve_conflict(args.conflict),
        token=args.token,
    )


async def _run(args: argparse.Namespace, settings: Settings) -> FetchSummary:
    options = _options_from_args(args)
    token = settings.github_token.get_secret_value() if settings.github_token else None
    async with httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout)) as http:
        factory = ClientFactory(
            http_client=http,
            default_token=token,
            github_api_url=settings.github_api_url,
        )
        use_case = FetchFilesUseCase(client_factory=factory, converters=default_registry())
        return await use_case.execute(args.source, options, base_dir=args.base_dir)


def _log_auth_hints(exc: RepositoryClientError) -> None:
    if exc.status_code in (401, 403):
        logger.info(
            "Tip: Set GITHUB_TOKEN or GH_TOKEN environment variable for private "
            "repositories or better rate limits."
        )
        logger.info(
            "Tip: If you use GitHub CLI, you can use "
            "`GITHUB_TOKEN=$(gh auth token) rulesync-fetch ...`"
        )


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    _configure_logging(args, settings)

    try:
        summary = asyncio.run(_run(args, settings))
    except RepositoryClientError as exc:
        logger.error("GitHub API Error: %s", exc)
        _log_auth_hints(exc)
        return 1
    except RulesyncFetchError as exc:
        logger.error("Failed to fetch files: %s", exc)
        return 1

    if not args.silent:
        print(format_summary(summary))
    if not summary.files:
        logger.warning("No files were fetched.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
