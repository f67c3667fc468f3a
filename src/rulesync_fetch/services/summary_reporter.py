"""Summary building and human-readable rendering."""

from __future__ import annotations

from typing import Sequence

from rulesync_fetch.domain.entities import FetchFileResult, FetchSummary, FileStatus

_STATUS_TEXT: dict[FileStatus, tuple[str, str]] = {
    FileStatus.CREATED: ("✓", "(created)"),
    FileStatus.OVERWRITTEN: ("✓", "(overwritten)"),
    FileStatus.SKIPPED: ("-", "(skipped - already exists)"),
}


def build_summary(source: str, ref: str, results: Sequence[FetchFileResult]) -> FetchSummary:
    files = list(results)
    return FetchSummary(
        source=source,
        ref=ref,
        files=files,
        created=sum(1 for r in files if r.status is FileStatus.CREATED),
        overwritten=sum(1 for r in files if r.status is FileStatus.OVERWRITTEN),
        skipped=sum(1 for r in files if r.status is FileStatus.SKIPPED),
    )


def format_summary(summary: FetchSummary) -> str:
    """Render *summary* as the multi-line text shown to users."""
    lines = [f"Fetched from {summary.source}@{summary.ref}:"]

    for file in summary.files:
        icon, status_text = _STATUS_TEXT[file.status]
        lines.append(f"  {icon} {file.relative_path} {status_text}")

    parts: list[str] = []
    if summary.created:
        parts.append(f"{summary.created} created")
    if summary.overwritten:
        parts.append(f"{summary.overwritten} overwritten")
    if summary.skipped:
        parts.append(f"{summary.skipped} skipped")

    lines.append("")
    lines.append(f"Summary: {', '.join(parts) if parts else 'no files'}")
    return "\n".join(lines)
