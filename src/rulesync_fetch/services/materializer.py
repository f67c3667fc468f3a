"""Materialization — write fetched files under a conflict policy."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from rulesync_fetch.domain.entities import ConflictPolicy, FetchedFile, FetchFileResult, FileStatus
from rulesync_fetch.services.path_validator import check_path_traversal

logger = logging.getLogger(__name__)


def materialize(
    files: Sequence[FetchedFile],
    output_root: Path,
    policy: ConflictPolicy = ConflictPolicy.OVERWRITE,
) -> list[FetchFileResult]:
    """Write *files* below *output_root* in input order.

    A missing destination is always created.  An existing one is left
    untouched under ``skip`` and replaced under ``overwrite``.
    """
    # Containment is checked for the whole batch before the first write.
    destinations = [check_path_traversal(f.relative_path, output_root) for f in files]

    results: list[FetchFileResult] = []
    for fetched, dest in zip(files, destinations):
        exists = dest.exists()
        if exists and policy is ConflictPolicy.SKIP:
            status = FileStatus.SKIPPED
            logger.debug("Skipping existing file: %s", fetched.relative_path)
        else:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(fetched.content)
            status = FileStatus.OVERWRITTEN if exists else FileStatus.CREATED
            logger.debug("Wrote: %s (%s)", fetched.relative_path, status.value)
        results.append(FetchFileResult(relative_path=fetched.relative_path, status=status))
    return results
