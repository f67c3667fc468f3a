"""Concurrent content download for validated descriptors."""

from __future__ import annotations

import logging
from typing import Sequence

from rulesync_fetch.domain.entities import FetchedFile, FileDescriptor
from rulesync_fetch.domain.ports.repository_client import RepositoryClient
from rulesync_fetch.domain.value_objects import SourceLocator
from rulesync_fetch.services.concurrency import gather_fail_fast
from rulesync_fetch.services.path_validator import relative_to_base

logger = logging.getLogger(__name__)


async def fetch_all(
    client: RepositoryClient,
    locator: SourceLocator,
    ref: str,
    descriptors: Sequence[FileDescriptor],
    *,
    base_path: str = ".",
) -> list[FetchedFile]:
    """Download every descriptor concurrently, preserving input order.

    The first failing download aborts the whole batch; its exception is
    re-raised unchanged and no partial result is returned.
    """

    async def _fetch_one(descriptor: FileDescriptor) -> FetchedFile:
        content = await client.get_file_content(locator, descriptor.path, ref)
        logger.debug("Fetched %s (%d bytes)", descriptor.path, len(content))
        return FetchedFile(
            relative_path=relative_to_base(descriptor.path, base_path),
            content=content,
        )

    logger.info("Fetching %d file(s) from %s@%s", len(descriptors), locator.full_name, ref)
    return await gather_fail_fast(_fetch_one(d) for d in descriptors)
