"""Tree walking — expand feature roots into a flat list of file descriptors."""

from __future__ import annotations

import logging
import posixpath
from dataclasses import replace
from typing import Sequence

from rulesync_fetch.domain.entities import FEATURE_PATHS, Feature, FileDescriptor
from rulesync_fetch.domain.exceptions import RecursionDepthExceededError, RemoteNotFoundError
from rulesync_fetch.domain.ports.repository_client import RepositoryClient
from rulesync_fetch.domain.value_objects import SourceLocator
from rulesync_fetch.services.concurrency import gather_fail_fast
from rulesync_fetch.services.path_validator import normalize_remote_path

logger = logging.getLogger(__name__)

# Directory levels allowed below a feature root.
MAX_RECURSION_DEPTH = 20


def join_remote(base_path: str, name: str) -> str:
    """Join a repo-relative base path and a child name ("." means the repo root)."""
    base = normalize_remote_path(base_path)
    if base == ".":
        return name
    return posixpath.join(base, name) if name else base


async def walk_tree(
    client: RepositoryClient,
    locator: SourceLocator,
    ref: str,
    *,
    base_path: str = ".",
    features: Sequence[Feature] | None = None,
    max_depth: int = MAX_RECURSION_DEPTH,
) -> list[FileDescriptor]:
    """Return every remote file selected by *features* below *base_path*.

    ``features=None`` walks the whole of *base_path*.  Directory features are
    walked recursively; file features are looked up in a single listing of
    *base_path*.  Results follow feature order, then listing order.
    """
    walker = _Walker(client, locator, ref, max_depth)

    if features is None:
        return await walker.walk_root(join_remote(base_path, ""))

    dir_features = [f for f in features if FEATURE_PATHS[f].endswith("/")]
    file_features = [f for f in features if not FEATURE_PATHS[f].endswith("/")]

    coros = [
        walker.walk_root(join_remote(base_path, FEATURE_PATHS[f].rstrip("/")))
        for f in dir_features
    ]
    if file_features:
        coros.append(walker.find_files(base_path, [FEATURE_PATHS[f] for f in file_features]))

    groups = await gather_fail_fast(coros)
    by_feature: dict[Feature, list[FileDescriptor]] = dict(zip(dir_features, groups))
    if file_features:
        found: dict[str, FileDescriptor] = groups[-1]  # type: ignore[assignment]
        for f in file_features:
            entry = found.get(FEATURE_PATHS[f])
            by_feature[f] = [entry] if entry else []

    descriptors: list[FileDescriptor] = []
    for f in features:
        descriptors.extend(by_feature.get(f, []))
    logger.debug(
        "Walked %s@%s: %d file(s) across %d feature(s)",
        locator.full_name,
        ref,
        len(descriptors),
        len(features),
    )
    return descriptors


class _Walker:
    """Holds the per-walk parameters shared by every recursive listing."""

    def __init__(
        self, client: RepositoryClient, locator: SourceLocator, ref: str, max_depth: int
    ) -> None:
        self._client = client
        self._locator = locator
        self._ref = ref
        self._max_depth = max_depth

    async def walk_root(self, root: str) -> list[FileDescriptor]:
        """Walk a feature root; a missing root means the feature is absent."""
        try:
            entries = await self._client.list_directory(self._locator, root or ".", self._ref)
        except RemoteNotFoundError:
            logger.debug("Feature not found: %s", root or ".")
            return []
        return await self._expand(entries, root, depth=0)

    async def find_files(self, base_path: str, names: list[str]) -> dict[str, FileDescriptor]:
        """Look up single-file features in one listing of *base_path*."""
        root = join_remote(base_path, "")
        try:
            entries = await self._client.list_directory(self._locator, root or ".", self._ref)
        except RemoteNotFoundError:
            logger.debug("Base path not found: %s", root or ".")
            return {}
        return {
            e.name or posixpath.basename(e.path): replace(e, root=root)
            for e in entries
            if not e.is_dir and (e.name or posixpath.basename(e.path)) in names
        }

    async def _walk_dir(self, path: str, root: str, depth: int) -> list[FileDescriptor]:
        # A 404 below an existing root is a real error and propagates.
        entries = await self._client.list_directory(self._locator, path, self._ref)
        return await self._expand(entries, root, depth)

    async def _expand(
        self, entries: list[FileDescriptor], root: str, depth: int
    ) -> list[FileDescriptor]:
        subdirs = [e for e in entries if e.is_dir]
        if subdirs and depth + 1 > self._max_depth:
            raise RecursionDepthExceededError(
                f"Maximum recursion depth exceeded ({self._max_depth}) "
                f"while listing {subdirs[0].path}"
            )

        children = await gather_fail_fast(
            self._walk_dir(e.path, root, depth + 1) for e in subdirs
        )

        expanded = iter(children)
        files: list[FileDescriptor] = []
        for entry in entries:
            if entry.is_dir:
                files.extend(next(expanded))
            else:
                files.append(replace(entry, root=root))
        return files
