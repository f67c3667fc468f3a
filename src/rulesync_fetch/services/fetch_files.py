"""Fetch-files use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the :class:`RepositoryClient` port (obtained through a factory so a second
provider can be added later), the feature-converter registry, and the pure
service modules.  The interface layers inject concrete adapters at runtime.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Iterable, Mapping

from rulesync_fetch.domain.entities import (
    ALL_FEATURES,
    CANONICAL_TARGET,
    ConflictPolicy,
    Feature,
    FetchOptions,
    FetchSummary,
    Provider,
)
from rulesync_fetch.domain.exceptions import InvalidOptionsError, RepositoryNotFoundError
from rulesync_fetch.domain.ports.feature_converter import FeatureConverter
from rulesync_fetch.domain.ports.repository_client import RepositoryClient
from rulesync_fetch.domain.value_objects import SourceLocator
from rulesync_fetch.services.conversion_bridge import convert_and_materialize
from rulesync_fetch.services.fetch_scheduler import fetch_all
from rulesync_fetch.services.materializer import materialize
from rulesync_fetch.services.path_validator import (
    check_path_traversal,
    normalize_remote_path,
    validate_descriptor,
)
from rulesync_fetch.services.summary_reporter import build_summary
from rulesync_fetch.services.tree_walker import MAX_RECURSION_DEPTH, walk_tree

logger = logging.getLogger(__name__)

RULESYNC_RELATIVE_DIR_PATH = ".rulesync"

ClientProvider = Callable[[Provider, "str | None"], RepositoryClient]


def resolve_features(names: Iterable[str] | None) -> tuple[Feature, ...]:
    """Turn user-supplied feature names into features; empty or ``*`` means all."""
    selected = list(names or [])
    if not selected or "*" in selected:
        return ALL_FEATURES
    valid = {f.value for f in Feature}
    unknown = [n for n in selected if n not in valid]
    if unknown:
        raise InvalidOptionsError(
            f"Unknown feature(s): {', '.join(unknown)}. "
            f"Supported features: {', '.join(sorted(valid))}, *"
        )
    return tuple(dict.fromkeys(Feature(n) for n in selected))


def resolve_conflict(name: str | None) -> ConflictPolicy:
    if name is None:
        return ConflictPolicy.OVERWRITE
    try:
        return ConflictPolicy(name)
    except ValueError:
        raise InvalidOptionsError(
            f"Unknown conflict strategy: {name}. Expected 'skip' or 'overwrite'."
        ) from None


class FetchFilesUseCase:
    """Orchestrates the full source → local files pipeline.

    Parameters
    ----------
    client_factory:
        Callable returning a :class:`RepositoryClient` for a provider and an
        optional explicit token.
    converters:
        ``(target, feature)`` → converter registry used for non-canonical
        targets.
    max_depth:
        Directory levels allowed below each feature root.
    scratch_parent:
        Where conversion scratch directories are created (system temp dir
        when ``None``).
    """

    def __init__(
        self,
        client_factory: ClientProvider,
        converters: Mapping[tuple[str, Feature], FeatureConverter] | None = None,
        max_depth: int = MAX_RECURSION_DEPTH,
        scratch_parent: Path | None = None,
    ) -> None:
        self._client_factory = client_factory
        self._converters = dict(converters or {})
        self._max_depth = max_depth
        self._scratch_parent = scratch_parent

    # ── Public entry point ──────────────────────────────────────────────

    async def execute(
        self,
        source: str,
        options: FetchOptions | None = None,
        base_dir: str | Path = ".",
    ) -> FetchSummary:
        """Run the full pipeline and return the fetch summary."""
        options = options or FetchOptions()

        # 1. Everything that can fail without the network fails first
        locator = SourceLocator.from_string(source)
        targets = {CANONICAL_TARGET} | {target for target, _ in self._converters}
        if options.target not in targets:
            raise InvalidOptionsError(
                f"Unsupported target: {options.target}. "
                f"Supported targets: {', '.join(sorted(targets))}"
            )
        canonical = options.target == CANONICAL_TARGET
        output_dir = options.output or (RULESYNC_RELATIVE_DIR_PATH if canonical else ".")
        output_root = check_path_traversal(output_dir, Path(base_dir).resolve())
        client = self._client_factory(locator.provider, options.token)

        # 2. Repository and ref
        logger.debug("Validating repository: %s", locator.full_name)
        if not await client.validate_repository(locator):
            raise RepositoryNotFoundError(
                f"Repository not found: {locator.full_name}. "
                "Check the repository name and your access permissions."
            )
        ref = options.ref or locator.ref or await client.get_default_branch(locator)
        base_path = normalize_remote_path(options.path or locator.path)
        logger.info("Fetching from %s@%s (path: %s)", locator.full_name, ref, base_path)

        # 3. Walk and validate before any download
        descriptors = await walk_tree(
            client,
            locator,
            ref,
            base_path=base_path,
            features=options.features,
            max_depth=self._max_depth,
        )
        if not descriptors:
            selected = ", ".join(f.value for f in options.features or ALL_FEATURES)
            logger.warning("No files found matching enabled features: %s", selected)
            return build_summary(locator.full_name, ref, [])

        for descriptor in descriptors:
            validate_descriptor(descriptor, descriptor.root)

        # 4. Download concurrently, then write off the event loop
        fetched = await fetch_all(client, locator, ref, descriptors, base_path=base_path)

        if canonical:
            results = await asyncio.to_thread(materialize, fetched, output_root, options.conflict)
        else:
            results = await asyncio.to_thread(
                convert_and_materialize,
                fetched,
                target=options.target,
                features=options.features or ALL_FEATURES,
                output_root=output_root,
                policy=options.conflict,
                registry=self._converters,
                scratch_parent=self._scratch_parent,
            )

        summary = build_summary(locator.full_name, ref, results)
        logger.info(
            "Fetched %d file(s): %d created, %d overwritten, %d skipped",
            len(summary.files),
            summary.created,
            summary.overwritten,
            summary.skipped,
        )
        return summary
