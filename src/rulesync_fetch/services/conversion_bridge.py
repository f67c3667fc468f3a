"""Conversion bridge — re-target fetched canonical files through tool converters.

Fetched files are staged into a private scratch directory shaped like the
canonical tree, each requested feature's converter writes its tool files
next to it, and the generated files are copied into the real output root.
The scratch directory is removed on every exit path.
"""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Mapping, Sequence

from rulesync_fetch.domain.entities import (
    ConflictPolicy,
    Feature,
    FetchedFile,
    FetchFileResult,
)
from rulesync_fetch.domain.exceptions import ConversionError, RulesyncFetchError
from rulesync_fetch.domain.ports.feature_converter import FeatureConverter
from rulesync_fetch.services.materializer import materialize

logger = logging.getLogger(__name__)

SCRATCH_PREFIX = "rulesync-fetch-"


def convert_and_materialize(
    files: Sequence[FetchedFile],
    *,
    target: str,
    features: Sequence[Feature],
    output_root: Path,
    policy: ConflictPolicy,
    registry: Mapping[tuple[str, Feature], FeatureConverter],
    scratch_parent: Path | None = None,
) -> list[FetchFileResult]:
    """Convert *files* for *target* and write the results to *output_root*."""
    with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX, dir=scratch_parent) as scratch:
        canonical_root = Path(scratch) / "canonical"
        generated_root = Path(scratch) / "generated"
        canonical_root.mkdir()
        generated_root.mkdir()

        materialize(files, canonical_root, ConflictPolicy.OVERWRITE)

        generated: list[str] = []
        for feature in features:
            converter = registry.get((target, feature))
            if converter is None:
                logger.debug("No %s conversion for %s, skipping", feature.value, target)
                continue
            try:
                written = converter.convert(canonical_root, generated_root)
            except RulesyncFetchError:
                raise
            except Exception as exc:
                raise ConversionError(
                    f"Failed to convert {feature.value} for {target}: {exc}"
                ) from exc
            logger.debug("Converted %d %s file(s) for %s", len(written), feature.value, target)
            generated.extend(written)

        produced = [
            FetchedFile(relative_path=rel, content=(generated_root / rel).read_bytes())
            for rel in dict.fromkeys(generated)
        ]
        return materialize(produced, output_root, policy)
