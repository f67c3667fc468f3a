"""Port: feature converter — turns canonical files into one tool's layout."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from rulesync_fetch.domain.entities import Feature


class FeatureConverter(Protocol):
    """Conversion pipeline for one ``(target, feature)`` pair."""

    target: str
    feature: Feature

    def convert(self, canonical_root: Path, output_root: Path) -> list[str]:
        """Read canonical files under *canonical_root* and write tool files.

        Returns the paths written, relative to *output_root*.
        """
        ...
