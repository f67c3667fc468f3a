"""Tests for scratch-directory conversion into tool layouts."""

from __future__ import annotations

from pathlib import Path

import pytest

from rulesync_fetch.domain.entities import ConflictPolicy, Feature, FetchedFile, FileStatus
from rulesync_fetch.domain.exceptions import ConversionError
from rulesync_fetch.infrastructure.tool_converters import default_registry
from rulesync_fetch.services.conversion_bridge import convert_and_materialize

RULE = b"---\nroot: false\ndescription: Python style\nglobs: **/*.py\n---\n# Python\n"


class _RecordingConverter:
    target = "mytool"
    feature = Feature.RULES

    def __init__(self) -> None:
        self.seen_canonical: list[str] = []
        self.canonical_root: Path | None = None

    def convert(self, canonical_root: Path, output_root: Path) -> list[str]:
        self.canonical_root = canonical_root
        self.seen_canonical = sorted(
            p.relative_to(canonical_root).as_posix() for p in canonical_root.rglob("*") if p.is_file()
        )
        dest = output_root / ".mytool" / "rules.md"
        dest.parent.mkdir(parents=True)
        dest.write_text("converted")
        return [".mytool/rules.md"]


class _FailingConverter:
    target = "mytool"
    feature = Feature.COMMANDS

    def convert(self, canonical_root: Path, output_root: Path) -> list[str]:
        raise ValueError("bad frontmatter")


def _leftovers(scratch_parent: Path) -> list[Path]:
    return list(scratch_parent.iterdir())


class TestConvertAndMaterialize:
    def test_converter_sees_canonical_tree_and_output_is_copied(self, tmp_path, scratch_parent):
        converter = _RecordingConverter()
        out = tmp_path / "project"
        results = convert_and_materialize(
            [FetchedFile("rules/a.md", b"a"), FetchedFile("mcp.json", b"{}")],
            target="mytool",
            features=[Feature.RULES],
            output_root=out,
            policy=ConflictPolicy.OVERWRITE,
            registry={("mytool", Feature.RULES): converter},
            scratch_parent=scratch_parent,
        )
        assert converter.seen_canonical == ["mcp.json", "rules/a.md"]
        assert [(r.relative_path, r.status) for r in results] == [
            (".mytool/rules.md", FileStatus.CREATED)
        ]
        assert (out / ".mytool" / "rules.md").read_text() == "converted"
        assert _leftovers(scratch_parent) == []
        assert converter.canonical_root is not None
        assert not converter.canonical_root.exists()

    def test_unsupported_feature_is_skipped_and_scratch_removed(self, tmp_path, scratch_parent):
        results = convert_and_materialize(
            [FetchedFile("skills/s/SKILL.md", b"skill")],
            target="cursor",
            features=[Feature.SKILLS],
            output_root=tmp_path / "project",
            policy=ConflictPolicy.OVERWRITE,
            registry=default_registry(),
            scratch_parent=scratch_parent,
        )
        assert results == []
        assert _leftovers(scratch_parent) == []

    def test_conversion_error_still_removes_scratch(self, tmp_path, scratch_parent):
        with pytest.raises(ConversionError, match="bad frontmatter"):
            convert_and_materialize(
                [FetchedFile("commands/c.md", b"c")],
                target="mytool",
                features=[Feature.COMMANDS],
                output_root=tmp_path / "project",
                policy=ConflictPolicy.OVERWRITE,
                registry={("mytool", Feature.COMMANDS): _FailingConverter()},
                scratch_parent=scratch_parent,
            )
        assert _leftovers(scratch_parent) == []
        assert not (tmp_path / "project").exists()

    def test_conflict_policy_applies_to_generated_files(self, tmp_path, scratch_parent):
        out = tmp_path / "project"
        existing = out / ".cursor" / "rules" / "python.mdc"
        existing.parent.mkdir(parents=True)
        existing.write_text("local")

        results = convert_and_materialize(
            [FetchedFile("rules/python.md", RULE)],
            target="cursor",
            features=[Feature.RULES],
            output_root=out,
            policy=ConflictPolicy.SKIP,
            registry=default_registry(),
            scratch_parent=scratch_parent,
        )
        assert [(r.relative_path, r.status) for r in results] == [
            (".cursor/rules/python.mdc", FileStatus.SKIPPED)
        ]
        assert existing.read_text() == "local"

    def test_builtin_claudecode_conversion(self, tmp_path, scratch_parent):
        out = tmp_path / "project"
        results = convert_and_materialize(
            [
                FetchedFile("rules/python.md", RULE),
                FetchedFile("mcp.json", b'{"mcpServers": {"fs": {"command": "npx"}}}'),
            ],
            target="claudecode",
            features=[Feature.RULES, Feature.MCP],
            output_root=out,
            policy=ConflictPolicy.OVERWRITE,
            registry=default_registry(),
            scratch_parent=scratch_parent,
        )
        assert [r.relative_path for r in results] == [".claude/rules/python.md", ".mcp.json"]
        rule = (out / ".claude" / "rules" / "python.md").read_text()
        assert rule.startswith('---\ndescription: "Python style"\npaths: "**/*.py"\n---\n')
        assert rule.endswith("# Python\n")
        assert '"fs"' in (out / ".mcp.json").read_text()
