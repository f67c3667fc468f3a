"""Built-in feature converters from the canonical layout to tool layouts.

Each converter handles one ``(target, feature)`` pair.  Pairs that are not
registered here are treated as unsupported and skipped by the conversion
bridge.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Callable

from rulesync_fetch.domain.entities import Feature
from rulesync_fetch.domain.ports.feature_converter import FeatureConverter

# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Parse flat key: value YAML frontmatter between --- delimiters.
    Returns (metadata, body). If no frontmatter, returns ({}, text)."""
    if not text.startswith("---"):
        return {}, text
    end = text.find("\n---", 3)
    if end == -1:
        return {}, text
    fm_block = text[3:end].strip()
    body = text[end + 4:].lstrip("\n")
    meta: dict[str, Any] = {}
    for line in fm_block.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        m = re.match(r"^(\w+)\s*:\s*(.+)$", line)
        if not m:
            continue
        key, val = m.group(1), m.group(2).strip()
        if val.lower() in ("true", "false"):
            meta[key] = val.lower() == "true"
        elif len(val) >= 2 and val[0] == val[-1] == "'":
            meta[key] = val[1:-1].replace("''", "'")
        elif len(val) >= 2 and val[0] == val[-1] == '"':
            meta[key] = val[1:-1].replace('\\"', '"').replace("\\\\", "\\")
        else:
            meta[key] = val
    return meta, body


def _needs_quotes(value: str) -> bool:
    if not value:
        return True
    # Flow sequences such as ["**/*.ts"] are written verbatim.
    if value.startswith("["):
        return False
    return value[0] in "'&*!|>%@`{" or any(c in value for c in ' :"\\')


def _quote(value: str) -> str:
    # Single-quoted scalars have no escapes besides '' for a literal quote.
    if '"' in value or "\\" in value:
        return "'" + value.replace("'", "''") + "'"
    return f'"{value}"'


def build_frontmatter(meta: dict[str, Any]) -> str:
    lines = ["---"]
    for k, v in meta.items():
        if isinstance(v, bool):
            lines.append(f"{k}: {'true' if v else 'false'}")
        elif isinstance(v, str) and _needs_quotes(v):
            lines.append(f"{k}: {_quote(v)}")
        else:
            lines.append(f"{k}: {v}")
    lines.append("---")
    return "\n".join(lines)


def _with_frontmatter(meta: dict[str, Any], body: str) -> str:
    if not meta:
        return body
    return f"{build_frontmatter(meta)}\n{body}"


# ---------------------------------------------------------------------------
# Content transforms
# ---------------------------------------------------------------------------


def claudecode_rule(text: str) -> str:
    meta, body = parse_frontmatter(text)
    out: dict[str, Any] = {}
    if meta.get("description"):
        out["description"] = meta["description"]
    if meta.get("globs") and not meta.get("root"):
        out["paths"] = meta["globs"]
    return _with_frontmatter(out, body)


def cursor_rule(text: str) -> str:
    meta, body = parse_frontmatter(text)
    out: dict[str, Any] = {
        "description": meta.get("description", ""),
        "globs": meta.get("globs", ""),
        "alwaysApply": bool(meta.get("root", False)),
    }
    return _with_frontmatter(out, body)


def body_only(text: str) -> str:
    return parse_frontmatter(text)[1]


def description_only(text: str) -> str:
    meta, body = parse_frontmatter(text)
    out = {"description": meta["description"]} if meta.get("description") else {}
    return _with_frontmatter(out, body)


def mcp_servers(text: str) -> str:
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("mcp.json must contain a JSON object")
    servers = data.get("mcpServers", {})
    return json.dumps({"mcpServers": servers}, indent=2) + "\n"


def identity(text: str) -> str:
    return text


# ---------------------------------------------------------------------------
# Converters
# ---------------------------------------------------------------------------


class DirectoryConverter:
    """Converts every file of a canonical feature directory."""

    def __init__(
        self,
        target: str,
        feature: Feature,
        source_dir: str,
        dest_dir: str,
        transform: Callable[[str], str] = identity,
        suffix: str | None = None,
    ) -> None:
        self.target = target
        self.feature = feature
        self._source_dir = source_dir
        self._dest_dir = dest_dir
        self._transform = transform
        self._suffix = suffix

    def convert(self, canonical_root: Path, output_root: Path) -> list[str]:
        src_root = canonical_root / self._source_dir
        if not src_root.is_dir():
            return []
        written: list[str] = []
        for src in sorted(p for p in src_root.rglob("*") if p.is_file()):
            rel = src.relative_to(src_root)
            if self._suffix and src.suffix == ".md":
                rel = rel.with_suffix(self._suffix)
            dest_rel = Path(self._dest_dir) / rel
            dest = output_root / dest_rel
            dest.parent.mkdir(parents=True, exist_ok=True)
            if src.suffix == ".md":
                dest.write_text(self._transform(src.read_text(encoding="utf-8")), encoding="utf-8")
            else:
                dest.write_bytes(src.read_bytes())
            written.append(dest_rel.as_posix())
        return written


class FileConverter:
    """Converts a single canonical file."""

    def __init__(
        self,
        target: str,
        feature: Feature,
        source_name: str,
        dest_name: str,
        transform: Callable[[str], str] = identity,
    ) -> None:
        self.target = target
        self.feature = feature
        self._source_name = source_name
        self._dest_name = dest_name
        self._transform = transform

    def convert(self, canonical_root: Path, output_root: Path) -> list[str]:
        src = canonical_root / self._source_name
        if not src.is_file():
            return []
        dest = output_root / self._dest_name
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(self._transform(src.read_text(encoding="utf-8")), encoding="utf-8")
        return [Path(self._dest_name).as_posix()]


BUILTIN_CONVERTERS: tuple[FeatureConverter, ...] = (
    # Claude Code
    DirectoryConverter("claudecode", Feature.RULES, "rules", ".claude/rules", claudecode_rule),
    DirectoryConverter("claudecode", Feature.COMMANDS, "commands", ".claude/commands", description_only),
    DirectoryConverter("claudecode", Feature.SUBAGENTS, "subagents", ".claude/agents", identity),
    DirectoryConverter("claudecode", Feature.SKILLS, "skills", ".claude/skills", identity),
    FileConverter("claudecode", Feature.MCP, "mcp.json", ".mcp.json", mcp_servers),
    # Cursor
    DirectoryConverter("cursor", Feature.RULES, "rules", ".cursor/rules", cursor_rule, suffix=".mdc"),
    DirectoryConverter("cursor", Feature.COMMANDS, "commands", ".cursor/commands", body_only),
    FileConverter("cursor", Feature.MCP, "mcp.json", ".cursor/mcp.json", mcp_servers),
    FileConverter("cursor", Feature.IGNORE, ".aiignore", ".cursorignore"),
    # Gemini CLI
    FileConverter("geminicli", Feature.MCP, "mcp.json", ".gemini/settings.json", mcp_servers),
    FileConverter("geminicli", Feature.IGNORE, ".aiignore", ".geminiignore"),
)


def default_registry() -> dict[tuple[str, Feature], FeatureConverter]:
    """Return the built-in converters keyed by ``(target, feature)``."""
    return {(c.target, c.feature): c for c in BUILTIN_CONVERTERS}

