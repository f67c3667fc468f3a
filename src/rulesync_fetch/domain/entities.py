"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Provider(str, Enum):
    """Hosting providers a source locator can name."""

    GITHUB = "github"
    GITLAB = "gitlab"


class Feature(str, Enum):
    """Logical category of canonical configuration."""

    RULES = "rules"
    COMMANDS = "commands"
    SUBAGENTS = "subagents"
    SKILLS = "skills"
    IGNORE = "ignore"
    MCP = "mcp"
    HOOKS = "hooks"


# Remote location of each feature, relative to the source path.
# Entries ending in "/" are directories, the rest are single files.
FEATURE_PATHS: dict[Feature, str] = {
    Feature.RULES: "rules/",
    Feature.COMMANDS: "commands/",
    Feature.SUBAGENTS: "subagents/",
    Feature.SKILLS: "skills/",
    Feature.IGNORE: ".aiignore",
    Feature.MCP: "mcp.json",
    Feature.HOOKS: "hooks.json",
}

ALL_FEATURES: tuple[Feature, ...] = tuple(Feature)

# Target name of the tool-agnostic layout.
CANONICAL_TARGET = "rulesync"


class EntryKind(str, Enum):
    """Kind of a remote directory entry."""

    FILE = "file"
    DIR = "dir"


class ConflictPolicy(str, Enum):
    """What to do when the destination file already exists."""

    SKIP = "skip"
    OVERWRITE = "overwrite"


class FileStatus(str, Enum):
    """Outcome recorded for a single materialized file."""

    CREATED = "created"
    OVERWRITTEN = "overwritten"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class FileDescriptor:
    """A single entry from a remote directory listing."""

    path: str  # repo-relative
    kind: EntryKind
    size: int = 0
    name: str = ""
    root: str = ""  # feature root the entry was discovered under

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIR


@dataclass(frozen=True, slots=True)
class FetchedFile:
    """Downloaded content keyed by its path below the source path."""

    relative_path: str
    content: bytes


@dataclass(frozen=True, slots=True)
class FetchFileResult:
    """Per-file outcome of materialization."""

    relative_path: str
    status: FileStatus


@dataclass(frozen=True, slots=True)
class FetchSummary:
    """Aggregated outcome of one fetch invocation."""

    source: str
    ref: str
    files: list[FetchFileResult] = field(default_factory=list)
    created: int = 0
    overwritten: int = 0
    skipped: int = 0


@dataclass(frozen=True, slots=True)
class FetchOptions:
    """Caller-supplied options for a fetch run."""

    ref: str | None = None
    path: str | None = None
    features: tuple[Feature, ...] | None = ALL_FEATURES  # None walks the whole path
    target: str = "rulesync"
    output: str | None = None
    conflict: ConflictPolicy = ConflictPolicy.OVERWRITE
    token: str | None = None
