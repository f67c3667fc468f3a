"""Shared fixtures: an in-memory RepositoryClient and use-case builders."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from rulesync_fetch.domain.entities import EntryKind, FileDescriptor, Provider
from rulesync_fetch.domain.exceptions import RemoteNotFoundError
from rulesync_fetch.domain.value_objects import SourceLocator
from rulesync_fetch.infrastructure.tool_converters import default_registry
from rulesync_fetch.services.fetch_files import FetchFilesUseCase

# ---------------------------------------------------------------------------
# Fake hosting client
# ---------------------------------------------------------------------------


class FakeRepositoryClient:
    """Serves a repository from a ``{path: content}`` mapping.

    ``listings`` overrides the synthesized listing for a directory, which is
    how tests inject malicious paths, oversized entries or infinite trees.
    ``failures`` maps a file path to the exception its download raises.
    """

    def __init__(
        self,
        files: dict[str, bytes] | None = None,
        *,
        listings: dict[str, list[FileDescriptor]] | None = None,
        failures: dict[str, Exception] | None = None,
        default_branch: str = "main",
        exists: bool = True,
    ) -> None:
        self.files = dict(files or {})
        self.listings = dict(listings or {})
        self.failures = dict(failures or {})
        self.default_branch = default_branch
        self.exists = exists
        self.list_calls: list[str] = []
        self.content_calls: list[str] = []
        self.refs_seen: set[str] = set()
        self.default_branch_calls = 0

    async def validate_repository(self, locator: SourceLocator) -> bool:
        return self.exists

    async def get_default_branch(self, locator: SourceLocator) -> str:
        self.default_branch_calls += 1
        return self.default_branch

    async def list_directory(
        self, locator: SourceLocator, path: str, ref: str
    ) -> list[FileDescriptor]:
        self.list_calls.append(path)
        self.refs_seen.add(ref)
        await asyncio.sleep(0)
        return self._children(path)

    async def get_file_content(self, locator: SourceLocator, path: str, ref: str) -> bytes:
        self.content_calls.append(path)
        self.refs_seen.add(ref)
        await asyncio.sleep(0)
        if path in self.failures:
            raise self.failures[path]
        return self.files[path]

    def _children(self, path: str) -> list[FileDescriptor]:
        norm = "" if path in ("", ".") else path.strip("/")
        if norm in self.listings:
            return list(self.listings[norm])

        prefix = f"{norm}/" if norm else ""
        children: dict[str, FileDescriptor] = {}
        for file_path, content in self.files.items():
            if not file_path.startswith(prefix):
                continue
            head, sep, _ = file_path[len(prefix):].partition("/")
            child = prefix + head
            if sep:
                children.setdefault(child, FileDescriptor(child, EntryKind.DIR, 0, head))
            else:
                children[child] = FileDescriptor(child, EntryKind.FILE, len(content), head)
        if not children:
            raise RemoteNotFoundError(f"Not found: {path}")
        return list(children.values())


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def locator() -> SourceLocator:
    return SourceLocator(provider=Provider.GITHUB, owner="owner", repo="repo")


@pytest.fixture
def scratch_parent(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def make_use_case(scratch_parent: Path):
    """Build a use case whose client factory always returns *client*."""

    def _make(client: FakeRepositoryClient) -> FetchFilesUseCase:
        return FetchFilesUseCase(
            client_factory=lambda provider, token: client,
            converters=default_registry(),
            scratch_parent=scratch_parent,
        )

    return _make
