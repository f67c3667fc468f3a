"""Port: repository client — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from rulesync_fetch.domain.entities import FileDescriptor
from rulesync_fetch.domain.value_objects import SourceLocator


class RepositoryClient(Protocol):
    """Abstract contract for reading a remote repository through a hosting API."""

    async def validate_repository(self, locator: SourceLocator) -> bool:
        """Return ``False`` when the repository does not exist or is not visible."""
        ...

    async def get_default_branch(self, locator: SourceLocator) -> str:
        """Return the repository's default branch name."""
        ...

    async def list_directory(
        self, locator: SourceLocator, path: str, ref: str
    ) -> list[FileDescriptor]:
        """Return the direct children of *path*.

        Raises :class:`RemoteNotFoundError` when *path* does not exist.
        """
        ...

    async def get_file_content(self, locator: SourceLocator, path: str, ref: str) -> bytes:
        """Return the raw bytes of a single file."""
        ...
