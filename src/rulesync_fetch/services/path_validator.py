"""Path validation — containment and size checks applied before any download."""

from __future__ import annotations

import posixpath
from pathlib import Path

from rulesync_fetch.domain.entities import FileDescriptor
from rulesync_fetch.domain.exceptions import PathTraversalError, SizeLimitExceededError

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB

_MIB = 1024 * 1024


def check_path_traversal(relative_path: str, root: str | Path) -> Path:
    """Resolve *relative_path* under *root* and return the absolute result.

    Rejects absolute paths, any ``..`` segment (even one that would stay
    inside *root*), and anything that resolves outside of *root*.
    """
    segments = relative_path.replace("\\", "/").split("/")
    if ".." in segments or relative_path.startswith(("/", "\\")) or Path(relative_path).is_absolute():
        raise PathTraversalError(f"Path traversal detected: {relative_path}")

    root_path = Path(root).resolve()
    resolved = (root_path / relative_path).resolve()
    if resolved != root_path and root_path not in resolved.parents:
        raise PathTraversalError(f"Path traversal detected: {relative_path}")
    return resolved


def check_within(path: str, root: str) -> None:
    """Check a repo-relative *path* stays inside the repo-relative *root*."""
    if path.startswith("/") or ".." in path.split("/"):
        raise PathTraversalError(f"Path traversal detected: {path}")
    normalized = posixpath.normpath(path)
    root = posixpath.normpath(root) if root not in ("", ".") else ""
    if root and normalized != root and not normalized.startswith(root + "/"):
        raise PathTraversalError(f"Path traversal detected: {path} is outside of {root}")


def validate_descriptor(descriptor: FileDescriptor, feature_root: str) -> None:
    """Reject descriptors escaping *feature_root* or exceeding :data:`MAX_FILE_SIZE`."""
    check_within(descriptor.path, feature_root)
    if descriptor.size > MAX_FILE_SIZE:
        raise SizeLimitExceededError(
            f"File '{descriptor.path}' exceeds maximum size limit "
            f"({descriptor.size / _MIB:.2f}MB > {MAX_FILE_SIZE // _MIB}MB)"
        )


def normalize_remote_path(path: str | None) -> str:
    """Canonical repo-relative form of a subpath; the repo root is ``"."``.

    ``/pkg``, ``./pkg`` and ``pkg/`` all become ``pkg``.
    """
    normalized = posixpath.normpath(path or ".").strip("/")
    return normalized or "."


def relative_to_base(path: str, base_path: str) -> str:
    """Strip the locator subpath prefix from a repo-relative path."""
    base = normalize_remote_path(base_path)
    if base == ".":
        return path
    return posixpath.relpath(normalize_remote_path(path), base)
