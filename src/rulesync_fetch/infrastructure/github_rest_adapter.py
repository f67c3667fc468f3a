"""GitHub REST API adapter — implements the RepositoryClient port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx

from rulesync_fetch.domain.entities import EntryKind, FileDescriptor
from rulesync_fetch.domain.exceptions import (
    ContentFetchError,
    RateLimitError,
    RemoteNotFoundError,
    RepositoryAccessDeniedError,
    RepositoryClientError,
)
from rulesync_fetch.domain.value_objects import SourceLocator

logger = logging.getLogger(__name__)

_GITHUB_API = "https://api.github.com"
_USER_AGENT = "rulesync-fetch/1.0"

_ENTRY_KINDS: dict[str, EntryKind] = {
    "file": EntryKind.FILE,
    "dir": EntryKind.DIR,
}


class GitHubRestAdapter:
    """Concrete RepositoryClient backed by the GitHub v3 contents API."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str | None = None,
        base_url: str = _GITHUB_API,
    ) -> None:
        if not base_url.startswith("https://"):
            raise RepositoryClientError("GitHub API base URL must use HTTPS")
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._has_token = bool(token)
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": _USER_AGENT,
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"
        self._repo_info: dict[str, dict[str, Any]] = {}

    async def validate_repository(self, locator: SourceLocator) -> bool:
        """GET /repos/{owner}/{repo}; a 404 means the repository is not visible."""
        try:
            await self._get_repo_info(locator)
        except RemoteNotFoundError:
            return False
        return True

    async def get_default_branch(self, locator: SourceLocator) -> str:
        data = await self._get_repo_info(locator)
        branch = data.get("default_branch")
        if not isinstance(branch, str) or not branch:
            raise RepositoryClientError(
                f"Invalid repository info response for {locator.full_name}: "
                "missing default_branch"
            )
        return branch

    async def list_directory(
        self, locator: SourceLocator, path: str, ref: str
    ) -> list[FileDescriptor]:
        """GET /repos/{owner}/{repo}/contents/{path}?ref= → [FileDescriptor]."""
        resp = await self._api_get(self._contents_endpoint(locator, path), params={"ref": ref})
        data = resp.json()

        # The contents API answers with a single object for files.
        if not isinstance(data, list):
            raise RepositoryClientError(f"Path '{path}' is not a directory")

        entries: list[FileDescriptor] = []
        for item in data:
            kind = _ENTRY_KINDS.get(item.get("type", ""))
            if kind is None or "path" not in item:
                logger.debug("Ignoring %s entry %s", item.get("type"), item.get("path"))
                continue
            entries.append(
                FileDescriptor(
                    path=item["path"],
                    kind=kind,
                    size=int(item.get("size") or 0),
                    name=item.get("name", ""),
                )
            )
        return entries

    async def get_file_content(self, locator: SourceLocator, path: str, ref: str) -> bytes:
        """GET the contents endpoint with the raw media type."""
        resp = await self._api_get(
            self._contents_endpoint(locator, path),
            params={"ref": ref},
            accept="application/vnd.github.raw",
            network_error=ContentFetchError,
        )
        return resp.content

    # ── Internals ───────────────────────────────────────────────────────

    async def _get_repo_info(self, locator: SourceLocator) -> dict[str, Any]:
        cached = self._repo_info.get(locator.full_name)
        if cached is not None:
            return cached
        resp = await self._api_get(f"/repos/{locator.owner}/{locator.repo}")
        data: dict[str, Any] = resp.json()
        self._repo_info[locator.full_name] = data
        return data

    @staticmethod
    def _contents_endpoint(locator: SourceLocator, path: str) -> str:
        clean = path.strip("/")
        if clean in ("", "."):
            return f"/repos/{locator.owner}/{locator.repo}/contents"
        # "#" and "?" are legal in file names but not in a URL path.
        return f"/repos/{locator.owner}/{locator.repo}/contents/{quote(clean, safe='/')}"

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
        *,
        accept: str | None = None,
        network_error: type[RepositoryClientError] = RepositoryClientError,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{self._base_url}{endpoint}"
        headers = dict(self._api_headers)
        if accept:
            headers["Accept"] = accept
        try:
            resp = await self._client.get(url, headers=headers, params=params)
        except httpx.HTTPError as exc:
            raise network_error(f"Network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            return resp

        message = _extract_message(resp)

        if resp.status_code == 404:
            raise RemoteNotFoundError(f"Not found: {message}")

        if resp.status_code == 401:
            raise RepositoryAccessDeniedError(
                f"Authentication failed: {message}. Check your GitHub token.", 401
            )

        if resp.status_code == 403:
            remaining = resp.headers.get("x-ratelimit-remaining", "")
            if remaining == "0" or "rate limit" in message.lower():
                raise RateLimitError(self._rate_limit_message(resp), 403)
            raise RepositoryAccessDeniedError(
                f"Access forbidden: {message}. Check repository permissions.", 403
            )

        if resp.status_code == 429:
            raise RateLimitError("GitHub API rate limit exceeded (HTTP 429).", 429)

        raise RepositoryClientError(f"GitHub API error: {message}", resp.status_code)

    def _rate_limit_message(self, resp: httpx.Response) -> str:
        reset_raw = resp.headers.get("x-ratelimit-reset", "")
        try:
            reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                "%Y-%m-%d %H:%M:%S UTC"
            )
        except (ValueError, OSError):
            reset_str = reset_raw or "unknown"
        hint = "Try again later." if self._has_token else "Consider using a GitHub token."
        return f"GitHub API rate limit exceeded. Resets at {reset_str}. {hint}"


def _extract_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    if isinstance(data, dict) and isinstance(data.get("message"), str):
        return data["message"]
    return f"HTTP {resp.status_code}"
