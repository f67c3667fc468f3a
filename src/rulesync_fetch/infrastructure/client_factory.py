"""Select a RepositoryClient implementation for a provider."""

from __future__ import annotations

import httpx

from rulesync_fetch.domain.entities import Provider
from rulesync_fetch.domain.exceptions import UnsupportedProviderError
from rulesync_fetch.domain.ports.repository_client import RepositoryClient
from rulesync_fetch.infrastructure.github_rest_adapter import GitHubRestAdapter


class ClientFactory:
    """Builds provider clients sharing one ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        default_token: str | None = None,
        github_api_url: str = "https://api.github.com",
    ) -> None:
        self._http = http_client
        self._default_token = default_token
        self._github_api_url = github_api_url

    def __call__(self, provider: Provider, token: str | None = None) -> RepositoryClient:
        if provider is Provider.GITHUB:
            return GitHubRestAdapter(
                client=self._http,
                token=token or self._default_token,
                base_url=self._github_api_url,
            )
        raise UnsupportedProviderError(
            "GitLab is not yet supported. "
            "Currently only GitHub repositories are supported."
        )
