"""FastAPI dependency injection wiring."""

from __future__ import annotations

from functools import lru_cache
from typing import Mapping

import httpx
from fastapi import Depends

from rulesync_fetch.domain.entities import Feature
from rulesync_fetch.domain.ports.feature_converter import FeatureConverter
from rulesync_fetch.infrastructure.client_factory import ClientFactory
from rulesync_fetch.infrastructure.config import Settings, get_settings
from rulesync_fetch.infrastructure.tool_converters import default_registry
from rulesync_fetch.services.fetch_files import FetchFilesUseCase

_http_client: httpx.AsyncClient | None = None


async def startup() -> None:
    """Open the shared HTTP client used by every provider adapter."""
    global _http_client  # noqa: PLW0603

    settings = get_settings()
    _http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout))


async def shutdown() -> None:
    global _http_client  # noqa: PLW0603

    if _http_client:
        await _http_client.aclose()
        _http_client = None


@lru_cache(maxsize=1)
def _settings() -> Settings:
    return get_settings()


def get_base_dir() -> str:
    """Directory that fetched files are written below."""
    return _settings().base_dir


@lru_cache(maxsize=1)
def get_converters() -> Mapping[tuple[str, Feature], FeatureConverter]:
    return default_registry()


def get_use_case(
    converters: Mapping[tuple[str, Feature], FeatureConverter] = Depends(get_converters),
) -> FetchFilesUseCase:
    """Build the use case around the shared client and the converter registry."""
    settings = _settings()

    assert _http_client is not None, "startup() was not called"

    token = settings.github_token.get_secret_value() if settings.github_token else None
    factory = ClientFactory(
        http_client=_http_client,
        default_token=token,
        github_api_url=settings.github_api_url,
    )
    return FetchFilesUseCase(client_factory=factory, converters=converters)
