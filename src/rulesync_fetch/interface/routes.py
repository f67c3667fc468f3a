"""API routes — thin controllers that delegate to the use case."""

from __future__ import annotations

from typing import Mapping

from fastapi import APIRouter, Depends

from rulesync_fetch.domain.entities import ALL_FEATURES, CANONICAL_TARGET, Feature, FetchOptions
from rulesync_fetch.domain.ports.feature_converter import FeatureConverter
from rulesync_fetch.interface.dependencies import get_base_dir, get_converters, get_use_case
from rulesync_fetch.interface.schemas import (
    ErrorResponse,
    FetchRequest,
    FetchResponse,
    TargetsResponse,
)
from rulesync_fetch.services.fetch_files import (
    FetchFilesUseCase,
    resolve_conflict,
    resolve_features,
)
from rulesync_fetch.services.summary_reporter import format_summary

router = APIRouter()


@router.post(
    "/fetch",
    response_model=FetchResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Path traversal in fetched entries or output directory"},
        403: {"model": ErrorResponse, "description": "Authentication failed or repository is private"},
        404: {"model": ErrorResponse, "description": "Repository not found"},
        413: {"model": ErrorResponse, "description": "Remote file exceeds the size limit"},
        422: {"model": ErrorResponse, "description": "Invalid source string or options"},
        429: {"model": ErrorResponse, "description": "GitHub API rate limit exceeded"},
        502: {"model": ErrorResponse, "description": "Hosting provider error"},
    },
)
async def fetch(
    body: FetchRequest,
    use_case: FetchFilesUseCase = Depends(get_use_case),
    base_dir: str = Depends(get_base_dir),
) -> FetchResponse:
    """Fetch configuration files from a remote repository into the project."""
    options = FetchOptions(
        ref=body.ref,
        path=body.path,
        features=None if body.whole_tree else resolve_features(body.features),
        target=body.target,
        output=body.output,
        conflict=resolve_conflict(body.conflict),
    )
    summary = await use_case.execute(body.source, options, base_dir=base_dir)
    return FetchResponse.from_summary(summary, format_summary(summary))


@router.get("/targets", response_model=TargetsResponse)
async def targets(
    converters: Mapping[tuple[str, Feature], FeatureConverter] = Depends(get_converters),
) -> TargetsResponse:
    """List output targets and the features each one can receive."""
    supported: dict[str, list[str]] = {CANONICAL_TARGET: [f.value for f in ALL_FEATURES]}
    for target, feature in converters:
        supported.setdefault(target, []).append(feature.value)
    return TargetsResponse(
        targets={t: sorted(fs, key=lambda v: ALL_FEATURES.index(Feature(v))) for t, fs in supported.items()}
    )
