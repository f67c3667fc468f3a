"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator

from rulesync_fetch.domain.entities import FetchSummary


class FetchRequest(BaseModel):
    """Request body for ``POST /fetch``."""

    source: str
    ref: str | None = None
    path: str | None = None
    features: list[str] | None = None
    whole_tree: bool = False
    target: str = "rulesync"
    output: str | None = None
    conflict: Literal["skip", "overwrite"] | None = None

    @field_validator("source")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "source must not be empty."
            raise ValueError(msg)
        return stripped


class FetchedFileResponse(BaseModel):
    relative_path: str
    status: Literal["created", "overwritten", "skipped"]


class FetchResponse(BaseModel):
    """Successful response from ``POST /fetch``."""

    source: str
    ref: str
    files: list[FetchedFileResponse]
    created: int
    overwritten: int
    skipped: int
    text: str

    @classmethod
    def from_summary(cls, summary: FetchSummary, text: str) -> FetchResponse:
        return cls(
            source=summary.source,
            ref=summary.ref,
            files=[
                FetchedFileResponse(relative_path=f.relative_path, status=f.status.value)
                for f in summary.files
            ],
            created=summary.created,
            overwritten=summary.overwritten,
            skipped=summary.skipped,
            text=text,
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str


class TargetsResponse(BaseModel):
    """Features each output target can receive (``GET /targets``)."""

    targets: dict[str, list[str]]
