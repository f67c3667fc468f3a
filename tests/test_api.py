"""HTTP interface: request mapping, response shape and error envelopes."""

from __future__ import annotations

import pytest
from conftest import FakeRepositoryClient
from fastapi.testclient import TestClient

from rulesync_fetch.domain.entities import EntryKind, FileDescriptor
from rulesync_fetch.domain.exceptions import (
    ContentFetchError,
    ConversionError,
    RateLimitError,
    RecursionDepthExceededError,
    RepositoryAccessDeniedError,
    RepositoryNotFoundError,
    UnsupportedProviderError,
)
from rulesync_fetch.interface.app import create_app
from rulesync_fetch.interface.dependencies import get_base_dir, get_use_case
from rulesync_fetch.interface.error_handlers import status_for
from rulesync_fetch.services.fetch_files import FetchFilesUseCase
from rulesync_fetch.services.path_validator import MAX_FILE_SIZE

REPO = {
    "rules/overview.md": b"# Overview",
    "commands/test.md": b"# Test",
}


@pytest.fixture
def api(make_use_case, project_dir):
    """Return ``(client, use_case_holder)``; tests swap the fake repository in."""
    app = create_app()
    holder: dict[str, FetchFilesUseCase] = {"use_case": make_use_case(FakeRepositoryClient(REPO))}
    app.dependency_overrides[get_use_case] = lambda: holder["use_case"]
    app.dependency_overrides[get_base_dir] = lambda: str(project_dir)
    with TestClient(app) as client:
        yield client, holder


def _raising_use_case(exc: Exception) -> FetchFilesUseCase:
    def factory(provider, token):
        raise exc

    return FetchFilesUseCase(client_factory=factory)


def test_health(api):
    client, _ = api
    assert client.get("/health").json() == {"status": "ok", "version": "1.0.0"}


def test_fetch_writes_files_and_reports(api, project_dir):
    client, _ = api
    resp = client.post("/fetch", json={"source": "owner/repo@v2", "features": ["rules"]})

    assert resp.status_code == 200
    body = resp.json()
    assert body["source"] == "owner/repo"
    assert body["ref"] == "v2"
    assert body["files"] == [{"relative_path": "rules/overview.md", "status": "created"}]
    assert (body["created"], body["overwritten"], body["skipped"]) == (1, 0, 0)
    assert body["text"].startswith("Fetched from owner/repo@v2:")
    assert (project_dir / ".rulesync" / "rules" / "overview.md").read_bytes() == b"# Overview"


def test_fetch_skip_conflict(api, project_dir):
    client, _ = api
    existing = project_dir / ".rulesync" / "commands" / "test.md"
    existing.parent.mkdir(parents=True)
    existing.write_bytes(b"mine")

    resp = client.post(
        "/fetch", json={"source": "owner/repo", "features": ["commands"], "conflict": "skip"}
    )
    assert resp.json()["skipped"] == 1
    assert existing.read_bytes() == b"mine"


def test_fetch_for_tool_target(api, project_dir):
    client, _ = api
    resp = client.post("/fetch", json={"source": "owner/repo", "target": "claudecode"})
    assert resp.status_code == 200
    assert {f["relative_path"] for f in resp.json()["files"]} == {
        ".claude/rules/overview.md",
        ".claude/commands/test.md",
    }


@pytest.mark.parametrize(
    "payload",
    [
        {"source": "   "},
        {"source": "owner/repo", "conflict": "merge"},
        {"source": "owner/repo@"},
        {"source": "https://bitbucket.org/owner/repo"},
        {"source": "owner/repo", "features": ["widgets"]},
        {"source": "owner/repo", "target": "notatool"},
    ],
)
def test_invalid_requests(api, payload):
    client, _ = api
    resp = client.post("/fetch", json=payload)
    assert resp.status_code == 422
    assert resp.json()["status"] == "error"


def test_output_traversal(api):
    client, _ = api
    resp = client.post("/fetch", json={"source": "owner/repo", "output": "../escape"})
    assert resp.status_code == 400
    assert "Path traversal" in resp.json()["message"]


def test_oversized_file(api, make_use_case):
    client, holder = api
    holder["use_case"] = make_use_case(
        FakeRepositoryClient(
            listings={
                "rules": [FileDescriptor("rules/big.md", EntryKind.FILE, MAX_FILE_SIZE + 1, "big.md")]
            }
        )
    )
    resp = client.post("/fetch", json={"source": "owner/repo", "features": ["rules"]})
    assert resp.status_code == 413


def test_missing_repository(api, make_use_case):
    client, holder = api
    holder["use_case"] = make_use_case(FakeRepositoryClient(exists=False))
    resp = client.post("/fetch", json={"source": "owner/missing"})
    assert resp.status_code == 404
    assert "owner/missing" in resp.json()["message"]


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (UnsupportedProviderError("GitLab is not yet supported."), 422),
        (RepositoryAccessDeniedError("Authentication failed", 401), 403),
        (RateLimitError("GitHub API rate limit exceeded", 403), 429),
    ],
)
def test_provider_errors(api, exc, status):
    client, holder = api
    holder["use_case"] = _raising_use_case(exc)
    resp = client.post("/fetch", json={"source": "owner/repo"})
    assert resp.status_code == status
    assert resp.json() == {"status": "error", "message": str(exc)}


def test_targets(api):
    client, _ = api
    targets = client.get("/targets").json()["targets"]
    assert targets["rulesync"] == ["rules", "commands", "subagents", "skills", "ignore", "mcp", "hooks"]
    assert targets["claudecode"] == ["rules", "commands", "subagents", "skills", "mcp"]
    assert targets["cursor"] == ["rules", "commands", "ignore", "mcp"]
    assert targets["geminicli"] == ["ignore", "mcp"]


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (RepositoryNotFoundError("Repository not found: a/b"), 404),
        (ContentFetchError("Network error"), 502),
        (RecursionDepthExceededError("Maximum recursion depth exceeded (20)"), 422),
        (ConversionError("Failed to convert mcp for cursor"), 500),
    ],
)
def test_status_for_uses_closest_mapped_class(exc, status):
    assert status_for(exc) == status
