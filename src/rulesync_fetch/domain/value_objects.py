"""Value objects — self-validating domain primitives."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from rulesync_fetch.domain.entities import Provider
from rulesync_fetch.domain.exceptions import SourceParseError, UnknownProviderError

_PROVIDER_HOSTS: dict[str, Provider] = {
    "github.com": Provider.GITHUB,
    "gitlab.com": Provider.GITLAB,
}

_SHORTHAND_FORMAT = "owner/repo, owner/repo@ref, owner/repo:path or owner/repo@ref:path"


@dataclass(frozen=True, slots=True)
class SourceLocator:
    """Parsed identification of a remote repository, ref and subpath.

    Accepts any of::

        https://github.com/owner/repo[/tree/<ref>[/<path>]]
        https://gitlab.com/owner/repo/blob/<ref>/<path>
        github:owner/repo[@ref][:path]
        owner/repo[@ref][:path]

    The bare shorthand defaults to GitHub.  Parsing never touches the
    network.
    """

    provider: Provider
    owner: str
    repo: str
    ref: str | None = None
    path: str | None = None

    @classmethod
    def from_string(cls, source: str) -> SourceLocator:
        """Parse and validate a raw source string."""
        text = source.strip()
        if text.startswith(("http://", "https://")):
            return _parse_url(text)

        prefix, sep, rest = text.partition(":")
        if sep and prefix in {p.value for p in Provider}:
            return _parse_shorthand(rest, Provider(prefix), original=text)

        return _parse_shorthand(text, Provider.GITHUB, original=text)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_source(source: str) -> SourceLocator:
    """Shortcut for :meth:`SourceLocator.from_string`."""
    return SourceLocator.from_string(source)


def _strip_git_suffix(repo: str) -> str:
    return repo[: -len(".git")] if repo.endswith(".git") else repo


def _parse_url(url: str) -> SourceLocator:
    parts = urlsplit(url)
    host = (parts.hostname or "").lower()
    if host.startswith("www."):
        host = host[len("www."):]

    provider = _PROVIDER_HOSTS.get(host)
    if provider is None:
        supported = ", ".join(p.value for p in Provider)
        raise UnknownProviderError(
            f"Unknown provider for host: '{host}'. Supported providers: {supported}"
        )

    segments = [s for s in parts.path.split("/") if s]
    if len(segments) < 2:
        raise SourceParseError(
            f"Invalid {provider.value} URL: '{url}'. "
            f"Expected format: https://{host}/owner/repo"
        )

    owner = segments[0]
    repo = _strip_git_suffix(segments[1])
    if not repo:
        raise SourceParseError(f"Invalid {provider.value} URL: '{url}'. Repository is missing.")

    ref: str | None = None
    path: str | None = None
    if len(segments) > 2 and segments[2] in ("tree", "blob"):
        if len(segments) < 4:
            raise SourceParseError(f"Invalid source: '{url}'. Ref cannot be empty.")
        ref = segments[3]
        if len(segments) > 4:
            path = "/".join(segments[4:])

    return SourceLocator(provider=provider, owner=owner, repo=repo, ref=ref, path=path)


def _parse_shorthand(text: str, provider: Provider, *, original: str) -> SourceLocator:
    remaining = text
    ref: str | None = None
    path: str | None = None

    # The path is split off first so that refs may not contain ":".
    remaining, colon, path_part = remaining.partition(":")
    if colon:
        if not path_part:
            raise SourceParseError(
                f"Invalid source: '{original}'. Path cannot be empty after ':'."
            )
        path = path_part

    remaining, at, ref_part = remaining.partition("@")
    if at:
        if not ref_part:
            raise SourceParseError(
                f"Invalid source: '{original}'. Ref cannot be empty after '@'."
            )
        ref = ref_part

    owner, slash, repo = remaining.partition("/")
    repo = _strip_git_suffix(repo)
    if not slash or not owner or not repo or "/" in repo:
        raise SourceParseError(
            f"Invalid source: '{original}'. Expected format: {_SHORTHAND_FORMAT}"
        )

    return SourceLocator(provider=provider, owner=owner, repo=repo, ref=ref, path=path)
