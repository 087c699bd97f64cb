"""GitHub REST client for changed-file lookups."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses
import typing as typ

import httpx

from ghmeta.config import DEFAULT_API_URL
from ghmeta.errors import AuthenticationError, ConfigurationError, GitHubAPIError
from ghmeta.logging import get_logger, log_debug

logger = get_logger(__name__)

_HTTP_ERROR_STATUS_THRESHOLD = 400
_AUTH_FAILURE_STATUSES = frozenset({401, 403})
_MAX_PAGE_SIZE = 100


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Configuration for the GitHub REST API client."""

    token: str = dataclasses.field(repr=False)
    api_url: str = DEFAULT_API_URL
    timeout_s: float = 20.0
    user_agent: str = "ghmeta/0.1"
    per_page: int = _MAX_PAGE_SIZE


def _is_rate_limited(response: httpx.Response) -> bool:
    return response.headers.get("x-ratelimit-remaining") == "0"


def _filenames(entries: object, *, field: str) -> list[str]:
    if not isinstance(entries, list):
        raise GitHubAPIError.unexpected_shape(field)
    names: list[str] = []
    for entry in entries:
        if isinstance(entry, dict):
            filename = entry.get("filename")
            if isinstance(filename, str):
                names.append(filename)
    return names


class GitHubRestClient:
    """Synchronous REST client with page-number pagination."""

    def __init__(
        self,
        config: GitHubRestConfig,
        *,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialise the client with the provided API configuration."""
        if not config.token.strip():
            raise ConfigurationError.token_required()
        if not 1 <= config.per_page <= _MAX_PAGE_SIZE:
            msg = f"per_page must be between 1 and {_MAX_PAGE_SIZE}"
            raise ConfigurationError(msg)

        self._config = config
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=config.api_url.rstrip("/"),
            timeout=config.timeout_s,
            headers={
                "Authorization": f"Bearer {config.token}",
                "User-Agent": config.user_agent,
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
        )

    def close(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> GitHubRestClient:
        """Return the client for use as a context manager."""
        return self

    def __exit__(self, *exc_info: object) -> None:
        """Close owned resources on context exit."""
        self.close()

    def list_pull_request_files(
        self, owner: str, name: str, number: int
    ) -> list[str]:
        """Return filenames changed by a pull request, across all pages."""
        path = f"/repos/{owner}/{name}/pulls/{number}/files"

        def extract(payload: object) -> list[str]:
            return _filenames(payload, field="files")

        return list(self._paginate(path, extract))

    def list_commit_files(self, owner: str, name: str, sha: str) -> list[str]:
        """Return filenames changed by a commit, across all pages."""
        path = f"/repos/{owner}/{name}/commits/{sha}"

        def extract(payload: object) -> list[str]:
            if not isinstance(payload, dict):
                raise GitHubAPIError.unexpected_shape("commit")
            return _filenames(payload.get("files"), field="commit.files")

        return list(self._paginate(path, extract))

    def _paginate(
        self,
        path: str,
        extract: cabc.Callable[[object], list[str]],
    ) -> typ.Iterator[str]:
        """Yield extracted items page by page until a short page is returned."""
        page = 1
        while True:
            payload = self._get(
                path, {"per_page": self._config.per_page, "page": page}
            )
            items = extract(payload)
            log_debug(
                logger, "[github] %s page %d -> %d items", path, page, len(items)
            )
            yield from items
            if len(items) < self._config.per_page:
                return
            page += 1

    def _get(self, path: str, params: dict[str, typ.Any]) -> object:
        """Issue a GET request and return the decoded JSON body."""
        response = self._client.get(path, params=params)
        if response.status_code in _AUTH_FAILURE_STATUSES and not _is_rate_limited(
            response
        ):
            raise AuthenticationError(response.status_code)
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error(response.status_code, path)
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubAPIError.unexpected_shape("json body") from exc
