"""API-based change detection through the GitHub REST API."""

from __future__ import annotations

import typing as typ

from .protocol import ChangeRequest, unique_paths

if typ.TYPE_CHECKING:
    from ghmeta.github.client import GitHubRestClient


class ApiDetector:
    """Changed files as reported by GitHub for a pull request or commit."""

    name = "github_api"

    def __init__(self, client: GitHubRestClient) -> None:
        """Initialise with an authenticated REST client."""
        self._client = client

    def detect(self, request: ChangeRequest) -> list[str]:
        """Return the pull request file list, or the head commit's files."""
        if request.pr_number is not None:
            paths = self._client.list_pull_request_files(
                request.owner, request.name, request.pr_number
            )
        else:
            paths = self._client.list_commit_files(
                request.owner, request.name, request.sha
            )
        return unique_paths(paths)
