"""GitHub REST access used by the API change detector."""

from __future__ import annotations

from .client import GitHubRestClient, GitHubRestConfig

__all__ = ["GitHubRestClient", "GitHubRestConfig"]
