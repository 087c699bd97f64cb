"""Strategy selection for changed-file detection."""

from __future__ import annotations

import typing as typ

from ghmeta.config import ChangeDetectionMethod
from ghmeta.errors import ConfigurationError
from ghmeta.github.client import GitHubRestClient, GitHubRestConfig

from .api import ApiDetector
from .git import DiffDetector, Git

if typ.TYPE_CHECKING:
    from pathlib import Path

    from ghmeta.config import ActionConfig

    from .protocol import ChangeDetector


def resolve_method(config: ActionConfig) -> ChangeDetectionMethod:
    """Return the concrete strategy for ``config``.

    An explicit ``git`` or ``github_api`` wins; ``auto`` picks the API when a
    credential is present and the local diff otherwise.

    Raises
    ------
    ConfigurationError
        If ``github_api`` is requested without a credential.

    """
    method = config.change_detection
    if method is ChangeDetectionMethod.GITHUB_API and not config.has_token:
        raise ConfigurationError.token_required()
    if method is ChangeDetectionMethod.AUTO:
        return (
            ChangeDetectionMethod.GITHUB_API
            if config.has_token
            else ChangeDetectionMethod.GIT
        )
    return method


def select_detector(
    config: ActionConfig,
    *,
    workspace: Path | None = None,
    client: GitHubRestClient | None = None,
) -> ChangeDetector:
    """Build the detector chosen by :func:`resolve_method`.

    Parameters
    ----------
    config
        Validated action inputs.
    workspace
        Working tree for the diff strategy; the process cwd when ``None``.
    client
        REST client to reuse for the API strategy; one is created from
        ``config`` when omitted.

    """
    if resolve_method(config) is ChangeDetectionMethod.GIT:
        return DiffDetector(Git(workspace), max_depth=config.git_fetch_depth)
    if client is None:
        client = GitHubRestClient(
            GitHubRestConfig(token=config.github_token, api_url=config.api_url)
        )
    return ApiDetector(client)
