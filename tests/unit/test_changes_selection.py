"""Unit tests for changed-files strategy selection."""

from __future__ import annotations

import typing as typ

import httpx
import pytest

from ghmeta.changes import ApiDetector, DiffDetector, resolve_method, select_detector
from ghmeta.config import ActionConfig, ChangeDetectionMethod
from ghmeta.errors import ConfigurationError
from ghmeta.github import GitHubRestClient, GitHubRestConfig

if typ.TYPE_CHECKING:
    from pathlib import Path


class TestResolveMethod:
    """Tests for resolve_method."""

    @pytest.mark.parametrize(
        ("method", "token", "expected"),
        [
            pytest.param(
                ChangeDetectionMethod.AUTO,
                "",
                ChangeDetectionMethod.GIT,
                id="auto-without-token",
            ),
            pytest.param(
                ChangeDetectionMethod.AUTO,
                "ghp_x",
                ChangeDetectionMethod.GITHUB_API,
                id="auto-with-token",
            ),
            pytest.param(
                ChangeDetectionMethod.GIT,
                "ghp_x",
                ChangeDetectionMethod.GIT,
                id="git-override",
            ),
            pytest.param(
                ChangeDetectionMethod.GITHUB_API,
                "ghp_x",
                ChangeDetectionMethod.GITHUB_API,
                id="api-override",
            ),
        ],
    )
    def test_resolution(
        self,
        method: ChangeDetectionMethod,
        token: str,
        expected: ChangeDetectionMethod,
    ) -> None:
        """Credentials select the API unless overridden."""
        config = ActionConfig(change_detection=method, github_token=token)
        assert resolve_method(config) is expected

    def test_api_without_token_raises(self) -> None:
        """Forcing the API without a credential is a configuration error."""
        config = ActionConfig(change_detection=ChangeDetectionMethod.GITHUB_API)
        with pytest.raises(ConfigurationError, match="github_token"):
            resolve_method(config)


class TestSelectDetector:
    """Tests for select_detector."""

    def test_git_detector_uses_fetch_depth(self, tmp_path: Path) -> None:
        """The diff detector receives the configured depth bound."""
        detector = select_detector(ActionConfig(git_fetch_depth=30), workspace=tmp_path)
        assert isinstance(detector, DiffDetector)
        assert detector._max_depth == 30
        assert detector._git._cwd == tmp_path

    def test_api_detector_reuses_client(self) -> None:
        """A supplied REST client is used as-is."""
        http_client = httpx.Client(
            base_url="https://api.example.test",
            transport=httpx.MockTransport(lambda _r: httpx.Response(200, json=[])),
        )
        client = GitHubRestClient(
            GitHubRestConfig(token="ghp_x"), http_client=http_client
        )

        detector = select_detector(ActionConfig(github_token="ghp_x"), client=client)

        assert isinstance(detector, ApiDetector)
        assert detector._client is client
