"""Unit tests for ref resolution and cache keys."""

from __future__ import annotations

import pytest

from ghmeta.errors import ConfigurationError
from ghmeta.metadata.cache import generate_cache_keys
from ghmeta.metadata.refs import resolve_ref


class TestResolveRef:
    """Tests for resolve_ref."""

    def test_default_main_branch(self) -> None:
        """A push to the default branch named main sets both flags."""
        ref = resolve_ref("refs/heads/main", default_branch="main")
        assert ref.branch_name == "main"
        assert ref.tag_name == ""
        assert ref.is_default_branch is True
        assert ref.is_main_branch is True

    def test_master_is_main_branch(self) -> None:
        """master counts as a main branch even when not the default."""
        ref = resolve_ref("refs/heads/master", default_branch="develop")
        assert ref.is_main_branch is True
        assert ref.is_default_branch is False

    def test_feature_branch_with_slashes(self) -> None:
        """Only the refs/heads/ prefix is stripped."""
        ref = resolve_ref("refs/heads/feature/a/b", default_branch="main")
        assert ref.branch_name == "feature/a/b"
        assert ref.is_default_branch is False
        assert ref.is_main_branch is False

    def test_unknown_default_branch(self) -> None:
        """Without a default branch is_default_branch is false."""
        ref = resolve_ref("refs/heads/main")
        assert ref.is_default_branch is False

    def test_tag_ref(self) -> None:
        """Tag refs populate tag_name only."""
        ref = resolve_ref("refs/tags/v1.2.3", default_branch="main")
        assert ref.tag_name == "v1.2.3"
        assert ref.branch_name == ""
        assert ref.is_default_branch is False
        assert ref.name == "v1.2.3"

    def test_pull_request_uses_head_branch(self) -> None:
        """Pull requests report the source branch, not the merge ref."""
        ref = resolve_ref(
            "refs/pull/7/merge",
            default_branch="main",
            pull_request_head="feature/login",
            is_pull_request=True,
        )
        assert ref.branch_name == "feature/login"
        assert ref.tag_name == ""

    def test_pull_request_without_head_raises(self) -> None:
        """A pull request without a head branch is malformed."""
        with pytest.raises(ConfigurationError, match="GITHUB_HEAD_REF"):
            resolve_ref("refs/pull/7/merge", is_pull_request=True)

    def test_empty_ref_raises(self) -> None:
        """A missing ref cannot be resolved."""
        with pytest.raises(ConfigurationError, match="GITHUB_REF"):
            resolve_ref("")

    @pytest.mark.parametrize(
        ("ref", "ref_type"),
        [("refs/tags/", ""), ("refs/heads/", ""), ("refs/tags/", "tag")],
    )
    def test_bare_prefix_raises(self, ref: str, ref_type: str) -> None:
        """A ref prefix with no name leaves neither branch nor tag."""
        with pytest.raises(ConfigurationError, match="GITHUB_REF"):
            resolve_ref(ref, ref_type=ref_type)

    @pytest.mark.parametrize(
        "ref",
        ["refs/heads/main", "refs/tags/v1", "refs/heads/x", "refs/tags/nightly"],
    )
    def test_exactly_one_name_is_set(self, ref: str) -> None:
        """Branch and tag names are mutually exclusive."""
        resolved = resolve_ref(ref)
        assert bool(resolved.branch_name) != bool(resolved.tag_name)


class TestGenerateCacheKeys:
    """Tests for generate_cache_keys."""

    def test_key_layout(self) -> None:
        """Keys join owner, name, ref, and short SHA with dashes."""
        cache = generate_cache_keys("octo", "reef", "main", "a1b2c3d")
        assert cache.key == "octo-reef-main-a1b2c3d"
        assert cache.restore_key == "octo-reef-main-"

    @pytest.mark.parametrize("ref_name", ["main", "feature/login", "v1.2.3", ""])
    def test_restore_key_is_prefix(self, ref_name: str) -> None:
        """The restore key prefix-matches the key."""
        cache = generate_cache_keys("octo", "reef", ref_name, "a1b2c3d")
        assert cache.key.startswith(cache.restore_key)

    def test_deterministic(self) -> None:
        """Identical inputs give identical keys."""
        first = generate_cache_keys("octo", "reef", "main", "a1b2c3d")
        second = generate_cache_keys("octo", "reef", "main", "a1b2c3d")
        assert first == second
