"""Branch and tag resolution."""

from __future__ import annotations

from ghmeta.errors import ConfigurationError

from .events import TAG_REF_PREFIX, is_tag_ref
from .models import RefInfo

BRANCH_REF_PREFIX = "refs/heads/"
MAIN_BRANCH_NAMES = frozenset({"main", "master"})


def _branch_from_ref(ref: str) -> str:
    if ref.startswith(BRANCH_REF_PREFIX):
        return ref.removeprefix(BRANCH_REF_PREFIX)
    if ref.startswith("refs/"):
        # refs/<namespace>/<rest>, e.g. refs/pull/12/merge
        _, _, rest = ref.removeprefix("refs/").partition("/")
        return rest or ref
    return ref


def resolve_ref(
    ref: str,
    *,
    ref_type: str = "",
    default_branch: str = "",
    pull_request_head: str = "",
    is_pull_request: bool = False,
) -> RefInfo:
    """Split a ref into branch or tag and derive the branch flags.

    Parameters
    ----------
    ref
        Full ref, e.g. ``refs/heads/main`` or ``refs/tags/v1.2.3``.
    ref_type
        ``branch`` or ``tag`` when known.
    default_branch
        Repository default branch; empty disables ``is_default_branch``.
    pull_request_head
        Source branch of a pull request, used instead of the synthetic
        ``refs/pull/<n>/merge`` ref.
    is_pull_request
        Whether the event was classified as a pull request.

    Raises
    ------
    ConfigurationError
        If no branch or tag name can be derived.

    """
    if is_pull_request:
        if not pull_request_head:
            raise ConfigurationError.missing_field("GITHUB_HEAD_REF")
        branch_name = pull_request_head
    elif not ref:
        raise ConfigurationError.missing_field("GITHUB_REF")
    elif is_tag_ref(ref, ref_type):
        tag_name = ref.removeprefix(TAG_REF_PREFIX)
        if not tag_name:
            raise ConfigurationError.missing_field("GITHUB_REF")
        return RefInfo(tag_name=tag_name)
    else:
        branch_name = _branch_from_ref(ref)
        if not branch_name:
            raise ConfigurationError.missing_field("GITHUB_REF")

    return RefInfo(
        branch_name=branch_name,
        is_default_branch=bool(default_branch) and branch_name == default_branch,
        is_main_branch=branch_name in MAIN_BRANCH_NAMES,
    )
