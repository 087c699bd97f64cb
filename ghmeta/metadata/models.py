"""Typed metadata record produced once per action run.

Field declaration order is the serialised key order, so fields must only be
appended, never reordered.
"""

from __future__ import annotations

import enum

import msgspec


class Visibility(enum.StrEnum):
    """Repository visibility as reported by the event payload."""

    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


class EventName(enum.StrEnum):
    """Canonical event categories."""

    PUSH = "push"
    PULL_REQUEST = "pull_request"
    RELEASE = "release"
    SCHEDULE = "schedule"
    WORKFLOW_DISPATCH = "workflow_dispatch"


class RepositoryInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Repository identity and visibility.

    Attributes
    ----------
    owner : str
        Organisation or user that owns the repository.
    name : str
        Repository name.
    full_name : str
        ``owner/name`` slug.
    is_public : bool
        ``True`` only when visibility is public.
    is_private : bool
        ``True`` for private and internal repositories.
    visibility : Visibility
        Tri-state (plus internal) visibility; ``unknown`` is the only case
        where both flags are ``False``.
    default_branch : str
        Configured default branch, empty when unknown.

    """

    owner: str
    name: str
    full_name: str
    is_public: bool
    is_private: bool
    visibility: Visibility = Visibility.UNKNOWN
    default_branch: str = ""


class EventInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Canonical event category and its flags."""

    name: EventName
    is_tag_push: bool = False
    is_branch_push: bool = False
    is_pull_request: bool = False
    is_release: bool = False
    is_schedule: bool = False
    is_workflow_dispatch: bool = False
    tag_push_event: bool = False
    trigger: str = ""
    action: str = ""


class RefInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Branch or tag the run was triggered for; exactly one is non-empty."""

    branch_name: str = ""
    tag_name: str = ""
    is_default_branch: bool = False
    is_main_branch: bool = False

    @property
    def name(self) -> str:
        """Return whichever of the branch or tag name is set."""
        return self.tag_name or self.branch_name


class CommitInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Head commit of the run."""

    sha: str
    sha_short: str
    message: str = ""
    author: str = ""


class PullRequestInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Pull request details; defaults describe a non-PR run."""

    number: int | None = None
    source_branch: str = ""
    target_branch: str = ""
    is_fork: bool = False
    commits_count: int = 0


class ActorInfo(msgspec.Struct, kw_only=True, frozen=True):
    """User or app that triggered the run."""

    name: str
    id: int = 0


class CacheInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Cache keys derived from repository, ref, and commit."""

    key: str
    restore_key: str


class ChangedFiles(msgspec.Struct, kw_only=True, frozen=True):
    """Changed paths joined by single spaces, in discovery order.

    Paths containing spaces cannot be recovered from ``files``; ``count``
    remains the number of paths that were detected.
    """

    count: int = 0
    files: str = ""

    @classmethod
    def from_paths(cls, paths: list[str] | tuple[str, ...]) -> ChangedFiles:
        """Build the group from an ordered path sequence."""
        return cls(count=len(paths), files=" ".join(paths))


class WorkflowInfo(msgspec.Struct, kw_only=True, frozen=True):
    """Workflow run identifiers."""

    name: str = ""
    run_id: int = 0
    run_number: int = 0
    run_attempt: int = 0
    job: str = ""


class MetadataRecord(msgspec.Struct, kw_only=True, frozen=True):
    """Aggregate metadata for one action run."""

    repository: RepositoryInfo
    event: EventInfo
    ref: RefInfo
    commit: CommitInfo
    pull_request: PullRequestInfo
    actor: ActorInfo
    cache: CacheInfo
    changed_files: ChangedFiles
    workflow: WorkflowInfo = msgspec.field(default_factory=WorkflowInfo)
