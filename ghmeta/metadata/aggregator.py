"""Assemble the metadata record from an environment snapshot.

The aggregator either returns a complete :class:`MetadataRecord` or raises;
there is no partially populated result. Each stage echoes its intermediate
values at DEBUG level so a failing run shows how far it got.
"""

from __future__ import annotations

import collections.abc as cabc
import re
import typing as typ

from ghmeta.changes.protocol import ChangeRequest
from ghmeta.common.slug import parse_repo_slug, repo_slug
from ghmeta.errors import ConfigurationError
from ghmeta.logging import get_logger, log_stage_values

from .cache import generate_cache_keys
from .events import classify_event
from .models import (
    ActorInfo,
    ChangedFiles,
    CommitInfo,
    EventInfo,
    MetadataRecord,
    PullRequestInfo,
    RefInfo,
    RepositoryInfo,
    Visibility,
    WorkflowInfo,
)
from .refs import resolve_ref

if typ.TYPE_CHECKING:
    from ghmeta.changes.protocol import ChangeDetector
    from ghmeta.environment import EnvironmentSnapshot

logger = get_logger(__name__)

SHA_PATTERN = re.compile(r"^[0-9a-f]{40}$")
SHORT_SHA_LENGTH = 7

CommitLookup = cabc.Callable[[str], tuple[str, str] | None]


def resolve_visibility(visibility: str | None, private: bool | None) -> Visibility:
    """Map payload visibility fields onto :class:`Visibility`.

    ``repository.visibility`` wins; ``repository.private`` is the fallback;
    with neither the result is ``UNKNOWN``.
    """
    if visibility:
        try:
            return Visibility(visibility.lower())
        except ValueError:
            return Visibility.UNKNOWN
    if private is None:
        return Visibility.UNKNOWN
    return Visibility.PRIVATE if private else Visibility.PUBLIC


def first_line(text: str) -> str:
    """Return the first line of a possibly multi-line message."""
    return text.splitlines()[0] if text else ""


def normalize_sha(sha: str) -> str:
    """Validate a full commit SHA and return it in lowercase."""
    if not sha:
        raise ConfigurationError.missing_field("GITHUB_SHA")
    lowered = sha.lower()
    if SHA_PATTERN.match(lowered) is None:
        raise ConfigurationError.invalid_input(
            "GITHUB_SHA", sha, "a 40-character hexadecimal commit SHA"
        )
    return lowered


class MetadataAggregator:
    """Combine classifier, resolvers, detector, and direct fields."""

    def __init__(
        self,
        snapshot: EnvironmentSnapshot,
        *,
        detector: ChangeDetector,
        commit_lookup: CommitLookup | None = None,
    ) -> None:
        """Initialise the aggregator.

        Parameters
        ----------
        snapshot
            Raw fields read from the environment.
        detector
            Strategy used for the changed-files group.
        commit_lookup
            Fallback for the commit subject and author when the payload has
            no ``head_commit``; typically ``Git.commit_summary``.

        """
        self._snapshot = snapshot
        self._detector = detector
        self._commit_lookup = commit_lookup

    def build(self) -> MetadataRecord:
        """Return the complete record or raise the first stage failure."""
        repository = self._repository()
        event = self._event()
        ref = self._ref(event)
        commit = self._commit()
        pull_request = self._pull_request(event)
        actor = self._actor()
        cache = generate_cache_keys(
            repository.owner, repository.name, ref.name, commit.sha_short
        )
        log_stage_values(logger, "cache", {"key": cache.key})
        changed_files = self._changed_files(repository, event, commit, pull_request)

        return MetadataRecord(
            repository=repository,
            event=event,
            ref=ref,
            commit=commit,
            pull_request=pull_request,
            actor=actor,
            cache=cache,
            changed_files=changed_files,
            workflow=self._workflow(),
        )

    def _repository(self) -> RepositoryInfo:
        snapshot = self._snapshot
        if not snapshot.repository:
            raise ConfigurationError.missing_field("GITHUB_REPOSITORY")
        try:
            owner, name = parse_repo_slug(snapshot.repository)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        visibility = resolve_visibility(snapshot.visibility, snapshot.private)
        log_stage_values(
            logger,
            "repository",
            {"slug": snapshot.repository, "visibility": visibility.value},
        )
        return RepositoryInfo(
            owner=owner,
            name=name,
            full_name=repo_slug(owner, name),
            is_public=visibility is Visibility.PUBLIC,
            is_private=visibility in {Visibility.PRIVATE, Visibility.INTERNAL},
            visibility=visibility,
            default_branch=snapshot.default_branch,
        )

    def _event(self) -> EventInfo:
        snapshot = self._snapshot
        if not snapshot.event_name:
            raise ConfigurationError.missing_field("GITHUB_EVENT_NAME")
        event = classify_event(
            snapshot.event_name,
            ref=snapshot.ref,
            ref_type=snapshot.ref_type,
            action=snapshot.event_action,
        )
        log_stage_values(
            logger,
            "event",
            {"trigger": snapshot.event_name, "name": event.name.value},
        )
        return event

    def _ref(self, event: EventInfo) -> RefInfo:
        snapshot = self._snapshot
        ref = resolve_ref(
            snapshot.ref,
            ref_type=snapshot.ref_type,
            default_branch=snapshot.default_branch,
            pull_request_head=snapshot.head_ref or snapshot.pr_head_ref,
            is_pull_request=event.is_pull_request,
        )
        log_stage_values(
            logger,
            "ref",
            {"ref": snapshot.ref, "branch": ref.branch_name, "tag": ref.tag_name},
        )
        return ref

    def _commit(self) -> CommitInfo:
        snapshot = self._snapshot
        sha = normalize_sha(snapshot.sha)
        message = snapshot.head_commit_message
        author = snapshot.head_commit_author
        if message is None and self._commit_lookup is not None:
            summary = self._commit_lookup(sha)
            if summary is not None:
                message, author = summary
        commit = CommitInfo(
            sha=sha,
            sha_short=sha[:SHORT_SHA_LENGTH],
            message=first_line(message or ""),
            author=author or "",
        )
        log_stage_values(logger, "commit", {"sha": sha, "message": commit.message})
        return commit

    def _pull_request(self, event: EventInfo) -> PullRequestInfo:
        if not event.is_pull_request:
            return PullRequestInfo()
        snapshot = self._snapshot
        is_fork = snapshot.pr_head_is_fork or (
            bool(snapshot.pr_head_repo)
            and bool(snapshot.pr_base_repo)
            and snapshot.pr_head_repo != snapshot.pr_base_repo
        )
        pull_request = PullRequestInfo(
            number=snapshot.pr_number,
            source_branch=snapshot.pr_head_ref or snapshot.head_ref,
            target_branch=snapshot.pr_base_ref or snapshot.base_ref,
            is_fork=is_fork,
            commits_count=snapshot.pr_commits,
        )
        log_stage_values(
            logger,
            "pull_request",
            {"number": pull_request.number, "is_fork": pull_request.is_fork},
        )
        return pull_request

    def _actor(self) -> ActorInfo:
        snapshot = self._snapshot
        if not snapshot.actor:
            raise ConfigurationError.missing_field("GITHUB_ACTOR")
        return ActorInfo(name=snapshot.actor, id=snapshot.actor_id)

    def _changed_files(
        self,
        repository: RepositoryInfo,
        event: EventInfo,
        commit: CommitInfo,
        pull_request: PullRequestInfo,
    ) -> ChangedFiles:
        request = ChangeRequest(
            owner=repository.owner,
            name=repository.name,
            sha=commit.sha,
            before=self._snapshot.before if event.name == "push" else "",
            base_ref=pull_request.target_branch,
            pr_number=pull_request.number,
        )
        paths = self._detector.detect(request)
        log_stage_values(
            logger,
            "changed_files",
            {"strategy": self._detector.name, "count": len(paths)},
        )
        return ChangedFiles.from_paths(paths)

    def _workflow(self) -> WorkflowInfo:
        snapshot = self._snapshot
        return WorkflowInfo(
            name=snapshot.workflow,
            run_id=snapshot.run_id,
            run_number=snapshot.run_number,
            run_attempt=snapshot.run_attempt,
            job=snapshot.job,
        )
