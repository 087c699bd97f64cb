"""Read runner-provided environment variables and the event payload.

The runner describes each invocation through ``GITHUB_*`` variables and a
JSON payload at ``GITHUB_EVENT_PATH``. :class:`EnvironmentContext` holds both
explicitly so the normalisation stages can be driven by synthetic contexts in
tests; :class:`EnvironmentReader` turns the context into a flat
:class:`EnvironmentSnapshot` without applying any classification rules.

Usage
-----
>>> context = EnvironmentContext.from_environ(os.environ)
>>> snapshot = EnvironmentReader(context).read()
>>> snapshot.event_name
'push'

"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import os
import typing as typ
from pathlib import Path

import msgspec

from .errors import ConfigurationError


@dc.dataclass(frozen=True, slots=True)
class EnvironmentContext:
    """Environment variables and decoded event payload for one invocation."""

    environ: cabc.Mapping[str, str]
    event: cabc.Mapping[str, typ.Any] = dc.field(default_factory=dict)

    @classmethod
    def from_environ(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> EnvironmentContext:
        """Build a context, loading the payload named by ``GITHUB_EVENT_PATH``.

        Raises
        ------
        ConfigurationError
            If the payload file cannot be read or is not a JSON object.

        """
        env = dict(os.environ if environ is None else environ)
        event_path = env.get("GITHUB_EVENT_PATH", "").strip()
        if not event_path:
            return cls(environ=env)
        return cls(environ=env, event=load_event_payload(Path(event_path)))


def load_event_payload(path: Path) -> dict[str, typ.Any]:
    """Decode the event payload file at ``path``."""
    try:
        raw = path.read_bytes()
    except OSError as exc:
        msg = f"cannot read event payload {path}: {exc.strerror or exc}"
        raise ConfigurationError(msg) from exc
    try:
        payload = msgspec.json.decode(raw)
    except msgspec.DecodeError as exc:
        msg = f"event payload {path} is not valid JSON: {exc}"
        raise ConfigurationError(msg) from exc
    if not isinstance(payload, dict):
        msg = f"event payload {path} must be a JSON object"
        raise ConfigurationError(msg)
    return payload


@dc.dataclass(frozen=True, slots=True, kw_only=True)
class EnvironmentSnapshot:
    """Raw invocation fields, as read and before any normalisation."""

    repository: str
    visibility: str | None
    private: bool | None
    default_branch: str
    event_name: str
    event_action: str
    ref: str
    ref_type: str
    head_ref: str
    base_ref: str
    sha: str
    before: str
    head_commit_message: str | None
    head_commit_author: str | None
    pr_number: int | None
    pr_head_ref: str
    pr_base_ref: str
    pr_head_repo: str
    pr_base_repo: str
    pr_head_is_fork: bool
    pr_commits: int
    actor: str
    actor_id: int
    workflow: str
    run_id: int
    run_number: int
    run_attempt: int
    job: str
    workspace: str


def _lookup(payload: cabc.Mapping[str, typ.Any], *path: str) -> object:
    node: object = payload
    for key in path:
        if not isinstance(node, cabc.Mapping):
            return None
        node = node.get(key)
    return node


class EnvironmentReader:
    """Pure accessors over an :class:`EnvironmentContext`."""

    def __init__(self, context: EnvironmentContext) -> None:
        """Initialise the reader with the context to read from."""
        self._context = context

    def env(self, name: str) -> str:
        """Return the stripped value of an environment variable or ``""``."""
        return self._context.environ.get(name, "").strip()

    def env_int(self, name: str, default: int = 0) -> int:
        """Return an integer environment variable, ``default`` when unset."""
        raw = self.env(name)
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError as exc:
            msg = f"environment field {name} must be an integer, got {raw!r}"
            raise ConfigurationError(msg) from exc

    def payload_str(self, *path: str) -> str:
        """Return a string payload field or ``""``."""
        value = _lookup(self._context.event, *path)
        return value if isinstance(value, str) else ""

    def payload_int(self, *path: str) -> int | None:
        """Return an integer payload field or ``None``."""
        value = _lookup(self._context.event, *path)
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        return value

    def payload_bool(self, *path: str) -> bool | None:
        """Return a boolean payload field or ``None``."""
        value = _lookup(self._context.event, *path)
        return value if isinstance(value, bool) else None

    def read(self) -> EnvironmentSnapshot:
        """Collect every field the metadata stages consume."""
        head_commit_message = _lookup(self._context.event, "head_commit", "message")
        head_commit_author = _lookup(
            self._context.event, "head_commit", "author", "name"
        )
        actor_id = self.env_int("GITHUB_ACTOR_ID", default=-1)
        if actor_id < 0:
            actor_id = self.payload_int("sender", "id") or 0
        pr_number = self.payload_int("pull_request", "number")
        if pr_number is None and "pull_request" in self._context.event:
            pr_number = self.payload_int("number")

        return EnvironmentSnapshot(
            repository=self.env("GITHUB_REPOSITORY")
            or self.payload_str("repository", "full_name"),
            visibility=self.payload_str("repository", "visibility") or None,
            private=self.payload_bool("repository", "private"),
            default_branch=self.payload_str("repository", "default_branch"),
            event_name=self.env("GITHUB_EVENT_NAME"),
            event_action=self.payload_str("action"),
            ref=self.env("GITHUB_REF"),
            ref_type=self.env("GITHUB_REF_TYPE"),
            head_ref=self.env("GITHUB_HEAD_REF"),
            base_ref=self.env("GITHUB_BASE_REF"),
            sha=self.env("GITHUB_SHA"),
            before=self.payload_str("before"),
            head_commit_message=head_commit_message
            if isinstance(head_commit_message, str)
            else None,
            head_commit_author=head_commit_author
            if isinstance(head_commit_author, str)
            else None,
            pr_number=pr_number,
            pr_head_ref=self.payload_str("pull_request", "head", "ref"),
            pr_base_ref=self.payload_str("pull_request", "base", "ref"),
            pr_head_repo=self.payload_str("pull_request", "head", "repo", "full_name"),
            pr_base_repo=self.payload_str("pull_request", "base", "repo", "full_name"),
            pr_head_is_fork=bool(
                self.payload_bool("pull_request", "head", "repo", "fork")
            ),
            pr_commits=self.payload_int("pull_request", "commits") or 0,
            actor=self.env("GITHUB_ACTOR"),
            actor_id=actor_id,
            workflow=self.env("GITHUB_WORKFLOW"),
            run_id=self.env_int("GITHUB_RUN_ID"),
            run_number=self.env_int("GITHUB_RUN_NUMBER"),
            run_attempt=self.env_int("GITHUB_RUN_ATTEMPT"),
            job=self.env("GITHUB_JOB"),
            workspace=self.env("GITHUB_WORKSPACE"),
        )
