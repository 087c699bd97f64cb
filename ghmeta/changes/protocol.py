"""ChangeDetector protocol and the request it consumes."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

ZERO_SHA = "0" * 40


@dc.dataclass(frozen=True, slots=True, kw_only=True)
class ChangeRequest:
    """What a detector needs to know to list the changed files.

    Attributes
    ----------
    owner, name
        Repository identity for API lookups.
    sha
        Head commit of the run.
    before
        Previous tip for push events; empty or all zeros for a new branch.
    base_ref
        Target branch of a pull request.
    pr_number
        Pull request number, ``None`` outside pull request runs.

    """

    owner: str
    name: str
    sha: str
    before: str = ""
    base_ref: str = ""
    pr_number: int | None = None

    @property
    def is_pull_request(self) -> bool:
        """Return whether the request describes a pull request."""
        return self.pr_number is not None

    @property
    def has_before(self) -> bool:
        """Return whether a usable previous tip is available."""
        return bool(self.before) and self.before != ZERO_SHA


@typ.runtime_checkable
class ChangeDetector(typ.Protocol):
    """Strategy that lists changed file paths in discovery order.

    Implementations return each path once, keeping the position of its
    first occurrence. An empty list is a valid result.

    Examples
    --------
    >>> from ghmeta.changes import DiffDetector, Git
    >>> isinstance(DiffDetector(Git()), ChangeDetector)
    True

    """

    name: str

    def detect(self, request: ChangeRequest) -> list[str]:
        """Return the changed paths for ``request``."""
        ...


def unique_paths(paths: typ.Iterable[str]) -> list[str]:
    """Drop blanks and repeats while keeping first-seen order."""
    return list(dict.fromkeys(path for path in paths if path))
