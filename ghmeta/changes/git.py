"""Diff-based change detection against the local clone.

Checkouts on the runner are usually shallow, so the base of a comparison is
often missing. :class:`DiffDetector` widens the history in fixed steps until
the base appears or the configured depth is reached::

    fetch --depth=step   -> merge-base? -> fetch --deepen=step -> ...
                                          -> InsufficientHistoryError

Examples
--------
List files changed by a pull request in the current checkout::

    detector = DiffDetector(Git(Path.cwd()), max_depth=15)
    detector.detect(ChangeRequest(owner="o", name="r", sha=sha, base_ref="main",
                                  pr_number=7))

"""

from __future__ import annotations

import subprocess
import typing as typ

from ghmeta.config import DEFAULT_FETCH_DEPTH
from ghmeta.errors import ConfigurationError, GitCommandError, InsufficientHistoryError
from ghmeta.logging import get_logger, log_debug, log_info

from .protocol import ChangeRequest, unique_paths

if typ.TYPE_CHECKING:
    from pathlib import Path

logger = get_logger(__name__)

DEFAULT_DEEPEN_STEP = 5
DEFAULT_REMOTE = "origin"
_COMMAND_NOT_FOUND = 127


class Git:
    """Thin wrapper over the ``git`` executable for one working tree."""

    def __init__(self, cwd: Path | None = None) -> None:
        """Initialise with the working tree to operate in."""
        self._cwd = cwd

    def run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run ``git`` with ``args``.

        Raises
        ------
        GitCommandError
            If ``check`` is set and git exits non-zero.

        """
        log_debug(logger, "[git] %s", " ".join(args))
        command = ["git", *args]
        try:
            # S603/S607: git via PATH is standard; arguments never pass through a shell
            result = subprocess.run(  # noqa: S603
                command,  # noqa: S607
                cwd=self._cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            # Missing git binary or missing working tree.
            result = subprocess.CompletedProcess(
                command, _COMMAND_NOT_FOUND, stdout="", stderr=str(exc)
            )
        if check and result.returncode != 0:
            raise GitCommandError(args, result.returncode, result.stderr or "")
        return result

    def succeeds(self, *args: str) -> bool:
        """Return whether ``git`` exits zero for ``args``."""
        return self.run(*args, check=False).returncode == 0

    def is_shallow(self) -> bool:
        """Return whether the clone has a shallow boundary."""
        result = self.run("rev-parse", "--is-shallow-repository")
        return result.stdout.strip() == "true"

    def has_commit(self, rev: str) -> bool:
        """Return whether ``rev`` resolves to a commit in the local history."""
        return self.succeeds("cat-file", "-e", f"{rev}^{{commit}}")

    def merge_base(self, left: str, right: str) -> str | None:
        """Return the merge base of two revisions, ``None`` if unreachable."""
        result = self.run("merge-base", left, right, check=False)
        sha = result.stdout.strip()
        return sha if result.returncode == 0 and sha else None

    def fetch(
        self,
        remote: str,
        *refspecs: str,
        depth: int | None = None,
        deepen: int | None = None,
    ) -> None:
        """Fetch from ``remote`` with an optional depth or deepen step."""
        args = ["fetch", "--no-tags", "--quiet"]
        if depth is not None:
            args.append(f"--depth={depth}")
        if deepen is not None:
            args.append(f"--deepen={deepen}")
        self.run(*args, remote, *refspecs)

    def diff_names(self, base: str, head: str) -> list[str]:
        """Return paths that differ between two commits."""
        result = self.run("diff", "--name-only", "-z", base, head)
        return _split_nul(result.stdout)

    def commit_files(self, rev: str) -> list[str]:
        """Return paths touched by a single commit, root commits included."""
        result = self.run(
            "diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "--root", rev
        )
        return _split_nul(result.stdout)

    def commit_summary(self, rev: str) -> tuple[str, str] | None:
        """Return ``(subject, author name)`` or ``None`` if ``rev`` is absent."""
        result = self.run("log", "-1", "--format=%s%x00%an", rev, check=False)
        if result.returncode != 0:
            return None
        subject, _, author = result.stdout.rstrip("\n").partition("\0")
        return subject, author


def _split_nul(output: str) -> list[str]:
    return unique_paths(output.split("\0"))


class DiffDetector:
    """Changed files from ``git diff`` with bounded history widening."""

    name = "git"

    def __init__(
        self,
        git: Git,
        *,
        max_depth: int = DEFAULT_FETCH_DEPTH,
        step: int = DEFAULT_DEEPEN_STEP,
        remote: str = DEFAULT_REMOTE,
    ) -> None:
        """Initialise with the git wrapper and the widening policy.

        Raises
        ------
        ConfigurationError
            If ``max_depth`` or ``step`` is not positive.

        """
        if max_depth < 1:
            raise ConfigurationError.invalid_input(
                "git_fetch_depth", str(max_depth), "a positive integer"
            )
        if step < 1:
            msg = f"deepen step must be positive, got {step}"
            raise ConfigurationError(msg)
        self._git = git
        self._max_depth = max_depth
        self._step = step
        self._remote = remote

    def detect(self, request: ChangeRequest) -> list[str]:
        """Return changed paths for a pull request, a push, or a single commit."""
        if request.is_pull_request and request.base_ref:
            base = self._pull_request_base(request.base_ref)
            return self._git.diff_names(base, "HEAD")
        if request.has_before:
            self._ensure_commit(request.before)
            return self._git.diff_names(request.before, request.sha)
        return self._git.commit_files(request.sha)

    def _next_increment(self, depth: int) -> int:
        return min(self._step, self._max_depth - depth)

    def _pull_request_base(self, base_ref: str) -> str:
        tracking = f"{self._remote}/{base_ref}"
        refspec = f"+refs/heads/{base_ref}:refs/remotes/{tracking}"
        depth = min(self._step, self._max_depth)
        # --depth on a complete clone would truncate it
        shallow = self._git.is_shallow()
        self._git.fetch(self._remote, refspec, depth=depth if shallow else None)

        while True:
            merge_base = self._git.merge_base(tracking, "HEAD")
            if merge_base is not None:
                log_debug(logger, "[changed_files] merge base %s", merge_base)
                return merge_base
            if not self._git.is_shallow():
                raise InsufficientHistoryError(tracking, depth=None)
            if depth >= self._max_depth:
                raise InsufficientHistoryError(tracking, depth=depth)
            increment = self._next_increment(depth)
            log_info(
                logger,
                "Merge base with %s not found at depth %d; deepening by %d",
                tracking,
                depth,
                increment,
            )
            self._git.fetch(self._remote, refspec, deepen=increment)
            depth += increment

    def _ensure_commit(self, rev: str) -> None:
        depth = 0
        while not self._git.has_commit(rev):
            if not self._git.is_shallow():
                raise InsufficientHistoryError(rev, depth=None)
            if depth >= self._max_depth:
                raise InsufficientHistoryError(rev, depth=depth)
            increment = self._next_increment(depth)
            log_info(
                logger, "Commit %s not in history; deepening by %d", rev, increment
            )
            self._git.fetch(self._remote, deepen=increment)
            depth += increment
