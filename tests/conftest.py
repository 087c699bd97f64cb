"""Shared fixtures for unit and feature tests."""

from __future__ import annotations

import errno
import os
import subprocess
from pathlib import Path

import pytest

from tests.helpers.git_fake import ScriptedGit


@pytest.fixture
def scripted_git(monkeypatch: pytest.MonkeyPatch) -> ScriptedGit:
    """Route every ``subprocess.run`` call to a scripted git."""
    script = ScriptedGit()
    monkeypatch.setattr(subprocess, "run", script)
    return script


@pytest.fixture
def runner_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Strip runner and input variables inherited from the host process."""
    for name in list(os.environ):
        if name.startswith(("GITHUB_", "INPUT_", "RUNNER_", "GHMETA_")):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def disk_full_on_second_write(monkeypatch: pytest.MonkeyPatch) -> list[Path]:
    """Let the first ``Path.write_text`` succeed and fail every later one."""
    attempted: list[Path] = []
    original = Path.write_text

    def write_text(self: Path, data: str, *args: object, **kwargs: object) -> int:
        attempted.append(self)
        if len(attempted) > 1:
            raise OSError(errno.ENOSPC, "No space left on device", str(self))
        return original(self, data, *args, **kwargs)  # type: ignore[arg-type]

    monkeypatch.setattr(Path, "write_text", write_text)
    return attempted
