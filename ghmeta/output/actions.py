"""Write step outputs and the job summary through the runner's command files.

The runner exposes ``GITHUB_OUTPUT`` and ``GITHUB_STEP_SUMMARY`` as paths to
append to. Single-line values use ``name=value``; multi-line values use the
heredoc form with a random delimiter that does not occur in the value::

    metadata_yaml<<ghmeta_3f9a0c1d2b4e5f60
    repository:
      owner: octo
    ghmeta_3f9a0c1d2b4e5f60

Outside a runner both functions fall back to a text stream (stdout).
"""

from __future__ import annotations

import secrets
import sys
import typing as typ

from ghmeta.errors import ArtifactWriteError

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

_DELIMITER_PREFIX = "ghmeta_"


def heredoc_delimiter(value: str) -> str:
    """Return a delimiter line that is absent from ``value``."""
    while True:
        delimiter = f"{_DELIMITER_PREFIX}{secrets.token_hex(8)}"
        if delimiter not in value:
            return delimiter


def format_output(name: str, value: str) -> str:
    """Return the command-file text for one output, newline-terminated."""
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"
    delimiter = heredoc_delimiter(value)
    body = value if value.endswith("\n") else f"{value}\n"
    return f"{name}<<{delimiter}\n{body}{delimiter}\n"


def format_outputs(outputs: cabc.Mapping[str, str]) -> str:
    """Return the command-file text for every output in ``outputs``."""
    return "".join(format_output(name, value) for name, value in outputs.items())


def _append(path: Path, text: str) -> None:
    try:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(text)
    except OSError as exc:
        raise ArtifactWriteError.unwritable(path, exc, stage="outputs") from exc


def write_outputs(
    outputs: cabc.Mapping[str, str],
    path: Path | None,
    *,
    stream: typ.TextIO | None = None,
) -> None:
    """Append ``outputs`` to the ``GITHUB_OUTPUT`` file in a single write.

    When ``path`` is ``None`` the same text is written to ``stream``, which
    defaults to stdout.
    """
    text = format_outputs(outputs)
    if path is None:
        (stream or sys.stdout).write(text)
        return
    _append(path, text)


def append_step_summary(
    markdown: str,
    path: Path | None,
    *,
    stream: typ.TextIO | None = None,
) -> None:
    """Append Markdown to the ``GITHUB_STEP_SUMMARY`` file."""
    text = markdown if markdown.endswith("\n") else f"{markdown}\n"
    if path is None:
        (stream or sys.stdout).write(text)
        return
    _append(path, text)
