"""Markdown renderer for the job step summary.

Usage
-----
>>> from ghmeta.output.markdown import render_summary_markdown
>>> md = render_summary_markdown(record)

"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from ghmeta.metadata.models import MetadataRecord

MAX_LISTED_FILES = 50


def _yes_no(value: bool) -> str:  # noqa: FBT001
    return "yes" if value else "no"


def _code(value: object) -> str:
    text = str(value)
    return f"`{text}`" if text else "-"


def _render_title(lines: list[str], record: MetadataRecord) -> None:
    lines.append(f"# Repository metadata: {record.repository.full_name}")
    lines.append("")


def _render_table(lines: list[str], rows: list[tuple[str, str]]) -> None:
    lines.append("| Field | Value |")
    lines.append("| --- | --- |")
    lines.extend(f"| {field} | {value} |" for field, value in rows)
    lines.append("")


def _render_overview(lines: list[str], record: MetadataRecord) -> None:
    ref = record.ref
    rows = [
        ("Event", _code(record.event.name.value)),
        ("Trigger", _code(record.event.trigger)),
        ("Visibility", record.repository.visibility.value),
        ("Branch", _code(ref.branch_name)),
        ("Tag", _code(ref.tag_name)),
        ("Default branch", _yes_no(ref.is_default_branch)),
        ("Commit", _code(record.commit.sha_short)),
        ("Message", record.commit.message or "-"),
        ("Author", record.commit.author or "-"),
        ("Actor", _code(record.actor.name)),
        ("Cache key", _code(record.cache.key)),
    ]
    lines.append("## Overview")
    lines.append("")
    _render_table(lines, rows)


def _render_pull_request(lines: list[str], record: MetadataRecord) -> None:
    pull_request = record.pull_request
    if not record.event.is_pull_request or pull_request.number is None:
        return
    lines.append(f"## Pull request #{pull_request.number}")
    lines.append("")
    _render_table(
        lines,
        [
            ("Source", _code(pull_request.source_branch)),
            ("Target", _code(pull_request.target_branch)),
            ("Fork", _yes_no(pull_request.is_fork)),
            ("Commits", str(pull_request.commits_count)),
        ],
    )


def _render_changed_files(lines: list[str], record: MetadataRecord) -> None:
    changed = record.changed_files
    lines.append(f"## Changed files ({changed.count})")
    lines.append("")
    if not changed.count:
        lines.append("No files changed.")
        lines.append("")
        return
    paths = changed.files.split(" ")
    lines.extend(f"- `{path}`" for path in paths[:MAX_LISTED_FILES])
    remaining = len(paths) - MAX_LISTED_FILES
    if remaining > 0:
        lines.append(f"- and {remaining} more")
    lines.append("")


def render_summary_markdown(record: MetadataRecord) -> str:
    """Render ``record`` as a Markdown step summary.

    Parameters
    ----------
    record
        The assembled metadata record.

    Returns
    -------
    str
        Markdown text ending with a newline.

    """
    lines: list[str] = []
    _render_title(lines, record)
    _render_overview(lines, record)
    _render_pull_request(lines, record)
    _render_changed_files(lines, record)
    return "\n".join(lines)
