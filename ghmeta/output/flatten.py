"""Flatten the rendered record into Actions output strings.

Step outputs are untyped strings, so this is the one place where native
types are converted: booleans become ``"true"``/``"false"``, ``None`` becomes
an empty string, and integers are formatted in decimal. Values are read from
the decoded JSON structure so every output agrees with ``metadata_json``.
"""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    from .serialize import RenderedMetadata

# (output name, record group, field)
OUTPUT_FIELDS: tuple[tuple[str, str, str], ...] = (
    ("repository_owner", "repository", "owner"),
    ("repository_name", "repository", "name"),
    ("repository_full_name", "repository", "full_name"),
    ("is_public", "repository", "is_public"),
    ("is_private", "repository", "is_private"),
    ("repository_visibility", "repository", "visibility"),
    ("default_branch", "repository", "default_branch"),
    ("event_name", "event", "name"),
    ("is_tag_push", "event", "is_tag_push"),
    ("is_branch_push", "event", "is_branch_push"),
    ("is_pull_request", "event", "is_pull_request"),
    ("is_release", "event", "is_release"),
    ("is_schedule", "event", "is_schedule"),
    ("is_workflow_dispatch", "event", "is_workflow_dispatch"),
    ("tag_push_event", "event", "tag_push_event"),
    ("event_trigger", "event", "trigger"),
    ("event_action", "event", "action"),
    ("branch_name", "ref", "branch_name"),
    ("tag_name", "ref", "tag_name"),
    ("is_default_branch", "ref", "is_default_branch"),
    ("is_main_branch", "ref", "is_main_branch"),
    ("commit_sha", "commit", "sha"),
    ("commit_sha_short", "commit", "sha_short"),
    ("commit_message", "commit", "message"),
    ("commit_author", "commit", "author"),
    ("pr_number", "pull_request", "number"),
    ("pr_source_branch", "pull_request", "source_branch"),
    ("pr_target_branch", "pull_request", "target_branch"),
    ("pr_is_fork", "pull_request", "is_fork"),
    ("pr_commits_count", "pull_request", "commits_count"),
    ("actor_name", "actor", "name"),
    ("actor_id", "actor", "id"),
    ("cache_key", "cache", "key"),
    ("cache_restore_key", "cache", "restore_key"),
    ("changed_files_count", "changed_files", "count"),
    ("changed_files", "changed_files", "files"),
    ("workflow_name", "workflow", "name"),
    ("run_id", "workflow", "run_id"),
    ("run_number", "workflow", "run_number"),
    ("run_attempt", "workflow", "run_attempt"),
    ("job", "workflow", "job"),
)


def output_value(value: object) -> str:
    """Return the Actions string form of one JSON scalar."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_record(rendered: RenderedMetadata) -> dict[str, str]:
    """Return every step output for ``rendered``, in a stable order.

    The leaf outputs come first, followed by ``metadata_json`` and
    ``metadata_yaml`` carrying the complete record.
    """
    data = rendered.data
    outputs = {
        name: output_value(data[group][field]) for name, group, field in OUTPUT_FIELDS
    }
    outputs["metadata_json"] = rendered.json
    outputs["metadata_yaml"] = rendered.yaml
    return outputs
