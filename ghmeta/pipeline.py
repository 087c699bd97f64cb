"""Orchestrate one metadata extraction run.

:func:`collect_metadata` builds and renders the record; :func:`run_action`
additionally emits it through the runner. Emission happens only after the
record and both renderings exist, so a failing run writes nothing. If a
later emission step fails, an artifact directory created by this run is
removed again before the error propagates.

Usage
-----
>>> from ghmeta.config import ActionConfig
>>> from ghmeta.environment import EnvironmentContext
>>> from ghmeta.pipeline import RunnerFiles, run_action
>>> result = run_action(
...     EnvironmentContext.from_environ(),
...     ActionConfig.from_env(),
...     runner_files=RunnerFiles.from_environ(),
... )

"""

from __future__ import annotations

import contextlib
import dataclasses as dc
import os
import shutil
import typing as typ
from pathlib import Path

from ghmeta.changes import Git, resolve_method, select_detector
from ghmeta.config import ChangeDetectionMethod
from ghmeta.environment import EnvironmentReader
from ghmeta.errors import MetadataError
from ghmeta.github import GitHubRestClient, GitHubRestConfig
from ghmeta.logging import get_logger, log_info
from ghmeta.metadata import MetadataAggregator
from ghmeta.output import (
    ArtifactWriter,
    append_step_summary,
    artifact_directory_name,
    flatten_record,
    render_summary_markdown,
    serialize_record,
    write_outputs,
)

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from ghmeta.changes import ChangeDetector
    from ghmeta.config import ActionConfig
    from ghmeta.environment import EnvironmentContext
    from ghmeta.metadata import MetadataRecord
    from ghmeta.output import RenderedMetadata

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class RunnerFiles:
    """Command files exposed by the runner; ``None`` means write to stdout."""

    output: Path | None = None
    summary: Path | None = None

    @classmethod
    def from_environ(
        cls, environ: cabc.Mapping[str, str] | None = None
    ) -> RunnerFiles:
        """Read ``GITHUB_OUTPUT`` and ``GITHUB_STEP_SUMMARY``."""
        env = os.environ if environ is None else environ

        def path(name: str) -> Path | None:
            value = env.get(name, "").strip()
            return Path(value) if value else None

        return cls(output=path("GITHUB_OUTPUT"), summary=path("GITHUB_STEP_SUMMARY"))


@dc.dataclass(frozen=True, slots=True)
class ActionResult:
    """Everything a successful run produced."""

    record: MetadataRecord
    rendered: RenderedMetadata
    outputs: dict[str, str]
    artifact_path: Path | None = None
    summary: str | None = None


def collect_metadata(
    context: EnvironmentContext,
    config: ActionConfig,
    *,
    workspace: Path | None = None,
    detector: ChangeDetector | None = None,
) -> tuple[MetadataRecord, RenderedMetadata]:
    """Build the record and render it as JSON and YAML.

    Parameters
    ----------
    context
        Environment variables and event payload for this invocation.
    config
        Validated action inputs.
    workspace
        Git working tree; the process cwd when ``None``.
    detector
        Changed-files strategy override. When omitted one is selected from
        ``config`` and any REST client it needs is closed afterwards.

    Raises
    ------
    MetadataError
        From whichever stage failed first.

    """
    snapshot = EnvironmentReader(context).read()
    git = Git(workspace)

    with contextlib.ExitStack() as stack:
        if detector is None:
            client = None
            if resolve_method(config) is ChangeDetectionMethod.GITHUB_API:
                client = stack.enter_context(
                    GitHubRestClient(
                        GitHubRestConfig(
                            token=config.github_token, api_url=config.api_url
                        )
                    )
                )
            detector = select_detector(config, workspace=workspace, client=client)
        log_info(logger, "Detecting changed files with the %s strategy", detector.name)
        record = MetadataAggregator(
            snapshot, detector=detector, commit_lookup=git.commit_summary
        ).build()

    return record, serialize_record(record)


def _write_artifacts(
    rendered: RenderedMetadata, config: ActionConfig, directory: Path
) -> None:
    ArtifactWriter(directory).write(rendered, config.artifact_formats)
    log_info(logger, "Wrote metadata artifacts to %s", directory)


def run_action(
    context: EnvironmentContext,
    config: ActionConfig,
    *,
    runner_files: RunnerFiles,
    workspace: Path | None = None,
    detector: ChangeDetector | None = None,
) -> ActionResult:
    """Collect metadata and emit it as outputs, artifacts, and a summary.

    Raises
    ------
    MetadataError
        If any stage fails; nothing is emitted before the renderings exist.

    """
    record, rendered = collect_metadata(
        context, config, workspace=workspace, detector=detector
    )
    outputs = flatten_record(rendered)
    summary = render_summary_markdown(record) if config.generate_summary else None

    artifact_path: Path | None = None
    if config.upload_artifact:
        artifact_path = config.artifact_dir / artifact_directory_name(
            record.workflow.job
        )
    try:
        if artifact_path is not None:
            _write_artifacts(rendered, config, artifact_path)
            outputs["artifact_path"] = str(artifact_path)
            outputs["artifact_name"] = artifact_path.name
        if summary is not None:
            append_step_summary(summary, runner_files.summary)
        write_outputs(outputs, runner_files.output)
    except MetadataError:
        if artifact_path is not None:
            shutil.rmtree(artifact_path, ignore_errors=True)
        raise

    log_info(
        logger,
        "Collected metadata for %s at %s (%d changed files)",
        record.repository.full_name,
        record.commit.sha_short,
        record.changed_files.count,
    )
    return ActionResult(
        record=record,
        rendered=rendered,
        outputs=outputs,
        artifact_path=artifact_path,
        summary=summary,
    )
