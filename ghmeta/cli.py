"""Command-line entry point for the metadata action.

``ghmeta run`` performs the whole action inside a workflow step: it reads
the runner environment and the ``INPUT_*`` variables, then writes step
outputs, the job summary, and optional artifacts. ``ghmeta show`` builds the
same record and prints one rendering without touching runner files.

Failures are reported as a ``::error`` workflow command naming the stage
that failed, and the process exits with status 1.
"""

from __future__ import annotations

import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter

from ghmeta.config import ActionConfig
from ghmeta.environment import EnvironmentContext
from ghmeta.errors import MetadataError
from ghmeta.logging import configure_logging, get_logger, log_error, log_warning
from ghmeta.pipeline import RunnerFiles, collect_metadata, run_action

logger = get_logger(__name__)

app = App(
    name="ghmeta",
    help="Extract repository, ref, commit, and event metadata in GitHub Actions",
    version="0.1.0",
)

ShowFormat = typ.Literal["json", "json-pretty", "yaml"]


def escape_command_data(message: str) -> str:
    """Escape ``message`` for the data part of a workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def report_failure(exc: MetadataError, *, stream: typ.TextIO | None = None) -> None:
    """Log ``exc`` and annotate the run with an ``::error`` command."""
    log_error(logger, "%s stage failed: %s", exc.stage, exc)
    out = stream or sys.stdout
    out.write(
        f"::error title=ghmeta {exc.stage} failed::{escape_command_data(str(exc))}\n"
    )
    out.flush()


def _load_config(log_level: str | None) -> ActionConfig:
    normalized_level, invalid_level = configure_logging(log_level)
    if invalid_level and log_level:
        log_warning(
            logger,
            "Invalid GHMETA_LOG_LEVEL %r, falling back to %s",
            log_level,
            normalized_level,
        )
    config = ActionConfig.from_env()
    if config.debug:
        configure_logging(log_level, debug=True, force=True)
    return config


@app.command
def run(
    *,
    workspace: typ.Annotated[
        Path | None, Parameter(env_var="GITHUB_WORKSPACE")
    ] = None,
    log_level: typ.Annotated[
        str | None, Parameter(env_var="GHMETA_LOG_LEVEL")
    ] = None,
) -> int:
    """Collect metadata and publish it to the workflow run.

    Args:
        workspace: Git working tree to diff in (defaults to the current
            directory).
        log_level: femtologging level; the ``debug`` input forces DEBUG.

    Returns:
        Exit code (0 for success, 1 when any stage fails).

    """
    try:
        config = _load_config(log_level)
        run_action(
            EnvironmentContext.from_environ(),
            config,
            runner_files=RunnerFiles.from_environ(),
            workspace=workspace,
        )
    except MetadataError as exc:
        report_failure(exc)
        return 1
    return 0


@app.command
def show(
    *,
    output_format: typ.Annotated[ShowFormat, Parameter(name="--format")] = "yaml",
    workspace: typ.Annotated[
        Path | None, Parameter(env_var="GITHUB_WORKSPACE")
    ] = None,
    log_level: typ.Annotated[
        str | None, Parameter(env_var="GHMETA_LOG_LEVEL")
    ] = None,
) -> int:
    """Print the metadata record without writing runner files.

    Args:
        output_format: Rendering to print.
        workspace: Git working tree to diff in.
        log_level: femtologging level.

    Returns:
        Exit code (0 for success, 1 when any stage fails).

    """
    try:
        config = _load_config(log_level)
        _, rendered = collect_metadata(
            EnvironmentContext.from_environ(), config, workspace=workspace
        )
    except MetadataError as exc:
        report_failure(exc)
        return 1

    text = {
        "json": rendered.json,
        "json-pretty": rendered.json_pretty,
        "yaml": rendered.yaml,
    }[output_format]
    sys.stdout.write(text if text.endswith("\n") else f"{text}\n")
    return 0


def main() -> int:
    """Entry point for the CLI."""
    return app()


if __name__ == "__main__":
    sys.exit(main())
