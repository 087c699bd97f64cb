"""Rendering and emission of the metadata record."""

from __future__ import annotations

from .actions import append_step_summary, format_outputs, write_outputs
from .artifacts import ArtifactWriter, artifact_directory_name
from .flatten import flatten_record
from .markdown import render_summary_markdown
from .serialize import RenderedMetadata, serialize_record

__all__ = [
    "ArtifactWriter",
    "RenderedMetadata",
    "append_step_summary",
    "artifact_directory_name",
    "flatten_record",
    "format_outputs",
    "render_summary_markdown",
    "serialize_record",
    "write_outputs",
]
