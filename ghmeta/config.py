"""Action input configuration.

GitHub exposes action inputs to the process as ``INPUT_<NAME>`` environment
variables. :class:`ActionConfig` reads them once, validates them, and hands
the rest of the pipeline typed values.

Usage
-----
Create a configuration with defaults:

>>> config = ActionConfig()
>>> config.git_fetch_depth
15

Or load it from an environment mapping:

>>> config = ActionConfig.from_env({"INPUT_ARTIFACT_FORMATS": "yaml"})
>>> config.artifact_formats
(<ArtifactFormat.YAML: 'yaml'>,)

"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import enum
import os
from pathlib import Path

from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_FETCH_DEPTH = 15

_TRUE_VALUES = frozenset({"true", "yes", "1", "on"})
_FALSE_VALUES = frozenset({"false", "no", "0", "off"})


class ArtifactFormat(enum.StrEnum):
    """Serialisations the artifact writer can persist."""

    JSON = "json"
    YAML = "yaml"


class ChangeDetectionMethod(enum.StrEnum):
    """Changed-file strategies selectable through ``change_detection``."""

    AUTO = "auto"
    GIT = "git"
    GITHUB_API = "github_api"


@dc.dataclass(frozen=True, slots=True)
class ActionConfig:
    """Validated action inputs.

    Attributes
    ----------
    debug
        Echo intermediate values of every stage at DEBUG level.
    github_token
        Credential for the REST API. Its presence also selects the API
        strategy when ``change_detection`` is ``auto``.
    generate_summary
        Append a Markdown summary to ``GITHUB_STEP_SUMMARY``.
    upload_artifact
        Write the metadata files to an artifact directory.
    artifact_formats
        Formats to persist, in input order without duplicates.
    change_detection
        Explicit strategy override, or ``auto``.
    git_fetch_depth
        Maximum history depth the diff strategy may fetch.
    artifact_dir
        Parent directory for the artifact directory.
    api_url
        REST API root, overridden on GitHub Enterprise Server.

    """

    debug: bool = False
    github_token: str = dc.field(default="", repr=False)
    generate_summary: bool = True
    upload_artifact: bool = False
    artifact_formats: tuple[ArtifactFormat, ...] = (
        ArtifactFormat.JSON,
        ArtifactFormat.YAML,
    )
    change_detection: ChangeDetectionMethod = ChangeDetectionMethod.AUTO
    git_fetch_depth: int = DEFAULT_FETCH_DEPTH
    artifact_dir: Path = dc.field(default_factory=Path.cwd)
    api_url: str = DEFAULT_API_URL

    @property
    def has_token(self) -> bool:
        """Return whether a non-blank credential was supplied."""
        return bool(self.github_token.strip())

    @classmethod
    def from_env(cls, environ: cabc.Mapping[str, str] | None = None) -> ActionConfig:
        """Create configuration from ``INPUT_*`` variables.

        Parameters
        ----------
        environ
            Mapping to read from. Defaults to ``os.environ``.

        Returns
        -------
        ActionConfig
            Configuration with validated values or defaults.

        Raises
        ------
        ConfigurationError
            If any input has a value outside its accepted set.

        """
        env = os.environ if environ is None else environ

        def raw(name: str) -> str:
            return env.get(f"INPUT_{name.upper()}", "").strip()

        artifact_dir_raw = raw("artifact_dir") or env.get("RUNNER_TEMP", "").strip()
        return cls(
            debug=parse_bool("debug", raw("debug"), default=False),
            github_token=raw("github_token"),
            generate_summary=parse_bool(
                "generate_summary", raw("generate_summary"), default=True
            ),
            upload_artifact=parse_bool(
                "upload_artifact", raw("upload_artifact"), default=False
            ),
            artifact_formats=parse_formats(raw("artifact_formats")),
            change_detection=parse_method(raw("change_detection")),
            git_fetch_depth=parse_depth(raw("git_fetch_depth")),
            artifact_dir=Path(artifact_dir_raw) if artifact_dir_raw else Path.cwd(),
            api_url=env.get("GITHUB_API_URL", "").strip() or DEFAULT_API_URL,
        )


def parse_bool(name: str, value: str, *, default: bool) -> bool:
    """Parse a boolean input, returning ``default`` when it is blank."""
    if not value:
        return default
    lowered = value.lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError.invalid_input(name, value, "true or false")


def parse_formats(value: str) -> tuple[ArtifactFormat, ...]:
    """Parse the comma-separated ``artifact_formats`` input.

    Blank input yields both formats. Duplicates collapse onto their first
    occurrence.
    """
    if not value:
        return (ArtifactFormat.JSON, ArtifactFormat.YAML)
    formats: list[ArtifactFormat] = []
    for item in value.split(","):
        token = item.strip().lower()
        if not token:
            continue
        try:
            fmt = ArtifactFormat(token)
        except ValueError as exc:
            raise ConfigurationError.invalid_input(
                "artifact_formats", value, "a comma-separated subset of json,yaml"
            ) from exc
        if fmt not in formats:
            formats.append(fmt)
    if not formats:
        raise ConfigurationError.invalid_input(
            "artifact_formats", value, "a comma-separated subset of json,yaml"
        )
    return tuple(formats)


def parse_method(value: str) -> ChangeDetectionMethod:
    """Parse ``change_detection``; blank means automatic selection."""
    if not value:
        return ChangeDetectionMethod.AUTO
    try:
        return ChangeDetectionMethod(value.lower())
    except ValueError as exc:
        raise ConfigurationError.invalid_input(
            "change_detection", value, "one of git, github_api, auto"
        ) from exc


def parse_depth(value: str) -> int:
    """Parse ``git_fetch_depth`` as a positive integer."""
    if not value:
        return DEFAULT_FETCH_DEPTH
    try:
        depth = int(value)
    except ValueError as exc:
        raise ConfigurationError.invalid_input(
            "git_fetch_depth", value, "a positive integer"
        ) from exc
    if depth < 1:
        raise ConfigurationError.invalid_input(
            "git_fetch_depth", value, "a positive integer"
        )
    return depth
