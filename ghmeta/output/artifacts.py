"""Write metadata renderings to an artifact directory.

Layout::

    {base_dir}/{job}-{suffix}/metadata.json          (json, compact)
    {base_dir}/{job}-{suffix}/metadata-pretty.json   (json, indented)
    {base_dir}/{job}-{suffix}/metadata.yaml          (yaml)

Usage
-----
>>> from pathlib import Path
>>> from ghmeta.config import ArtifactFormat
>>> from ghmeta.output.artifacts import ArtifactWriter, artifact_directory_name
>>> directory = Path("/tmp") / artifact_directory_name("build")
>>> ArtifactWriter(directory).write(rendered, (ArtifactFormat.YAML,))

"""

from __future__ import annotations

import re
import secrets
import string
import typing as typ

from ghmeta.config import ArtifactFormat
from ghmeta.errors import ArtifactWriteError
from ghmeta.logging import get_logger, log_debug

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

    from .serialize import RenderedMetadata

logger = get_logger(__name__)

JSON_FILENAME = "metadata.json"
PRETTY_JSON_FILENAME = "metadata-pretty.json"
YAML_FILENAME = "metadata.yaml"

SUFFIX_LENGTH = 4
SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
DEFAULT_JOB_NAME = "metadata"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class _Chooser(typ.Protocol):
    def choice(self, seq: str) -> str: ...


def artifact_directory_name(job: str, *, rng: _Chooser | None = None) -> str:
    """Return ``{job}-{suffix}`` with a random four-character suffix.

    The suffix only avoids collisions between jobs of the same run; it carries
    no security meaning. Characters an artifact name cannot hold are replaced.
    """
    chooser = rng or secrets.SystemRandom()
    stem = _UNSAFE_NAME_CHARS.sub("-", job).strip("-") or DEFAULT_JOB_NAME
    suffix = "".join(chooser.choice(SUFFIX_ALPHABET) for _ in range(SUFFIX_LENGTH))
    return f"{stem}-{suffix}"


def artifact_files(
    rendered: RenderedMetadata,
    formats: cabc.Iterable[ArtifactFormat],
) -> dict[str, str]:
    """Return filename to content for each requested format."""
    requested = set(formats)
    files: dict[str, str] = {}
    if ArtifactFormat.JSON in requested:
        files[JSON_FILENAME] = f"{rendered.json}\n"
        files[PRETTY_JSON_FILENAME] = f"{rendered.json_pretty}\n"
    if ArtifactFormat.YAML in requested:
        files[YAML_FILENAME] = rendered.yaml
    return files


class ArtifactWriter:
    """Write the requested renderings into one directory.

    Parameters
    ----------
    directory
        Target directory; created with its parents when absent.

    """

    def __init__(self, directory: Path) -> None:
        """Initialise the writer with its target directory."""
        self._directory = directory

    @property
    def directory(self) -> Path:
        """Return the target directory."""
        return self._directory

    def write(
        self,
        rendered: RenderedMetadata,
        formats: cabc.Iterable[ArtifactFormat],
    ) -> list[Path]:
        """Write one file per requested format and return the written paths.

        Writing the same renderings twice leaves identical files. Files
        written before a failure are removed again.

        Raises
        ------
        ArtifactWriteError
            If the directory cannot be created or a file cannot be written.

        """
        files = artifact_files(rendered, formats)
        written: list[Path] = []
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            for filename, content in files.items():
                path = self._directory / filename
                path.write_text(content, encoding="utf-8")
                written.append(path)
        except OSError as exc:
            for path in written:
                path.unlink(missing_ok=True)
            raise ArtifactWriteError.unwritable(self._directory, exc) from exc
        log_debug(
            logger,
            "[artifacts] wrote %s to %s",
            ", ".join(files),
            self._directory,
        )
        return written
