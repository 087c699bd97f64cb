"""Error taxonomy for metadata collection.

Every error is fatal to the invocation. The ``stage`` attribute names the
pipeline step that failed so the CLI can report it without inspecting the
exception type.
"""

from __future__ import annotations


class MetadataError(RuntimeError):
    """Base class for all ghmeta failures."""

    stage: str = "metadata"

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        """Initialise with a message and an optional stage override."""
        if stage is not None:
            self.stage = stage
        super().__init__(message)


class ConfigurationError(MetadataError):
    """Raised when an input or a required environment field is malformed."""

    stage = "configuration"

    @classmethod
    def invalid_input(
        cls, name: str, value: str, expected: str
    ) -> ConfigurationError:
        """Return an error for an action input that failed validation."""
        return cls(f"input {name!r} must be {expected}, got {value!r}")

    @classmethod
    def missing_field(cls, name: str) -> ConfigurationError:
        """Return an error for a required environment field that is absent."""
        return cls(f"required environment field {name} is missing or empty")

    @classmethod
    def token_required(cls) -> ConfigurationError:
        """Return an error when the API strategy is forced without a token."""
        return cls("change_detection=github_api requires a github_token input")


class InsufficientHistoryError(MetadataError):
    """Raised when the diff strategy cannot find a base within the depth bound."""

    stage = "changed_files"

    def __init__(self, base: str, *, depth: int | None) -> None:
        """Initialise with the unresolved base and the depth that was reached.

        ``depth`` is ``None`` when the clone already holds its complete history.
        """
        self.base = base
        self.depth = depth
        if depth is None:
            message = (
                f"could not find history for {base} in the complete history "
                "of the clone"
            )
        else:
            message = (
                f"could not find history for {base} within {depth} commits; "
                "increase git_fetch_depth or fetch the full history"
            )
        super().__init__(message)


class AuthenticationError(MetadataError):
    """Raised when GitHub rejects the supplied credential."""

    stage = "changed_files"

    def __init__(self, status_code: int) -> None:
        """Initialise with the HTTP status returned by GitHub."""
        self.status_code = status_code
        super().__init__(f"GitHub rejected the github_token (HTTP {status_code})")


class GitHubAPIError(MetadataError):
    """Raised when GitHub returns a non-authentication error response."""

    stage = "changed_files"

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, status_code: int, url: str) -> GitHubAPIError:
        """Return an error for a non-2xx REST response."""
        return cls(
            f"GitHub REST HTTP {status_code} for {url}", status_code=status_code
        )

    @classmethod
    def unexpected_shape(cls, field: str) -> GitHubAPIError:
        """Return an error for a response missing an expected field."""
        return cls(f"GitHub REST response missing expected field: {field}")


class GitCommandError(MetadataError):
    """Raised when a git invocation fails for reasons other than missing history."""

    stage = "changed_files"

    def __init__(self, args: tuple[str, ...], returncode: int, stderr: str) -> None:
        """Initialise with the failed command line and its diagnostics."""
        self.args_ = args
        self.returncode = returncode
        detail = stderr.strip() or "no output"
        super().__init__(f"git {' '.join(args)} exited {returncode}: {detail}")


class SerializationError(MetadataError):
    """Raised when the JSON or YAML rendering fails."""

    stage = "serialization"

    @classmethod
    def rendering_failed(cls, fmt: str, exc: Exception) -> SerializationError:
        """Return an error wrapping the encoder failure for ``fmt``."""
        return cls(f"failed to render metadata as {fmt}: {exc}")


class ArtifactWriteError(MetadataError):
    """Raised when the artifact directory or runner files cannot be written."""

    stage = "artifacts"

    @classmethod
    def unwritable(
        cls, path: object, exc: OSError, *, stage: str | None = None
    ) -> ArtifactWriteError:
        """Return an error for a path that could not be created or written."""
        return cls(f"cannot write {path}: {exc.strerror or exc}", stage=stage)


__all__ = [
    "ArtifactWriteError",
    "AuthenticationError",
    "ConfigurationError",
    "GitCommandError",
    "GitHubAPIError",
    "InsufficientHistoryError",
    "MetadataError",
    "SerializationError",
]
