"""femtologging helpers shared by every ghmeta stage.

Messages are pre-formatted with percent-style interpolation before they are
handed to femtologging, so log lines look the same whether they come from
the runner or a local ``ghmeta show`` invocation.

Example:
>>> from ghmeta.logging import get_logger, log_info
>>> logger = get_logger(__name__)
>>> log_info(logger, "Resolved %s changed files", 3)

"""

from __future__ import annotations

import enum
import typing as typ

from femtologging import basicConfig, get_logger

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class LogLevel(enum.StrEnum):
    """Log levels understood by femtologging."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def normalize_log_level(level: str | None) -> tuple[str, bool]:
    """Normalize a log level string and report invalid inputs.

    Parameters
    ----------
    level : str | None
        Raw log level string, typically from ``GHMETA_LOG_LEVEL``.

    Returns
    -------
    tuple[str, bool]
        The normalized level and a flag that is ``True`` when the input was
        missing or unrecognised and ``INFO`` was substituted.

    """
    if not level:
        return ("INFO", True)

    normalized = level.strip().upper()
    if normalized in LogLevel.__members__:
        return (normalized, False)

    return ("INFO", True)


def configure_logging(
    level: str | None, *, debug: bool = False, force: bool = False
) -> tuple[str, bool]:
    """Configure femtologging for an action run.

    Parameters
    ----------
    level : str | None
        Raw log level. Ignored when ``debug`` is set.
    debug : bool, optional
        Force ``DEBUG`` so each stage echoes its intermediate values.
    force : bool, optional
        Replace any existing handler configuration.

    Returns
    -------
    tuple[str, bool]
        The level that was applied and whether the raw input was invalid.

    """
    if debug:
        normalized, invalid = ("DEBUG", False)
    else:
        normalized, invalid = normalize_log_level(level)
    basicConfig(level=normalized, force=force)
    return (normalized, invalid)


def format_log_message(template: str, *args: object) -> str:
    """Interpolate ``args`` into ``template`` using percent formatting."""
    return template % args


class _SupportsLog(typ.Protocol):
    """Protocol for femtologging-compatible loggers."""

    def log(
        self,
        level: str,
        message: str,
        /,
        *,
        exc_info: object | None = None,
        stack_info: bool = False,
    ) -> str | None: ...


def _log_at_level(
    logger: _SupportsLog,
    level: str,
    message: str,
    *,
    exc_info: object | None = None,
) -> None:
    logger.log(level, message, exc_info=exc_info, stack_info=False)


def log_debug(logger: _SupportsLog, template: str, *args: object) -> None:
    """Log a DEBUG message with percent-style formatting."""
    _log_at_level(logger, "DEBUG", format_log_message(template, *args))


def log_info(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an INFO message with percent-style formatting."""
    _log_at_level(
        logger, "INFO", format_log_message(template, *args), exc_info=exc_info
    )


def log_warning(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log a WARNING message with percent-style formatting."""
    _log_at_level(
        logger, "WARNING", format_log_message(template, *args), exc_info=exc_info
    )


def log_error(
    logger: _SupportsLog,
    template: str,
    *args: object,
    exc_info: object | None = None,
) -> None:
    """Log an ERROR message with percent-style formatting."""
    _log_at_level(
        logger, "ERROR", format_log_message(template, *args), exc_info=exc_info
    )


def log_stage_values(
    logger: _SupportsLog,
    stage: str,
    values: cabc.Mapping[str, object],
) -> None:
    """Echo the intermediate values of a pipeline stage at DEBUG level.

    Parameters
    ----------
    logger : _SupportsLog
        Logger that receives one line per value.
    stage : str
        Stage name used as the line prefix, e.g. ``"ref"``.
    values : Mapping[str, object]
        Values to echo, in the order they should appear.

    """
    for key, value in values.items():
        log_debug(logger, "[%s] %s=%r", stage, key, value)


__all__ = [
    "LogLevel",
    "configure_logging",
    "format_log_message",
    "get_logger",
    "log_debug",
    "log_error",
    "log_info",
    "log_stage_values",
    "log_warning",
    "normalize_log_level",
]
