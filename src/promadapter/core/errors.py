"""
Error types shared by the rule compiler, the naming engine and the CLI.

Configuration errors come out of rule compilation.  The whole build is
aborted on the first one, so a partially compiled rule set is never served.

Resolution errors come out of a single lookup (a metric name, a label for
a resource, a query).  Only that lookup fails; the label/resource cache is
never left half-written.

Exit codes used by the CLI:
    0    success
    10   configuration error
    12   resolution error
    127  anything unexpected
    130  interrupted
"""

from __future__ import annotations

import functools
import sys
import traceback
from enum import IntEnum
from typing import Any, Callable, TypeVar

import structlog

logger = structlog.get_logger()


class ExitCode(IntEnum):
    SUCCESS = 0
    CONFIG_ERROR = 10
    RESOLUTION_ERROR = 12
    UNKNOWN_ERROR = 127
    INTERRUPTED = 130


class AdapterError(Exception):
    """Root of the promadapter error tree; carries structured details for logs."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(AdapterError):
    """A rule set, rule file or setting that cannot be compiled."""

    exit_code = ExitCode.CONFIG_ERROR


class TemplateError(ConfigurationError):
    """A label or query template that cannot be parsed."""


class ResolutionError(AdapterError):
    """A single naming or query lookup that cannot be answered."""

    exit_code = ExitCode.RESOLUTION_ERROR


class ResourceMappingError(ResolutionError):
    """Unknown or ambiguous resource reported by a resource mapper."""


def format_error_message(error: AdapterError) -> str:
    """``message (key=value, ...)`` for display on the terminal."""
    if not error.details:
        return error.message
    details = ", ".join(f"{key}={value}" for key, value in error.details.items())
    return f"{error.message} ({details})"


def exit_code_for(exc: BaseException, *, show_traceback: bool = False, log_errors: bool = True) -> int:
    """Map an exception escaping a command to its exit code, logging it on the way."""
    if isinstance(exc, AdapterError):
        code = exc.exit_code
        if log_errors:
            logger.error(
                "command_failed",
                error_type=type(exc).__name__,
                error=exc.message,
                exit_code=int(code),
                **exc.details,
            )
    elif isinstance(exc, KeyboardInterrupt):
        if log_errors:
            logger.info("command_interrupted")
        return ExitCode.INTERRUPTED
    else:
        code = ExitCode.UNKNOWN_ERROR
        if log_errors:
            logger.error(
                "command_crashed",
                error_type=type(exc).__name__,
                error=str(exc),
                exit_code=int(code),
            )

    if show_traceback:
        traceback.print_exception(exc, file=sys.stderr)
    return code


F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorate a CLI command so that it always returns an exit code.

    Errors raised by the command are logged through structlog and turned
    into the matching ``ExitCode`` by ``exit_code_for``.
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except (Exception, KeyboardInterrupt) as e:
                return exit_code_for(e, show_traceback=show_traceback, log_errors=log_errors)

        return wrapper  # type: ignore[return-value]

    return decorator
