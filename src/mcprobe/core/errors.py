"""
Unified error handling for mcprobe.

Network errors are normally caught at the query boundary and folded into
result values. The exceptions below are what that boundary catches, and what
CLI commands raise when they need a specific exit code.

Exit Codes:
- 0: Success
- 1: Statistic not found
- 10: Configuration error
- 11: Connect or transport failure
- 12: Invalid item key or parameters
- 127: Unknown/internal error
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
    """Standardized exit codes for CLI commands."""

    SUCCESS = 0
    NOT_FOUND = 1
    CONFIG_ERROR = 10
    PROVIDER_ERROR = 11
    VALIDATION_ERROR = 12
    UNKNOWN_ERROR = 127


class McProbeError(Exception):
    """Base exception for mcprobe errors with exit code support."""

    exit_code: ExitCode = ExitCode.UNKNOWN_ERROR
    show_traceback: bool = False

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(McProbeError):
    """Raised for malformed or missing required configuration."""

    exit_code = ExitCode.CONFIG_ERROR


ConfigError = ConfigurationError


class ProbeError(McProbeError):
    """Raised when talking to a memcached instance fails."""

    exit_code = ExitCode.PROVIDER_ERROR

    @property
    def reason(self) -> str:
        return self.message


class ConnectError(ProbeError):
    """Host unreachable, connection refused, or connect timed out."""


class TransportError(ProbeError):
    """Write or read failure after the connection was established."""


class NotFoundError(McProbeError):
    """Requested statistic is absent from the stats response."""

    exit_code = ExitCode.NOT_FOUND


class ProtocolMismatch(McProbeError):
    """Liveness echo did not match the expected response."""

    exit_code = ExitCode.PROVIDER_ERROR


class InvalidItemError(McProbeError):
    """Raised for unknown item keys or wrong parameter counts."""

    exit_code = ExitCode.VALIDATION_ERROR


F = TypeVar("F", bound=Callable[..., int])


def main_with_error_handling(
    *,
    show_traceback: bool = False,
    log_errors: bool = True,
) -> Callable[[F], F]:
    """
    Decorator for CLI command functions that provides unified error handling.

    Args:
        show_traceback: If True, show full traceback for unexpected errors
        log_errors: If True, log errors to structlog

    Exit codes:
        - McProbeError subclasses: Uses the error's exit_code
        - KeyboardInterrupt: Returns 130 (standard for SIGINT)
        - Other exceptions: Returns 127 (unknown error)
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> int:
            try:
                return func(*args, **kwargs)
            except McProbeError as e:
                if log_errors:
                    logger.error(
                        "command_error",
                        error_type=type(e).__name__,
                        message=e.message,
                        exit_code=e.exit_code,
                        **e.details,
                    )
                print_error_message(e)
                if e.show_traceback or show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return e.exit_code
            except KeyboardInterrupt:
                if log_errors:
                    logger.info("command_interrupted")
                return 130
            except Exception as e:
                if log_errors:
                    logger.error(
                        "unexpected_error",
                        error_type=type(e).__name__,
                        message=str(e),
                        exit_code=ExitCode.UNKNOWN_ERROR,
                    )
                if show_traceback:
                    traceback.print_exc(file=sys.stderr)
                return ExitCode.UNKNOWN_ERROR

        return wrapper  # type: ignore[return-value]

    return decorator


def format_error_message(error: McProbeError) -> str:
    """Format an error message for display to users."""
    msg = error.message
    if error.details:
        detail_str = ", ".join(f"{k}={v}" for k, v in error.details.items())
        msg = f"{msg} ({detail_str})"
    return msg


def print_error_message(error: McProbeError) -> None:
    """Print a formatted error to stderr."""
    from mcprobe.cli.ux import error as print_error

    print_error(format_error_message(error))
