"""Core modules for mcprobe - centralized error definitions."""

from mcprobe.core.errors import (
    ConfigError,
    ConfigurationError,
    ConnectError,
    ExitCode,
    InvalidItemError,
    McProbeError,
    NotFoundError,
    ProbeError,
    ProtocolMismatch,
    TransportError,
    format_error_message,
    main_with_error_handling,
    print_error_message,
)

__all__ = [
    "ExitCode",
    "McProbeError",
    "ConfigurationError",
    "ConfigError",
    "ProbeError",
    "ConnectError",
    "TransportError",
    "NotFoundError",
    "ProtocolMismatch",
    "InvalidItemError",
    "main_with_error_handling",
    "format_error_message",
    "print_error_message",
]
