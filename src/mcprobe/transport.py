"""
Blocking TCP transport for the memcached text protocol.

A ``Session`` owns exactly one connection. Commands go out in a single
``sendall``; responses are read back lazily one line at a time with the line
terminator stripped. Every network failure is raised as ``ConnectError`` or
``TransportError`` carrying the underlying reason. Nothing is retried.
"""

from __future__ import annotations

import socket
import time
from collections.abc import Iterator
from types import TracebackType

import structlog

from mcprobe.core.errors import ConnectError, TransportError

logger = structlog.get_logger()

# Agent default item timeout in seconds, used when the caller passes 0
DEFAULT_TIMEOUT = 3.0

RECV_SIZE = 1024

# Longest response line accepted before the session gives up
MAX_LINE_LEN = 2048


def resolve_timeout(timeout: float | None) -> float:
    """Return the effective timeout, falling back to DEFAULT_TIMEOUT."""
    if not timeout or timeout < 0:
        return DEFAULT_TIMEOUT
    return float(timeout)


def _reason(exc: BaseException) -> str:
    if isinstance(exc, socket.timeout):
        return "timed out"
    if isinstance(exc, OSError) and exc.strerror:
        return exc.strerror
    return str(exc) or type(exc).__name__


class Session:
    """A single TCP session to one memcached instance."""

    def __init__(
        self,
        sock: socket.socket,
        host: str,
        port: int,
        timeout: float | None = 0,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = resolve_timeout(timeout)
        self._sock: socket.socket | None = sock
        self._buffer = b""
        self._eof = False

    @classmethod
    def connect(cls, host: str, port: int, timeout: float | None = 0) -> Session:
        """
        Open a connection to ``host:port``.

        Args:
            host: Host name or address
            port: TCP port
            timeout: Seconds allowed for connect and for each line read; 0 or
                None uses DEFAULT_TIMEOUT

        Raises:
            ConnectError: If the host is unreachable, refuses, or times out
        """
        effective = resolve_timeout(timeout)
        try:
            sock = socket.create_connection((host, port), timeout=effective)
        except (OSError, ValueError, OverflowError) as e:
            reason = _reason(e)
            logger.warning("memcached_connect_failed", host=host, port=port, error=reason)
            raise ConnectError(
                f"Cannot connect to [[{host}]:{port}]: {reason}",
                details={"host": host, "port": port},
            ) from e

        sock.settimeout(effective)
        logger.debug("memcached_connected", host=host, port=port, timeout=effective)
        return cls(sock, host, port, effective)

    @property
    def closed(self) -> bool:
        return self._sock is None

    def send_command(self, command: bytes | str) -> None:
        """Write the whole command in one go; any failure is final."""
        if isinstance(command, str):
            command = command.encode("ascii")
        if self._sock is None:
            raise TransportError("Cannot send on a closed session")
        try:
            self._sock.sendall(command)
        except OSError as e:
            reason = _reason(e)
            logger.warning(
                "memcached_send_failed", host=self.host, port=self.port, error=reason
            )
            raise TransportError(
                f"Cannot send request: {reason}",
                details={"host": self.host, "port": self.port},
            ) from e

    def _read_error(self, reason: str) -> TransportError:
        logger.warning("memcached_recv_failed", host=self.host, port=self.port, error=reason)
        return TransportError(
            f"Cannot read response: {reason}",
            details={"host": self.host, "port": self.port},
        )

    def _recv(self, remaining: float) -> bytes:
        if self._sock is None:
            raise TransportError("Cannot read from a closed session")
        try:
            self._sock.settimeout(remaining)
            return self._sock.recv(RECV_SIZE)
        except OSError as e:
            raise self._read_error(_reason(e)) from e

    def read_line(self) -> str | None:
        """
        Read the next line without its terminator.

        Returns None once the peer has closed and the buffer is drained. A
        trailing fragment with no newline is returned as the last line. The
        whole line must arrive within the session timeout and fit in
        MAX_LINE_LEN bytes, otherwise ``TransportError`` is raised.
        """
        deadline = time.monotonic() + self.timeout
        while b"\n" not in self._buffer:
            if self._eof or self._sock is None:
                break
            if len(self._buffer) > MAX_LINE_LEN:
                raise self._read_error(f"line longer than {MAX_LINE_LEN} bytes")
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise self._read_error("timed out")
            chunk = self._recv(remaining)
            if not chunk:
                self._eof = True
                break
            self._buffer += chunk

        if not self._buffer:
            return None

        line, _, rest = self._buffer.partition(b"\n")
        if len(line) > MAX_LINE_LEN:
            raise self._read_error(f"line longer than {MAX_LINE_LEN} bytes")
        self._buffer = rest
        if line.endswith(b"\r"):
            line = line[:-1]
        return line.decode("utf-8", errors="replace")

    def read_lines(self) -> Iterator[str]:
        """Yield response lines until the peer closes the connection."""
        while True:
            line = self.read_line()
            if line is None:
                return
            yield line

    def close(self) -> None:
        """Close the socket. Unread data is discarded; safe to call twice."""
        if self._sock is None:
            return
        try:
            self._sock.close()
        finally:
            self._sock = None
            self._buffer = b""
            logger.debug("memcached_closed", host=self.host, port=self.port)

    def __enter__(self) -> Session:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
