"""TCP transport to the LED controller."""

from __future__ import annotations

import logging
import select
import socket

from ..errors import TransportIOError
from .base import DEFAULT_POLL_TIMEOUT, READ_CHUNK_SIZE

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 1.0  # seconds


class NetworkTransport:
    """Byte transport over a TCP socket.

    Nagle's algorithm is disabled so short command lines go out at once.
    Reads wait at most ``timeout`` seconds for the socket to become
    readable.

    Usage::

        transport = NetworkTransport("wled.local", 21324)
        transport.write(b'{"bri":128}\\n')
        data = transport.poll_readable()
        transport.close()

    Raises:
        TransportIOError: If the connection cannot be established.
    """

    def __init__(
        self,
        host: str,
        port: int,
        timeout: float = DEFAULT_POLL_TIMEOUT,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
    ) -> None:
        self._host = host
        self._port = port
        self._timeout = timeout

        try:
            sock = socket.create_connection((host, port), timeout=connect_timeout)
        except OSError as e:
            raise TransportIOError(
                f"Could not connect to {host}:{port}: {e}"
            ) from e

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(connect_timeout)
        self._socket: socket.socket | None = sock
        logger.info("Connected to %s:%d", host, port)

    @property
    def address(self) -> tuple[str, int]:
        return (self._host, self._port)

    def is_connected(self) -> bool:
        return self._socket is not None

    def write(self, data: bytes | str) -> int:
        """Send all of ``data``.

        Raises:
            TransportIOError: If the socket is closed or the send fails.
        """
        sock = self._require_socket()
        if isinstance(data, str):
            data = data.encode("utf-8")

        try:
            sock.sendall(data)
        except OSError as e:
            self._drop(f"send failed: {e}")
            raise TransportIOError(f"Network write failed: {e}") from e

        logger.debug("TX %d bytes", len(data))
        return len(data)

    def poll_readable(self, max_bytes: int = READ_CHUNK_SIZE) -> bytes:
        """Return up to ``max_bytes`` available bytes, or ``b""`` on timeout.

        Raises:
            TransportIOError: If the socket is closed, reset, or the peer
                has closed the connection.
        """
        sock = self._require_socket()

        try:
            readable, _, _ = select.select([sock], [], [], self._timeout)
            if not readable:
                return b""
            data = sock.recv(max_bytes)
        except (BlockingIOError, socket.timeout):
            return b""
        except OSError as e:
            self._drop(f"receive failed: {e}")
            raise TransportIOError(f"Network read failed: {e}") from e

        if not data:
            self._drop("closed by peer")
            raise TransportIOError(f"Connection to {self._host}:{self._port} closed by peer")

        logger.debug("RX %d bytes", len(data))
        return data

    def close(self) -> None:
        """Close the socket."""
        if self._socket is None:
            return
        self._drop("closed")

    def _require_socket(self) -> socket.socket:
        if self._socket is None:
            raise TransportIOError(f"Connection to {self._host}:{self._port} is closed")
        return self._socket

    def _drop(self, reason: str) -> None:
        sock, self._socket = self._socket, None
        if sock is None:
            return
        try:
            sock.close()
        except OSError as e:
            logger.warning("Error closing socket: %s", e)
        logger.info("Disconnected from %s:%d (%s)", self._host, self._port, reason)
