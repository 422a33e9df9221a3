"""Capability contracts shared by every transport.

Two levels are defined:

- ``Transport`` moves raw bytes. Serial, network and mock transports all
  implement it; none of them adds framing.
- ``Pipe`` moves whole lines and JSON values. ``LinePipe`` builds one on
  top of any ``Transport``; ``MockTransport`` implements it directly.

Both are structural (``typing.Protocol``): implementations do not inherit
from them, the caller picks one at construction time.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

# Defaults shared by the real transports
DEFAULT_POLL_TIMEOUT = 0.02  # seconds
READ_CHUNK_SIZE = 4096


@runtime_checkable
class Transport(Protocol):
    """Byte-level transport."""

    def write(self, data: bytes | str) -> int:
        """Send the exact bytes of ``data`` (UTF-8 for text).

        Raises:
            TransportIOError: If the write fails or the transport is closed.
        """
        ...

    def poll_readable(self, max_bytes: int = READ_CHUNK_SIZE) -> bytes:
        """Return up to ``max_bytes`` newly available bytes, or ``b""``.

        Never blocks longer than a short, bounded timeout.
        """
        ...

    def is_connected(self) -> bool:
        """Last-known liveness; performs no I/O."""
        ...

    def close(self) -> None:
        """Release resources. Safe to call more than once."""
        ...


@runtime_checkable
class Pipe(Protocol):
    """Line-level surface used by application code."""

    def send_text(self, text: str) -> None:
        ...

    def send_value(self, value: Any) -> None:
        ...

    def try_read_line(self) -> str | None:
        ...

    def try_read_value(self, target: type | None = None) -> Any:
        ...

    def is_connected(self) -> bool:
        ...

    def close(self) -> None:
        ...
