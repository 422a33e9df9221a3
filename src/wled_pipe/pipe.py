"""Line-level pipe over any byte transport.

``LinePipe`` is what application code talks to: it writes whole lines,
polls the transport without blocking and frames whatever arrives.
"""

from __future__ import annotations

import logging
from typing import Any

from .protocol.codec import JsonCodec
from .protocol.framing import LineFramer, encode_line
from .transport.base import READ_CHUNK_SIZE, Transport

logger = logging.getLogger(__name__)


class LinePipe:
    """Newline-delimited JSON messaging over a ``Transport``.

    Meant to be called from a periodic control loop::

        pipe = LinePipe(SerialTransport("/dev/ttyUSB0"))
        pipe.send_value({"on": True, "bri": 255})
        while running:
            line = pipe.try_read_line()
            if line is not None:
                handle(line)

    Errors from the transport or codec propagate unchanged; the pipe never
    retries or reconnects.

    Args:
        transport: Byte transport to read from and write to.
        codec: Codec for values. Defaults to :class:`JsonCodec`.
        framer: Line framer. Defaults to an unbounded :class:`LineFramer`.
        read_chunk_size: Maximum bytes requested per poll.
    """

    def __init__(
        self,
        transport: Transport,
        codec: JsonCodec | None = None,
        framer: LineFramer | None = None,
        read_chunk_size: int = READ_CHUNK_SIZE,
    ) -> None:
        self._transport = transport
        self._codec = codec or JsonCodec()
        self._framer = framer or LineFramer()
        self._read_chunk_size = read_chunk_size

    @property
    def transport(self) -> Transport:
        return self._transport

    @property
    def codec(self) -> JsonCodec:
        return self._codec

    def send_text(self, text: str) -> None:
        """Write ``text`` as one line, appending ``\\n`` if missing.

        Raises:
            TransportIOError: If the write fails.
        """
        data = encode_line(text)
        self._transport.write(data)
        logger.debug("Sent line: %s", text.rstrip("\n"))

    def send_value(self, value: Any) -> None:
        """Serialize ``value`` and send it as one line.

        Raises:
            CodecError: If ``value`` cannot be serialized. Nothing is sent.
            TransportIOError: If the write fails.
        """
        self.send_text(self._codec.serialize(value))

    def try_read_line(self) -> str | None:
        """Return the next complete line, or ``None`` if none is available.

        Lines already framed from an earlier poll are returned first,
        without touching the transport.

        Raises:
            TransportIOError: If polling the transport fails.
            FrameOverflowError: If the framer has a length cap and it is hit.
        """
        if self._framer.has_pending():
            return self._framer.append_and_extract()
        data = self._transport.poll_readable(self._read_chunk_size)
        return self._framer.append_and_extract(data)

    def try_read_value(self, target: type | None = None) -> Any:
        """Read the next line and decode it with the codec.

        Returns ``None`` when no line is available.

        Raises:
            CodecError: If the line does not decode. The line is consumed,
                so the next call moves on to the following one.
        """
        line = self.try_read_line()
        if line is None:
            return None
        return self._codec.deserialize(line, target)

    def read_lines(self, max_lines: int | None = None) -> list[str]:
        """Return every line available right now, oldest first.

        Polls the transport until it reports no more data or ``max_lines``
        lines have been collected.
        """
        lines: list[str] = []
        while max_lines is None or len(lines) < max_lines:
            if self._framer.has_pending():
                lines.append(self._framer.append_and_extract())
                continue
            data = self._transport.poll_readable(self._read_chunk_size)
            if not data:
                break
            # A chunk may hold only a partial or blank line; keep polling.
            line = self._framer.append_and_extract(data)
            if line is not None:
                lines.append(line)
        return lines

    def is_connected(self) -> bool:
        return self._transport.is_connected()

    def close(self) -> None:
        """Close the transport and discard any partially received data."""
        self._transport.close()
        self._framer.reset()

    def __enter__(self) -> LinePipe:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
