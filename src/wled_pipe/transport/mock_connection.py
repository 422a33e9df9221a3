"""In-memory stand-in for a real controller, for tests and simulation.

The mock never talks to a device. Instead it:

- records every line sent and hands it to an optional observer
- merges each sent JSON object into an accumulated state mapping
- serves pre-queued response lines back in FIFO order
- reports a connection flag that tests can flip at will

It implements both the line-level ``Pipe`` surface and the byte-level
``Transport`` surface, so it can be used directly or underneath a
``LinePipe``.
"""

from __future__ import annotations

import json
import logging
from collections import deque
from typing import Any, Callable

from ..protocol.codec import JsonCodec
from ..protocol.framing import DELIMITER
from .base import READ_CHUNK_SIZE

logger = logging.getLogger(__name__)

SendObserver = Callable[[str], None]


class MockTransport:
    """Fake transport that accumulates sent state and replays responses.

    Usage::

        mock = MockTransport()
        mock.send_value({"on": True})
        mock.send_value({"bri": 5})
        assert mock.get_accumulated_state() == {"on": True, "bri": 5}

        mock.queue_response('{"on":true,"bri":5}')
        mock.try_read_line()  # -> '{"on":true,"bri":5}'

    Args:
        observer: Called with the exact text of every send, or ``None``.
        codec: Codec for ``send_value`` / ``queue_response_value`` /
            ``try_read_value``. Defaults to :class:`JsonCodec`.
    """

    def __init__(
        self,
        observer: SendObserver | None = None,
        codec: JsonCodec | None = None,
    ) -> None:
        self._observer = observer
        self._codec = codec or JsonCodec()
        self._responses: deque[str] = deque()
        self._state: dict[str, Any] = {}
        self._sent: list[str] = []
        self._connected = True

    # ─── TEST SURFACE ────────────────────────────────────────────────

    def set_send_observer(self, observer: SendObserver | None) -> None:
        """Replace the send observer; ``None`` disables notifications."""
        self._observer = observer

    @property
    def accumulated_state(self) -> dict[str, Any]:
        """The merged state of every JSON object sent so far (live view)."""
        return self._state

    def get_accumulated_state(self) -> dict[str, Any]:
        return self._state

    def get_value(self, key: str, default: Any = None) -> Any:
        """Return the accumulated value for ``key``, or ``default``."""
        return self._state.get(key, default)

    def has_value(self, key: str) -> bool:
        return key in self._state

    def clear_state(self) -> None:
        self._state.clear()

    @property
    def sent(self) -> list[str]:
        """Raw text of every send, in order."""
        return list(self._sent)

    @property
    def pending_responses(self) -> int:
        return len(self._responses)

    def queue_response(self, text: str) -> None:
        """Queue a response line (without its trailing newline)."""
        self._responses.append(text)

    def queue_response_value(self, value: Any) -> None:
        """Serialize ``value`` with the codec and queue it as a response."""
        self._responses.append(self._codec.serialize(value))

    def clear_responses(self) -> None:
        self._responses.clear()

    def set_connected(self, connected: bool) -> None:
        self._connected = connected

    # ─── PIPE SURFACE ────────────────────────────────────────────────

    def send_text(self, text: str) -> None:
        """Record ``text`` and merge it into the state if it is a JSON object.

        The observer fires before parsing, so malformed payloads are still
        captured.
        """
        if self._observer is not None:
            self._observer(text)
        self._sent.append(text)

        stripped = text.strip()
        if not stripped.startswith("{"):
            return
        try:
            parsed = json.loads(stripped)
        except json.JSONDecodeError:
            logger.debug("Not accumulating non-JSON send: %r", stripped)
            return
        if isinstance(parsed, dict):
            self._state.update(parsed)

    def send_value(self, value: Any) -> None:
        self.send_text(self._codec.serialize(value) + DELIMITER)

    def try_read_line(self) -> str | None:
        """Return the next queued response, or ``None`` if there is none."""
        if not self._responses:
            return None
        return self._responses.popleft()

    def try_read_value(self, target: type | None = None) -> Any:
        """Dequeue the next response and decode it.

        Raises:
            CodecError: If the response is not valid for ``target``. The
                response is consumed regardless.
        """
        line = self.try_read_line()
        if line is None:
            return None
        return self._codec.deserialize(line, target)

    def is_connected(self) -> bool:
        return self._connected

    def close(self) -> None:
        """Disconnect and reset queued responses, accumulated state and the send log."""
        self._connected = False
        self._responses.clear()
        self._state.clear()
        self._sent.clear()

    # ─── TRANSPORT SURFACE ───────────────────────────────────────────

    def write(self, data: bytes | str) -> int:
        if isinstance(data, (bytes, bytearray)):
            data = bytes(data).decode("utf-8", errors="replace")
        self.send_text(data)
        return len(data.encode("utf-8"))

    def poll_readable(self, max_bytes: int = READ_CHUNK_SIZE) -> bytes:
        """Deliver the next queued response as one newline-terminated chunk.

        Responses are never split, so ``max_bytes`` is not enforced.
        """
        line = self.try_read_line()
        if line is None:
            return b""
        return (line + DELIMITER).encode("utf-8")
