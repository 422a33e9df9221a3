"""Line framing for newline-delimited messages.

Wire layout::

    +----------------------+----+----------------------+----+-----
    | UTF-8 text (line 1)  | \\n | UTF-8 text (line 2)  | \\n | ...
    +----------------------+----+----------------------+----+-----

- No length prefix, no checksum; ``\\n`` is the only delimiter
- Lines are whitespace-trimmed on extraction (this also drops ``\\r``)
- Lines that are empty after trimming are discarded
- Bytes arrive in arbitrary chunks; a trailing partial line is kept
  until its delimiter shows up in a later chunk

Every complete line found in an appended chunk is split out immediately
and queued, so a chunk carrying several lines can be drained one line per
call without feeding more input.
"""

from __future__ import annotations

import codecs
import logging
from collections import deque

from ..errors import FrameOverflowError

logger = logging.getLogger(__name__)

DELIMITER = "\n"


def encode_line(text: str) -> bytes:
    """Encode ``text`` as a single wire line, appending the delimiter if missing."""
    if not text.endswith(DELIMITER):
        text += DELIMITER
    return text.encode("utf-8")


class LineFramer:
    """Turns a stream of appended bytes into discrete, trimmed lines.

    Usage::

        framer = LineFramer()
        framer.append_and_extract(b'{"on":tr')    # -> None
        framer.append_and_extract(b'ue}\\n{"a":1}\\n')  # -> '{"on":true}'
        framer.append_and_extract(b"")            # -> '{"a":1}'

    Args:
        max_line_length: Optional cap on the undelimited tail, in characters.
            ``None`` (the default) leaves the buffer unbounded.
    """

    def __init__(self, max_line_length: int | None = None) -> None:
        if max_line_length is not None and max_line_length <= 0:
            raise ValueError("max_line_length must be positive")
        self._max_line_length = max_line_length
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self._pending: deque[str] = deque()

    @property
    def buffered(self) -> str:
        """The partial (undelimited) tail currently held."""
        return self._buffer

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def has_pending(self) -> bool:
        """True if at least one complete line is waiting to be returned."""
        return bool(self._pending)

    def append_and_extract(self, data: bytes | str = b"") -> str | None:
        """Append ``data`` and return the oldest complete line, if any.

        Returns:
            A trimmed, non-empty line, or ``None`` when no complete line is
            buffered.

        Raises:
            FrameOverflowError: If ``max_line_length`` is set and the partial
                tail exceeds it. The tail is discarded first.
        """
        self._append(data)
        if self._pending:
            return self._pending.popleft()
        return None

    def extract_all(self, data: bytes | str = b"") -> list[str]:
        """Append ``data`` and return every complete line buffered so far."""
        self._append(data)
        lines = list(self._pending)
        self._pending.clear()
        return lines

    def reset(self) -> None:
        """Drop the partial tail, queued lines and decoder state."""
        self._decoder.reset()
        self._buffer = ""
        self._pending.clear()

    def _append(self, data: bytes | str) -> None:
        if not data:
            return
        if isinstance(data, str):
            text = data
        else:
            text = self._decoder.decode(bytes(data))
        if not text:
            # Only part of a multi-byte character so far
            return

        self._buffer += text
        if DELIMITER in self._buffer:
            *complete, self._buffer = self._buffer.split(DELIMITER)
            for raw in complete:
                line = raw.strip()
                if line:
                    self._pending.append(line)

        if (
            self._max_line_length is not None
            and len(self._buffer) > self._max_line_length
        ):
            size = len(self._buffer)
            self._buffer = ""
            logger.warning(
                "Discarded %d buffered characters with no line delimiter", size
            )
            raise FrameOverflowError(
                f"Line exceeded {self._max_line_length} characters "
                f"without a delimiter ({size} buffered)"
            )
