"""Exception hierarchy shared by transports, the framer and the codec.

"No data yet" is never an exception: reads return ``None`` or ``b""``.
"""

from __future__ import annotations


class WledPipeError(Exception):
    """Base class for all errors raised by this package."""


class TransportIOError(WledPipeError, ConnectionError):
    """A transport could not be opened, written to, or read from."""


class CodecError(WledPipeError, ValueError):
    """A value could not be serialized, or a line could not be decoded."""


class FrameOverflowError(WledPipeError):
    """An undelimited line grew past the framer's configured limit."""
