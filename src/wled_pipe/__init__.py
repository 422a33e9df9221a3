"""Newline-delimited JSON pipes to a WLED LED controller."""

from .errors import CodecError, FrameOverflowError, TransportIOError, WledPipeError
from .models.state import LedState
from .pipe import LinePipe
from .protocol.codec import JsonCodec
from .protocol.framing import LineFramer
from .transport.mock_connection import MockTransport
from .transport.network_connection import NetworkTransport
from .transport.serial_connection import SerialTransport
