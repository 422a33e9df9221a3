"""Tests for LinePipe over byte transports."""

from unittest.mock import MagicMock

import pytest

from wled_pipe.errors import CodecError, FrameOverflowError, TransportIOError
from wled_pipe.models.state import LedState
from wled_pipe.pipe import LinePipe
from wled_pipe.protocol.framing import LineFramer
from wled_pipe.transport.base import Pipe
from wled_pipe.transport.mock_connection import MockTransport


class ChunkTransport:
    """Serves a fixed list of byte chunks, one per poll."""

    def __init__(self, chunks):
        self.chunks = list(chunks)
        self.written = []
        self.polls = 0
        self.closed = False

    def write(self, data):
        self.written.append(data)
        return len(data)

    def poll_readable(self, max_bytes=4096):
        self.polls += 1
        if not self.chunks:
            return b""
        return self.chunks.pop(0)

    def is_connected(self):
        return not self.closed

    def close(self):
        self.closed = True


def test_is_a_pipe():
    assert isinstance(LinePipe(MockTransport()), Pipe)


def test_send_value_writes_one_line():
    transport = ChunkTransport([])
    pipe = LinePipe(transport)
    pipe.send_value({"on": True})
    assert transport.written == [b'{"on":true}\n']


def test_send_text_appends_newline_once():
    transport = ChunkTransport([])
    pipe = LinePipe(transport)
    pipe.send_text("abc")
    pipe.send_text("def\n")
    assert transport.written == [b"abc\n", b"def\n"]


def test_send_unserializable_writes_nothing():
    transport = ChunkTransport([])
    pipe = LinePipe(transport)
    with pytest.raises(CodecError):
        pipe.send_value({"x": object()})
    assert transport.written == []


def test_send_over_mock_accumulates_state():
    mock = MockTransport()
    pipe = LinePipe(mock)
    pipe.send_value({"on": True})
    pipe.send_value(LedState(bri=5))
    assert mock.get_accumulated_state() == {"on": True, "bri": 5}


def test_read_through_mock_uses_framer():
    mock = MockTransport()
    mock.queue_response('{"a":1}')
    mock.queue_response('{"b":2}')
    pipe = LinePipe(mock)
    assert pipe.try_read_line() == '{"a":1}'
    assert pipe.try_read_line() == '{"b":2}'
    assert pipe.try_read_line() is None


def test_partial_chunks_assemble():
    transport = ChunkTransport([b'{"on":tr', b"", b'ue}\n'])
    pipe = LinePipe(transport)
    assert pipe.try_read_line() is None
    assert pipe.try_read_line() is None
    assert pipe.try_read_line() == '{"on":true}'


def test_buffered_lines_served_without_polling():
    """Lines left over from a burst are returned before the transport is polled."""
    transport = ChunkTransport([b"a\nb\nc\n", b"d\n"])
    pipe = LinePipe(transport)
    assert pipe.try_read_line() == "a"
    assert transport.polls == 1
    assert pipe.try_read_line() == "b"
    assert pipe.try_read_line() == "c"
    assert transport.polls == 1
    assert pipe.try_read_line() == "d"
    assert transport.polls == 2


def test_read_lines_drains_available():
    transport = ChunkTransport([b"a\nb\n", b"c\npart"])
    pipe = LinePipe(transport)
    assert pipe.read_lines() == ["a", "b", "c"]


def test_read_lines_keeps_polling_after_partial_chunk():
    """A chunk carrying only part of a line does not end the drain."""
    transport = ChunkTransport([b"par", b"t\n"])
    pipe = LinePipe(transport)
    assert pipe.read_lines() == ["part"]


def test_read_lines_skips_blank_response():
    mock = MockTransport()
    mock.queue_response("")
    mock.queue_response('{"a":1}')
    pipe = LinePipe(mock)
    assert pipe.read_lines() == ['{"a":1}']
    assert mock.pending_responses == 0


def test_read_lines_respects_limit():
    transport = ChunkTransport([b"a\nb\nc\n"])
    pipe = LinePipe(transport)
    assert pipe.read_lines(max_lines=2) == ["a", "b"]
    assert pipe.read_lines() == ["c"]


def test_try_read_value_typed():
    transport = ChunkTransport([b'{"on":true,"bri":128,"ps":2}\n'])
    pipe = LinePipe(transport)
    assert pipe.try_read_value(LedState) == LedState(on=True, bri=128, ps=2)


def test_try_read_value_nothing_available():
    pipe = LinePipe(ChunkTransport([]))
    assert pipe.try_read_value() is None


def test_bad_line_does_not_wedge_the_pipe():
    transport = ChunkTransport([b'oops\n{"ok":true}\n'])
    pipe = LinePipe(transport)
    with pytest.raises(CodecError):
        pipe.try_read_value()
    assert pipe.try_read_value() == {"ok": True}


def test_transport_errors_propagate():
    transport = MagicMock()
    transport.write.side_effect = TransportIOError("boom")
    transport.poll_readable.side_effect = TransportIOError("boom")
    pipe = LinePipe(transport)
    with pytest.raises(TransportIOError):
        pipe.send_text("x")
    with pytest.raises(TransportIOError):
        pipe.try_read_line()


def test_framer_limit_applies():
    transport = ChunkTransport([b"x" * 20])
    pipe = LinePipe(transport, framer=LineFramer(max_line_length=8))
    with pytest.raises(FrameOverflowError):
        pipe.try_read_line()


def test_close_closes_transport_and_drops_buffer():
    transport = ChunkTransport([b"a\nb\n"])
    pipe = LinePipe(transport)
    assert pipe.try_read_line() == "a"
    pipe.close()
    assert transport.closed
    assert not pipe.is_connected()
    assert pipe.try_read_line() is None


def test_context_manager_closes():
    transport = ChunkTransport([])
    with LinePipe(transport) as pipe:
        assert pipe.is_connected()
    assert transport.closed
