"""Tests for the JSON codec."""

from dataclasses import dataclass

import pytest

from wled_pipe.errors import CodecError
from wled_pipe.models.state import LedState
from wled_pipe.protocol.codec import JsonCodec


@dataclass
class Segment:
    id: int = 0
    col: list | None = None


def test_serialize_is_compact():
    codec = JsonCodec()
    assert codec.serialize({"on": True, "bri": 255}) == '{"on":true,"bri":255}'


def test_serialize_never_contains_newline():
    codec = JsonCodec()
    text = codec.serialize({"a": "line1\nline2"})
    assert "\n" not in text


def test_serialize_dataclass_uses_to_dict():
    codec = JsonCodec()
    assert codec.serialize(LedState(on=True, bri=10)) == '{"on":true,"bri":10}'


def test_serialize_plain_dataclass():
    codec = JsonCodec()
    assert codec.serialize(Segment(id=1, col=[255, 0, 0])) == '{"id":1,"col":[255,0,0]}'


def test_serialize_unsupported_value():
    codec = JsonCodec()
    with pytest.raises(CodecError):
        codec.serialize({"bad": object()})


def test_deserialize_plain_value():
    codec = JsonCodec()
    assert codec.deserialize('{"on":true,"bri":128,"ps":2}') == {
        "on": True,
        "bri": 128,
        "ps": 2,
    }


def test_deserialize_malformed():
    codec = JsonCodec()
    with pytest.raises(CodecError):
        codec.deserialize("not json")


def test_deserialize_to_model_ignores_unknown_keys():
    codec = JsonCodec()
    state = codec.deserialize('{"on":true,"bri":128,"ps":2,"seg":[]}', LedState)
    assert state == LedState(on=True, bri=128, ps=2)


def test_deserialize_to_plain_dataclass():
    codec = JsonCodec()
    seg = codec.deserialize('{"id":3,"col":[1,2,3],"fx":9}', Segment)
    assert seg == Segment(id=3, col=[1, 2, 3])


def test_deserialize_dataclass_needs_object():
    codec = JsonCodec()
    with pytest.raises(CodecError):
        codec.deserialize("[1,2]", LedState)


def test_deserialize_type_mismatch():
    codec = JsonCodec()
    with pytest.raises(CodecError):
        codec.deserialize('"text"', dict)


def test_deserialize_bool_is_not_int():
    codec = JsonCodec()
    with pytest.raises(CodecError):
        codec.deserialize("true", int)


def test_deserialize_int_as_float():
    codec = JsonCodec()
    value = codec.deserialize("3", float)
    assert value == 3.0
    assert isinstance(value, float)


@pytest.mark.parametrize(
    "value",
    [
        {"on": True, "bri": 5},
        [1, "two", None, 3.5],
        "café",
        None,
        {"seg": [{"id": 0, "col": [[255, 0, 0]]}]},
    ],
)
def test_roundtrip(value):
    """Serialized values decode back to an equal value."""
    codec = JsonCodec()
    assert codec.deserialize(codec.serialize(value)) == value
