"""JSON codec used by ``send_value`` / ``try_read_value``.

Serialization is compact (``{"on":true,"bri":255}``) so a value always
fits on a single line. Dataclasses are supported in both directions.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any

from ..errors import CodecError


class JsonCodec:
    """Converts between Python values and single-line JSON text.

    Any object with the same ``serialize`` / ``deserialize`` methods can be
    passed to a pipe in place of this class.
    """

    def serialize(self, value: Any) -> str:
        """Serialize ``value`` to compact JSON.

        Raises:
            CodecError: If ``value`` cannot be represented as JSON.
        """
        try:
            return json.dumps(
                value,
                separators=(",", ":"),
                ensure_ascii=False,
                default=_encode_object,
            )
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot serialize {type(value).__name__}: {e}") from e

    def deserialize(self, text: str, target: type | None = None) -> Any:
        """Parse ``text`` and optionally coerce it to ``target``.

        Args:
            text: A single JSON document.
            target: ``None`` to return the plain JSON value, a dataclass type
                to build from a JSON object, or a plain type (``dict``,
                ``list``, ``int``, ...) the value must be an instance of.

        Raises:
            CodecError: On malformed JSON or a shape mismatch.
        """
        try:
            value = json.loads(text)
        except json.JSONDecodeError as e:
            raise CodecError(f"Malformed JSON: {e}") from e

        if target is None or target is Any:
            return value

        if dataclasses.is_dataclass(target):
            if not isinstance(value, dict):
                raise CodecError(
                    f"Expected a JSON object for {target.__name__}, "
                    f"got {type(value).__name__}"
                )
            return _build_dataclass(target, value)

        if target is float and isinstance(value, int) and not isinstance(value, bool):
            return float(value)
        if target is int and isinstance(value, bool):
            raise CodecError("Expected int, got bool")
        if not isinstance(value, target):
            raise CodecError(
                f"Expected {target.__name__}, got {type(value).__name__}"
            )
        return value


def _encode_object(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        if hasattr(obj, "to_dict"):
            return obj.to_dict()
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _build_dataclass(cls: type, data: dict) -> Any:
    if hasattr(cls, "from_dict"):
        try:
            return cls.from_dict(data)
        except (TypeError, ValueError) as e:
            raise CodecError(f"Cannot build {cls.__name__}: {e}") from e

    # Unknown keys are ignored; the device reports far more than we model.
    names = {f.name for f in dataclasses.fields(cls) if f.init}
    try:
        return cls(**{k: v for k, v in data.items() if k in names})
    except TypeError as e:
        raise CodecError(f"Cannot build {cls.__name__}: {e}") from e
