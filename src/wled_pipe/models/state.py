"""LED controller state model.

Covers the top-level keys of a WLED JSON state object that are commonly
sent from a control loop. Responses carry many more keys; those are
ignored when decoding.
"""

from __future__ import annotations

from dataclasses import dataclass, fields


@dataclass
class LedState:
    """Top-level controller state.

    ``None`` means "not set" and is omitted when serialized, so a partial
    state only touches the keys it names.
    """

    on: bool | None = None
    bri: int | None = None
    ps: int | None = None
    transition: int | None = None

    def to_dict(self) -> dict:
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: dict) -> LedState:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
