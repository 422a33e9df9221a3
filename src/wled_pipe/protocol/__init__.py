"""Protocol layer: newline framing and the JSON codec."""

from .framing import LineFramer, encode_line
from .codec import JsonCodec
