"""JSON encoding used by structured logging."""

from typing import Any

import msgspec

__all__ = ("decode_json", "encode_json")

_encoder = msgspec.json.Encoder(enc_hook=str)
_decoder = msgspec.json.Decoder()


def encode_json(data: Any) -> str:
    """Encode data to a JSON string.

    Values msgspec cannot encode natively are passed through :func:`str`.

    Args:
        data: Data to encode.

    Returns:
        JSON string.
    """
    return _encoder.encode(data).decode("utf-8")


def decode_json(data: "str | bytes") -> Any:
    """Decode a JSON string or bytes to a Python object."""
    return _decoder.decode(data)
