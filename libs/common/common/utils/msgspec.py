from __future__ import annotations

from collections.abc import Callable
from pathlib import PurePath
from typing import Any

import msgspec
from pydantic import BaseModel

from common.utils.json_model import JsonModel

Serializer = Callable[[Any], Any]

__all__ = (
    "SerializationError",
    "decode_json",
    "default_serializer",
    "encode_json",
)


class SerializationError(Exception):
    """Encoding or decoding of an object failed."""


DEFAULT_TYPE_ENCODERS: dict[Any, Serializer] = {
    PurePath: str,
    JsonModel: lambda val: val.to_dict(mode="json"),
    BaseModel: lambda val: val.model_dump(mode="json"),
    BaseException: lambda val: f"{val.__class__.__name__}: {val}",
}


def default_serializer(value: Any) -> Any:
    """Transform values that ``msgspec`` cannot encode natively."""
    for base in value.__class__.__mro__[:-1]:
        encoder = DEFAULT_TYPE_ENCODERS.get(base)
        if encoder is not None:
            return encoder(value)

    raise TypeError(f"Unsupported type: {type(value)!r}")


# Decimals are written as strings so money stays exact on the wire
_default_json_encoder = msgspec.json.Encoder(enc_hook=default_serializer, decimal_format="string")
_default_json_decoder = msgspec.json.Decoder()


def encode_json(value: Any, serializer: Serializer | None = None) -> bytes:
    """Encode a value into JSON bytes.

    Raises:
        SerializationError: If ``value`` cannot be encoded.
    """
    try:
        return msgspec.json.encode(value, enc_hook=serializer) if serializer else _default_json_encoder.encode(value)
    except (TypeError, msgspec.EncodeError) as msgspec_error:
        raise SerializationError(str(msgspec_error)) from msgspec_error


def decode_json(value: str | bytes) -> Any:
    """Decode JSON into builtin Python objects.

    Raises:
        SerializationError: If ``value`` is not valid JSON.
    """
    try:
        return _default_json_decoder.decode(value)
    except msgspec.DecodeError as msgspec_error:
        raise SerializationError(str(msgspec_error)) from msgspec_error
