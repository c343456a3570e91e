"""Serialization of structured setting values to JSON or MessagePack blobs.

Values are validated and dumped through a pydantic ``TypeAdapter``, so any
type pydantic understands (models, dataclasses, typed dicts, collections) can
be stored as a blob.
"""

import math
from functools import lru_cache
from typing import Any

import msgpack
from pydantic import TypeAdapter

from ..domain.enums import BlobFormat
from ..domain.exceptions import SerializationError


@lru_cache(maxsize=256)
def _adapter_for(value_type: Any) -> TypeAdapter:
    return TypeAdapter(value_type)


def type_name(value_type: Any) -> str:
    """Get a readable name for a value type, including generic aliases."""
    return getattr(value_type, "__name__", None) or str(value_type)


def get_type_adapter(value_type: Any) -> TypeAdapter:
    """Get a cached TypeAdapter for a value type."""
    try:
        return _adapter_for(value_type)
    except TypeError:
        # Unhashable type expressions cannot be cached
        return TypeAdapter(value_type)


def _find_non_finite(obj: Any) -> float | None:
    if isinstance(obj, float):
        return None if math.isfinite(obj) else obj
    if isinstance(obj, dict):
        obj = list(obj.values())
    if isinstance(obj, list | tuple | set | frozenset):
        for item in obj:
            found = _find_non_finite(item)
            if found is not None:
                return found
    return None


def validate_value(value: Any, value_type: Any) -> Any:
    """Validate a value against ``value_type``, returning the validated form.

    Raises:
        SerializationError: If the value does not match ``value_type``
    """
    name = type_name(value_type)
    try:
        return get_type_adapter(value_type).validate_python(value)
    except Exception as e:
        raise SerializationError(f"Invalid {name}: {e}", type_name=name) from e


def encode_value(value: Any, value_type: Any, blob_format: BlobFormat = BlobFormat.JSON) -> bytes:
    """Encode a structured value to bytes.

    Non-finite floats are rejected in both formats; the JSON dump would turn
    them into ``null``, which no longer validates as a float.

    Raises:
        SerializationError: If the value does not match ``value_type`` or cannot be encoded
    """
    name = type_name(value_type)
    try:
        adapter = get_type_adapter(value_type)
        value = adapter.validate_python(value)
        non_finite = _find_non_finite(adapter.dump_python(value))
        if non_finite is not None:
            raise ValueError(f"Out of range float value {non_finite!r}")
        if blob_format == BlobFormat.MSGPACK:
            data = adapter.dump_python(value, mode="json")
            return bytes(msgpack.packb(data, use_bin_type=True))
        return adapter.dump_json(value)
    except Exception as e:
        raise SerializationError(f"Failed to encode {name}: {e}", type_name=name) from e


def decode_value(data: bytes, value_type: Any, blob_format: BlobFormat = BlobFormat.JSON) -> Any:
    """Decode bytes produced by ``encode_value``.

    Raises:
        SerializationError: If the blob is empty, corrupt or does not validate as ``value_type``
    """
    name = type_name(value_type)
    if not data or data.isspace():
        raise SerializationError(f"Empty blob for {name}", type_name=name)
    try:
        adapter = get_type_adapter(value_type)
        if blob_format == BlobFormat.MSGPACK:
            return adapter.validate_python(msgpack.unpackb(data, raw=False))
        return adapter.validate_json(data)
    except Exception as e:
        raise SerializationError(f"Failed to decode {name}: {e}", type_name=name) from e


# Bytes a JSON document can start with; every other byte except 0xC1 starts
# a MessagePack object (fixints included).
_JSON_START_BYTES = frozenset(b' \t\r\n{["-0123456789tfn')
_MSGPACK_NEVER_USED = 0xC1


def is_msgpack(data: bytes) -> bool:
    """Check if a blob looks like MessagePack rather than JSON text.

    Blobs whose first byte is valid at the start of both (single digit
    fixints, for instance) are treated as JSON.
    """
    if not data:
        return False

    first_byte = data[0]
    return first_byte not in _JSON_START_BYTES and first_byte != _MSGPACK_NEVER_USED


def detect_and_decode(data: bytes, value_type: Any) -> Any:
    """Decode a blob whose format is not known up front."""
    blob_format = BlobFormat.MSGPACK if is_msgpack(data) else BlobFormat.JSON
    return decode_value(data, value_type, blob_format)
