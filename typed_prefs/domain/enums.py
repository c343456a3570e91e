"""Domain enums for typed settings."""

from enum import Enum


class ValueKind(str, Enum):
    """Value kinds a setting can hold.

    Each kind has exactly one read/write rule, see ``application.strategies``.
    """

    STRING = "string"
    INT = "int"
    FLOAT = "float"
    DOUBLE = "double"
    BOOL = "bool"
    DATE = "date"
    RAW_STRING = "raw_string"
    RAW_INT = "raw_int"
    CODABLE = "codable"
    INT_SET = "int_set"
    STRING_SET = "string_set"

    @property
    def is_numeric(self) -> bool:
        """Check if values of this kind live in the shared numeric bucket."""
        return self in (ValueKind.INT, ValueKind.FLOAT, ValueKind.DOUBLE, ValueKind.BOOL)

    @property
    def is_blob(self) -> bool:
        """Check if values of this kind are persisted as an encoded blob."""
        return self in (ValueKind.CODABLE, ValueKind.INT_SET, ValueKind.STRING_SET)


class BlobFormat(str, Enum):
    """Encoding used for structured values."""

    JSON = "json"
    MSGPACK = "msgpack"
