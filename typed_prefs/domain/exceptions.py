"""Exceptions raised by the typed settings layer."""


class TypedPrefsError(Exception):
    """Base exception for all typed-prefs errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SerializationError(TypedPrefsError):
    """Encoding or decoding of a structured value failed."""

    def __init__(self, message: str, type_name: str | None = None):
        super().__init__(message)
        self.type_name = type_name
        if type_name:
            self.details["type_name"] = type_name


class StoreError(TypedPrefsError):
    """Base exception for settings store operations."""

    def __init__(self, message: str, key: str | None = None, operation: str | None = None):
        super().__init__(message)
        self.key = key
        self.operation = operation
        if key:
            self.details["key"] = key
        if operation:
            self.details["operation"] = operation


class UnsupportedValueError(StoreError):
    """Raised when a value the store cannot hold natively is written."""

    def __init__(self, key: str, value_type: type):
        super().__init__(
            f"Cannot store value of type '{value_type.__name__}' for key '{key}'",
            key=key,
            operation="set",
        )
        self.value_type = value_type


class InvalidSettingError(TypedPrefsError):
    """Raised when a setting definition is malformed."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key
        if key:
            self.details["key"] = key
