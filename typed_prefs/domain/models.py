"""Setting definition model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import ValueKind


class SettingDefinition(BaseModel):
    """Binding of a store key to an initial value and a value kind.

    Definitions are frozen; a setting never changes its key, default or kind
    after construction.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    key: str = Field(..., min_length=1, description="Store key the setting is bound to")
    initial: Any = Field(..., description="Value returned while nothing valid is stored")
    kind: ValueKind = Field(..., description="Value kind selecting the read/write rule")

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Reject keys made only of whitespace."""
        if not v.strip():
            raise ValueError("Setting key cannot be empty or contain only whitespace")
        return v

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.key}"
