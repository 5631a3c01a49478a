"""Pydantic model for replicated records."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Record(BaseModel):
    """Represents one record held by a record store.

    Only ``id`` and ``updated_at`` carry meaning for synchronization; ``fields``
    is an opaque payload that is copied to the target as-is.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "a1b2c3d4e5f6a7b8",
                "created_at": "2024-01-15T14:30:00Z",
                "updated_at": "2024-01-15T14:30:00Z",
                "fields": {"name": "GE", "owner": "test", "amount": 1000000},
            }
        },
    )

    id: str = Field(default=..., min_length=1, description="Unique record identifier")
    created_at: datetime = Field(default=..., description="Insertion timestamp")
    updated_at: datetime = Field(default=..., description="Last modification timestamp")
    fields: dict[str, Any] = Field(default_factory=dict, description="Opaque record payload")

    def get(self, key: str, default: Any = None) -> Any:
        """Return a payload field, or ``default`` when absent."""
        return self.fields.get(key, default)
