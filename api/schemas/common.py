"""Common Pydantic schemas shared across the API."""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field

# Largest value a BIGINT column holds
MAX_BIGINT = 2**63 - 1


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class CatalogItem(BaseModel):
    """A skill, benefit, category or location."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TimestampMixin(BaseModel):
    """Mixin for timestamp fields."""

    created_at: datetime = Field(description="Timestamp when the resource was created")
    updated_at: datetime = Field(description="Timestamp when the resource was last updated")
