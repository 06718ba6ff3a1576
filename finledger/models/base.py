"""Shared base for persisted ledger entities."""

from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


def today_or(today: Optional[date]) -> date:
    """Return the given day, defaulting to the current local date."""
    return today if today is not None else date.today()


class LedgerEntity(BaseModel):
    """
    Identity and timestamps common to every stored entity.

    Entities are mutable: domain methods change fields in place and
    call touch() to bump updated_at.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique entity ID"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        description="When the entity was created"
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        description="Last update timestamp"
    )

    def touch(self) -> None:
        self.updated_at = utc_now()
