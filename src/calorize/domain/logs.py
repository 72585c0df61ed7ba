"""Domain models for the consumption ledger."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class LogEntry:
    """Consumption event pinned to one exact food version."""

    id: UUID
    user_id: UUID
    food_id: UUID
    amount: float
    meal_tag: str
    logged_at: datetime
    created_at: datetime
    deleted_at: datetime | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
