"""Domain models for users."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: UUID
    name: str
    email: str
    disabled_at: datetime | None
    created_at: datetime

    @property
    def is_disabled(self) -> bool:
        return self.disabled_at is not None
