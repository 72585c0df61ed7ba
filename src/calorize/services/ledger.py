"""Consumption ledger service."""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol
from uuid import UUID, uuid4

from calorize.domain.logs import LogEntry
from calorize.errors import NotAuthorizedError, NotFoundError, ValidationError
from calorize.services.catalog import FoodRepository
from calorize.services.periods import PERIOD_DAY, resolve_window
from calorize.services.users import require_user_id

logger = logging.getLogger(__name__)


class LogRepository(Protocol):
    """Persistence interface for log entries."""

    def create_entry(self, entry: LogEntry) -> LogEntry:
        """Insert a log entry and return it."""

    def get_entry(self, entry_id: UUID) -> LogEntry | None:
        """Return a log entry by id, including soft-deleted ones."""

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[LogEntry]:
        """Return live entries with ``start <= logged_at < end``, ascending."""

    def soft_delete_entry(
        self, entry_id: UUID, user_id: UUID, deleted_at: datetime
    ) -> None:
        """Set ``deleted_at`` on an entry owned by ``user_id``."""


@dataclass
class LedgerService:
    """Append-only record of what users consumed and when."""

    repository: LogRepository
    food_repository: FoodRepository
    timezone_name: str = "UTC"

    def append(
        self,
        user_id: UUID | None,
        food_id: UUID,
        amount: float,
        meal_tag: str = "",
        logged_at: datetime | None = None,
    ) -> LogEntry:
        """Log ``amount`` of an exact food version.

        Superseded and deleted versions are accepted so history stays
        reproducible.
        """
        owner_id = require_user_id(user_id)
        if isinstance(amount, bool) or not isinstance(amount, int | float):
            raise ValidationError("amount must be a number")
        if not math.isfinite(amount) or amount < 0:
            raise ValidationError("amount must be a non-negative number")
        if self.food_repository.get_version(food_id) is None:
            raise NotFoundError(f"food {food_id} not found")

        now = datetime.now(tz=UTC)
        entry = LogEntry(
            id=uuid4(),
            user_id=owner_id,
            food_id=food_id,
            amount=float(amount),
            meal_tag=(meal_tag or "").strip(),
            logged_at=_as_utc(logged_at) if logged_at else now,
            created_at=now,
        )
        created = self.repository.create_entry(entry)
        logger.info(
            "Logged food",
            extra={"log_id": str(created.id), "food_id": str(food_id)},
        )
        return created

    def query_range(
        self, user_id: UUID | None, start: datetime, end: datetime
    ) -> list[LogEntry]:
        """Return the caller's live entries in ``[start, end)``."""
        owner_id = require_user_id(user_id)
        start, end = _as_utc(start), _as_utc(end)
        if end < start:
            raise ValidationError("range end is before its start")
        entries = self.repository.list_entries(owner_id, start, end)
        return sorted(entries, key=lambda entry: entry.logged_at)

    def list_for_day(
        self, user_id: UUID | None, on: date | str | None = None
    ) -> list[LogEntry]:
        """Return the caller's entries for one calendar day (default today)."""
        window = resolve_window(PERIOD_DAY, on, self.timezone_name)
        return self.query_range(user_id, window.start, window.end)

    def soft_delete(self, entry_id: UUID, user_id: UUID | None) -> None:
        """Soft-delete an entry that belongs to the caller."""
        owner_id = require_user_id(user_id)
        entry = self.repository.get_entry(entry_id)
        if entry is None:
            raise NotFoundError(f"log entry {entry_id} not found")
        if entry.user_id != owner_id:
            logger.warning(
                "Rejected log deletion by non-owner",
                extra={"log_id": str(entry_id), "user_id": str(owner_id)},
            )
            raise NotAuthorizedError("log entry belongs to another user")
        if entry.is_deleted:
            return
        self.repository.soft_delete_entry(entry_id, owner_id, datetime.now(tz=UTC))


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
