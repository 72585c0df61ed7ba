"""Supabase repository for the consumption ledger."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from supabase import Client

from calorize.adapters.supabase_errors import translate_errors
from calorize.adapters.supabase_rows import parse_timestamp
from calorize.domain.logs import LogEntry
from calorize.errors import StorageError
from calorize.services.ledger import LogRepository

LOG_COLUMNS = (
    "id, user_id, food_id, amount, meal_tag, logged_at, created_at, deleted_at"
)


@dataclass
class SupabaseLogRepository(LogRepository):
    """Supabase implementation for log entries."""

    client: Client

    def create_entry(self, entry: LogEntry) -> LogEntry:
        """Insert a log entry row."""
        with translate_errors("create log entry"):
            response = (
                self.client.table("log_entries")
                .insert(
                    {
                        "id": str(entry.id),
                        "user_id": str(entry.user_id),
                        "food_id": str(entry.food_id),
                        "amount": entry.amount,
                        "meal_tag": entry.meal_tag,
                        "logged_at": entry.logged_at.isoformat(),
                        "created_at": entry.created_at.isoformat(),
                    }
                )
                .execute()
            )
        if not response.data:
            raise StorageError("Failed to create log entry")
        return _parse_entry(response.data[0])

    def get_entry(self, entry_id: UUID) -> LogEntry | None:
        """Return a log entry by id."""
        with translate_errors("get log entry"):
            response = (
                self.client.table("log_entries")
                .select(LOG_COLUMNS)
                .eq("id", str(entry_id))
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def list_entries(
        self, user_id: UUID, start: datetime, end: datetime
    ) -> list[LogEntry]:
        """Return live entries in ``[start, end)``."""
        with translate_errors("list log entries"):
            response = (
                self.client.table("log_entries")
                .select(LOG_COLUMNS)
                .eq("user_id", str(user_id))
                .gte("logged_at", start.isoformat())
                .lt("logged_at", end.isoformat())
                .is_("deleted_at", "null")
                .order("logged_at", desc=False)
                .execute()
            )
        return [_parse_entry(row) for row in response.data or []]

    def soft_delete_entry(
        self, entry_id: UUID, user_id: UUID, deleted_at: datetime
    ) -> None:
        """Set deleted_at on an entry owned by the user."""
        with translate_errors("delete log entry"):
            self.client.table("log_entries").update(
                {"deleted_at": deleted_at.isoformat()}
            ).eq("id", str(entry_id)).eq("user_id", str(user_id)).is_(
                "deleted_at", "null"
            ).execute()


def _parse_entry(row: dict[str, object]) -> LogEntry:
    logged_at = parse_timestamp(row.get("logged_at"))
    return LogEntry(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        food_id=UUID(str(row["food_id"])),
        amount=float(row.get("amount") or 0.0),
        meal_tag=str(row.get("meal_tag") or ""),
        logged_at=logged_at or datetime.min,
        created_at=parse_timestamp(row.get("created_at")) or logged_at or datetime.min,
        deleted_at=parse_timestamp(row.get("deleted_at")),
    )
