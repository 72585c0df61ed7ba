"""Supabase repository for users."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from calorize.adapters.supabase_errors import translate_errors
from calorize.adapters.supabase_rows import parse_timestamp
from calorize.domain.models import UserRecord
from calorize.errors import NotFoundError, StorageError
from calorize.services.users import UserRepository

USER_COLUMNS = "id, name, email, disabled_at, created_at"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def create_user(self, user: UserRecord) -> UserRecord:
        """Insert a new user row."""
        with translate_errors("create user"):
            response = (
                self.client.table("users")
                .insert(
                    {
                        "id": str(user.id),
                        "name": user.name,
                        "email": user.email,
                        "created_at": user.created_at.isoformat(),
                    }
                )
                .execute()
            )
        if not response.data:
            raise StorageError("Failed to create user in Supabase")
        return _parse_user(response.data[0])

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Fetch a user by id."""
        return self._get_one("id", str(user_id))

    def get_by_name(self, name: str) -> UserRecord | None:
        """Fetch a user by unique name."""
        return self._get_one("name", name)

    def update_user(self, user_id: UUID, name: str, email: str) -> UserRecord:
        """Update name and email."""
        with translate_errors("update user"):
            response = (
                self.client.table("users")
                .update({"name": name, "email": email})
                .eq("id", str(user_id))
                .execute()
            )
        if not response.data:
            raise NotFoundError(f"user {user_id} not found")
        return _parse_user(response.data[0])

    def set_disabled_at(self, user_id: UUID, disabled_at: datetime) -> None:
        """Mark a user disabled."""
        with translate_errors("disable user"):
            self.client.table("users").update(
                {"disabled_at": disabled_at.isoformat()}
            ).eq("id", str(user_id)).execute()

    def _get_one(self, column: str, value: str) -> UserRecord | None:
        with translate_errors("get user"):
            response = (
                self.client.table("users")
                .select(USER_COLUMNS)
                .eq(column, value)
                .limit(1)
                .execute()
            )
        if not response.data:
            return None
        return _parse_user(response.data[0])


def _parse_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        email=str(row.get("email") or ""),
        disabled_at=parse_timestamp(row.get("disabled_at")),
        created_at=parse_timestamp(row.get("created_at")) or datetime.now(tz=UTC),
    )
