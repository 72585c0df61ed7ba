"""User-related business logic."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from calorize.domain.models import UserRecord
from calorize.errors import NotAuthorizedError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def create_user(self, user: UserRecord) -> UserRecord:
        """Insert and return a new user record."""

    def get_user(self, user_id: UUID) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def get_by_name(self, name: str) -> UserRecord | None:
        """Return the user with the given unique name, if present."""

    def update_user(self, user_id: UUID, name: str, email: str) -> UserRecord:
        """Update name and email and return the stored record."""

    def set_disabled_at(self, user_id: UUID, disabled_at: datetime) -> None:
        """Mark the user as disabled."""


def require_user_id(user_id: UUID | None) -> UUID:
    """Reject calls that arrive without a caller identity."""
    if user_id is None:
        raise NotAuthorizedError("caller identity is required")
    return user_id


@dataclass
class UserService:
    """Application service for user lifecycle actions."""

    repository: UserRepository

    def create_user(self, name: str, email: str) -> UserRecord:
        """Create a user with a unique name."""
        cleaned_name = name.strip()
        if not cleaned_name:
            raise ValidationError("user name is required")
        if self.repository.get_by_name(cleaned_name) is not None:
            raise ValidationError(f"user name {cleaned_name!r} is taken")
        user = UserRecord(
            id=uuid4(),
            name=cleaned_name,
            email=email.strip(),
            disabled_at=None,
            created_at=datetime.now(tz=UTC),
        )
        created = self.repository.create_user(user)
        logger.info("Created user", extra={"user_id": str(created.id)})
        return created

    def get_user(self, user_id: UUID) -> UserRecord:
        """Return a user or raise if it doesn't exist."""
        user = self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError(f"user {user_id} not found")
        return user

    def get_by_name(self, name: str) -> UserRecord | None:
        return self.repository.get_by_name(name.strip())

    def update_profile(
        self, user_id: UUID, name: str | None = None, email: str | None = None
    ) -> UserRecord:
        """Change the name and/or email of a user."""
        current = self.get_user(user_id)
        new_name = current.name if name is None else name.strip()
        if not new_name:
            raise ValidationError("user name is required")
        if new_name != current.name:
            taken = self.repository.get_by_name(new_name)
            if taken is not None and taken.id != user_id:
                raise ValidationError(f"user name {new_name!r} is taken")
        new_email = current.email if email is None else email.strip()
        return self.repository.update_user(user_id, new_name, new_email)

    def disable_user(self, user_id: UUID) -> None:
        """Disable a user; repeated calls keep the first timestamp."""
        current = self.get_user(user_id)
        if current.is_disabled:
            return
        self.repository.set_disabled_at(user_id, datetime.now(tz=UTC))
        logger.info("Disabled user", extra={"user_id": str(user_id)})

    def require_active(self, user_id: UUID | None) -> UserRecord:
        """Return the caller's record, rejecting unknown or disabled users."""
        resolved = require_user_id(user_id)
        user = self.repository.get_user(resolved)
        if user is None or user.is_disabled:
            raise NotAuthorizedError("caller is not an active user")
        return user
