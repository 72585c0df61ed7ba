"""Translation of Supabase client failures into the calorize error taxonomy."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import httpx
from postgrest.exceptions import APIError

from calorize.errors import ConflictError, NotFoundError, StorageError

logger = logging.getLogger(__name__)

# unique_violation, serialization_failure, deadlock_detected
CONFLICT_CODES = frozenset({"23505", "40001", "40P01"})
# no_data_found, raised by create_food_version for unknown families
NOT_FOUND_CODES = frozenset({"P0002"})


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise PostgREST and transport errors as calorize errors."""
    try:
        yield
    except APIError as exc:
        code = str(exc.code or "")
        if code in CONFLICT_CODES:
            raise ConflictError(f"{action}: {exc.message}") from exc
        if code in NOT_FOUND_CODES:
            raise NotFoundError(f"{action}: {exc.message}") from exc
        logger.error(
            "Supabase request failed", extra={"action": action, "code": code}
        )
        raise StorageError(f"{action}: {exc.message}") from exc
    except httpx.HTTPError as exc:
        logger.error("Supabase transport failed", extra={"action": action})
        raise StorageError(f"{action}: {exc}") from exc
