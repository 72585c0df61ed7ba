"""Error taxonomy shared by services and adapters."""


class CalorizeError(Exception):
    """Base class for expected failures of catalog, ledger and stats calls."""


class ValidationError(CalorizeError):
    """Malformed input: bad date, period, identifier or payload."""


class NotFoundError(CalorizeError):
    """Unknown food version, family, user or log entry."""


class NotAuthorizedError(CalorizeError):
    """Missing caller identity or ownership mismatch."""


class ConflictError(CalorizeError):
    """Concurrent write lost a race, usually on version creation."""


class StorageError(CalorizeError):
    """The persistence layer failed."""
