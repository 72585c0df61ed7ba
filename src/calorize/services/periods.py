"""Calendar window resolution for ledger and stats queries."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calorize.domain.stats import StatsWindow
from calorize.errors import ValidationError

PERIOD_DAY = "day"
PERIOD_WEEK = "week"
PERIOD_MONTH = "month"
PERIODS = (PERIOD_DAY, PERIOD_WEEK, PERIOD_MONTH)

DECEMBER = 12


def resolve_window(
    period: str,
    anchor: date | datetime | str | None = None,
    timezone_name: str = "UTC",
) -> StatsWindow:
    """Return the ``[start, end)`` window of ``period`` containing ``anchor``.

    The window is computed on the calendar of ``timezone_name`` and returned
    in UTC. Weeks start on Monday, so a Sunday anchor falls in the week that
    began six days earlier.
    """
    tz = _zone(timezone_name)
    day = anchor_date(anchor, tz)
    if period == PERIOD_DAY:
        start_day = day
        end_day = day + timedelta(days=1)
    elif period == PERIOD_WEEK:
        start_day = day - timedelta(days=day.weekday())
        end_day = start_day + timedelta(days=7)
    elif period == PERIOD_MONTH:
        start_day = day.replace(day=1)
        if start_day.month == DECEMBER:
            end_day = start_day.replace(year=start_day.year + 1, month=1)
        else:
            end_day = start_day.replace(month=start_day.month + 1)
    else:
        raise ValidationError(
            f"invalid period {period!r}, expected one of {', '.join(PERIODS)}"
        )
    return StatsWindow(
        period=period,
        start=_local_midnight(start_day, tz),
        end=_local_midnight(end_day, tz),
    )


def anchor_date(anchor: date | datetime | str | None, tz: ZoneInfo) -> date:
    """Normalize an anchor to a calendar date in ``tz``."""
    if anchor is None:
        return datetime.now(tz=tz).date()
    if isinstance(anchor, datetime):
        if anchor.tzinfo is None:
            anchor = anchor.replace(tzinfo=UTC)
        return anchor.astimezone(tz).date()
    if isinstance(anchor, date):
        return anchor
    return parse_calendar_date(anchor)


def parse_calendar_date(raw: str) -> date:
    """Parse a ``YYYY-MM-DD`` literal."""
    try:
        return date.fromisoformat(raw.strip())
    except (AttributeError, ValueError) as exc:
        raise ValidationError(
            f"invalid date {raw!r}, expected YYYY-MM-DD"
        ) from exc


def _local_midnight(day: date, tz: ZoneInfo) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=tz).astimezone(UTC)


def _zone(timezone_name: str) -> ZoneInfo:
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"unknown timezone {timezone_name!r}") from exc
