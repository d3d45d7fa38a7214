from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Make a naive datetime timezone-aware (UTC). Already-aware datetimes pass through.

    MongoDB stores datetimes without tzinfo (naive). Wrap values read from a
    document with ensure_utc() before comparing them with utcnow().
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def parse_utc(value: str | datetime) -> datetime:
    """Parse an ISO 8601 string (with or without Z/offset) or datetime into UTC."""
    if isinstance(value, datetime):
        return ensure_utc(value)
    return ensure_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def current_nfl_week(season_start: date, total_weeks: int, today: date | None = None) -> int:
    """Week number for ``today``: one week per seven days since the season opener.

    Clamped to 1..total_weeks so pre-season resolves to week 1 and the
    off-season resolves to the last regular-season week.
    """
    today = today or utcnow().date()
    days_since_start = (today - season_start).days
    week = days_since_start // 7 + 1
    return max(1, min(total_weeks, week))
