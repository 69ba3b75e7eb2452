from datetime import date, datetime, timezone


def to_calendar_date(v) -> date | None:
    """Coerce a date, datetime or ISO string to a calendar date.

    Aware datetimes are converted to UTC first so the time of day and the
    offset never move the result. Empty or unparseable input gives ``None``.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        if v.tzinfo is not None:
            v = v.astimezone(timezone.utc)
        return v.date()
    if isinstance(v, date):
        return v

    s = str(v).strip()
    if not s:
        return None
    if s.endswith(("Z", "z")):
        s = s[:-1] + "+00:00"
    try:
        return to_calendar_date(datetime.fromisoformat(s))
    except ValueError:
        return None


def days_between(d1, d2) -> int:
    a = to_calendar_date(d1)
    b = to_calendar_date(d2)
    if a is None or b is None:
        return 0
    return (b - a).days
