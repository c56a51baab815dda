"""Date-time helpers for timestamps and target date comparisons."""

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC time as a naive datetime, matching stored columns."""

    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(value: datetime) -> datetime:
    """Normalize an aware timestamp to naive UTC; naive values are assumed UTC."""

    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def completed_on_time(completed_at: datetime, target_date: date | None) -> bool:
    """Return True when completion falls on or before the target calendar day.

    The whole target day counts: a goal due on the 15th and finished at
    23:59 UTC that day is on time. Comparing against midnight at the start
    of the target date would instead treat anything after 00:00 as late.
    """

    if target_date is None:
        return False
    if isinstance(target_date, datetime):
        target_date = as_utc_naive(target_date).date()
    return as_utc_naive(completed_at).date() <= target_date
