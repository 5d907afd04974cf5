from datetime import date, datetime, timedelta, timezone

from dateutil.relativedelta import relativedelta


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def calculate_end_date(start_date: date, lease_term_months: int | None) -> date | None:
    if not start_date or not lease_term_months:
        return None
    return start_date + relativedelta(months=lease_term_months) - timedelta(days=1)


def retry_backoff(retry_count: int, base_minutes: int) -> timedelta:
    exponent = max(retry_count - 1, 0)
    return timedelta(minutes=base_minutes * (2**exponent))


def naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
