"""
Timestamp parsing for upstream JSON records.

Все сравнения дат в ядре идут в UTC. Naive-значения считаются UTC.
"""
from datetime import date, datetime, timezone


def ensure_utc(value: datetime) -> datetime:
    """Привести datetime к aware UTC (naive трактуется как UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(raw) -> datetime | None:
    """
    Распарсить ISO-8601 строку (или date/datetime) в aware UTC datetime.

    Returns:
        datetime или None, если значение пустое или некорректное

    Example:
        >>> parse_timestamp("2024-01-08T00:00:00Z")
        datetime.datetime(2024, 1, 8, 0, 0, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp("not a date") is None
        True
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return ensure_utc(raw)
    if isinstance(raw, date):
        return datetime(raw.year, raw.month, raw.day, tzinfo=timezone.utc)
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = datetime.fromisoformat(raw.strip())
    except ValueError:
        return None
    return ensure_utc(parsed)


def isoformat_utc(value: datetime | None) -> str | None:
    """Сериализовать datetime обратно в ISO-строку с суффиксом Z."""
    if value is None:
        return None
    return ensure_utc(value).isoformat().replace("+00:00", "Z")
