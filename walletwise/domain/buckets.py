"""
Date-range buckets for the transactions view.

Ranges (all relative to an explicit `now`, UTC):
- daily:   7 days starting from the first day of the current week
- weekly:  weeks of the current month (days 1-7, 8-14, ...), last one clipped
- monthly: January through December of the current year

Bucket intervals are inclusive on both ends; `end` is one microsecond
before the next bucket starts.
"""
import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Tuple

from walletwise.utils.timestamps import ensure_utc, parse_timestamp

TIME_RANGE_DAILY = "daily"
TIME_RANGE_WEEKLY = "weekly"
TIME_RANGE_MONTHLY = "monthly"
TIME_RANGES = (TIME_RANGE_DAILY, TIME_RANGE_WEEKLY, TIME_RANGE_MONTHLY)

_TICK = timedelta(microseconds=1)


@dataclass(frozen=True)
class DateRangeBucket:
    id: str
    label: str
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end


def _day_start(d: date) -> datetime:
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc)


def start_of_week(d: date, first_day_of_week: int) -> date:
    """
    Начало недели для даты

    first_day_of_week: 0=воскресенье, 1=понедельник, ... 6=суббота
    """
    if not 0 <= first_day_of_week <= 6:
        raise ValueError("first_day_of_week must be in 0..6 (0=Sunday)")
    # date.weekday(): понедельник=0; переводим в нумерацию с воскресенья=0
    sunday_based = (d.weekday() + 1) % 7
    return d - timedelta(days=(sunday_based - first_day_of_week) % 7)


def _daily_buckets(now: datetime, first_day_of_week: int) -> List[DateRangeBucket]:
    week_start = start_of_week(now.date(), first_day_of_week)
    buckets = []
    for i in range(7):
        d = week_start + timedelta(days=i)
        start = _day_start(d)
        buckets.append(DateRangeBucket(
            id=d.isoformat(),
            label=f"{d:%A}, {d.day} {d:%b %Y}",
            start=start,
            end=start + timedelta(days=1) - _TICK,
        ))
    return buckets


def _weekly_buckets(now: datetime) -> List[DateRangeBucket]:
    today = now.date()
    last_day = calendar.monthrange(today.year, today.month)[1]
    month_end = _day_start(date(today.year, today.month, last_day)) + timedelta(days=1) - _TICK

    buckets = []
    week_num = 1
    week_start = date(today.year, today.month, 1)
    while week_start.month == today.month:
        start = _day_start(week_start)
        end = min(start + timedelta(days=7) - _TICK, month_end)
        buckets.append(DateRangeBucket(
            id=f"week-{week_num}",
            label=f"Week {week_num} ({week_start.day}-{end.day} {end:%b})",
            start=start,
            end=end,
        ))
        week_start += timedelta(days=7)
        week_num += 1
    return buckets


def _monthly_buckets(now: datetime) -> List[DateRangeBucket]:
    year = now.year
    buckets = []
    for month in range(1, 13):
        first = date(year, month, 1)
        last_day = calendar.monthrange(year, month)[1]
        buckets.append(DateRangeBucket(
            id=f"{first:%Y-%m}",
            label=f"{first:%B %Y}",
            start=_day_start(first),
            end=_day_start(date(year, month, last_day)) + timedelta(days=1) - _TICK,
        ))
    return buckets


def transaction_buckets(
    time_range: str,
    now: datetime,
    first_day_of_week: int = 1,
) -> List[DateRangeBucket]:
    """Бакеты для выбранного диапазона; неизвестный диапазон — как weekly"""
    now = ensure_utc(now)
    if time_range == TIME_RANGE_DAILY:
        return _daily_buckets(now, first_day_of_week)
    if time_range == TIME_RANGE_MONTHLY:
        return _monthly_buckets(now)
    return _weekly_buckets(now)


def date_range_for_fetch(
    time_range: str,
    now: datetime,
    first_day_of_week: int = 1,
) -> Tuple[date, date]:
    """Общий диапазон дат для запроса транзакций (покрывает все бакеты)"""
    buckets = transaction_buckets(time_range, now, first_day_of_week)
    if not buckets:
        year = ensure_utc(now).year
        return date(year, 1, 1), date(year, 12, 31)
    return buckets[0].start.date(), buckets[-1].end.date()


def bucket_for(moment, buckets: Iterable[DateRangeBucket]) -> DateRangeBucket | None:
    """Бакет, в который попадает момент (datetime или ISO-строка)"""
    when = parse_timestamp(moment)
    if when is None:
        return None
    for bucket in buckets:
        if bucket.contains(when):
            return bucket
    return None


def group_transactions(transactions: Iterable, buckets: List[DateRangeBucket]) -> Dict[str, list]:
    """
    Разложить транзакции по бакетам

    Returns:
        {bucket.id: [transactions]} для всех бакетов (пустые тоже);
        транзакции вне диапазона или без даты не попадают никуда
    """
    grouped: Dict[str, list] = {b.id: [] for b in buckets}
    for tx in transactions:
        bucket = bucket_for(tx.date, buckets)
        if bucket is not None:
            grouped[bucket.id].append(tx)
    return grouped
