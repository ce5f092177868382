"""Shared reduction used by every backend.

Relational backends feed grouped ``COUNT``/``SUM`` rows into :class:`TypeBuckets`;
the object-storage backend feeds individual events. Both finalize through
:meth:`EventStats.from_totals`, so averages are identical whatever the medium.

Pipeline: scan -> filter -> bucket (event type, day-of-week, week-start)
-> running {count, total} -> finalize to {count, avg or None}.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Hashable, Iterable, List, Optional

from ..common.datetime_utils import day_of_week, week_start
from ..core.enums import EventType
from .model import EmotionLog, EventStats, Summary, Trends, WeekdayTrend, WeeklyTrend

DAYS_IN_WEEK = 7


@dataclass
class BucketAccumulator:
    count: int = 0
    total: int = 0

    def add(self, emotion: int) -> None:
        self.count += 1
        self.total += int(emotion)

    def merge(self, count: int, total: int) -> None:
        self.count += int(count)
        self.total += int(total)

    def finalize(self) -> EventStats:
        return EventStats.from_totals(self.count, self.total)


class TypeBuckets:
    """Running totals per (bucket key, event type)."""

    def __init__(self) -> None:
        self._buckets: Dict[Hashable, Dict[EventType, BucketAccumulator]] = {}

    def _slot(self, key: Hashable, event_type: EventType) -> BucketAccumulator:
        per_type = self._buckets.setdefault(key, {})
        return per_type.setdefault(EventType(event_type), BucketAccumulator())

    def add(self, key: Hashable, event_type: EventType, emotion: int) -> None:
        self._slot(key, event_type).add(emotion)

    def add_totals(self, key: Hashable, event_type: EventType, count: int, total: int) -> None:
        self._slot(key, event_type).merge(count, total)

    def keys(self) -> List[Hashable]:
        return list(self._buckets.keys())

    def stats(self, key: Hashable, event_type: EventType) -> EventStats:
        acc = self._buckets.get(key, {}).get(event_type)
        return acc.finalize() if acc else EventStats()


def summary_from(buckets: TypeBuckets, key: Hashable = None) -> Summary:
    return Summary(
        clock_in=buckets.stats(key, EventType.IN),
        clock_out=buckets.stats(key, EventType.OUT),
    )


def weekday_from(buckets: TypeBuckets) -> List[WeekdayTrend]:
    # Dense: all seven days, Sunday=0.
    return [
        WeekdayTrend(
            dow=dow,
            clock_in=buckets.stats(dow, EventType.IN),
            clock_out=buckets.stats(dow, EventType.OUT),
        )
        for dow in range(DAYS_IN_WEEK)
    ]


def weekly_from(buckets: TypeBuckets) -> List[WeeklyTrend]:
    # Sparse: only weeks that received at least one row.
    weeks: List[date] = sorted(buckets.keys())
    return [
        WeeklyTrend(
            week_start=wk,
            clock_in=buckets.stats(wk, EventType.IN),
            clock_out=buckets.stats(wk, EventType.OUT),
        )
        for wk in weeks
    ]


def bucket_events(
    logs: Iterable[EmotionLog], key_fn: Optional[Callable[[EmotionLog], Hashable]] = None
) -> TypeBuckets:
    buckets = TypeBuckets()
    for log in logs:
        key = key_fn(log) if key_fn else None
        buckets.add(key, log.event_type, log.emotion)
    return buckets


def summarize(logs: Iterable[EmotionLog]) -> Summary:
    return summary_from(bucket_events(logs))


def build_trends(logs: Iterable[EmotionLog]) -> Trends:
    logs = list(logs)
    by_dow = bucket_events(logs, lambda log: day_of_week(log.created_at))
    by_week = bucket_events(logs, lambda log: week_start(log.created_at))
    return Trends(weekday=weekday_from(by_dow), weekly=weekly_from(by_week))
