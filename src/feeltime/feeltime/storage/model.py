from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..common.datetime_utils import to_iso_z
from ..core.enums import EventType


@dataclass(frozen=True)
class Department:
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Employee:
    id: str
    name: str
    department_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "department_id": self.department_id}


@dataclass(frozen=True)
class EmotionLog:
    """Domain entity: one clock event tagged with an emotion score.

    ``employee_id`` is deliberately not tied to a seeded Employee row; ad-hoc
    ids supplied by the caller are accepted.
    """

    id: str
    employee_id: str
    event_type: EventType
    emotion: int
    note: Optional[str]
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "event_type": self.event_type.value,
            "emotion": self.emotion,
            "note": self.note,
            "created_at": to_iso_z(self.created_at),
        }


@dataclass(frozen=True)
class EventStats:
    count: int = 0
    avg: Optional[float] = None

    @classmethod
    def from_totals(cls, count: int, total: int) -> "EventStats":
        """Single place where averages are derived, so every backend agrees."""
        count = int(count or 0)
        if count == 0:
            return cls(0, None)
        return cls(count, int(total) / count)

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "avg": self.avg}


@dataclass(frozen=True)
class Summary:
    clock_in: EventStats = field(default_factory=EventStats)
    clock_out: EventStats = field(default_factory=EventStats)

    def to_dict(self) -> Dict[str, Any]:
        return {"in": self.clock_in.to_dict(), "out": self.clock_out.to_dict()}


@dataclass(frozen=True)
class WeekdayTrend:
    dow: int
    clock_in: EventStats = field(default_factory=EventStats)
    clock_out: EventStats = field(default_factory=EventStats)

    def to_dict(self) -> Dict[str, Any]:
        return {"dow": self.dow, "in": self.clock_in.to_dict(), "out": self.clock_out.to_dict()}


@dataclass(frozen=True)
class WeeklyTrend:
    week_start: date
    clock_in: EventStats = field(default_factory=EventStats)
    clock_out: EventStats = field(default_factory=EventStats)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "week_start": self.week_start.isoformat(),
            "in": self.clock_in.to_dict(),
            "out": self.clock_out.to_dict(),
        }


@dataclass(frozen=True)
class Trends:
    weekday: List[WeekdayTrend]
    weekly: List[WeeklyTrend]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weekday": [w.to_dict() for w in self.weekday],
            "weekly": [w.to_dict() for w in self.weekly],
        }
