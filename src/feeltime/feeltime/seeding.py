"""Demo data generators.

They use only the public store contract, so they behave the same on every
backend. Timestamps are UTC.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional, Sequence

from .core.constants import MAX_EMOTION, MIN_EMOTION
from .core.enums import EventType
from .storage.repository import EmotionStore

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS = ("Engineering", "Sales", "Marketing", "HR")
EMPLOYEES_PER_DEPARTMENT = 10
INITIAL_DAYS = 30


@dataclass(frozen=True)
class SeedResult:
    departments: int = 0
    employees: int = 0
    events: int = 0


def random_emotion(rng: random.Random, base: float = 3.0) -> int:
    value = round(base + rng.uniform(-1.2, 1.2))
    return max(MIN_EMOTION, min(MAX_EMOTION, value))


def _at(rng: random.Random, day: date, hour: int, minute: int) -> datetime:
    return datetime.combine(day, time(hour, minute, rng.randint(0, 59)), tzinfo=timezone.utc)


def _clock_pair(store: EmotionStore, rng: random.Random, employee_id: str, day: date, note: Optional[str]) -> int:
    in_at = _at(rng, day, round(rng.uniform(8.5, 10)), rng.randint(0, 59))
    out_at = _at(rng, day, round(rng.uniform(17.5, 19.5)), rng.randint(0, 59))
    store.insert_emotion_log(
        employee_id=employee_id, event_type=EventType.IN, emotion=random_emotion(rng, 3.2), note=note, created_at=in_at
    )
    store.insert_emotion_log(
        employee_id=employee_id, event_type=EventType.OUT, emotion=random_emotion(rng, 3.5), note=note, created_at=out_at
    )
    return 2


def seed_employee_history(
    store: EmotionStore,
    *,
    employee_id: str,
    days: int,
    start: Optional[date] = None,
    extra_events: int = 6,
    rng: Optional[random.Random] = None,
) -> SeedResult:
    """One clock-in and one clock-out per day ending at ``start`` (default today),
    plus a few scattered events in the last week."""
    rng = rng or random.Random()
    end_day = start or datetime.now(timezone.utc).date()

    count = 0
    for offset in range(days - 1, -1, -1):
        count += _clock_pair(store, rng, employee_id, end_day - timedelta(days=offset), None)

    for _ in range(extra_events):
        day = end_day - timedelta(days=rng.randint(0, 6))
        kind = EventType.IN if rng.random() < 0.5 else EventType.OUT
        hour = int(rng.uniform(8, 11) if kind is EventType.IN else rng.uniform(17, 20))
        store.insert_emotion_log(
            employee_id=employee_id,
            event_type=kind,
            emotion=random_emotion(rng, 3.2),
            note="sample",
            created_at=_at(rng, day, hour, rng.randint(0, 59)),
        )
        count += 1

    logger.info("seeded %d events for employee %s over %d days", count, employee_id, days)
    return SeedResult(events=count)


def seed_initial(
    store: EmotionStore,
    *,
    departments: Sequence[str] = DEFAULT_DEPARTMENTS,
    employees_per_department: int = EMPLOYEES_PER_DEPARTMENT,
    days: int = INITIAL_DAYS,
    today: Optional[date] = None,
    rng: Optional[random.Random] = None,
) -> SeedResult:
    """Non-destructive first-run seed; does nothing when departments already exist."""
    if store.get_departments():
        logger.info("departments already present; skipping initial seeding")
        return SeedResult()

    rng = rng or random.Random()
    end_day = today or datetime.now(timezone.utc).date()

    department_ids = [store.insert_department(name=name) for name in departments]
    employee_ids: List[str] = []
    for department_id in department_ids:
        for i in range(employees_per_department):
            employee_ids.append(store.insert_employee(name=f"User {i + 1}", department_id=department_id))

    count = 0
    for employee_id in employee_ids:
        for offset in range(days - 1, -1, -1):
            count += _clock_pair(store, rng, employee_id, end_day - timedelta(days=offset), None)

    logger.info(
        "seeded %d events for %d employees in %d departments over %d days",
        count, len(employee_ids), len(department_ids), days,
    )
    return SeedResult(departments=len(department_ids), employees=len(employee_ids), events=count)
