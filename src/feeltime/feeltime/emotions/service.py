from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Tuple

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import optional_text, require_int_between, require_non_empty
from ..core.constants import (
    DEFAULT_RECENT_LIMIT,
    EMPLOYEE_ID_MAX_LENGTH,
    MAX_EMOTION,
    MAX_RECENT_LIMIT,
    MIN_EMOTION,
    NOTE_MAX_LENGTH,
)
from ..core.enums import EventType
from ..core.exceptions import ValidationError
from ..storage.model import Department, EmotionLog, Summary, Trends
from ..storage.repository import EmotionStore


class EmotionService:
    """API boundary: validates plain inputs, then calls the active store.

    Nothing malformed reaches the store from here; an emotion of 0 or 6 is
    rejected before persistence.
    """

    def __init__(self, store: EmotionStore):
        self._store = store

    # --- validation ----------------------------------------------------

    @staticmethod
    def _employee_id(value: Any) -> str:
        return require_non_empty(value, "employeeId", max_length=EMPLOYEE_ID_MAX_LENGTH)

    @staticmethod
    def _event_type(value: Any) -> EventType:
        try:
            return EventType(value)
        except ValueError:
            raise ValidationError("type must be 'in' or 'out'") from None

    @staticmethod
    def _range(from_: Optional[str], to: Optional[str]) -> Tuple[Optional[datetime], Optional[datetime]]:
        start = parse_iso_datetime(from_) if from_ else None
        end = parse_iso_datetime(to) if to else None
        if start and end and start > end:
            raise ValidationError("from must not be after to")
        return start, end

    @staticmethod
    def _limit(value: Any) -> int:
        if value is None or value == "":
            return DEFAULT_RECENT_LIMIT
        if isinstance(value, str):
            if not value.strip().isdigit():
                raise ValidationError("limit must be an integer")
            value = int(value.strip())
        return require_int_between(value, "limit", 1, MAX_RECENT_LIMIT)

    # --- operations ----------------------------------------------------

    def record_clock(self, *, employee_id: Any, event_type: Any, emotion: Any, note: Any = None) -> str:
        return self._store.insert_emotion_log(
            employee_id=self._employee_id(employee_id),
            event_type=self._event_type(event_type),
            emotion=require_int_between(emotion, "emotion", MIN_EMOTION, MAX_EMOTION),
            note=optional_text(note, "note", max_length=NOTE_MAX_LENGTH),
        )

    def summary(self, *, employee_id: Any, from_: Optional[str] = None, to: Optional[str] = None) -> Summary:
        start, end = self._range(from_, to)
        return self._store.get_summary(employee_id=self._employee_id(employee_id), from_=start, to=end)

    def recent(self, *, employee_id: Any, limit: Any = None) -> Sequence[EmotionLog]:
        return self._store.get_recent(employee_id=self._employee_id(employee_id), limit=self._limit(limit))

    def logs_range(self, *, employee_id: Any, from_: Optional[str] = None, to: Optional[str] = None) -> Sequence[EmotionLog]:
        start, end = self._range(from_, to)
        return self._store.get_logs_range(employee_id=self._employee_id(employee_id), from_=start, to=end)

    def trends(self, *, employee_id: Any, from_: Optional[str] = None, to: Optional[str] = None) -> Trends:
        start, end = self._range(from_, to)
        return self._store.get_trends(employee_id=self._employee_id(employee_id), from_=start, to=end)

    def departments(self) -> Sequence[Department]:
        return self._store.get_departments()

    def department_logs(
        self, *, department_id: Any, from_: Optional[str] = None, to: Optional[str] = None
    ) -> Sequence[EmotionLog]:
        start, end = self._range(from_, to)
        return self._store.get_logs_range_by_department(
            department_id=require_non_empty(department_id, "departmentId"), from_=start, to=end
        )

    def health(self) -> Dict[str, bool]:
        return self._store.health()
