from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional, Protocol, Sequence, Union

from ..core.enums import EventType
from .model import Department, EmotionLog, Summary, Trends

Bound = Optional[Union[str, datetime]]


class EmotionStore(Protocol):
    """Storage contract implemented identically by every backend.

    Note (DIP): services and controllers depend on this interface only; they
    never know whether SQLite, MySQL or Cloud Storage is active. Time bounds
    (``from_``/``to``) are inclusive and either side may be omitted.
    """

    def reset_all(self) -> None:
        """Destroy every department, employee and emotion log (test/seed tooling only)."""

        raise NotImplementedError

    def insert_department(self, *, name: str) -> str:
        raise NotImplementedError

    def insert_employee(self, *, name: str, department_id: str) -> str:
        raise NotImplementedError

    def health(self) -> Dict[str, bool]:
        raise NotImplementedError

    def insert_emotion_log(
        self,
        *,
        employee_id: str,
        event_type: Union[EventType, str],
        emotion: int,
        note: Optional[str] = None,
        created_at: Bound = None,
    ) -> str:
        raise NotImplementedError

    def get_summary(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Summary:
        raise NotImplementedError

    def get_recent(self, *, employee_id: str, limit: int = 10) -> Sequence[EmotionLog]:
        raise NotImplementedError

    def get_logs_range(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Sequence[EmotionLog]:
        raise NotImplementedError

    def get_departments(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_logs_range_by_department(
        self, *, department_id: str, from_: Bound = None, to: Bound = None
    ) -> Sequence[EmotionLog]:
        raise NotImplementedError

    def get_trends(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Trends:
        raise NotImplementedError
