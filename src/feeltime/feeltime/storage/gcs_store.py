"""Cloud Storage backend: no query engine, every read is a scan.

Layout under ``<prefix>/``::

    departments.json      [{"id", "name"}, ...]
    employees.json        [{"id", "name", "department_id"}, ...]
    events/<id>.json      one EmotionLog per object

Every aggregate lists ``events/``, downloads each object in parallel and
reduces in memory (O(total events) per query, no indexes). That is the
accepted scalability limit of this backend. Objects that are missing or
fail to parse are skipped rather than failing the whole read.
"""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from google.api_core import exceptions as gcs_errors
from google.auth import exceptions as auth_errors

from ..common.datetime_utils import coerce_timestamp, in_range, now_utc, parse_iso_datetime, to_iso_z
from ..common.ids import new_id
from ..core.constants import (
    DEFAULT_GCS_DOWNLOAD_WORKERS,
    DEFAULT_GCS_PREFIX,
    DEFAULT_RECENT_LIMIT,
    MAX_EMOTION,
    MIN_EMOTION,
)
from ..core.enums import EventType
from ..core.exceptions import ConstraintViolation, NotFound, StorageUnavailable, ValidationError
from .aggregation import build_trends, summarize
from .model import Department, Employee, EmotionLog, Summary, Trends
from .repository import Bound, EmotionStore

logger = logging.getLogger(__name__)

DEPARTMENTS_OBJECT = "departments.json"
EMPLOYEES_OBJECT = "employees.json"
EVENTS_FOLDER = "events/"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def _require_not_null(column: str, value: Any) -> None:
    if value is None:
        raise ConstraintViolation(f"NOT NULL constraint failed: {column}")


def event_from_payload(payload: Dict[str, Any]) -> EmotionLog:
    return EmotionLog(
        id=str(payload["id"]),
        employee_id=str(payload["employee_id"]),
        event_type=EventType(payload["event_type"]),
        emotion=int(payload["emotion"]),
        note=payload.get("note"),
        created_at=parse_iso_datetime(payload["created_at"]),
    )


class GCSEmotionStore(EmotionStore):
    """Object-storage implementation of the storage contract.

    Relational constraints are emulated best-effort: department names are
    unique, employees must reference a known department and emotion logs
    obey the CHECK rules. Index objects are updated read-modify-write with
    ``if_generation_match``, so a concurrent writer makes one side fail with
    ConstraintViolation instead of silently losing an update.
    """

    def __init__(
        self,
        bucket,
        *,
        prefix: str = DEFAULT_GCS_PREFIX,
        download_workers: int = DEFAULT_GCS_DOWNLOAD_WORKERS,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._bucket = bucket
        self._prefix = (prefix or DEFAULT_GCS_PREFIX).strip("/")
        self._workers = max(1, int(download_workers))
        self._clock = clock
        self._ensure_meta()

    # --- object helpers -----------------------------------------------

    def _key(self, path: str) -> str:
        return f"{self._prefix}/{path}"

    @contextmanager
    def _storage_errors(self):
        try:
            yield
        except (ConstraintViolation, NotFound, StorageUnavailable):
            raise
        except gcs_errors.GoogleAPICallError as exc:
            raise StorageUnavailable(str(exc)) from exc
        except auth_errors.GoogleAuthError as exc:
            raise StorageUnavailable(str(exc)) from exc

    def _fetch(self, blob, **kwargs) -> bytes:
        with self._storage_errors():
            try:
                return blob.download_as_bytes(**kwargs)
            except gcs_errors.NotFound as exc:
                raise NotFound(f"No such object: {blob.name}") from exc

    def _read_index(self, path: str) -> Tuple[List[Dict[str, Any]], int]:
        """Return the JSON array stored at ``path`` and its generation (0 if missing)."""
        with self._storage_errors():
            blob = self._bucket.get_blob(self._key(path))
        if blob is None:
            return [], 0
        try:
            data = self._fetch(blob, if_generation_match=blob.generation)
        except NotFound:
            return [], 0
        rows = json.loads(data.decode("utf-8"))
        return list(rows or []), int(blob.generation or 0)

    def _write_index(self, path: str, rows: List[Dict[str, Any]], generation: int) -> None:
        with self._storage_errors():
            try:
                self._bucket.blob(self._key(path)).upload_from_string(
                    json.dumps(rows, ensure_ascii=False),
                    content_type=JSON_CONTENT_TYPE,
                    if_generation_match=generation,
                )
            except gcs_errors.PreconditionFailed as exc:
                raise ConstraintViolation(f"{path} was modified concurrently; retry the insert") from exc

    def _ensure_meta(self) -> None:
        with self._storage_errors():
            for path in (DEPARTMENTS_OBJECT, EMPLOYEES_OBJECT):
                if self._bucket.get_blob(self._key(path)) is not None:
                    continue
                try:
                    self._bucket.blob(self._key(path)).upload_from_string(
                        "[]", content_type=JSON_CONTENT_TYPE, if_generation_match=0
                    )
                except gcs_errors.PreconditionFailed:
                    # Another process created it first.
                    pass

    def _download_event(self, blob) -> Optional[EmotionLog]:
        try:
            payload = json.loads(self._fetch(blob).decode("utf-8"))
            return event_from_payload(payload)
        except NotFound:
            logger.warning("event object vanished during scan: %s", blob.name)
        except StorageUnavailable as exc:
            logger.warning("skipping unreadable event object %s: %s", blob.name, exc)
        except (ValidationError, ValueError, KeyError, TypeError) as exc:
            logger.warning("skipping corrupt event object %s: %s", blob.name, exc)
        return None

    def _collect_events(self) -> List[EmotionLog]:
        with self._storage_errors():
            blobs = list(self._bucket.list_blobs(prefix=self._key(EVENTS_FOLDER)))
        if not blobs:
            return []
        with ThreadPoolExecutor(max_workers=min(self._workers, len(blobs))) as pool:
            events = list(pool.map(self._download_event, blobs))
        return [e for e in events if e is not None]

    @staticmethod
    def _filter(
        events: Iterable[EmotionLog], employee_ids: Iterable[str], from_: Bound, to: Bound
    ) -> List[EmotionLog]:
        wanted = set(employee_ids)
        start = coerce_timestamp(from_)
        end = coerce_timestamp(to)
        return [e for e in events if e.employee_id in wanted and in_range(e.created_at, start, end)]

    @staticmethod
    def _ascending(events: Iterable[EmotionLog]) -> List[EmotionLog]:
        return sorted(events, key=lambda e: (e.created_at, e.id))

    # --- contract ------------------------------------------------------

    def reset_all(self) -> None:
        def delete(blob) -> None:
            try:
                blob.delete()
            except gcs_errors.NotFound:
                pass

        with self._storage_errors():
            blobs = list(self._bucket.list_blobs(prefix=self._key("")))
            if blobs:
                with ThreadPoolExecutor(max_workers=min(self._workers, len(blobs))) as pool:
                    list(pool.map(delete, blobs))
        self._ensure_meta()
        logger.info("gcs store reset (%d objects deleted)", len(blobs))

    def insert_department(self, *, name: str) -> str:
        _require_not_null("departments.name", name)
        departments, generation = self._read_index(DEPARTMENTS_OBJECT)
        if any(d.get("name") == name for d in departments):
            raise ConstraintViolation(f"Department name already exists: {name!r}")

        department = Department(id=new_id(), name=name)
        departments.append(department.to_dict())
        self._write_index(DEPARTMENTS_OBJECT, departments, generation)
        return department.id

    def insert_employee(self, *, name: str, department_id: str) -> str:
        _require_not_null("employees.name", name)
        _require_not_null("employees.department_id", department_id)
        departments, _ = self._read_index(DEPARTMENTS_OBJECT)
        if not any(d.get("id") == department_id for d in departments):
            raise ConstraintViolation(f"Unknown department: {department_id!r}")

        employees, generation = self._read_index(EMPLOYEES_OBJECT)
        employee = Employee(id=new_id(), name=name, department_id=department_id)
        employees.append(employee.to_dict())
        self._write_index(EMPLOYEES_OBJECT, employees, generation)
        return employee.id

    def health(self) -> Dict[str, bool]:
        with self._storage_errors():
            self._bucket.reload()
        return {"ok": True}

    def insert_emotion_log(
        self,
        *,
        employee_id: str,
        event_type: Union[EventType, str],
        emotion: int,
        note: Optional[str] = None,
        created_at: Bound = None,
    ) -> str:
        # Same CHECK rules the relational schema enforces.
        if not employee_id:
            raise ConstraintViolation("employee_id is required")
        try:
            kind = EventType(event_type)
        except ValueError:
            raise ConstraintViolation(f"event_type must be 'in' or 'out', got {event_type!r}") from None
        if isinstance(emotion, bool) or not isinstance(emotion, int) or not MIN_EMOTION <= emotion <= MAX_EMOTION:
            raise ConstraintViolation(f"emotion must be an integer between {MIN_EMOTION} and {MAX_EMOTION}")

        log = EmotionLog(
            id=new_id(),
            employee_id=employee_id,
            event_type=kind,
            emotion=emotion,
            note=note or None,
            created_at=coerce_timestamp(created_at) or self._clock(),
        )
        with self._storage_errors():
            self._bucket.blob(self._key(f"{EVENTS_FOLDER}{log.id}.json")).upload_from_string(
                json.dumps(log.to_dict(), ensure_ascii=False),
                content_type=JSON_CONTENT_TYPE,
            )
        return log.id

    def get_summary(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Summary:
        return summarize(self._filter(self._collect_events(), [employee_id], from_, to))

    def get_recent(self, *, employee_id: str, limit: int = DEFAULT_RECENT_LIMIT) -> Sequence[EmotionLog]:
        mine = self._filter(self._collect_events(), [employee_id], None, None)
        mine.sort(key=lambda e: (e.created_at, e.id), reverse=True)
        return mine[: int(limit)]

    def get_logs_range(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Sequence[EmotionLog]:
        return self._ascending(self._filter(self._collect_events(), [employee_id], from_, to))

    def get_departments(self) -> Sequence[Department]:
        departments, _ = self._read_index(DEPARTMENTS_OBJECT)
        rows = [Department(id=str(d["id"]), name=d["name"]) for d in departments]
        return sorted(rows, key=lambda d: (d.name, d.id))

    def get_logs_range_by_department(
        self, *, department_id: str, from_: Bound = None, to: Bound = None
    ) -> Sequence[EmotionLog]:
        employees, _ = self._read_index(EMPLOYEES_OBJECT)
        members = [e["id"] for e in employees if e.get("department_id") == department_id]
        if not members:
            return []
        return self._ascending(self._filter(self._collect_events(), members, from_, to))

    def get_trends(self, *, employee_id: str, from_: Bound = None, to: Bound = None) -> Trends:
        return build_trends(self._filter(self._collect_events(), [employee_id], from_, to))
