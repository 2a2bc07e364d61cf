from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ..common.datetime_utils import DateLike, normalize_day_key
from ..common.validators import require_bool, require_status
from ..core.constants import DEFAULT_TIME_IN, SYSTEM_USER_ID
from ..core.enums import AttendanceStatus
from ..core.exceptions import InvalidTimeFormat, ValidationError
from ..instructors.model import Instructor
from ..reports.cache import StatsCache
from .classifier import LatePolicy
from .model import AttendanceRecord, NewAttendanceRecord
from .repository import AttendanceStore

logger = logging.getLogger(__name__)


@dataclass
class StagedEntry:
    selected: bool = False
    status: AttendanceStatus = AttendanceStatus.PRESENT
    time_in: str = DEFAULT_TIME_IN

    @property
    def time_in_editable(self) -> bool:
        return self.status == AttendanceStatus.PRESENT


class BulkSession:
    """Staged attendance for one roster and one target date.

    Build a fresh session per editing session and discard it after submission.
    Touching an instructor's status or time marks that instructor selected.
    """

    def __init__(
        self,
        roster: Sequence[Instructor],
        work_date: DateLike,
        *,
        school_id: Optional[int] = None,
        comments: Optional[str] = None,
    ):
        self.work_date = normalize_day_key(work_date)
        self.school_id = school_id
        # Shared note written on every selected instructor's row.
        self.comments = comments
        self.roster = list(roster)
        self.entries: dict[int, StagedEntry] = {i.instructor_id: StagedEntry() for i in self.roster}

    def entry(self, instructor_id: int) -> StagedEntry:
        try:
            return self.entries[int(instructor_id)]
        except (KeyError, TypeError, ValueError):
            raise ValidationError(f"Instructor {instructor_id} is not on this roster") from None

    def set_status(self, instructor_id: int, status: AttendanceStatus) -> None:
        entry = self.entry(instructor_id)
        entry.status = require_status(status)
        entry.selected = True

    def set_time_in(self, instructor_id: int, time_in: str) -> None:
        entry = self.entry(instructor_id)
        if not entry.time_in_editable:
            raise ValidationError(f"Time in can only be set for present instructors (instructor {instructor_id})")
        entry.time_in = time_in
        entry.selected = True

    def toggle(self, instructor_id: int, selected: bool) -> None:
        self.entry(instructor_id).selected = bool(selected)

    def select_all(self, checked: bool) -> None:
        for entry in self.entries.values():
            entry.selected = bool(checked)

    def selected_ids(self) -> list[int]:
        return [i.instructor_id for i in self.roster if self.entries[i.instructor_id].selected]

    def names(self) -> dict[int, str]:
        return {i.instructor_id: i.name for i in self.roster}


@dataclass(frozen=True)
class ItemOutcome:
    instructor_id: int
    status: AttendanceStatus
    record: Optional[AttendanceRecord] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "instructorId": self.instructor_id,
            "status": self.status.value,
            "ok": self.ok,
            "id": self.record.attendance_id if self.record else None,
            "error": self.error,
        }


@dataclass(frozen=True)
class BulkSubmissionResult:
    work_date: str
    succeeded: list[ItemOutcome] = field(default_factory=list)
    failed: list[ItemOutcome] = field(default_factory=list)
    late_arrivals: list[int] = field(default_factory=list)
    late_arrival_names: list[str] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    def summary(self) -> str:
        text = f"Attendance recorded for {self.success_count} instructor(s) on {self.work_date}"
        if self.failed:
            text += f"; {self.failure_count} failed"
        if self.late_arrivals:
            text += f". Late arrivals: {', '.join(self.late_arrival_names)}"
        return text

    def to_dict(self) -> dict:
        return {
            "date": self.work_date,
            "successCount": self.success_count,
            "failureCount": self.failure_count,
            "lateArrivals": self.late_arrivals,
            "items": [o.to_dict() for o in self.succeeded + self.failed],
            "message": self.summary(),
        }


@dataclass(frozen=True)
class _PlannedWrite:
    instructor_id: int
    record: NewAttendanceRecord
    reclassified: bool


class BulkRecorder:
    """Submits a BulkSession as independent, concurrent creates.

    There is no atomicity across the batch: successful writes stay even if a
    sibling write fails, and nothing is retried.
    """

    def __init__(
        self,
        attendance: AttendanceStore,
        *,
        policy: Optional[LatePolicy] = None,
        cache: Optional[StatsCache] = None,
        recorded_by: int = SYSTEM_USER_ID,
        timeout: Optional[float] = None,
    ):
        self._attendance = attendance
        self._policy = policy or LatePolicy()
        self._cache = cache
        self._recorded_by = recorded_by
        self._timeout = timeout

    def _plan(self, session: BulkSession, recorded_by: int) -> list[_PlannedWrite]:
        selected = session.selected_ids()
        if not selected:
            raise ValidationError("Please select at least one instructor")

        planned: list[_PlannedWrite] = []
        bad_times: list[str] = []
        for instructor_id in selected:
            entry = session.entries[instructor_id]
            time_in = entry.time_in if entry.time_in_editable else None
            try:
                decision = self._policy.decide(entry.status, time_in)
            except InvalidTimeFormat:
                bad_times.append(f"{instructor_id} ({entry.time_in!r})")
                continue
            record = NewAttendanceRecord(
                instructor_id=instructor_id,
                work_date=session.work_date,
                status=entry.status,
                time_in=time_in,
                comments=session.comments or None,
                recorded_by=recorded_by,
            ).with_status(decision.status)
            planned.append(_PlannedWrite(instructor_id, record, decision.reclassified))

        if bad_times:
            raise InvalidTimeFormat(f"Invalid time in for instructor(s): {', '.join(bad_times)}")
        return planned

    async def _create_one(self, write: _PlannedWrite) -> ItemOutcome:
        try:
            created = await self._attendance.create(write.record)
        except Exception as exc:
            logger.warning("Attendance create failed for instructor %s: %s", write.instructor_id, exc)
            return ItemOutcome(write.instructor_id, write.record.status, error=str(exc) or type(exc).__name__)
        return ItemOutcome(write.instructor_id, write.record.status, record=created)

    async def _run_all(self, planned: list[_PlannedWrite], timeout: Optional[float]) -> list[ItemOutcome]:
        tasks = [asyncio.ensure_future(self._create_one(w)) for w in planned]
        if timeout is None:
            return list(await asyncio.gather(*tasks))

        done, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        outcomes = []
        for write, task in zip(planned, tasks):
            if task in done:
                outcomes.append(task.result())
            else:
                # Cancelled after dispatch: the row may still have been persisted.
                outcomes.append(ItemOutcome(write.instructor_id, write.record.status, error="timed out"))
        return outcomes

    async def submit(
        self,
        session: BulkSession,
        *,
        recorded_by: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> BulkSubmissionResult:
        """Validate, classify and write every selected instructor of ``session``.

        Raises ValidationError (no writes issued) when nothing is selected or a
        staged time is malformed. Per-item store failures are reported in the
        result instead of being raised.
        """

        planned = self._plan(session, recorded_by or self._recorded_by)
        outcomes = await self._run_all(planned, timeout if timeout is not None else self._timeout)

        succeeded = [o for o in outcomes if o.ok]
        failed = [o for o in outcomes if not o.ok]
        for outcome in succeeded:
            session.entries[outcome.instructor_id].selected = False

        if succeeded and self._cache is not None:
            self._cache.invalidate(session.school_id, session.work_date)

        names = session.names()
        late = [w.instructor_id for w in planned if w.reclassified]
        result = BulkSubmissionResult(
            work_date=session.work_date,
            succeeded=succeeded,
            failed=failed,
            late_arrivals=late,
            late_arrival_names=[names.get(i, str(i)) for i in late],
        )
        logger.info("%s", result.summary())
        return result


def session_from_payload(
    roster: Sequence[Instructor],
    work_date: DateLike,
    entries: Iterable[dict],
    *,
    school_id: Optional[int] = None,
    select_all: Optional[bool] = None,
    comments: Optional[str] = None,
) -> BulkSession:
    """Replay operator edits (``{instructorId, selected?, status?, timeIn?}``) onto a fresh session.

    ``select_all`` is applied first, so per-instructor edits and toggles win.
    A ``timeIn`` sent for an entry that is not present is ignored: clients may
    post their whole staged state, default times included.
    """

    session = BulkSession(roster, work_date, school_id=school_id, comments=comments)
    if select_all is not None:
        session.select_all(require_bool(select_all, "selectAll"))
    for item in entries:
        if not isinstance(item, dict):
            raise ValidationError("Each bulk entry must be an object")
        instructor_id = item.get("instructorId")
        if item.get("status") is not None:
            session.set_status(instructor_id, item["status"])
        if item.get("timeIn") is not None and session.entry(instructor_id).time_in_editable:
            session.set_time_in(instructor_id, item["timeIn"])
        if "selected" in item:
            session.toggle(instructor_id, require_bool(item["selected"], "selected"))
    return session
