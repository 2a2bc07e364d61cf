from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.classifier import LatePolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceStore
from .attendance.repository import AttendanceStore
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_BULK_TIMEOUT_SECONDS, DEFAULT_LATE_THRESHOLD_MINUTES, SYSTEM_USER_ID
from .database.connection import DatabaseConnection, DBConfig
from .instructors.mysql_instructor_repository import MySQLInstructorRoster
from .instructors.repository import InstructorRoster
from .reports.cache import StatsCache
from .reports.service import AttendanceReportService


@dataclass(frozen=True)
class EngineSettings:
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES
    system_user_id: int = SYSTEM_USER_ID
    bulk_timeout_seconds: Optional[float] = DEFAULT_BULK_TIMEOUT_SECONDS

    @classmethod
    def from_module(cls, settings: Any) -> "EngineSettings":
        timeout = getattr(settings, "BULK_TIMEOUT_SECONDS", DEFAULT_BULK_TIMEOUT_SECONDS)
        return cls(
            late_threshold_minutes=int(getattr(settings, "LATE_THRESHOLD_MINUTES", DEFAULT_LATE_THRESHOLD_MINUTES)),
            system_user_id=int(getattr(settings, "SYSTEM_USER_ID", SYSTEM_USER_ID)),
            bulk_timeout_seconds=float(timeout) if timeout else None,
        )


@dataclass(frozen=True)
class Container:
    settings: EngineSettings

    attendance_store: AttendanceStore
    instructor_roster: InstructorRoster
    stats_cache: StatsCache
    late_policy: LatePolicy

    attendance_service: AttendanceService
    report_service: AttendanceReportService


def build_services(
    *,
    attendance_store: AttendanceStore,
    instructor_roster: InstructorRoster,
    settings: Optional[EngineSettings] = None,
) -> Container:
    """Wire services around any store/roster pair (MySQL in the app, fakes in tests)."""

    settings = settings or EngineSettings()
    stats_cache = StatsCache()
    late_policy = LatePolicy(threshold_minutes=settings.late_threshold_minutes)

    attendance_service = AttendanceService(
        attendance_store,
        instructor_roster,
        policy=late_policy,
        cache=stats_cache,
    )
    report_service = AttendanceReportService(attendance_store, instructor_roster, cache=stats_cache)

    return Container(
        settings=settings,
        attendance_store=attendance_store,
        instructor_roster=instructor_roster,
        stats_cache=stats_cache,
        late_policy=late_policy,
        attendance_service=attendance_service,
        report_service=report_service,
    )


def build_container(*, db_config: dict, settings: Optional[EngineSettings] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    return build_services(
        attendance_store=MySQLAttendanceStore(conn),
        instructor_roster=MySQLInstructorRoster(conn),
        settings=settings,
    )
