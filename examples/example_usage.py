"""Example: drive the attendance engine through the service layer (no Flask).

Stages a bulk submission for one school and prints the month's statistics.
"""

import asyncio
import importlib
from datetime import date

from config import get_settings_module

from src.staff_attendance.staff_attendance.attendance.bulk import BulkRecorder, BulkSession
from src.staff_attendance.staff_attendance.container import EngineSettings, build_container


async def run(school_id: int = 1) -> None:
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=EngineSettings.from_module(settings))

    roster = await container.instructor_roster.list_for_school(school_id)
    session = BulkSession(roster, date.today(), school_id=school_id)
    session.select_all(True)
    if roster:
        session.set_time_in(roster[0].instructor_id, "07:10")

    recorder = BulkRecorder(container.attendance_store, policy=container.late_policy, cache=container.stats_cache)
    result = await recorder.submit(session)
    print(result.summary())

    report = await container.report_service.instructor_report(
        school_id=school_id, period_key=date.today().strftime("%Y-%m")
    )
    for stat in report.stats:
        print(f"{stat.name:<24} {stat.attendance_rate:>3}%  ({stat.recorded_days} recorded days)")


if __name__ == "__main__":
    asyncio.run(run())
