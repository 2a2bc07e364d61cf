from __future__ import annotations

import asyncio

from flask import Flask, jsonify, request

from ..attendance.controller import error_response
from ..common.datetime_utils import today_local
from ..common.validators import optional_int
from ..core.exceptions import DomainError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/staff-attendance/stats", methods=["GET"], endpoint="attendance_stats")
    def attendance_stats():
        try:
            school_id = optional_int(request.args.get("schoolId"), "schoolId")
            period = request.args.get("period") or today_local().strftime("%Y-%m")
            with_records = request.args.get("records") in {"1", "true", "yes"}
            report = asyncio.run(
                container.report_service.instructor_report(school_id=school_id, period_key=period)
            )
        except DomainError as e:
            return error_response(e)
        return jsonify(report.to_dict(with_records=with_records))
