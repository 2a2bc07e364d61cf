from __future__ import annotations

import asyncio

from flask import Flask, jsonify, request, session

from ..common.validators import optional_int, require_int, require_status
from ..core.exceptions import DomainError, RecordNotFoundError, StoreUnavailableError, ValidationError
from ..container import Container
from .bulk import BulkRecorder, session_from_payload
from .model import AttendanceFilter, AttendancePatch, NewAttendanceRecord


def error_response(exc: DomainError):
    if isinstance(exc, ValidationError):
        code = 400
    elif isinstance(exc, RecordNotFoundError):
        code = 404
    elif isinstance(exc, StoreUnavailableError):
        code = 503
    else:
        code = 422
    return jsonify({"message": str(exc)}), code


def register(app: Flask, container: Container) -> None:
    def _operator_id():
        # Session handling belongs to the host dashboard; fall back to the system identity.
        return optional_int(session.get("user_id"), "user_id") or container.settings.system_user_id

    def _json_body() -> dict:
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @app.route("/api/staff-attendance", methods=["GET"], endpoint="attendance_list")
    def attendance_list():
        try:
            query = AttendanceFilter.from_args(request.args)
            status = request.args.get("status")
            records = asyncio.run(
                container.attendance_service.list(
                    query,
                    search=request.args.get("search"),
                    status=require_status(status) if status else None,
                )
            )
        except DomainError as e:
            return error_response(e)
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/staff-attendance", methods=["POST"], endpoint="attendance_create")
    def attendance_create():
        try:
            new_record = NewAttendanceRecord.from_dict(_json_body(), recorded_by=_operator_id())
            supersede = request.args.get("supersede") in {"1", "true", "yes"}
            outcome = asyncio.run(container.attendance_service.record(new_record, supersede=supersede))
        except DomainError as e:
            return error_response(e)

        body = outcome.record.to_dict()
        body["reclassified"] = outcome.reclassified
        body["superseded"] = list(outcome.superseded)
        return jsonify(body), (200 if outcome.superseded else 201)

    @app.route("/api/staff-attendance/<int:attendance_id>", methods=["PATCH"], endpoint="attendance_update")
    def attendance_update(attendance_id: int):
        try:
            patch = AttendancePatch.from_dict(_json_body())
            updated = asyncio.run(container.attendance_service.edit(attendance_id, patch))
        except DomainError as e:
            return error_response(e)
        return jsonify(updated.to_dict())

    @app.route("/api/staff-attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    def attendance_delete(attendance_id: int):
        try:
            asyncio.run(container.attendance_service.remove(attendance_id))
        except DomainError as e:
            return error_response(e)
        return "", 204

    @app.route("/api/staff-attendance/bulk", methods=["POST"], endpoint="attendance_bulk")
    def attendance_bulk():
        try:
            data = _json_body()
            school_id = require_int(data.get("schoolId"), "schoolId")
            if not data.get("date"):
                raise ValidationError("date is required")
            entries = data.get("entries") or []
            if not isinstance(entries, list):
                raise ValidationError("entries must be a list")

            operator = _operator_id()
            select_all = data.get("selectAll")
            comments = data.get("comments") or None
            if comments is not None and not isinstance(comments, str):
                raise ValidationError("comments must be a string")

            async def _submit():
                roster = await container.instructor_roster.list_for_school(school_id)
                staged = session_from_payload(
                    roster,
                    data["date"],
                    entries,
                    school_id=school_id,
                    select_all=select_all,
                    comments=comments,
                )
                recorder = BulkRecorder(
                    container.attendance_store,
                    policy=container.late_policy,
                    cache=container.stats_cache,
                    timeout=container.settings.bulk_timeout_seconds,
                )
                return await recorder.submit(staged, recorded_by=operator)

            result = asyncio.run(_submit())
        except DomainError as e:
            return error_response(e)

        return jsonify(result.to_dict()), (207 if result.failed else 200)
