from __future__ import annotations

import csv
import io
import logging
from functools import wraps

from flask import Flask, jsonify, request

from ..container import Container
from ..core.constants import API_PREFIX
from ..core.exceptions import NotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)

_CSV_FIELDS = [
    "roll_no",
    "admission_no",
    "full_name",
    "total_days",
    "present_days",
    "absent_days",
    "half_days",
    "effective_present_days",
    "attendance_percentage",
]


def register(app: Flask, container: Container) -> None:
    def json_errors(failure_message: str):
        """Map domain errors onto the {success, message, error} envelope."""

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                try:
                    return view(*args, **kwargs)
                except ValidationError as e:
                    return jsonify({"success": False, "message": str(e)}), 400
                except NotFoundError as e:
                    return jsonify({"success": False, "message": str(e)}), 404
                except StoreError as e:
                    logger.error("%s: %s", failure_message, e)
                    return jsonify({"success": False, "message": failure_message, "error": str(e)}), 500
                except Exception as e:
                    logger.exception(failure_message)
                    body = {"success": False, "message": failure_message}
                    if app.config.get("DEBUG"):
                        body["error"] = str(e)
                    return jsonify(body), 500

            return wrapper

        return decorator

    def _body() -> dict:
        return request.get_json(silent=True) or {}

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"success": True})

    @app.route(f"{API_PREFIX}/mark", methods=["POST"], endpoint="attendance_mark")
    @json_errors("Error marking attendance")
    def mark():
        body = _body()
        data = container.attendance_service.mark_attendance(
            date=body.get("date"),
            class_name=body.get("className"),
            section=body.get("section"),
            session=body.get("session"),
            student_attendance=body.get("studentAttendance"),
            marked_by=body.get("markedBy"),
        )
        message = f"Attendance marked successfully for {data['className']}-{data['section']} ({data['session']})"
        return jsonify({"success": True, "data": data, "message": message}), 201

    @app.route(f"{API_PREFIX}/override", methods=["PUT"], endpoint="attendance_override")
    @json_errors("Error overriding attendance")
    def override():
        body = _body()
        data = container.attendance_service.override_attendance(
            date=body.get("date"),
            class_name=body.get("className"),
            section=body.get("section"),
            session=body.get("session"),
            student_attendance=body.get("studentAttendance"),
            marked_by=body.get("markedBy"),
        )
        message = f"Attendance overridden successfully for {data['className']}-{data['section']} ({data['session']})"
        return jsonify({"success": True, "data": data, "message": message}), 200

    @app.route(f"{API_PREFIX}/class/day", methods=["GET"], endpoint="attendance_class_day")
    @json_errors("Error fetching attendance")
    def class_day():
        data = container.attendance_service.get_day_attendance(
            date=request.args.get("date"),
            class_name=request.args.get("className"),
            section=request.args.get("section"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/check", methods=["GET"], endpoint="attendance_check")
    @json_errors("Error checking attendance")
    def check():
        data = container.attendance_service.check_attendance_exists(
            date=request.args.get("date"),
            class_name=request.args.get("className"),
            section=request.args.get("section"),
            session=request.args.get("session"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/summary/day", methods=["GET"], endpoint="attendance_summary_day")
    @json_errors("Error fetching attendance summary")
    def summary_day():
        data = container.attendance_service.day_summary(
            date=request.args.get("date"),
            class_name=request.args.get("className"),
            section=request.args.get("section"),
            session=request.args.get("session"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/session/status", methods=["GET"], endpoint="attendance_session_status")
    @json_errors("Error fetching session status")
    def session_status():
        data = container.attendance_service.session_status(
            date=request.args.get("date"),
            class_name=request.args.get("className"),
            section=request.args.get("section"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/student/<student_id>", methods=["GET"], endpoint="attendance_student")
    @json_errors("Error fetching student attendance")
    def student(student_id: str):
        data = container.report_service.student_range_summary(
            student_id,
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/summary/range", methods=["GET"], endpoint="attendance_summary_range")
    @json_errors("Error fetching class summary")
    def summary_range():
        data = container.report_service.class_range_summary(
            class_name=request.args.get("className"),
            section=request.args.get("section"),
            start_date=request.args.get("startDate"),
            end_date=request.args.get("endDate"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/students/list", methods=["GET"], endpoint="attendance_students_list")
    @json_errors("Error fetching students list")
    def students_list():
        class_name = request.args.get("className")
        section = request.args.get("section")
        data = container.attendance_service.list_roster(class_name=class_name, section=section)
        return jsonify(
            {
                "success": True,
                "count": len(data),
                "data": data,
                "message": f"Found {len(data)} students in {class_name}-{section}",
            }
        )

    @app.route(f"{API_PREFIX}/report/monthly", methods=["GET"], endpoint="attendance_report_monthly")
    @json_errors("Error generating monthly report")
    def report_monthly():
        data = container.report_service.monthly_report(
            class_name=request.args.get("className"),
            section=request.args.get("section"),
            year=request.args.get("year"),
            month=request.args.get("month"),
        )
        return jsonify({"success": True, "data": data})

    @app.route(f"{API_PREFIX}/report/monthly.csv", methods=["GET"], endpoint="attendance_report_monthly_csv")
    @json_errors("Error exporting monthly report")
    def report_monthly_csv():
        class_name = request.args.get("className")
        section = request.args.get("section")
        year = request.args.get("year")
        month = request.args.get("month")
        rows = container.report_service.monthly_csv_rows(class_name=class_name, section=section, year=year, month=month)

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        filename = f"attendance_{class_name}_{section}_{int(year):04d}{int(month):02d}.csv".replace(" ", "_")
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    @app.route(f"{API_PREFIX}/<student_id>", methods=["PUT"], endpoint="attendance_update")
    @json_errors("Error updating attendance")
    def update(student_id: str):
        body = _body()
        session = body.get("session")
        value = body.get(session) if session in ("morning", "afternoon") else None
        data = container.attendance_service.update_attendance(
            student_id,
            date=body.get("date"),
            session=session,
            value=value,
            marked_by=body.get("markedBy"),
        )
        return jsonify(
            {"success": True, "data": data, "message": f"Attendance updated successfully for {data['session']} session"}
        )

    @app.route(f"{API_PREFIX}/<student_id>", methods=["DELETE"], endpoint="attendance_delete")
    @json_errors("Error deleting attendance")
    def delete(student_id: str):
        body = _body()
        session = body.get("session") or request.args.get("session")
        container.attendance_service.delete_attendance(
            student_id,
            date=body.get("date") or request.args.get("date"),
            session=session,
        )
        message = f"{session} attendance deleted successfully" if session else "Attendance record deleted successfully"
        return jsonify({"success": True, "message": message})
