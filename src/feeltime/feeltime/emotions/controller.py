from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.emotion_service

    def json_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except ValidationError as e:
                return jsonify({"ok": False, "error": "validation_error", "message": str(e)}), 400
            except Exception as e:
                logger.exception("request failed: %s %s", request.method, request.path)
                return jsonify({"ok": False, "error": "server_error", "message": str(e)}), 500

        return wrapper

    @app.route("/healthz", endpoint="healthz")
    def healthz():
        try:
            service.health()
            return jsonify({"status": "ok"})
        except Exception as e:
            logger.error("health check failed: %s", e)
            return jsonify({"status": "error", "error": str(e)}), 500

    @app.route("/readyz", endpoint="readyz")
    def readyz():
        return jsonify({"ready": True})

    @app.route("/api/clock", methods=["POST"], endpoint="api_clock")
    @json_errors
    def api_clock():
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise ValidationError("JSON body is required")

        new_id = service.record_clock(
            employee_id=data.get("employeeId"),
            event_type=data.get("type"),
            emotion=data.get("emotion"),
            note=data.get("note"),
        )
        return jsonify({"ok": True, "id": new_id}), 201

    @app.route("/api/summary", endpoint="api_summary")
    @json_errors
    def api_summary():
        summary = service.summary(
            employee_id=request.args.get("employeeId"),
            from_=request.args.get("from"),
            to=request.args.get("to"),
        )
        return jsonify({"ok": True, "summary": summary.to_dict()})

    @app.route("/api/recent", endpoint="api_recent")
    @json_errors
    def api_recent():
        rows = service.recent(employee_id=request.args.get("employeeId"), limit=request.args.get("limit"))
        return jsonify({"ok": True, "rows": [r.to_dict() for r in rows]})

    @app.route("/api/logs", endpoint="api_logs")
    @json_errors
    def api_logs():
        rows = service.logs_range(
            employee_id=request.args.get("employeeId"),
            from_=request.args.get("from"),
            to=request.args.get("to"),
        )
        return jsonify({"ok": True, "rows": [r.to_dict() for r in rows]})

    @app.route("/api/trends", endpoint="api_trends")
    @json_errors
    def api_trends():
        trends = service.trends(
            employee_id=request.args.get("employeeId"),
            from_=request.args.get("from"),
            to=request.args.get("to"),
        )
        return jsonify({"ok": True, "trends": trends.to_dict()})

    @app.route("/api/departments", endpoint="api_departments")
    @json_errors
    def api_departments():
        return jsonify({"ok": True, "rows": [d.to_dict() for d in service.departments()]})

    @app.route("/api/departments/<department_id>/logs", endpoint="api_department_logs")
    @json_errors
    def api_department_logs(department_id: str):
        rows = service.department_logs(
            department_id=department_id,
            from_=request.args.get("from"),
            to=request.args.get("to"),
        )
        return jsonify({"ok": True, "rows": [r.to_dict() for r in rows]})

    @app.errorhandler(404)
    def not_found(_e):
        return jsonify({"ok": False, "error": "not_found"}), 404
