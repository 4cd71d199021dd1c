from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    PersistenceError,
    UnauthenticatedError,
    ValidationError,
)
from ..container import Container

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (UnauthenticatedError, 401),
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PersistenceError, 500),
)


def _current_user_id() -> str:
    user_id = session.get("user_id")
    if user_id is None:
        raise UnauthenticatedError("Unauthorized")
    return str(user_id)


def _error_response(exc: DomainError, *, conflict_key: str | None = None):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 400)
    body = {"success": False, "message": str(exc)}
    if isinstance(exc, ConflictError) and conflict_key:
        body[conflict_key] = exc.resource_id
    return jsonify(body), status


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def activity_endpoint(action: str, *, conflict_key: str | None = None):
        """Resolve the caller, run the view and map domain errors to JSON."""

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                try:
                    user_id = _current_user_id()
                    return view(user_id, *args, **kwargs)
                except PersistenceError as e:
                    logger.error("[ACTIVITY:%s] %s", action, e)
                    return _error_response(e)
                except (ConflictError, NotFoundError) as e:
                    logger.warning("[ACTIVITY:%s] %s", action, e)
                    return _error_response(e, conflict_key=conflict_key)
                except DomainError as e:
                    return _error_response(e)
                except Exception:
                    logger.exception("[ACTIVITY:%s] unexpected error", action)
                    return jsonify({"success": False, "message": f"Failed to {action.lower().replace('-', ' ')}."}), 500

            return wrapper

        return decorator

    @app.route("/api/activity/start-session", methods=["POST"], endpoint="start_session")
    @activity_endpoint("START-SESSION", conflict_key="session_id")
    def start_session(user_id: str):
        session_id = service.start_session(user_id)
        return jsonify({"success": True, "message": "Session started.", "session_id": session_id}), 200

    @app.route("/api/activity/end-session", methods=["POST"], endpoint="end_session")
    @activity_endpoint("END-SESSION")
    def end_session(user_id: str):
        closed = service.end_session(user_id)
        return jsonify({
            "success": True,
            "message": "Session ended.",
            "session_id": closed.session_id,
            "duration": closed.total_duration_seconds,
            "break_duration": closed.total_break_seconds,
            "worked": closed.worked_seconds,
            "shift_hours": closed.regular_shift_seconds,
            "overtime_early": closed.early_overtime_seconds,
            "overtime_late": closed.late_overtime_seconds,
            "total_overtime": closed.total_overtime_seconds,
            "undertime": closed.undertime_seconds,
        }), 200

    @app.route("/api/activity/start-break", methods=["POST"], endpoint="start_break")
    @activity_endpoint("START-BREAK", conflict_key="break_id")
    def start_break(user_id: str):
        data = request.get_json(silent=True) or {}
        break_id = service.start_break(user_id, reason=data.get("reason"), notes=data.get("notes"))
        return jsonify({"success": True, "message": "Break started.", "break_id": break_id}), 200

    @app.route("/api/activity/end-break", methods=["POST"], endpoint="end_break")
    @activity_endpoint("END-BREAK")
    def end_break(user_id: str):
        duration = service.end_break(user_id)
        return jsonify({"success": True, "message": "Break ended.", "break_duration": duration}), 200

    @app.route("/api/activity/check-ongoing", methods=["GET"], endpoint="check_ongoing")
    @activity_endpoint("CHECK-ONGOING")
    def check_ongoing(user_id: str):
        snapshot = service.get_status(user_id)
        return jsonify({"success": True, **snapshot.to_dict()}), 200

    @app.route("/api/activity/today", methods=["GET"], endpoint="daily_summary")
    @activity_endpoint("DAILY-SUMMARY")
    def daily_summary(user_id: str):
        raw_date = request.args.get("date")
        work_date = None
        if raw_date:
            try:
                work_date = parse_iso_date(raw_date)
            except ValueError:
                raise ValidationError("Invalid date format. Use YYYY-MM-DD")

        rollup = service.get_daily_summary(user_id, work_date=work_date)
        return jsonify({"success": True, "summary": rollup.to_dict() if rollup else None}), 200
