from __future__ import annotations

import logging
from functools import wraps

from flask import Flask, jsonify, request, session

from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidStateError,
    NetworkError,
    NotFoundError,
    ValidationError,
)
from ..container import Container

logger = logging.getLogger(__name__)

# Most specific first: UnsavedChangesError is an InvalidStateError.
_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (InvalidStateError, 409),
    (ConflictError, 409),
    (NetworkError, 503),
)


def _error_response(error: DomainError):
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(error, cls)), 400)
    return jsonify({"success": False, "error": type(error).__name__, "message": str(error)}), status


def register(app: Flask, container: Container) -> None:
    service = container.org_chart_service

    def login_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            return view(*args, **kwargs)

        return wrapper

    def domain_errors(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return _error_response(e)
            except Exception:
                logger.exception("Unexpected error in %s", request.path)
                return jsonify({"success": False, "message": "Internal error while processing the org chart"}), 500

        return wrapper

    def _body() -> dict:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}

    def _session_key() -> str:
        return str(session["user_id"])

    def _role() -> str:
        return session.get("role", "")

    @app.route("/api/org-chart", methods=["GET"], endpoint="org_chart")
    @login_required
    @domain_errors
    def org_chart():
        return jsonify({"success": True, **service.get_org_chart()})

    @app.route("/api/org-chart/direct-reports/<manager_id>", methods=["GET"], endpoint="org_chart_direct_reports")
    @login_required
    @domain_errors
    def direct_reports(manager_id: str):
        reports = service.direct_reports(manager_id)
        return jsonify({"success": True, "data": reports, "count": len(reports)})

    @app.route("/api/org-chart/chain/<employee_id>", methods=["GET"], endpoint="org_chart_chain")
    @login_required
    @domain_errors
    def reporting_chain(employee_id: str):
        return jsonify({"success": True, "data": service.reporting_chain(employee_id)})

    @app.route("/api/org-chart/editor", methods=["GET"], endpoint="org_chart_editor")
    @login_required
    @domain_errors
    def editor_snapshot():
        return jsonify({"success": True, **service.snapshot(session_key=_session_key())})

    @app.route("/api/org-chart/editor/enter", methods=["POST"], endpoint="org_chart_enter_edit")
    @login_required
    @domain_errors
    def enter_edit():
        snapshot = service.enter_edit(current_role=_role(), session_key=_session_key())
        return jsonify({"success": True, **snapshot})

    @app.route("/api/org-chart/editor/exit", methods=["POST"], endpoint="org_chart_exit_edit")
    @login_required
    @domain_errors
    def exit_edit():
        discard = bool(_body().get("discard", False))
        snapshot = service.exit_edit(session_key=_session_key(), discard=discard)
        return jsonify({"success": True, **snapshot})

    @app.route("/api/org-chart/editor/close", methods=["POST"], endpoint="org_chart_close_editor")
    @login_required
    @domain_errors
    def close_editor():
        closed = service.end_session(session_key=_session_key(), discard=bool(_body().get("discard", False)))
        return jsonify({"success": True, "closed": closed})

    @app.route("/api/org-chart/editor/move", methods=["POST"], endpoint="org_chart_move")
    @login_required
    @domain_errors
    def move():
        data = _body()
        snapshot = service.move(
            current_role=_role(),
            session_key=_session_key(),
            employee_id=data.get("employeeId"),
            manager_id=data.get("managerId"),
        )
        return jsonify({"success": True, **snapshot})

    @app.route("/api/org-chart/editor/add", methods=["POST"], endpoint="org_chart_add")
    @login_required
    @domain_errors
    def add():
        data = _body()
        snapshot = service.add(
            current_role=_role(),
            session_key=_session_key(),
            parent_id=data.get("parentId"),
            attributes=data.get("attributes") or {},
            employee_id=data.get("employeeId"),
            track=bool(data.get("track", False)),
        )
        return jsonify({"success": True, **snapshot}), 201

    @app.route("/api/org-chart/editor/remove", methods=["POST"], endpoint="org_chart_remove")
    @login_required
    @domain_errors
    def remove():
        data = _body()
        snapshot = service.remove(
            current_role=_role(),
            session_key=_session_key(),
            employee_id=data.get("employeeId"),
            cascade=data.get("cascade"),
        )
        return jsonify({"success": True, **snapshot})

    @app.route("/api/org-chart/editor/toggle", methods=["POST"], endpoint="org_chart_toggle")
    @login_required
    @domain_errors
    def toggle():
        employee_id = _body().get("employeeId")
        collapsed = service.toggle_collapse(session_key=_session_key(), employee_id=employee_id)
        return jsonify({"success": True, "employeeId": str(employee_id), "collapsed": collapsed})

    @app.route("/api/org-chart/editor/refresh", methods=["POST"], endpoint="org_chart_refresh")
    @login_required
    @domain_errors
    def refresh():
        return jsonify({"success": True, **service.refresh(session_key=_session_key())})

    @app.route("/api/org-chart/editor/save", methods=["POST"], endpoint="org_chart_save")
    @login_required
    @domain_errors
    def save():
        result = service.save(current_role=_role(), session_key=_session_key())
        return jsonify(
            {
                "success": True,
                "message": "Organizational chart saved successfully",
                "submittedCount": result.submitted,
                "updatedCount": result.updated,
                "reloaded": result.reloaded,
            }
        )
