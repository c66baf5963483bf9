from datetime import date, timedelta

from flask import Blueprint, jsonify, request
from marshmallow import ValidationError

from documents import log_export_record, sales_report_record
from models import db
from routes.decorators import admin_required_view, document_generator, identity_service, send_document
from schemas import date_range_schema, error_list, show_schema, show_time_schema
from services import catalog, reports

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

SALES_DEFAULT_DAYS = 30
LOGS_DEFAULT_DAYS = 7


def _invalid(exc):
    return jsonify({'success': False, 'message': 'Invalid input', 'errors': error_list(exc)}), 400


def _date_range(default_days):
    """Read ``start_date``/``end_date`` from the query string, defaulting to the last N days."""
    today = date.today()
    args = {
        "start_date": request.args.get("start_date") or (today - timedelta(days=default_days)).isoformat(),
        "end_date": request.args.get("end_date") or today.isoformat(),
    }
    loaded = date_range_schema.load(args)
    return loaded["start_date"], loaded["end_date"]


def _admin_id():
    return identity_service().require_admin()["id"]


@admin_bp.route("/shows", methods=["GET"])
@admin_required_view
def list_shows():
    return jsonify({"shows": [show.to_dict() for show in catalog.list_admin_shows(db.session)]})


@admin_bp.route("/shows", methods=["POST"])
@admin_required_view
def add_show():
    try:
        payload = show_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return _invalid(exc)

    show = catalog.create_show(db.session, user_id=_admin_id(), **payload)
    return jsonify({"success": True, "message": "Show added successfully", "show_id": show.id}), 201


@admin_bp.route("/shows/<int:show_id>", methods=["PUT", "PATCH"])
@admin_required_view
def edit_show(show_id):
    try:
        payload = show_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return _invalid(exc)

    catalog.update_show(db.session, show_id, user_id=_admin_id(), **payload)
    return jsonify({"success": True, "message": "Show updated successfully", "show_id": show_id})


@admin_bp.route("/shows/<int:show_id>", methods=["DELETE"])
@admin_required_view
def remove_show(show_id):
    catalog.delete_show(db.session, show_id, user_id=_admin_id())
    return jsonify({"success": True, "message": "Show and all associated data deleted", "show_id": show_id})


@admin_bp.route("/showtimes", methods=["POST"])
@admin_required_view
def add_showtime():
    try:
        payload = show_time_schema.load(request.get_json() or {})
    except ValidationError as exc:
        return _invalid(exc)

    show_time = catalog.create_showtime(
        db.session,
        payload["show_id"],
        payload["show_date"].isoformat(),
        payload["start_time"],
        payload["price"],
        user_id=_admin_id(),
    )
    return jsonify(
        {"success": True, "message": "Show time added successfully", "show_time_id": show_time.id}
    ), 201


@admin_bp.route("/reports/sales", methods=["GET"])
@admin_required_view
def sales_report():
    try:
        start, end = _date_range(SALES_DEFAULT_DAYS)
    except ValidationError as exc:
        return _invalid(exc)
    return jsonify(reports.sales_summary(db.session, start, end).to_dict())


@admin_bp.route("/reports/sales/download", methods=["GET"])
@admin_required_view
def download_sales_report():
    try:
        start, end = _date_range(SALES_DEFAULT_DAYS)
    except ValidationError as exc:
        return _invalid(exc)

    report = reports.sales_summary(db.session, start, end).to_dict()
    record = sales_report_record(
        report["start_date"],
        report["end_date"],
        report["total_sales"],
        report["total_bookings"],
        report["by_show"],
    )
    return send_document(
        document_generator().render_sales_report(record),
        f"sales-report-{record['start_date']}-to-{record['end_date']}",
    )


@admin_bp.route("/logs", methods=["GET"])
@admin_required_view
def system_logs():
    try:
        start, end = _date_range(LOGS_DEFAULT_DAYS)
    except ValidationError as exc:
        return _invalid(exc)
    entries = reports.list_logs(db.session, start, end)
    return jsonify(
        {
            "start_date": start.isoformat(),
            "end_date": end.isoformat(),
            "logs": [entry.to_dict() for entry in entries],
        }
    )


@admin_bp.route("/logs/download", methods=["GET"])
@admin_required_view
def download_system_logs():
    try:
        start, end = _date_range(LOGS_DEFAULT_DAYS)
    except ValidationError as exc:
        return _invalid(exc)

    entries = reports.list_logs(db.session, start, end)
    record = log_export_record([entry.to_dict() for entry in entries])
    return send_document(
        document_generator().render_log_export(record),
        f"system-logs-{start.isoformat()}-to-{end.isoformat()}",
    )
