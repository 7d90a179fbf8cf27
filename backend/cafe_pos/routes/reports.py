from flask import Blueprint, jsonify, request

from cafe_pos.decorators import require_auth
from cafe_pos.services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/daily")
@require_auth
def daily_report():
    try:
        report = reporting_service.daily_report(request.args.get("date"))
        return jsonify(report), 200
    except reporting_service.ReportError as exc:
        return jsonify({"error": str(exc)}), 400
