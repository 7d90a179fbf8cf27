# Overview: Flask API routes for analytics; parses input and returns JSON responses.

"""
Analytics Routes

Period sales analytics: either a whole month (?month=YYYY-MM) or an
inclusive range of business days (?start=YYYY-MM-DD&end=YYYY-MM-DD).
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth
from ..services import reporting_service
from ..services.reporting_service import ReportError


analytics_bp = Blueprint("analytics", __name__, url_prefix="/api/analytics")


@analytics_bp.get("")
@require_auth
def sales_analytics_route():
    try:
        result = reporting_service.sales_analytics(
            start=request.args.get("start"),
            end=request.args.get("end"),
            month=request.args.get("month"),
        )
        return jsonify(result)
    except ReportError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Analytics failed")
        return jsonify({"error": "Internal server error"}), 500
