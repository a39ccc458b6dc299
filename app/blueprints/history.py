"""History blueprint."""

from typing import Any

from flask import Blueprint

from app.blueprints.common import get_service, run_service_call

history_bp = Blueprint("history", __name__, url_prefix="/api/history")


@history_bp.route("/doubling-time", methods=["POST"])
def doubling_time() -> Any:
    """Analyze net worth doubling time.

    Body: snapshots ([{year, month, net_worth}]), mode?, thresholds?
    """
    return run_service_call("analyzing doubling time", get_service().doubling_time)
