"""
Performance blueprint.

Dividend yield and portfolio return endpoints. Callers send the dividends,
assets and snapshots in the body; nothing is loaded from storage.
"""

from typing import Any

from flask import Blueprint

from app.blueprints.common import get_service, run_service_call

performance_bp = Blueprint("performance", __name__, url_prefix="/api/performance")


@performance_bp.route("/yoc", methods=["POST"])
def yield_on_cost() -> Any:
    """Calculate yield on cost.

    Body: dividends, assets, start_date, end_date (capped at today by the
    caller), number_of_months
    """
    return run_service_call("calculating YOC", get_service().yield_on_cost)


@performance_bp.route("/current-yield", methods=["POST"])
def current_yield() -> Any:
    """Calculate current yield on market value."""
    return run_service_call("calculating current yield", get_service().current_yield)


@performance_bp.route("/metrics", methods=["POST"])
def performance_metrics() -> Any:
    """Calculate return and risk metrics for a period.

    Body: snapshots, cash_flows?, period?, custom_start?, custom_end?,
    risk_free_rate?
    """
    return run_service_call("calculating performance", get_service().performance)
