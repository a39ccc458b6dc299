"""
FIRE blueprint.

Endpoints for point-in-time FIRE metrics and bear/base/bull projections.
"""

from typing import Any

from flask import Blueprint, jsonify

from app.blueprints.common import get_service, run_service_call

fire_bp = Blueprint("fire", __name__, url_prefix="/api/fire")


@fire_bp.route("/metrics", methods=["POST"])
def fire_metrics() -> Any:
    """Calculate current (and optionally planned) FIRE metrics.

    Body: net_worth, annual_expenses, withdrawal_rate?, planned_annual_expenses?
    """
    return run_service_call("calculating FIRE metrics", get_service().fire_metrics)


@fire_bp.route("/scenarios/default", methods=["GET"])
def default_scenarios() -> Any:
    """Return the default bear/base/bull scenarios."""
    return jsonify(get_service().default_scenarios()), 200


@fire_bp.route("/projection", methods=["POST"])
def fire_projection() -> Any:
    """Project net worth under bear/base/bull scenarios.

    Body: initial_net_worth, initial_expenses, annual_savings,
    withdrawal_rate?, scenarios?, horizon_years?, start_year?
    """
    return run_service_call("running FIRE projection", get_service().fire_projection)
