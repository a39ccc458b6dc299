"""Shared request handling for the API blueprints."""

from typing import Any, Callable, Dict

from flask import current_app, jsonify, request
from pydantic import ValidationError

from app.services.analytics_service import AnalyticsService


def get_service() -> AnalyticsService:
    """Analytics service registered on the current app."""
    return current_app.extensions["analytics_service"]


def run_service_call(action: str, call: Callable[[Dict[str, Any]], Dict[str, Any]]) -> Any:
    """Run a service call on the JSON body and map errors to HTTP responses.

    Args:
        action: Short description used in error logs
        call: Service method taking the request payload

    Returns:
        Flask response tuple
    """
    try:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "Request body must be a JSON object"}), 400
        return jsonify(call(payload)), 200

    except ValidationError as e:
        return (
            jsonify(
                {
                    "error": "Invalid input",
                    "details": e.errors(
                        include_url=False, include_context=False, include_input=False
                    ),
                }
            ),
            400,
        )
    except ValueError as e:
        return jsonify({"error": str(e)}), 400
    except Exception as e:
        current_app.logger.error(f"Error {action}: {str(e)}")
        return jsonify({"error": "Internal server error"}), 500
