"""FIRE Tracker Flask Application Factory."""

import logging
from typing import Optional

from flask import Flask

from app.config import get_global_settings
from app.services.analytics_service import AnalyticsService


def create_app(config_name: Optional[str] = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        config_name: Configuration name (development, testing, production)

    Returns:
        Flask: Configured Flask application instance
    """
    app = Flask(__name__)

    # Configuration from Pydantic Settings
    settings = get_global_settings()
    app.config["SECRET_KEY"] = settings.secret_key
    app.config["APP_ENV"] = config_name or settings.app_env
    app.config["ENV"] = settings.flask_env
    app.config["DEBUG"] = app.config["APP_ENV"] == "development"
    app.config["TESTING"] = app.config["APP_ENV"] == "testing"

    logging.basicConfig(level=settings.log_level)
    app.logger.setLevel(settings.log_level)

    app.extensions["analytics_service"] = AnalyticsService(settings)

    # Register blueprints
    from app.blueprints.fire import fire_bp
    from app.blueprints.health import health_bp
    from app.blueprints.history import history_bp
    from app.blueprints.performance import performance_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(fire_bp)
    app.register_blueprint(performance_bp)
    app.register_blueprint(history_bp)

    return app
