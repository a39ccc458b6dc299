"""
Pytest configuration and shared fixtures for the FIRE tracker tests.
"""

import os
from unittest.mock import patch

import pytest

from app import create_app
from app.config import Settings, reset_global_settings
from app.models.doubling_time import NetWorthPoint


@pytest.fixture
def settings():
    """Settings built from a clean environment."""
    with patch.dict(os.environ, {"SECRET_KEY": "test-secret-key-123"}, clear=True):
        yield Settings(_env_file=None)


@pytest.fixture
def app():
    """Flask app configured for testing."""
    reset_global_settings()
    with patch.dict(
        os.environ,
        {"SECRET_KEY": "test-secret-key-123", "APP_ENV": "testing"},
        clear=True,
    ):
        application = create_app()
        yield application
    reset_global_settings()


@pytest.fixture
def client(app):
    """Test client for the Flask app."""
    return app.test_client()


def _monthly_history(start_year, start_month, values):
    """Build consecutive monthly net worth points from a list of values."""
    points = []
    year, month = start_year, start_month
    for value in values:
        points.append(NetWorthPoint(year=year, month=month, net_worth=value))
        month += 1
        if month > 12:
            year, month = year + 1, 1
    return points


@pytest.fixture
def monthly_history():
    """Factory for consecutive monthly net worth points."""
    return _monthly_history
