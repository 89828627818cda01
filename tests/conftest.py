"""
Pytest configuration and fixtures for wizard tests.
"""

import pytest
from flask import Flask

from flask_stepwizard.adapters.api import WizardApi
from flask_stepwizard.presets import passenger_registry
from flask_stepwizard.wizard.machine import WizardStateMachine


@pytest.fixture(scope="session")
def registry():
    """Passenger wizard: identity, contact, preferences."""
    return passenger_registry()


@pytest.fixture
def completed_records():
    """Collects records handed to the completion handler."""
    return []


@pytest.fixture
def machine(registry, completed_records):
    return WizardStateMachine(registry, on_complete=completed_records.append)


@pytest.fixture
def app(registry, completed_records):
    """Flask application serving the passenger wizard."""
    app = Flask(__name__)
    app.config.update({
        "TESTING": True,
        "STEPWIZARD_URL_PREFIX": "/wizard",
        "STEPWIZARD_MAX_ACTIVE": 3,
    })
    WizardApi(registry, app, completion_handler=completed_records.append)
    return app


@pytest.fixture
def client(app):
    return app.test_client()
