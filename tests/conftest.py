"""Pytest fixtures for exporter tests.

The app fixture builds the real container and replaces only the SwitchBot
client with an in-memory fake before the initial device load runs.
"""

from collections.abc import Generator

import pytest
from dependency_injector import providers
from flask.testing import FlaskClient

from switchbot_exporter import create_app
from switchbot_exporter.app import App
from switchbot_exporter.config import Settings
from switchbot_exporter.services.container import start_background_services
from tests.testing_utils import FakeSwitchBotClient, build_default_client


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        listen_address="127.0.0.1:0",
        flask_env="testing",
        log_level="DEBUG",
        graceful_shutdown_timeout=5,
        waitress_threads=2,
        switchbot_open_token="test-open-token",
        switchbot_secret_key="test-secret-key",
        switchbot_api_url="https://api.switchbot.test",
        switchbot_api_timeout=1.0,
    )


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return _build_test_settings()


@pytest.fixture
def switchbot_client() -> FakeSwitchBotClient:
    """Fake SwitchBot client with a small mixed inventory."""
    return build_default_client()


@pytest.fixture
def app(
    test_settings: Settings, switchbot_client: FakeSwitchBotClient
) -> Generator[App, None, None]:
    """Create Flask app for testing with the initial device load completed."""
    app = create_app(test_settings, skip_background_services=True)
    app.container.switchbot_client.override(providers.Object(switchbot_client))

    start_background_services(app.container)

    try:
        yield app
    finally:
        app.container.reload_coordinator().stop()
        app.container.unwire()


@pytest.fixture
def client(app: App) -> FlaskClient:
    """Create test client."""
    return app.test_client()
