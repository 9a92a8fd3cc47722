"""Flask application factory."""

from switchbot_exporter.app import App
from switchbot_exporter.config import Settings


def create_app(settings: "Settings | None" = None, skip_background_services: bool = False) -> App:
    """Create and configure the Flask application.

    Args:
        settings: Optional settings instance (loaded from the environment if not provided)
        skip_background_services: Skip the initial device load and the reload
            worker (for tests that override services first)

    Raises:
        SwitchBotApiException: If the initial device load fails
    """
    app = App(__name__)

    if settings is None:
        settings = Settings.load()

    from switchbot_exporter.services.container import ServiceContainer

    container = ServiceContainer()
    container.config.override(settings)

    # Wire container to all API modules via package scanning
    container.wire(packages=["switchbot_exporter.api"])

    app.container = container

    from switchbot_exporter.utils.flask_error_handlers import register_core_error_handlers

    register_core_error_handlers(app)

    from switchbot_exporter.api.discovery import discovery_bp
    from switchbot_exporter.api.health import health_bp
    from switchbot_exporter.api.metrics import metrics_bp
    from switchbot_exporter.api.reload import reload_bp

    app.register_blueprint(discovery_bp)
    app.register_blueprint(metrics_bp)
    app.register_blueprint(reload_bp)
    app.register_blueprint(health_bp)

    if not skip_background_services:
        from switchbot_exporter.services.container import start_background_services

        start_background_services(container)

    return app
