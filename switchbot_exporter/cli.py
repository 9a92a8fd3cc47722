"""Command-line entry point for the exporter."""

import argparse
import logging
import os
import sys
import threading
from typing import NoReturn

from dotenv import load_dotenv
from paste.translogger import TransLogger  # type: ignore[import-untyped]
from waitress.server import create_server

from switchbot_exporter import create_app
from switchbot_exporter.app import App
from switchbot_exporter.config import DEFAULT_LISTEN_ADDRESS, Settings
from switchbot_exporter.exceptions import ConfigurationError, SwitchBotApiException
from switchbot_exporter.utils.lifecycle_coordinator import LifecycleEvent

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="switchbot-exporter",
        description="Prometheus exporter for SwitchBot devices",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        default=DEFAULT_LISTEN_ADDRESS,
        help="The address to listen on for HTTP requests (env: WEB_LISTEN_ADDRESS)",
    )
    parser.add_argument(
        "--switchbot.open-token",
        dest="open_token",
        default="",
        help="The open token for switchbot-api (env: SWITCHBOT_OPENTOKEN)",
    )
    parser.add_argument(
        "--switchbot.secret-key",
        dest="secret_key",
        default="",
        help="The secret key for switchbot-api (env: SWITCHBOT_SECRETKEY)",
    )
    parser.add_argument(
        "--log.level",
        dest="log_level",
        default="INFO",
        help="Logging level (env: LOG_LEVEL)",
    )
    return parser


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def serve(app: App, settings: Settings) -> int:
    """Serve the app until a shutdown signal arrives.

    Returns:
        Process exit code
    """
    lifecycle_coordinator = app.container.lifecycle_coordinator()
    reload_coordinator = app.container.reload_coordinator()

    debug_mode = not settings.is_production

    lifecycle_coordinator.initialize()
    reload_coordinator.initialize()

    if debug_mode:
        app.logger.info("Running in debug mode")

        def signal_shutdown(lifecycle_event: LifecycleEvent) -> None:
            if lifecycle_event == LifecycleEvent.AFTER_SHUTDOWN:
                os._exit(0)

        lifecycle_coordinator.register_lifecycle_notification(signal_shutdown)
        app.run(host=settings.host, port=settings.port, debug=True, use_reloader=False)
        return 0

    wsgi = TransLogger(app, setup_console_handler=False)
    try:
        server = create_server(
            wsgi,
            host=settings.host,
            port=settings.port,
            threads=settings.waitress_threads,
        )
    except OSError as e:
        logger.error(f"Failed to listen on {settings.listen_address}: {e}")
        return 1

    logger.info(
        f"Listening on {settings.listen_address} "
        f"(Waitress WSGI server with {settings.waitress_threads} threads)"
    )

    exit_code = 0
    event = threading.Event()

    def runner() -> None:
        nonlocal exit_code
        try:
            server.run()
        except Exception as e:
            if not lifecycle_coordinator.is_shutting_down():
                logger.error(f"HTTP server failed: {e}")
                exit_code = 1
        event.set()

    def signal_shutdown_prod(lifecycle_event: LifecycleEvent) -> None:
        if lifecycle_event == LifecycleEvent.SHUTDOWN:
            server.close()
        elif lifecycle_event == LifecycleEvent.AFTER_SHUTDOWN:
            event.set()

    lifecycle_coordinator.register_lifecycle_notification(signal_shutdown_prod)

    # Run server in daemon thread so the lifecycle coordinator controls exit
    thread = threading.Thread(target=runner, daemon=True)
    thread.start()

    event.wait()
    return exit_code


def main() -> NoReturn:
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args()

    try:
        settings = Settings.load(args=args)
        configure_logging(settings.log_level)
        settings.validate_required()
        app = create_app(settings)
    except ConfigurationError as e:
        configure_logging("INFO")
        logger.error(f"error: {e}")
        sys.exit(1)
    except SwitchBotApiException as e:
        logger.error(f"error: getting device list: {e.message}")
        sys.exit(1)

    sys.exit(serve(app, settings))


if __name__ == "__main__":
    main()
