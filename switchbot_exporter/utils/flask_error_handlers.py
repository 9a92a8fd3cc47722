"""Flask error handlers converting domain exceptions to plain-text responses."""

import logging

from flask import Flask, Response

from switchbot_exporter.exceptions import InvalidOperationException, SwitchBotApiException

logger = logging.getLogger(__name__)


def plain_text_response(message: str, status: int) -> Response:
    return Response(f"{message}\n", status=status, mimetype="text/plain")


def register_core_error_handlers(app: Flask) -> None:
    """Register handlers for the exporter's exception types."""

    @app.errorhandler(SwitchBotApiException)
    def handle_switchbot_api_error(error: SwitchBotApiException) -> Response:
        logger.warning(f"SwitchBot API error: {error.message}")
        return plain_text_response(error.message, 500)

    @app.errorhandler(InvalidOperationException)
    def handle_invalid_operation(error: InvalidOperationException) -> Response:
        logger.warning(error.message)
        return plain_text_response(error.message, 503)
