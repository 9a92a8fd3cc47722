"""Administrative endpoint for reloading the device roster."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response, request
from werkzeug.exceptions import MethodNotAllowed

from switchbot_exporter.exceptions import InvalidOperationException
from switchbot_exporter.services.container import ServiceContainer
from switchbot_exporter.services.reload_coordinator import ReloadCoordinator
from switchbot_exporter.utils.flask_error_handlers import plain_text_response

reload_bp = Blueprint("reload", __name__)

RELOAD_PATH = "/-/reload"
POST_REQUIRED = "This endpoint requires a POST request."


@reload_bp.route(
    RELOAD_PATH,
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"],
    provide_automatic_options=False,
)
@inject
def reload_devices(
    reload_coordinator: ReloadCoordinator = Provide[ServiceContainer.reload_coordinator],
) -> Any:
    """Reload the device roster and wait for the result."""
    if request.method != "POST":
        return plain_text_response(POST_REQUIRED, 405)

    try:
        reload_coordinator.request_reload()
    except InvalidOperationException:
        raise
    except Exception as e:
        return plain_text_response(f"failed to reload config: {e}", 500)

    return Response(status=200)


@reload_bp.app_errorhandler(MethodNotAllowed)
def handle_method_not_allowed(error: MethodNotAllowed) -> Any:
    # Methods outside the route's list never reach the view
    if request.path == RELOAD_PATH:
        return plain_text_response(POST_REQUIRED, 405)
    return error
