"""Prometheus HTTP service discovery endpoint."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, jsonify

from switchbot_exporter.exceptions import SwitchBotApiException
from switchbot_exporter.services.container import ServiceContainer
from switchbot_exporter.services.discovery_service import DiscoveryService

discovery_bp = Blueprint("discovery", __name__)


@discovery_bp.route("/discover", methods=["GET"])
@inject
def discover(
    discovery_service: DiscoveryService = Provide[ServiceContainer.discovery_service],
) -> Any:
    """Return scrape targets in http_sd_configs format."""
    try:
        static_configs = discovery_service.discover()
    except SwitchBotApiException as e:
        raise e.with_context("failed to discover devices") from e

    return jsonify([static_config.model_dump() for static_config in static_configs])
