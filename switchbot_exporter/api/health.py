"""Health check endpoints for orchestrator probes."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, jsonify

from switchbot_exporter.services.container import ServiceContainer
from switchbot_exporter.services.health_service import HealthService

health_bp = Blueprint("health", __name__, url_prefix="/health")


@health_bp.route("/healthz", methods=["GET"])
@inject
def healthz(
    health_service: HealthService = Provide[ServiceContainer.health_service],
) -> Any:
    """Liveness probe."""
    body, status = health_service.check_healthz()
    return jsonify(body), status


@health_bp.route("/readyz", methods=["GET"])
@inject
def readyz(
    health_service: HealthService = Provide[ServiceContainer.health_service],
) -> Any:
    """Readiness probe."""
    body, status = health_service.check_readyz()
    return jsonify(body), status
