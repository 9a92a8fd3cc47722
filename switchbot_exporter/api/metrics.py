"""Metrics endpoint for Prometheus scraping."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response, request

from switchbot_exporter.exceptions import SwitchBotApiException
from switchbot_exporter.services.container import ServiceContainer
from switchbot_exporter.services.metrics_service import METRICS_CONTENT_TYPE, MetricsService

metrics_bp = Blueprint("metrics", __name__)


@metrics_bp.route("/metrics", methods=["GET"])
@inject
def get_metrics(
    metrics_service: MetricsService = Provide[ServiceContainer.metrics_service],
) -> Any:
    """Return a snapshot of one device, or of every device when no target is given.

    Returns:
        Response with metrics data in Prometheus exposition format
    """
    target = request.args.get("target") or None

    try:
        metrics_text = metrics_service.get_metrics_text(target)
    except SwitchBotApiException as e:
        raise e.with_context("failed to list devices") from e

    return Response(metrics_text, content_type=METRICS_CONTENT_TYPE)
