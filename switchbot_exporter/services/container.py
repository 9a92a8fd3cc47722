"""Dependency injection container for the exporter."""

import logging

from dependency_injector import containers, providers

from switchbot_exporter.config import Settings
from switchbot_exporter.services.device_label_cache import DeviceLabelCache
from switchbot_exporter.services.discovery_service import DiscoveryService
from switchbot_exporter.services.health_service import HealthService
from switchbot_exporter.services.metrics_service import MetricsService
from switchbot_exporter.services.reload_coordinator import ReloadCoordinator
from switchbot_exporter.services.switchbot_client import SwitchBotClient
from switchbot_exporter.utils.lifecycle_coordinator import LifecycleCoordinator

logger = logging.getLogger(__name__)


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration provider
    config = providers.Dependency(instance_of=Settings)

    # Lifecycle coordinator - manages startup and graceful shutdown
    lifecycle_coordinator = providers.Singleton(
        LifecycleCoordinator,
        graceful_shutdown_timeout=config.provided.graceful_shutdown_timeout,
    )

    # SwitchBot cloud API client - one shared HTTP connection pool
    switchbot_client = providers.Singleton(
        SwitchBotClient,
        open_token=config.provided.switchbot_open_token,
        secret_key=config.provided.switchbot_secret_key,
        lifecycle_coordinator=lifecycle_coordinator,
        base_url=config.provided.switchbot_api_url,
        timeout=config.provided.switchbot_api_timeout,
    )

    # Device label cache - shared by every scrape
    label_cache = providers.Singleton(DeviceLabelCache)

    # Reload coordinator - sole writer of the label cache
    reload_coordinator = providers.Singleton(
        ReloadCoordinator,
        switchbot_client=switchbot_client,
        label_cache=label_cache,
        lifecycle_coordinator=lifecycle_coordinator,
    )

    # Health service - liveness and readiness probes
    health_service = providers.Singleton(
        HealthService,
        lifecycle_coordinator=lifecycle_coordinator,
        reload_coordinator=reload_coordinator,
        label_cache=label_cache,
    )

    discovery_service = providers.Factory(
        DiscoveryService,
        switchbot_client=switchbot_client,
    )

    metrics_service = providers.Factory(
        MetricsService,
        switchbot_client=switchbot_client,
        label_cache=label_cache,
    )


def start_background_services(container: ServiceContainer) -> None:
    """Perform the initial inventory load and start the reload worker.

    Raises whatever the initial load raises; the exporter must not serve
    without a device roster.
    """
    count = container.reload_coordinator().start()
    logger.info(f"Initial device load completed: {count} devices")
