"""Liveness and readiness checks."""

from typing import Any

from switchbot_exporter.services.device_label_cache import DeviceLabelCache
from switchbot_exporter.services.reload_coordinator import ReloadCoordinator
from switchbot_exporter.utils.lifecycle_coordinator import LifecycleCoordinatorProtocol


class HealthService:
    """Reports liveness and readiness for orchestrator probes.

    The exporter is ready once the initial inventory load has completed,
    until shutdown starts.
    """

    def __init__(
        self,
        lifecycle_coordinator: LifecycleCoordinatorProtocol,
        reload_coordinator: ReloadCoordinator,
        label_cache: DeviceLabelCache,
    ):
        self.lifecycle_coordinator = lifecycle_coordinator
        self.reload_coordinator = reload_coordinator
        self.label_cache = label_cache

    def check_healthz(self) -> tuple[dict[str, Any], int]:
        return {"status": "alive", "ready": True}, 200

    def check_readyz(self) -> tuple[dict[str, Any], int]:
        if self.lifecycle_coordinator.is_shutting_down():
            return {"status": "shutting down", "ready": False}, 503

        if not self.reload_coordinator.is_loaded:
            return {"status": "not ready", "ready": False}, 503

        return {"status": "ready", "ready": True, "devices": len(self.label_cache)}, 200
