"""Process-wide roster of known devices exposed as the switchbot_device gauge."""

import logging
import threading
from collections.abc import Iterable, Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from switchbot_exporter.schemas.switchbot import Device, InfraredRemote

logger = logging.getLogger(__name__)

DEVICE_METRIC_NAME = "switchbot_device"
DEVICE_METRIC_HELP = "Known SwitchBot devices; the value is always 0, the labels carry the display name"


class DeviceLabelCache(Collector):
    """Maps (device_id, device_name) pairs to a presence marker.

    The cache is a prometheus collector so every per-request registry can
    register the same instance. Entries are only ever added: a device that
    disappears upstream, or is renamed, keeps its old series until the
    process restarts.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        # dict as an insertion-ordered set
        self._devices: dict[tuple[str, str], None] = {}

    def record_device(self, device_id: str, device_name: str) -> None:
        with self._lock:
            self._devices[(device_id, device_name)] = None

    def record_inventory(self, devices: Iterable[Device | InfraredRemote]) -> int:
        """Record every device of an inventory fetch, returning how many were seen."""
        count = 0
        for device in devices:
            self.record_device(device.device_id, device.device_name)
            count += 1
        return count

    def snapshot(self) -> list[tuple[str, str]]:
        with self._lock:
            return list(self._devices)

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def describe(self) -> Iterable[GaugeMetricFamily]:
        return [self._family()]

    def collect(self) -> Iterator[GaugeMetricFamily]:
        family = self._family()
        for device_id, device_name in self.snapshot():
            family.add_metric([device_id, device_name], 0)
        yield family

    def _family(self) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            DEVICE_METRIC_NAME,
            DEVICE_METRIC_HELP,
            labels=["device_id", "device_name"],
        )
