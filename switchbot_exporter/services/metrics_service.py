"""On-demand metrics snapshots for SwitchBot devices.

Every scrape builds its own CollectorRegistry with a fresh set of gauges,
fills it from live status calls and renders it. Nothing but the shared
DeviceLabelCache survives between scrapes, so a series written for one
target can never leak into the response for another.
"""

import logging

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from switchbot_exporter.exceptions import SwitchBotApiException
from switchbot_exporter.schemas.switchbot import DeviceClass, DeviceStatus, classify_device_type
from switchbot_exporter.services.device_label_cache import DeviceLabelCache
from switchbot_exporter.services.switchbot_client import SwitchBotClient

logger = logging.getLogger(__name__)

METRICS_CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

NAMESPACE = "switchbot"


class DeviceGauges:
    """The full set of device gauges, registered into one registry."""

    def __init__(self, registry: CollectorRegistry):
        self.meter_humidity = self._gauge(registry, "meter", "humidity", "Relative humidity in percent")
        self.meter_temperature = self._gauge(registry, "meter", "temperature", "Temperature in degrees Celsius")
        self.meter_co2 = self._gauge(registry, "meter", "co2", "CO2 concentration in ppm")
        self.plug_weight = self._gauge(registry, "plug", "weight", "Power consumption of the plug")
        self.plug_voltage = self._gauge(registry, "plug", "voltage", "Voltage of the plug")
        self.plug_electric_current = self._gauge(registry, "plug", "electricCurrent", "Electric current of the plug")

    @staticmethod
    def _gauge(registry: CollectorRegistry, subsystem: str, name: str, documentation: str) -> Gauge:
        return Gauge(
            name,
            documentation,
            ["device_id"],
            namespace=NAMESPACE,
            subsystem=subsystem,
            registry=registry,
        )

    def record(self, status: DeviceStatus) -> bool:
        """Set the gauges for one status reading.

        Returns:
            False when the device type is unrecognized and nothing was written
        """
        device_id = status.device_id

        match classify_device_type(status.device_type):
            case DeviceClass.CLIMATE:
                self._record_climate(status)
            case DeviceClass.CLIMATE_CO2:
                self._record_climate(status)
                self.meter_co2.labels(device_id=device_id).set(float(status.co2))
            case DeviceClass.PLUG:
                self.plug_weight.labels(device_id=device_id).set(status.weight)
                self.plug_voltage.labels(device_id=device_id).set(status.voltage)
                self.plug_electric_current.labels(device_id=device_id).set(status.electric_current)
            case _:
                return False

        return True

    def _record_climate(self, status: DeviceStatus) -> None:
        self.meter_humidity.labels(device_id=status.device_id).set(float(status.humidity))
        self.meter_temperature.labels(device_id=status.device_id).set(status.temperature)


class MetricsService:
    """Builds and renders per-scrape metric registries."""

    def __init__(self, switchbot_client: SwitchBotClient, label_cache: DeviceLabelCache):
        self.switchbot_client = switchbot_client
        self.label_cache = label_cache

    def resolve_targets(self, target: str | None) -> list[str]:
        """Return the device ids to scrape.

        An explicit target is used as-is without checking that it exists.
        Without one, every physical device of a fresh inventory fetch is a
        target; infrared remotes have no readable status.

        Raises:
            SwitchBotApiException: If the inventory fetch fails
        """
        if target:
            return [target]

        inventory = self.switchbot_client.list_devices()
        return [device.device_id for device in inventory.devices]

    def build_registry(self, target: str | None = None) -> CollectorRegistry:
        """Build a registry holding a snapshot of the requested targets.

        A failed status fetch skips that target only.
        """
        targets = self.resolve_targets(target)

        registry = CollectorRegistry(auto_describe=True)
        gauges = DeviceGauges(registry)
        registry.register(self.label_cache)

        for device_id in targets:
            logger.debug(f"Getting device status: {device_id}")
            try:
                status = self.switchbot_client.get_status(device_id)
            except SwitchBotApiException as e:
                logger.warning(f"Error getting status of device {device_id}: {e.message}")
                continue

            if not gauges.record(status):
                logger.info(
                    f"Unrecognized device type {status.device_type!r} for device {device_id}"
                )

        return registry

    def get_metrics_text(self, target: str | None = None) -> str:
        """Generate a snapshot in Prometheus text format."""
        return generate_latest(self.build_registry(target)).decode("utf-8")
