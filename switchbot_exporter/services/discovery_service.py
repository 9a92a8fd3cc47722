"""Prometheus HTTP service discovery for SwitchBot devices."""

import logging

from switchbot_exporter.schemas.discovery import StaticConfig
from switchbot_exporter.schemas.switchbot import is_supported_device_type
from switchbot_exporter.services.switchbot_client import SwitchBotClient

logger = logging.getLogger(__name__)


class DiscoveryService:
    """Builds the discovery document from a fresh inventory fetch.

    Only physical devices whose type the metrics endpoint can read are
    listed; infrared remotes are never scrape targets.
    """

    def __init__(self, switchbot_client: SwitchBotClient):
        self.switchbot_client = switchbot_client

    def discover(self) -> list[StaticConfig]:
        inventory = self.switchbot_client.list_devices()

        static_configs: list[StaticConfig] = []
        for device in inventory.devices:
            if not is_supported_device_type(device.device_type):
                logger.info(
                    f"Skipping device {device.device_id} ({device.device_name}): "
                    f"unsupported device type {device.device_type!r}"
                )
                continue

            static_configs.append(
                StaticConfig(
                    targets=[device.device_id],
                    labels={
                        "device_id": device.device_id,
                        "device_name": device.device_name,
                        "device_type": device.device_type,
                    },
                )
            )

        return static_configs
