"""Pydantic schemas for SwitchBot cloud API payloads."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DeviceType(str, Enum):
    """Physical device types the exporter knows how to read."""

    METER = "Meter"
    METER_PLUS = "MeterPlus"
    METER_PRO = "MeterPro"
    METER_PRO_CO2 = "MeterPro(CO2)"
    OUTDOOR_METER = "WoIOSensor"
    HUB_2 = "Hub 2"
    HUMIDIFIER = "Humidifier"
    PLUG_MINI_JP = "Plug Mini (JP)"
    PLUG_MINI_US = "Plug Mini (US)"


class DeviceClass(str, Enum):
    """Metric families a device status is mapped onto."""

    CLIMATE = "climate"
    CLIMATE_CO2 = "climate_co2"
    PLUG = "plug"


_DEVICE_CLASSES: dict[str, DeviceClass] = {
    DeviceType.METER.value: DeviceClass.CLIMATE,
    DeviceType.METER_PLUS.value: DeviceClass.CLIMATE,
    DeviceType.METER_PRO.value: DeviceClass.CLIMATE,
    DeviceType.OUTDOOR_METER.value: DeviceClass.CLIMATE,
    DeviceType.HUB_2.value: DeviceClass.CLIMATE,
    DeviceType.HUMIDIFIER.value: DeviceClass.CLIMATE,
    DeviceType.METER_PRO_CO2.value: DeviceClass.CLIMATE_CO2,
    DeviceType.PLUG_MINI_JP.value: DeviceClass.PLUG,
    DeviceType.PLUG_MINI_US.value: DeviceClass.PLUG,
}


def classify_device_type(device_type: str) -> DeviceClass | None:
    """Return the metric family for a device type, or None when unrecognized."""
    return _DEVICE_CLASSES.get(device_type)


def is_supported_device_type(device_type: str) -> bool:
    return device_type in _DEVICE_CLASSES


class Device(BaseModel):
    """A physical device from the inventory."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    device_id: str = Field(alias="deviceId")
    device_name: str = Field(default="", alias="deviceName")
    # Kept as the raw string so unknown types survive parsing
    device_type: str = Field(default="", alias="deviceType")
    hub_device_id: str = Field(default="", alias="hubDeviceId")


class InfraredRemote(BaseModel):
    """A virtual device bridged through a hub's infrared remote."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    device_id: str = Field(alias="deviceId")
    device_name: str = Field(default="", alias="deviceName")
    remote_type: str = Field(default="", alias="remoteType")
    hub_device_id: str = Field(default="", alias="hubDeviceId")


class DeviceList(BaseModel):
    """Body of the device list response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    devices: list[Device] = Field(default_factory=list, alias="deviceList")
    infrared_remotes: list[InfraredRemote] = Field(
        default_factory=list, alias="infraredRemoteList"
    )

    def all_devices(self) -> list[Device | InfraredRemote]:
        return [*self.devices, *self.infrared_remotes]


class DeviceStatus(BaseModel):
    """Point-in-time reading for one device.

    Only the fields relevant to ``device_type`` carry meaning; the rest stay
    at zero.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    device_id: str = Field(alias="deviceId")
    device_type: str = Field(default="", alias="deviceType")
    humidity: int = 0
    temperature: float = 0.0
    co2: int = Field(default=0, alias="CO2")
    weight: float = 0.0
    voltage: float = 0.0
    electric_current: float = Field(default=0.0, alias="electricCurrent")
