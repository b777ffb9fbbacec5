"""Leaves of the ``system`` module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .status import Status


@dataclass
class SysInfo(Status):
    """``system.get_sysinfo``: identity, versions and live state of the plug."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {
        "alias": "alias",
        "dev_name": "dev_name",
        "model": "model",
        "type": "type",
        "mac": "mac",
        "deviceId": "device_id",
        "hwId": "hw_id",
        "fwId": "fw_id",
        "oemId": "oem_id",
        "sw_ver": "sw_ver",
        "hw_ver": "hw_ver",
        "relay_state": "relay_state",
        "on_time": "on_time",
        "led_off": "led_off",
        "rssi": "rssi",
        "updating": "updating",
        "active_mode": "active_mode",
        "feature": "feature",
        "icon_hash": "icon_hash",
        "latitude": "latitude",
        "longitude": "longitude",
    }

    alias: str = ""
    dev_name: str = ""
    model: str = ""
    type: str = ""
    mac: str = ""
    device_id: str = ""
    hw_id: str = ""
    fw_id: str = ""
    oem_id: str = ""
    sw_ver: str = ""
    hw_ver: str = ""
    relay_state: int = 0
    on_time: int = 0
    led_off: int = 0
    rssi: int = 0
    updating: int = 0
    active_mode: str = ""
    feature: str = ""
    icon_hash: str = ""
    latitude: float = 0.0
    longitude: float = 0.0

    @property
    def is_on(self) -> bool:
        return self.relay_state == 1

    @property
    def led_on(self) -> bool:
        return self.led_off == 0

    def __repr__(self) -> str:
        return f"SysInfo(alias={self.alias!r}, model={self.model!r}, relay_state={self.relay_state})"


@dataclass
class SystemResponse:
    """Every action the ``system`` module can answer."""

    get_sysinfo: SysInfo | None = None
    set_relay_state: Status | None = None
    set_led_off: Status | None = None
    set_dev_alias: Status | None = None
    reboot: Status | None = None
    reset: Status | None = None
