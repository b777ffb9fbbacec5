"""Leaves of the ``netif`` (Wi-Fi) module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from .status import Status, record_list


@dataclass
class AccessPoint:
    """One network found by a Wi-Fi scan."""

    ssid: str
    key_type: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> AccessPoint:
        if not isinstance(data, Mapping):
            raise ValueError(f"Access point is {type(data).__name__}, expected an object")
        return cls(ssid=data.get("ssid", ""), key_type=int(data.get("key_type", 0)))

    def to_dict(self) -> dict[str, Any]:
        return {"ssid": self.ssid, "key_type": self.key_type}


@dataclass
class ScanInfo(Status):
    """``netif.get_scaninfo``."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {"ap_list": "ap_list"}

    ap_list: list[AccessPoint] = field(default_factory=list)

    @classmethod
    def _convert(cls, attr: str, value: Any) -> Any:
        if attr == "ap_list":
            return [AccessPoint.from_dict(ap) for ap in record_list(value, "ap_list")]
        return value


@dataclass
class NetIfResponse:
    get_scaninfo: ScanInfo | None = None
    set_stainfo: Status | None = None
