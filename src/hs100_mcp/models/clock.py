"""Leaves of the ``time`` module."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from .status import Status


@dataclass
class DeviceTime(Status):
    """``time.get_time``: the device's wall clock, without zone information."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {
        "year": "year",
        "month": "month",
        "mday": "day",
        "hour": "hour",
        "min": "minute",
        "sec": "second",
    }

    year: int = 0
    month: int = 0
    day: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0

    def to_datetime(self) -> datetime:
        """Naive datetime of the reported fields."""
        return datetime(
            self.year, self.month, self.day, self.hour, self.minute, self.second
        )


@dataclass
class TimeZone(Status):
    """``time.get_timezone``: index into the vendor's zone table."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {"index": "index"}

    index: int = 0


@dataclass
class TimeResponse:
    get_time: DeviceTime | None = None
    get_timezone: TimeZone | None = None
    set_timezone: Status | None = None
