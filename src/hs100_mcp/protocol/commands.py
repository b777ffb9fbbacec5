"""Module/action identifiers and command document builders.

Every command is a JSON document of the shape
``{module: {action: {argument: value, ...}}}``. Documents are always
produced with :mod:`json`, never by string substitution, so aliases,
SSIDs and passwords may contain quotes or control characters.
"""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from types import MappingProxyType
from typing import Any, Mapping, Sequence


class Module(str, Enum):
    """Top-level command modules."""

    SYSTEM = "system"
    TIME = "time"
    NETIF = "netif"
    CLOUD = "cnCloud"
    SCHEDULE = "schedule"


class TimeOption(IntEnum):
    """How a schedule rule's start time is expressed (``stime_opt``)."""

    NONE = 0  # minutes after midnight
    SUNRISE = 1
    SUNSET = 2


class Action(IntEnum):
    """Relay action a schedule rule performs (``sact``)."""

    OFF = 0
    ON = 1


class KeyType(IntEnum):
    """Wi-Fi security type used by ``netif`` commands."""

    NONE = 0
    WEP = 1
    WPA = 2
    WPA2 = 3


NO_WEEKDAYS = (0, 0, 0, 0, 0, 0, 0)


def _name(value: str | Enum) -> str:
    return value.value if isinstance(value, Enum) else value


@dataclass(frozen=True)
class Command:
    """A single module/action request and its arguments."""

    module: str
    action: str
    arguments: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "module", _name(self.module))
        if not self.module or not self.action:
            raise ValueError("Module and action must be non-empty")
        object.__setattr__(self, "arguments", MappingProxyType(copy.deepcopy(dict(self.arguments))))

    def to_document(self) -> dict[str, Any]:
        return {self.module: {self.action: dict(self.arguments)}}

    def to_json(self) -> str:
        """Compact JSON text ready to be ciphered and framed."""
        return json.dumps(self.to_document(), separators=(",", ":"))

    def __repr__(self) -> str:
        return f"Command({self.module}.{self.action})"


def build_command(
    module: str | Module,
    action: str,
    arguments: Mapping[str, Any] | None = None,
) -> str:
    """Serialize a command document.

    Args:
        module: Module name, e.g. ``"system"``.
        action: Action name within the module, e.g. ``"set_relay_state"``.
        arguments: Named parameters; ``None`` sends an empty object.

    Returns:
        Compact JSON text ready to be ciphered and framed.
    """
    return Command(module, action, arguments or {}).to_json()


# ─── SYSTEM ──────────────────────────────────────────────────────────

def build_get_sysinfo() -> Command:
    return Command(Module.SYSTEM, "get_sysinfo")


def build_set_relay_state(on: bool) -> Command:
    """Build a power toggle: state 1 is on, 0 is off."""
    return Command(Module.SYSTEM, "set_relay_state", {"state": int(bool(on))})


def build_set_led_off(off: bool) -> Command:
    """Build an LED toggle. Note the inverted sense: ``off=1`` darkens the LED."""
    return Command(Module.SYSTEM, "set_led_off", {"off": int(bool(off))})


def build_set_dev_alias(alias: str) -> Command:
    return Command(Module.SYSTEM, "set_dev_alias", {"alias": alias})


def build_reboot(delay: int = 1) -> Command:
    if delay < 0:
        raise ValueError(f"Delay must be >= 0, got {delay}")
    return Command(Module.SYSTEM, "reboot", {"delay": delay})


def build_reset(delay: int = 1) -> Command:
    """Build a factory reset command."""
    if delay < 0:
        raise ValueError(f"Delay must be >= 0, got {delay}")
    return Command(Module.SYSTEM, "reset", {"delay": delay})


# ─── TIME ────────────────────────────────────────────────────────────

def build_get_time() -> Command:
    return Command(Module.TIME, "get_time")


def build_get_timezone() -> Command:
    return Command(Module.TIME, "get_timezone")


def build_set_timezone(when: datetime, index: int) -> Command:
    """Build a set_timezone command carrying the wall clock and zone index."""
    if index < 0:
        raise ValueError(f"Timezone index must be >= 0, got {index}")
    return Command(
        Module.TIME,
        "set_timezone",
        {
            "year": when.year,
            "month": when.month,
            "mday": when.day,
            "hour": when.hour,
            "min": when.minute,
            "sec": when.second,
            "index": index,
        },
    )


# ─── NETIF ───────────────────────────────────────────────────────────

def build_get_scaninfo(refresh: bool = True) -> Command:
    return Command(Module.NETIF, "get_scaninfo", {"refresh": int(bool(refresh))})


def build_set_stainfo(ssid: str, password: str, key_type: int) -> Command:
    """Build a command that joins the device to a Wi-Fi network."""
    return Command(
        Module.NETIF,
        "set_stainfo",
        {"ssid": ssid, "password": password, "key_type": int(KeyType(key_type))},
    )


# ─── CLOUD ───────────────────────────────────────────────────────────

def build_get_cloud_info() -> Command:
    return Command(Module.CLOUD, "get_info")


def build_cloud_bind(username: str, password: str) -> Command:
    return Command(Module.CLOUD, "bind", {"username": username, "password": password})


def build_cloud_unbind() -> Command:
    return Command(Module.CLOUD, "unbind")


def build_set_server_url(url: str) -> Command:
    return Command(Module.CLOUD, "set_server_url", {"server": url})


# ─── SCHEDULE ────────────────────────────────────────────────────────

def validate_weekdays(days: Sequence[int]) -> list[int]:
    """Check a Sunday-first vector of seven 0/1 weekday flags."""
    flags = [int(d) for d in days]
    if len(flags) != 7:
        raise ValueError(f"Weekday flags must have 7 entries, got {len(flags)}")
    if any(f not in (0, 1) for f in flags):
        raise ValueError(f"Weekday flags must be 0 or 1, got {flags}")
    return flags


def is_repeating(days: Sequence[int]) -> bool:
    """A rule repeats unless every weekday flag is zero."""
    return any(days)


def build_rule_arguments(
    name: str,
    days: Sequence[int],
    action: int,
    minutes: int = 0,
    enable: bool = True,
    year: int = 0,
    month: int = 0,
    day: int = 0,
    time_option: int = TimeOption.NONE,
    rule_id: str | None = None,
) -> dict[str, Any]:
    """Assemble the argument object shared by add_rule and edit_rule.

    ``repeat`` is derived from ``days`` and is never supplied by the caller.

    Args:
        name: Rule name shown in the vendor app.
        days: Seven Sunday-first weekday flags; all zero means a one-off rule
            on ``year``/``month``/``day``.
        action: :class:`Action` applied when the rule fires.
        minutes: Start time in minutes after midnight (ignored by the device
            for sunrise/sunset rules).
        enable: Whether the rule is active.
        time_option: :class:`TimeOption` for the start time.
        rule_id: Existing rule id, required for edit_rule.
    """
    flags = validate_weekdays(days)
    if not 0 <= minutes < 24 * 60:
        raise ValueError(f"Minutes must be 0-1439, got {minutes}")
    arguments: dict[str, Any] = {}
    if rule_id is not None:
        arguments["id"] = rule_id
    arguments.update(
        {
            "name": name,
            "enable": int(bool(enable)),
            "wday": flags,
            "repeat": int(is_repeating(flags)),
            "stime_opt": int(TimeOption(time_option)),
            "smin": minutes,
            "sact": int(Action(action)),
            "etime_opt": -1,
            "emin": 0,
            "eact": -1,
            "year": year,
            "month": month,
            "day": day,
        }
    )
    return arguments


def build_get_rules() -> Command:
    return Command(Module.SCHEDULE, "get_rules")


def build_get_next_action() -> Command:
    return Command(Module.SCHEDULE, "get_next_action")


def build_add_rule(name: str, days: Sequence[int], action: int, **kwargs: Any) -> Command:
    """Build an add_rule command. See :func:`build_rule_arguments`."""
    arguments = build_rule_arguments(name, days, action, **kwargs)
    return Command(Module.SCHEDULE, "add_rule", arguments)


def build_edit_rule(
    rule_id: str, name: str, days: Sequence[int], action: int, **kwargs: Any
) -> Command:
    if not rule_id:
        raise ValueError("edit_rule requires a rule id")
    arguments = build_rule_arguments(name, days, action, rule_id=rule_id, **kwargs)
    return Command(Module.SCHEDULE, "edit_rule", arguments)


def build_delete_rule(rule_id: str) -> Command:
    if not rule_id:
        raise ValueError("delete_rule requires a rule id")
    return Command(Module.SCHEDULE, "delete_rule", {"id": rule_id})


def build_delete_all_rules() -> Command:
    return Command(Module.SCHEDULE, "delete_all_rules")
