"""MCP server entry point for HS100-class smart plugs.

Exposes device operations as tools via the Model Context Protocol using
the official Python MCP SDK with stdio transport.
"""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime
from typing import Any

from mcp.server.fastmcp import FastMCP

from .client import DEFAULT_TIMEZONE_INDEX, HS100
from .protocol.commands import NO_WEEKDAYS, Action, KeyType, TimeOption
from .transport.tcp_connection import DEFAULT_PORT, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "hs100",
    instructions="Control HS100-class Wi-Fi smart plugs over their local control protocol.",
)

# Address of the selected plug; no socket is held between calls
_plug: HS100 | None = None


def _get_plug() -> HS100:
    """Get the selected plug, raising if none was chosen."""
    if _plug is None:
        raise RuntimeError(
            "No device selected. Use the 'connect' tool first."
        )
    return _plug


def _parse_days(days: list[int] | None) -> list[int] | dict[str, str]:
    if days is None:
        return list(NO_WEEKDAYS)
    if len(days) != 7 or any(d not in (0, 1) for d in days):
        return {"error": "days must be seven 0/1 flags, Sunday first"}
    return list(days)


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(host: str, port: int = DEFAULT_PORT) -> dict[str, Any]:
    """Select a smart plug by host name or IP address.

    Reads the system info once to confirm the device answers.
    """
    global _plug
    plug = HS100(host, port=port, timeout=_timeout())
    info = plug.info()
    _plug = plug
    logger.info("Selected %s (%s)", host, info.alias)
    return {
        "connected": True,
        "host": host,
        "alias": info.alias,
        "model": info.model,
    }


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Forget the selected plug."""
    global _plug
    _plug = None
    return {"disconnected": True}


# ─── SYSTEM TOOLS ─────────────────────────────────────────────────────

@mcp.tool()
def get_device_info() -> dict[str, Any]:
    """Retrieve system info: alias, model, versions, ids, relay and LED state."""
    return _get_plug().info().to_dict()


@mcp.tool()
def set_power(on: bool) -> dict[str, Any]:
    """Switch the relay (power output) on or off."""
    plug = _get_plug()
    if on:
        plug.turn_on()
    else:
        plug.turn_off()
    return {"on": on}


@mcp.tool()
def set_led(on: bool) -> dict[str, Any]:
    """Turn the status LED on or off (night mode)."""
    plug = _get_plug()
    if on:
        plug.turn_led_on()
    else:
        plug.turn_led_off()
    return {"led_on": on}


@mcp.tool()
def set_alias(alias: str) -> dict[str, Any]:
    """Rename the device."""
    if not alias:
        return {"error": "Alias must not be empty"}
    _get_plug().set_alias(alias)
    return {"alias": alias}


@mcp.tool()
def reboot(delay: int = 1) -> dict[str, Any]:
    """Reboot the device after ``delay`` seconds."""
    if delay < 0:
        return {"error": "Delay must be >= 0"}
    _get_plug().reboot(delay)
    return {"rebooting": True, "delay": delay}


# ─── TIME TOOLS ───────────────────────────────────────────────────────

@mcp.tool()
def get_time() -> dict[str, Any]:
    """Read the device clock (device local time, no zone applied)."""
    return {"time": _get_plug().time().isoformat()}


@mcp.tool()
def get_timezone() -> dict[str, Any]:
    """Read the device's timezone index."""
    return {"index": _get_plug().timezone()}


@mcp.tool()
def set_timezone(
    when: str | None = None,
    index: int = DEFAULT_TIMEZONE_INDEX,
) -> dict[str, Any]:
    """Set the device clock and timezone index.

    Args:
        when: ISO 8601 local time; defaults to this machine's current time.
        index: Vendor timezone table index.
    """
    try:
        moment = datetime.fromisoformat(when) if when else datetime.now()
    except ValueError:
        return {"error": f"Invalid ISO 8601 time: {when!r}"}
    _get_plug().set_timezone(moment, index)
    return {"time": moment.isoformat(), "index": index}


# ─── WI-FI TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def scan_wifi() -> dict[str, Any]:
    """List Wi-Fi networks visible to the device."""
    aps = _get_plug().scan_wifi()
    return {"networks": [ap.to_dict() for ap in aps]}


@mcp.tool()
def join_wifi(ssid: str, password: str, key_type: int = KeyType.WPA2) -> dict[str, Any]:
    """Join the device to a Wi-Fi network.

    Args:
        ssid: Network name.
        password: Network passphrase.
        key_type: 0 none, 1 WEP, 2 WPA, 3 WPA2.
    """
    if key_type not in set(KeyType):
        return {"error": f"Unknown key_type {key_type}. Valid: {[int(k) for k in KeyType]}"}
    _get_plug().set_wifi(ssid, password, key_type)
    return {"ssid": ssid, "joined": True}


# ─── CLOUD TOOLS ──────────────────────────────────────────────────────

@mcp.tool()
def get_cloud_info() -> dict[str, Any]:
    """Cloud server, bound username and binding status."""
    return _get_plug().cloud_info().to_dict()


@mcp.tool()
def bind_cloud(username: str, password: str) -> dict[str, Any]:
    """Register the device with a cloud account."""
    _get_plug().cloud_bind(username, password)
    return {"bound": True, "username": username}


@mcp.tool()
def unbind_cloud() -> dict[str, Any]:
    """Remove the device from its cloud account."""
    _get_plug().cloud_unbind()
    return {"bound": False}


@mcp.tool()
def set_cloud_server(url: str) -> dict[str, Any]:
    """Point the device at a different cloud server."""
    _get_plug().set_cloud_url(url)
    return {"server": url}


# ─── SCHEDULE TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def list_schedule_rules() -> dict[str, Any]:
    """List stored schedule rules."""
    rules = _get_plug().get_schedule_rules()
    return {"rules": [r.to_dict() for r in rules]}


@mcp.tool()
def get_next_action() -> dict[str, Any]:
    """The next scheduled action due to fire."""
    return _get_plug().get_next_scheduled_action().to_dict()


@mcp.tool()
def add_schedule_rule(
    name: str,
    on: bool,
    minutes: int = 0,
    days: list[int] | None = None,
    time_option: str = "time",
    enable: bool = True,
    year: int = 0,
    month: int = 0,
    day: int = 0,
) -> dict[str, Any]:
    """Add a schedule rule that switches the relay.

    Args:
        name: Rule name.
        on: Switch on (True) or off (False) when the rule fires.
        minutes: Minutes after midnight, for ``time_option="time"``.
        days: Seven Sunday-first 0/1 flags; omit for a one-off rule on
              year/month/day.
        time_option: "time", "sunrise" or "sunset".
        enable: Whether the rule is active.
    """
    flags = _parse_days(days)
    if isinstance(flags, dict):
        return flags
    if not 0 <= minutes < 1440:
        return {"error": "minutes must be 0-1439"}

    plug = _get_plug()
    action = Action.ON if on else Action.OFF
    if time_option == "time":
        rule_id = plug.add_schedule_rule(name, flags, action, minutes, enable, year, month, day)
    elif time_option == "sunrise":
        rule_id = plug.add_sunrise_schedule_rule(name, flags, action, enable, year, month, day)
    elif time_option == "sunset":
        rule_id = plug.add_sunset_schedule_rule(name, flags, action, enable, year, month, day)
    else:
        return {"error": f"Unknown time_option '{time_option}'. Valid: time, sunrise, sunset"}
    return {"id": rule_id, "name": name}


@mcp.tool()
def edit_schedule_rule(
    rule_id: str,
    name: str,
    on: bool,
    minutes: int = 0,
    days: list[int] | None = None,
    time_option: str = "time",
    enable: bool = True,
    year: int = 0,
    month: int = 0,
    day: int = 0,
) -> dict[str, Any]:
    """Replace an existing schedule rule. Arguments as for add_schedule_rule."""
    flags = _parse_days(days)
    if isinstance(flags, dict):
        return flags
    options = {"time": TimeOption.NONE, "sunrise": TimeOption.SUNRISE, "sunset": TimeOption.SUNSET}
    if time_option not in options:
        return {"error": f"Unknown time_option '{time_option}'. Valid: {list(options)}"}
    if not 0 <= minutes < 1440:
        return {"error": "minutes must be 0-1439"}

    _get_plug().edit_schedule_rule(
        rule_id,
        options[time_option],
        name,
        flags,
        Action.ON if on else Action.OFF,
        minutes,
        enable,
        year,
        month,
        day,
    )
    return {"id": rule_id, "edited": True}


@mcp.tool()
def delete_schedule_rule(rule_id: str) -> dict[str, Any]:
    """Delete one schedule rule by id."""
    _get_plug().delete_schedule_rule(rule_id)
    return {"id": rule_id, "deleted": True}


@mcp.tool()
def delete_all_schedule_rules() -> dict[str, Any]:
    """Delete every schedule rule and erase rule statistics."""
    _get_plug().delete_all_schedule_rules()
    return {"deleted": True}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("hs100://device/info")
def resource_device_info() -> str:
    """Selected device address and system info."""
    if _plug is None:
        return json.dumps({"connected": False})
    info = _plug.info()
    return json.dumps({"connected": True, "host": _plug.host, **info.to_dict()})


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def _timeout() -> float:
    return float(os.environ.get("HS100_TIMEOUT", DEFAULT_TIMEOUT))


def main():
    """Run the MCP server with stdio transport."""
    global _plug
    logging.basicConfig(level=logging.INFO)
    host = os.environ.get("HS100_HOST")
    if host:
        _plug = HS100(host, timeout=_timeout())
        logger.info("Using device %s from HS100_HOST", host)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
