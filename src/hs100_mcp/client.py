"""Dispatcher and per-action accessors for a single smart plug.

:func:`execute` is the one entry point that talks to a device: it builds
the command document, performs the ciphered round trip and decodes the
reply. :class:`HS100` wraps it with one small method per action, each of
which checks the action's status code and returns the interesting fields.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Mapping, Sequence

from .errors import DeviceError, ProtocolError
from .models import (
    AccessPoint,
    CloudInfo,
    NextAction,
    ResponseDocument,
    Rule,
    Status,
    SysInfo,
)
from .protocol.commands import (
    Command,
    TimeOption,
    build_add_rule,
    build_cloud_bind,
    build_cloud_unbind,
    build_delete_all_rules,
    build_delete_rule,
    build_edit_rule,
    build_get_cloud_info,
    build_get_next_action,
    build_get_rules,
    build_get_scaninfo,
    build_get_sysinfo,
    build_get_time,
    build_get_timezone,
    build_reboot,
    build_reset,
    build_set_dev_alias,
    build_set_led_off,
    build_set_relay_state,
    build_set_server_url,
    build_set_stainfo,
    build_set_timezone,
)
from .protocol.parser import check_leaf, decode_response
from .transport.tcp_connection import DEFAULT_PORT, DEFAULT_TIMEOUT, round_trip

logger = logging.getLogger(__name__)

# Zone index the vendor app sends for US Eastern time
DEFAULT_TIMEZONE_INDEX = 18


def execute(
    address: str,
    module: str,
    action: str,
    arguments: Mapping[str, Any] | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    port: int = DEFAULT_PORT,
) -> ResponseDocument:
    """Send one command to a device and return the decoded reply.

    Args:
        address: Host name or IP address of the plug.
        module: Command module, e.g. ``"system"``.
        action: Action within the module, e.g. ``"set_relay_state"``.
        arguments: Named parameters for the action.
        timeout: Seconds allowed for each of connect, write and read.
        port: Control port, 9999 on real devices.

    Raises:
        TransportError: The device could not be reached or timed out.
        ProtocolError: The reply was malformed.
    """
    command = Command(module, action, arguments or {})
    logger.debug("Executing %s.%s on %s", command.module, command.action, address)
    reply = round_trip(address, command.to_json().encode("utf-8"), timeout, port)
    return decode_response(reply)


class HS100:
    """A smart plug addressed by host name or IP.

    No connection is held between calls; every method opens its own.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout

    def __repr__(self) -> str:
        return f"HS100(host={self.host!r}, port={self.port})"

    def _call(self, command: Command) -> Status:
        document = execute(
            self.host,
            command.module,
            command.action,
            command.arguments,
            timeout=self.timeout,
            port=self.port,
        )
        try:
            return check_leaf(document, command.module, command.action)
        except DeviceError as e:
            logger.warning("%s rejected by %s: %s", command, self.host, e)
            raise

    # ─── SYSTEM ──────────────────────────────────────────────────────

    def info(self) -> SysInfo:
        """Get system info (versions, MAC, device and hardware ids, state)."""
        return self._call(build_get_sysinfo())

    def turn_on(self) -> None:
        self._call(build_set_relay_state(True))

    def turn_off(self) -> None:
        self._call(build_set_relay_state(False))

    def turn_led_on(self) -> None:
        self._call(build_set_led_off(False))

    def turn_led_off(self) -> None:
        self._call(build_set_led_off(True))

    def set_alias(self, alias: str) -> None:
        self._call(build_set_dev_alias(alias))

    def reboot(self, delay: int = 1) -> None:
        self._call(build_reboot(delay))

    def reset(self, delay: int = 1) -> None:
        """Factory reset the device after ``delay`` seconds."""
        self._call(build_reset(delay))

    # ─── TIME ────────────────────────────────────────────────────────

    def time(self) -> datetime:
        """Device wall clock as a naive datetime.

        The device's zone index is not applied; see :meth:`timezone`.
        """
        leaf = self._call(build_get_time())
        try:
            return leaf.to_datetime()
        except ValueError as e:
            raise ProtocolError(f"Device reported an invalid time: {e}") from e

    def timezone(self) -> int:
        """Index of the device's zone in the vendor's timezone table."""
        leaf = self._call(build_get_timezone())
        return leaf.index

    def set_timezone(self, when: datetime, index: int = DEFAULT_TIMEZONE_INDEX) -> None:
        self._call(build_set_timezone(when, index))

    # ─── NETIF ───────────────────────────────────────────────────────

    def scan_wifi(self, refresh: bool = True) -> list[AccessPoint]:
        leaf = self._call(build_get_scaninfo(refresh))
        return leaf.ap_list

    def set_wifi(self, ssid: str, password: str, key_type: int) -> None:
        """Join the plug to a Wi-Fi network."""
        self._call(build_set_stainfo(ssid, password, key_type))

    # ─── CLOUD ───────────────────────────────────────────────────────

    def cloud_info(self) -> CloudInfo:
        """Cloud server, bound username and binding status."""
        return self._call(build_get_cloud_info())

    def set_cloud_url(self, url: str) -> None:
        self._call(build_set_server_url(url))

    def cloud_bind(self, username: str, password: str) -> None:
        """Register the device with a cloud account."""
        self._call(build_cloud_bind(username, password))

    def cloud_unbind(self) -> None:
        self._call(build_cloud_unbind())

    # ─── SCHEDULE ────────────────────────────────────────────────────

    def get_next_scheduled_action(self) -> NextAction:
        return self._call(build_get_next_action())

    def get_schedule_rules(self) -> list[Rule]:
        leaf = self._call(build_get_rules())
        return leaf.rule_list

    def add_schedule_rule(
        self,
        name: str,
        days: Sequence[int],
        action: int,
        minutes: int,
        enable: bool = True,
        year: int = 0,
        month: int = 0,
        day: int = 0,
    ) -> str:
        """Add a rule firing ``minutes`` after midnight; returns the new rule id."""
        return self._add_rule(TimeOption.NONE, name, days, action, minutes, enable, year, month, day)

    def add_sunrise_schedule_rule(
        self,
        name: str,
        days: Sequence[int],
        action: int,
        enable: bool = True,
        year: int = 0,
        month: int = 0,
        day: int = 0,
    ) -> str:
        return self._add_rule(TimeOption.SUNRISE, name, days, action, 0, enable, year, month, day)

    def add_sunset_schedule_rule(
        self,
        name: str,
        days: Sequence[int],
        action: int,
        enable: bool = True,
        year: int = 0,
        month: int = 0,
        day: int = 0,
    ) -> str:
        return self._add_rule(TimeOption.SUNSET, name, days, action, 0, enable, year, month, day)

    def _add_rule(
        self,
        time_option: TimeOption,
        name: str,
        days: Sequence[int],
        action: int,
        minutes: int,
        enable: bool,
        year: int,
        month: int,
        day: int,
    ) -> str:
        command = build_add_rule(
            name,
            days,
            action,
            minutes=minutes,
            enable=enable,
            year=year,
            month=month,
            day=day,
            time_option=time_option,
        )
        leaf = self._call(command)
        return leaf.id

    def edit_schedule_rule(
        self,
        rule_id: str,
        time_option: int,
        name: str,
        days: Sequence[int],
        action: int,
        minutes: int = 0,
        enable: bool = True,
        year: int = 0,
        month: int = 0,
        day: int = 0,
    ) -> None:
        command = build_edit_rule(
            rule_id,
            name,
            days,
            action,
            minutes=minutes,
            enable=enable,
            year=year,
            month=month,
            day=day,
            time_option=time_option,
        )
        self._call(command)

    def delete_schedule_rule(self, rule_id: str) -> None:
        self._call(build_delete_rule(rule_id))

    def delete_all_schedule_rules(self) -> None:
        """Delete every schedule rule and erase the rule statistics."""
        self._call(build_delete_all_rules())
