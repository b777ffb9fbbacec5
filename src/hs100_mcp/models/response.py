"""The decoded reply document.

A reply only populates the branch of the module/action that was invoked;
every other branch stays ``None``. The untouched JSON is kept in ``raw`` so
actions outside the modelled surface remain reachable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..errors import ProtocolError
from .clock import DeviceTime, TimeResponse, TimeZone
from .cloud import CloudInfo, CloudResponse
from .network import NetIfResponse, ScanInfo
from .schedule import NextAction, RuleId, RuleList, ScheduleResponse
from .status import Status
from .system import SysInfo, SystemResponse

# Wire module name -> (attribute on ResponseDocument, module response class)
MODULES: dict[str, tuple[str, type]] = {
    "system": ("system", SystemResponse),
    "time": ("time", TimeResponse),
    "netif": ("netif", NetIfResponse),
    "cnCloud": ("cloud", CloudResponse),
    "cloud": ("cloud", CloudResponse),
    "schedule": ("schedule", ScheduleResponse),
}

# Leaf record type per module attribute and action
LEAF_TYPES: dict[str, dict[str, type[Status]]] = {
    "system": {
        "get_sysinfo": SysInfo,
        "set_relay_state": Status,
        "set_led_off": Status,
        "set_dev_alias": Status,
        "reboot": Status,
        "reset": Status,
    },
    "time": {
        "get_time": DeviceTime,
        "get_timezone": TimeZone,
        "set_timezone": Status,
    },
    "netif": {
        "get_scaninfo": ScanInfo,
        "set_stainfo": Status,
    },
    "cloud": {
        "get_info": CloudInfo,
        "bind": Status,
        "unbind": Status,
        "set_server_url": Status,
    },
    "schedule": {
        "get_rules": RuleList,
        "get_next_action": NextAction,
        "add_rule": RuleId,
        "edit_rule": Status,
        "delete_rule": Status,
        "delete_all_rules": Status,
    },
}


def leaf_type(module: str, action: str) -> type[Status]:
    """Record class used for ``module.action``; :class:`Status` if unmodelled."""
    attr = MODULES.get(module, (module, None))[0]
    return LEAF_TYPES.get(attr, {}).get(action, Status)


@dataclass
class ResponseDocument:
    """Nested reply keyed by module, then action."""

    system: SystemResponse | None = None
    time: TimeResponse | None = None
    netif: NetIfResponse | None = None
    cloud: CloudResponse | None = None
    schedule: ScheduleResponse | None = None
    raw: dict[str, Any] = field(default_factory=dict)

    def leaf(self, module: str, action: str) -> Status | None:
        """Return the leaf for ``module.action``, or ``None`` if absent."""
        if module in MODULES:
            branch = getattr(self, MODULES[module][0])
            if branch is not None and action in LEAF_TYPES[MODULES[module][0]]:
                return getattr(branch, action)
        entry = self.raw.get(module)
        if isinstance(entry, dict) and isinstance(entry.get(action), dict):
            try:
                return leaf_type(module, action).from_dict(entry[action])
            except (TypeError, ValueError) as e:
                raise ProtocolError(f"Malformed '{module}.{action}' entry: {e}") from e
        return None

    def __repr__(self) -> str:
        populated = [
            f"{module}.{action}"
            for module, actions in self.raw.items()
            if isinstance(actions, dict)
            for action in actions
        ]
        return f"ResponseDocument({', '.join(populated) or '(empty)'})"
