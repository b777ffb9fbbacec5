"""Leaves of the ``schedule`` module."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping

from .status import Status, record_list

_RULE_FIELDS = {
    "id": "id",
    "name": "name",
    "enable": "enable",
    "wday": "wday",
    "repeat": "repeat",
    "stime_opt": "stime_opt",
    "smin": "smin",
    "sact": "sact",
    "etime_opt": "etime_opt",
    "emin": "emin",
    "eact": "eact",
    "year": "year",
    "month": "month",
    "day": "day",
}


@dataclass
class Rule:
    """A stored schedule rule.

    ``wday`` holds seven Sunday-first flags; ``stime_opt`` says whether
    ``smin`` is minutes after midnight (0) or the rule tracks sunrise (1)
    or sunset (2).
    """

    id: str = ""
    name: str = ""
    enable: int = 0
    wday: list[int] = field(default_factory=lambda: [0] * 7)
    repeat: int = 0
    stime_opt: int = 0
    smin: int = 0
    sact: int = 0
    etime_opt: int = -1
    emin: int = 0
    eact: int = -1
    year: int = 0
    month: int = 0
    day: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Rule:
        if not isinstance(data, Mapping):
            raise ValueError(f"Rule is {type(data).__name__}, expected an object")
        kwargs = {_RULE_FIELDS[k]: v for k, v in data.items() if k in _RULE_FIELDS}
        extra = {k: v for k, v in data.items() if k not in _RULE_FIELDS}
        return cls(extra=extra, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        d = {wire: getattr(self, attr) for wire, attr in _RULE_FIELDS.items()}
        d.update(self.extra)
        return d


@dataclass
class RuleList(Status):
    """``schedule.get_rules``."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {
        "rule_list": "rule_list",
        "enable": "enable",
        "version": "version",
    }

    rule_list: list[Rule] = field(default_factory=list)
    enable: int = 0
    version: int = 0

    @classmethod
    def _convert(cls, attr: str, value: Any) -> Any:
        if attr == "rule_list":
            return [Rule.from_dict(r) for r in record_list(value, "rule_list")]
        return value


@dataclass
class NextAction(Status):
    """``schedule.get_next_action``: the next rule due to fire."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {
        "id": "rule_id",
        "schd_sec": "scheduled_time_seconds",
        "action": "action",
        "type": "type",
    }

    rule_id: str = ""
    scheduled_time_seconds: int = 0
    action: int = 0
    type: int = 0


@dataclass
class RuleId(Status):
    """``schedule.add_rule``: id assigned to the new rule."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {"id": "id"}

    id: str = ""


@dataclass
class ScheduleResponse:
    get_rules: RuleList | None = None
    get_next_action: NextAction | None = None
    add_rule: RuleId | None = None
    edit_rule: Status | None = None
    delete_rule: Status | None = None
    delete_all_rules: Status | None = None
