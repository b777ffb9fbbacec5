"""Base record for every response leaf.

Each leaf carries the device's ``err_code`` (0 on success) and an optional
``err_msg``. Subclasses list the action-specific wire fields they expose in
``WIRE_FIELDS`` (wire name -> attribute name); anything the device sends
beyond those is kept in ``extra``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, Mapping


def record_list(value: Any, name: str) -> list[Mapping[str, Any]]:
    """Check that ``value`` is a list of objects (``None`` counts as empty)."""
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{name} is {type(value).__name__}, expected a list")
    for item in value:
        if not isinstance(item, Mapping):
            raise ValueError(f"{name} entry is {type(item).__name__}, expected an object")
    return value


@dataclass
class Status:
    """Generic response leaf."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {}

    err_code: int = 0
    err_msg: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.err_code == 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        if not isinstance(data, Mapping):
            raise ValueError(f"Leaf is {type(data).__name__}, expected an object")
        if "err_code" not in data:
            raise ValueError("Leaf has no err_code")
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in data.items():
            if key in ("err_code", "err_msg"):
                continue
            attr = cls.WIRE_FIELDS.get(key)
            if attr is not None and attr in known:
                kwargs[attr] = cls._convert(attr, value)
            else:
                extra[key] = value
        return cls(
            err_code=int(data["err_code"]),
            err_msg=data.get("err_msg"),
            extra=extra,
            **kwargs,
        )

    @classmethod
    def _convert(cls, attr: str, value: Any) -> Any:
        """Hook for subclasses whose fields hold nested records."""
        return value

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"err_code": self.err_code}
        if self.err_msg is not None:
            d["err_msg"] = self.err_msg
        for wire, attr in self.WIRE_FIELDS.items():
            value = getattr(self, attr)
            if isinstance(value, list):
                value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
            d[wire] = value
        d.update(self.extra)
        return d
