"""Leaves of the cloud account module (``cnCloud`` on the wire)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from .status import Status


@dataclass
class CloudInfo(Status):
    """``cnCloud.get_info``: account binding and cloud server."""

    WIRE_FIELDS: ClassVar[dict[str, str]] = {
        "username": "username",
        "server": "server",
        "binded": "binded",
        "cld_connection": "cld_connection",
        "fwDlPage": "fw_dl_page",
        "fwNotifyType": "fw_notify_type",
        "illegalType": "illegal_type",
        "tcspStatus": "tcsp_status",
        "tcspInfo": "tcsp_info",
        "stopConnect": "stop_connect",
    }

    username: str = ""
    server: str = ""
    binded: int = 0
    cld_connection: int = 0
    fw_dl_page: str = ""
    fw_notify_type: int = 0
    illegal_type: int = 0
    tcsp_status: int = 0
    tcsp_info: str = ""
    stop_connect: int = 0

    @property
    def bound(self) -> bool:
        return self.binded == 1


@dataclass
class CloudResponse:
    get_info: CloudInfo | None = None
    bind: Status | None = None
    unbind: Status | None = None
    set_server_url: Status | None = None
