"""Typed records for decoded device replies."""

from .status import Status
from .system import SysInfo, SystemResponse
from .clock import DeviceTime, TimeZone, TimeResponse
from .network import AccessPoint, ScanInfo, NetIfResponse
from .cloud import CloudInfo, CloudResponse
from .schedule import Rule, RuleList, NextAction, RuleId, ScheduleResponse
from .response import ResponseDocument
