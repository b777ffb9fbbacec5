"""Tests for response decoding and leaf extraction."""

import json

import pytest

from hs100_mcp.errors import AbsentError, DeviceError, ProtocolError
from hs100_mcp.models import (
    AccessPoint,
    CloudInfo,
    DeviceTime,
    NextAction,
    RuleList,
    ScanInfo,
    Status,
    SysInfo,
)
from hs100_mcp.protocol.parser import check_leaf, decode_response, extract_leaf

SYSINFO = {
    "system": {
        "get_sysinfo": {
            "err_code": 0,
            "sw_ver": "1.2.5 Build 171213 Rel.101523",
            "hw_ver": "1.0",
            "type": "IOT.SMARTPLUGSWITCH",
            "model": "HS100(US)",
            "mac": "50:C7:BF:00:00:01",
            "deviceId": "8006ABCD",
            "hwId": "4A4B",
            "fwId": "0000",
            "oemId": "5E5F",
            "alias": "Kitchen",
            "dev_name": "Wi-Fi Smart Plug",
            "relay_state": 1,
            "on_time": 120,
            "led_off": 0,
            "rssi": -52,
            "next_action": {"type": -1},
        }
    }
}


def test_reboot_success():
    """A zero err_code leaf is returned."""
    doc = decode_response('{"system":{"reboot":{"err_code":0}}}')
    leaf = check_leaf(doc, "system", "reboot")
    assert leaf.ok
    assert leaf.err_code == 0


def test_cloud_bind_failure_raises_device_error():
    """A nonzero err_code surfaces as DeviceError with code and message."""
    doc = decode_response('{"cloud":{"bind":{"err_code":1,"err_msg":"bad credentials"}}}')
    with pytest.raises(DeviceError) as excinfo:
        check_leaf(doc, "cloud", "bind")
    assert excinfo.value.code == 1
    assert excinfo.value.message == "bad credentials"


def test_cloud_module_aliases():
    """cnCloud and cloud address the same branch."""
    doc = decode_response('{"cnCloud":{"unbind":{"err_code":0}}}')
    assert extract_leaf(doc, "cnCloud", "unbind").ok
    assert extract_leaf(doc, "cloud", "unbind").ok


def test_extract_leaf_ignores_status():
    """extract_leaf returns failing leaves without raising."""
    doc = decode_response('{"system":{"set_dev_alias":{"err_code":-3,"err_msg":"invalid argument"}}}')
    leaf = extract_leaf(doc, "system", "set_dev_alias")
    assert leaf.err_code == -3
    assert not leaf.ok


def test_sysinfo_fields():
    """get_sysinfo decodes into a SysInfo with snake_case attributes."""
    doc = decode_response(json.dumps(SYSINFO))
    info = check_leaf(doc, "system", "get_sysinfo")
    assert isinstance(info, SysInfo)
    assert info.alias == "Kitchen"
    assert info.device_id == "8006ABCD"
    assert info.hw_id == "4A4B"
    assert info.rssi == -52
    assert info.is_on
    assert info.led_on
    assert info.extra == {"next_action": {"type": -1}}


def test_sysinfo_to_dict_uses_wire_names():
    """to_dict restores the device's field names."""
    info = SysInfo.from_dict(SYSINFO["system"]["get_sysinfo"])
    d = info.to_dict()
    assert d["deviceId"] == "8006ABCD"
    assert d["next_action"] == {"type": -1}


def test_other_branches_absent():
    """Only the invoked branch is populated."""
    doc = decode_response(json.dumps(SYSINFO))
    assert doc.system is not None
    assert doc.system.set_relay_state is None
    assert doc.time is None
    assert doc.schedule is None


def test_absent_leaf_raises():
    """A missing module/action raises AbsentError, a ProtocolError."""
    doc = decode_response('{"system":{"reboot":{"err_code":0}}}')
    with pytest.raises(AbsentError) as excinfo:
        extract_leaf(doc, "system", "reset")
    assert excinfo.value.module == "system"
    assert excinfo.value.action == "reset"
    with pytest.raises(ProtocolError):
        extract_leaf(doc, "time", "get_time")


def test_get_time():
    """get_time decodes device clock fields."""
    doc = decode_response(
        '{"time":{"get_time":{"err_code":0,"year":2024,"month":1,"mday":31,'
        '"hour":23,"min":59,"sec":58}}}'
    )
    t = check_leaf(doc, "time", "get_time")
    assert isinstance(t, DeviceTime)
    assert (t.year, t.month, t.day, t.hour, t.minute, t.second) == (2024, 1, 31, 23, 59, 58)


def test_get_scaninfo():
    """get_scaninfo decodes a list of access points."""
    doc = decode_response(
        '{"netif":{"get_scaninfo":{"ap_list":[{"ssid":"home","key_type":3},'
        '{"ssid":"guest","key_type":0}],"err_code":0}}}'
    )
    scan = check_leaf(doc, "netif", "get_scaninfo")
    assert isinstance(scan, ScanInfo)
    assert scan.ap_list == [AccessPoint("home", 3), AccessPoint("guest", 0)]


def test_cloud_info():
    """cnCloud.get_info decodes username, server and binding."""
    doc = decode_response(
        '{"cnCloud":{"get_info":{"username":"me@example.com",'
        '"server":"devs.tplinkcloud.com","binded":1,"cld_connection":1,"err_code":0}}}'
    )
    info = check_leaf(doc, "cnCloud", "get_info")
    assert isinstance(info, CloudInfo)
    assert info.username == "me@example.com"
    assert info.bound


def test_schedule_rules():
    """get_rules decodes rule records."""
    doc = decode_response(json.dumps({
        "schedule": {"get_rules": {
            "rule_list": [{
                "id": "6A4E", "name": "morning", "enable": 1,
                "wday": [0, 1, 1, 1, 1, 1, 0], "repeat": 1,
                "stime_opt": 0, "smin": 420, "sact": 1,
                "etime_opt": -1, "emin": 0, "eact": -1,
                "year": 0, "month": 0, "day": 0,
                "longitude": 0, "latitude": 0,
            }],
            "version": 2, "enable": 1, "err_code": 0,
        }}
    }))
    rules = check_leaf(doc, "schedule", "get_rules")
    assert isinstance(rules, RuleList)
    assert len(rules.rule_list) == 1
    rule = rules.rule_list[0]
    assert rule.id == "6A4E"
    assert rule.smin == 420
    assert rule.extra == {"longitude": 0, "latitude": 0}


def test_next_action():
    """get_next_action maps id and schd_sec."""
    doc = decode_response(
        '{"schedule":{"get_next_action":{"type":1,"id":"6A4E","schd_sec":25200,'
        '"action":1,"err_code":0}}}'
    )
    nxt = check_leaf(doc, "schedule", "get_next_action")
    assert isinstance(nxt, NextAction)
    assert nxt.rule_id == "6A4E"
    assert nxt.scheduled_time_seconds == 25200


def test_unmodelled_action_available_from_raw():
    """Actions outside the modelled surface decode as generic leaves."""
    doc = decode_response('{"count_down":{"get_rules":{"err_code":0,"rule_list":[]}}}')
    leaf = check_leaf(doc, "count_down", "get_rules")
    assert type(leaf) is Status
    assert leaf.extra == {"rule_list": []}


def test_bytes_input():
    """UTF-8 bytes are accepted."""
    doc = decode_response(b'{"system":{"reboot":{"err_code":0}}}')
    assert extract_leaf(doc, "system", "reboot").ok


def test_invalid_json_raises():
    """Text that is not JSON raises ProtocolError."""
    with pytest.raises(ProtocolError):
        decode_response('{"system":')


def test_invalid_utf8_raises():
    """Bytes that are not UTF-8 raise ProtocolError."""
    with pytest.raises(ProtocolError):
        decode_response(b"\xff\xfe{}")


def test_non_object_shapes_raise():
    """Documents, modules and leaves must be objects."""
    with pytest.raises(ProtocolError):
        decode_response("[1, 2]")
    with pytest.raises(ProtocolError):
        decode_response('{"system": 5}')
    with pytest.raises(ProtocolError):
        decode_response('{"system":{"reboot":"ok"}}')


def test_malformed_nested_lists_raise():
    """List fields must be lists of objects."""
    with pytest.raises(ProtocolError):
        decode_response('{"netif":{"get_scaninfo":{"err_code":0,"ap_list":["home"]}}}')
    with pytest.raises(ProtocolError):
        decode_response('{"netif":{"get_scaninfo":{"err_code":0,"ap_list":{"a":1}}}}')
    with pytest.raises(ProtocolError):
        decode_response('{"schedule":{"get_rules":{"err_code":0,"rule_list":[5]}}}')
    with pytest.raises(ProtocolError):
        decode_response('{"schedule":{"get_rules":{"err_code":0,"rule_list":"none"}}}')


def test_null_list_is_empty():
    """A null list field decodes as empty."""
    doc = decode_response('{"netif":{"get_scaninfo":{"err_code":0,"ap_list":null}}}')
    assert check_leaf(doc, "netif", "get_scaninfo").ap_list == []


def test_missing_err_code_raises():
    """A leaf without a status code is not treated as success."""
    with pytest.raises(ProtocolError, match="err_code"):
        decode_response('{"system":{"reboot":{}}}')
    doc = decode_response('{"count_down":{"get_rules":{"rule_list":[]}}}')
    with pytest.raises(ProtocolError):
        extract_leaf(doc, "count_down", "get_rules")


def test_bad_err_code_raises():
    """A non-numeric err_code is a protocol error."""
    with pytest.raises(ProtocolError):
        decode_response('{"system":{"reboot":{"err_code":"nope"}}}')


def test_document_repr():
    """repr lists populated module/action pairs."""
    doc = decode_response('{"system":{"reboot":{"err_code":0}}}')
    assert repr(doc) == "ResponseDocument(system.reboot)"
