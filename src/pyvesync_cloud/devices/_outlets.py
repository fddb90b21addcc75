"""Outlet protocols (7A, 10A, 15A and the two-socket outdoor plug)."""

from __future__ import annotations

from typing import Any

from pyvesync_cloud._api._common import ApiCall, legacy_call
from pyvesync_cloud.devices._protocol import Command, DeviceRef, FamilyProtocol
from pyvesync_cloud.models._base import on_off
from pyvesync_cloud.models.details import OutletDetail
from pyvesync_cloud.models.device import DeviceFamily
from pyvesync_cloud.models.state import DeviceState


def _detail_call(ref: DeviceRef) -> ApiCall:
    return legacy_call(f"/v1/{ref.device_type}/{ref.device_type}-{ref.cid}/detail", "get", body_kind=None)


def _energy_call(ref: DeviceRef, period: str) -> ApiCall:
    return legacy_call(
        f"/v1/{ref.device_type}/{ref.device_type}-{ref.cid}/energy/{period}", "get", body_kind=None
    )


def _outlet_state(detail: OutletDetail, previous: DeviceState, device_status: str | None) -> DeviceState:
    details: dict[str, Any] = {
        "active_time": detail.active_time,
        "energy": detail.energy,
        "power": detail.power,
        "voltage": detail.voltage,
    }
    if detail.night_light_status is not None:
        details["night_light"] = detail.night_light_status
    return DeviceState(
        device_status=device_status or "off",
        connection_status=detail.connection_status or previous.connection_status,
        details=details,
        timer=previous.timer,
    )


def _parse_outlet(payload: Any, previous: DeviceState) -> DeviceState:
    detail = OutletDetail.model_validate(payload)
    return _outlet_state(detail, previous, detail.device_status)


def _toggle_7a(ref: DeviceRef, on: bool) -> ApiCall:
    return legacy_call(
        f"/v1/wifi-switch-1.3/wifi-switch-1.3-{ref.cid}/status/{on_off(on)}",
        "put",
        body_kind=None,
        expects_body=False,
    )


OUTLET_7A = FamilyProtocol(
    family=DeviceFamily.OUTLET_7A,
    details=_detail_call,
    parse=_parse_outlet,
    commands={Command.POWER: _toggle_7a, Command.ENERGY: _energy_call},
)

OUTLET_10A = FamilyProtocol(
    family=DeviceFamily.OUTLET_10A,
    details=_detail_call,
    parse=_parse_outlet,
    commands={
        Command.POWER: lambda ref, on: legacy_call(
            "/10a/v1/device/devicestatus", "put", {"uuid": ref.uuid, "status": on_off(on)}
        ),
        Command.ENERGY: _energy_call,
    },
)

OUTLET_15A = FamilyProtocol(
    family=DeviceFamily.OUTLET_15A,
    details=_detail_call,
    parse=_parse_outlet,
    commands={
        Command.POWER: lambda ref, on: legacy_call(
            "/15a/v1/device/devicestatus", "put", {"uuid": ref.uuid, "status": on_off(on)}
        ),
        # Night light "on" is the light-sensor driven auto mode.
        Command.NIGHT_LIGHT: lambda ref, value: legacy_call(
            "/15a/v1/device/nightlightstatus",
            "put",
            {"uuid": ref.uuid, "mode": "manual" if value == "off" else "auto"},
        ),
        Command.ENERGY: _energy_call,
    },
)


# ------------------------------------------------------------------
# Outdoor plug: one cloud record per socket
# ------------------------------------------------------------------


def _parse_outdoor(ref: DeviceRef, payload: Any, previous: DeviceState) -> DeviceState:
    detail = OutletDetail.model_validate(payload)
    status = detail.device_status
    for sub in detail.sub_devices:
        if ref.sub_device_no is not None and str(sub.get("subDeviceNo")) == str(ref.sub_device_no):
            status = sub.get("subDeviceStatus") or status
            break
    return _outlet_state(detail, previous, status)


def _outdoor_power(ref: DeviceRef, on: bool) -> ApiCall:
    return legacy_call(
        "/outdoorsocket15a/v1/device/devicestatus",
        "put",
        {"uuid": ref.uuid, "status": on_off(on), "switchNo": ref.sub_device_no or 1},
    )


def outdoor_plug(ref: DeviceRef) -> FamilyProtocol:
    """Outdoor plug protocol bound to one socket of *ref*."""
    return FamilyProtocol(
        family=DeviceFamily.OUTDOOR_PLUG,
        details=lambda _ref: legacy_call(
            "/outdoorsocket15a/v1/device/devicedetail", "post", {"uuid": ref.uuid}, body_kind="devicedetail"
        ),
        parse=lambda payload, previous: _parse_outdoor(ref, payload, previous),
        commands={Command.POWER: _outdoor_power, Command.ENERGY: _energy_call},
    )
