"""Wall switch, dimmer and bulb protocols."""

from __future__ import annotations

import colorsys
from typing import Any

from pyvesync_cloud._api._common import ApiCall, legacy_call
from pyvesync_cloud.devices._protocol import Command, DeviceRef, FamilyProtocol
from pyvesync_cloud.models.details import BulbDetail, SwitchDetail
from pyvesync_cloud.models.device import ColorModel, DeviceFamily
from pyvesync_cloud.models.state import DeviceState


def _rest(path: str, ref: DeviceRef, method: str = "put", **fields: Any) -> ApiCall:
    return legacy_call(path, method, {"uuid": ref.cid, **fields})


def _detail(path: str, ref: DeviceRef) -> ApiCall:
    return legacy_call(path, "post", {"uuid": ref.cid}, body_kind="devicedetail")


def _status(on: bool) -> str:
    return "on" if on else "off"


def _configurations(path: str, ref: DeviceRef) -> ApiCall:
    return legacy_call(path, "post", {"uuid": ref.cid, "method": "configurations"}, body_kind="devicedetail")


# ------------------------------------------------------------------
# Switches
# ------------------------------------------------------------------


def _parse_switch(payload: Any, previous: DeviceState) -> DeviceState:
    detail = SwitchDetail.model_validate(payload)
    details: dict[str, Any] = {"active_time": detail.active_time}
    if detail.brightness is not None:
        details["brightness"] = detail.brightness
    if detail.indicatorlight_status is not None:
        details["indicator_light"] = detail.indicatorlight_status
    if detail.rgb_status is not None:
        details["rgb_status"] = detail.rgb_status
    if detail.rgb_value is not None:
        details["rgb"] = [detail.rgb_value.get(c, 0) for c in ("red", "green", "blue")]
    return DeviceState(
        device_status=detail.device_status or previous.device_status,
        connection_status=detail.connection_status or previous.connection_status,
        details=details,
        timer=previous.timer,
    )


WALL_SWITCH = FamilyProtocol(
    family=DeviceFamily.WALL_SWITCH,
    details=lambda ref: _detail("/inwallswitch/v1/device/devicedetail", ref),
    parse=_parse_switch,
    commands={
        Command.POWER: lambda ref, on: _rest("/inwallswitch/v1/device/devicestatus", ref, status=_status(on)),
        Command.CONFIG: lambda ref: _configurations("/inwallswitch/v1/device/configurations", ref),
    },
)

DIMMER_SWITCH = FamilyProtocol(
    family=DeviceFamily.DIMMER_SWITCH,
    details=lambda ref: _detail("/dimmer/v1/device/devicedetail", ref),
    parse=_parse_switch,
    commands={
        Command.POWER: lambda ref, on: _rest("/dimmer/v1/device/devicestatus", ref, status=_status(on)),
        Command.BRIGHTNESS: lambda ref, level: _rest(
            "/dimmer/v1/device/updatebrightness", ref, brightness=str(level)
        ),
        Command.INDICATOR_LIGHT: lambda ref, on: _rest(
            "/dimmer/v1/device/indicatorlightstatus", ref, status=_status(on)
        ),
        Command.COLOR: lambda ref, red, green, blue: _rest(
            "/dimmer/v1/device/devicergbstatus",
            ref,
            status="on",
            rgbValue={"red": red, "green": green, "blue": blue},
        ),
        # Without rgbValue the ring keeps its last colour.
        Command.RGB_RING: lambda ref, on: _rest("/dimmer/v1/device/devicergbstatus", ref, status=_status(on)),
        Command.CONFIG: lambda ref: _configurations("/dimmer/v1/device/configurations", ref),
    },
)


# ------------------------------------------------------------------
# Bulbs
# ------------------------------------------------------------------

_BULB_PATH = "/SmartBulb/v1/device"


def rgb_to_hsv(red: int, green: int, blue: int) -> tuple[int, int, int]:
    """Convert 0-255 RGB to the bulb's hue (0-360) / saturation / value (0-100)."""
    h, s, v = colorsys.rgb_to_hsv(red / 255, green / 255, blue / 255)
    return round(h * 360), round(s * 100), round(v * 100)


def _parse_bulb(payload: Any, previous: DeviceState) -> DeviceState:
    detail = BulbDetail.model_validate(payload)
    details: dict[str, Any] = {
        "brightness": detail.bright_ness,
        "color_temp": detail.color_temp,
        "color_mode": detail.color_mode,
    }
    if detail.hue is not None:
        details["hsv"] = [detail.hue, detail.saturation, detail.value]
    return DeviceState(
        device_status=detail.device_status or previous.device_status,
        connection_status=detail.connection_status or previous.connection_status,
        details=details,
        timer=previous.timer,
    )


def _bulb_color(ref: DeviceRef, red: int, green: int, blue: int) -> ApiCall:
    fields: dict[str, Any] = {"status": "on", "mode": "color"}
    if ref.variant.color_model is ColorModel.HSV:
        hue, saturation, value = rgb_to_hsv(red, green, blue)
        fields.update(hue=str(hue), saturation=str(saturation), brightness=str(value))
    else:
        fields.update(red=red, green=green, blue=blue)
    return _rest(f"{_BULB_PATH}/updateColor", ref, **fields)


BULB = FamilyProtocol(
    family=DeviceFamily.BULB,
    details=lambda ref: _detail(f"{_BULB_PATH}/devicedetail", ref),
    parse=_parse_bulb,
    commands={
        Command.POWER: lambda ref, on: _rest(f"{_BULB_PATH}/devicestatus", ref, status=_status(on)),
        Command.BRIGHTNESS: lambda ref, level: _rest(
            f"{_BULB_PATH}/updateBrightness", ref, status="on", brightNess=str(level)
        ),
        Command.COLOR_TEMP: lambda ref, temp: _rest(
            f"{_BULB_PATH}/updateColorTemperature", ref, status="on", colorTemp=str(temp)
        ),
        Command.COLOR: _bulb_color,
        Command.WHITE_MODE: lambda ref: _rest(f"{_BULB_PATH}/updateColorMode", ref, status="on", colorMode="white"),
    },
)
