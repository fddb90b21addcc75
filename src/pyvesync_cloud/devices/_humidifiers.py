"""Humidifier protocols.

Two wire generations are covered:

* ``HUMIDIFIER`` / ``WARM_HUMIDIFIER`` - Classic/Dual and LUH-A/O/D
  units, snake_case data with ``enabled``/``mode`` fields
* ``HUMID_1000S`` / ``SUPERIOR_6000S`` - OasisMist 1000S and Superior
  6000S, camelCase data with integer switches and ``workMode`` (auto
  mode travels as ``autoPro``)
"""

from __future__ import annotations

from typing import Any

from pyvesync_cloud._api._common import bypass_call
from pyvesync_cloud.devices._protocol import (
    Command,
    FamilyProtocol,
    bypass_timer_v2,
    bypass_timer_v2_clear,
)
from pyvesync_cloud.models.details import HumidifierStatus
from pyvesync_cloud.models.device import DeviceFamily
from pyvesync_cloud.models.state import DeviceState

_AUTO_PRO = "autoPro"


def _int_switch(on: bool) -> int:
    return 1 if on else 0


# ------------------------------------------------------------------
# Classic/Dual and LUH-A/O/D
# ------------------------------------------------------------------


def _parse_humidifier(payload: Any, previous: DeviceState) -> DeviceState:
    status = HumidifierStatus.model_validate(payload)
    mist = status.mist_virtual_level if status.mist_virtual_level is not None else status.mist_level
    details: dict[str, Any] = {
        "humidity": status.humidity,
        "target_humidity": status.configured_target_humidity,
        "mist_level": mist,
        "display": status.display,
        "water_lacks": status.water_lacks,
        "water_tank_lifted": status.water_tank_lifted,
        "automatic_stop": status.configuration.get("automatic_stop"),
        "automatic_stop_reached": status.automatic_stop_reach_target,
    }
    if status.warm_level is not None or status.warm_enabled is not None:
        details["warm_level"] = status.warm_level
        details["warm_enabled"] = (
            status.warm_enabled if status.warm_enabled is not None else bool(status.warm_level)
        )
    if status.auto_drying_switch is not None:
        details["drying_mode"] = status.auto_drying_switch
    if status.night_light_brightness is not None:
        details["night_light_brightness"] = status.night_light_brightness
    return DeviceState(
        device_status="on" if status.is_on else "off",
        connection_status="online",
        mode=status.mode or status.work_mode,
        details=details,
        timer=previous.timer,
    )


_COMMON_COMMANDS = {
    Command.POWER: lambda ref, on: bypass_call("setSwitch", {"enabled": on, "id": 0}),
    Command.MODE: lambda ref, mode, level=None: bypass_call("setHumidityMode", {"mode": mode}),
    Command.MIST_LEVEL: lambda ref, level: bypass_call("setVirtualLevel", {"id": 0, "level": level, "type": "mist"}),
    Command.HUMIDITY: lambda ref, humidity: bypass_call("setTargetHumidity", {"target_humidity": humidity}),
    Command.DISPLAY: lambda ref, on: bypass_call("setDisplay", {"state": on}),
    Command.TIMER_SET: lambda ref, hours: bypass_call("addTimer", {"action": "off", "total": hours * 3600}),
    Command.TIMER_CLEAR: lambda ref, timer_id: bypass_call(
        "deleteTimer", {"id": timer_id} if timer_id is not None else {}
    ),
    Command.AUTO_STOP: lambda ref, on: bypass_call("setAutomaticStop", {"enabled": on}),
}


HUMIDIFIER = FamilyProtocol(
    family=DeviceFamily.HUMIDIFIER,
    details=lambda ref: bypass_call("getHumidifierStatus"),
    parse=_parse_humidifier,
    commands=_COMMON_COMMANDS,
)

WARM_HUMIDIFIER = FamilyProtocol(
    family=DeviceFamily.WARM_HUMIDIFIER,
    details=lambda ref: bypass_call("getHumidifierStatus"),
    parse=_parse_humidifier,
    commands={
        **_COMMON_COMMANDS,
        Command.WARM_LEVEL: lambda ref, level: bypass_call("setLevel", {"id": 0, "level": level, "type": "warm"}),
        Command.DRYING: lambda ref, on: bypass_call("setDryingMode", {"autoDryingSwitch": 1 if on else 0}),
        Command.NIGHT_LIGHT_BRIGHTNESS: lambda ref, brightness: bypass_call(
            "setNightLight", {"brightness": brightness}
        ),
    },
)


# ------------------------------------------------------------------
# OasisMist 1000S and Superior 6000S
# ------------------------------------------------------------------


def _parse_humidifier_v2(payload: Any, previous: DeviceState) -> DeviceState:
    status = HumidifierStatus.model_validate(payload)
    mode = status.work_mode or status.mode
    if mode == _AUTO_PRO:
        mode = "auto"
    mist = status.mist_virtual_level if status.mist_virtual_level is not None else status.mist_level
    details: dict[str, Any] = {
        "humidity": status.humidity,
        "target_humidity": status.configured_target_humidity,
        "mist_level": mist,
        "display": status.screen_switch if status.screen_switch is not None else status.display,
        "water_lacks": status.water_lacks,
        "water_tank_lifted": status.water_tank_lifted,
    }
    if status.auto_stop_switch is not None:
        details["automatic_stop"] = status.auto_stop_switch
    if status.night_light_brightness is not None:
        details["night_light_brightness"] = status.night_light_brightness
    if status.drying_mode is not None:
        switch = status.drying_mode.get("autoDryingSwitch")
        details["drying_mode"] = bool(switch) if switch is not None else None
    if status.temperature is not None:
        details["temperature"] = status.temperature
    if status.filter_life_percent is not None:
        details["filter_life"] = status.filter_life_percent
    return DeviceState(
        device_status="on" if status.is_on else "off",
        connection_status="online",
        mode=mode,
        details=details,
        timer=previous.timer,
    )


def _work_mode(mode: str) -> str:
    return _AUTO_PRO if mode == "auto" else mode


_V2_COMMANDS = {
    Command.POWER: lambda ref, on: bypass_call("setSwitch", {"powerSwitch": _int_switch(on), "switchIdx": 0}),
    Command.MODE: lambda ref, mode, level=None: bypass_call("setHumidityMode", {"workMode": _work_mode(mode)}),
    Command.MIST_LEVEL: lambda ref, level: bypass_call(
        "setVirtualLevel", {"levelIdx": 0, "virtualLevel": level, "levelType": "mist"}
    ),
    Command.HUMIDITY: lambda ref, humidity: bypass_call("setTargetHumidity", {"targetHumidity": humidity}),
    Command.DISPLAY: lambda ref, on: bypass_call("setDisplay", {"screenSwitch": _int_switch(on)}),
    Command.TIMER_SET: lambda ref, hours: bypass_call("addTimerV2", bypass_timer_v2(hours * 3600)),
    Command.TIMER_CLEAR: lambda ref, timer_id: bypass_call("delTimerV2", bypass_timer_v2_clear(timer_id)),
}


HUMID_1000S = FamilyProtocol(
    family=DeviceFamily.HUMID_1000S,
    details=lambda ref: bypass_call("getHumidifierStatus"),
    parse=_parse_humidifier_v2,
    commands={
        **_V2_COMMANDS,
        Command.AUTO_STOP: lambda ref, on: bypass_call("setAutoStopSwitch", {"autoStopSwitch": _int_switch(on)}),
        # Brightness 0 switches the night light off.
        Command.NIGHT_LIGHT_BRIGHTNESS: lambda ref, brightness: bypass_call(
            "setNightLight",
            {"nightLightSwitch": _int_switch(brightness > 0), "nightLightBrightness": brightness},
        ),
    },
)

SUPERIOR_6000S = FamilyProtocol(
    family=DeviceFamily.SUPERIOR_6000S,
    details=lambda ref: bypass_call("getHumidifierStatus"),
    parse=_parse_humidifier_v2,
    commands={
        **_V2_COMMANDS,
        Command.DRYING: lambda ref, on: bypass_call("setDryingMode", {"autoDryingSwitch": _int_switch(on)}),
    },
)
