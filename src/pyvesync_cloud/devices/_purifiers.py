"""Purifier and tower fan protocols.

Four wire generations are covered:

* ``AIR_BYPASS`` - Core/LAP-C purifiers, bypass API with snake_case data
* ``AIR_BASE_V2`` - Vital/Everest purifiers, bypass API with camelCase
  switch/level fields and the V2 timer methods
* ``TOWER_FAN`` - LTF tower fans, V2-style payloads
* ``AIR_131`` - LV-PUR131S/LV-RH131S, per-model REST endpoints
"""

from __future__ import annotations

from typing import Any

from pyvesync_cloud._api._common import ApiCall, bypass_call, legacy_call
from pyvesync_cloud.devices._protocol import (
    Command,
    DeviceRef,
    FamilyProtocol,
    bypass_timer_v2,
    bypass_timer_v2_clear,
)
from pyvesync_cloud.models._base import on_off
from pyvesync_cloud.models.details import Air131Detail, PurifierStatus, PurifierV2Status, TowerFanStatus
from pyvesync_cloud.models.device import DeviceFamily
from pyvesync_cloud.models.state import DeviceState, TimerInfo


def _int_switch(on: bool) -> int:
    return 1 if on else 0


def _timer_from_remaining(remaining: int | None, previous: DeviceState) -> TimerInfo | None:
    if not remaining:
        return None
    timer = previous.timer or TimerInfo()
    return timer.model_copy(update={"remaining": remaining})


# ------------------------------------------------------------------
# AIR_BYPASS
# ------------------------------------------------------------------


def _parse_air_bypass(payload: Any, previous: DeviceState) -> DeviceState:
    status = PurifierStatus.model_validate(payload)
    return DeviceState(
        device_status=on_off(status.enabled) or "off",
        connection_status="online",
        mode=status.mode,
        details={
            "fan_level": status.level,
            "filter_life": status.filter_life,
            "display": status.display,
            "child_lock": status.child_lock,
            "night_light": status.night_light,
            "air_quality": status.air_quality,
            "air_quality_value": status.air_quality_value,
        },
        timer=previous.timer,
    )


AIR_BYPASS = FamilyProtocol(
    family=DeviceFamily.AIR_BYPASS,
    details=lambda ref: bypass_call("getPurifierStatus"),
    parse=_parse_air_bypass,
    commands={
        Command.POWER: lambda ref, on: bypass_call("setSwitch", {"enabled": on, "id": 0}),
        Command.MODE: lambda ref, mode, level=None: bypass_call("setPurifierMode", {"mode": mode}),
        Command.FAN_SPEED: lambda ref, level: bypass_call(
            "setLevel", {"id": 0, "level": level, "mode": "manual", "type": "wind"}
        ),
        Command.DISPLAY: lambda ref, on: bypass_call("setDisplay", {"state": on}),
        Command.CHILD_LOCK: lambda ref, on: bypass_call("setChildLock", {"state": on}),
        Command.NIGHT_LIGHT: lambda ref, value: bypass_call("setNightLight", {"night_light": value}),
        Command.TIMER_SET: lambda ref, hours: bypass_call("addTimer", {"action": "off", "total": hours * 3600}),
        Command.TIMER_CLEAR: lambda ref, timer_id: bypass_call(
            "deleteTimer", {"id": timer_id} if timer_id is not None else {}
        ),
    },
)


# ------------------------------------------------------------------
# AIR_BASE_V2
# ------------------------------------------------------------------


def _parse_air_v2(payload: Any, previous: DeviceState) -> DeviceState:
    status = PurifierV2Status.model_validate(payload)
    preference = status.auto_preference or {}
    return DeviceState(
        device_status=on_off(status.power_switch) or "off",
        connection_status="online",
        mode=status.work_mode or "manual",
        details={
            "fan_level": status.fan_speed_level,
            "manual_level": status.manual_speed_level,
            "filter_life": status.filter_life_percent,
            "display": status.screen_switch,
            "child_lock": status.child_lock_switch,
            "light_detection": status.light_detection_switch,
            "air_quality": status.air_quality,
            "air_quality_value": status.pm25,
            "auto_preference": preference.get("autoPreferenceType"),
            "room_size": preference.get("roomSize"),
        },
        timer=_timer_from_remaining(status.timer_remain, previous),
    )


def _v2_timer_clear(ref: DeviceRef, timer_id: int | None) -> ApiCall:
    return bypass_call("delTimerV2", bypass_timer_v2_clear(timer_id))


AIR_BASE_V2 = FamilyProtocol(
    family=DeviceFamily.AIR_BASE_V2,
    details=lambda ref: bypass_call("getPurifierStatus"),
    parse=_parse_air_v2,
    commands={
        Command.POWER: lambda ref, on: bypass_call("setSwitch", {"powerSwitch": _int_switch(on), "switchIdx": 0}),
        Command.MODE: lambda ref, mode, level=None: bypass_call("setPurifierMode", {"workMode": mode}),
        Command.FAN_SPEED: lambda ref, level: bypass_call(
            "setLevel", {"levelIdx": 0, "manualSpeedLevel": level, "levelType": "wind"}
        ),
        Command.DISPLAY: lambda ref, on: bypass_call("setDisplay", {"screenSwitch": _int_switch(on)}),
        Command.CHILD_LOCK: lambda ref, on: bypass_call("setChildLockSwitch", {"childLockSwitch": _int_switch(on)}),
        Command.LIGHT_DETECTION: lambda ref, on: bypass_call(
            "setLightDetection", {"lightDetectionSwitch": _int_switch(on)}
        ),
        Command.AUTO_PREFERENCE: lambda ref, preference, room_size: bypass_call(
            "setAutoPreference", {"autoPreference": preference, "roomSize": room_size}
        ),
        Command.TIMER_SET: lambda ref, hours: bypass_call("addTimerV2", bypass_timer_v2(hours * 3600)),
        Command.TIMER_CLEAR: _v2_timer_clear,
    },
)


# ------------------------------------------------------------------
# TOWER_FAN
# ------------------------------------------------------------------


def _parse_tower_fan(payload: Any, previous: DeviceState) -> DeviceState:
    status = TowerFanStatus.model_validate(payload)
    return DeviceState(
        device_status=on_off(status.power_switch) or "off",
        connection_status="online",
        mode=status.work_mode,
        details={
            "fan_level": status.fan_speed_level,
            "manual_level": status.manual_speed_level,
            "display": status.screen_switch,
            "oscillation": status.oscillation_switch,
            "temperature": status.temperature,
            "humidity": status.humidity,
        },
        timer=_timer_from_remaining(status.timer_remain, previous),
    )


TOWER_FAN = FamilyProtocol(
    family=DeviceFamily.TOWER_FAN,
    details=lambda ref: bypass_call("getTowerFanStatus"),
    parse=_parse_tower_fan,
    commands={
        Command.POWER: lambda ref, on: bypass_call("setSwitch", {"powerSwitch": _int_switch(on), "switchIdx": 0}),
        Command.MODE: lambda ref, mode, level=None: bypass_call("setTowerFanMode", {"workMode": mode}),
        Command.FAN_SPEED: lambda ref, level: bypass_call(
            "setLevel", {"levelIdx": 0, "levelType": "wind", "manualSpeedLevel": level}
        ),
        Command.DISPLAY: lambda ref, on: bypass_call("setDisplay", {"screenSwitch": _int_switch(on)}),
        Command.OSCILLATION: lambda ref, on: bypass_call(
            "setOscillationSwitch", {"oscillationSwitch": _int_switch(on), "switchIdx": 0}
        ),
        Command.TIMER_SET: lambda ref, hours: bypass_call("addTimerV2", bypass_timer_v2(hours * 3600)),
        Command.TIMER_CLEAR: _v2_timer_clear,
    },
)


# ------------------------------------------------------------------
# AIR_131 (per-model REST endpoints)
# ------------------------------------------------------------------

_AIR_131_PATH = "/131airPurifier/v1/device"


def _parse_air_131(payload: Any, previous: DeviceState) -> DeviceState:
    detail = Air131Detail.model_validate(payload)
    return DeviceState(
        device_status=on_off(detail.device_status) or "off",
        connection_status=detail.connection_status or previous.connection_status,
        mode=detail.mode or "manual",
        details={
            "fan_level": detail.level,
            "filter_life": detail.filter_life,
            "display": detail.screen_status,
            "child_lock": detail.child_lock,
            "air_quality": detail.air_quality,
            "active_time": detail.active_time,
        },
        timer=previous.timer,
    )


def _air_131(action: str, ref: DeviceRef, **fields: Any) -> ApiCall:
    return legacy_call(f"{_AIR_131_PATH}/{action}", "put", {"uuid": ref.uuid, **fields})


def _air_131_mode(ref: DeviceRef, mode: str, level: int | None = None) -> ApiCall:
    fields: dict[str, Any] = {"mode": mode}
    if mode == "manual":
        fields["level"] = level or 1
    return _air_131("updateMode", ref, **fields)


AIR_131 = FamilyProtocol(
    family=DeviceFamily.AIR_131,
    details=lambda ref: legacy_call(
        f"{_AIR_131_PATH}/deviceDetail", "post", {"uuid": ref.uuid}, body_kind="devicedetail"
    ),
    parse=_parse_air_131,
    commands={
        Command.POWER: lambda ref, on: _air_131("deviceStatus", ref, status=on_off(on)),
        Command.MODE: _air_131_mode,
        Command.FAN_SPEED: lambda ref, level: _air_131("updateSpeed", ref, level=level),
        Command.DISPLAY: lambda ref, on: _air_131("updateScreen", ref, status=on_off(on)),
        Command.CHILD_LOCK: lambda ref, on: _air_131("updateChildLock", ref, status=on_off(on)),
        Command.TIMER_SET: lambda ref, hours: _air_131("updateTimer", ref, action="off", duration=hours),
        Command.TIMER_CLEAR: lambda ref, timer_id: _air_131("cancelTimer", ref),
    },
)
