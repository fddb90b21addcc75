"""Per-family telemetry payload models.

Each model maps one family's detail reply.  Parsing into
:class:`~pyvesync_cloud.models.state.DeviceState` happens in the family
modules under :mod:`pyvesync_cloud.devices`.
"""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import AliasChoices, BeforeValidator, Field

from pyvesync_cloud.models._base import OnOff, VeSyncBaseModel


def _percent(value: Any) -> Any:
    """Accept both ``85`` and ``{"percent": 85}`` filter-life encodings."""
    if isinstance(value, dict):
        return value.get("percent")
    return value


def _hex_reading(value: Any) -> Any:
    """Decode the ``"a:b"`` hex pair used by 7A outlet power/voltage readings."""
    if isinstance(value, str) and ":" in value:
        high, _, low = value.partition(":")
        try:
            return (int(high, 16) + int(low, 16)) / 8192
        except ValueError:
            return None
    return value


Percent = Annotated[int | None, BeforeValidator(_percent)]
Reading = Annotated[float | None, BeforeValidator(_hex_reading)]


# ------------------------------------------------------------------
# Purifiers and fans
# ------------------------------------------------------------------


class PurifierStatus(VeSyncBaseModel):
    """``getPurifierStatus`` reply of Core/LAP-C purifiers (snake_case keys)."""

    enabled: OnOff = None
    mode: str | None = None
    level: int | None = None
    filter_life: Percent = None
    display: OnOff = None
    child_lock: OnOff = None
    night_light: str | None = None
    air_quality: int | None = None
    air_quality_value: int | None = None
    configuration: dict[str, Any] = Field(default_factory=dict)


class PurifierV2Status(VeSyncBaseModel):
    """``getPurifierStatus`` reply of Vital/Everest purifiers."""

    power_switch: OnOff = None
    work_mode: str | None = None
    fan_speed_level: int | None = None
    manual_speed_level: int | None = None
    filter_life_percent: Percent = Field(
        default=None,
        validation_alias=AliasChoices("filterLifePercent", "filter_life"),
    )
    screen_switch: OnOff = None
    child_lock_switch: OnOff = None
    light_detection_switch: OnOff = None
    air_quality: int | None = None
    pm25: int | None = Field(default=None, validation_alias=AliasChoices("PM25", "pm25"))
    auto_preference: dict[str, Any] | None = None
    timer_remain: int | None = None


class TowerFanStatus(VeSyncBaseModel):
    """``getTowerFanStatus`` reply."""

    power_switch: OnOff = None
    work_mode: str | None = None
    manual_speed_level: int | None = None
    fan_speed_level: int | None = None
    screen_switch: OnOff = None
    oscillation_switch: OnOff = None
    timer_remain: int | None = None
    temperature: float | None = None
    humidity: int | None = None


class Air131Detail(VeSyncBaseModel):
    """``/131airPurifier/v1/device/deviceDetail`` reply."""

    device_status: OnOff = None
    connection_status: str | None = None
    mode: str | None = None
    level: int | None = None
    filter_life: Percent = Field(default=None, validation_alias=AliasChoices("filterLife", "filter_life"))
    screen_status: OnOff = None
    child_lock: OnOff = None
    air_quality: str | None = None
    active_time: int | None = None


# ------------------------------------------------------------------
# Humidifiers
# ------------------------------------------------------------------


class HumidifierStatus(VeSyncBaseModel):
    """``getHumidifierStatus`` reply.

    Classic/Dual and LUH-A/O/D firmware answer in snake_case with the
    target humidity under ``configuration``.  OasisMist 1000S and
    Superior 6000S firmware answer in camelCase with integer switches
    and a top-level ``targetHumidity``.
    """

    enabled: OnOff = None
    power_switch: OnOff = None
    mode: str | None = None
    work_mode: str | None = None
    humidity: int | None = None
    target_humidity: int | None = None
    mist_virtual_level: int | None = Field(
        default=None,
        validation_alias=AliasChoices("mist_virtual_level", "mistVirtualLevel", "virtualLevel"),
    )
    mist_level: int | None = None
    warm_level: int | None = None
    warm_enabled: OnOff = None
    water_lacks: OnOff = Field(
        default=None,
        validation_alias=AliasChoices("water_lacks", "waterLacks", "waterLacksState"),
    )
    water_tank_lifted: OnOff = None
    display: OnOff = None
    screen_switch: OnOff = None
    automatic_stop_reach_target: OnOff = None
    auto_stop_switch: OnOff = None
    auto_drying_switch: OnOff = None
    drying_mode: dict[str, Any] | None = None
    night_light_brightness: int | None = None
    temperature: float | None = None
    filter_life_percent: Percent = None
    configuration: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_on(self) -> bool:
        value = self.enabled if self.enabled is not None else self.power_switch
        return bool(value)

    @property
    def configured_target_humidity(self) -> int | None:
        """Target from ``configuration``, falling back to the top-level field."""
        target = self.configuration.get("auto_target_humidity")
        if isinstance(target, (int, float)) and not isinstance(target, bool):
            return int(target)
        return self.target_humidity


# ------------------------------------------------------------------
# Outlets, switches, bulbs
# ------------------------------------------------------------------


class OutletDetail(VeSyncBaseModel):
    """Outlet detail reply (all outlet generations)."""

    device_status: str | None = None
    connection_status: str | None = None
    active_time: int | None = None
    energy: float | None = None
    power: Reading = None
    voltage: Reading = None
    night_light_status: str | None = None
    night_light_automode: str | None = None
    sub_devices: list[dict[str, Any]] = Field(default_factory=list)


class SwitchDetail(VeSyncBaseModel):
    """Wall switch and dimmer detail reply."""

    device_status: str | None = None
    connection_status: str | None = None
    active_time: int | None = None
    brightness: int | None = None
    indicatorlight_status: str | None = Field(
        default=None,
        validation_alias=AliasChoices("indicatorlightStatus", "indicatorLightStatus"),
    )
    rgb_status: str | None = None
    rgb_value: dict[str, int] | None = None


class BulbDetail(VeSyncBaseModel):
    """``/SmartBulb/v1/device/devicedetail`` reply."""

    device_status: str | None = None
    connection_status: str | None = None
    bright_ness: int | None = Field(default=None, validation_alias=AliasChoices("brightNess", "brightness"))
    color_temp: int | None = None
    color_mode: str | None = None
    hue: float | None = None
    saturation: float | None = None
    value: float | None = None
