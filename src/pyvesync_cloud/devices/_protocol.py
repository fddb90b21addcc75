"""Family protocol descriptors.

A :class:`FamilyProtocol` bundles everything that differs between device
families: how to ask for details, how to parse the reply into a
:class:`~pyvesync_cloud.models.state.DeviceState`, and how each
:class:`Command` is encoded.  Builders are plain functions taking a
:class:`DeviceRef` and the already-validated arguments; they never talk
to the network.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Callable, Mapping
from typing import Any

from pyvesync_cloud._api._common import ApiCall
from pyvesync_cloud.devices.registry import DeviceVariant
from pyvesync_cloud.models.device import DeviceFamily
from pyvesync_cloud.models.state import DeviceState


class Command(enum.StrEnum):
    """Normalized command vocabulary shared by all families."""

    POWER = "power"
    MODE = "mode"
    FAN_SPEED = "fan_speed"
    MIST_LEVEL = "mist_level"
    WARM_LEVEL = "warm_level"
    HUMIDITY = "humidity"
    DISPLAY = "display"
    CHILD_LOCK = "child_lock"
    NIGHT_LIGHT = "night_light"
    NIGHT_LIGHT_BRIGHTNESS = "night_light_brightness"
    TIMER_SET = "timer_set"
    TIMER_CLEAR = "timer_clear"
    AUTO_STOP = "auto_stop"
    DRYING = "drying"
    LIGHT_DETECTION = "light_detection"
    AUTO_PREFERENCE = "auto_preference"
    OSCILLATION = "oscillation"
    BRIGHTNESS = "brightness"
    COLOR_TEMP = "color_temp"
    COLOR = "color"
    WHITE_MODE = "white_mode"
    INDICATOR_LIGHT = "indicator_light"
    RGB_RING = "rgb_ring"
    ENERGY = "energy"
    CONFIG = "config"


@dataclasses.dataclass(frozen=True)
class DeviceRef:
    """Identity fields command builders need."""

    cid: str
    uuid: str
    device_type: str
    config_module: str
    variant: DeviceVariant
    sub_device_no: int | None = None


CommandBuilder = Callable[..., ApiCall]
DetailParser = Callable[[Any, DeviceState], DeviceState]


@dataclasses.dataclass(frozen=True)
class FamilyProtocol:
    """Tagged-variant dispatch table for one device family.

    Parameters
    ----------
    family : DeviceFamily
        Family this table serves.
    details : callable
        ``details(ref) -> ApiCall`` for the detail poll.
    parse : callable
        ``parse(payload, previous) -> DeviceState``.  Must build a
        complete new state and raise ``ValueError`` (or a pydantic
        ``ValidationError``) on a malformed payload.
    commands : Mapping[Command, callable]
        Builders for the commands the family supports.
    """

    family: DeviceFamily
    details: Callable[[DeviceRef], ApiCall]
    parse: DetailParser
    commands: Mapping[Command, CommandBuilder]

    def build(self, command: Command, ref: DeviceRef, *args: Any) -> ApiCall | None:
        """Encode *command*, or ``None`` if the family has no such command."""
        builder = self.commands.get(command)
        if builder is None:
            return None
        return builder(ref, *args)


def bypass_timer_v2(duration: int) -> dict[str, Any]:
    """``addTimerV2`` payload turning the device off after *duration* seconds."""
    return {
        "enabled": True,
        "startAct": [{"type": "powerSwitch", "num": 0, "act": 0}],
        "tmgEvt": {"clkSec": duration},
        "type": 0,
        "subDeviceNo": 0,
        "repeat": 0,
    }


def bypass_timer_v2_clear(timer_id: int | None) -> dict[str, Any]:
    """``delTimerV2`` payload; firmware numbers its single timer slot 1."""
    return {"id": timer_id if timer_id is not None else 1, "subDeviceNo": 0}
