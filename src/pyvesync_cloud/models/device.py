"""Device classification enums."""

from __future__ import annotations

import enum


class DeviceCategory(enum.StrEnum):
    """Top-level device category, named after the cloud's device tables."""

    FANS = "fans"
    OUTLETS = "outlets"
    SWITCHES = "switches"
    BULBS = "bulbs"


class DeviceFamily(enum.StrEnum):
    """Protocol family sharing one command table and one detail parser."""

    AIR_BYPASS = "air_bypass"
    AIR_BASE_V2 = "air_base_v2"
    AIR_131 = "air_131"
    TOWER_FAN = "tower_fan"
    HUMIDIFIER = "humidifier"
    WARM_HUMIDIFIER = "warm_humidifier"
    HUMID_1000S = "humid_1000s"
    SUPERIOR_6000S = "superior_6000s"
    OUTLET_7A = "outlet_7a"
    OUTLET_10A = "outlet_10a"
    OUTLET_15A = "outlet_15a"
    OUTDOOR_PLUG = "outdoor_plug"
    WALL_SWITCH = "wall_switch"
    DIMMER_SWITCH = "dimmer_switch"
    BULB = "bulb"


class Feature(enum.StrEnum):
    """Hardware feature a device variant may expose."""

    FAN_SPEED = "fan_speed"
    DISPLAY = "display"
    CHILD_LOCK = "child_lock"
    NIGHT_LIGHT = "night_light"
    NIGHT_LIGHT_BRIGHTNESS = "night_light_brightness"
    AIR_QUALITY = "air_quality"
    TIMER = "timer"
    LIGHT_DETECTION = "light_detection"
    AUTO_PREFERENCE = "auto_preference"
    OSCILLATION = "oscillation"
    HUMIDITY = "humidity"
    MIST = "mist"
    WARM = "warm"
    AUTO_STOP = "auto_stop"
    DRYING = "drying"
    DIMMABLE = "dimmable"
    COLOR_TEMP = "color_temp"
    RGB_SHIFT = "rgb_shift"
    INDICATOR_LIGHT = "indicator_light"
    RGB_RING = "rgb_ring"
    ENERGY = "energy"


class ColorModel(enum.StrEnum):
    """Colour encoding a bulb accepts on ``updateColor``."""

    NONE = "none"
    HSV = "hsv"
    RGB = "rgb"
