"""Device variant registry.

Maps the cloud's opaque ``deviceType`` string to a :class:`DeviceVariant`
descriptor: category, protocol family, hardware features, mode enum and
the discrete argument ranges the device accepts.

Resolution order is fixed:

1. exact key match across the category tables, scanned in the order
   fans, outlets, bulbs, switches;
2. otherwise the first ``(prefix, category)`` pair whose prefix the
   device type starts with selects a category;
3. within that category the first entry whose base type (the part of
   its key before the first ``-``) the device type starts with wins.

Anything else is unrecognized and :func:`resolve` returns ``None``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Mapping
from types import MappingProxyType

from pyvesync_cloud.models.device import ColorModel, DeviceCategory, DeviceFamily, Feature


@dataclasses.dataclass(frozen=True)
class DeviceVariant:
    """Behavioural descriptor shared by every unit of one device type."""

    device_type: str
    category: DeviceCategory
    family: DeviceFamily
    features: frozenset[Feature] = frozenset()
    modes: tuple[str, ...] = ()
    fan_levels: tuple[int, ...] = ()
    mist_levels: tuple[int, ...] = ()
    warm_levels: tuple[int, ...] = ()
    humidity_range: tuple[int, int] | None = None
    color_model: ColorModel = ColorModel.NONE

    @property
    def base_type(self) -> str:
        """Key prefix before the first ``-`` used by fallback matching."""
        return self.device_type.split("-", 1)[0]

    @property
    def has_auto_mode(self) -> bool:
        return "auto" in self.modes


def _table(
    category: DeviceCategory,
    family: DeviceFamily,
    device_types: Iterable[str],
    **fields: object,
) -> dict[str, DeviceVariant]:
    return {
        device_type: DeviceVariant(device_type=device_type, category=category, family=family, **fields)  # type: ignore[arg-type]
        for device_type in device_types
    }


def _levels(low: int, high: int) -> tuple[int, ...]:
    return tuple(range(low, high + 1))


_F = Feature

# ------------------------------------------------------------------
# Fans (purifiers, tower fan, humidifiers)
# ------------------------------------------------------------------

_PURIFIER_FEATURES = frozenset({_F.FAN_SPEED, _F.DISPLAY, _F.CHILD_LOCK, _F.NIGHT_LIGHT, _F.TIMER})
_PURIFIER_AQ_FEATURES = _PURIFIER_FEATURES | {_F.AIR_QUALITY}
_V2_FEATURES = frozenset(
    {_F.FAN_SPEED, _F.DISPLAY, _F.CHILD_LOCK, _F.AIR_QUALITY, _F.TIMER, _F.LIGHT_DETECTION, _F.AUTO_PREFERENCE}
)
_HUMIDIFIER_FEATURES = frozenset({_F.DISPLAY, _F.HUMIDITY, _F.MIST, _F.TIMER, _F.AUTO_STOP})
_WARM_FEATURES = _HUMIDIFIER_FEATURES | {_F.WARM}

_fans: dict[str, DeviceVariant] = {}
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_BYPASS,
        ("Core200S", "LAP-C201S-AUSR", "LAP-C202S-WUSR"),
        features=_PURIFIER_FEATURES,
        modes=("manual", "sleep"),
        fan_levels=_levels(1, 3),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_BYPASS,
        ("Core300S", "LAP-C301S-WJP", "LAP-C302S-WUSB", "LAP-C301S-WAAA"),
        features=_PURIFIER_AQ_FEATURES,
        modes=("auto", "manual", "sleep"),
        fan_levels=_levels(1, 3),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_BYPASS,
        (
            "Core400S",
            "LAP-C401S-WJP",
            "LAP-C401S-WUSR",
            "LAP-C401S-WAAA",
            "Core600S",
            "LAP-C601S-WUS",
            "LAP-C601S-WUSR",
            "LAP-C601S-WEU",
        ),
        features=_PURIFIER_AQ_FEATURES,
        modes=("auto", "manual", "sleep"),
        fan_levels=_levels(1, 4),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_BASE_V2,
        ("LAP-V102S-AASR", "LAP-V102S-WUS", "LAP-V102S-WEU", "LAP-V102S-AUSR", "LAP-V102S-WJP"),
        features=_V2_FEATURES,
        modes=("auto", "manual", "sleep", "pet"),
        fan_levels=_levels(1, 3),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_BASE_V2,
        (
            "LAP-V201S-AASR",
            "LAP-V201S-WJP",
            "LAP-V201S-WEU",
            "LAP-V201S-WUS",
            "LAP-V201-AUSR",
            "LAP-V201S-AUSR",
            "LAP-V201S-AEUR",
        ),
        features=_V2_FEATURES,
        modes=("auto", "manual", "sleep", "pet"),
        fan_levels=_levels(1, 4),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_BASE_V2,
        ("LAP-EL551S-AUS", "LAP-EL551S-AEUR", "LAP-EL551S-WEU", "LAP-EL551S-WUS"),
        features=_V2_FEATURES,
        modes=("auto", "manual", "sleep", "turbo"),
        fan_levels=_levels(1, 3),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.TOWER_FAN,
        ("LTF-F422S-KEU", "LTF-F422S-WUSR", "LTF-F422_WJP", "LTF-F422S-WUS"),
        features=frozenset({_F.FAN_SPEED, _F.DISPLAY, _F.TIMER, _F.OSCILLATION}),
        modes=("normal", "auto", "advancedSleep", "turbo"),
        fan_levels=_levels(1, 12),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.HUMIDIFIER,
        ("Classic300S", "Classic200S"),
        features=_HUMIDIFIER_FEATURES,
        modes=("auto", "manual", "sleep"),
        mist_levels=_levels(1, 9),
        humidity_range=(30, 80),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.HUMIDIFIER,
        ("Dual200S",),
        features=_HUMIDIFIER_FEATURES,
        modes=("auto", "manual", "sleep"),
        mist_levels=_levels(1, 2),
        humidity_range=(30, 80),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.WARM_HUMIDIFIER,
        (
            "LUH-A601S-WUSB",
            "LUH-A601S-AUSW",
            "LUH-A602S-WUSR",
            "LUH-A602S-WUS",
            "LUH-A602S-WEUR",
            "LUH-A602S-WEU",
            "LUH-A602S-WJP",
            "LUH-A602S-WUSC",
            "LUH-O451S-WEU",
            "LUH-O451S-WUS",
            "LUH-O451S-WUSR",
            "LUH-O601S-WUS",
            "LUH-O601S-KUS",
        ),
        features=_WARM_FEATURES | {_F.NIGHT_LIGHT_BRIGHTNESS},
        modes=("auto", "manual", "sleep", "humidity"),
        mist_levels=_levels(1, 9),
        warm_levels=_levels(1, 3),
        humidity_range=(30, 80),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.WARM_HUMIDIFIER,
        ("LUH-D301S-WUSR", "LUH-D301S-WJP", "LUH-D301S-WEU"),
        features=_WARM_FEATURES,
        modes=("auto", "manual", "sleep", "humidity"),
        mist_levels=_levels(1, 2),
        warm_levels=_levels(1, 3),
        humidity_range=(30, 80),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.HUMID_1000S,
        ("LUH-M101S-WUS", "LUH-M101S-WEUR"),
        features=_HUMIDIFIER_FEATURES | {_F.NIGHT_LIGHT_BRIGHTNESS},
        modes=("auto", "manual", "sleep"),
        mist_levels=_levels(1, 9),
        humidity_range=(30, 80),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.SUPERIOR_6000S,
        ("LEH-S601S-WUS", "LEH-S601S-WUSR"),
        features=frozenset({_F.DISPLAY, _F.HUMIDITY, _F.MIST, _F.TIMER, _F.DRYING}),
        modes=("auto", "manual", "sleep", "humidity"),
        mist_levels=_levels(1, 9),
        humidity_range=(30, 80),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_131,
        ("LV-PUR131S",),
        features=frozenset({_F.FAN_SPEED, _F.DISPLAY, _F.CHILD_LOCK, _F.AIR_QUALITY, _F.TIMER}),
        modes=("auto", "manual", "sleep"),
        fan_levels=_levels(1, 3),
    )
)
_fans.update(
    _table(
        DeviceCategory.FANS,
        DeviceFamily.AIR_131,
        ("LV-RH131S",),
        features=frozenset({_F.FAN_SPEED, _F.DISPLAY, _F.CHILD_LOCK, _F.TIMER}),
        modes=("auto", "manual", "sleep"),
        fan_levels=_levels(1, 3),
    )
)

# ------------------------------------------------------------------
# Outlets, switches, bulbs
# ------------------------------------------------------------------

_OUTLET_FEATURES = frozenset({_F.ENERGY})

_outlets: dict[str, DeviceVariant] = {}
_outlets.update(
    _table(DeviceCategory.OUTLETS, DeviceFamily.OUTLET_7A, ("wifi-switch-1.3",), features=_OUTLET_FEATURES)
)
_outlets.update(
    _table(
        DeviceCategory.OUTLETS,
        DeviceFamily.OUTLET_10A,
        ("ESW03-USA", "ESW01-EU", "ESW10-USA"),
        features=_OUTLET_FEATURES,
    )
)
_outlets.update(
    _table(
        DeviceCategory.OUTLETS,
        DeviceFamily.OUTLET_15A,
        ("ESW15-USA",),
        features=_OUTLET_FEATURES | {_F.NIGHT_LIGHT},
    )
)
_outlets.update(
    _table(DeviceCategory.OUTLETS, DeviceFamily.OUTDOOR_PLUG, ("ESO15-TB",), features=_OUTLET_FEATURES)
)

_switches: dict[str, DeviceVariant] = {}
_switches.update(_table(DeviceCategory.SWITCHES, DeviceFamily.WALL_SWITCH, ("ESWL01", "ESWL03")))
_switches.update(
    _table(
        DeviceCategory.SWITCHES,
        DeviceFamily.DIMMER_SWITCH,
        ("ESWD16",),
        features=frozenset({_F.DIMMABLE, _F.INDICATOR_LIGHT, _F.RGB_SHIFT, _F.RGB_RING}),
    )
)

_bulbs: dict[str, DeviceVariant] = {}
_bulbs.update(_table(DeviceCategory.BULBS, DeviceFamily.BULB, ("ESL100",), features=frozenset({_F.DIMMABLE})))
_bulbs.update(
    _table(
        DeviceCategory.BULBS,
        DeviceFamily.BULB,
        ("ESL100CW",),
        features=frozenset({_F.DIMMABLE, _F.COLOR_TEMP}),
    )
)
_bulbs.update(
    _table(
        DeviceCategory.BULBS,
        DeviceFamily.BULB,
        ("XYD0001",),
        features=frozenset({_F.DIMMABLE, _F.COLOR_TEMP, _F.RGB_SHIFT}),
        color_model=ColorModel.HSV,
    )
)
_bulbs.update(
    _table(
        DeviceCategory.BULBS,
        DeviceFamily.BULB,
        ("ESL100MC",),
        features=frozenset({_F.DIMMABLE, _F.RGB_SHIFT}),
        color_model=ColorModel.RGB,
    )
)

#: Category tables in exact-match scan order.
VARIANT_TABLES: Mapping[DeviceCategory, Mapping[str, DeviceVariant]] = MappingProxyType(
    {
        DeviceCategory.FANS: MappingProxyType(_fans),
        DeviceCategory.OUTLETS: MappingProxyType(_outlets),
        DeviceCategory.BULBS: MappingProxyType(_bulbs),
        DeviceCategory.SWITCHES: MappingProxyType(_switches),
    }
)

#: Ordered prefix rules for the fallback match.
PREFIX_RULES: tuple[tuple[str, DeviceCategory], ...] = (
    ("Core", DeviceCategory.FANS),
    ("LAP", DeviceCategory.FANS),
    ("LTF", DeviceCategory.FANS),
    ("Classic", DeviceCategory.FANS),
    ("Dual", DeviceCategory.FANS),
    ("LUH", DeviceCategory.FANS),
    ("LEH", DeviceCategory.FANS),
    ("LV-PUR", DeviceCategory.FANS),
    ("LV-RH", DeviceCategory.FANS),
    ("wifi-switch", DeviceCategory.OUTLETS),
    ("ESW03", DeviceCategory.OUTLETS),
    ("ESW01", DeviceCategory.OUTLETS),
    ("ESW10", DeviceCategory.OUTLETS),
    ("ESW15", DeviceCategory.OUTLETS),
    ("ESO", DeviceCategory.OUTLETS),
    ("ESWL", DeviceCategory.SWITCHES),
    ("ESWD", DeviceCategory.SWITCHES),
    ("ESL", DeviceCategory.BULBS),
    ("XYD", DeviceCategory.BULBS),
)


def _exact(device_type: str) -> DeviceVariant | None:
    for table in VARIANT_TABLES.values():
        variant = table.get(device_type)
        if variant is not None:
            return variant
    return None


def _by_prefix(device_type: str) -> DeviceVariant | None:
    category = next((cat for prefix, cat in PREFIX_RULES if device_type.startswith(prefix)), None)
    if category is None:
        return None
    for variant in VARIANT_TABLES[category].values():
        if device_type.startswith(variant.base_type):
            return variant
    return None


def resolve(device_type: str) -> DeviceVariant | None:
    """Resolve *device_type* to its variant.

    Returns ``None`` for unrecognized hardware; callers skip such
    devices instead of failing the whole fleet.

    Examples
    --------
    >>> resolve("Core300S").family
    <DeviceFamily.AIR_BYPASS: 'air_bypass'>
    >>> resolve("LUH-A601S-WUSX").device_type
    'LUH-A601S-WUSB'
    """
    if not device_type:
        return None
    return _exact(device_type) or _by_prefix(device_type)


def known_device_types() -> list[str]:
    """Every exact key, in scan order."""
    return [key for table in VARIANT_TABLES.values() for key in table]
