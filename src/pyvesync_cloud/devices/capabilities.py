"""Capability matrix.

Two static questions are answered here:

* :func:`has_feature` - can this hardware ever do X?
* :func:`is_feature_supported_in_current_mode` - can it do X right now,
  given its operating mode?

Mode restrictions are keyed by protocol family and list, per mode, the
features that stay usable.  A mode absent from a family's table (or an
unknown/empty mode) places no restriction beyond :func:`has_feature`.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from pyvesync_cloud.devices.registry import DeviceVariant
from pyvesync_cloud.models.device import DeviceFamily, Feature

_ALL = frozenset(Feature)


def _without(*features: Feature) -> frozenset[Feature]:
    return _ALL - frozenset(features)


_F = Feature

_PURIFIER_MODES: Mapping[str, frozenset[Feature]] = MappingProxyType(
    {
        "auto": _without(_F.FAN_SPEED),
        "sleep": _without(_F.FAN_SPEED, _F.DISPLAY, _F.NIGHT_LIGHT),
    }
)

_HUMIDIFIER_MODES: Mapping[str, frozenset[Feature]] = MappingProxyType(
    {
        "manual": _without(_F.HUMIDITY),
        "sleep": _without(_F.HUMIDITY, _F.DISPLAY, _F.MIST),
    }
)

#: (family, mode) -> features usable in that mode.
MODE_CAPABILITIES: Mapping[DeviceFamily, Mapping[str, frozenset[Feature]]] = MappingProxyType(
    {
        DeviceFamily.AIR_BYPASS: _PURIFIER_MODES,
        DeviceFamily.AIR_BASE_V2: MappingProxyType(
            {
                "auto": _without(_F.FAN_SPEED),
                "pet": _without(_F.FAN_SPEED),
                "turbo": _without(_F.FAN_SPEED),
                "sleep": _without(_F.FAN_SPEED, _F.DISPLAY, _F.LIGHT_DETECTION),
            }
        ),
        DeviceFamily.AIR_131: MappingProxyType(
            {
                "auto": _without(_F.FAN_SPEED),
                "sleep": _without(_F.FAN_SPEED, _F.DISPLAY),
            }
        ),
        DeviceFamily.TOWER_FAN: MappingProxyType(
            {
                "auto": _without(_F.FAN_SPEED),
                "turbo": _without(_F.FAN_SPEED),
                "advancedSleep": _without(_F.FAN_SPEED, _F.DISPLAY),
            }
        ),
        DeviceFamily.HUMIDIFIER: _HUMIDIFIER_MODES,
        DeviceFamily.WARM_HUMIDIFIER: _HUMIDIFIER_MODES,
        DeviceFamily.HUMID_1000S: _HUMIDIFIER_MODES,
        DeviceFamily.SUPERIOR_6000S: _HUMIDIFIER_MODES,
    }
)


def has_feature(variant: DeviceVariant, feature: Feature | str) -> bool:
    """Whether the hardware behind *variant* ever supports *feature*."""
    try:
        return Feature(feature) in variant.features
    except ValueError:
        return False


def allowed_features(variant: DeviceVariant, mode: str | None) -> frozenset[Feature]:
    """Features of *variant* usable while in *mode*."""
    if not mode:
        return variant.features
    table = MODE_CAPABILITIES.get(variant.family, {})
    allowed = table.get(mode)
    if allowed is None:
        return variant.features
    return variant.features & allowed


def is_feature_supported_in_current_mode(
    variant: DeviceVariant,
    mode: str | None,
    feature: Feature | str,
) -> bool:
    """Whether *feature* is usable on *variant* while in *mode*.

    Always ``False`` when :func:`has_feature` is ``False``.
    """
    if not has_feature(variant, feature):
        return False
    return Feature(feature) in allowed_features(variant, mode)
