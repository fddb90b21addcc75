from __future__ import annotations

import pytest

from pyvesync_cloud.devices.capabilities import (
    MODE_CAPABILITIES,
    allowed_features,
    has_feature,
    is_feature_supported_in_current_mode,
)
from pyvesync_cloud.devices.registry import DeviceVariant, known_device_types, resolve
from pyvesync_cloud.models.device import Feature


def _variant(device_type: str) -> DeviceVariant:
    variant = resolve(device_type)
    assert variant is not None
    return variant


def test_has_feature_reflects_hardware() -> None:
    assert has_feature(_variant("Core300S"), Feature.AIR_QUALITY)
    assert not has_feature(_variant("Core200S"), Feature.AIR_QUALITY)
    assert has_feature(_variant("LUH-A602S-WUS"), "warm")
    assert not has_feature(_variant("Classic300S"), Feature.WARM)
    assert not has_feature(_variant("Classic300S"), "teleport")


def test_fan_speed_is_gated_by_purifier_mode() -> None:
    variant = _variant("Core300S")

    assert not is_feature_supported_in_current_mode(variant, "auto", Feature.FAN_SPEED)
    assert not is_feature_supported_in_current_mode(variant, "sleep", Feature.FAN_SPEED)
    assert is_feature_supported_in_current_mode(variant, "manual", Feature.FAN_SPEED)


def test_humidity_target_only_outside_manual_and_sleep() -> None:
    variant = _variant("Classic300S")

    assert is_feature_supported_in_current_mode(variant, "auto", Feature.HUMIDITY)
    assert not is_feature_supported_in_current_mode(variant, "manual", Feature.HUMIDITY)
    assert not is_feature_supported_in_current_mode(variant, "sleep", Feature.MIST)


def test_unknown_mode_places_no_restriction() -> None:
    variant = _variant("Core300S")

    assert allowed_features(variant, None) == variant.features
    assert allowed_features(variant, "") == variant.features
    assert allowed_features(variant, "party") == variant.features


def test_mode_support_implies_hardware_support() -> None:
    for device_type in known_device_types():
        variant = _variant(device_type)
        modes = [None, *variant.modes, *MODE_CAPABILITIES.get(variant.family, {})]
        for mode in modes:
            for feature in Feature:
                if is_feature_supported_in_current_mode(variant, mode, feature):
                    assert has_feature(variant, feature), (device_type, mode, feature)


@pytest.mark.parametrize("device_type", ["ESW01-EU", "wifi-switch-1.3", "ESO15-TB"])
def test_plain_outlets_only_report_energy(device_type: str) -> None:
    assert allowed_features(_variant(device_type), None) == frozenset({Feature.ENERGY})


def test_wall_switch_has_no_features() -> None:
    assert allowed_features(_variant("ESWL01"), None) == frozenset()


@pytest.mark.parametrize(
    ("device_type", "expected"),
    [
        ("LUH-A602S-WUS", True),
        ("LUH-O451S-WUS", True),
        ("LUH-M101S-WUS", True),
        ("LUH-D301S-WEU", False),
        ("Classic300S", False),
        ("LEH-S601S-WUS", False),
    ],
)
def test_night_light_brightness_subset(device_type: str, expected: bool) -> None:
    assert has_feature(_variant(device_type), Feature.NIGHT_LIGHT_BRIGHTNESS) is expected


def test_dimmer_ring_is_dimmer_only() -> None:
    assert has_feature(_variant("ESWD16"), Feature.RGB_RING)
    assert not has_feature(_variant("ESL100MC"), Feature.RGB_RING)
