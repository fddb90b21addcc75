"""Device variant registry, capability matrix and device instances."""

from pyvesync_cloud.devices.capabilities import (
    allowed_features,
    has_feature,
    is_feature_supported_in_current_mode,
)
from pyvesync_cloud.devices.device import VeSyncDevice, create_device
from pyvesync_cloud.devices.registry import DeviceVariant, known_device_types, resolve

__all__ = [
    "DeviceVariant",
    "VeSyncDevice",
    "allowed_features",
    "create_device",
    "has_feature",
    "is_feature_supported_in_current_mode",
    "known_device_types",
    "resolve",
]
