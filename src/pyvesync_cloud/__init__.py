"""pyvesync_cloud - Async Python client for the VeSync smart-home cloud API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvesync-cloud")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvesync_cloud.auth import AuthNegotiator, AuthState
from pyvesync_cloud.client import VeSyncClient
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.devices import (
    DeviceVariant,
    VeSyncDevice,
    allowed_features,
    has_feature,
    is_feature_supported_in_current_mode,
    known_device_types,
    resolve,
)
from pyvesync_cloud.exceptions import (
    VeSyncApiError,
    VeSyncAuthenticationError,
    VeSyncCommandUnconfirmedError,
    VeSyncConfigError,
    VeSyncError,
    VeSyncFeatureNotSupportedError,
    VeSyncInvalidArgumentError,
    VeSyncStaleDataError,
    VeSyncTokenExpiredError,
    VeSyncTransportError,
    VeSyncUnrecognizedDeviceError,
)
from pyvesync_cloud.models import (
    ColorModel,
    DeviceCategory,
    DeviceFamily,
    DeviceRecord,
    DeviceState,
    Feature,
    TimerInfo,
)
from pyvesync_cloud.session import AuthFlow, Session

__all__ = [
    "__version__",
    "AuthFlow",
    "AuthNegotiator",
    "AuthState",
    "ColorModel",
    "DeviceCategory",
    "DeviceFamily",
    "DeviceRecord",
    "DeviceState",
    "DeviceVariant",
    "Feature",
    "Session",
    "TimerInfo",
    "VeSyncApiError",
    "VeSyncAuthenticationError",
    "VeSyncClient",
    "VeSyncCommandUnconfirmedError",
    "VeSyncConfig",
    "VeSyncConfigError",
    "VeSyncDevice",
    "VeSyncError",
    "VeSyncFeatureNotSupportedError",
    "VeSyncInvalidArgumentError",
    "VeSyncStaleDataError",
    "VeSyncTokenExpiredError",
    "VeSyncTransportError",
    "VeSyncUnrecognizedDeviceError",
    "allowed_features",
    "has_feature",
    "is_feature_supported_in_current_mode",
    "known_device_types",
    "resolve",
]
