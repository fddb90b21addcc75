"""Typed models for VeSync API payloads."""

from pyvesync_cloud.models._base import VeSyncBaseModel
from pyvesync_cloud.models.details import (
    Air131Detail,
    BulbDetail,
    HumidifierStatus,
    OutletDetail,
    PurifierStatus,
    PurifierV2Status,
    SwitchDetail,
    TowerFanStatus,
)
from pyvesync_cloud.models.device import ColorModel, DeviceCategory, DeviceFamily, Feature
from pyvesync_cloud.models.device_record import DeviceRecord
from pyvesync_cloud.models.state import DeviceState, TimerInfo
from pyvesync_cloud.models.token import AuthorizeCode, LoginResult, RegionHint

__all__ = [
    "Air131Detail",
    "AuthorizeCode",
    "BulbDetail",
    "ColorModel",
    "DeviceCategory",
    "DeviceFamily",
    "DeviceRecord",
    "DeviceState",
    "Feature",
    "HumidifierStatus",
    "LoginResult",
    "OutletDetail",
    "PurifierStatus",
    "PurifierV2Status",
    "RegionHint",
    "SwitchDetail",
    "TimerInfo",
    "TowerFanStatus",
    "VeSyncBaseModel",
]
