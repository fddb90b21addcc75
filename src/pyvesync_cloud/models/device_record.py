"""Raw device-list entry model."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyvesync_cloud.models._base import VeSyncBaseModel


class DeviceRecord(VeSyncBaseModel):
    """One entry of the cloud's device list.

    Only the fields the library relies on are typed; everything else
    stays available in ``raw``.
    """

    device_type: str = ""
    device_name: str = ""
    device_status: str | None = None
    connection_status: str | None = None
    cid: str | None = None
    mac_id: str | None = Field(default=None, validation_alias=AliasChoices("macID", "macId", "mac_id"))
    uuid: str | None = None
    config_module: str = ""
    mode: str | None = None
    sub_device_no: int | None = None
    device_region: str | None = None
    current_firm_version: str | None = None
    device_img: str | None = None

    @property
    def identifier(self) -> str | None:
        """Stable id: ``cid``, else ``macID``, else ``uuid``."""
        for value in (self.cid, self.mac_id, self.uuid):
            if value:
                return value
        return None
