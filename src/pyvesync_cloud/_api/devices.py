"""Device list endpoint.

Endpoint:
  - /cloud/v2/deviceManaged/devices
"""

from __future__ import annotations

import logging
from typing import Any

from pyvesync_cloud._api._common import execute_call, legacy_call
from pyvesync_cloud._transport import Transport
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.exceptions import VeSyncApiError
from pyvesync_cloud.session import Session

_logger = logging.getLogger(__name__)

DEVICE_LIST_PATH = "/cloud/v2/deviceManaged/devices"


async def fetch_device_list(
    config: VeSyncConfig,
    session: Session,
    transport: Transport,
) -> list[dict[str, Any]]:
    """Fetch the raw device records associated with the account.

    Records are returned untyped; identifier checks and variant
    resolution happen in the fleet manager.
    """
    call = legacy_call(DEVICE_LIST_PATH, "post", body_kind="devicelist")
    result = await execute_call(
        call,
        config=config,
        session=session,
        transport=transport,
        cid="",
        config_module="",
    )
    items = result.get("list")
    if items is None:
        items = []
    if not isinstance(items, list):
        raise VeSyncApiError(f"{DEVICE_LIST_PATH} returned a non-list device list", endpoint=DEVICE_LIST_PATH)
    records = [item for item in items if isinstance(item, dict)]
    _logger.debug("Device list contains %d records", len(records))
    return records
