"""High-level async client for the VeSync cloud API."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import aiohttp
from pydantic import ValidationError

from pyvesync_cloud._api._common import ApiCall, execute_call
from pyvesync_cloud._api.devices import fetch_device_list
from pyvesync_cloud._transport import HttpTransport, Transport
from pyvesync_cloud.auth import AuthNegotiator
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.devices.device import VeSyncDevice, create_device
from pyvesync_cloud.exceptions import (
    VeSyncAuthenticationError,
    VeSyncError,
    VeSyncTokenExpiredError,
    VeSyncUnrecognizedDeviceError,
)
from pyvesync_cloud.models.device import DeviceCategory
from pyvesync_cloud.models.device_record import DeviceRecord
from pyvesync_cloud.session import Session

_logger = logging.getLogger(__name__)

T = TypeVar("T")

#: Device types whose list entries describe one socket each.
_SUB_DEVICE_TYPES = frozenset({"ESO15-TB"})


class VeSyncClient:
    """Async client and fleet manager for one VeSync account.

    Owns the session, the transport and the device collection.  The
    device collection is a view of the cloud's device list, refreshed
    on demand by :meth:`refresh_device_list` or throttled by
    :meth:`update`.

    Usage::

        async with VeSyncClient(config) as client:
            if await client.login():
                await client.update()
                for device in client.fans:
                    print(device.display_json())
    """

    def __init__(
        self,
        config: VeSyncConfig,
        *,
        http_session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._external_session = http_session is not None
        self._http_session = http_session
        self._transport: Transport | None = transport
        self._external_transport = transport is not None
        self._negotiator: AuthNegotiator | None = None
        self._session: Session | None = None
        self._devices: dict[str, VeSyncDevice] = {}
        self._clock = clock
        self._last_refresh: float | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> VeSyncClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @property
    def config(self) -> VeSyncConfig:
        return self._config

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def negotiator(self) -> AuthNegotiator:
        """Negotiator of the last login (created lazily)."""
        if self._negotiator is None:
            self._negotiator = AuthNegotiator(self._config, self._require_transport())
        return self._negotiator

    async def login(self) -> bool:
        """Negotiate a new session, replacing the current one.

        Returns ``False`` when the credentials were rejected or no
        region/protocol combination worked; transport failures raise.
        """
        negotiator = self.negotiator
        try:
            session = await negotiator.negotiate()
        except VeSyncError:
            self._session = None
            raise
        self._session = session
        return session is not None

    async def ensure_session(self) -> Session:
        """Return an active session, negotiating one if needed."""
        if self._session is not None and not self._session.is_expired:
            return self._session
        if not await self.login():
            raise VeSyncAuthenticationError("Login failed")
        assert self._session is not None  # noqa: S101
        return self._session

    def invalidate_session(self) -> None:
        """Force session invalidation (next call will re-authenticate)."""
        self._session = None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise VeSyncError("Client not initialized. Use 'async with VeSyncClient(...) as client:'")
        return self._transport

    async def _call_with_reauth(self, fn: Callable[[Session], Awaitable[T]]) -> T:
        """Run an API call with the current session.

        On an expired token the session is dropped.  The call is
        re-issued once with a fresh session only when
        ``config.reauth_on_token_error`` is set.
        """
        session = await self.ensure_session()
        try:
            return await fn(session)
        except VeSyncTokenExpiredError:
            self.invalidate_session()
            if not self._config.reauth_on_token_error:
                raise
            _logger.debug("Token expired, re-authenticating once")
            session = await self.ensure_session()
            return await fn(session)

    async def execute(self, call: ApiCall, *, device: VeSyncDevice) -> Any:
        """Send a device call with the current session (used by devices)."""
        transport = self._require_transport()

        async def _run(session: Session) -> Any:
            return await execute_call(
                call,
                config=self._config,
                session=session,
                transport=transport,
                cid=device.cid,
                config_module=device.config_module,
            )

        return await self._call_with_reauth(_run)

    # ------------------------------------------------------------------
    # Fleet
    # ------------------------------------------------------------------

    @property
    def devices(self) -> list[VeSyncDevice]:
        return list(self._devices.values())

    def _by_category(self, category: DeviceCategory) -> list[VeSyncDevice]:
        return [device for device in self._devices.values() if device.category is category]

    @property
    def fans(self) -> list[VeSyncDevice]:
        return self._by_category(DeviceCategory.FANS)

    @property
    def outlets(self) -> list[VeSyncDevice]:
        return self._by_category(DeviceCategory.OUTLETS)

    @property
    def switches(self) -> list[VeSyncDevice]:
        return self._by_category(DeviceCategory.SWITCHES)

    @property
    def bulbs(self) -> list[VeSyncDevice]:
        return self._by_category(DeviceCategory.BULBS)

    def get_device(self, device_id: str) -> VeSyncDevice | None:
        return self._devices.get(device_id)

    @property
    def last_refresh(self) -> float | None:
        """Clock value of the last successful device-list refresh."""
        return self._last_refresh

    @staticmethod
    def _fleet_id(record: DeviceRecord) -> str | None:
        identifier = record.identifier
        if identifier and record.device_type in _SUB_DEVICE_TYPES and record.sub_device_no is not None:
            return f"{identifier}#{record.sub_device_no}"
        return identifier

    async def refresh_device_list(self) -> bool:
        """Reconcile the local device set against the cloud's device list.

        New ids are instantiated, ids absent from the list are removed
        and ids already known are left untouched.  Malformed records,
        records without any identifier and unrecognized device types are
        skipped with a warning.

        Returns
        -------
        bool
            ``False`` when the list could not be fetched (state kept).
            Authentication failures raise.
        """
        transport = self._require_transport()
        try:
            raw_records = await self._call_with_reauth(
                lambda session: fetch_device_list(self._config, session, transport)
            )
        except VeSyncAuthenticationError:
            raise
        except VeSyncError as exc:
            _logger.error("Device list refresh failed: %s", exc)
            return False

        current: dict[str, VeSyncDevice] = {}
        for raw in raw_records:
            try:
                record = DeviceRecord.model_validate(raw)
            except ValidationError as exc:
                _logger.warning("Skipping malformed device record: %s", exc)
                continue
            device_id = self._fleet_id(record)
            if device_id is None:
                _logger.warning("Dropping device %r without cid/macID/uuid", record.device_name)
                continue
            if device_id in current:
                continue
            existing = self._devices.get(device_id)
            if existing is not None:
                current[device_id] = existing
                continue
            try:
                device = create_device(record, self, device_id=device_id)
            except VeSyncUnrecognizedDeviceError as exc:
                _logger.warning("Skipping %r: %s", record.device_name, exc)
                continue
            _logger.debug("Added %s (%s)", device_id, record.device_type)
            current[device_id] = device

        for removed in self._devices.keys() - current.keys():
            _logger.debug("Removed %s", removed)

        self._devices = current
        self._last_refresh = self._clock()
        return True

    async def update(self) -> bool:
        """Refresh the device list and poll every device, throttled.

        A no-op (returning ``False``) unless ``config.update_interval``
        seconds have passed since the last successful refresh.  Devices
        are polled one at a time; one device failing does not stop the
        others, but authentication failures abort the update.
        """
        if self._last_refresh is not None:
            elapsed = self._clock() - self._last_refresh
            if elapsed < self._config.update_interval:
                _logger.debug("Update throttled (%.1fs since last refresh)", elapsed)
                return False

        if not await self.refresh_device_list():
            return False

        for device in list(self._devices.values()):
            try:
                await device.get_details()
            except VeSyncAuthenticationError:
                raise
            except VeSyncError as exc:
                _logger.warning("Polling %s failed: %s", device.device_name, exc)
        return True
