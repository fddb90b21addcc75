from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

import pytest

from pyvesync_cloud._api._common import BYPASS_V2_PATH, ApiCall, execute_call
from pyvesync_cloud._constants import API_BASE_URLS
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.devices.device import VeSyncDevice, create_device
from pyvesync_cloud.models.device_record import DeviceRecord
from pyvesync_cloud.session import Session

Reply = Any


@dataclass
class RecordedCall:
    path: str
    http_method: str
    body: dict[str, Any] | None
    headers: dict[str, str]
    base_url: str

    @property
    def key(self) -> str:
        if self.path == BYPASS_V2_PATH and self.body is not None:
            return f"{self.path}#{self.body['payload']['method']}"
        return self.path


@dataclass
class FakeCloud:
    """Scripted stand-in for the HTTP transport.

    Replies are registered per endpoint key (``path`` or
    ``bypassV2#method``), optionally per base URL.  Each call consumes
    the next reply; the last one keeps being served.  A reply is a
    JSON body (served with HTTP 200), a ``(body, status)`` tuple, an
    exception instance to raise, or a callable taking the request body.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    _routes: dict[tuple[str | None, str], list[Reply]] = field(default_factory=dict)

    def route(self, key: str, *replies: Reply, base_url: str | None = None) -> None:
        self._routes[(base_url, key)] = list(replies)

    def keys(self) -> list[str]:
        return [call.key for call in self.calls]

    def last(self, key: str) -> RecordedCall:
        return [call for call in self.calls if call.key == key][-1]

    @staticmethod
    def bypass_ok(result: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return {"code": 0, "msg": "request success", "result": {"code": 0, "result": dict(result or {})}}

    @staticmethod
    def bypass_error(code: int, *, outer: bool = False) -> dict[str, Any]:
        if outer:
            return {"code": code, "msg": "error"}
        return {"code": 0, "result": {"code": code, "msg": "device error"}}

    @staticmethod
    def legacy_ok(**fields: Any) -> dict[str, Any]:
        return {"code": 0, "msg": "request success", **fields}

    async def call_api(
        self,
        path: str,
        http_method: str,
        body: Mapping[str, Any] | None,
        headers: Mapping[str, str],
        *,
        base_url: str,
    ) -> tuple[Any, int]:
        call = RecordedCall(path, http_method, dict(body) if body is not None else None, dict(headers), base_url)
        self.calls.append(call)

        replies = self._routes.get((base_url, call.key))
        if replies is None:
            replies = self._routes.get((None, call.key))
        if not replies:
            raise AssertionError(f"unexpected call to {call.key} at {base_url}")
        reply = replies.pop(0) if len(replies) > 1 else replies[0]

        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(call.body)
        if isinstance(reply, tuple):
            return reply
        return reply, 200


class DirectExecutor:
    """Executes device calls with a fixed session, bypassing login."""

    def __init__(self, config: VeSyncConfig, session: Session, cloud: FakeCloud) -> None:
        self._config = config
        self._session = session
        self._cloud = cloud

    async def execute(self, call: ApiCall, *, device: VeSyncDevice) -> Any:
        return await execute_call(
            call,
            config=self._config,
            session=self._session,
            transport=self._cloud,
            cid=device.cid,
            config_module=device.config_module,
        )


@pytest.fixture
def cloud() -> FakeCloud:
    return FakeCloud()


@pytest.fixture
def config() -> VeSyncConfig:
    return VeSyncConfig(username="user@example.com", password="secret", terminal_id="2term")


@pytest.fixture
def session() -> Session:
    return Session(
        token="token-1",
        account_id="account-1",
        country_code="US",
        region="US",
        api_base_url=API_BASE_URLS["US"],
    )


@pytest.fixture
def make_device(config: VeSyncConfig, session: Session, cloud: FakeCloud) -> Callable[..., VeSyncDevice]:
    executor = DirectExecutor(config, session, cloud)

    def _make(device_type: str, **record: Any) -> VeSyncDevice:
        fields = {
            "deviceType": device_type,
            "deviceName": f"My {device_type}",
            "cid": f"cid-{device_type}",
            "uuid": f"uuid-{device_type}",
            "configModule": f"module-{device_type}",
            "deviceStatus": "on",
            "connectionStatus": "online",
            **record,
        }
        return create_device(DeviceRecord.model_validate(fields), executor)

    return _make
