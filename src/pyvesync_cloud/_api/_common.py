"""Shared helpers for VeSync API endpoint modules.

This module centralizes the most repeated patterns:
- building the common request envelope for each body kind
- building the two header sets (bypass and legacy)
- executing an :class:`ApiCall` produced by a device family
- mapping remote application codes to exceptions

It is internal to pyvesync_cloud and may change at any time.
"""

from __future__ import annotations

import dataclasses
import enum
import time
from collections.abc import Mapping
from typing import Any

from pyvesync_cloud._constants import (
    APP_VERSION,
    CREDENTIAL_ERROR_CODES,
    DEFAULT_LANGUAGE,
    MOBILE_ID,
    PHONE_BRAND,
    PHONE_OS,
    TOKEN_EXPIRED_CODES,
    UNCONFIRMED_CODES,
    UNSUPPORTED_IN_MODE_CODES,
    USER_AGENT,
)
from pyvesync_cloud._transport import Transport
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.exceptions import (
    VeSyncApiError,
    VeSyncAuthenticationError,
    VeSyncCommandUnconfirmedError,
    VeSyncFeatureNotSupportedError,
    VeSyncTokenExpiredError,
    VeSyncTransportError,
)
from pyvesync_cloud.session import Session

BYPASS_V2_PATH = "/cloud/v2/deviceManaged/bypassV2"


class CallStyle(enum.StrEnum):
    """How a request is enveloped and how its reply is unwrapped."""

    BYPASS_V2 = "bypass_v2"
    """POST to the bypass endpoint; reply code checked at both levels."""
    LEGACY = "legacy"
    """Per-model REST path; only the top-level code is checked."""


@dataclasses.dataclass(frozen=True)
class ApiCall:
    """One request as described by a device family command table.

    Parameters
    ----------
    path : str
        Endpoint path (ignored for bypass calls).
    http_method : str
        ``"post"``, ``"put"`` or ``"get"``.
    style : CallStyle
        Envelope and response policy.
    body_kind : str or None
        Envelope kind for legacy calls; ``None`` sends no body.
    data : Mapping
        Bypass ``payload.data`` or extra legacy body fields.
    bypass_method : str or None
        Bypass ``payload.method``.
    expects_body : bool
        When ``False`` an empty HTTP 200 reply counts as success.
    """

    path: str
    http_method: str = "post"
    style: CallStyle = CallStyle.LEGACY
    body_kind: str | None = "devicestatus"
    data: Mapping[str, Any] = dataclasses.field(default_factory=dict)
    bypass_method: str | None = None
    expects_body: bool = True

    @property
    def endpoint(self) -> str:
        """Name used in log lines and exception messages."""
        if self.style is CallStyle.BYPASS_V2:
            return f"{BYPASS_V2_PATH}#{self.bypass_method}"
        return self.path


def bypass_call(method: str, data: Mapping[str, Any] | None = None) -> ApiCall:
    """Shorthand for a ``bypassV2`` call."""
    return ApiCall(
        path=BYPASS_V2_PATH,
        http_method="post",
        style=CallStyle.BYPASS_V2,
        body_kind="bypassV2",
        data=dict(data or {}),
        bypass_method=method,
    )


def legacy_call(
    path: str,
    http_method: str = "put",
    data: Mapping[str, Any] | None = None,
    *,
    body_kind: str | None = "devicestatus",
    expects_body: bool = True,
) -> ApiCall:
    """Shorthand for a per-model REST call."""
    return ApiCall(
        path=path,
        http_method=http_method,
        style=CallStyle.LEGACY,
        body_kind=body_kind,
        data=dict(data or {}),
        expects_body=expects_body,
    )


# ------------------------------------------------------------------
# Envelope and headers
# ------------------------------------------------------------------


def _now_ms() -> int:
    return int(time.time() * 1000)


def _base_fields(config: VeSyncConfig) -> dict[str, Any]:
    return {
        "timeZone": config.time_zone,
        "acceptLanguage": DEFAULT_LANGUAGE,
    }


def _detail_fields(now_ms: int) -> dict[str, Any]:
    return {
        "appVersion": APP_VERSION,
        "phoneBrand": PHONE_BRAND,
        "phoneOS": PHONE_OS,
        "traceId": str(now_ms),
    }


def _auth_fields(session: Session) -> dict[str, Any]:
    return {
        "accountID": session.account_id,
        "token": session.token,
    }


def build_request_body(
    config: VeSyncConfig,
    session: Session,
    kind: str,
    *,
    now_ms: int | None = None,
) -> dict[str, Any]:
    """Build the common request envelope for *kind*.

    Supported kinds are ``devicestatus``, ``devicelist``,
    ``devicedetail`` and ``bypassV2``.  Login bodies are built in
    :mod:`pyvesync_cloud._api.login`.
    """
    if now_ms is None:
        now_ms = _now_ms()

    body = _base_fields(config)
    if kind == "devicestatus":
        body.update(_auth_fields(session))
    elif kind == "devicelist":
        body.update(_auth_fields(session))
        body.update(_detail_fields(now_ms))
        body.update({"method": "devices", "pageNo": "1", "pageSize": "100"})
    elif kind == "devicedetail":
        body.update(_auth_fields(session))
        body.update(_detail_fields(now_ms))
        body.update({"method": "devicedetail", "mobileId": MOBILE_ID})
    elif kind == "bypassV2":
        body.update(_auth_fields(session))
        body.update(_detail_fields(now_ms))
        body.update({"deviceRegion": session.region, "method": "bypassV2"})
    else:
        raise ValueError(f"unknown request body kind: {kind!r}")
    return body


def bypass_headers() -> dict[str, str]:
    """Headers for bypass and login requests."""
    return {
        "Content-Type": "application/json; charset=UTF-8",
        "User-Agent": USER_AGENT,
    }


def legacy_headers(config: VeSyncConfig, session: Session) -> dict[str, str]:
    """Headers for per-model REST requests (token travels in ``tk``)."""
    return {
        "accept-language": DEFAULT_LANGUAGE,
        "accountId": session.account_id,
        "appVersion": APP_VERSION,
        "content-type": "application/json",
        "tk": session.token,
        "tz": config.time_zone,
    }


# ------------------------------------------------------------------
# Response policy
# ------------------------------------------------------------------


def _as_code(value: Any) -> int | None:
    if value is None:
        return 0
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _raise_for_code(*, endpoint: str, code: int | None, message: str) -> None:
    if code in TOKEN_EXPIRED_CODES:
        raise VeSyncTokenExpiredError(
            f"{endpoint} failed: token expired (code={code})",
            code=code,
            endpoint=endpoint,
        )
    if code in CREDENTIAL_ERROR_CODES:
        raise VeSyncAuthenticationError(
            f"{endpoint} failed: code={code} message={message}",
            code=code,
            endpoint=endpoint,
        )
    if code in UNSUPPORTED_IN_MODE_CODES:
        raise VeSyncFeatureNotSupportedError(
            f"{endpoint} not supported in the current mode (code={code})",
            code=code,
            endpoint=endpoint,
        )
    if code in UNCONFIRMED_CODES:
        raise VeSyncCommandUnconfirmedError(
            f"{endpoint} outcome unconfirmed (code={code})",
            code=code,
            endpoint=endpoint,
        )
    raise VeSyncApiError(
        f"{endpoint} failed: code={code} message={message}",
        code=code,
        endpoint=endpoint,
    )


def check_response(
    endpoint: str,
    response: Any,
    status: int,
    *,
    nested: bool,
    expects_body: bool = True,
) -> Any:
    """Apply the response policy and return the useful payload.

    A non-200 status raises :class:`VeSyncTransportError`.  A non-zero
    ``code`` at the top level, or at ``result.code`` when *nested*,
    is mapped through :func:`_raise_for_code`.  Nested replies return
    ``result.result``; legacy replies return ``result`` when present,
    otherwise the whole body.
    """
    if status != 200:
        raise VeSyncTransportError(
            f"HTTP {status} from {endpoint}",
            status_code=status,
            endpoint=endpoint,
        )
    if response is None and not expects_body:
        return {}
    if not isinstance(response, Mapping):
        raise VeSyncApiError(f"{endpoint} returned no JSON object", endpoint=endpoint)

    code = _as_code(response.get("code"))
    if code != 0:
        _raise_for_code(endpoint=endpoint, code=code, message=str(response.get("msg", "")))

    result = response.get("result")
    if not nested:
        return result if isinstance(result, Mapping) else response

    if not isinstance(result, Mapping):
        raise VeSyncApiError(f"{endpoint} reply is missing result", endpoint=endpoint)
    inner_code = _as_code(result.get("code"))
    if inner_code != 0:
        _raise_for_code(endpoint=endpoint, code=inner_code, message=str(result.get("msg", "")))
    inner = result.get("result")
    return inner if inner is not None else {}


async def execute_call(
    call: ApiCall,
    *,
    config: VeSyncConfig,
    session: Session,
    transport: Transport,
    cid: str,
    config_module: str,
    now_ms: int | None = None,
) -> Any:
    """Envelope *call* with the current session, send it and check the reply."""
    if call.style is CallStyle.BYPASS_V2:
        body: dict[str, Any] | None = {
            **build_request_body(config, session, "bypassV2", now_ms=now_ms),
            "cid": cid,
            "configModule": config_module,
            "payload": {
                "data": dict(call.data),
                "method": call.bypass_method,
                "source": "APP",
            },
        }
        headers = bypass_headers()
        path = BYPASS_V2_PATH
    else:
        body = None
        if call.body_kind is not None:
            body = {**build_request_body(config, session, call.body_kind, now_ms=now_ms), **call.data}
        headers = legacy_headers(config, session)
        path = call.path

    response, status = await transport.call_api(
        path,
        call.http_method,
        body,
        headers,
        base_url=session.api_base_url,
    )
    return check_response(
        call.endpoint,
        response,
        status,
        nested=call.style is CallStyle.BYPASS_V2,
        expects_body=call.expects_body,
    )
