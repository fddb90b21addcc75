"""Login endpoints.

Endpoints:
  - /globalPlatform/api/accountAuth/v1/authByPWDOrOTM (two-step, Step 1)
  - /user/api/accountManage/v1/loginByAuthorizeCode4Vesync (two-step, Step 2)
  - /cloud/v1/user/login (legacy single step)

Builders return plain request bodies; the decision logic lives in
:mod:`pyvesync_cloud.auth`.
"""

from __future__ import annotations

import hashlib
import time
from collections.abc import Mapping
from typing import Any

from pyvesync_cloud._api._common import _as_code
from pyvesync_cloud._constants import (
    APP_ID,
    APP_VERSION,
    AUTH_PROTOCOL_TYPE,
    CLIENT_INFO,
    CLIENT_TYPE,
    CLIENT_VERSION,
    DEFAULT_LANGUAGE,
    OS_INFO,
    PHONE_BRAND,
    PHONE_OS,
    USER_TYPE,
)
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.exceptions import VeSyncTransportError
from pyvesync_cloud.models.token import AuthorizeCode, LoginResult, RegionHint

STEP1_PATH = "/globalPlatform/api/accountAuth/v1/authByPWDOrOTM"
STEP2_PATH = "/user/api/accountManage/v1/loginByAuthorizeCode4Vesync"
LEGACY_LOGIN_PATH = "/cloud/v1/user/login"


def hash_password(password: str) -> str:
    """Lowercase MD5 hex digest, the only password form the cloud accepts."""
    return hashlib.md5(password.encode("utf-8")).hexdigest()  # noqa: S324


def _client_fields(config: VeSyncConfig, now_ms: int) -> dict[str, Any]:
    return {
        "acceptLanguage": DEFAULT_LANGUAGE,
        "accountID": "",
        "appID": APP_ID,
        "clientInfo": CLIENT_INFO,
        "clientType": CLIENT_TYPE,
        "clientVersion": CLIENT_VERSION,
        "debugMode": False,
        "osInfo": OS_INFO,
        "sourceAppID": APP_ID,
        "terminalId": config.terminal_id,
        "timeZone": config.time_zone,
        "token": "",
        "traceId": f"APP{APP_ID}{now_ms}",
    }


def build_step1_request(
    config: VeSyncConfig,
    *,
    country_code: str,
    now_ms: int | None = None,
) -> dict[str, Any]:
    """Build the Step 1 body exchanging credentials for an authorize code.

    Parameters
    ----------
    config : VeSyncConfig
        Client configuration (credentials, time zone, terminal id).
    country_code : str
        Country code declared for this attempt.
    now_ms : int, optional
        Current time in milliseconds since epoch.

    Returns
    -------
    dict
        Request body ready for the transport.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return {
        **_client_fields(config, now_ms),
        "authProtocolType": AUTH_PROTOCOL_TYPE,
        "email": config.username,
        "method": "authByPWDOrOTM",
        "password": hash_password(config.password),
        "userCountryCode": country_code,
    }


def build_step2_request(
    config: VeSyncConfig,
    *,
    authorize_code: str,
    biz_token: str | None,
    country_code: str,
    region_change: bool = False,
    now_ms: int | None = None,
) -> dict[str, Any]:
    """Build the Step 2 body exchanging an authorize code for a token.

    ``region_change`` marks a retry that follows a cross-region
    rejection; the cloud then expects the previous ``bizToken``.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    body: dict[str, Any] = {
        **_client_fields(config, now_ms),
        "authorizeCode": authorize_code,
        "bizToken": biz_token or "",
        "emailSubscriptions": False,
        "method": "loginByAuthorizeCode4Vesync",
        "userCountryCode": country_code,
    }
    if region_change:
        body["regionChange"] = "lastRegion"
    return body


def build_legacy_login_request(config: VeSyncConfig, *, now_ms: int | None = None) -> dict[str, Any]:
    """Build the single-step login body used before the two-step flow existed."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return {
        "timeZone": config.time_zone,
        "acceptLanguage": DEFAULT_LANGUAGE,
        "appVersion": APP_VERSION,
        "phoneBrand": PHONE_BRAND,
        "phoneOS": PHONE_OS,
        "traceId": str(now_ms),
        "email": config.username,
        "password": hash_password(config.password),
        "devToken": "",
        "userType": USER_TYPE,
        "method": "login",
    }


def read_login_reply(endpoint: str, response: Any, status: int) -> tuple[int | None, dict[str, Any]]:
    """Split a login reply into ``(code, result)``.

    Only transport-level problems raise; remote codes are returned so
    the negotiator can decide between retrying, redirecting and
    failing.  A body that is not a JSON object yields ``(None, {})``.
    """
    if status != 200:
        raise VeSyncTransportError(
            f"HTTP {status} from {endpoint}",
            status_code=status,
            endpoint=endpoint,
        )
    if not isinstance(response, Mapping):
        return None, {}
    result = response.get("result")
    return _as_code(response.get("code")), dict(result) if isinstance(result, Mapping) else {}


def parse_authorize_code(result: Mapping[str, Any]) -> AuthorizeCode:
    """Parse the Step 1 result (raises ``ValidationError`` when incomplete)."""
    return AuthorizeCode.model_validate(dict(result))


def parse_login_result(result: Mapping[str, Any]) -> LoginResult:
    """Parse a Step 2 or legacy login result."""
    return LoginResult.model_validate(dict(result))


def parse_region_hint(result: Mapping[str, Any]) -> RegionHint:
    """Parse the hints carried by a cross-region rejection."""
    return RegionHint.model_validate(dict(result))
