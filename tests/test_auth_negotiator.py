from __future__ import annotations

from typing import Any

import pytest

from pyvesync_cloud._api.login import LEGACY_LOGIN_PATH, STEP1_PATH, STEP2_PATH, hash_password
from pyvesync_cloud._constants import API_BASE_URLS
from pyvesync_cloud.auth import AuthNegotiator, AuthState
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.exceptions import VeSyncTransportError
from pyvesync_cloud.session import AuthFlow

US = API_BASE_URLS["US"]
EU = API_BASE_URLS["EU"]


def _authorize(country: str | None = None, biz_token: str = "biz-1") -> dict[str, Any]:
    result: dict[str, Any] = {"authorizeCode": "auth-code-1", "bizToken": biz_token}
    if country is not None:
        result["countryCode"] = country
    return {"code": 0, "msg": "", "result": result}


def _token(token: str = "token-1", country: str = "US") -> dict[str, Any]:
    return {"code": 0, "msg": "", "result": {"token": token, "accountID": "account-1", "countryCode": country}}


def _config(**overrides: Any) -> VeSyncConfig:
    return VeSyncConfig(username="user@example.com", password="secret", terminal_id="2term", **overrides)


def test_password_is_md5_hex() -> None:
    assert hash_password("secret") == "5ebe2294ecd0e0f08eab7690d2a6ee69"


@pytest.mark.asyncio
async def test_two_step_login_on_first_region(cloud: Any) -> None:
    cloud.route(STEP1_PATH, _authorize("US"), base_url=US)
    cloud.route(STEP2_PATH, _token(), base_url=US)
    negotiator = AuthNegotiator(_config(), cloud)

    session = await negotiator.negotiate()

    assert session is not None
    assert session.token == "token-1"
    assert session.account_id == "account-1"
    assert session.region == "US"
    assert session.api_base_url == US
    assert session.auth_flow is AuthFlow.TWO_STEP
    assert negotiator.state is AuthState.AUTHENTICATED
    assert negotiator.transitions == [
        AuthState.UNAUTHENTICATED,
        AuthState.AWAITING_STEP1,
        AuthState.AWAITING_STEP2,
        AuthState.AUTHENTICATED,
    ]

    step1 = cloud.last(STEP1_PATH).body
    assert step1["email"] == "user@example.com"
    assert step1["password"] == hash_password("secret")
    assert step1["terminalId"] == "2term"
    assert step1["userCountryCode"] == "US"
    step2 = cloud.last(STEP2_PATH).body
    assert step2["authorizeCode"] == "auth-code-1"
    assert step2["bizToken"] == "biz-1"
    assert "regionChange" not in step2


@pytest.mark.asyncio
async def test_country_override_succeeds_where_default_fails(cloud: Any) -> None:
    def step2(body: dict[str, Any]) -> dict[str, Any]:
        if body["userCountryCode"] == "AU":
            return _token(country="AU")
        return {"code": -11100022, "msg": "country mismatch"}

    cloud.route(STEP1_PATH, _authorize(), base_url=US)
    cloud.route(STEP2_PATH, step2, base_url=US)
    cloud.route(LEGACY_LOGIN_PATH, {"code": -11100022}, base_url=US)
    cloud.route(LEGACY_LOGIN_PATH, {"code": -11100022}, base_url=EU)

    default = AuthNegotiator(_config(region="US"), cloud)
    assert await default.negotiate() is None
    assert default.state is AuthState.FAILED
    assert AuthState.LEGACY_FALLBACK in default.transitions

    cloud.calls.clear()
    override = AuthNegotiator(_config(region="US", country_code="au"), cloud)
    session = await override.negotiate()

    assert session is not None
    assert session.country_code == "AU"
    assert session.region == "US"
    assert cloud.last(STEP1_PATH).body["userCountryCode"] == "US"
    assert cloud.last(STEP2_PATH).body["userCountryCode"] == "AU"
    assert LEGACY_LOGIN_PATH not in cloud.keys()


@pytest.mark.asyncio
async def test_step2_tries_reported_country_then_step1_country(cloud: Any) -> None:
    def step2(body: dict[str, Any]) -> dict[str, Any]:
        if body["userCountryCode"] == "US":
            return _token(country="US")
        return {"code": -11100022}

    cloud.route(STEP1_PATH, _authorize("CA"), base_url=US)
    cloud.route(STEP2_PATH, step2, base_url=US)
    negotiator = AuthNegotiator(_config(region="US"), cloud)

    session = await negotiator.negotiate()

    assert session is not None
    countries = [call.body["userCountryCode"] for call in cloud.calls if call.path == STEP2_PATH]
    assert countries == ["CA", "US"]


@pytest.mark.asyncio
async def test_step1_cross_region_redirect(cloud: Any) -> None:
    cloud.route(STEP1_PATH, {"code": -11260022, "result": {"currentRegion": "EU", "countryCode": "DE"}}, base_url=US)
    cloud.route(STEP1_PATH, _authorize("DE"), base_url=EU)
    cloud.route(STEP2_PATH, _token(country="DE"), base_url=EU)
    negotiator = AuthNegotiator(_config(), cloud)

    session = await negotiator.negotiate()

    assert session is not None
    assert session.region == "EU"
    assert session.api_base_url == EU
    assert session.country_code == "DE"
    assert [call.base_url for call in cloud.calls] == [US, EU, EU]


@pytest.mark.asyncio
async def test_step2_cross_region_retry_reuses_biz_token(cloud: Any) -> None:
    cloud.route(STEP1_PATH, _authorize("US"), base_url=US)
    cloud.route(
        STEP2_PATH,
        {"code": -11261022, "result": {"bizToken": "biz-2", "currentRegion": "EU", "countryCode": "FR"}},
        base_url=US,
    )
    cloud.route(STEP2_PATH, _token(country="FR"), base_url=EU)
    negotiator = AuthNegotiator(_config(), cloud)

    session = await negotiator.negotiate()

    assert session is not None
    assert session.region == "EU"
    retry = cloud.calls[-1]
    assert retry.base_url == EU
    assert retry.body["regionChange"] == "lastRegion"
    assert retry.body["bizToken"] == "biz-2"
    assert retry.body["userCountryCode"] == "FR"


@pytest.mark.asyncio
async def test_legacy_fallback_when_two_step_is_refused(cloud: Any) -> None:
    cloud.route(STEP1_PATH, {"code": -11012022, "msg": "app version too low"})
    cloud.route(LEGACY_LOGIN_PATH, _token("legacy-token"), base_url=US)
    negotiator = AuthNegotiator(_config(), cloud)

    session = await negotiator.negotiate()

    assert session is not None
    assert session.token == "legacy-token"
    assert session.auth_flow is AuthFlow.LEGACY
    assert AuthState.LEGACY_FALLBACK in negotiator.transitions
    assert cloud.last(LEGACY_LOGIN_PATH).body["method"] == "login"


@pytest.mark.asyncio
async def test_rejected_credentials_fail_without_raising(cloud: Any) -> None:
    cloud.route(STEP1_PATH, {"code": -11201129, "msg": "password incorrect"})
    negotiator = AuthNegotiator(_config(), cloud)

    assert await negotiator.negotiate() is None

    assert negotiator.state is AuthState.FAILED
    assert negotiator.session is None
    assert cloud.keys() == [STEP1_PATH]


@pytest.mark.asyncio
async def test_transport_fault_raises(cloud: Any) -> None:
    cloud.route(STEP1_PATH, ({"code": 0}, 502))
    negotiator = AuthNegotiator(_config(), cloud)

    with pytest.raises(VeSyncTransportError) as exc_info:
        await negotiator.negotiate()

    assert exc_info.value.status_code == 502
    assert negotiator.state is AuthState.FAILED


@pytest.mark.asyncio
async def test_renegotiation_replaces_session(cloud: Any) -> None:
    cloud.route(STEP1_PATH, _authorize("US"), base_url=US)
    cloud.route(STEP2_PATH, _token("token-1"), _token("token-2"), base_url=US)
    negotiator = AuthNegotiator(_config(region="US"), cloud)

    first = await negotiator.negotiate()
    second = await negotiator.negotiate()

    assert first is not None and second is not None
    assert first.token == "token-1"
    assert second.token == "token-2"
    assert negotiator.session is second
    assert negotiator.transitions[0] is AuthState.AUTHENTICATED
