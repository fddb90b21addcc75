"""Authentication negotiator.

The cloud serves accounts from two regional endpoints and speaks two
login protocols.  :class:`AuthNegotiator` walks the resulting search
space and produces a :class:`~pyvesync_cloud.session.Session`:

``UNAUTHENTICATED -> AWAITING_STEP1 -> AWAITING_STEP2 -> AUTHENTICATED``

with an escape edge to ``LEGACY_FALLBACK`` when the two-step flow is
rejected at the protocol level, and a terminal ``FAILED`` state.

Credential rejection ends in ``FAILED`` and is reported as ``None``;
only transport-level faults raise.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from pyvesync_cloud._api._common import bypass_headers
from pyvesync_cloud._api.login import (
    LEGACY_LOGIN_PATH,
    STEP1_PATH,
    STEP2_PATH,
    build_legacy_login_request,
    build_step1_request,
    build_step2_request,
    parse_authorize_code,
    parse_login_result,
    parse_region_hint,
    read_login_reply,
)
from pyvesync_cloud._constants import (
    API_BASE_URLS,
    APP_VERSION_TOO_LOW_CODES,
    CREDENTIAL_ERROR_CODES,
    CROSS_REGION_CODES,
    MAX_REGION_REDIRECTS,
    REGION_DEFAULT_COUNTRY,
    REGION_ORDER,
)
from pyvesync_cloud._transport import Transport
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.exceptions import VeSyncTransportError
from pyvesync_cloud.models.token import AuthorizeCode, LoginResult, RegionHint
from pyvesync_cloud.session import AuthFlow, Session

_logger = logging.getLogger(__name__)


class AuthState(enum.StrEnum):
    """Negotiator states."""

    UNAUTHENTICATED = "unauthenticated"
    AWAITING_STEP1 = "awaiting_step1"
    AWAITING_STEP2 = "awaiting_step2"
    LEGACY_FALLBACK = "legacy_fallback"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class AuthNegotiator:
    """Establish a session across region, country code and protocol uncertainty.

    Parameters
    ----------
    config : VeSyncConfig
        Credentials plus the optional ``region`` and ``country_code``
        declarations.  Declared values are tried first; undeclared axes
        are searched (US endpoint first, then EU).
    transport : Transport
        HTTP collaborator.
    """

    def __init__(self, config: VeSyncConfig, transport: Transport) -> None:
        self._config = config
        self._transport = transport
        self._state = AuthState.UNAUTHENTICATED
        self._session: Session | None = None
        self.transitions: list[AuthState] = [AuthState.UNAUTHENTICATED]

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def session(self) -> Session | None:
        """Session from the last successful negotiation, ``None`` after a failure."""
        return self._session

    def _enter(self, state: AuthState) -> None:
        if state is not self._state:
            _logger.debug("Auth state %s -> %s", self._state, state)
        self._state = state
        self.transitions.append(state)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def negotiate(self) -> Session | None:
        """Run the full negotiation.

        Safe to call while authenticated: the whole search runs again
        and the previous session is replaced only by a complete new
        one.

        Returns
        -------
        Session or None
            ``None`` when the credentials were rejected or every
            region/protocol combination failed.

        Raises
        ------
        VeSyncTransportError
            Network failure, non-200 status or undecodable body.
        """
        self._session = None
        self.transitions = [self._state]
        try:
            session = await self._two_step()
            if session is None and self._state is not AuthState.FAILED:
                self._enter(AuthState.LEGACY_FALLBACK)
                session = await self._legacy()
        except VeSyncTransportError:
            self._enter(AuthState.FAILED)
            raise

        if session is None:
            if self._state is not AuthState.FAILED:
                self._enter(AuthState.FAILED)
            _logger.warning("Login failed for all regions and protocols")
            return None

        self._session = session
        self._enter(AuthState.AUTHENTICATED)
        _logger.debug(
            "Authenticated via %s (region=%s, country=%s)",
            session.auth_flow,
            session.region,
            session.country_code,
        )
        return session

    # ------------------------------------------------------------------
    # Search space helpers
    # ------------------------------------------------------------------

    def _regions(self) -> list[str]:
        if self._config.region:
            return [self._config.region]
        return list(REGION_ORDER)

    def _step2_countries(self, step1_country: str, auth: AuthorizeCode) -> list[str]:
        if self._config.country_code:
            return [self._config.country_code]
        candidates = [auth.country_code.upper() if auth.country_code else None, step1_country]
        ordered: list[str] = []
        for country in candidates:
            if country and country not in ordered:
                ordered.append(country)
        return ordered

    @staticmethod
    def _redirect_region(region: str, hint: RegionHint) -> str:
        target = (hint.current_region or "").upper()
        if target in API_BASE_URLS and target != region:
            return target
        return next(r for r in REGION_ORDER if r != region)

    async def _post(self, region: str, path: str, body: Mapping[str, Any]) -> tuple[int | None, dict[str, Any]]:
        response, status = await self._transport.call_api(
            path,
            "post",
            body,
            bypass_headers(),
            base_url=API_BASE_URLS[region],
        )
        return read_login_reply(path, response, status)

    def _rejected_credentials(self, path: str, code: int | None) -> bool:
        if code in CREDENTIAL_ERROR_CODES:
            _logger.warning("Credentials rejected by %s (code=%s)", path, code)
            self._enter(AuthState.FAILED)
            return True
        return False

    def _build_session(self, login: LoginResult, region: str, country: str, flow: AuthFlow) -> Session:
        return Session.from_token(
            login.token,
            account_id=login.account_id,
            country_code=(login.country_code or country).upper(),
            region=region,
            api_base_url=API_BASE_URLS[region],
            auth_flow=flow,
        )

    # ------------------------------------------------------------------
    # Two-step flow
    # ------------------------------------------------------------------

    async def _two_step(self) -> Session | None:
        pending: deque[tuple[str, str]] = deque(
            (region, REGION_DEFAULT_COUNTRY[region]) for region in self._regions()
        )
        tried: set[tuple[str, str]] = set()
        redirects = 0

        while pending:
            region, country = pending.popleft()
            if (region, country) in tried:
                continue
            tried.add((region, country))

            self._enter(AuthState.AWAITING_STEP1)
            body = build_step1_request(self._config, country_code=country)
            code, result = await self._post(region, STEP1_PATH, body)

            if self._rejected_credentials(STEP1_PATH, code):
                return None
            if code in CROSS_REGION_CODES:
                hint = parse_region_hint(result)
                if redirects < MAX_REGION_REDIRECTS:
                    redirects += 1
                    target = self._redirect_region(region, hint)
                    target_country = (hint.country_code or REGION_DEFAULT_COUNTRY[target]).upper()
                    _logger.debug("Step 1 redirected from %s to %s", region, target)
                    pending.appendleft((target, target_country))
                continue
            if code != 0:
                if code in APP_VERSION_TOO_LOW_CODES:
                    _logger.debug("Step 1 rejected the app version (code=%s)", code)
                else:
                    _logger.debug("Step 1 failed in %s (code=%s)", region, code)
                continue

            try:
                auth = parse_authorize_code(result)
            except ValidationError:
                _logger.debug("Step 1 reply in %s carries no authorize code", region)
                continue

            session = await self._step2(region, country, auth)
            if session is not None or self._state is AuthState.FAILED:
                return session
        return None

    async def _step2(self, region: str, step1_country: str, auth: AuthorizeCode) -> Session | None:
        pending: deque[tuple[str, str, bool]] = deque(
            (region, country, False) for country in self._step2_countries(step1_country, auth)
        )
        biz_token = auth.biz_token
        hops = 0

        while pending:
            target_region, country, region_change = pending.popleft()
            self._enter(AuthState.AWAITING_STEP2)
            body = build_step2_request(
                self._config,
                authorize_code=auth.authorize_code,
                biz_token=biz_token,
                country_code=country,
                region_change=region_change,
            )
            code, result = await self._post(target_region, STEP2_PATH, body)

            if code == 0:
                try:
                    login = parse_login_result(result)
                except ValidationError:
                    _logger.debug("Step 2 reply in %s carries no token", target_region)
                    continue
                return self._build_session(login, target_region, country, AuthFlow.TWO_STEP)

            if self._rejected_credentials(STEP2_PATH, code):
                return None
            if code in CROSS_REGION_CODES and hops < MAX_REGION_REDIRECTS:
                hops += 1
                hint = parse_region_hint(result)
                biz_token = hint.biz_token or biz_token
                next_region = self._redirect_region(target_region, hint)
                next_country = (hint.country_code or country).upper()
                _logger.debug("Step 2 redirected from %s to %s (%s)", target_region, next_region, next_country)
                pending.appendleft((next_region, next_country, True))
                continue
            _logger.debug("Step 2 failed in %s with country %s (code=%s)", target_region, country, code)
        return None

    # ------------------------------------------------------------------
    # Legacy flow
    # ------------------------------------------------------------------

    async def _legacy(self) -> Session | None:
        declared = self._regions()
        regions = declared + [r for r in REGION_ORDER if r not in declared]
        for region in regions:
            body = build_legacy_login_request(self._config)
            code, result = await self._post(region, LEGACY_LOGIN_PATH, body)
            if code == 0:
                try:
                    login = parse_login_result(result)
                except ValidationError:
                    _logger.debug("Legacy login reply in %s carries no token", region)
                    continue
                country = self._config.country_code or REGION_DEFAULT_COUNTRY[region]
                return self._build_session(login, region, country, AuthFlow.LEGACY)
            if self._rejected_credentials(LEGACY_LOGIN_PATH, code):
                return None
            _logger.debug("Legacy login failed in %s (code=%s)", region, code)
        return None
