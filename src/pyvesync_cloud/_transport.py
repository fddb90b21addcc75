"""HTTP transport for the VeSync cloud API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyvesync_cloud._redact import loggable
from pyvesync_cloud.config import VeSyncConfig
from pyvesync_cloud.exceptions import VeSyncTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the auth and device layers.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`HttpTransport`) concrete.
    Implementations return the decoded JSON body (``None`` when the
    body is empty) together with the HTTP status code; status handling
    is left to the caller.
    """

    async def call_api(
        self,
        path: str,
        http_method: str,
        body: Mapping[str, Any] | None,
        headers: Mapping[str, str],
        *,
        base_url: str,
    ) -> tuple[Any, int]:
        ...


class HttpTransport:
    """aiohttp-backed transport sharing one ``ClientSession``."""

    def __init__(self, config: VeSyncConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)

    async def call_api(
        self,
        path: str,
        http_method: str,
        body: Mapping[str, Any] | None,
        headers: Mapping[str, str],
        *,
        base_url: str,
    ) -> tuple[Any, int]:
        method = http_method.upper()
        url = f"{base_url}{path}"

        if self._config.debug:
            _logger.debug(
                "%s %s headers=%s body=%s",
                method,
                url,
                loggable(dict(headers), redact=self._config.redact),
                loggable(body, redact=self._config.redact),
            )
        else:
            _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                json=dict(body) if body is not None else None,
                headers=dict(headers),
                timeout=self._timeout,
            ) as resp:
                status = resp.status
                text = await resp.text()
        except aiohttp.ClientError as exc:
            raise VeSyncTransportError(
                f"Request to {path} failed: {exc}",
                endpoint=path,
            ) from exc
        except TimeoutError as exc:
            raise VeSyncTransportError(
                f"Request to {path} timed out after {self._config.request_timeout}s",
                endpoint=path,
            ) from exc

        if not text.strip():
            _logger.debug("%s %s -> HTTP %s (empty body)", method, path, status)
            return None, status

        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise VeSyncTransportError(
                f"Invalid JSON from {path} (HTTP {status}): {text[:200]}",
                status_code=status,
                endpoint=path,
            ) from exc

        if self._config.debug:
            _logger.debug(
                "%s %s -> HTTP %s body=%s",
                method,
                path,
                status,
                loggable(payload, redact=self._config.redact),
            )
        return payload, status
