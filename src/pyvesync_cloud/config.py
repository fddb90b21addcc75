"""Client configuration for pyvesync_cloud."""

from __future__ import annotations

import dataclasses
import logging
import os
import re
import uuid
from typing import Any

from pyvesync_cloud._constants import API_BASE_URLS, DEFAULT_TZ
from pyvesync_cloud.exceptions import VeSyncConfigError

_logger = logging.getLogger(__name__)

_TZ_INVALID_CHARS = re.compile(r"[^a-zA-Z/_]")


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _new_terminal_id() -> str:
    return "2" + uuid.uuid4().hex


@dataclasses.dataclass(frozen=True)
class VeSyncConfig:
    """Client configuration.

    Parameters
    ----------
    username : str
        VeSync account email.
    password : str
        VeSync account password (hashed with MD5 before sending).
    region : str or None
        ``"US"`` or ``"EU"``. ``None`` leaves the region undeclared and
        the login search tries both endpoints, US first.
    country_code : str or None
        Explicit country code for login Step 2. Needed for accounts
        whose registered country differs from the endpoint default
        (e.g. ``"AU"`` accounts on the US endpoint).
    time_zone : str
        IANA time zone string. Values containing characters outside
        ``[a-zA-Z/_]`` fall back to ``America/New_York``.
    debug : bool
        Log request and response bodies at DEBUG level.
    redact : bool
        Redact secrets from bodies logged under ``debug``.
    update_interval : float
        Minimum seconds between two fleet refreshes in
        :meth:`VeSyncClient.update`.
    request_timeout : float
        Total per-request timeout in seconds.
    reauth_on_token_error : bool
        Re-login once and re-issue the call when the cloud reports an
        expired token.  Off by default.
    terminal_id : str
        Terminal identifier sent with both login steps.
    """

    username: str
    password: str
    region: str | None = None
    country_code: str | None = None
    time_zone: str = DEFAULT_TZ
    debug: bool = False
    redact: bool = True
    update_interval: float = 30.0
    request_timeout: float = 30.0
    reauth_on_token_error: bool = False
    terminal_id: str = dataclasses.field(default_factory=_new_terminal_id)

    def __post_init__(self) -> None:
        if self.region is not None:
            region = self.region.strip().upper()
            if region not in API_BASE_URLS:
                raise VeSyncConfigError(
                    f"region must be one of {sorted(API_BASE_URLS)}, got {self.region!r}"
                )
            object.__setattr__(self, "region", region)

        if self.country_code is not None:
            country = self.country_code.strip().upper()
            object.__setattr__(self, "country_code", country or None)

        tz = (self.time_zone or "").strip()
        if not tz or _TZ_INVALID_CHARS.search(tz):
            _logger.debug("Invalid time zone %r, using %s", self.time_zone, DEFAULT_TZ)
            tz = DEFAULT_TZ
        object.__setattr__(self, "time_zone", tz)

        if self.update_interval < 0:
            raise VeSyncConfigError("update_interval must not be negative")

    @classmethod
    def from_env(cls, **overrides: Any) -> VeSyncConfig:
        """Create configuration from environment variables.

        Reads ``VESYNC_USERNAME``, ``VESYNC_PASSWORD``, and optional
        ``VESYNC_*`` variables. Explicit keyword arguments override
        environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        VeSyncConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "VESYNC_USERNAME": "username",
            "VESYNC_PASSWORD": "password",
            "VESYNC_REGION": "region",
            "VESYNC_COUNTRY_CODE": "country_code",
            "VESYNC_TIME_ZONE": "time_zone",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        if "debug" not in overrides:
            config_kwargs["debug"] = _env_bool(env.get("VESYNC_DEBUG"), False)
        if "redact" not in overrides:
            config_kwargs["redact"] = _env_bool(env.get("VESYNC_REDACT"), True)
        if "reauth_on_token_error" not in overrides:
            config_kwargs["reauth_on_token_error"] = _env_bool(
                env.get("VESYNC_REAUTH_ON_TOKEN_ERROR"),
                False,
            )

        interval_env = env.get("VESYNC_UPDATE_INTERVAL")
        if interval_env is not None and "update_interval" not in overrides:
            config_kwargs["update_interval"] = float(interval_env)

        config_kwargs.update(overrides)

        missing = [name for name in ("username", "password") if not config_kwargs.get(name)]
        if missing:
            raise VeSyncConfigError(f"Missing configuration: {', '.join(missing)}")

        return cls(**config_kwargs)
