"""Login reply models."""

from __future__ import annotations

from pydantic import AliasChoices, Field

from pyvesync_cloud.models._base import VeSyncBaseModel


class AuthorizeCode(VeSyncBaseModel):
    """Step 1 result: a short-lived authorize code.

    Parameters
    ----------
    authorize_code : str
        Code exchanged for a token in Step 2.
    biz_token : str or None
        Business token echoed back on a region-change retry.
    country_code : str or None
        Country the account is registered in, when the cloud reports it.
    """

    authorize_code: str
    biz_token: str | None = None
    country_code: str | None = None


class LoginResult(VeSyncBaseModel):
    """Step 2 (or legacy) result: the long-lived account token."""

    token: str
    account_id: str = Field(validation_alias=AliasChoices("accountID", "accountId", "account_id"))
    country_code: str | None = None
    accept_language: str | None = None


class RegionHint(VeSyncBaseModel):
    """Hints carried by a cross-region rejection."""

    current_region: str | None = None
    country_code: str | None = None
    biz_token: str | None = None
