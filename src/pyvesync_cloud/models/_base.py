"""Base model and switch coercion shared by every VeSync payload model.

The cloud mixes camelCase keys (legacy REST, second-generation bypass
firmware) with snake_case keys (first-generation bypass firmware), and
uses ``""`` or ``"--"`` for readings a device does not report.
:class:`VeSyncBaseModel` accepts both key styles, drops those
placeholders and keeps the untouched payload in ``raw``.
"""

from __future__ import annotations

import math
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Placeholder strings the cloud uses for "not available".
_SENTINELS = frozenset({"", "--", "NaN", "nan"})


def parse_on_off(value: Any) -> bool | None:
    """Coerce the cloud's mixed switch encodings to a bool.

    Firmware reports switches as ``True``/``False``, ``1``/``0`` or
    ``"on"``/``"off"`` depending on the protocol generation.
    """
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"on", "true", "1", "open"}:
            return True
        if normalized in {"off", "false", "0", "close", "closed"}:
            return False
    raise ValueError(f"not an on/off value: {value!r}")


OnOff = Annotated[bool | None, BeforeValidator(parse_on_off)]
"""Annotated type accepting ``on``/``off``, ``1``/``0`` or booleans."""


def on_off(value: bool | None) -> str | None:
    """Render a switch state the way ``deviceStatus`` reports it."""
    if value is None:
        return None
    return "on" if value else "off"


def _is_placeholder(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() in _SENTINELS
    return isinstance(value, float) and math.isnan(value)


class VeSyncBaseModel(BaseModel):
    """Base for VeSync API payload models.

    Subclasses declare snake_case fields; camelCase keys resolve through
    the alias generator and snake_case keys through ``populate_by_name``.
    Placeholder values are removed before validation so a missing
    reading falls back to the field default.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    raw: dict[str, Any] = Field(default_factory=dict)
    """Payload exactly as received."""

    @model_validator(mode="before")
    @classmethod
    def _drop_placeholders(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        cleaned = {key: value for key, value in values.items() if not _is_placeholder(value)}
        cleaned.setdefault("raw", dict(values))
        return cleaned
