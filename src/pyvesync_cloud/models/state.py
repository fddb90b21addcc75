"""Last-known device state snapshot."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TimerInfo(BaseModel):
    """Countdown timer reported by, or set on, a device."""

    model_config = ConfigDict(frozen=True)

    timer_id: int | None = None
    action: str = "off"
    duration: int = 0
    """Total countdown in seconds."""
    remaining: int | None = None


class DeviceState(BaseModel):
    """Immutable telemetry snapshot owned by one device instance.

    A poll builds a complete new snapshot and swaps it in, so a
    malformed reply can never leave old and new fields mixed.
    Commands derive their optimistic update with :meth:`evolve`.

    Parameters
    ----------
    device_status : str
        ``"on"`` or ``"off"``.
    connection_status : str
        ``"online"`` or ``"offline"`` as reported by the cloud.
    mode : str or None
        Current operating mode for variants that have modes.
    details : dict
        Family-specific telemetry (fan level, humidity, filter life, ...).
    timer : TimerInfo or None
        Active countdown timer, if any.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    device_status: str = "off"
    connection_status: str = "online"
    mode: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)
    timer: TimerInfo | None = None

    @property
    def is_on(self) -> bool:
        return self.device_status == "on"

    def evolve(self, *, details: dict[str, Any] | None = None, **fields: Any) -> DeviceState:
        """Return a copy with *fields* replaced and *details* merged in."""
        update: dict[str, Any] = dict(fields)
        if details:
            update["details"] = {**self.details, **details}
        return self.model_copy(update=update)

    def as_dict(self) -> dict[str, Any]:
        """JSON-serialisable view used by ``display_json``."""
        return self.model_dump(mode="json")
