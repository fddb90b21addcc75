"""Device instance: one physical unit behind the cloud API."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, Protocol

from pyvesync_cloud._api._common import ApiCall
from pyvesync_cloud.devices import _humidifiers, _lights, _outlets, _purifiers
from pyvesync_cloud.devices._protocol import Command, DeviceRef, FamilyProtocol
from pyvesync_cloud.devices.capabilities import has_feature, is_feature_supported_in_current_mode
from pyvesync_cloud.devices.registry import DeviceVariant, resolve
from pyvesync_cloud.exceptions import (
    VeSyncApiError,
    VeSyncAuthenticationError,
    VeSyncCommandUnconfirmedError,
    VeSyncFeatureNotSupportedError,
    VeSyncInvalidArgumentError,
    VeSyncStaleDataError,
    VeSyncUnrecognizedDeviceError,
)
from pyvesync_cloud.models.device import DeviceCategory, DeviceFamily, Feature
from pyvesync_cloud.models.device_record import DeviceRecord
from pyvesync_cloud.models.state import DeviceState, TimerInfo

_logger = logging.getLogger(__name__)

_PROTOCOLS: Mapping[DeviceFamily, FamilyProtocol] = {
    DeviceFamily.AIR_BYPASS: _purifiers.AIR_BYPASS,
    DeviceFamily.AIR_BASE_V2: _purifiers.AIR_BASE_V2,
    DeviceFamily.AIR_131: _purifiers.AIR_131,
    DeviceFamily.TOWER_FAN: _purifiers.TOWER_FAN,
    DeviceFamily.HUMIDIFIER: _humidifiers.HUMIDIFIER,
    DeviceFamily.WARM_HUMIDIFIER: _humidifiers.WARM_HUMIDIFIER,
    DeviceFamily.HUMID_1000S: _humidifiers.HUMID_1000S,
    DeviceFamily.SUPERIOR_6000S: _humidifiers.SUPERIOR_6000S,
    DeviceFamily.OUTLET_7A: _outlets.OUTLET_7A,
    DeviceFamily.OUTLET_10A: _outlets.OUTLET_10A,
    DeviceFamily.OUTLET_15A: _outlets.OUTLET_15A,
    DeviceFamily.WALL_SWITCH: _lights.WALL_SWITCH,
    DeviceFamily.DIMMER_SWITCH: _lights.DIMMER_SWITCH,
    DeviceFamily.BULB: _lights.BULB,
}

TIMER_HOURS = range(1, 25)
BRIGHTNESS_RANGE = range(1, 101)
COLOR_TEMP_RANGE = range(0, 101)
RGB_RANGE = range(0, 256)
AUTO_PREFERENCES = ("default", "efficient", "quiet")
NIGHT_LIGHT_BRIGHTNESS_RANGE = range(0, 101)
ENERGY_PERIODS = ("detail", "week", "month", "year")


def protocol_for(ref: DeviceRef) -> FamilyProtocol:
    """Dispatch table for the family of *ref*."""
    if ref.variant.family is DeviceFamily.OUTDOOR_PLUG:
        return _outlets.outdoor_plug(ref)
    return _PROTOCOLS[ref.variant.family]


class CommandExecutor(Protocol):
    """What a device needs from its owner: run one call with a live session."""

    async def execute(self, call: ApiCall, *, device: VeSyncDevice) -> Any:
        ...


class VeSyncDevice:
    """One device from the account's device list.

    Behaviour is selected by the :class:`DeviceVariant` resolved from the
    device type; every gated command checks the capability matrix
    against the current mode before anything is sent.

    Command methods return ``True`` when the cloud accepted the command
    and ``False`` when it rejected it with an unrecognized code.  Local
    validation failures, mode-gated or remotely unsupported features,
    authentication failures, unconfirmed outcomes and transport failures
    are raised.
    """

    def __init__(
        self,
        record: DeviceRecord,
        variant: DeviceVariant,
        executor: CommandExecutor,
        *,
        device_id: str | None = None,
    ) -> None:
        cid = record.identifier or ""
        self._record = record
        self._variant = variant
        self._executor = executor
        self._device_id = device_id or cid
        self._ref = DeviceRef(
            cid=cid,
            uuid=record.uuid or cid,
            device_type=record.device_type,
            config_module=record.config_module,
            variant=variant,
            sub_device_no=record.sub_device_no,
        )
        self._protocol = protocol_for(self._ref)
        self._state = DeviceState(
            device_status=record.device_status or "off",
            connection_status=record.connection_status or "online",
            mode=record.mode,
        )
        self._energy: dict[str, dict[str, Any]] = {}
        self._device_config: dict[str, Any] = {}

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(device_id={self._device_id!r}, "
            f"device_type={self.device_type!r}, device_name={self.device_name!r})"
        )

    # ------------------------------------------------------------------
    # Identity and state
    # ------------------------------------------------------------------

    @property
    def device_id(self) -> str:
        """Fleet key: the ``cid`` (suffixed with ``#<socket>`` for outdoor plug sockets)."""
        return self._device_id

    @property
    def cid(self) -> str:
        return self._ref.cid

    @property
    def uuid(self) -> str:
        return self._ref.uuid

    @property
    def device_type(self) -> str:
        return self._ref.device_type

    @property
    def config_module(self) -> str:
        return self._ref.config_module

    @property
    def device_name(self) -> str:
        return self._record.device_name

    @property
    def record(self) -> DeviceRecord:
        """Device-list entry this instance was created from."""
        return self._record

    @property
    def variant(self) -> DeviceVariant:
        return self._variant

    @property
    def category(self) -> DeviceCategory:
        return self._variant.category

    @property
    def family(self) -> DeviceFamily:
        return self._variant.family

    @property
    def state(self) -> DeviceState:
        """Current immutable snapshot."""
        return self._state

    @property
    def device_status(self) -> str:
        return self._state.device_status

    @property
    def connection_status(self) -> str:
        return self._state.connection_status

    @property
    def mode(self) -> str | None:
        return self._state.mode

    @property
    def details(self) -> dict[str, Any]:
        return dict(self._state.details)

    @property
    def timer(self) -> TimerInfo | None:
        return self._state.timer

    @property
    def is_on(self) -> bool:
        return self._state.is_on

    @property
    def energy(self) -> dict[str, dict[str, Any]]:
        """Energy reports fetched so far, keyed by period."""
        return dict(self._energy)

    @property
    def device_config(self) -> dict[str, Any]:
        """Last reply of :meth:`get_config` (firmware version, region, ...)."""
        return dict(self._device_config)

    def has_feature(self, feature: Feature | str) -> bool:
        """Whether the hardware ever supports *feature*."""
        return has_feature(self._variant, feature)

    def supports(self, feature: Feature | str) -> bool:
        """Whether *feature* is usable in the current mode."""
        return is_feature_supported_in_current_mode(self._variant, self._state.mode, feature)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require(self, feature: Feature) -> None:
        if not has_feature(self._variant, feature):
            raise VeSyncFeatureNotSupportedError(
                f"{self.device_type} does not support {feature}",
                feature=str(feature),
            )
        if not is_feature_supported_in_current_mode(self._variant, self._state.mode, feature):
            raise VeSyncFeatureNotSupportedError(
                f"{self.device_type} cannot use {feature} in {self._state.mode!r} mode",
                feature=str(feature),
                mode=self._state.mode,
            )

    @staticmethod
    def _check_choice(name: str, value: Any, allowed: Any) -> None:
        if isinstance(value, (bool, float)) or value not in allowed:
            shown = list(allowed)
            raise VeSyncInvalidArgumentError(f"{name} must be one of {shown}, got {value!r}")

    def _build(self, command: Command, *args: Any) -> ApiCall:
        call = self._protocol.build(command, self._ref, *args)
        if call is None:
            raise VeSyncFeatureNotSupportedError(
                f"{self.device_type} has no {command} command",
                feature=str(command),
            )
        return call

    async def _send(self, command: Command, *args: Any, **update: Any) -> bool:
        """Issue *command*; on acceptance evolve the state with *update*."""
        call = self._build(command, *args)
        result = await self._dispatch(call, command)
        if result is None:
            return False
        self._state = self._state.evolve(**update)
        return True

    async def _dispatch(self, call: ApiCall, command: Command) -> Any:
        try:
            result = await self._executor.execute(call, device=self)
        except (VeSyncAuthenticationError, VeSyncFeatureNotSupportedError):
            raise
        except VeSyncApiError as exc:
            _logger.warning("%s: %s rejected (code=%s)", self.device_name, command, exc.code)
            return None
        return result if result is not None else {}

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    async def get_details(self) -> bool:
        """Poll telemetry and swap in a complete new snapshot.

        Returns ``False`` (state untouched) when the cloud rejects the
        poll or the reply cannot be parsed.  Authentication and
        transport failures are raised.
        """
        call = self._protocol.details(self._ref)
        try:
            payload = await self._executor.execute(call, device=self)
        except VeSyncAuthenticationError:
            raise
        except (VeSyncApiError, VeSyncCommandUnconfirmedError) as exc:
            _logger.warning("%s: detail poll failed: %s", self.device_name, exc)
            return False

        try:
            state = self._protocol.parse(payload, self._state)
        except ValueError as exc:
            _logger.warning("%s: malformed detail reply: %s", self.device_name, exc)
            return False

        self._state = state
        _logger.debug("%s: details updated status=%s mode=%s", self.device_name, state.device_status, state.mode)
        return True

    async def update(self) -> bool:
        """Alias of :meth:`get_details`."""
        return await self.get_details()

    async def wait_for(
        self,
        predicate: Callable[[DeviceState], bool],
        *,
        attempts: int = 5,
        interval: float = 1.0,
        backoff: float = 2.0,
    ) -> DeviceState:
        """Poll until *predicate* holds for the device state.

        The cloud is eventually consistent: right after an accepted
        command a poll may still return the old state.  Each attempt
        calls :meth:`get_details`; the wait between attempts starts at
        *interval* seconds and is multiplied by *backoff*.

        Raises
        ------
        VeSyncStaleDataError
            The predicate never held within *attempts* polls.
        """
        if attempts < 1:
            raise VeSyncInvalidArgumentError("attempts must be at least 1")
        delay = interval
        for attempt in range(1, attempts + 1):
            if await self.get_details() and predicate(self._state):
                return self._state
            _logger.debug("%s: state not converged (attempt %d/%d)", self.device_name, attempt, attempts)
            if attempt < attempts and delay > 0:
                await asyncio.sleep(delay)
                delay *= backoff
        raise VeSyncStaleDataError(
            f"{self.device_name}: state did not converge after {attempts} polls",
            attempts=attempts,
        )

    # ------------------------------------------------------------------
    # Power and mode
    # ------------------------------------------------------------------

    async def toggle(self, on: bool) -> bool:
        """Switch the device on or off."""
        _logger.info("Turning %s %s", "on" if on else "off", self.device_name)
        return await self._send(Command.POWER, on, device_status="on" if on else "off")

    async def turn_on(self) -> bool:
        return await self.toggle(True)

    async def turn_off(self) -> bool:
        return await self.toggle(False)

    async def set_mode(self, mode: str) -> bool:
        """Switch the operating mode (one of ``variant.modes``)."""
        if not self._variant.modes:
            raise VeSyncFeatureNotSupportedError(f"{self.device_type} has no modes", feature="mode")
        self._check_choice("mode", mode, self._variant.modes)
        return await self._send(Command.MODE, mode, self._state.details.get("fan_level"), mode=mode)

    # ------------------------------------------------------------------
    # Fan, mist, warm, humidity
    # ------------------------------------------------------------------

    async def change_fan_speed(self, level: int) -> bool:
        self._require(Feature.FAN_SPEED)
        self._check_choice("fan level", level, self._variant.fan_levels)
        return await self._send(Command.FAN_SPEED, level, details={"fan_level": level})

    async def set_mist_level(self, level: int) -> bool:
        self._require(Feature.MIST)
        self._check_choice("mist level", level, self._variant.mist_levels)
        return await self._send(Command.MIST_LEVEL, level, details={"mist_level": level})

    async def set_warm_level(self, level: int) -> bool:
        self._require(Feature.WARM)
        self._check_choice("warm level", level, self._variant.warm_levels)
        return await self._send(Command.WARM_LEVEL, level, details={"warm_level": level, "warm_enabled": True})

    async def set_humidity(self, humidity: int) -> bool:
        """Set the target relative humidity in percent."""
        self._require(Feature.HUMIDITY)
        low, high = self._variant.humidity_range or (0, 100)
        self._check_choice("humidity", humidity, range(low, high + 1))
        return await self._send(Command.HUMIDITY, humidity, details={"target_humidity": humidity})

    # ------------------------------------------------------------------
    # Switch-like features
    # ------------------------------------------------------------------

    async def set_display(self, on: bool) -> bool:
        self._require(Feature.DISPLAY)
        return await self._send(Command.DISPLAY, bool(on), details={"display": bool(on)})

    async def set_child_lock(self, on: bool) -> bool:
        self._require(Feature.CHILD_LOCK)
        return await self._send(Command.CHILD_LOCK, bool(on), details={"child_lock": bool(on)})

    async def set_night_light(self, value: str | bool) -> bool:
        """Set the night light: ``on``/``off``, or ``dim`` on purifiers."""
        self._require(Feature.NIGHT_LIGHT)
        if isinstance(value, bool):
            value = "on" if value else "off"
        allowed = ("on", "off") if self.category is DeviceCategory.OUTLETS else ("on", "off", "dim")
        self._check_choice("night light", value, allowed)
        return await self._send(Command.NIGHT_LIGHT, value, details={"night_light": value})

    async def set_night_light_brightness(self, brightness: int) -> bool:
        """Set humidifier night-light brightness (0-100, 0 is off)."""
        self._require(Feature.NIGHT_LIGHT_BRIGHTNESS)
        self._check_choice("night light brightness", brightness, NIGHT_LIGHT_BRIGHTNESS_RANGE)
        return await self._send(
            Command.NIGHT_LIGHT_BRIGHTNESS,
            brightness,
            details={"night_light_brightness": brightness},
        )

    async def set_automatic_stop(self, on: bool) -> bool:
        self._require(Feature.AUTO_STOP)
        return await self._send(Command.AUTO_STOP, bool(on), details={"automatic_stop": bool(on)})

    async def set_drying_mode(self, on: bool) -> bool:
        self._require(Feature.DRYING)
        return await self._send(Command.DRYING, bool(on), details={"drying_mode": bool(on)})

    async def set_light_detection(self, on: bool) -> bool:
        self._require(Feature.LIGHT_DETECTION)
        return await self._send(Command.LIGHT_DETECTION, bool(on), details={"light_detection": bool(on)})

    async def set_auto_preference(self, preference: str = "default", room_size: int = 600) -> bool:
        """Tune auto mode (``default``, ``efficient`` or ``quiet``) for a room size in sq ft."""
        self._require(Feature.AUTO_PREFERENCE)
        self._check_choice("auto preference", preference, AUTO_PREFERENCES)
        if isinstance(room_size, bool) or not isinstance(room_size, int) or room_size <= 0:
            raise VeSyncInvalidArgumentError(f"room_size must be a positive integer, got {room_size!r}")
        return await self._send(
            Command.AUTO_PREFERENCE,
            preference,
            room_size,
            details={"auto_preference": preference, "room_size": room_size},
        )

    async def set_oscillation(self, on: bool) -> bool:
        self._require(Feature.OSCILLATION)
        return await self._send(Command.OSCILLATION, bool(on), details={"oscillation": bool(on)})

    async def set_indicator_light(self, on: bool) -> bool:
        self._require(Feature.INDICATOR_LIGHT)
        return await self._send(
            Command.INDICATOR_LIGHT,
            bool(on),
            details={"indicator_light": "on" if on else "off"},
        )

    # ------------------------------------------------------------------
    # Timer
    # ------------------------------------------------------------------

    async def set_timer(self, hours: int) -> bool:
        """Turn the device off after *hours* (1-24)."""
        self._require(Feature.TIMER)
        self._check_choice("timer hours", hours, TIMER_HOURS)
        call = self._build(Command.TIMER_SET, hours)
        result = await self._dispatch(call, Command.TIMER_SET)
        if result is None:
            return False
        timer_id = result.get("id") if isinstance(result, Mapping) else None
        timer = TimerInfo(timer_id=timer_id, action="off", duration=hours * 3600, remaining=hours * 3600)
        self._state = self._state.evolve(timer=timer)
        return True

    async def clear_timer(self) -> bool:
        """Cancel the active timer; a no-op when none is known."""
        self._require(Feature.TIMER)
        timer = self._state.timer
        if timer is None:
            _logger.debug("%s: no timer to clear", self.device_name)
            return True
        return await self._send(Command.TIMER_CLEAR, timer.timer_id, timer=None)

    # ------------------------------------------------------------------
    # Lighting
    # ------------------------------------------------------------------

    async def set_brightness(self, brightness: int) -> bool:
        self._require(Feature.DIMMABLE)
        self._check_choice("brightness", brightness, BRIGHTNESS_RANGE)
        return await self._send(Command.BRIGHTNESS, brightness, details={"brightness": brightness})

    async def set_color_temp(self, color_temp: int) -> bool:
        self._require(Feature.COLOR_TEMP)
        self._check_choice("color temperature", color_temp, COLOR_TEMP_RANGE)
        return await self._send(
            Command.COLOR_TEMP,
            color_temp,
            details={"color_temp": color_temp, "color_mode": "white"},
        )

    async def set_rgb(self, red: int, green: int, blue: int) -> bool:
        self._require(Feature.RGB_SHIFT)
        for name, value in (("red", red), ("green", green), ("blue", blue)):
            self._check_choice(name, value, RGB_RANGE)
        return await self._send(
            Command.COLOR,
            red,
            green,
            blue,
            details={"rgb": [red, green, blue], "color_mode": "color"},
        )

    async def set_white_mode(self) -> bool:
        self._require(Feature.RGB_SHIFT)
        return await self._send(Command.WHITE_MODE, details={"color_mode": "white"})

    async def set_rgb_ring(self, on: bool) -> bool:
        """Switch the dimmer's RGB ring on (last colour) or off."""
        self._require(Feature.RGB_RING)
        return await self._send(Command.RGB_RING, bool(on), details={"rgb_status": "on" if on else "off"})

    # ------------------------------------------------------------------
    # Energy and configuration
    # ------------------------------------------------------------------

    async def get_energy(self, period: str = "detail") -> dict[str, Any] | None:
        """Fetch outlet energy usage for *period*.

        Parameters
        ----------
        period : str
            ``detail`` (today/week/month/year totals) or one of
            ``week``, ``month``, ``year`` for the per-day history.

        Returns
        -------
        dict or None
            The reported figures, also kept in :attr:`energy`; ``None``
            when the cloud rejected the request.
        """
        self._require(Feature.ENERGY)
        self._check_choice("energy period", period, ENERGY_PERIODS)
        result = await self._dispatch(self._build(Command.ENERGY, period), Command.ENERGY)
        if result is None:
            return None
        report = dict(result)
        self._energy = {**self._energy, period: report}
        return report

    async def get_config(self) -> dict[str, Any] | None:
        """Fetch the switch's configuration record, or ``None`` if rejected."""
        result = await self._dispatch(self._build(Command.CONFIG), Command.CONFIG)
        if result is None:
            return None
        self._device_config = dict(result)
        return self.device_config

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def display(self) -> dict[str, Any]:
        """JSON-serialisable snapshot of identity and last-known state."""
        return {
            "device_id": self._device_id,
            "cid": self.cid,
            "device_name": self.device_name,
            "device_type": self.device_type,
            "category": str(self.category),
            "family": str(self.family),
            **self._state.as_dict(),
        }

    def display_json(self) -> str:
        return json.dumps(self.display(), sort_keys=True)


def create_device(
    record: DeviceRecord,
    executor: CommandExecutor,
    *,
    device_id: str | None = None,
) -> VeSyncDevice:
    """Instantiate the device described by *record*.

    Raises
    ------
    VeSyncUnrecognizedDeviceError
        The device type has no registry entry.
    """
    variant = resolve(record.device_type)
    if variant is None:
        raise VeSyncUnrecognizedDeviceError(
            f"Unrecognized device type {record.device_type!r}",
            device_type=record.device_type,
        )
    return VeSyncDevice(record, variant, executor, device_id=device_id)
