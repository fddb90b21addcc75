from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from pyvesync_cloud._api._common import BYPASS_V2_PATH
from pyvesync_cloud.devices.device import VeSyncDevice
from pyvesync_cloud.exceptions import (
    VeSyncCommandUnconfirmedError,
    VeSyncFeatureNotSupportedError,
    VeSyncInvalidArgumentError,
    VeSyncTokenExpiredError,
)

MakeDevice = Callable[..., VeSyncDevice]


def _payload(cloud: Any, key: str) -> dict[str, Any]:
    return cloud.last(key).body["payload"]


# ------------------------------------------------------------------
# Local validation: nothing reaches the cloud
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_fan_speed_in_auto_mode_is_rejected_locally(cloud: Any, make_device: MakeDevice) -> None:
    device = make_device("Core300S", mode="auto")

    with pytest.raises(VeSyncFeatureNotSupportedError) as exc_info:
        await device.change_fan_speed(2)

    assert exc_info.value.mode == "auto"
    assert cloud.calls == []


@pytest.mark.asyncio
async def test_unknown_mode_is_invalid_argument(cloud: Any, make_device: MakeDevice) -> None:
    device = make_device("Core300S", mode="manual")

    with pytest.raises(VeSyncInvalidArgumentError):
        await device.set_mode("invalid-mode")

    assert device.mode == "manual"
    assert cloud.calls == []


@pytest.mark.asyncio
async def test_auto_mode_on_variant_without_it(cloud: Any, make_device: MakeDevice) -> None:
    device = make_device("Core200S", mode="manual")

    with pytest.raises(VeSyncInvalidArgumentError):
        await device.set_mode("auto")

    assert cloud.calls == []


@pytest.mark.asyncio
@pytest.mark.parametrize("level", [0, 4, True, 2.0])
async def test_fan_level_outside_range(cloud: Any, make_device: MakeDevice, level: Any) -> None:
    device = make_device("Core300S", mode="manual")

    with pytest.raises(VeSyncInvalidArgumentError):
        await device.change_fan_speed(level)

    assert cloud.calls == []


@pytest.mark.asyncio
async def test_warm_level_on_non_warm_humidifier(cloud: Any, make_device: MakeDevice) -> None:
    device = make_device("Classic300S", mode="manual")

    with pytest.raises(VeSyncFeatureNotSupportedError):
        await device.set_warm_level(2)

    assert cloud.calls == []


@pytest.mark.asyncio
async def test_outlet_night_light_has_no_dim(cloud: Any, make_device: MakeDevice) -> None:
    device = make_device("ESW15-USA")

    with pytest.raises(VeSyncInvalidArgumentError):
        await device.set_night_light("dim")

    assert cloud.calls == []


# ------------------------------------------------------------------
# Encoded commands
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_mode_switch_unlocks_fan_speed(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setPurifierMode", cloud.bypass_ok())
    cloud.route(f"{BYPASS_V2_PATH}#setLevel", cloud.bypass_ok())
    device = make_device("Core300S", mode="auto")

    assert await device.set_mode("manual") is True
    assert device.mode == "manual"
    assert await device.change_fan_speed(3) is True

    assert _payload(cloud, f"{BYPASS_V2_PATH}#setLevel")["data"] == {
        "id": 0,
        "level": 3,
        "mode": "manual",
        "type": "wind",
    }
    assert device.details["fan_level"] == 3


@pytest.mark.asyncio
async def test_bypass_envelope(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setSwitch", cloud.bypass_ok())
    device = make_device("Core300S", deviceStatus="off")

    assert await device.turn_on() is True

    call = cloud.last(f"{BYPASS_V2_PATH}#setSwitch")
    assert call.http_method == "post"
    assert call.base_url == "https://smartapi.vesync.com"
    assert call.headers["User-Agent"] == "okhttp/3.12.1"
    assert call.body is not None
    assert call.body["cid"] == "cid-Core300S"
    assert call.body["configModule"] == "module-Core300S"
    assert call.body["token"] == "token-1"
    assert call.body["accountID"] == "account-1"
    assert call.body["method"] == "bypassV2"
    assert call.body["payload"] == {"data": {"enabled": True, "id": 0}, "method": "setSwitch", "source": "APP"}
    assert device.is_on


@pytest.mark.asyncio
async def test_warm_level_on_warm_humidifier(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setLevel", cloud.bypass_ok())
    device = make_device("LUH-A601S-WUSB", mode="manual")

    assert await device.set_warm_level(2) is True

    assert _payload(cloud, f"{BYPASS_V2_PATH}#setLevel")["data"] == {"id": 0, "level": 2, "type": "warm"}
    assert device.details["warm_level"] == 2
    assert device.details["warm_enabled"] is True


@pytest.mark.asyncio
async def test_v2_purifier_uses_camel_case_switches(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setChildLockSwitch", cloud.bypass_ok())
    device = make_device("LAP-V201S-WUS", mode="manual")

    assert await device.set_child_lock(True) is True

    assert _payload(cloud, f"{BYPASS_V2_PATH}#setChildLockSwitch")["data"] == {"childLockSwitch": 1}


@pytest.mark.asyncio
async def test_7a_outlet_accepts_empty_reply(cloud: Any, make_device: MakeDevice) -> None:
    path = "/v1/wifi-switch-1.3/wifi-switch-1.3-cid-wifi-switch-1.3/status/off"
    cloud.route(path, (None, 200))
    device = make_device("wifi-switch-1.3")

    assert await device.turn_off() is True

    call = cloud.last(path)
    assert call.http_method == "put"
    assert call.body is None
    assert call.headers["tk"] == "token-1"
    assert device.device_status == "off"


@pytest.mark.asyncio
async def test_10a_outlet_legacy_body(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route("/10a/v1/device/devicestatus", cloud.legacy_ok())
    device = make_device("ESW01-EU")

    assert await device.turn_off() is True

    body = cloud.last("/10a/v1/device/devicestatus").body
    assert body["uuid"] == "uuid-ESW01-EU"
    assert body["status"] == "off"
    assert body["token"] == "token-1"
    assert body["timeZone"] == "America/New_York"


@pytest.mark.asyncio
async def test_outdoor_plug_addresses_its_socket(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route("/outdoorsocket15a/v1/device/devicestatus", cloud.legacy_ok())
    device = make_device("ESO15-TB", subDeviceNo=2)

    assert await device.turn_off() is True

    assert cloud.last("/outdoorsocket15a/v1/device/devicestatus").body["switchNo"] == 2


@pytest.mark.asyncio
async def test_hsv_bulb_color_is_converted(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route("/SmartBulb/v1/device/updateColor", cloud.legacy_ok())
    device = make_device("XYD0001")

    assert await device.set_rgb(255, 0, 0) is True

    body = cloud.last("/SmartBulb/v1/device/updateColor").body
    assert (body["hue"], body["saturation"], body["brightness"]) == ("0", "100", "100")
    assert body["uuid"] == "cid-XYD0001"
    assert device.details["color_mode"] == "color"


@pytest.mark.asyncio
async def test_timer_round_trip(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#addTimer", cloud.bypass_ok({"id": 42}))
    cloud.route(f"{BYPASS_V2_PATH}#deleteTimer", cloud.bypass_ok())
    device = make_device("Core300S", mode="manual")

    assert await device.clear_timer() is True
    assert cloud.calls == []

    assert await device.set_timer(2) is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#addTimer")["data"] == {"action": "off", "total": 7200}
    assert device.timer is not None
    assert device.timer.timer_id == 42

    assert await device.clear_timer() is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#deleteTimer")["data"] == {"id": 42}
    assert device.timer is None


# ------------------------------------------------------------------
# Remote outcomes
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_unrecognized_remote_code_returns_false(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setDisplay", cloud.bypass_error(-1))
    device = make_device("Core300S", mode="manual")
    before = device.state

    assert await device.set_display(False) is False
    assert device.state is before


@pytest.mark.asyncio
async def test_remote_mode_rejection_raises_feature_not_supported(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setDisplay", cloud.bypass_error(11018000))
    device = make_device("Core300S", mode="manual")

    with pytest.raises(VeSyncFeatureNotSupportedError) as exc_info:
        await device.set_display(True)

    assert exc_info.value.code == 11018000


@pytest.mark.asyncio
async def test_generic_remote_code_is_unconfirmed(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setDisplay", cloud.bypass_error(11000000))
    device = make_device("Core300S", mode="manual")
    before = device.state

    with pytest.raises(VeSyncCommandUnconfirmedError):
        await device.set_display(True)

    assert device.state is before


@pytest.mark.asyncio
async def test_token_error_propagates(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setSwitch", cloud.bypass_error(-11001000, outer=True))
    device = make_device("Core300S")

    with pytest.raises(VeSyncTokenExpiredError):
        await device.turn_off()


# ------------------------------------------------------------------
# camelCase humidifiers, night-light brightness
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_superior_6000s_uses_camel_case_payloads(cloud: Any, make_device: MakeDevice) -> None:
    for method in ("setSwitch", "setHumidityMode", "setTargetHumidity", "setVirtualLevel", "setDryingMode"):
        cloud.route(f"{BYPASS_V2_PATH}#{method}", cloud.bypass_ok())
    device = make_device("LEH-S601S-WUS", mode="manual", deviceStatus="off")

    assert await device.turn_on() is True
    assert await device.set_mode("auto") is True
    assert await device.set_humidity(50) is True
    assert await device.set_mist_level(4) is True
    assert await device.set_drying_mode(True) is True

    assert _payload(cloud, f"{BYPASS_V2_PATH}#setSwitch")["data"] == {"powerSwitch": 1, "switchIdx": 0}
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setHumidityMode")["data"] == {"workMode": "autoPro"}
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setTargetHumidity")["data"] == {"targetHumidity": 50}
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setVirtualLevel")["data"] == {
        "levelIdx": 0,
        "virtualLevel": 4,
        "levelType": "mist",
    }
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setDryingMode")["data"] == {"autoDryingSwitch": 1}
    assert device.is_on
    assert device.mode == "auto"
    assert device.details["target_humidity"] == 50


@pytest.mark.asyncio
async def test_superior_6000s_has_no_warm_mist(cloud: Any, make_device: MakeDevice) -> None:
    device = make_device("LEH-S601S-WUS", mode="manual")

    with pytest.raises(VeSyncFeatureNotSupportedError):
        await device.set_warm_level(1)

    assert cloud.calls == []


@pytest.mark.asyncio
async def test_oasismist_1000s_switches_and_night_light(cloud: Any, make_device: MakeDevice) -> None:
    for method in ("setSwitch", "setDisplay", "setAutoStopSwitch", "setNightLight"):
        cloud.route(f"{BYPASS_V2_PATH}#{method}", cloud.bypass_ok())
    device = make_device("LUH-M101S-WUS", mode="auto")

    assert await device.turn_off() is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setSwitch")["data"] == {"powerSwitch": 0, "switchIdx": 0}

    assert await device.set_display(False) is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setDisplay")["data"] == {"screenSwitch": 0}

    assert await device.set_automatic_stop(True) is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setAutoStopSwitch")["data"] == {"autoStopSwitch": 1}

    assert await device.set_night_light_brightness(70) is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setNightLight")["data"] == {
        "nightLightSwitch": 1,
        "nightLightBrightness": 70,
    }

    assert await device.set_night_light_brightness(0) is True
    assert _payload(cloud, f"{BYPASS_V2_PATH}#setNightLight")["data"] == {
        "nightLightSwitch": 0,
        "nightLightBrightness": 0,
    }
    assert device.details["night_light_brightness"] == 0


@pytest.mark.asyncio
async def test_warm_humidifier_night_light_brightness(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route(f"{BYPASS_V2_PATH}#setNightLight", cloud.bypass_ok())
    device = make_device("LUH-A602S-WUS", mode="manual")

    assert await device.set_night_light_brightness(60) is True

    assert _payload(cloud, f"{BYPASS_V2_PATH}#setNightLight")["data"] == {"brightness": 60}
    assert device.details["night_light_brightness"] == 60


@pytest.mark.asyncio
async def test_night_light_brightness_is_gated_and_validated(cloud: Any, make_device: MakeDevice) -> None:
    without = make_device("LUH-D301S-WEU", mode="manual")
    with pytest.raises(VeSyncFeatureNotSupportedError):
        await without.set_night_light_brightness(50)

    device = make_device("LUH-A602S-WUS", mode="manual")
    for value in (-1, 101, True):
        with pytest.raises(VeSyncInvalidArgumentError):
            await device.set_night_light_brightness(value)

    assert cloud.calls == []


# ------------------------------------------------------------------
# Energy, RGB ring, switch configuration
# ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_outlet_energy_history(cloud: Any, make_device: MakeDevice) -> None:
    path = "/v1/ESW01-EU/ESW01-EU-cid-ESW01-EU/energy/week"
    cloud.route(path, {"code": 0, "result": {"totalEnergy": 1.5, "data": [0.1, 0.2, 0.3]}})
    device = make_device("ESW01-EU")

    report = await device.get_energy("week")

    assert report == {"totalEnergy": 1.5, "data": [0.1, 0.2, 0.3]}
    assert device.energy == {"week": report}
    call = cloud.last(path)
    assert call.http_method == "get"
    assert call.body is None
    assert call.headers["tk"] == "token-1"


@pytest.mark.asyncio
async def test_rejected_energy_request_returns_none(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route("/v1/ESW15-USA/ESW15-USA-cid-ESW15-USA/energy/detail", {"code": -1, "msg": "nope"})
    device = make_device("ESW15-USA")

    assert await device.get_energy() is None
    assert device.energy == {}


@pytest.mark.asyncio
async def test_energy_is_outlet_only_and_period_checked(cloud: Any, make_device: MakeDevice) -> None:
    with pytest.raises(VeSyncFeatureNotSupportedError):
        await make_device("Core300S").get_energy()
    with pytest.raises(VeSyncInvalidArgumentError):
        await make_device("ESW01-EU").get_energy("day")

    assert cloud.calls == []


@pytest.mark.asyncio
async def test_dimmer_rgb_ring_off_keeps_colour(cloud: Any, make_device: MakeDevice) -> None:
    cloud.route("/dimmer/v1/device/devicergbstatus", cloud.legacy_ok())
    device = make_device("ESWD16")

    assert await device.set_rgb_ring(False) is True

    body = cloud.last("/dimmer/v1/device/devicergbstatus").body
    assert body["status"] == "off"
    assert "rgbValue" not in body
    assert device.details["rgb_status"] == "off"


@pytest.mark.asyncio
async def test_rgb_ring_requires_a_dimmer(cloud: Any, make_device: MakeDevice) -> None:
    with pytest.raises(VeSyncFeatureNotSupportedError):
        await make_device("ESL100MC").set_rgb_ring(False)

    assert cloud.calls == []


@pytest.mark.asyncio
async def test_switch_configuration(cloud: Any, make_device: MakeDevice) -> None:
    path = "/inwallswitch/v1/device/configurations"
    cloud.route(path, {"code": 0, "result": {"currentFirmVersion": "1.0.5", "deviceRegion": "US"}})
    device = make_device("ESWL01")

    config = await device.get_config()

    assert config == {"currentFirmVersion": "1.0.5", "deviceRegion": "US"}
    assert device.device_config == config
    body = cloud.last(path).body
    assert body["method"] == "configurations"
    assert body["uuid"] == "cid-ESWL01"


@pytest.mark.asyncio
async def test_configuration_is_switch_only(cloud: Any, make_device: MakeDevice) -> None:
    with pytest.raises(VeSyncFeatureNotSupportedError):
        await make_device("ESL100").get_config()

    assert cloud.calls == []
