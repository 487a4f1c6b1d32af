"""Tests for the click command line interface."""
import json
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from cast_locator import __version__
from cast_locator.__main__ import cli
from cast_locator.exceptions import TransportError
from cast_locator.models.device import Device

URI = "http://10.0.0.5:8008/ssdp/device-desc.xml"


def test_version():
    result = CliRunner().invoke(cli, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_discover_lists_devices():
    found = [Device(device_uri=URI, friendly_name="Living Room TV")]
    with patch("cast_locator.__main__.DeviceLocator.locate_devices", new=AsyncMock(return_value=found)) as mock_locate:
        result = CliRunner().invoke(cli, ["discover", "--timeout", "0.5"])

    assert result.exit_code == 0
    assert "Living Room TV" in result.output
    assert URI in result.output
    mock_locate.assert_awaited_once_with(0.5)


def test_discover_json_output():
    found = [Device(device_uri=URI, friendly_name="Living Room TV")]
    with patch("cast_locator.__main__.DeviceLocator.locate_devices", new=AsyncMock(return_value=found)):
        result = CliRunner().invoke(cli, ["discover", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.output) == [{"device_uri": URI, "friendly_name": "Living Room TV"}]


def test_discover_nothing_found():
    with patch("cast_locator.__main__.DeviceLocator.locate_devices", new=AsyncMock(return_value=[])):
        result = CliRunner().invoke(cli, ["discover"])

    assert result.exit_code == 0
    assert "No devices found." in result.output


def test_discover_transport_error_exits_with_failure():
    with patch("cast_locator.__main__.DeviceLocator.locate_devices", new=AsyncMock(side_effect=TransportError("no multicast route"))):
        result = CliRunner().invoke(cli, ["discover"])

    assert result.exit_code == 1
    assert "no multicast route" in result.output


def test_config_show_reflects_file_and_overrides(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"discovery": {"timeout_seconds": 5}}))

    result = CliRunner().invoke(cli, ["-c", str(config_file), "--log-level", "debug", "config-show"])

    assert result.exit_code == 0
    shown = json.loads(result.output)
    assert shown["discovery"]["timeout_seconds"] == 5.0
    assert shown["logging"]["level"] == "DEBUG"


def test_invalid_config_file_exits(tmp_path):
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps({"discovery": {"multicast_ttl": 0}}))

    result = CliRunner().invoke(cli, ["-c", str(config_file), "version"])

    assert result.exit_code == 1
    assert "Error loading configuration" in result.output
