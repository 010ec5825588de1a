"""
Configuration Tests
===================
"""

import pytest
from pydantic import ValidationError

from freed_bridge.config import Settings, load_config
from freed_bridge.main import apply_cli_overrides, parse_args


class TestLoadConfig:
    """Tests for defaults, YAML and environment precedence."""
    
    def test_defaults(self, clean_env, tmp_path):
        clean_env.chdir(tmp_path)
        settings = load_config()
        assert settings.osc.host == "224.0.0.0"
        assert settings.osc.port == 7000
        assert settings.osc.address == "/camera"
        assert settings.serial.device == "/dev/ttyUSB_Serial"
        assert settings.serial.baudrate == 38400
        assert settings.serial.parity == "O"
        assert settings.serial.stopbits == 1
        assert settings.connection.reconnect_delay_seconds == 1.0
        assert settings.debug is False
    
    def test_yaml_file(self, clean_env, tmp_path):
        path = tmp_path / "bridge.yaml"
        path.write_text(
            "osc:\n"
            "  host: 10.0.0.5\n"
            "  port: 9000\n"
            "serial:\n"
            "  device: /dev/ttyS1\n"
            "dispatch:\n"
            "  workers: 2\n"
        )
        settings = load_config(str(path))
        assert settings.osc.host == "10.0.0.5"
        assert settings.osc.port == 9000
        assert settings.osc.address == "/camera"
        assert settings.serial.device == "/dev/ttyS1"
        assert settings.dispatch.workers == 2
    
    def test_env_overrides_yaml(self, clean_env, tmp_path):
        path = tmp_path / "bridge.yaml"
        path.write_text("osc:\n  port: 9000\n")
        clean_env.setenv("FREED_OSC_PORT", "9100")
        clean_env.setenv("FREED_DEVICE", "/dev/ttyACM0")
        clean_env.setenv("FREED_DEBUG", "true")
        clean_env.setenv("FREED_RECONNECT_DELAY", "2.5")
        
        settings = load_config(str(path))
        assert settings.osc.port == 9100
        assert settings.serial.device == "/dev/ttyACM0"
        assert settings.debug is True
        assert settings.connection.reconnect_delay_seconds == 2.5
    
    def test_invalid_address(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"osc": {"address": "camera"}})
    
    def test_invalid_port(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"osc": {"port": 0}})
    
    def test_invalid_stopbits(self):
        with pytest.raises(ValidationError):
            Settings.model_validate({"serial": {"stopbits": 3}})


class TestCliOverrides:
    """Tests for command-line flags."""
    
    def test_flags_win(self):
        args = parse_args([
            "--osc_host", "127.0.0.1",
            "--osc_port", "8000",
            "--osc_addr", "/cam/2",
            "--device", "/dev/ttyUSB1",
            "--debug",
        ])
        settings = apply_cli_overrides(Settings(), args)
        assert settings.osc.host == "127.0.0.1"
        assert settings.osc.port == 8000
        assert settings.osc.address == "/cam/2"
        assert settings.serial.device == "/dev/ttyUSB1"
        assert settings.debug is True
    
    def test_no_flags_keeps_settings(self):
        base = Settings.model_validate({"osc": {"port": 9001}})
        settings = apply_cli_overrides(base, parse_args([]))
        assert settings == base
