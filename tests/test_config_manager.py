"""Tests for layered settings

Run with pytest from project root:
    pytest tests/test_config_manager.py -v
"""

import json

import pytest

from managers.config_manager import HARDCODED_DEFAULTS, ConfigManager, mask_secret
from models.errors import ConfigurationMissing


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "config.json"


class TestPrecedence:
    """Tests for runtime > file > env > hardcoded"""

    def test_hardcoded_default(self, config_file):
        """Test hardcoded defaults apply when nothing else is set"""
        config = ConfigManager(config_file=config_file, environ={})
        assert config.get("PINATA_ENDPOINT") == HARDCODED_DEFAULTS["PINATA_ENDPOINT"]
        assert config.get("GETGEMS_COLLECTION") is None

    def test_env_over_hardcoded(self, config_file):
        """Test environment variables override hardcoded defaults"""
        config = ConfigManager(config_file=config_file, environ={"HTTP_TIMEOUT": "12"})
        assert config.get_float("HTTP_TIMEOUT") == 12.0

    def test_file_over_env(self, config_file):
        """Test config file settings override the environment"""
        config_file.write_text(json.dumps({"settings": {"GETGEMS_COLLECTION": "EQfile"}}))
        config = ConfigManager(config_file=config_file, environ={"GETGEMS_COLLECTION": "EQenv"})
        assert config.get("GETGEMS_COLLECTION") == "EQfile"

    def test_runtime_over_file(self, config_file):
        """Test runtime overrides win over everything"""
        config_file.write_text(json.dumps({"settings": {"GETGEMS_COLLECTION": "EQfile"}}))
        config = ConfigManager(config_file=config_file, environ={})
        config.set_runtime({"GETGEMS_COLLECTION": "EQruntime"})
        assert config.get("GETGEMS_COLLECTION") == "EQruntime"

    def test_empty_values_fall_through(self, config_file):
        """Test empty strings do not mask lower layers"""
        config = ConfigManager(config_file=config_file, environ={"OWNER_ADDRESS": "EQenv"})
        config.set_runtime({"OWNER_ADDRESS": ""})
        assert config.get("OWNER_ADDRESS") == "EQenv"

    def test_corrupt_file_ignored(self, config_file):
        """Test an unreadable config file is treated as empty"""
        config_file.write_text("{not json")
        config = ConfigManager(config_file=config_file, environ={"OWNER_ADDRESS": "EQenv"})
        assert config.get("OWNER_ADDRESS") == "EQenv"


class TestRequire:
    """Tests for required settings"""

    def test_lists_every_missing_key(self, config_file):
        """Test ConfigurationMissing names all absent keys"""
        config = ConfigManager(config_file=config_file, environ={"OWNER_ADDRESS": "EQowner"})
        with pytest.raises(ConfigurationMissing) as exc_info:
            config.require("OWNER_ADDRESS", "GETGEMS_COLLECTION", "GETGEMS_AUTHORIZATION")
        assert exc_info.value.keys == ["GETGEMS_COLLECTION", "GETGEMS_AUTHORIZATION"]
        assert exc_info.value.to_dict()["error_code"] == "CONFIGURATION_MISSING"

    def test_returns_values(self, config_file):
        """Test require returns the requested values"""
        config = ConfigManager(config_file=config_file, environ={"OWNER_ADDRESS": "EQowner"})
        assert config.require("OWNER_ADDRESS") == {"OWNER_ADDRESS": "EQowner"}


class TestRuntimeAndPersist:
    """Tests for set_runtime, persist and describe"""

    def test_unknown_key_rejected(self, config_file):
        """Test unknown settings are refused"""
        config = ConfigManager(config_file=config_file, environ={})
        result = config.set_runtime({"NOT_A_SETTING": 1})
        assert result["success"] is False
        assert result["error_code"] == "UNKNOWN_SETTING"

    @pytest.mark.parametrize("value", ["abc", "0", -5, True, "nan"])
    def test_invalid_numeric_setting_rejected(self, config_file, value):
        """Test non-numeric or non-positive numeric settings leave the config unchanged"""
        config = ConfigManager(config_file=config_file, environ={})
        result = config.set_runtime({"HTTP_TIMEOUT": value, "GETGEMS_COLLECTION": "EQnew"})
        assert result["success"] is False
        assert result["error_code"] == "INVALID_SETTING"
        assert config.get("HTTP_TIMEOUT") == HARDCODED_DEFAULTS["HTTP_TIMEOUT"]
        assert config.get("GETGEMS_COLLECTION") is None

    def test_numeric_setting_accepted(self, config_file):
        """Test numeric text is accepted for numeric settings"""
        config = ConfigManager(config_file=config_file, environ={})
        assert config.set_runtime({"HTTP_TIMEOUT": "12.5", "NFT_MIN_BALANCE": "0.2"})["success"] is True
        assert config.get_float("HTTP_TIMEOUT") == 12.5

    def test_persist_writes_settings(self, config_file):
        """Test non-secret settings are written to the config file"""
        config = ConfigManager(config_file=config_file, environ={})
        result = config.persist({"GETGEMS_COLLECTION": "EQsaved"})
        assert result["success"] is True
        saved = json.loads(config_file.read_text())
        assert saved["settings"]["GETGEMS_COLLECTION"] == "EQsaved"
        assert ConfigManager(config_file=config_file, environ={}).get("GETGEMS_COLLECTION") == "EQsaved"

    def test_persist_refuses_secrets(self, config_file):
        """Test secrets are never written to disk"""
        config = ConfigManager(config_file=config_file, environ={})
        result = config.persist({"OWNER_MNEMONIC": "word " * 24})
        assert result["success"] is False
        assert result["error_code"] == "SECRET_NOT_PERSISTED"
        assert not config_file.exists()

    def test_describe_masks_secrets(self, config_file):
        """Test describe hides secret values and never shows the mnemonic"""
        mnemonic = " ".join(["abandon"] * 24)
        config = ConfigManager(
            config_file=config_file,
            environ={"OWNER_MNEMONIC": mnemonic, "PINATA_JWT": "eyJhbGciOiJIUzI1NiJ9.secret"},
        )
        info = config.describe()
        assert info["settings"]["OWNER_MNEMONIC"] == {"configured": True, "value": None}
        assert info["settings"]["PINATA_JWT"]["value"] == "eyJh...et"
        assert "abandon" not in json.dumps(info)

    def test_mask_secret_short(self):
        """Test short secrets are fully masked"""
        assert mask_secret("abc") == "****"
        assert mask_secret("") is None
