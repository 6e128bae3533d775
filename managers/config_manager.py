"""Settings management for the mint and transfer services"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from models.errors import ConfigurationMissing

logger = logging.getLogger("MCP_Server")

# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "ton-mint-mcp"
CONFIG_FILE = CONFIG_DIR / "config.json"

SECRET_KEYS = frozenset({
    "REPLICATE_API_TOKEN",
    "PINATA_API_KEY",
    "PINATA_SECRET_KEY",
    "PINATA_JWT",
    "GETGEMS_AUTHORIZATION",
    "OWNER_MNEMONIC",
    "TONCENTER_API_KEY",
})

HARDCODED_DEFAULTS: Dict[str, Any] = {
    "REPLICATE_MODEL": "black-forest-labs/flux-1.1-pro",
    "PINATA_ENDPOINT": "https://api.pinata.cloud",
    "GETGEMS_BASE": "https://api.testnet.getgems.io/public-api",
    "TONCENTER_ENDPOINT": "https://testnet.toncenter.com/api/v2",
    "JETTON_WALLET": "kQDt1cugwBboev3AnobpMQOmuOLGj05e4_5NbUSMfq1sefoi",
    "MINT_RECORDS_PATH": str(CONFIG_DIR / "mint_records.json"),
    "HTTP_TIMEOUT": 30,
    "NFT_MIN_BALANCE": "0.1",
    "JETTON_MIN_BALANCE": "0.05",
}

KNOWN_KEYS = (
    "REPLICATE_API_TOKEN",
    "REPLICATE_MODEL",
    "PINATA_API_KEY",
    "PINATA_SECRET_KEY",
    "PINATA_JWT",
    "PINATA_ENDPOINT",
    "GETGEMS_BASE",
    "GETGEMS_COLLECTION",
    "GETGEMS_AUTHORIZATION",
    "OWNER_ADDRESS",
    "OWNER_MNEMONIC",
    "TONCENTER_ENDPOINT",
    "TONCENTER_API_KEY",
    "JETTON_WALLET",
    "MINT_RECORDS_PATH",
    "HTTP_TIMEOUT",
    "NFT_MIN_BALANCE",
    "JETTON_MIN_BALANCE",
)

NUMERIC_KEYS = ("HTTP_TIMEOUT", "NFT_MIN_BALANCE", "JETTON_MIN_BALANCE")


def _is_positive_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
        return number > 0 and number != float("inf")
    except (TypeError, ValueError):
        return False


def mask_secret(value: Any) -> Optional[str]:
    if value in (None, ""):
        return None
    text = str(value)
    if len(text) <= 8:
        return "****"
    return f"{text[:4]}...{text[-2:]}"


class ConfigManager:
    """Manages settings with precedence: runtime > config file > env > hardcoded"""

    def __init__(self, config_file: Path = CONFIG_FILE, environ: Optional[Dict[str, str]] = None):
        self.config_file = Path(config_file)
        self._environ = environ if environ is not None else os.environ
        self._runtime: Dict[str, Any] = {}
        self._file_settings = self._load_config_file()

    def _load_config_file(self) -> Dict[str, Any]:
        """Load settings from config file"""
        if not self.config_file.exists():
            return {}
        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
            settings = config.get("settings", {}) if isinstance(config, dict) else {}
            return settings if isinstance(settings, dict) else {}
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Failed to load config file {self.config_file}: {e}")
            return {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get a setting with precedence: runtime > config file > env > hardcoded"""
        if self._runtime.get(key) not in (None, ""):
            return self._runtime[key]
        if self._file_settings.get(key) not in (None, ""):
            return self._file_settings[key]
        env_value = self._environ.get(key)
        if env_value not in (None, ""):
            return env_value
        if key in HARDCODED_DEFAULTS:
            return HARDCODED_DEFAULTS[key]
        return default

    def get_float(self, key: str) -> float:
        return float(self.get(key))

    def require(self, *keys: str) -> Dict[str, Any]:
        """Return the requested settings, failing fast if any is absent"""
        values = {key: self.get(key) for key in keys}
        missing = [key for key, value in values.items() if value in (None, "")]
        if missing:
            raise ConfigurationMissing(missing)
        return values

    def set_runtime(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        unknown = [key for key in settings if key not in KNOWN_KEYS]
        if unknown:
            return {"success": False, "error": f"Unknown settings: {unknown}", "error_code": "UNKNOWN_SETTING"}
        invalid = [
            key for key in settings
            if key in NUMERIC_KEYS and settings[key] not in (None, "") and not _is_positive_number(settings[key])
        ]
        if invalid:
            return {
                "success": False,
                "error": f"Settings must be positive numbers: {invalid}",
                "error_code": "INVALID_SETTING",
            }
        self._runtime.update(settings)
        return {"success": True, "updated": sorted(settings)}

    def persist(self, settings: Dict[str, Any]) -> Dict[str, Any]:
        """Persist non-secret settings to the config file"""
        secrets = [key for key in settings if key in SECRET_KEYS]
        if secrets:
            return {
                "success": False,
                "error": f"Refusing to persist secrets: {secrets}. Use environment variables.",
                "error_code": "SECRET_NOT_PERSISTED",
            }

        self.config_file.parent.mkdir(parents=True, exist_ok=True)

        config: Dict[str, Any] = {}
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    config = json.load(f)
            except (json.JSONDecodeError, IOError):
                config = {}

        config.setdefault("settings", {}).update(settings)

        try:
            with open(self.config_file, "w", encoding="utf-8") as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            return {"success": False, "error": f"Failed to write config file: {e}", "error_code": "CONFIG_SAVE_FAILED"}

        self._file_settings = self._load_config_file()
        logger.info(f"Saved settings {sorted(settings)} to {self.config_file}")
        return {"success": True, "persisted": sorted(settings)}

    def describe(self) -> Dict[str, Any]:
        """Report effective settings with secrets masked"""
        settings = {}
        for key in KNOWN_KEYS:
            value = self.get(key)
            if key in SECRET_KEYS:
                masked = None if key == "OWNER_MNEMONIC" else mask_secret(value)
                settings[key] = {"configured": value not in (None, ""), "value": masked}
            else:
                settings[key] = {"configured": value not in (None, ""), "value": value}
        return {"config_file": str(self.config_file), "settings": settings}
