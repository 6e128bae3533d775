"""Configuration tools for the mint MCP server"""

import logging
from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

logger = logging.getLogger("MCP_Server")


def register_configuration_tools(mcp: FastMCP, app):
    """Register configuration tools with the MCP server"""

    @mcp.tool()
    def get_config_info() -> dict:
        """Get effective settings and whether each one is configured.

        Secret values are masked; the wallet mnemonic is never shown.
        """
        info = app.config.describe()
        info["success"] = True
        return info

    @mcp.tool()
    def set_config(settings: Dict[str, Any], persist: bool = False) -> dict:
        """Set runtime settings, e.g. {"GETGEMS_COLLECTION": "EQ...", "HTTP_TIMEOUT": 60}.

        Args:
            settings: Mapping of setting name to value
            persist: If True, also write the settings to the config file
                (~/.config/ton-mint-mcp/config.json). Secrets are never persisted.

        Returns:
            Success status and the updated keys.
        """
        result = app.config.set_runtime(settings)
        if not result.get("success"):
            return result

        app.reload()
        logger.info(f"Updated settings {result['updated']}")

        if persist:
            persist_result = app.config.persist(settings)
            if not persist_result.get("success"):
                # Runtime values stay applied
                persist_result["updated"] = result["updated"]
                return persist_result
            result["persisted"] = persist_result["persisted"]
        return result
