"""Mint tools: generate, pin and mint NFTs, then track mint requests"""

import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from models.mint import MINT_STATUSES
from tools.helpers import guarded

logger = logging.getLogger("MCP_Server")


def register_mint_tools(mcp: FastMCP, app):
    """Register mint tools with the MCP server.

    ``app`` is the server's AppContext; managers are looked up on every call so
    that configuration changes made through set_config take effect.
    """

    @mcp.tool()
    def mint_nft(
        prompt: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        traits: Optional[List[Dict[str, Any]]] = None,
        model: Optional[str] = None,
    ) -> dict:
        """Generate an image, pin it to IPFS and submit a Getgems mint request.

        Args:
            prompt: Extra prompt text appended to the base prompt
            name: NFT name (default: "Beast #<timestamp>")
            description: NFT description
            traits: List of {"trait_type", "value", "display_type"?} attributes
            model: Replicate model identifier override

        Returns:
            requestId, IPFS URIs and the marketplace response. Marketplace
            rejection returns success=False with error_code MINT_REJECTED.
        """
        return guarded(
            "mint_nft",
            app.mint_manager.mint,
            prompt=prompt,
            name=name,
            description=description,
            traits=traits,
            model=model,
        )

    @mcp.tool()
    def get_mint_status(request_id: str) -> dict:
        """Check the marketplace state of a mint request and update its local record.

        Each call is a single check; poll again later for requests still in_queue.
        """
        return guarded("get_mint_status", app.mint_manager.check_status, request_id)

    @mcp.tool()
    def get_mint_record(request_id: str) -> dict:
        """Get the locally recorded state of a mint request."""
        record = app.record_store.get(request_id)
        if record is None:
            return {"success": False, "error": f"Mint record {request_id} not found", "error_code": "RECORD_NOT_FOUND"}
        return {"success": True, "record": record.to_dict()}

    @mcp.tool()
    def list_mint_records(status: Optional[str] = None) -> dict:
        """List recorded mint attempts, oldest first.

        Args:
            status: Optional filter: in_queue, minted or failed
        """
        if status is not None and status not in MINT_STATUSES:
            return {
                "success": False,
                "error": f"Unknown status {status!r}; expected one of {list(MINT_STATUSES)}",
                "error_code": "INVALID_ARGUMENT",
            }
        records = app.record_store.list_records(status=status)
        return {"success": True, "records": [r.to_dict() for r in records], "count": len(records)}
