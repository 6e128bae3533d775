"""Transfer tools: move NFTs and jettons from the owner wallet"""

from typing import Any

from mcp.server.fastmcp import FastMCP

from tools.helpers import guarded


def register_transfer_tools(mcp: FastMCP, app):
    """Register wallet and transfer tools with the MCP server"""

    @mcp.tool()
    def transfer_nft(to_address: str, nft_address: str) -> dict:
        """Transfer an NFT owned by the configured wallet to another address.

        Requires at least NFT_MIN_BALANCE TON on the owner wallet for gas.
        A failed submission is never retried automatically.
        """
        return guarded("transfer_nft", app.transfer_manager.transfer_nft, nft_address, to_address)

    @mcp.tool()
    def send_jetton(user_wallet: str, amount: Any = 1) -> dict:
        """Send jettons from the configured jetton wallet.

        Args:
            user_wallet: Recipient owner address
            amount: Whole token units (default: 1), scaled by 10^9
        """
        if isinstance(amount, str) and amount.strip().isdigit():
            amount = int(amount)
        return guarded("send_jetton", app.transfer_manager.transfer_jetton, user_wallet, amount)

    @mcp.tool()
    def get_wallet_info() -> dict:
        """Get the owner wallet's address, balance and current seqno. Keys are never returned."""
        return guarded("get_wallet_info", app.transfer_manager.wallet_info)
