import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP

from getgems_client import GetgemsClient
from managers.config_manager import ConfigManager
from managers.mint_manager import MintDispatcher, MintManager, MintRequestBuilder, MintStatusTracker
from managers.publish_manager import PinataConfig, PublishManager
from managers.record_store import MintRecordStore
from managers.transaction_builder import TransactionBuilder
from managers.transfer_manager import TransferManager
from managers.wallet_session import WalletSession
from replicate_client import ReplicateGenerator
from toncenter_client import ToncenterClient
from tools.configuration import register_configuration_tools
from tools.mint import register_mint_tools
from tools.transfer import register_transfer_tools

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("MCP_Server")


class AppContext:
    """Process-scoped collaborators, built once from configuration.

    reload() rebuilds the clients after a settings change. The record store
    and the wallet session (which owns the per-wallet locks) survive reloads.
    """

    def __init__(self, config: ConfigManager):
        self.config = config
        self.record_store: Optional[MintRecordStore] = None
        self.wallet_session: Optional[WalletSession] = None
        self.reload()

    def reload(self):
        config = self.config
        timeout = config.get_float("HTTP_TIMEOUT")

        records_path = config.get("MINT_RECORDS_PATH")
        if self.record_store is None or str(self.record_store.path or "") != str(records_path or ""):
            self.record_store = MintRecordStore(records_path)

        getgems = GetgemsClient(
            collection=config.get("GETGEMS_COLLECTION"),
            authorization=config.get("GETGEMS_AUTHORIZATION"),
            base_url=config.get("GETGEMS_BASE"),
            timeout=timeout,
        )
        publisher = PublishManager(
            PinataConfig(
                api_key=config.get("PINATA_API_KEY"),
                secret_key=config.get("PINATA_SECRET_KEY"),
                jwt=config.get("PINATA_JWT"),
                endpoint=config.get("PINATA_ENDPOINT"),
                timeout=timeout,
            )
        )
        self.mint_manager = MintManager(
            config=config,
            generator=ReplicateGenerator(config.get("REPLICATE_API_TOKEN"), config.get("REPLICATE_MODEL")),
            publisher=publisher,
            builder=MintRequestBuilder(config.get("OWNER_ADDRESS")),
            dispatcher=MintDispatcher(getgems),
            tracker=MintStatusTracker(getgems),
            record_store=self.record_store,
        )

        rpc = ToncenterClient(
            endpoint=config.get("TONCENTER_ENDPOINT"),
            api_key=config.get("TONCENTER_API_KEY"),
            timeout=timeout,
        )
        if self.wallet_session is None:
            self.wallet_session = WalletSession(rpc)
        else:
            self.wallet_session.rpc = rpc
        self.transfer_manager = TransferManager(
            config=config,
            session=self.wallet_session,
            builder=TransactionBuilder(jetton_wallet=config.get("JETTON_WALLET")),
        )
        logger.info(f"Collaborators configured (collection={config.get('GETGEMS_COLLECTION') or 'unset'})")


app = AppContext(ConfigManager())


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Manage application lifecycle"""
    logger.info("Starting MCP server lifecycle...")
    try:
        yield app
    finally:
        logger.info("Shutting down MCP server")


# Initialize FastMCP with lifespan
mcp = FastMCP("TON_Mint_MCP_Server", lifespan=app_lifespan)

register_mint_tools(mcp, app)
register_transfer_tools(mcp, app)
register_configuration_tools(mcp, app)

if __name__ == "__main__":
    mcp.run(transport="streamable-http")
