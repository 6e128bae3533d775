"""Manager classes for the TON mint MCP server"""

from managers.config_manager import ConfigManager
from managers.mint_manager import MintDispatcher, MintManager, MintRequestBuilder, MintStatusTracker
from managers.publish_manager import PinataConfig, PublishManager
from managers.record_store import MintRecordStore
from managers.transaction_builder import TransactionBuilder
from managers.transfer_manager import TransferManager
from managers.wallet_session import WalletSession

__all__ = [
    "ConfigManager",
    "MintDispatcher",
    "MintManager",
    "MintRecordStore",
    "MintRequestBuilder",
    "MintStatusTracker",
    "PinataConfig",
    "PublishManager",
    "TransactionBuilder",
    "TransferManager",
    "WalletSession",
]
