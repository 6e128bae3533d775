"""Data models for the TON mint MCP server"""

from models.mint import (
    GenerationRequest,
    MintAccepted,
    MintRecord,
    MintRejected,
    MintRequest,
    MintStatus,
    MintStatusCheckFailed,
    PublishedAsset,
    Trait,
)
from models.transfer import SendReceipt, TransferMessage, WalletHandle

__all__ = [
    "GenerationRequest",
    "MintAccepted",
    "MintRecord",
    "MintRejected",
    "MintRequest",
    "MintStatus",
    "MintStatusCheckFailed",
    "PublishedAsset",
    "SendReceipt",
    "Trait",
    "TransferMessage",
    "WalletHandle",
]
