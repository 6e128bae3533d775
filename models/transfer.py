"""Wallet and transfer message models"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from tonsdk.boc import Cell
from tonsdk.utils import Address

WALLET_STATES = ("ready", "sequence_known", "faulted")


@dataclass
class WalletHandle:
    """Signing material and sequence state for one wallet.

    The secret key is excluded from repr and from to_dict and is never
    persisted. sequence_number holds the seqno read for the next send and is
    cleared once that send consumes it.
    """
    address: Address
    public_key: bytes
    secret_key: bytes = field(repr=False)
    wallet: Any = field(repr=False, default=None)
    sequence_number: Optional[int] = None
    state: str = "ready"

    @property
    def friendly_address(self) -> str:
        return self.address.to_string(True, True, True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.friendly_address,
            "publicKey": self.public_key.hex(),
            "sequenceNumber": self.sequence_number,
            "state": self.state,
        }


@dataclass
class TransferMessage:
    """Internal message from the signing wallet to a token or NFT contract"""
    destination: Address
    attached_value: int  # nanoton forwarded to pay the destination's gas
    payload: Cell
    bounce: bool

    def payload_boc(self) -> bytes:
        return bytes(self.payload.to_boc(False))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "to": self.destination.to_string(True, True, self.bounce),
            "value": self.attached_value,
            "bounce": self.bounce,
        }


@dataclass
class JettonTransferBody:
    op: int
    query_id: int
    amount: int
    recipient: Optional[Address]
    response_destination: Optional[Address]
    has_custom_payload: bool
    forward_amount: int
    has_forward_payload: bool


@dataclass
class NftTransferBody:
    op: int
    query_id: int
    new_owner: Optional[Address]
    response_destination: Optional[Address]
    has_custom_payload: bool
    forward_amount: int
    has_forward_payload: bool


@dataclass
class SendReceipt:
    from_address: str
    destination: str
    sequence_number: int
    boc_hash: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fromWallet": self.from_address,
            "destination": self.destination,
            "seqno": self.sequence_number,
            "bocHash": self.boc_hash,
        }
