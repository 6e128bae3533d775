"""Jetton and NFT transfer message construction (TEP-74 / TEP-62)"""

import logging
from typing import Any, Optional, Union

from tonsdk.boc import Cell
from tonsdk.utils import Address, to_nano

from models.errors import InvalidAddress
from models.transfer import JettonTransferBody, NftTransferBody, TransferMessage

logger = logging.getLogger("MCP_Server")

JETTON_TRANSFER_OPCODE = 0xF8A7EA5
NFT_TRANSFER_OPCODE = 0x5FCC3D14

TOKEN_DECIMALS = 9

# Gas attached to the internal message for the destination contract
JETTON_TRANSFER_VALUE = to_nano("0.05", "ton")
NFT_TRANSFER_VALUE = to_nano("0.1", "ton")


def parse_address(value: Union[str, Address, None]) -> Optional[Address]:
    """Parse user-friendly or raw address text; None stays None (addr_none)"""
    if value is None or isinstance(value, Address):
        return value
    try:
        return Address(value)
    except Exception as e:
        raise InvalidAddress(value) from e


def _require_address(value: Union[str, Address, None]) -> Address:
    address = parse_address(value)
    if address is None:
        raise InvalidAddress(value)
    return address


def _check_amount(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
    if value < 0:
        raise ValueError(f"{name} must be a non-negative integer, got {value}")
    return value


def scale_amount(whole_units: int, decimals: int = TOKEN_DECIMALS) -> int:
    """Convert whole token units to the smallest indivisible unit"""
    return _check_amount(whole_units, "amount") * 10 ** decimals


def _to_slice(payload: Union[Cell, bytes]):
    cell = Cell.one_from_boc(bytes(payload)) if isinstance(payload, (bytes, bytearray)) else payload
    return cell.begin_parse()


def _read_coins(cs) -> int:
    length = cs.read_uint(4)
    if length == 0:
        return 0
    return cs.read_uint(length * 8)


class TransactionBuilder:
    """Builds internal transfer messages with cell-encoded bodies.

    The builder does not check balances; that precondition belongs to the
    wallet session.
    """

    def __init__(self, jetton_wallet: Optional[str] = None, decimals: int = TOKEN_DECIMALS):
        self.jetton_wallet = jetton_wallet
        self.decimals = decimals

    def build_fungible_transfer(
        self,
        amount: int = 1,
        recipient: Union[str, Address, None] = None,
        response_destination: Union[str, Address, None] = None,
        jetton_wallet: Union[str, Address, None] = None,
        query_id: int = 0,
        forward_amount: int = 0,
        attached_value: int = JETTON_TRANSFER_VALUE,
    ) -> TransferMessage:
        """Build a jetton transfer sent to the sender's own jetton wallet.

        Args:
            amount: Whole token units, scaled by the token decimals (default: 1)
            recipient: Owner address that receives the jettons
            response_destination: Address that receives excess gas
            jetton_wallet: Sender's jetton wallet (default: the configured one)
            query_id: Response correlation id, not required to be unique
            forward_amount: nanoton forwarded with the transfer notification
            attached_value: nanoton attached to pay the jetton wallet's gas
        """
        raw_amount = scale_amount(amount, self.decimals)
        _check_amount(query_id, "query_id")
        _check_amount(forward_amount, "forward_amount")
        destination = _require_address(jetton_wallet or self.jetton_wallet)

        body = Cell()
        body.bits.write_uint(JETTON_TRANSFER_OPCODE, 32)
        body.bits.write_uint(query_id, 64)
        body.bits.write_coins(raw_amount)
        body.bits.write_address(_require_address(recipient))
        body.bits.write_address(parse_address(response_destination))
        body.bits.write_bit(0)  # no custom payload
        body.bits.write_coins(forward_amount)
        body.bits.write_bit(0)  # no forward payload

        logger.debug(f"Built jetton transfer of {raw_amount} units via {destination.to_string(True, True, True)}")
        return TransferMessage(destination=destination, attached_value=attached_value, payload=body, bounce=True)

    def build_nft_transfer(
        self,
        new_owner: Union[str, Address],
        nft_address: Union[str, Address],
        response_destination: Union[str, Address, None] = None,
        query_id: int = 0,
        forward_amount: int = 0,
        attached_value: int = NFT_TRANSFER_VALUE,
    ) -> TransferMessage:
        """Build an NFT ownership transfer sent to the NFT item contract"""
        _check_amount(query_id, "query_id")
        _check_amount(forward_amount, "forward_amount")

        body = Cell()
        body.bits.write_uint(NFT_TRANSFER_OPCODE, 32)
        body.bits.write_uint(query_id, 64)
        body.bits.write_address(_require_address(new_owner))
        body.bits.write_address(parse_address(response_destination))
        body.bits.write_bit(0)  # no custom payload
        body.bits.write_coins(forward_amount)
        body.bits.write_bit(0)  # no forward payload

        return TransferMessage(
            destination=_require_address(nft_address),
            attached_value=attached_value,
            payload=body,
            bounce=False,
        )


def decode_fungible_transfer(payload: Union[Cell, bytes]) -> JettonTransferBody:
    cs = _to_slice(payload)
    return JettonTransferBody(
        op=cs.read_uint(32),
        query_id=cs.read_uint(64),
        amount=_read_coins(cs),
        recipient=cs.read_msg_addr(),
        response_destination=cs.read_msg_addr(),
        has_custom_payload=bool(cs.read_bit()),
        forward_amount=_read_coins(cs),
        has_forward_payload=bool(cs.read_bit()),
    )


def decode_nft_transfer(payload: Union[Cell, bytes]) -> NftTransferBody:
    cs = _to_slice(payload)
    return NftTransferBody(
        op=cs.read_uint(32),
        query_id=cs.read_uint(64),
        new_owner=cs.read_msg_addr(),
        response_destination=cs.read_msg_addr(),
        has_custom_payload=bool(cs.read_bit()),
        forward_amount=_read_coins(cs),
        has_forward_payload=bool(cs.read_bit()),
    )
