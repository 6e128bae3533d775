"""Wallet key derivation, seqno tracking and signed submission"""

import hashlib
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence, Union

from tonsdk.contract.wallet import WalletVersionEnum, Wallets

from models.errors import InsufficientBalance, InvalidMnemonic, MintServiceError, TransferSubmissionFailed, WalletStateError
from models.transfer import SendReceipt, TransferMessage, WalletHandle

logger = logging.getLogger("MCP_Server")

MIN_MNEMONIC_WORDS = 12


def split_mnemonic(words: Union[str, Sequence[str]]) -> List[str]:
    if isinstance(words, str):
        return words.split()
    return [w.strip() for w in words if w and w.strip()]


class WalletSession:
    """Signs and submits transfers for wallets derived from a mnemonic.

    Ready -> current_sequence() -> SequenceKnown -> send() -> Ready, or
    Faulted when a send fails. The seqno is always read from the chain and is
    consumed by exactly one send. Callers must hold ``exclusive(address)``
    across the read-then-send pair.
    """

    def __init__(self, rpc, version: WalletVersionEnum = WalletVersionEnum.v4r2, workchain: int = 0):
        self.rpc = rpc
        self.version = version
        self.workchain = workchain
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def derive(self, words: Union[str, Sequence[str]]) -> WalletHandle:
        """Derive the wallet handle for a mnemonic phrase.

        Raises:
            InvalidMnemonic: Fewer than 12 words or a phrase the wallet library rejects
        """
        mnemonic = split_mnemonic(words or [])
        if len(mnemonic) < MIN_MNEMONIC_WORDS:
            raise InvalidMnemonic(
                f"Mnemonic must have at least {MIN_MNEMONIC_WORDS} words, got {len(mnemonic)}"
            )
        try:
            _, public_key, secret_key, wallet = Wallets.from_mnemonics(mnemonic, self.version, self.workchain)
        except Exception as e:
            # The library's message may quote the phrase; keep only the type
            raise InvalidMnemonic(f"Mnemonic rejected by wallet derivation ({type(e).__name__})") from None

        handle = WalletHandle(
            address=wallet.address,
            public_key=bytes(public_key),
            secret_key=bytes(secret_key),
            wallet=wallet,
        )
        logger.info(f"Derived {self.version.value} wallet {handle.friendly_address}")
        return handle

    @contextmanager
    def exclusive(self, address: str) -> Iterator[None]:
        """Serialize read-seqno-then-send for one wallet address"""
        with self._locks_guard:
            lock = self._locks.setdefault(address, threading.Lock())
        with lock:
            yield

    def current_sequence(self, handle: WalletHandle) -> int:
        """Read the seqno fresh from the chain; never served from cache"""
        seqno = self.rpc.get_sequence(handle.friendly_address)
        handle.sequence_number = seqno
        handle.state = "sequence_known"
        return seqno

    def balance(self, handle: WalletHandle) -> int:
        return self.rpc.get_balance(handle.friendly_address)

    def ensure_balance(self, handle: WalletHandle, need: int) -> int:
        have = self.balance(handle)
        if have < need:
            logger.warning(f"Wallet {handle.friendly_address} has {have} nanoTON, needs {need}")
            raise InsufficientBalance(have=have, need=need)
        return have

    def send(
        self,
        handle: WalletHandle,
        messages: Union[TransferMessage, List[TransferMessage]],
        bounce_on_failure: Optional[bool] = None,
    ) -> SendReceipt:
        """Sign and submit one internal message with the seqno read last.

        Raises:
            WalletStateError: No fresh seqno on the handle, or not exactly one message
            TransferSubmissionFailed: Signing or submission failed; the on-chain
                seqno is unknown afterwards and must be re-read before a retry
        """
        if isinstance(messages, TransferMessage):
            messages = [messages]
        if len(messages) != 1:
            raise WalletStateError(f"Exactly one message per transaction is supported, got {len(messages)}")
        if handle.state != "sequence_known" or handle.sequence_number is None:
            raise WalletStateError(f"Wallet is {handle.state}; read the sequence number before sending")

        message = messages[0]
        bounce = message.bounce if bounce_on_failure is None else bounce_on_failure
        destination = message.destination.to_string(True, True, bounce)
        seqno = handle.sequence_number
        # The seqno is consumed whether or not the submission lands
        handle.sequence_number = None

        try:
            query = handle.wallet.create_transfer_message(
                to_addr=destination,
                amount=message.attached_value,
                seqno=seqno,
                payload=message.payload,
            )
            boc = bytes(query["message"].to_boc(False))
            self.rpc.submit(boc)
        except (MintServiceError, ValueError, TypeError, KeyError, AttributeError) as e:
            handle.state = "faulted"
            logger.error(f"Send from {handle.friendly_address} with seqno {seqno} failed: {e}")
            raise TransferSubmissionFailed(e) from e

        handle.state = "ready"
        receipt = SendReceipt(
            from_address=handle.friendly_address,
            destination=destination,
            sequence_number=seqno,
            boc_hash=hashlib.sha256(boc).hexdigest(),
        )
        logger.info(f"Submitted transfer {handle.friendly_address} -> {destination} (seqno {seqno})")
        return receipt

