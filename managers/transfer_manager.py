"""NFT and jetton transfers from the configured owner wallet"""

import logging
from typing import Any, Dict

from tonsdk.utils import to_nano

from managers.config_manager import ConfigManager
from managers.transaction_builder import TransactionBuilder
from managers.wallet_session import WalletSession
from models.transfer import TransferMessage, WalletHandle

logger = logging.getLogger("MCP_Server")


class TransferManager:
    """Runs one transfer at a time per wallet: build, check balance, read seqno, send"""

    def __init__(self, config: ConfigManager, session: WalletSession, builder: TransactionBuilder):
        self.config = config
        self.session = session
        self.builder = builder

    def _min_balance(self, key: str) -> int:
        return int(to_nano(self.config.get(key), "ton"))

    def derive_owner(self) -> WalletHandle:
        settings = self.config.require("OWNER_MNEMONIC")
        return self.session.derive(settings["OWNER_MNEMONIC"])

    def _submit(self, handle: WalletHandle, message: TransferMessage, min_balance_key: str) -> Dict[str, Any]:
        with self.session.exclusive(handle.friendly_address):
            balance = self.session.ensure_balance(handle, self._min_balance(min_balance_key))
            self.session.current_sequence(handle)
            receipt = self.session.send(handle, [message])
        result = receipt.to_dict()
        result["balance"] = balance
        return result

    def transfer_nft(self, nft_address: str, to_address: str) -> Dict[str, Any]:
        handle = self.derive_owner()
        message = self.builder.build_nft_transfer(
            new_owner=to_address,
            nft_address=nft_address,
            response_destination=handle.address,
        )
        logger.info(f"Transferring NFT {nft_address} from {handle.friendly_address} to {to_address}")

        result = self._submit(handle, message, "NFT_MIN_BALANCE")
        result.update({
            "success": True,
            "message": "NFT transfer submitted",
            "nftAddress": nft_address,
            "to": to_address,
        })
        return result

    def transfer_jetton(self, user_wallet: str, amount: int = 1) -> Dict[str, Any]:
        settings = self.config.require("OWNER_MNEMONIC", "JETTON_WALLET")
        handle = self.session.derive(settings["OWNER_MNEMONIC"])
        message = self.builder.build_fungible_transfer(
            amount=amount,
            recipient=user_wallet,
            response_destination=handle.address,
            jetton_wallet=settings["JETTON_WALLET"],
        )
        logger.info(f"Sending {amount} jetton(s) from {handle.friendly_address} to {user_wallet}")

        result = self._submit(handle, message, "JETTON_MIN_BALANCE")
        result.update({
            "success": True,
            "message": "Jetton transfer submitted",
            "userWallet": user_wallet,
            "amount": amount,
        })
        return result

    def wallet_info(self) -> Dict[str, Any]:
        handle = self.derive_owner()
        with self.session.exclusive(handle.friendly_address):
            balance = self.session.balance(handle)
            seqno = self.session.current_sequence(handle)
        info = handle.to_dict()
        info.update({"success": True, "balance": balance, "balanceTon": balance / 1e9, "sequenceNumber": seqno})
        return info
