import base64
import logging
from typing import Any, Dict, Optional

import requests

from models.errors import ChainRpcError

logger = logging.getLogger("ToncenterClient")

DEFAULT_ENDPOINT = "https://testnet.toncenter.com/api/v2"


class ToncenterClient:
    """Minimal toncenter HTTP API v2 client: seqno, balance and BOC submission"""

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        api_key: Optional[str] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.endpoint = (endpoint or DEFAULT_ENDPOINT).rstrip("/")
        # jsonRPC endpoints from older configs map onto the REST base
        if self.endpoint.endswith("/jsonRPC"):
            self.endpoint = self.endpoint[: -len("/jsonRPC")]
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self) -> Dict[str, str]:
        headers = {"accept": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        return headers

    def _result(self, method: str, response: requests.Response) -> Any:
        try:
            body = response.json()
        except ValueError:
            body = None

        if not response.ok or not isinstance(body, dict) or not body.get("ok", False):
            error = body.get("error") if isinstance(body, dict) else None
            logger.error(f"toncenter {method} failed with {response.status_code}: {error or response.text[:300]}")
            raise ChainRpcError(
                f"toncenter {method} failed ({response.status_code}): {error or 'unexpected response'}",
                status_code=response.status_code,
                body=response.text,
            )
        return body.get("result")

    def _get(self, method: str, params: Dict[str, Any]) -> Any:
        try:
            response = self.session.get(
                f"{self.endpoint}/{method}", params=params, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ChainRpcError(f"toncenter {method} request failed: {e}") from e
        return self._result(method, response)

    def get_sequence(self, address: str) -> int:
        """Current wallet seqno; an uninitialized wallet reports 0"""
        info = self._get("getWalletInformation", {"address": address}) or {}
        seqno = int(info.get("seqno") or 0)
        logger.info(f"Current seqno for {address}: {seqno}")
        return seqno

    def get_balance(self, address: str) -> int:
        """Balance in nanoton"""
        balance = int(self._get("getAddressBalance", {"address": address}) or 0)
        logger.info(f"Wallet balance for {address}: {balance} nanoTON ({balance / 1e9:.4f} TON)")
        return balance

    def submit(self, boc: bytes) -> Any:
        """Submit a serialized external message"""
        payload = {"boc": base64.b64encode(boc).decode("ascii")}
        try:
            response = self.session.post(
                f"{self.endpoint}/sendBoc", json=payload, headers=self._headers(), timeout=self.timeout
            )
        except requests.RequestException as e:
            raise ChainRpcError(f"toncenter sendBoc request failed: {e}") from e
        return self._result("sendBoc", response)
