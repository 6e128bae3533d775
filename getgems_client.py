import json
import logging
from typing import Any, Dict, Optional, Tuple

import requests

from models.errors import MarketplaceUnavailable

logger = logging.getLogger("GetgemsClient")

DEFAULT_BASE_URL = "https://api.testnet.getgems.io/public-api"


def parse_body(text: str) -> Dict[str, Any]:
    """Parse a response body as JSON, wrapping anything else as {"raw": text}"""
    try:
        parsed = json.loads(text)
    except (TypeError, ValueError):
        return {"raw": text}
    return parsed if isinstance(parsed, dict) else {"raw": parsed}


class GetgemsClient:
    """Collection-scoped client for the Getgems public minting API"""

    def __init__(
        self,
        collection: str,
        authorization: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
    ):
        self.collection = collection
        self.authorization = authorization
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {"accept": "application/json", "authorization": self.authorization}
        if with_body:
            headers["content-type"] = "application/json"
        return headers

    def minting_url(self, request_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/minting/{self.collection}"
        if request_id:
            url = f"{url}/{request_id}"
        return url

    def post_mint(self, payload: Dict[str, Any]) -> Tuple[int, str]:
        """Submit a mint request; returns (status_code, body text)"""
        logger.info(f"Submitting mint request {payload.get('requestId')} to collection {self.collection}")
        try:
            response = self.session.post(
                self.minting_url(),
                headers=self._headers(with_body=True),
                data=json.dumps(payload),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MarketplaceUnavailable(f"GetGems API error: {e}") from e
        logger.info(f"Mint request {payload.get('requestId')} answered {response.status_code}")
        return response.status_code, response.text

    def get_mint(self, request_id: str) -> Tuple[int, str]:
        """Read the state of a mint request; returns (status_code, body text)"""
        try:
            response = self.session.get(
                self.minting_url(request_id),
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise MarketplaceUnavailable(f"GetGems API error: {e}") from e
        logger.info(f"Status check for {request_id} answered {response.status_code}")
        return response.status_code, response.text
