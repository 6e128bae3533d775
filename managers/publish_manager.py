"""Publish manager for pinning images and metadata to IPFS through Pinata"""

import json
import logging
from typing import Any, Dict, Optional

import requests

from models.errors import ConfigurationMissing, PublishFailed
from models.mint import PublishedAsset

logger = logging.getLogger("MCP_Server")

PIN_FILE_PATH = "/pinning/pinFileToIPFS"
PIN_JSON_PATH = "/pinning/pinJSONToIPFS"
DEFAULT_PINATA_ENDPOINT = "https://api.pinata.cloud"


class PinataConfig:
    """Credentials and endpoint for the Pinata pinning API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        jwt: Optional[str] = None,
        endpoint: str = DEFAULT_PINATA_ENDPOINT,
        cid_version: int = 1,
        timeout: float = 30,
    ):
        """Initialize Pinata configuration.

        Args:
            api_key: Pinata API key (used together with secret_key)
            secret_key: Pinata secret API key
            jwt: Pinata JWT, used when the key pair is not configured
            endpoint: Pinata API base URL
            cid_version: CID version requested from Pinata (default: 1)
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.secret_key = secret_key
        self.jwt = jwt
        self.endpoint = (endpoint or DEFAULT_PINATA_ENDPOINT).rstrip("/")
        self.cid_version = cid_version
        self.timeout = timeout

    def auth_headers(self) -> Dict[str, str]:
        """Build auth headers, preferring the key pair over the JWT.

        Raises:
            ConfigurationMissing: If neither credential form is configured
        """
        if self.api_key and self.secret_key:
            return {
                "pinata_api_key": self.api_key,
                "pinata_secret_api_key": self.secret_key,
            }
        if self.jwt:
            token = self.jwt.strip()
            if not token.lower().startswith("bearer "):
                token = f"Bearer {token}"
            return {"Authorization": token}
        raise ConfigurationMissing(["PINATA_API_KEY", "PINATA_SECRET_KEY"])


class PublishManager:
    """Pins content to IPFS and returns stable content identifiers.

    The CID is whatever Pinata reports; it is never recomputed locally.
    Failures propagate as PublishFailed with no retry.
    """

    def __init__(self, config: PinataConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()
        logger.info(f"Initialized PublishManager with endpoint={config.endpoint}")

    def _pinata_options(self) -> Dict[str, Any]:
        return {"cidVersion": self.config.cid_version}

    def _post(self, path: str, **kwargs) -> Dict[str, Any]:
        headers = self.config.auth_headers()
        url = f"{self.config.endpoint}{path}"
        try:
            response = self.session.post(url, headers=headers, timeout=self.config.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Pinata request to {path} failed: {e}")
            raise PublishFailed(f"Pinning request failed: {e}") from e

        if not response.ok:
            logger.error(f"Pinata {path} returned {response.status_code}: {response.text[:500]}")
            raise PublishFailed(
                f"Pinning service failed: {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            result = response.json()
        except ValueError as e:
            raise PublishFailed(
                "Pinning service returned a non-JSON body",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(result, dict) or not result.get("IpfsHash"):
            raise PublishFailed(
                "Missing IpfsHash in pinning response",
                status_code=response.status_code,
                body=response.text,
            )
        return result

    def publish(self, data: bytes, display_name: str, mime_type: str = "application/octet-stream") -> PublishedAsset:
        """Pin a file to IPFS.

        Args:
            data: File bytes
            display_name: Name recorded in Pinata metadata and used as the upload filename
            mime_type: Content type of the upload

        Returns:
            PublishedAsset with content_id and ipfs:// uri
        """
        result = self._post(
            PIN_FILE_PATH,
            files={"file": (display_name, data, mime_type)},
            data={
                "pinataMetadata": json.dumps({"name": display_name}),
                "pinataOptions": json.dumps(self._pinata_options()),
            },
        )
        asset = PublishedAsset.from_content_id(result["IpfsHash"], name=display_name, size=result.get("PinSize"))
        logger.info(f"Pinned file {display_name} ({len(data)} bytes) as {asset.uri}")
        return asset

    def publish_json(self, document: Dict[str, Any], name: Optional[str] = None) -> PublishedAsset:
        """Pin a JSON document to IPFS.

        Args:
            document: JSON-serializable document
            name: Pinata metadata name (default: document["name"] or "nft-metadata")

        Returns:
            PublishedAsset with content_id and ipfs:// uri
        """
        pin_name = name or document.get("name") or "nft-metadata"
        result = self._post(
            PIN_JSON_PATH,
            json={
                "pinataContent": document,
                "pinataMetadata": {"name": pin_name},
                "pinataOptions": self._pinata_options(),
            },
        )
        asset = PublishedAsset.from_content_id(result["IpfsHash"], name=pin_name, size=result.get("PinSize"))
        logger.info(f"Pinned JSON {pin_name} as {asset.uri}")
        return asset
