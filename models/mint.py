"""Mint data models"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

MINT_STATUSES = ("in_queue", "minted", "failed")


@dataclass
class Trait:
    """Opaque trait triple, serialized with the metadata attribute keys"""
    trait_type: str
    value: Any
    display_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"trait_type": self.trait_type, "value": self.value}
        if self.display_type:
            data["display_type"] = self.display_type
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Trait":
        return cls(
            trait_type=str(data.get("trait_type", data.get("traitType", ""))),
            value=data.get("value"),
            display_type=data.get("display_type", data.get("displayType")),
        )


@dataclass
class GenerationRequest:
    prompt_text: str
    model_identifier: str
    traits: List[Trait] = field(default_factory=list)


@dataclass(frozen=True)
class PublishedAsset:
    """Content pinned to IPFS; the content id comes from the pinning service"""
    content_id: str
    uri: str
    name: Optional[str] = None
    size: Optional[int] = None

    @classmethod
    def from_content_id(cls, content_id: str, name: Optional[str] = None, size: Optional[int] = None) -> "PublishedAsset":
        return cls(content_id=content_id, uri=f"ipfs://{content_id}", name=name, size=size)


@dataclass
class MintRequest:
    """Mint request; request_id is the marketplace idempotency key"""
    request_id: str
    owner_address: str
    name: str
    description: str
    image_reference: str
    traits: List[Trait] = field(default_factory=list)
    metadata_uri: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "requestId": self.request_id,
            "ownerAddress": self.owner_address,
            "name": self.name,
            "description": self.description,
            "image": self.image_reference,
        }
        if self.traits:
            payload["attributes"] = [trait.to_dict() for trait in self.traits]
        return payload


@dataclass
class MintRecord:
    """Durable record of a mint attempt and its last known state"""
    request_id: str
    status: str
    name: str
    description: str
    image_reference: str
    owner_address: str
    traits: List[Trait] = field(default_factory=list)
    nft_address: Optional[str] = None
    nft_index: Optional[int] = None
    marketplace_url: Optional[str] = None
    metadata_uri: Optional[str] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        if self.status not in MINT_STATUSES:
            raise ValueError(f"Invalid mint status: {self.status}. Must be one of {MINT_STATUSES}")

    @classmethod
    def from_request(cls, request: MintRequest, status: str = "in_queue") -> "MintRecord":
        return cls(
            request_id=request.request_id,
            status=status,
            name=request.name,
            description=request.description,
            image_reference=request.image_reference,
            owner_address=request.owner_address,
            traits=list(request.traits),
            metadata_uri=request.metadata_uri,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestId": self.request_id,
            "status": self.status,
            "name": self.name,
            "description": self.description,
            "imageReference": self.image_reference,
            "ownerAddress": self.owner_address,
            "traits": [trait.to_dict() for trait in self.traits],
            "nftAddress": self.nft_address,
            "nftIndex": self.nft_index,
            "marketplaceUrl": self.marketplace_url,
            "metadataUri": self.metadata_uri,
            "error": self.error,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MintRecord":
        return cls(
            request_id=data["requestId"],
            status=data["status"],
            name=data.get("name", ""),
            description=data.get("description", ""),
            image_reference=data.get("imageReference", ""),
            owner_address=data.get("ownerAddress", ""),
            traits=[Trait.from_dict(t) for t in data.get("traits", [])],
            nft_address=data.get("nftAddress"),
            nft_index=data.get("nftIndex"),
            marketplace_url=data.get("marketplaceUrl"),
            metadata_uri=data.get("metadataUri"),
            error=data.get("error"),
            created_at=datetime.fromisoformat(data["createdAt"]) if data.get("createdAt") else datetime.utcnow(),
            updated_at=datetime.fromisoformat(data["updatedAt"]) if data.get("updatedAt") else datetime.utcnow(),
        )


@dataclass
class MintAccepted:
    marketplace_response: Dict[str, Any]


@dataclass
class MintRejected:
    """Marketplace refused the mint; a normal outcome, not an exception"""
    status_code: int
    raw_body: str
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def message(self) -> str:
        return f"GetGems mint failed ({self.status_code})"


MintOutcome = Union[MintAccepted, MintRejected]


@dataclass
class MintStatus:
    request_id: str
    status: str
    raw: Dict[str, Any] = field(default_factory=dict)
    nft_address: Optional[str] = None
    nft_index: Optional[int] = None
    marketplace_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"success": True, "requestId": self.request_id, **self.raw, "mintStatus": self.status}


@dataclass
class MintStatusCheckFailed:
    request_id: str
    status_code: int
    raw_body: str
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": False,
            "requestId": self.request_id,
            "error": f"GetGems status check failed ({self.status_code})",
            "error_code": "MINT_STATUS_CHECK_FAILED",
            "status_code": self.status_code,
            "details": self.details,
        }


MintStatusResult = Union[MintStatus, MintStatusCheckFailed]
