"""Mint request building, dispatch, status tracking and the mint pipeline"""

import logging
import re
import time
import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, List, Optional

from asset_processor import describe_image, normalize_output
from getgems_client import GetgemsClient, parse_body
from managers.config_manager import ConfigManager
from managers.publish_manager import PublishManager
from managers.record_store import MintRecordStore
from models.errors import MarketplaceUnavailable, RecordStoreWriteFailed
from models.mint import (
    GenerationRequest,
    MintAccepted,
    MintOutcome,
    MintRecord,
    MintRejected,
    MintRequest,
    MintStatus,
    MintStatusCheckFailed,
    MintStatusResult,
    PublishedAsset,
    Trait,
)

logger = logging.getLogger("MCP_Server")

DEFAULT_DESCRIPTION = "A procedurally generated beast"
DEFAULT_TRAITS = (
    {"trait_type": "Attack", "value": 120, "display_type": "number"},
    {"trait_type": "Defense", "value": 80, "display_type": "number"},
    {"trait_type": "Speed", "value": 65, "display_type": "number"},
    {"trait_type": "Tier", "value": "Legendary"},
)

STATUS_ALIASES = {
    "in_queue": "in_queue",
    "queued": "in_queue",
    "pending": "in_queue",
    "processing": "in_queue",
    "new": "in_queue",
    "minted": "minted",
    "ready": "minted",
    "done": "minted",
    "success": "minted",
    "completed": "minted",
    "failed": "failed",
    "error": "failed",
    "rejected": "failed",
    "cancelled": "failed",
}

FINAL_STATUSES = ("minted", "failed")


def _now_ms() -> int:
    return int(time.time() * 1000)


def normalize_mint_status(value: Any) -> str:
    """Map a marketplace status string onto in_queue / minted / failed.

    Unknown values are treated as not final (in_queue).
    """
    if not isinstance(value, str):
        return "in_queue"
    return STATUS_ALIASES.get(value.strip().lower(), "in_queue")


def _marketplace_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """Find status and NFT fields at top level or under response/data"""
    candidates = [body]
    for key in ("response", "data"):
        nested = body.get(key)
        if isinstance(nested, dict):
            candidates.append(nested)

    fields: Dict[str, Any] = {}
    for candidate in candidates:
        for source, target in (
            ("status", "status"),
            ("address", "nft_address"),
            ("nftAddress", "nft_address"),
            ("index", "nft_index"),
            ("nftIndex", "nft_index"),
            ("url", "marketplace_url"),
        ):
            if target not in fields and candidate.get(source) is not None:
                fields[target] = candidate[source]
    if "nft_index" in fields:
        try:
            fields["nft_index"] = int(fields["nft_index"])
        except (TypeError, ValueError):
            fields.pop("nft_index")
    return fields


def coerce_traits(traits: Optional[List[Any]]) -> List[Trait]:
    if traits is None:
        traits = list(DEFAULT_TRAITS)
    return [t if isinstance(t, Trait) else Trait.from_dict(t) for t in traits]


class MintRequestBuilder:
    """Builds MintRequests with a fresh idempotency key per call.

    Reusing a request id for an unrelated mint is a caller error and is not
    checked here.
    """

    def __init__(self, owner_address: str, id_factory: Optional[Callable[[], str]] = None):
        self.owner_address = owner_address
        self.id_factory = id_factory or (lambda: uuid.uuid4().hex)

    @staticmethod
    def default_name() -> str:
        return f"Beast #{_now_ms()}"

    @staticmethod
    def asset_file_name(name: str, extension: str = "jpg") -> str:
        slug = re.sub(r"\s+", "_", name).lower()
        return f"{slug}_{_now_ms()}.{extension}"

    @staticmethod
    def metadata_document(name: str, description: str, image: PublishedAsset, traits: List[Trait]) -> Dict[str, Any]:
        return {
            "name": name,
            "description": description,
            "image": image.uri,
            "attributes": [trait.to_dict() for trait in traits],
        }

    def build(
        self,
        name: str,
        description: str,
        traits: List[Trait],
        image: PublishedAsset,
        owner_address: Optional[str] = None,
        metadata: Optional[PublishedAsset] = None,
    ) -> MintRequest:
        return MintRequest(
            request_id=self.id_factory(),
            owner_address=owner_address or self.owner_address,
            name=name,
            description=description,
            image_reference=image.uri,
            traits=list(traits),
            metadata_uri=metadata.uri if metadata else None,
        )


class MintDispatcher:
    """Sends mint requests; marketplace rejection is returned, not raised"""

    def __init__(self, client: GetgemsClient):
        self.client = client

    def dispatch(self, request: MintRequest) -> MintOutcome:
        status_code, text = self.client.post_mint(request.to_payload())
        body = parse_body(text)
        if not 200 <= status_code < 300:
            logger.warning(f"Mint request {request.request_id} rejected with {status_code}")
            return MintRejected(status_code=status_code, raw_body=text, details=body)
        return MintAccepted(marketplace_response=body)


class MintStatusTracker:
    """Single point-in-time status checks; scheduling repeats is up to the caller"""

    def __init__(self, client: GetgemsClient):
        self.client = client

    def status(self, request_id: str) -> MintStatusResult:
        status_code, text = self.client.get_mint(request_id)
        body = parse_body(text)
        if not 200 <= status_code < 300:
            return MintStatusCheckFailed(request_id=request_id, status_code=status_code, raw_body=text, details=body)

        fields = _marketplace_fields(body)
        return MintStatus(
            request_id=request_id,
            status=normalize_mint_status(fields.get("status")),
            raw=body,
            nft_address=fields.get("nft_address"),
            nft_index=fields.get("nft_index"),
            marketplace_url=fields.get("marketplace_url"),
        )


class MintManager:
    """Runs the generate → pin → mint → record pipeline"""

    REQUIRED_SETTINGS = ("REPLICATE_API_TOKEN", "GETGEMS_COLLECTION", "GETGEMS_AUTHORIZATION", "OWNER_ADDRESS")

    def __init__(
        self,
        config: ConfigManager,
        generator,
        publisher: PublishManager,
        builder: MintRequestBuilder,
        dispatcher: MintDispatcher,
        tracker: MintStatusTracker,
        record_store: MintRecordStore,
    ):
        self.config = config
        self.generator = generator
        self.publisher = publisher
        self.builder = builder
        self.dispatcher = dispatcher
        self.tracker = tracker
        self.record_store = record_store

    def check_configuration(self):
        """Fail fast with ConfigurationMissing before any network call"""
        self.config.require(*self.REQUIRED_SETTINGS)
        self.publisher.config.auth_headers()

    def save_record(self, record: MintRecord) -> bool:
        """Best-effort write; a failed write never fails the mint"""
        try:
            self.record_store.upsert(record)
            return True
        except RecordStoreWriteFailed as e:
            logger.error(f"Failed to record mint {record.request_id}: {e}")
            return False

    def record_outcome(self, request: MintRequest, outcome: MintOutcome) -> MintRecord:
        if isinstance(outcome, MintRejected):
            record = MintRecord.from_request(request, status="failed")
            record.error = outcome.message
        else:
            record = MintRecord.from_request(request)
            fields = _marketplace_fields(outcome.marketplace_response)
            if "status" in fields:
                record.status = normalize_mint_status(fields["status"])
            record.nft_address = fields.get("nft_address")
            record.nft_index = fields.get("nft_index")
            record.marketplace_url = fields.get("marketplace_url")
        self.save_record(record)
        return record

    def mint(
        self,
        prompt: Optional[str] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
        traits: Optional[List[Any]] = None,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.check_configuration()

        name = name or self.builder.default_name()
        description = description or DEFAULT_DESCRIPTION
        generation = GenerationRequest(
            prompt_text=prompt or "",
            model_identifier=model or self.config.get("REPLICATE_MODEL"),
            traits=coerce_traits(traits),
        )
        trait_list = generation.traits

        # 1) Generate and normalize
        output = self.generator.generate(generation.prompt_text, model_id=generation.model_identifier)
        image_bytes = normalize_output(output, timeout=float(self.config.get("HTTP_TIMEOUT")))
        image_info = describe_image(image_bytes)

        # 2) Pin image, then metadata pointing at it
        file_name = self.builder.asset_file_name(name, image_info["extension"])
        image = self.publisher.publish(image_bytes, file_name, mime_type=image_info["mime_type"])
        metadata = self.publisher.publish_json(
            self.builder.metadata_document(name, description, image, trait_list)
        )

        # 3) Mint
        request = self.builder.build(name, description, trait_list, image, metadata=metadata)
        self.save_record(MintRecord.from_request(request))
        try:
            outcome = self.dispatcher.dispatch(request)
        except MarketplaceUnavailable as e:
            logger.error(f"Mint request {request.request_id} not confirmed: {e}")
            return {
                "success": False,
                **e.to_dict(),
                "requestId": request.request_id,
                "imageIpfsUri": image.uri,
                "metadataIpfsUri": metadata.uri,
                "status": "in_queue",
            }
        record = self.record_outcome(request, outcome)

        if isinstance(outcome, MintRejected):
            return {
                "success": False,
                "error": outcome.message,
                "error_code": "MINT_REJECTED",
                "status_code": outcome.status_code,
                "details": outcome.details,
                "requestId": request.request_id,
                "imageIpfsUri": image.uri,
                "metadataIpfsUri": metadata.uri,
            }

        logger.info(f"Mint request {request.request_id} accepted for {name} ({image.uri})")
        return {
            "success": True,
            "requestId": request.request_id,
            "name": name,
            "description": description,
            "traits": [trait.to_dict() for trait in trait_list],
            "imageIpfsUri": image.uri,
            "metadataIpfsUri": metadata.uri,
            "mintResponse": outcome.marketplace_response,
            "status": record.status,
        }

    def reconcile(self, status: MintStatus) -> Optional[MintRecord]:
        """Move the stored record to the observed marketplace state.

        A final record (minted or failed) never goes back to in_queue.
        """
        stored = self.record_store.get(status.request_id)
        if stored is None:
            return None
        new_status = status.status
        if stored.status in FINAL_STATUSES and new_status not in FINAL_STATUSES:
            new_status = stored.status
        record = replace(
            stored,
            status=new_status,
            nft_address=status.nft_address or stored.nft_address,
            nft_index=status.nft_index if status.nft_index is not None else stored.nft_index,
            marketplace_url=status.marketplace_url or stored.marketplace_url,
        )
        self.save_record(record)
        return record

    def check_status(self, request_id: str) -> Dict[str, Any]:
        self.config.require("GETGEMS_COLLECTION", "GETGEMS_AUTHORIZATION")
        result = self.tracker.status(request_id)
        if isinstance(result, MintStatusCheckFailed):
            return result.to_dict()
        response = result.to_dict()
        record = self.reconcile(result)
        if record is not None:
            response["record"] = record.to_dict()
        return response
