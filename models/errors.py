"""Error types for the mint and transfer pipelines"""

from typing import Any, Dict, Iterable, Optional


class MintServiceError(Exception):
    """Base class for errors surfaced to tool callers.

    Every subclass carries a machine-readable ``error_code`` and the minimal
    diagnostic payload needed to debug the failure.
    """

    error_code = "MINT_SERVICE_ERROR"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        payload = {"error": self.message, "error_code": self.error_code}
        payload.update({k: v for k, v in self.details.items() if v is not None})
        return payload


class ConfigurationMissing(MintServiceError):
    error_code = "CONFIGURATION_MISSING"

    def __init__(self, keys: Iterable[str]):
        self.keys = list(keys)
        super().__init__(f"Missing configuration: {', '.join(self.keys)}", missing=self.keys)


class UnrecognizedOutputShape(MintServiceError):
    error_code = "UNRECOGNIZED_OUTPUT_SHAPE"

    def __init__(self, output_type: str):
        self.output_type = output_type
        super().__init__(f"Could not interpret generator output of type {output_type}", output_type=output_type)


class AssetDownloadFailed(MintServiceError):
    error_code = "ASSET_DOWNLOAD_FAILED"

    def __init__(self, status_code: Optional[int], url: Optional[str] = None, reason: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        if status_code is not None:
            message = f"Failed to download image: {status_code}"
        else:
            message = f"Failed to download image: {reason or 'transport error'}"
        super().__init__(message, status_code=status_code)


class GenerationFailed(MintServiceError):
    error_code = "GENERATION_FAILED"


class PublishFailed(MintServiceError):
    error_code = "PUBLISH_FAILED"

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message, status_code=status_code, details=body)


class MarketplaceUnavailable(MintServiceError):
    error_code = "MARKETPLACE_UNAVAILABLE"


class RecordStoreWriteFailed(MintServiceError):
    error_code = "RECORD_STORE_WRITE_FAILED"


class InvalidMnemonic(MintServiceError):
    error_code = "INVALID_MNEMONIC"


class InvalidAddress(MintServiceError):
    error_code = "INVALID_ADDRESS"

    def __init__(self, address: Any):
        super().__init__(f"Invalid TON address: {address!r}", address=str(address))


class InsufficientBalance(MintServiceError):
    error_code = "INSUFFICIENT_BALANCE"

    def __init__(self, have: int, need: int):
        self.have = have
        self.need = need
        super().__init__(
            f"Insufficient wallet balance: {have / 1e9:.4f} TON (need {need / 1e9:.4f} TON)",
            have=have,
            need=need,
        )


class ChainRpcError(MintServiceError):
    error_code = "CHAIN_RPC_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None):
        self.status_code = status_code
        self.body = body
        super().__init__(message, status_code=status_code, details=body)


class TransferSubmissionFailed(MintServiceError):
    error_code = "TRANSFER_SUBMISSION_FAILED"

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Transfer submission failed: {cause}")


class WalletStateError(MintServiceError):
    error_code = "WALLET_STATE_ERROR"
