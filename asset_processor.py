"""Normalization of generator output into image bytes"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Any, Callable, Dict, Optional, Tuple, Union

import requests
from PIL import Image, UnidentifiedImageError

from models.errors import AssetDownloadFailed, UnrecognizedOutputShape

logger = logging.getLogger("AssetProcessor")

FORMAT_EXTENSIONS = {
    "JPEG": ("jpg", "image/jpeg"),
    "PNG": ("png", "image/png"),
    "WEBP": ("webp", "image/webp"),
    "GIF": ("gif", "image/gif"),
}
DEFAULT_EXTENSION = ("jpg", "image/jpeg")


@dataclass(frozen=True)
class UrlOutput:
    url: str


@dataclass(frozen=True)
class UrlListOutput:
    items: Tuple[Any, ...]


@dataclass(frozen=True)
class LazyUrlOutput:
    accessor: Callable[[], str]


@dataclass(frozen=True)
class BytesOutput:
    data: bytes


GeneratorOutput = Union[UrlOutput, UrlListOutput, LazyUrlOutput, BytesOutput]


def _url_accessor(raw: Any) -> Optional[Callable[[], str]]:
    """Return a deferred URL accessor if the value exposes one"""
    if isinstance(raw, dict):
        candidate = raw.get("url")
    elif isinstance(raw, (str, bytes, bytearray, memoryview, list, tuple)):
        return None
    else:
        candidate = getattr(raw, "url", None)

    if callable(candidate):
        return lambda: str(candidate())
    if isinstance(candidate, str):
        return lambda: candidate
    return None


def _byte_data(raw: Any) -> Optional[bytes]:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw)
    data = raw.get("data") if isinstance(raw, dict) else getattr(raw, "data", None)
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    return None


def classify_output(raw: Any) -> GeneratorOutput:
    """Tag raw generator output with the shape it will be resolved by.

    Order matters: a deferred URL accessor wins over everything, then a
    literal URL string, then a non-empty sequence, then raw byte data.
    Replicate's FileOutput lands in the accessor branch through its ``url``.
    """
    accessor = _url_accessor(raw)
    if accessor is not None:
        return LazyUrlOutput(accessor)
    if isinstance(raw, str):
        return UrlOutput(raw)
    if isinstance(raw, (list, tuple)) and raw:
        return UrlListOutput(tuple(raw))
    data = _byte_data(raw)
    if data is not None:
        return BytesOutput(data)
    raise UnrecognizedOutputShape(type(raw).__name__)


def fetch_asset_bytes(asset_url: str, timeout: float = 30) -> bytes:
    """Fetch bytes for a generated asset URL"""
    try:
        response = requests.get(asset_url, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Failed to fetch asset from {asset_url}: {e}")
        raise AssetDownloadFailed(None, url=asset_url, reason=str(e)) from e

    if not response.ok:
        logger.error(f"Asset download from {asset_url} returned {response.status_code}")
        raise AssetDownloadFailed(response.status_code, url=asset_url)
    return response.content


def resolve_output(output: GeneratorOutput, timeout: float = 30) -> bytes:
    """Turn a classified generator output into bytes"""
    if isinstance(output, LazyUrlOutput):
        return fetch_asset_bytes(output.accessor(), timeout=timeout)
    if isinstance(output, UrlOutput):
        return fetch_asset_bytes(output.url, timeout=timeout)
    if isinstance(output, UrlListOutput):
        first = output.items[0]
        accessor = _url_accessor(first)
        if accessor is not None:
            return fetch_asset_bytes(accessor(), timeout=timeout)
        if isinstance(first, str):
            return fetch_asset_bytes(first, timeout=timeout)
        raise UnrecognizedOutputShape(f"list[{type(first).__name__}]")
    if isinstance(output, BytesOutput):
        return output.data
    raise UnrecognizedOutputShape(type(output).__name__)


def normalize_output(raw: Any, timeout: float = 30) -> bytes:
    """Resolve any supported generator output shape to image bytes"""
    output = classify_output(raw)
    logger.debug(f"Generator output classified as {type(output).__name__}")
    return resolve_output(output, timeout=timeout)


def describe_image(image_bytes: bytes) -> Dict[str, Any]:
    """Extract format, file extension, MIME type and dimensions from image bytes.

    Bytes Pillow cannot identify fall back to JPEG naming, matching what the
    generator produces by default.
    """
    try:
        with Image.open(BytesIO(image_bytes)) as img:
            extension, mime_type = FORMAT_EXTENSIONS.get(img.format, DEFAULT_EXTENSION)
            return {
                "format": img.format,
                "extension": extension,
                "mime_type": mime_type,
                "width": img.width,
                "height": img.height,
                "bytes_size": len(image_bytes),
            }
    except (UnidentifiedImageError, OSError) as e:
        logger.warning(f"Failed to extract image metadata: {e}")
        extension, mime_type = DEFAULT_EXTENSION
        return {
            "format": None,
            "extension": extension,
            "mime_type": mime_type,
            "width": None,
            "height": None,
            "bytes_size": len(image_bytes),
        }
