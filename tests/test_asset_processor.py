"""Tests for generator output normalization

Run with pytest from project root:
    pytest tests/test_asset_processor.py -v
"""

from io import BytesIO
from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest
from PIL import Image

from asset_processor import (
    BytesOutput,
    LazyUrlOutput,
    UrlListOutput,
    UrlOutput,
    classify_output,
    describe_image,
    normalize_output,
)
from models.errors import AssetDownloadFailed, UnrecognizedOutputShape

IMAGE_URL = "https://replicate.delivery/pbxt/abc/out-0.png"


def _png_bytes(size=(8, 6)):
    buffer = BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


class FileOutputLike:
    """Mimics replicate's FileOutput: url is a method"""

    def __init__(self, url):
        self._url = url

    def url(self):
        return self._url


def _ok_response(content):
    return Mock(ok=True, status_code=200, content=content)


class TestClassifyOutput:
    """Tests for tagging raw generator output"""

    def test_string_is_url(self):
        """Test a plain string is classified as a URL"""
        assert classify_output(IMAGE_URL) == UrlOutput(IMAGE_URL)

    def test_list_is_url_list(self):
        """Test a non-empty list is classified as a URL list"""
        output = classify_output([IMAGE_URL, "https://other"])
        assert isinstance(output, UrlListOutput)
        assert output.items[0] == IMAGE_URL

    def test_accessor_object(self):
        """Test an object with a url() method is a lazy URL"""
        output = classify_output(FileOutputLike(IMAGE_URL))
        assert isinstance(output, LazyUrlOutput)
        assert output.accessor() == IMAGE_URL

    def test_url_attribute_string(self):
        """Test an object with a url string attribute is a lazy URL"""
        output = classify_output(SimpleNamespace(url=IMAGE_URL))
        assert isinstance(output, LazyUrlOutput)
        assert output.accessor() == IMAGE_URL

    def test_bytes(self):
        """Test raw bytes pass through as byte output"""
        assert classify_output(b"\x89PNG") == BytesOutput(b"\x89PNG")

    def test_object_with_data(self):
        """Test an object carrying .data bytes is byte output"""
        assert classify_output(SimpleNamespace(data=bytearray(b"abc"))) == BytesOutput(b"abc")

    @pytest.mark.parametrize("raw", [None, 42, [], {"foo": "bar"}])
    def test_unrecognized(self, raw):
        """Test unknown shapes raise UnrecognizedOutputShape"""
        with pytest.raises(UnrecognizedOutputShape):
            classify_output(raw)


class TestNormalizeOutput:
    """Tests for resolving output shapes to bytes"""

    @pytest.mark.parametrize(
        "raw",
        [
            IMAGE_URL,
            [IMAGE_URL],
            FileOutputLike(IMAGE_URL),
            [FileOutputLike(IMAGE_URL)],
        ],
        ids=["url", "url-list", "lazy-accessor", "list-of-lazy-accessor"],
    )
    def test_all_shapes_yield_identical_bytes(self, raw):
        """Test every URL-bearing shape fetches the same resource"""
        image = _png_bytes()
        with patch("asset_processor.requests.get", return_value=_ok_response(image)) as mock_get:
            result = normalize_output(raw, timeout=5)

        assert result == image
        mock_get.assert_called_once_with(IMAGE_URL, timeout=5)

    def test_bytes_skip_download(self):
        """Test byte output is returned without any request"""
        with patch("asset_processor.requests.get") as mock_get:
            assert normalize_output(b"raw-bytes") == b"raw-bytes"
        mock_get.assert_not_called()

    def test_http_404_raises_download_failed(self):
        """Test a 404 surfaces AssetDownloadFailed with the status code"""
        with patch("asset_processor.requests.get", return_value=Mock(ok=False, status_code=404)):
            with pytest.raises(AssetDownloadFailed) as exc_info:
                normalize_output(IMAGE_URL)

        assert exc_info.value.status_code == 404
        assert exc_info.value.to_dict()["status_code"] == 404

    def test_transport_error_raises_download_failed(self):
        """Test connection errors map to AssetDownloadFailed without status"""
        import requests

        with patch("asset_processor.requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(AssetDownloadFailed) as exc_info:
                normalize_output(IMAGE_URL)

        assert exc_info.value.status_code is None

    def test_list_of_unknown_items(self):
        """Test a list whose first item has no URL is unrecognized"""
        with pytest.raises(UnrecognizedOutputShape):
            normalize_output([123])


class TestDescribeImage:
    """Tests for image format detection"""

    def test_png(self):
        """Test PNG bytes report png extension and dimensions"""
        info = describe_image(_png_bytes((8, 6)))
        assert info["extension"] == "png"
        assert info["mime_type"] == "image/png"
        assert (info["width"], info["height"]) == (8, 6)

    def test_unknown_bytes_default_to_jpg(self):
        """Test unidentifiable bytes fall back to jpg naming"""
        info = describe_image(b"not an image")
        assert info["extension"] == "jpg"
        assert info["width"] is None
        assert info["bytes_size"] == len(b"not an image")
