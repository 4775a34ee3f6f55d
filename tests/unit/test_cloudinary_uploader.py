"""
Unit Tests for Cloudinary Uploader
==================================

Tests for unsigned uploads with the aiohttp session mocked out.
"""

import base64
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest

from ig_generator.core.upload.cloudinary import (
    CloudinaryUploader,
    UploadError,
    UploadTransportError,
)

from tests.utils.mocks import fake_png

SECURE_URL = "https://res.cloudinary.com/demo/image/upload/v1/abc123.png"


def make_response(status: int, json_data=None, text: str = "") -> MagicMock:
    """Async context manager yielding a fake aiohttp response."""
    response = MagicMock()
    response.status = status
    response.json = AsyncMock(return_value=json_data)
    response.text = AsyncMock(return_value=text)

    context_manager = MagicMock()
    context_manager.__aenter__ = AsyncMock(return_value=response)
    context_manager.__aexit__ = AsyncMock(return_value=False)
    return context_manager


@pytest.fixture
def mock_session() -> MagicMock:
    session = MagicMock()
    session.closed = False
    session.close = AsyncMock()
    session.post = MagicMock(
        return_value=make_response(200, {"secure_url": SECURE_URL, "public_id": "abc123"})
    )
    return session


@pytest.fixture
def uploader(test_settings, mock_session) -> CloudinaryUploader:
    uploader = CloudinaryUploader(test_settings)
    uploader._session = mock_session
    return uploader


class TestUploadError:
    """Test upload error attributes."""

    def test_carries_status_and_body(self):
        error = UploadError("failed", status_code=401, body="Unknown API key")
        assert str(error) == "failed"
        assert error.status_code == 401
        assert error.body == "Unknown API key"

    def test_transport_error_is_upload_error(self):
        error = UploadTransportError("connection reset")
        assert isinstance(error, UploadError)
        assert error.status_code is None


class TestCloudinaryUploader:
    """Test uploads."""

    def test_upload_url(self, uploader):
        assert (
            uploader.upload_url("mycloud")
            == "https://api.cloudinary.com/v1_1/mycloud/image/upload"
        )

    @pytest.mark.asyncio
    async def test_upload_success(self, uploader, mock_session):
        png_data = fake_png(1)

        url = await uploader.upload(png_data, "ig_1_slide_1", "mycloud", "mypreset")

        assert url == SECURE_URL
        mock_session.post.assert_called_once()
        args, kwargs = mock_session.post.call_args
        assert args[0] == "https://api.cloudinary.com/v1_1/mycloud/image/upload"
        payload = kwargs["json"]
        assert payload["upload_preset"] == "mypreset"
        assert payload["file"] == "data:image/png;base64," + base64.b64encode(png_data).decode()
        # Unsigned upload: no secret, no signature, identifier stays local
        assert set(payload) == {"file", "upload_preset"}

    @pytest.mark.asyncio
    async def test_defaults_from_settings(self, uploader, mock_session, test_settings):
        await uploader.upload(fake_png(), "ig_1_slide_1")

        args, kwargs = mock_session.post.call_args
        assert f"/{test_settings.cloudinary_cloud_name}/image/upload" in args[0]
        assert kwargs["json"]["upload_preset"] == test_settings.cloudinary_upload_preset

    @pytest.mark.asyncio
    async def test_rejected_upload(self, uploader, mock_session):
        mock_session.post.return_value = make_response(400, text='{"error":{"message":"Upload preset not found"}}')

        with pytest.raises(UploadError) as exc_info:
            await uploader.upload(fake_png(), "ig_1_slide_1", "mycloud", "missing")

        error = exc_info.value
        assert not isinstance(error, UploadTransportError)
        assert error.status_code == 400
        assert "Upload preset not found" in error.body
        assert str(error).startswith("Cloudinary upload failed: 400 - ")

    @pytest.mark.asyncio
    async def test_transport_failure(self, uploader, mock_session):
        mock_session.post.side_effect = aiohttp.ClientConnectionError("Connection refused")

        with pytest.raises(UploadTransportError, match="Connection refused"):
            await uploader.upload(fake_png(), "ig_1_slide_1")

    @pytest.mark.asyncio
    async def test_response_without_secure_url(self, uploader, mock_session):
        mock_session.post.return_value = make_response(200, {"public_id": "abc123"})

        with pytest.raises(UploadError, match="no secure_url"):
            await uploader.upload(fake_png(), "ig_1_slide_1")

    @pytest.mark.asyncio
    async def test_close(self, uploader, mock_session):
        await uploader.close()

        mock_session.close.assert_awaited_once()
        assert uploader._session is None

    @pytest.mark.asyncio
    async def test_close_without_session(self, test_settings):
        uploader = CloudinaryUploader(test_settings)
        await uploader.close()
        assert uploader._session is None
