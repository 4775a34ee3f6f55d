"""
Cloudinary Uploader
===================

Unsigned Cloudinary uploads over aiohttp.
The PNG is sent as a base64 data URI together with an upload preset, so no API
secret ever leaves this service.
"""

import asyncio
import base64
from typing import Optional, Any

import aiohttp

from ig_generator.config.logging import get_logger
from ig_generator.config.settings import get_settings, Settings

logger = get_logger(__name__)


class UploadError(Exception):
    """Exception raised when the image host rejects an upload."""

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UploadTransportError(UploadError):
    """Exception raised when the upload request cannot complete."""

    pass


class CloudinaryUploader:
    """Client for Cloudinary's unsigned image upload endpoint."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="cloudinary_uploader")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.settings.upload_timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def upload_url(self, cloud_name: str) -> str:
        return f"{self.settings.cloudinary_api_base.rstrip('/')}/{cloud_name}/image/upload"

    async def upload(
        self,
        png_data: bytes,
        public_id: str,
        cloud_name: Optional[str] = None,
        upload_preset: Optional[str] = None,
    ) -> str:
        """
        Upload a PNG and return its hosted URL.

        Args:
            png_data: PNG bytes
            public_id: Caller-chosen identifier, used to correlate log lines
            cloud_name: Cloudinary cloud name (defaults to settings)
            upload_preset: Unsigned upload preset (defaults to settings)

        Returns:
            The secure URL of the uploaded image

        Raises:
            UploadError: If Cloudinary answers with a non-success status
            UploadTransportError: If the request cannot be completed
        """
        if cloud_name is None:
            cloud_name = self.settings.cloudinary_cloud_name
        if upload_preset is None:
            upload_preset = self.settings.cloudinary_upload_preset
        payload = {
            "file": "data:image/png;base64," + base64.b64encode(png_data).decode("ascii"),
            "upload_preset": upload_preset,
        }

        self.logger.info(
            "Uploading image",
            public_id=public_id,
            cloud_name=cloud_name,
            upload_preset=upload_preset,
            file_size=len(png_data),
        )

        try:
            session = await self._get_session()
            async with session.post(self.upload_url(cloud_name), json=payload) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    self.logger.error(
                        "Upload rejected",
                        public_id=public_id,
                        status=response.status,
                        response=error_text,
                    )
                    raise UploadError(
                        f"Cloudinary upload failed: {response.status} - {error_text}",
                        status_code=response.status,
                        body=error_text,
                    )
                data = await response.json()
        except UploadError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self.logger.error("Upload transport error", public_id=public_id, error=str(e))
            raise UploadTransportError(f"Cloudinary upload failed: {e}") from e

        secure_url = data.get("secure_url")
        if not secure_url:
            raise UploadError(
                "Cloudinary upload failed: response has no secure_url",
                status_code=response.status,
                body=str(data),
            )

        self.logger.info("Upload succeeded", public_id=public_id, remote_id=data.get("public_id"))
        return secure_url
