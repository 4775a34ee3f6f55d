"""
Image Upload
============

Adapters that publish rendered slides to an image host.
"""

from .cloudinary import CloudinaryUploader, UploadError, UploadTransportError

__all__ = ["CloudinaryUploader", "UploadError", "UploadTransportError"]
