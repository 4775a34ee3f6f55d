"""
API Dependencies
================

FastAPI dependencies exposing the services created by the application lifespan.
Tests replace them through ``app.dependency_overrides``.
"""

from fastapi import Request

from ig_generator.config.settings import get_settings, Settings
from ig_generator.core.rendering.orchestrator import SlideOrchestrator
from ig_generator.core.upload.cloudinary import CloudinaryUploader


def get_current_settings() -> Settings:
    """Dependency to get current settings."""
    return get_settings()


def get_orchestrator(request: Request) -> SlideOrchestrator:
    """Slide orchestrator bound to the shared browser."""
    return request.app.state.orchestrator


def get_uploader(request: Request) -> CloudinaryUploader:
    """Shared Cloudinary uploader."""
    return request.app.state.uploader
