"""
Pydantic Models and Schemas
===========================

Data models for slide specifications, rendering results and API requests/responses.
"""

from typing import Optional, List, Dict, Any, Literal
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# Enums
class TemplateFamily(str, Enum):
    """Top-level template style sets."""
    CAROUSEL = "carousel"
    QUOTE = "quote"


class GenerationStage(str, Enum):
    """Stages of a /generate request."""
    VALIDATING = "validating"
    RENDERING = "rendering"
    UPLOADING = "uploading"
    RESPONDING = "responding"
    FAILED = "failed"


# Slide Models
class SlideSpec(BaseModel):
    """A single slide as supplied by the caller.

    Only ``type`` is known up front; every other field (title, quote, body,
    flags...) is kept as-is and handed to the template.
    """
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = Field(None, description="Slide type selecting a template variant")

    def fields(self) -> Dict[str, Any]:
        """Return all slide fields, including the template-specific extras."""
        return self.model_dump()


# Rendering Models
class RenderOptions(BaseModel):
    """Viewport and timing options for a single snapshot."""
    width: int = Field(1080, gt=0, le=4000, description="Viewport width")
    height: int = Field(1350, gt=0, le=4000, description="Viewport height")
    device_scale_factor: float = Field(1.0, gt=0, le=3.0, description="Device pixel ratio")
    network_idle_timeout_ms: int = Field(
        30000, gt=0, description="Maximum wait for network idle in milliseconds"
    )
    font_timeout: float = Field(10.0, gt=0, description="Maximum wait for fonts in seconds")


class RenderedImage(BaseModel):
    """PNG produced for one slide."""
    png_data: bytes = Field(..., description="PNG binary data", exclude=True)
    slide_index: int = Field(..., ge=1, description="1-based slide position")
    type: Optional[str] = Field(None, description="Slide type")

    @property
    def file_size(self) -> int:
        return len(self.png_data)


# API Request/Response Models
class GenerateRequest(BaseModel):
    """Request body for POST /generate.

    ``backgroundUrl`` and ``slides`` are deliberately loose here so that the
    handler can reject them with its own 400 messages.
    """
    model_config = ConfigDict(populate_by_name=True)

    template: str = Field("carousel", description="Template family")
    background_url: Optional[str] = Field(
        None, alias="backgroundUrl", description="Background image URL shared by all slides"
    )
    slides: Optional[Any] = Field(None, description="Ordered list of slide objects")
    cloudinary_preset: Optional[str] = Field(
        None, alias="cloudinaryPreset", description="Unsigned upload preset"
    )
    cloudinary_cloud_name: Optional[str] = Field(
        None, alias="cloudinaryCloudName", description="Cloudinary cloud name"
    )


class UploadedImage(BaseModel):
    """Hosted URL of one rendered slide."""
    model_config = ConfigDict(populate_by_name=True)

    slide_index: int = Field(..., alias="slideIndex", description="1-based slide position")
    type: Optional[str] = Field(None, description="Slide type")
    url: str = Field(..., description="Public image URL")


class GenerateResponse(BaseModel):
    """Successful response for POST /generate."""
    success: Literal[True] = True
    images: List[UploadedImage] = Field(default_factory=list)
    duration: str = Field(..., description="Total processing time, e.g. '1532ms'")


class ErrorResponse(BaseModel):
    """Uniform failure envelope."""
    success: Literal[False] = False
    error: str = Field(..., description="Error message")


class HealthStatus(BaseModel):
    """Health check status."""
    status: Literal["ok"] = "ok"
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Check timestamp"
    )
