"""
Generate Routes
===============

POST /generate: validate the request, render every slide, upload every PNG and
answer with the hosted URLs. The handler is the single place where pipeline
errors are caught and turned into the failure envelope.
"""

import time
from typing import Any, List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from ig_generator.api.dependencies import get_current_settings, get_orchestrator, get_uploader
from ig_generator.config.logging import get_logger
from ig_generator.config.settings import Settings
from ig_generator.core.rendering.orchestrator import SlideOrchestrator
from ig_generator.core.upload.cloudinary import CloudinaryUploader
from ig_generator.models.schemas import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    GenerationStage,
    SlideSpec,
    UploadedImage,
)

logger = get_logger(__name__)

router = APIRouter(tags=["Generate"])


class ValidationError(Exception):
    """Exception raised when a generate request is malformed."""

    pass


def validate_request(request: GenerateRequest) -> List[SlideSpec]:
    """
    Check required fields and parse the slide list.

    Args:
        request: Raw generate request

    Returns:
        Parsed slides in input order

    Raises:
        ValidationError: If backgroundUrl or slides are missing or malformed
    """
    if not request.background_url:
        raise ValidationError("Missing backgroundUrl")

    if not isinstance(request.slides, list) or len(request.slides) == 0:
        raise ValidationError("Missing or empty slides array")

    slides: List[SlideSpec] = []
    for position, raw_slide in enumerate(request.slides, start=1):
        if not isinstance(raw_slide, dict):
            raise ValidationError(f"Slide {position} must be an object")
        try:
            slides.append(SlideSpec.model_validate(raw_slide))
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid slide {position}: {e.errors()[0]['msg']}") from e
    return slides


def make_public_id(slide_index: int) -> str:
    """Identifier for one uploaded slide."""
    return f"ig_{int(time.time() * 1000)}_slide_{slide_index}"


async def generate_images(
    request: GenerateRequest,
    orchestrator: SlideOrchestrator,
    uploader: CloudinaryUploader,
    settings: Settings,
) -> GenerateResponse:
    """
    Run the whole generate pipeline.

    Used by the route handler and by tests.

    Raises:
        ValidationError: If the request is malformed
        Exception: Any template, render or upload error, unmodified
    """
    start_time = time.monotonic()
    stage = GenerationStage.VALIDATING
    uploaded: List[UploadedImage] = []

    try:
        slides = validate_request(request)
        logger.info("Generate requested", template=request.template, slides=len(slides))

        stage = GenerationStage.RENDERING
        rendered = await orchestrator.render_slides(
            request.template, request.background_url or "", slides
        )
        logger.info("Slides rendered", count=len(rendered))

        stage = GenerationStage.UPLOADING
        # Defaults apply only when the field is omitted
        cloud_name = (
            settings.cloudinary_cloud_name
            if request.cloudinary_cloud_name is None
            else request.cloudinary_cloud_name
        )
        upload_preset = (
            settings.cloudinary_upload_preset
            if request.cloudinary_preset is None
            else request.cloudinary_preset
        )
        for image in rendered:
            url = await uploader.upload(
                image.png_data,
                make_public_id(image.slide_index),
                cloud_name=cloud_name,
                upload_preset=upload_preset,
            )
            uploaded.append(UploadedImage(slide_index=image.slide_index, type=image.type, url=url))
            logger.info("Slide uploaded", slide_index=image.slide_index, url=url)

        stage = GenerationStage.RESPONDING
        duration_ms = int((time.monotonic() - start_time) * 1000)
        logger.info("Generate completed", images=len(uploaded), duration_ms=duration_ms)
        return GenerateResponse(images=uploaded, duration=f"{duration_ms}ms")

    except Exception as e:
        logger.error(
            "Generate failed",
            stage=GenerationStage.FAILED.value,
            failed_during=stage.value,
            error=str(e),
            # Uploads are not rolled back; keep the orphaned URLs findable
            orphaned_urls=[image.url for image in uploaded] or None,
        )
        raise


def error_response(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    """Failure envelope shared by the route and the application exception handlers."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(),
        headers=headers,
    )


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate(
    request: GenerateRequest,
    orchestrator: SlideOrchestrator = Depends(get_orchestrator),
    uploader: CloudinaryUploader = Depends(get_uploader),
    settings: Settings = Depends(get_current_settings),
) -> Any:
    """
    Render slides to PNG and upload them.

    Returns:
        Hosted image URLs ordered by slideIndex, or a failure envelope
    """
    try:
        return await generate_images(request, orchestrator, uploader, settings)
    except ValidationError as e:
        return error_response(400, str(e))
    except Exception as e:
        return error_response(500, str(e) or type(e).__name__)
