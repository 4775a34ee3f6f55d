"""
Slide Orchestrator
==================

Turns an ordered list of slides into ordered PNGs: builds each slide's render
context, resolves and fills its template, and renders it. Slides are rendered
one at a time so at most one page is open per request.
"""

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ig_generator.config.logging import get_logger
from ig_generator.core.rendering.snapshot import SnapshotRenderer
from ig_generator.core.templates.resolver import TemplateResolver
from ig_generator.core.templates.substitution import substitute
from ig_generator.models.schemas import RenderedImage, SlideSpec

logger = get_logger(__name__)


def cover_title(slides: Sequence[SlideSpec]) -> str:
    """Title shared by every slide: first slide's title, else its quote, else empty."""
    first = slides[0].fields()
    return first.get("title") or first.get("quote") or ""


def build_render_context(
    slide: SlideSpec,
    slide_index: int,
    total_slides: int,
    background_url: str,
    shared_cover_title: str,
) -> Dict[str, Any]:
    """Merge slide fields with computed fields; computed fields win on collision."""
    context = dict(slide.fields())
    context.update(
        {
            "slideIndex": slide_index,
            "totalSlides": total_slides,
            "backgroundUrl": background_url,
            "coverTitle": shared_cover_title,
        }
    )
    return context


class SlideOrchestrator:
    """Render a batch of slides with a resolver and a snapshot renderer."""

    def __init__(self, renderer: SnapshotRenderer, resolver: Optional[TemplateResolver] = None):
        self.renderer = renderer
        self.resolver = resolver or TemplateResolver()
        self.logger: Any = logger.bind(component="slide_orchestrator")

    async def load_template(self, path: Path) -> str:
        """Read template text without blocking the event loop."""
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def build_html(self, template_path: Path, context: Dict[str, Any]) -> str:
        """Fill a template file with a render context."""
        template = await self.load_template(template_path)
        return substitute(template, context)

    async def render_slides(
        self, family: str, background_url: str, slides: Sequence[SlideSpec]
    ) -> List[RenderedImage]:
        """
        Render every slide in input order.

        Args:
            family: Template family
            background_url: Background image URL shared by all slides
            slides: Non-empty ordered slide list

        Returns:
            Rendered images, one per slide, in input order

        Raises:
            ValueError: If slides is empty
            UnknownTemplateError: If a slide type has no template in the family
            RenderError: If any slide fails to render
        """
        if not slides:
            raise ValueError("At least one slide is required")

        # Resolve every template before the first render
        template_paths = [self.resolver.resolve(family, slide.type) for slide in slides]
        total = len(slides)
        shared_title = cover_title(slides)
        results: List[RenderedImage] = []

        for slide_index, (slide, template_path) in enumerate(zip(slides, template_paths), start=1):
            context = build_render_context(
                slide, slide_index, total, background_url, shared_title
            )
            html_content = await self.build_html(template_path, context)
            png_data = await self.renderer.render(html_content)

            results.append(
                RenderedImage(png_data=png_data, slide_index=slide_index, type=slide.type)
            )
            self.logger.info(
                "Slide rendered",
                slide_index=slide_index,
                total_slides=total,
                type=slide.type,
                file_size=len(png_data),
            )

        return results
