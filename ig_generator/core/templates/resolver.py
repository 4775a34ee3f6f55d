"""
Template Resolver
=================

Maps a template family and slide type to the HTML template file on disk.
"""

from pathlib import Path
from typing import Dict, List, Optional

from ig_generator.config.logging import get_logger
from ig_generator.config.settings import get_settings
from ig_generator.models.schemas import TemplateFamily

logger = get_logger(__name__)


class UnknownTemplateError(Exception):
    """Raised when a (family, slide type) pair has no template."""

    def __init__(self, family: str, slide_type: Optional[str]):
        self.family = family
        self.slide_type = slide_type
        super().__init__(f"Unknown template/type: {family}/{slide_type}")


TEMPLATE_MAPPING: Dict[str, Dict[str, str]] = {
    TemplateFamily.CAROUSEL.value: {
        "cover": "carousel/cover.html",
        "content": "carousel/content.html",
        "cta": "carousel/cta.html",
    },
    TemplateFamily.QUOTE.value: {
        "quote-cover": "quote/cover.html",
        "quote-reflection": "quote/reflection.html",
    },
}


class TemplateResolver:
    """Resolve slide templates below a templates directory."""

    def __init__(self, templates_dir: Optional[Path] = None):
        self.templates_dir = Path(templates_dir or get_settings().templates_dir)

    def resolve(self, family: str, slide_type: Optional[str]) -> Path:
        """
        Get the template path for a slide.

        Args:
            family: Template family, e.g. "carousel" or "quote"
            slide_type: Slide type within the family, e.g. "cover"

        Returns:
            Path of the HTML template

        Raises:
            UnknownTemplateError: If the pair is not in the mapping table
        """
        relative = TEMPLATE_MAPPING.get(family, {}).get(slide_type or "")
        if relative is None:
            logger.warning("Unknown template requested", family=family, slide_type=slide_type)
            raise UnknownTemplateError(family, slide_type)
        return self.templates_dir / relative

    @staticmethod
    def available_templates() -> Dict[str, List[str]]:
        """Slide types supported by each template family."""
        return {family: list(types) for family, types in TEMPLATE_MAPPING.items()}
