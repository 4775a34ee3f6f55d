"""
Slide Templates
===============

Map (family, slide type) pairs to HTML files and fill in their placeholders.
"""

from .resolver import TemplateResolver, UnknownTemplateError
from .substitution import substitute

__all__ = ["TemplateResolver", "UnknownTemplateError", "substitute"]
