"""
IG Image Generator
==================

A small FastAPI service that turns a JSON description of an Instagram carousel
(or quote sequence) into fixed-size PNG slides and uploads them to Cloudinary.

This package provides:
- Template resolution and {{variable}} substitution for HTML slide templates
- Browser automation with Playwright for 1080x1350 snapshots
- Unsigned Cloudinary uploads over aiohttp
- FastAPI REST endpoints for HTTP access
"""

__version__ = "1.0.0"
__author__ = "IG Image Generator Team"
