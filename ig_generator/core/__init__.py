"""
Core Business Logic
==================

Template handling, slide rendering and image upload.

Modules:
- templates: template resolution and variable substitution
- rendering: Playwright snapshots and slide orchestration
- upload: Cloudinary upload adapter
"""
