"""
Rendering Engine
===============

Slide rendering pipeline.

Components:
- snapshot: Playwright browser management and PNG capture
- orchestrator: per-slide context building and sequential rendering
"""
