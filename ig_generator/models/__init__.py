"""
Data Models
===========

Pydantic models for slide specifications, rendered images and API payloads.
"""
