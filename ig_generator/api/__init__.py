"""
FastAPI REST Endpoints
======================

Endpoints:
- POST /generate: Render slides to PNG and upload them, returning public URLs
- GET /health: Health check endpoint
- GET /: Service information
"""
