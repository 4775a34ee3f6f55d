"""
Test Suite for IG Image Generator
=================================

Test organization:
- unit/: Unit tests for individual components
- integration/: HTTP contract tests against the FastAPI application
- utils/: Test fakes shared by both
"""
