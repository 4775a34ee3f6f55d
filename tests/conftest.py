"""
Test Configuration
==================

Pytest configuration with shared fixtures.
Provides test settings, fake renderer and uploader, and an API test client.
"""

import os

# Logging is configured when ig_generator.config.logging is first imported
os.environ.setdefault("IG_GEN_ENVIRONMENT", "testing")
os.environ.setdefault("IG_GEN_LOG_LEVEL", "DEBUG")

from pathlib import Path
from typing import Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from pydantic_settings import SettingsConfigDict

from ig_generator.api.dependencies import get_orchestrator, get_uploader
from ig_generator.api.main import app
from ig_generator.config.settings import Settings
from ig_generator.core.rendering.orchestrator import SlideOrchestrator
from ig_generator.core.templates.resolver import TemplateResolver

from tests.utils.mocks import FakeSnapshotRenderer, FakeUploader


class TestSettings(Settings):
    """Test-specific settings."""

    __test__ = False

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"

    model_config = SettingsConfigDict(env_file=None)


@pytest.fixture(scope="session")
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture
def fake_renderer() -> FakeSnapshotRenderer:
    """Renderer that records HTML and returns fixed PNG bytes."""
    return FakeSnapshotRenderer()


@pytest.fixture
def fake_uploader() -> FakeUploader:
    """Uploader that records uploads and returns predictable URLs."""
    return FakeUploader()


@pytest.fixture
def packaged_resolver(test_settings: TestSettings) -> TemplateResolver:
    """Resolver over the templates shipped with the package."""
    return TemplateResolver(test_settings.templates_dir)


@pytest.fixture
def orchestrator(
    fake_renderer: FakeSnapshotRenderer, packaged_resolver: TemplateResolver
) -> SlideOrchestrator:
    """Real orchestrator and templates, fake browser."""
    return SlideOrchestrator(fake_renderer, packaged_resolver)  # type: ignore[arg-type]


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Minimal template tree exposing every computed field."""
    line = "{{slideIndex}}/{{totalSlides}}|{{backgroundUrl}}|{{coverTitle}}|{{type}}"
    for relative in (
        "carousel/cover.html",
        "carousel/content.html",
        "carousel/cta.html",
        "quote/cover.html",
        "quote/reflection.html",
    ):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(line, encoding="utf-8")
    return tmp_path


@pytest.fixture
def client(
    test_settings: TestSettings,
    orchestrator: SlideOrchestrator,
    fake_uploader: FakeUploader,
) -> Generator[TestClient, None, None]:
    """API client with the browser and Cloudinary replaced by fakes."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    app.dependency_overrides[get_uploader] = lambda: fake_uploader
    with patch("ig_generator.api.dependencies.get_settings", return_value=test_settings):
        with TestClient(app) as test_client:
            yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def carousel_request() -> dict:
    """Three-slide carousel request."""
    return {
        "template": "carousel",
        "backgroundUrl": "https://images.example.com/bg.jpg",
        "slides": [
            {"type": "cover", "title": "五個習慣\n改變你的早晨", "subtitle": "從今天開始"},
            {"type": "content", "title": "早起喝水", "body": "一杯溫水\n喚醒身體", "number": 1},
            {"type": "cta", "title": "收藏這篇", "buttonText": "追蹤我們", "handle": "morning.daily"},
        ],
    }
