"""
Snapshot Renderer
=================

Playwright-based PNG capture of slide HTML.
Owns the process-wide Chromium instance and hands out one isolated page per slide.
"""

from typing import Optional, Any, AsyncGenerator
import asyncio
from contextlib import asynccontextmanager

from playwright.async_api import (
    async_playwright,
    Browser,
    Page,
    Playwright,
    TimeoutError as PlaywrightTimeoutError,
)

from ig_generator.config.logging import get_logger
from ig_generator.config.settings import get_settings, Settings
from ig_generator.models.schemas import RenderOptions

logger = get_logger(__name__)


class RenderError(Exception):
    """Exception raised when a slide cannot be rendered."""

    pass


class RenderTimeoutError(RenderError):
    """Exception raised when slide content does not settle in time."""

    pass


class BrowserLaunchError(RenderError):
    """Exception raised when Chromium cannot be started."""

    pass


class BrowserManager:
    """Single shared Chromium instance, launched on first use."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="browser_manager")
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    async def get_browser(self) -> Browser:
        """Return the shared browser, launching it on first use or after a crash."""
        browser = self._browser
        if browser is not None and browser.is_connected():
            return browser

        async with self._lock:
            if self._browser is not None and not self._browser.is_connected():
                self.logger.warning("Browser disconnected, relaunching")
                await self._discard()
            if self._browser is None:
                self._browser = await self._launch()
            return self._browser

    async def _launch(self) -> Browser:
        try:
            self._playwright = await async_playwright().start()
            browser = await self._playwright.chromium.launch(
                headless=self.settings.browser_headless,
                executable_path=self.settings.browser_executable_path,
                args=self.settings.browser_args,
            )
            self.logger.info(
                "Browser launched",
                executable_path=self.settings.browser_executable_path,
            )
            return browser
        except Exception as e:
            self.logger.error("Failed to launch browser", error=str(e))
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
            raise BrowserLaunchError(f"Browser launch failed: {e}") from e

    async def _discard(self) -> None:
        """Drop a dead browser and its Playwright driver."""
        self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                self.logger.warning("Error stopping Playwright", error=str(e))
            self._playwright = None

    @asynccontextmanager
    async def new_page(self, options: RenderOptions) -> AsyncGenerator[Page, None]:
        """Open an isolated page with a fixed viewport; always closed on exit."""
        browser = await self.get_browser()
        context = await browser.new_context(
            viewport={"width": options.width, "height": options.height},
            device_scale_factor=options.device_scale_factor,
        )
        try:
            yield await context.new_page()
        finally:
            await context.close()

    async def close(self) -> None:
        """Close the browser and stop Playwright."""
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
                self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        self.logger.info("Browser closed")


class SnapshotRenderer:
    """Render final slide HTML to a PNG of exactly the viewport size."""

    def __init__(self, browser_manager: BrowserManager, options: Optional[RenderOptions] = None):
        self.browser_manager = browser_manager
        self.options = options or default_render_options(browser_manager.settings)
        self.logger: Any = logger.bind(component="snapshot_renderer")

    async def render(self, html_content: str) -> bytes:
        """
        Capture HTML as a PNG.

        Args:
            html_content: Final slide HTML

        Returns:
            PNG bytes cropped to the configured viewport

        Raises:
            RenderTimeoutError: If network idle or fonts are not reached in time
            RenderError: For any other navigation or capture failure
        """
        options = self.options
        try:
            async with self.browser_manager.new_page(options) as page:
                await page.set_content(
                    html_content,
                    wait_until="networkidle",
                    timeout=options.network_idle_timeout_ms,
                )
                await asyncio.wait_for(
                    page.evaluate("document.fonts.ready.then(() => true)"),
                    timeout=options.font_timeout,
                )
                png_data = await page.screenshot(
                    type="png",
                    full_page=False,
                    clip={"x": 0, "y": 0, "width": options.width, "height": options.height},
                )
        except PlaywrightTimeoutError as e:
            self.logger.error("Slide content did not reach network idle", error=str(e))
            raise RenderTimeoutError(
                f"Render timed out after {options.network_idle_timeout_ms}ms: {e}"
            ) from e
        except asyncio.TimeoutError as e:
            self.logger.error("Fonts did not finish loading", timeout=options.font_timeout)
            raise RenderTimeoutError(
                f"Font loading timed out after {options.font_timeout}s"
            ) from e
        except RenderError:
            raise
        except Exception as e:
            self.logger.error("Snapshot failed", error=str(e))
            raise RenderError(f"Render failed: {e}") from e

        self.logger.debug("Snapshot captured", file_size=len(png_data))
        return png_data


def default_render_options(settings: Optional[Settings] = None) -> RenderOptions:
    """Build render options from settings."""
    settings = settings or get_settings()
    return RenderOptions(
        width=settings.viewport_width,
        height=settings.viewport_height,
        device_scale_factor=settings.device_scale_factor,
        network_idle_timeout_ms=settings.render_timeout_ms,
        font_timeout=settings.font_timeout,
    )
