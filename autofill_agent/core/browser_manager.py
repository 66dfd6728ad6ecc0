"""Browser lifecycle management for command-line autofill runs."""

import logging
from contextlib import nullcontext
from typing import Any, Dict, Optional

from playwright.async_api import async_playwright

from autofill_agent.core.diagnostics_manager import DiagnosticsManager
from autofill_agent.core.playwright_adapter import PlaywrightPage

logger = logging.getLogger(__name__)


class BrowserManager:
    """Manages a Playwright browser session."""

    def __init__(
        self,
        visible: bool = False,
        options: Optional[Dict[str, Any]] = None,
        diagnostics_manager: Optional[DiagnosticsManager] = None
    ):
        """Initialize the browser manager.

        Args:
            visible: Whether to show the browser window
            options: Browser options from Config.get_browser_options()
            diagnostics_manager: Optional diagnostics manager
        """
        self.visible = visible
        self.options = options or {}
        self.diagnostics_manager = diagnostics_manager
        self.logger = logging.getLogger(__name__)

        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

    async def initialize(self) -> bool:
        """Start Playwright and open a page.

        Returns:
            True if successful, False otherwise
        """
        try:
            self.playwright = await async_playwright().start()
            headless = self.options.get("headless", True) and not self.visible
            self.browser = await self.playwright.chromium.launch(headless=headless)
            self.context = await self.browser.new_context(
                viewport=self.options.get("viewport", {"width": 1280, "height": 1024})
            )
            self.page = await self.context.new_page()
            self.page.set_default_timeout(self.options.get("timeout", 30000))
            self.logger.info("Browser initialized")
            return True
        except Exception as e:
            self.logger.error(f"Failed to start browser: {e}")
            return False

    async def navigate(self, url: str) -> bool:
        """
        Navigate to a URL and wait for the network to settle.

        Args:
            url: URL to navigate to

        Returns:
            True if navigation successful, False otherwise
        """
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self.options.get("navigation_timeout", 60000))
            return True
        except Exception as e:
            self.logger.error(f"Failed to navigate to {url}: {e}")
            return False

    def page_adapter(self) -> PlaywrightPage:
        return PlaywrightPage(self.page)

    async def close(self) -> None:
        """Close the browser session."""
        with self.diagnostics_manager.track_stage("browser_close") if self.diagnostics_manager else nullcontext():
            for resource in (self.page, self.context, self.browser):
                if resource is not None:
                    try:
                        await resource.close()
                    except Exception as e:
                        self.logger.error(f"Error closing browser resource: {e}")
            if self.playwright is not None:
                await self.playwright.stop()
            self.page = self.context = self.browser = self.playwright = None
