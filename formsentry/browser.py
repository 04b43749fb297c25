"""
Browser session lifecycle for CLI runs.
"""

import logging
from typing import Optional

from playwright.sync_api import Browser, BrowserContext, Page, Playwright, sync_playwright

from .config import SentryConfig

# Configure logging
logger = logging.getLogger(__name__)


class BrowserSession:
    """
    Launches Chromium and hands out one page.

    Usage:
        with BrowserSession(config) as page:
            ...
    """

    def __init__(self, config: Optional[SentryConfig] = None):
        self.config = config or SentryConfig()
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    def start(self) -> Page:
        """Setup Playwright browser"""
        cfg = self.config
        logger.info(f"Launching Chromium (headless={cfg.headless})")
        self.playwright = sync_playwright().start()

        args = list(cfg.extra_browser_args)
        if not cfg.headless:
            args.append("--start-maximized")
        try:
            self.browser = self.playwright.chromium.launch(headless=cfg.headless, args=args)

            if cfg.headless:
                self.context = self.browser.new_context(
                    viewport={"width": cfg.viewport_width, "height": cfg.viewport_height}
                )
            else:
                self.context = self.browser.new_context(no_viewport=True)
            self.page = self.context.new_page()
        except BaseException:
            # Stop the driver process even when the browser never came up
            self.close()
            raise
        return self.page

    def close(self) -> None:
        """Cleanup Playwright"""
        logger.info("Closing browser")
        try:
            if self.context:
                self.context.close()
            if self.browser:
                self.browser.close()
        finally:
            if self.playwright:
                self.playwright.stop()
            self.playwright = self.browser = self.context = self.page = None

    def __enter__(self) -> Page:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
