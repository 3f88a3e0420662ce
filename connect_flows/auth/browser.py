"""
Browser Launcher
================
Scoped Playwright Chromium for the form login.

``launch_browser()`` is an async context manager: the browser and the
Playwright driver are stopped on every exit path, including errors raised
inside the ``async with`` block.  Never rely on garbage collection to reap
a Chromium process.

Usage::

    async with launch_browser(config) as browser:
        page = await browser.new_page()
        ...
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, async_playwright

from ..config import ConnectConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def launch_browser(config: ConnectConfig) -> AsyncIterator[Browser]:
    """Start Playwright and launch Chromium with the configured flags."""
    pw = await async_playwright().start()
    browser = None

    try:
        browser = await pw.chromium.launch(
            headless=config.headless,
            executable_path=config.chromium_path or None,
            args=list(config.browser_args),
        )
        logger.debug(
            f"[BROWSER] Launched Chromium "
            f"({config.chromium_path or 'bundled'}, headless={config.headless})"
        )
        yield browser
    finally:
        try:
            if browser is not None:
                try:
                    await browser.close()
                except Exception as e:
                    logger.warning(f"[BROWSER] Error closing browser: {e}")
        finally:
            await pw.stop()
            logger.debug("[BROWSER] Closed")
