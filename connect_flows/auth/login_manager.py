"""
Login Manager
=============
Playwright-based form login for Amazon Connect instances that use local
username/password authentication.

Flow:
    1. Launch a scoped Chromium (always closed on exit)
    2. Open ``/connect/home`` and wait for the username field
    3. Type username + password, click the login button
    4. Race "navigation reached networkidle" against "failure marker in body"
    5. Read the ``lily-auth-prod-lhr`` cookie as the session credential

Security:
    - Credentials are never logged or printed.
    - Only the instance alias and success/failure status appear in logs.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from playwright.async_api import Page

from .. import endpoints
from ..config import ConnectConfig
from ..errors import LoginError
from .base_auth import AuthStrategy, BaseLoginHandler, Credentials
from .browser import launch_browser

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Connect login page selectors
# ---------------------------------------------------------------------------

_USERNAME_SELECTOR = '#wdc_username'
_PASSWORD_SELECTOR = '#wdc_password'
_LOGIN_BUTTON_SELECTOR = '#wdc_login_button'

_FAILURE_MARKER = 'Authentication Failed'
_FAILURE_MARKER_JS = (
    "document.querySelector('body') && "
    f"document.querySelector('body').innerHTML.includes('{_FAILURE_MARKER}')"
)


def _find_cookie(cookies: List[Dict], name: str) -> Optional[str]:
    """Return the value of cookie *name*, or None if absent/empty."""
    for cookie in cookies:
        if cookie.get("name") == name:
            return cookie.get("value") or None
    return None


class FormLoginHandler(BaseLoginHandler):
    """Performs the Connect web-console form login.

    Usage::

        handler = FormLoginHandler(ConnectConfig(username="u", password="p"))
        credential = await handler.acquire_credential("my-instance")
    """

    def __init__(
        self,
        config: ConnectConfig,
        browser_factory: Callable = launch_browser,
    ):
        """
        Args:
            config:          Config carrying username, password and browser settings.
            browser_factory: ``config -> async context manager yielding a Browser``.
        """
        super().__init__(config)
        self._browser_factory = browser_factory

    @property
    def strategy(self) -> AuthStrategy:
        return AuthStrategy.FORM

    @property
    def credentials(self) -> Credentials:
        return Credentials(username=self.config.username, password=self.config.password)

    def validate(self) -> None:
        if not self.credentials.is_complete:
            raise ValueError(
                "username and password are required for form login "
                "(set CONNECT_USERNAME / CONNECT_PASSWORD)"
            )

    # ── Timeouts ──────────────────────────────────────────────────

    # None and 0 both mean "no deadline", matching Playwright's timeout=0.
    @property
    def _timeout_ms(self) -> int:
        return self.config.login_timeout_ms or 0

    @property
    def _deadline_s(self) -> Optional[float]:
        if not self.config.login_timeout_ms:
            return None
        return self.config.login_timeout_ms / 1000

    # ── Login flow ────────────────────────────────────────────────

    async def acquire_credential(self, instance: str) -> str:
        """Log in through the browser and return the session cookie value.

        Raises:
            LoginError: "invalid credentials" when the failure marker shows,
                        "credential not found" when the cookie is missing.
        """
        creds = self.credentials
        logger.info(f"[AUTH] Form login to {instance}")

        async with self._browser_factory(self.config) as browser:
            page = await browser.new_page()

            await page.goto(endpoints.home_url(instance))
            await page.wait_for_selector(
                _USERNAME_SELECTOR, state="visible", timeout=self._timeout_ms
            )

            await page.type(_USERNAME_SELECTOR, creds.username)
            await page.type(_PASSWORD_SELECTOR, creds.password)
            logger.debug("[AUTH] Credentials typed")

            succeeded = await self._submit_and_wait(page, instance)
            if not succeeded:
                logger.error(f"[AUTH] Login rejected for {instance}")
                raise LoginError(
                    "invalid credentials", instance=instance, operation="login"
                )

            cookies = await page.context.cookies(page.url)
            credential = _find_cookie(cookies, endpoints.AUTH_COOKIE_NAME)
            if not credential:
                logger.error(
                    f"[AUTH] No {endpoints.AUTH_COOKIE_NAME} cookie after login "
                    f"({len(cookies)} cookies present)"
                )
                raise LoginError(
                    "credential not found", instance=instance, operation="login"
                )

        logger.info(f"[AUTH] Form login succeeded for {instance}")
        return credential

    async def _submit_and_wait(self, page: Page, instance: str) -> bool:
        """Click login and race success against the failure marker.

        Returns:
            True on navigation success, False when the failure marker shows.
        """
        # Listeners are armed before the click so a fast navigation is not missed.
        navigation = asyncio.ensure_future(self._wait_for_navigation(page))
        failure = asyncio.ensure_future(self._wait_for_failure_marker(page))
        try:
            await page.click(_LOGIN_BUTTON_SELECTOR, no_wait_after=True)
            logger.debug("[AUTH] Login button clicked")
            done, _ = await asyncio.wait(
                {navigation, failure},
                timeout=self._deadline_s,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (navigation, failure):
                if not task.done():
                    task.cancel()
            await asyncio.gather(navigation, failure, return_exceptions=True)

        if not done:
            raise LoginError(
                f"login timed out after {self.config.login_timeout_ms}ms",
                instance=instance,
                operation="login",
            )

        # The failure marker wins a tie: the page is showing the error.
        if failure in done and failure.exception() is None:
            return failure.result()
        if navigation in done:
            return navigation.result()
        return failure.result()

    async def _wait_for_navigation(self, page: Page) -> bool:
        """Resolve once the main frame navigates and the network goes idle."""
        await page.wait_for_event(
            "framenavigated",
            predicate=lambda frame: frame == page.main_frame,
            timeout=0,
        )
        await page.wait_for_load_state("networkidle", timeout=0)
        return True

    async def _wait_for_failure_marker(self, page: Page) -> bool:
        """Resolve once the page body shows the authentication failure text."""
        await page.wait_for_function(_FAILURE_MARKER_JS, timeout=0)
        return False
