"""
Auth Probe
==========
Classifies an instance as form-login or federated without logging in.

The Connect login redirect endpoint answers a form POST with a ``Location``
redirect when the instance uses local username/password, and without one
when the instance is configured for SAML / federated identity.  That is the
only observable signal available short of a real login attempt.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from .. import endpoints
from ..errors import ProbeError
from .base_auth import AuthStrategy

logger = logging.getLogger(__name__)


class AuthProbe:
    """Determines the ``AuthStrategy`` of an instance.

    Results are memoised per instance alias, so the strategy is derived
    once per probe object and repeated calls are idempotent.

    Usage::

        probe = AuthProbe()
        strategy = await probe.classify("my-instance")
    """

    def __init__(
        self,
        http: Optional[aiohttp.ClientSession] = None,
        *,
        timeout_s: float = 30.0,
    ):
        """
        Args:
            http:      Shared aiohttp session.  If None, a short-lived session
                       is opened per request.
            timeout_s: Total request timeout.
        """
        self._http = http
        self._timeout = aiohttp.ClientTimeout(total=timeout_s)
        self._cache: Dict[str, AuthStrategy] = {}

    async def classify(self, instance: str) -> AuthStrategy:
        """Return the strategy for *instance*.

        Raises:
            ProbeError: the instance is unknown or the request failed.
        """
        if instance in self._cache:
            return self._cache[instance]

        try:
            if self._http is not None:
                has_redirect = await self._request(self._http, instance)
            else:
                async with aiohttp.ClientSession(timeout=self._timeout) as http:
                    has_redirect = await self._request(http, instance)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            logger.debug(f"[PROBE] {instance}: {exc!r}")
            raise ProbeError(
                f"invalid instance identity: {instance}",
                instance=instance,
                operation="classify",
            ) from exc

        strategy = AuthStrategy.FORM if has_redirect else AuthStrategy.FEDERATED
        logger.info(f"[PROBE] {instance} uses {strategy.value} login")
        self._cache[instance] = strategy
        return strategy

    async def _request(self, http: aiohttp.ClientSession, instance: str) -> bool:
        """POST the redirect form; True if the response carries ``Location``."""
        form = aiohttp.FormData()
        form.add_field("directoryAliasOrId", instance)
        form.add_field("landat", endpoints.HOME_PATH)

        async with http.post(
            endpoints.login_redirect_url(instance),
            data=form,
            allow_redirects=False,
            timeout=self._timeout,
        ) as resp:
            return resp.headers.get("Location") is not None


async def classify(
    instance: str, http: Optional[aiohttp.ClientSession] = None
) -> AuthStrategy:
    """One-shot classification with a fresh ``AuthProbe``."""
    return await AuthProbe(http).classify(instance)
