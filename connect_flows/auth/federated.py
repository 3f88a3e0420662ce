"""
Federated Login
===============
Acquires a session credential for SAML / federated Connect instances via the
Amazon Connect ``GetFederationToken`` API.

The caller's ambient AWS credentials (profile, env vars, instance role) are
used by boto3 as usual.  A fresh token is requested on every login — there
is no caching and no retry.  botocore errors propagate unchanged.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from typing import Any, Callable, Optional

import boto3

from ..config import ConnectConfig
from .base_auth import AuthStrategy, BaseLoginHandler

logger = logging.getLogger(__name__)


def _default_client_factory(region: Optional[str]) -> Any:
    if region:
        return boto3.client("connect", region_name=region)
    return boto3.client("connect")


class FederatedLoginHandler(BaseLoginHandler):
    """Exchanges AWS credentials for a Connect federation access token."""

    def __init__(
        self,
        config: ConnectConfig,
        client_factory: Callable[[Optional[str]], Any] = _default_client_factory,
    ):
        """
        Args:
            config:         Config carrying ``instance_id`` and ``aws_region``.
            client_factory: ``region -> boto3 Connect client``.
        """
        super().__init__(config)
        self._client_factory = client_factory

    @property
    def strategy(self) -> AuthStrategy:
        return AuthStrategy.FEDERATED

    def validate(self) -> None:
        if not self.config.instance_id:
            raise ValueError(
                "instance_id is required for federated login "
                "(set CONNECT_INSTANCE_ID)"
            )

    async def acquire_credential(self, instance: str) -> str:
        """Return the federation access token for ``config.instance_id``.

        *instance* is the console alias and is only used for logging; the
        API call is keyed on the instance id.
        """
        logger.info(
            f"[FEDERATION] Requesting federation token for {instance} "
            f"(instance id {self.config.instance_id})"
        )
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(
            None, functools.partial(self._get_federation_token, self.config.instance_id)
        )
        return response["Credentials"]["AccessToken"]

    def _get_federation_token(self, instance_id: str) -> dict:
        client = self._client_factory(self.config.aws_region)
        return client.get_federation_token(InstanceId=instance_id)
