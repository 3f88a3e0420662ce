"""
Authentication Factory
======================
Maps an ``AuthStrategy`` to the login handler that serves it.

The strategy is decided once by ``AuthProbe``; the factory never
re-evaluates it.  Both built-in handlers register themselves on import.

Usage::

    from connect_flows.auth.auth_factory import AuthFactory

    handler = AuthFactory.get_handler(AuthStrategy.FORM, config)
    session = await handler.login("my-instance")
"""

from __future__ import annotations

import logging
from typing import Dict, List, Type

from ..config import ConnectConfig
from .base_auth import AuthStrategy, BaseLoginHandler
from .federated import FederatedLoginHandler
from .login_manager import FormLoginHandler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Handler Registry
# ---------------------------------------------------------------------------

# Global registry: maps strategy → handler class
_HANDLER_REGISTRY: Dict[AuthStrategy, Type[BaseLoginHandler]] = {}


class AuthFactory:
    """Factory for strategy-specific login handlers."""

    @staticmethod
    def register(strategy: AuthStrategy, handler_class: Type[BaseLoginHandler]) -> None:
        """Register *handler_class* as the handler for *strategy*."""
        _HANDLER_REGISTRY[strategy] = handler_class
        logger.debug(f"[AUTH-FACTORY] Registered handler: {strategy.value}")

    @staticmethod
    def get_handler(strategy: AuthStrategy, config: ConnectConfig, **kwargs) -> BaseLoginHandler:
        """Instantiate the handler registered for *strategy*.

        Extra keyword arguments are forwarded to the handler constructor
        (e.g. ``browser_factory`` or ``client_factory``).

        Raises:
            KeyError: no handler is registered for *strategy*.
        """
        handler_class = _HANDLER_REGISTRY[strategy]
        logger.debug(f"[AUTH-FACTORY] Using {handler_class.__name__} for {strategy.value}")
        return handler_class(config, **kwargs)

    @staticmethod
    def list_strategies() -> List[AuthStrategy]:
        """Return all registered strategies."""
        return list(_HANDLER_REGISTRY.keys())


# ---------------------------------------------------------------------------
# Auto-register built-in handlers on import
# ---------------------------------------------------------------------------

AuthFactory.register(AuthStrategy.FORM, FormLoginHandler)
AuthFactory.register(AuthStrategy.FEDERATED, FederatedLoginHandler)
