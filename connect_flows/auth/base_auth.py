"""
Base Authentication Handler (Abstract)
======================================
Defines the contract that BOTH login strategies implement.

An Amazon Connect instance is configured for exactly one of:
    - ``AuthStrategy.FORM``       — local username/password on the web console
    - ``AuthStrategy.FEDERATED``  — SAML / federated identity

``AuthProbe`` decides which one applies; ``AuthFactory`` maps the decision to
a concrete ``BaseLoginHandler``; the handler's ``acquire_credential()``
returns an opaque session credential.  Callers never need to know which
physical form (cookie value or access token) the credential took.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from ..config import ConnectConfig

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Strategy
# ---------------------------------------------------------------------------

class AuthStrategy(enum.Enum):
    """How an instance expects to be logged into."""

    FORM = "form"
    FEDERATED = "federated"


# ---------------------------------------------------------------------------
# Credentials container
# ---------------------------------------------------------------------------

@dataclass
class Credentials:
    """Username/password pair for the form login."""
    username: str = ""
    password: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.username and self.password)

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password=<hidden>)"


# ---------------------------------------------------------------------------
# Resolved session
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Session:
    """Instance + credential + the strategy that produced it.

    Created once at login time and never refreshed.
    """
    instance: str
    credential: str
    strategy: AuthStrategy

    @property
    def is_authenticated(self) -> bool:
        return bool(self.credential)

    def __repr__(self) -> str:
        return (
            f"Session(instance={self.instance!r}, "
            f"strategy={self.strategy.value}, "
            f"credential={'<set>' if self.credential else '<empty>'})"
        )


# ---------------------------------------------------------------------------
# Abstract Base Handler
# ---------------------------------------------------------------------------

class BaseLoginHandler(ABC):
    """Abstract base for the two login strategies.

    Subclasses MUST implement:
        - ``strategy``                      — the ``AuthStrategy`` they serve
        - ``validate()``                    — reject incomplete config early
        - ``acquire_credential(instance)``  — perform the login
    """

    def __init__(self, config: ConnectConfig):
        self.config = config

    @property
    @abstractmethod
    def strategy(self) -> AuthStrategy:
        ...

    @abstractmethod
    def validate(self) -> None:
        """Raise ``ValueError`` if the config cannot support this login.

        Called before any browser is launched or AWS call is made.
        """
        ...

    @abstractmethod
    async def acquire_credential(self, instance: str) -> str:
        """Log into *instance* and return the session credential.

        Never returns an empty string; failures raise.
        """
        ...

    async def login(self, instance: str) -> Session:
        """Validate, acquire the credential and wrap it in a ``Session``."""
        self.validate()
        credential = await self.acquire_credential(instance)
        logger.info(f"[AUTH] Session established for {instance} ({self.strategy.value})")
        return Session(instance=instance, credential=credential, strategy=self.strategy)
