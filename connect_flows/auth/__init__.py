"""
Authentication Module
=====================
Strategy resolution and session-credential acquisition.

Architecture:
    - ``AuthProbe``              — classifies an instance (form vs. federated)
    - ``AuthStrategy``           — the two-valued classification
    - ``BaseLoginHandler``       — abstract contract for both login paths
    - ``FormLoginHandler``       — Playwright form login (session cookie)
    - ``FederatedLoginHandler``  — ``GetFederationToken`` (access token)
    - ``AuthFactory``            — strategy → handler registry
    - ``Session``                — instance + credential + strategy
"""

from .base_auth import AuthStrategy, BaseLoginHandler, Credentials, Session
from .probe import AuthProbe, classify
from .login_manager import FormLoginHandler
from .federated import FederatedLoginHandler
from .auth_factory import AuthFactory
from .browser import launch_browser

__all__ = [
    "AuthStrategy",
    "BaseLoginHandler",
    "Credentials",
    "Session",
    "AuthProbe",
    "classify",
    "FormLoginHandler",
    "FederatedLoginHandler",
    "AuthFactory",
    "launch_browser",
]
