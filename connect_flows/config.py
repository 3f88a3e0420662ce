"""
Connection Configuration
========================
Single source of truth for everything ``connect()`` needs besides the
instance alias: browser settings for the form login, credentials, the
Connect instance id for federation, and HTTP client limits.

Populate via:
    - ``ConnectConfig()``                    → all defaults
    - ``ConnectConfig(username="ops")``      → override one value
    - ``ConnectConfig.from_cli_args(ns)``    → from an argparse Namespace

Blank credentials are filled from the environment by
``resolve_credentials()`` — see ``_ENV_VARS``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "headless": True,
    "login_timeout_ms": None,        # None = wait indefinitely (no deadline)
    "http_timeout_s": 30.0,
    "user_agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
}

# Chromium flags used for the headless login browser
_BROWSER_ARGS: List[str] = [
    '--disable-gpu',
    '--renderer',
    '--no-sandbox',
    '--no-service-autorun',
    '--no-experiments',
    '--no-default-browser-check',
    '--disable-dev-shm-usage',
    '--disable-setuid-sandbox',
    '--no-first-run',
    '--no-zygote',
    '--single-process',
    '--disable-extensions',
]

# field name → environment variable
_ENV_VARS = {
    "username": "CONNECT_USERNAME",
    "password": "CONNECT_PASSWORD",
    "instance_id": "CONNECT_INSTANCE_ID",
    "chromium_path": "CONNECT_CHROMIUM_PATH",
    "aws_region": "AWS_REGION",
}


@dataclass
class ConnectConfig:
    """Configuration bundle handed to ``connect()``."""

    # ---- Form login ----
    username: str = ""
    password: str = ""
    chromium_path: Optional[str] = None
    """Override for the Chromium executable.  None = Playwright's bundled build."""

    headless: bool = _DEFAULTS["headless"]
    browser_args: List[str] = field(default_factory=lambda: list(_BROWSER_ARGS))

    login_timeout_ms: Optional[int] = _DEFAULTS["login_timeout_ms"]
    """Deadline for the username-field wait and the success/failure race.
    None (or 0) keeps the historical behaviour of waiting without a deadline."""

    # ---- Federation ----
    instance_id: str = ""
    """Connect instance id (UUID) passed to ``GetFederationToken``."""

    aws_region: Optional[str] = None

    # ---- HTTP ----
    http_timeout_s: float = _DEFAULTS["http_timeout_s"]
    user_agent: str = _DEFAULTS["user_agent"]

    def resolve_credentials(self) -> None:
        """Fill blank fields from environment variables.

        Env vars checked:
            ``CONNECT_USERNAME`` / ``CONNECT_PASSWORD``
            ``CONNECT_INSTANCE_ID`` / ``CONNECT_CHROMIUM_PATH``
            ``AWS_REGION``

        Values set directly on the config always win.
        """
        for attr, env_var in _ENV_VARS.items():
            if not getattr(self, attr):
                value = os.environ.get(env_var, "")
                if value:
                    setattr(self, attr, value)

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_cli_args(cls, args) -> "ConnectConfig":
        """Build config from an argparse Namespace (``__main__.py``)."""
        cfg = cls(
            username=getattr(args, "username", None) or "",
            password=getattr(args, "password", None) or "",
            chromium_path=getattr(args, "chromium_path", None),
            instance_id=getattr(args, "instance_id", None) or "",
            aws_region=getattr(args, "region", None),
            headless=not getattr(args, "headed", False),
            login_timeout_ms=getattr(args, "login_timeout_ms", None),
        )
        cfg.resolve_credentials()
        return cfg

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, instance: str) -> None:
        """Emit a structured summary to the logger (secrets omitted)."""
        logger.info("=" * 60)
        logger.info("CONNECT CONFIG")
        logger.info("=" * 60)
        logger.info(f"  Instance:         {instance}")
        logger.info(f"  Username:         {self.username or '<unset>'}")
        logger.info(f"  Password:         {'<set>' if self.password else '<unset>'}")
        logger.info(f"  Instance ID:      {self.instance_id or '<unset>'}")
        logger.info(f"  AWS Region:       {self.aws_region or '<default>'}")
        logger.info(f"  Chromium:         {self.chromium_path or '<bundled>'}")
        logger.info(f"  Headless:         {self.headless}")
        if self.login_timeout_ms is None:
            logger.info("  Login Timeout:    none")
        else:
            logger.info(f"  Login Timeout:    {self.login_timeout_ms}ms")
        logger.info("=" * 60)
