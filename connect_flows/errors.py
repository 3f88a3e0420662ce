"""
Error Taxonomy
==============
Every failure raised by this package derives from ``ConnectFlowsError`` and
names the instance and the operation that failed, so callers can tell
apart the three situations that need different remediation:

    - bad credentials         → ``LoginError``
    - expired / lost session  → ``FormatError`` / ``StatusError`` / ``Unauthenticated``
    - remote markup changed   → ``EditTokenError`` / ``FormatError``

Federation errors (botocore) are passed through untouched and are NOT
wrapped here.
"""

from __future__ import annotations

from typing import Optional


class ConnectFlowsError(Exception):
    """Base class for all errors raised by ``connect_flows``."""

    def __init__(self, message: str, *, instance: str = "", operation: str = ""):
        super().__init__(message)
        self.message = message
        self.instance = instance
        self.operation = operation

    def __str__(self) -> str:
        context = " ".join(
            part for part in (
                f"instance={self.instance}" if self.instance else "",
                f"operation={self.operation}" if self.operation else "",
            ) if part
        )
        return f"{self.message} ({context})" if context else self.message


class ProbeError(ConnectFlowsError):
    """Strategy classification failed — instance unknown or unreachable."""


class LoginError(ConnectFlowsError):
    """Interactive login was rejected or its post-condition was not met."""


class Unauthenticated(ConnectFlowsError):
    """A flow operation was attempted on a session without a credential."""


class EditTokenError(ConnectFlowsError):
    """The short-lived edit token could not be scraped from the edit page."""


class StatusError(ConnectFlowsError):
    """The remote API answered with an HTTP error status (4xx / 5xx)."""

    def __init__(self, status: int, *, instance: str = "", operation: str = ""):
        super().__init__(f"status {status}", instance=instance, operation=operation)
        self.status = status


class FormatError(ConnectFlowsError):
    """The remote API answered with a differently-shaped response.

    Usually an HTML login page served in place of JSON after the session
    silently expired.
    """

    def __init__(
        self,
        message: str = "html response",
        *,
        content_type: Optional[str] = None,
        instance: str = "",
        operation: str = "",
    ):
        super().__init__(message, instance=instance, operation=operation)
        self.content_type = content_type
