"""
Connect Flows Package
Authenticate against an Amazon Connect instance (form login or federation)
and list, export and upload its contact flows.

Library Usage:
    client = await connect("my-instance", ConnectConfig(username="u", password="p"))

CLI Usage:
    python -m connect_flows <instance> list [--filter NAME]
    python -m connect_flows <instance> export <arn> [--status saved]
    python -m connect_flows <instance> upload <arn> <file> [--publish]
"""

from .config import ConnectConfig
from .client import FlowClient, connect
from .flows import FlowArn
from .auth import AuthProbe, AuthStrategy, Session, classify
from .errors import (
    ConnectFlowsError,
    ProbeError,
    LoginError,
    Unauthenticated,
    EditTokenError,
    StatusError,
    FormatError,
)

__all__ = [
    'connect',
    'ConnectConfig',
    'FlowClient',
    'FlowArn',
    # Auth
    'AuthProbe',
    'AuthStrategy',
    'Session',
    'classify',
    # Errors
    'ConnectFlowsError',
    'ProbeError',
    'LoginError',
    'Unauthenticated',
    'EditTokenError',
    'StatusError',
    'FormatError',
]

__version__ = '1.0.0'
