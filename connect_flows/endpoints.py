"""
Remote Endpoints
================
URL templates for the undocumented per-instance Amazon Connect web API.

All endpoints live on the instance subdomain ``https://<alias>.awsapps.com``.
They are not a published contract and may change without notice; keep every
path, query parameter and cookie name in this module so there is one place
to update when they do.
"""

from __future__ import annotations

# Session cookie set by the Connect web console after a form login.  The
# federation access token is sent under the same name.
AUTH_COOKIE_NAME = "lily-auth-prod-lhr"

# Fixed page size for flow search; only the first page is requested
FLOW_SEARCH_PAGE_SIZE = 100

HOME_PATH = "/connect/home"


def base_url(instance: str) -> str:
    """Root URL of the instance's web console."""
    return f"https://{instance}.awsapps.com"


def login_redirect_url(instance: str) -> str:
    return f"{base_url(instance)}/connect/login/redirect"


def home_url(instance: str) -> str:
    return f"{base_url(instance)}{HOME_PATH}"


def flow_search_url(instance: str) -> str:
    return f"{base_url(instance)}/connect/entity-search/contact-flows"


def flow_export_url(instance: str) -> str:
    return f"{base_url(instance)}/connect/contact-flows/export"


def flow_edit_url(instance: str) -> str:
    """Edit page (GET with ``id``) and edit submission (POST with ``token``)."""
    return f"{base_url(instance)}/connect/contact-flows/edit"


def auth_headers(credential: str) -> dict:
    """Request headers carrying the session credential."""
    return {"Cookie": f"{AUTH_COOKIE_NAME}={credential}"}
