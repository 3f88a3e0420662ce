"""
Flow Client
===========
Session-bound access to the Connect contact-flow web API, plus the
``connect()`` entry point that resolves the session in the first place.

Usage::

    from connect_flows import ConnectConfig, connect

    async with await connect("my-instance", ConnectConfig(username="u", password="p")) as client:
        summaries = await client.list_flows(filter="Inbound")
        flow = await client.get_flow(summaries[0]["arn"])
        await client.upload_flow(summaries[0]["arn"], json.dumps(flow), publish=True)

Every operation requires a credential and fails fast with ``Unauthenticated``
before touching the network when there is none.  The client holds no mutable
state besides its HTTP session, so operations may run concurrently.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from . import endpoints
from .auth.auth_factory import AuthFactory
from .auth.base_auth import Session
from .auth.probe import AuthProbe
from .config import ConnectConfig
from .errors import EditTokenError, FormatError, StatusError, Unauthenticated
from .flows import build_upload_payload, extract_edit_token, normalize_exported_flow

logger = logging.getLogger(__name__)

_JSON_CONTENT_TYPE = "application/json"


class FlowClient:
    """List, export and upload contact flows on one authenticated instance."""

    def __init__(
        self,
        session: Session,
        *,
        http: Optional[aiohttp.ClientSession] = None,
        timeout_s: float = 30.0,
        user_agent: str = "",
    ):
        """
        Args:
            session:    Resolved session (instance + credential + strategy).
            http:       Shared aiohttp session.  Not closed by ``close()``.
            timeout_s:  Total timeout per request when the client opens its
                        own HTTP session.
            user_agent: User-Agent for the client's own HTTP session.
        """
        self.session = session
        self._http = http
        self._owns_http = http is None
        self._timeout_s = timeout_s
        self._user_agent = user_agent

    @property
    def instance(self) -> str:
        return self.session.instance

    # ── Lifecycle ─────────────────────────────────────────────────

    async def __aenter__(self) -> "FlowClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP session if this client opened it."""
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None:
            headers = {"User-Agent": self._user_agent} if self._user_agent else None
            self._http = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout_s),
                headers=headers,
            )
        return self._http

    # ── Internal helpers ──────────────────────────────────────────

    def _auth_headers(self, operation: str) -> Dict[str, str]:
        """Cookie header for the credential; raises when there is none."""
        if not self.session.is_authenticated:
            raise Unauthenticated(
                "not logged in", instance=self.instance, operation=operation
            )
        return endpoints.auth_headers(self.session.credential)

    def _check_status(self, resp: aiohttp.ClientResponse, operation: str) -> None:
        if resp.status >= 400:
            logger.error(f"[FLOWS] {operation} on {self.instance}: HTTP {resp.status}")
            raise StatusError(resp.status, instance=self.instance, operation=operation)

    def _check_json(self, resp: aiohttp.ClientResponse, operation: str) -> None:
        content_type = resp.headers.get("Content-Type", "")
        if not content_type.startswith(_JSON_CONTENT_TYPE):
            logger.error(
                f"[FLOWS] {operation} on {self.instance}: expected JSON, "
                f"got {content_type or 'no content type'} (session expired?)"
            )
            raise FormatError(
                "html response",
                content_type=content_type,
                instance=self.instance,
                operation=operation,
            )

    async def _read_json(self, resp: aiohttp.ClientResponse, operation: str) -> Any:
        self._check_status(resp, operation)
        self._check_json(resp, operation)
        return await resp.json()

    # ── Public API ────────────────────────────────────────────────

    async def list_flows(self, filter: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return flow summaries, optionally filtered by name.

        Only the first page (``FLOW_SEARCH_PAGE_SIZE`` results) is
        requested; there is no continuation.
        """
        headers = self._auth_headers("list_flows")
        params = {
            "pageSize": str(endpoints.FLOW_SEARCH_PAGE_SIZE),
            "startIndex": "0",
        }
        if filter:
            params["filter"] = json.dumps({"name": filter}, separators=(",", ":"))

        async with self._get_http().get(
            endpoints.flow_search_url(self.instance), params=params, headers=headers
        ) as resp:
            data = await self._read_json(resp, "list_flows")

        if not isinstance(data, dict) or "results" not in data:
            raise FormatError(
                "unexpected response shape", instance=self.instance, operation="list_flows"
            )

        results = data["results"]
        logger.info(f"[FLOWS] {len(results)} flows listed on {self.instance}")
        return results

    async def get_flow(
        self,
        arn: str,
        status: str = "published",
        name: Optional[str] = None,
        description: Optional[str] = None,
        flow_type: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Export one flow and return its parsed, normalised document.

        Args:
            arn:         Contact-flow ARN.
            status:      ``published`` or ``saved``.
            name, description, flow_type:
                         Stamped into ``metadata`` when given (typically the
                         values from the ``list_flows`` summary).
        """
        headers = self._auth_headers("get_flow")
        params = {"id": arn, "status": status}

        async with self._get_http().get(
            endpoints.flow_export_url(self.instance), params=params, headers=headers
        ) as resp:
            data = await self._read_json(resp, "get_flow")

        if not isinstance(data, list) or not data:
            raise FormatError(
                "empty export response", instance=self.instance, operation="get_flow"
            )
        if not isinstance(data[0], dict) or "contactFlowContent" not in data[0]:
            raise FormatError(
                "unexpected response shape", instance=self.instance, operation="get_flow"
            )

        logger.debug(f"[FLOWS] Exported {arn} ({status})")
        return normalize_exported_flow(
            data[0], name=name, description=description, flow_type=flow_type
        )

    async def get_edit_token(self, arn: str) -> str:
        """Scrape the short-lived edit token from the flow edit page.

        Raises:
            EditTokenError: the token pattern is not on the page (markup
                            changed, or the session expired).
        """
        headers = self._auth_headers("get_edit_token")

        async with self._get_http().get(
            endpoints.flow_edit_url(self.instance), params={"id": arn}, headers=headers
        ) as resp:
            html = await resp.text()

        token = extract_edit_token(html)
        if token is None:
            logger.error(f"[FLOWS] Edit token not found on edit page for {arn}")
            raise EditTokenError(
                "failed to get edit token",
                instance=self.instance,
                operation="get_edit_token",
            )
        return token

    async def upload_flow(
        self,
        arn: str,
        flow_content: str,
        edit_token: Optional[str] = None,
        publish: bool = False,
    ) -> None:
        """Save (or publish) a flow document.

        Args:
            arn:          Contact-flow ARN.
            flow_content: Serialized flow document.
            edit_token:   Edit token; scraped via ``get_edit_token`` when omitted.
            publish:      Publish instead of saving a draft.

        Raises:
            ValueError:     *arn* is not a contact-flow ARN (before any request).
            EditTokenError: no token given and none could be scraped.
            StatusError:    the submission returned 4xx / 5xx.
            FormatError:    the submission returned a non-JSON success.
        """
        headers = self._auth_headers("upload_flow")
        payload = build_upload_payload(arn, flow_content, publish=publish)
        if not edit_token:
            edit_token = await self.get_edit_token(arn)

        headers["content-type"] = "application/json;charset=UTF-8"

        async with self._get_http().post(
            endpoints.flow_edit_url(self.instance),
            params={"token": edit_token},
            data=json.dumps(payload),
            headers=headers,
        ) as resp:
            self._check_status(resp, "upload_flow")
            self._check_json(resp, "upload_flow")

        logger.info(
            f"[FLOWS] {'Published' if publish else 'Saved'} {arn} on {self.instance}"
        )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

async def connect(
    instance: str,
    config: Optional[ConnectConfig] = None,
    *,
    probe: Optional[AuthProbe] = None,
    http: Optional[aiohttp.ClientSession] = None,
    **handler_kwargs,
) -> FlowClient:
    """Resolve a session for *instance* and return a bound ``FlowClient``.

    Steps:
        1. ``AuthProbe`` classifies the instance (form vs. federated)
        2. ``AuthFactory`` picks the matching login handler
        3. The handler acquires the credential
        4. A ``FlowClient`` is built around the resulting ``Session``

    Args:
        instance:       Instance alias (``<alias>.awsapps.com``).
        config:         Credentials / browser / federation settings.  Blank
                        fields are filled from the environment.
        probe:          Reuse an existing probe (and its memoised results).
        http:           Shared aiohttp session for the probe and the client.
        handler_kwargs: Forwarded to the login handler constructor.

    Raises:
        ProbeError:  the instance could not be classified.
        LoginError:  form login rejected or no session cookie.
        ValueError:  config lacks what the selected strategy needs.
    """
    config = config or ConnectConfig()
    config.resolve_credentials()

    probe = probe or AuthProbe(http, timeout_s=config.http_timeout_s)
    strategy = await probe.classify(instance)

    handler = AuthFactory.get_handler(strategy, config, **handler_kwargs)
    session = await handler.login(instance)

    return FlowClient(
        session,
        http=http,
        timeout_s=config.http_timeout_s,
        user_agent=config.user_agent,
    )
