"""Shared fixtures: fake aiohttp sessions, Playwright pages and browsers."""

import asyncio
import json
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest

from connect_flows.auth.base_auth import AuthStrategy, Session
from connect_flows.config import ConnectConfig


INSTANCE = "acme-contact"
FLOW_ARN = (
    "arn:aws:connect:eu-west-2:123456789012:instance/"
    "11111111-2222-3333-4444-555555555555/contact-flow/"
    "aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee"
)


async def block_forever(*args, **kwargs):
    """Awaitable that never settles (until cancelled)."""
    await asyncio.Event().wait()


# --- HTTP fakes ---


def response_ctx(resp):
    """Wrap *resp* in an object usable as ``async with http.get(...) as resp``."""
    ctx = MagicMock()
    ctx.__aenter__ = AsyncMock(return_value=resp)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


@pytest.fixture
def make_response():
    """Factory for fake ``aiohttp.ClientResponse`` objects."""
    def _create(status=200, json_body=None, text="", headers=None):
        resp = MagicMock()
        resp.status = status
        resp.headers = headers if headers is not None else {
            "Content-Type": "application/json;charset=UTF-8",
        }
        resp.json = AsyncMock(return_value=json_body)
        resp.text = AsyncMock(return_value=text)
        return resp
    return _create


@pytest.fixture
def fake_http():
    """A fake ``aiohttp.ClientSession``; configure ``get`` / ``post`` per test."""
    http = MagicMock()
    http.close = AsyncMock()
    return http


# --- Session fixtures ---


@pytest.fixture
def session():
    return Session(instance=INSTANCE, credential="cookie-value", strategy=AuthStrategy.FORM)


@pytest.fixture
def empty_session():
    return Session(instance=INSTANCE, credential="", strategy=AuthStrategy.FORM)


@pytest.fixture
def form_config():
    return ConnectConfig(username="agent", password="s3cret")


@pytest.fixture
def federated_config():
    return ConnectConfig(instance_id="11111111-2222-3333-4444-555555555555", aws_region="eu-west-2")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep real CONNECT_* / AWS_REGION values out of the tests."""
    for var in (
        "CONNECT_USERNAME",
        "CONNECT_PASSWORD",
        "CONNECT_INSTANCE_ID",
        "CONNECT_CHROMIUM_PATH",
        "AWS_REGION",
    ):
        monkeypatch.delenv(var, raising=False)


# --- Browser fakes ---


class FakeBrowserFactory:
    """Stands in for ``launch_browser``; counts acquire / release."""

    def __init__(self, page):
        self.page = page
        self.acquired = 0
        self.released = 0
        self.configs = []

    @asynccontextmanager
    async def __call__(self, config):
        self.acquired += 1
        self.configs.append(config)
        browser = MagicMock()
        browser.new_page = AsyncMock(return_value=self.page)
        try:
            yield browser
        finally:
            self.released += 1


@pytest.fixture
def make_page():
    """Factory for fake Playwright pages.

    ``outcome`` selects which side of the login race settles:
    ``"success"`` (navigation), ``"failure"`` (marker) or ``"hang"`` (neither).
    """
    def _create(outcome="success", cookies=None):
        page = MagicMock()
        page.main_frame = MagicMock(name="main_frame")
        page.goto = AsyncMock()
        page.wait_for_selector = AsyncMock()
        page.type = AsyncMock()
        page.click = AsyncMock()
        page.wait_for_load_state = AsyncMock()

        if outcome == "success":
            page.wait_for_event = AsyncMock(return_value=page.main_frame)
            page.wait_for_function = AsyncMock(side_effect=block_forever)
        elif outcome == "failure":
            page.wait_for_event = AsyncMock(side_effect=block_forever)
            page.wait_for_function = AsyncMock(return_value=MagicMock())
        else:
            page.wait_for_event = AsyncMock(side_effect=block_forever)
            page.wait_for_function = AsyncMock(side_effect=block_forever)

        if cookies is None:
            cookies = [
                {"name": "JSESSIONID", "value": "other"},
                {"name": "lily-auth-prod-lhr", "value": "cookie-value"},
            ]
        page.context.cookies = AsyncMock(return_value=cookies)
        return page
    return _create


# --- Flow fixtures ---


@pytest.fixture
def flow_document():
    return {
        "modules": [{"id": "m1", "type": "Disconnect"}],
        "version": "1",
        "start": "m1",
        "metadata": [
            {"entryPointPosition": {"x": 20, "y": 20}},
            {"snapToGrid": False},
        ],
    }


@pytest.fixture
def export_body(flow_document):
    return [{
        "contactFlowContent": json.dumps(flow_document),
        "contactFlowStatus": "published",
    }]


@pytest.fixture
def upload_content():
    return json.dumps({
        "modules": [],
        "metadata": {"name": "Inbound", "description": "Main line", "type": "contactFlow"},
    })
