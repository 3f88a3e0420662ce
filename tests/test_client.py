"""Tests for the session-bound flow operations (client.py)."""

import json
from unittest.mock import MagicMock

import pytest

from connect_flows.client import FlowClient
from connect_flows.errors import (
    EditTokenError,
    FormatError,
    StatusError,
    Unauthenticated,
)

from conftest import FLOW_ARN, INSTANCE, response_ctx

EDIT_PAGE = '<html><script>app.constant("token", "edit-tok");</script></html>'
HTML_HEADERS = {"Content-Type": "text/html;charset=UTF-8"}


# ====================================================================
# Unauthenticated sessions
# ====================================================================

class TestUnauthenticated:
    """Every operation fails before any network call without a credential."""

    @pytest.mark.asyncio
    async def test_list_flows(self, empty_session, fake_http):
        client = FlowClient(empty_session, http=fake_http)
        with pytest.raises(Unauthenticated) as info:
            await client.list_flows()
        assert info.value.operation == "list_flows"
        fake_http.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_flow(self, empty_session, fake_http):
        client = FlowClient(empty_session, http=fake_http)
        with pytest.raises(Unauthenticated):
            await client.get_flow(FLOW_ARN)
        fake_http.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_flow(self, empty_session, fake_http, upload_content):
        client = FlowClient(empty_session, http=fake_http)
        with pytest.raises(Unauthenticated):
            await client.upload_flow(FLOW_ARN, upload_content)
        fake_http.get.assert_not_called()
        fake_http.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_upload_flow_with_token(self, empty_session, fake_http, upload_content):
        client = FlowClient(empty_session, http=fake_http)
        with pytest.raises(Unauthenticated):
            await client.upload_flow(FLOW_ARN, upload_content, edit_token="tok")
        fake_http.post.assert_not_called()

    def test_session_reports_authentication(self, session, empty_session):
        assert session.is_authenticated
        assert not empty_session.is_authenticated


# ====================================================================
# list_flows
# ====================================================================

class TestListFlows:

    @pytest.mark.asyncio
    async def test_returns_results(self, session, fake_http, make_response):
        results = [{"arn": FLOW_ARN, "name": "Inbound"}]
        fake_http.get = MagicMock(return_value=response_ctx(
            make_response(json_body={"results": results, "totalCount": 1})
        ))

        assert await FlowClient(session, http=fake_http).list_flows() == results

    @pytest.mark.asyncio
    async def test_first_page_of_100_only(self, session, fake_http, make_response):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body={"results": []})))
        await FlowClient(session, http=fake_http).list_flows()

        args, kwargs = fake_http.get.call_args
        assert args[0] == f"https://{INSTANCE}.awsapps.com/connect/entity-search/contact-flows"
        assert kwargs["params"] == {"pageSize": "100", "startIndex": "0"}
        assert kwargs["headers"] == {"Cookie": "lily-auth-prod-lhr=cookie-value"}
        assert fake_http.get.call_count == 1

    @pytest.mark.asyncio
    async def test_name_filter(self, session, fake_http, make_response):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body={"results": []})))
        await FlowClient(session, http=fake_http).list_flows(filter="Inbound")

        params = fake_http.get.call_args.kwargs["params"]
        assert json.loads(params["filter"]) == {"name": "Inbound"}

    @pytest.mark.asyncio
    async def test_html_response_is_format_error(self, session, fake_http, make_response):
        fake_http.get = MagicMock(return_value=response_ctx(
            make_response(text="<html>login</html>", headers=HTML_HEADERS)
        ))
        with pytest.raises(FormatError) as info:
            await FlowClient(session, http=fake_http).list_flows()
        assert info.value.content_type == "text/html;charset=UTF-8"

    @pytest.mark.asyncio
    async def test_error_status(self, session, fake_http, make_response):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(status=401)))
        with pytest.raises(StatusError) as info:
            await FlowClient(session, http=fake_http).list_flows()
        assert info.value.status == 401

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[{"x": 1}], {"totalCount": 0}])
    async def test_unexpected_shape_is_format_error(self, session, fake_http, make_response, body):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=body)))

        with pytest.raises(FormatError) as info:
            await FlowClient(session, http=fake_http).list_flows()
        assert info.value.message == "unexpected response shape"
        assert info.value.operation == "list_flows"


# ====================================================================
# get_flow
# ====================================================================

class TestGetFlow:

    @pytest.mark.asyncio
    async def test_normalizes_metadata(self, session, fake_http, make_response, export_body):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=export_body)))

        flow = await FlowClient(session, http=fake_http).get_flow(
            FLOW_ARN, name="Inbound", description="Main line", flow_type="contactFlow"
        )

        assert flow["metadata"]["entryPointPosition"] == {"x": 20, "y": 20}
        assert flow["metadata"]["snapToGrid"] is False
        assert flow["metadata"]["status"] == "published"
        assert flow["metadata"]["name"] == "Inbound"
        assert flow["metadata"]["type"] == "contactFlow"

    @pytest.mark.asyncio
    async def test_merges_single_key_mappings(self, session, fake_http, make_response):
        body = [{
            "contactFlowContent": json.dumps({"metadata": [{"a": 1}, {"b": 2}]}),
            "contactFlowStatus": "saved",
        }]
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=body)))

        flow = await FlowClient(session, http=fake_http).get_flow(FLOW_ARN, status="saved")

        assert flow["metadata"]["a"] == 1
        assert flow["metadata"]["b"] == 2

    @pytest.mark.asyncio
    async def test_request_params(self, session, fake_http, make_response, export_body):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=export_body)))
        await FlowClient(session, http=fake_http).get_flow(FLOW_ARN, status="saved")

        args, kwargs = fake_http.get.call_args
        assert args[0].endswith("/connect/contact-flows/export")
        assert kwargs["params"] == {"id": FLOW_ARN, "status": "saved"}

    @pytest.mark.asyncio
    async def test_non_mapping_metadata_raises(self, session, fake_http, make_response):
        body = [{"contactFlowContent": json.dumps({"metadata": "oops"}), "contactFlowStatus": "x"}]
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=body)))

        with pytest.raises(TypeError):
            await FlowClient(session, http=fake_http).get_flow(FLOW_ARN)

    @pytest.mark.asyncio
    async def test_empty_export_is_format_error(self, session, fake_http, make_response):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=[])))
        with pytest.raises(FormatError):
            await FlowClient(session, http=fake_http).get_flow(FLOW_ARN)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [[{"error": "gone"}], ["not-an-object"]])
    async def test_export_without_flow_content_is_format_error(
        self, session, fake_http, make_response, body
    ):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(json_body=body)))

        with pytest.raises(FormatError) as info:
            await FlowClient(session, http=fake_http).get_flow(FLOW_ARN)
        assert info.value.message == "unexpected response shape"
        assert info.value.operation == "get_flow"


# ====================================================================
# upload_flow
# ====================================================================

class TestUploadFlow:

    @pytest.mark.asyncio
    async def test_scrapes_token_once_then_uploads_once(
        self, session, fake_http, make_response, upload_content
    ):
        fake_http.get = MagicMock(return_value=response_ctx(make_response(text=EDIT_PAGE, headers=HTML_HEADERS)))
        fake_http.post = MagicMock(return_value=response_ctx(make_response(json_body={})))

        await FlowClient(session, http=fake_http).upload_flow(FLOW_ARN, upload_content)

        assert fake_http.get.call_count == 1
        assert fake_http.get.call_args.kwargs["params"] == {"id": FLOW_ARN}
        assert fake_http.post.call_count == 1
        assert fake_http.post.call_args.kwargs["params"] == {"token": "edit-tok"}

    @pytest.mark.asyncio
    async def test_explicit_token_skips_scrape(self, session, fake_http, make_response, upload_content):
        fake_http.get = MagicMock()
        fake_http.post = MagicMock(return_value=response_ctx(make_response(json_body={})))

        await FlowClient(session, http=fake_http).upload_flow(
            FLOW_ARN, upload_content, edit_token="given"
        )

        fake_http.get.assert_not_called()
        assert fake_http.post.call_args.kwargs["params"] == {"token": "given"}

    @pytest.mark.asyncio
    async def test_missing_token_pattern_prevents_upload(
        self, session, fake_http, make_response, upload_content
    ):
        fake_http.get = MagicMock(return_value=response_ctx(
            make_response(text="<html>Sign in</html>", headers=HTML_HEADERS)
        ))
        fake_http.post = MagicMock()

        with pytest.raises(EditTokenError) as info:
            await FlowClient(session, http=fake_http).upload_flow(FLOW_ARN, upload_content)

        assert info.value.instance == INSTANCE
        fake_http.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_malformed_arn_fails_before_any_request(self, session, fake_http, upload_content):
        fake_http.get = MagicMock()
        fake_http.post = MagicMock()

        with pytest.raises(ValueError):
            await FlowClient(session, http=fake_http).upload_flow("not-an-arn", upload_content)

        fake_http.get.assert_not_called()
        fake_http.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_request_body(self, session, fake_http, make_response, upload_content):
        fake_http.post = MagicMock(return_value=response_ctx(make_response(json_body={})))

        await FlowClient(session, http=fake_http).upload_flow(
            FLOW_ARN, upload_content, edit_token="tok", publish=True
        )

        args, kwargs = fake_http.post.call_args
        assert args[0] == f"https://{INSTANCE}.awsapps.com/connect/contact-flows/edit"
        assert kwargs["headers"]["content-type"] == "application/json;charset=UTF-8"
        assert kwargs["headers"]["Cookie"] == "lily-auth-prod-lhr=cookie-value"
        body = json.loads(kwargs["data"])
        assert body["contactFlowStatus"] == "published"
        assert body["contactFlowContent"] == upload_content
        assert body["name"] == "Inbound"

    @pytest.mark.asyncio
    async def test_403_is_status_error_without_body(
        self, session, fake_http, make_response, upload_content
    ):
        resp = make_response(status=403, headers=HTML_HEADERS)
        fake_http.post = MagicMock(return_value=response_ctx(resp))

        with pytest.raises(StatusError) as info:
            await FlowClient(session, http=fake_http).upload_flow(
                FLOW_ARN, upload_content, edit_token="tok"
            )

        assert info.value.status == 403
        assert info.value.operation == "upload_flow"
        resp.json.assert_not_called()
        resp.text.assert_not_called()

    @pytest.mark.asyncio
    async def test_non_json_success_is_format_error(
        self, session, fake_http, make_response, upload_content
    ):
        resp = make_response(status=200, text="<html>login</html>", headers=HTML_HEADERS)
        fake_http.post = MagicMock(return_value=response_ctx(resp))

        with pytest.raises(FormatError):
            await FlowClient(session, http=fake_http).upload_flow(
                FLOW_ARN, upload_content, edit_token="tok"
            )
        resp.json.assert_not_called()


# ====================================================================
# Lifecycle
# ====================================================================

class TestLifecycle:

    @pytest.mark.asyncio
    async def test_injected_http_is_not_closed(self, session, fake_http):
        async with FlowClient(session, http=fake_http):
            pass
        fake_http.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_own_http_is_closed(self, session):
        client = FlowClient(session)
        http = client._get_http()
        await client.close()
        assert http.closed
