#!/usr/bin/env python3
"""
Unit tests for the request gateway: URL/headers, response interpretation and errors.
"""

import base64
import json
from unittest.mock import patch

import pytest
import requests

from testrail_mcp.errors import (
    TRANSPORT_ERROR_PREFIX,
    DeserializationError,
    InputValidationError,
    TransportError,
    UpstreamError,
)
from testrail_mcp.gateway import EMPTY, TestRailGateway, encode_query, normalize_base_url

from ..conftest import API_KEY, BASE_URL, USERNAME, make_response

REQUEST = "testrail_mcp.gateway.requests.request"


class TestBaseUrl:

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [
        "https://x.testrail.io",
        "https://x.testrail.io/",
        "https://x.testrail.io///",
        "  https://x.testrail.io/  ",
    ])
    def test_trailing_slashes_are_stripped(self, raw):
        assert normalize_base_url(raw) == BASE_URL
        assert TestRailGateway(raw, USERNAME, API_KEY).base_url == BASE_URL

    @pytest.mark.unit
    def test_strip_is_idempotent(self):
        once = normalize_base_url("https://x.testrail.io/")
        assert normalize_base_url(once) == once

    @pytest.mark.unit
    def test_url_keeps_instance_subpath(self):
        gateway = TestRailGateway("https://example.com/testrail/", USERNAME, API_KEY)
        assert gateway.build_url("get_case/1") == "https://example.com/testrail/index.php?/api/v2/get_case/1"


class TestRequestConstruction:

    @pytest.mark.unit
    def test_get_case_url_and_basic_auth(self, gateway):
        """GET to the v2 endpoint with a Basic header of user:key."""
        with patch(REQUEST, return_value=make_response(200, '{"id": 42}')) as mock_request:
            gateway.execute("get_case/42")

        args, kwargs = mock_request.call_args
        assert args == ("GET", "https://x.testrail.io/index.php?/api/v2/get_case/42")
        expected = base64.b64encode(f"{USERNAME}:{API_KEY}".encode()).decode()
        assert kwargs["headers"]["Authorization"] == f"Basic {expected}"
        assert kwargs["headers"]["Content-Type"] == "application/json"
        assert kwargs["data"] is None

    @pytest.mark.unit
    def test_post_sends_body_verbatim(self, gateway):
        body = json.dumps({"title": "Login works"})
        with patch(REQUEST, return_value=make_response(200, '{"id": 5}')) as mock_request:
            gateway.execute("add_case/3", method="POST", body=body)

        args, kwargs = mock_request.call_args
        assert args[0] == "POST"
        assert kwargs["data"] == body

    @pytest.mark.unit
    def test_query_pairs_are_appended_with_ampersand(self, gateway):
        with patch(REQUEST, return_value=make_response(200, "[]")) as mock_request:
            gateway.execute("get_cases/1", params=[("suite_id", 2), ("priority_id", "1,2"), ("filter", "log in")])

        url = mock_request.call_args[0][1]
        assert url == "https://x.testrail.io/index.php?/api/v2/get_cases/1&suite_id=2&priority_id=1,2&filter=log%20in"

    @pytest.mark.unit
    def test_params_accept_a_generator(self, gateway):
        with patch(REQUEST, return_value=make_response(200, "[]")) as mock_request:
            gateway.execute("get_cases/1", params=(pair for pair in [("limit", 5)]))

        assert mock_request.call_args[0][1].endswith("get_cases/1&limit=5")

    @pytest.mark.unit
    def test_encode_query_empty(self):
        assert encode_query(None) == ""
        assert encode_query([]) == ""

    @pytest.mark.unit
    def test_none_header_override_removes_default(self, gateway):
        headers = gateway.build_headers({"Content-Type": None})
        assert "Content-Type" not in headers
        assert headers["Authorization"].startswith("Basic ")

    @pytest.mark.unit
    def test_header_override_replaces_default(self, gateway):
        headers = gateway.build_headers({"Content-Type": "text/plain"})
        assert headers["Content-Type"] == "text/plain"

    @pytest.mark.unit
    def test_auth_header_is_computed_once(self, gateway):
        first = gateway.build_headers()["Authorization"]
        with patch("testrail_mcp.gateway.base64.b64encode") as mock_b64:
            second = gateway.build_headers()["Authorization"]
        mock_b64.assert_not_called()
        assert first == second

    @pytest.mark.unit
    @pytest.mark.parametrize("path", [
        "https://evil.example.com/get_case/1",
        "/index.php?/api/v2/get_case/1",
        "index.php?/api/v2/get_case/1",
        "/get_case/1",
    ])
    def test_path_must_be_relative(self, gateway, path):
        with patch(REQUEST) as mock_request:
            with pytest.raises(InputValidationError):
                gateway.execute(path)
        mock_request.assert_not_called()


class TestResponseInterpretation:

    @pytest.mark.unit
    def test_delete_with_zero_content_length_is_empty(self, gateway):
        with patch(REQUEST, return_value=make_response(200, b"", headers={"Content-Length": "0"})):
            result = gateway.execute("delete_case/42", method="POST")

        assert result is EMPTY
        assert result is not None
        assert not result

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [b"", b"   ", b"{not json", b"<html>oops</html>", b'{"id": 1}'])
    def test_delete_paths_ignore_any_body(self, gateway, body):
        with patch(REQUEST, return_value=make_response(200, body)):
            assert gateway.execute("delete_section/7", method="POST") is EMPTY

    @pytest.mark.unit
    def test_explicit_flag_overrides_delete_convention(self, gateway):
        with patch(REQUEST, return_value=make_response(200, '{"cases": 3}')):
            result = gateway.execute("delete_suite/1", method="POST", expects_empty_body=False)
        assert result == {"cases": 3}

    @pytest.mark.unit
    def test_explicit_flag_applies_to_other_paths(self, gateway):
        with patch(REQUEST, return_value=make_response(200, "garbage")):
            assert gateway.execute("close_run/1", method="POST", expects_empty_body=True) is EMPTY

    @pytest.mark.unit
    def test_missing_content_length_is_empty(self, gateway):
        response = make_response(200, '{"id": 1}', content_length=False)
        with patch(REQUEST, return_value=response):
            assert gateway.execute("get_case/1") is EMPTY

    @pytest.mark.unit
    @pytest.mark.parametrize("body", [" ", "\n", " \t\r\n "])
    def test_whitespace_body_is_empty(self, gateway, body):
        with patch(REQUEST, return_value=make_response(200, body)):
            assert gateway.execute("get_case/1") is EMPTY

    @pytest.mark.unit
    def test_json_object_is_parsed(self, gateway):
        with patch(REQUEST, return_value=make_response(200, '{"id":5,"title":"Login works"}')):
            assert gateway.execute("get_case/5") == {"id": 5, "title": "Login works"}

    @pytest.mark.unit
    def test_json_null_is_not_empty(self, gateway):
        with patch(REQUEST, return_value=make_response(200, "null")):
            result = gateway.execute("get_case/5")
        assert result is None
        assert result is not EMPTY

    @pytest.mark.unit
    @pytest.mark.parametrize("value", [
        [],
        [{"id": 1}, {"id": 2}],
        {"offset": 0, "limit": 250, "size": 1, "_links": {"next": None, "prev": None}, "cases": [{"id": 1}]},
        {"title": "Ünïcode ✓", "nested": {"list": [1, 2.5, True, None]}},
    ])
    def test_json_values_come_back_unchanged(self, gateway, value):
        with patch(REQUEST, return_value=make_response(200, json.dumps(value))):
            assert gateway.execute("get_cases/1") == value

    @pytest.mark.unit
    def test_html_login_page_is_a_deserialization_error(self, gateway):
        """An expired session answering 200 with HTML must not pass as data."""
        html = "<html>Redirecting to login...</html>"
        with patch(REQUEST, return_value=make_response(200, html)):
            with pytest.raises(DeserializationError) as exc_info:
                gateway.execute("get_case/42")

        assert exc_info.value.kind == "deserialization"
        assert exc_info.value.body_preview == html
        assert "get_case/42" in str(exc_info.value)

    @pytest.mark.unit
    def test_raw_returns_bytes(self, gateway):
        payload = b"\x89PNG\r\n\x1a\n\x00binary"
        with patch(REQUEST, return_value=make_response(200, payload)) as mock_request:
            result = gateway.execute("get_attachment/9", headers={"Content-Type": None}, raw=True)

        assert result == payload
        assert "Content-Type" not in mock_request.call_args[1]["headers"]


class TestErrors:

    @pytest.mark.unit
    def test_forbidden_carries_status_and_body(self, gateway):
        with patch(REQUEST, return_value=make_response(403, "Permission denied")):
            with pytest.raises(UpstreamError) as exc_info:
                gateway.execute("get_case/42")

        error = exc_info.value
        assert "403" in str(error)
        assert "Permission denied" in str(error)
        assert error.status_code == 403
        assert error.body == "Permission denied"
        assert error.kind == "upstream"

    @pytest.mark.unit
    @pytest.mark.parametrize("status", [300, 302, 400, 401, 404, 429, 500, 503])
    def test_non_2xx_statuses_fail(self, gateway, status):
        body = '{"error": "Field :title is a required field."}'
        with patch(REQUEST, return_value=make_response(status, body)):
            with pytest.raises(UpstreamError) as exc_info:
                gateway.execute("add_case/1", method="POST")
        assert str(exc_info.value) == f"TestRail API error ({status}): {body}"

    @pytest.mark.unit
    def test_upstream_error_wins_over_delete_convention(self, gateway):
        with patch(REQUEST, return_value=make_response(400, "Field :case_id is not a valid test case.")):
            with pytest.raises(UpstreamError):
                gateway.execute("delete_case/1", method="POST")

    @pytest.mark.unit
    @pytest.mark.parametrize("exc", [
        requests.exceptions.ConnectionError("Name or service not known"),
        requests.exceptions.Timeout("read timed out"),
        requests.exceptions.TooManyRedirects("loop"),
    ])
    def test_transport_failures_are_prefixed(self, gateway, exc):
        with patch(REQUEST, side_effect=exc):
            with pytest.raises(TransportError) as exc_info:
                gateway.execute("get_projects")

        message = str(exc_info.value)
        assert message.startswith(TRANSPORT_ERROR_PREFIX)
        assert str(exc) in message
        assert exc_info.value.__cause__ is exc
