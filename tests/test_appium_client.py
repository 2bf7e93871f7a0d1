"""
Unit tests for the Appium HTTP client. The requests session is mocked.
"""
import base64
from unittest.mock import MagicMock

import pytest
import requests

from hierarchy_inspector.appium_client import AppiumClient, AppiumError


def make_response(value=None, status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.ok = status < 400
    if body is None:
        body = {"value": value}
    resp.json.return_value = body
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(http):
    return AppiumClient("http://localhost:4723/", timeout=5, session=http)


class TestAppiumClient:
    def test_get_sessions(self, client, http):
        http.request.return_value = make_response([
            {"id": "abc", "capabilities": {"platformName": "iOS", "deviceName": "iPhone 15 Pro"}},
            {"capabilities": {}},
        ])
        sessions = client.get_sessions()

        http.request.assert_called_once_with("GET", "http://localhost:4723/sessions", json=None, timeout=5)
        assert [s.id for s in sessions] == ["abc"]
        assert sessions[0].platform_name == "iOS"
        assert sessions[0].label == "abc (iPhone 15 Pro, iOS)"

    def test_http_error(self, client, http):
        http.request.return_value = make_response(status=404)
        with pytest.raises(AppiumError) as exc:
            client.get_page_source("abc")
        assert exc.value.status_code == 404
        assert "status: 404" in str(exc.value)

    def test_transport_error(self, client, http):
        http.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(AppiumError):
            client.get_sessions()

    def test_invalid_json(self, client, http):
        resp = make_response()
        resp.json.side_effect = ValueError("no json")
        http.request.return_value = resp
        with pytest.raises(AppiumError):
            client.get_sessions()

    def test_screenshot_decoded(self, client, http):
        http.request.return_value = make_response(base64.b64encode(b"\x89PNG").decode())
        assert client.get_screenshot("abc") == b"\x89PNG"

    def test_snapshot_depth_settings(self, client, http):
        http.request.return_value = make_response(None)
        client.set_snapshot_max_depth("abc", 30)

        method, url = http.request.call_args.args
        payload = http.request.call_args.kwargs["json"]
        assert (method, url) == ("POST", "http://localhost:4723/session/abc/appium/settings")
        assert payload["settings"]["snapshotMaxDepth"] == 30
        assert payload["settings"]["pageSourceExcludedAttributes"] == "visible,accessible"

    def test_optimized_source_fallback(self, client, http):
        """When `mobile: source` is rejected, the standard endpoint is used."""
        http.request.side_effect = [make_response(status=500), make_response("<hierarchy/>")]
        assert client.get_page_source_optimized("abc") == "<hierarchy/>"

        urls = [c.args[1] for c in http.request.call_args_list]
        assert urls == [
            "http://localhost:4723/session/abc/execute",
            "http://localhost:4723/session/abc/source",
        ]

    def test_device_metadata_tolerates_failures(self, client, http):
        def respond(method, url, json=None, timeout=None):
            if url.endswith("/window/size"):
                return make_response({"width": 390, "height": 844})
            if url.endswith("/session/abc"):
                return make_response({"platformName": "iOS", "deviceName": "iPhone 16 Pro"})
            return make_response(status=404)

        http.request.side_effect = respond
        metadata = client.get_device_metadata("abc")

        assert metadata.window_size == {"width": 390, "height": 844}
        assert metadata.window_rect is None
        assert metadata.device_name == "iPhone 16 Pro"

    def test_fetch_snapshot(self, client, http):
        png = base64.b64encode(b"img").decode()

        def respond(method, url, json=None, timeout=None):
            if url.endswith("/screenshot"):
                return make_response(png)
            if url.endswith("/source"):
                return make_response("<hierarchy/>")
            return make_response(None)

        http.request.side_effect = respond
        data = client.fetch_snapshot("abc", 10, optimize=False)

        assert data.screenshot == b"img"
        assert data.page_source == "<hierarchy/>"
