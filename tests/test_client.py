# pyright: reportUnknownParameterType=false, reportUnknownMemberType=false
# pyright: reportUnknownVariableType=false, reportMissingParameterType=false
# pyright: reportUnknownArgumentType=false
import json
from unittest.mock import Mock, patch

import pytest
import requests
from requests.models import DEFAULT_REDIRECT_LIMIT

from resty_requests.networking.client import HttpClient, infer_state
from resty_requests.networking.config import build_config
from resty_requests.networking.errors import (
    HttpClientError,
    RequestTimeoutError,
    RetryableHttpError,
)
from resty_requests.networking.pairs import OrderedList
from resty_requests.networking.settings import ClientSettings
from resty_requests.networking.state import ConnectionState


@pytest.fixture
def client():
    session = requests.Session()
    session.trust_env = False
    return HttpClient(ClientSettings(), session=session)


def _mock_response(
    *,
    status: int = 200,
    url: str = "http://example.com",
    reason: str = "OK",
):
    response = Mock()
    response.status_code = status
    response.url = url
    response.reason = reason
    response.elapsed.total_seconds.return_value = 0.1
    response.headers = {"Content-Type": "application/json"}
    return response


def _sent_request(mock_send) -> requests.PreparedRequest:
    return mock_send.call_args.args[0]


@patch("requests.Session.send")
def test_send_success_returns_normalized_metadata(mock_send, client):
    response = _mock_response()
    mock_send.return_value = response

    result = client.send("get", "http://example.com", build_config())

    assert result.ok
    assert result.value is response
    assert result.meta["method"] == "GET"
    assert result.meta["url"] == "http://example.com"
    assert result.meta["version"] == "HTTP/1.1"
    assert result.meta["status_code"] == 200
    assert result.meta["status"] == 200
    assert result.meta["attempts"] == 1
    assert result.meta["timeout_s"] == (10.0, 60.0)
    assert result.meta["elapsed_s"] == 0.1


@patch("requests.Session.send")
def test_send_translates_config_into_requests_arguments(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config(
        {
            "headers": {"X_Trace": "1"},
            "timeouts": [1000, 2000, 3000],
            "allow_redirects": True,
            "redirect_max_times": 3,
            "ssl": {"verify": False},
            "stream": False,
        }
    )

    result = client.send("GET", "http://example.com", config)

    assert result.ok
    sent = _sent_request(mock_send)
    assert sent.method == "GET"
    assert sent.headers["X-Trace"] == "1"
    assert sent.headers["User-Agent"] == "resty-requests"
    assert sent.headers["Accept"] == "*/*"
    kwargs = mock_send.call_args.kwargs
    assert kwargs["timeout"] == (1.0, 3.0)
    assert kwargs["allow_redirects"] is True
    assert kwargs["verify"] is False
    assert kwargs["stream"] is False
    assert client._session.max_redirects == DEFAULT_REDIRECT_LIMIT


def test_redirect_limit_applies_to_one_request_only(client):
    with patch.object(requests.Session, "send", autospec=True) as mock_send:
        mock_send.return_value = _mock_response()
        limited = build_config(
            {"allow_redirects": True, "redirect_max_times": 3}
        )

        client.send("GET", "http://example.com", limited)
        client.send("GET", "http://example.com", build_config())

    first_session = mock_send.call_args_list[0].args[0]
    second_session = mock_send.call_args_list[1].args[0]
    assert first_session.max_redirects == 3
    assert first_session is not client._session
    assert first_session.adapters is client._session.adapters
    assert second_session is client._session
    assert client._session.max_redirects == DEFAULT_REDIRECT_LIMIT


@patch("requests.Session.send")
def test_send_adds_auth_and_cookie_headers(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config(
        {
            "auth": {"user": "a", "pass": "b"},
            "cookie": {"sid": "x", "lang": "en"},
        }
    )

    client.send("GET", "http://example.com", config)

    sent = _sent_request(mock_send)
    assert sent.headers["Authorization"] == "Basic YTpi"
    assert sent.headers["Cookie"] == "sid=x; lang=en"


@patch("requests.Session.send")
def test_explicit_authorization_header_wins_over_auth(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config(
        {"headers": {"Authorization": "Token t"}, "auth": "Basic other"}
    )

    client.send("GET", "http://example.com", config)

    assert _sent_request(mock_send).headers["Authorization"] == "Token t"


@patch("requests.Session.send")
def test_mapping_body_is_form_encoded(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config({"body": {"a": "1", "b": "2"}})

    client.send("POST", "http://example.com", config)

    sent = _sent_request(mock_send)
    assert sent.body == "a=1&b=2"
    assert sent.headers["Content-Type"] == "application/x-www-form-urlencoded"


@patch("requests.Session.send")
def test_ordered_list_body_keeps_pair_order(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config({"body": OrderedList([("z", "1"), ("a", "2")])})

    client.send("POST", "http://example.com", config)

    assert _sent_request(mock_send).body == "z=1&a=2"


@patch("requests.Session.send")
def test_default_content_type_can_be_disabled(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config({"body": {"a": "1"}, "use_default_type": False})

    client.send("POST", "http://example.com", config)

    assert "Content-Type" not in _sent_request(mock_send).headers


@patch("requests.Session.send")
def test_explicit_content_type_survives_disabled_default(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config(
        {
            "body": {"a": "1"},
            "headers": {"Content-Type": "application/x-custom"},
            "use_default_type": False,
        }
    )

    client.send("POST", "http://example.com", config)

    sent = _sent_request(mock_send)
    assert sent.headers["Content-Type"] == "application/x-custom"


@patch("requests.Session.send")
def test_json_payload_is_sent(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config({"json": {"foo": "bar"}})

    client.send("POST", "http://example.com", config)

    sent = _sent_request(mock_send)
    assert json.loads(sent.body) == {"foo": "bar"}
    assert sent.headers["Content-Type"] == "application/json"


@patch("requests.Session.send")
def test_response_hooks_are_registered(mock_send, client):
    mock_send.return_value = _mock_response()
    hook = Mock()
    config = build_config({"hooks": {"response": hook}})

    client.send("GET", "http://example.com", config)

    assert _sent_request(mock_send).hooks["response"] == [hook]


@patch("requests.Session.send")
def test_malformed_timeouts_fall_back_to_defaults(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config({"timeouts": [1000, 2000]})

    result = client.send("GET", "http://example.com", config)

    assert result.meta["timeout_s"] == (10.0, 60.0)


@patch("requests.Session.send")
def test_version_is_reported_in_metadata(mock_send, client):
    mock_send.return_value = _mock_response()
    config = build_config({"http2": True})

    result = client.send("GET", "http://example.com", config)

    assert result.meta["version"] == "HTTP/2"


@patch("requests.Session.send")
def test_connect_timeout_retries_and_tracks_attempts(mock_send):
    session = requests.Session()
    session.trust_env = False
    client = HttpClient(ClientSettings(retries=2), session=session)
    mock_send.side_effect = requests.exceptions.ConnectTimeout("Timed out")

    result = client.send("GET", "http://example.com", build_config())

    assert not result.ok
    assert isinstance(result.error, RequestTimeoutError)
    assert result.meta["attempts"] == 3
    assert result.meta["final_error"] == "ConnectTimeout"
    assert result.meta["state"] == "connect"
    assert mock_send.call_count == 3


@patch("requests.Session.send")
def test_connection_error_is_retryable(mock_send):
    client = HttpClient(ClientSettings(retries=1))
    mock_send.side_effect = requests.exceptions.ConnectionError("refused")

    result = client.send("HEAD", "http://example.com", build_config())

    assert not result.ok
    assert isinstance(result.error, RetryableHttpError)
    assert result.meta["attempts"] == 2
    assert result.meta["final_error"] == "ConnectionError"


@patch("requests.Session.send")
def test_generic_request_exception_does_not_retry(mock_send):
    client = HttpClient(ClientSettings(retries=3))
    mock_send.side_effect = requests.exceptions.RequestException("boom")

    result = client.send("GET", "http://example.com", build_config())

    assert not result.ok
    assert isinstance(result.error, HttpClientError)
    assert result.meta["attempts"] == 1
    assert result.meta["final_error"] == "RequestException"
    assert result.meta["state"] == "close"
    assert mock_send.call_count == 1


@patch("requests.Session.send")
def test_post_timeout_is_not_retried(mock_send):
    client = HttpClient(ClientSettings(retries=3))
    mock_send.side_effect = requests.exceptions.ReadTimeout("Timed out")

    result = client.send("POST", "http://example.com", build_config())

    assert not result.ok
    assert isinstance(result.error, RequestTimeoutError)
    assert result.meta["attempts"] == 1
    assert result.meta["state"] == "recv_header"
    assert mock_send.call_count == 1


@patch("requests.Session.send")
def test_error_filter_receives_state_and_error(mock_send, client):
    error = requests.exceptions.ProxyError("proxy refused")
    mock_send.side_effect = error
    error_filter = Mock()
    config = build_config({"error_filter": error_filter})

    result = client.send("GET", "http://example.com", config)

    assert not result.ok
    error_filter.assert_called_once_with(ConnectionState.PROXY, error)


@patch("requests.Session.send")
def test_error_filter_exception_propagates(mock_send, client):
    mock_send.side_effect = requests.exceptions.ConnectionError("refused")
    error_filter = Mock(side_effect=RuntimeError("filter failed"))
    config = build_config({"error_filter": error_filter})

    with pytest.raises(RuntimeError, match="filter failed"):
        client.send("GET", "http://example.com", config)
    error_filter.assert_called_once()


@patch("requests.Session.send")
def test_invalid_url_fails_before_sending(mock_send, client):
    result = client.send("GET", "example.com/no-scheme", build_config())

    assert not result.ok
    assert isinstance(result.error, HttpClientError)
    assert result.meta["state"] == "unready"
    mock_send.assert_not_called()


@patch("requests.Session.send")
def test_request_builds_config_from_options(mock_send, client):
    mock_send.return_value = _mock_response()

    result = client.get(
        "http://example.com",
        {"headers": {"accept": "text/plain"}},
        params={"q": "1"},
    )

    assert result.ok
    sent = _sent_request(mock_send)
    assert sent.url == "http://example.com/?q=1"
    assert sent.headers["Accept"] == "text/plain"


@patch("requests.Session.send")
def test_context_is_merged_into_metadata(mock_send, client):
    mock_send.return_value = _mock_response()

    result = client.get(
        "http://example.com",
        context={"service": "billing", "attempt_group": "canary"},
    )

    assert result.ok
    assert result.meta["service"] == "billing"
    assert result.meta["attempt_group"] == "canary"
    assert result.meta["context"] == {
        "service": "billing",
        "attempt_group": "canary",
    }


@patch("requests.Session.send")
def test_context_cannot_override_canonical_metadata(mock_send, client):
    mock_send.return_value = _mock_response(url="http://response.example")

    result = client.get(
        "http://example.com",
        context={"url": "http://context.example", "method": "PATCH"},
    )

    assert result.ok
    assert result.meta["url"] == "http://response.example"
    assert result.meta["method"] == "GET"
    assert result.meta["context"]["url"] == "http://context.example"
    assert result.meta["context"]["method"] == "PATCH"


@pytest.mark.parametrize(
    ("error", "state"),
    [
        (requests.exceptions.InvalidURL("x"), ConnectionState.UNREADY),
        (requests.exceptions.ProxyError("x"), ConnectionState.PROXY),
        (requests.exceptions.SSLError("x"), ConnectionState.HANDSHAKE),
        (requests.exceptions.ConnectTimeout("x"), ConnectionState.CONNECT),
        (requests.exceptions.ConnectionError("x"), ConnectionState.CONNECT),
        (requests.exceptions.ReadTimeout("x"), ConnectionState.RECV_HEADER),
        (
            requests.exceptions.ChunkedEncodingError("x"),
            ConnectionState.RECV_BODY,
        ),
        (requests.exceptions.RequestException("x"), ConnectionState.CLOSE),
    ],
)
def test_infer_state(error, state):
    assert infer_state(error) is state
