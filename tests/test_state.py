import pytest

from resty_requests.networking.state import ConnectionState, HttpVersion


def test_state_values_are_stable():
    assert [(state.name, int(state)) for state in ConnectionState] == [
        ("UNREADY", -1),
        ("READY", 0),
        ("CONNECT", 1),
        ("PROXY", 2),
        ("HANDSHAKE", 3),
        ("SEND_HEADER", 4),
        ("SEND_BODY", 5),
        ("RECV_HEADER", 6),
        ("RECV_BODY", 7),
        ("CLOSE", 8),
    ]


@pytest.mark.parametrize(
    ("state", "name"),
    [
        (ConnectionState.UNREADY, "unready"),
        (ConnectionState.PROXY, "proxy"),
        (ConnectionState.SEND_HEADER, "send_header"),
        (ConnectionState.CLOSE, "close"),
    ],
)
def test_display_names(state, name):
    assert state.display_name == name


def test_every_state_has_a_display_name():
    names = {state.display_name for state in ConnectionState}

    assert len(names) == len(ConnectionState)


def test_states_are_ordered():
    assert ConnectionState.CONNECT < ConnectionState.RECV_BODY


def test_http_version_strings():
    assert [str(version) for version in HttpVersion] == [
        "HTTP/1.0",
        "HTTP/1.1",
        "HTTP/2",
    ]
    assert HttpVersion("HTTP/2") is HttpVersion.HTTP2
