import socket
from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from getends.domain.target import Target
from getends.exceptions import (
    ConnectFetchError,
    DnsResolutionError,
    FetchTimeoutError,
    HttpFetchError,
    HttpStatusError,
    TlsFetchError,
)
from getends.services.http_service import HttpService, classify_request_error

TARGET = Target.parse("http://example.com")


def _response(status_code=200, chunks=(b"<html></html>",), headers=None):
    resp = Mock()
    resp.status_code = status_code
    resp.reason = "OK" if status_code == 200 else "Not Found"
    resp.headers = CaseInsensitiveDict(headers if headers is not None else {"Content-Type": "text/html"})
    resp.iter_content.return_value = iter(chunks)
    return resp


def _service(http_client, **kwargs):
    return HttpService(user_agent="TestAgent", http_client=http_client, accept="text/html", **kwargs)


def test_fetch_success_streams_body():
    mock_http_client = Mock(return_value=_response(chunks=(b"<a ", b'href="/x">')))
    response = _service(mock_http_client).fetch(TARGET)
    assert response.status_code == 200
    assert b"".join(response.iter_body()) == b'<a href="/x">'
    assert response.content_type == "text/html"


def test_fetch_sends_headers_timeouts_and_disables_verification():
    mock_http_client = Mock(return_value=_response())
    _service(mock_http_client).fetch(TARGET)
    args, kwargs = mock_http_client.call_args
    assert args == ("http://example.com",)
    assert kwargs["headers"] == {"User-Agent": "TestAgent", "Accept": "text/html"}
    assert kwargs["timeout"] == (15, 30)
    assert kwargs["verify"] is False
    assert kwargs["stream"] is True


def test_accept_header_omitted_when_disabled():
    mock_http_client = Mock(return_value=_response())
    _service(mock_http_client, send_accept=False).fetch(TARGET)
    assert mock_http_client.call_args[1]["headers"] == {"User-Agent": "TestAgent"}


def test_non_200_status_raises_and_releases_connection():
    resp = _response(status_code=404)
    with pytest.raises(HttpStatusError) as excinfo:
        _service(Mock(return_value=resp)).fetch(TARGET)
    assert excinfo.value.status_code == 404
    assert excinfo.value.category == "status"
    assert "404" in str(excinfo.value)
    resp.close.assert_called_once()


def test_close_releases_underlying_response():
    resp = _response()
    response = _service(Mock(return_value=resp)).fetch(TARGET)
    with response:
        pass
    resp.close.assert_called_once()


def test_charset_taken_from_content_type_only_when_declared():
    with_charset = _response(headers={"Content-Type": "text/html; charset=ISO-8859-1"})
    without_charset = _response(headers={"Content-Type": "text/html"})
    assert _service(Mock(return_value=with_charset)).fetch(TARGET).encoding == "ISO-8859-1"
    assert _service(Mock(return_value=without_charset)).fetch(TARGET).encoding is None


def test_body_read_error_ends_stream_without_raising():
    def chunks():
        yield b"<a href='/one'>"
        raise requests.exceptions.ChunkedEncodingError("connection broken")

    resp = _response()
    resp.iter_content.return_value = chunks()
    response = _service(Mock(return_value=resp)).fetch(TARGET)
    assert list(response.iter_body()) == [b"<a href='/one'>"]


def test_overall_deadline_stops_body_stream():
    resp = _response(chunks=(b"1", b"2", b"3"))
    clock = Mock(side_effect=[0.0, 5.0, 31.0])
    response = _service(Mock(return_value=resp), clock=clock).fetch(TARGET)
    assert list(response.iter_body()) == [b"1", b"2"]


@pytest.mark.parametrize(
    "exc, expected",
    [
        (requests.exceptions.SSLError("handshake failure"), TlsFetchError),
        (requests.exceptions.ConnectTimeout("connect timed out"), FetchTimeoutError),
        (requests.exceptions.ReadTimeout("read timed out"), FetchTimeoutError),
        (requests.exceptions.ConnectionError("refused"), ConnectFetchError),
    ],
)
def test_transport_errors_are_classified_by_type(exc, expected):
    mock_http_client = Mock(side_effect=exc)
    with pytest.raises(expected) as excinfo:
        _service(mock_http_client).fetch(TARGET)
    assert excinfo.value.url == "http://example.com"
    assert excinfo.value.original is exc


def test_dns_failure_in_cause_chain_is_a_connect_error():
    exc = requests.exceptions.RequestException("wrapped")
    exc.__cause__ = DnsResolutionError("nowhere.invalid", "NXDOMAIN")
    assert isinstance(classify_request_error("http://nowhere.invalid", exc), ConnectFetchError)


def test_structured_cause_wins_over_message_text():
    exc = requests.exceptions.RequestException("certificate looked odd")
    exc.__cause__ = socket.timeout("timed out")
    assert isinstance(classify_request_error("http://example.com", exc), FetchTimeoutError)


@pytest.mark.parametrize(
    "message, expected",
    [
        ("x509: certificate signed by unknown authority", TlsFetchError),
        ("remote error: tls: handshake failure", TlsFetchError),
        ("operation timed out", FetchTimeoutError),
        ("dial tcp: lookup example.com: no such host", ConnectFetchError),
        ("could not connect", ConnectFetchError),
    ],
)
def test_message_fallback_when_no_structured_signal(message, expected):
    exc = requests.exceptions.RequestException(message)
    assert isinstance(classify_request_error("http://example.com", exc), expected)


def test_unrecognised_error_is_generic():
    exc = requests.exceptions.InvalidHeader("Invalid leading whitespace in header value")
    err = classify_request_error("http://example.com", exc)
    assert type(err) is HttpFetchError
    assert err.category == "error"


def test_refused_connection_is_not_mistaken_for_timeout():
    from urllib3.exceptions import MaxRetryError, NewConnectionError

    reason = NewConnectionError(None, "Failed to establish a new connection: [Errno 111] Connection refused")
    exc = requests.exceptions.ConnectionError(MaxRetryError(None, "http://example.com/", reason=reason))
    assert isinstance(classify_request_error("http://example.com", exc), ConnectFetchError)
