import logging
import socket
import ssl
import time
from typing import Callable, Iterator, Optional

import requests
import urllib3.exceptions
from requests.utils import get_encoding_from_headers

from getends.domain.http_response import HttpResponse
from getends.domain.target import Target
from getends.exceptions import (
    ConnectFetchError,
    DnsResolutionError,
    FetchTimeoutError,
    HttpFetchError,
    HttpStatusError,
    TlsFetchError,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 16 * 1024

_TLS_TYPES = (requests.exceptions.SSLError, urllib3.exceptions.SSLError, ssl.SSLError)
_TIMEOUT_TYPES = (requests.exceptions.Timeout, urllib3.exceptions.TimeoutError, socket.timeout, TimeoutError)
_CONNECT_TYPES = (
    DnsResolutionError,
    socket.gaierror,
    urllib3.exceptions.NewConnectionError,
    requests.exceptions.ConnectionError,
    ConnectionError,
)

_TLS_MARKERS = ("certificate", "tls:", "ssl")
_TIMEOUT_MARKERS = ("timed out", "timeout")
_CONNECT_MARKERS = ("lookup", "resolve", "connect")


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Walk `exc` and everything it wraps: causes, contexts, urllib3 reasons and args."""
    seen = set()
    pending = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.append(current.__cause__)
        pending.append(current.__context__)
        reason = getattr(current, "reason", None)
        if isinstance(reason, BaseException):
            pending.append(reason)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))


def _is_timeout(exc: BaseException) -> bool:
    # urllib3 derives NewConnectionError from ConnectTimeoutError; a refused connect is not a timeout
    return isinstance(exc, _TIMEOUT_TYPES) and not isinstance(exc, urllib3.exceptions.NewConnectionError)


def classify_request_error(url: str, exc: Exception) -> HttpFetchError:
    """Map a transport exception onto the skip taxonomy: tls, timeout, connect or generic."""
    chain = list(_exception_chain(exc))
    if any(isinstance(e, _TLS_TYPES) for e in chain):
        return TlsFetchError(url, exc)
    if any(_is_timeout(e) for e in chain):
        return FetchTimeoutError(url, exc)
    if any(isinstance(e, _CONNECT_TYPES) for e in chain):
        return ConnectFetchError(url, exc)

    # no structured signal, fall back to the message text
    message = str(exc).lower()
    if any(marker in message for marker in _TLS_MARKERS):
        return TlsFetchError(url, exc)
    if any(marker in message for marker in _TIMEOUT_MARKERS):
        return FetchTimeoutError(url, exc)
    if any(marker in message for marker in _CONNECT_MARKERS):
        return ConnectFetchError(url, exc)
    return HttpFetchError(url, exc)


class HttpService:
    """
    HTTP client wrapper for fetching target pages.

    Requires http_client callable for dependency injection (normally the
    `get` method of a session built by `build_session`). Only a 200 response
    is returned; every other outcome raises an `HttpFetchError` subclass.
    """

    def __init__(
        self,
        user_agent: str,
        http_client: Callable,
        accept: Optional[str] = None,
        send_accept: bool = True,
        connect_timeout: float = 15,
        request_timeout: float = 30,
        verify_tls: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.user_agent = user_agent
        self.http_client = http_client
        self.accept = accept
        self.send_accept = send_accept
        self.connect_timeout = connect_timeout
        self.request_timeout = request_timeout
        self.verify_tls = verify_tls
        self._clock = clock

    def build_headers(self) -> dict:
        headers = {"User-Agent": self.user_agent}
        if self.send_accept and self.accept:
            headers["Accept"] = self.accept
        return headers

    def fetch(self, target: Target) -> HttpResponse:
        """Fetch `target` and return a streaming response for a 200 status."""
        deadline = self._clock() + self.request_timeout
        try:
            resp = self.http_client(
                target.url,
                headers=self.build_headers(),
                timeout=(self.connect_timeout, self.request_timeout),
                verify=self.verify_tls,
                stream=True,
            )
        except requests.exceptions.RequestException as e:
            raise classify_request_error(target.url, e) from e

        if resp.status_code != 200:
            resp.close()
            raise HttpStatusError(target.url, resp.status_code, getattr(resp, "reason", None))

        content_type = resp.headers.get("Content-Type")
        encoding = None
        if content_type and "charset" in content_type.lower():
            encoding = get_encoding_from_headers(resp.headers)

        return HttpResponse(
            url=target.url,
            status_code=resp.status_code,
            chunks=self._stream_body(target.url, resp, deadline),
            content_type=content_type,
            encoding=encoding,
            closer=resp.close,
        )

    def _stream_body(self, url: str, resp, deadline: float) -> Iterator[bytes]:
        # read errors and the overall deadline end the body early, extraction stays partial
        try:
            for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    yield chunk
                if self._clock() > deadline:
                    logger.warning("Request budget of %ss exceeded while reading %s", self.request_timeout, url)
                    return
        except requests.exceptions.RequestException as e:
            logger.warning("Body read for %s stopped early: %s", url, e)
