import logging
import socket
from typing import Optional

import requests
import urllib3
from requests.adapters import DEFAULT_POOLBLOCK, HTTPAdapter
from urllib3.connection import HTTPConnection, HTTPSConnection
from urllib3.connectionpool import HTTPConnectionPool, HTTPSConnectionPool
from urllib3.exceptions import ConnectTimeoutError, InsecureRequestWarning, NewConnectionError
from urllib3.util.connection import create_connection

from getends.exceptions import DnsResolutionError

logger = logging.getLogger(__name__)


class _ResolvingConnectionMixin:
    """Open sockets to the address returned by `resolver` instead of using getaddrinfo.

    The hostname itself is left untouched so the Host header and TLS SNI still
    carry the original name.
    """

    resolver = None

    def _new_conn(self):
        try:
            address = self.resolver.resolve(self._dns_host)
        except DnsResolutionError as e:
            raise NewConnectionError(self, f"Failed to resolve '{self.host}' ({e})") from e

        try:
            return create_connection(
                (address, self.port),
                self.timeout,
                source_address=self.source_address,
                socket_options=self.socket_options,
            )
        except socket.timeout as e:
            raise ConnectTimeoutError(
                self,
                f"Connection to {self.host} timed out. (connect timeout={self.timeout})",
            ) from e
        except OSError as e:
            raise NewConnectionError(self, f"Failed to establish a new connection: {e}") from e


def _resolving_pool_classes(resolver) -> dict:
    http_conn = type("ResolvingHTTPConnection", (_ResolvingConnectionMixin, HTTPConnection), {"resolver": resolver})
    https_conn = type("ResolvingHTTPSConnection", (_ResolvingConnectionMixin, HTTPSConnection), {"resolver": resolver})
    return {
        "http": type("ResolvingHTTPConnectionPool", (HTTPConnectionPool,), {"ConnectionCls": http_conn}),
        "https": type("ResolvingHTTPSConnectionPool", (HTTPSConnectionPool,), {"ConnectionCls": https_conn}),
    }


def keepalive_socket_options(idle_seconds: int) -> list:
    options = list(HTTPConnection.default_socket_options)
    options.append((socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1))
    if hasattr(socket, "TCP_KEEPIDLE"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, idle_seconds))
    if hasattr(socket, "TCP_KEEPINTVL"):
        options.append((socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, idle_seconds))
    return options


class ResolvingHTTPAdapter(HTTPAdapter):
    """requests transport adapter whose connection pools resolve names through `resolver`."""

    def __init__(self, resolver, socket_options: Optional[list] = None, **kwargs):
        # HTTPAdapter.__init__ calls init_poolmanager, so these must exist first
        self._resolver = resolver
        self._socket_options = socket_options
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=DEFAULT_POOLBLOCK, **pool_kwargs):
        if self._socket_options is not None:
            pool_kwargs.setdefault("socket_options", self._socket_options)
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)
        self.poolmanager.pool_classes_by_scheme = _resolving_pool_classes(self._resolver)


def build_session(resolver, keepalive_seconds: int = 15, verify_tls: bool = False) -> requests.Session:
    """Build the HTTP session used for every target in a run."""
    session = requests.Session()
    adapter = ResolvingHTTPAdapter(resolver, socket_options=keepalive_socket_options(keepalive_seconds))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_tls
    if not verify_tls:
        urllib3.disable_warnings(InsecureRequestWarning)
        logger.debug("TLS certificate verification disabled")
    return session
