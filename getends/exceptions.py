"""Custom exceptions for getends."""
from typing import Optional


class InvalidTargetError(ValueError):
    """Raised when a user-supplied target cannot be turned into a fetchable URL."""

    def __init__(self, raw: str, reason: str = "is not a valid URL"):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Target {raw!r} {reason}")


class HttpFetchError(Exception):
    """Raised when an HTTP fetch fails. Subclasses narrow down the cause."""

    category = "error"

    def __init__(self, url: str, original: Optional[Exception] = None, message: Optional[str] = None):
        self.url = url
        self.original = original
        detail = message if message is not None else original
        super().__init__(f"HTTP fetch failed for {url}: {detail}")


class TlsFetchError(HttpFetchError):
    """TLS handshake failed. Certificate trust is never enforced, so this is handshake-level."""

    category = "tls"


class FetchTimeoutError(HttpFetchError):
    category = "timeout"


class ConnectFetchError(HttpFetchError):
    """DNS lookup or TCP connect failed."""

    category = "connect"


class HttpStatusError(HttpFetchError):
    """Server answered with something other than 200 OK."""

    category = "status"

    def __init__(self, url: str, status_code: int, reason: Optional[str] = None):
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}" if reason else str(status_code)
        super().__init__(url, message=f"unexpected status {status}")


class DnsResolutionError(OSError):
    """Raised when neither configured nameserver could resolve a host."""

    def __init__(self, host: str, reason: str):
        self.host = host
        self.reason = reason
        super().__init__(f"DNS lookup failed for {host}: {reason}")


class TargetListError(Exception):
    """Raised when the target list file cannot be read."""

    def __init__(self, path: str, original: Exception):
        self.path = path
        self.original = original
        super().__init__(f"Cannot read target list '{path}': {original}")


class RunProfileError(Exception):
    """Raised when a YAML run profile is missing or malformed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Run profile '{path}' {reason}")


class OutputWriteError(Exception):
    """Raised when extracted URLs cannot be appended to the output file."""

    def __init__(self, path: str, original: Exception):
        self.path = path
        self.original = original
        super().__init__(f"Cannot write extracted URLs to '{path}': {original}")
