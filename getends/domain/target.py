from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from getends.exceptions import InvalidTargetError

_SCHEMES = ("http://", "https://")


@dataclass(frozen=True)
class Target:
    """A page to fetch. `url` always carries an explicit http(s) scheme."""

    url: str
    hostname: str

    @classmethod
    def parse(cls, raw: str) -> Target:
        """Normalize user input into a Target, prefixing `http://` when no scheme is given."""
        if raw is None:
            raise InvalidTargetError("", "is empty")
        url = raw.strip()
        if not url:
            raise InvalidTargetError(raw, "is empty")
        if not url.lower().startswith(_SCHEMES):
            url = "http://" + url

        try:
            hostname = urlsplit(url).hostname
        except ValueError as e:
            raise InvalidTargetError(raw, f"cannot be parsed: {e}") from e
        if not hostname:
            raise InvalidTargetError(raw, "has no hostname")
        return cls(url=url, hostname=hostname)

    def __str__(self) -> str:
        return self.url
