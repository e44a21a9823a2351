import logging
from urllib.parse import unquote, urljoin, urlsplit

from getends.domain.scope import RejectReason, ScopeDecision
from getends.domain.target import Target

logger = logging.getLogger(__name__)

JUNK_EXTENSIONS = (
    ".css", ".jpeg", ".jpg", ".png", ".gif", ".svg", ".ico", ".webp",
    ".mp4", ".mov", ".avi", ".webm", ".mkv",
    ".woff", ".woff2", ".ttf", ".eot", ".otf",
    ".pdf", ".docx", ".xlsx", ".pptx", ".zip", ".rar", ".7z",
    ".xml",
)

_SKIPPED_SCHEME_PREFIXES = ("mail", "tel")


def is_in_scope(target_hostname: str, link_hostname: str) -> bool:
    """True when `link_hostname` is the target host or one of its subdomains."""
    if not target_hostname or not link_hostname:
        return False
    return link_hostname == target_hostname or link_hostname.endswith("." + target_hostname)


def is_junk_path(path: str) -> bool:
    return path.lower().endswith(JUNK_EXTENSIONS)


def is_js_path(path: str) -> bool:
    return path.endswith(".js")


class LinkScoper:
    """Resolve raw link references against their target and decide whether to keep them.

    `js_only` flips the `.js` filter: when set only `.js` paths are kept,
    otherwise `.js` paths are dropped.
    """

    def __init__(self, js_only: bool = False):
        self.js_only = js_only

    def resolve(self, raw: str, base_url: str) -> str:
        """Return the absolute form of `raw`. Raises ValueError when `raw` cannot be parsed."""
        link = raw.strip()
        parts = urlsplit(link)
        if parts.scheme:
            return link
        return urljoin(base_url, link)

    def evaluate(self, raw: str, target: Target) -> ScopeDecision:
        try:
            resolved = self.resolve(raw, target.url)
            parts = urlsplit(resolved)
            hostname = parts.hostname or ""
        except ValueError:
            return ScopeDecision.reject(RejectReason.UNPARSEABLE)

        if parts.scheme.startswith(_SKIPPED_SCHEME_PREFIXES):
            return ScopeDecision.reject(RejectReason.SCHEME, resolved)

        if not is_in_scope(target.hostname, hostname):
            return ScopeDecision.reject(RejectReason.OUT_OF_SCOPE, resolved)

        path = unquote(parts.path)
        if is_junk_path(path):
            return ScopeDecision.reject(RejectReason.JUNK_EXTENSION, resolved)

        if self.js_only != is_js_path(path):
            return ScopeDecision.reject(RejectReason.JS_FILTER, resolved)

        if resolved == target.url:
            return ScopeDecision.reject(RejectReason.SELF_REFERENCE, resolved)

        return ScopeDecision.accept(resolved)
