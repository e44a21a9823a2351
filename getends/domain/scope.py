from enum import Enum
from typing import NamedTuple, Optional


class RejectReason(str, Enum):
    UNPARSEABLE = "unparseable"
    SCHEME = "scheme"
    OUT_OF_SCOPE = "out_of_scope"
    JUNK_EXTENSION = "junk_extension"
    JS_FILTER = "js_filter"
    SELF_REFERENCE = "self_reference"


class ScopeDecision(NamedTuple):
    """Outcome of evaluating one raw link against its target."""
    accepted: bool
    url: Optional[str] = None
    reason: Optional[RejectReason] = None

    @classmethod
    def accept(cls, url: str) -> "ScopeDecision":
        return cls(True, url, None)

    @classmethod
    def reject(cls, reason: RejectReason, url: Optional[str] = None) -> "ScopeDecision":
        return cls(False, url, reason)
