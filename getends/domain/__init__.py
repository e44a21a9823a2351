"""Domain objects for getends - explicit re-exports to satisfy linters."""
from .target import Target as Target
from .http_response import HttpResponse as HttpResponse
from .extraction_set import ExtractionSet as ExtractionSet
from .scope import RejectReason as RejectReason
from .scope import ScopeDecision as ScopeDecision
from .run_profile import RunProfile as RunProfile
from .run_result import RunResult as RunResult

__all__ = [
    "Target",
    "HttpResponse",
    "ExtractionSet",
    "RejectReason",
    "ScopeDecision",
    "RunProfile",
    "RunResult",
]
