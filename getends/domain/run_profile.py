from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RunProfile:
    """Run settings read from a YAML profile.

    `None` means "not set in the profile" so command-line flags and built-in
    defaults can fill the gap.
    """

    targets: list[str] = field(default_factory=list)
    target_list: Optional[str] = None
    output: Optional[str] = None
    same_domain: Optional[bool] = None
    js_only: Optional[bool] = None
    no_accept: Optional[bool] = None
    workers: Optional[int] = None
    source_path: Optional[str] = None

    def __repr__(self):
        return f"<RunProfile path={self.source_path} targets={len(self.targets)}>"
