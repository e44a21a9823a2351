"""Run result data model."""
from typing import NamedTuple


class RunResult(NamedTuple):
    """Summary of one extraction run across all targets."""
    targets_processed: int
    """Number of targets fetched with a 200 and scanned for links"""

    links_extracted: int
    """Number of links newly added to the extraction set during the run"""

    skipped: tuple = ()
    """(url, category) pairs for targets that were skipped"""

    @property
    def targets_skipped(self) -> int:
        return len(self.skipped)
