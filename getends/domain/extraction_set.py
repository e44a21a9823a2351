import threading


class ExtractionSet:
    """Run-wide set of accepted absolute URLs.

    Created at run start, shared by every target, drained once at run end.
    Members are never removed. All access goes through a lock so targets can
    be processed from worker threads.
    """

    def __init__(self):
        self._lock = threading.Lock()
        # dict keeps insertion order for stable output files
        self._links: dict[str, None] = {}

    def insert(self, link: str) -> bool:
        """Add `link`; return True only when it was not already present."""
        with self._lock:
            if link in self._links:
                return False
            self._links[link] = None
            return True

    def drain(self) -> list[str]:
        with self._lock:
            return list(self._links)

    def __contains__(self, link: object) -> bool:
        with self._lock:
            return link in self._links

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)
