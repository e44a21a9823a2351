import logging
from typing import Iterable

from getends.exceptions import OutputWriteError

logger = logging.getLogger(__name__)


class ResultFileWriter:
    """Append extracted URLs to a text file, one per line.

    Existing content is kept, so repeated runs accumulate results.
    """

    def __init__(self, path: str):
        self.path = path

    def append(self, urls: Iterable[str]) -> int:
        written = 0
        try:
            with open(self.path, "a", encoding="utf-8", newline="\n") as f:
                for url in urls:
                    f.write(url + "\n")
                    written += 1
        except OSError as e:
            raise OutputWriteError(self.path, e) from e
        logger.debug("Appended %d URL(s) to %s", written, self.path)
        return written
