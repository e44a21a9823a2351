import logging
from typing import Iterable, Optional

from getends.domain.target import Target
from getends.exceptions import InvalidTargetError, TargetListError

logger = logging.getLogger(__name__)


def read_target_lines(path: str) -> list[str]:
    """Return the stripped, non-blank lines of a newline-delimited URL list."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            lines = [line.strip() for line in f]
    except (OSError, UnicodeDecodeError) as e:
        raise TargetListError(path, e) from e
    return [line for line in lines if line]


def collect_targets(
    single: Optional[str] = None,
    list_path: Optional[str] = None,
    extra: Iterable[str] = (),
) -> list[Target]:
    """Build the ordered target list: the single URL, then the list file, then `extra`.

    Entries that cannot be parsed are logged and dropped.
    """
    raw_targets: list[str] = []
    if single:
        raw_targets.append(single)
    if list_path:
        raw_targets.extend(read_target_lines(list_path))
    raw_targets.extend(extra)

    targets = []
    for raw in raw_targets:
        try:
            targets.append(Target.parse(raw))
        except InvalidTargetError as e:
            logger.warning("Ignoring target: %s", e)
    return targets
