import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from getends.domain.extraction_set import ExtractionSet
from getends.domain.run_result import RunResult
from getends.domain.target import Target
from getends.exceptions import HttpFetchError
from getends.services.link_processor import LinkProcessor

logger = logging.getLogger(__name__)


class _TargetOutcome:
    __slots__ = ("target", "added", "skip_category")

    def __init__(self, target: Target, added: int = 0, skip_category: Optional[str] = None):
        self.target = target
        self.added = added
        self.skip_category = skip_category


class ExtractionExecutor:
    """Runs fetch -> extract -> scope -> aggregate for every target.

    This class owns the per-target control flow and error isolation. It does
    NOT construct dependencies (that stays in the DI layer). With `workers`
    above 1, targets are spread over a thread pool; the shared
    `ExtractionSet` serialises its own access.
    """

    def __init__(self, *, fetcher, link_processor: LinkProcessor, workers: int = 1):
        self.fetcher = fetcher
        self.link_processor = link_processor
        self.workers = max(1, int(workers or 1))

    def process_target(self, target: Target, extraction_set: ExtractionSet) -> _TargetOutcome:
        logger.info("--- Processing %s ---", target.url)
        try:
            response = self.fetcher.fetch(target)
        except HttpFetchError as e:
            logger.warning("Skipping %s [%s]: %s", target.url, e.category, e)
            return _TargetOutcome(target, skip_category=e.category)
        except Exception:
            logger.exception("Unexpected fetch error for %s", target.url)
            return _TargetOutcome(target, skip_category="error")

        # body is released here, before the next target is fetched
        with response:
            try:
                added = self.link_processor.process(target, response, extraction_set)
            except Exception:
                logger.exception("Error extracting links from %s", target.url)
                return _TargetOutcome(target, skip_category="error")

        logger.debug("%s contributed %d new link(s)", target.url, added)
        return _TargetOutcome(target, added=added)

    def run(self, targets: Iterable[Target], extraction_set: ExtractionSet) -> RunResult:
        targets = list(targets)
        if self.workers == 1 or len(targets) <= 1:
            outcomes = [self.process_target(t, extraction_set) for t in targets]
        else:
            with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="getends") as pool:
                outcomes = list(pool.map(lambda t: self.process_target(t, extraction_set), targets))

        skipped = tuple((o.target.url, o.skip_category) for o in outcomes if o.skip_category)
        return RunResult(
            targets_processed=len(outcomes) - len(skipped),
            links_extracted=sum(o.added for o in outcomes),
            skipped=skipped,
        )
