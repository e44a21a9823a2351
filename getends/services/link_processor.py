import logging

from getends.domain.extraction_set import ExtractionSet
from getends.domain.http_response import HttpResponse
from getends.domain.target import Target
from getends.services.link_extractor import LinkExtractor
from getends.services.link_scoper import LinkScoper

logger = logging.getLogger(__name__)


class LinkProcessor:
    def __init__(self, extractor: LinkExtractor, scoper: LinkScoper):
        self.extractor = extractor
        self.scoper = scoper

    def process(self, target: Target, response: HttpResponse, extraction_set: ExtractionSet) -> int:
        """Extract links from `response`, keep the in-scope ones and add them to `extraction_set`.

        Returns how many links were new to the set.
        """
        added = 0
        for raw in self.extractor.iter_links(response.iter_body(), encoding=response.encoding):
            decision = self.scoper.evaluate(raw, target)
            if not decision.accepted:
                logger.debug("Rejected %r from %s: %s", raw, target.url, decision.reason.value)
                continue
            if extraction_set.insert(decision.url):
                added += 1
                logger.info("[EXTRACTED] %s", decision.url)
        return added
