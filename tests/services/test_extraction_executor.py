from unittest.mock import MagicMock

import pytest

from getends.domain.extraction_set import ExtractionSet
from getends.domain.http_response import HttpResponse
from getends.domain.target import Target
from getends.exceptions import ConnectFetchError, HttpStatusError, TlsFetchError
from getends.services.extraction_executor import ExtractionExecutor
from getends.services.link_extractor import LinkExtractor
from getends.services.link_processor import LinkProcessor
from getends.services.link_scoper import LinkScoper


class FakeFetcher:
    """Serves canned bodies and records fetch/close ordering."""

    def __init__(self, pages, errors=None):
        self.pages = pages
        self.errors = errors or {}
        self.events = []

    def fetch(self, target):
        self.events.append(("fetch", target.url))
        if target.url in self.errors:
            raise self.errors[target.url]
        return HttpResponse(
            url=target.url,
            status_code=200,
            chunks=[self.pages[target.url]],
            closer=lambda: self.events.append(("close", target.url)),
        )


@pytest.fixture
def processor():
    return LinkProcessor(LinkExtractor(), LinkScoper())


def _targets(*raw):
    return [Target.parse(r) for r in raw]


def test_failing_target_does_not_stop_the_rest(processor):
    fetcher = FakeFetcher(
        pages={"http://b.example.com": b'<a href="/ok">'},
        errors={"http://a.example.com": ConnectFetchError("http://a.example.com", OSError("refused"))},
    )
    links = ExtractionSet()
    result = ExtractionExecutor(fetcher=fetcher, link_processor=processor).run(
        _targets("a.example.com", "b.example.com"), links
    )

    assert links.drain() == ["http://b.example.com/ok"]
    assert result.targets_processed == 1
    assert result.skipped == (("http://a.example.com", "connect"),)
    assert result.links_extracted == 1


def test_every_skip_category_is_recorded(processor):
    fetcher = FakeFetcher(
        pages={},
        errors={
            "http://tls.example.com": TlsFetchError("http://tls.example.com", Exception("handshake")),
            "http://gone.example.com": HttpStatusError("http://gone.example.com", 404, "Not Found"),
            "http://boom.example.com": RuntimeError("unexpected"),
        },
    )
    result = ExtractionExecutor(fetcher=fetcher, link_processor=processor).run(
        _targets("tls.example.com", "gone.example.com", "boom.example.com"), ExtractionSet()
    )
    assert [category for _, category in result.skipped] == ["tls", "status", "error"]
    assert result.targets_processed == 0


def test_response_is_closed_before_next_target_is_fetched(processor):
    fetcher = FakeFetcher(pages={"http://a.example.com": b"<a href='/1'>", "http://b.example.com": b"<a href='/2'>"})
    ExtractionExecutor(fetcher=fetcher, link_processor=processor).run(
        _targets("a.example.com", "b.example.com"), ExtractionSet()
    )
    assert fetcher.events == [
        ("fetch", "http://a.example.com"),
        ("close", "http://a.example.com"),
        ("fetch", "http://b.example.com"),
        ("close", "http://b.example.com"),
    ]


def test_extraction_error_is_isolated_and_response_still_closed():
    fetcher = FakeFetcher(pages={"http://a.example.com": b"", "http://b.example.com": b"<a href='/2'>"})
    failing = MagicMock()
    failing.process.side_effect = [RuntimeError("bad page"), 1]
    result = ExtractionExecutor(fetcher=fetcher, link_processor=failing).run(
        _targets("a.example.com", "b.example.com"), ExtractionSet()
    )
    assert ("close", "http://a.example.com") in fetcher.events
    assert result.skipped == (("http://a.example.com", "error"),)
    assert result.links_extracted == 1


def test_same_link_from_two_targets_counted_once(processor):
    fetcher = FakeFetcher(
        pages={
            "http://example.com/a": b'<a href="/shared">',
            "http://example.com/b": b'<a href="/shared"><a href="/only-b">',
        }
    )
    links = ExtractionSet()
    result = ExtractionExecutor(fetcher=fetcher, link_processor=processor).run(
        _targets("example.com/a", "example.com/b"), links
    )
    assert sorted(links.drain()) == ["http://example.com/only-b", "http://example.com/shared"]
    assert result.links_extracted == 2


def test_parallel_workers_produce_same_set(processor):
    pages = {f"http://example.com/p{i}": f'<a href="/link{i % 3}">'.encode() for i in range(9)}
    fetcher = FakeFetcher(pages=pages)
    links = ExtractionSet()
    result = ExtractionExecutor(fetcher=fetcher, link_processor=processor, workers=4).run(
        _targets(*pages), links
    )
    assert set(links.drain()) == {"http://example.com/link0", "http://example.com/link1", "http://example.com/link2"}
    assert result.targets_processed == 9
    assert result.links_extracted == 3


def test_skip_warning_names_category(processor, caplog):
    caplog.set_level("WARNING", logger="getends")
    fetcher = FakeFetcher(
        pages={},
        errors={"http://a.example.com": ConnectFetchError("http://a.example.com", OSError("refused"))},
    )
    ExtractionExecutor(fetcher=fetcher, link_processor=processor).run(_targets("a.example.com"), ExtractionSet())
    assert "[connect]" in caplog.text
