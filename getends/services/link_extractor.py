import codecs
import logging
from html.parser import HTMLParser
from typing import Iterable, Iterator, Optional

from bs4.dammit import EncodingDetector

logger = logging.getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

# tag -> attributes whose values are link references
LINK_ATTRIBUTES = {
    "a": ("href",),
    "script": ("src", "href"),
    "link": ("src", "href"),
}


class _LinkTokenParser(HTMLParser):
    """Incremental tokenizer that collects link attribute values as tags are seen.

    This is the same `html.parser` tokenizer BeautifulSoup's "html.parser"
    builder sits on, driven directly so the document never has to be held in
    memory as a tree.
    """

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.pending: list[str] = []

    def handle_starttag(self, tag, attrs):
        wanted = LINK_ATTRIBUTES.get(tag)
        if not wanted:
            return
        for name, value in attrs:
            if name in wanted:
                self.pending.append(value if value is not None else "")

    def take(self) -> list[str]:
        links, self.pending = self.pending, []
        return links


def _codec_name(encoding: Optional[str]) -> Optional[str]:
    if not encoding:
        return None
    try:
        return codecs.lookup(encoding).name
    except LookupError:
        logger.debug("Unknown charset %r, ignoring", encoding)
        return None


class LinkExtractor:
    """Turn an HTML byte stream into a lazy sequence of raw link strings.

    Anchors contribute every `href`; script and link elements contribute
    every `src` and `href`. Duplicate attributes are all emitted. A parse
    error ends the sequence with whatever was found so far.
    """

    def iter_links(self, chunks: Iterable[bytes], encoding: Optional[str] = None) -> Iterator[str]:
        parser = _LinkTokenParser()
        decoder = None
        for chunk in chunks:
            if decoder is None:
                decoder = self._make_decoder(chunk, encoding)
            text = decoder.decode(chunk)
            if not self._feed(parser, text):
                yield from parser.take()
                return
            yield from parser.take()

        if decoder is not None:
            tail = decoder.decode(b"", final=True)
            if tail and not self._feed(parser, tail):
                yield from parser.take()
                return
        try:
            parser.close()
        except (AssertionError, ValueError) as e:
            logger.debug("HTML tokenizer stopped at end of document: %s", e)
        yield from parser.take()

    def _make_decoder(self, first_chunk: bytes, encoding: Optional[str]):
        name = _codec_name(encoding)
        if name is None:
            name = _codec_name(EncodingDetector.find_declared_encoding(first_chunk, is_html=True))
        if name is None:
            name = DEFAULT_ENCODING
        return codecs.getincrementaldecoder(name)(errors="replace")

    def _feed(self, parser: _LinkTokenParser, text: str) -> bool:
        try:
            parser.feed(text)
        except (AssertionError, ValueError) as e:
            logger.debug("HTML tokenizer stopped on malformed markup: %s", e)
            return False
        return True
