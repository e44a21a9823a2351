from typing import Callable, Iterable, Iterator, Optional


class HttpResponse:
    """Successful (200) response whose body is consumed lazily, chunk by chunk.

    The body can be iterated once. `close()` releases the underlying
    connection and is safe to call more than once.
    """

    def __init__(
        self,
        url: str,
        status_code: int,
        chunks: Iterable[bytes],
        content_type: Optional[str] = None,
        encoding: Optional[str] = None,
        closer: Optional[Callable[[], None]] = None,
    ):
        self.url = url
        self.status_code = status_code
        self.content_type = content_type
        self.encoding = encoding
        self._chunks = chunks
        self._closer = closer
        self.closed = False

    def iter_body(self) -> Iterator[bytes]:
        return iter(self._chunks)

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._closer is not None:
            self._closer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def __repr__(self):
        return f"<HttpResponse url={self.url} status={self.status_code} closed={self.closed}>"
