"""Chunk reader: the tokenizer feeding the tree builder.

Input is split on the ``<`` delimiter. Each chunk is the text between one
delimiter and the next, with the delimiter itself dropped, so the sequence
produced for a string is exactly ``text.split("<")``. The first chunk is the
content before the first delimiter and is always emitted, even when empty.

Readers are lazy and pull-based: a stream is read ``buffer_size`` characters
at a time, only when the consumer asks for the next chunk. A reader that owns
its stream releases it through ``on_done`` exactly once, whether the sequence
is exhausted, abandoned via :meth:`ChunkReader.close` / ``with``, or broken
off by a read error.
"""

import io
from pathlib import Path
from typing import Callable, Iterator, Optional, TextIO, Union

from xmlfiles.shared import DEFAULT_BUFFER_SIZE, get_logger

DELIMITER = "<"

PathType = Union[str, Path]


class ChunkReader:
    """Forward-only, non-restartable iterator over the chunks of a text stream.

    Examples:
        >>> with ChunkReader(io.StringIO("<a>x</a>")) as reader:
        ...     list(reader)
        ['', 'a>x', '/a>']
    """

    def __init__(
        self,
        stream: TextIO,
        on_done: Optional[Callable[[], None]] = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        correlation_id: Optional[str] = None
    ) -> None:
        """Initialize chunk reader.

        Args:
            stream: Readable text stream
            on_done: Called exactly once when the reader finishes for any reason
            buffer_size: Number of characters requested per read
            correlation_id: Optional correlation ID for logging
        """
        if buffer_size <= 0:
            raise ValueError("buffer_size must be > 0")
        self._stream = stream
        self._on_done = on_done
        self._buffer_size = buffer_size
        self.logger = get_logger(__name__, correlation_id, "chunk_reader")

        self._pending: Optional[str] = ""
        self._scan_from = 0
        self._eof = False
        self._done = False
        self.chunks_read = 0

    @classmethod
    def from_string(
        cls,
        text: str,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        correlation_id: Optional[str] = None
    ) -> "ChunkReader":
        """Create a reader over an in-memory string."""
        return cls(io.StringIO(text), buffer_size=buffer_size,
                   correlation_id=correlation_id)

    @property
    def closed(self) -> bool:
        """Whether the reader has finished and released its resource."""
        return self._done

    def __iter__(self) -> "ChunkReader":
        return self

    def __next__(self) -> str:
        if self._done:
            raise StopIteration
        try:
            chunk = self._next_chunk()
        except BaseException:
            self.close()
            raise
        if chunk is None:
            self.close()
            raise StopIteration
        self.chunks_read += 1
        return chunk

    def __enter__(self) -> "ChunkReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop reading and run the completion callback if not done yet."""
        if self._done:
            return
        self._done = True
        self._pending = None
        self.logger.debug(
            "Chunk reader finished",
            extra={"chunks_read": self.chunks_read, "reached_eof": self._eof}
        )
        if self._on_done is not None:
            self._on_done()

    def _next_chunk(self) -> Optional[str]:
        """Return the next chunk, reading from the stream as needed.

        Returns None once the final chunk has been emitted.
        """
        if self._pending is None:
            return None

        while True:
            index = self._pending.find(DELIMITER, self._scan_from)
            if index >= 0:
                chunk = self._pending[:index]
                self._pending = self._pending[index + 1:]
                self._scan_from = 0
                return chunk

            if self._eof:
                chunk, self._pending = self._pending, None
                return chunk

            self._scan_from = len(self._pending)
            data = self._stream.read(self._buffer_size)
            if isinstance(data, (bytes, bytearray)):
                raise TypeError(
                    "ChunkReader requires a text stream; open the file in text mode"
                )
            if data:
                self._pending += data
            else:
                self._eof = True


def iter_chunks(text: str) -> Iterator[str]:
    """Lazily yield the chunks of an in-memory string."""
    start = 0
    while True:
        index = text.find(DELIMITER, start)
        if index < 0:
            yield text[start:]
            return
        yield text[start:index]
        start = index + 1


def open_chunks(
    path: PathType,
    encoding: str = "utf-8",
    buffer_size: int = DEFAULT_BUFFER_SIZE,
    correlation_id: Optional[str] = None
) -> ChunkReader:
    """Open ``path`` and return a reader that closes the file when done.

    Use the reader as a context manager (or exhaust it) to guarantee the file
    is closed on every exit path.
    """
    stream = open(path, encoding=encoding)
    try:
        reader = ChunkReader(stream, on_done=stream.close, buffer_size=buffer_size,
                             correlation_id=correlation_id)
    except BaseException:
        stream.close()
        raise
    reader.logger.debug("Opened file for chunk reading", extra={"path": str(path)})
    return reader
