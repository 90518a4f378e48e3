"""
QR Bridge — Download Sink & Upload Source
===========================================

What:  The two I/O endpoints TranscodingService talks to.
       - DownloadSink: receives response headers, a content type and a byte
         stream (an in-memory HTTP response body).
       - UploadSource: hands out a readable byte stream for an uploaded file.
How:   Both expose `open_stream()` as a context manager so streams are always
       released, including when a pipeline stage raises.
Who:   Built by the route handlers; also used directly by tests and scripts.
"""

import io
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import BinaryIO, ContextManager, Dict, Iterator, Optional


class DownloadSink:
    """
    In-memory response target for generate().

    Header names are stored as given; lookups via get_header() are
    case-insensitive.
    """

    def __init__(self):
        self.headers: Dict[str, str] = {}
        self.content_type: Optional[str] = None
        self._buffer = io.BytesIO()

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def get_header(self, name: str) -> Optional[str]:
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None

    @contextmanager
    def open_stream(self) -> Iterator[BinaryIO]:
        """Yields the body stream; the written bytes stay available via getvalue()."""
        yield self._buffer
        self._buffer.flush()

    def getvalue(self) -> bytes:
        return self._buffer.getvalue()


class UploadSource(ABC):
    """An uploaded file whose content can be read as a binary stream."""

    filename: Optional[str] = None

    @abstractmethod
    def open_stream(self) -> ContextManager[BinaryIO]:
        """
        Open the upload for reading.

        Raises:
            OSError: the underlying file cannot be opened
        """
        ...


class BytesUpload(UploadSource):
    """Upload whose content is already in memory."""

    def __init__(self, content: bytes, filename: Optional[str] = None):
        self.content = content
        self.filename = filename

    @contextmanager
    def open_stream(self) -> Iterator[BinaryIO]:
        stream = io.BytesIO(self.content)
        try:
            yield stream
        finally:
            stream.close()


class FileUpload(UploadSource):
    """
    Upload backed by a seekable file object (e.g. FastAPI UploadFile.file).

    The wrapped file is rewound before reading and left open; its owner
    (the multipart parser) closes it.
    """

    def __init__(self, fileobj: BinaryIO, filename: Optional[str] = None):
        self.fileobj = fileobj
        self.filename = filename

    @contextmanager
    def open_stream(self) -> Iterator[BinaryIO]:
        self.fileobj.seek(0)
        yield self.fileobj
