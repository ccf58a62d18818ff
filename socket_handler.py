"""Low-level socket read/write utilities."""

from __future__ import annotations

from typing import BinaryIO

from config import MAX_LINE_BYTES
from request import MalformedRequestError
from response import HTTPResponse


class LineBuffer:
    """Scratch buffer owned by one worker and reused for every line it reads.

    The same ``bytearray`` holds each request line and header line in turn.
    When a file is served, its bytes are read into the buffer and then taken
    out as the response body; the connection handler restores that storage
    once the response has been written.
    """

    def __init__(self, max_line_bytes: int = MAX_LINE_BYTES) -> None:
        self.max_line_bytes = max_line_bytes
        self._data = bytearray()

    @property
    def data(self) -> bytearray:
        return self._data

    def clear(self) -> None:
        self._data.clear()

    def read_line(self, reader: BinaryIO) -> int:
        """Replace the buffer with the next line from ``reader``.

        Returns the number of bytes read; zero means end of stream.
        """
        self._data.clear()
        line = reader.readline(self.max_line_bytes + 1)
        if len(line) > self.max_line_bytes:
            raise MalformedRequestError("Line exceeded MAX_LINE_BYTES")
        self._data += line
        return len(line)

    def read_file(self, file_obj: BinaryIO) -> int:
        self._data.clear()
        self._data += file_obj.read()
        return len(self._data)

    def take(self) -> bytearray:
        """Move the current contents out, leaving the buffer empty."""
        taken = self._data
        self._data = bytearray()
        return taken

    def restore(self, storage: bytearray) -> None:
        """Hand previously taken storage back for reuse."""
        storage.clear()
        self._data = storage

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return True


def write_http_response_message(writer: BinaryIO, response: HTTPResponse) -> int:
    """Serialize and flush one response; returns the number of bytes written."""
    payload = response.to_bytes()
    writer.write(payload)
    writer.flush()
    return len(payload)
