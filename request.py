"""HTTP request model and parser."""

from __future__ import annotations

import enum
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, BinaryIO

from headers import Headers

if TYPE_CHECKING:
    from socket_handler import LineBuffer


class HTTPRequestParseError(ValueError):
    """Base class for failures while reading a request off a connection."""


class EndOfStreamError(HTTPRequestParseError):
    """The peer closed the stream before sending another request line."""

    def __init__(self, message: str = "Reached the end of stream") -> None:
        super().__init__(message)


class MalformedRequestError(HTTPRequestParseError):
    """Request bytes do not follow the HTTP/1.x message grammar."""


class UnsupportedMethodError(HTTPRequestParseError):
    def __init__(self, token: str) -> None:
        super().__init__(f"HTTP method not supported: {token}")
        self.token = token


class UnsupportedVersionError(HTTPRequestParseError):
    def __init__(self, token: str) -> None:
        super().__init__(f"HTTP version not supported: {token}")
        self.token = token


class RequestDecodingError(HTTPRequestParseError):
    """Request bytes are not valid UTF-8."""


class Method(enum.Enum):
    GET = "GET"

    @classmethod
    def parse(cls, token: str) -> "Method":
        try:
            return cls(token)
        except ValueError as exc:
            raise UnsupportedMethodError(token) from exc


class Version(enum.Enum):
    HTTP_1_0 = ("HTTP/1.0", False)
    HTTP_1_1 = ("HTTP/1.1", True)

    def __init__(self, wire: str, keep_alive_default: bool) -> None:
        self.wire = wire
        self.keep_alive_default = keep_alive_default

    @classmethod
    def parse(cls, token: str) -> "Version":
        for version in cls:
            if version.wire == token:
                return version
        raise UnsupportedVersionError(token)

    def __str__(self) -> str:
        return self.wire


def _decode(raw: bytes | bytearray) -> str:
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RequestDecodingError(f"Invalid UTF-8 in request: {exc.reason}") from exc


@dataclass(frozen=True, slots=True)
class HTTPRequest:
    method: Method
    uri: str
    version: Version
    headers: Headers = field(default_factory=Headers)

    @property
    def keep_alive(self) -> bool:
        """Whether the connection may serve another request after this one."""
        if not self.version.keep_alive_default:
            return False
        return self.headers.first("connection") != "close"

    @classmethod
    def parse(cls, reader: BinaryIO, buffer: "LineBuffer") -> "HTTPRequest":
        """Read one request head from ``reader`` using the worker's ``buffer``.

        Raises EndOfStreamError when the stream ends before a request line,
        which is how an idle keep-alive connection finishes.
        """
        if buffer.read_line(reader) == 0:
            raise EndOfStreamError()

        tokens = iter(buffer.data.rstrip().split())
        method = Method.parse(_decode(_next_token(tokens)))
        uri = _decode(_next_token(tokens))
        version = Version.parse(_decode(_next_token(tokens)))
        if next(tokens, None) is not None:
            raise MalformedRequestError("Invalid request line")

        headers = Headers()
        while buffer.read_line(reader) > 0:
            line = _decode(buffer.data.rstrip())
            if not line:
                break
            parts = line.split(": ")
            if len(parts) != 2:
                raise MalformedRequestError("Malformed header line")
            name, value = parts
            headers.add(name.lower(), value.lower())

        buffer.clear()
        return cls(method=method, uri=uri, version=version, headers=headers)


def _next_token(tokens: Iterator[bytearray]) -> bytearray:
    token = next(tokens, None)
    if token is None:
        raise MalformedRequestError("Invalid request line")
    return token
