"""HTTP response model and serializer."""

from __future__ import annotations

from dataclasses import dataclass, field

from headers import Headers
from request import Version

CRLF = "\r\n"

REASON_PHRASES: dict[int, str] = {
    200: "OK",
    404: "Not Found",
}


@dataclass(slots=True)
class HTTPResponse:
    status_code: int
    version: Version = Version.HTTP_1_1
    reason_phrase: str | None = None
    headers: Headers = field(default_factory=Headers)
    body: bytes | bytearray | str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.body, str):
            self.body = self.body.encode("utf-8")
        if self.reason_phrase is None:
            self.reason_phrase = REASON_PHRASES.get(self.status_code, "Unknown")

    @property
    def content_length(self) -> int:
        return len(self.body) if self.body is not None else 0

    def to_bytes(self) -> bytes:
        """Serialize the response into HTTP/1.x wire format bytes."""
        self.headers.set("Content-Length", str(self.content_length))

        lines = [f"{self.version.wire} {self.status_code} {self.reason_phrase}"]
        lines.extend(
            f"{self.headers.display_name(key)}: {value}" for key, value in self.headers.lines()
        )
        head = (CRLF.join(lines) + CRLF + CRLF).encode("iso-8859-1")

        payload = bytearray(head)
        if self.body is not None:
            payload += self.body
            payload += CRLF.encode("ascii")
        return bytes(payload)
