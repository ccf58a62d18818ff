"""Static file handler."""

from __future__ import annotations

from pathlib import Path

from config import SERVER_NAME
from headers import Headers
from request import HTTPRequest
from response import HTTPResponse
from socket_handler import LineBuffer
from utils import get_content_type, resolve_static_file


def serve_static(request: HTTPRequest, doc_root: Path, buffer: LineBuffer) -> HTTPResponse:
    """Answer ``request`` with a file under ``doc_root`` or a bodiless 404.

    The file is read into ``buffer`` and its storage is taken as the response
    body; the caller hands it back with ``buffer.restore`` after writing.
    """
    headers = Headers([("Server", SERVER_NAME)])
    static_path = resolve_static_file(request.uri, doc_root)
    if static_path is None:
        return HTTPResponse(status_code=404, version=request.version, headers=headers)

    with static_path.open("rb") as file_obj:
        buffer.read_file(file_obj)
    headers.add("Content-Type", get_content_type(static_path))
    return HTTPResponse(
        status_code=200,
        version=request.version,
        headers=headers,
        body=buffer.take(),
    )
