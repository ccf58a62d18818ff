"""Unit tests for static file resolution and serving."""

import os
from pathlib import Path

import pytest

from headers import Headers
from handlers.static_handler import serve_static
from request import HTTPRequest, Method, Version
from socket_handler import LineBuffer
from utils import get_content_type, resolve_static_file


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    root = tmp_path / "www"
    root.mkdir()
    (root / "index.html").write_bytes(b"<h1>Home</h1>")
    (root / "docs").mkdir()
    (root / "docs" / "index.html").write_bytes(b"<h1>Docs</h1>")
    (root / "docs" / "notes.txt").write_bytes(b"notes")
    (tmp_path / "secret").write_bytes(b"top secret")
    return root.resolve()


def _build_request(uri: str, version: Version = Version.HTTP_1_1) -> HTTPRequest:
    return HTTPRequest(
        method=Method.GET,
        uri=uri,
        version=version,
        headers=Headers([("host", "localhost")]),
    )


def test_serve_existing_file(doc_root: Path) -> None:
    buffer = LineBuffer()

    response = serve_static(_build_request("/docs/notes.txt"), doc_root, buffer)

    assert response.status_code == 200
    assert response.reason_phrase == "OK"
    assert response.body == b"notes"
    assert response.headers.first("server") == "http-server/v0.1.0"
    assert response.headers.first("content-type") == "text/plain"
    assert b"Content-Length: 5\r\n" in response.to_bytes()


def test_trailing_slash_serves_index_document(doc_root: Path) -> None:
    root_response = serve_static(_build_request("/"), doc_root, LineBuffer())
    nested_response = serve_static(_build_request("/docs/"), doc_root, LineBuffer())

    assert root_response.status_code == 200
    assert root_response.body == b"<h1>Home</h1>"
    assert nested_response.body == b"<h1>Docs</h1>"


def test_missing_file_returns_404_without_body(doc_root: Path) -> None:
    response = serve_static(_build_request("/nope.css"), doc_root, LineBuffer())

    assert response.status_code == 404
    assert response.reason_phrase == "Not Found"
    assert response.body is None
    assert response.headers.first("server") == "http-server/v0.1.0"
    assert b"Content-Length: 0\r\n" in response.to_bytes()


@pytest.mark.parametrize("uri", ["../secret", "/../secret", "/docs/../../secret", "//secret"])
def test_traversal_outside_root_returns_404(doc_root: Path, uri: str) -> None:
    response = serve_static(_build_request(uri), doc_root, LineBuffer())

    assert response.status_code == 404
    assert response.body is None


def test_symlink_escaping_root_returns_404(doc_root: Path) -> None:
    link = doc_root / "escape"
    try:
        os.symlink(doc_root.parent / "secret", link)
    except (OSError, NotImplementedError):
        pytest.skip("symlinks unavailable")

    response = serve_static(_build_request("/escape"), doc_root, LineBuffer())

    assert response.status_code == 404


def test_directory_without_trailing_slash_returns_404(doc_root: Path) -> None:
    response = serve_static(_build_request("/docs"), doc_root, LineBuffer())

    assert response.status_code == 404


def test_response_mirrors_request_version(doc_root: Path) -> None:
    response = serve_static(_build_request("/", Version.HTTP_1_0), doc_root, LineBuffer())

    assert response.to_bytes().startswith(b"HTTP/1.0 200 OK\r\n")


def test_body_is_taken_from_worker_buffer(doc_root: Path) -> None:
    buffer = LineBuffer()

    response = serve_static(_build_request("/"), doc_root, buffer)

    assert isinstance(response.body, bytearray)
    assert len(buffer) == 0
    storage = response.body
    buffer.restore(storage)
    assert buffer.data is storage
    assert len(buffer) == 0


def test_resolve_static_file_returns_canonical_path(doc_root: Path) -> None:
    assert resolve_static_file("/docs/../docs/notes.txt", doc_root) == doc_root / "docs" / "notes.txt"
    assert resolve_static_file("/bad\x00name", doc_root) is None


def test_get_content_type_falls_back_to_octet_stream() -> None:
    assert get_content_type(Path("page.html")) == "text/html"
    assert get_content_type(Path("blob.unknownext")) == "application/octet-stream"


def test_unreadable_resolved_file_raises_io_error(
    doc_root: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    vanished = doc_root / "vanished.txt"
    monkeypatch.setattr(
        "handlers.static_handler.resolve_static_file",
        lambda _uri, _root: vanished,
    )

    with pytest.raises(FileNotFoundError):
        serve_static(_build_request("/vanished.txt"), doc_root, LineBuffer())
