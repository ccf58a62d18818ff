"""Utility helpers shared across server modules."""

import mimetypes
from pathlib import Path

from config import INDEX_DOCUMENT


def get_content_type(file_path: Path) -> str:
    content_type, _encoding = mimetypes.guess_type(file_path.name)
    return content_type or "application/octet-stream"


def resolve_static_file(uri: str, doc_root: Path) -> Path | None:
    """Resolve a request URI to a file under ``doc_root`` or return None.

    ``doc_root`` must already be canonical. The joined path is canonicalized
    by the filesystem so that ``..`` segments and symlinks cannot escape it.
    """
    candidate = doc_root / uri.removeprefix("/")
    if uri.endswith("/"):
        candidate = candidate / INDEX_DOCUMENT

    try:
        resolved = candidate.resolve(strict=True)
    except (OSError, RuntimeError, ValueError):
        return None

    try:
        resolved.relative_to(doc_root)
    except ValueError:
        return None

    if not resolved.is_file():
        return None
    return resolved
