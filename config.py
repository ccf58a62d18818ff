"""Configuration constants for the static file HTTP server."""

import os

HOST: str = "127.0.0.1"
PORT: int = 8000
DOC_ROOT: str = "."
WORKER_COUNT: int = os.cpu_count() or 1
SERVER_NAME: str = "http-server/v0.1.0"
INDEX_DOCUMENT: str = "index.html"
MAX_LINE_BYTES: int = 8192
ACCEPT_TIMEOUT_SECS: float = 0.2
LISTEN_BACKLOG: int = 128
LOG_FORMAT: str = "plain"
