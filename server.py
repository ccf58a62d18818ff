"""Main HTTP server entry point and connection lifecycle orchestration."""

from __future__ import annotations

import argparse
import json
import logging
import socket
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from config import (
    ACCEPT_TIMEOUT_SECS,
    DOC_ROOT,
    HOST,
    LISTEN_BACKLOG,
    LOG_FORMAT,
    PORT,
    WORKER_COUNT,
)
from handlers.static_handler import serve_static
from request import EndOfStreamError, HTTPRequest
from response import HTTPResponse
from socket_handler import LineBuffer, write_http_response_message
from thread_pool import ThreadPool

logger = logging.getLogger(__name__)

ClientAddress = tuple[str, int]


@dataclass(frozen=True, slots=True)
class ServeContext:
    """Read-only state shared by every worker."""

    doc_root: Path
    log_format: str = LOG_FORMAT


ConnectionJob = tuple[socket.socket, ClientAddress, ServeContext]


def handle_connection(buffer: LineBuffer, job: ConnectionJob) -> None:
    """Serve requests on one connection until the peer or the protocol ends it.

    Parse failures other than end of stream propagate to the caller; the
    connection is closed without attempting an error response.
    """
    client_socket, address, context = job
    with (
        client_socket,
        client_socket.makefile("rb") as reader,
        client_socket.makefile("wb") as writer,
    ):
        while True:
            started_at = time.perf_counter()
            try:
                request = HTTPRequest.parse(reader, buffer)
            except EndOfStreamError:
                return

            response = serve_static(request, context.doc_root, buffer)
            bytes_sent = write_http_response_message(writer, response)
            if isinstance(response.body, bytearray):
                buffer.restore(response.body)
                response.body = None

            keep_alive = request.keep_alive
            _log_request(
                address=address,
                request=request,
                response=response,
                bytes_sent=bytes_sent,
                started_at=started_at,
                keep_alive=keep_alive,
                log_format=context.log_format,
            )
            if not keep_alive:
                return


def _log_request(
    *,
    address: ClientAddress,
    request: HTTPRequest,
    response: HTTPResponse,
    bytes_sent: int,
    started_at: float,
    keep_alive: bool,
    log_format: str,
) -> None:
    duration_ms = (time.perf_counter() - started_at) * 1000
    event = {
        "client": address[0],
        "method": request.method.value,
        "uri": request.uri,
        "version": request.version.wire,
        "status": response.status_code,
        "bytes_out": bytes_sent,
        "duration_ms": round(duration_ms, 3),
        "keep_alive": keep_alive,
    }
    if log_format == "json":
        logger.info(json.dumps(event, sort_keys=True))
        return

    logger.info(
        "client=%s method=%s uri=%s version=%s status=%s bytes_out=%s duration_ms=%.2f keep_alive=%s",
        event["client"],
        event["method"],
        event["uri"],
        event["version"],
        event["status"],
        event["bytes_out"],
        duration_ms,
        event["keep_alive"],
    )


class HTTPServer:
    def __init__(
        self,
        host: str = HOST,
        port: int = PORT,
        doc_root: str | Path = DOC_ROOT,
        worker_count: int = WORKER_COUNT,
        *,
        log_format: str = LOG_FORMAT,
    ) -> None:
        self.host = host
        self.port = port
        # Raises when the root does not exist, before any socket or worker is set up.
        self.doc_root = Path(doc_root).resolve(strict=True)
        self.worker_count = worker_count
        self.log_format = log_format

        self._server_socket: socket.socket | None = None
        self._pool: ThreadPool[ConnectionJob] | None = None
        self._running = False

    def start(self) -> None:
        """Listen and hand every accepted connection to the worker pool."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as server_socket:
            self._server_socket = server_socket
            server_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            server_socket.bind((self.host, self.port))
            server_socket.listen(LISTEN_BACKLOG)
            server_socket.settimeout(ACCEPT_TIMEOUT_SECS)
            self.port = server_socket.getsockname()[1]
            logger.info("Listening on %s:%s", self.host, self.port)

            context = ServeContext(doc_root=self.doc_root, log_format=self.log_format)
            self._pool = ThreadPool(self.worker_count, handle_connection)
            self._running = True
            try:
                while self._running:
                    try:
                        client_socket, address = server_socket.accept()
                    except socket.timeout:
                        continue
                    except OSError as exc:
                        if not self._running:
                            break
                        logger.warning("Error accepting connection: %s", exc)
                        continue

                    client_socket.setblocking(True)
                    if not self._pool.submit((client_socket, address, context)):
                        client_socket.close()
            finally:
                self._running = False
                self._pool.close()
                self._pool = None
                self._server_socket = None

    def stop(self) -> None:
        """Stop accepting; ``start`` returns once in-flight connections finish."""
        self._running = False
        if self._server_socket is not None:
            self._server_socket.close()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve static files over HTTP")
    parser.add_argument("--host", default=HOST)
    parser.add_argument("--port", type=int, default=PORT)
    parser.add_argument("--root", default=DOC_ROOT, help="document root to serve")
    parser.add_argument("--workers", type=int, default=WORKER_COUNT)
    parser.add_argument("--log-format", choices=["plain", "json"], default=LOG_FORMAT)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(threadName)s %(levelname)s %(message)s",
    )
    if args.workers <= 0:
        logger.error("--workers must be positive")
        return 2

    try:
        server = HTTPServer(
            host=args.host,
            port=args.port,
            doc_root=args.root,
            worker_count=args.workers,
            log_format=args.log_format,
        )
    except OSError as exc:
        logger.error("Cannot use document root %s: %s", args.root, exc)
        return 1

    try:
        server.start()
    except KeyboardInterrupt:
        server.stop()
    except OSError as exc:
        logger.error("Cannot listen on %s:%s: %s", args.host, args.port, exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
