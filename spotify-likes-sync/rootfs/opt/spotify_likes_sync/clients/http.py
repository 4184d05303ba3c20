"""Single-shot HTTP call with a fixed timeout and classified failures."""

import json as jsonlib
import logging
import socket
import threading
import time
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0  # seconds, for the whole call
CHUNK_SIZE = 8192


class HttpError(Exception):
    """Base class for a failed remote call."""
    pass


class RequestTimeoutError(HttpError):
    """Request exceeded its timeout and was aborted."""
    pass


class NetworkError(HttpError):
    """Transport-level failure (DNS, connection refused, reset...)."""
    pass


class APIError(HttpError):
    """Remote answered with a non-success status."""

    def __init__(self, status: int, message: str | None = None):
        self.status = status
        self.message = message
        super().__init__(f"{message} ({status})" if message else str(status))


class MalformedResponseError(HttpError):
    """Success status but the body is not valid JSON."""
    pass


@dataclass
class HttpResponse:
    status: int
    payload: Any = None


def _error_message(body: bytes) -> str | None:
    """Pull a human readable message out of an error body, if there is one.

    Handles both Spotify shapes: Web API errors carry
    ``{"error": {"status": 404, "message": "..."}}`` while the accounts
    service answers ``{"error": "invalid_grant", ...}``.
    """
    try:
        data = jsonlib.loads(body)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    error = data.get("error")
    if isinstance(error, dict):
        message = error.get("message")
        return message if isinstance(message, str) and message else None
    if isinstance(error, str) and error:
        return error
    return None


def _abort(response: requests.Response, aborted: threading.Event) -> None:
    """Shut down the socket under a streamed response so a blocked read returns."""
    aborted.set()
    raw = getattr(response, "raw", None)
    conn = getattr(raw, "connection", None) or getattr(raw, "_connection", None)
    sock = getattr(conn, "sock", None)
    if sock is None:
        response.close()
        return
    try:
        sock.shutdown(socket.SHUT_RDWR)
    except OSError:
        # already closed by the reading side
        logger.debug("Socket already closed when aborting response")


def _read_body(response: requests.Response, deadline: float, what: str) -> bytes:
    """Read the whole body, cutting the connection once the deadline passes.

    The per-read timeout given to requests only bounds a single socket read;
    a server trickling bytes could otherwise hold the call open forever.
    """
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        response.close()
        raise RequestTimeoutError(f"{what} timed out")

    aborted = threading.Event()
    timer = threading.Timer(remaining, _abort, args=(response, aborted))
    timer.daemon = True
    timer.start()
    try:
        body = b"".join(response.iter_content(chunk_size=CHUNK_SIZE))
    except (requests.exceptions.RequestException, OSError, ValueError) as e:
        if aborted.is_set() or time.monotonic() >= deadline:
            raise RequestTimeoutError(f"{what} timed out") from e
        raise NetworkError(f"{what} failed: {e}") from e
    finally:
        timer.cancel()
        response.close()

    if aborted.is_set():
        raise RequestTimeoutError(f"{what} timed out")
    return body


def send_request(session: requests.Session, method: str, url: str, *,
                 headers: dict[str, str] | None = None,
                 json: Any = None,
                 data: Any = None,
                 auth: tuple[str, str] | None = None,
                 timeout: float = REQUEST_TIMEOUT) -> HttpResponse:
    """Perform exactly one request, bounded by ``timeout`` seconds overall.

    No retries. Raises RequestTimeoutError, NetworkError, APIError or
    MalformedResponseError; returns the parsed payload otherwise
    (``None`` for an empty body).
    """
    what = f"{method} {url}"
    deadline = time.monotonic() + timeout
    try:
        response = session.request(
            method, url,
            headers=headers,
            json=json,
            data=data,
            auth=auth,
            timeout=timeout,
            stream=True
        )
    except requests.exceptions.Timeout as e:
        raise RequestTimeoutError(f"{what} timed out after {timeout}s") from e
    except requests.exceptions.RequestException as e:
        raise NetworkError(f"{what} failed: {e}") from e

    body = _read_body(response, deadline, what)

    if not 200 <= response.status_code < 300:
        raise APIError(response.status_code, _error_message(body))

    if not body:
        return HttpResponse(response.status_code)

    try:
        payload = jsonlib.loads(body)
    except ValueError as e:
        raise MalformedResponseError(f"{what} returned invalid JSON") from e

    logger.debug(f"{what} -> {response.status_code}")
    return HttpResponse(response.status_code, payload)
