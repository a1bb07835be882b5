"""HTTP client adapter.

All network I/O goes through a single HttpxClient instance. It receives an
httpx.AsyncClient via constructor injection — the caller owns the client
lifecycle. Transport faults are returned as ProbeError values, never raised,
so nothing escapes the background task that runs the request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import structlog

from webprobe.errors import ErrorCode, ProbeError
from webprobe.models.http import Method, RawResponse

if TYPE_CHECKING:
    from webprobe.config import HttpSettings
    from webprobe.models.http import FetchOutcome, ProbeRequest

log = structlog.get_logger()


def build_http_client(settings: HttpSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=settings.follow_redirects,
        max_redirects=settings.max_redirects,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": settings.user_agent},
        limits=httpx.Limits(
            max_connections=4,
            max_keepalive_connections=2,
        ),
    )


def collect_headers(headers: httpx.Headers) -> dict[str, str]:
    """Lower-case every header name. A repeated name keeps its last value."""
    collected: dict[str, str] = {}
    for key, value in headers.multi_items():
        collected[key.lower()] = value
    return collected


def _transport_error(url: str, exc: Exception) -> ProbeError:
    """Map a transport exception to a ProbeError value."""
    message = str(exc) or type(exc).__name__
    if isinstance(exc, httpx.TimeoutException):
        code = ErrorCode.TIMEOUT
        suggestion = "The server did not answer in time. Try again or raise http.timeout_seconds."
    elif isinstance(exc, httpx.ConnectError):
        code = ErrorCode.CONNECT_FAILED
        suggestion = "Check the host name and your network connection."
    elif isinstance(exc, httpx.InvalidURL | httpx.UnsupportedProtocol | UnicodeError):
        code = ErrorCode.INVALID_URL
        suggestion = "Use an absolute http:// or https:// URL."
    elif isinstance(exc, httpx.TooManyRedirects | httpx.ProtocolError):
        code = ErrorCode.PROTOCOL_ERROR
        suggestion = "The server sent a response that could not be followed."
    else:
        code = ErrorCode.TRANSPORT_FAILED
        suggestion = "The request could not be completed."

    log.warning("transport_error", url=url, code=code, error=message)
    return ProbeError(code=code, message=message, suggestion=suggestion, recoverable=True)


class HttpxClient:
    """HTTP client adapter implementing HttpClientProtocol."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def perform(self, request: ProbeRequest) -> FetchOutcome:
        """Send ``request`` and read the whole body.

        Returns a RawResponse for every status code. Returns (does not raise)
        a ProbeError on DNS, connect, TLS, timeout and I/O failures.
        """
        content = request.body if request.method == Method.POST else None

        try:
            response = await self._client.request(
                request.method.value,
                request.url,
                content=content,
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeError) as exc:
            # Malformed IDNA hosts raise UnicodeError, outside the httpx hierarchy
            return _transport_error(request.url, exc)

        raw = RawResponse(
            url=str(response.url),
            status=response.status_code,
            status_text=response.reason_phrase,
            headers=collect_headers(response.headers),
            body=response.content,
        )
        log.info(
            "fetch_complete",
            url=raw.url,
            method=request.method.value,
            status_code=raw.status,
            content_length=len(raw.body),
        )
        return raw
