"""Unit tests for webprobe.client."""

from __future__ import annotations

import httpx
import respx

from webprobe.client import HttpxClient, build_http_client, collect_headers
from webprobe.config import HttpSettings
from webprobe.errors import ErrorCode, ProbeError
from webprobe.models.http import Method, ProbeRequest, RawResponse

# ---------------------------------------------------------------------------
# build_http_client
# ---------------------------------------------------------------------------


class TestBuildHttpClient:
    async def test_client_configuration(self) -> None:
        client = build_http_client(HttpSettings(user_agent="probe-test/1"))
        async with client:
            assert isinstance(client, httpx.AsyncClient)
            assert client.follow_redirects is True
            assert client.headers["user-agent"] == "probe-test/1"

    async def test_redirects_can_be_disabled(self) -> None:
        async with build_http_client(HttpSettings(follow_redirects=False)) as client:
            assert client.follow_redirects is False


# ---------------------------------------------------------------------------
# collect_headers
# ---------------------------------------------------------------------------


class TestCollectHeaders:
    def test_names_lower_cased(self) -> None:
        headers = httpx.Headers({"Content-Type": "text/plain", "X-Trace-ID": "abc"})
        assert collect_headers(headers) == {"content-type": "text/plain", "x-trace-id": "abc"}

    def test_repeated_name_keeps_last_value(self) -> None:
        headers = httpx.Headers([("Set-Cookie", "a=1"), ("set-cookie", "b=2")])
        assert collect_headers(headers) == {"set-cookie": "b=2"}


# ---------------------------------------------------------------------------
# HttpxClient.perform
# ---------------------------------------------------------------------------


class TestPerformResponses:
    async def test_successful_get(self) -> None:
        with respx.mock:
            respx.get("https://example.com/ok").mock(
                return_value=httpx.Response(
                    200, headers={"Content-Type": "text/plain"}, content=b"hello"
                )
            )
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/ok")
                )

        assert isinstance(outcome, RawResponse)
        assert outcome.url == "https://example.com/ok"
        assert outcome.status == 200
        assert outcome.status_text == "OK"
        assert outcome.headers["content-type"] == "text/plain"
        assert outcome.body == b"hello"

    async def test_404_is_a_response_not_an_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/missing").mock(
                return_value=httpx.Response(404, text="not found")
            )
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/missing")
                )

        assert isinstance(outcome, RawResponse)
        assert outcome.status == 404
        assert outcome.status_text == "Not Found"
        assert outcome.body == b"not found"

    async def test_500_is_a_response_not_an_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/error").mock(return_value=httpx.Response(500))
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/error")
                )

        assert isinstance(outcome, RawResponse)
        assert outcome.status == 500

    async def test_redirect_reports_final_url(self) -> None:
        with respx.mock:
            respx.get("https://example.com/old").mock(
                return_value=httpx.Response(301, headers={"location": "https://example.com/new"})
            )
            respx.get("https://example.com/new").mock(
                return_value=httpx.Response(200, text="moved here")
            )
            async with build_http_client(HttpSettings()) as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/old")
                )

        assert isinstance(outcome, RawResponse)
        assert outcome.url == "https://example.com/new"
        assert outcome.body == b"moved here"

    async def test_post_sends_body(self) -> None:
        with respx.mock:
            route = respx.post("https://example.com/submit").mock(
                return_value=httpx.Response(200, json={"ok": True})
            )
            async with httpx.AsyncClient() as client:
                await HttpxClient(client).perform(
                    ProbeRequest(
                        url="https://example.com/submit",
                        method=Method.POST,
                        body=b"payload",
                    )
                )

        assert route.called
        assert route.calls.last.request.content == b"payload"

    async def test_get_never_sends_body(self) -> None:
        with respx.mock:
            route = respx.get("https://example.com/ok").mock(return_value=httpx.Response(200))
            async with httpx.AsyncClient() as client:
                await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/ok", body=b"ignored")
                )

        assert route.calls.last.request.content == b""


class TestPerformTransportErrors:
    async def test_connect_error_returned_as_value(self) -> None:
        with respx.mock:
            respx.get("https://example.com/down").mock(
                side_effect=httpx.ConnectError("connect refused")
            )
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/down")
                )

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.CONNECT_FAILED
        assert outcome.message == "connect refused"
        assert outcome.recoverable is True

    async def test_timeout_returned_as_value(self) -> None:
        with respx.mock:
            respx.get("https://example.com/slow").mock(
                side_effect=httpx.ReadTimeout("timed out")
            )
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/slow")
                )

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.TIMEOUT

    async def test_read_error_returned_as_value(self) -> None:
        with respx.mock:
            respx.get("https://example.com/reset").mock(
                side_effect=httpx.ReadError("connection reset")
            )
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/reset")
                )

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.TRANSPORT_FAILED
        assert outcome.message == "connection reset"

    async def test_too_many_redirects_returned_as_value(self) -> None:
        with respx.mock:
            respx.get("https://example.com/loop").mock(
                return_value=httpx.Response(302, headers={"location": "https://example.com/loop"})
            )
            async with build_http_client(HttpSettings(max_redirects=2)) as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/loop")
                )

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.PROTOCOL_ERROR

    async def test_missing_scheme_returned_as_value(self) -> None:
        async with httpx.AsyncClient() as client:
            outcome = await HttpxClient(client).perform(ProbeRequest(url="example.com/no-scheme"))

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.INVALID_URL

    async def test_malformed_idna_host_returned_as_value(self) -> None:
        async with httpx.AsyncClient() as client:
            outcome = await HttpxClient(client).perform(ProbeRequest(url="http://xn--/"))

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.INVALID_URL
        assert outcome.message

    async def test_unicode_error_from_transport_returned_as_value(self) -> None:
        with respx.mock:
            respx.get("https://example.com/idna").mock(
                side_effect=UnicodeError("label empty or too long")
            )
            async with httpx.AsyncClient() as client:
                outcome = await HttpxClient(client).perform(
                    ProbeRequest(url="https://example.com/idna")
                )

        assert isinstance(outcome, ProbeError)
        assert outcome.code == ErrorCode.INVALID_URL
        assert outcome.message == "label empty or too long"
