"""Tests for the resilient page retriever."""

import asyncio

import httpx
import pytest
from structlog.testing import capture_logs

PAGE = "<html><body><h1>Hello</h1></body></html>"


def _is_direct(request: httpx.Request) -> bool:
    return request.url.host == "example.com"


class TestValidateUrl:
    """Tests for validate_url."""

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "http://example.com/path?q=1",
        "  https://example.com/  ",
        "https://bücher.example/",
        "http://[::1]:8080/",
    ])
    def test_valid_urls(self, url):
        """Test validate_url with valid URLs."""
        from wcag_audit.retrieval.fetcher import validate_url

        assert validate_url(url) == url.strip()

    @pytest.mark.parametrize("url", [
        "",
        "example.com",
        "not a url",
        "ftp://example.com",
        "https://",
        "javascript:alert(1)",
        "http://[::1",
        "http://exa mple.com/",
        "https://exam<ple>.com",
        "https://exam%20ple.com/",
        None,
    ])
    def test_invalid_urls(self, url):
        """Test validate_url with invalid URLs."""
        from wcag_audit.errors import INVALID_URL_MESSAGE, InvalidInputError
        from wcag_audit.retrieval.fetcher import validate_url

        with pytest.raises(InvalidInputError) as exc_info:
            validate_url(url)

        assert exc_info.value.message == INVALID_URL_MESSAGE


class TestProxiedUrl:
    """Tests for proxied_url."""

    def test_target_is_percent_encoded(self):
        """Test proxied_url encoding."""
        from wcag_audit.retrieval.fetcher import proxied_url

        result = proxied_url("https://proxy.test/raw?url=", "https://example.com/a?b=c&d=(e)")

        assert result == "https://proxy.test/raw?url=https%3A%2F%2Fexample.com%2Fa%3Fb%3Dc%26d%3D(e)"


class TestRetrieve:
    """Tests for PageRetriever.retrieve."""

    @pytest.mark.asyncio
    async def test_direct_success(self, retriever_config, recording_sleep, make_client):
        """Test retrieval on the first direct attempt."""
        from wcag_audit.retrieval.fetcher import PageRetriever

        client, handler = make_client(lambda request: httpx.Response(200, text=PAGE))
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        html = await retriever.retrieve("https://example.com")

        assert html == PAGE
        assert handler.count == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_invalid_url_makes_no_request(self, retriever_config, recording_sleep, make_client):
        """Test that an invalid URL is rejected before any request."""
        from wcag_audit.errors import InvalidInputError
        from wcag_audit.retrieval.fetcher import PageRetriever

        client, handler = make_client(lambda request: httpx.Response(200, text=PAGE))
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        with pytest.raises(InvalidInputError):
            await retriever.retrieve("not-a-url")

        assert handler.count == 0

    @pytest.mark.asyncio
    async def test_falls_back_to_first_proxy(self, retriever_config, recording_sleep, make_client):
        """Test falling back to the first proxy."""
        from wcag_audit.retrieval.fetcher import PageRetriever

        def respond(request):
            if _is_direct(request):
                return httpx.Response(403)
            return httpx.Response(200, text=PAGE)

        client, handler = make_client(respond)
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        html = await retriever.retrieve("https://example.com")

        assert html == PAGE
        assert handler.count == 2
        assert handler.requests[1].url.host == "proxy-a.test"
        assert handler.requests[1].url.params["url"] == "https://example.com"

    @pytest.mark.asyncio
    async def test_retries_proxy_with_backoff(self, retriever_config, recording_sleep, make_client):
        """Test proxy retries with exponential backoff."""
        from wcag_audit.retrieval.fetcher import PageRetriever

        calls = {"proxy": 0}

        def respond(request):
            if _is_direct(request):
                raise httpx.ConnectError("connection refused", request=request)
            calls["proxy"] += 1
            if calls["proxy"] < 3:
                return httpx.Response(502)
            return httpx.Response(200, text=PAGE)

        client, handler = make_client(respond)
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        html = await retriever.retrieve("https://example.com")

        assert html == PAGE
        assert handler.count == 4
        assert {r.url.host for r in handler.requests[1:]} == {"proxy-a.test"}
        assert recording_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhaustion_respects_attempt_ceiling(self, retriever_config, recording_sleep, make_client):
        """Test the attempt order and ceiling when every attempt fails."""
        from wcag_audit.errors import RETRIEVAL_FAILED_MESSAGE, RetrievalFailedError
        from wcag_audit.retrieval.fetcher import PageRetriever

        client, handler = make_client(lambda request: httpx.Response(500))
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        with pytest.raises(RetrievalFailedError) as exc_info:
            await retriever.retrieve("https://example.com")

        assert handler.count == 1 + len(retriever_config.proxies) * retriever_config.max_retries
        assert handler.count == retriever_config.max_attempts
        assert exc_info.value.message == RETRIEVAL_FAILED_MESSAGE
        assert "• Website is currently offline" in str(exc_info.value)
        hosts = [r.url.host for r in handler.requests]
        assert hosts == ["example.com"] + ["proxy-a.test"] * 3 + ["proxy-b.test"] * 3 + ["proxy-c.test"] * 3
        assert recording_sleep.delays == [1.0, 2.0] * 3

    @pytest.mark.asyncio
    async def test_network_errors_exhaust_budget(self, retriever_config, recording_sleep, make_client):
        """Test that network errors use up every attempt."""
        from wcag_audit.errors import RetrievalFailedError
        from wcag_audit.retrieval.fetcher import PageRetriever

        def respond(request):
            raise httpx.ConnectError("unreachable", request=request)

        client, handler = make_client(respond)
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        with pytest.raises(RetrievalFailedError):
            await retriever.retrieve("https://unreachable.invalid")

        assert handler.count == 10

    @pytest.mark.asyncio
    async def test_timed_out_attempt_is_cancelled_and_counted(self, retriever_config, recording_sleep, make_client):
        """Test that a timed out attempt is cancelled."""
        from wcag_audit.retrieval.fetcher import PageRetriever

        retriever_config.timeout_seconds = 0.05
        cancelled = asyncio.Event()

        async def slow_then_ok(request):
            if _is_direct(request):
                try:
                    await asyncio.sleep(5)
                except asyncio.CancelledError:
                    cancelled.set()
                    raise
            return httpx.Response(200, text=PAGE)

        client, handler = make_client(slow_then_ok)
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        html = await retriever.retrieve("https://example.com")

        assert html == PAGE
        assert cancelled.is_set()
        assert handler.count == 2

    @pytest.mark.asyncio
    async def test_timeouts_chain_into_failure(self, retriever_config, recording_sleep, make_client):
        """Test that the last timeout is chained onto the failure."""
        from wcag_audit.errors import AbortedByTimeoutError, RetrievalFailedError
        from wcag_audit.retrieval.fetcher import PageRetriever

        retriever_config.timeout_seconds = 0.01

        async def hang(request):
            await asyncio.sleep(5)

        client, handler = make_client(hang)
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        with pytest.raises(RetrievalFailedError) as exc_info:
            await retriever.retrieve("https://example.com")

        assert handler.count == retriever_config.max_attempts
        assert isinstance(exc_info.value.__cause__, AbortedByTimeoutError)

    @pytest.mark.asyncio
    async def test_client_timeouts_count_as_timeouts(self, retriever_config, recording_sleep, make_client):
        """Test that httpx's own timeouts are reported like wait_for timeouts."""
        from wcag_audit.errors import AbortedByTimeoutError, RetrievalFailedError
        from wcag_audit.retrieval.fetcher import PageRetriever

        def respond(request):
            raise httpx.ReadTimeout("timed out", request=request)

        client, handler = make_client(respond)
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        with capture_logs() as logs:
            with pytest.raises(RetrievalFailedError) as exc_info:
                await retriever.retrieve("https://example.com")

        assert handler.count == retriever_config.max_attempts
        assert isinstance(exc_info.value.__cause__, AbortedByTimeoutError)
        assert {log["event"] for log in logs if log["log_level"] == "warning"} == {
            "Retrieval attempt timed out"
        }

    @pytest.mark.asyncio
    async def test_blank_body_is_empty_response(self, retriever_config, recording_sleep, make_client):
        """Test retrieval of a blank body."""
        from wcag_audit.errors import EMPTY_RESPONSE_MESSAGE, EmptyResponseError
        from wcag_audit.retrieval.fetcher import PageRetriever

        client, handler = make_client(lambda request: httpx.Response(200, text="  \n\t "))
        retriever = PageRetriever(retriever_config, client=client, sleep=recording_sleep)

        with pytest.raises(EmptyResponseError) as exc_info:
            await retriever.retrieve("https://example.com")

        assert exc_info.value.message == EMPTY_RESPONSE_MESSAGE
        assert handler.count == 1

    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self, retriever_config, recording_sleep, make_client):
        """Test that an injected client is not closed."""
        from wcag_audit.retrieval.fetcher import PageRetriever

        client, _ = make_client(lambda request: httpx.Response(200, text=PAGE))

        async with PageRetriever(retriever_config, client=client, sleep=recording_sleep) as retriever:
            await retriever.retrieve("https://example.com")

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_own_client_is_closed(self, retriever_config):
        """Test that the retriever closes its own client."""
        from wcag_audit.retrieval.fetcher import PageRetriever

        retriever = PageRetriever(retriever_config)
        async with retriever:
            client = retriever._client
            assert client is not None

        assert client.is_closed
        assert retriever._client is None


class TestRetrieverConfig:
    """Tests for RetrieverConfig."""

    def test_max_attempts(self, retriever_config):
        """Test the attempt ceiling."""
        assert retriever_config.max_attempts == 10

    def test_defaults_match_settings(self, mock_env_vars):
        """Test RetrieverConfig defaults."""
        from wcag_audit.config import DEFAULT_CORS_PROXIES, Settings

        config = Settings().retriever_config()

        assert config.timeout_seconds == 10.0
        assert config.max_retries == 3
        assert config.proxies == DEFAULT_CORS_PROXIES
        assert len(config.proxies) >= 3
