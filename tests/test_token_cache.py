"""Tests for the app access token cache.

Covers:
- cached token reuse (no refresh while valid)
- expiry with the refresh margin
- single-flight refresh under concurrency
- missing credentials, failed and malformed refreshes
"""

from __future__ import annotations

import asyncio

import httpx
import pytest
import respx

from shoutout_api.core.exceptions import ConfigurationError, UpstreamError
from shoutout_api.models import Credential
from shoutout_api.services.token_cache import OAUTH_BASE, AppTokenCache

TOKEN_URL = f"{OAUTH_BASE}/token"


def _token_response(token: str = "app-token", expires_in: int = 3600) -> httpx.Response:
    return httpx.Response(200, json={"access_token": token, "expires_in": expires_in})


class TestGetToken:
    @pytest.mark.asyncio
    @respx.mock
    async def test_fetches_token_with_client_credentials_grant(self, clock) -> None:
        route = respx.post(TOKEN_URL).mock(return_value=_token_response())

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            token = await cache.get_token()

        assert token == "app-token"
        assert route.call_count == 1
        body = route.calls.last.request.content.decode()
        assert "client_id=cid" in body
        assert "client_secret=secret" in body
        assert "grant_type=client_credentials" in body

    @pytest.mark.asyncio
    @respx.mock
    async def test_expiry_is_server_lifetime_minus_margin(self, clock) -> None:
        respx.post(TOKEN_URL).mock(return_value=_token_response(expires_in=3600))

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", refresh_margin=60, clock=clock)
            await cache.get_token()

        assert cache.credential is not None
        assert cache.credential.expires_at == clock.now + 3600 - 60

    @pytest.mark.asyncio
    @respx.mock
    async def test_valid_token_is_never_refetched(self, clock) -> None:
        route = respx.post(TOKEN_URL).mock(return_value=_token_response())

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            await cache.get_token()
            clock.advance(3000)
            await cache.get_token()
            await cache.get_token()

        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_refreshes_once_inside_margin(self, clock) -> None:
        route = respx.post(TOKEN_URL).mock(
            side_effect=[_token_response("first"), _token_response("second")]
        )

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", refresh_margin=60, clock=clock)
            assert await cache.get_token() == "first"
            clock.advance(3600 - 60)
            assert await cache.get_token() == "second"

        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalidate_forces_refresh(self, clock) -> None:
        route = respx.post(TOKEN_URL).mock(return_value=_token_response())

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            await cache.get_token()
            cache.invalidate()
            await cache.get_token()

        assert route.call_count == 2


class TestSingleFlight:
    @pytest.mark.asyncio
    async def test_concurrent_cold_calls_issue_one_refresh(self, clock) -> None:
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            # Hold the refresh open so the other callers pile up on the lock
            await asyncio.sleep(0.05)
            return _token_response("shared")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            tokens = await asyncio.gather(cache.get_token(), cache.get_token(), cache.get_token())

        assert tokens == ["shared", "shared", "shared"]
        assert calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_a_failed_refresh(self, clock) -> None:
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.sleep(0.05)
            return httpx.Response(503)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            results = await asyncio.gather(
                *(cache.get_token() for _ in range(5)), return_exceptions=True
            )

        assert calls == 1
        assert all(isinstance(r, UpstreamError) for r in results)
        assert cache.credential is None

    @pytest.mark.asyncio
    async def test_next_call_after_failed_refresh_retries(self, clock) -> None:
        responses = [httpx.Response(503), _token_response("recovered")]

        async def handler(request: httpx.Request) -> httpx.Response:
            return responses.pop(0)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            with pytest.raises(UpstreamError):
                await cache.get_token()
            token = await cache.get_token()

        assert token == "recovered"
        assert responses == []

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_cancel_shared_refresh(self, clock) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.05)
            return _token_response("shared")

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            impatient = asyncio.create_task(cache.get_token())
            patient = asyncio.create_task(cache.get_token())
            await asyncio.sleep(0.01)
            impatient.cancel()

            assert await patient == "shared"

        assert impatient.cancelled()


class TestFailures:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(("client_id", "secret"), [("", "secret"), ("cid", ""), ("", "")])
    async def test_missing_credentials_raise_configuration_error(
        self, clock, client_id: str, secret: str
    ) -> None:
        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, client_id, secret, clock=clock)
            with pytest.raises(ConfigurationError):
                await cache.get_token()

    @pytest.mark.asyncio
    @respx.mock
    async def test_error_status_raises_upstream_error(self, clock) -> None:
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(400, json={"message": "bad"}))

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            with pytest.raises(UpstreamError) as exc_info:
                await cache.get_token()

        assert exc_info.value.status_code == 400
        assert cache.credential is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_malformed_body_raises_upstream_error(self, clock) -> None:
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            with pytest.raises(UpstreamError):
                await cache.get_token()

    @pytest.mark.asyncio
    @respx.mock
    async def test_transport_error_raises_upstream_error(self, clock) -> None:
        respx.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("refused"))

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            with pytest.raises(UpstreamError):
                await cache.get_token()

    @pytest.mark.asyncio
    @respx.mock
    async def test_failed_refresh_keeps_previous_credential(self, clock) -> None:
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(503))

        async with httpx.AsyncClient() as http:
            cache = AppTokenCache(http, "cid", "secret", clock=clock)
            stale = Credential(token="stale", expires_at=clock.now - 1)
            cache._credential = stale

            with pytest.raises(UpstreamError):
                await cache.get_token()

        assert cache.credential is stale
