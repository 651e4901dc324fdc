"""Tests for credential extraction and identity verification."""

import httpx
import pytest
from starlette.requests import Request

from quickmap.core.auth import IdentityVerifier, extract_credential
from quickmap.core.errors import AuthError


def _request(headers: dict[str, str]) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in headers.items()]
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestExtractCredential:
    def test_cookie(self):
        assert extract_credential(_request({"Cookie": "access_token=from-cookie"})) == "from-cookie"

    def test_bearer_header(self):
        assert extract_credential(_request({"Authorization": "Bearer abc"})) == "abc"

    def test_cookie_wins_over_header(self):
        request = _request({"Cookie": "access_token=c", "Authorization": "Bearer h"})
        assert extract_credential(request) == "c"

    @pytest.mark.parametrize("header", ["", "Bearer ", "Basic abc", "abc"])
    def test_no_credential(self, header):
        assert extract_credential(_request({"Authorization": header})) is None


def _verifier(handler) -> IdentityVerifier:
    return IdentityVerifier(
        "https://id.example.com/",
        api_key="anon-key",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_verify_valid_token() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "user-1", "email": "u@example.com"})

    identity = await _verifier(handler).verify("good-token")

    assert identity.id == "user-1"
    assert identity.email == "u@example.com"
    assert str(seen[0].url) == "https://id.example.com/auth/v1/user"
    assert seen[0].headers["Authorization"] == "Bearer good-token"
    assert seen[0].headers["apikey"] == "anon-key"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(401, json={"msg": "invalid JWT"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"email": "no-id@example.com"}),
        httpx.Response(200, json=["user-1"]),
    ],
)
async def test_rejected_tokens(response: httpx.Response) -> None:
    with pytest.raises(AuthError, match="Invalid or expired token") as exc_info:
        await _verifier(lambda request: response).verify("bad-token")
    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_provider_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(AuthError, match="Authentication error"):
        await _verifier(handler).verify("token")
