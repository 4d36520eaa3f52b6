"""Tests for the async API client and user-facing error copy."""
import json

import httpx
import pytest

from app.client.api import ApiError, NetworkError, SathiClient
from app.client.errors import ERROR_MESSAGES, get_error_message


def _client(handler, token="tok"):
    return SathiClient("http://sathi.test", token=token, transport=httpx.MockTransport(handler))


class TestSathiClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token_under_api_prefix(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"count": 4})

        async with _client(handler) as api:
            assert await api.unread_message_count() == 4
        assert seen == {"url": "http://sathi.test/api/messages/unread-count", "auth": "Bearer tok"}

    @pytest.mark.asyncio
    async def test_login_stores_token(self):
        def handler(request):
            assert json.loads(request.content) == {"identifier": "a@b.c", "password": "pw"}
            return httpx.Response(200, json={"token": "fresh", "expires_at": None, "user": {}})

        async with _client(handler, token=None) as api:
            await api.login("a@b.c", "pw")
            assert api.token == "fresh"

    @pytest.mark.asyncio
    async def test_error_detail_becomes_api_error(self):
        def handler(request):
            return httpx.Response(409, json={"detail": "Interest already sent"})

        async with _client(handler) as api:
            with pytest.raises(ApiError) as excinfo:
                await api.send_interest("u2")
        assert excinfo.value.status_code == 409
        assert excinfo.value.message == "Interest already sent"

    @pytest.mark.asyncio
    async def test_validation_error_uses_first_message(self):
        def handler(request):
            return httpx.Response(
                422,
                json={"detail": [{"loc": ["body", "content"], "msg": "String should have at least 1 character"}]},
            )

        async with _client(handler) as api:
            with pytest.raises(ApiError, match="at least 1 character"):
                await api.send_message("u2", "")

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(502, text="<html>bad gateway</html>")

        async with _client(handler) as api:
            with pytest.raises(ApiError) as excinfo:
                await api.me()
        assert excinfo.value.status_code == 502
        assert excinfo.value.payload is None

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as api:
            with pytest.raises(NetworkError):
                await api.list_conversations()

    @pytest.mark.asyncio
    async def test_conversation_cursor_is_serialised(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"messages": [], "has_more": False, "next_cursor": None})

        async with _client(handler) as api:
            await api.get_conversation("u2", limit=10, before="2026-01-01T10:00:00+00:00")
        assert seen["params"] == {"limit": "10", "before": "2026-01-01T10:00:00+00:00"}

        async with _client(handler) as api:
            await api.get_conversation(
                "u2", before="2026-01-01T10:00:00+00:00", before_id="6f1c7a52-0000-4000-8000-000000000001"
            )
        assert seen["params"]["before_id"] == "6f1c7a52-0000-4000-8000-000000000001"


class TestErrorMessages:
    @pytest.mark.parametrize(
        "status, expected",
        [
            (401, "Please login to continue."),
            (403, "You do not have permission to perform this action."),
            (404, "The requested resource was not found."),
            (429, "Too many requests. Please try again later."),
            (500, "Server error. Please try again later."),
            (503, "Service temporarily unavailable. Please try again later."),
            (418, "An error occurred. Please try again."),
        ],
    )
    def test_status_table(self, status, expected):
        assert get_error_message(ApiError(status, "raw server text")) == expected

    def test_conflict_prefers_server_wording(self):
        assert get_error_message(ApiError(409, "Interest already sent")) == "Interest already sent"

    def test_network_error(self):
        assert get_error_message(NetworkError("boom")) == ERROR_MESSAGES["network_error"]["en"]

    def test_hindi_copy(self):
        message = get_error_message(ApiError(401, "x"), language="hi")
        assert message == ERROR_MESSAGES["unauthorized"]["hi"]

    def test_unknown_language_falls_back_to_english(self):
        assert get_error_message(ApiError(404, "x"), language="fr") == ERROR_MESSAGES["not_found"]["en"]

    def test_every_category_has_both_languages(self):
        for category, copy in ERROR_MESSAGES.items():
            assert set(copy) == {"en", "hi"}, category
