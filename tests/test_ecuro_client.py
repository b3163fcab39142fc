"""Tests for the EcuroClient service."""

from __future__ import annotations

import base64
import json

import httpx
import pytest

from src.errors import EcuroAPIError
from src.services.ecuro_client import TEXT_ACCEPT

pytestmark = pytest.mark.anyio


# ── Tests: requests ──────────────────────────────────────────────────


class TestRequests:
    async def test_get_sends_token_and_query(self, upstream):
        upstream.reply(200, json=[{"id": "c1"}])

        result = await upstream.client.get("/list-clinics", {"clinicId": "c1", "page": None})

        assert result == [{"id": "c1"}]
        request = upstream.last
        assert request.method == "GET"
        assert request.url.path == "/api/v1/ecuro-light/list-clinics"
        assert request.headers["app-access-token"] == "test-token"
        # None values are not sent
        assert dict(request.url.params) == {"clinicId": "c1"}

    async def test_post_without_body_sends_empty_object(self, upstream):
        await upstream.client.post("/active-dentists")
        assert json.loads(upstream.last.content) == {}

    async def test_put_without_body_sends_nothing(self, upstream):
        upstream.reply(204)
        result = await upstream.client.put("/communications/abc/read")
        assert result is None
        assert upstream.last.content == b""

    async def test_non_json_body_is_returned_as_text(self, upstream):
        upstream.reply(200, text="created")
        assert await upstream.client.post("/", {"method": "create_appointment"}) == "created"

    async def test_exactly_one_call_per_request(self, upstream):
        upstream.reply(503, json={"message": "down"})
        with pytest.raises(EcuroAPIError):
            await upstream.client.get("/list-specialties")
        assert len(upstream.requests) == 1


# ── Tests: error normalization ───────────────────────────────────────


class TestErrorNormalization:
    async def test_error_field_is_preferred(self, upstream):
        upstream.reply(404, json={"error": "Clinic not found", "message": "ignored"})

        with pytest.raises(EcuroAPIError) as exc_info:
            await upstream.client.get("/list-clinics")

        assert str(exc_info.value) == "Ecuro API Error (404): Clinic not found"
        assert exc_info.value.status_code == 404

    async def test_message_field_is_used_when_no_error(self, upstream):
        upstream.reply(400, json={"message": "clinicId is required"})

        with pytest.raises(EcuroAPIError) as exc_info:
            await upstream.client.get("/list-returns")

        assert str(exc_info.value) == "Ecuro API Error (400): clinicId is required"

    async def test_status_text_when_body_has_no_message(self, upstream):
        upstream.reply(502, text="<html>Bad gateway</html>")

        with pytest.raises(EcuroAPIError) as exc_info:
            await upstream.client.get("/list-clinics")

        assert str(exc_info.value) == "Ecuro API Error (502): Request failed with status code 502"

    async def test_timeout_reports_unknown_status(self, upstream):
        upstream.fail_with(httpx.ReadTimeout, "timed out")

        with pytest.raises(EcuroAPIError) as exc_info:
            await upstream.client.get("/list-clinics")

        assert str(exc_info.value) == "Ecuro API Error (unknown): timed out"
        assert exc_info.value.status_code is None


# ── Tests: text and binary variants ──────────────────────────────────


class TestRawContent:
    async def test_get_text_asks_for_csv(self, upstream):
        upstream.reply(200, text="id;name\n1;Ana\n", headers={"content-type": "text/csv"})

        text = await upstream.client.get_text("/csv", {"clinicId": "c1"})

        assert text == "id;name\n1;Ana\n"
        assert upstream.last.headers["accept"] == TEXT_ACCEPT

    async def test_binary_round_trip(self, upstream):
        logo = bytes(range(256))
        upstream.reply(200, content=logo, headers={"content-type": "image/jpeg; charset=binary"})

        uri = await upstream.client.get_binary_as_data_uri("/logo/c1")

        prefix = "data:image/jpeg;base64,"
        assert uri.startswith(prefix)
        assert base64.b64decode(uri[len(prefix):]) == logo

    async def test_binary_defaults_to_png(self, upstream):
        upstream.reply(200, content=b"\x89PNG")

        uri = await upstream.client.get_binary_as_data_uri("/logo/c1")

        assert uri.startswith("data:image/png;base64,")
