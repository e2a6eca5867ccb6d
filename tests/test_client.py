"""
Tests for the async service client, using an in-process httpx transport.
"""

import json

import httpx
import pytest

from name_corrector.client import NameCorrectorClient
from name_corrector.config import Settings
from name_corrector.errors import RemoteServiceError


def make_client(handler):
    return NameCorrectorClient("http://testserver", transport=httpx.MockTransport(handler))


class TestNameCorrectorClient:
    """Tests for request shapes and error mapping."""

    @pytest.mark.asyncio
    async def test_validate_name(self, client_profile):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "suggested_name": "Edna",
                "is_valid": True,
                "rationale": "Sound.",
                "expression_number": 6,
                "first_name_value": 6,
                "soul_urge_number": 6,
                "personality_number": 9,
                "karmic_debt_present": False,
            })

        async with make_client(handler) as client:
            result = await client.validate_name("Edna", client_profile.to_payload())

        assert seen["path"] == "/validate_name"
        assert seen["body"]["suggested_name"] == "Edna"
        assert seen["body"]["client_profile"]["birth_date"] == "1990-05-15"
        assert result.is_valid is True
        assert result.expression_number == 6

    @pytest.mark.asyncio
    async def test_initial_suggestions_keeps_profile_extras(self):
        def handler(request):
            return httpx.Response(200, json={
                "profile_data": {
                    "full_name": "John Doe",
                    "birth_date": "1990-05-15",
                    "life_path_number": 3,
                    "lo_shu_grid": {"missing_numbers": [2, 3]},
                },
                "suggestions": [{"name": "Edna Doe", "rationale": "r", "expression_number": 6}],
                "reasoning": "Closest variants.",
            })

        async with make_client(handler) as client:
            result = await client.initial_suggestions("John Doe", "1990-05-15")

        assert result.profile_data.life_path_number == 3
        assert result.profile_data.to_payload()["lo_shu_grid"] == {"missing_numbers": [2, 3]}
        assert [s.name for s in result.suggestions] == ["Edna Doe"]

    @pytest.mark.asyncio
    async def test_error_response_carries_service_message(self, client_profile):
        def handler(request):
            return httpx.Response(503, json={"error": "Service Unavailable: GOOGLE_API_KEY is not set."})

        async with make_client(handler) as client:
            with pytest.raises(RemoteServiceError) as exc_info:
                await client.validate_name("Edna", client_profile.to_payload())

        assert exc_info.value.status_code == 503
        assert "GOOGLE_API_KEY" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_non_json_error_body(self):
        def handler(request):
            return httpx.Response(502, text="Bad Gateway")

        async with make_client(handler) as client:
            with pytest.raises(RemoteServiceError, match="Bad Gateway"):
                await client.chat("general", "hello")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(RemoteServiceError) as exc_info:
                await client.chat("general", "hello")

        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_reports(self, client_profile):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            if request.url.path == "/generate_pdf_report":
                return httpx.Response(200, content=b"%PDF-1.4 fake", headers={"Content-Type": "application/pdf"})
            return httpx.Response(200, json={"report_content": "## Report"})

        confirmed = [{"name": "Edna Doe", "expression_number": 6, "rationale": "r", "is_valid": True}]
        async with make_client(handler) as client:
            text = await client.generate_text_report(client_profile.to_payload(), confirmed)
            pdf = await client.generate_pdf_report(client_profile.to_payload(), confirmed)

        assert text == "## Report"
        assert pdf.startswith(b"%PDF")
        assert bodies[0]["full_name"] == "John Doe"
        assert bodies[0]["confirmed_suggestions"] == confirmed

    @pytest.mark.asyncio
    async def test_chat_payload(self):
        seen = {}

        def handler(request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"response": "Hello."})

        async with make_client(handler) as client:
            answer = await client.chat("name_validation", "Is it good?", client_profile={"full_name": "John Doe"},
                                       target_name="Edna Doe", history=[{"role": "user", "content": "hi"}])

        assert answer == "Hello."
        assert seen == {
            "mode": "name_validation",
            "message": "Is it good?",
            "client_profile": {"full_name": "John Doe"},
            "target_name": "Edna Doe",
            "history": [{"role": "user", "content": "hi"}],
        }

    @pytest.mark.asyncio
    async def test_from_settings(self):
        settings = Settings(api_base_url="http://numerology:8080", http_timeout=5.0)

        async with NameCorrectorClient.from_settings(settings) as client:
            assert str(client._client.base_url).rstrip("/") == "http://numerology:8080"
            assert client._client.timeout.read == 5.0
