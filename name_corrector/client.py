import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

from .config import Settings
from .errors import RemoteServiceError
from .schemas import InitialSuggestionsResult, NameValidationResult

logger = logging.getLogger(__name__)


class NameCorrectorClient:
    """Async client for the numerology service (``app.py``)."""

    def __init__(self, base_url: str, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'NameCorrectorClient':
        return cls(settings.api_base_url, timeout=settings.http_timeout)

    async def __aenter__(self) -> 'NameCorrectorClient':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _post(self, path: str, payload: Dict[str, Any]) -> httpx.Response:
        logger.info(f"Calling numerology service {path}")
        try:
            resp = await self._client.post(path, json=payload)
        except httpx.HTTPError as exc:
            logger.error(f"Request to {path} failed: {exc}")
            raise RemoteServiceError(f"Request to {path} failed: {exc}") from exc

        if resp.is_error:
            try:
                message = resp.json().get('error', resp.text)
            except ValueError:
                message = resp.text
            logger.error(f"{path} answered {resp.status_code}: {message}")
            raise RemoteServiceError(message or f"HTTP {resp.status_code}", status_code=resp.status_code)
        return resp

    async def initial_suggestions(self, full_name: str, birth_date: str, birth_time: Optional[str] = None,
                                  birth_place: Optional[str] = None, desired_outcome: Optional[str] = None) -> InitialSuggestionsResult:
        resp = await self._post('/initial_suggestions', {
            "full_name": full_name,
            "birth_date": birth_date,
            "birth_time": birth_time,
            "birth_place": birth_place,
            "desired_outcome": desired_outcome,
        })
        return InitialSuggestionsResult.model_validate(resp.json())

    async def validate_name(self, suggested_name: str, client_profile: Dict[str, Any]) -> NameValidationResult:
        resp = await self._post('/validate_name', {
            "suggested_name": suggested_name,
            "client_profile": client_profile,
        })
        return NameValidationResult.model_validate(resp.json())

    async def generate_text_report(self, client_profile: Dict[str, Any], confirmed_suggestions: Iterable[Dict[str, Any]]) -> str:
        resp = await self._post('/generate_text_report', {**client_profile, "confirmed_suggestions": list(confirmed_suggestions)})
        return resp.json().get('report_content', '')

    async def generate_pdf_report(self, client_profile: Dict[str, Any], confirmed_suggestions: Iterable[Dict[str, Any]]) -> bytes:
        resp = await self._post('/generate_pdf_report', {**client_profile, "confirmed_suggestions": list(confirmed_suggestions)})
        return resp.content

    async def chat(self, mode: str, message: str, client_profile: Optional[Dict[str, Any]] = None,
                   target_name: Optional[str] = None, history: Optional[List[Dict[str, str]]] = None) -> str:
        resp = await self._post('/chat', {
            "mode": mode,
            "message": message,
            "client_profile": client_profile,
            "target_name": target_name,
            "history": history or [],
        })
        return resp.json().get('response', '')
