"""Google Gemini ``generateContent`` adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chorus.errors import MalformedResponseError, UpstreamError
from chorus.providers._errors import upstream_error_text
from chorus.providers.base import HTTPAdapter
from chorus.types import ProviderId

if TYPE_CHECKING:
    import httpx

UNEXPECTED_RESPONSE = "Gemini에서 예상치 못한 응답을 받았습니다."


class GeminiAdapter(HTTPAdapter):
    """Calls the Gemini REST API directly with the key in ``x-goog-api-key``."""

    provider = ProviderId.GEMINI

    def __init__(
        self,
        *,
        model: str = "gemini-2.0-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with the model and endpoint to call."""
        super().__init__(timeout_s=timeout_s, transport=transport)
        self.model = model
        self.url = f"{base_url.rstrip('/')}/{_normalize_model_id(model)}:generateContent"

    @staticmethod
    def build_body(prompt: str) -> dict[str, Any]:
        """Return the single-turn request body for *prompt*."""
        return {"contents": [{"parts": [{"text": prompt}]}]}

    async def _generate(self, prompt: str, credential: str) -> str:
        response, data = await self._post_json(
            self.url,
            body=self.build_body(prompt),
            headers={"x-goog-api-key": credential},
        )

        if isinstance(data, dict) and data.get("error"):
            self._log_raw("Gemini API error", data["error"], credential)
            raise UpstreamError(
                f"Gemini 오류: {upstream_error_text(data['error'])}",
                provider=self.provider.value,
                status_code=response.status_code,
            )

        text = _extract_text(data)
        if text is None:
            self._log_raw("Unexpected Gemini response", data, credential)
            raise MalformedResponseError(
                UNEXPECTED_RESPONSE,
                provider=self.provider.value,
                status_code=response.status_code,
            )
        return text


def _normalize_model_id(model: str) -> str:
    m = model.strip()
    if m.startswith("models/"):
        return m
    return f"models/{m}"


def _extract_text(data: Any) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` when present."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts or not isinstance(parts[0], dict):
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None
