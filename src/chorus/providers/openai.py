"""OpenAI Chat Completions adapter."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chorus.errors import MalformedResponseError, UpstreamError
from chorus.providers._errors import upstream_error_text
from chorus.providers.base import HTTPAdapter
from chorus.types import ProviderId

if TYPE_CHECKING:
    import httpx

UNEXPECTED_RESPONSE = "OpenAI에서 예상치 못한 응답을 받았습니다."


class OpenAIAdapter(HTTPAdapter):
    """Calls ``/chat/completions`` directly with a bearer token."""

    provider = ProviderId.OPENAI

    def __init__(
        self,
        *,
        model: str = "gpt-4o-mini",
        max_tokens: int = 1000,
        base_url: str = "https://api.openai.com/v1",
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with the model and endpoint to call."""
        super().__init__(timeout_s=timeout_s, transport=transport)
        self.model = model
        self.max_tokens = max_tokens
        self.url = f"{base_url.rstrip('/')}/chat/completions"

    def build_body(self, prompt: str) -> dict[str, Any]:
        """Return the single-turn request body for *prompt*."""
        return {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": self.max_tokens,
        }

    async def _generate(self, prompt: str, credential: str) -> str:
        response, data = await self._post_json(
            self.url,
            body=self.build_body(prompt),
            headers={"Authorization": f"Bearer {credential}"},
        )

        if isinstance(data, dict) and data.get("error"):
            self._log_raw("OpenAI API error", data, credential)
            raise UpstreamError(
                f"OpenAI 오류: {upstream_error_text(data['error'])}",
                provider=self.provider.value,
                status_code=response.status_code,
            )

        text = _extract_text(data)
        if text is None:
            self._log_raw("Unexpected OpenAI response", data, credential)
            raise MalformedResponseError(
                UNEXPECTED_RESPONSE,
                provider=self.provider.value,
                status_code=response.status_code,
            )
        return text


def _extract_text(data: Any) -> str | None:
    """Return ``choices[0].message.content`` when present."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    content = message.get("content") if isinstance(message, dict) else None
    return content if isinstance(content, str) else None
