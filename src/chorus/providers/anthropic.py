"""Claude adapter, proxied through the local relay endpoint.

Anthropic's API is not called from here; the adapter posts the prompt and key
to the relay (see `chorus.relay`), which forwards the request and returns the
Messages API payload unchanged.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from chorus.errors import MalformedResponseError, UpstreamError
from chorus.providers._errors import upstream_error_text
from chorus.providers.base import HTTPAdapter
from chorus.types import ProviderId

if TYPE_CHECKING:
    import httpx

NO_CONTENT = "Claude에서 content가 없는 응답을 받았습니다."
EMPTY_CONTENT = "Claude에서 빈 응답을 받았습니다."
NO_TEXT = "Claude에서 텍스트가 없는 응답을 받았습니다."


class ClaudeAdapter(HTTPAdapter):
    """Posts ``{"message", "apiKey"}`` to the relay and reads ``content[0].text``."""

    provider = ProviderId.CLAUDE

    def __init__(
        self,
        *,
        relay_url: str = "http://127.0.0.1:8787/api/claude",
        timeout_s: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize with the relay endpoint to call."""
        super().__init__(timeout_s=timeout_s, transport=transport)
        self.url = relay_url

    @staticmethod
    def build_body(prompt: str, credential: str) -> dict[str, Any]:
        """Return the relay request body."""
        return {"message": prompt, "apiKey": credential}

    async def _generate(self, prompt: str, credential: str) -> str:
        response, data = await self._post_json(
            self.url, body=self.build_body(prompt, credential)
        )
        self._log_raw("Claude response", data, credential)

        if not response.is_success:
            error = data.get("error") if isinstance(data, dict) else None
            raise UpstreamError(
                f"Claude 오류: {upstream_error_text(error)}",
                provider=self.provider.value,
                status_code=response.status_code,
            )

        content = data.get("content") if isinstance(data, dict) else None
        if content is None:
            raise self._malformed(NO_CONTENT, response)
        if not isinstance(content, list) or not content:
            raise self._malformed(EMPTY_CONTENT, response)

        first = content[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str) or not text:
            raise self._malformed(NO_TEXT, response)
        return text

    def _malformed(self, message: str, response: httpx.Response) -> MalformedResponseError:
        return MalformedResponseError(
            message, provider=self.provider.value, status_code=response.status_code
        )
