"""Local relay endpoint for Claude.

The Claude adapter does not call Anthropic directly: it posts
``{"message", "apiKey"}`` to ``POST /api/claude`` on this app, which forwards
one Messages API call through the ``anthropic`` SDK and returns the message
payload (``content`` array) unchanged. Upstream errors keep their status code
and error body so the adapter can report the upstream message.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any

import anthropic
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from chorus.config import Config
from chorus.providers._errors import describe_exception, redact

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


class ClaudeRelayRequest(BaseModel):
    """Body accepted by ``POST /api/claude``."""

    model_config = ConfigDict(populate_by_name=True)

    message: str = ""
    api_key: str = Field(default="", alias="apiKey")


def _default_client_factory(api_key: str) -> anthropic.AsyncAnthropic:
    # Retries are the caller's decision; the relay makes exactly one attempt.
    return anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)


def _error_body(exc: anthropic.APIStatusError) -> dict[str, Any]:
    body = exc.body
    if isinstance(body, dict) and body.get("error"):
        return body
    return {"error": {"message": exc.message or describe_exception(exc)}}


def create_relay_app(
    config: Config | None = None,
    *,
    client_factory: ClientFactory | None = None,
) -> FastAPI:
    """Build the relay app.

    Args:
        config: Supplies the Claude model and ``max_tokens``.
        client_factory: Returns an Anthropic async client for an API key;
            injectable for tests.
    """
    cfg = config or Config()
    make_client = client_factory or _default_client_factory
    app = FastAPI(title="Chorus Claude relay", docs_url=None, redoc_url=None)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/claude")
    async def relay_claude(req: ClaudeRelayRequest) -> JSONResponse:
        if not req.api_key.strip():
            return JSONResponse(status_code=400, content={"error": "apiKey is required"})
        if not req.message.strip():
            return JSONResponse(status_code=400, content={"error": "message is required"})

        client = make_client(req.api_key)
        try:
            message = await client.messages.create(
                model=cfg.claude_model,
                max_tokens=cfg.max_tokens,
                messages=[{"role": "user", "content": req.message}],
            )
        except asyncio.CancelledError:
            raise
        except anthropic.APIStatusError as e:
            logger.warning(
                "Anthropic returned %s: %s",
                e.status_code,
                redact(describe_exception(e), req.api_key),
            )
            return JSONResponse(status_code=e.status_code, content=_error_body(e))
        except anthropic.APIConnectionError as e:
            detail = redact(describe_exception(e), req.api_key)
            logger.warning("Anthropic unreachable: %s", detail)
            return JSONResponse(status_code=502, content={"error": {"message": detail}})
        finally:
            await client.close()

        return JSONResponse(content=message.model_dump(mode="json"))

    return app
