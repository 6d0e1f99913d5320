"""Anthropic провайдер (Messages API, только chat)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from llm_suite.providers.base import build_messages, copy_present, record_usage
from llm_suite.providers.http import HttpTransport
from llm_suite.responses import ChatResponse, TokenUsage

log = structlog.get_logger()

API_VERSION = "2023-06-01"
DEFAULT_BASE_URL = "https://api.anthropic.com/v1"
DEFAULT_CHAT_MODEL = "claude-3-5-sonnet-20241022"
# Messages API требует max_tokens в каждом запросе.
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT = 30.0

ENDPOINT_MESSAGES = "/messages"


def text_content(blocks: Any) -> str:
    """Склеивает только блоки `type == "text"` в порядке ответа."""
    if not isinstance(blocks, list):
        return ""
    return "".join(
        str(block.get("text") or "")
        for block in blocks
        if isinstance(block, dict) and block.get("type") == "text"
    )


class AnthropicClient:
    vendor = "anthropic"

    def __init__(
        self,
        config: Mapping[str, Any],
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = dict(config)
        self._http = HttpTransport(
            self.vendor,
            self.config.get("base_url") or DEFAULT_BASE_URL,
            headers={
                "x-api-key": self.config.get("api_key") or "",
                "anthropic-version": API_VERSION,
            },
            timeout=float(self.config.get("timeout") or DEFAULT_TIMEOUT),
            transport=transport,
        )

    def chat(self, prompt: str, options: Mapping[str, Any] | None = None) -> ChatResponse:
        options = options or {}
        payload: dict[str, Any] = {
            "model": options.get("model") or self.config.get("chat_model") or DEFAULT_CHAT_MODEL,
            "messages": build_messages(prompt, options),
            "max_tokens": options.get("max_tokens") or DEFAULT_MAX_TOKENS,
        }
        # System-промпт у Anthropic только отдельным полем, не в messages.
        copy_present(payload, options, ("system", "temperature", "top_p", "top_k"))

        res = self._http.request("POST", ENDPOINT_MESSAGES, json_body=payload)
        data = res.json
        content = text_content(data.get("content"))
        usage = TokenUsage.from_data(data.get("usage"))
        model = data.get("model")
        record_usage(self.vendor, model, usage)
        log.info(
            "provider_response",
            vendor=self.vendor,
            model=model,
            latency_ms=round(res.latency_ms, 2),
            total_tokens=usage.total_tokens,
            response_length=len(content),
        )
        return ChatResponse(
            content=content,
            raw=data,
            model=model,
            id=data.get("id"),
            latency_ms=res.latency_ms,
            token_usage=usage,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> AnthropicClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
