"""LM Studio провайдер (локальный OpenAI-совместимый сервер)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from llm_suite.providers.http import HttpTransport
from llm_suite.providers.openai import (
    ENDPOINT_CHAT,
    build_chat_payload,
    model_ids,
    parse_chat_completion,
    ping,
)
from llm_suite.responses import ChatResponse

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 1234
# Локальные модели бывают медленными.
DEFAULT_TIMEOUT = 120.0
DEFAULT_CHAT_MODEL = "local-model"


class LmStudioClient:
    vendor = "lmstudio"

    def __init__(
        self,
        config: Mapping[str, Any],
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.config = dict(config)
        headers = {}
        if self.config.get("api_key"):
            headers["Authorization"] = f"Bearer {self.config['api_key']}"
        self._http = HttpTransport(
            self.vendor,
            self.base_url,
            headers=headers,
            timeout=float(self.config.get("timeout") or DEFAULT_TIMEOUT),
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        host = self.config.get("host") or DEFAULT_HOST
        port = self.config.get("port") or DEFAULT_PORT
        return f"http://{host}:{port}/v1"

    def chat(self, prompt: str, options: Mapping[str, Any] | None = None) -> ChatResponse:
        options = options or {}
        payload = build_chat_payload(
            prompt,
            options,
            self.config.get("chat_model") or DEFAULT_CHAT_MODEL,
            extra_keys=("stop",),
        )
        res = self._http.request("POST", ENDPOINT_CHAT, json_body=payload)
        return parse_chat_completion(self.vendor, res)

    def is_available(self) -> bool:
        return ping(self._http)

    def list_models(self) -> list[str]:
        return model_ids(self._http)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> LmStudioClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
