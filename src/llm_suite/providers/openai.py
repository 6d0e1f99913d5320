"""OpenAI провайдер (chat completions + images + probes)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from llm_suite.providers.base import build_messages, copy_present, record_usage
from llm_suite.providers.http import HttpResult, HttpTransport
from llm_suite.responses import ChatResponse, ImageResponse, TokenUsage

log = structlog.get_logger()

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_CHAT_MODEL = "gpt-4.1-mini"
DEFAULT_IMAGE_MODEL = "dall-e-3"
DEFAULT_IMAGE_SIZE = "1024x1024"
DEFAULT_TIMEOUT = 30.0

ENDPOINT_CHAT = "/chat/completions"
ENDPOINT_IMAGES = "/images/generations"
ENDPOINT_MODELS = "/models"


def build_chat_payload(
    prompt: str,
    options: Mapping[str, Any],
    default_model: str,
    extra_keys: tuple[str, ...] = (),
) -> dict[str, Any]:
    """Payload в формате chat/completions: system-промпт идёт первым сообщением."""
    messages = build_messages(prompt, options)
    if options.get("system") is not None:
        messages.insert(0, {"role": "system", "content": options["system"]})

    payload: dict[str, Any] = {
        "model": options.get("model") or default_model,
        "messages": messages,
    }
    copy_present(payload, options, ("temperature", "max_tokens", "top_p", *extra_keys))
    return payload


def parse_chat_completion(vendor: str, res: HttpResult) -> ChatResponse:
    data = res.json
    content = ""
    choices = data.get("choices")
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        content = str(message.get("content") or "")

    usage = TokenUsage.from_data(data.get("usage"))
    model = data.get("model")
    record_usage(vendor, model, usage)
    log.info(
        "provider_response",
        vendor=vendor,
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


def model_ids(http: HttpTransport) -> list[str]:
    """Список id моделей из `GET /models`; при любой ошибке пустой список."""
    try:
        data = http.request("GET", ENDPOINT_MODELS).json
    except Exception as e:
        log.info("provider_probe_failed", vendor=http.vendor, err=str(e))
        return []
    rows = data.get("data") or []
    return [str(row["id"]) for row in rows if isinstance(row, dict) and row.get("id")]


def ping(http: HttpTransport) -> bool:
    try:
        http.request("GET", ENDPOINT_MODELS)
    except Exception as e:
        log.info("provider_probe_failed", vendor=http.vendor, err=str(e))
        return False
    return True


class OpenAIClient:
    vendor = "openai"

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
            self.config.get("base_url") or DEFAULT_BASE_URL,
            headers=headers,
            timeout=float(self.config.get("timeout") or DEFAULT_TIMEOUT),
            transport=transport,
        )

    def chat(self, prompt: str, options: Mapping[str, Any] | None = None) -> ChatResponse:
        options = options or {}
        payload = build_chat_payload(
            prompt,
            options,
            self.config.get("chat_model") or DEFAULT_CHAT_MODEL,
        )
        res = self._http.request("POST", ENDPOINT_CHAT, json_body=payload)
        return parse_chat_completion(self.vendor, res)

    def generate_image(self, params: Mapping[str, Any]) -> ImageResponse:
        payload: dict[str, Any] = {
            "model": params.get("model") or self.config.get("image_model") or DEFAULT_IMAGE_MODEL,
            "prompt": params.get("prompt") or "",
            "size": params.get("size") or DEFAULT_IMAGE_SIZE,
            "n": params.get("n") or 1,
        }
        copy_present(payload, params, ("quality", "style", "response_format"))

        data = self._http.request("POST", ENDPOINT_IMAGES, json_body=payload).json
        rows = data.get("data") or [{}]
        image = rows[0] if isinstance(rows[0], dict) else {}
        return ImageResponse(
            url=image.get("url"),
            base64=image.get("b64_json"),
            raw=data,
            revised_prompt=image.get("revised_prompt"),
        )

    def is_available(self) -> bool:
        return ping(self._http)

    def list_models(self) -> list[str]:
        return model_ids(self._http)

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> OpenAIClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
