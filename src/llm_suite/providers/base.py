"""Интерфейсы провайдеров (chat/image/probe) и общие хелперы для payload."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from llm_suite.metrics import tokens_total
from llm_suite.responses import ChatResponse, ImageResponse, TokenUsage, message_dicts


@runtime_checkable
class ChatClient(Protocol):
    def chat(self, prompt: str, options: Mapping[str, Any] | None = None) -> ChatResponse:
        ...


@runtime_checkable
class ImageClient(Protocol):
    def generate_image(self, params: Mapping[str, Any]) -> ImageResponse:
        ...


@runtime_checkable
class ProbeClient(Protocol):
    """Необязательные advisory-проверки доступности; никогда не бросают исключений."""

    def is_available(self) -> bool:
        ...

    def list_models(self) -> list[str]:
        ...


def build_messages(prompt: str, options: Mapping[str, Any]) -> list[dict[str, Any]]:
    """`options["messages"]` или один user-месседж из `prompt` (копия, исходник не трогаем)."""
    messages = options.get("messages")
    if messages is None:
        return [{"role": "user", "content": prompt}]
    return message_dicts(list(messages))


def copy_present(payload: dict[str, Any], options: Mapping[str, Any], keys: Iterable[str]) -> None:
    """Переносит в payload только явно переданные (не None) параметры."""
    for key in keys:
        value = options.get(key)
        if value is not None:
            payload[key] = value


def record_usage(vendor: str, model: str | None, usage: TokenUsage) -> None:
    if not usage.has_data():
        return
    label = model or "-"
    tokens_total.labels(vendor=vendor, model=label, kind="prompt").inc(usage.prompt_tokens)
    tokens_total.labels(vendor=vendor, model=label, kind="completion").inc(usage.completion_tokens)
    tokens_total.labels(vendor=vendor, model=label, kind="total").inc(usage.total_tokens)
