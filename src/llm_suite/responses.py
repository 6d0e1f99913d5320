"""Нормализованные модели ответов (chat/image/usage) и сообщения диалога."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


def _as_int(value: Any) -> int:
    try:
        return max(0, int(value or 0))
    except (TypeError, ValueError):
        return 0


@dataclass(frozen=True)
class TokenUsage:
    """Usage токенов; `total_tokens` досчитывается, если провайдер его не прислал."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self) -> None:
        if self.total_tokens == 0 and (self.prompt_tokens > 0 or self.completion_tokens > 0):
            object.__setattr__(self, "total_tokens", self.prompt_tokens + self.completion_tokens)

    @classmethod
    def from_data(cls, data: Mapping[str, Any] | None) -> TokenUsage:
        """Собирает usage из секции провайдера (OpenAI- или Anthropic-имена полей)."""
        if not data:
            return cls.empty()
        prompt = data.get("prompt_tokens")
        if prompt is None:
            prompt = data.get("input_tokens")
        completion = data.get("completion_tokens")
        if completion is None:
            completion = data.get("output_tokens")
        return cls(
            prompt_tokens=_as_int(prompt),
            completion_tokens=_as_int(completion),
            total_tokens=_as_int(data.get("total_tokens")),
        )

    @classmethod
    def empty(cls) -> TokenUsage:
        return cls(0, 0, 0)

    def has_data(self) -> bool:
        return self.total_tokens > 0 or self.prompt_tokens > 0 or self.completion_tokens > 0

    def to_dict(self) -> dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class ChatResponse:
    """Ответ chat-запроса, одинаковый для всех провайдеров."""

    content: str
    raw: dict[str, Any] = field(default_factory=dict)
    model: str | None = None
    id: str | None = None
    latency_ms: float | None = None
    token_usage: TokenUsage = field(default_factory=TokenUsage.empty)

    def __post_init__(self) -> None:
        if self.content is None:
            object.__setattr__(self, "content", "")
        if self.token_usage is None:
            object.__setattr__(self, "token_usage", TokenUsage.empty())

    def __str__(self) -> str:
        return self.content

    def is_empty(self) -> bool:
        return not self.content

    @property
    def total_tokens(self) -> int:
        return self.token_usage.total_tokens

    @property
    def prompt_tokens(self) -> int:
        return self.token_usage.prompt_tokens

    @property
    def completion_tokens(self) -> int:
        return self.token_usage.completion_tokens


@dataclass(frozen=True)
class ImageResponse:
    """Результат генерации картинки (url или base64, эксклюзивность не проверяем)."""

    url: str | None = None
    base64: str | None = None
    raw: dict[str, Any] = field(default_factory=dict)
    revised_prompt: str | None = None

    def has_url(self) -> bool:
        return bool(self.url)

    def has_base64(self) -> bool:
        return bool(self.base64)


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """Одно сообщение диалога; в сторах лежит как `{"role", "content"}`."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        return cls(role=Role(data["role"]), content=str(data.get("content") or ""))


def message_dicts(messages: list[Any]) -> list[dict[str, Any]]:
    """Приводит сообщения (dict или `Message`) к списку dict-ов, не трогая исходный список."""
    out: list[dict[str, Any]] = []
    for m in messages:
        if isinstance(m, Message):
            out.append(m.to_dict())
        elif isinstance(m, Mapping):
            out.append(dict(m))
        else:
            raise TypeError(f"Unsupported message type: {type(m).__name__}")
    return out
