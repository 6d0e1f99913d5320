"""Dummy провайдер для тестов и офлайн-разработки (без сети, пишет историю вызовов)."""

from __future__ import annotations

import copy
import uuid
from collections.abc import Mapping
from typing import Any

from llm_suite.responses import ChatResponse, ImageResponse

DEFAULT_MODEL = "dummy-model"
DEFAULT_ID_PREFIX = "dummy-"
DEFAULT_IMAGE_URL = "https://example.com/dummy-image.png"


class DummyClient:
    vendor = "dummy"

    def __init__(self, config: Mapping[str, Any] | None = None) -> None:
        self.config = dict(config or {})
        self._chat_response: str | None = self.config.get("chat_response")
        self._image_url: str | None = self.config.get("image_url")
        self._chat_history: list[dict[str, Any]] = []
        self._image_history: list[dict[str, Any]] = []

    def set_chat_response(self, response: str) -> DummyClient:
        self._chat_response = response
        return self

    def set_image_url(self, url: str) -> DummyClient:
        self._image_url = url
        return self

    def reset(self) -> DummyClient:
        """Возвращает ответы к значениям из конфига."""
        self._chat_response = self.config.get("chat_response")
        self._image_url = self.config.get("image_url")
        return self

    def get_chat_history(self) -> list[dict[str, Any]]:
        return list(self._chat_history)

    def get_image_history(self) -> list[dict[str, Any]]:
        return list(self._image_history)

    def clear_history(self) -> DummyClient:
        self._chat_history = []
        self._image_history = []
        return self

    def chat(self, prompt: str, options: Mapping[str, Any] | None = None) -> ChatResponse:
        # Снимок, чтобы дальнейшие изменения истории диалога не переписали запись.
        opts = copy.deepcopy(dict(options or {}))
        self._chat_history.append({"prompt": prompt, "options": opts})

        if self._chat_response is not None:
            content = self._chat_response
        else:
            content = f"This is a dummy response to: {prompt}"

        return ChatResponse(
            content=content,
            raw={"dummy": True, "prompt": prompt, "options": opts},
            model=DEFAULT_MODEL,
            id=f"{DEFAULT_ID_PREFIX}{uuid.uuid4().hex}",
            latency_ms=0.0,
        )

    def generate_image(self, params: Mapping[str, Any]) -> ImageResponse:
        record = copy.deepcopy(dict(params))
        self._image_history.append(record)

        return ImageResponse(
            url=self._image_url or DEFAULT_IMAGE_URL,
            base64=None,
            raw={"dummy": True, "params": record},
            revised_prompt=record.get("prompt"),
        )

    def close(self) -> None:
        return None

    def __enter__(self) -> DummyClient:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
