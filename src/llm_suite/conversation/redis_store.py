"""Хранилище диалогов в Redis (ключ на диалог, как сессия).

Раскладка: hash `{prefix}{id}` (`created_at`, `system_prompt`) + list
`{prefix}{id}:messages` с JSON-сообщениями. Append это `RPUSH`, он атомарен.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any

import redis

DEFAULT_PREFIX = "llm_conversation_"


def _text(value: Any) -> str | None:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


class RedisStore:
    def __init__(self, client: redis.Redis, prefix: str = DEFAULT_PREFIX) -> None:
        self._r = client
        self._prefix = prefix

    def _meta_key(self, conversation_id: str) -> str:
        return f"{self._prefix}{conversation_id}"

    def _messages_key(self, conversation_id: str) -> str:
        return f"{self._prefix}{conversation_id}:messages"

    def _touch(self, pipe: Any, conversation_id: str) -> None:
        pipe.hsetnx(self._meta_key(conversation_id), "created_at", datetime.now(UTC).isoformat())

    def get_messages(self, conversation_id: str) -> list[dict[str, Any]]:
        rows = self._r.lrange(self._messages_key(conversation_id), 0, -1)
        return [json.loads(row) for row in rows]

    def save_messages(self, conversation_id: str, messages: list[dict[str, Any]]) -> None:
        key = self._messages_key(conversation_id)
        pipe = self._r.pipeline(transaction=True)
        self._touch(pipe, conversation_id)
        pipe.delete(key)
        if messages:
            pipe.rpush(key, *[json.dumps(dict(m), ensure_ascii=False) for m in messages])
        pipe.execute()

    def add_message(self, conversation_id: str, message: dict[str, Any]) -> None:
        pipe = self._r.pipeline(transaction=True)
        self._touch(pipe, conversation_id)
        pipe.rpush(self._messages_key(conversation_id), json.dumps(dict(message), ensure_ascii=False))
        pipe.execute()

    def get_system_prompt(self, conversation_id: str) -> str | None:
        return _text(self._r.hget(self._meta_key(conversation_id), "system_prompt"))

    def set_system_prompt(self, conversation_id: str, prompt: str) -> None:
        pipe = self._r.pipeline(transaction=True)
        self._touch(pipe, conversation_id)
        pipe.hset(self._meta_key(conversation_id), "system_prompt", prompt)
        pipe.execute()

    def exists(self, conversation_id: str) -> bool:
        return bool(self._r.exists(self._meta_key(conversation_id)))

    def clear(self, conversation_id: str) -> None:
        self._r.delete(self._messages_key(conversation_id))

    def delete(self, conversation_id: str) -> None:
        self._r.delete(self._meta_key(conversation_id), self._messages_key(conversation_id))
