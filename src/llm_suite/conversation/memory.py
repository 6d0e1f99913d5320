"""In-memory хранилище диалогов (процессное, для тестов и одиночных воркеров)."""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass, field
from typing import Any


@dataclass
class _Record:
    messages: list[dict[str, Any]] = field(default_factory=list)
    system_prompt: str | None = None


class InMemoryStore:
    def __init__(self) -> None:
        self._records: dict[str, _Record] = {}
        self._lock = threading.Lock()

    def _record(self, conversation_id: str) -> _Record:
        rec = self._records.get(conversation_id)
        if rec is None:
            rec = _Record()
            self._records[conversation_id] = rec
        return rec

    def get_messages(self, conversation_id: str) -> list[dict[str, Any]]:
        with self._lock:
            rec = self._records.get(conversation_id)
            return copy.deepcopy(rec.messages) if rec else []

    def save_messages(self, conversation_id: str, messages: list[dict[str, Any]]) -> None:
        with self._lock:
            self._record(conversation_id).messages = copy.deepcopy(list(messages))

    def add_message(self, conversation_id: str, message: dict[str, Any]) -> None:
        with self._lock:
            self._record(conversation_id).messages.append(dict(message))

    def get_system_prompt(self, conversation_id: str) -> str | None:
        with self._lock:
            rec = self._records.get(conversation_id)
            return rec.system_prompt if rec else None

    def set_system_prompt(self, conversation_id: str, prompt: str) -> None:
        with self._lock:
            self._record(conversation_id).system_prompt = prompt

    def exists(self, conversation_id: str) -> bool:
        with self._lock:
            return conversation_id in self._records

    def clear(self, conversation_id: str) -> None:
        with self._lock:
            rec = self._records.get(conversation_id)
            if rec is not None:
                rec.messages = []

    def delete(self, conversation_id: str) -> None:
        with self._lock:
            self._records.pop(conversation_id, None)
