"""Диалог с историей: хранит сообщения в сторе и переигрывает их на каждом ходе."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import structlog

from llm_suite.conversation.store import ConversationStore
from llm_suite.providers.base import ChatClient
from llm_suite.responses import ChatResponse, Message, Role, message_dicts

log = structlog.get_logger()


class Conversation:
    """Один многоходовый диалог.

    Своего состояния нет: история и system-промпт живут в сторе под `id`,
    стор и клиент общие и диалогу не принадлежат.
    """

    def __init__(
        self,
        conversation_id: str,
        store: ConversationStore,
        client: ChatClient,
        provider: str,
    ) -> None:
        self._id = conversation_id
        self._store = store
        self._client = client
        self._provider = provider

    def get_id(self) -> str:
        return self._id

    def get_client(self) -> ChatClient:
        return self._client

    def get_provider(self) -> str:
        return self._provider

    def system(self, prompt: str) -> Conversation:
        self._store.set_system_prompt(self._id, prompt)
        return self

    def get_system_prompt(self) -> str | None:
        return self._store.get_system_prompt(self._id)

    def chat(self, message: str, options: Mapping[str, Any] | None = None) -> ChatResponse:
        """Один ход: user-сообщение в стор → запрос со всей историей → ответ в стор.

        Если провайдер упал, user-сообщение остаётся в истории без ответа
        (отката нет); повторный `chat` продолжит уже с ним.
        """
        options = dict(options or {})
        self.add_message(Role.USER, message)

        chat_options = {**options, "messages": self.get_messages()}
        system_prompt = self.get_system_prompt()
        if system_prompt and options.get("system") is None:
            chat_options["system"] = system_prompt

        try:
            response = self._client.chat("", chat_options)
        except Exception:
            log.warning(
                "conversation_turn_failed",
                conversation_id=self._id,
                provider=self._provider,
            )
            raise

        self.add_message(Role.ASSISTANT, response.content)
        log.info(
            "conversation_turn",
            conversation_id=self._id,
            provider=self._provider,
            messages=len(chat_options["messages"]) + 1,
            response_length=len(response.content),
        )
        return response

    def add_message(self, role: Role | str, content: str) -> Conversation:
        self._store.add_message(self._id, Message(Role(role), content).to_dict())
        return self

    def get_messages(self) -> list[dict[str, Any]]:
        return self._store.get_messages(self._id)

    def get_message_count(self) -> int:
        return len(self.get_messages())

    def has_messages(self) -> bool:
        return self.get_message_count() > 0

    def get_last_message(self) -> dict[str, Any] | None:
        messages = self.get_messages()
        return messages[-1] if messages else None

    def get_last_messages(self, count: int) -> list[dict[str, Any]]:
        if count <= 0:
            return []
        return self.get_messages()[-count:]

    def clear(self) -> Conversation:
        """Очищает историю, system-промпт остаётся."""
        self._store.clear(self._id)
        return self

    def delete(self) -> None:
        self._store.delete(self._id)

    def load_history(self, messages: list[Message | Mapping[str, Any]]) -> Conversation:
        self._store.save_messages(self._id, message_dicts(list(messages)))
        return self

    def export(self) -> dict[str, Any]:
        return {
            "id": self._id,
            "provider": self._provider,
            "system_prompt": self.get_system_prompt(),
            "messages": self.get_messages(),
        }
