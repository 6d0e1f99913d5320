"""Контракт хранилища диалогов (все операции по conversation id)."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ConversationStore(Protocol):
    """Запись создаётся неявно при первой записи; отдельного `create` нет.

    Сообщения хранятся как `{"role": ..., "content": ...}` в порядке ходов.
    `add_message` обязан быть атомарным в рамках одного id.
    """

    def get_messages(self, conversation_id: str) -> list[dict[str, Any]]:
        ...

    def save_messages(self, conversation_id: str, messages: list[dict[str, Any]]) -> None:
        """Полная замена истории."""
        ...

    def add_message(self, conversation_id: str, message: dict[str, Any]) -> None:
        ...

    def get_system_prompt(self, conversation_id: str) -> str | None:
        ...

    def set_system_prompt(self, conversation_id: str, prompt: str) -> None:
        ...

    def exists(self, conversation_id: str) -> bool:
        ...

    def clear(self, conversation_id: str) -> None:
        """Очищает сообщения; system-промпт и сама запись остаются."""
        ...

    def delete(self, conversation_id: str) -> None:
        """Удаляет запись целиком, вместе с system-промптом."""
        ...
