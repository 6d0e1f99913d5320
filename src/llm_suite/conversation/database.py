"""Хранилище диалогов в БД (таблица `llm_conversations`, JSON со списком сообщений).

Запись это read-modify-write в одной транзакции. Строка берётся под
`SELECT ... FOR UPDATE`; SQLite эту конструкцию игнорирует, поэтому там
транзакция открывается через `BEGIN IMMEDIATE` (write-лок на всю БД до чтения).
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, sessionmaker

from llm_suite.db.models import ConversationRecord


class DatabaseStore:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._sessions = session_factory

    def _record(
        self,
        session: Session,
        conversation_id: str,
        for_update: bool = False,
    ) -> ConversationRecord | None:
        q = session.query(ConversationRecord).filter(
            ConversationRecord.conversation_id == conversation_id
        )
        if for_update:
            q = q.with_for_update()
        return q.one_or_none()

    def _begin_write(self, session: Session) -> None:
        if session.get_bind().dialect.name == "sqlite":
            session.execute(text("BEGIN IMMEDIATE"))

    def get_messages(self, conversation_id: str) -> list[dict[str, Any]]:
        session: Session = self._sessions()
        try:
            rec = self._record(session, conversation_id)
            return list(rec.messages or []) if rec else []
        finally:
            session.close()

    def save_messages(self, conversation_id: str, messages: list[dict[str, Any]]) -> None:
        copied = [dict(m) for m in messages]

        def change(rec: ConversationRecord) -> None:
            rec.messages = copied

        self._write(conversation_id, change)

    def add_message(self, conversation_id: str, message: dict[str, Any]) -> None:
        def change(rec: ConversationRecord) -> None:
            # Новый список, иначе JSON-колонка не заметит изменения.
            rec.messages = [*(rec.messages or []), dict(message)]

        self._write(conversation_id, change)

    def get_system_prompt(self, conversation_id: str) -> str | None:
        session: Session = self._sessions()
        try:
            rec = self._record(session, conversation_id)
            return rec.system_prompt if rec else None
        finally:
            session.close()

    def set_system_prompt(self, conversation_id: str, prompt: str) -> None:
        def change(rec: ConversationRecord) -> None:
            rec.system_prompt = prompt

        self._write(conversation_id, change)

    def exists(self, conversation_id: str) -> bool:
        session: Session = self._sessions()
        try:
            return self._record(session, conversation_id) is not None
        finally:
            session.close()

    def clear(self, conversation_id: str) -> None:
        session: Session = self._sessions()
        try:
            self._begin_write(session)
            rec = self._record(session, conversation_id, for_update=True)
            if rec is not None:
                rec.messages = []
            session.commit()
        finally:
            session.close()

    def delete(self, conversation_id: str) -> None:
        session: Session = self._sessions()
        try:
            session.query(ConversationRecord).filter(
                ConversationRecord.conversation_id == conversation_id
            ).delete(synchronize_session=False)
            session.commit()
        finally:
            session.close()

    def _write(
        self,
        conversation_id: str,
        change: Callable[[ConversationRecord], None],
    ) -> None:
        """Применяет `change` к записи (создаёт её при первой записи) атомарно."""
        for attempt in range(2):
            session: Session = self._sessions()
            try:
                self._begin_write(session)
                rec = self._record(session, conversation_id, for_update=True)
                if rec is None:
                    rec = ConversationRecord(conversation_id=conversation_id, messages=[])
                    session.add(rec)
                change(rec)
                session.commit()
                return
            except IntegrityError:
                # Параллельная вставка той же записи: повторяем уже с блокировкой строки.
                session.rollback()
                if attempt:
                    raise
            finally:
                session.close()
