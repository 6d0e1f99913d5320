"""Менеджер провайдеров: имя → конфиг → клиент (лениво, с кэшем инстансов)."""

from __future__ import annotations

import threading
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from llm_suite.conversation.conversation import Conversation
from llm_suite.conversation.database import DatabaseStore
from llm_suite.conversation.memory import InMemoryStore
from llm_suite.conversation.redis_store import RedisStore
from llm_suite.conversation.store import ConversationStore
from llm_suite.errors import MissingProviderConfig, UnsupportedCapability, UnsupportedDriver
from llm_suite.infrastructure.db import create_session_factory
from llm_suite.infrastructure.redis import get_redis
from llm_suite.providers.base import ChatClient, ImageClient
from llm_suite.providers.factory import create_client
from llm_suite.responses import ChatResponse, ImageResponse
from llm_suite.settings import Settings, get_settings

log = structlog.get_logger()

DEFAULT_PROVIDER = "openai"

Creator = Callable[[Mapping[str, Any]], Any]


def build_conversation_store(settings: Settings) -> ConversationStore:
    """Стор диалогов по `LLM_SUITE_CONVERSATION_DRIVER` (memory | database | redis)."""
    driver = settings.conversation_driver
    if driver == "memory":
        return InMemoryStore()
    if driver == "database":
        return DatabaseStore(create_session_factory(settings.database_url))
    if driver == "redis":
        return RedisStore(get_redis(settings.redis_url), prefix=settings.conversation_prefix)
    raise UnsupportedDriver(driver)


class LlmManager:
    """Реестр провайдеров.

    Выбор провайдера всегда явный: аргумент `provider=` или хэндл из
    `using(name)`. Общего изменяемого "текущего провайдера" нет, поэтому
    один менеджер можно делить между потоками.
    """

    def __init__(
        self,
        config: Mapping[str, Any],
        store: ConversationStore | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._config = dict(config)
        self._clients: dict[str, Any] = {}
        self._creators: dict[str, Creator] = {}
        self._lock = threading.RLock()
        self._store = store
        self._settings = settings

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> LlmManager:
        settings = settings or get_settings()
        return cls(settings.llm_config(), settings=settings)

    # --- реестр ---

    def get_default_provider(self) -> str:
        return self._config.get("default") or DEFAULT_PROVIDER

    def get_providers(self) -> list[str]:
        return list((self._config.get("providers") or {}).keys())

    def get_config(self) -> dict[str, Any]:
        return self._config

    def set_provider_config(self, name: str, config: Mapping[str, Any]) -> LlmManager:
        """Меняет конфиг провайдера; закэшированный клиент подхватит его после `forget`."""
        providers = dict(self._config.get("providers") or {})
        providers[name] = dict(config)
        self._config["providers"] = providers
        return self

    def extend(self, driver: str, creator: Creator) -> LlmManager:
        """Регистрирует свой драйвер; перекрывает встроенный с тем же именем."""
        self._creators[driver] = creator
        return self

    def _resolve(self, name: str) -> Any:
        """Строит нового клиента по текущему конфигу (без кэша)."""
        config = (self._config.get("providers") or {}).get(name)
        if not config:
            raise MissingProviderConfig(name)

        driver = config.get("driver")
        creator = self._creators.get(driver) if driver else None
        client = creator(config) if creator is not None else create_client(driver, config)
        log.info("provider_resolved", provider=name, driver=driver, custom=creator is not None)
        return client

    def resolve(self, name: str) -> Any:
        """Клиент провайдера `name`; один инстанс на имя до `forget`."""
        with self._lock:
            cached = self._clients.get(name)
            if cached is None:
                cached = self._resolve(name)
                self._clients[name] = cached
            return cached

    def client(self, name: str | None = None) -> Any:
        return self.resolve(name or self.get_default_provider())

    def forget(self, name: str) -> LlmManager:
        with self._lock:
            self._clients.pop(name, None)
        return self

    def forget_all(self) -> LlmManager:
        with self._lock:
            self._clients = {}
        return self

    def using(self, name: str) -> ProviderHandle:
        return ProviderHandle(self, name)

    # --- chat / image ---

    def chat_client(self, provider: str | None = None) -> ChatClient:
        name = provider or self.get_default_provider()
        client = self.client(name)
        if not isinstance(client, ChatClient):
            raise UnsupportedCapability(name, "chat")
        return client

    def chat(
        self,
        prompt: str,
        options: Mapping[str, Any] | None = None,
        provider: str | None = None,
    ) -> str:
        return self.chat_client(provider).chat(prompt, options or {}).content

    def chat_with_response(
        self,
        prompt: str,
        options: Mapping[str, Any] | None = None,
        provider: str | None = None,
    ) -> ChatResponse:
        return self.chat_client(provider).chat(prompt, options or {})

    def image(self, provider: str | None = None) -> ImageClient:
        name = provider or self.get_default_provider()
        client = self.client(name)
        if not isinstance(client, ImageClient):
            raise UnsupportedCapability(name, "image")
        return client

    def generate_image(
        self,
        params: Mapping[str, Any],
        provider: str | None = None,
    ) -> ImageResponse:
        return self.image(provider).generate_image(params)

    # --- диалоги ---

    def get_conversation_store(self) -> ConversationStore:
        if self._store is None:
            self._store = build_conversation_store(self._settings or get_settings())
        return self._store

    def set_conversation_store(self, store: ConversationStore) -> LlmManager:
        self._store = store
        return self

    def conversation(
        self,
        conversation_id: str | None = None,
        provider: str | None = None,
    ) -> Conversation:
        name = provider or self.get_default_provider()
        return Conversation(
            conversation_id or uuid.uuid4().hex,
            self.get_conversation_store(),
            self.chat_client(name),
            name,
        )


@dataclass(frozen=True)
class ProviderHandle:
    """Провайдер, выбранный через `using(name)`; неизменяемый, живёт на один вызов/запрос."""

    manager: LlmManager
    name: str

    def client(self) -> Any:
        return self.manager.client(self.name)

    def chat_client(self) -> ChatClient:
        return self.manager.chat_client(self.name)

    def chat(self, prompt: str, options: Mapping[str, Any] | None = None) -> str:
        return self.manager.chat(prompt, options, provider=self.name)

    def chat_with_response(
        self,
        prompt: str,
        options: Mapping[str, Any] | None = None,
    ) -> ChatResponse:
        return self.manager.chat_with_response(prompt, options, provider=self.name)

    def image(self) -> ImageClient:
        return self.manager.image(self.name)

    def generate_image(self, params: Mapping[str, Any]) -> ImageResponse:
        return self.manager.generate_image(params, provider=self.name)

    def conversation(self, conversation_id: str | None = None) -> Conversation:
        return self.manager.conversation(conversation_id, provider=self.name)


_manager: LlmManager | None = None


def get_manager() -> LlmManager:
    """Ленивый менеджер на процесс (конфиг из `Settings`)."""
    global _manager
    if _manager is None:
        _manager = LlmManager.from_settings()
    return _manager
