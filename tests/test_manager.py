import threading

import pytest

from llm_suite.conversation.database import DatabaseStore
from llm_suite.conversation.memory import InMemoryStore
from llm_suite.conversation.redis_store import RedisStore
from llm_suite.errors import MissingProviderConfig, UnsupportedCapability, UnsupportedDriver
from llm_suite.manager import LlmManager, ProviderHandle, build_conversation_store
from llm_suite.providers.anthropic import AnthropicClient
from llm_suite.providers.base import ChatClient, ImageClient, ProbeClient
from llm_suite.providers.dummy import DummyClient
from llm_suite.providers.lmstudio import LmStudioClient
from llm_suite.providers.openai import OpenAIClient
from llm_suite.settings import Settings


class EchoClient:
    def __init__(self, config) -> None:
        self.config = config

    def chat(self, prompt, options=None):
        return DummyClient({"chat_response": f"echo:{prompt}"}).chat(prompt, options)


def test_resolves_builtin_drivers_with_documented_capabilities(dummy_config) -> None:
    m = LlmManager(dummy_config)

    openai = m.client("openai")
    anthropic = m.client("anthropic")
    lmstudio = m.client("lmstudio")
    dummy = m.client("dummy")

    assert isinstance(openai, OpenAIClient)
    assert isinstance(anthropic, AnthropicClient)
    assert isinstance(lmstudio, LmStudioClient)
    assert isinstance(dummy, DummyClient)

    assert all(isinstance(c, ChatClient) for c in (openai, anthropic, lmstudio, dummy))
    assert isinstance(openai, ImageClient)
    assert isinstance(dummy, ImageClient)
    assert not isinstance(anthropic, ImageClient)
    assert not isinstance(lmstudio, ImageClient)
    assert isinstance(openai, ProbeClient)
    assert isinstance(lmstudio, ProbeClient)


def test_unknown_provider_name_fails(dummy_config) -> None:
    with pytest.raises(MissingProviderConfig) as ei:
        LlmManager(dummy_config).client("nope")
    assert ei.value.provider == "nope"


def test_unknown_driver_fails(dummy_config) -> None:
    dummy_config["providers"]["weird"] = {"driver": "cohere"}
    dummy_config["providers"]["nodriver"] = {"api_key": "x"}
    m = LlmManager(dummy_config)

    with pytest.raises(UnsupportedDriver) as ei:
        m.client("weird")
    assert ei.value.driver == "cohere"

    with pytest.raises(UnsupportedDriver) as ei:
        m.client("nodriver")
    assert ei.value.driver == "null"


def test_custom_driver_via_extend(dummy_config) -> None:
    dummy_config["providers"]["mine"] = {"driver": "echo", "x": 1}
    m = LlmManager(dummy_config).extend("echo", EchoClient)

    client = m.client("mine")
    assert isinstance(client, EchoClient)
    assert client.config["x"] == 1
    assert m.chat("hi", provider="mine") == "echo:hi"


def test_extend_overrides_builtin_driver(dummy_config) -> None:
    m = LlmManager(dummy_config).extend("openai", lambda cfg: DummyClient({"chat_response": "stub"}))
    assert m.chat("x", provider="openai") == "stub"


def test_client_is_cached_until_forgotten(dummy_config) -> None:
    m = LlmManager(dummy_config)

    first = m.client("dummy")
    assert m.client("dummy") is first

    m.forget("dummy")
    second = m.client("dummy")
    assert second is not first

    m.forget_all()
    assert m.client("dummy") is not second


def test_resolve_is_cached_and_shared_with_client(dummy_config) -> None:
    m = LlmManager(dummy_config)

    first = m.resolve("dummy")
    assert m.resolve("dummy") is first
    assert m.client("dummy") is first
    assert m.client() is first

    first.set_chat_response("injected")
    assert m.chat("x") == "injected"

    m.forget("dummy")
    assert m.resolve("dummy") is not first


def test_forget_picks_up_new_config(dummy_config) -> None:
    m = LlmManager(dummy_config)
    assert m.chat("x") == "This is a dummy response to: x"

    m.set_provider_config("dummy", {"driver": "dummy", "chat_response": "v2"})
    assert m.chat("x") == "This is a dummy response to: x"

    m.forget("dummy")
    assert m.chat("x") == "v2"


def test_concurrent_client_calls_build_one_instance(dummy_config) -> None:
    built = []

    def creator(cfg):
        built.append(cfg)
        return DummyClient(cfg)

    dummy_config["providers"]["slow"] = {"driver": "counted"}
    m = LlmManager(dummy_config).extend("counted", creator)

    threads = [threading.Thread(target=m.client, args=("slow",)) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(built) == 1


def test_default_provider_and_registry_info(dummy_config) -> None:
    m = LlmManager(dummy_config)
    assert m.get_default_provider() == "dummy"
    assert set(m.get_providers()) == {"dummy", "anthropic", "openai", "lmstudio"}
    assert m.get_config()["default"] == "dummy"
    assert LlmManager({"providers": {}}).get_default_provider() == "openai"


def test_chat_and_chat_with_response_use_default(dummy_config) -> None:
    m = LlmManager(dummy_config)
    m.client("dummy").set_chat_response("fixed")

    assert m.chat("hi") == "fixed"
    res = m.chat_with_response("hi", {"temperature": 0})
    assert res.content == "fixed"
    assert m.client("dummy").get_chat_history()[-1] == {
        "prompt": "hi",
        "options": {"temperature": 0},
    }


def test_using_returns_handle_without_touching_default(dummy_config) -> None:
    dummy_config["providers"]["dummy2"] = {"driver": "dummy", "chat_response": "two"}
    m = LlmManager(dummy_config)

    handle = m.using("dummy2")
    assert isinstance(handle, ProviderHandle)
    assert handle.chat("x") == "two"
    assert handle.chat_with_response("x").content == "two"
    # Выбор через handle не влияет на последующие вызовы менеджера.
    assert m.chat("x") == "This is a dummy response to: x"
    assert handle.client() is m.client("dummy2")


def test_image_helpers(dummy_config) -> None:
    m = LlmManager(dummy_config)
    assert isinstance(m.image(), DummyClient)
    img = m.generate_image({"prompt": "cat"})
    assert img.url == "https://example.com/dummy-image.png"
    assert m.using("dummy").generate_image({"prompt": "dog"}).revised_prompt == "dog"


def test_image_on_chat_only_provider_fails(dummy_config) -> None:
    m = LlmManager(dummy_config)

    with pytest.raises(UnsupportedCapability) as ei:
        m.using("anthropic").image()
    assert ei.value.provider == "anthropic"
    assert ei.value.capability == "image"

    with pytest.raises(UnsupportedCapability):
        m.generate_image({"prompt": "x"}, provider="lmstudio")


def test_chat_on_image_only_provider_fails(dummy_config) -> None:
    class ImageOnly:
        def generate_image(self, params):
            raise AssertionError("not called")

    dummy_config["providers"]["painter"] = {"driver": "painter"}
    m = LlmManager(dummy_config).extend("painter", lambda cfg: ImageOnly())

    with pytest.raises(UnsupportedCapability) as ei:
        m.chat("x", provider="painter")
    assert ei.value.capability == "chat"


def test_conversation_bound_to_provider_and_store(dummy_config) -> None:
    store = InMemoryStore()
    m = LlmManager(dummy_config, store=store)

    conv = m.conversation("c1")
    conv.chat("hello")

    assert conv.get_provider() == "dummy"
    assert conv.get_client() is m.client("dummy")
    assert store.get_messages("c1")[0] == {"role": "user", "content": "hello"}
    assert m.conversation().get_id() != m.conversation().get_id()
    assert m.using("dummy").conversation("c1").get_message_count() == 2


def test_conversation_store_can_be_replaced(dummy_config) -> None:
    m = LlmManager(dummy_config, settings=Settings(LLM_SUITE_CONVERSATION_DRIVER="memory"))
    assert isinstance(m.get_conversation_store(), InMemoryStore)

    other = InMemoryStore()
    assert m.set_conversation_store(other).get_conversation_store() is other


def test_build_conversation_store_rejects_unknown_driver() -> None:
    with pytest.raises(UnsupportedDriver):
        build_conversation_store(Settings(LLM_SUITE_CONVERSATION_DRIVER="mongo"))


def test_from_settings(monkeypatch) -> None:
    monkeypatch.setenv("LLM_SUITE_DEFAULT", "dummy")
    monkeypatch.setenv("DUMMY_CHAT_RESPONSE", "from env")

    m = LlmManager.from_settings(Settings())

    assert m.get_default_provider() == "dummy"
    assert m.chat("x") == "from env"


def test_build_conversation_store_database_and_redis() -> None:
    db_store = build_conversation_store(
        Settings(LLM_SUITE_CONVERSATION_DRIVER="database", DATABASE_URL="sqlite://")
    )
    redis_store = build_conversation_store(
        Settings(LLM_SUITE_CONVERSATION_DRIVER="redis", REDIS_URL="redis://localhost:6379/3")
    )

    assert isinstance(db_store, DatabaseStore)
    assert isinstance(redis_store, RedisStore)


def test_get_manager_is_lazy_singleton(monkeypatch) -> None:
    import llm_suite.manager as manager_mod
    import llm_suite.settings as settings_mod

    monkeypatch.setenv("LLM_SUITE_DEFAULT", "dummy")
    monkeypatch.setattr(settings_mod, "_settings", None)
    monkeypatch.setattr(manager_mod, "_manager", None)

    first = manager_mod.get_manager()
    assert manager_mod.get_manager() is first
    assert first.get_default_provider() == "dummy"
