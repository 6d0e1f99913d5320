"""Фабрика встроенных драйверов (закрытый набор: openai/anthropic/lmstudio/dummy)."""

from collections.abc import Callable, Mapping
from typing import Any

from llm_suite.errors import UnsupportedDriver
from llm_suite.providers.anthropic import AnthropicClient
from llm_suite.providers.dummy import DummyClient
from llm_suite.providers.lmstudio import LmStudioClient
from llm_suite.providers.openai import OpenAIClient

DriverFactory = Callable[[Mapping[str, Any]], Any]

BUILTIN_DRIVERS: dict[str, DriverFactory] = {
    "openai": OpenAIClient,
    "anthropic": AnthropicClient,
    "lmstudio": LmStudioClient,
    "dummy": DummyClient,
}


def create_client(driver: str | None, config: Mapping[str, Any]) -> Any:
    """Создаёт клиента встроенного драйвера по `driver` из конфига провайдера."""
    factory = BUILTIN_DRIVERS.get(driver or "")
    if factory is None:
        raise UnsupportedDriver(driver or "null")
    return factory(config)
