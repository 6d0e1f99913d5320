"""LLM Suite: единый клиент к LLM-провайдерам + диалоги с историей."""

__version__ = "0.1.0"

from llm_suite.conversation.conversation import Conversation  # noqa: E402
from llm_suite.errors import (  # noqa: E402
    LlmSuiteError,
    MissingProviderConfig,
    ProviderRequestFailure,
    UnsupportedCapability,
    UnsupportedDriver,
)
from llm_suite.infrastructure.logging import configure_logging  # noqa: E402
from llm_suite.manager import LlmManager, ProviderHandle, get_manager  # noqa: E402
from llm_suite.responses import ChatResponse, ImageResponse, Message, Role, TokenUsage  # noqa: E402

__all__ = [
    "ChatResponse",
    "Conversation",
    "ImageResponse",
    "LlmManager",
    "LlmSuiteError",
    "Message",
    "MissingProviderConfig",
    "ProviderHandle",
    "ProviderRequestFailure",
    "Role",
    "TokenUsage",
    "UnsupportedCapability",
    "UnsupportedDriver",
    "configure_logging",
    "get_manager",
]
