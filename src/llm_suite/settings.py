"""Настройки (env + `.env`) и сборка конфига провайдеров."""

from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pydantic-настройки (всё, что обычно лежит в `.env`)."""
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    default_provider: str = Field(default="openai", validation_alias="LLM_SUITE_DEFAULT")

    openai_api_key: str | None = Field(default=None, validation_alias="OPENAI_API_KEY")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias="OPENAI_BASE_URL",
    )
    openai_chat_model: str = Field(default="gpt-4.1-mini", validation_alias="OPENAI_CHAT_MODEL")
    openai_image_model: str = Field(default="dall-e-3", validation_alias="OPENAI_IMAGE_MODEL")
    openai_timeout_seconds: float = Field(default=30.0, validation_alias="OPENAI_TIMEOUT_SECONDS")

    anthropic_api_key: str | None = Field(default=None, validation_alias="ANTHROPIC_API_KEY")
    anthropic_base_url: str = Field(
        default="https://api.anthropic.com/v1",
        validation_alias="ANTHROPIC_BASE_URL",
    )
    anthropic_chat_model: str = Field(
        default="claude-3-5-sonnet-20241022",
        validation_alias="ANTHROPIC_CHAT_MODEL",
    )
    anthropic_timeout_seconds: float = Field(
        default=30.0,
        validation_alias="ANTHROPIC_TIMEOUT_SECONDS",
    )

    lmstudio_host: str = Field(default="127.0.0.1", validation_alias="LMSTUDIO_HOST")
    lmstudio_port: int = Field(default=1234, validation_alias="LMSTUDIO_PORT")
    # LM Studio по умолчанию без авторизации.
    lmstudio_api_key: str | None = Field(default=None, validation_alias="LMSTUDIO_API_KEY")
    lmstudio_chat_model: str = Field(default="local-model", validation_alias="LMSTUDIO_CHAT_MODEL")
    lmstudio_timeout: float = Field(default=120.0, validation_alias="LMSTUDIO_TIMEOUT")

    dummy_chat_response: str | None = Field(default=None, validation_alias="DUMMY_CHAT_RESPONSE")
    dummy_image_url: str | None = Field(default=None, validation_alias="DUMMY_IMAGE_URL")

    conversation_driver: str = Field(
        default="memory",
        validation_alias="LLM_SUITE_CONVERSATION_DRIVER",
    )  # memory | database | redis
    conversation_prefix: str = Field(
        default="llm_conversation_",
        validation_alias="LLM_SUITE_CONVERSATION_PREFIX",
    )
    database_url: str = Field(default="sqlite:///llm_suite.db", validation_alias="DATABASE_URL")
    redis_url: str = Field(default="redis://localhost:6379/0", validation_alias="REDIS_URL")

    def llm_config(self) -> dict[str, Any]:
        """Конфиг для `LlmManager`: `{default, providers: {name: {driver, ...}}}`."""
        return {
            "default": self.default_provider,
            "providers": {
                "openai": {
                    "driver": "openai",
                    "api_key": self.openai_api_key,
                    "base_url": self.openai_base_url,
                    "chat_model": self.openai_chat_model,
                    "image_model": self.openai_image_model,
                    "timeout": self.openai_timeout_seconds,
                },
                "anthropic": {
                    "driver": "anthropic",
                    "api_key": self.anthropic_api_key,
                    "base_url": self.anthropic_base_url,
                    "chat_model": self.anthropic_chat_model,
                    "timeout": self.anthropic_timeout_seconds,
                },
                "lmstudio": {
                    "driver": "lmstudio",
                    "host": self.lmstudio_host,
                    "port": self.lmstudio_port,
                    "api_key": self.lmstudio_api_key,
                    "chat_model": self.lmstudio_chat_model,
                    "timeout": self.lmstudio_timeout,
                },
                "dummy": {
                    "driver": "dummy",
                    "chat_response": self.dummy_chat_response,
                    "image_url": self.dummy_image_url,
                },
            },
        }


_settings: Settings | None = None


def get_settings() -> Settings:
    """Ленивая загрузка настроек (один раз на процесс)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
