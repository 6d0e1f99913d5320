"""Исключения пакета и нормализация ошибок (стабильные code/message)."""

from __future__ import annotations

from dataclasses import dataclass

import httpx


class LlmSuiteError(Exception):
    """Базовое исключение LLM Suite."""


class ProviderConfigError(LlmSuiteError):
    """Ошибка конфигурации провайдеров."""


class MissingProviderConfig(ProviderConfigError):
    def __init__(self, provider: str) -> None:
        self.provider = provider
        super().__init__(f"LLM provider [{provider}] is not configured.")


class UnsupportedDriver(ProviderConfigError):
    def __init__(self, driver: str) -> None:
        self.driver = driver
        super().__init__(f"LLM driver [{driver}] is not supported.")


class UnsupportedCapability(LlmSuiteError):
    def __init__(self, provider: str, capability: str) -> None:
        self.provider = provider
        self.capability = capability
        super().__init__(f"LLM provider [{provider}] does not support {capability}.")


class ProviderRequestFailure(LlmSuiteError):
    """Провайдер вернул не-2xx. Тело ответа сохраняем для диагностики."""

    def __init__(self, vendor: str, status: int, body: str) -> None:
        self.vendor = vendor
        self.status = status
        self.body = body
        super().__init__(f"{vendor} request failed with status {status}")


@dataclass(frozen=True)
class PublicError:
    """Публичная ошибка для ответа клиенту.

    Своего HTTP у пакета нет: `status_code` и `code` нужны вызывающему коду,
    который сам отдаёт ответы по HTTP (API-сервис поверх `LlmManager`).
    """

    status_code: int
    code: str
    message: str
    type: str = "llm_suite_error"


def map_provider_exception(exc: Exception) -> PublicError:
    """Преобразует исключение провайдера в HTTP-статус и код для ответа сервиса.

    Детали апстрима (тело ответа, URL) наружу не попадают.
    """
    if isinstance(exc, MissingProviderConfig):
        return PublicError(
            status_code=400,
            code="unknown_provider",
            message="Неизвестный провайдер",
            type="invalid_request_error",
        )

    if isinstance(exc, UnsupportedDriver):
        return PublicError(
            status_code=500,
            code="provider_not_configured",
            message="Провайдер не настроен",
        )

    if isinstance(exc, UnsupportedCapability):
        return PublicError(
            status_code=400,
            code="unsupported_capability",
            message=f"Провайдер не поддерживает {exc.capability}",
            type="invalid_request_error",
        )

    if isinstance(exc, ProviderRequestFailure):
        sc = int(exc.status or 0)
        if 400 <= sc < 500:
            group = "upstream_4xx"
        elif sc >= 500:
            group = "upstream_5xx"
        else:
            group = "upstream_error"
        msg = f"Upstream вернул {sc}" if sc else "Upstream вернул ошибку"
        return PublicError(
            status_code=502,
            code=group,
            message=msg,
            type="upstream_error",
        )

    if isinstance(exc, httpx.TimeoutException):
        return PublicError(
            status_code=502,
            code="upstream_timeout",
            message="Upstream не ответил вовремя",
            type="upstream_error",
        )

    if isinstance(exc, httpx.TransportError):
        return PublicError(
            status_code=502,
            code="upstream_unreachable",
            message="Не удалось подключиться к upstream",
            type="upstream_error",
        )

    return PublicError(
        status_code=502,
        code="provider_error",
        message="Ошибка провайдера",
    )


def error_payload(err: PublicError) -> dict:
    """Формирует JSON `{error:{...}}` для клиента."""
    return {"error": {"code": err.code, "message": err.message, "type": err.type}}
