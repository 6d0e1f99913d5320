"""HTTP-транспорт провайдеров: один запрос, замер latency, проверка статуса."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from llm_suite.errors import ProviderRequestFailure
from llm_suite.metrics import provider_latency_seconds, provider_requests_total

log = structlog.get_logger()


@dataclass(frozen=True)
class HttpResult:
    """Распарсенный JSON ответа + длительность запроса."""

    json: dict[str, Any]
    latency_ms: float


class HttpTransport:
    """Обёртка над `httpx.Client`. Ретраев нет: любой не-2xx сразу ошибка."""

    def __init__(
        self,
        vendor: str,
        base_url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.vendor = vendor
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            headers={"Accept": "application/json", **(headers or {})},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def request(self, method: str, path: str, json_body: dict | None = None) -> HttpResult:
        t0 = time.perf_counter()
        try:
            r = self._client.request(method, path, json=json_body)
        except httpx.HTTPError:
            provider_requests_total.labels(vendor=self.vendor, endpoint=path, status="error").inc()
            raise
        elapsed = time.perf_counter() - t0
        provider_latency_seconds.labels(vendor=self.vendor, endpoint=path).observe(elapsed)

        if not r.is_success:
            provider_requests_total.labels(vendor=self.vendor, endpoint=path, status="failed").inc()
            log.warning(
                "provider_request_failed",
                vendor=self.vendor,
                endpoint=path,
                status=r.status_code,
            )
            raise ProviderRequestFailure(self.vendor, r.status_code, r.text)

        provider_requests_total.labels(vendor=self.vendor, endpoint=path, status="succeeded").inc()
        data = r.json() if r.content else {}
        return HttpResult(json=data if isinstance(data, dict) else {}, latency_ms=elapsed * 1000)

    def close(self) -> None:
        self._client.close()
