"""Подключение к Redis."""

import redis

from llm_suite.settings import get_settings


def get_redis(url: str | None = None) -> redis.Redis:
    """Возвращает клиент Redis (decode_responses=True)."""
    return redis.Redis.from_url(url or get_settings().redis_url, decode_responses=True)
