import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from llm_suite.conversation.database import DatabaseStore
from llm_suite.conversation.memory import InMemoryStore
from llm_suite.conversation.redis_store import RedisStore
from llm_suite.db.models import Base


class FakeRedis:
    """Минимальный in-memory двойник Redis: только команды, которые дёргает RedisStore."""

    def __init__(self) -> None:
        self.hashes: dict[str, dict[str, str]] = {}
        self.lists: dict[str, list[str]] = {}

    def hsetnx(self, key: str, field: str, value: str) -> int:
        h = self.hashes.setdefault(key, {})
        if field in h:
            return 0
        h[field] = value
        return 1

    def hset(self, key: str, field: str, value: str) -> int:
        self.hashes.setdefault(key, {})[field] = value
        return 1

    def hget(self, key: str, field: str) -> str | None:
        return self.hashes.get(key, {}).get(field)

    def rpush(self, key: str, *values: str) -> int:
        lst = self.lists.setdefault(key, [])
        lst.extend(values)
        return len(lst)

    def lrange(self, key: str, start: int, end: int) -> list[str]:
        lst = self.lists.get(key, [])
        return lst[start:] if end == -1 else lst[start : end + 1]

    def exists(self, *keys: str) -> int:
        return sum(1 for k in keys if k in self.hashes or k in self.lists)

    def delete(self, *keys: str) -> int:
        n = 0
        for k in keys:
            n += int(self.hashes.pop(k, None) is not None)
            n += int(self.lists.pop(k, None) is not None)
        return n

    def pipeline(self, transaction: bool = True) -> "FakePipeline":
        return FakePipeline(self)


class FakePipeline:
    def __init__(self, r: FakeRedis) -> None:
        self._r = r
        self._calls: list[tuple[str, tuple[Any, ...]]] = []

    def __getattr__(self, name: str) -> Callable[..., "FakePipeline"]:
        def queue(*args: Any) -> "FakePipeline":
            self._calls.append((name, args))
            return self

        return queue

    def execute(self) -> list[Any]:
        return [getattr(self._r, name)(*args) for name, args in self._calls]


@pytest.fixture
def session_factory() -> sessionmaker:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture(params=["memory", "database", "redis"])
def store(request: pytest.FixtureRequest, session_factory: sessionmaker, fake_redis: FakeRedis):
    if request.param == "memory":
        return InMemoryStore()
    if request.param == "database":
        return DatabaseStore(session_factory)
    return RedisStore(fake_redis)


class Recorder:
    """Пишет запросы, пришедшие в `httpx.MockTransport`, и отдаёт заготовленный ответ."""

    def __init__(self, status: int = 200, body: Any = None) -> None:
        self.status = status
        self.body = body if body is not None else {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.body, (dict, list)):
            return httpx.Response(self.status, json=self.body)
        return httpx.Response(self.status, text=str(self.body))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def recorder_factory() -> Callable[..., Recorder]:
    return Recorder


@pytest.fixture
def dummy_config() -> dict:
    return {
        "default": "dummy",
        "providers": {
            "dummy": {"driver": "dummy"},
            "anthropic": {"driver": "anthropic", "api_key": "sk-ant-test"},
            "openai": {"driver": "openai", "api_key": "sk-test"},
            "lmstudio": {"driver": "lmstudio"},
        },
    }
