from __future__ import annotations

import random
from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from tilemerge.api.deps import get_redis
from tilemerge.main import app


@pytest.fixture()
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture()
def redis_client() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


@pytest.fixture()
def client_and_redis(
    redis_client: fakeredis.FakeRedis,
) -> Generator[tuple[TestClient, fakeredis.FakeRedis], None, None]:
    """FastAPI TestClient wired to an in-memory fakeredis instance."""

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield redis_client

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, redis_client
    app.dependency_overrides.clear()


@pytest.fixture()
def client(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> TestClient:
    return client_and_redis[0]
