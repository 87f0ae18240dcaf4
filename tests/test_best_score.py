from __future__ import annotations

import fakeredis
import pytest

import tilemerge.game_store as gs
from tilemerge.game_store import BEST_SCORE_KEY, get_best_score, record_score


def test_best_score_is_a_high_water_mark(redis_client: fakeredis.FakeRedis) -> None:
    assert get_best_score(r=redis_client) == 0

    assert record_score(r=redis_client, score=120) == 120
    assert record_score(r=redis_client, score=40) == 120
    assert redis_client.get(BEST_SCORE_KEY) == "120"

    assert record_score(r=redis_client, score=300) == 300
    assert get_best_score(r=redis_client) == 300


def test_malformed_best_score_is_ignored(redis_client: fakeredis.FakeRedis) -> None:
    redis_client.set(BEST_SCORE_KEY, "not-a-number")
    assert get_best_score(r=redis_client) == 0
    assert record_score(r=redis_client, score=8) == 8


def test_concurrent_higher_score_is_not_overwritten(monkeypatch: pytest.MonkeyPatch) -> None:
    server = fakeredis.FakeServer()
    worker_a = fakeredis.FakeRedis(server=server, decode_responses=True)
    worker_b = fakeredis.FakeRedis(server=server, decode_responses=True)
    worker_a.set(BEST_SCORE_KEY, "100")

    real_parse = gs._parse_best
    calls: list[str | None] = []

    def _parse_while_other_worker_writes(raw: str | None) -> int:
        # Another game finishes with a higher score between our read and our write.
        if not calls:
            worker_b.set(BEST_SCORE_KEY, "500")
        calls.append(raw)
        return real_parse(raw)

    monkeypatch.setattr(gs, "_parse_best", _parse_while_other_worker_writes)

    assert record_score(r=worker_a, score=200) == 500
    assert worker_a.get(BEST_SCORE_KEY) == "500"
    # First attempt saw the stale value, the retry saw the new one.
    assert calls == ["100", "500"]
