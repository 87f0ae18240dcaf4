from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Sequence, cast

import redis


@dataclass(frozen=True, slots=True)
class EventStream:
    """Per-game Redis Stream renderers can tail to animate changes."""

    game_id: str

    @property
    def key(self) -> str:
        return f"events:{self.game_id}"


def publish_event(*, r: redis.Redis, stream: EventStream, fields: Mapping[str, str]) -> str:
    """Append an entry to a game's event stream."""

    # redis-py stubs expect field/value unions; in our app we only use string fields/values.
    stream_id = r.xadd(stream.key, {str(k): str(v) for k, v in fields.items()})
    return cast(str, stream_id)


def publish_many(*, r: redis.Redis, entries: Sequence[tuple[str, Mapping[str, str]]]) -> list[str]:
    ids: list[str] = []
    for key, fields in entries:
        stream_id = r.xadd(key, {str(k): str(v) for k, v in fields.items()})
        ids.append(cast(str, stream_id))
    return ids
