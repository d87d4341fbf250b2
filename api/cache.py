from __future__ import annotations

from collections import OrderedDict
from threading import RLock
from typing import Any, Hashable, Mapping, Tuple

from standings import Prediction


class QueryCache:
    def __init__(self, maxsize: int = 64) -> None:
        self.maxsize = maxsize
        self._store: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = RLock()

    def _prune(self) -> None:
        while len(self._store) > self.maxsize:
            self._store.popitem(last=False)

    def get(self, key: Hashable) -> Any | None:
        with self._lock:
            if key not in self._store:
                return None
            value = self._store.pop(key)
            self._store[key] = value
            return value

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            if key in self._store:
                self._store.pop(key)
            self._store[key] = value
            self._prune()

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)


history_cache = QueryCache()


def build_history_key(
    *,
    context_timestamp: str,
    start: int,
    end: int,
    season_length: int,
    predictions: Mapping[str, Prediction],
) -> Tuple[Any, ...]:
    prediction_items = tuple(
        sorted((fixture_id, pred.home, pred.away) for fixture_id, pred in predictions.items())
    )
    return (
        "history",
        context_timestamp,
        int(start),
        int(end),
        int(season_length),
        prediction_items,
    )
