"""
Map → group → reduce aggregation primitive.

The engine runs a single pass over an in-memory record sequence::

    engine = MapReduceEngine(records)
    rows = engine.execute(map_fn, reduce_fn)

``map_fn(record)`` returns ``None``, one ``KeyValuePair`` or an iterable of
pairs (``None`` entries inside the iterable are dropped too), so a map fn can
filter records out of a task. ``reduce_fn(key, values)`` folds one group into
a result or returns ``None`` to drop the key entirely.

Groups keep first-occurrence key order, but no predefined reduce depends on
it: every one of them is an order-independent sum or count.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Hashable, Iterable, Optional, Sequence, TypeVar, Union

from game_analytics.models.record import GameRecord

logger = logging.getLogger(__name__)

R = TypeVar("R")


@dataclass(frozen=True)
class KeyValuePair:
    """Transient output of a map step."""

    key: Hashable
    value: Any


MapResult = Union[None, KeyValuePair, Iterable[Optional[KeyValuePair]]]
MapFn = Callable[[GameRecord], MapResult]
ReduceFn = Callable[[Hashable, list[Any]], Optional[R]]
Groups = dict[Hashable, list[Any]]


class MapReduceEngine:
    """Generic aggregation over an immutable record sequence.

    Attributes:
        records: The records every ``execute()`` call runs over.
    """

    def __init__(self, records: Sequence[GameRecord]) -> None:
        self.records = tuple(records)

    def map(self, map_fn: MapFn) -> list[KeyValuePair]:
        """Apply ``map_fn`` to every record and flatten the emitted pairs."""
        pairs: list[KeyValuePair] = []
        for record in self.records:
            emitted = map_fn(record)
            if emitted is None:
                continue
            if isinstance(emitted, KeyValuePair):
                pairs.append(emitted)
                continue
            pairs.extend(p for p in emitted if p is not None)
        logger.debug("map: %d records -> %d pairs", len(self.records), len(pairs))
        return pairs

    @staticmethod
    def group(pairs: Iterable[KeyValuePair]) -> Groups:
        """Collect values by key, preserving first-occurrence key order."""
        groups: Groups = {}
        for pair in pairs:
            groups.setdefault(pair.key, []).append(pair.value)
        logger.debug("group: %d keys", len(groups))
        return groups

    @staticmethod
    def reduce(groups: Groups, reduce_fn: ReduceFn[R]) -> list[R]:
        """Fold each group to one result; ``None`` results are excluded."""
        results: list[R] = []
        for key, values in groups.items():
            result = reduce_fn(key, values)
            if result is not None:
                results.append(result)
        logger.debug("reduce: %d groups -> %d results", len(groups), len(results))
        return results

    def execute(self, map_fn: MapFn, reduce_fn: ReduceFn[R]) -> list[R]:
        """Run map, group and reduce in sequence."""
        started = time.perf_counter()
        results = self.reduce(self.group(self.map(map_fn)), reduce_fn)
        logger.debug(
            "execute: %d results in %.1fms",
            len(results), (time.perf_counter() - started) * 1000,
        )
        return results
