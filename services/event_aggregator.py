"""
Assigns raw events to buckets and folds them into per-bucket aggregates.

The fold is generic over an aggregation rule:
- InventoryRule sums product counts by action (added / removed)
- VisitRule counts distinct session ids inside each bucket

Events and buckets are both walked in chronological order, so assignment is
a single merge pass instead of a bucket scan per event.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence

import structlog

from models.trends import Bucket, InventoryAction, InventoryEvent, VisitEvent
from services.bucket_calendar import ensure_utc

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class InventoryCounts:
    """Products added and removed within one bucket."""
    added: int = 0
    removed: int = 0

    @property
    def delta(self) -> int:
        return self.added - self.removed


class AggregationRule(ABC):
    """
    How events are folded into a bucket aggregate.

    initial() builds the per-bucket accumulator, accumulate() folds one event
    into it, finalize() turns it into the value reported for the bucket.
    Accumulators never leave the call that created them.
    """

    @abstractmethod
    def initial(self) -> Any:
        ...

    @abstractmethod
    def accumulate(self, acc: Any, event: Any) -> None:
        ...

    def finalize(self, acc: Any) -> Any:
        return acc


class InventoryRule(AggregationRule):
    """Sum `count` into added or removed; other actions are ignored."""

    def initial(self) -> dict:
        return {InventoryAction.ADDED.value: 0, InventoryAction.REMOVED.value: 0}

    def accumulate(self, acc: dict, event: InventoryEvent) -> None:
        if event.action in acc:
            acc[event.action] += event.count

    def finalize(self, acc: dict) -> InventoryCounts:
        return InventoryCounts(
            added=acc[InventoryAction.ADDED.value],
            removed=acc[InventoryAction.REMOVED.value],
        )


class VisitRule(AggregationRule):
    """Distinct session ids per bucket (a session seen in two buckets counts in both)."""

    def initial(self) -> set:
        return set()

    def accumulate(self, acc: set, event: VisitEvent) -> None:
        acc.add(event.session_id)

    def finalize(self, acc: set) -> int:
        return len(acc)


def assign(
    events: Iterable[Any],
    buckets: Sequence[Bucket],
    rule: AggregationRule,
) -> List[Any]:
    """
    Fold events into one aggregate per bucket.

    Each event goes to the first bucket whose [start, end] contains its
    occurred_at (both ends inclusive). Events outside every bucket are
    dropped.

    Args:
        events: Objects with an `occurred_at` datetime, in any order
        buckets: Ordered, non-overlapping buckets
        rule: Aggregation rule applied within each bucket

    Returns:
        Finalized aggregates, positionally aligned with `buckets`
    """
    accumulators = [rule.initial() for _ in buckets]
    ordered = sorted(
        ((ensure_utc(event.occurred_at), event) for event in events),
        key=lambda pair: pair[0],
    )

    index = 0
    dropped = 0
    for position, (instant, event) in enumerate(ordered):
        while index < len(buckets) and instant > buckets[index].end:
            index += 1
        if index == len(buckets):
            dropped += len(ordered) - position
            break
        if instant < buckets[index].start:
            dropped += 1
            continue
        rule.accumulate(accumulators[index], event)

    if dropped:
        logger.debug("events_outside_buckets_dropped", count=dropped)

    return [rule.finalize(acc) for acc in accumulators]


def aggregate_inventory(
    events: Iterable[InventoryEvent],
    buckets: Sequence[Bucket],
) -> List[InventoryCounts]:
    """Added/removed counts per bucket."""
    return assign(events, buckets, InventoryRule())


def aggregate_visits(
    events: Iterable[VisitEvent],
    buckets: Sequence[Bucket],
) -> List[int]:
    """Unique visitors per bucket."""
    return assign(events, buckets, VisitRule())


def count_unique_sessions(events: Iterable[VisitEvent]) -> int:
    """
    Distinct session ids over the whole range.

    Not the sum of per-bucket counts: a returning session counts once here.
    """
    return len({event.session_id for event in events})
