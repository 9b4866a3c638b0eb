"""Resolve a selected service to the ids and time used to highlight it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable

from ..config import Config
from .events import Allocation, Event, Reallocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HighlightSelection:
    """Services drawn as highlighted and the time to query them at."""

    selected_service_id: int
    service_ids: FrozenSet[int]
    query_time: float


def resolve(
    events: Iterable[Event],
    selected_service_id: int,
    *,
    epsilon: float | None = None,
) -> HighlightSelection | None:
    """Find ``selected_service_id`` and every service reallocated from it.

    The arrival time of the allocating service anchors the query time. When
    the id was never allocated, the arrival time of the first reallocation
    derived from it is used instead. The returned query time lies ``epsilon``
    past that arrival so the creating event is replayed.

    Returns ``None`` when no allocation or reallocation references the id.
    """

    if epsilon is None:
        epsilon = Config.highlight_time_epsilon
    related: set[int] = set()
    allocation_time: float | None = None
    fallback_time: float | None = None
    for event in events:
        match event:
            case Allocation(service_id=sid, service=service):
                if sid == selected_service_id and allocation_time is None:
                    allocation_time = service.arrival_time
                    related.add(sid)
            case Reallocation(
                service_id=sid, reallocated_from_service_id=origin, service=service
            ):
                if origin == selected_service_id:
                    related.add(sid)
                    if fallback_time is None:
                        fallback_time = service.arrival_time
            case _:
                pass

    anchor = allocation_time if allocation_time is not None else fallback_time
    if anchor is None:
        logger.info("Service %s not found in timeline", selected_service_id)
        return None
    return HighlightSelection(
        selected_service_id=selected_service_id,
        service_ids=frozenset(related),
        query_time=anchor + epsilon,
    )


__all__ = ["HighlightSelection", "resolve"]
