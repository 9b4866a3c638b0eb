"""Rebuild the set of present services at a point in time."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping

from .events import Allocation, Event, Reallocation, ReleaseExpired, Service


def reconstruct(events: Iterable[Event], target_time: float) -> Dict[int, Service]:
    """Replay ``events`` up to and including ``target_time``.

    Events are applied in stored order and iteration stops at the first one
    stamped after ``target_time``. Allocations and reallocations store their
    service under ``service_id``, replacing any earlier definition; releases
    drop the id if it is present. A fresh dictionary is returned on every
    call.

    The result only tracks presence. Whether a service is active at
    ``target_time`` is decided from its own arrival and departure fields, see
    :func:`is_active`.
    """

    snapshot: Dict[int, Service] = {}
    for event in events:
        if event.timestamp > target_time:
            break
        match event:
            case Allocation(service_id=sid, service=service):
                snapshot[sid] = service
            case Reallocation(service_id=sid, service=service):
                snapshot[sid] = service
            case ReleaseExpired(service_id=sid):
                snapshot.pop(sid, None)
            case _:
                raise TypeError(f"unsupported event {type(event).__name__}")
    return snapshot


def is_active(service: Service, t: float) -> bool:
    """Return ``True`` when ``arrival_time <= t < departure_time``."""
    return service.arrival_time <= t < service.departure_time


def active_services(snapshot: Mapping[int, Service], t: float) -> Dict[int, Service]:
    """Return the entries of ``snapshot`` whose activity window contains ``t``."""
    return {sid: s for sid, s in snapshot.items() if is_active(s, t)}


__all__ = ["active_services", "is_active", "reconstruct"]
