"""Service records and the tagged events that create and retire them.

Events form a closed set of three frozen dataclasses distinguished by their
``event_type`` tag. Consumers dispatch with ``match`` over the concrete
classes, so adding a new kind of event is a deliberate, visible change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, ClassVar, Iterable, Iterator, Mapping, Tuple, Union

from ..topology.types import EventData, ServiceData

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Service:
    """A provisioned circuit occupying one wavelength along ``path``."""

    service_id: int
    source_id: str
    destination_id: str
    arrival_time: float
    departure_time: float
    path: Tuple[str, ...]
    wavelength: int
    bit_rate: float = 0.0
    power: float = 0.0
    snr_requirement: float = 0.0
    gsnr: float = 0.0
    utilization: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Service":
        """Construct a :class:`Service` from a ``details`` mapping."""
        if not isinstance(data, Mapping):
            raise ValueError("service details must be an object")
        path = data.get("path")
        if not isinstance(path, (list, tuple)) or len(path) < 2:
            raise ValueError(
                f"service {data.get('service_id')!r} path must list at least two nodes"
            )
        try:
            return cls(
                service_id=int(data["service_id"]),
                source_id=str(data.get("source_id", path[0])),
                destination_id=str(data.get("destination_id", path[-1])),
                arrival_time=float(data["arrival_time"]),
                departure_time=float(data["departure_time"]),
                path=tuple(str(p) for p in path),
                wavelength=int(data["wavelength"]),
                bit_rate=float(data.get("bit_rate", 0.0)),
                power=float(data.get("power", 0.0)),
                snr_requirement=float(data.get("snr_requirement", 0.0)),
                gsnr=float(data.get("gsnr", 0.0)),
                utilization=float(data.get("utilization", 0.0)),
            )
        except KeyError as exc:
            raise ValueError(f"service record missing {exc.args[0]!r}") from None
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"service {data.get('service_id')!r} has an invalid field: {exc}"
            ) from None

    def to_dict(self) -> ServiceData:
        return {
            "service_id": self.service_id,
            "source_id": self.source_id,
            "destination_id": self.destination_id,
            "arrival_time": self.arrival_time,
            "departure_time": self.departure_time,
            "bit_rate": self.bit_rate,
            "power": self.power,
            "path": list(self.path),
            "wavelength": self.wavelength,
            "snr_requirement": self.snr_requirement,
            "gsnr": self.gsnr,
            "utilization": self.utilization,
        }


@dataclass(frozen=True)
class Allocation:
    """``service`` becomes present under ``service_id``."""

    event_type: ClassVar[str] = "ALLOCATION"

    timestamp: float
    service_id: int
    service: Service


@dataclass(frozen=True)
class Reallocation:
    """``service_id`` is redefined, e.g. moved to another path or channel."""

    event_type: ClassVar[str] = "REALLOCATION"

    timestamp: float
    service_id: int
    reallocated_from_service_id: int
    service: Service


@dataclass(frozen=True)
class ReleaseExpired:
    """``service_id`` is retired."""

    event_type: ClassVar[str] = "RELEASE_EXPIRED"

    timestamp: float
    service_id: int
    departure_time: float | None = None


Event = Union[Allocation, Reallocation, ReleaseExpired]


def parse_event(data: EventData) -> Event:
    """Decode one tagged event mapping.

    Raises
    ------
    ValueError
        If the tag is unknown, a required field is missing or a field has
        the wrong type.
    """
    if not isinstance(data, Mapping):
        raise ValueError("event entries must be objects")
    kind = data.get("event_type")
    details = data.get("details") or {}
    if not isinstance(details, Mapping):
        raise ValueError(f"{kind} event details must be an object")
    try:
        timestamp = float(data["timestamp"])
        service_id = int(data["service_id"])
        if kind == Allocation.event_type:
            return Allocation(timestamp, service_id, Service.from_dict(details))
        if kind == Reallocation.event_type:
            if "defrag_service_id" not in details:
                raise ValueError("REALLOCATION event missing 'defrag_service_id'")
            return Reallocation(
                timestamp,
                service_id,
                int(details["defrag_service_id"]),
                Service.from_dict(details),
            )
        if kind == ReleaseExpired.event_type:
            departure = details.get("departure_time")
            return ReleaseExpired(
                timestamp,
                service_id,
                float(departure) if departure is not None else None,
            )
    except KeyError as exc:
        raise ValueError(f"{kind} event missing {exc.args[0]!r}") from None
    except TypeError as exc:
        raise ValueError(f"{kind} event has an invalid field: {exc}") from None
    raise ValueError(f"unknown event_type: {kind!r}")


class EventLog:
    """Immutable, timestamp-ordered sequence of events.

    Replay stops at the first event past the query time, so the log must be
    in non-decreasing timestamp order. Input that is not is sorted here with
    a stable sort, which keeps the stored order of events sharing a
    timestamp, and a warning is logged.
    """

    __slots__ = ("_events",)

    def __init__(self, events: Iterable[Event] = ()) -> None:
        items = tuple(events)
        if any(b.timestamp < a.timestamp for a, b in zip(items, items[1:])):
            logger.warning(
                "Event log is not in timestamp order; sorting %d events",
                len(items),
            )
            items = tuple(sorted(items, key=lambda e: e.timestamp))
        self._events: Tuple[Event, ...] = items

    @classmethod
    def from_records(cls, records: Iterable[EventData]) -> "EventLog":
        return cls(parse_event(r) for r in records)

    @property
    def events(self) -> Tuple[Event, ...]:
        return self._events

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __getitem__(self, index: int) -> Event:
        return self._events[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventLog):
            return NotImplemented
        return self._events == other._events

    def __hash__(self) -> int:
        return hash(self._events)

    def __repr__(self) -> str:
        return f"EventLog({len(self._events)} events)"

    def time_span(self) -> Tuple[float, float] | None:
        """Return the first and last timestamps, or ``None`` when empty."""
        if not self._events:
            return None
        return self._events[0].timestamp, self._events[-1].timestamp


__all__ = [
    "Allocation",
    "Event",
    "EventLog",
    "Reallocation",
    "ReleaseExpired",
    "Service",
    "parse_event",
]
