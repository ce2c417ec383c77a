"""Core dataclasses shared across the filter chain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class TraverseMode(str, Enum):
    """Travel mode of a single leg."""

    WALK = "WALK"
    BICYCLE = "BICYCLE"
    CAR = "CAR"
    BUS = "BUS"
    TRAM = "TRAM"
    RAIL = "RAIL"
    SUBWAY = "SUBWAY"
    FERRY = "FERRY"
    CABLE_CAR = "CABLE_CAR"
    GONDOLA = "GONDOLA"
    FUNICULAR = "FUNICULAR"
    AIRPLANE = "AIRPLANE"

    @property
    def is_transit(self) -> bool:
        return self not in _STREET_MODES

    @classmethod
    def parse(cls, value: object) -> "TraverseMode":
        if isinstance(value, TraverseMode):
            return value
        token = str(value or "").strip().upper()
        try:
            return cls(token)
        except ValueError as exc:
            raise ValueError(f"Unknown traverse mode: {value!r}") from exc


_STREET_MODES = frozenset({TraverseMode.WALK, TraverseMode.BICYCLE, TraverseMode.CAR})


@dataclass(frozen=True)
class SystemNotice:
    """Annotation recording a filter-chain decision on an itinerary."""

    tag: str
    text: str

    @classmethod
    def deleted_by(cls, filter_name: str) -> "SystemNotice":
        return cls(tag=filter_name, text=_DELETED_TEXT.format(name=filter_name))

    @property
    def marks_deletion(self) -> bool:
        return self.text == _DELETED_TEXT.format(name=self.tag)


_DELETED_TEXT = "This itinerary is marked as deleted by the {name} filter."


@dataclass(frozen=True)
class Leg:
    """One uninterrupted segment of an itinerary in a single mode."""

    mode: TraverseMode
    start_time: datetime
    end_time: datetime
    distance_meters: float = 0.0
    route: Optional[str] = None
    trip_id: Optional[str] = None
    from_place: Optional[str] = None
    to_place: Optional[str] = None

    @property
    def is_transit_leg(self) -> bool:
        return self.mode.is_transit

    @property
    def duration_seconds(self) -> int:
        return int((self.end_time - self.start_time).total_seconds())

    @property
    def identity(self) -> str:
        """Key used when comparing legs across itineraries.

        Transit legs are identified by trip id, then route. Without either,
        the leg is only equal to a leg of the same mode, places and times.
        Street legs are identified by their mode.
        """
        if not self.is_transit_leg:
            return self.mode.value
        if self.trip_id or self.route:
            return self.trip_id or self.route
        return (
            f"{self.mode.value}:{self.from_place or '?'}-{self.to_place or '?'}"
            f"@{self.start_time.isoformat()}/{self.end_time.isoformat()}"
        )

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.is_transit_leg:
            return f"{self.mode.value} {self.route or self.trip_id or '?'}"
        return self.mode.value


@dataclass
class Itinerary:
    """A complete trip option produced by the search.

    Only ``system_notices`` is ever mutated by the filter chain; filters drop,
    reorder or tag whole itineraries.
    """

    legs: List[Leg]
    generalized_cost: int
    id: Optional[str] = None
    system_notices: List[SystemNotice] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.legs:
            raise ValueError("An itinerary needs at least one leg")

    @property
    def start_time(self) -> datetime:
        return self.legs[0].start_time

    @property
    def end_time(self) -> datetime:
        return self.legs[-1].end_time

    @property
    def distance_meters(self) -> float:
        return sum(leg.distance_meters for leg in self.legs)

    @property
    def transit_legs(self) -> Tuple[Leg, ...]:
        return tuple(leg for leg in self.legs if leg.is_transit_leg)

    @property
    def number_of_transfers(self) -> int:
        return max(len(self.transit_legs) - 1, 0)

    @property
    def is_on_street_all_the_way(self) -> bool:
        return not any(leg.is_transit_leg for leg in self.legs)

    @property
    def is_marked_as_deleted(self) -> bool:
        """True once a filter has tagged this itinerary as deleted in debug mode."""
        return any(notice.marks_deletion for notice in self.system_notices)

    def add_system_notice(self, notice: SystemNotice) -> None:
        self.system_notices.append(notice)

    def label(self) -> str:
        return self.id or " > ".join(str(leg) for leg in self.legs)


__all__ = ["Itinerary", "Leg", "SystemNotice", "TraverseMode"]
