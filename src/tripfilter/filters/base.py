"""Filter protocol shared by every stage of the chain."""

from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from tripfilter.model.domain_types import Itinerary


@runtime_checkable
class ItineraryFilter(Protocol):
    """A pipeline stage: ordered itineraries in, reduced or annotated itineraries out.

    ``name`` is stable and used to tag itineraries in debug mode. ``apply``
    must not mutate the input sequence; it returns a new list.
    """

    @property
    def name(self) -> str:
        ...

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        ...


__all__ = ["ItineraryFilter"]
