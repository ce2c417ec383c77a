from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Sequence, Tuple

from tripfilter.model.domain_types import Itinerary

from .base import ItineraryFilter

logger = logging.getLogger(__name__)


class FilterChain:
    """Run an ordered, fixed sequence of filters; each consumes the previous output."""

    name = "filter-chain"

    def __init__(self, filters: Iterable[ItineraryFilter] = ()):
        self._filters: Tuple[ItineraryFilter, ...] = tuple(filters)

    @property
    def filters(self) -> Tuple[ItineraryFilter, ...]:
        return self._filters

    @property
    def filter_names(self) -> List[str]:
        return [f.name for f in self._filters]

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        result = list(itineraries)
        for itinerary_filter in self._filters:
            before = len(result)
            result = itinerary_filter.apply(result)
            logger.debug("%s: %d -> %d itineraries", itinerary_filter.name, before, len(result))
        return result

    def __len__(self) -> int:
        return len(self._filters)

    def __iter__(self) -> Iterator[ItineraryFilter]:
        return iter(self._filters)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"FilterChain({self.filter_names})"


__all__ = ["FilterChain"]
