from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Sequence, Tuple

from tripfilter.model.domain_types import Itinerary

SortKey = Tuple[int, float, int, int]


def _timestamp(value: datetime) -> float:
    return value.timestamp()


def default_sort_key(arrive_by: bool) -> Callable[[Itinerary], SortKey]:
    """Return the default ranking key for the search direction.

    Street-only itineraries come first. Depart-after searches then prefer the
    earliest arrival; arrive-by searches prefer the latest departure. Ties are
    broken by generalized cost and then by number of transfers.
    """

    def depart_after_key(it: Itinerary) -> SortKey:
        return (
            0 if it.is_on_street_all_the_way else 1,
            _timestamp(it.end_time),
            it.generalized_cost,
            it.number_of_transfers,
        )

    def arrive_by_key(it: Itinerary) -> SortKey:
        return (
            0 if it.is_on_street_all_the_way else 1,
            -_timestamp(it.start_time),
            it.generalized_cost,
            it.number_of_transfers,
        )

    return arrive_by_key if arrive_by else depart_after_key


class SortOnDefaultOrderFilter:
    """Stable sort on the default itinerary order for the search direction."""

    name = "sort-on-default-order"

    def __init__(self, arrive_by: bool):
        self.arrive_by = bool(arrive_by)
        self._key = default_sort_key(self.arrive_by)

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        return sorted(itineraries, key=self._key)


__all__ = ["SortOnDefaultOrderFilter", "default_sort_key"]
