from __future__ import annotations

import logging
from typing import Dict, List, Sequence, Tuple

from tripfilter.model.domain_types import Itinerary, Leg

logger = logging.getLogger(__name__)

MainLegsKey = Tuple[str, ...]


class ReduceTimeTableVariationFilter:
    """Keep only the cheapest itinerary among those sharing the same main transit legs.

    In a time-table view the result may contain itineraries where only the
    first and/or last transit leg differs, e.g. a short ride or a walk to
    another stop. The first and last transit legs are ignored when their
    duration is below ``short_transit_slack_seconds`` (at least one leg is
    always retained), the remaining legs form the group key, and the lowest
    generalized-cost member of each group survives. Street-only itineraries
    have no main legs and are always kept.
    """

    name = "reduce-time-table-variation-filter"

    def __init__(self, short_transit_slack_seconds: int):
        slack = int(short_transit_slack_seconds)
        if slack <= 0:
            raise ValueError(
                f"short_transit_slack_seconds must be at least one second, got {short_transit_slack_seconds!r}"
            )
        self.short_transit_slack_seconds = slack

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        best_by_key: Dict[MainLegsKey, Itinerary] = {}
        for it in itineraries:
            key = self.main_legs_key(it)
            if not key:
                continue
            current = best_by_key.get(key)
            if current is None or it.generalized_cost < current.generalized_cost:
                best_by_key[key] = it

        survivors = {id(it) for it in best_by_key.values()}
        kept: List[Itinerary] = []
        for it in itineraries:
            if it.is_on_street_all_the_way or id(it) in survivors:
                kept.append(it)
            else:
                logger.debug("%s: dropping time-table variant %s", self.name, it.label())
        return kept

    def main_legs_key(self, itinerary: Itinerary) -> MainLegsKey:
        """
        Build the key of the "main" transit legs of an itinerary.

        Args:
            itinerary: Itinerary to key.
        Returns:
            Leg identities of the transit legs, without a first and/or last
            leg shorter than the slack. At least one transit leg is retained.
            Empty for street-only itineraries.
        """
        legs: List[Leg] = list(itinerary.transit_legs)
        if len(legs) > 1 and legs[0].duration_seconds < self.short_transit_slack_seconds:
            legs = legs[1:]
        if len(legs) > 1 and legs[-1].duration_seconds < self.short_transit_slack_seconds:
            legs = legs[:-1]
        return tuple(leg.identity for leg in legs)


__all__ = ["ReduceTimeTableVariationFilter"]
