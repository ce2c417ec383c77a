from __future__ import annotations

import logging
from typing import List, Sequence

from tripfilter.model.domain_types import Itinerary

logger = logging.getLogger(__name__)


class RemoveTransitIfStreetOnlyIsBetterFilter:
    """Drop transit itineraries that cost more than the best street-only option.

    The direct street search (walk, bicycle, car) does not prune the transit
    search, so the result may contain transit itineraries that are marginally
    faster but more expensive than going on-street all the way. This stage is a
    no-op when no street-only itinerary exists.
    """

    name = "transit-vs-street-filter"

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        street_costs = [it.generalized_cost for it in itineraries if it.is_on_street_all_the_way]
        if not street_costs:
            return list(itineraries)
        limit = min(street_costs)
        kept: List[Itinerary] = []
        for it in itineraries:
            if it.is_on_street_all_the_way or it.generalized_cost <= limit:
                kept.append(it)
            else:
                logger.debug(
                    "%s: %s cost %d exceeds street-only cost %d",
                    self.name,
                    it.label(),
                    it.generalized_cost,
                    limit,
                )
        return kept


__all__ = ["RemoveTransitIfStreetOnlyIsBetterFilter"]
