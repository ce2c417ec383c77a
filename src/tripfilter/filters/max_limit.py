from __future__ import annotations

import logging
from typing import Callable, List, Optional, Sequence

from tripfilter.model.domain_types import Itinerary

logger = logging.getLogger(__name__)

MaxLimitReachedSubscriber = Callable[[Itinerary], None]


class MaxLimitFilter:
    """Keep the first ``max_limit`` itineraries in their current order.

    When anything is cut, ``max_limit_reached_subscriber`` is called once with
    the first removed itinerary.
    """

    def __init__(
        self,
        name: str,
        max_limit: int,
        max_limit_reached_subscriber: Optional[MaxLimitReachedSubscriber] = None,
    ):
        if max_limit < 0:
            raise ValueError("max_limit cannot be negative")
        self._name = name
        self.max_limit = int(max_limit)
        self.max_limit_reached_subscriber = max_limit_reached_subscriber

    @property
    def name(self) -> str:
        return self._name

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        if len(itineraries) <= self.max_limit:
            return list(itineraries)
        first_removed = itineraries[self.max_limit]
        logger.debug(
            "%s: cutting %d itineraries, first removed %s",
            self.name,
            len(itineraries) - self.max_limit,
            first_removed.label(),
        )
        if self.max_limit_reached_subscriber is not None:
            self.max_limit_reached_subscriber(first_removed)
        return list(itineraries[: self.max_limit])


__all__ = ["MaxLimitFilter", "MaxLimitReachedSubscriber"]
