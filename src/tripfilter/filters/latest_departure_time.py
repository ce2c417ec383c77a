from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Sequence, Tuple

from tripfilter.model.domain_types import Itinerary

logger = logging.getLogger(__name__)


class LatestDepartureTimeFilter:
    """Remove itineraries departing strictly after an absolute instant.

    This is a hard limit; it does not respect the approximate minimum number
    of itineraries. Naive datetimes, on either side, are read as UTC.
    """

    name = "latest-departure-time-limit"

    def __init__(self, latest_departure_time: datetime):
        self.latest_departure_time = latest_departure_time

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        kept: List[Itinerary] = []
        for it in itineraries:
            departure, limit = _ensure_comparable_datetimes(it.start_time, self.latest_departure_time)
            if departure > limit:
                logger.debug(
                    "%s: %s departs %s after %s",
                    self.name,
                    it.label(),
                    departure,
                    limit,
                )
                continue
            kept.append(it)
        return kept


def _ensure_comparable_datetimes(departure: datetime, reference: datetime) -> Tuple[datetime, datetime]:
    """
    Align timezone awareness of a departure time and the departure limit.

    Args:
        departure: Itinerary departure time.
        reference: Configured latest departure time.
    Returns:
        ``(departure, reference)`` unchanged when both are naive or both are
        aware; otherwise the naive one is stamped with UTC.
    """
    if (departure.tzinfo is None) == (reference.tzinfo is None):
        return departure, reference
    if departure.tzinfo is None:
        return departure.replace(tzinfo=timezone.utc), reference
    return departure, reference.replace(tzinfo=timezone.utc)


__all__ = ["LatestDepartureTimeFilter"]
