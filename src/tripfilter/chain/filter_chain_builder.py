"""
Filter chain builder: turn filter options into an ordered list of stages.

Stage order:
------------
1. transit-vs-street-filter           (if enabled, default on)
2. reduce-time-table-variation-filter (if a positive slack is configured)
3. group-by-legs-filter               (always)
4. latest-departure-time-limit        (if a limit is set)
5. sort-on-default-order              (always)
6. number-of-itineraries-filter       (if max_limit >= approximate_min_limit)

Reduction stages run on the raw, unsorted candidates; grouping collapses
near-duplicates before anything is counted; the departure limit is absolute
and independent of ranking; sorting comes last so the max-limit cut removes
the worst ranked itineraries. In debug mode every stage is wrapped in a
``DebugFilterWrapper`` and nothing is actually removed.

Example:
--------
    builder = ItineraryFilterChainBuilder(arrive_by=False)
    builder.set_approximate_min_limit(3)
    builder.set_max_limit(5)
    builder.set_max_limit_reached_subscriber(lambda it: print("cut at", it.id))
    chain = builder.build()
    result = chain.apply(itineraries)
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from tripfilter.filters.base import ItineraryFilter
from tripfilter.filters.debug_wrapper import DebugFilterWrapper
from tripfilter.filters.filter_chain import FilterChain
from tripfilter.filters.group_by_leg_distance import GroupByLegDistanceFilter
from tripfilter.filters.latest_departure_time import LatestDepartureTimeFilter
from tripfilter.filters.max_limit import MaxLimitFilter, MaxLimitReachedSubscriber
from tripfilter.filters.reduce_time_table_variation import ReduceTimeTableVariationFilter
from tripfilter.filters.sort_order import SortOnDefaultOrderFilter
from tripfilter.filters.transit_vs_street import RemoveTransitIfStreetOnlyIsBetterFilter

from .filter_chain_config import FilterChainConfig

logger = logging.getLogger(__name__)

MAX_LIMIT_FILTER_NAME = "number-of-itineraries-filter"

StagePredicate = Callable[[FilterChainConfig], bool]
StageFactory = Callable[[FilterChainConfig], ItineraryFilter]

# Evaluated top to bottom; the order of this tuple is the order of the chain.
_STAGES: Tuple[Tuple[StagePredicate, StageFactory], ...] = (
    (
        lambda c: c.remove_transit_with_higher_cost_than_best_on_street_only,
        lambda c: RemoveTransitIfStreetOnlyIsBetterFilter(),
    ),
    (
        lambda c: c.time_table_variation_enabled,
        lambda c: ReduceTimeTableVariationFilter(c.short_transit_slack_seconds),
    ),
    (
        lambda c: True,
        lambda c: GroupByLegDistanceFilter(c.group_by_p, c.approximate_min_limit, c.arrive_by),
    ),
    (
        lambda c: c.latest_departure_time is not None,
        lambda c: LatestDepartureTimeFilter(c.latest_departure_time),
    ),
    (
        lambda c: True,
        lambda c: SortOnDefaultOrderFilter(c.arrive_by),
    ),
    (
        lambda c: c.max_limit_enabled,
        lambda c: MaxLimitFilter(MAX_LIMIT_FILTER_NAME, c.max_limit, c.max_limit_reached_subscriber),
    ),
)


class ItineraryFilterChainBuilder:
    """Collect filter options, then ``build()`` the chain once."""

    def __init__(self, arrive_by: bool):
        self._config = FilterChainConfig(arrive_by=bool(arrive_by))

    @classmethod
    def from_config(cls, config: FilterChainConfig) -> "ItineraryFilterChainBuilder":
        builder = cls(config.arrive_by)
        builder._config = config
        return builder

    @property
    def arrive_by(self) -> bool:
        return self._config.arrive_by

    def config(self) -> FilterChainConfig:
        return self._config

    def set_latest_departure_time_limit(self, latest_departure_time: Optional[datetime]) -> None:
        """Absolute limit on departure time; ignores the approximate min limit."""
        self._update(latest_departure_time=latest_departure_time)

    def set_approximate_min_limit(self, min_limit: int) -> None:
        """Guideline for the minimum number of itineraries to return.

        The group-by filter keeps ``ceil(min_limit / groups)`` per group: with
        two groups and a min-limit of 3 it keeps 2 in each, so about 4 in total.
        """
        self._update(approximate_min_limit=min_limit)

    def set_max_limit(self, max_limit: int) -> None:
        """Hard cap on the number of itineraries, applied after the final sort."""
        self._update(max_limit=max_limit)

    def set_group_by_p(self, group_by_p: float) -> None:
        """Group by legs covering more than ``p`` (0.0-1.0) of the total distance."""
        self._update(group_by_p=group_by_p)

    def set_max_limit_reached_subscriber(
        self, subscriber: Optional[MaxLimitReachedSubscriber]
    ) -> None:
        """Called with the first itinerary cut by the max limit, at most once per run."""
        self._update(max_limit_reached_subscriber=subscriber)

    def remove_transit_with_higher_cost_than_best_on_street_only(self, value: bool) -> None:
        self._update(remove_transit_with_higher_cost_than_best_on_street_only=bool(value))

    def set_short_transit_slack_in_seconds(self, seconds: Optional[int]) -> None:
        """Enable the time-table variation filter; ``None``, zero or negative disable it.

        Fractions are truncated to whole seconds, so anything below one second disables it.
        """
        self._update(short_transit_slack_seconds=None if seconds is None else int(seconds))

    def debug(self) -> None:
        """Tag removed itineraries with a system notice instead of deleting them."""
        self._update(debug=True)

    def build(self) -> FilterChain:
        config = self._config
        filters: List[ItineraryFilter] = [
            factory(config) for predicate, factory in _STAGES if predicate(config)
        ]
        if not config.max_limit_enabled:
            logger.debug(
                "Max limit %d is below min limit %d; %s omitted",
                config.max_limit,
                config.approximate_min_limit,
                MAX_LIMIT_FILTER_NAME,
            )
        if config.debug:
            filters = list(DebugFilterWrapper.wrap_all(filters))
        chain = FilterChain(filters)
        logger.debug(
            "Built filter chain (arrive_by=%s, debug=%s): %s",
            config.arrive_by,
            config.debug,
            ", ".join(chain.filter_names),
        )
        return chain

    def _update(self, **changes: object) -> None:
        self._config = replace(self._config, **changes)


__all__ = ["ItineraryFilterChainBuilder", "MAX_LIMIT_FILTER_NAME"]
