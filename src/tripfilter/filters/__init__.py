"""Filter stages, the debug decorator and the chain executor."""

from .base import ItineraryFilter
from .debug_wrapper import DebugFilterWrapper
from .filter_chain import FilterChain
from .group_by_leg_distance import GroupByLegDistanceFilter
from .latest_departure_time import LatestDepartureTimeFilter
from .max_limit import MaxLimitFilter, MaxLimitReachedSubscriber
from .reduce_time_table_variation import ReduceTimeTableVariationFilter
from .sort_order import SortOnDefaultOrderFilter, default_sort_key
from .transit_vs_street import RemoveTransitIfStreetOnlyIsBetterFilter

__all__ = [
    "DebugFilterWrapper",
    "FilterChain",
    "GroupByLegDistanceFilter",
    "ItineraryFilter",
    "LatestDepartureTimeFilter",
    "MaxLimitFilter",
    "MaxLimitReachedSubscriber",
    "ReduceTimeTableVariationFilter",
    "RemoveTransitIfStreetOnlyIsBetterFilter",
    "SortOnDefaultOrderFilter",
    "default_sort_key",
]
