"""Ordered post-processing filter chain for trip-planner itineraries."""

from .chain import FilterChainConfig, ItineraryFilterChainBuilder
from .filters import DebugFilterWrapper, FilterChain, ItineraryFilter
from .model import Itinerary, Leg, SystemNotice, TraverseMode

__all__ = [
    "DebugFilterWrapper",
    "FilterChain",
    "FilterChainConfig",
    "Itinerary",
    "ItineraryFilter",
    "ItineraryFilterChainBuilder",
    "Leg",
    "SystemNotice",
    "TraverseMode",
]
