"""Filter chain configuration and assembly."""

from .filter_chain_builder import MAX_LIMIT_FILTER_NAME, ItineraryFilterChainBuilder
from .filter_chain_config import FilterChainConfig

__all__ = [
    "FilterChainConfig",
    "ItineraryFilterChainBuilder",
    "MAX_LIMIT_FILTER_NAME",
]
