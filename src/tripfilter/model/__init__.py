"""Itinerary data model and I/O helpers."""

from .domain_types import Itinerary, Leg, SystemNotice, TraverseMode
from .itinerary_io import (
    itineraries_to_frame,
    itinerary_from_mapping,
    itinerary_to_mapping,
    load_itineraries_json,
    parse_timestamp,
    write_itineraries_json,
)

__all__ = [
    "Itinerary",
    "Leg",
    "SystemNotice",
    "TraverseMode",
    "itineraries_to_frame",
    "itinerary_from_mapping",
    "itinerary_to_mapping",
    "load_itineraries_json",
    "parse_timestamp",
    "write_itineraries_json",
]
