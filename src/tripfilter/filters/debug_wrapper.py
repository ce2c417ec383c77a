from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from tripfilter.model.domain_types import Itinerary, SystemNotice

from .base import ItineraryFilter

logger = logging.getLogger(__name__)


class DebugFilterWrapper:
    """Tag itineraries a filter would remove instead of removing them.

    The delegate only sees itineraries no earlier stage has marked as
    deleted, so it decides exactly as it would without debugging. Every one
    of those missing from its output gets a ``SystemNotice`` tagged with the
    delegate's name. Removed and previously marked itineraries are put back
    directly after the closest preceding itinerary that survived (or at the
    front if none did). Survivors keep the delegate's order, so a sorting
    delegate still sorts.
    """

    def __init__(self, delegate: ItineraryFilter):
        self.delegate = delegate

    @property
    def name(self) -> str:
        return self.delegate.name

    @classmethod
    def wrap(cls, itinerary_filter: ItineraryFilter) -> ItineraryFilter:
        if isinstance(itinerary_filter, cls):
            return itinerary_filter
        return cls(itinerary_filter)

    @classmethod
    def wrap_all(cls, filters: Iterable[ItineraryFilter]) -> Tuple[ItineraryFilter, ...]:
        return tuple(cls.wrap(f) for f in filters)

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        active = [it for it in itineraries if not it.is_marked_as_deleted]
        filtered = self.delegate.apply(active)
        kept_ids = {id(it) for it in filtered}
        active_ids = {id(it) for it in active}

        leading: List[Itinerary] = []
        carried_after: Dict[int, List[Itinerary]] = {}
        anchor: Optional[int] = None
        marked = 0
        for it in itineraries:
            if id(it) in kept_ids:
                anchor = id(it)
                continue
            if id(it) in active_ids:
                it.add_system_notice(SystemNotice.deleted_by(self.name))
                marked += 1
            if anchor is None:
                leading.append(it)
            else:
                carried_after.setdefault(anchor, []).append(it)

        if marked:
            logger.debug("%s: marked %d itineraries as deleted", self.name, marked)

        result = list(leading)
        for it in filtered:
            result.append(it)
            result.extend(carried_after.pop(id(it), []))
        return result

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return f"DebugFilterWrapper({self.delegate!r})"


__all__ = ["DebugFilterWrapper"]
