"""
Group-by-leg-distance filter: collapse near-duplicate itineraries.

Algorithm Overview:
-------------------
Each itinerary is reduced to a *group key*: the set of its longest legs whose
combined distance accounts for at least ``p`` of the itinerary's total
distance. Transit legs are identified by trip id (route as fallback), street
legs by their mode, so two itineraries riding the same long train but walking
to different stops share a key.

Itineraries are assigned, in input order, to the first existing group whose
key is a subset or superset of their own key; otherwise they open a new group.

Per group, at most ``max(1, ceil(approximate_min_limit / number_of_groups))``
itineraries are kept, best first according to the default sort order of the
search direction. Groups are emitted in order of creation.

Example:
--------
p = 0.68, approximate_min_limit = 3

- A: WALK 200m, RAIL r1 9000m, WALK 300m   -> key {r1}
- B: WALK 800m, RAIL r1 9000m, BUS b7 900m -> key {r1}
- C: BUS b2 4000m, BUS b3 4500m             -> key {b2, b3}

Two groups -> keep ceil(3 / 2) = 2 per group; A and B both survive together
with C. With a third group only one member per group would remain.

Notes:
------
- ``p`` must lie in [0.0, 1.0]. ``p == 0`` yields empty keys which match
  everything, collapsing the whole set into a single group.
- Itineraries with zero total distance fall back to keying on all their legs.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import FrozenSet, List, Sequence

from tripfilter.model.domain_types import Itinerary

from .sort_order import default_sort_key

logger = logging.getLogger(__name__)


def group_key(itinerary: Itinerary, p: float) -> FrozenSet[str]:
    """
    Compute the group key of an itinerary.

    Args:
        itinerary: Itinerary whose legs are inspected.
        p: Fraction (0.0-1.0) of the total distance the key legs must cover.
    Returns:
        Identities of the longest legs whose combined distance reaches
        ``p * total``. Zero-distance itineraries are keyed on all their legs.
    """
    total = itinerary.distance_meters
    if total <= 0:
        return frozenset(leg.identity for leg in itinerary.legs)
    target = p * total
    legs = sorted(itinerary.legs, key=lambda leg: leg.distance_meters, reverse=True)
    key: set[str] = set()
    covered = 0.0
    for leg in legs:
        if covered >= target:
            break
        key.add(leg.identity)
        covered += leg.distance_meters
    return frozenset(key)


@dataclass
class _Group:
    key: FrozenSet[str]
    itineraries: List[Itinerary] = field(default_factory=list)

    def matches(self, other_key: FrozenSet[str]) -> bool:
        return self.key <= other_key or other_key <= self.key


class GroupByLegDistanceFilter:
    """Group itineraries sharing their dominant legs and keep a few per group."""

    name = "group-by-legs-filter"

    def __init__(self, group_by_p: float, approximate_min_limit: int, arrive_by: bool):
        if not 0.0 <= group_by_p <= 1.0:
            raise ValueError(f"group_by_p must be between 0.0 and 1.0, got {group_by_p}")
        if group_by_p == 0.0:
            logger.warning("group_by_p of 0 places every itinerary in a single group")
        self.group_by_p = float(group_by_p)
        self.approximate_min_limit = int(approximate_min_limit)
        self.arrive_by = bool(arrive_by)
        self._sort_key = default_sort_key(self.arrive_by)

    def apply(self, itineraries: Sequence[Itinerary]) -> List[Itinerary]:
        groups: List[_Group] = []
        for it in itineraries:
            key = group_key(it, self.group_by_p)
            group = next((g for g in groups if g.matches(key)), None)
            if group is None:
                group = _Group(key=key)
                groups.append(group)
            group.itineraries.append(it)

        if not groups:
            return []

        per_group = max(1, math.ceil(self.approximate_min_limit / len(groups)))
        logger.debug(
            "%s: %d itineraries in %d groups, keeping up to %d per group",
            self.name,
            len(itineraries),
            len(groups),
            per_group,
        )
        result: List[Itinerary] = []
        for group in groups:
            ranked = sorted(group.itineraries, key=self._sort_key)
            result.extend(ranked[:per_group])
        return result


__all__ = ["GroupByLegDistanceFilter", "group_key"]
