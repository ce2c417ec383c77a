from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from .domain_types import Itinerary, Leg, SystemNotice, TraverseMode

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS: List[str] = [
    "id",
    "start_time",
    "end_time",
    "generalized_cost",
    "transfers",
    "modes",
    "system_notices",
]


def parse_timestamp(token: object, label: str) -> datetime:
    """
    Parse an ISO-8601 timestamp.

    Args:
        token: Raw value; ``datetime`` instances are returned as they are.
        label: Human-readable label for error messages.
    Returns:
        The parsed datetime. A trailing ``Z`` is read as UTC; timestamps
        without an offset stay naive.
    """
    if isinstance(token, datetime):
        return token
    if not isinstance(token, str) or not token.strip():
        raise ValueError(f"{label} must be a non-empty ISO-8601 string")
    text = token.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"{label} is not an ISO-8601 timestamp: {token!r}") from exc


def leg_from_mapping(data: Mapping[str, object]) -> Leg:
    if not isinstance(data, Mapping):
        raise TypeError("Leg entries must be mappings")
    return Leg(
        mode=TraverseMode.parse(data.get("mode")),
        start_time=parse_timestamp(data.get("start_time"), "leg start_time"),
        end_time=parse_timestamp(data.get("end_time"), "leg end_time"),
        distance_meters=float(data.get("distance_meters") or 0.0),
        route=_optional_str(data.get("route")),
        trip_id=_optional_str(data.get("trip_id")),
        from_place=_optional_str(data.get("from")),
        to_place=_optional_str(data.get("to")),
    )


def itinerary_from_mapping(data: Mapping[str, object]) -> Itinerary:
    if not isinstance(data, Mapping):
        raise TypeError("Itinerary entries must be mappings")
    raw_legs = data.get("legs")
    if not isinstance(raw_legs, list) or not raw_legs:
        raise ValueError(f"Itinerary {data.get('id')!r} must provide a non-empty 'legs' list")
    notices = [
        SystemNotice(tag=str(item.get("tag", "")), text=str(item.get("text", "")))
        for item in data.get("system_notices") or []
    ]
    try:
        cost = int(data.get("generalized_cost"))
    except (TypeError, ValueError) as exc:
        raise ValueError(
            f"Itinerary {data.get('id')!r} has an invalid generalized_cost: {data.get('generalized_cost')!r}"
        ) from exc
    return Itinerary(
        legs=[leg_from_mapping(leg) for leg in raw_legs],
        generalized_cost=cost,
        id=_optional_str(data.get("id")),
        system_notices=notices,
    )


def itinerary_to_mapping(itinerary: Itinerary) -> Dict[str, object]:
    return {
        "id": itinerary.id,
        "generalized_cost": itinerary.generalized_cost,
        "legs": [
            {
                "mode": leg.mode.value,
                "start_time": leg.start_time.isoformat(),
                "end_time": leg.end_time.isoformat(),
                "distance_meters": leg.distance_meters,
                "route": leg.route,
                "trip_id": leg.trip_id,
                "from": leg.from_place,
                "to": leg.to_place,
            }
            for leg in itinerary.legs
        ],
        "system_notices": [
            {"tag": notice.tag, "text": notice.text} for notice in itinerary.system_notices
        ],
    }


def load_itineraries_json(path: str | Path) -> List[Itinerary]:
    json_path = Path(path)
    if not json_path.exists():
        raise FileNotFoundError(f"Itinerary JSON not found at {json_path}")
    with json_path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, Mapping):
        payload = payload.get("itineraries")
    if not isinstance(payload, list):
        raise TypeError("Itinerary JSON must be a list or contain an 'itineraries' list")
    itineraries = [itinerary_from_mapping(entry) for entry in payload]
    _warn_on_duplicate_ids(itineraries)
    logger.info("Loaded %d itineraries from %s", len(itineraries), json_path)
    return itineraries


def write_itineraries_json(path: str | Path, itineraries: Iterable[Itinerary]) -> None:
    dest = Path(path)
    dest.parent.mkdir(parents=True, exist_ok=True)
    payload = {"itineraries": [itinerary_to_mapping(it) for it in itineraries]}
    with dest.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2)


def itineraries_to_frame(itineraries: Sequence[Itinerary]) -> pd.DataFrame:
    """Flatten itineraries into one summary row each, keeping the given order."""
    rows = [
        {
            "id": it.id,
            "start_time": it.start_time,
            "end_time": it.end_time,
            "generalized_cost": it.generalized_cost,
            "transfers": it.number_of_transfers,
            "modes": ",".join(leg.mode.value for leg in it.legs),
            "system_notices": ";".join(notice.tag for notice in it.system_notices),
        }
        for it in itineraries
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def _optional_str(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _warn_on_duplicate_ids(itineraries: Sequence[Itinerary]) -> None:
    seen: set[str] = set()
    for it in itineraries:
        if it.id is None:
            continue
        if it.id in seen:
            logger.warning("Duplicate itinerary id %s in input", it.id)
        seen.add(it.id)


__all__ = [
    "itineraries_to_frame",
    "itinerary_from_mapping",
    "itinerary_to_mapping",
    "load_itineraries_json",
    "parse_timestamp",
    "write_itineraries_json",
]
