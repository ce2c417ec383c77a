from __future__ import annotations

import argparse
import logging
from typing import Dict, List, Optional

from tripfilter.chain import FilterChainConfig, ItineraryFilterChainBuilder
from tripfilter.model import Itinerary, itinerary_from_mapping, load_itineraries_json


def _leg(mode: str, start: str, end: str, meters: float, trip: Optional[str] = None) -> Dict[str, object]:
    return {
        "mode": mode,
        "start_time": f"2020-02-01T{start}:00Z",
        "end_time": f"2020-02-01T{end}:00Z",
        "distance_meters": meters,
        "trip_id": trip,
        "route": trip,
    }


SYNTH_ITINERARIES: List[Dict[str, object]] = [
    {"id": "walk", "generalized_cost": 2000, "legs": [_leg("WALK", "12:00", "13:00", 4000)]},
    {
        "id": "rail-r1-a",
        "generalized_cost": 1200,
        "legs": [
            _leg("WALK", "12:00", "12:05", 200),
            _leg("RAIL", "12:10", "12:30", 9000, "r1"),
            _leg("WALK", "12:30", "12:35", 300),
        ],
    },
    {
        "id": "rail-r1-b",
        "generalized_cost": 1300,
        "legs": [
            _leg("WALK", "12:00", "12:08", 600),
            _leg("RAIL", "12:12", "12:30", 8600, "r1"),
            _leg("WALK", "12:30", "12:40", 700),
        ],
    },
    {
        "id": "bus-b9",
        "generalized_cost": 1100,
        "legs": [_leg("BUS", "12:00", "12:50", 5000, "b9"), _leg("WALK", "12:50", "12:55", 300)],
    },
    {"id": "rail-x2", "generalized_cost": 3000, "legs": [_leg("RAIL", "12:00", "12:15", 4000, "x2")]},
]


def _load_itineraries(path: Optional[str]) -> List[Itinerary]:
    if not path:
        logging.info("Using built-in synthetic itineraries")
        return [itinerary_from_mapping(item) for item in SYNTH_ITINERARIES]
    return load_itineraries_json(path)


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the itinerary filter chain smoke test.")
    parser.add_argument("--itineraries", help="Optional JSON file overriding the synthetic itineraries")
    parser.add_argument("--config", help="Optional filter chain YAML")
    parser.add_argument("--debug", action="store_true", help="Tag instead of removing")
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO))

    config = FilterChainConfig.from_yaml(args.config) if args.config else FilterChainConfig()
    builder = ItineraryFilterChainBuilder.from_config(config)
    if args.debug:
        builder.debug()
    builder.set_max_limit_reached_subscriber(
        lambda it: print(f"Max limit reached, first itinerary cut: {it.label()}")
    )
    chain = builder.build()

    itineraries = _load_itineraries(args.itineraries)
    result = chain.apply(itineraries)

    print("=== Filter Chain Smoke Test ===")
    print(f"Stages: {' -> '.join(chain.filter_names)}")
    print(f"Kept {len(result)} of {len(itineraries)} itineraries")
    print("")
    for index, it in enumerate(result, start=1):
        deleted_by = ", ".join(notice.tag for notice in it.system_notices)
        suffix = f"  [deleted by {deleted_by}]" if deleted_by else ""
        print(
            f"  {index}. {it.label()}: {it.start_time:%H:%M}-{it.end_time:%H:%M}, "
            f"cost={it.generalized_cost}{suffix}"
        )


if __name__ == "__main__":
    main()
